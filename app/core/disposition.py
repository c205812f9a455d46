"""
Commit classification
Decides why a single commit does or does not satisfy the issue-link policy
"""
import re
import logging
from enum import IntEnum
from typing import Optional

logger = logging.getLogger(__name__)


class Disposition(IntEnum):
    """
    Why a pull request is or is not acceptable.
    Values are ordered; higher values are better reasons to accept.
    """
    FAILED = 0      # no acceptable reason found
    SKIPPED = 1     # manual skip (skip-issuebot)
    CLEANUP = 2     # manual skip (#cleanup)
    SMALL_DIFF = 3  # total diff is tiny
    REVERT = 4      # revert commit
    BOT = 5         # author is an automation bot
    LINKED = 6      # commit links an issue

    @property
    def passed(self) -> bool:
        return self is not Disposition.FAILED


LINKING_VERBS = (
    "close", "closes", "closed",
    "fix", "fixes", "fixed",
    "resolve", "resolves", "resolved",
    "updates", "for",
)

SKIP_TAG = "skip-issuebot"
CLEANUP_TAG = "#cleanup"


def classify_commit_message(message: str, log: Optional[logging.LoggerAdapter] = None) -> Disposition:
    """
    Classify a commit message.

    A line that starts with a linking verb and mentions "#" or "github.com" counts
    as an issue link. This is a heuristic: "Fixes #nothing" passes, "Updates XXX-123"
    does not.

    Args:
        message: Full commit message
        log: Logger to report the accepting line to (module logger by default)

    Returns:
        Disposition for this commit
    """
    log = log or logger
    for idx, line in enumerate(message.split("\n")):
        if idx == 0 and line.startswith("Revert"):
            log.info("accept: found revert commit")
            return Disposition.REVERT
        lower = line.lower()
        if lower.startswith(LINKING_VERBS) and ("#" in lower or "github.com" in lower):
            log.info(f"accept: {line!r}")
            return Disposition.LINKED

    if SKIP_TAG in message:
        log.info(f"accept: manual override ({SKIP_TAG})")
        return Disposition.SKIPPED
    if CLEANUP_TAG in message:
        log.info(f"accept: manual override ({CLEANUP_TAG})")
        return Disposition.CLEANUP
    return Disposition.FAILED


def is_automation_bot_author(name: Optional[str], email: Optional[str],
                             pattern: Optional[re.Pattern]) -> bool:
    """
    Report whether an author identity matches the bot e-mail pattern.

    The e-mail must match pattern. If the pattern has a capture group, the
    captured text must also equal the name with whitespace runs replaced by
    hyphens, ignoring case. With pattern r"noreply\\+(\\w+)@example.com":

        OSS Updater <noreply+oss-updater@example.com>   -> True
        Bad Horse <noreply+neigh@example.com>           -> False

    Args:
        name: Author display name
        email: Author e-mail address
        pattern: Compiled bot author pattern, or None when disabled

    Returns:
        True if the author is an automation bot
    """
    if pattern is None:
        return False
    if not name or not email:
        return False
    m = pattern.search(email)
    if m is None:
        return False
    if pattern.groups == 0:
        return True
    captured = m.group(1)
    if captured is None:
        return False
    return "-".join(name.split()).casefold() == captured.casefold()


def check_commit_author(name: Optional[str], email: Optional[str],
                        pattern: Optional[re.Pattern],
                        log: Optional[logging.LoggerAdapter] = None) -> Disposition:
    """Return BOT if the commit author is a tagged or configured automation bot."""
    log = log or logger
    # Author: dependabot[bot] <49699333+dependabot[bot]@users.noreply.github.com>
    if name and "[bot]" in name:
        log.info(f"accept: author {name!r} is a tagged bot")
        return Disposition.BOT
    if is_automation_bot_author(name, email, pattern):
        log.info(f"accept: author {name!r} is an automation bot")
        return Disposition.BOT
    return Disposition.FAILED
