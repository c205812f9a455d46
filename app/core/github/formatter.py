"""
Format the text IssueBot writes to GitHub: stub issues, PR comments and commit statuses
"""
import re
from typing import Optional


class MessageFormatter:
    """
    Templates for everything the bot posts.
    The comment recognition pattern must keep matching COMMENT_TEMPLATE.
    """

    BOT_NAME = "IssueBot"

    TITLE_TEMPLATE = "Placeholder issue for PR #{pr_number}"
    BODY_TEMPLATE = "TODO(@{author}): Add details about PR #{pr_number}"
    COMMENT_TEMPLATE = (
        ":robot: " + BOT_NAME + " here. I noticed none of the commits on this PR has an issue "
        "attached. I have filed issue #{issue_number} for you. Please update it at your convenience."
    )
    COMMENT_RE = re.compile(r"(?i)" + re.escape(BOT_NAME) + r" here\..*I have filed issue #(\d+) for you")

    # GitHub limits status descriptions to 140 characters, so be brief.
    MISSING_ISSUE_EXPLANATION = (
        'Any non-trivial git commit must link to a GitHub issue tracking the work. '
        'Edit each commit with a tag like "Updates #nn", and update the PR.'
    )
    STATUS_DESCRIPTION_LIMIT = 140

    @classmethod
    def stub_issue_title(cls, pr_number: int) -> str:
        return cls.TITLE_TEMPLATE.format(pr_number=pr_number)

    @classmethod
    def stub_issue_body(cls, author: str, pr_number: int) -> str:
        return cls.BODY_TEMPLATE.format(author=author, pr_number=pr_number)

    @classmethod
    def stub_issue_comment(cls, issue_number: int) -> str:
        return cls.COMMENT_TEMPLATE.format(issue_number=issue_number)

    @classmethod
    def parse_stub_issue_comment(cls, body: str) -> Optional[int]:
        """
        Recognize a comment previously posted by the bot.

        Args:
            body: Comment body

        Returns:
            The stub issue number mentioned in the comment, or None
        """
        m = cls.COMMENT_RE.search(body)
        if m is None:
            return None
        return int(m.group(1))

    @classmethod
    def status_description(cls, text: str) -> str:
        """Truncate a status description to GitHub's limit"""
        if len(text) > cls.STATUS_DESCRIPTION_LIMIT:
            return text[:cls.STATUS_DESCRIPTION_LIMIT - 3] + "..."
        return text
