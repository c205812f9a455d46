"""
Pull Request Check Orchestrator
Scans a PR's commits, decides its disposition and reports the verdict to GitHub
"""
import logging
from typing import Optional

from app.core.config import IssueBotConfig
from app.core.debounce import DebounceCache
from app.core.disposition import Disposition, check_commit_author, classify_commit_message
from .client import GitHubAPIError
from .formatter import MessageFormatter
from .models import CheckResult, PRLogAdapter, PullRequestRef
from .stub_issue import StubIssueManager

logger = logging.getLogger(__name__)


class PRChecker:
    """
    Decides whether a pull request satisfies the issue-link policy.

    A PR starts out FAILED. Commits are scanned page by page until a reason
    better than SKIPPED turns up; the best reason seen wins.
    """

    def __init__(self, github_client, config: Optional[IssueBotConfig] = None,
                 debounce: Optional[DebounceCache] = None):
        self.config = config or IssueBotConfig()
        self.github_client = github_client
        self.debounce = debounce or DebounceCache(self.config.debounce_interval)
        self.stub_issues = StubIssueManager(github_client, label=self.config.stub_label)
        self.formatter = MessageFormatter

    def check_pull_request(self, pr: PullRequestRef) -> CheckResult:
        """
        Check a pull request and annotate its head commit when it fails.

        Args:
            pr: Pull request from the triggering webhook

        Returns:
            CheckResult describing what was decided

        Raises:
            GitHubAPIError: listing or fetching commits, or writing the status, failed
        """
        log = PRLogAdapter(logger, {"pr": pr.key})
        log.info("begin check")
        result = CheckResult(pull_request=pr)

        if self.debounce.should_skip(pr.key):
            log.info("skipping because it was recently checked")
            result.debounced = True
            return result

        self._scan_commits(pr, result, log)

        # Very small diffs are typically small cleanups and need not be held to
        # the policy, unless something better was already found.
        if result.disposition <= Disposition.SKIPPED and result.total_changes < self.config.small_diff_threshold:
            log.info(f"accept: total diff is {result.total_changes} lines")
            result.disposition = Disposition.SMALL_DIFF

        if result.disposition == Disposition.SKIPPED and self.config.enable_stub_issues:
            try:
                result.stub_issue = self.stub_issues.find_or_create(pr, log)
            except GitHubAPIError as e:
                log.error(f"error adding stub issue (accepting anyway): {e}")

        if result.disposition == Disposition.FAILED:
            log.info("reject")
            self._annotate(pr, result, failed=True)
        elif self.config.report_success:
            self._annotate(pr, result, failed=False)
        return result

    def _scan_commits(self, pr: PullRequestRef, result: CheckResult, log: logging.LoggerAdapter) -> None:
        pages = self.github_client.iter_pull_request_commit_pages(pr.owner, pr.repo, pr.number)
        try:
            for page in pages:
                for listed in page:
                    # Listed commits lack diff stats, so fetch each one in full.
                    commit = self.github_client.get_commit(pr.owner, pr.repo, listed.sha)
                    result.commits_examined += 1
                    result.total_changes += commit.total_changes

                    disp = classify_commit_message(commit.message, log)
                    if disp > result.disposition:
                        result.disposition = disp
                    disp = check_commit_author(
                        commit.author_name, commit.author_email, self.config.bot_author_re, log
                    )
                    if disp > result.disposition:
                        result.disposition = disp

                    if result.disposition > Disposition.SKIPPED:
                        return
        finally:
            close = getattr(pages, "close", None)
            if close is not None:
                close()

    def _annotate(self, pr: PullRequestRef, result: CheckResult, failed: bool) -> None:
        if failed:
            state = "failure"
            description = self.formatter.status_description(self.formatter.MISSING_ISSUE_EXPLANATION)
        else:
            state = "success"
            description = None
        self.github_client.create_status(
            pr.owner, pr.repo, pr.head_sha,
            state=state, context=self.config.status_context, description=description,
        )
        result.status_state = state
