"""
Stub issue management
Files a placeholder issue for a PR whose author deferred linking one (skip-issuebot)
"""
import logging
from typing import Optional

from .client import GitHubAPIError
from .formatter import MessageFormatter
from .models import PRLogAdapter, PullRequestRef

logger = logging.getLogger(__name__)


class StubIssueManager:
    """
    Finds or creates the placeholder issue for a pull request.
    Always looks for an existing stub before creating one, so racing
    deliveries for the same PR rarely file duplicates.
    """

    def __init__(self, github_client, label: str = "issuebot-stub", formatter=MessageFormatter):
        self.github_client = github_client
        self.label = label
        self.formatter = formatter

    def find_existing(self, pr: PullRequestRef) -> Optional[int]:
        """
        Look for a stub issue already filed for this PR.

        Args:
            pr: Pull request being checked

        Returns:
            Stub issue number, or None if there is none
        """
        want_title = self.formatter.stub_issue_title(pr.number)
        issues = self.github_client.list_issues(
            pr.owner, pr.repo, assignee=pr.author, labels=[self.label], state="open"
        )
        for number, title in issues:
            if title == want_title:
                return number

        # A stub filed by a delivery a moment ago may not be listed yet, but the
        # comment announcing it will be on the PR thread.
        for body in self.github_client.list_pull_request_comments(pr.owner, pr.repo, pr.number):
            number = self.formatter.parse_stub_issue_comment(body)
            if number is not None:
                return number
        return None

    def create(self, pr: PullRequestRef, log: Optional[logging.LoggerAdapter] = None) -> int:
        """
        Create a stub issue assigned to the PR author and announce it on the PR.

        The issue number is returned even if posting the comment fails.

        Args:
            pr: Pull request being checked
            log: Per-PR logger (prefixes messages with the PR by default)

        Returns:
            Number of the created issue
        """
        log = log or PRLogAdapter(logger, {"pr": pr.key})
        issue_number = self.github_client.create_issue(
            pr.owner,
            pr.repo,
            title=self.formatter.stub_issue_title(pr.number),
            body=self.formatter.stub_issue_body(pr.author, pr.number),
            assignee=pr.author,
            labels=[self.label],
        )
        try:
            self.github_client.create_pull_request_comment(
                pr.owner, pr.repo, pr.number, self.formatter.stub_issue_comment(issue_number)
            )
        except GitHubAPIError as e:
            log.warning(f"error adding comment (continuing): {e}")
        return issue_number

    def find_or_create(self, pr: PullRequestRef, log: Optional[logging.LoggerAdapter] = None) -> int:
        """
        Return the PR's stub issue, creating it if needed.

        Returns:
            Stub issue number
        """
        log = log or PRLogAdapter(logger, {"pr": pr.key})
        issue_number = self.find_existing(pr)
        if issue_number is not None:
            log.info(f"accept: stub issue #{issue_number} found")
            return issue_number
        issue_number = self.create(pr, log)
        log.info(f"accept: stub issue #{issue_number} created")
        return issue_number
