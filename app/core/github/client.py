"""
GitHub API Client using PyGithub
Exposes the pull request, commit, issue, comment and status operations IssueBot needs
"""
import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

import requests
from github import Auth, Github, GithubException
from github.Repository import Repository

from app.core.config import IssueBotConfig
from .models import CommitRecord

logger = logging.getLogger(__name__)


class GitHubAPIError(RuntimeError):
    """A remote GitHub call failed (as opposed to returning nothing)."""

    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"{operation}: {cause}")
        self.operation = operation
        self.cause = cause


@contextmanager
def _api_call(operation: str):
    try:
        yield
    except GithubException as e:
        raise GitHubAPIError(operation, e) from e
    except requests.RequestException as e:
        raise GitHubAPIError(operation, e) from e


def _build_auth(config: IssueBotConfig) -> Auth.Auth:
    """
    Pick credentials from the configuration.

    The bot normally runs as an organization-level GitHub App installation so it
    can access private repos without a personal access token. A plain token is
    accepted for development.
    """
    if config.uses_app_auth:
        app_auth = Auth.AppAuth(config.app_id, config.app_private_key)
        return app_auth.get_installation_auth(config.app_install)
    if config.github_token:
        return Auth.Token(config.github_token)
    raise ValueError(
        "GitHub credentials not set: provide ISSUEBOT_APP_ID, ISSUEBOT_APP_INSTALL and "
        "ISSUEBOT_APP_PRIVATE_KEY, or GITHUB_TOKEN"
    )


class GitHubClient:
    """
    Wrapper around PyGithub for GitHub API operations.
    Every method raises GitHubAPIError on failure; empty results are returned as empty lists.
    """

    def __init__(self, config: IssueBotConfig, github: Optional[Github] = None):
        self.per_page = config.commits_per_page
        if github is None:
            github = Github(auth=_build_auth(config), per_page=self.per_page, timeout=config.api_timeout)
        self.github = github

    def get_repository(self, owner: str, repo: str) -> Repository:
        """Get repository object without fetching it"""
        return self.github.get_repo(f"{owner}/{repo}", lazy=True)

    def iter_pull_request_commit_pages(self, owner: str, repo: str, number: int) -> Iterator[List[CommitRecord]]:
        """
        Yield the commits of a pull request one page at a time.

        Pages are requested only as the caller iterates, so a caller that stops
        early never fetches the remaining pages. Listed commits are abbreviated:
        they carry no diff stats (see get_commit).

        Args:
            owner: Repository owner login
            repo: Repository name
            number: Pull request number

        Yields:
            Lists of CommitRecord, in pull request order
        """
        with _api_call("list commits"):
            pr = self.get_repository(owner, repo).get_pull(number)
            commits = pr.get_commits()

        page = 0
        while True:
            with _api_call("list commits"):
                items = commits.get_page(page)
                records = [
                    CommitRecord(sha=c.sha, message=c.commit.message or "")
                    for c in items
                ]
            if records:
                yield records
            if len(items) < self.per_page:
                return
            page += 1

    def get_commit(self, owner: str, repo: str, sha: str) -> CommitRecord:
        """
        Fetch the full record of a commit, including diff stats.

        Args:
            owner: Repository owner login
            repo: Repository name
            sha: Commit SHA

        Returns:
            CommitRecord with message, author and total lines changed
        """
        with _api_call(f"get commit {sha}"):
            commit = self.get_repository(owner, repo).get_commit(sha)
            git_commit = commit.commit
            author = git_commit.author
            stats = commit.stats
            return CommitRecord(
                sha=commit.sha,
                message=git_commit.message or "",
                author_name=author.name if author else None,
                author_email=author.email if author else None,
                total_changes=stats.total if stats else 0,
            )

    def list_issues(self, owner: str, repo: str, assignee: str, labels: List[str],
                    state: str = "open") -> List[Tuple[int, str]]:
        """
        List issues filtered by assignee, labels and state.

        Returns:
            (number, title) pairs
        """
        with _api_call("list issues"):
            issues = self.get_repository(owner, repo).get_issues(
                state=state, assignee=assignee, labels=labels
            )
            return [(issue.number, issue.title) for issue in issues]

    def list_pull_request_comments(self, owner: str, repo: str, number: int) -> List[str]:
        """Get the bodies of all comments on a pull request's conversation thread"""
        with _api_call("list comments"):
            issue = self.get_repository(owner, repo).get_issue(number)
            return [comment.body or "" for comment in issue.get_comments()]

    def create_issue(self, owner: str, repo: str, title: str, body: str,
                     assignee: str, labels: List[str]) -> int:
        """Create an issue and return its number"""
        with _api_call("create issue"):
            issue = self.get_repository(owner, repo).create_issue(
                title=title, body=body, assignee=assignee, labels=labels
            )
            logger.info(f"Created issue #{issue.number} in {owner}/{repo}")
            return issue.number

    def create_pull_request_comment(self, owner: str, repo: str, number: int, body: str) -> None:
        """Post a comment on a pull request's conversation thread"""
        with _api_call("create comment"):
            self.get_repository(owner, repo).get_issue(number).create_comment(body)
            logger.info(f"Posted comment on PR #{number} in {owner}/{repo}")

    def create_status(self, owner: str, repo: str, sha: str, state: str,
                      context: str, description: Optional[str] = None) -> None:
        """
        Set a commit status.

        Args:
            owner: Repository owner login
            repo: Repository name
            sha: Commit SHA to annotate
            state: "success", "failure", "error" or "pending"
            context: Status context label
            description: Short description (GitHub truncates at 140 characters)
        """
        kwargs = {"state": state, "context": context}
        if description is not None:
            kwargs["description"] = description
        with _api_call("create status"):
            self.get_repository(owner, repo).get_commit(sha).create_status(**kwargs)
