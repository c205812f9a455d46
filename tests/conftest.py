import pytest

from app.core.github.client import GitHubAPIError
from app.core.github.models import CommitRecord, PullRequestRef


class FakeGitHubClient:
    """In-memory stand-in for GitHubClient that records every call."""

    def __init__(self, commits=None, per_page=100):
        self.commits = list(commits or [])
        self.per_page = per_page
        self.issues = []        # (number, title, assignee, labels)
        self.comments = []      # comment bodies on the PR
        self.statuses = []      # dicts passed to create_status
        self.calls = []
        self.pages_fetched = 0
        self.fail_on = set()
        self.next_issue_number = 100

    def _call(self, operation):
        self.calls.append(operation)
        if operation in self.fail_on:
            raise GitHubAPIError(operation, RuntimeError("boom"))

    def iter_pull_request_commit_pages(self, owner, repo, number):
        for start in range(0, len(self.commits), self.per_page):
            self._call("list commits")
            self.pages_fetched += 1
            yield [CommitRecord(sha=c.sha, message=c.message) for c in self.commits[start:start + self.per_page]]

    def get_commit(self, owner, repo, sha):
        self._call("get commit")
        for c in self.commits:
            if c.sha == sha:
                return c
        raise GitHubAPIError("get commit", KeyError(sha))

    def list_issues(self, owner, repo, assignee, labels, state="open"):
        self._call("list issues")
        return [
            (number, title) for number, title, who, issue_labels in self.issues
            if who == assignee and set(labels) <= set(issue_labels)
        ]

    def list_pull_request_comments(self, owner, repo, number):
        self._call("list comments")
        return list(self.comments)

    def create_issue(self, owner, repo, title, body, assignee, labels):
        self._call("create issue")
        number = self.next_issue_number
        self.next_issue_number += 1
        self.issues.append((number, title, assignee, list(labels)))
        return number

    def create_pull_request_comment(self, owner, repo, number, body):
        self._call("create comment")
        self.comments.append(body)

    def create_status(self, owner, repo, sha, state, context, description=None):
        self._call("create status")
        self.statuses.append({"sha": sha, "state": state, "context": context, "description": description})


def make_commit(sha, message, total=10, name="Jane Doe", email="jane@example.com"):
    return CommitRecord(sha=sha, message=message, author_name=name, author_email=email, total_changes=total)


@pytest.fixture
def pr_ref():
    return PullRequestRef(owner="acme", repo="widgets", number=7, author="jdoe", head_sha="deadbeef")


@pytest.fixture
def fake_github():
    return FakeGitHubClient()
