"""
Pydantic models for GitHub webhook payloads and pull request checks
"""
import logging
from pydantic import BaseModel, ConfigDict
from typing import Optional

from app.core.disposition import Disposition


class UserInfo(BaseModel):
    login: str


class CommitInfo(BaseModel):
    sha: str
    ref: Optional[str] = None


class PRInfo(BaseModel):
    number: int
    state: Optional[str] = None
    user: UserInfo
    head: CommitInfo
    title: Optional[str] = None


class RepoInfo(BaseModel):
    full_name: str
    name: str
    owner: UserInfo


class WebhookPayload(BaseModel):
    action: str
    number: Optional[int] = None
    pull_request: PRInfo
    repository: RepoInfo


class PullRequestRef(BaseModel):
    """The pull request under evaluation, fixed for the lifetime of one check."""
    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    number: int
    author: str
    head_sha: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def key(self) -> str:
        return f"{self.full_name}#{self.number}"

    @classmethod
    def from_payload(cls, payload: WebhookPayload) -> "PullRequestRef":
        return cls(
            owner=payload.repository.owner.login,
            repo=payload.repository.name,
            number=payload.pull_request.number,
            author=payload.pull_request.user.login,
            head_sha=payload.pull_request.head.sha,
        )


class PRLogAdapter(logging.LoggerAdapter):
    """Prefix log messages with the pull request they concern"""

    def process(self, msg, kwargs):
        return f"PR {self.extra['pr']} {msg}", kwargs


class CommitRecord(BaseModel):
    sha: str
    message: str = ""
    author_name: Optional[str] = None
    author_email: Optional[str] = None
    total_changes: int = 0  # additions + deletions


class CheckResult(BaseModel):
    pull_request: PullRequestRef
    disposition: Disposition = Disposition.FAILED
    commits_examined: int = 0
    total_changes: int = 0
    stub_issue: Optional[int] = None
    status_state: Optional[str] = None
    debounced: bool = False

    @property
    def passed(self) -> bool:
        return self.disposition.passed
