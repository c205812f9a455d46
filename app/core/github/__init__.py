"""
GitHub Integration Module for IssueBot
Handles webhooks, commit scanning, stub issues and commit statuses
"""

from .webhook import verify_webhook_signature, parse_webhook_payload, WebhookPayloadError
from .client import GitHubClient, GitHubAPIError
from .checker import PRChecker
from .formatter import MessageFormatter
from .stub_issue import StubIssueManager

__all__ = [
    "verify_webhook_signature",
    "parse_webhook_payload",
    "WebhookPayloadError",
    "GitHubClient",
    "GitHubAPIError",
    "PRChecker",
    "MessageFormatter",
    "StubIssueManager",
]
