from fastapi import FastAPI, HTTPException, Request, BackgroundTasks, Header
import json
import logging
import threading
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from app.core.config import IssueBotConfig
from app.core.github.client import GitHubClient, GitHubAPIError
from app.core.github.checker import PRChecker
from app.core.github.models import PullRequestRef
from app.core.github.webhook import verify_webhook_signature, parse_webhook_payload, WebhookPayloadError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="IssueBot")

# Counters exposed on /debug/vars
_counters_lock = threading.Lock()
counters = {
    "issuebot_webhook_wakeups": 0,
    "issuebot_pull_requests_checked": 0,
}


def _count(name: str):
    with _counters_lock:
        counters[name] += 1


config: Optional[IssueBotConfig] = None
pr_checker: Optional[PRChecker] = None
_pr_checker_lock = threading.Lock()


def get_config() -> IssueBotConfig:
    """Lazy load of the configuration"""
    global config
    if config is None:
        config = IssueBotConfig.from_env(dotenv=False)
    return config


def get_pr_checker() -> PRChecker:
    """Lazy initialization of the PR checker (one per process, shares the debounce cache)"""
    global pr_checker
    if pr_checker is None:
        with _pr_checker_lock:
            if pr_checker is None:
                cfg = get_config()
                try:
                    pr_checker = PRChecker(GitHubClient(cfg), cfg)
                    logger.info("GitHub PR checker initialized successfully")
                except Exception as e:
                    logger.error(f"Failed to initialize PR checker: {e}")
                    raise
    return pr_checker


@app.on_event("startup")
async def startup_event():
    """Validate configuration on startup."""
    logger.info("🚀 IssueBot is starting")
    cfg = get_config()

    if not cfg.webhook_secret:
        logger.warning("⚠️  GITHUB_WEBHOOK_SECRET not set - every webhook will be rejected")
    if cfg.uses_app_auth:
        logger.info(f"✅ Authenticating as GitHub App {cfg.app_id} (installation {cfg.app_install})")
    elif cfg.github_token:
        logger.info("✅ Authenticating with GITHUB_TOKEN")
    else:
        logger.warning("⚠️  No GitHub credentials set - pull requests cannot be checked")
    if not cfg.enable_stub_issues:
        logger.info("ℹ️  Stub issue creation disabled")

    logger.info("✅ IssueBot ready!")


@app.get("/")
@app.head("/")
def health_check():
    """Health check endpoint."""
    return {"status": "IssueBot is online"}


@app.get("/debug/vars")
def debug_vars():
    """Process counters."""
    with _counters_lock:
        return dict(counters)


def check_pr_background(pr: PullRequestRef):
    """
    Background task to check a pull request.
    This runs on a worker thread after the webhook has returned 200 OK.
    """
    logger.info(f"Background task started for PR #{pr.number} in {pr.full_name}")
    try:
        result = get_pr_checker().check_pull_request(pr)
        if not result.debounced:
            logger.info(f"Check finished for PR #{pr.number}: {result.disposition.name}")
    except GitHubAPIError as e:
        # The check is abandoned; nothing is reported on the PR.
        logger.error(f"GitHub API failure checking PR #{pr.number} ({e.operation}): {e}", exc_info=True)
    except Exception as e:
        logger.error(f"Error in background task for PR #{pr.number}: {e}", exc_info=True)


@app.api_route("/webhook", methods=["POST", "PUT"])
@app.api_route("/webhook/github", methods=["POST", "PUT"])
async def github_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    x_hub_signature_256: Optional[str] = Header(None, alias="X-Hub-Signature-256"),
    x_github_event: Optional[str] = Header(None, alias="X-GitHub-Event"),
):
    """
    GitHub webhook endpoint for pull request events.
    Validates signature, parses payload, and queues a background check.
    """
    _count("issuebot_webhook_wakeups")

    # Read raw body for signature verification (must be done before parsing JSON)
    body_bytes = await request.body()

    if not verify_webhook_signature(body_bytes, x_hub_signature_256, get_config().webhook_secret):
        raise HTTPException(status_code=401, detail="webhook signature bad")

    try:
        payload = json.loads(body_bytes.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning(f"could not parse webhook: {e}")
        raise HTTPException(status_code=400, detail="could not parse payload")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="could not parse payload")

    try:
        pr = parse_webhook_payload(x_github_event, payload)
    except WebhookPayloadError:
        raise HTTPException(status_code=400, detail="could not parse payload")
    if pr is None:
        # Not something we need to respond to
        return {"status": "ignored", "message": "Event not processed"}

    _count("issuebot_pull_requests_checked")
    background_tasks.add_task(check_pr_background, pr)

    return {
        "status": "accepted",
        "message": f"PR #{pr.number} queued for check",
        "repo": pr.full_name,
        "pr_number": pr.number,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=get_config().port)
