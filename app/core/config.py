"""
IssueBot configuration
Collects every tunable value from environment variables (and an optional .env file)
"""
import os
import re
import logging
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _env_number(name: str, default, cast=int):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f"Cannot parse {name} as {cast.__name__}: {raw!r}") from None


def compile_bot_author_regexp(expr: Optional[str]) -> Optional[re.Pattern]:
    """
    Compile the bot author e-mail pattern.

    Args:
        expr: Regular expression text, or None/empty to disable matching

    Returns:
        Compiled pattern, or None when matching is disabled
    """
    if not expr:
        return None
    try:
        pattern = re.compile(expr)
    except re.error as e:
        raise ConfigError(f"Invalid bot author regexp {expr!r}: {e}") from e
    if pattern.groups > 1:
        raise ConfigError(f"Bot author regexp {expr!r} has {pattern.groups} groups, at most 1 allowed")
    return pattern


class IssueBotConfig(BaseModel):
    """
    Runtime settings for the bot.
    Defaults match a production deployment; tests build instances directly.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    enable_stub_issues: bool = True
    bot_author_re: Optional[re.Pattern] = None
    debounce_interval: float = 5.0
    small_diff_threshold: int = 5
    stub_label: str = "issuebot-stub"
    status_context: str = "issuebot"
    report_success: bool = False
    commits_per_page: int = 100
    api_timeout: int = 15

    webhook_secret: Optional[str] = None
    github_token: Optional[str] = None
    app_id: Optional[int] = None
    app_install: Optional[int] = None
    app_private_key: Optional[str] = None

    port: int = 8080

    @property
    def uses_app_auth(self) -> bool:
        return self.app_id is not None and self.app_install is not None and bool(self.app_private_key)

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "IssueBotConfig":
        """
        Build the configuration from environment variables.

        Args:
            dotenv: Load a .env file first (values already in the environment win)

        Returns:
            IssueBotConfig instance
        """
        if dotenv:
            load_dotenv()

        bot_author_re = compile_bot_author_regexp(os.getenv("ISSUEBOT_BOT_AUTHOR_REGEXP"))
        if bot_author_re is not None:
            logger.info(f"Enabled bot regexp matching: {bot_author_re.pattern!r}")

        debounce_interval = _env_number("ISSUEBOT_DEBOUNCE_SECONDS", 5.0, float)
        if debounce_interval < 0:
            raise ConfigError("ISSUEBOT_DEBOUNCE_SECONDS must not be negative")
        commits_per_page = _env_number("ISSUEBOT_COMMITS_PER_PAGE", 100)
        if not 1 <= commits_per_page <= 100:
            raise ConfigError("ISSUEBOT_COMMITS_PER_PAGE must be between 1 and 100")

        return cls(
            enable_stub_issues=_env_bool("ISSUEBOT_ENABLE_STUB_ISSUES", True),
            bot_author_re=bot_author_re,
            debounce_interval=debounce_interval,
            small_diff_threshold=_env_number("ISSUEBOT_SMALL_DIFF_THRESHOLD", 5),
            stub_label=os.getenv("ISSUEBOT_STUB_LABEL") or "issuebot-stub",
            status_context=os.getenv("ISSUEBOT_STATUS_CONTEXT") or "issuebot",
            report_success=_env_bool("ISSUEBOT_REPORT_SUCCESS", False),
            commits_per_page=commits_per_page,
            api_timeout=_env_number("ISSUEBOT_API_TIMEOUT", 15),
            webhook_secret=os.getenv("GITHUB_WEBHOOK_SECRET") or os.getenv("WEBHOOK_SECRET"),
            github_token=os.getenv("GITHUB_TOKEN"),
            app_id=_env_number("ISSUEBOT_APP_ID", None),
            app_install=_env_number("ISSUEBOT_APP_INSTALL", None),
            app_private_key=os.getenv("ISSUEBOT_APP_PRIVATE_KEY"),
            port=_env_number("PORT", 8080),
        )
