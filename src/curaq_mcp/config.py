"""Process configuration, read once from the environment at startup."""

import os
from dataclasses import dataclass
from typing import Mapping

DEFAULT_API_URL = "https://curaq.pages.dev"
TOKEN_SETTINGS_URL = "https://curaq.pages.dev/settings/mcp"

TOKEN_ENV = "CURAQ_MCP_TOKEN"
API_URL_ENV = "CURAQ_API_URL"
TIMEOUT_ENV = "CURAQ_TIMEOUT"
LOG_LEVEL_ENV = "CURAQ_LOG_LEVEL"


class MissingTokenError(ValueError):
    """The MCP token is not configured. Fatal at startup."""

    def __init__(self):
        super().__init__(
            f"Missing required environment variable: {TOKEN_ENV}\n"
            f"Generate a token at: {TOKEN_SETTINGS_URL}"
        )


@dataclass(frozen=True)
class Settings:
    """Immutable settings shared by the API client and the server."""
    token: str
    api_url: str = DEFAULT_API_URL
    timeout: float | None = None   # None keeps the httpx default
    log_level: str = "INFO"


def load_settings(
    environ: Mapping[str, str] | None = None,
    api_url: str | None = None,
    log_level: str | None = None,
) -> Settings:
    """Build Settings from the environment.

    Explicit arguments (command line flags) win over environment variables.

    Raises:
        MissingTokenError: CURAQ_MCP_TOKEN is unset or blank.
        ValueError: CURAQ_TIMEOUT is not a positive number.
    """
    env = os.environ if environ is None else environ

    token = env.get(TOKEN_ENV, "").strip()
    if not token:
        raise MissingTokenError()

    url = (api_url or env.get(API_URL_ENV, "") or DEFAULT_API_URL).strip().rstrip("/")

    timeout = None
    raw_timeout = env.get(TIMEOUT_ENV, "").strip()
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ValueError(f"{TIMEOUT_ENV} must be a number of seconds, got {raw_timeout!r}") from None
        if timeout <= 0:
            raise ValueError(f"{TIMEOUT_ENV} must be positive, got {raw_timeout!r}")

    level = (log_level or env.get(LOG_LEVEL_ENV, "") or "INFO").strip().upper()

    return Settings(token=token, api_url=url, timeout=timeout, log_level=level)
