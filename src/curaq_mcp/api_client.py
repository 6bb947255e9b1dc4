"""HTTP client for the CuraQ API.

Every call returns an ApiOutcome. HTTP error statuses are data, not
exceptions; only network failures and unparsable success bodies raise
TransportError.
"""

import json
import logging
import urllib.parse
from typing import Any

import httpx

from .config import Settings
from .models import ApiFailure, ApiOutcome, ApiSuccess, SearchMode

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

SEARCH_PATHS = {
    SearchMode.KEYWORD: f"{API_PREFIX}/articles/search",
    SearchMode.SEMANTIC: f"{API_PREFIX}/articles/semantic-search",
}


class TransportError(Exception):
    """The request never produced a usable HTTP response."""


def _quote(identifier: str) -> str:
    return urllib.parse.quote(identifier, safe="")


def _parse_error_body(text: str) -> tuple[str | None, str | None]:
    """Extract (error, message) from a JSON error body, tolerating anything else."""
    try:
        data = json.loads(text)
    except ValueError:
        return None, None
    if not isinstance(data, dict):
        return None, None
    error = data.get("error")
    message = data.get("message")
    return (
        error if isinstance(error, str) else None,
        message if isinstance(message, str) else None,
    )


class CuraQClient:
    """Authenticated client for the CuraQ REST API."""

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None):
        self.settings = settings
        client_kwargs: dict[str, Any] = {
            "base_url": settings.api_url,
            "headers": {
                "Authorization": f"Bearer {settings.token}",
                "Accept": "application/json",
            },
            "transport": transport,
        }
        if settings.timeout is not None:
            client_kwargs["timeout"] = settings.timeout
        self._http = httpx.Client(**client_kwargs)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "CuraQClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def call(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> ApiOutcome:
        """Perform one request and classify the response.

        Args:
            method: HTTP method
            path: Path below the base URL, e.g. /api/v1/articles
            params: Optional query parameters
            json_body: Optional body, sent as JSON

        Raises:
            TransportError: network failure or a 2xx body that is not JSON
        """
        try:
            response = self._http.request(method, path, params=params, json=json_body)
        except httpx.HTTPError as e:
            logger.debug("%s %s failed: %s", method, path, e)
            raise TransportError(f"{method} {path} failed: {e}") from e

        logger.debug("%s %s -> %d", method, path, response.status_code)

        if not response.is_success:
            text = response.text
            error_code, message = _parse_error_body(text)
            return ApiFailure(
                status_code=response.status_code,
                body_text=text,
                error_code=error_code,
                message=message,
            )

        if not response.content.strip():
            return ApiSuccess(status_code=response.status_code, body={})
        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(
                f"{method} {path} returned malformed JSON (HTTP {response.status_code})"
            ) from e
        return ApiSuccess(status_code=response.status_code, body=body)

    # ── Articles ──────────────────────────────────────────────────

    def list_articles(self, limit: int) -> ApiOutcome:
        return self.call("GET", f"{API_PREFIX}/articles", params={"limit": limit})

    def search_articles(self, query: str, limit: int, mode: SearchMode = SearchMode.KEYWORD) -> ApiOutcome:
        return self.call("GET", SEARCH_PATHS[mode], params={"q": query, "limit": limit})

    def get_article(self, article_id: str) -> ApiOutcome:
        return self.call("GET", f"{API_PREFIX}/articles/{_quote(article_id)}")

    def mark_as_read(self, article_id: str) -> ApiOutcome:
        return self.call("POST", f"{API_PREFIX}/articles/{_quote(article_id)}/read")

    def delete_article(self, article_id: str) -> ApiOutcome:
        return self.call("DELETE", f"{API_PREFIX}/articles/{_quote(article_id)}")

    def create_article(
        self,
        url: str,
        title: str | None = None,
        markdown: str | None = None,
    ) -> ApiOutcome:
        payload: dict[str, Any] = {"url": url}
        if title:
            payload["title"] = title
        if markdown:
            payload["markdown"] = markdown
        return self.call("POST", f"{API_PREFIX}/articles", json_body=payload)

    # ── Discovery ─────────────────────────────────────────────────

    def get_discovery_queue(self) -> ApiOutcome:
        return self.call("GET", f"{API_PREFIX}/discovery")

    def generate_discovery(self) -> ApiOutcome:
        return self.call("POST", f"{API_PREFIX}/discovery/generate")

    def dismiss_discovery(self, item_id: str) -> ApiOutcome:
        return self.call("POST", f"{API_PREFIX}/discovery/{_quote(item_id)}/dismiss")
