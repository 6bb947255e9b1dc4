"""Data types shared by the client, formatter, dispatcher and import pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class SearchMode(str, Enum):
    KEYWORD = "keyword"
    SEMANTIC = "semantic"


class DomainErrorCode(str, Enum):
    """Business-rule rejections reported by the API in the `error` field."""
    UNREAD_LIMIT = "unread-limit"
    LIMIT_REACHED = "limit-reached"
    ALREADY_READ = "already-read"
    INVALID_CONTENT = "invalid-content"

    @classmethod
    def parse(cls, code: str | None) -> "DomainErrorCode | None":
        if not code:
            return None
        try:
            return cls(code)
        except ValueError:
            return None


class ErrorKind(str, Enum):
    """Classification of a failed API call."""
    DOMAIN = "domain"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    HTTP = "http"


_STATUS_KINDS = {
    400: ErrorKind.BAD_REQUEST,
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    429: ErrorKind.RATE_LIMITED,
    503: ErrorKind.UNAVAILABLE,
}


@dataclass(frozen=True)
class ApiSuccess:
    status_code: int
    body: Any


@dataclass(frozen=True)
class ApiFailure:
    """A non-2xx response.

    error_code and message come from a `{"error": ..., "message": ...}` body
    when the body parses as JSON; body_text is always the raw response text.
    """
    status_code: int
    body_text: str
    error_code: str | None = None
    message: str | None = None

    @property
    def domain_error(self) -> DomainErrorCode | None:
        return DomainErrorCode.parse(self.error_code)

    @property
    def kind(self) -> ErrorKind:
        if self.domain_error is not None:
            return ErrorKind.DOMAIN
        return _STATUS_KINDS.get(self.status_code, ErrorKind.HTTP)


ApiOutcome = Union[ApiSuccess, ApiFailure]


@dataclass(frozen=True)
class ToolResult:
    """Text returned to the MCP client for one tool call."""
    text: str
    is_error: bool = False


# ── Import accumulator ────────────────────────────────────────────

@dataclass(frozen=True)
class ImportedArticle:
    url: str
    article_id: str | None


@dataclass(frozen=True)
class SkippedArticle:
    url: str
    reason: str


@dataclass(frozen=True)
class FailedArticle:
    url: str
    error: str


@dataclass
class ImportResult:
    """Outcome of one import run. Entries are kept in processing order."""
    succeeded: list[ImportedArticle] = field(default_factory=list)
    skipped: list[SkippedArticle] = field(default_factory=list)
    failed: list[FailedArticle] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    batches: int = 0

    @property
    def succeeded_count(self) -> int:
        return len(self.succeeded)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def total(self) -> int:
        return self.succeeded_count + self.skipped_count + self.failed_count
