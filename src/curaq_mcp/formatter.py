"""Turn API outcomes into the text returned by each tool.

Pure functions: no I/O, same input always gives the same text.
"""

from datetime import datetime
from typing import Any

from .models import (
    ApiFailure,
    ApiOutcome,
    DomainErrorCode,
    ErrorKind,
    ImportResult,
    SearchMode,
)

# Skipped entries are listed individually only up to this count.
COMPACT_SKIP_THRESHOLD = 10

ALREADY_SAVED_MARKER = "already saved"

STATUS_LABELS = {
    "read": "read",
    "unread": "unread",
    "deferred": "deferred",
}

DOMAIN_MESSAGES = {
    DomainErrorCode.UNREAD_LIMIT: (
        "Unread article limit reached. Read or delete some unread articles "
        "before saving new ones."
    ),
    DomainErrorCode.LIMIT_REACHED: (
        "Monthly save limit reached. Wait for the limit to reset or upgrade your plan."
    ),
    DomainErrorCode.ALREADY_READ: "This article has already been read.",
    DomainErrorCode.INVALID_CONTENT: (
        "Could not extract readable content from this URL. "
        "Pass the article text as markdown to save it anyway."
    ),
}

SEMANTIC_UNAVAILABLE = (
    "Semantic search is temporarily unavailable. Try again with mode='keyword'."
)


def _status_error(failure: ApiFailure) -> str:
    return f"Error ({failure.status_code}): {failure.body_text}"


_GENERIC_MESSAGES = {
    ErrorKind.DOMAIN: lambda f: DOMAIN_MESSAGES[f.domain_error],
    ErrorKind.BAD_REQUEST: _status_error,
    ErrorKind.UNAUTHORIZED: lambda f: (
        "Authentication failed. Check that CURAQ_MCP_TOKEN is valid and not revoked."
    ),
    ErrorKind.FORBIDDEN: lambda f: "Access denied.",
    ErrorKind.NOT_FOUND: lambda f: "Not found.",
    ErrorKind.RATE_LIMITED: lambda f: "Too many requests. Wait a moment and try again.",
    ErrorKind.UNAVAILABLE: _status_error,
    ErrorKind.HTTP: _status_error,
}


def describe_failure(failure: ApiFailure) -> str:
    """Generic message for a failure, used when a tool has no specific wording."""
    return _GENERIC_MESSAGES[failure.kind](failure)


def describe_save_failure(failure: ApiFailure) -> str:
    """Message for a failed create call. Shared by save_article and imports."""
    kind = failure.kind
    if kind is ErrorKind.DOMAIN:
        return DOMAIN_MESSAGES[failure.domain_error]
    if kind is ErrorKind.BAD_REQUEST:
        detail = failure.message or failure.error_code or "Invalid request"
        return f"Failed to save article: {detail}"
    return describe_failure(failure)


def _not_found(label: str, identifier: str) -> str:
    return f"{label} not found (ID: {identifier})"


# ── Success rendering ─────────────────────────────────────────────

def _format_date(value: Any) -> str:
    if not value:
        return "unknown"
    text = str(value)
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return text


def _format_timestamp(value: Any) -> str:
    text = str(value or "")
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return text or "unknown"


def render_article(article: dict, heading: str = "##") -> str:
    """Markdown block for one article."""
    lines = [
        f"{heading} {article.get('title') or 'Untitled'}",
        "",
        f"**URL**: {article.get('url', '')}",
        f"**Status**: {STATUS_LABELS.get(article.get('status'), 'unknown')}",
    ]
    if article.get("reading_time_minutes") is not None:
        lines.append(f"**Reading time**: {article['reading_time_minutes']} min")
    tags = article.get("tags") or []
    if tags:
        lines.append(f"**Tags**: {', '.join(str(t) for t in tags)}")
    if article.get("content_type"):
        lines.append(f"**Content type**: {article['content_type']}")
    priority = article.get("priority")
    if isinstance(priority, (int, float)):
        lines.append(f"**Priority**: {priority:.3f}")
    if article.get("created_at"):
        lines.append(f"**Saved**: {_format_date(article['created_at'])}")
    elif article.get("date"):
        lines.append(f"**Date**: {_format_date(article['date'])}")
    if article.get("summary"):
        lines += ["", "**Summary**:", str(article["summary"])]
    lines += ["", f"**Article ID**: {article.get('id', '')}"]
    return "\n".join(lines)


def _article_list(body: Any) -> list[dict]:
    if not isinstance(body, dict):
        return []
    articles = body.get("articles") or []
    return [a for a in articles if isinstance(a, dict)]


def _render_list(articles: list[dict]) -> str:
    return "\n\n---\n\n".join(render_article(a) for a in articles)


# ── Per-tool formatters ───────────────────────────────────────────

def format_article_list(outcome: ApiOutcome) -> str:
    if isinstance(outcome, ApiFailure):
        return describe_failure(outcome)
    articles = _article_list(outcome.body)
    if not articles:
        return "No unread articles."
    return f"# Unread articles ({len(articles)})\n\n{_render_list(articles)}"


def format_search_results(outcome: ApiOutcome, query: str, mode: SearchMode) -> str:
    if isinstance(outcome, ApiFailure):
        if mode is SearchMode.SEMANTIC and outcome.kind is ErrorKind.UNAVAILABLE:
            return SEMANTIC_UNAVAILABLE
        return describe_failure(outcome)
    articles = _article_list(outcome.body)
    if not articles:
        return f'No articles matched "{query}".'
    label = "Semantic search" if mode is SearchMode.SEMANTIC else "Search"
    return f'# {label} results for "{query}" ({len(articles)})\n\n{_render_list(articles)}'


def format_article(outcome: ApiOutcome, article_id: str) -> str:
    if isinstance(outcome, ApiFailure):
        if outcome.kind is ErrorKind.NOT_FOUND:
            return _not_found("Article", article_id)
        if outcome.kind is ErrorKind.FORBIDDEN:
            return "You do not have access to this article."
        return describe_failure(outcome)

    body = outcome.body if isinstance(outcome.body, dict) else {}
    article = body.get("article") or {}
    text = render_article(article, heading="#")
    events = [e for e in body.get("events") or [] if isinstance(e, dict)]
    if events:
        history = "\n".join(
            f"- {e.get('action', '?')} ({_format_timestamp(e.get('created_at'))})"
            for e in events
        )
        text += f"\n\n**Event history**:\n{history}"
    return text


def format_mark_as_read(outcome: ApiOutcome, article_id: str) -> str:
    if isinstance(outcome, ApiFailure):
        if outcome.kind is ErrorKind.NOT_FOUND:
            return _not_found("Article", article_id)
        return describe_failure(outcome)
    return f"Marked article as read (ID: {article_id})"


def format_delete(outcome: ApiOutcome, article_id: str) -> str:
    if isinstance(outcome, ApiFailure):
        if outcome.kind is ErrorKind.NOT_FOUND:
            return _not_found("Article", article_id)
        return describe_failure(outcome)
    return f"Deleted article (ID: {article_id})"


def saved_article(body: Any) -> dict:
    """The article object of a create response (may be empty)."""
    if not isinstance(body, dict):
        return {}
    article = body.get("article")
    if isinstance(article, dict):
        return article
    return {"id": body["id"]} if body.get("id") else {}


def is_already_saved(body: Any) -> bool:
    """True when a create response reports an existing, non-restored article.

    The API only signals this through its message text.
    """
    if not isinstance(body, dict) or body.get("restored"):
        return False
    message = body.get("message")
    return isinstance(message, str) and ALREADY_SAVED_MARKER in message.lower()


def format_save(outcome: ApiOutcome, url: str) -> str:
    if isinstance(outcome, ApiFailure):
        return describe_save_failure(outcome)

    article = saved_article(outcome.body)
    article_id = article.get("id", "unknown")
    if is_already_saved(outcome.body):
        return f"This article is already saved (ID: {article_id})\n**URL**: {url}"

    restored = isinstance(outcome.body, dict) and bool(outcome.body.get("restored"))
    headline = "Restored previously saved article" if restored else "Saved article"
    lines = [
        f"{headline}: {article.get('title') or url}",
        f"**URL**: {article.get('url') or url}",
    ]
    if article.get("reading_time_minutes") is not None:
        lines.append(f"**Reading time**: {article['reading_time_minutes']} min")
    lines.append(f"**Article ID**: {article_id}")
    return "\n".join(lines)


def _render_discovery_item(item: dict) -> str:
    lines = [
        f"## {item.get('title') or 'Untitled'}",
        "",
        f"**URL**: {item.get('url', '')}",
    ]
    if item.get("reason"):
        lines.append(f"**Why**: {item['reason']}")
    if item.get("summary"):
        lines += ["", str(item["summary"])]
    lines += ["", f"**Discovery ID**: {item.get('id', '')}"]
    return "\n".join(lines)


def _discovery_items(body: Any) -> list[dict]:
    if not isinstance(body, dict):
        return []
    items = body.get("items")
    if items is None:
        items = body.get("articles")
    return [i for i in items or [] if isinstance(i, dict)]


def format_discovery_queue(outcome: ApiOutcome) -> str:
    if isinstance(outcome, ApiFailure):
        return describe_failure(outcome)
    items = _discovery_items(outcome.body)
    if not items:
        return (
            "The discovery queue is empty. "
            "Call generate_discovery to create new recommendations."
        )
    rendered = "\n\n---\n\n".join(_render_discovery_item(i) for i in items)
    return f"# Discovery queue ({len(items)})\n\n{rendered}"


def format_generate_discovery(outcome: ApiOutcome) -> str:
    if isinstance(outcome, ApiFailure):
        if outcome.kind is ErrorKind.RATE_LIMITED:
            return "Discovery generation is rate-limited. Wait a while before generating again."
        if outcome.kind is ErrorKind.NOT_FOUND:
            return (
                "No recommendations could be generated right now. "
                "Save and read more articles first."
            )
        return describe_failure(outcome)

    items = _discovery_items(outcome.body)
    count = outcome.body.get("count") if isinstance(outcome.body, dict) else None
    if not isinstance(count, int):
        count = len(items)
    if count == 0:
        return "No new recommendations were generated."
    text = f"Generated {count} new recommendation{'s' if count != 1 else ''}."
    if items:
        text += "\n\n" + "\n\n---\n\n".join(_render_discovery_item(i) for i in items)
    return text


def format_dismiss(outcome: ApiOutcome, item_id: str) -> str:
    if isinstance(outcome, ApiFailure):
        if outcome.kind is ErrorKind.NOT_FOUND:
            return _not_found("Discovery item", item_id)
        return describe_failure(outcome)
    return f"Dismissed discovery item (ID: {item_id})"


def format_import_result(result: ImportResult) -> str:
    """Summary of an import run.

    Failures are always listed. Skipped entries are listed only while there
    are at most COMPACT_SKIP_THRESHOLD of them, otherwise just counted.
    """
    lines = [
        "# Import complete",
        "",
        f"**Total**: {result.total}",
        f"**Succeeded**: {result.succeeded_count}",
        f"**Skipped**: {result.skipped_count}",
        f"**Failed**: {result.failed_count}",
    ]
    if result.failed:
        lines += ["", "## Failed"]
        lines += [f"- {f.url}: {f.error}" for f in result.failed]
    if 0 < result.skipped_count <= COMPACT_SKIP_THRESHOLD:
        lines += ["", "## Skipped"]
        lines += [f"- {s.url}: {s.reason}" for s in result.skipped]
    if result.notes:
        lines += ["", "## Warnings"]
        lines += [f"- {note}" for note in result.notes]
    return "\n".join(lines)
