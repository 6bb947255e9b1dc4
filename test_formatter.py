"""Tests for result formatting policy."""

import pytest

from conftest import failure
from curaq_mcp import formatter
from curaq_mcp.models import (
    ApiFailure,
    ApiSuccess,
    DomainErrorCode,
    ErrorKind,
    FailedArticle,
    ImportedArticle,
    ImportResult,
    SearchMode,
    SkippedArticle,
)

ARTICLE = {
    "id": "a1",
    "url": "https://example.com/post",
    "title": "A Post",
    "summary": "Short summary.",
    "tags": ["python", "mcp"],
    "reading_time_minutes": 7,
    "content_type": "article",
    "priority": 0.87654,
    "created_at": "2026-03-01T10:00:00Z",
    "status": "unread",
}


@pytest.mark.parametrize(
    "status, error, kind",
    [
        (400, "unread-limit", ErrorKind.DOMAIN),
        (409, "already-read", ErrorKind.DOMAIN),
        (400, "bad-url", ErrorKind.BAD_REQUEST),
        (401, None, ErrorKind.UNAUTHORIZED),
        (403, None, ErrorKind.FORBIDDEN),
        (404, None, ErrorKind.NOT_FOUND),
        (429, None, ErrorKind.RATE_LIMITED),
        (503, None, ErrorKind.UNAVAILABLE),
        (500, None, ErrorKind.HTTP),
    ],
)
def test_failure_classification(status, error, kind):
    assert failure(status, error=error).kind is kind


def test_every_error_kind_has_a_message():
    samples = {
        ErrorKind.DOMAIN: failure(400, error="invalid-content"),
        ErrorKind.BAD_REQUEST: failure(400),
        ErrorKind.UNAUTHORIZED: failure(401),
        ErrorKind.FORBIDDEN: failure(403),
        ErrorKind.NOT_FOUND: failure(404),
        ErrorKind.RATE_LIMITED: failure(429),
        ErrorKind.UNAVAILABLE: failure(503),
        ErrorKind.HTTP: failure(502),
    }
    assert set(samples) == set(ErrorKind)
    for kind, sample in samples.items():
        assert sample.kind is kind
        assert formatter.describe_failure(sample)


def test_every_domain_code_has_a_message():
    assert set(formatter.DOMAIN_MESSAGES) == set(DomainErrorCode)


def test_generic_message_uses_status_and_body():
    outcome = ApiFailure(status_code=500, body_text="Internal error")
    assert formatter.format_article_list(outcome) == "Error (500): Internal error"


def test_get_article_not_found_and_forbidden_are_distinct():
    not_found = formatter.format_article(failure(404), "xyz")
    forbidden = formatter.format_article(failure(403), "xyz")

    assert not_found == "Article not found (ID: xyz)"
    assert forbidden == "You do not have access to this article."


def test_mark_and_delete_not_found():
    assert formatter.format_mark_as_read(failure(404), "m1") == "Article not found (ID: m1)"
    assert formatter.format_delete(failure(404), "d1") == "Article not found (ID: d1)"
    assert formatter.format_dismiss(failure(404), "q1") == "Discovery item not found (ID: q1)"


def test_semantic_503_has_specific_message():
    outcome = ApiFailure(status_code=503, body_text="index warming up")

    semantic = formatter.format_search_results(outcome, "llm", SearchMode.SEMANTIC)
    keyword = formatter.format_search_results(outcome, "llm", SearchMode.KEYWORD)

    assert semantic == formatter.SEMANTIC_UNAVAILABLE
    assert keyword == "Error (503): index warming up"


@pytest.mark.parametrize("code", list(DomainErrorCode))
def test_save_domain_errors_use_agreed_messages(code):
    text = formatter.format_save(failure(400, error=code.value), "https://a.example")
    assert text == formatter.DOMAIN_MESSAGES[code]


def test_save_other_400_prefers_message_then_error_then_fallback():
    assert formatter.format_save(failure(400, error="bad-url", message="URL is invalid"), "u") == (
        "Failed to save article: URL is invalid"
    )
    assert formatter.format_save(failure(400, error="bad-url"), "u") == "Failed to save article: bad-url"
    assert formatter.format_save(failure(400), "u") == "Failed to save article: Invalid request"


def test_save_success_variants():
    new = ApiSuccess(201, {"article": {"id": "n1", "title": "New"}})
    dup = ApiSuccess(200, {"article": {"id": "d1"}, "message": "Article already saved"})
    restored = ApiSuccess(200, {"article": {"id": "r1", "title": "Back"}, "message": "Article already saved", "restored": True})

    assert formatter.format_save(new, "https://n").startswith("Saved article: New")
    assert formatter.format_save(dup, "https://d").startswith("This article is already saved (ID: d1)")
    assert formatter.format_save(restored, "https://r").startswith("Restored previously saved article: Back")


def test_empty_results_are_not_errors():
    empty = ApiSuccess(200, {"articles": []})

    assert formatter.format_article_list(empty) == "No unread articles."
    assert formatter.format_search_results(empty, "zig", SearchMode.KEYWORD) == 'No articles matched "zig".'
    assert formatter.format_discovery_queue(ApiSuccess(200, {"items": []})).startswith(
        "The discovery queue is empty."
    )


def test_article_list_rendering():
    text = formatter.format_article_list(ApiSuccess(200, {"articles": [ARTICLE]}))

    assert text.startswith("# Unread articles (1)")
    assert "## A Post" in text
    assert "**Tags**: python, mcp" in text
    assert "**Priority**: 0.877" in text
    assert "**Saved**: 2026-03-01" in text
    assert "**Article ID**: a1" in text


def test_get_article_includes_event_history():
    body = {"article": ARTICLE, "events": [{"action": "saved", "created_at": "2026-03-01T10:00:00Z"}]}
    text = formatter.format_article(ApiSuccess(200, body), "a1")

    assert text.startswith("# A Post")
    assert "- saved (2026-03-01 10:00)" in text


def test_generate_discovery_messages():
    assert "rate-limited" in formatter.format_generate_discovery(failure(429))
    assert "No recommendations" in formatter.format_generate_discovery(failure(404))
    generated = ApiSuccess(200, {"items": [{"id": "q1", "title": "Idea", "url": "https://i"}]})
    assert formatter.format_generate_discovery(generated).startswith("Generated 1 new recommendation.")


def test_formatting_is_idempotent():
    outcomes = [
        ApiSuccess(200, {"articles": [ARTICLE]}),
        failure(404),
        failure(400, error="already-read"),
        ApiFailure(status_code=503, body_text="down"),
    ]
    for outcome in outcomes:
        assert formatter.format_article_list(outcome) == formatter.format_article_list(outcome)
        assert formatter.format_search_results(outcome, "q", SearchMode.SEMANTIC) == (
            formatter.format_search_results(outcome, "q", SearchMode.SEMANTIC)
        )
        assert formatter.format_save(outcome, "u") == formatter.format_save(outcome, "u")


def _import_result(skipped: int) -> ImportResult:
    return ImportResult(
        succeeded=[ImportedArticle("https://ok", "id1")],
        skipped=[SkippedArticle(f"https://s/{i}", "already saved") for i in range(skipped)],
        failed=[FailedArticle("https://bad", "Error (500): boom")],
        notes=["https://ok: saved, but marking as read failed: Not found."],
    )


def test_import_summary_lists_failures_and_few_skips():
    text = formatter.format_import_result(_import_result(skipped=10))

    assert "**Total**: 12" in text
    assert "**Skipped**: 10" in text
    assert "- https://bad: Error (500): boom" in text
    assert "## Skipped" in text
    assert "- https://s/9: already saved" in text
    assert "## Warnings" in text


def test_import_summary_only_counts_many_skips():
    text = formatter.format_import_result(_import_result(skipped=11))

    assert "**Skipped**: 11" in text
    assert "## Skipped" not in text
    assert "https://s/0" not in text
    assert "- https://bad: Error (500): boom" in text
