"""Shared fixtures: an in-memory stand-in for CuraQClient."""

import pytest

from curaq_mcp.models import ApiFailure, ApiSuccess


class FakeClient:
    """Records every call and answers from scripted outcomes.

    responses maps a method name to an outcome, an exception instance, or a
    callable receiving the call arguments. create_article and mark_as_read
    also accept a dict keyed by url / article id.
    """

    def __init__(self, **responses):
        self.responses = responses
        self.calls: list[tuple[str, tuple]] = []

    def _answer(self, method, *args):
        self.calls.append((method, args))
        response = self.responses.get(method, ApiSuccess(200, {}))
        if isinstance(response, dict):
            response = response.get(args[0], ApiSuccess(200, {}))
        if callable(response):
            response = response(*args)
        if isinstance(response, BaseException):
            raise response
        return response

    def calls_to(self, method):
        return [args for name, args in self.calls if name == method]

    def list_articles(self, limit):
        return self._answer("list_articles", limit)

    def search_articles(self, query, limit, mode):
        return self._answer("search_articles", query, limit, mode)

    def get_article(self, article_id):
        return self._answer("get_article", article_id)

    def mark_as_read(self, article_id):
        return self._answer("mark_as_read", article_id)

    def delete_article(self, article_id):
        return self._answer("delete_article", article_id)

    def create_article(self, url, title=None, markdown=None):
        return self._answer("create_article", url)

    def get_discovery_queue(self):
        return self._answer("get_discovery_queue")

    def generate_discovery(self):
        return self._answer("generate_discovery")

    def dismiss_discovery(self, item_id):
        return self._answer("dismiss_discovery", item_id)

    def close(self):
        pass


def created(article_id, **extra):
    """Successful create response body."""
    return ApiSuccess(201, {"article": {"id": article_id, "title": f"Title {article_id}"}, **extra})


def failure(status, error=None, message=None):
    body = {}
    if error:
        body["error"] = error
    if message:
        body["message"] = message
    text = str(body) if body else "Server exploded"
    return ApiFailure(status_code=status, body_text=text, error_code=error, message=message)


@pytest.fixture
def fake_client():
    return FakeClient()

