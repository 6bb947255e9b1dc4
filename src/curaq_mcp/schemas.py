"""Argument models for each tool.

Limit-like numbers are clamped instead of rejected: a limit of 500 on
list_articles quietly becomes 50, and a limit of 0 falls back to the default.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from .models import SearchMode

LIST_LIMIT_DEFAULT = 20
LIST_LIMIT_MAX = 50
SEARCH_LIMIT_DEFAULT = 10
SEARCH_LIMIT_MAX = 30
BATCH_SIZE_DEFAULT = 10
BATCH_SIZE_MAX = 20

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def clamp(value: int | None, default: int, maximum: int, minimum: int = 1) -> int:
    """Clamp value to [minimum, maximum]; None or 0 means default."""
    if not value:
        return default
    return max(minimum, min(value, maximum))


class ToolArguments(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class NoArguments(ToolArguments):
    pass


class ListArticlesArgs(ToolArguments):
    limit: int | None = LIST_LIMIT_DEFAULT

    @field_validator("limit")
    @classmethod
    def _clamp_limit(cls, v: int | None) -> int:
        return clamp(v, LIST_LIMIT_DEFAULT, LIST_LIMIT_MAX)


class SearchArticlesArgs(ToolArguments):
    query: RequiredText
    limit: int | None = SEARCH_LIMIT_DEFAULT
    mode: SearchMode = SearchMode.KEYWORD

    @field_validator("limit")
    @classmethod
    def _clamp_limit(cls, v: int | None) -> int:
        return clamp(v, SEARCH_LIMIT_DEFAULT, SEARCH_LIMIT_MAX)


class ArticleIdArgs(ToolArguments):
    article_id: RequiredText


class SaveArticleArgs(ToolArguments):
    url: RequiredText
    title: str | None = None
    markdown: str | None = None


class ImportArticlesArgs(ToolArguments):
    urls: list[RequiredText] = Field(min_length=1)
    mark_as_read: bool = False
    batch_size: int | None = BATCH_SIZE_DEFAULT

    @field_validator("batch_size")
    @classmethod
    def _clamp_batch_size(cls, v: int | None) -> int:
        return clamp(v, BATCH_SIZE_DEFAULT, BATCH_SIZE_MAX)


class DiscoveryItemArgs(ToolArguments):
    item_id: RequiredText
