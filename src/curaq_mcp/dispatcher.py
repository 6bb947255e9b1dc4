"""Tool registry and dispatch.

dispatch() validates arguments against the tool's model before anything
touches the network, runs the handler and always returns a ToolResult.
No exception leaves a single invocation.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import ValidationError

from . import formatter
from .api_client import CuraQClient, TransportError
from .importer import ImportPipeline
from .models import ToolResult
from .schemas import (
    ArticleIdArgs,
    DiscoveryItemArgs,
    ImportArticlesArgs,
    ListArticlesArgs,
    NoArguments,
    SaveArticleArgs,
    SearchArticlesArgs,
    ToolArguments,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    arguments: type[ToolArguments]
    handler: Callable[[CuraQClient, Any], str]


# ── Handlers ──────────────────────────────────────────────────────

def _list_articles(client: CuraQClient, args: ListArticlesArgs) -> str:
    return formatter.format_article_list(client.list_articles(args.limit))


def _search_articles(client: CuraQClient, args: SearchArticlesArgs) -> str:
    outcome = client.search_articles(args.query, args.limit, args.mode)
    return formatter.format_search_results(outcome, args.query, args.mode)


def _get_article(client: CuraQClient, args: ArticleIdArgs) -> str:
    return formatter.format_article(client.get_article(args.article_id), args.article_id)


def _mark_as_read(client: CuraQClient, args: ArticleIdArgs) -> str:
    return formatter.format_mark_as_read(client.mark_as_read(args.article_id), args.article_id)


def _delete_article(client: CuraQClient, args: ArticleIdArgs) -> str:
    return formatter.format_delete(client.delete_article(args.article_id), args.article_id)


def _save_article(client: CuraQClient, args: SaveArticleArgs) -> str:
    outcome = client.create_article(args.url, title=args.title, markdown=args.markdown)
    return formatter.format_save(outcome, args.url)


def _import_articles(client: CuraQClient, args: ImportArticlesArgs) -> str:
    pipeline = ImportPipeline(client, mark_as_read=args.mark_as_read, batch_size=args.batch_size)
    return formatter.format_import_result(pipeline.run(args.urls))


def _get_discovery_queue(client: CuraQClient, args: NoArguments) -> str:
    return formatter.format_discovery_queue(client.get_discovery_queue())


def _generate_discovery(client: CuraQClient, args: NoArguments) -> str:
    return formatter.format_generate_discovery(client.generate_discovery())


def _dismiss_discovery(client: CuraQClient, args: DiscoveryItemArgs) -> str:
    return formatter.format_dismiss(client.dismiss_discovery(args.item_id), args.item_id)


TOOLS: dict[str, ToolSpec] = {
    spec.name: spec
    for spec in (
        ToolSpec("list_articles", ListArticlesArgs, _list_articles),
        ToolSpec("search_articles", SearchArticlesArgs, _search_articles),
        ToolSpec("get_article", ArticleIdArgs, _get_article),
        ToolSpec("mark_as_read", ArticleIdArgs, _mark_as_read),
        ToolSpec("delete_article", ArticleIdArgs, _delete_article),
        ToolSpec("save_article", SaveArticleArgs, _save_article),
        ToolSpec("import_articles", ImportArticlesArgs, _import_articles),
        ToolSpec("get_discovery_queue", NoArguments, _get_discovery_queue),
        ToolSpec("generate_discovery", NoArguments, _generate_discovery),
        ToolSpec("dismiss_discovery", DiscoveryItemArgs, _dismiss_discovery),
    )
}


def format_validation_error(error: ValidationError) -> str:
    """One line per invalid argument."""
    lines = []
    for item in error.errors():
        name = ".".join(str(part) for part in item.get("loc", ())) or "arguments"
        if item.get("type") == "missing":
            lines.append(f"Error: missing required argument '{name}'")
        else:
            lines.append(f"Error: invalid argument '{name}': {item.get('msg', 'invalid value')}")
    return "\n".join(lines)


class ToolDispatcher:
    """Routes (tool name, arguments) to a handler."""

    def __init__(self, client: CuraQClient, tools: dict[str, ToolSpec] | None = None):
        self.client = client
        self.tools = TOOLS if tools is None else tools

    def dispatch(self, name: str, arguments: dict[str, Any] | None = None) -> ToolResult:
        spec = self.tools.get(name)
        if spec is None:
            logger.warning("Unknown tool requested: %s", name)
            return ToolResult(f"Unknown tool: {name}", is_error=True)

        try:
            args = spec.arguments.model_validate(arguments or {})
        except ValidationError as e:
            logger.info("%s rejected: invalid arguments", name)
            return ToolResult(format_validation_error(e), is_error=True)

        logger.info("%s called", name)
        logger.debug("%s arguments: %s", name, args.model_dump(mode="json"))
        try:
            text = spec.handler(self.client, args)
        except TransportError as e:
            logger.warning("%s failed: %s", name, e)
            return ToolResult(f"An error occurred: {e}", is_error=True)
        except Exception as e:
            logger.error("%s raised unexpectedly", name, exc_info=True)
            return ToolResult(f"An error occurred: {e}", is_error=True)
        return ToolResult(text)
