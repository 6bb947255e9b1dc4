"""CuraQ MCP Server."""

import argparse
import logging
import sys
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from .api_client import CuraQClient
from .config import Settings, load_settings
from .dispatcher import ToolDispatcher
from .models import SearchMode

logger = logging.getLogger(__name__)

# Initialize MCP server
mcp = FastMCP(
    name="curaq",
    instructions="""CuraQ MCP - Access your CuraQ reading list (curaq.pages.dev).

**Auth:** Set CURAQ_MCP_TOKEN (generate one at https://curaq.pages.dev/settings/mcp).
**Search:** search_articles mode='keyword' (default) or 'semantic'. Fall back to keyword if semantic is unavailable.
**Import:** Use import_articles instead of calling save_article in a loop.""",
)

# Global state
_dispatcher: ToolDispatcher | None = None


def configure(settings: Settings) -> ToolDispatcher:
    """Build the API client and dispatcher from validated settings."""
    global _dispatcher
    if _dispatcher is not None:
        _dispatcher.client.close()
    _dispatcher = ToolDispatcher(CuraQClient(settings))
    return _dispatcher


def get_dispatcher() -> ToolDispatcher:
    """Get the dispatcher, configuring it from the environment on first use."""
    if _dispatcher is None:
        return configure(load_settings())
    return _dispatcher


def _run(name: str, **arguments) -> str:
    result = get_dispatcher().dispatch(name, arguments)
    if result.is_error:
        raise ToolError(result.text)
    return result.text


ArticleId = Annotated[str, Field(description="Article ID (UUID)")]


@mcp.tool()
def list_articles(
    limit: Annotated[int, Field(description="Max articles to return (default: 20, max: 50)")] = 20,
) -> str:
    """List unread articles in priority order with title, summary, tags and reading time.

    Args:
        limit: Max articles to return (default: 20, max: 50)
    """
    return _run("list_articles", limit=limit)


@mcp.tool()
def search_articles(
    query: Annotated[str, Field(description="Search keywords or, in semantic mode, a question")],
    limit: Annotated[int, Field(description="Max results (default: 10, max: 30)")] = 10,
    mode: Annotated[
        SearchMode,
        Field(description="keyword: match title, summary and tags | semantic: search by meaning"),
    ] = SearchMode.KEYWORD,
) -> str:
    """Search saved articles, read and unread.

    Use mode='keyword' if semantic search reports it is unavailable.

    Args:
        query: Search keywords or, in semantic mode, a question
        limit: Max results (default: 10, max: 30)
        mode: keyword (default) | semantic
    """
    return _run("search_articles", query=query, limit=limit, mode=mode)


@mcp.tool()
def get_article(article_id: ArticleId) -> str:
    """Get one article's details and event history.

    Args:
        article_id: Article ID (UUID)
    """
    return _run("get_article", article_id=article_id)


@mcp.tool()
def mark_as_read(article_id: ArticleId) -> str:
    """Mark an article as read.

    Args:
        article_id: Article ID (UUID)
    """
    return _run("mark_as_read", article_id=article_id)


@mcp.tool()
def delete_article(article_id: ArticleId) -> str:
    """Delete an article permanently. IRREVERSIBLE.

    Args:
        article_id: Article ID (UUID)
    """
    return _run("delete_article", article_id=article_id)


@mcp.tool()
def save_article(
    url: Annotated[str, Field(description="URL of the article to save")],
    title: Annotated[str | None, Field(description="Optional title")] = None,
    markdown: Annotated[
        str | None,
        Field(description="Optional article body as markdown, for pages that cannot be fetched"),
    ] = None,
) -> str:
    """Save a URL to the reading list.

    Args:
        url: URL of the article to save
        title: Optional title
        markdown: Optional article body as markdown, for pages that cannot be fetched
    """
    return _run("save_article", url=url, title=title, markdown=markdown)


@mcp.tool()
def import_articles(
    urls: Annotated[list[str], Field(description="URLs to save, processed in order")],
    mark_as_read: Annotated[bool, Field(description="Mark each newly saved article as read")] = False,
    batch_size: Annotated[int, Field(description="URLs per batch (default: 10, max: 20)")] = 10,
) -> str:
    """Save many URLs in one call. Use this instead of calling save_article in a loop.

    Reports saved, skipped (already saved or already read) and failed URLs.

    Args:
        urls: URLs to save, processed in order
        mark_as_read: Mark each newly saved article as read (default: False)
        batch_size: URLs per batch (default: 10, max: 20)
    """
    return _run("import_articles", urls=urls, mark_as_read=mark_as_read, batch_size=batch_size)


@mcp.tool()
def get_discovery_queue() -> str:
    """Show recommended articles waiting in the discovery queue."""
    return _run("get_discovery_queue")


@mcp.tool()
def generate_discovery() -> str:
    """Generate new recommendations for the discovery queue. Rate-limited."""
    return _run("generate_discovery")


@mcp.tool()
def dismiss_discovery(
    item_id: Annotated[str, Field(description="Discovery item ID from get_discovery_queue")],
) -> str:
    """Dismiss a recommendation from the discovery queue.

    Args:
        item_id: Discovery item ID from get_discovery_queue
    """
    return _run("dismiss_discovery", item_id=item_id)


def setup_logging(level: str) -> None:
    # stdout carries the MCP stream, so logs go to stderr
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)-7s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int:
    """Run the MCP server."""
    parser = argparse.ArgumentParser(description="CuraQ MCP server (stdio).")
    parser.add_argument("--api-url", help="CuraQ base URL (default: $CURAQ_API_URL or https://curaq.pages.dev)")
    parser.add_argument("--log-level", help="Logging level (default: $CURAQ_LOG_LEVEL or INFO)")
    args = parser.parse_args(argv)

    try:
        settings = load_settings(api_url=args.api_url, log_level=args.log_level)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(settings.log_level)
    configure(settings)
    logger.info("CuraQ MCP server running on stdio (API: %s)", settings.api_url)
    mcp.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
