"""Batch import: save many URLs, optionally marking each one read.

Batches run one after another and items inside a batch run one at a time.
The API documents no concurrency allowance, so nothing runs in parallel.
A failing item never stops the run; every URL ends up in exactly one of
succeeded, skipped or failed.
"""

import logging
import time
from typing import Sequence, TypeVar

from .api_client import CuraQClient, TransportError
from .formatter import describe_failure, describe_save_failure, is_already_saved, saved_article
from .models import (
    ApiFailure,
    DomainErrorCode,
    FailedArticle,
    ImportedArticle,
    ImportResult,
    SkippedArticle,
)
from .schemas import BATCH_SIZE_DEFAULT, BATCH_SIZE_MAX, clamp

logger = logging.getLogger(__name__)

REASON_ALREADY_READ = "already read"
REASON_ALREADY_SAVED = "already saved"

T = TypeVar("T")


def make_batches(items: Sequence[T], batch_size: int) -> list[list[T]]:
    """Split items into contiguous batches of at most batch_size, keeping order."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")
    return [list(items[i:i + batch_size]) for i in range(0, len(items), batch_size)]


class ImportPipeline:
    """One import run. Create a new pipeline per run; results are not shared."""

    def __init__(
        self,
        client: CuraQClient,
        mark_as_read: bool = False,
        batch_size: int = BATCH_SIZE_DEFAULT,
    ):
        self.client = client
        self.mark_as_read = mark_as_read
        self.batch_size = clamp(batch_size, BATCH_SIZE_DEFAULT, BATCH_SIZE_MAX)

    def run(self, urls: Sequence[str]) -> ImportResult:
        result = ImportResult()
        batches = make_batches(urls, self.batch_size)
        start = time.time()

        for batch_index, batch in enumerate(batches, start=1):
            logger.info("Batch %d/%d: %d url(s)", batch_index, len(batches), len(batch))
            for url in batch:
                try:
                    self._import_one(url, result)
                except TransportError as e:
                    logger.warning("Import of %s failed: %s", url, e)
                    result.failed.append(FailedArticle(url=url, error=str(e)))
                except Exception as e:
                    logger.error("Unexpected error importing %s", url, exc_info=True)
                    result.failed.append(FailedArticle(url=url, error=f"{type(e).__name__}: {e}"))
            result.batches += 1

        logger.info(
            "DONE - %d saved, %d skipped, %d failed in %.1fs",
            result.succeeded_count, result.skipped_count, result.failed_count,
            time.time() - start,
        )
        return result

    def _import_one(self, url: str, result: ImportResult) -> None:
        outcome = self.client.create_article(url)

        if isinstance(outcome, ApiFailure):
            if outcome.domain_error is DomainErrorCode.ALREADY_READ:
                result.skipped.append(SkippedArticle(url=url, reason=REASON_ALREADY_READ))
            else:
                result.failed.append(FailedArticle(url=url, error=describe_save_failure(outcome)))
            return

        # TODO: switch to a structured duplicate flag once the create endpoint returns one
        if is_already_saved(outcome.body):
            result.skipped.append(SkippedArticle(url=url, reason=REASON_ALREADY_SAVED))
            return

        article_id = saved_article(outcome.body).get("id")
        if self.mark_as_read:
            self._mark_read(url, article_id, result)
        result.succeeded.append(ImportedArticle(url=url, article_id=article_id))

    def _mark_read(self, url: str, article_id: str | None, result: ImportResult) -> None:
        """Mark a freshly saved article read. Problems become notes, not failures."""
        if not article_id:
            note = f"{url}: saved, but the response had no article ID to mark as read"
        else:
            try:
                outcome = self.client.mark_as_read(article_id)
            except TransportError as e:
                note = f"{url}: saved, but marking as read failed: {e}"
            else:
                if not isinstance(outcome, ApiFailure):
                    return
                note = f"{url}: saved, but marking as read failed: {describe_failure(outcome)}"
        logger.warning(note)
        result.notes.append(note)
