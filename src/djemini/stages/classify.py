"""
classify.py

Classifier: batch unclassified items through the AI categorization
service and persist the resulting categories.

Every item of a successful batch is marked classified, even when the
service said nothing about it, so a stubborn item cannot loop forever.
A failed batch writes nothing and its items stay pending for the next run.
"""

from __future__ import annotations

import time
from typing import Callable, Iterator, Sequence

from djemini import config
from djemini.ai.prompts import analysis_types
from djemini.ai.schemas import CategoryAssignment
from djemini.ai.service import AIService
from djemini.errors import InvalidAIResponse, QuotaExceeded, TransientError
from djemini.logger import get_logger
from djemini.pipeline.run_state import ClassifyReport
from djemini.store import Category, Item, Store

logger = get_logger(__name__)


def batched(items: Sequence[Item], size: int) -> Iterator[Sequence[Item]]:
    for i in range(0, len(items), size):
        yield items[i : i + size]


def assignments_to_categories(
    results: Sequence[tuple[Item, CategoryAssignment]],
) -> list[Category]:
    """
    One row per distinct (item, type, value). Energy keeps only the first
    value seen for an item.
    """
    seen: set[tuple[str, str, str]] = set()
    energy_done: set[str] = set()
    out: list[Category] = []

    def _add(item_id: str, ctype: str, value: str) -> None:
        key = (item_id, ctype, value)
        if key in seen:
            return
        seen.add(key)
        out.append(
            Category(
                item_id=item_id,
                type=ctype,
                value=value,
                confidence=config.DEFAULT_CONFIDENCE,
            )
        )

    for item, a in results:
        for value in a.mood or ():
            _add(item.id, "mood", value)
        for value in a.genre or ():
            _add(item.id, "genre", value)
        if a.energy and item.id not in energy_done:
            energy_done.add(item.id)
            _add(item.id, "energy", a.energy)

    return out


class Classifier:
    def __init__(
        self,
        store: Store,
        ai: AIService,
        *,
        batch_size: int = config.DEFAULT_BATCH_SIZE,
        batch_delay_sec: float = config.DEFAULT_BATCH_DELAY_SEC,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.ai = ai
        self.batch_size = max(1, min(int(batch_size), config.MAX_BATCH_SIZE))
        self.batch_delay_sec = batch_delay_sec
        self._sleep = sleep

    def classify(self, analysis_type: str = "all") -> ClassifyReport:
        analysis_types(analysis_type)  # validate before touching anything

        report = ClassifyReport(analysis_type=analysis_type)
        pending = self.store.list_unclassified_items()
        report.pending = len(pending)

        if not pending:
            logger.info("No unclassified items")
            return report

        total_batches = (len(pending) + self.batch_size - 1) // self.batch_size
        logger.info(
            "Classifying %d item(s) in %d batch(es) of up to %d [%s]",
            len(pending),
            total_batches,
            self.batch_size,
            analysis_type,
        )

        for n, batch in enumerate(batched(pending, self.batch_size), start=1):
            if n > 1 and self.batch_delay_sec > 0:
                self._sleep(self.batch_delay_sec)

            report.batches += 1
            try:
                results = self.ai.categorize(batch, analysis_type)
            except QuotaExceeded as e:
                logger.error("AI quota exhausted at batch %d/%d: %s", n, total_batches, e)
                report.halted = True
                break
            except InvalidAIResponse as e:
                logger.warning("Batch %d/%d: unparsable response: %s", n, total_batches, e)
                logger.debug("Response preview: %s", e.preview)
                report.failed += len(batch)
                continue
            except TransientError as e:
                logger.warning("Batch %d/%d failed: %s", n, total_batches, e)
                report.failed += len(batch)
                continue

            categories = assignments_to_categories(results)
            written = self.store.record_classification(
                categories, [item.id for item in batch]
            )
            report.processed += len(batch)
            report.categories_written += written

            logger.info(
                "Batch %d/%d: %d item(s), %d categor%s",
                n,
                total_batches,
                len(batch),
                written,
                "y" if written == 1 else "ies",
            )

        logger.info(
            "Classification done: processed=%d failed=%d categories=%d%s",
            report.processed,
            report.failed,
            report.categories_written,
            " (halted: quota)" if report.halted else "",
        )
        return report
