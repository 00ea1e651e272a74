"""
Dashboard orchestration: load a snapshot, drive the query, derive the cards.

This ties the pieces together:
1. Fetch records and statistics from the record source concurrently
2. Run the query pipeline over the snapshot
3. Derive BMI, risk and recommendations for the visible page only

Collaborator failures never raise out of the service; they land in ``error``
(records) or in the log (statistics), as the dashboard shows them.
"""

import asyncio
from collections.abc import Coroutine
from dataclasses import dataclass
from typing import Any, Literal, TypeVar

import structlog

from healthtrack.config import AppConfig, get_config
from healthtrack.domain.models import (
    HealthRecord,
    PageInfo,
    RecordCard,
    SortField,
    SortOrder,
    StatsSummary,
)
from healthtrack.services.query import QueryPipeline, QueryResult, RecordQuery
from healthtrack.services.record_source import RecordSource, Result
from healthtrack.services.risk import build_record_card
from healthtrack.services.stats import StatsInsights, summarize_stats

logger = structlog.get_logger(__name__)

T = TypeVar("T")

EmptyState = Literal["no_records", "no_matches"]


@dataclass
class DashboardView:
    """Everything needed to render the dashboard once."""

    cards: list[RecordCard]
    page_info: PageInfo
    summary: str
    empty_state: EmptyState | None
    insights: StatsInsights | None
    error: str
    loading: bool = False


class DashboardService:
    """
    Client-side state of the health records dashboard.

    Design principles:
    - One immutable snapshot per load; queries never mutate it
    - Search and sort changes return to page 1, page changes reuse the view
    - Graceful degradation: stats can fail without hiding the record list
    """

    def __init__(self, source: RecordSource, config: AppConfig | None = None) -> None:
        config = config or get_config()
        self.source = source
        self.config = config.dashboard
        self.timeout_seconds = config.record_source.timeout_seconds
        self.logger = logger.bind(component="dashboard", source=source.source_name)

        self.stats: StatsSummary | None = None
        self.error: str = ""
        self.loading: bool = False
        self.query = RecordQuery(
            sort_by=SortField(self.config.default_sort_by),
            sort_order=SortOrder(self.config.default_sort_order),
        )
        self._pipeline = QueryPipeline(page_size=self.config.page_size)

    @property
    def records(self) -> tuple[HealthRecord, ...]:
        return self._pipeline.records

    async def _call(
        self, operation: Coroutine[Any, Any, Result[T, Exception]], name: str
    ) -> Result[T, Exception]:
        """Run one record source call with a timeout; every failure becomes an Err."""
        try:
            return await asyncio.wait_for(operation, timeout=self.timeout_seconds)
        except TimeoutError:
            self.logger.warning(
                "record_source_timeout", operation=name, timeout_seconds=self.timeout_seconds
            )
            return Result.err(TimeoutError(f"{name} timed out after {self.timeout_seconds}s"))
        except Exception as e:
            self.logger.exception("unexpected_record_source_error", operation=name, error=str(e))
            return Result.err(e)

    async def load(self) -> None:
        """Load records and statistics together, as the dashboard does on open."""
        self.loading = True
        try:
            async with asyncio.TaskGroup() as task_group:
                records_task = task_group.create_task(
                    self._call(self.source.fetch_records(self.config.fetch_limit), "fetch_records")
                )
                stats_task = task_group.create_task(
                    self._call(self.source.fetch_stats(), "fetch_stats")
                )
        finally:
            self.loading = False

        records_result = records_task.result()
        if records_result.is_ok():
            records = records_result.unwrap()
            self._pipeline.replace_records(records)
            self.error = ""
            self.logger.info("records_loaded", count=len(records))
        else:
            self._pipeline.replace_records(())
            self.error = str(records_result.unwrap_err()) or "Failed to load health records"
            self.logger.warning("records_load_failed", error=self.error)
        self.query = self.query.with_page(1)

        self._apply_stats(stats_task.result())

    async def refresh_stats(self) -> None:
        self._apply_stats(await self._call(self.source.fetch_stats(), "fetch_stats"))

    def _apply_stats(self, result: Result[StatsSummary, Exception]) -> None:
        if result.is_ok():
            self.stats = result.unwrap()
            self.logger.info("stats_loaded", total_records=self.stats.total_records)
        else:
            # Previous stats stay on screen
            self.logger.warning("stats_load_failed", error=str(result.unwrap_err()))

    async def delete_record(self, record_id: str) -> bool:
        """Delete through the source, then drop the record from the local snapshot."""
        result = await self._call(self.source.delete_record(record_id), "delete_record")
        if result.is_err():
            self.error = str(result.unwrap_err()) or "Failed to delete health record"
            self.logger.warning("record_delete_failed", record_id=record_id, error=self.error)
            return False

        self._pipeline.replace_records(
            record for record in self.records if record.record_id != record_id
        )
        self._current()  # Clamp the page if the last one just emptied
        self.logger.info("record_deleted", record_id=record_id, remaining=len(self.records))
        await self.refresh_stats()
        return True

    def search(self, search_term: str) -> None:
        self.query = self.query.with_search(search_term)

    def clear_search(self) -> None:
        self.query = self.query.with_search("")

    def sort(self, sort_by: SortField | str) -> None:
        """Pick a sort field; picking the current one flips the direction."""
        self.query = self.query.with_sort(sort_by)

    def toggle_sort_order(self) -> None:
        self.query = self.query.toggle_sort_order()

    def go_to_page(self, page: int) -> PageInfo:
        self.query = self.query.with_page(page)
        return self._current().page_info

    def _current(self) -> QueryResult:
        result = self._pipeline.execute(self.query)
        self.query = result.query
        return result

    def view(self) -> DashboardView:
        result = self._current()
        cards = [build_record_card(record) for record in result.records]

        summary = f"Showing {len(cards)} of {result.matched_records} records"
        if self.query.search_term:
            summary += f' (filtered by "{self.query.search_term}")'

        empty_state: EmptyState | None = None
        if not cards:
            empty_state = "no_records" if not self.records else "no_matches"

        return DashboardView(
            cards=cards,
            page_info=result.page_info,
            summary=summary,
            empty_state=empty_state,
            insights=summarize_stats(self.stats) if self.stats is not None else None,
            error=self.error,
            loading=self.loading,
        )
