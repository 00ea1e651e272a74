"""
Client-side record query pipeline: search filter, sort, paginate.

Pattern: every stage returns a new list and never touches its input, so a
snapshot can be queried repeatedly (and concurrently) without surprises.
"""

import math
import unicodedata
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from healthtrack.domain.models import HealthRecord, PageInfo, SortField, SortOrder
from healthtrack.services.metrics import bmi_reading, resolve_bmi

logger = structlog.get_logger(__name__)

DEFAULT_PAGE_SIZE = 6
EARLIEST = datetime.min.replace(tzinfo=UTC)


def _searchable_fields(record: HealthRecord) -> tuple[str, ...]:
    return (record.name or "", record.email or "", bmi_reading(record).category or "")


def filter_records(records: Iterable[HealthRecord], search_term: str) -> list[HealthRecord]:
    """Keep records whose name, email or BMI category contains the term, ignoring case."""
    if not search_term:
        return list(records)

    needle = search_term.casefold()
    return [
        record
        for record in records
        if any(needle in field.casefold() for field in _searchable_fields(record))
    ]


def name_collation_key(name: str) -> tuple[str, str]:
    """
    Alphabetical key that ignores case and accents, so "Émile" sorts with the E's.

    Names equal after folding fall back to their case-folded spelling.
    """
    folded = name.casefold()
    decomposed = unicodedata.normalize("NFKD", folded)
    base = "".join(char for char in decomposed if not unicodedata.combining(char))
    return (base, folded)


def _sort_key(sort_by: SortField) -> Callable[[HealthRecord], Any]:
    if sort_by == SortField.NAME:
        return lambda record: name_collation_key(record.name or "")
    if sort_by == SortField.AGE:
        return lambda record: record.age or 0
    if sort_by == SortField.BMI:
        return lambda record: resolve_bmi(record) or 0
    if sort_by == SortField.HEALTH_SCORE:
        return lambda record: record.health_score or 0
    return lambda record: record.created_at or EARLIEST


def sort_records(
    records: Iterable[HealthRecord],
    sort_by: SortField | str = SortField.CREATED_AT,
    sort_order: SortOrder | str = SortOrder.DESC,
) -> list[HealthRecord]:
    """
    Sort by a single key. Missing numbers sort as 0, missing dates as the earliest instant.

    Ties keep their input order in both directions; there is no secondary key.
    """
    key = _sort_key(SortField(sort_by))
    return sorted(records, key=key, reverse=SortOrder(sort_order) == SortOrder.DESC)


def paginate_records(
    records: Sequence[HealthRecord], page: int, page_size: int = DEFAULT_PAGE_SIZE
) -> tuple[list[HealthRecord], PageInfo]:
    """
    Slice one page out of an already filtered and sorted sequence.

    Out-of-range pages are clamped to the nearest valid page. An empty
    sequence still has one (empty) page.
    """
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")

    total_records = len(records)
    total_pages = max(1, math.ceil(total_records / page_size))
    current_page = min(max(page, 1), total_pages)
    start_index = (current_page - 1) * page_size
    end_index = min(start_index + page_size, total_records)

    page_info = PageInfo(
        current_page=current_page,
        total_pages=total_pages,
        page_size=page_size,
        start_index=start_index,
        end_index=end_index,
        total_records=total_records,
    )
    return list(records[start_index:end_index]), page_info


class RecordQuery(BaseModel):
    """
    Immutable query parameters for the record list.

    Any change to search or sort returns a query on page 1; a page change
    leaves search and sort untouched.
    """

    model_config = ConfigDict(frozen=True)

    search_term: str = ""
    sort_by: SortField = SortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC
    page: int = Field(default=1, ge=1)

    @property
    def view_key(self) -> tuple[str, SortField, SortOrder]:
        """The parameters that decide the filtered and sorted view."""
        return (self.search_term, self.sort_by, self.sort_order)

    def with_search(self, search_term: str) -> "RecordQuery":
        return self.model_copy(update={"search_term": search_term, "page": 1})

    def with_sort(self, sort_by: SortField | str) -> "RecordQuery":
        """Same field flips the direction; a new field starts ascending."""
        field = SortField(sort_by)
        if field == self.sort_by:
            return self.toggle_sort_order()
        return self.model_copy(update={"sort_by": field, "sort_order": SortOrder.ASC, "page": 1})

    def with_sort_order(self, sort_order: SortOrder | str) -> "RecordQuery":
        return self.model_copy(update={"sort_order": SortOrder(sort_order), "page": 1})

    def toggle_sort_order(self) -> "RecordQuery":
        flipped = SortOrder.DESC if self.sort_order == SortOrder.ASC else SortOrder.ASC
        return self.with_sort_order(flipped)

    def with_page(self, page: int) -> "RecordQuery":
        """Pages below 1 become 1; the upper bound is applied when the query runs."""
        return self.model_copy(update={"page": max(page, 1)})


class QueryResult(BaseModel):
    """One rendered page of the record list."""

    model_config = ConfigDict(frozen=True)

    records: list[HealthRecord]
    page_info: PageInfo
    query: RecordQuery
    matched_records: int = Field(ge=0, description="Records left after the search filter")


def run_query(
    records: Iterable[HealthRecord], query: RecordQuery, page_size: int = DEFAULT_PAGE_SIZE
) -> QueryResult:
    """Filter, sort and paginate in one pass."""
    view = sort_records(filter_records(records, query.search_term), query.sort_by, query.sort_order)
    page, page_info = paginate_records(view, query.page, page_size)
    return QueryResult(
        records=page,
        page_info=page_info,
        query=query.with_page(page_info.current_page),
        matched_records=len(view),
    )


class QueryPipeline:
    """
    Runs queries against one immutable snapshot of records.

    The filtered and sorted view is cached per (search, sort field, order), so
    moving between pages never re-filters or re-sorts.
    """

    def __init__(
        self, records: Iterable[HealthRecord] = (), page_size: int = DEFAULT_PAGE_SIZE
    ) -> None:
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.page_size = page_size
        self.logger = logger.bind(component="query_pipeline")
        self._records: tuple[HealthRecord, ...] = tuple(records)
        self._view_key: tuple[str, SortField, SortOrder] | None = None
        self._view: tuple[HealthRecord, ...] = ()
        self.view_builds = 0

    @property
    def records(self) -> tuple[HealthRecord, ...]:
        return self._records

    def replace_records(self, records: Iterable[HealthRecord]) -> None:
        """Swap in a new snapshot; the cached view is rebuilt on the next query."""
        self._records = tuple(records)
        self._view_key = None

    def _view_for(self, query: RecordQuery) -> tuple[HealthRecord, ...]:
        if query.view_key != self._view_key:
            filtered = filter_records(self._records, query.search_term)
            self._view = tuple(sort_records(filtered, query.sort_by, query.sort_order))
            self._view_key = query.view_key
            self.view_builds += 1
            self.logger.debug(
                "record_view_built",
                search_term=query.search_term,
                sort_by=query.sort_by.value,
                sort_order=query.sort_order.value,
                matched=len(self._view),
                total=len(self._records),
            )
        return self._view

    def execute(self, query: RecordQuery) -> QueryResult:
        view = self._view_for(query)
        page, page_info = paginate_records(view, query.page, self.page_size)
        return QueryResult(
            records=page,
            page_info=page_info,
            query=query.with_page(page_info.current_page),
            matched_records=len(view),
        )
