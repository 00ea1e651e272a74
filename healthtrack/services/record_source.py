"""
Boundary between the dashboard core and the record storage service.

Key patterns:
- Protocol-based dependency injection for the storage collaborator
- Generic Result type so expected failures stay visible in signatures
- Structured logging shared by every service module
"""

import logging
from typing import Generic, Protocol, TypeVar

import structlog

from healthtrack.config import LoggingConfig
from healthtrack.domain.models import HealthRecord, StatsSummary

_SHARED_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]

# Configure structured logging (production-ready observability)
structlog.configure(
    processors=[*_SHARED_PROCESSORS, structlog.processors.JSONRenderer()],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


def configure_logging(config: LoggingConfig) -> None:
    """Apply level and renderer from configuration."""
    logging.basicConfig(format="%(message)s", level=config.level, force=True)
    renderer = (
        structlog.dev.ConsoleRenderer()
        if config.format == "console"
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[*_SHARED_PROCESSORS, renderer],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Generic Result type for explicit error handling
ValueT = TypeVar("ValueT")
ErrorT = TypeVar("ErrorT", bound=BaseException)


class Result(Generic[ValueT, ErrorT]):
    """
    Explicit error handling without exceptions for expected failures.

    Why: Makes error paths visible in type system, forces handling decisions.
    When to use: When failure is expected business logic, not exceptional.
    """

    def __init__(self, value: ValueT | None = None, error: ErrorT | None = None) -> None:
        if value is not None and error is not None:
            raise ValueError("Result cannot have both value and error")
        if value is None and error is None:
            raise ValueError("Result must have either value or error")
        self._value: ValueT | None = value
        self._error: ErrorT | None = error

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT, ErrorT]":
        return cls(value=value)

    @classmethod
    def err(cls, error: ErrorT) -> "Result[ValueT, ErrorT]":
        return cls(error=error)

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    def unwrap(self) -> ValueT:
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore

    def unwrap_err(self) -> ErrorT:
        if self._error is None:
            raise ValueError("Called unwrap_err() on an Ok value")
        return self._error


class RecordSource(Protocol):
    """
    Protocol for the service that stores health records.

    The dashboard only ever reads complete snapshots through it; creating and
    editing records happens outside the core.
    """

    source_name: str

    async def fetch_records(self, limit: int) -> Result[list[HealthRecord], Exception]:
        """Fetch up to ``limit`` records, newest first."""
        ...

    async def fetch_stats(self) -> Result[StatsSummary, Exception]:
        """Fetch the aggregate statistics summary."""
        ...

    async def delete_record(self, record_id: str) -> Result[str, Exception]:
        """Delete one record; the Ok value is the deleted id."""
        ...
