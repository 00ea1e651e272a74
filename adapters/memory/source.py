"""
In-memory record source implementing the RecordSource protocol.

Stands in for the storage service in demos and tests. It behaves the way the
service does from the dashboard's point of view:
- New records get an id, a UTC creation time and a BMI reading
- Records come back newest first
- Statistics are aggregated over everything currently stored
"""

from collections import Counter
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime, timedelta
from statistics import mean
from typing import Any
from uuid import uuid4

import structlog

from healthtrack.domain.models import (
    AgeBucket,
    BMIBucket,
    BMICategory,
    BMIReading,
    Gender,
    GenderBucket,
    HealthRecord,
    HealthScoreStats,
    StatsSummary,
)
from healthtrack.services.metrics import calculate_bmi, get_bmi_category
from healthtrack.services.record_source import Result

logger = structlog.get_logger(__name__)

# (upper bound inclusive, label)
AGE_GROUPS = (
    (17, "Under 18"),
    (30, "18-30"),
    (45, "31-45"),
    (60, "46-60"),
)
OLDEST_AGE_GROUP = "60+"


class RecordNotFoundError(LookupError):
    """Raised (as a Result error) when deleting an id that is not stored."""


def age_group(age: int | None) -> str | None:
    if age is None:
        return None
    for upper, label in AGE_GROUPS:
        if age <= upper:
            return label
    return OLDEST_AGE_GROUP


def build_stats(records: Iterable[HealthRecord]) -> StatsSummary:
    """Aggregate the statistics summary the dashboard's stats panel expects."""
    records = list(records)

    bmi_counts = Counter(
        (record.bmi.category if record.bmi else None) or BMICategory.UNKNOWN.value
        for record in records
    )
    age_counts = Counter(group for record in records if (group := age_group(record.age)))
    gender_counts = Counter(record.gender for record in records if record.gender)
    scores = [record.health_score for record in records if record.health_score is not None]

    bmi_order = [category.value for category in BMICategory]
    age_order = [label for _, label in AGE_GROUPS] + [OLDEST_AGE_GROUP]
    gender_order = [gender.value for gender in Gender]

    return StatsSummary(
        total_records=len(records),
        bmi_distribution=tuple(
            BMIBucket(category=category, count=bmi_counts[category])
            for category in sorted(bmi_counts, key=_catalog_position(bmi_order))
        ),
        age_distribution=tuple(
            AgeBucket(group=group, count=age_counts[group])
            for group in sorted(age_counts, key=_catalog_position(age_order))
        ),
        gender_distribution=tuple(
            GenderBucket(gender=gender, count=gender_counts[gender])
            for gender in sorted(gender_counts, key=_catalog_position(gender_order))
        ),
        health_score_stats=HealthScoreStats(
            average_score=mean(scores) if scores else None,
            min_score=min(scores, default=None),
            max_score=max(scores, default=None),
        ),
    )


def _catalog_position(order: list[str]) -> Callable[[str], tuple[int, str]]:
    def position(label: str) -> tuple[int, str]:
        return (order.index(label) if label in order else len(order), label)

    return position


class InMemoryRecordSource:
    """Dictionary-backed record source."""

    def __init__(
        self,
        source_name: str = "memory",
        records: Iterable[HealthRecord | Mapping[str, Any]] = (),
    ) -> None:
        self.source_name = source_name
        self.logger = logger.bind(source=source_name)
        self._records: dict[str, HealthRecord] = {}
        for record in records:
            self.add_record(record)

    def __len__(self) -> int:
        return len(self._records)

    def add_record(self, payload: HealthRecord | Mapping[str, Any]) -> HealthRecord:
        """Store a record, filling in what the storage service would assign."""
        record = HealthRecord.coerce(payload)

        bmi = record.bmi
        if bmi is None or bmi.value is None:
            value = calculate_bmi(record.weight, record.height)
            bmi = BMIReading(value=value, category=get_bmi_category(value).value)

        stored = record.model_copy(
            update={
                "record_id": record.record_id or uuid4().hex,
                "created_at": record.created_at or datetime.now(UTC),
                "bmi": bmi,
            }
        )
        self._records[stored.record_id] = stored  # type: ignore[index]
        self.logger.info("record_stored", record_id=stored.record_id)
        return stored

    async def fetch_records(self, limit: int) -> Result[list[HealthRecord], Exception]:
        records = sorted(
            self._records.values(),
            key=lambda record: record.created_at or datetime.min.replace(tzinfo=UTC),
            reverse=True,
        )[:limit]
        self.logger.info("records_fetched", count=len(records), limit=limit)
        return Result.ok(records)

    async def fetch_stats(self) -> Result[StatsSummary, Exception]:
        return Result.ok(build_stats(self._records.values()))

    async def delete_record(self, record_id: str) -> Result[str, Exception]:
        if record_id not in self._records:
            self.logger.warning("record_not_found", record_id=record_id)
            return Result.err(RecordNotFoundError(f"Health record {record_id} not found"))

        del self._records[record_id]
        self.logger.info("record_deleted", record_id=record_id)
        return Result.ok(record_id)


def _habits(
    frequency: str, smoking: str, hours: float, water: float, exercise_type: str = "Walking"
) -> dict[str, Any]:
    return {
        "exercise": {"frequency": frequency, "type": exercise_type},
        "smoking": smoking,
        "alcohol": "Socially",
        "sleep": {"hoursPerNight": hours, "quality": "Good"},
        "diet": "Omnivore",
        "waterIntake": water,
    }


# name, age, gender, weight kg, height cm, issues, habits, health score
SAMPLE_PEOPLE = (
    ("Alice Johnson", 34, "Female", 62.0, 168.0, ["None"],
     _habits("3-4 times/week", "Never", 8, 9, "Yoga"), 86),
    ("Bob Smith", 58, "Male", 95.0, 178.0, ["Hypertension"],
     _habits("Rarely", "Occasional", 6.5, 5), 58),
    ("Carlos Diaz", 71, "Male", 102.0, 175.0, ["Diabetes", "High Cholesterol"],
     _habits("Never", "Regular", 5, 4), 35),
    ("Dana Lee", 26, "Female", 49.0, 170.0, ["Anxiety"],
     _habits("1-2 times/week", "Never", 7, 6, "Cardio"), 70),
    ("Evan Brooks", 45, "Male", 80.0, 183.0, ["None"],
     _habits("5+ times/week", "Former Smoker", 7.5, 10, "Mixed"), 82),
    ("Fatima Khan", 39, "Female", 74.0, 160.0, ["Asthma"],
     _habits("Rarely", "Never", 6, 7), 61),
    ("Grace Kim", 66, "Other", 68.0, 165.0, ["Arthritis", "Osteoporosis"],
     _habits("1-2 times/week", "Never", 9, 8), 64),
    ("Henry Walsh", 52, "Male", 88.0, 172.0, ["None"],
     _habits("Never", "Never", 11, 8, "None"), 55),
)  # fmt: skip


def sample_records(now: datetime | None = None) -> list[dict[str, Any]]:
    """A small, varied data set in the storage service's wire format, newest first."""
    now = now or datetime.now(UTC)
    return [
        {
            "name": name,
            "age": age,
            "gender": gender,
            "weight": weight,
            "height": height,
            "email": f"{name.split()[0].lower()}@example.com",
            "contact": f"+1555010{index:04d}",
            "existingHealthIssues": issues,
            "lifestyleHabits": habits,
            "notes": "",
            "healthScore": score,
            "createdAt": (now - timedelta(days=index)).isoformat(),
        }
        for index, (name, age, gender, weight, height, issues, habits, score) in enumerate(
            SAMPLE_PEOPLE
        )
    ]
