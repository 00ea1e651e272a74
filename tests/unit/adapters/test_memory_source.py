"""Tests for the in-memory record source."""

from datetime import UTC, datetime

import pytest

from adapters.memory import InMemoryRecordSource, RecordNotFoundError, build_stats, sample_records
from adapters.memory.source import age_group
from healthtrack.domain.models import HealthRecord
from healthtrack.services.risk import get_risk_level

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


@pytest.fixture
def source() -> InMemoryRecordSource:
    return InMemoryRecordSource(records=sample_records(now=NOW))


class TestAddRecord:
    def test_assigns_id_timestamp_and_bmi(self) -> None:
        source = InMemoryRecordSource()
        stored = source.add_record({"name": "New", "weight": 70, "height": 175})

        assert stored.record_id
        assert stored.created_at is not None
        assert stored.created_at.tzinfo is not None
        assert stored.bmi is not None
        assert (stored.bmi.value, stored.bmi.category) == (22.86, "Normal")
        assert len(source) == 1

    def test_keeps_supplied_id_and_bmi(self) -> None:
        source = InMemoryRecordSource()
        stored = source.add_record(
            {"_id": "fixed", "bmi": {"value": 31, "category": "Obese"}, "createdAt": NOW}
        )
        assert stored.record_id == "fixed"
        assert stored.created_at == NOW
        assert stored.bmi is not None and stored.bmi.category == "Obese"

    def test_unknown_bmi_without_measurements(self) -> None:
        stored = InMemoryRecordSource().add_record({"name": "No Measurements"})
        assert stored.bmi is not None
        assert stored.bmi.value is None
        assert stored.bmi.category == "Unknown"


class TestFetch:
    async def test_records_come_back_newest_first(self, source: InMemoryRecordSource) -> None:
        result = await source.fetch_records(limit=100)
        assert result.is_ok()
        names = [record.name for record in result.unwrap()]
        assert names[0] == "Alice Johnson"
        assert names[-1] == "Henry Walsh"

    async def test_limit_is_respected(self, source: InMemoryRecordSource) -> None:
        result = await source.fetch_records(limit=3)
        assert len(result.unwrap()) == 3

    async def test_empty_source_returns_empty_list(self) -> None:
        result = await InMemoryRecordSource().fetch_records(limit=10)
        assert result.is_ok()
        assert result.unwrap() == []

    async def test_stats_cover_stored_records(self, source: InMemoryRecordSource) -> None:
        stats = (await source.fetch_stats()).unwrap()
        assert stats.total_records == 8
        assert {b.category: b.count for b in stats.bmi_distribution} == {
            "Underweight": 1,
            "Normal": 3,
            "Overweight": 3,
            "Obese": 1,
        }


class TestDelete:
    async def test_delete_known_record(self, source: InMemoryRecordSource) -> None:
        target = (await source.fetch_records(limit=1)).unwrap()[0].record_id
        assert target is not None

        result = await source.delete_record(target)

        assert result.unwrap() == target
        assert len(source) == 7

    async def test_delete_unknown_record_is_an_error(self, source: InMemoryRecordSource) -> None:
        result = await source.delete_record("nope")
        assert result.is_err()
        assert isinstance(result.unwrap_err(), RecordNotFoundError)
        with pytest.raises(RecordNotFoundError):
            result.unwrap()
        assert len(source) == 8


class TestBuildStats:
    @pytest.mark.parametrize(
        "age,group",
        [(None, None), (16, "Under 18"), (17, "Under 18"), (18, "18-30"), (30, "18-30"),
         (31, "31-45"), (60, "46-60"), (61, "60+")],
    )  # fmt: skip
    def test_age_groups(self, age: int | None, group: str | None) -> None:
        assert age_group(age) == group

    def test_buckets_follow_catalog_order(self) -> None:
        records = [
            HealthRecord.model_validate(raw)
            for raw in (
                {"gender": "Other", "age": 70, "bmi": {"category": "Obese"}},
                {"gender": "Male", "age": 20, "bmi": {"category": "Normal"}},
                {"gender": "Female", "age": 40, "bmi": {"category": "Underweight"}},
            )
        ]
        stats = build_stats(records)
        assert [b.category for b in stats.bmi_distribution] == ["Underweight", "Normal", "Obese"]
        assert [b.group for b in stats.age_distribution] == ["18-30", "31-45", "60+"]
        assert [b.gender for b in stats.gender_distribution] == ["Male", "Female", "Other"]

    def test_health_score_summary(self) -> None:
        records = [HealthRecord(health_score=score) for score in (40, 60, 95)]
        records.append(HealthRecord())
        scores = build_stats(records).health_score_stats
        assert scores.average_score == 65
        assert (scores.min_score, scores.max_score) == (40, 95)

    def test_empty_input(self) -> None:
        stats = build_stats([])
        assert stats.total_records == 0
        assert stats.health_score_stats.average_score is None


def test_sample_population_spans_every_risk_level() -> None:
    records = [HealthRecord.model_validate(raw) for raw in sample_records(now=NOW)]
    levels = {record.name: get_risk_level(record).level.value for record in records}
    assert levels == {
        "Alice Johnson": "Low",
        "Bob Smith": "High",
        "Carlos Diaz": "High",
        "Dana Lee": "Low",
        "Evan Brooks": "Low",
        "Fatima Khan": "Medium",
        "Grace Kim": "Medium",
        "Henry Walsh": "High",
    }
