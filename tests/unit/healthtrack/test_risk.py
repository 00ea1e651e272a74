"""
Tests for risk scoring and recommendation rules.

Covers:
- Each additive risk factor in isolation
- Level boundaries and determinism
- Monotonicity of the score (property-based)
- Recommendation order, co-occurrence and fail-soft inputs
- Record card assembly
"""

from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st

from healthtrack.domain.models import HealthIssue, HealthRecord, RiskLevel
from healthtrack.services.risk import (
    build_record_card,
    calculate_risk_score,
    generate_recommendations,
    get_risk_level,
    risk_level_for_score,
)


def make_record(
    bmi: float | None = 22.0,
    age: int | None = 30,
    smoking: str | None = "Never",
    exercise: str | None = "3-4 times/week",
    sleep_hours: float | None = 8,
    water: float | None = 8,
    issues: list[str] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """A wire-format record that scores zero unless a factor is overridden."""
    return {
        "name": "Test Person",
        "age": age,
        "bmi": {"value": bmi},
        "existingHealthIssues": issues if issues is not None else ["None"],
        "lifestyleHabits": {
            "smoking": smoking,
            "exercise": {"frequency": exercise},
            "sleep": {"hoursPerNight": sleep_hours},
            "waterIntake": water,
        },
        **extra,
    }


class TestRiskFactors:
    def test_baseline_record_scores_zero(self) -> None:
        assert calculate_risk_score(make_record()) == 0

    @pytest.mark.parametrize(
        "bmi,points", [(32, 3), (30, 3), (27, 2), (25, 2), (17, 1), (18.5, 0), (None, 0)]
    )
    def test_bmi_points(self, bmi: float | None, points: int) -> None:
        assert calculate_risk_score(make_record(bmi=bmi)) == points

    @pytest.mark.parametrize(
        "age,points", [(66, 2), (70, 2), (65, 1), (51, 1), (50, 0), (None, 0)]
    )
    def test_age_points(self, age: int | None, points: int) -> None:
        assert calculate_risk_score(make_record(age=age)) == points

    @pytest.mark.parametrize(
        "smoking,points",
        [("Regular", 3), ("Occasional", 1), ("Former Smoker", 0), ("Never", 0), (None, 0)],
    )
    def test_smoking_points(self, smoking: str | None, points: int) -> None:
        assert calculate_risk_score(make_record(smoking=smoking)) == points

    @pytest.mark.parametrize(
        "exercise,points", [("Never", 2), ("Rarely", 1), ("1-2 times/week", 0), (None, 0)]
    )
    def test_exercise_points(self, exercise: str | None, points: int) -> None:
        assert calculate_risk_score(make_record(exercise=exercise)) == points

    @pytest.mark.parametrize(
        "hours,points", [(5.5, 1), (6, 0), (10, 0), (10.5, 1), (0, 1), (None, 0)]
    )
    def test_sleep_points(self, hours: float | None, points: int) -> None:
        assert calculate_risk_score(make_record(sleep_hours=hours)) == points

    @pytest.mark.parametrize(
        "issues,points",
        [
            (["None"], 0),
            ([], 0),
            (["Diabetes"], 1),
            (["Diabetes", "Asthma", "Cancer"], 3),
            (["None", "Diabetes"], 2),
        ],
    )
    def test_health_issue_points(self, issues: list[str], points: int) -> None:
        assert calculate_risk_score(make_record(issues=issues)) == points

    def test_missing_lifestyle_is_tolerated(self) -> None:
        assert calculate_risk_score({"name": "Sparse", "age": 40}) == 0

    @pytest.mark.parametrize(
        "raw,points",
        [
            ({"age": "", "bmi": {"value": 32}}, 3),
            ({"age": 66.7}, 2),
            ({"age": "70"}, 2),
            ({"age": "old"}, 0),
            ({"weight": "heavy", "height": 170}, 0),
            ({"bmi": {"value": "n/a"}}, 0),
            ({"lifestyleHabits": {"sleep": {"hoursPerNight": ""}}}, 0),
            ({"lifestyleHabits": {"sleep": {"hoursPerNight": "4"}}}, 1),
            ({"lifestyleHabits": {"waterIntake": "lots"}}, 0),
            ({"healthScore": "great"}, 0),
        ],
    )
    def test_malformed_numbers_count_as_absent(self, raw: dict[str, Any], points: int) -> None:
        assert calculate_risk_score(raw) == points
        assessment = get_risk_level(raw)
        assert assessment.score == points
        card = build_record_card(raw)
        assert card.risk == assessment
        assert isinstance(generate_recommendations(raw), list)

    def test_fractional_age_is_truncated(self) -> None:
        assert HealthRecord.model_validate({"age": 45.9}).age == 45


class TestRiskLevel:
    @pytest.mark.parametrize(
        "score,level",
        [(0, RiskLevel.LOW), (2, RiskLevel.LOW), (3, RiskLevel.MEDIUM), (5, RiskLevel.MEDIUM),
         (6, RiskLevel.HIGH), (14, RiskLevel.HIGH)],
    )  # fmt: skip
    def test_level_boundaries(self, score: int, level: RiskLevel) -> None:
        assessment = risk_level_for_score(score)
        assert assessment.level == level
        assert assessment.score == score

    def test_colors(self) -> None:
        assert risk_level_for_score(0).color == "#10B981"
        assert risk_level_for_score(3).color == "#F59E0B"
        assert risk_level_for_score(6).color == "#EF4444"

    def test_end_to_end_example(self) -> None:
        record = {
            "name": "A",
            "age": 70,
            "gender": "Male",
            "bmi": {"value": 32},
            "healthScore": 40,
            "existingHealthIssues": ["None"],
            "lifestyleHabits": {
                "smoking": "Never",
                "exercise": {"frequency": "Never"},
                "sleep": {"hoursPerNight": 5},
                "waterIntake": 3,
            },
        }
        assessment = get_risk_level(record)
        # 3 obese + 2 age over 65 + 2 never exercises + 1 short sleep
        assert assessment.score == 8
        assert assessment.level == RiskLevel.HIGH

    def test_is_deterministic(self) -> None:
        record = HealthRecord.model_validate(make_record(bmi=27, age=55, smoking="Occasional"))
        assert get_risk_level(record) == get_risk_level(record)


ISSUES = [issue.value for issue in HealthIssue if issue is not HealthIssue.NONE]


@given(
    bmi=st.one_of(st.none(), st.floats(min_value=10, max_value=60)),
    age=st.one_of(st.none(), st.integers(min_value=1, max_value=120)),
    smoking=st.sampled_from(["Never", "Former Smoker", "Occasional", "Regular"]),
    exercise=st.sampled_from(["Never", "Rarely", "1-2 times/week", "5+ times/week"]),
    sleep=st.one_of(st.none(), st.floats(min_value=0, max_value=24)),
    issues=st.lists(st.sampled_from(ISSUES), max_size=5, unique=True),
    extra_issue=st.sampled_from(ISSUES),
)
def test_adding_a_health_issue_never_lowers_the_score(
    bmi: float | None,
    age: int | None,
    smoking: str,
    exercise: str,
    sleep: float | None,
    issues: list[str],
    extra_issue: str,
) -> None:
    base = make_record(bmi=bmi, age=age, smoking=smoking, exercise=exercise, sleep_hours=sleep,
                       issues=issues)  # fmt: skip
    more = make_record(bmi=bmi, age=age, smoking=smoking, exercise=exercise, sleep_hours=sleep,
                       issues=[*issues, extra_issue])  # fmt: skip
    assert calculate_risk_score(more) >= calculate_risk_score(base)


@given(age=st.integers(min_value=1, max_value=119))
def test_score_is_monotonic_in_age(age: int) -> None:
    older = calculate_risk_score(make_record(age=age + 1))
    assert older >= calculate_risk_score(make_record(age=age))


@given(bmi=st.floats(min_value=18.5, max_value=59))
def test_score_is_monotonic_in_bmi_above_underweight(bmi: float) -> None:
    heavier = calculate_risk_score(make_record(bmi=bmi + 1))
    assert heavier >= calculate_risk_score(make_record(bmi=bmi))


class TestRecommendations:
    def test_all_five_rules_in_order(self) -> None:
        record = make_record(bmi=32, exercise="Never", smoking="Regular", sleep_hours=5, water=4)
        recommendations = generate_recommendations(record)
        assert [r.type for r in recommendations] == [
            "weight",
            "exercise",
            "smoking",
            "sleep",
            "hydration",
        ]
        assert [r.priority for r in recommendations] == ["high", "high", "high", "medium", "medium"]

    def test_healthy_record_gets_none(self) -> None:
        assert generate_recommendations(make_record()) == []

    def test_underweight_gets_nutritionist_advice(self) -> None:
        (recommendation,) = generate_recommendations(make_record(bmi=17))
        assert recommendation.type == "weight"
        assert recommendation.priority == "medium"
        assert "nutritionist" in recommendation.text

    def test_former_smoker_still_gets_smoking_advice(self) -> None:
        types = [r.type for r in generate_recommendations(make_record(smoking="Former Smoker"))]
        assert types == ["smoking"]

    @pytest.mark.parametrize(
        "overrides,expected",
        [
            ({"sleep_hours": 6.9}, ["sleep"]),
            ({"sleep_hours": 7}, []),
            ({"water": 7}, ["hydration"]),
            ({"exercise": "Rarely"}, ["exercise"]),
        ],
    )
    def test_thresholds(self, overrides: dict[str, Any], expected: list[str]) -> None:
        assert [r.type for r in generate_recommendations(make_record(**overrides))] == expected

    def test_missing_inputs_trigger_nothing(self) -> None:
        record = make_record(bmi=None, smoking=None, exercise=None, sleep_hours=None, water=None)
        assert generate_recommendations(record) == []

    def test_each_call_returns_a_fresh_list(self) -> None:
        record = HealthRecord.model_validate(make_record(bmi=32))
        first = generate_recommendations(record)
        first.clear()
        assert len(generate_recommendations(record)) == 1


class TestRecordCard:
    def test_card_collects_display_values(self) -> None:
        card = build_record_card(
            make_record(
                bmi=None,
                weight=95,
                height=178,
                healthScore=58,
                createdAt="2026-03-01T08:00:00Z",
                _id="rec-1",
            )
        )
        assert card.record.record_id == "rec-1"
        assert card.bmi.value == 29.98
        assert card.bmi.category == "Overweight"
        assert card.bmi_color == "#F59E0B"
        assert card.risk.level == RiskLevel.LOW
        assert card.risk.score == 2
        assert [r.type for r in card.recommendations] == ["weight"]
        assert card.health_score_category is not None
        assert card.health_score_category.value == "Fair"
        assert card.created_label == "Mar 1, 2026, 08:00 AM"

    def test_card_without_health_score(self) -> None:
        card = build_record_card(make_record())
        assert card.health_score_category is None
        assert card.health_score_color is None

    def test_card_serializes_to_wire_names(self) -> None:
        dumped = build_record_card(make_record(_id="rec-2")).model_dump(by_alias=True)
        assert dumped["record"]["_id"] == "rec-2"
        assert "bmiColor" in dumped
        assert dumped["risk"]["level"] == "Low"
