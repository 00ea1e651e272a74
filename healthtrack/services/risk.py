"""
Risk scoring and lifestyle recommendations.

Key rules:
- Risk points are additive and independent: no factor suppresses another
- Recommendations come from a fixed, ordered rule list
- Missing inputs contribute nothing (fail-soft)

Heuristic thresholds only; this is not a clinically validated model.
"""

from collections.abc import Mapping
from typing import Any

import structlog

from healthtrack.domain.models import (
    BMICategory,
    ExerciseFrequency,
    HealthIssue,
    HealthRecord,
    Recommendation,
    RecordCard,
    RiskAssessment,
    RiskLevel,
    SmokingStatus,
)
from healthtrack.services.metrics import (
    AMBER,
    GREEN,
    RED,
    bmi_reading,
    format_date,
    get_bmi_category,
    get_bmi_color,
    get_health_score_category,
    get_health_score_color,
    resolve_bmi,
)
from healthtrack.services.validation import parse_number

logger = structlog.get_logger(__name__)

BMI_POINTS = {
    BMICategory.OBESE: 3,
    BMICategory.OVERWEIGHT: 2,
    BMICategory.UNDERWEIGHT: 1,
}
SMOKING_POINTS = {
    SmokingStatus.REGULAR.value: 3,
    SmokingStatus.OCCASIONAL.value: 1,
}
EXERCISE_POINTS = {
    ExerciseFrequency.NEVER.value: 2,
    ExerciseFrequency.RARELY.value: 1,
}

HIGH_RISK_THRESHOLD = 6
MEDIUM_RISK_THRESHOLD = 3

RecordLike = HealthRecord | Mapping[str, Any]


def _age_points(age: int | None) -> int:
    if age is None:
        return 0
    if age > 65:
        return 2
    if age > 50:
        return 1
    return 0


def _sleep_points(hours: Any) -> int:
    value = parse_number(hours)
    if value is None:
        return 0
    return 1 if value < 6 or value > 10 else 0


def _health_issue_points(issues: tuple[str, ...]) -> int:
    if not issues or issues == (HealthIssue.NONE.value,):
        return 0
    return len(issues)


def calculate_risk_score(record: RecordLike) -> int:
    """Sum of independent risk points for one record."""
    record = HealthRecord.coerce(record)
    habits = record.lifestyle_habits

    return (
        BMI_POINTS.get(get_bmi_category(resolve_bmi(record)), 0)
        + _age_points(record.age)
        + SMOKING_POINTS.get(habits.smoking or "", 0)
        + EXERCISE_POINTS.get(habits.exercise.frequency or "", 0)
        + _sleep_points(habits.sleep.hours_per_night)
        + _health_issue_points(record.existing_health_issues)
    )


def risk_level_for_score(score: int) -> RiskAssessment:
    if score >= HIGH_RISK_THRESHOLD:
        return RiskAssessment(level=RiskLevel.HIGH, color=RED, score=score)
    if score >= MEDIUM_RISK_THRESHOLD:
        return RiskAssessment(level=RiskLevel.MEDIUM, color=AMBER, score=score)
    return RiskAssessment(level=RiskLevel.LOW, color=GREEN, score=score)


def get_risk_level(record: RecordLike) -> RiskAssessment:
    return risk_level_for_score(calculate_risk_score(record))


def _weight_recommendation(record: HealthRecord) -> Recommendation | None:
    category = get_bmi_category(resolve_bmi(record))
    if category in (BMICategory.OVERWEIGHT, BMICategory.OBESE):
        return Recommendation(
            type="weight",
            priority="high",
            text="Consider a balanced diet and regular exercise to achieve healthy weight",
            icon="⚖️",
        )
    if category == BMICategory.UNDERWEIGHT:
        return Recommendation(
            type="weight",
            priority="medium",
            text="Consider consulting a nutritionist to gain healthy weight",
            icon="🍎",
        )
    return None


def _exercise_recommendation(record: HealthRecord) -> Recommendation | None:
    if record.lifestyle_habits.exercise.frequency not in EXERCISE_POINTS:
        return None
    return Recommendation(
        type="exercise",
        priority="high",
        text="Aim for at least 150 minutes of moderate exercise per week",
        icon="🏃‍♂️",
    )


def _smoking_recommendation(record: HealthRecord) -> Recommendation | None:
    smoking = record.lifestyle_habits.smoking
    if not smoking or smoking == SmokingStatus.NEVER.value:
        return None
    return Recommendation(
        type="smoking",
        priority="high",
        text="Consider quitting smoking for better health",
        icon="🚭",
    )


def _sleep_recommendation(record: HealthRecord) -> Recommendation | None:
    hours = parse_number(record.lifestyle_habits.sleep.hours_per_night)
    if hours is None or hours >= 7:
        return None
    return Recommendation(
        type="sleep",
        priority="medium",
        text="Aim for 7-9 hours of quality sleep per night",
        icon="😴",
    )


def _hydration_recommendation(record: HealthRecord) -> Recommendation | None:
    glasses = parse_number(record.lifestyle_habits.water_intake)
    if glasses is None or glasses >= 8:
        return None
    return Recommendation(
        type="hydration",
        priority="medium",
        text="Increase daily water intake to at least 8 glasses",
        icon="💧",
    )


# Evaluation order is the display order
RECOMMENDATION_RULES = (
    _weight_recommendation,
    _exercise_recommendation,
    _smoking_recommendation,
    _sleep_recommendation,
    _hydration_recommendation,
)


def generate_recommendations(record: RecordLike) -> list[Recommendation]:
    """Evaluate every rule independently and keep the ones that match."""
    record = HealthRecord.coerce(record)
    return [
        recommendation
        for rule in RECOMMENDATION_RULES
        if (recommendation := rule(record)) is not None
    ]


def build_record_card(record: RecordLike) -> RecordCard:
    """Derive every display value for one record."""
    record = HealthRecord.coerce(record)
    bmi = bmi_reading(record)
    risk = get_risk_level(record)
    recommendations = generate_recommendations(record)

    has_score = record.health_score is not None
    card = RecordCard(
        record=record,
        bmi=bmi,
        bmi_color=get_bmi_color(bmi.category),
        risk=risk,
        recommendations=tuple(recommendations),
        health_score_category=get_health_score_category(record.health_score) if has_score else None,
        health_score_color=get_health_score_color(record.health_score) if has_score else None,
        created_label=format_date(record.created_at),
    )

    logger.debug(
        "record_card_built",
        record_id=record.record_id,
        risk_level=risk.level.value,
        risk_score=risk.score,
        recommendation_count=len(recommendations),
    )
    return card
