"""
Health metric calculations and display mappings.

Pure functions with fail-soft semantics: missing or invalid input produces a
sentinel (None, ``BMICategory.UNKNOWN``, gray) instead of raising.
"""

from datetime import datetime
from typing import Any

from healthtrack.domain.models import BMICategory, BMIReading, HealthRecord, HealthScoreCategory
from healthtrack.services.validation import parse_number

GRAY = "#6B7280"
BLUE = "#3B82F6"
GREEN = "#10B981"
AMBER = "#F59E0B"
ORANGE = "#F97316"
RED = "#EF4444"

BMI_COLORS: dict[BMICategory, str] = {
    BMICategory.UNDERWEIGHT: BLUE,
    BMICategory.NORMAL: GREEN,
    BMICategory.OVERWEIGHT: AMBER,
    BMICategory.OBESE: RED,
}


def calculate_bmi(weight: Any, height: Any) -> float | None:
    """
    Body Mass Index from weight in kilograms and height in centimeters.

    Returns None when either input is missing, non-numeric or not positive.
    """
    weight_kg = parse_number(weight)
    height_cm = parse_number(height)
    if weight_kg is None or height_cm is None or weight_kg <= 0 or height_cm <= 0:
        return None

    height_m = height_cm / 100
    return round(weight_kg / (height_m**2), 2)


def get_bmi_category(bmi: Any) -> BMICategory:
    """Classify BMI; each bracket excludes its upper bound."""
    value = parse_number(bmi)
    if value is None or value <= 0:
        return BMICategory.UNKNOWN

    if value < 18.5:
        return BMICategory.UNDERWEIGHT
    if value < 25:
        return BMICategory.NORMAL
    if value < 30:
        return BMICategory.OVERWEIGHT
    return BMICategory.OBESE


def get_bmi_color(category: Any) -> str:
    try:
        return BMI_COLORS.get(BMICategory(category), GRAY)
    except ValueError:
        return GRAY


def get_health_score_category(score: Any) -> HealthScoreCategory:
    value = parse_number(score)
    if value is None:
        return HealthScoreCategory.POOR

    if value >= 80:
        return HealthScoreCategory.EXCELLENT
    if value >= 65:
        return HealthScoreCategory.GOOD
    if value >= 50:
        return HealthScoreCategory.FAIR
    return HealthScoreCategory.POOR


def get_health_score_color(score: Any) -> str:
    return {
        HealthScoreCategory.EXCELLENT: GREEN,
        HealthScoreCategory.GOOD: AMBER,
        HealthScoreCategory.FAIR: ORANGE,
        HealthScoreCategory.POOR: RED,
    }[get_health_score_category(score)]


def resolve_bmi(record: HealthRecord) -> float | None:
    """Stored BMI value when the record carries one, else computed from weight and height."""
    if record.bmi is not None and record.bmi.value is not None:
        return record.bmi.value
    return calculate_bmi(record.weight, record.height)


def bmi_reading(record: HealthRecord) -> BMIReading:
    """BMI value and category; a stored category wins over the derived one."""
    value = resolve_bmi(record)
    category = record.bmi.category if record.bmi is not None else None
    if not category:
        category = get_bmi_category(value).value
    return BMIReading(value=value, category=category)


def format_date(value: datetime | str | None) -> str:
    """Render a timestamp like 'Oct 5, 2026, 02:30 PM'. Empty for missing input."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return ""
    if not isinstance(value, datetime):
        return ""
    return f"{value:%b} {value.day}, {value:%Y, %I:%M %p}"
