"""
Domain models for personal health records.

These models represent the core business concepts and are framework-agnostic.
They use Pydantic for validation but could be swapped to dataclasses if needed.

Inbound models mirror the storage service's camelCase wire format and accept
snake_case field names too. Every inbound field is optional: a missing value is
``None`` (absent), never a silent zero.
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel

from healthtrack.domain.parsing import parse_number


def _whole_number(raw: Any) -> int | None:
    value = parse_number(raw)
    return int(value) if value is not None else None


# Unparseable input reads as absent instead of failing the whole record
Number = Annotated[float | None, BeforeValidator(parse_number)]
WholeNumber = Annotated[int | None, BeforeValidator(_whole_number)]


class WireModel(BaseModel):
    """Immutable model that reads and writes the camelCase wire format."""

    model_config = ConfigDict(
        frozen=True,  # Snapshots are read-only input
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("*", mode="before")
    @classmethod
    def null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        """Treat an explicit null like a missing key."""
        if value is None and info.field_name is not None:
            field = cls.model_fields[info.field_name]
            if not field.is_required():
                return field.get_default(call_default_factory=True)
        return value


# Option catalogs offered by the record form


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class HealthIssue(str, Enum):
    """Known pre-existing conditions. ``NONE`` excludes every other entry."""

    DIABETES = "Diabetes"
    HYPERTENSION = "Hypertension"
    HEART_DISEASE = "Heart Disease"
    ASTHMA = "Asthma"
    ARTHRITIS = "Arthritis"
    DEPRESSION = "Depression"
    ANXIETY = "Anxiety"
    HIGH_CHOLESTEROL = "High Cholesterol"
    THYROID_ISSUES = "Thyroid Issues"
    KIDNEY_DISEASE = "Kidney Disease"
    LIVER_DISEASE = "Liver Disease"
    CANCER = "Cancer"
    OBESITY = "Obesity"
    OSTEOPOROSIS = "Osteoporosis"
    NONE = "None"


class ExerciseFrequency(str, Enum):
    NEVER = "Never"
    RARELY = "Rarely"
    ONE_TO_TWO_WEEKLY = "1-2 times/week"
    THREE_TO_FOUR_WEEKLY = "3-4 times/week"
    FIVE_PLUS_WEEKLY = "5+ times/week"


class ExerciseType(str, Enum):
    NONE = "None"
    CARDIO = "Cardio"
    STRENGTH_TRAINING = "Strength Training"
    YOGA = "Yoga"
    SPORTS = "Sports"
    WALKING = "Walking"
    MIXED = "Mixed"


class SmokingStatus(str, Enum):
    NEVER = "Never"
    FORMER = "Former Smoker"
    OCCASIONAL = "Occasional"
    REGULAR = "Regular"


class AlcoholUse(str, Enum):
    NEVER = "Never"
    OCCASIONALLY = "Occasionally"
    SOCIALLY = "Socially"
    REGULARLY = "Regularly"
    DAILY = "Daily"


class SleepQuality(str, Enum):
    POOR = "Poor"
    FAIR = "Fair"
    GOOD = "Good"
    EXCELLENT = "Excellent"


class Diet(str, Enum):
    OMNIVORE = "Omnivore"
    VEGETARIAN = "Vegetarian"
    VEGAN = "Vegan"
    KETO = "Keto"
    MEDITERRANEAN = "Mediterranean"
    OTHER = "Other"


# Derived classifications


class BMICategory(str, Enum):
    UNKNOWN = "Unknown"
    UNDERWEIGHT = "Underweight"
    NORMAL = "Normal"
    OVERWEIGHT = "Overweight"
    OBESE = "Obese"


class HealthScoreCategory(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


class RiskLevel(str, Enum):
    """Coarse risk tiers derived from the additive risk score."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class SortField(str, Enum):
    NAME = "name"
    AGE = "age"
    BMI = "bmi"
    HEALTH_SCORE = "healthScore"
    CREATED_AT = "createdAt"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# Health record snapshot


class ExerciseHabits(WireModel):
    frequency: str | None = None
    exercise_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("type", "exercise_type"),
        serialization_alias="type",
    )


class SleepHabits(WireModel):
    hours_per_night: Number = None
    quality: str | None = None


class LifestyleHabits(WireModel):
    exercise: ExerciseHabits = Field(default_factory=ExerciseHabits)
    smoking: str | None = None
    alcohol: str | None = None
    sleep: SleepHabits = Field(default_factory=SleepHabits)
    diet: str | None = None
    water_intake: Number = Field(default=None, description="Glasses of water per day")

    @classmethod
    def form_defaults(cls) -> "LifestyleHabits":
        """Habits pre-selected on a blank record form."""
        return cls(
            exercise=ExerciseHabits(
                frequency=ExerciseFrequency.NEVER.value, exercise_type=ExerciseType.NONE.value
            ),
            smoking=SmokingStatus.NEVER.value,
            alcohol=AlcoholUse.NEVER.value,
            sleep=SleepHabits(hours_per_night=7, quality=SleepQuality.GOOD.value),
            diet=Diet.OMNIVORE.value,
            water_intake=8,
        )


class BMIReading(WireModel):
    value: Number = None
    category: str | None = None


class HealthRecord(WireModel):
    """A full record snapshot as delivered by the storage service."""

    record_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("_id", "id", "record_id"),
        serialization_alias="_id",
    )
    name: str | None = None
    age: WholeNumber = None
    gender: str | None = None
    weight: Number = Field(default=None, description="Kilograms")
    height: Number = Field(default=None, description="Centimeters")
    email: str | None = None
    contact: str | None = None
    existing_health_issues: tuple[str, ...] = ()
    lifestyle_habits: LifestyleHabits = Field(default_factory=LifestyleHabits)
    notes: str | None = None
    bmi: BMIReading | None = None
    health_score: Number = Field(default=None, description="Externally computed, 0-100")
    created_at: datetime | None = None

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @classmethod
    def coerce(cls, record: "HealthRecord | Mapping[str, Any]") -> "HealthRecord":
        """Accept either a validated record or a raw wire mapping."""
        if isinstance(record, cls):
            return record
        return cls.model_validate(record)


# Derived display values


class RiskAssessment(WireModel):
    level: RiskLevel
    color: str
    score: int = Field(ge=0, description="Additive risk points behind the level")


class Recommendation(WireModel):
    type: Literal["weight", "exercise", "smoking", "sleep", "hydration"]
    priority: Literal["high", "medium"]
    text: str
    icon: str


class RecordCard(WireModel):
    """Everything the record list needs to display one record."""

    record: HealthRecord
    bmi: BMIReading
    bmi_color: str
    risk: RiskAssessment
    recommendations: tuple[Recommendation, ...]
    health_score_category: HealthScoreCategory | None = None
    health_score_color: str | None = None
    created_label: str = ""


class PageInfo(WireModel):
    current_page: int = Field(ge=1)
    total_pages: int = Field(ge=1)
    page_size: int = Field(gt=0)
    start_index: int = Field(ge=0)
    end_index: int = Field(ge=0, description="Exclusive")
    total_records: int = Field(ge=0)


# Aggregate statistics from the storage service


class BMIBucket(WireModel):
    category: str | None = Field(default=None, validation_alias=AliasChoices("category", "_id"))
    count: int = 0


class AgeBucket(WireModel):
    group: str | None = Field(default=None, validation_alias=AliasChoices("group", "_id"))
    count: int = 0


class GenderBucket(WireModel):
    gender: str | None = Field(default=None, validation_alias=AliasChoices("gender", "_id"))
    count: int = 0


class HealthScoreStats(WireModel):
    average_score: Number = None
    min_score: Number = None
    max_score: Number = None


class StatsSummary(WireModel):
    total_records: int = 0
    bmi_distribution: tuple[BMIBucket, ...] = ()
    age_distribution: tuple[AgeBucket, ...] = ()
    gender_distribution: tuple[GenderBucket, ...] = ()
    health_score_stats: HealthScoreStats = Field(default_factory=HealthScoreStats)
