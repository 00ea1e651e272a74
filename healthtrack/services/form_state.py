"""
Immutable state for the create/edit record form.

Design:
- The form is a frozen model; every edit returns a new form (copy-on-write)
- Numeric input is parsed explicitly, so blank fields stay absent instead of 0
- The "None" health issue is a separate variant, so it can never sit next to
  a real condition
"""

from collections.abc import Sequence
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from healthtrack.domain.models import (
    BMIReading,
    HealthIssue,
    HealthRecord,
    LifestyleHabits,
)
from healthtrack.services.metrics import calculate_bmi, get_bmi_category
from healthtrack.services.validation import (
    parse_number,
    validate_age,
    validate_email,
    validate_height,
    validate_phone,
    validate_weight,
)

MAX_NOTES_LENGTH = 500
ISSUE_ORDER = {issue.value: position for position, issue in enumerate(HealthIssue)}


class Unanswered(BaseModel):
    """Nothing selected yet."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unanswered"] = "unanswered"


class NoIssues(BaseModel):
    """The person explicitly reported no existing health issues."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


class IssueSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["issues"] = "issues"
    issues: frozenset[str] = Field(min_length=1)

    @field_validator("issues")
    @classmethod
    def only_real_conditions(cls, value: frozenset[str]) -> frozenset[str]:
        unknown = value.difference(ISSUE_ORDER)
        if unknown:
            raise ValueError(f"Unknown health issues: {sorted(unknown)}")
        if HealthIssue.NONE.value in value:
            raise ValueError("'None' cannot be combined with other health issues")
        return value


HealthIssueSelection = Annotated[Unanswered | NoIssues | IssueSet, Field(discriminator="kind")]


def toggle_health_issue(
    selection: HealthIssueSelection, issue: HealthIssue | str
) -> HealthIssueSelection:
    """
    Flip one checkbox in the health issue list.

    Selecting "None" clears every condition; selecting a condition clears "None".
    """
    name = HealthIssue(issue).value

    if name == HealthIssue.NONE.value:
        return Unanswered() if isinstance(selection, NoIssues) else NoIssues()

    current = selection.issues if isinstance(selection, IssueSet) else frozenset()
    updated = current - {name} if name in current else current | {name}
    return IssueSet(issues=updated) if updated else Unanswered()


def selection_from_list(issues: Sequence[str]) -> HealthIssueSelection:
    """Read a stored issue list. A real condition wins over a stray "None"."""
    conditions = frozenset(issue for issue in issues if issue != HealthIssue.NONE.value)
    if conditions:
        return IssueSet(issues=conditions)
    if HealthIssue.NONE.value in issues:
        return NoIssues()
    return Unanswered()


def selection_to_list(selection: HealthIssueSelection) -> list[str]:
    if isinstance(selection, NoIssues):
        return [HealthIssue.NONE.value]
    if isinstance(selection, IssueSet):
        return sorted(selection.issues, key=ISSUE_ORDER.__getitem__)
    return []


class HealthFormData(BaseModel):
    """Current values of the record form. Numeric fields are None until entered."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str = ""
    age: float | None = None
    gender: str = ""
    weight: float | None = None
    height: float | None = None
    email: str = ""
    contact: str = ""
    existing_health_issues: HealthIssueSelection = Field(default_factory=Unanswered)
    lifestyle_habits: LifestyleHabits = Field(default_factory=LifestyleHabits.form_defaults)
    notes: str = ""

    @classmethod
    def from_record(cls, record: HealthRecord) -> "HealthFormData":
        """Pre-fill the form for editing an existing record."""
        return cls(
            name=record.name or "",
            age=record.age,
            gender=record.gender or "",
            weight=record.weight,
            height=record.height,
            email=record.email or "",
            contact=record.contact or "",
            existing_health_issues=selection_from_list(record.existing_health_issues),
            lifestyle_habits=record.lifestyle_habits,
            notes=record.notes or "",
        )


def _field_name(model: BaseModel, key: str) -> str:
    for name, info in type(model).model_fields.items():
        if key in (name, info.alias, info.serialization_alias):
            return name
    raise KeyError(f"{type(model).__name__} has no field {key!r}")


def update_field(form: BaseModel, path: str | Sequence[str], value: Any) -> Any:
    """
    Return a copy of ``form`` with the value at ``path`` replaced.

    ``path`` is a dotted string or a sequence of keys; both camelCase wire names
    and snake_case field names are accepted. Nested models along the path are
    copied, everything else is shared with the original. Each rebuilt level is
    validated again, so a value of the wrong shape raises ``ValidationError``.
    """
    keys = path.split(".") if isinstance(path, str) else list(path)
    if not keys:
        raise KeyError("Empty field path")

    name = _field_name(form, keys[0])
    if len(keys) > 1:
        child = getattr(form, name)
        if not isinstance(child, BaseModel):
            raise KeyError(f"{keys[0]!r} is not a nested group")
        value = update_field(child, keys[1:], value)
    values = {field: getattr(form, field) for field in type(form).model_fields}
    values[name] = value
    return type(form).model_validate(values)


def update_numeric_field(form: BaseModel, path: str | Sequence[str], raw: Any) -> Any:
    """Like update_field, but parses raw input first; blank input becomes None."""
    return update_field(form, path, parse_number(raw))


def preview_bmi(form: HealthFormData) -> BMIReading | None:
    """Live BMI shown while weight and height are typed."""
    bmi = calculate_bmi(form.weight, form.height)
    if bmi is None:
        return None
    return BMIReading(value=bmi, category=get_bmi_category(bmi).value)


def validate_form(form: HealthFormData) -> dict[str, str]:
    """Field name to error message; empty when the form can be submitted."""
    errors: dict[str, str] = {}

    if not form.name.strip():
        errors["name"] = "Name is required"
    if not validate_age(form.age):
        errors["age"] = "Valid age (1-120) is required"
    if not form.gender:
        errors["gender"] = "Gender is required"
    if not validate_weight(form.weight):
        errors["weight"] = "Valid weight (1-1000 kg) is required"
    if not validate_height(form.height):
        errors["height"] = "Valid height (30-300 cm) is required"
    if not validate_email(form.email):
        errors["email"] = "Valid email is required"
    if not validate_phone(form.contact):
        errors["contact"] = "Valid contact number is required"

    hours = form.lifestyle_habits.sleep.hours_per_night
    if hours is not None and not 0 <= hours <= 24:
        errors["lifestyleHabits.sleep.hoursPerNight"] = "Sleep hours must be between 0 and 24"
    water = form.lifestyle_habits.water_intake
    if water is not None and water < 0:
        errors["lifestyleHabits.waterIntake"] = "Water intake cannot be negative"
    if len(form.notes) > MAX_NOTES_LENGTH:
        errors["notes"] = f"Notes must be {MAX_NOTES_LENGTH} characters or fewer"

    return errors


def to_payload(form: HealthFormData) -> dict[str, Any]:
    """Request body for the storage service's create and update calls."""
    payload = form.model_dump(exclude={"existing_health_issues", "lifestyle_habits"})
    return {
        "name": payload["name"].strip(),
        "age": int(form.age) if form.age is not None else None,
        "gender": payload["gender"],
        "weight": payload["weight"],
        "height": payload["height"],
        "email": payload["email"].strip(),
        "contact": payload["contact"].strip(),
        "existingHealthIssues": selection_to_list(form.existing_health_issues),
        "lifestyleHabits": form.lifestyle_habits.model_dump(by_alias=True),
        "notes": payload["notes"],
    }
