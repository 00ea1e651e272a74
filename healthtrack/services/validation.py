"""
Field-level validators for health record input.

Every validator is a total predicate: malformed input yields ``False``, never an
exception. Callers decide how to surface a negative result.
"""

import re
from typing import Any

from healthtrack.domain.parsing import parse_number

__all__ = [
    "parse_number",
    "validate_age",
    "validate_email",
    "validate_height",
    "validate_phone",
    "validate_weight",
]

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_PATTERN = re.compile(r"\+?[1-9][0-9]{0,15}", re.ASCII)


def validate_email(email: Any) -> bool:
    return isinstance(email, str) and EMAIL_PATTERN.fullmatch(email) is not None


def validate_phone(phone: Any) -> bool:
    """Optional leading '+', a non-zero first digit, then up to 15 more digits."""
    return isinstance(phone, str) and PHONE_PATTERN.fullmatch(phone) is not None


def validate_age(age: Any) -> bool:
    value = parse_number(age)
    return value is not None and 1 <= value <= 120


def validate_weight(weight: Any) -> bool:
    """Weight in kilograms."""
    value = parse_number(weight)
    return value is not None and 0 < value <= 1000


def validate_height(height: Any) -> bool:
    """Height in centimeters."""
    value = parse_number(height)
    return value is not None and 30 <= value <= 300
