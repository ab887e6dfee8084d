"""
Stage 3: Numeric normalization.

Recompute every number the business depends on instead of trusting the model:
- severity: round half-up, clamp to [1, 5]
- confidence: clamp to [0, 1], round half-up to 2 decimals
- due_date_days: recomputed from severity and the category window, clamped into it
- suggested_priority: pure function of severity

Rounding is half-up (2.5 -> 3) everywhere, not Python's round-half-even.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any

from civic_triage.models.enums import PriorityEnum
from civic_triage.models.taxonomy import Category
from civic_triage.monitoring.metrics import validation_failures_total
from .exceptions import InvalidFieldValue

MIN_SEVERITY = 1
MAX_SEVERITY = 5


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves upward (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def clamp(value, low, high):
    return max(low, min(high, value))


def coerce_number(value: Any, field: str) -> float:
    """
    Read a numeric model field.
    
    Accepts ints, floats and numeric strings.
    
    Raises:
        InvalidFieldValue: missing, boolean, non-numeric or non-finite
    """
    if value is None or isinstance(value, bool):
        number = None
    elif isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            number = None
    else:
        number = None
    
    if number is None or not math.isfinite(number):
        validation_failures_total.labels(
            stage="stage3", error_type="invalid_field_value"
        ).inc()
        raise InvalidFieldValue(
            f"AI returned invalid {field}: {value!r}",
            field_path=field,
            invalid_value=value,
        )
    return number


def normalize_severity(value: Any) -> int:
    """Severity as an int in [1, 5]."""
    return clamp(round_half_up(coerce_number(value, "severity")), MIN_SEVERITY, MAX_SEVERITY)


def normalize_confidence(value: Any) -> float:
    """Confidence in [0, 1] with at most 2 decimals."""
    confidence = clamp(coerce_number(value, "confidence"), 0.0, 1.0)
    return float(Decimal(repr(confidence)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def compute_due_date_days(severity: int, category: Category) -> int:
    """
    Days until the issue should be resolved.
    
    due = max - ((severity - 1) / 4) * (max - min), rounded half-up and
    clamped into [min, max]. Severity 5 yields min, severity 1 yields max.
    """
    low = category.min_response_days
    high = category.max_response_days
    days = high - ((severity - 1) / 4) * (high - low)
    return clamp(round_half_up(days), low, high)


class Stage3Normalize:
    """
    Stage 3 normalizer: returns the recomputed numeric fields.
    
    Raises InvalidFieldValue on unusable severity/confidence (hard fail).
    """
    
    def validate(self, parsed: dict, category: Category) -> dict:
        severity = normalize_severity(parsed.get("severity"))
        return {
            "severity": severity,
            "confidence": normalize_confidence(parsed.get("confidence")),
            "due_date_days": compute_due_date_days(severity, category),
            "suggested_priority": PriorityEnum.from_severity(severity),
        }
