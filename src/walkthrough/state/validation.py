"""Configuration checks for tours and hints.

Validation never raises; it collects human readable messages so the
controller can log them as one warning and skip the operation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .models import Hint, HintPosition, Side, Step

__all__ = [
    "ValidationResult",
    "validate_tour",
    "validate_step",
    "validate_hint",
    "validate_hints",
]

_STEP_SIDES = {s.value for s in Side} | {"auto"}
_HINT_POSITIONS = {p.value for p in HintPosition}


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _value(v) -> str:
    return getattr(v, "value", v)


def _step_errors(step: Step, label: str) -> List[str]:
    errors: List[str] = []
    if _blank(step.content):
        errors.append(f"{label} content cannot be empty")
    if _value(step.preferred_side) not in _STEP_SIDES:
        errors.append(f"{label} has invalid position: {_value(step.preferred_side)}")
    return errors


def validate_step(step: Step) -> ValidationResult:
    errors: List[str] = []
    if _blank(step.id):
        errors.append("Step ID is required")
    errors.extend(_step_errors(step, "Step"))
    return ValidationResult(not errors, errors)


def validate_tour(tour_id: Optional[str], steps: Optional[Sequence[Step]]) -> ValidationResult:
    """Check tour id, non-empty steps, unique step ids and per-step fields."""
    errors: List[str] = []
    if _blank(tour_id):
        errors.append("Tour ID is required")
    if steps is None:
        errors.append("Steps must be a sequence")
        return ValidationResult(False, errors)
    if len(steps) == 0:
        errors.append("Tour must have at least one step")

    seen = set()
    for index, step in enumerate(steps):
        if _blank(step.id):
            errors.append(f"Step at index {index} must have an ID")
            label = f"Step at index {index}"
        else:
            label = f"Step {step.id}"
            if step.id in seen:
                errors.append(f"Duplicate step ID: {step.id}")
            seen.add(step.id)
        errors.extend(_step_errors(step, label))
    return ValidationResult(not errors, errors)


def validate_hint(hint: Hint) -> ValidationResult:
    errors: List[str] = []
    if _blank(hint.id):
        errors.append("Hint ID is required")
    if _blank(hint.target_id):
        errors.append("Hint target_id is required")
    if _blank(hint.content):
        errors.append("Hint content cannot be empty")
    if _value(hint.position) not in _HINT_POSITIONS:
        errors.append(f"Invalid hint position: {_value(hint.position)}")
    return ValidationResult(not errors, errors)


def validate_hints(hints: Optional[Sequence[Hint]]) -> ValidationResult:
    if hints is None:
        return ValidationResult(False, ["Hints must be a sequence"])
    errors: List[str] = []
    seen = set()
    for index, hint in enumerate(hints):
        errors.extend(f"Hint at index {index}: {e}" for e in validate_hint(hint).errors)
        if hint.id:
            if hint.id in seen:
                errors.append(f"Duplicate hint ID: {hint.id}")
            seen.add(hint.id)
    return ValidationResult(not errors, errors)
