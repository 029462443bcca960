"""Declarative validation rules for resource instances.

Rules are declared per field on the resource class::

    Signup.validates("name", presence=True)
    Signup.validates("password", length={"within": (6, 12)})
    Signup.validates("age", numericality=True, minimum=18, maximum=130)
    Signup.validates("nick", check=lambda obj, name, value: None if value else "is required")

``instance.is_valid()`` runs every rule and fills ``instance.errors`` with
human-readable messages per field.  Failures are never raised.
"""

from __future__ import annotations

import numbers
from collections import defaultdict
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Optional

from rest_api_provider.fields import normalize_field_name

if TYPE_CHECKING:
    from rest_api_provider.resource import Resource

Check = Callable[["Resource", str, Any], Optional[str]]


class Errors(defaultdict):
    """Mapping of field name to a list of messages; missing fields read as ``[]``."""

    def __init__(self) -> None:
        super().__init__(list)

    def __repr__(self) -> str:
        return f"Errors({dict(self)!r})"

    @property
    def is_empty(self) -> bool:
        return not any(self.values())

    def full_messages(self) -> list[str]:
        return [f"{name} {message}" for name, messages in self.items() for message in messages]


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (Sequence, Mapping)):
        return len(value) == 0
    return False


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


def _length_bounds(options: Mapping[str, Any]) -> tuple[Optional[int], Optional[int]]:
    """Return inclusive ``(minimum, maximum)`` from ``within``/``minimum``/``maximum``/``is``."""
    if "is" in options:
        return options["is"], options["is"]
    within = options.get("within")
    if isinstance(within, range):
        return within.start, within.stop - 1
    if within is not None:
        low, high = within
        return low, high
    return options.get("minimum"), options.get("maximum")


class Validation:
    """All checks declared by one ``validates`` call for a single field."""

    def __init__(
        self,
        field: str,
        presence: bool = False,
        length: Optional[Mapping[str, Any]] = None,
        numericality: bool = False,
        minimum: Optional[float] = None,
        maximum: Optional[float] = None,
        check: Optional[Check] = None,
    ) -> None:
        self.field = normalize_field_name(field)
        self.presence = presence
        self.length = _length_bounds(length) if length else None
        self.numericality = numericality
        self.minimum = minimum
        self.maximum = maximum
        self.check = check

    def run(self, instance: Resource, errors: Errors) -> None:
        """Append this validation's messages for *instance* to *errors*."""
        value = instance.get(self.field)
        messages = errors[self.field]

        if self.presence and _is_blank(value):
            messages.append("can't be blank")

        if self.length is not None:
            low, high = self.length
            size = 0 if value is None else len(value) if hasattr(value, "__len__") else len(str(value))
            if low is not None and high is not None and low == high and size != low:
                messages.append(f"is the wrong length (should be {low} characters)")
            elif low is not None and size < low:
                messages.append(f"is too short (minimum is {low} characters)")
            elif high is not None and size > high:
                messages.append(f"is too long (maximum is {high} characters)")

        if self.numericality and not _is_number(value):
            messages.append("is not a number")

        if _is_number(value):
            if self.minimum is not None and value < self.minimum:
                messages.append(f"must be greater than or equal to {self.minimum}")
            if self.maximum is not None and value > self.maximum:
                messages.append(f"must be less than or equal to {self.maximum}")

        if self.check is not None:
            message = self.check(instance, self.field, value)
            if message:
                messages.append(str(message))

    def __repr__(self) -> str:
        return f"Validation({self.field!r})"


def run_validations(instance: Resource, validations: Sequence[Validation]) -> Errors:
    """Run *validations* against *instance* and return a fresh :class:`Errors`."""
    errors = Errors()
    # Custom checks append to instance.errors directly, so expose the new
    # mapping before running them.
    instance._errors = errors
    for validation in validations:
        validation.run(instance, errors)
    return errors
