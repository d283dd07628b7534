"""Domain semantic exceptions."""

from __future__ import annotations


class DomainError(Exception):
    """Base domain exception."""


class ValidationError(DomainError):
    """Raised when inbound trip fields are malformed or out of range."""

    def __init__(self, fields: dict[str, str]):
        self.fields = dict(fields)
        summary = ", ".join(f"{name}: {reason}" for name, reason in sorted(self.fields.items()))
        super().__init__(f"invalid fields: {summary}")


class ReferenceNotFoundError(DomainError):
    """Raised when an airport or college is not in the known reference set."""

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"{field} {value} does not exist")
