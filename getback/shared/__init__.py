"""Shared cross-layer types and exceptions."""

from getback.shared.exceptions import ExternalServiceError, KeyMissingError
from getback.shared.result import Left, Result, Right

__all__ = ["ExternalServiceError", "KeyMissingError", "Left", "Result", "Right"]
