"""Infrastructure services and cross-cutting utilities."""

from getback.infrastructure.emailer import DisabledEmailer, Emailer, SparkPostEmailer, get_emailer
from getback.infrastructure.logging import StructuredLogger, get_logger
from getback.infrastructure.reference_data import ReferenceData, ReferenceDataError, load_reference_data

__all__ = [
    "DisabledEmailer",
    "Emailer",
    "ReferenceData",
    "ReferenceDataError",
    "SparkPostEmailer",
    "StructuredLogger",
    "get_emailer",
    "get_logger",
    "load_reference_data",
]
