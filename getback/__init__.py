"""getback - shared airport shuttle trips between campus and airport."""

__version__ = "1.0.0"
