"""Runtime configuration helpers."""

from getback.config.settings import GetBackSettings, resolve_settings

__all__ = ["GetBackSettings", "resolve_settings"]
