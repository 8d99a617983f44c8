"""Core configuration and logging components."""

from promptdesk.core.config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
