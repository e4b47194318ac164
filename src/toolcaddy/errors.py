"""Exceptions tool bodies may raise to report a structured failure."""

from typing import Any


class ToolError(Exception):
    """A tool failure carrying extra fields for the result envelope.

    The dispatcher turns it into ``{"success": False, "error": message, ...details}``.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        message = message.strip() if isinstance(message, str) else ""
        super().__init__(message or "Unknown tool error")
        self.message = str(self)
        self.details = details or {}


class CatalogError(ToolError):
    """The model catalog returned a payload we could not read."""
