"""Exceptions raised while loading configuration and content."""

from __future__ import annotations

from typing import Optional


class ConfigurationError(ValueError):
    """The environment-provided site URL is missing or unusable."""


class ContentValidationError(ValueError):
    """A content entry violates a required-field or cross-field rule."""

    def __init__(self, identifier: str, field: str, reason: str) -> None:
        super().__init__(f"{identifier}: {field}: {reason}")
        self.identifier = identifier
        self.field = field
        self.reason = reason


class NotFoundError(LookupError):
    """Lookup of an identifier (or listing page) that does not exist."""

    def __init__(self, identifier: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"No content entry with identifier '{identifier}'")
        self.identifier = identifier
