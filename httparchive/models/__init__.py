"""Pydantic models for decoded archives and settings."""

from httparchive.models.har import (
    Archive,
    Browser,
    Creator,
    Entry,
    Page,
    Request,
    Response,
)

__all__ = [
    "Archive",
    "Browser",
    "Creator",
    "Entry",
    "Page",
    "Request",
    "Response",
]
