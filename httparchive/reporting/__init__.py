"""Display-oriented views of decoded archives."""

from httparchive.reporting.table import (
    ArchiveReport,
    Row,
    Summary,
    format_kb,
    format_megabytes,
    format_seconds,
    resource_name,
)

__all__ = [
    "ArchiveReport",
    "Row",
    "Summary",
    "format_kb",
    "format_megabytes",
    "format_seconds",
    "resource_name",
]
