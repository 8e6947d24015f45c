"""Table report — summary line and per-request rows, like a browser Network view."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, NamedTuple

from rich.console import Console

from httparchive.errors import MissingContentSize
from httparchive.models.config import DEFAULT_RESOURCE_WIDTH
from httparchive.models.har import Archive, Entry

logger = logging.getLogger(__name__)

BYTES_PER_KB = 1000
BYTES_PER_MB = 1024 * 1024

ROW_FORMAT = "%s %-32s %s %-20s %-10s %s"


class Summary(NamedTuple):
    title: str
    entry_count: str
    total_size_mb: str
    load_time: str


class Row(NamedTuple):
    method: str
    resource: str
    status: str
    status_text: str
    size_kb: str
    duration: str


def round_half_up(value: float, places: int) -> str:
    """Round to ``places`` decimals, half away from zero, in shortest form.

    ``0`` renders as ``0.0`` and trailing zeros are dropped (``1.060`` is
    ``1.06``), independent of how the platform prints floats.
    """
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)
    text = format(rounded.normalize(), "f")
    return text if "." in text else text + ".0"


def format_kb(size_bytes: float) -> str:
    return round_half_up(size_bytes / BYTES_PER_KB, 2)


def format_megabytes(size_bytes: float) -> str:
    return round_half_up(size_bytes / BYTES_PER_MB, 2)


def format_seconds(millis: float) -> str:
    return round_half_up(millis / 1000, 3)


def resource_name(url: str, width: int = DEFAULT_RESOURCE_WIDTH) -> str:
    """Short display name for a request URL.

    The part from the last ``/`` onwards, or the whole URL when it ends with
    ``/`` (or has no ``/`` at all), cut to ``width`` characters.
    """
    cut = url.rfind("/")
    if url.endswith("/") or cut == -1:
        name = url
    else:
        name = url[cut:]
    return name[:width]


def content_size(entry: Entry) -> int | float:
    try:
        return entry.response.content_size
    except MissingContentSize:
        raise MissingContentSize(entry.request.url) from None


class ArchiveReport:
    """Derives display strings from a decoded archive."""

    def __init__(self, archive: Archive, resource_width: int = DEFAULT_RESOURCE_WIDTH) -> None:
        self.archive = archive
        self.resource_width = resource_width

    def total_size(self) -> int | float:
        """Sum of every response's content size, in bytes."""
        return sum(content_size(e) for e in self.archive.entries)

    def summary(self) -> Summary:
        """Page title, request count, megabytes downloaded and load time in seconds."""
        page = self.archive.first_page
        title = page.title if page else ""
        on_load = page.on_load if page and page.on_load is not None else 0
        return Summary(
            title=title,
            entry_count=str(len(self.archive.entries)),
            total_size_mb=format_megabytes(self.total_size()),
            load_time=format_seconds(on_load),
        )

    def row(self, entry: Entry) -> Row:
        return Row(
            method=entry.request.http_method,
            resource=resource_name(entry.request.url, self.resource_width),
            status=str(entry.response.status),
            status_text=entry.response.status_text,
            size_kb=format_kb(content_size(entry)),
            duration=format_seconds(entry.time),
        )

    def rows(self, entries: list[Entry] | None = None) -> list[Row]:
        """One row per entry, in archive order (or for the given entries)."""
        if entries is None:
            entries = self.archive.entries
        return [self.row(e) for e in entries]

    def summary_line(self) -> str:
        s = self.summary()
        return (
            f"Metrics for: '{s.title}', {s.entry_count} Requests, "
            f"{s.total_size_mb}MB downloaded. Load time: {s.load_time}s"
        )

    @staticmethod
    def format_row(row: Row) -> str:
        return ROW_FORMAT % (
            row.method,
            row.resource,
            row.status,
            row.status_text,
            row.size_kb + "KB",
            row.duration + "s",
        )

    def render_table(self, show_summary: bool = True, entries: list[Entry] | None = None) -> list[str]:
        """Lines of the text table: the summary sentence, a blank line, then rows."""
        lines = [self.summary_line(), ""] if show_summary else []
        lines.extend(self.format_row(r) for r in self.rows(entries))
        return lines

    def print_table(
        self,
        console: Console | None = None,
        show_summary: bool = True,
        entries: list[Entry] | None = None,
    ) -> None:
        console = console or Console()
        for line in self.render_table(show_summary, entries):
            console.print(line, markup=False, highlight=False, soft_wrap=True)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready summary and rows."""
        return {
            "summary": self.summary()._asdict(),
            "rows": [r._asdict() for r in self.rows()],
        }
