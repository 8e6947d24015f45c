"""Error taxonomy for decoding and reporting on HTTP archives."""

from __future__ import annotations


class ArchiveError(Exception):
    """Base class for every error raised by httparchive."""


class InvalidInputKind(ArchiveError, TypeError):
    """Decoder input is neither text nor a readable stream."""

    def __init__(self, src: object) -> None:
        self.kind = type(src).__name__
        super().__init__(f"Argument must be text or a readable stream, got {self.kind}")


class MalformedJson(ArchiveError, ValueError):
    """Decoder input could not be parsed as a JSON object."""


class MissingContentSize(ArchiveError, KeyError):
    """A response carries no ``content.size``, so sizes cannot be aggregated."""

    def __init__(self, url: str = "") -> None:
        self.url = url
        super().__init__(f"Response content has no 'size' field: {url or '<unknown url>'}")

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0])
