"""httparchive — read HTTP Archive (HAR) files into a typed object graph."""

from httparchive.decoder import decode, decode_file
from httparchive.errors import ArchiveError, InvalidInputKind, MalformedJson, MissingContentSize
from httparchive.models.har import Archive, Browser, Creator, Entry, Page, Request, Response

__version__ = "0.1.0"

__all__ = [
    "Archive",
    "ArchiveError",
    "Browser",
    "Creator",
    "Entry",
    "InvalidInputKind",
    "MalformedJson",
    "MissingContentSize",
    "Page",
    "Request",
    "Response",
    "decode",
    "decode_file",
]
