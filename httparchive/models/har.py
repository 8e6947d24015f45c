"""HAR (HTTP Archive) models — the decoded, read-only view of a HAR 1.2 log.

Field names are snake_case; the HAR camelCase names are accepted as aliases,
and header lists and ``pageTimings`` are reshaped on validation, so
``Archive.model_validate(har["log"])`` builds the same graph as the decoder.
Containers are frozen: sequences are tuples and mappings are read-only views.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated, Any

import orjson
from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)

from httparchive.errors import MissingContentSize

# HAR uses -1 for "timing not available"
NOT_AVAILABLE = -1


def freeze(value: Any) -> Any:
    """Recursively turn dicts into read-only mappings and lists into tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [thaw(v) for v in value]
    return value


def fold_headers(headers: Any) -> Any:
    """Fold a HAR ``[{name, value}, ...]`` list into a name -> value map.

    Pairs are applied in order, so a repeated name keeps its last value.
    Names match case-sensitively; pairs without a string name are skipped.
    Anything that is not a list is returned unchanged.
    """
    if not isinstance(headers, (list, tuple)):
        return headers
    folded: dict[str, str] = {}
    for header in headers:
        if not isinstance(header, Mapping):
            continue
        name = header.get("name")
        if not isinstance(name, str):
            continue
        value = header.get("value")
        folded[name] = value if isinstance(value, str) else ""
    return folded


FrozenMap = Annotated[Mapping[str, Any], AfterValidator(freeze), PlainSerializer(thaw)]
FrozenList = Annotated[tuple[Any, ...], AfterValidator(freeze), PlainSerializer(thaw)]
HeaderMap = Annotated[
    Mapping[str, str],
    BeforeValidator(fold_headers),
    AfterValidator(MappingProxyType),
    PlainSerializer(dict),
]


class HARRecord(BaseModel):
    """Frozen base for every archive record."""

    model_config = {"frozen": True, "populate_by_name": True}

    def __hash__(self) -> int:
        return hash(
            (type(self).__name__, orjson.dumps(self.model_dump(), option=orjson.OPT_SORT_KEYS))
        )


class Creator(HARRecord):
    """The tool that produced the archive (Firebug, Chrome DevTools, ...)."""

    name: str = ""
    version: str = ""


class Browser(HARRecord):
    """The browser the page was loaded in."""

    name: str = ""
    version: str = ""


class Page(HARRecord):
    """One tracked page load; entries point at it through ``pageref``."""

    started_datetime: str = Field(alias="startedDateTime", default="")
    id: str = ""
    title: str = ""
    on_content_load: int | float | None = Field(alias="onContentLoad", default=None)
    on_load: int | float | None = Field(alias="onLoad", default=None)

    @model_validator(mode="before")
    @classmethod
    def _flatten_page_timings(cls, data: Any) -> Any:
        if not isinstance(data, Mapping) or "pageTimings" not in data:
            return data
        flat = {k: v for k, v in data.items() if k != "pageTimings"}
        timings = data["pageTimings"]
        if isinstance(timings, Mapping):
            for key in ("onContentLoad", "onLoad"):
                if key in timings:
                    flat.setdefault(key, timings[key])
        return flat

    @field_validator("on_content_load", "on_load", mode="before")
    @classmethod
    def _unavailable_is_missing(cls, value: Any) -> Any:
        if value == NOT_AVAILABLE:
            return None
        return value


def _lookup(headers: Mapping[str, str], name: str) -> str | None:
    wanted = name.lower()
    found = None
    for key, value in headers.items():
        if key.lower() == wanted:
            found = value
    return found


class Request(HARRecord):
    """The request half of an entry."""

    http_method: str = Field(alias="method", default="")
    url: str = ""
    http_version: str = Field(alias="httpVersion", default="")
    cookies: FrozenList = ()
    query_string: FrozenList = Field(alias="queryString", default=())
    headers: HeaderMap = Field(default_factory=lambda: MappingProxyType({}))
    headers_size: int = Field(alias="headersSize", default=NOT_AVAILABLE)
    body_size: int = Field(alias="bodySize", default=NOT_AVAILABLE)

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        return _lookup(self.headers, name)


class Response(HARRecord):
    """The response half of an entry.

    ``content`` is kept exactly as the archive carries it (``mimeType``,
    ``size``, and whatever else the producer wrote). ``body_size`` is 0 when
    the response was served from cache.
    """

    status: int = 0
    status_text: str = Field(alias="statusText", default="")
    http_version: str = Field(alias="httpVersion", default="")
    cookies: FrozenList = ()
    content: FrozenMap = Field(default_factory=lambda: MappingProxyType({}))
    redirect_url: str = Field(alias="redirectURL", default="")
    headers: HeaderMap = Field(default_factory=lambda: MappingProxyType({}))
    headers_size: int = Field(alias="headersSize", default=NOT_AVAILABLE)
    body_size: int = Field(alias="bodySize", default=NOT_AVAILABLE)

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        return _lookup(self.headers, name)

    @property
    def mime_type(self) -> str:
        return self.content.get("mimeType", "")

    @property
    def content_size(self) -> int | float:
        """Body size in bytes as reported by the capturing tool.

        Raises MissingContentSize when ``size`` is absent or not a number.
        """
        size = self.content.get("size")
        if isinstance(size, bool) or not isinstance(size, (int, float)):
            raise MissingContentSize()
        return size


class Entry(HARRecord):
    """One request/response interaction."""

    pageref: str = ""
    started_datetime: str = Field(alias="startedDateTime", default="")
    time: int | float = 0
    request: Request = Field(default_factory=Request)
    response: Response = Field(default_factory=Response)
    cache: FrozenMap = Field(default_factory=lambda: MappingProxyType({}))
    timings: FrozenMap = Field(default_factory=lambda: MappingProxyType({}))
    server_ip_address: str = Field(alias="serverIPAddress", default="")
    connection: str = ""


class Archive(HARRecord):
    """A decoded HAR log: creator, browser, pages and entries in source order."""

    version: str = ""
    creator: Creator = Field(default_factory=Creator)
    browser: Browser = Field(default_factory=Browser)
    pages: tuple[Page, ...] = ()
    entries: tuple[Entry, ...] = ()

    @property
    def first_page(self) -> Page | None:
        return self.pages[0] if self.pages else None

    def page(self, page_id: str) -> Page | None:
        """Return the first page with ``page_id``, or None."""
        return next((p for p in self.pages if p.id == page_id), None)

    def entries_for(self, page: Page | str) -> list[Entry]:
        """Entries whose ``pageref`` points at ``page`` (a Page or its id)."""
        page_id = page.id if isinstance(page, Page) else page
        return [e for e in self.entries if e.pageref == page_id]
