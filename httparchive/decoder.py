"""Archive decoder — parses HAR JSON and maps it onto the archive models.

Only the fields the models carry are read. Anything missing, or of the wrong
JSON type, falls back to the field's default; the decoder never validates the
document against the full HAR schema.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Any

import orjson

from httparchive.errors import InvalidInputKind, MalformedJson
from httparchive.models.har import (
    NOT_AVAILABLE,
    Archive,
    Browser,
    Creator,
    Entry,
    Page,
    Request,
    Response,
)

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8-sig"

Source = str | bytes | bytearray | IO[str] | IO[bytes]


def decode(src: Source) -> Archive:
    """Decode HAR text, or a readable stream of it, into an Archive.

    A stream is read to completion but left open. Raises InvalidInputKind for
    any other input and MalformedJson when the text is not a JSON object.
    """
    raw = _read_source(src)
    try:
        content = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise MalformedJson(f"The input could not be parsed: {e}") from e

    if not isinstance(content, dict):
        raise MalformedJson(
            f"Expected a JSON object at the top level, got {type(content).__name__}"
        )

    log = _obj(content, "log")
    archive = Archive(
        version=_str(log, "version"),
        creator=extract_creator(log),
        browser=extract_browser(log),
        pages=extract_pages(log),
        entries=extract_entries(log),
    )
    logger.debug(
        "Decoded archive: %d pages, %d entries", len(archive.pages), len(archive.entries)
    )
    return archive


def decode_file(path: Path | str, encoding: str = DEFAULT_ENCODING) -> Archive:
    """Open ``path``, decode it and close it again."""
    with open(path, encoding=encoding) as f:
        return decode(f)


def _read_source(src: Any) -> str | bytes | bytearray:
    if isinstance(src, (str, bytes, bytearray)):
        return _strip_bom(src)
    read = getattr(src, "read", None)
    if not callable(read):
        raise InvalidInputKind(src)
    data = read()
    if not isinstance(data, (str, bytes, bytearray)):
        raise InvalidInputKind(data)
    return _strip_bom(data)


def _strip_bom(raw: str | bytes | bytearray) -> str | bytes | bytearray:
    if isinstance(raw, str):
        return raw.removeprefix("\ufeff")
    if raw.startswith(b"\xef\xbb\xbf"):
        return raw[3:]
    return raw


# ── Typed field access ──


def _obj(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _list(data: dict[str, Any], key: str) -> list[Any]:
    value = data.get(key)
    return list(value) if isinstance(value, list) else []


def _str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def _int(data: dict[str, Any], key: str, default: int = 0) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value


def _number(data: dict[str, Any], key: str, default: int | None = 0) -> int | float | None:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return value


# ── Section extraction ──


def extract_creator(log: dict[str, Any]) -> Creator:
    creator = _obj(log, "creator")
    return Creator(name=_str(creator, "name"), version=_str(creator, "version"))


def extract_browser(log: dict[str, Any]) -> Browser:
    browser = _obj(log, "browser")
    return Browser(name=_str(browser, "name"), version=_str(browser, "version"))


def extract_pages(log: dict[str, Any]) -> list[Page]:
    pages = []
    for raw in _list(log, "pages"):
        page = raw if isinstance(raw, dict) else {}
        timings = _obj(page, "pageTimings")
        pages.append(
            Page(
                started_datetime=_str(page, "startedDateTime"),
                id=_str(page, "id"),
                title=_str(page, "title"),
                on_content_load=_number(timings, "onContentLoad", None),
                on_load=_number(timings, "onLoad", None),
            )
        )
    return pages


def extract_request(request: dict[str, Any]) -> Request:
    return Request(
        http_method=_str(request, "method"),
        url=_str(request, "url"),
        http_version=_str(request, "httpVersion"),
        cookies=_list(request, "cookies"),
        query_string=_list(request, "queryString"),
        headers=_list(request, "headers"),
        headers_size=_int(request, "headersSize", NOT_AVAILABLE),
        body_size=_int(request, "bodySize", NOT_AVAILABLE),
    )


def extract_response(response: dict[str, Any]) -> Response:
    return Response(
        status=_int(response, "status"),
        status_text=_str(response, "statusText"),
        http_version=_str(response, "httpVersion"),
        cookies=_list(response, "cookies"),
        content=dict(_obj(response, "content")),
        redirect_url=_str(response, "redirectURL"),
        headers=_list(response, "headers"),
        headers_size=_int(response, "headersSize", NOT_AVAILABLE),
        body_size=_int(response, "bodySize", NOT_AVAILABLE),
    )


def extract_entries(log: dict[str, Any]) -> list[Entry]:
    entries = []
    for raw in _list(log, "entries"):
        entry = raw if isinstance(raw, dict) else {}
        entries.append(
            Entry(
                pageref=_str(entry, "pageref"),
                started_datetime=_str(entry, "startedDateTime"),
                time=_number(entry, "time"),
                request=extract_request(_obj(entry, "request")),
                response=extract_response(_obj(entry, "response")),
                cache=dict(_obj(entry, "cache")),
                timings=dict(_obj(entry, "timings")),
                server_ip_address=_str(entry, "serverIPAddress"),
                connection=_str(entry, "connection"),
            )
        )
    return entries
