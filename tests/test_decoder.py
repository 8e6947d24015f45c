"""Tests for the archive decoder — input kinds, JSON errors, field mapping."""

import io
import tempfile
from pathlib import Path

import orjson
import pytest

from httparchive.decoder import decode, decode_file
from httparchive.errors import ArchiveError, InvalidInputKind, MalformedJson
from httparchive.models.har import Archive, Entry, Request, Response, fold_headers

FIXTURE = Path(__file__).parent / "fixtures" / "testfile.har"


def _har(**log: object) -> str:
    return orjson.dumps({"log": log}).decode()


class TestInputKinds:
    def test_accepts_string(self) -> None:
        archive = decode(FIXTURE.read_text())
        assert isinstance(archive, Archive)
        assert len(archive.entries) == 26

    def test_accepts_bytes(self) -> None:
        archive = decode(FIXTURE.read_bytes())
        assert len(archive.entries) == 26

    def test_accepts_text_stream_and_leaves_it_open(self) -> None:
        with open(FIXTURE) as f:
            archive = decode(f)
            assert not f.closed
            assert f.read() == ""
        assert archive.creator.name == "Firebug"

    def test_accepts_binary_stream(self) -> None:
        archive = decode(io.BytesIO(FIXTURE.read_bytes()))
        assert archive.browser.name == "Firefox"

    def test_accepts_byte_order_mark(self) -> None:
        raw = FIXTURE.read_bytes()
        for src in (
            b"\xef\xbb\xbf" + raw,
            bytearray(b"\xef\xbb\xbf" + raw),
            io.BytesIO(b"\xef\xbb\xbf" + raw),
            "\ufeff" + raw.decode(),
            io.StringIO("\ufeff" + raw.decode()),
        ):
            assert len(decode(src).entries) == 26

    def test_rejects_number(self) -> None:
        with pytest.raises(InvalidInputKind):
            decode(123)

    def test_rejects_other_objects(self) -> None:
        for bad in (None, 1.5, ["{}"], {"log": {}}):
            with pytest.raises(InvalidInputKind) as exc_info:
                decode(bad)
            assert isinstance(exc_info.value, TypeError)
            assert isinstance(exc_info.value, ArchiveError)

    def test_rejects_stream_returning_non_text(self) -> None:
        class Odd:
            def read(self) -> int:
                return 42

        with pytest.raises(InvalidInputKind):
            decode(Odd())


class TestMalformedJson:
    def test_not_json(self) -> None:
        with pytest.raises(MalformedJson) as exc_info:
            decode("not json")
        assert isinstance(exc_info.value, ValueError)
        assert isinstance(exc_info.value.__cause__, orjson.JSONDecodeError)

    def test_truncated_document(self) -> None:
        text = FIXTURE.read_text()
        with pytest.raises(MalformedJson):
            decode(text[: len(text) // 2])

    def test_top_level_must_be_object(self) -> None:
        for text in ("[1, 2]", '"log"', "42", "null"):
            with pytest.raises(MalformedJson):
                decode(text)


class TestMissingSections:
    def test_log_without_pages_or_entries(self) -> None:
        archive = decode('{"log": {"version": "1.1"}}')
        assert archive.version == "1.1"
        assert archive.pages == ()
        assert archive.entries == ()
        assert archive.creator.name == ""
        assert archive.browser.version == ""

    def test_empty_object(self) -> None:
        archive = decode("{}")
        assert archive.pages == ()
        assert archive.entries == ()
        assert archive.first_page is None

    def test_page_without_timings(self) -> None:
        archive = decode(_har(pages=[{"id": "p1", "title": "T"}]))
        page = archive.pages[0]
        assert page.id == "p1"
        assert page.on_content_load is None
        assert page.on_load is None

    def test_unavailable_timing_is_missing(self) -> None:
        archive = decode(
            _har(pages=[{"id": "p1", "pageTimings": {"onContentLoad": -1, "onLoad": 120}}])
        )
        assert archive.pages[0].on_content_load is None
        assert archive.pages[0].on_load == 120

    def test_entry_without_request_or_response(self) -> None:
        archive = decode(_har(entries=[{"time": 12}]))
        entry = archive.entries[0]
        assert entry.time == 12
        assert entry.request.model_dump() == Request().model_dump()
        assert entry.response.model_dump() == Response().model_dump()
        assert entry.request.headers_size == -1
        assert entry.response.content == {}

    def test_wrong_types_fall_back_to_defaults(self) -> None:
        archive = decode(
            _har(
                creator="Firebug",
                pages={"id": "p1"},
                entries=[
                    {
                        "time": "54",
                        "request": {"method": 7, "headers": {"Host": "x"}},
                        "response": {"status": "200", "content": []},
                    }
                ],
            )
        )
        assert archive.creator.name == ""
        assert archive.pages == ()
        entry = archive.entries[0]
        assert entry.time == 0
        assert entry.request.http_method == ""
        assert entry.request.headers == {}
        assert entry.response.status == 0
        assert entry.response.content == {}

    def test_non_object_entries_keep_count(self) -> None:
        archive = decode(_har(entries=[None, {"pageref": "p1"}, 3]))
        assert len(archive.entries) == 3
        assert archive.entries[0].model_dump() == Entry().model_dump()
        assert archive.entries[1].pageref == "p1"


class TestHeaders:
    def test_last_occurrence_wins(self) -> None:
        headers = fold_headers([{"name": "X", "value": "1"}, {"name": "X", "value": "2"}])
        assert headers == {"X": "2"}

    def test_names_are_case_sensitive(self) -> None:
        headers = fold_headers([{"name": "X", "value": "1"}, {"name": "x", "value": "2"}])
        assert headers == {"X": "1", "x": "2"}

    def test_skips_malformed_pairs(self) -> None:
        headers = fold_headers(["Host: a", {"value": "no-name"}, {"name": "Accept"}])
        assert headers == {"Accept": ""}

    def test_dedup_through_decode(self) -> None:
        archive = decode(
            _har(
                entries=[
                    {
                        "request": {"headers": [{"name": "X", "value": "1"}, {"name": "X", "value": "2"}]},
                        "response": {"headers": [{"name": "Set", "value": "a"}, {"name": "Set", "value": "b"}]},
                    }
                ]
            )
        )
        assert archive.entries[0].request.headers["X"] == "2"
        assert archive.entries[0].response.headers["Set"] == "b"


class TestFixtureArchive:
    @pytest.fixture
    def archive(self) -> Archive:
        return decode_file(FIXTURE)

    def test_creator_and_browser(self, archive: Archive) -> None:
        assert archive.version == "1.2"
        assert archive.creator.name == "Firebug"
        assert archive.creator.version == "1.11"
        assert archive.browser.name == "Firefox"
        assert archive.browser.version == "21.0"

    def test_pages(self, archive: Archive) -> None:
        assert len(archive.pages) == 1
        page = archive.pages[0]
        assert page.started_datetime == "2013-05-28T22:16:19.883+02:00"
        assert page.id == "page_50735"
        assert page.title == "Software is hard"
        assert page.on_content_load == 4994
        assert page.on_load == 6745

    def test_entry_fields(self, archive: Archive) -> None:
        entry = archive.entries[0]
        assert entry.pageref == "page_50735"
        assert entry.started_datetime == "2013-05-28T22:16:19.883+02:00"
        assert entry.time == 54
        assert entry.cache == {}
        assert entry.timings == {
            "blocked": 15, "dns": 0, "connect": 0, "send": 0, "wait": 39, "receive": 0,
        }
        assert entry.server_ip_address == "91.239.200.165"
        assert entry.connection == "80"

    def test_request_fields(self, archive: Archive) -> None:
        request = archive.entries[0].request
        assert request.http_method == "GET"
        assert request.url == "http://www.janodvarko.cz/"
        assert request.http_version == "HTTP/1.1"
        assert request.cookies == ()
        assert request.query_string == ()
        assert request.headers_size == 316
        assert request.body_size == -1
        assert request.headers["Host"] == "www.janodvarko.cz"
        assert request.headers["Accept-Encoding"] == "gzip, deflate"
        assert request.headers["Connection"] == "keep-alive"
        assert len(request.headers) == 6

    def test_response_fields(self, archive: Archive) -> None:
        response = archive.entries[0].response
        assert response.status == 302
        assert response.status_text == "Moved Temporarily"
        assert response.http_version == "HTTP/1.1"
        assert response.cookies == ()
        assert response.content == {"mimeType": "text/html", "size": 0}
        assert response.redirect_url == "blog/index.php"
        assert response.headers_size == 281
        assert response.body_size == 0
        assert response.headers["Location"] == "blog/index.php"
        assert response.headers["Keep-Alive"] == "timeout=5, max=50"
        assert response.headers["Content-Type"] == "text/html"

    def test_entry_order_preserved(self, archive: Archive) -> None:
        urls = [e.request.url for e in archive.entries]
        assert urls[0] == "http://www.janodvarko.cz/"
        assert urls[2] == "http://www.janodvarko.cz/blog/"
        assert urls[-1].endswith("/closelabel.gif")

    def test_decoding_is_deterministic(self, archive: Archive) -> None:
        again = decode(FIXTURE.read_text())
        assert again == archive
        assert again is not archive
        assert again.entries[0].request.headers is not archive.entries[0].request.headers


class TestDecodeFile:
    def test_strips_byte_order_mark(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "bom.har"
            path.write_bytes(b"\xef\xbb\xbf" + _har(version="1.2").encode())
            assert decode_file(path).version == "1.2"

    def test_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(FileNotFoundError):
                decode_file(Path(tmpdir) / "nope.har")
