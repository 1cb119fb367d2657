"""Tests for ghr.forge.http - HTTP client abstraction."""

from __future__ import annotations

import io
import json
import threading
from collections.abc import Iterator
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path

import pytest

from ghr.core.result import Err, Ok
from ghr.forge.http import (
    BodyLengthError,
    ExactLengthBody,
    HttpClient,
    HttpError,
    HttpResponse,
    MockHttpClient,
    RealHttpClient,
)


# =============================================================================
# Value types
# =============================================================================


class TestHttpError:
    def test_str_without_status(self) -> None:
        error = HttpError(url="https://example.com", status=0, message="Timeout")
        assert str(error) == "Timeout (https://example.com)"

    def test_str_with_status(self) -> None:
        error = HttpError(url="https://example.com/api", status=500, message="Internal Error")
        assert str(error) == "HTTP 500: Internal Error (https://example.com/api)"


class TestHttpResponse:
    def test_status_line(self) -> None:
        response = HttpResponse(url="u", status=422, reason="Unprocessable Entity")
        assert response.status_line == "422 Unprocessable Entity"

    def test_header_lookup_is_case_insensitive(self) -> None:
        response = HttpResponse(url="u", status=201, reason="Created", headers={"Location": "x"})
        assert response.header("location") == "x"
        assert response.header("etag") is None

    def test_text_replaces_invalid_utf8(self) -> None:
        response = HttpResponse(url="u", status=500, reason="", body=b"ok \xff")
        assert response.text().startswith("ok ")


# =============================================================================
# ExactLengthBody
# =============================================================================


class TestExactLengthBody:
    def test_yields_declared_bytes(self) -> None:
        body = ExactLengthBody(io.BytesIO(b"abcdef"), 6)
        assert body.read(4) == b"abcd"
        assert body.read(4) == b"ef"
        assert body.read(4) == b""

    def test_read_all(self) -> None:
        assert ExactLengthBody(io.BytesIO(b"x" * 200_000), 200_000).read_all() == b"x" * 200_000

    def test_empty_body(self) -> None:
        assert ExactLengthBody(io.BytesIO(b""), 0).read_all() == b""

    def test_source_longer_than_declared(self) -> None:
        """Bytes past the declared length are never sent silently."""
        body = ExactLengthBody(io.BytesIO(b"abcdef"), 4)
        assert body.read(10) == b"abcd"
        with pytest.raises(BodyLengthError, match="longer than the declared 4 bytes"):
            body.read(10)

    def test_source_shorter_than_declared(self) -> None:
        body = ExactLengthBody(io.BytesIO(b"ab"), 5)
        assert body.read(10) == b"ab"
        with pytest.raises(BodyLengthError, match="after 2 of the declared 5 bytes"):
            body.read(10)

    def test_is_an_os_error(self) -> None:
        assert issubclass(BodyLengthError, OSError)


# =============================================================================
# MockHttpClient
# =============================================================================


class TestMockHttpClient:
    def test_isinstance_check(self) -> None:
        assert isinstance(MockHttpClient(), HttpClient)

    def test_post_json_records_payload(self) -> None:
        client = MockHttpClient()
        client.respond("https://api/x", 201, json={"id": 1})

        result = client.post_json("https://api/x", {"tag_name": "v1"}, {"Authorization": "t"})

        assert isinstance(result, Ok)
        assert result.value.status == 201
        assert result.value.reason == "Created"
        assert json.loads(result.value.body) == {"id": 1}
        assert client.calls[0].payload == {"tag_name": "v1"}
        assert client.calls[0].header("authorization") == "t"

    def test_post_stream_reads_body_and_length(self) -> None:
        client = MockHttpClient()
        client.respond("https://up/x", 201)

        client.post_stream("https://up/x", io.BytesIO(b"abc"), content_length=3, headers={})

        assert client.calls[0].body == b"abc"
        assert client.calls[0].content_length == 3

    def test_post_stream_length_mismatch_is_transport_error(self) -> None:
        client = MockHttpClient()
        client.respond("https://up/x", 201)

        result = client.post_stream(
            "https://up/x", io.BytesIO(b"abcd"), content_length=3, headers={}
        )

        assert isinstance(result, Err)
        assert result.error.status == 0
        assert "longer" in result.error.message
        assert client.calls == []

    def test_responses_are_consumed_in_order(self) -> None:
        client = MockHttpClient()
        client.respond("https://api/x", 201)
        client.respond("https://api/x", 422)

        first = client.post_json("https://api/x", {}, {})
        second = client.post_json("https://api/x", {}, {})
        third = client.post_json("https://api/x", {}, {})

        assert isinstance(first, Ok) and first.value.status == 201
        assert isinstance(second, Ok) and second.value.status == 422
        assert isinstance(third, Err)

    def test_fail_queues_transport_error(self) -> None:
        client = MockHttpClient()
        client.fail("https://api/x", "connection reset")

        result = client.post_json("https://api/x", {}, {})

        assert isinstance(result, Err)
        assert result.error.status == 0
        assert result.error.message == "connection reset"


# =============================================================================
# RealHttpClient
# =============================================================================


class _Recorder(BaseHTTPRequestHandler):
    requests: list[dict[str, object]] = []
    status = 201
    reply: bytes = b"{}"

    def do_POST(self) -> None:  # noqa: N802
        length = int(self.headers.get("Content-Length", "0"))
        body = self.rfile.read(length)
        type(self).requests.append(
            {
                "path": self.path,
                "headers": {k.lower(): v for k, v in self.headers.items()},
                "body": body,
            }
        )
        self.send_response(type(self).status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(type(self).reply)))
        self.end_headers()
        self.wfile.write(type(self).reply)

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        return


@pytest.fixture
def local_server() -> Iterator[tuple[str, type[_Recorder]]]:
    handler = type("Handler", (_Recorder,), {"requests": [], "status": 201, "reply": b"{}"})
    server = HTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}", handler
    finally:
        server.shutdown()
        server.server_close()


class TestRealHttpClient:
    """RealHttpClient against invalid URLs and a loopback server."""

    def test_isinstance_check(self) -> None:
        assert isinstance(RealHttpClient(), HttpClient)

    def test_default_config(self) -> None:
        client = RealHttpClient()
        assert client.timeout == 60.0
        assert client.user_agent.startswith("ghr/")

    def test_invalid_url_is_transport_error(self) -> None:
        result = RealHttpClient(timeout=1.0).post_json("not-a-url", {}, {})
        assert isinstance(result, Err)
        assert result.error.status == 0

    def test_post_json_sends_payload(self, local_server: tuple[str, type[_Recorder]]) -> None:
        base, handler = local_server
        handler.reply = b'{"id": 5}'

        result = RealHttpClient(timeout=5.0).post_json(
            f"{base}/repos/o/r/releases", {"tag_name": "v1"}, {"Authorization": "Bearer t"}
        )

        assert isinstance(result, Ok)
        assert result.value.status == 201
        assert json.loads(result.value.body) == {"id": 5}
        seen = handler.requests[0]
        assert seen["path"] == "/repos/o/r/releases"
        assert json.loads(seen["body"]) == {"tag_name": "v1"}  # type: ignore[arg-type]
        headers = seen["headers"]
        assert isinstance(headers, dict)
        assert headers["content-type"] == "application/json"
        assert headers["authorization"] == "Bearer t"

    def test_error_status_is_returned_not_raised(
        self, local_server: tuple[str, type[_Recorder]]
    ) -> None:
        base, handler = local_server
        handler.status = 422
        handler.reply = b'{"message": "Validation Failed"}'

        result = RealHttpClient(timeout=5.0).post_json(f"{base}/x", {}, {})

        assert isinstance(result, Ok)
        assert result.value.status == 422
        assert b"Validation Failed" in result.value.body

    def test_post_stream_sends_explicit_length(
        self, local_server: tuple[str, type[_Recorder]], tmp_path: Path
    ) -> None:
        """A file body goes out with the given Content-Length, not chunked."""
        base, handler = local_server
        payload = bytes(range(256)) * 40
        asset = tmp_path / "asset.bin"
        asset.write_bytes(payload)

        with asset.open("rb") as f:
            result = RealHttpClient(timeout=5.0).post_stream(
                f"{base}/assets?name=asset.bin",
                f,
                content_length=len(payload),
                headers={"Content-Type": "application/octet-stream"},
            )

        assert isinstance(result, Ok)
        seen = handler.requests[0]
        headers = seen["headers"]
        assert isinstance(headers, dict)
        assert headers["content-length"] == str(len(payload))
        assert "transfer-encoding" not in headers
        assert seen["body"] == payload
        assert seen["path"] == "/assets?name=asset.bin"

    def test_post_stream_rejects_body_longer_than_declared(
        self, local_server: tuple[str, type[_Recorder]], tmp_path: Path
    ) -> None:
        """A file that grew after it was measured fails instead of overrunning."""
        base, _handler = local_server
        asset = tmp_path / "asset.bin"
        asset.write_bytes(b"0123456789")

        with asset.open("rb") as f:
            result = RealHttpClient(timeout=5.0).post_stream(
                f"{base}/assets?name=asset.bin",
                f,
                content_length=8,
                headers={"Content-Type": "application/octet-stream"},
            )

        assert isinstance(result, Err)
        assert result.error.status == 0
        assert "longer than the declared 8 bytes" in result.error.message
