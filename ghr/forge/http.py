"""HTTP client abstraction for the forge REST API.

This module provides:
- HttpClient: Protocol for the two POST shapes the release workflow needs
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Recording implementation for tests

A response the server actually sent is always ``Ok(HttpResponse)``, whatever
its status; classifying 201 versus 422 is the caller's job. ``Err(HttpError)``
is reserved for transport failures (DNS, TLS, reset, timeout, bad URL).
"""

from __future__ import annotations

import http.client
import json
import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import BinaryIO, Protocol, runtime_checkable

from ghr import __version__
from ghr.core.result import Err, Ok, Result

__all__ = [
    "BodyLengthError",
    "ExactLengthBody",
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
    "RecordedRequest",
]

DEFAULT_USER_AGENT = f"ghr/{__version__}"


class BodyLengthError(OSError):
    """A streamed body did not match its declared Content-Length."""


class ExactLengthBody:
    """Read side of a file body that yields exactly ``length`` bytes.

    http.client reads a file body until EOF regardless of the Content-Length
    header. A file that grew or shrank since it was measured would send a
    request whose framing lies, so both cases raise :class:`BodyLengthError`
    instead. The error subclasses OSError, so urllib reports it as a
    transport failure.
    """

    def __init__(self, source: BinaryIO, length: int) -> None:
        self._source = source
        self._length = length
        self._remaining = length

    def read(self, size: int = -1) -> bytes:
        if self._remaining == 0:
            if self._source.read(1):
                raise BodyLengthError(f"body is longer than the declared {self._length} bytes")
            return b""
        if size < 0 or size > self._remaining:
            size = self._remaining
        chunk = self._source.read(size)
        if not chunk:
            sent = self._length - self._remaining
            raise BodyLengthError(
                f"body ended after {sent} of the declared {self._length} bytes"
            )
        self._remaining -= len(chunk)
        return chunk

    def read_all(self) -> bytes:
        chunks: list[bytes] = []
        while chunk := self.read(64 * 1024):
            chunks.append(chunk)
        return b"".join(chunks)


@dataclass(frozen=True, slots=True)
class HttpError:
    """Transport-level failure; no usable response was received.

    Attributes:
        url: The URL that failed
        status: Always 0; kept so callers can format errors uniformly
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """A complete response: status line, headers and the whole body."""

    url: str
    status: int
    reason: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def status_line(self) -> str:
        return f"{self.status} {self.reason}".strip()

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations, injectable for tests."""

    def post_json(
        self,
        url: str,
        payload: Mapping[str, object],
        headers: Mapping[str, str],
    ) -> Result[HttpResponse, HttpError]:
        """POST ``payload`` serialized as JSON."""
        ...

    def post_stream(
        self,
        url: str,
        body: BinaryIO,
        *,
        content_length: int,
        headers: Mapping[str, str],
    ) -> Result[HttpResponse, HttpError]:
        """POST ``body`` read incrementally from an open binary stream.

        ``content_length`` is sent verbatim as the Content-Length header.
        Implementations must not infer the length themselves: a stream has
        no length, and urllib would otherwise fall back to chunked transfer
        encoding, which the asset upload endpoint rejects. Exactly
        ``content_length`` bytes are sent; a stream that is shorter or longer
        is a transport error.
        """
        ...


class RealHttpClient:
    """Real HTTP client using urllib.

    Handles:
    - HTTPS with system certificates
    - Non-2xx responses returned as data, not raised
    - One bounded timeout per socket operation
    """

    def __init__(self, timeout: float = 60.0, user_agent: str = DEFAULT_USER_AGENT) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def post_json(
        self,
        url: str,
        payload: Mapping[str, object],
        headers: Mapping[str, str],
    ) -> Result[HttpResponse, HttpError]:
        data = json.dumps(dict(payload)).encode("utf-8")
        merged = {"Content-Type": "application/json", **headers}
        merged["Content-Length"] = str(len(data))
        return self._send(url, data, merged)

    def post_stream(
        self,
        url: str,
        body: BinaryIO,
        *,
        content_length: int,
        headers: Mapping[str, str],
    ) -> Result[HttpResponse, HttpError]:
        merged = dict(headers)
        merged["Content-Length"] = str(content_length)
        return self._send(url, ExactLengthBody(body, content_length), merged)

    def _send(
        self,
        url: str,
        data: bytes | ExactLengthBody,
        headers: Mapping[str, str],
    ) -> Result[HttpResponse, HttpError]:
        try:
            req = urllib.request.Request(
                url,
                data=data,
                headers={"User-Agent": self.user_agent, **headers},
                method="POST",
            )
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(
                    HttpResponse(
                        url=url,
                        status=response.status,
                        reason=response.reason or "",
                        headers=dict(response.headers.items()),
                        body=response.read(),
                    )
                )
        except urllib.error.HTTPError as e:
            try:
                body = e.read()
            except OSError:
                body = b""
            finally:
                e.close()
            headers_out = dict(e.headers.items()) if e.headers is not None else {}
            return Ok(
                HttpResponse(
                    url=url,
                    status=e.code,
                    reason=str(e.reason or ""),
                    headers=headers_out,
                    body=body,
                )
            )
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except http.client.HTTPException as e:
            return Err(HttpError(url=url, status=0, message=f"Protocol error: {e!r}"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


@dataclass(frozen=True, slots=True)
class RecordedRequest:
    """One request seen by MockHttpClient."""

    method: str
    url: str
    headers: Mapping[str, str]
    body: bytes
    content_length: int | None = None
    payload: Mapping[str, object] | None = None

    def header(self, name: str) -> str | None:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are queued per URL and consumed in order. Streamed bodies are
    read through :class:`ExactLengthBody` like the real client does, so a
    length mismatch fails the same way and tests can assert on the bytes sent.

    Usage:
        client = MockHttpClient()
        client.respond("https://api.example.com/repos/o/r/releases", 201, json={"id": 1})
        result = client.post_json("https://api.example.com/repos/o/r/releases", {}, {})
        assert result.value.status == 201
    """

    def __init__(self) -> None:
        self._responses: dict[str, list[HttpResponse | HttpError]] = {}
        self.calls: list[RecordedRequest] = []

    def queue(self, url: str, response: HttpResponse | HttpError) -> None:
        self._responses.setdefault(url, []).append(response)

    def respond(
        self,
        url: str,
        status: int,
        *,
        json: object = None,
        body: bytes | None = None,
        reason: str = "",
        headers: Mapping[str, str] | None = None,
    ) -> None:
        """Queue a response; ``json`` is serialized unless ``body`` is given."""
        if body is None:
            body = b"" if json is None else _json_dumps(json)
        self.queue(
            url,
            HttpResponse(
                url=url,
                status=status,
                reason=reason or http.client.responses.get(status, ""),
                headers=dict(headers or {}),
                body=body,
            ),
        )

    def fail(self, url: str, message: str = "Connection refused") -> None:
        """Queue a transport failure."""
        self.queue(url, HttpError(url=url, status=0, message=message))

    def post_json(
        self,
        url: str,
        payload: Mapping[str, object],
        headers: Mapping[str, str],
    ) -> Result[HttpResponse, HttpError]:
        body = _json_dumps(dict(payload))
        self.calls.append(
            RecordedRequest(
                method="POST",
                url=url,
                headers=dict(headers),
                body=body,
                content_length=len(body),
                payload=dict(payload),
            )
        )
        return self._next(url)

    def post_stream(
        self,
        url: str,
        body: BinaryIO,
        *,
        content_length: int,
        headers: Mapping[str, str],
    ) -> Result[HttpResponse, HttpError]:
        try:
            sent = ExactLengthBody(body, content_length).read_all()
        except BodyLengthError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        self.calls.append(
            RecordedRequest(
                method="POST",
                url=url,
                headers=dict(headers),
                body=sent,
                content_length=content_length,
            )
        )
        return self._next(url)

    def urls(self) -> list[str]:
        return [c.url for c in self.calls]

    def _next(self, url: str) -> Result[HttpResponse, HttpError]:
        queued = self._responses.get(url)
        if not queued:
            return Err(HttpError(url=url, status=0, message="No response queued (mock)"))
        response = queued.pop(0)
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)


def _json_dumps(obj: object) -> bytes:
    return json.dumps(obj).encode("utf-8")
