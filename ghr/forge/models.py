"""Wire models for the release and release-asset endpoints.

Only the fields the workflow reads are modeled. Decoding is strict about
the fields the next step depends on (``id``, ``html_url``, ``upload_url``
for a release; ``id``, ``name``, ``browser_download_url`` for an asset)
and lenient about everything else.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from ghr.core.result import Err, Ok, Result
from ghr.core.structured import StrDict, as_str_dict, get_bool, get_int, get_str

__all__ = [
    "AssetRejected",
    "AssetUndecodable",
    "AssetUploaded",
    "AssetUploadOutcome",
    "MakeLatest",
    "ReleaseRequest",
    "ReleaseResult",
    "UploadedAsset",
    "decode_json_object",
    "find_html_url",
    "summarize_forge_error",
]

MakeLatest = Literal["true", "false", "legacy"]

_HTML_URL_FRAGMENT = re.compile(r'"html_url"\s*:\s*"(?P<url>https?://[^"\s]+)"')


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """Body of ``POST /repos/{owner}/{repo}/releases``.

    Every field is optional. Empty strings, ``False`` and ``None`` are left
    out of the payload entirely, so the forge applies its own defaults
    instead of receiving an explicit ``""`` or ``false``.
    """

    tag_name: str = ""
    target_commitish: str = ""
    name: str = ""
    body: str = ""
    draft: bool = False
    prerelease: bool = False
    generate_release_notes: bool = False
    make_latest: MakeLatest | None = None

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {}
        for key in ("tag_name", "target_commitish", "name", "body"):
            value: str = getattr(self, key)
            if value:
                payload[key] = value
        for key in ("draft", "prerelease", "generate_release_notes"):
            if getattr(self, key):
                payload[key] = True
        if self.make_latest is not None:
            payload["make_latest"] = self.make_latest
        return payload


@dataclass(frozen=True, slots=True)
class ReleaseResult:
    """A created release and the template its assets are uploaded through.

    ``upload_url`` still carries the ``{?name,label}`` hypermedia marker;
    see :func:`ghr.forge.uploader.expand_upload_url`. It is only usable with
    the credential that created the release.
    """

    id: int
    html_url: str
    upload_url: str
    url: str | None = None
    tag_name: str | None = None
    name: str | None = None
    draft: bool = False
    prerelease: bool = False

    @classmethod
    def from_json(cls, data: StrDict) -> Result[ReleaseResult, str]:
        release_id = get_int(data, "id")
        html_url = get_str(data, "html_url")
        upload_url = get_str(data, "upload_url")
        if release_id is None or html_url is None or upload_url is None:
            missing = [
                key
                for key, value in (
                    ("id", release_id),
                    ("html_url", html_url),
                    ("upload_url", upload_url),
                )
                if value is None
            ]
            return Err(f"release response missing {', '.join(missing)}")
        return Ok(
            cls(
                id=release_id,
                html_url=html_url,
                upload_url=upload_url,
                url=get_str(data, "url"),
                tag_name=get_str(data, "tag_name"),
                name=get_str(data, "name"),
                draft=get_bool(data, "draft"),
                prerelease=get_bool(data, "prerelease"),
            )
        )


@dataclass(frozen=True, slots=True)
class UploadedAsset:
    """An asset the forge accepted."""

    id: int
    name: str
    browser_download_url: str
    size: int | None = None
    content_type: str | None = None
    state: str | None = None

    @classmethod
    def from_json(cls, data: StrDict) -> Result[UploadedAsset, str]:
        asset_id = get_int(data, "id")
        name = get_str(data, "name")
        download = get_str(data, "browser_download_url")
        if asset_id is None or name is None or download is None:
            missing = [
                key
                for key, value in (
                    ("id", asset_id),
                    ("name", name),
                    ("browser_download_url", download),
                )
                if value is None
            ]
            return Err(f"asset response missing {', '.join(missing)}")
        return Ok(
            cls(
                id=asset_id,
                name=name,
                browser_download_url=download,
                size=get_int(data, "size"),
                content_type=get_str(data, "content_type"),
                state=get_str(data, "state"),
            )
        )


@dataclass(frozen=True, slots=True)
class AssetUploaded:
    path: Path
    asset: UploadedAsset


@dataclass(frozen=True, slots=True)
class AssetRejected:
    """The forge answered the upload with something other than 201."""

    path: Path
    status: int
    reason: str
    body: str

    @property
    def is_duplicate(self) -> bool:
        """True for the 422 the forge returns when the asset name is taken."""
        return self.status == 422 and "already_exists" in self.body


@dataclass(frozen=True, slots=True)
class AssetUndecodable:
    """The forge returned 201 but the body could not be decoded.

    The asset exists forge-side; only the local view of it is missing.
    """

    path: Path
    status: int
    message: str
    body: str


type AssetUploadOutcome = AssetUploaded | AssetRejected | AssetUndecodable


def decode_json_object(body: bytes) -> Result[StrDict, str]:
    """Parse ``body`` as a JSON object."""
    try:
        obj: object = json.loads(body.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return Err(f"JSON parse error: {e}")
    data = as_str_dict(obj)
    if data is None:
        return Err("Expected JSON object")
    return Ok(data)


def summarize_forge_error(body: bytes) -> str | None:
    """Flatten a forge error document into one line.

    The forge reports validation failures as::

        {"message": "Validation Failed",
         "errors": [{"resource": "Release", "code": "invalid", "field": "target_commitish"}]}

    which becomes ``Validation Failed (target_commitish: invalid)``.
    Returns None when the body is not such a document.
    """
    decoded = decode_json_object(body)
    if isinstance(decoded, Err):
        return None
    data = decoded.value
    message = get_str(data, "message")
    if message is None:
        return None

    details: list[str] = []
    errors = data.get("errors")
    if isinstance(errors, list):
        for item in errors:
            entry = as_str_dict(item)
            if entry is None:
                continue
            text = get_str(entry, "message")
            if text is None:
                code = get_str(entry, "code") or "error"
                field = get_str(entry, "field")
                text = f"{field}: {code}" if field else code
            details.append(text)

    if details:
        return f"{message} ({'; '.join(details)})"
    return message


def find_html_url(body: bytes) -> str | None:
    """Dig an ``html_url`` out of a body that failed to decode as a whole."""
    m = _HTML_URL_FRAGMENT.search(body.decode("utf-8", errors="replace"))
    if m is None:
        return None
    return m.group("url")
