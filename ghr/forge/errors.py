"""Error payloads for the release workflow."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

ReleaseErrorKind = Literal["invalid_input", "create_request", "create_rejected", "create_decode"]
AssetErrorKind = Literal["invalid_template", "asset_read", "asset_upload"]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Release creation failed; no asset may be uploaded.

    ``create_decode`` is special: the forge answered 201, so the release
    exists even though this run cannot continue. ``hint`` then carries the
    release URL when one could be recovered.
    """

    kind: ReleaseErrorKind
    message: str
    status: int = 0
    body: str = ""
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


@dataclass(frozen=True, slots=True)
class AssetError:
    """An asset could not be sent: unreadable file, bad template, or transport failure."""

    kind: AssetErrorKind
    path: Path
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.path.name}: {self.message} (hint: {self.hint})"
        return f"{self.path.name}: {self.message}"
