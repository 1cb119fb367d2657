"""Content-type resolution for release assets.

The forge uses the declared Content-Type to decide whether a download link
previews inline or forces a download, so the mapping is explicit and built
once per process instead of mutating the interpreter-wide ``mimetypes``
registry.
"""

from __future__ import annotations

import mimetypes
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

__all__ = ["MimeTable", "DEFAULT_CONTENT_TYPE", "ASSET_CONTENT_TYPES"]

DEFAULT_CONTENT_TYPE = "application/octet-stream"

ASSET_CONTENT_TYPES: Mapping[str, str] = {
    ".exe": "application/octet-stream",
    ".zip": "application/zip",
    ".tar.gz": "application/gzip",
    ".txt": "text/plain",
}


def _platform_types() -> mimetypes.MimeTypes:
    # A private instance still reads the system mime.types files.
    return mimetypes.MimeTypes()


@dataclass(frozen=True, slots=True)
class MimeTable:
    """Extension to content-type lookup.

    Attributes:
        overrides: Lower-case suffix (".tar.gz", ".zip") to content type.
            Checked before the platform table, longest suffix first.
        platform: Platform table consulted when no override matches.
    """

    overrides: Mapping[str, str] = field(default_factory=lambda: dict(ASSET_CONTENT_TYPES))
    platform: mimetypes.MimeTypes | None = field(default_factory=_platform_types)

    @classmethod
    def default(cls) -> MimeTable:
        return cls()

    def resolve(self, path: Path | str) -> str:
        """Return the content type for ``path``, or ``application/octet-stream``."""
        name = Path(path).name.lower()

        for suffix in sorted(self.overrides, key=len, reverse=True):
            if name.endswith(suffix) and len(name) > len(suffix):
                return self.overrides[suffix]

        if self.platform is not None:
            guessed, _encoding = self.platform.guess_type(name, strict=False)
            if guessed:
                return guessed

        return DEFAULT_CONTENT_TYPE
