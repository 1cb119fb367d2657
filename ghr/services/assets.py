"""Asset discovery.

Files are enumerated once, before the release is created, and the list is
never re-scanned: what was found is what gets uploaded, in sorted order.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Literal

from ghr.core.result import Err, Ok, Result

__all__ = ["DiscoveryError", "discover_assets", "validate_pattern"]


@dataclass(frozen=True, slots=True)
class DiscoveryError:
    kind: Literal["dir_not_found", "bad_pattern"]
    message: str


def validate_pattern(pattern: str) -> str | None:
    """Return why ``pattern`` is unusable, or None if it is fine.

    Patterns are matched relative to the asset directory and may not
    escape it or recurse.
    """
    if not pattern.strip():
        return "empty pattern"
    if pattern.startswith(("/", "\\")) or PurePosixPath(pattern).is_absolute():
        return f"absolute pattern not allowed: {pattern}"

    parts = pattern.replace("\\", "/").split("/")
    if any(part == ".." for part in parts):
        return f"pattern may not leave the asset directory: {pattern}"
    if any(part == "**" for part in parts):
        return f"recursive pattern not allowed: {pattern}"
    if any(part == "" for part in parts):
        return f"empty path segment in pattern: {pattern}"

    depth = 0
    for ch in pattern:
        if ch == "[":
            if depth:
                return f"nested '[' in pattern: {pattern}"
            depth = 1
        elif ch == "]" and depth:
            depth = 0
        elif ch == "]":
            return f"unbalanced ']' in pattern: {pattern}"
    if depth:
        return f"unbalanced '[' in pattern: {pattern}"

    return None


def discover_assets(
    directory: Path, pattern: str = "*"
) -> Result[tuple[Path, ...], DiscoveryError]:
    """List the regular files in ``directory`` matching ``pattern``.

    Directories, sockets and dangling symlinks are skipped. An empty result
    is not an error.
    """
    if not directory.is_dir():
        return Err(
            DiscoveryError(kind="dir_not_found", message=f"asset directory not found: {directory}")
        )

    reason = validate_pattern(pattern)
    if reason is not None:
        return Err(DiscoveryError(kind="bad_pattern", message=reason))

    files = sorted(p for p in directory.glob(pattern) if p.is_file())
    return Ok(tuple(files))
