"""Owner/repo inference from the local git checkout.

When ``--owner``/``--repo`` are not given and ``GITHUB_REPOSITORY`` is not
set, the slug is read from the ``origin`` remote. Both HTTPS and SSH remote
forms are understood:

    https://github.com/octo/hello.git
    git@github.com:octo/hello.git
    ssh://git@github.com/octo/hello
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from ghr.core.result import Err, Ok, Result
from ghr.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 10.0

_SCP_REMOTE = re.compile(r"^[\w.-]+@[\w.-]+:(?P<path>.+)$")
_URL_REMOTE = re.compile(r"^(?:https?|ssh|git)://(?:[^@/]+@)?[^/]+/(?P<path>.+)$")

__all__ = ["GitError", "RepoSlug", "origin_url", "parse_repo_slug", "infer_repo_slug"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git query.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class RepoSlug:
    owner: str
    repo: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_repo_slug(value: str) -> RepoSlug | None:
    """Parse ``owner/repo`` from a remote URL or a bare ``owner/repo`` string.

    Returns None when the value does not name exactly one owner and repo.
    """
    text = value.strip()
    if not text:
        return None

    path = text
    for pattern in (_URL_REMOTE, _SCP_REMOTE):
        m = pattern.match(text)
        if m:
            path = m.group("path")
            break

    path = path.strip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]

    parts = path.split("/")
    if len(parts) != 2 or not all(parts):
        return None
    return RepoSlug(owner=parts[0], repo=parts[1])


def origin_url(cwd: Path) -> Result[str, GitError]:
    """Return the fetch URL of the ``origin`` remote."""
    result = run_process(
        ["git", "remote", "get-url", "origin"], cwd=cwd, timeout=_GIT_TIMEOUT_SECONDS
    )
    match result:
        case Err(e):
            return Err(
                GitError(
                    command="remote get-url origin",
                    message=e.stderr.strip() or "git remote get-url failed",
                    returncode=e.returncode,
                )
            )
        case Ok(stdout):
            return Ok(stdout.strip())


def infer_repo_slug(cwd: Path) -> RepoSlug | None:
    """Best-effort slug from the checkout in ``cwd``; None if not inferable."""
    url = origin_url(cwd)
    if isinstance(url, Err):
        return None
    return parse_repo_slug(url.value)
