"""Read-only git queries."""

from .remote import GitError, RepoSlug, infer_repo_slug, origin_url, parse_repo_slug

__all__ = ["GitError", "RepoSlug", "infer_repo_slug", "origin_url", "parse_repo_slug"]
