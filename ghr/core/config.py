"""Typed configuration loaded from the process environment.

The environment is read exactly once, at startup, by :func:`load_config`.
Nothing downstream touches ``os.environ``; the resulting :class:`Config` is
passed explicitly to the services that need it.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from .result import Err, Ok, Result

__all__ = [
    "Config",
    "ConfigError",
    "Credential",
    "load_config",
    "DEFAULT_API_URL",
    "DEFAULT_TIMEOUT_SECONDS",
    "TOKEN_ENV",
]

TOKEN_ENV = "GITHUB_TOKEN"
API_URL_ENV = "GITHUB_API_URL"
TIMEOUT_ENV = "GHR_TIMEOUT"
REPOSITORY_ENV = "GITHUB_REPOSITORY"

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the environment does not describe a usable run."""

    kind: Literal["token_missing", "invalid_timeout"]
    message: str


@dataclass(frozen=True, slots=True)
class Credential:
    """Opaque bearer token shared read-only by the publisher and the uploader.

    ``repr`` and ``str`` never show the token so a credential can travel
    through dataclasses and error messages without leaking.
    """

    token: str

    def bearer(self) -> str:
        return f"Bearer {self.token}"

    def __repr__(self) -> str:
        return "Credential(token=***)"

    def __str__(self) -> str:
        return "***"


@dataclass(frozen=True, slots=True)
class Config:
    """Runtime configuration for one invocation."""

    credential: Credential
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    repository: str | None = None


def load_config(environ: Mapping[str, str]) -> Result[Config, ConfigError]:
    """Build a Config from environment variables.

    Args:
        environ: Usually ``os.environ``; tests pass a plain dict.

    Returns:
        Ok with Config, or Err with ConfigError when the token is missing
        or the timeout cannot be parsed.
    """
    token = environ.get(TOKEN_ENV, "").strip()
    if not token:
        return Err(ConfigError(kind="token_missing", message=f"missing {TOKEN_ENV}"))

    api_url = environ.get(API_URL_ENV, "").strip().rstrip("/") or DEFAULT_API_URL

    timeout = DEFAULT_TIMEOUT_SECONDS
    raw_timeout = environ.get(TIMEOUT_ENV, "").strip()
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            return Err(
                ConfigError(
                    kind="invalid_timeout",
                    message=f"invalid {TIMEOUT_ENV}: {raw_timeout!r}",
                )
            )
        if not math.isfinite(timeout) or timeout <= 0:
            return Err(
                ConfigError(
                    kind="invalid_timeout",
                    message=f"{TIMEOUT_ENV} must be a positive number of seconds: {raw_timeout!r}",
                )
            )

    repository = environ.get(REPOSITORY_ENV, "").strip() or None

    return Ok(
        Config(
            credential=Credential(token=token),
            api_url=api_url,
            timeout=timeout,
            repository=repository,
        )
    )
