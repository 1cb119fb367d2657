"""Process exit codes.

Each configuration or protocol failure the tool can hit maps to exactly one
code so that build pipelines can branch on the exit status. The numeric
values are part of the command-line contract and must stay stable.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the ``ghr`` command."""

    OK = 0
    UNKNOWN_ERROR = 1
    OWNER_NOT_FOUND = 2
    REPO_NOT_FOUND = 3
    TAG_NAME_REQUIRED = 4
    TOKEN_NOT_FOUND = 5
    ASSET_DIR_NOT_FOUND = 6
    CREATE_REQUEST_ERROR = 7
    BAD_PATTERN = 8
    ASSET_READ_ERROR = 9
    ASSET_UPLOAD_ERROR = 10

    def __str__(self) -> str:
        """Return human-readable name."""
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
