"""Tests for ghr.core.errors module."""

from ghr.core.errors import ErrorCode


class TestErrorCodeValues:
    """Exit codes are a public contract; their values must not drift."""

    def test_values(self) -> None:
        assert [(c.name, int(c)) for c in ErrorCode] == [
            ("OK", 0),
            ("UNKNOWN_ERROR", 1),
            ("OWNER_NOT_FOUND", 2),
            ("REPO_NOT_FOUND", 3),
            ("TAG_NAME_REQUIRED", 4),
            ("TOKEN_NOT_FOUND", 5),
            ("ASSET_DIR_NOT_FOUND", 6),
            ("CREATE_REQUEST_ERROR", 7),
            ("BAD_PATTERN", 8),
            ("ASSET_READ_ERROR", 9),
            ("ASSET_UPLOAD_ERROR", 10),
        ]


class TestErrorCodeUsage:
    def test_can_use_as_int(self) -> None:
        code: int = ErrorCode.ASSET_UPLOAD_ERROR
        assert code == 10

    def test_is_success(self) -> None:
        assert ErrorCode.OK.is_success is True
        assert ErrorCode.TOKEN_NOT_FOUND.is_success is False

    def test_is_error(self) -> None:
        assert ErrorCode.OK.is_error is False
        assert all(c.is_error for c in ErrorCode if c != ErrorCode.OK)

    def test_str(self) -> None:
        assert str(ErrorCode.ASSET_DIR_NOT_FOUND) == "asset dir not found"
