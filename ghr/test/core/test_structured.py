"""Tests for ghr.core.structured helpers."""

from ghr.core.structured import as_str_dict, get_bool, get_int, get_str


def test_as_str_dict() -> None:
    assert as_str_dict({"a": 1}) == {"a": 1}
    assert as_str_dict({1: "a"}) is None
    assert as_str_dict([1]) is None


def test_get_str_strips_and_rejects_empty() -> None:
    data: dict[str, object] = {"a": " x ", "b": "  ", "c": 3}
    assert get_str(data, "a") == "x"
    assert get_str(data, "b") is None
    assert get_str(data, "c") is None
    assert get_str(data, "missing") is None


def test_get_int_rejects_bool() -> None:
    data: dict[str, object] = {"id": 7, "flag": True, "s": "7"}
    assert get_int(data, "id") == 7
    assert get_int(data, "flag") is None
    assert get_int(data, "s") is None


def test_get_bool() -> None:
    data: dict[str, object] = {"t": True, "f": False, "s": "true"}
    assert get_bool(data, "t") is True
    assert get_bool(data, "f") is False
    assert get_bool(data, "s") is False
    assert get_bool(data, "missing") is False
