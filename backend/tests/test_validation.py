import pytest

from gsd.errors import InvalidArgumentError
from gsd.models import Status
from gsd.validation import MAX_STR_LEN, normalize_and_check, parse_status, status_token


def test_normalize_trims_whitespace():
    assert normalize_and_check("  Books To Read \t\n") == "Books To Read"


@pytest.mark.parametrize("value", ["", " ", "   ", "\t\n"])
def test_normalize_rejects_blank(value):
    with pytest.raises(InvalidArgumentError) as exc:
        normalize_and_check(value)
    assert exc.value.message == "string is empty"


def test_normalize_limit_applies_after_trim():
    value = "a" * MAX_STR_LEN
    assert normalize_and_check(f"  {value}  ") == value
    with pytest.raises(InvalidArgumentError) as exc:
        normalize_and_check(value + "b")
    assert exc.value.message == "string is too long"


def test_normalize_counts_bytes_not_characters():
    # "é" is two bytes in UTF-8.
    assert normalize_and_check("é" * 50) == "é" * 50
    with pytest.raises(InvalidArgumentError):
        normalize_and_check("é" * 51)


def test_normalize_rejects_non_string():
    with pytest.raises(InvalidArgumentError):
        normalize_and_check(None)


def test_parse_status_tokens():
    assert parse_status("incomplete") is Status.INCOMPLETE
    assert parse_status("complete") is Status.COMPLETE


@pytest.mark.parametrize("token", ["", "done", "Complete", "COMPLETE", " complete", None])
def test_parse_status_rejects_other_tokens(token):
    with pytest.raises(InvalidArgumentError):
        parse_status(token)


@pytest.mark.parametrize("status", list(Status))
def test_status_round_trip(status):
    assert parse_status(status_token(status)) is status
    assert parse_status(str(status)) is status


def test_error_string_names_kind():
    assert str(InvalidArgumentError("string is empty")) == "invalid argument: string is empty"


def test_normalize_trims_unicode_whitespace_only():
    assert normalize_and_check("\u3000 Read Suttree \xa0") == "Read Suttree"
    # information separators are not whitespace
    assert normalize_and_check("\x1c") == "\x1c"
    assert normalize_and_check("\x1fname\x1e") == "\x1fname\x1e"
