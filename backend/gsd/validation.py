"""Input normalization for string fields and status tokens.

These are pure functions: they never touch the store, so a rejected value
is rejected before any write happens.
"""

from .errors import InvalidArgumentError
from .models import Status

# Max byte length allowed by every string column.
MAX_STR_LEN = 100

# Unicode White_Space characters. str.strip() with no argument also removes
# the U+001C..U+001F separators, which are not whitespace.
WHITESPACE = (
    "\t\n\x0b\x0c\r \x85\xa0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000"
)

_STATUS_TOKENS = {
    "incomplete": Status.INCOMPLETE,
    "complete": Status.COMPLETE,
}


def normalize_and_check(value: str) -> str:
    """Trim `value` and enforce the 1..100 byte length rule.

    Length is measured in UTF-8 bytes after trimming. Returns the trimmed
    string or raises `InvalidArgumentError`.
    """
    if not isinstance(value, str):
        raise InvalidArgumentError("expected a string value")
    trimmed = value.strip(WHITESPACE)
    if not trimmed:
        raise InvalidArgumentError("string is empty")
    if len(trimmed.encode("utf-8")) > MAX_STR_LEN:
        raise InvalidArgumentError("string is too long")
    return trimmed


def parse_status(token: str) -> Status:
    """Map an exact, case-sensitive token to a `Status`."""
    try:
        return _STATUS_TOKENS[token]
    except (KeyError, TypeError):
        raise InvalidArgumentError(f"invalid status: {token!r}") from None


def status_token(status: Status) -> str:
    """Return the canonical text stored for `status`."""
    if status is Status.INCOMPLETE:
        return "incomplete"
    if status is Status.COMPLETE:
        return "complete"
    raise InvalidArgumentError(f"invalid status: {status!r}")
