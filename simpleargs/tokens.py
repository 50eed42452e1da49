r"""
simpleargs token classification.

Overview
- normalize(token): turn one input token into a raw byte token.
- classify(token): pure function, raw token → PositionalToken / EndOfFlagsToken / NamedToken.

Token syntax
- 'name'           → positional (anything not starting with '-', the empty token, a lone '-')
- '--'             → end of flags
- '-name', '--name'             → named option without an inline value
- '-name=value', '--name=value' → named option with an inline value (possibly empty)

Single and double leading dashes are equivalent. Combined short flags are not
supported: '-abc' is one option named 'abc'.

Names
- must match [A-Za-z0-9_-]+ and must not start or end with '-'.
- are always ASCII, so they are handed out as str.

Values
- stay bytes. Nothing here decodes a value; see Named.require_str() for that.

Quick example:
    >>> classify(b"--out=build")
    NamedToken(name='out', value=b'build')
    >>> classify(b"-v")
    NamedToken(name='v', value=None)
    >>> classify(b"--")
    EndOfFlagsToken()
"""
import os
import re
from typing import NamedTuple

from .faults import InvalidArgumentError

_NAME = re.compile(rb"[A-Za-z0-9_-]+")


class PositionalToken(NamedTuple):
    """A positional argument, kept byte for byte."""
    value: bytes


class EndOfFlagsToken(NamedTuple):
    """The '--' marker: every following token is positional."""


class NamedToken(NamedTuple):
    """
    A named option such as '-opt' or '--opt=value'.

    `name` has its leading dashes removed; `value` is the inline value after the
    first '=', b"" for '-opt=', and None when there is no '=' at all.
    """
    name: str
    value: bytes | None


def normalize(token, /):
    """
    Return `token` as a raw byte token.

    - bytes are returned unchanged (same object).
    - bytearray / memoryview are copied into bytes.
    - str is encoded with os.fsencode, so undecodable bytes that Python turned
      into surrogate escapes in sys.argv come back as the original bytes.
    """
    if type(token) is bytes:
        return token
    if isinstance(token, (bytes, bytearray, memoryview)):
        return bytes(token)
    if isinstance(token, str):
        return os.fsencode(token)
    raise TypeError("argument token must be bytes or str, not %s" % type(token).__name__)


def _is_name(name):
    return (
        _NAME.fullmatch(name) is not None
        and not name.startswith(b"-")
        and not name.endswith(b"-")
    )


def classify(token, /):
    """
    Classify one raw token.

    Returns
    - PositionalToken(token) when the token is shorter than two bytes or does not start with '-'.
    - EndOfFlagsToken() for exactly '--'.
    - NamedToken(name, value) for '-name[=value]' and '--name[=value]'.

    Raises
    - InvalidArgumentError when the token starts with a dash but its name is
      empty or malformed ('-=', '--=xyz', '--bad-', a NUL byte); `error.arg` is the
      original token, unchanged.
    """
    token = normalize(token)
    if len(token) < 2 or token[0] != ord("-"):
        return PositionalToken(token)

    if token[1] != ord("-"):
        body = token[1:]
    elif len(token) == 2:
        return EndOfFlagsToken()
    else:
        body = token[2:]

    name, equals, value = body.partition(b"=")
    if not _is_name(name):
        raise InvalidArgumentError(arg=token)

    return NamedToken(name.decode("ascii"), value if equals else None)


__all__ = (
    "PositionalToken",
    "EndOfFlagsToken",
    "NamedToken",
    "normalize",
    "classify",
)
