"""
simpleargs argument stream and named-option value protocol.

Overview
- Args: a cursor over the remaining raw tokens, consumed left to right and
  never replayed. Args.next() yields one event at a time:
  • Positional(value, rest): a positional argument and the stream to continue with.
  • Named: a named option waiting for its value to be resolved.
  • End(): the tokens are exhausted (every further call returns End() again).
- Named: a one-shot handle. Exactly one of require_no_value(), require_value()
  (or its conversions require_str(), parse(), parse_str()) or unknown() resolves
  it and hands the stream back.

Options
- Args.options starts True and turns False for good once '--' has been seen;
  from then on every token is positional, including another '--'.

Leases
- A Named holds its stream until it is resolved. Advancing the stream while a
  Named is outstanding raises UnresolvedOptionError, and a Named that is
  garbage collected unresolved emits UnresolvedOptionWarning. A value can
  therefore never be silently skipped or taken twice.

Typical loop:
    >>> args, flag, x, positionals = Args(["abc", "--flag", "-x=10"]), False, None, []
    >>> for arg in args:
    ...     match arg:
    ...         case Positional(value):
    ...             positionals.append(value)
    ...         case Named(name="flag") as named:
    ...             _ = named.require_no_value()
    ...             flag = True
    ...         case Named(name="x") as named:
    ...             x, _ = named.parse_str(int)
    ...         case Named() as named:
    ...             raise named.unknown()
    >>> positionals, flag, x
    ([b'abc'], True, 10)
"""
import functools
import sys
import warnings
import weakref
from collections import deque
from typing import NamedTuple

from rich.text import Text

from .faults import (
    AlreadyResolvedError,
    InvalidUnicodeError,
    InvalidValueError,
    MissingParameterError,
    UnexpectedParameterError,
    UnknownOptionError,
    UnresolvedOptionError,
    UnresolvedOptionWarning,
)
from .tokens import EndOfFlagsToken, NamedToken, PositionalToken, classify, normalize
from .utils import Unset, coalesce


class End:
    """
    Singleton event marking the end of the argument stream.

    - Falsy: bool(End()) is False.
    - Identity: End() always returns the same instance.
    - Final: subclassing is blocked.
    """
    __slots__ = ()

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "End()"

    def __rich__(self):
        return Text(repr(self), style="dim")

    def __reduce__(self):
        return End, ()

    def __init_subclass__(cls, **options):
        raise TypeError("type 'End' is not an acceptable base type")


class Positional(NamedTuple):
    """A positional argument (raw bytes) and the stream to continue with."""
    value: bytes
    rest: "Args"


class Args:
    """
    A stream of command-line arguments.

    Parameters
    - tokens: Iterable[bytes | str]
      The raw tokens, program name excluded. str tokens are encoded with
      os.fsencode (see normalize()).

    Attributes
    - options: bool
      False once the end-of-options marker '--' has been consumed.
    - len(args): number of raw tokens not consumed yet.
    """
    __slots__ = ("_tokens", "_options", "_pending")

    def __init__(self, tokens=(), /):
        if isinstance(tokens, (str, bytes, bytearray, memoryview)):
            raise TypeError("Args() argument must be an iterable of tokens, not a single token")
        self._tokens = deque(map(normalize, tokens))
        self._options = True
        self._pending = None

    @classmethod
    def from_argv(cls, argv=Unset, /):
        """
        Build a stream from a full argument vector, dropping the program name.

        - argv: Unset → sys.argv; otherwise any iterable whose first item is the program name.
        """
        argv = list(coalesce(argv, sys.argv))
        return cls(argv[1:])

    @property
    def options(self):
        return self._options

    def __len__(self):
        return len(self._tokens)

    def __iter__(self):
        while not isinstance(arg := self.next(), End):
            yield arg

    def next(self):
        """
        Consume and return the next argument event.

        Returns
        - Positional(value, self), Named(...) or End().

        Raises
        - UnresolvedOptionError: the previous Named was not resolved yet.
        - InvalidArgumentError: the token looks like an option but its name is
          malformed. The token is consumed; the stream stays usable.
        """
        if self._pending is not None and (named := self._pending()) is not None:
            raise UnresolvedOptionError("option -%s must be resolved before the stream advances" % named.name)
        self._pending = None

        try:
            token = self._tokens.popleft()
        except IndexError:
            return End()

        if not self._options:
            return Positional(token, self)

        match classify(token):
            case PositionalToken(value):
                return Positional(value, self)
            case EndOfFlagsToken():
                self._options = False
                try:
                    return Positional(self._tokens.popleft(), self)
                except IndexError:
                    return End()
            case NamedToken(name, value):
                return Named(name, value, self)

    def _pull(self):
        # raw next token for an option value, never classified
        return self._tokens.popleft() if self._tokens else None

    def __repr__(self):
        return "Args(remaining=%d, options=%r)" % (len(self._tokens), self._options)

    def __rich_repr__(self):
        yield "remaining", len(self._tokens)
        yield "options", self._options


class Named:
    """
    A named option waiting for its value to be resolved.

    Attributes
    - name: str, without leading dashes ('out' for '--out=x').
    - inline: bytes | None, the value given after '=' in the same token.
    - resolved: bool, whether a resolving method was called.
    - value: bytes | None, the value returned by require_value() (kept for diagnostics).

    Exactly one resolving call is allowed; a second one raises AlreadyResolvedError
    without touching the stream.
    """
    __slots__ = ("_name", "_inline", "_stream", "_value", "_resolved", "__weakref__")

    def __init__(self, name, inline, stream, /):
        self._name = name
        self._inline = inline
        self._stream = stream
        self._value = None
        self._resolved = False
        stream._pending = weakref.ref(self)

    @property
    def name(self):
        return self._name

    @property
    def inline(self):
        return self._inline

    @property
    def resolved(self):
        return self._resolved

    @property
    def value(self):
        return self._value

    def _resolve(self):
        if self._resolved:
            raise AlreadyResolvedError("option -%s was already resolved" % self._name)
        self._resolved = True
        self._stream._pending = None
        return self._stream

    def require_no_value(self):
        """
        Resolve an option that takes no value and return the stream.

        Raises UnexpectedParameterError if an inline value was given ('--verbose=3');
        no further token is consumed either way.
        """
        stream = self._resolve()
        if self._inline is not None:
            raise UnexpectedParameterError(option=self._name, value=self._inline)
        return stream

    def require_value(self):
        """
        Resolve an option that takes a value; return (value, stream).

        The inline value wins when present. Otherwise the next raw token is taken
        literally, even if it looks like an option ('-o -x' gives b'-x').

        Raises MissingParameterError when there is no inline value and no token left.
        """
        stream = self._resolve()
        value = self._inline
        if value is None:
            value = stream._pull()
        if value is None:
            raise MissingParameterError(option=self._name)
        self._value = value
        return value, stream

    def require_str(self):
        """
        Like require_value(), but decode the value as UTF-8; return (text, stream).

        Raises InvalidUnicodeError when the value is not valid UTF-8.
        """
        value, stream = self.require_value()
        try:
            text = value.decode("utf-8")
        except UnicodeDecodeError as error:
            raise InvalidUnicodeError(option=self._name, value=value) from error
        return text, stream

    def parse(self, function, /):
        """
        Like require_value(), converting the raw bytes with `function`; return (result, stream).

        Any exception raised by `function` becomes InvalidValueError, chained from it.
        """
        if not callable(function):
            raise TypeError("parse() argument must be callable")
        value, stream = self.require_value()
        return self._convert(function, value, value), stream

    def parse_str(self, function, /):
        """
        Like require_str(), converting the text with `function`; return (result, stream).

        Any exception raised by `function` becomes InvalidValueError, chained from it.
        """
        if not callable(function):
            raise TypeError("parse_str() argument must be callable")
        text, stream = self.require_str()
        return self._convert(function, text, self._value), stream

    def _convert(self, function, argument, value):
        try:
            return function(argument)
        except Exception as error:
            raise InvalidValueError(option=self._name, value=value, cause=error) from error

    def unknown(self):
        """
        Resolve the option as unrecognized and return (not raise) UnknownOptionError.

        The inline value, if any, is discarded and no token is consumed.
        """
        self._resolve()
        return UnknownOptionError(option=self._name)

    def __del__(self):
        if getattr(self, "_resolved", True):
            return
        warnings.warn(
            UnresolvedOptionWarning("option -%s was dropped without being resolved" % self._name),
            source=self,
        )
        self._stream._pending = None

    def __repr__(self):
        return "Named(name=%r, inline=%r, resolved=%r)" % (self._name, self._inline, self._resolved)

    def __rich_repr__(self):
        yield "name", self._name
        yield "inline", self._inline
        yield "resolved", self._resolved


__all__ = (
    "Args",
    "Positional",
    "Named",
    "End",
)
