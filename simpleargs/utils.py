"""
simpleargs utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the token, stream and fault layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/b"".

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated getters for clean tracebacks.

- view("field")
  • Read-only property factory exposing one entry of an object's `options` mapping.

- display(token)
  • Printable, quoted form of a raw byte token for messages (never fails on bad UTF-8).

Stability and contract
- Names not in __all__ are internal and may change without notice.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
    >>> display(b"0q")
    "'0q'"
"""
import builtins
import functools
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None.
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and a singleton per process.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations (e.g., str | UnsetType).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve an internal Unset sentinel to a concrete default.

    Falsey values like None, 0, "" or b"" are preserved as-is; only Unset
    is replaced.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator

    Notes
    - Some built-in or C-implemented callables are not updatable and will
      raise TypeError.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def view(name, /):
    """
    Define a read-only property over one entry of `self.options`.

    Faults keep their payload (offending token, option name, value...) in an
    immutable `options` mapping; view() publishes each entry as a plain
    attribute so callers write `error.option` instead of `error.options["option"]`.

    Parameters
    - name: str
      The key inside `self.options` and the public attribute name.

    Returns
    - property whose getter returns self.options[name], or None when the key is absent.
    """
    if not isinstance(name, str):
        raise TypeError("view() argument must be a string")

    @rename(name)
    def getter(self):
        return self.options.get(name)

    return property(getter)


def display(token, /):
    """
    Return a quoted, printable form of a raw token.

    Bytes that are not valid UTF-8 are shown as backslash escapes, so a
    message can always be built, whatever the user typed.
    """
    if isinstance(token, (bytes, bytearray, memoryview)):
        token = bytes(token).decode("utf-8", "backslashreplace")
    return repr(token)


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None is a valid, user-meaningful value but you
still need to distinguish “no input” from “explicitly passed None”.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "view",
    "display",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
