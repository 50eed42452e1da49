"""
simpleargs faults (usage errors, protocol misuse) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every usage error.
  Codes are grouped by domain to keep copy consistent and make logs/searches
  predictable.
- UsageError and its subclasses: one consolidated taxonomy describing every
  way a token stream or an option value can be invalid. Each error carries the
  offending token, option name and value for diagnostics, and knows how to
  render itself in a friendly, lowercased and actionable way.
- UsageExit: an exception group for callers that collect errors instead of
  aborting at the first one.
- AlreadyResolvedError / UnresolvedOptionError / UnresolvedOptionWarning:
  misuse of the named-option protocol (programming errors, never shown to
  end users).
- trigger(): central entry point to surface a usage error (respecting
  shell/deferred/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Taxonomy
- syntax: InvalidArgumentError (raised by the classifier).
- structural: UnexpectedArgumentError, MissingArgumentError (raised by the
  caller's own bookkeeping; provided so every usage error shares one base).
- option: UnknownOptionError, MissingParameterError, UnexpectedParameterError,
  InvalidUnicodeError, InvalidValueError (raised by the named-option handle).
- free-form: CustomUsageError.

Integration
- Parsing code raises usage errors; the application catches UsageError (or
  UsageExit) and calls trigger(error, **options).
- In shell mode (the default), faults are rendered via rich on stderr and the
  process exits with status 2; otherwise they are raised again.
"""
import functools
import os
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, UnsetType, display, view

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the package (stable identifiers).

    grouping (by high-level domain)
    - tokens (1111x)
      • INVALID_ARGUMENT
    - positionals (1112x)
      • UNEXPECTED_ARGUMENT, MISSING_ARGUMENT
    - options (1113x)
      • UNKNOWN_OPTION, MISSING_PARAMETER, UNEXPECTED_PARAMETER,
        INVALID_UNICODE, INVALID_VALUE
    - application-defined (1119x)
      • CUSTOM

    rationale
    - codes are discoverable (searchable in logs and docs) and normalized to a string
      via normalize() so hosts can remap them if desired (e.g., to shorter labels).
    """
    # --- token errors (1111x) ---
    INVALID_ARGUMENT     = 11111

    # --- positional errors (1112x) ---
    UNEXPECTED_ARGUMENT  = 11121
    MISSING_ARGUMENT     = 11122

    # --- option errors (1113x) ---
    UNKNOWN_OPTION       = 11131
    MISSING_PARAMETER    = 11132
    UNEXPECTED_PARAMETER = 11133
    INVALID_UNICODE      = 11134
    INVALID_VALUE        = 11135

    # --- application errors (1119x) ---
    CUSTOM               = 11191

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _prog(options):
    # explicit option, then the host's __prog__, then the running script
    return (
        options.get("prog")
        or getattr(__import__("__main__"), "__prog__", None)
        or os.path.basename(sys.argv[0])
        or "simpleargs"
    )


class UsageError(Exception):
    """
    base of every command-line usage error.

    construction
    - UsageError(message=Unset, /, **options)
      • message: optional str replacing the generated one-line message.
      • options: the error payload (the class's __fields__, all required) plus
        any rendering options (shell, fancy, colorful, deferred, prog, title,
        hint, code).

    payload
    - fields are published as read-only attributes (error.option, error.value...)
      and stay immutable once the error is built.
    """
    __fault__ = FaultCode.CUSTOM
    __title__ = "usage error"
    __fields__ = ()

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | UnsetType):
            raise TypeError("%s() message must be a string" % type(self).__name__)
        missing = [field for field in self.__fields__ if field not in options]
        if missing:
            raise TypeError("%s() missing required field(s): %s" % (type(self).__name__, ", ".join(missing)))
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code", self.__fault__)

    @property
    def title(self):
        return self.options.get("title", self.__title__)

    @property
    def hint(self):
        return self.options.get("hint", self.suggest())

    def describe(self):
        """
        one-line description built from the payload (used when no message was given).
        """
        return self.title

    def suggest(self):
        """
        single actionable hint for the user (empty when there is nothing to suggest).
        """
        return ""

    def __str__(self):
        return self.describe() if self.message is Unset else self.message

    def __repr__(self):
        fields = ", ".join("%s=%r" % (field, self.options[field]) for field in self.__fields__)
        return "%s(%s)" % (type(self).__name__, fields)

    def __reduce__(self):
        return functools.partial(type(self), self.message, **self.options), ()

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        try:
            code = FaultCode(self.code).normalize()
        except ValueError:
            code = str(self.code)

        header = Text.assemble(
            "[ ",
            text(_prog(self.options), styler("prog-name")),
            " — ",
            text(code, styler("code")),
            " | ",
            text(self.title.title(), styler("error-title")),
            " ]"
        )
        message = text(str(self), styler("error-message"))
        parts = [message]
        if self.hint:
            parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(self.hint, styler("hint"))))

        if fancy:
            width = console.width - 4
            try:
                width = int(width * self.options["ratio"])
            except KeyError:
                width = None
            return Panel(Group(*parts), title=header, title_align="left", width=width)

        return Group(header, *parts)

    def __trigger__(self) -> None:
        if not self.options.get("shell", True):
            raise self from self.__cause__
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(2)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        replaced = type(self)(self.message, **{**self.options, **overrides})
        replaced.__cause__ = self.__cause__
        return replaced


class InvalidArgumentError(UsageError):
    """
    an argument looks like an option but its name is malformed.

    `arg` is the full, original token (bytes), e.g. b"--=xyz".
    """
    __fault__ = FaultCode.INVALID_ARGUMENT
    __title__ = "invalid argument"
    __fields__ = ("arg",)

    arg = view("arg")

    def describe(self):
        return "invalid argument %s" % display(self.arg)

    def suggest(self):
        return ("option names use letters, digits, '-' and '_' and cannot start or end with '-';"
                " pass '--' before it to use it as a positional argument")


class UnexpectedArgumentError(UsageError):
    """a positional argument was passed where none (or no more) are accepted."""
    __fault__ = FaultCode.UNEXPECTED_ARGUMENT
    __title__ = "unexpected argument"
    __fields__ = ("arg",)

    arg = view("arg")

    def describe(self):
        return "unexpected argument %s" % display(self.arg)

    def suggest(self):
        return "remove this extra value"


class MissingArgumentError(UsageError):
    """a required positional argument was not supplied."""
    __fault__ = FaultCode.MISSING_ARGUMENT
    __title__ = "missing argument"
    __fields__ = ("name",)

    name = view("name")

    def describe(self):
        return "missing argument <%s>" % self.name

    def suggest(self):
        return "add a value for <%s>" % self.name


class UnknownOptionError(UsageError):
    """the option name matched no recognized option."""
    __fault__ = FaultCode.UNKNOWN_OPTION
    __title__ = "unknown option"
    __fields__ = ("option",)

    option = view("option")

    def describe(self):
        return "unknown option -%s" % self.option

    def suggest(self):
        return "check the spelling of -%s or remove it" % self.option


class MissingParameterError(UsageError):
    """the option requires a value, but none was supplied inline or as the next argument."""
    __fault__ = FaultCode.MISSING_PARAMETER
    __title__ = "missing parameter"
    __fields__ = ("option",)

    option = view("option")

    def describe(self):
        return "option -%s requires a parameter" % self.option

    def suggest(self):
        return "pass a value as -%s=<value> or -%s <value>" % (self.option, self.option)


class UnexpectedParameterError(UsageError):
    """the option takes no value, but an inline value was supplied (e.g. --verbose=3)."""
    __fault__ = FaultCode.UNEXPECTED_PARAMETER
    __title__ = "unexpected parameter"
    __fields__ = ("option", "value")

    option = view("option")
    value = view("value")

    def describe(self):
        return "option -%s does not accept a parameter" % self.option

    def suggest(self):
        return "remove everything from '=' (for example: -%s)" % self.option


class InvalidUnicodeError(UsageError):
    """the option value was required as text, but it is not valid UTF-8."""
    __fault__ = FaultCode.INVALID_UNICODE
    __title__ = "invalid unicode"
    __fields__ = ("option", "value")

    option = view("option")
    value = view("value")

    def describe(self):
        return "invalid value %s for option -%s: invalid Unicode string" % (display(self.value), self.option)

    def suggest(self):
        return "pass the value as UTF-8 text"


class InvalidValueError(UsageError):
    """
    the option value could not be parsed.

    `cause` is the exception raised by the value parser; raising code chains it
    as __cause__ too.
    """
    __fault__ = FaultCode.INVALID_VALUE
    __title__ = "invalid value"
    __fields__ = ("option", "value", "cause")

    option = view("option")
    value = view("value")
    cause = view("cause")

    def describe(self):
        return "invalid value %s for option -%s: %s" % (display(self.value), self.option, self.cause)

    def suggest(self):
        return "check the value passed to -%s" % self.option


class CustomUsageError(UsageError):
    """a free-form usage error defined by the application."""
    __fault__ = FaultCode.CUSTOM
    __title__ = "usage error"
    __fields__ = ("text",)

    text = view("text")

    def describe(self):
        return self.text


class UsageExit(ExceptionGroup[UsageError]):
    """
    several usage errors collected during one parse.

    the group renders every member under a single header and triggers like a
    single usage error.
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad usage", tuple(exceptions))

    def __init__(self, exceptions, **options):
        # exceptions may be a one-shot iterator; __new__ already materialized it
        super().__init__("bad usage", self.exceptions)
        for exception in self.exceptions:
            if not isinstance(exception, UsageError):
                raise TypeError("UsageExit() items must be usage errors")
        self.options = MappingProxyType(options)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "title": "bold #FF4DA6",  # friendly pinky group title (Bad Usage)
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), style)

        header = Text.assemble(
            "[ ",
            text(_prog(self.options), styler("prog-name")),
            " — ",
            text(self.message.title(), styler("title")),
            " ]"
        )

        renders = []
        for exception in self.exceptions:
            renders.append(exception.__replace__(
                colorful=colorful,
                fancy=fancy,
                ratio=2/3,
                **({"prog": self.options["prog"]} if "prog" in self.options else {})
            ))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", True):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(2)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


class AlreadyResolvedError(RuntimeError):
    """a named-option handle was resolved a second time."""


class UnresolvedOptionError(RuntimeError):
    """the stream was advanced while a named option was still waiting to be resolved."""


class UnresolvedOptionWarning(RuntimeWarning):
    """a named-option handle was dropped without being resolved."""


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (UsageError, UsageExit).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode (default), the fault is printed on stderr with rich and the
      process exits with status 2 (unless deferred=True); otherwise it is raised.

    typical options
    - shell, fancy, colorful, deferred, prog, title, hint, code.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "UsageError",
    "InvalidArgumentError",
    "UnexpectedArgumentError",
    "MissingArgumentError",
    "UnknownOptionError",
    "MissingParameterError",
    "UnexpectedParameterError",
    "InvalidUnicodeError",
    "InvalidValueError",
    "CustomUsageError",
    "UsageExit",
    "AlreadyResolvedError",
    "UnresolvedOptionError",
    "UnresolvedOptionWarning",
    "trigger",
    "getdoc",
)
