"""
optline faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain (registration, matching, values, lookup, warnings)
  so logs and searches stay predictable.
- OptionException / OptionWarning: base types that carry a message plus keyword
  options and know how to render themselves with rich.
- trigger(): central entry point to surface any fault (raise, warn or print+exit).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages for parse faults ("at second position"), so users can
  map an error back to the token that caused it.
- Short titles, one-sentence bodies, a single hint.

Integration
- The core (values, entries, registry, engine, lookup) always raises.
- OptionParser decides, through its runtime options, whether a fault is raised
  (default) or rendered to stderr followed by sys.exit(1) ("shell" mode).
"""
import inspect
import os.path
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - registration (211xx): INVALID_NAME, INVALID_LIMIT, INVALID_DEFAULT,
      DEFAULT_VIOLATION, CONFLICTING_OPTION, DUPLICATED_POSITIONAL,
      FINALIZED_BUILDER, INVALID_TYPE
    - matching (221xx): UNKNOWN_OPTION, MISSING_VALUE, EMPTY_INLINE_VALUE,
      FLAG_ASSIGNMENT, INLINE_VALUE_REQUIRED
    - values (231xx): UNCONVERTIBLE_VALUE, CONSTRAINT_VIOLATION
    - lookup (241xx): EMPTY_VALUE, INCOMPATIBLE_TYPE, UNKNOWN_ENTRY
    - warnings (311xx): CARDINALITY_OVERFLOW

    normalize() allows host remapping to custom labels while keeping codes stable.
    """
    # --- registration errors (211xx) ---
    INVALID_NAME                = 21101
    INVALID_LIMIT               = 21102
    INVALID_DEFAULT             = 21103
    DEFAULT_VIOLATION           = 21104
    CONFLICTING_OPTION          = 21105
    DUPLICATED_POSITIONAL       = 21106
    FINALIZED_BUILDER           = 21107
    INVALID_TYPE                = 21108

    # --- matching errors (221xx) ---
    UNKNOWN_OPTION              = 22101
    MISSING_VALUE               = 22102
    EMPTY_INLINE_VALUE          = 22103
    FLAG_ASSIGNMENT             = 22104
    INLINE_VALUE_REQUIRED       = 22105

    # --- value errors (231xx) ---
    UNCONVERTIBLE_VALUE         = 23101
    CONSTRAINT_VIOLATION        = 23102

    # --- lookup errors (241xx) ---
    EMPTY_VALUE                 = 24101
    INCOMPATIBLE_TYPE           = 24102
    UNKNOWN_ENTRY               = 24103

    # --- warnings (311xx) ---
    CARDINALITY_OVERFLOW        = 31101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels. without a mapping the
        numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _prog(options):
    main = __import__("__main__")
    try:
        return getattr(main, "__prog__")
    except AttributeError:
        return options.get("prog") or os.path.basename(sys.argv[0]) or "optline"


def _renderable(fault, kind, palette):
    """
    build the rich renderable shared by exceptions and warnings.

    layout
    - header: "[ prog — code | title ]"
    - body: message
    - hint: " → hint"
    fancy mode wraps body + hint in a Panel titled with the header.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", False)
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        return Text(str(fragment), styler(style))

    code = options.get("code")
    header = Text.assemble(
        "[ ",
        text(_prog(options), "prog-name"),
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else kind, "code"),
        " | ",
        text(str(options.get("title", kind)).title(), kind + "-title"),
        " ]"
    )
    message = text(fault.message, kind + "-message")
    hint = Text.assemble(text(" → ", "hint-arrow"), text(options.get("hint"), "hint")) if options.get("hint") else Text("")

    if options.get("fancy", False):
        return Panel(Group(message, hint), title=header, title_align="left")

    return Group(header, message, hint)


class OptionException(Exception):
    """
    base type of every optline error.

    carries
    - message: lowercase, one-sentence description.
    - options: read-only mapping of context (title, code, hint, input, index, entry, ...)
      plus runtime flags (shell, fancy, colorful) merged in by trigger().
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        return _renderable(self, "error", {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        fault = type(self)(self.message, **{**self.options, **overrides})
        fault.__cause__ = self.__cause__
        return fault


class ConfigError(OptionException): ...
class UnknownOptionError(OptionException): ...
class UsageError(OptionException): ...
class ConversionError(OptionException): ...
class ConstraintError(OptionException): ...
class EmptyValueError(OptionException): ...
class ValueTypeError(OptionException, TypeError): ...
class NotFoundError(OptionException, LookupError): ...


class OptionWarning(ABC, Warning):
    """
    base type of every optline warning (non-fatal diagnostics).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        return _renderable(self, "warning", {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "warning-title": "bold #FFC2E0",
            "warning-message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class CardinalityOverflowWarning(OptionWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - outside shell mode exceptions are raised and warnings go through warnings.warn;
      in shell mode both are rendered with rich (exceptions then exit with status 1).
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

    the host application may expose a __docs__ mapping in __main__ where keys are
    FaultCode members and values are short documentation strings; None otherwise.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "OptionException",
    "ConfigError",
    "UnknownOptionError",
    "UsageError",
    "ConversionError",
    "ConstraintError",
    "EmptyValueError",
    "ValueTypeError",
    "NotFoundError",
    "OptionWarning",
    "CardinalityOverflowWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
