r"""
optline registry entries.

Overview
- Namespace: where an entry lives and how it is spelled.
  • SHORT      → "-name"
  • LONG       → "--name"
  • POSITIONAL → "<metavar>" (the optional typed bucket for non-option tokens)

- ArgMode: how a value may be passed (an IntFlag, so EITHER == NEXT_ARG | EQUALS_SIGN).
  • NONE        → flags only, no value
  • NEXT_ARG    → "--name value"
  • EQUALS_SIGN → "--name=value[,value...]" (long options only)
  • EITHER      → both

- Entries (one owning, ordered sequence of these lives in a Registry)
  • Flag: presence-only; add_value() is a usage fault.
  • Valued: carries a Value snapshot plus per-parse state (use flag + values).
  • Positional: a Valued entry fed with every positional token.

Value state rules (Valued)
- Values start as a copy of the defaults; an entry with defaults is present
  before any parse input.
- The first user-supplied value discards the defaults wholesale.
- Values append until the cardinality limit; at the limit the last slot is
  overwritten (the final occurrence wins). Unlimited entries always append.

Name rules
- non-empty, no leading "-", no "=" and no space.
- a long valued registration may end in "=" (EQUALS_SIGN only) or " " (NEXT_ARG
  only); the suffix is stripped before the name is checked.
"""
import copy
import enum

from .faults import *
from .utils import Unset, mirror, ordinal
from .values import snapshot


class Namespace(enum.Enum):
    SHORT = "-"
    LONG = "--"
    POSITIONAL = ""

    @property
    def prefix(self):
        return self.value

    def __repr__(self):
        return "Namespace.%s" % self.name


class ArgMode(enum.IntFlag):
    NONE = 0
    NEXT_ARG = 1
    EQUALS_SIGN = 2
    EITHER = NEXT_ARG | EQUALS_SIGN

    def permits(self, pattern, /):
        """
        whether this mode allows `pattern`.

        NONE is only permitted by NONE itself; any other pattern must be fully
        contained in this mode.
        """
        if pattern == ArgMode.NONE:
            return self == ArgMode.NONE
        return self & pattern == pattern

    @property
    def bare(self):
        """uses the "--name" / "--name value" syntax."""
        return self == ArgMode.NONE or self.permits(ArgMode.NEXT_ARG)

    @property
    def inline(self):
        """uses the "--name=value" syntax."""
        return self.permits(ArgMode.EQUALS_SIGN)

    def marker(self, namespace, /):
        """separator between the option and its placeholder in help text."""
        match self:
            case ArgMode.NEXT_ARG:
                return " "
            case ArgMode.EQUALS_SIGN:
                return "="
            case ArgMode.EITHER:
                return "[ |=]" if namespace is Namespace.LONG else " "
            case _:
                return ""


def validate_name(name, namespace, /):
    """return `name` unchanged or raise ConfigError describing the problem."""
    if not isinstance(name, str):
        problem = "must be a string, not %s" % type(name).__name__
    elif not name:
        problem = "must not be empty"
    elif name.startswith("-"):
        problem = "must not start with '-'"
    elif "=" in name:
        problem = "must not contain '='"
    elif " " in name:
        problem = "must not contain spaces"
    else:
        return name
    raise ConfigError(
        "%s option name %r %s" % (namespace.name.lower(), name, problem),
        title="invalid option name",
        code=FaultCode.INVALID_NAME,
        name=name,
        hint="register names without dashes, e.g. add_long('output', ...) for --output",
    )


def split_suffix(name, /):
    """
    split the syntax suffix of a long valued registration.

    "name=" → ("name", EQUALS_SIGN); "name " → ("name", NEXT_ARG); otherwise EITHER.
    """
    if isinstance(name, str) and name.endswith("="):
        return name[:-1], ArgMode.EQUALS_SIGN
    if isinstance(name, str) and name.endswith(" "):
        return name[:-1], ArgMode.NEXT_ARG
    return name, ArgMode.EITHER


class Entry:
    """
    base registry entry (shared identity + use flag).

    fields (read-only)
    - name, namespace, mode, description
    - used: whether the parse input mentioned this entry
    """
    kind = "option"

    name = mirror("name")
    namespace = mirror("namespace")
    mode = mirror("mode")
    description = mirror("description")
    used = mirror("used")

    def __init__(self, name, namespace, description, mode, /):
        if not isinstance(description, str):
            raise ConfigError(
                "description of %r must be a string, not %s" % (name, type(description).__name__),
                title="invalid description",
                code=FaultCode.INVALID_TYPE,
                hint="pass the help text as the last argument",
            )
        self._name = name
        self._namespace = namespace
        self._mode = ArgMode(mode)
        self._description = description
        self._used = False

    @property
    def full_name(self):
        return self._namespace.prefix + self._name

    @property
    def present(self):
        return self._used

    def mark(self):
        self._used = True

    def add_value(self, raw, /, *, index=Unset):
        raise UsageError(
            "%s %r does not take a value%s" % (self.kind, self.full_name, _where(index)),
            title="option takes no value",
            code=FaultCode.FLAG_ASSIGNMENT,
            input=self.full_name,
            index=index,
            entry=self,
            hint="pass %s on its own" % self.full_name,
            docs=getdoc(FaultCode.FLAG_ASSIGNMENT),
        )

    def conflicts(self, other, /):
        """
        whether `other` would be ambiguous next to this entry (same namespace,
        same name and a shared syntax).
        """
        return (
            self._namespace is other._namespace and
            self._name == other._name and
            (self._mode.bare and other._mode.bare or self._mode.inline and other._mode.inline)
        )

    def syntax(self):
        return self.full_name

    def describe(self):
        """(syntax, description) pair for the help table."""
        return self.syntax(), self._description

    def clone(self):
        return copy.copy(self)

    def __rich_repr__(self):
        yield "name", self.full_name
        yield "mode", self._mode
        yield "used", self._used

    def __repr__(self):
        return "%s(%s)" % (
            type(self).__name__.lower(),
            ", ".join("%s=%r" % (name, field) for name, field in self.__rich_repr__())
        )


class Flag(Entry):
    kind = "flag"

    def __init__(self, name, namespace, description, /):
        super().__init__(validate_name(name, namespace), namespace, description, ArgMode.NONE)


class Valued(Entry):
    """
    entry carrying a typed value.

    fields (read-only)
    - value: the Value snapshot taken at registration (defaults, limit, constraint)
    - type: shortcut for value.type
    - values: list copy of the current values (defaults until the first user value)
    """
    values = mirror("values")

    @property
    def value(self):
        return copy.copy(self._value)

    def __init__(self, name, namespace, value, description, /, mode=ArgMode.EITHER):
        if ArgMode(mode) == ArgMode.NONE:
            raise ConfigError(
                "valued option %r cannot be registered without an argument form" % name,
                title="invalid argument form",
                code=FaultCode.CONFLICTING_OPTION,
                hint="register it as a flag instead",
            )
        if namespace is not Namespace.POSITIONAL:
            validate_name(name, namespace)
        super().__init__(name, namespace, description, mode)
        self._value = snapshot(value)
        # the Value snapshot is shared by every clone and never mutated
        self._values = self._value.defaults

    @property
    def type(self):
        return self._value.type

    @property
    def present(self):
        return self._used or bool(self._values)

    @property
    def saturated(self):
        return self._value.bounded and len(self._values) >= self._value.cardinality

    def _fault(self, cls, message, *, code, title, hint, raw, index):
        return cls(
            "%s %r %s%s" % (self.kind, self.full_name, message, _where(index)),
            title=title,
            code=code,
            input=self.full_name,
            index=index,
            entry=self,
            raw=raw,
            hint=hint,
            docs=getdoc(code),
        )

    def add_value(self, raw, /, *, index=Unset):
        """
        convert `raw`, check the constraint and store the result.

        returns True when the value overwrote the last slot of a full entry.
        """
        try:
            value = self._value.type.convert(raw)
        except ValueError:
            raise self._fault(
                ConversionError,
                "cannot convert %r to %s" % (raw, self._value.type.label),
                code=FaultCode.UNCONVERTIBLE_VALUE,
                title="invalid value",
                hint="pass a %s value" % self._value.type.label,
                raw=raw,
                index=index,
            ) from None
        if (constraint := self._value.constraint) is not None and not constraint(value):
            raise self._fault(
                ConstraintError,
                "rejects value %r" % raw,
                code=FaultCode.CONSTRAINT_VIOLATION,
                title="value not allowed",
                hint="check the description of %s for accepted values" % self.full_name,
                raw=raw,
                index=index,
            )
        return self.store(value)

    def store(self, value, /):
        # defaults are placeholders, replaced wholesale by the first user value
        if not self._used:
            self._values.clear()
        self._used = True
        if not self.saturated:
            self._values.append(value)
            return False
        self._values[self._value.cardinality - 1] = value
        return True

    def scalar(self):
        """first stored value (EmptyValueError when there is none)."""
        return self.sequence()[0]

    def sequence(self):
        """copy of every stored value in arrival order (EmptyValueError when empty)."""
        if not self._values:
            raise EmptyValueError(
                "%s %r has no value" % (self.kind, self.full_name),
                title="no value",
                code=FaultCode.EMPTY_VALUE,
                input=self.full_name,
                entry=self,
                hint="check the option before reading it, or give it a default",
                docs=getdoc(FaultCode.EMPTY_VALUE),
            )
        return list(self._values)

    def syntax(self):
        return self.full_name + self._mode.marker(self._namespace) + self._value.placeholder()

    def __copy__(self):
        clone = object.__new__(type(self))
        clone.__dict__.update(self.__dict__)
        clone._values = list(self._values)
        return clone

    def __rich_repr__(self):
        yield from super().__rich_repr__()
        yield "type", self._value.type.label
        yield "values", list(self._values)


class Positional(Valued):
    kind = "positional"

    def __init__(self, value, description, /):
        super().__init__(
            getattr(value, "metavar", "arg"),
            Namespace.POSITIONAL,
            value,
            description,
            ArgMode.NEXT_ARG
        )

    @property
    def full_name(self):
        return "<%s>" % self._name

    def syntax(self):
        return self._value.placeholder()


def _where(index, /):
    return "" if index is Unset else " at %s position" % ordinal(index)


__all__ = (
    "Namespace",
    "ArgMode",
    "Entry",
    "Flag",
    "Valued",
    "Positional",
)
