r"""
optline value specifications.

Overview
- ValueType: closed set of scalar families an option value can hold.
  • STRING   → str
  • INTEGER  → int (signed)
  • UNSIGNED → int (>= 0)
  • FLOAT    → float
  Each member knows how to convert raw command-line text, how to validate a
  default given in Python, and how to render a value in help text.

- Value: builder describing a typed option's defaults, cardinality, constraint
  and display name (metavar). Builder methods mutate in place and return self:
  • with_default(value) / with_defaults(iterable)
  • constrain(predicate)
  • limit(n) / unlimited()
  • named(metavar)

Validation highlights (all raise ConfigError at registration time)
- limit must be an int >= 1 and must not drop below the number of defaults.
- every default must belong to the declared type and satisfy the constraint,
  regardless of the order in which with_default()/constrain() are called.

Quick example:
    >>> Value(int).with_defaults([1, 2]).limit(3).constrain(lambda x: x > 0).named("n")
    value(type='integer', defaults=[1, 2], cardinality=3, metavar='n', constrained=True)
"""
import copy
import enum
import numbers
from collections.abc import Iterable
from types import EllipsisType

from .faults import ConfigError, FaultCode
from .utils import mirror

UNLIMITED = Ellipsis


class ValueType(enum.Enum):
    """
    scalar families supported by valued options.

    the member value is (label, python type); the label is used in messages,
    the python type in lookups (see optline.lookup).
    """
    STRING = ("string", str)
    INTEGER = ("integer", int)
    UNSIGNED = ("unsigned integer", int)
    FLOAT = ("floating point", float)

    @property
    def label(self):
        return self.value[0]

    @property
    def pytype(self):
        return self.value[1]

    @classmethod
    def of(cls, object, /):
        """
        resolve a python type or a member into a member.

        str → STRING, int → INTEGER, float → FLOAT; members pass through.
        """
        if isinstance(object, cls):
            return object
        try:
            return {str: cls.STRING, int: cls.INTEGER, float: cls.FLOAT}[object]
        except (KeyError, TypeError):
            raise ConfigError(
                "unsupported value type %r" % (object,),
                title="unsupported value type",
                code=FaultCode.INVALID_TYPE,
                hint="use str, int, float or a ValueType member",
            ) from None

    def convert(self, raw, /):
        """
        convert raw command-line text into this family.

        raises ValueError when the text does not denote a value of the family;
        callers turn it into a ConversionError naming the option.
        """
        match self:
            case ValueType.STRING:
                return raw
            case ValueType.INTEGER:
                return int(raw)
            case ValueType.UNSIGNED:
                if (value := int(raw)) < 0:
                    raise ValueError("negative value for an unsigned integer")
                return value
            case ValueType.FLOAT:
                return float(raw)

    def accept(self, value, /):
        """
        normalize a default given in python, or raise ValueError.

        bools are never integers; ints are widened for FLOAT.
        """
        match self:
            case ValueType.STRING if isinstance(value, str):
                return value
            case ValueType.INTEGER if isinstance(value, numbers.Integral) and not isinstance(value, bool):
                return int(value)
            case ValueType.UNSIGNED if isinstance(value, numbers.Integral) and not isinstance(value, bool) and value >= 0:
                return int(value)
            case ValueType.FLOAT if isinstance(value, numbers.Real) and not isinstance(value, bool):
                return float(value)
        raise ValueError("%r is not a valid %s" % (value, self.label))

    def render(self, value, /):
        if self is ValueType.FLOAT:
            return "%g" % value
        return str(value)

    def __repr__(self):
        return "ValueType.%s" % self.name


class Value:
    """
    Typed value descriptor for options and positionals.

    Fields (read-only properties)
    - type: ValueType
    - defaults: list copy of the default values (registration order)
    - constraint: predicate or None
    - cardinality: int >= 1, or Ellipsis for unlimited
    - metavar: display name used in help ("arg" unless named())
    """
    type = mirror("type")
    defaults = mirror("defaults")
    constraint = mirror("constraint")
    cardinality = mirror("cardinality")
    metavar = mirror("metavar")

    def __init__(self, type=str, /):
        self._type = ValueType.of(type)
        self._defaults = []
        self._constraint = None
        self._cardinality = 1
        self._metavar = "arg"

    def _default_fault(self, message, code):
        return ConfigError(
            message,
            title="invalid default value",
            code=code,
            hint="defaults must be %s values accepted by the constraint" % self._type.label,
        )

    def with_default(self, value, /):
        """append one default value."""
        return self.with_defaults((value,))

    def with_defaults(self, values, /):
        """
        append default values, validating each against the type and constraint.

        the count is checked against the cardinality when the value is registered
        (or when limit() is called), so defaults and limit may come in any order.
        """
        if isinstance(values, str) or not isinstance(values, Iterable):
            raise ConfigError(
                "defaults must be given as an iterable of values, not %r" % (values,),
                title="invalid default value",
                code=FaultCode.INVALID_DEFAULT,
                hint="use with_default() for a single value",
            )
        accepted = []
        for value in values:
            try:
                value = self._type.accept(value)
            except ValueError as exception:
                raise self._default_fault(str(exception), FaultCode.INVALID_DEFAULT) from None
            if self._constraint is not None and not self._constraint(value):
                raise self._default_fault(
                    "default %s does not satisfy the constraint" % self._type.render(value),
                    FaultCode.DEFAULT_VIOLATION,
                )
            accepted.append(value)
        self._defaults.extend(accepted)
        return self

    def constrain(self, predicate, /):
        """set the constraint; every existing default must satisfy it."""
        if not callable(predicate):
            raise ConfigError(
                "constraint must be callable, not %r" % (predicate,),
                title="invalid constraint",
                code=FaultCode.INVALID_TYPE,
                hint="pass a function taking one value and returning a bool",
            )
        for value in self._defaults:
            if not predicate(value):
                raise self._default_fault(
                    "default %s does not satisfy the constraint" % self._type.render(value),
                    FaultCode.DEFAULT_VIOLATION,
                )
        self._constraint = predicate
        return self

    def limit(self, count, /):
        """keep at most `count` values (>= 1, and not below the number of defaults)."""
        if not isinstance(count, int) or isinstance(count, bool) or count < 1:
            raise ConfigError(
                "limit must be an integer greater than or equal to 1, not %r" % (count,),
                title="invalid limit",
                code=FaultCode.INVALID_LIMIT,
                hint="use unlimited() to accept any number of values",
            )
        if count < len(self._defaults):
            raise ConfigError(
                "limit %d is lower than the %d default values" % (count, len(self._defaults)),
                title="invalid limit",
                code=FaultCode.INVALID_LIMIT,
                hint="raise the limit or drop some defaults",
            )
        self._cardinality = count
        return self

    def unlimited(self):
        """accept any number of values."""
        self._cardinality = UNLIMITED
        return self

    def named(self, metavar, /):
        """set the display name used for the value placeholder in help."""
        if not isinstance(metavar, str) or not metavar.strip():
            raise ConfigError(
                "display name must be a non-empty string, not %r" % (metavar,),
                title="invalid display name",
                code=FaultCode.INVALID_NAME,
                hint="pass something like named('file')",
            )
        self._metavar = metavar
        return self

    @property
    def bounded(self):
        return self._cardinality is not UNLIMITED

    def validate(self):
        """registration-time check that the defaults fit the cardinality."""
        if self.bounded and len(self._defaults) > self._cardinality:
            raise ConfigError(
                "%d default values exceed the limit of %d" % (len(self._defaults), self._cardinality),
                title="invalid limit",
                code=FaultCode.INVALID_LIMIT,
                hint="call limit(%d) or unlimited() on the value" % len(self._defaults),
            )
        return self

    def placeholder(self):
        """
        help placeholder: <name>, <name...> (unlimited) or <name...[1-N]>,
        followed by (=d1,d2) when defaults exist.
        """
        match self._cardinality:
            case EllipsisType():
                arity = "..."
            case 1:
                arity = ""
            case count:
                arity = "...[1-%d]" % count
        placeholder = "<%s%s>" % (self._metavar, arity)
        if self._defaults:
            placeholder += "(=%s)" % ",".join(map(self._type.render, self._defaults))
        return placeholder

    def __copy__(self):
        clone = object.__new__(type(self))
        clone.__dict__.update(self.__dict__)
        clone._defaults = list(self._defaults)
        return clone

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return (
            self._type is other._type and
            self._defaults == other._defaults and
            self._constraint is other._constraint and
            self._cardinality == other._cardinality and
            self._metavar == other._metavar
        )

    __hash__ = None

    def __rich_repr__(self):
        yield "type", self._type.label
        yield "defaults", list(self._defaults)
        yield "cardinality", self._cardinality
        yield "metavar", self._metavar
        yield "constrained", self._constraint is not None

    def __repr__(self):
        return "value(%s)" % ", ".join("%s=%r" % (name, field) for name, field in self.__rich_repr__())


def snapshot(value, /):
    """independent copy of a Value, validated for registration."""
    if not isinstance(value, Value):
        raise ConfigError(
            "expected a Value, not %r" % (value,),
            title="invalid value specification",
            code=FaultCode.INVALID_TYPE,
            hint="build one with Value(int), Value(str), ...",
        )
    return copy.copy(value).validate()


__all__ = (
    "ValueType",
    "Value",
    "UNLIMITED",
)
