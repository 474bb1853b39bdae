"""
optline lookup: typed retrieval of entry values.

A Registry holds entries of every value family in one ordered sequence, so the
caller names the type it expects when reading a value back:

    >>> handle = result.used("k")
    >>> handle.cast(int)          # first value, must be an integer family
    >>> handle.cast(list[int])    # every value, in arrival order
    >>> handle.cast(tuple[float, ...])

Requested types
- scalar: str, int, float, or a ValueType member (exact family match)
- sequence: list[T], tuple[T, ...], collections.abc.Sequence[T], or bare list/tuple
  (no element check)

A python type matches every family whose python type it is (int matches both
INTEGER and UNSIGNED); a ValueType member only matches itself.
"""
import collections.abc
import typing

from .entries import ArgMode
from .faults import *
from .utils import Unset, mirror
from .values import ValueType


def _typename(requested, /):
    if isinstance(requested, ValueType):
        return requested.label
    if isinstance(requested, type):
        return requested.__name__
    return repr(requested)


def _unpack(requested, /):
    """split a requested type into (container or None, element or Unset)."""
    if requested is Unset:
        return None, Unset
    if requested in (list, tuple):
        return requested, Unset
    if requested is collections.abc.Sequence:
        return list, Unset
    origin = typing.get_origin(requested)
    if origin is None:
        return None, requested
    if origin in (list, collections.abc.Sequence, collections.abc.MutableSequence):
        container = list
    elif origin is tuple:
        container = tuple
    else:
        # unsupported container (dict[...], set[...]): reported as a mismatch
        return Unset, requested
    arguments = typing.get_args(requested)
    return container, arguments[0] if arguments else Unset


def _matches(element, family, /):
    if element is Unset:
        return True
    if isinstance(element, ValueType):
        return element is family
    return element is family.pytype


def retrieve(entry, requested=Unset, /):
    """
    read the value(s) of `entry` as `requested`.

    faults
    - ValueTypeError: entry is a flag, or `requested` does not match its value family.
    - EmptyValueError: entry holds no value (never used and no default).
    """
    if entry.mode == ArgMode.NONE:
        raise ValueTypeError(
            "%s %r carries no value" % (entry.kind, entry.full_name),
            title="flag has no value",
            code=FaultCode.INCOMPATIBLE_TYPE,
            input=entry.full_name,
            entry=entry,
            hint="test the handle for truthiness instead of reading a value",
            docs=getdoc(FaultCode.INCOMPATIBLE_TYPE),
        )
    container, element = _unpack(requested)
    if container is Unset or not _matches(element, entry.type):
        raise ValueTypeError(
            "cannot read %s %r as %s, it holds %s values" % (
                entry.kind, entry.full_name, _typename(requested), entry.type.label
            ),
            title="incompatible value type",
            code=FaultCode.INCOMPATIBLE_TYPE,
            input=entry.full_name,
            entry=entry,
            requested=requested,
            hint="read it as %s or a sequence of it" % entry.type.pytype.__name__,
            docs=getdoc(FaultCode.INCOMPATIBLE_TYPE),
        )
    if container is None:
        return entry.scalar()
    return container(entry.sequence())


class OptionHandle:
    """
    result of a registry query.

    - bool(handle): the option was used, or holds default values
    - handle.cast(T): typed read (see retrieve)
    - handle.value / handle.values: untyped first value / list of values
    """
    entry = mirror("entry")

    def __init__(self, entry, /):
        self._entry = entry

    def __bool__(self):
        return self._entry.present

    def cast(self, requested, /):
        return retrieve(self._entry, requested)

    @property
    def value(self):
        return retrieve(self._entry)

    @property
    def values(self):
        return retrieve(self._entry, list)

    def __rich_repr__(self):
        yield "entry", self._entry
        yield "present", self._entry.present

    def __repr__(self):
        return "option-handle(%r)" % self._entry


__all__ = (
    "OptionHandle",
    "retrieve",
)
