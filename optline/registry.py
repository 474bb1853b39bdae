"""
optline registry: the ordered collection of entries behind a parser.

What it holds
- one owning sequence of entries in registration order (short, long and the
  optional positional entry, distinguished by their namespace field).
- the positional tokens collected by the last parse (empty on a fresh clone).

Lifecycle
- the Options builder fills a Registry and hands it to OptionParser on build().
- every parse works on clone(): fresh entry state, empty positional list, so the
  registry describing the available options is never touched by parsing.

Lookups (NotFoundError when nothing matches)
- lookup_short(name): exact short name.
- lookup_long(name): exact long name; "name=" selects the entry taking
  "--name=value", "name " the entry taking "--name value".
- lookup_any(query): suffix rules of lookup_long, otherwise short then long.
- lookup_positional(): the positional entry.

Help text
- describe(): one aligned line per entry, e.g.
    "  -o <out>(=out.txt)       output file"
"""
import difflib

from .entries import ArgMode, Namespace
from .faults import *
from .lookup import OptionHandle
from .utils import mirror


class Registry:
    entries = mirror("entries")
    positionals = mirror("positionals")

    def __init__(self):
        self._entries = []
        self._positionals = []

    def __iter__(self):
        return iter(self._entries)

    def __len__(self):
        return len(self._entries)

    def add(self, entry, /):
        """append `entry`, rejecting ambiguous duplicates and a second positional."""
        if entry.namespace is Namespace.POSITIONAL and self.positional_entry is not None:
            raise ConfigError(
                "a positional value is already registered as %r" % self.positional_entry.full_name,
                title="duplicated positional",
                code=FaultCode.DUPLICATED_POSITIONAL,
                entry=entry,
                hint="use unlimited() on the existing positional value to collect several tokens",
            )
        for existing in self._entries:
            if existing.conflicts(entry):
                raise ConfigError(
                    "%s %r is already registered with an overlapping argument form" % (entry.kind, entry.full_name),
                    title="conflicting option",
                    code=FaultCode.CONFLICTING_OPTION,
                    entry=entry,
                    hint="suffix the name with '=' or ' ' to accept only --name=value or --name value",
                )
        self._entries.append(entry)
        return entry

    def clone(self):
        """copy of every entry (registration order kept) with an empty positional list."""
        registry = type(self)()
        registry._entries = [entry.clone() for entry in self._entries]
        return registry

    def collect(self, token, /):
        self._positionals.append(token)

    def of(self, namespace, /):
        return [entry for entry in self._entries if entry.namespace is namespace]

    @property
    def positional_entry(self):
        return next(iter(self.of(Namespace.POSITIONAL)), None)

    def _missing(self, query, namespaces, /):
        names = [entry.full_name for namespace in namespaces for entry in self.of(namespace)]
        spelled = {Namespace.SHORT: "-", Namespace.LONG: "--"}
        candidates = [
            namespace.prefix + query.rstrip("= ")
            for namespace in namespaces if namespace in spelled
        ]
        suggestions = []
        for candidate in candidates:
            suggestions += difflib.get_close_matches(candidate, names, 3)
        try:
            hint = "did you mean %r?" % suggestions[0]
        except IndexError:
            hint = "registered names are listed by describe()"
        return NotFoundError(
            "no %s named %r" % (" or ".join(namespace.name.lower() + " option" for namespace in namespaces), query),
            title="unknown option",
            code=FaultCode.UNKNOWN_ENTRY,
            input=query,
            suggestions=suggestions,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_ENTRY),
        )

    def _by_syntax(self, query, /):
        """resolve "name=" / "name " queries among long entries, or None."""
        if query.endswith("="):
            pattern = ArgMode.EQUALS_SIGN
        elif query.endswith(" "):
            pattern = ArgMode.NEXT_ARG
        else:
            return None
        for entry in self.of(Namespace.LONG):
            if entry.name == query[:-1] and entry.mode.permits(pattern):
                return entry
        raise self._missing(query, (Namespace.LONG,))

    def lookup_short(self, name, /):
        _check(name)
        for entry in self.of(Namespace.SHORT):
            if entry.name == name:
                return entry
        raise self._missing(name, (Namespace.SHORT,))

    def lookup_long(self, name, /):
        _check(name)
        if (entry := self._by_syntax(name)) is not None:
            return entry
        for entry in self.of(Namespace.LONG):
            if entry.name == name:
                return entry
        raise self._missing(name, (Namespace.LONG,))

    def lookup_any(self, query, /):
        _check(query)
        if (entry := self._by_syntax(query)) is not None:
            return entry
        for namespace in (Namespace.SHORT, Namespace.LONG):
            for entry in self.of(namespace):
                if entry.name == query:
                    return entry
        raise self._missing(query, (Namespace.SHORT, Namespace.LONG))

    def lookup_positional(self):
        if (entry := self.positional_entry) is None:
            raise NotFoundError(
                "no positional value is registered",
                title="unknown positional",
                code=FaultCode.UNKNOWN_ENTRY,
                hint="register one with add_positional(), or read the raw tokens from positionals",
                docs=getdoc(FaultCode.UNKNOWN_ENTRY),
            )
        return entry

    def used(self, name, /):
        return OptionHandle(self.lookup_any(name))

    def used_short(self, name, /):
        return OptionHandle(self.lookup_short(name))

    def used_long(self, name, /):
        return OptionHandle(self.lookup_long(name))

    def positional(self):
        return OptionHandle(self.lookup_positional())

    def describe(self, width=25, gap=2):
        """
        aligned two-column help text.

        each line: two spaces, the syntax column padded to `width` characters
        (or followed by `gap` spaces when it is longer than width - gap), the
        description, a newline. An empty registry renders "  None".
        """
        if not self._entries:
            return "  None\n"
        lines = []
        for entry in self._entries:
            syntax, description = entry.describe()
            padding = gap if len(syntax) > width - gap else width - len(syntax)
            lines.append("  " + syntax + " " * padding + description + "\n")
        return "".join(lines)

    def __rich_repr__(self):
        yield "entries", list(self._entries)
        yield "positionals", list(self._positionals)

    def __repr__(self):
        return "registry(entries=%r, positionals=%r)" % (self._entries, self._positionals)


def _check(query, /):
    if not isinstance(query, str):
        raise TypeError("option query must be a string, not %s" % type(query).__name__)


__all__ = (
    "Registry",
)
