"""
optline match engine: one left-to-right pass over the argument vector.

Token classes
- SHORT:      "-x..."  (a dash followed by anything but a dash)
- LONG:       "--x..." (two dashes followed by anything but a dash)
- POSITIONAL: everything else, including "-", "--" and "---x"

Rules
- short: the whole token after "-" must name a short entry (no bundling, no
  attached value). An entry taking a value consumes the next token, which must
  exist and must not be option-shaped; otherwise the entry is just marked used.
- long: the token is split at the first "=" and the name must match a long
  entry exactly (no abbreviations).
  • with "=": the same-named entry taking "--name=value" receives every
    comma-separated piece of the text after "="; that text must not be empty.
  • without "=": an entry taking "--name value" consumes the next token, a flag
    is marked used, an entry accepting only "--name=value" is a usage fault.
- positional: appended verbatim to the collected positionals and, when a
  positional entry is registered, fed to it as a value.

The engine parses a clone of the registry it was given and returns that clone;
the first fault aborts the pass.
"""
import difflib
import enum

from .entries import ArgMode, Namespace
from .faults import *
from .utils import Unset, ordinal


class TokenKind(enum.Enum):
    SHORT = "short"
    LONG = "long"
    POSITIONAL = "positional"


def classify(token, /):
    """token class of a raw argument (see module docs)."""
    if token.startswith("--"):
        return TokenKind.LONG if len(token) > 2 and token[2] != "-" else TokenKind.POSITIONAL
    if token.startswith("-") and len(token) > 1:
        return TokenKind.SHORT
    return TokenKind.POSITIONAL


def split_values(text, /):
    """
    comma-separated pieces of an inline value.

    a single trailing empty piece is dropped ("a,b," → ["a", "b"]), inner empty
    pieces are kept ("a,,b" → ["a", "", "b"]).
    """
    pieces = text.split(",")
    if len(pieces) > 1 and not pieces[-1]:
        pieces.pop()
    return pieces


class MatchEngine:
    """
    single-use parse pass over a registry.

    parameters
    - registry: the Registry describing the available options (never mutated).
    - notify: optional callable receiving a CardinalityOverflowWarning whenever a
      value overwrites the last slot of a full entry.
    """

    def __init__(self, registry, /, *, notify=Unset):
        self._registry = registry
        self._notify = notify
        self._result = None
        self._tokens = []
        self._cursor = 0

    @property
    def _index(self):
        return self._cursor + 1

    def run(self, tokens, /):
        self._result = self._registry.clone()
        self._tokens = list(tokens)
        self._cursor = 0

        while self._cursor < len(self._tokens):
            token = self._tokens[self._cursor]
            match classify(token):
                case TokenKind.SHORT:
                    self._match_short(token)
                case TokenKind.LONG:
                    self._match_long(token)
                case TokenKind.POSITIONAL:
                    self._match_positional(token)

        return self._result

    def _unknown(self, token, namespace, /):
        input = token.partition("=")[0] if namespace is Namespace.LONG else token
        names = [entry.full_name for entry in self._result.of(namespace)]
        suggestions = difflib.get_close_matches(input, names, 5)
        try:
            hint = "did you mean %r?" % suggestions[0]
        except IndexError:
            hint = "check the help text for the available options"
        return UnknownOptionError(
            "unknown %s option %r at %s position" % (namespace.name.lower(), input, ordinal(self._index)),
            title="unknown option",
            code=FaultCode.UNKNOWN_OPTION,
            input=input,
            index=self._index,
            suggestions=suggestions,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_OPTION),
        )

    def _usage(self, entry, message, /, *, code, title, hint):
        return UsageError(
            "%s %r at %s position %s" % (entry.kind, entry.full_name, ordinal(self._index), message),
            title=title,
            code=code,
            input=entry.full_name,
            index=self._index,
            entry=entry,
            hint=hint,
            docs=getdoc(code),
        )

    def _feed(self, entry, raw, index, /):
        if entry.add_value(raw, index=index) and self._notify:
            self._notify(CardinalityOverflowWarning(
                "%s %r keeps at most %d values, %r replaced the last one at %s position" % (
                    entry.kind, entry.full_name, entry.value.cardinality, raw, ordinal(index)
                ),
                title="too many values",
                code=FaultCode.CARDINALITY_OVERFLOW,
                input=entry.full_name,
                index=index,
                entry=entry,
                hint="pass %s at most %d times" % (entry.full_name, entry.value.cardinality),
                docs=getdoc(FaultCode.CARDINALITY_OVERFLOW),
            ))

    def _take_next(self, entry, /):
        following = self._cursor + 1
        if following >= len(self._tokens) or classify(self._tokens[following]) is not TokenKind.POSITIONAL:
            raise self._usage(
                entry,
                "requires a value",
                code=FaultCode.MISSING_VALUE,
                title="missing option value",
                hint="pass the value right after the option (for example: %s <%s>)" % (
                    entry.full_name, entry.value.metavar
                ),
            )
        self._feed(entry, self._tokens[following], following + 1)
        self._cursor += 2

    def _match_short(self, token, /):
        for entry in self._result.of(Namespace.SHORT):
            if entry.full_name == token:
                break
        else:
            raise self._unknown(token, Namespace.SHORT)

        if entry.mode.permits(ArgMode.NEXT_ARG):
            self._take_next(entry)
        else:
            entry.mark()
            self._cursor += 1

    def _match_long(self, token, /):
        name, equals, text = token[2:].partition("=")
        candidates = [entry for entry in self._result.of(Namespace.LONG) if entry.name == name]
        if not candidates:
            raise self._unknown(token, Namespace.LONG)

        if equals:
            inline = next((entry for entry in candidates if entry.mode.permits(ArgMode.EQUALS_SIGN)), None)
            if inline is None:
                entry = candidates[0]
                if entry.mode == ArgMode.NONE:
                    entry.add_value(text, index=self._index)
                raise self._usage(
                    entry,
                    "takes its value as the next argument",
                    code=FaultCode.INLINE_VALUE_REQUIRED,
                    title="unexpected inline value",
                    hint="remove '=' and pass the value after a space (for example: %s %s)" % (
                        entry.full_name, text or "<%s>" % entry.value.metavar
                    ),
                )
            if not text:
                raise self._usage(
                    inline,
                    "has no value after '='",
                    code=FaultCode.EMPTY_INLINE_VALUE,
                    title="empty inline value",
                    hint="add a value after '=' (for example: %s=<%s>)" % (inline.full_name, inline.value.metavar),
                )
            for piece in split_values(text):
                self._feed(inline, piece, self._index)
            self._cursor += 1
            return

        for entry in candidates:
            if entry.mode.permits(ArgMode.NEXT_ARG):
                return self._take_next(entry)
        for entry in candidates:
            if entry.mode == ArgMode.NONE:
                entry.mark()
                self._cursor += 1
                return
        entry = candidates[0]
        raise self._usage(
            entry,
            "requires an inline value",
            code=FaultCode.INLINE_VALUE_REQUIRED,
            title="inline value required",
            hint="pass the value after '=' (for example: %s=<%s>)" % (entry.full_name, entry.value.metavar),
        )

    def _match_positional(self, token, /):
        self._result.collect(token)
        if (entry := self._result.positional_entry) is not None:
            self._feed(entry, token, self._index)
        self._cursor += 1


def parse(registry, tokens, /, *, notify=Unset):
    """parse `tokens` (program name excluded) against a clone of `registry`."""
    return MatchEngine(registry, notify=notify).run(tokens)


__all__ = (
    "TokenKind",
    "MatchEngine",
    "classify",
    "split_values",
    "parse",
)
