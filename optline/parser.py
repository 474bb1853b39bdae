"""
optline parser layer: register options, parse argv, render help.

What this module provides
- Options: builder owning a Registry until build().
  • add_long(name, description)              → flag "--name"
  • add_long(name, value, description)       → valued "--name"; a trailing "=" in
    name accepts only "--name=v", a trailing " " only "--name v"
  • add_short(name, description)             → flag "-name"
  • add_short(name, value, description)      → valued "-name v"
  • add_positional(value, description)       → typed bucket for non-option tokens
  • build(**runtime)                         → OptionParser (the builder is then closed)

- OptionParser: reusable parser over the finished registry.
  • parse(prompt) → parsed Registry (query it with used()/used_short()/used_long())
  • describe()    → aligned help text
  • print_help()  → describe() through rich, without markup

Runtime options
- shell: render faults with rich on stderr and exit(1) instead of raising.
- fancy: wrap rendered faults in a panel.
- colorful: style rendered faults.
- overflow_warnings: emit CardinalityOverflowWarning when a value replaces the
  last slot of a full option.
- width / gap: help column layout (defaults 25 / 2).
- prog: program name shown in rendered faults (defaults to argv[0]).

Quick start
    from optline import Options, Value

    parser = (
        Options()
        .add_short("o", Value(str).with_default("out.txt").named("out"), "output file")
        .add_long("flag", "a flag")
        .add_long("k", Value(int).unlimited().constrain(lambda x: x > 0).named("param-k"), "a multi-valued option")
        .build()
    )
    result = parser.parse(["--flag", "--k=1,2,3", "input.txt"])
    result.used("k").cast(list[int])   # [1, 2, 3]
    result.positionals                 # ['input.txt']
"""
import shlex
import sys
from collections.abc import Iterable

from rich.console import Console
from rich.text import Text

from .engine import MatchEngine
from .entries import Flag, Namespace, Positional, Valued, split_suffix
from .faults import *
from .registry import Registry
from .utils import Unset, nullify
from .values import Value

console = Console()


class Options:
    """
    Builder for a parser's option registry.

    Every add_* call validates and appends one entry immediately (ConfigError on
    bad names, limits, defaults or ambiguous duplicates) and returns the builder
    for chaining. The Value passed in is copied, so changing it afterwards does
    not affect the registered option.
    """

    def __init__(self):
        self._registry = Registry()
        self._built = False

    def _register(self, entry):
        self._registry.add(entry)
        return self

    def _ensure_open(self, method):
        if self._built:
            raise ConfigError(
                "%s() called after build()" % method,
                title="builder already finished",
                code=FaultCode.FINALIZED_BUILDER,
                hint="register every option before calling build()",
            )

    def add_long(self, name, /, *parameters):
        self._ensure_open("add_long")
        match parameters:
            case (str() as description,):
                return self._register(Flag(name, Namespace.LONG, description))
            case (Value() as value, str() as description):
                name, mode = split_suffix(name)
                return self._register(Valued(name, Namespace.LONG, value, description, mode))
            case _:
                raise TypeError("add_long() takes (name, description) or (name, value, description)")

    def add_short(self, name, /, *parameters):
        self._ensure_open("add_short")
        match parameters:
            case (str() as description,):
                return self._register(Flag(name, Namespace.SHORT, description))
            case (Value() as value, str() as description):
                return self._register(Valued(name, Namespace.SHORT, value, description))
            case _:
                raise TypeError("add_short() takes (name, description) or (name, value, description)")

    def add_positional(self, value, description, /):
        self._ensure_open("add_positional")
        if not isinstance(value, Value):
            raise TypeError("add_positional() first argument must be a Value")
        return self._register(Positional(value, description))

    def describe(self, width=25, gap=2):
        return self._registry.describe(width, gap)

    def build(self, **options):
        """close the builder and return an OptionParser over its registry."""
        self._ensure_open("build")
        self._built = True
        return OptionParser(self._registry, **options)


def _tokenize(prompt, /):
    """
    normalize a prompt into a list of tokens.

    - Unset: sys.argv[1:]
    - str: shell-like string, split with shlex
    - Iterable[str]: used as-is (tokens are not trimmed)
    """
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        tokens = list(prompt)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("parse() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("parse() argument must be a string or an iterable of strings")


class OptionParser:
    """
    Parser over a finished registry.

    The registry is only ever read: each parse() works on its own clone, so one
    parser can be used any number of times with identical results for identical
    input.
    """

    def __init__(
            self,
            registry,
            /,
            *,
            shell=False,
            fancy=False,
            colorful=True,
            overflow_warnings=False,
            width=25,
            gap=2,
            prog=Unset
    ):
        if not isinstance(registry, Registry):
            raise TypeError("OptionParser() argument must be a Registry (build one with Options)")
        self._registry = registry
        self.shell = shell
        self.fancy = fancy
        self.colorful = colorful
        self.overflow_warnings = overflow_warnings
        self.width = width
        self.gap = gap
        self.prog = nullify(prog)

    @property
    def registry(self):
        """a fresh clone of the registry (no parse state)."""
        return self._registry.clone()

    def trigger(self, fault, /, **options):
        """surface `fault` with this parser's runtime options (see faults.trigger)."""
        trigger(
            fault,
            **options,
            prog=self.prog,
            shell=self.shell,
            fancy=self.fancy,
            colorful=self.colorful
        )

    def parse(self, prompt=Unset, /):
        """
        parse a prompt (see _tokenize) and return the parsed registry.

        outside shell mode the first fault is raised unchanged; in shell mode the
        help text and the fault are printed to stderr and the process exits with 1.
        """
        tokens = _tokenize(prompt)
        engine = MatchEngine(self._registry, notify=self.trigger if self.overflow_warnings else Unset)
        try:
            return engine.run(tokens)
        except OptionException as fault:
            if not self.shell:
                raise
            self.print_help(file=sys.stderr)
            self.trigger(fault)

    def describe(self, width=Unset, gap=Unset):
        """help text; width and gap default to the parser's layout options."""
        return self._registry.describe(nullify(width, self.width), nullify(gap, self.gap))

    def print_help(self, file=Unset):
        output = console if file is Unset else Console(file=file)
        output.print(Text(self.describe()), end="", markup=False, highlight=False, soft_wrap=True)

    def __rich_repr__(self):
        yield "registry", self._registry
        yield "shell", self.shell
        yield "fancy", self.fancy
        yield "colorful", self.colorful
        yield "overflow_warnings", self.overflow_warnings


__all__ = (
    "Options",
    "OptionParser",
)
