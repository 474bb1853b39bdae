# python
"""
Engine module behavioral tests.

Scope
- Validate token classification and the splitting of inline values.
- Validate matching of short, long and positional tokens against a registry,
  including every usage fault the pass can raise.
- Validate that parsing never mutates the registry it was given.
- Validate overflow notifications.

Conventions
- Test method names follow CamelCase per project convention.
- Every parse goes through optline.engine.parse or MatchEngine directly (no parser options).
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from optline import (
    ArgMode,
    CardinalityOverflowWarning,
    ConstraintError,
    ConversionError,
    FaultCode,
    Flag,
    MatchEngine,
    Namespace,
    Positional,
    Registry,
    TokenKind,
    UnknownOptionError,
    UsageError,
    Valued,
    Value,
    ValueType,
    classify,
    parse,
    split_values,
)


def sample():
    registry = Registry()
    registry.add(Valued("o", Namespace.SHORT, Value(str).with_default("out.txt").named("out"), "output file"))
    registry.add(Flag("a", Namespace.SHORT, "short flag a"))
    registry.add(Flag("b", Namespace.SHORT, "short flag b"))
    registry.add(Flag("flag", Namespace.LONG, "a flag"))
    registry.add(Valued("k", Namespace.LONG, Value(int).unlimited().constrain(lambda x: x > 0), "multi"))
    registry.add(Valued("n", Namespace.LONG, Value(int), "next argument only", ArgMode.NEXT_ARG))
    registry.add(Valued("e", Namespace.LONG, Value(str), "inline only", ArgMode.EQUALS_SIGN))
    registry.add(Flag("verbose", Namespace.LONG, "verbose output"))
    registry.add(Valued("verbose", Namespace.LONG, Value(ValueType.UNSIGNED), "level", ArgMode.EQUALS_SIGN))
    return registry


def state(registry):
    return (
        [(entry.full_name, entry.used, getattr(entry, "values", None)) for entry in registry],
        registry.positionals,
    )


class TestTokens(TestCase):
    """Token classes and inline value splitting."""

    def testClassify(self):
        for token, kind in (
            ("-x", TokenKind.SHORT),
            ("-xyz", TokenKind.SHORT),
            ("-1", TokenKind.SHORT),
            ("--x", TokenKind.LONG),
            ("--x=1", TokenKind.LONG),
            ("-", TokenKind.POSITIONAL),
            ("--", TokenKind.POSITIONAL),
            ("---x", TokenKind.POSITIONAL),
            ("x", TokenKind.POSITIONAL),
            ("", TokenKind.POSITIONAL),
        ):
            with self.subTest(token=token):
                self.assertIs(classify(token), kind)

    def testSplitValues(self):
        self.assertEqual(split_values("a"), ["a"])
        self.assertEqual(split_values("a,b"), ["a", "b"])
        self.assertEqual(split_values("a,b,"), ["a", "b"])
        self.assertEqual(split_values("a,,b"), ["a", "", "b"])
        self.assertEqual(split_values(","), [""])


class TestMatching(TestCase):
    """Successful parses."""

    def testEmptyInput(self):
        result = parse(sample(), [])
        self.assertEqual(result.positionals, [])
        self.assertFalse(result.used("flag"))
        self.assertFalse(result.lookup_short("o").used)
        self.assertTrue(result.used("o"))
        self.assertEqual(result.used("o").value, "out.txt")

    def testShortValueReplacesDefault(self):
        result = parse(sample(), ["-o", "result.txt"])
        self.assertEqual(result.lookup_short("o").values, ["result.txt"])

    def testShortValueMayBeSingleDash(self):
        result = parse(sample(), ["-o", "-"])
        self.assertEqual(result.lookup_short("o").values, ["-"])

    def testShortFlags(self):
        result = parse(sample(), ["-a", "-b"])
        self.assertTrue(result.used("a"))
        self.assertTrue(result.used("b"))

    def testInlineCommaSeparatedValues(self):
        result = parse(sample(), ["--k=1,2,3"])
        self.assertEqual(result.used("k").cast(list[int]), [1, 2, 3])

    def testInlineTrailingCommaDropped(self):
        result = parse(sample(), ["--k=1,2,"])
        self.assertEqual(result.lookup_long("k").values, [1, 2])

    def testMixedForms(self):
        result = parse(sample(), ["--k", "4", "--k=5,6"])
        self.assertEqual(result.lookup_long("k").values, [4, 5, 6])

    def testNextArgumentOnlyOption(self):
        result = parse(sample(), ["--n", "3"])
        self.assertEqual(result.lookup_long("n").values, [3])

    def testInlineOnlyOption(self):
        result = parse(sample(), ["--e=x,y"])
        self.assertEqual(result.lookup_long("e").values, ["y"])

    def testFlagAndInlineOptionShareName(self):
        result = parse(sample(), ["--verbose"])
        self.assertTrue(result.used_long("verbose"))
        self.assertFalse(result.used_long("verbose="))
        result = parse(sample(), ["--verbose=2"])
        self.assertFalse(result.used_long("verbose"))
        self.assertEqual(result.used_long("verbose=").value, 2)

    def testLastValueWinsAtLimit(self):
        registry = Registry()
        registry.add(Valued("o", Namespace.SHORT, Value(str).limit(2), "output"))
        result = parse(registry, ["-o", "a", "-o", "b", "-o", "c"])
        self.assertEqual(result.lookup_short("o").values, ["a", "c"])

    def testPositionalsCollected(self):
        result = parse(sample(), ["a", "--flag", "b"])
        self.assertTrue(result.used("flag"))
        self.assertEqual(result.positionals, ["a", "b"])

    def testFlagFollowedByPositionals(self):
        result = parse(sample(), ["--flag", "x", "y"])
        self.assertTrue(result.lookup_long("flag").used)
        self.assertEqual(result.positionals, ["x", "y"])

    def testDashTokensArePositional(self):
        result = parse(sample(), ["--", "-", "---x"])
        self.assertEqual(result.positionals, ["--", "-", "---x"])

    def testTypedPositionalEntry(self):
        registry = Registry()
        registry.add(Positional(Value(int).unlimited().named("count"), "counts"))
        result = parse(registry, ["1", "2"])
        self.assertEqual(result.positional().cast(list[int]), [1, 2])
        self.assertEqual(result.positionals, ["1", "2"])

    def testSingleValuePositionalKeepsLastToken(self):
        registry = Registry()
        registry.add(Positional(Value(str), "input"))
        result = parse(registry, ["a", "b"])
        self.assertEqual(result.positional().values, ["b"])
        self.assertEqual(result.positionals, ["a", "b"])


class TestIsolation(TestCase):
    """Parsing never touches the registry it was given."""

    def testRegistryUntouched(self):
        registry = sample()
        before = state(registry)
        parse(registry, ["-o", "x", "--flag", "--k=1,2", "file"])
        self.assertEqual(state(registry), before)

    def testIdempotent(self):
        registry = sample()
        tokens = ["-a", "--k", "7", "--e=z", "file", "--verbose=1"]
        self.assertEqual(state(parse(registry, tokens)), state(parse(registry, tokens)))


class TestFaults(TestCase):
    """Faults raised by the matching pass."""

    def testUnknownLongOption(self):
        with self.assertRaises(UnknownOptionError) as context:
            parse(sample(), ["x", "--nope"])
        fault = context.exception
        self.assertEqual(fault.code, FaultCode.UNKNOWN_OPTION)
        self.assertEqual(fault.options["index"], 2)
        self.assertEqual(str(fault), "unknown long option '--nope' at second position")

    def testUnknownLongOptionWithValue(self):
        with self.assertRaises(UnknownOptionError) as context:
            parse(sample(), ["--nope=3"])
        self.assertEqual(context.exception.options["input"], "--nope")

    def testUnknownOptionSuggestion(self):
        with self.assertRaises(UnknownOptionError) as context:
            parse(sample(), ["--flg"])
        self.assertIn("--flag", context.exception.options["suggestions"])

    def testShortOptionsAreNotBundled(self):
        with self.assertRaises(UnknownOptionError):
            parse(sample(), ["-ab"])

    def testNoAbbreviations(self):
        with self.assertRaises(UnknownOptionError):
            parse(sample(), ["--verb"])

    def testMissingValueAtEnd(self):
        with self.assertRaises(UsageError) as context:
            parse(sample(), ["-o"])
        self.assertEqual(context.exception.code, FaultCode.MISSING_VALUE)

    def testOptionShapedTokenIsNotAValue(self):
        for following in ("--flag", "-a", "-5"):
            with self.subTest(following=following):
                with self.assertRaises(UsageError) as context:
                    parse(sample(), ["-o", following])
                self.assertEqual(context.exception.code, FaultCode.MISSING_VALUE)

    def testEmptyInlineValue(self):
        with self.assertRaises(UsageError) as context:
            parse(sample(), ["--k="])
        self.assertEqual(context.exception.code, FaultCode.EMPTY_INLINE_VALUE)

    def testEmptyInlineValueForInlineOnlyOption(self):
        with self.assertRaises(UsageError) as context:
            parse(sample(), ["--e="])
        self.assertEqual(context.exception.code, FaultCode.EMPTY_INLINE_VALUE)

    def testFlagGivenInlineValue(self):
        with self.assertRaises(UsageError) as context:
            parse(sample(), ["--flag=1"])
        self.assertEqual(context.exception.code, FaultCode.FLAG_ASSIGNMENT)

    def testInlineValueForNextArgumentOption(self):
        with self.assertRaises(UsageError) as context:
            parse(sample(), ["--n=3"])
        self.assertEqual(context.exception.code, FaultCode.INLINE_VALUE_REQUIRED)

    def testInlineOnlyOptionWithoutValue(self):
        with self.assertRaises(UsageError) as context:
            parse(sample(), ["--e", "x"])
        self.assertEqual(context.exception.code, FaultCode.INLINE_VALUE_REQUIRED)

    def testConversionFault(self):
        with self.assertRaises(ConversionError):
            parse(sample(), ["--k=1,,2"])

    def testConstraintFault(self):
        with self.assertRaises(ConstraintError):
            parse(sample(), ["--k", "0"])

    def testTypedPositionalConversionFault(self):
        registry = Registry()
        registry.add(Positional(Value(int), "count"))
        with self.assertRaises(ConversionError) as context:
            parse(registry, ["x"])
        self.assertEqual(context.exception.options["index"], 1)


class TestOverflowNotifications(TestCase):
    """Overflow warnings handed to the notify callback."""

    def setUp(self):
        self.registry = Registry()
        self.registry.add(Valued("o", Namespace.SHORT, Value(str), "output"))
        self.registry.add(Valued("k", Namespace.LONG, Value(int).limit(2), "k"))

    def testNotifiedOnOverwrite(self):
        collected = []
        MatchEngine(self.registry, notify=collected.append).run(["-o", "a", "-o", "b"])
        self.assertEqual(len(collected), 1)
        warning = collected[0]
        self.assertIsInstance(warning, CardinalityOverflowWarning)
        self.assertEqual(warning.code, FaultCode.CARDINALITY_OVERFLOW)
        self.assertEqual(warning.options["index"], 4)

    def testInlinePiecesNotified(self):
        collected = []
        result = MatchEngine(self.registry, notify=collected.append).run(["--k=1,2,3,4"])
        self.assertEqual(len(collected), 2)
        self.assertEqual(result.lookup_long("k").values, [1, 4])

    def testSilentWithoutCallback(self):
        result = parse(self.registry, ["-o", "a", "-o", "b"])
        self.assertEqual(result.lookup_short("o").values, ["b"])


if __name__ == "__main__":
    unittest.main()
