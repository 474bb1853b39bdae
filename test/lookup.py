# python
"""
Lookup module behavioral tests.

Scope
- Validate typed retrieval: scalar families, ValueType members, sequence containers.
- Validate faults for flags, mismatched families, unsupported containers and empty entries.
- Validate OptionHandle truthiness and its untyped accessors.

Conventions
- Test method names follow CamelCase per project convention.
- Entries are filled through add_value(), exactly as the engine does.
"""

from __future__ import annotations

import unittest
from collections.abc import Sequence
from unittest import TestCase

from optline import (
    EmptyValueError,
    FaultCode,
    Flag,
    Namespace,
    OptionHandle,
    Valued,
    Value,
    ValueType,
    ValueTypeError,
    retrieve,
)


def filled(type, *raws):
    entry = Valued("k", Namespace.LONG, Value(type).unlimited(), "k")
    for raw in raws:
        entry.add_value(raw)
    return entry


class TestRetrieve(TestCase):
    """Typed reads through retrieve()."""

    def testScalarReadsFirstValue(self):
        self.assertEqual(retrieve(filled(int, "3", "4"), int), 3)
        self.assertEqual(retrieve(filled(str, "a"), str), "a")
        self.assertEqual(retrieve(filled(float, "0.5"), float), 0.5)

    def testUntypedRead(self):
        self.assertEqual(retrieve(filled(int, "3")), 3)

    def testSequenceContainers(self):
        entry = filled(int, "1", "2", "3")
        self.assertEqual(retrieve(entry, list[int]), [1, 2, 3])
        self.assertEqual(retrieve(entry, tuple[int, ...]), (1, 2, 3))
        self.assertEqual(retrieve(entry, Sequence[int]), [1, 2, 3])
        self.assertEqual(retrieve(entry, list), [1, 2, 3])
        self.assertEqual(retrieve(entry, tuple), (1, 2, 3))

    def testSequenceIsCopy(self):
        entry = filled(int, "1")
        retrieve(entry, list[int]).append(2)
        self.assertEqual(entry.values, [1])

    def testValueTypeMembers(self):
        entry = filled(ValueType.UNSIGNED, "5")
        self.assertEqual(retrieve(entry, ValueType.UNSIGNED), 5)
        self.assertEqual(retrieve(entry, int), 5)
        self.assertEqual(retrieve(entry, list[ValueType.UNSIGNED]), [5])
        with self.assertRaises(ValueTypeError):
            retrieve(entry, ValueType.INTEGER)

    def testMismatchedFamily(self):
        entry = filled(int, "3")
        for requested in (str, float, list[str], tuple[float, ...]):
            with self.subTest(requested=requested):
                with self.assertRaises(ValueTypeError) as context:
                    retrieve(entry, requested)
                self.assertEqual(context.exception.code, FaultCode.INCOMPATIBLE_TYPE)

    def testMismatchNamesBothTypes(self):
        with self.assertRaises(ValueTypeError) as context:
            retrieve(filled(int, "3"), str)
        message = str(context.exception)
        self.assertIn("str", message)
        self.assertIn("integer", message)

    def testUnsupportedContainer(self):
        with self.assertRaises(ValueTypeError):
            retrieve(filled(int, "3"), dict[str, int])
        with self.assertRaises(ValueTypeError):
            retrieve(filled(int, "3"), set[int])

    def testFlagCarriesNoValue(self):
        with self.assertRaises(ValueTypeError) as context:
            retrieve(Flag("flag", Namespace.LONG, "a flag"), str)
        self.assertIsInstance(context.exception, TypeError)

    def testEmptyEntry(self):
        with self.assertRaises(EmptyValueError):
            retrieve(filled(int), int)
        with self.assertRaises(EmptyValueError):
            retrieve(filled(int), list[int])

    def testDefaultsAreRead(self):
        entry = Valued("o", Namespace.SHORT, Value(str).with_default("out.txt"), "output")
        self.assertEqual(retrieve(entry, str), "out.txt")


class TestOptionHandle(TestCase):
    """OptionHandle behavior."""

    def testTruthiness(self):
        flag = Flag("flag", Namespace.LONG, "a flag")
        self.assertFalse(OptionHandle(flag))
        flag.mark()
        self.assertTrue(OptionHandle(flag))
        self.assertFalse(OptionHandle(filled(int)))
        self.assertTrue(OptionHandle(filled(int, "1")))

    def testAccessors(self):
        handle = OptionHandle(filled(int, "1", "2"))
        self.assertEqual(handle.value, 1)
        self.assertEqual(handle.values, [1, 2])
        self.assertEqual(handle.cast(tuple[int, ...]), (1, 2))

    def testEntryIsExposed(self):
        entry = filled(int, "1")
        self.assertIs(OptionHandle(entry).entry, entry)


if __name__ == "__main__":
    unittest.main()
