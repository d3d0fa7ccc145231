# python
"""
Utilities module behavioral tests (Unset sentinel, coalesce, rename, mirror, ordinal).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import pickle
import unittest
from unittest import TestCase

from bindery.utils import Unset, UnsetType, coalesce, rename, mirror, ordinal


class TestUnset(TestCase):

    def testUnsetIsSingletonAndFalsey(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnsetSurvivesCopies(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testUnsetSupportsUnionChecks(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", Unset | str)

    def testUnsetNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})


class TestHelpers(TestCase):

    def testCoalescePreservesFalseyValues(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(None, "fallback"))

    def testRenameDecorator(self):
        @rename("h")
        def k():
            pass

        self.assertEqual(k.__qualname__, "h")

    def testRenameChecksArguments(self):
        with self.assertRaises(TypeError):
            rename(1)
        with self.assertRaises(TypeError):
            rename("name")(42)

    def testMirrorFreezesContainers(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = ["a"]

        self.assertEqual(Holder().items, ("a",))
        with self.assertRaises(AttributeError):
            Holder().items = ()

    def testOrdinalWordsAndSuffixes(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(111), "111th")

    def testOrdinalRejectsBadInput(self):
        with self.assertRaises(TypeError):
            ordinal(True)
        with self.assertRaises(ValueError):
            ordinal(0)


if __name__ == "__main__":
    unittest.main()
