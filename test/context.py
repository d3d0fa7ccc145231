# python
"""
Context module behavioral tests (value slots, fault recording, finalization).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from bindery import Switch, Option, Positional
from bindery.context import ParsingContext
from bindery.faults import FaultCode, UnknownTokenError, InvalidValueError, DuplicateValueError, ValidationFailureError
from bindery.metadata import MetadataStore


class TestParsingContext(TestCase):

    def setUp(self):
        self.store = MetadataStore({
            "source": Positional(0),
            "name": Option("--name"),
            "tags": Option("--tags", collection=set),
            "verbose": Switch("-v"),
        })
        self.context = ParsingContext(self.store)

    def testScalarSlotRefusesSecondValue(self):
        name = self.store["name"]
        self.assertTrue(self.context.assign(name, "a", index=2))
        self.assertFalse(self.context.assign(name, "b", index=4))
        self.assertEqual(self.context.finalize()["name"], "a")
        fault, = self.context.faults
        self.assertIsInstance(fault, DuplicateValueError)
        self.assertEqual(fault.property, "name")
        self.assertEqual(fault.index, 4)
        self.assertIn("fourth position", str(fault))

    def testSwitchDuplicateMentionsSwitch(self):
        verbose = self.store["verbose"]
        self.context.assign(verbose, True, index=1)
        self.context.assign(verbose, True, index=2)
        self.assertIn("switch", str(self.context.faults[0]))

    def testCollectionSlotAppends(self):
        tags = self.store["tags"]
        self.assertTrue(self.context.assign(tags, "x", index=2))
        self.assertTrue(self.context.assign(tags, "y", index=3))
        self.assertEqual(self.context.collected(tags), ("x", "y"))
        self.assertEqual(self.context.finalize()["tags"], ("x", "y"))
        self.assertFalse(self.context.has_faults)

    def testCollectedIsEmptyForScalars(self):
        name = self.store["name"]
        self.context.assign(name, "a", index=2)
        self.assertEqual(self.context.collected(name), ())

    def testSuppliedTracksSlots(self):
        self.assertFalse(self.context.supplied(self.store["source"]))
        self.context.assign(self.store["source"], "in.txt", index=1)
        self.assertTrue(self.context.supplied(self.store["source"]))
        self.assertNotIn("name", self.context.finalize())

    def testUnknownTokenCarriesSuggestions(self):
        self.context.add_unknown("--nmae", index=3, suggestions=["--name"])
        fault, = self.context.faults
        self.assertIsInstance(fault, UnknownTokenError)
        self.assertEqual(fault.token, "--nmae")
        self.assertEqual(fault.suggestions, ("--name",))
        self.assertIn("third position", str(fault))
        self.assertIn("--name", fault.options["hint"])

    def testMissingValueHasItsOwnCode(self):
        self.context.add_missing_value("--name", index=5)
        fault, = self.context.faults
        self.assertIsInstance(fault, UnknownTokenError)
        self.assertIs(fault.options["code"], FaultCode.MISSING_OPTION_VALUE)
        self.assertIn("missing its value", str(fault))

    def testInvalidValueMentionsPropertyAndReason(self):
        self.context.add_invalid(self.store["name"], "??", index=2, reason="bad")
        fault, = self.context.faults
        self.assertIsInstance(fault, InvalidValueError)
        self.assertEqual((fault.property, fault.token, fault.reason), ("name", "??", "bad"))
        self.assertIn("'--name'", str(fault))
        self.assertIn("(bad)", str(fault))

    def testValidationFaultsKeepOrder(self):
        self.context.add_unknown("x", index=1)
        self.context.add_validation("first rule")
        self.context.add_validation("second rule")
        kinds = [type(fault) for fault in self.context.faults]
        self.assertEqual(kinds, [UnknownTokenError, ValidationFailureError, ValidationFailureError])
        self.assertEqual(str(self.context.faults[2]), "second rule")

    def testFaultsAreASnapshot(self):
        faults = self.context.faults
        self.context.add_validation("late")
        self.assertEqual(faults, ())


if __name__ == "__main__":
    unittest.main()
