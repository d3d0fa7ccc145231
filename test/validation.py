# python
"""
Validation module behavioral tests (required, conflicts, rules, __validate__).

Conventions
- Test method names follow CamelCase per project convention.
- Objects are plain SimpleNamespace instances built from the keyword arguments
  handed to the validator.
"""

from __future__ import annotations

import unittest
from types import SimpleNamespace
from unittest import TestCase

from bindery import Switch, Option, Positional
from bindery.factory import OptionsFactory
from bindery.metadata import MetadataStore
from bindery.validation import OptionsValidator


class Checked(SimpleNamespace):
    def __validate__(self):
        if self.name == "root":
            yield "name 'root' is reserved"


class TestOptionsValidator(TestCase):

    def setUp(self):
        self.store = MetadataStore(
            {
                "source": Positional(0, required=True),
                "tags": Option("--tags", collection=list, required=True),
                "name": Option("--name"),
                "json": Switch("--json"),
                "yaml": Switch("--yaml"),
            },
            conflicts=[("json", "yaml")],
        )
        self.factory = OptionsFactory(SimpleNamespace, self.store)

    def validate(self, rules=(), target=SimpleNamespace, **values):
        arguments = dict(source="in.txt", tags=["x"], name=None, json=False, yaml=False) | values
        return list(OptionsValidator(self.store, self.factory, rules=rules).validate(target(**arguments), arguments))

    def testValidObjectYieldsNothing(self):
        self.assertEqual(self.validate(), [])

    def testRequiredProperties(self):
        messages = self.validate(source=None, tags=[])
        self.assertEqual(messages, ["positional 0 is required", "option '--tags' is required"])

    def testConflictingGroup(self):
        messages = self.validate(json=True, yaml=True)
        self.assertEqual(messages, ["switch '--json' and switch '--yaml' cannot be used together"])
        self.assertEqual(self.validate(json=True), [])

    def testRulesAcceptStringsIterablesAndNone(self):
        rules = [
            lambda obj: None,
            lambda obj: "single",
            lambda obj: ["one", "two"],
        ]
        self.assertEqual(self.validate(rules=rules), ["single", "one", "two"])

    def testRuleWithBadReturnType(self):
        with self.assertRaises(TypeError):
            self.validate(rules=[lambda obj: 42])

    def testTargetHook(self):
        self.assertEqual(self.validate(target=Checked, name="root"), ["name 'root' is reserved"])
        self.assertEqual(self.validate(target=Checked, name="user"), [])

    def testChecksReadArgumentsNotAttributes(self):
        self.assertEqual(self.validate(target=dict), [])
        self.assertEqual(self.validate(target=lambda **kw: tuple(kw.values()), source=None), ["positional 0 is required"])
        messages = self.validate(target=dict, json=True, yaml=True)
        self.assertEqual(messages, ["switch '--json' and switch '--yaml' cannot be used together"])

    def testRulesMustBeCallables(self):
        with self.assertRaises(TypeError):
            OptionsValidator(self.store, self.factory, rules=["not callable"])
        with self.assertRaises(TypeError):
            OptionsValidator(self.store, self.factory, rules="abc")


if __name__ == "__main__":
    unittest.main()
