"""
Help renderer tests: structured content and the rendered sections.

Conventions
- Test method names follow CamelCase per project convention.
"""
import io
import unittest
from unittest import TestCase

from rich.console import Console

from metacli.faults import UnknownCommandError
from metacli.help import HelpRenderer
from metacli.metadata import load, Method, ObjectType

INTERFACE = load({
    "description": "Demonstration program.",
    "members": {
        "foo": {
            "kind": "objectProperty",
            "description": "Tests foozball.",
            "dataType": {"type": {"kind": "objectType", "members": {
                "name": {
                    "kind": "scalarProperty",
                    "description": "Gets the dude's first name",
                    "dataType": {"type": "string"},
                },
                "bar": {
                    "kind": "method",
                    "description": (
                        "Uses bats to transform bazzes in a barological pattern. This is completely "
                        "irreversible and may cause the destruction of the universe."
                    ),
                    "parameters": [
                        {"name": "baz", "dataType": {"type": "string"}, "description": "The baz to use for the process."},
                        {"name": "bat", "dataType": {"type": "string", "nullable": True}, "description": "The bat to apply."},
                        {"name": "counts", "dataType": {"type": {"kind": "recordType", "keyDataType": "string", "valueDataType": {"type": "number"}}}},
                    ],
                    "returnDataType": "void",
                },
                "internal": {"kind": "method", "ignore": True, "parameters": []},
            }}},
        },
        "goob": {
            "kind": "objectProperty",
            "summary": "Manages goobers.",
            "aliases": ["g"],
            "dataType": {"type": {"kind": "objectType", "members": {
                "lastName": {"kind": "scalarProperty", "dataType": {"type": "string"}},
            }}},
        },
        "version": {"kind": "method", "description": "Gets the version of the app.", "parameters": []},
    },
})


class TestBuild(TestCase):
    def setUp(self):
        self.help = HelpRenderer(INTERFACE, "demo", console=Console(file=io.StringIO(), color_system=None))

    def testRoot(self):
        content = self.help.build(())
        self.assertEqual(content.label, "demo")
        self.assertEqual(content.summary, "Demonstration program.")
        self.assertEqual(content.groups, (("foo", "Tests foozball."), ("goob", "Manages goobers.")))
        self.assertEqual(content.commands, (("version", "Gets the version of the app."),))
        self.assertEqual(content.placeholders, ("GROUP", "COMMAND"))
        self.assertEqual(content.usage, "demo GROUP | COMMAND")

    def testGroup(self):
        content = self.help.build(["foo"])
        self.assertEqual(content.label, "demo.foo")
        self.assertEqual(content.summary, "Tests foozball.")
        self.assertEqual(content.groups, ())
        self.assertEqual([name for name, _ in content.commands], ["bar", "name"])
        self.assertEqual(content.usage, "demo foo COMMAND")
        self.assertIsInstance(content.context, ObjectType)

    def testHiddenMembersOmitted(self):
        self.assertNotIn("internal", [name for name, _ in self.help.build(["foo"]).commands])

    def testMethod(self):
        content = self.help.build(["foo", "bar"])
        self.assertEqual(content.label, "demo.foo.bar")
        self.assertEqual(content.usage, "demo foo bar baz [bat] counts")
        self.assertEqual(content.parameters, (
            ("baz", "string", False, "The baz to use for the process."),
            ("bat", "string", True, "The bat to apply."),
            ("counts", "Map<string, number>", False, None),
        ))
        self.assertTrue(content.description.startswith("Uses bats"))
        self.assertLessEqual(len(content.summary), 60)
        self.assertIsInstance(content.context, Method)

    def testAlias(self):
        self.assertEqual(self.help.build(["g"]).commands, (("lastName", None),))

    def testScalarLeaf(self):
        content = self.help.build(["foo", "name"])
        self.assertEqual(content.groups + content.commands + content.parameters, ())
        self.assertEqual(content.usage, "demo foo name")

    def testChildrenSortedCaseInsensitively(self):
        mixed = load({"members": {
            name: {"kind": "scalarProperty", "dataType": {"type": "string"}}
            for name in ("zeta", "Alpha", "beta", "Omega")
        }})
        content = HelpRenderer(mixed, "demo").build(())
        self.assertEqual([name for name, _ in content.commands], ["Alpha", "beta", "Omega", "zeta"])

    def testUnknownComponent(self):
        with self.assertRaises(UnknownCommandError) as context:
            self.help.build(["foo", "nope"])
        self.assertIn("second position", str(context.exception))
        with self.assertRaises(UnknownCommandError):
            self.help.build(["foo", "name", "deeper"])


class TestRender(TestCase):
    def setUp(self):
        self.file = io.StringIO()
        self.help = HelpRenderer(INTERFACE, "demo", console=Console(file=self.file, color_system=None, width=120))

    def testSectionsInOrder(self):
        self.help.render(["foo", "bar"])
        output = self.file.getvalue()
        positions = [output.index(section) for section in ("NAME", "USAGE", "DESCRIPTION", "PARAMETERS")]
        self.assertEqual(positions, sorted(positions))
        self.assertIn("demo.foo.bar - ", output)
        self.assertIn("demo foo bar baz [bat] counts", output)
        self.assertIn("(Optional) The bat to apply.", output)
        self.assertNotIn("GROUPS", output)

    def testGroupTables(self):
        self.help.render(())
        output = self.file.getvalue()
        self.assertIn("GROUP is one of the following:", output)
        self.assertIn("COMMAND is one of the following:", output)
        self.assertIn("Manages goobers.", output)
        self.assertLess(output.index("GROUPS"), output.index("COMMANDS"))

    def testDebugPrintsContext(self):
        self.help.render(["goob"], debug=True)
        output = self.file.getvalue()
        self.assertLess(output.index("ObjectType"), output.index("NAME"))


if __name__ == "__main__":
    unittest.main()
