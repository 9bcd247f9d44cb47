"""
Cli context tests: binding, running, failure handling and default sinks.

Conventions
- Test method names follow CamelCase per project convention.
- Every bound Cli is closed in tearDown so suites stay independent.
"""
import io
import os
import unittest
from unittest import TestCase, mock

from rich.console import Console

import metacli
from metacli import Cli
from metacli.faults import *

INTERFACE = {
    "package": {"name": "demo", "version": "1.2.3"},
    "members": {
        "foo": {
            "kind": "objectProperty",
            "description": "Tests foozball.",
            "dataType": {"type": {"kind": "objectType", "members": {
                "name": {"kind": "scalarProperty", "dataType": {"type": "string"}},
                "bar": {
                    "kind": "method",
                    "parameters": [
                        {"name": "baz", "dataType": {"type": "string"}},
                        {"name": "bat", "dataType": {"type": "string", "nullable": True}},
                    ],
                },
                "fail": {"kind": "method", "parameters": []},
                "numbers": {"kind": "method", "parameters": []},
            }}},
        },
        "version": {"kind": "method", "description": "Gets the version of the app.", "parameters": []},
    },
}


def console():
    return Console(file=io.StringIO(), color_system=None, width=100)


class CliTestCase(TestCase):
    def setUp(self):
        self.calls = []
        self.stdout = console()
        self.stderr = console()

        def fail():
            raise RuntimeError("nope")

        def version(*arguments):
            self.calls.append(arguments)
            return Cli._instance.package_version() or "unknown"

        self.program = {
            "foo": {
                "name": "shawn",
                "bar": lambda *arguments: self.calls.append(arguments),
                "fail": fail,
                "numbers": lambda: {"one": 1, "two": [2, 2]},
            },
            "version": version,
        }

    def tearDown(self):
        if Cli._instance is not None:
            Cli._instance.close()

    def bind(self, **options):
        options.setdefault("command_name", "demo")
        options.setdefault("debug", False)
        return Cli.bind(self.program, INTERFACE, console=self.stdout, stderr=self.stderr, **options)


class TestBinding(CliTestCase):
    def testBindOnce(self):
        cli = self.bind()
        self.assertTrue(cli.bound)
        with self.assertRaises(AlreadyBoundError) as context:
            self.bind()
        self.assertIsInstance(context.exception, ConfigurationError)
        self.assertIs(Cli._instance, cli)

    def testDirectConstructionChecksBinding(self):
        cli = self.bind()
        with self.assertRaises(AlreadyBoundError):
            Cli(self.program, INTERFACE, console=self.stdout, stderr=self.stderr, debug=False)
        self.assertIs(Cli._instance, cli)

    def testDirectConstructionBinds(self):
        cli = Cli(self.program, INTERFACE, console=self.stdout, stderr=self.stderr, debug=False)
        self.assertTrue(cli.bound)

    def testCloseReleases(self):
        self.bind().close()
        self.assertIsNone(Cli._instance)
        self.assertTrue(self.bind().bound)

    def testContextManager(self):
        with self.bind() as cli:
            self.assertTrue(cli.bound)
        self.assertFalse(cli.bound)

    def testOptions(self):
        cli = self.bind(flag_prefix="-", auto_help=False)
        self.assertEqual(cli.flag_prefix, "-")
        self.assertFalse(cli.auto_help)
        self.assertEqual(cli.package_version(), "1.2.3")

    def testCommandNameDefault(self):
        with mock.patch("sys.argv", ["/usr/local/bin/tool", "x"]):
            cli = Cli.bind(self.program, INTERFACE, debug=False, console=self.stdout, stderr=self.stderr)
        self.assertEqual(cli.command_name, "tool")

    def testMalformedInterface(self):
        with self.assertRaises(MalformedMetadataError):
            Cli.bind(self.program, {"members": {"x": {"kind": "nope"}}})
        self.assertIsNone(Cli._instance)


class TestDebugEnvironment(CliTestCase):
    def testReadFromEnvironment(self):
        for text, expected in (("yes", True), ("ON", True), ("0", False), ("", False)):
            with self.subTest(text=text), mock.patch.dict(os.environ, {"DEBUG": text}):
                with Cli.bind(self.program, INTERFACE, command_name="demo", console=self.stdout) as cli:
                    self.assertIs(cli.debug, expected)

    def testInvalidValue(self):
        with mock.patch.dict(os.environ, {"DEBUG": "perhaps"}):
            with self.assertRaises(BooleanValueError):
                Cli.bind(self.program, INTERFACE, command_name="demo")

    def testExplicitOptionWins(self):
        with mock.patch.dict(os.environ, {"DEBUG": "true"}):
            self.assertFalse(self.bind(debug=False).debug)


class TestRun(CliTestCase):
    def testScalar(self):
        cli = self.bind()
        self.assertEqual(cli.main(["foo", "name"]), "shawn")
        self.assertEqual(self.stdout.file.getvalue(), "shawn\n")

    def testMethodWithFlags(self):
        cli = self.bind()
        cli.main(["foo", "bar", "--x=1", "hello"])
        self.assertEqual(self.calls, [("hello",)])
        self.assertEqual(cli.positionals, ["hello"])
        self.assertEqual(cli.flags, {"x": "1"})

    def testExtraArgumentsPassThrough(self):
        cli = self.bind()
        cli.main(["version", "extra"])
        self.assertEqual(self.stdout.file.getvalue(), "1.2.3\n")
        self.assertEqual(self.calls, [("extra",)])
        self.assertEqual(cli.positionals, ["extra"])

    def testCompositePrettyPrinted(self):
        self.bind().main(["foo", "numbers"])
        output = self.stdout.file.getvalue()
        self.assertIn("'one': 1", output)
        self.assertIn("'two'", output)

    def testHelp(self):
        self.bind().main(["help", "foo"])
        output = self.stdout.file.getvalue()
        self.assertIn("demo.foo - Tests foozball.", output)
        self.assertIn("demo foo COMMAND", output)

    def testCustomValueHandler(self):
        values = []
        self.bind(value_handler=values.append).main(["foo", "name"])
        self.assertEqual(values, ["shawn"])
        self.assertEqual(self.stdout.file.getvalue(), "")

    def testArgvDefault(self):
        cli = self.bind()
        with mock.patch("sys.argv", ["demo", "foo", "name"]):
            cli.main()
        self.assertEqual(self.stdout.file.getvalue(), "shawn\n")

    def testModuleLevelRun(self):
        values = []
        result = metacli.run(
            self.program, INTERFACE, ["foo", "name"],
            command_name="demo", debug=False, value_handler=values.append,
        )
        self.assertEqual(result, "shawn")
        self.assertEqual(values, ["shawn"])
        self.assertIsNone(Cli._instance)


class TestFailure(CliTestCase):
    def testUnknownCommandExits(self):
        cli = self.bind()
        with self.assertRaises(SystemExit) as context:
            cli.main(["nope"])
        self.assertEqual(context.exception.code, 1)
        output = self.stderr.file.getvalue()
        self.assertIn("Unknown Command Or Group", output)
        self.assertIn("'nope'", output)

    def testDelegatedErrorExits(self):
        with self.assertRaises(SystemExit) as context:
            self.bind().main(["foo", "fail"])
        self.assertEqual(context.exception.code, 1)
        self.assertIn("nope", self.stderr.file.getvalue())

    def testExitCodeOption(self):
        cli = self.bind()
        with self.assertRaises(SystemExit) as context:
            cli.fail(IncompleteCommandError("stop", exit_code=4))
        self.assertEqual(context.exception.code, 4)

    def testPlainExceptionFormatted(self):
        with self.assertRaises(SystemExit) as context:
            self.bind().fail(KeyError("missing"))
        self.assertEqual(context.exception.code, 1)
        self.assertIn("ERROR: KeyError - 'missing'", self.stderr.file.getvalue())

    def testIncompleteWithoutAutoHelp(self):
        with self.assertRaises(SystemExit):
            self.bind(auto_help=False).main(["foo"])
        self.assertIn("Incomplete Command", self.stderr.file.getvalue())

    def testDebugRoutesToErrorHandler(self):
        errors = []

        def handler(error):
            errors.append(error)
            return "handled"

        cli = self.bind(debug=True, error_handler=handler)
        self.assertEqual(cli.main(["foo", "fail"]), "handled")
        self.assertIsInstance(errors[0], DelegatedCommandError)
        self.assertIsInstance(errors[0].__cause__, RuntimeError)

    def testDebugAsyncErrorHandler(self):
        async def handler(error):
            return type(error).__name__

        cli = self.bind(debug=True, error_handler=handler)
        self.assertEqual(cli.main(["nope"]), "UnknownCommandError")

    def testDebugDefaultHandlerExits(self):
        with self.assertRaises(SystemExit):
            self.bind(debug=True).main(["nope"])


if __name__ == "__main__":
    unittest.main()
