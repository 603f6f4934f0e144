"""
Faults module tests (codes, options, rendering).

Conventions
- Test method names follow CamelCase per project convention.
- Rendering goes through a rich Console over io.StringIO (no colors).
"""

from __future__ import annotations

import copy
import io
import unittest
from unittest import TestCase

from rich.console import Console

from cmdtree import Command
from cmdtree.faults import (
    BundleOptionError,
    CommandException,
    FaultCode,
    MissingValueError,
    OptionException,
    UnknownCommandError,
    UnknownOptionError,
)


def render(fault):
    stream = io.StringIO()
    Console(file=stream, width=100, highlight=False).print(fault)
    return stream.getvalue()


class TestFaultCodes(TestCase):

    def testDefaults(self):
        self.assertIs(CommandException("x").code, FaultCode.COMMAND_ERROR)
        self.assertIs(UnknownCommandError("x").code, FaultCode.UNKNOWN_COMMAND)
        self.assertIs(UnknownOptionError("x").code, FaultCode.UNKNOWN_OPTION)
        self.assertIs(MissingValueError("x", "-n").code, FaultCode.MISSING_VALUE)
        self.assertIs(BundleOptionError("x", "-z").code, FaultCode.UNREGISTERED_BUNDLE_OPTION)

    def testNormalize(self):
        self.assertEqual(FaultCode.UNKNOWN_COMMAND.normalize(), "11101")

    def testOverride(self):
        self.assertIs(CommandException("x", code=FaultCode.UNKNOWN_OPTION).code, FaultCode.UNKNOWN_OPTION)


class TestCommandException(TestCase):

    def testMessage(self):
        self.assertEqual(str(CommandException("Boom")), "Boom")
        self.assertEqual(str(CommandException()), "")
        with self.assertRaises(TypeError):
            CommandException(42)

    def testOptionName(self):
        fault = OptionException("The key is mandatory", "-D", index=2)
        self.assertEqual(fault.option_name, "-D")
        self.assertEqual(fault.index, 2)
        self.assertEqual(OptionException("x").option_name, "")
        with self.assertRaises(TypeError):
            OptionException("x", 1)

    def testReplaceKeepsOriginal(self):
        fault = UnknownCommandError("Unknown command or option: x")
        replaced = copy.replace(fault, fancy=True)
        self.assertTrue(replaced.options["fancy"])
        self.assertNotIn("fancy", fault.options)
        self.assertEqual(str(replaced), str(fault))
        self.assertIs(type(replaced), UnknownCommandError)

    def testOptionsAreReadOnly(self):
        with self.assertRaises(TypeError):
            CommandException("x").options["code"] = 0


class TestRendering(TestCase):

    def testPlain(self):
        fault = copy.replace(CommandException("Something failed"), tool=Command("app"))
        self.assertEqual(render(fault), "app: Something failed\nUse `app --help` for usage.\n")

    def testPlainWithoutTool(self):
        self.assertEqual(render(CommandException("Oops")), "Oops\nUse ` --help` for usage.\n")

    def testHint(self):
        fault = copy.replace(CommandException("Nope", hint="Try again."), tool=Command("app"))
        self.assertEqual(render(fault), "app: Nope\nTry again.\n")
        fault = copy.replace(CommandException("Nope", hint=None), tool=Command("app"))
        self.assertEqual(render(fault), "app: Nope\n")

    def testLocalizedHint(self):
        fault = copy.replace(CommandException("Nope"), tool=Command("app"), localizer=str.upper)
        self.assertEqual(render(fault), "app: Nope\nUSE `APP --HELP` FOR USAGE.\n")

    def testFancy(self):
        fault = copy.replace(UnknownCommandError("Unknown command or option: x", index=0), tool=Command("app"), fancy=True)
        output = render(fault)
        self.assertIn("11101", output)
        self.assertIn("Unknown Command Or Option", output)
        self.assertIn("Unknown command or option: x", output)
        self.assertIn("at first argument", output)
        self.assertIn("Use `app --help` for usage.", output)

    def testColorfulIsStyled(self):
        fault = copy.replace(CommandException("Boom"), tool=Command("app"), colorful=True)
        stream = io.StringIO()
        Console(file=stream, width=100, force_terminal=True, color_system="truecolor").print(fault)
        self.assertIn("\x1b[", stream.getvalue())


if __name__ == "__main__":
    unittest.main()
