"""
Options module tests (definitions, value buffer, conversion, built-ins).

Scope
- Validate Option construction invariants and introspection.
- Validate the lazy checks of OptionValues and the invoke() protocol.
- Validate typed conversion (parse_value, choice) and its faults.
- Validate HelpOption and VersionOption.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import io
import unittest
from enum import Enum
from unittest import TestCase

from cmdtree import Command, CommandApp, RunConfig, RunContext
from cmdtree.contexts import OptionContext
from cmdtree.faults import MissingValueError, UncastableValueError
from cmdtree.options import HelpOption, Option, OptionValues, VersionOption, choice, parse_value
from cmdtree.prototypes import Arity


class Color(Enum):
    Red = "red"
    Green = "green"


def context_for(option, name):
    stream = io.StringIO()
    context = OptionContext(RunContext(RunConfig(out=stream, error=stream)), Command("tool"), 3)
    context.option = option
    context.name = name
    return context


class TestOptionDefinition(TestCase):
    """Construction invariants."""

    def testIntrospection(self):
        option = Option("n|name=", "Your {NAME}")
        self.assertEqual(option.prototype, "n|name=")
        self.assertEqual(option.names, ("n", "name"))
        self.assertIs(option.arity, Arity.REQUIRED)
        self.assertEqual(option.count, 1)
        self.assertIsNone(option.separators)
        self.assertEqual(option.descr, "Your {NAME}")
        self.assertFalse(option.hidden)
        self.assertIn("option(", repr(option))

    def testValueOptionNeedsValues(self):
        with self.assertRaises(ValueError):
            Option("a=", count=0)

    def testSwitchTakesAtMostOneValue(self):
        with self.assertRaises(ValueError):
            Option("a", count=2)
        self.assertEqual(Option("a", count=0).count, 0)

    def testCatchAllCannotTakeValues(self):
        with self.assertRaises(ValueError):
            Option("<>=")
        with self.assertRaises(ValueError):
            Option("<>|x=", count=2)
        self.assertEqual(Option("<>|x=").names, ("<>", "x"))

    def testCallbackKinds(self):
        with self.assertRaises(TypeError):
            Option("a", "descr", "not a callback")
        with self.assertRaises(TypeError):
            Option("a", "descr", (), type=(str,))
        with self.assertRaises(TypeError):
            Option("D=", "descr", [], type=(str,), count=2)
        with self.assertRaises(TypeError):
            Option("a=", "descr", [], type="int")


class TestOptionValues(TestCase):
    """Lazy checks of the value buffer."""

    def testRequiredValueMissing(self):
        context = context_for(Option("n|name="), "--name")
        with self.assertRaises(MissingValueError) as caught:
            context.values[0]
        self.assertEqual(str(caught.exception), "Missing required value for option '--name'.")
        self.assertEqual(caught.exception.option_name, "--name")
        self.assertEqual(caught.exception.index, 3)

    def testOptionalValueMissing(self):
        context = context_for(Option("D:", count=2), "-D")
        context.values.append("KEY")
        self.assertEqual(context.values[0], "KEY")
        self.assertIsNone(context.values[1])

    def testIndexPastCount(self):
        context = context_for(Option("n:"), "-n")
        with self.assertRaises(IndexError):
            context.values[1]

    def testMutableSequenceProtocol(self):
        context = context_for(Option("test"), "--test")
        values = context.values
        self.assertIsInstance(values, OptionValues)
        values.append("test")
        self.assertNotIn("HELLO", values)
        with self.assertRaises(ValueError):
            values.remove("HELLO")
        values.insert(0, "Hello")
        self.assertEqual(list(values), ["Hello", "test"])
        self.assertEqual(values.index("test"), 1)
        self.assertEqual(str(values), "Hello, test")
        values[0] = "Test"
        del values[0]
        self.assertEqual(len(values), 1)
        with self.assertRaises(IndexError):
            values[1]

    def testInvokeClearsPendingSlot(self):
        received = []
        option = Option("D=", "descr", received, count=2)
        context = context_for(option, "-D")
        context.values.extend(["KEY", "VALUE"])
        option.invoke(context)
        self.assertEqual(received, [("KEY", "VALUE")])
        self.assertIsNone(context.option)
        self.assertIsNone(context.name)
        self.assertEqual(len(context.values), 0)

    def testCallableReceivesPositionalValues(self):
        received = []
        option = Option("D:", "descr", lambda key, value: received.append((key, value)), count=2)
        context = context_for(option, "-D")
        context.values.append("KEY")
        option.invoke(context)
        self.assertEqual(received, [("KEY", None)])

    def testCustomCompletion(self):
        seen = []

        class Collect(Option):
            def __complete__(self, context, /):
                seen.append((context.name, list(context.values)))

        option = Collect("test")
        context = context_for(option, "--test")
        context.values.append("test")
        option.invoke(context)
        self.assertEqual(seen, [("--test", ["test"])])


class TestConversion(TestCase):
    """Typed conversion."""

    def testParseValue(self):
        context = context_for(Option("n="), "-n")
        self.assertEqual(parse_value("12", int, context), 12)
        self.assertIsNone(parse_value(None, int, context))
        self.assertEqual(parse_value("x", str, context), "x")

    def testUncastableValue(self):
        context = context_for(Option("n="), "-n")
        with self.assertRaises(UncastableValueError) as caught:
            parse_value("x", int, context)
        self.assertTrue(str(caught.exception).endswith("for option `-n`"))
        self.assertIsInstance(caught.exception.__cause__, ValueError)

    def testPerValueConverters(self):
        received = []
        option = Option("D=", "descr", received, type=(str, int), count=2)
        context = context_for(option, "-D")
        context.values.extend(["KEY", "12"])
        option.invoke(context)
        self.assertEqual(received, [("KEY", 12)])

    def testChoice(self):
        colors = choice(Color)
        self.assertIs(colors("GREEN"), Color.Green)
        self.assertIs(colors("red"), Color.Red)
        self.assertEqual(colors.names, "Red, Green")
        with self.assertRaises(ValueError):
            colors("Blue")
        with self.assertRaises(TypeError):
            choice(int)


class TestBuiltinOptions(TestCase):
    """HelpOption and VersionOption."""

    def testHelpOption(self):
        option = HelpOption()
        self.assertEqual(option.names, ("h", "?", "help"))
        context = context_for(option, "-h")
        option.invoke(context)
        self.assertTrue(context.run.show_help)

    def testVersionOption(self):
        stream = io.StringIO()
        app = CommandApp("tool", "versioned", VersionOption("2.0.1"), action=lambda context, arguments: 5)
        self.assertEqual(app.run(["--version"], RunConfig(out=stream, error=stream)), 0)
        self.assertEqual(stream.getvalue(), "2.0.1\n")

    def testVersionDefault(self):
        self.assertIsInstance(VersionOption().version, str)


if __name__ == "__main__":
    unittest.main()
