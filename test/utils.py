"""
Utils module tests (sentinel, helpers, text wrapping).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from types import MappingProxyType
from unittest import TestCase

from cmdtree.utils import Unset, UnsetType, coalesce, mirror, normalize_name, ordinal, rename, wrapped_lines


class TestUnset(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            class Other(UnsetType):  # NOQA: F-841
                pass

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "x"), "x")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "x"))
        self.assertEqual(coalesce(0, 1), 0)


class TestHelpers(TestCase):

    def testRename(self):
        @rename("renamed")
        def function():
            pass

        self.assertEqual(function.__name__, "renamed")
        with self.assertRaises(TypeError):
            rename(1, "x")

    def testMirror(self):
        class Holder:
            items = mirror("items")
            table = mirror("table")

            def __init__(self):
                self._items = [1, 2]
                self._table = {"a": 1}

        holder = Holder()
        self.assertEqual(holder.items, (1, 2))
        self.assertIsInstance(holder.table, MappingProxyType)
        with self.assertRaises(AttributeError):
            holder.items = ()

    def testOrdinal(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(102), "102nd")
        self.assertEqual(ordinal(113), "113th")

    def testNormalizeName(self):
        self.assertEqual(normalize_name("my \t  tool"), "my tool")
        with self.assertRaises(ValueError):
            normalize_name("")
        with self.assertRaises(TypeError):
            normalize_name(1)


class TestWrappedLines(TestCase):

    def testEmptyText(self):
        self.assertEqual(list(wrapped_lines("", 10)), [""])

    def testBreaksOnSpaces(self):
        self.assertEqual(list(wrapped_lines("hello world", 6)), ["hello", "world"])

    def testShortTextIsOneLine(self):
        self.assertEqual(list(wrapped_lines("hello world", 80)), ["hello world"])

    def testLongWordsAreCut(self):
        self.assertEqual(list(wrapped_lines("abcdefgh", 4)), ["abc-", "def-", "gh"])

    def testExplicitLineBreaks(self):
        self.assertEqual(list(wrapped_lines("one\ntwo", 80)), ["one", "two"])

    def testLastWidthRepeats(self):
        lines = list(wrapped_lines("aaaa bbbb cccc dddd", 10, 5))
        self.assertEqual(lines[0], "aaaa bbbb")
        self.assertTrue(all(len(line) <= 5 for line in lines[1:]))
        self.assertEqual("".join(lines).replace(" ", ""), "aaaabbbbccccdddd")

    def testInvalidWidths(self):
        with self.assertRaises(TypeError):
            list(wrapped_lines("text"))
        with self.assertRaises(ValueError):
            list(wrapped_lines("text", 1))


if __name__ == "__main__":
    unittest.main()
