"""
Tests for the shared helpers in quarrel.utils.

Scope
- qualify(): the name rules every command, group and parameter name follows.
- Unset / coalesce(): the "not provided" sentinel and its resolution.
- rename() / mirror(): generated callables and read-only properties.

Conventions
- Names are checked against Unicode whitespace of several categories
  (separators, control characters), not only ASCII spaces.
"""
import unittest
from unittest import TestCase

from quarrel.utils import *


class QualifyTest(TestCase):
    """
    Name validation.
    """

    def testValidNames(self) -> None:
        """
        Valid names are returned unchanged.
        """
        for name in ("x", "--file", "-f", "cmd-everything", "a@b", "ünïcödé"):
            self.assertEqual(qualify(name), name)

    def testEmpty(self) -> None:
        with self.assertRaises(ValueError):
            qualify("")

    def testLeadingAt(self) -> None:
        """
        A leading "@" is reserved for response files.
        """
        with self.assertRaisesRegex(ValueError, "cannot start with '@'"):
            qualify("@file")

    def testWhitespace(self) -> None:
        """
        Every flavour of whitespace is rejected, wherever it appears.
        """
        for name in (" x", "x ", "a b", "a\tb", "a\nb", "a\u00a0b", "a\u2003b", "a\u2028b", "a\x00b"):
            with self.subTest(name=name), self.assertRaisesRegex(ValueError, "cannot contain whitespace"):
                qualify(name)

    def testNotString(self) -> None:
        with self.assertRaises(TypeError):
            qualify(23)  # type: ignore[arg-type]


class UnsetTest(TestCase):
    """
    The Unset sentinel.
    """

    def testSingleton(self) -> None:
        self.assertIs(UnsetType(), Unset)

    def testFalsy(self) -> None:
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testFinal(self) -> None:
        with self.assertRaises(TypeError):
            type("Subclass", (UnsetType,), {})

    def testUnion(self) -> None:
        """
        Unset participates in PEP 604 unions for isinstance checks.
        """
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", str | Unset))
        self.assertFalse(isinstance(1, str | Unset))

    def testCoalesce(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertEqual(coalesce("name", "fallback"), "name")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce(0, 1), 0)


class GeneratedTest(TestCase):
    """
    rename() and mirror().
    """

    def testRename(self) -> None:
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testRenameDecorator(self) -> None:
        @rename("decorated")
        def function():
            pass

        self.assertEqual(function.__name__, "decorated")

    def testRenameErrors(self) -> None:
        with self.assertRaises(TypeError):
            rename(23, "x")  # type: ignore[arg-type]
        with self.assertRaises(TypeError):
            rename()

    def testMirror(self) -> None:
        """
        Mirrored containers are copies; the backing field cannot be mutated.
        """

        class Holder:
            items = mirror("items")
            table = mirror("table")

            def __init__(self):
                self._items = [1, 2]
                self._table = {"a": [1]}

        holder = Holder()
        self.assertEqual(holder.items, (1, 2))
        self.assertEqual(holder.table, {"a": (1,)})
        holder.table["b"] = 2
        self.assertNotIn("b", holder.table)
        with self.assertRaises(AttributeError):
            holder.items = ()  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
