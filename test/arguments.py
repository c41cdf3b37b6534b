"""
Tests for parameter declarations.

Scope
- Construction and validation of Positional, Named1, Named01, Named1N, Named0N.
- Alternatives: qualified, unique, distinct from the primary name.
- Defaults and cardinalities of each named kind.
- Positional sets and identity-based indexing of PositionalsTyped.

Conventions
- Plain string descriptions are stored as Constant references.
- Declarations are keys of the parsed values, so they compare by identity.
"""
import unittest
from unittest import TestCase

from quarrel.arguments import *
from quarrel.strings import Constant, Localize
from quarrel.utils import Unset


class NamedTest(TestCase):
    """
    Named declarations.
    """

    def testNamed1(self) -> None:
        parameter = Named1("--file", str, "A file.", alternatives=("-f",))
        self.assertEqual(parameter.name, "--file")
        self.assertEqual(parameter.alternatives, ("-f",))
        self.assertEqual(parameter.names, ("--file", "-f"))
        self.assertIs(parameter.type, str)
        self.assertEqual(parameter.descr, Constant("A file."))
        self.assertIsInstance(parameter.descr, Constant)
        self.assertIs(parameter.default, Unset)
        self.assertEqual(parameter.defaults(), ())
        self.assertEqual(parameter.cardinality, (1, 1))

    def testCardinalities(self) -> None:
        self.assertEqual(Named01("--x", int, "x").cardinality, (0, 1))
        self.assertEqual(Named1N("--x", int, "x").cardinality, (1, None))
        self.assertEqual(Named0N("--x", int, "x").cardinality, (0, None))

    def testDefaults(self) -> None:
        self.assertEqual(Named1("--x", int, "x", default=3).defaults(), (3,))
        self.assertEqual(Named01("--x", int, "x", default=0).defaults(), (0,))
        self.assertEqual(Named1N("--x", int, "x", default=1).defaults(), (1,))
        self.assertEqual(Named0N("--x", int, "x", default=[1, 2]).defaults(), (1, 2))
        self.assertEqual(Named0N("--x", int, "x").defaults(), ())

    def testNamed0NDefaultMustBeIterable(self) -> None:
        with self.assertRaises(TypeError):
            Named0N("--x", int, "x", default=3)  # type: ignore[arg-type]
        with self.assertRaises(TypeError):
            Named0N("--x", str, "x", default="abc")

    def testLocalizedDescription(self) -> None:
        parameter = Named1("--x", int, Localize("app.x"))
        self.assertIsInstance(parameter.descr, Localize)

    def testBadNames(self) -> None:
        for name in ("", "@x", "--a b"):
            with self.subTest(name=name), self.assertRaises(ValueError):
                Named1(name, int, "x")
        with self.assertRaises(TypeError):
            Named1(23, int, "x")  # type: ignore[arg-type]

    def testBadAlternatives(self) -> None:
        with self.assertRaises(ValueError):
            Named1("--x", int, "x", alternatives=("-x", "-x"))
        with self.assertRaises(ValueError):
            Named1("--x", int, "x", alternatives=("--x",))
        with self.assertRaises(ValueError):
            Named1("--x", int, "x", alternatives=("@x",))
        with self.assertRaises(TypeError):
            Named1("--x", int, "x", alternatives="-x")

    def testBadType(self) -> None:
        with self.assertRaises(TypeError):
            Named1("--x", "int", "x")  # type: ignore[arg-type]

    def testBadDescription(self) -> None:
        with self.assertRaises(TypeError):
            Named1("--x", int, None)  # type: ignore[arg-type]

    def testIdentity(self) -> None:
        """
        Two declarations with equal fields remain distinct keys.
        """
        first = Named1("--x", int, "x")
        second = Named1("--x", int, "x")
        self.assertNotEqual(first, second)
        self.assertEqual(len({first: 1, second: 2}), 2)

    def testRepr(self) -> None:
        self.assertTrue(repr(Named1("--x", int, "x")).startswith("named1(name='--x'"))


class PositionalTest(TestCase):
    """
    Positional declarations and sets.
    """

    def testPositional(self) -> None:
        parameter = Positional("x", int, "The X value.")
        self.assertEqual(parameter.name, "x")
        self.assertIs(parameter.type, int)

    def testTypedIndex(self) -> None:
        """
        Indexing matches the very declaration object, not an equal one.
        """
        x = Positional("x", int, "x")
        y = Positional("y", int, "y")
        typed = PositionalsTyped(x, y)
        self.assertEqual(len(typed), 2)
        self.assertEqual(list(typed), [x, y])
        self.assertEqual(typed.index(y), 1)
        with self.assertRaises(ValueError):
            typed.index(Positional("y", int, "y"))

    def testTypedRejectsNamed(self) -> None:
        with self.assertRaises(TypeError):
            PositionalsTyped(Named1("--x", int, "x"))  # type: ignore[arg-type]

    def testShapes(self) -> None:
        self.assertIsInstance(PositionalsNone(), PositionalsNone)
        self.assertIsInstance(PositionalsAny(), PositionalsAny)
        self.assertEqual(len(PositionalsTyped()), 0)


if __name__ == "__main__":
    unittest.main()
