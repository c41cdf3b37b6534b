"""
Tests for the argument parser and the parsed command context.

Scope
- Declaration checks: duplicate names and missing converters, with every
  problem of the phase reported (first error plus extras).
- Named scan: values, alternatives, missing values, unparseable values and
  repeated single-valued parameters.
- Finalization: defaults and cardinality bounds.
- Positionals: none, any, typed; counts and conversion failures.
- Typed accessors of CommandContext.

Conventions
- Commands are parsed directly with Parser.execute(), bypassing resolution.
- Attribute keys are the English words of the internal bundle.
"""
import io
import unittest
import uuid
from datetime import datetime, timezone
from unittest import TestCase

from rich.console import Console

from quarrel.arguments import *
from quarrel.commands import Command, CommandMetadata, Status, tree
from quarrel.converters import ConverterDirectory
from quarrel.faults import *
from quarrel.parsers import *
from quarrel.strings import Localization


def _command(named=(), positionals=PositionalsNone(), name="cmd"):
    return Command(lambda context: Status.SUCCESS, CommandMetadata(name, "A command."), named, positionals)


class ParserTestCase(TestCase):
    """
    Shared fixture: a core converter directory and a captured console.
    """

    def setUp(self) -> None:
        self.converters = ConverterDirectory.core()
        self.localization = Localization()
        self.output = Console(file=io.StringIO())
        self.parser = Parser(self.converters, self.localization)

    def parse(self, command, arguments):
        return self.parser.execute(tree({command.name: command}), self.output, command, arguments)


class DeclarationTest(ParserTestCase):
    """
    Phase A.
    """

    def testDuplicateNames(self) -> None:
        """
        Primary names and alternatives share one namespace.
        """
        command = _command((
            Named1("--x", int, "x", alternatives=("-y",)),
            Named1("-y", int, "y"),
        ))
        with self.assertRaises(DuplicateParameterError) as context:
            self.parse(command, [])
        self.assertEqual(context.exception.code, FaultCode.PARAMETER_DUPLICATE)
        self.assertEqual(context.exception.attributes["parameter"], "-y")
        self.assertEqual(context.exception.attributes["command"], "cmd")

    def testMissingConvertersAccumulate(self) -> None:
        """
        Every missing converter is reported: the first raised, the rest as extras.
        """

        class Unknown:
            pass

        command = _command(
            (Named1("--a", Unknown, "a"), Named1("--b", Unknown, "b")),
            PositionalsTyped(Positional("c", Unknown, "c")),
        )
        with self.assertRaises(MissingConverterError) as context:
            self.parse(command, [])
        error = context.exception
        self.assertEqual(error.attributes["parameter"], "--a")
        self.assertEqual(error.attributes["type"], "Unknown")
        self.assertEqual([extra.attributes["parameter"] for extra in error.extras], ["--b", "c"])
        self.assertTrue(all(extra.code == FaultCode.PARAMETER_NO_VALUE_CONVERTER for extra in error.extras))

    def testEmptyDirectory(self) -> None:
        parser = Parser(ConverterDirectory.empty(), self.localization)
        command = _command((Named01("--x", str, "x"),))
        with self.assertRaises(MissingConverterError):
            parser.execute(tree({}), self.output, command, [])


class NamedTest(ParserTestCase):
    """
    Phases B and C.
    """

    def testTwiceForNamed1(self) -> None:
        """
        Giving a Named1 twice is a cardinality error, not a missing value.
        """
        file = Named1("--file", str, "A file.")
        with self.assertRaises(CardinalityError) as context:
            self.parse(_command((file,)), ["--file", "x", "--file", "y"])
        self.assertEqual(context.exception.code, FaultCode.PARAMETER_CARDINALITY)
        self.assertEqual(context.exception.attributes["parameter"], "--file")

    def testTwiceForNamed01(self) -> None:
        file = Named01("--file", str, "A file.")
        with self.assertRaises(CardinalityError) as context:
            self.parse(_command((file,)), ["--file", "x", "--file", "y"])
        self.assertEqual(context.exception.attributes["parameter"], "--file")
        self.assertEqual(context.exception.attributes["maximum_values"], "1")

    def testMissingValue(self) -> None:
        file = Named1("--file", str, "A file.")
        with self.assertRaises(MissingValueError) as context:
            self.parse(_command((file,)), ["--file"])
        self.assertEqual(context.exception.code, FaultCode.PARAMETER_MISSING_VALUE)
        self.assertEqual(context.exception.attributes["parameter"], "--file")
        self.assertEqual(context.exception.attributes["type"], "str")

    def testUnparseableValue(self) -> None:
        """
        Converter failures are wrapped, keeping the converter error as the cause.
        """
        count = Named1("--count", int, "A count.")
        with self.assertRaises(UnparseableValueError) as context:
            self.parse(_command((count,)), ["--count", "many"])
        error = context.exception
        self.assertEqual(error.code, FaultCode.PARAMETER_UNPARSEABLE_VALUE)
        self.assertEqual(dict(error.attributes), {
            "command": "cmd",
            "parameter": "--count",
            "provided": "many",
            "type": "int",
            "syntax": self.converters.converter_for(int).syntax,
        })
        self.assertIsInstance(error.__cause__, ValueConversionError)
        self.assertIsNotNone(error.remediation)

    def testRequiredAbsent(self) -> None:
        file = Named1("--file", str, "A file.")
        with self.assertRaises(CardinalityError) as context:
            self.parse(_command((file,)), [])
        self.assertEqual(context.exception.attributes["provided_count"], "0")
        self.assertEqual(context.exception.attributes["minimum_values"], "1")

    def testCardinalityErrorsAccumulate(self) -> None:
        a = Named1("--a", int, "a")
        b = Named1N("--b", int, "b")
        with self.assertRaises(CardinalityError) as context:
            self.parse(_command((a, b)), [])
        self.assertEqual(context.exception.attributes["parameter"], "--a")
        self.assertEqual([extra.attributes["parameter"] for extra in context.exception.extras], ["--b"])
        self.assertEqual(context.exception.extras[0].attributes["maximum_values"], "N")

    def testDefaults(self) -> None:
        """
        Absent parameters take their defaults before the bounds are checked.
        """
        one = Named1("--one", int, "one", default=1)
        opt = Named01("--opt", int, "opt")
        many = Named1N("--many", int, "many", default=2)
        any = Named0N("--any", int, "any", default=(3, 4))
        context = self.parse(_command((one, opt, many, any)), [])
        self.assertEqual(context.parameter_value(one), 1)
        self.assertIsNone(context.parameter_value(opt))
        self.assertEqual(context.parameter_value(many), [2])
        self.assertEqual(context.parameter_value(any), [3, 4])

    def testProvidedReplacesDefaults(self) -> None:
        any = Named0N("--any", int, "any", default=(3, 4))
        context = self.parse(_command((any,)), ["--any", "5"])
        self.assertEqual(context.parameter_value(any), [5])

    def testAlternativesShareValues(self) -> None:
        tag = Named0N("--tag", str, "A tag.", alternatives=("-t",))
        context = self.parse(_command((tag,)), ["--tag", "a", "-t", "b", "--tag", "c"])
        self.assertEqual(context.parameter_value(tag), ["a", "b", "c"])

    def testScanStopsAtFirstPositional(self) -> None:
        """
        Named parameters come first; a later key is a positional token.
        """
        tag = Named0N("--tag", str, "A tag.")
        context = self.parse(_command((tag,), PositionalsAny()), ["--tag", "a", "x", "--tag", "b"])
        self.assertEqual(context.parameter_value(tag), ["a"])
        self.assertEqual(context.parameters_positional_raw, ("x", "--tag", "b"))


class PositionalTest(ParserTestCase):
    """
    Phase D.
    """

    def setUp(self) -> None:
        super().setUp()
        self.x = Positional("x", int, "x")
        self.y = Positional("y", int, "y")
        self.z = Positional("z", int, "z")
        self.command = _command(positionals=PositionalsTyped(self.x, self.y, self.z))

    def testTyped(self) -> None:
        context = self.parse(self.command, ["1", "2", "3"])
        self.assertEqual(
            [context.parameter_value(parameter) for parameter in (self.x, self.y, self.z)],
            [1, 2, 3],
        )
        self.assertEqual(context.parameters_positional_raw, ("1", "2", "3"))

    def testTypedUnparseable(self) -> None:
        with self.assertRaises(UnparseableValueError) as context:
            self.parse(self.command, ["x", "y", "z"])
        self.assertEqual(context.exception.attributes["parameter"], "x")
        self.assertEqual(context.exception.attributes["provided"], "x")
        self.assertEqual(context.exception.attributes["type"], "int")

    def testTypedCount(self) -> None:
        for arguments in (["1", "2"], ["1", "2", "3", "4"]):
            with self.subTest(arguments=arguments), self.assertRaises(PositionalCountError) as context:
                self.parse(self.command, arguments)
            self.assertEqual(context.exception.attributes["expected_count"], "3")
            self.assertEqual(context.exception.attributes["provided_count"], str(len(arguments)))

    def testNone(self) -> None:
        with self.assertRaises(PositionalCountError) as context:
            self.parse(_command(), ["extra"])
        self.assertEqual(context.exception.attributes["expected_count"], "0")
        self.assertEqual(context.exception.attributes["provided_count"], "1")
        self.assertEqual(self.parse(_command(), []).parameters_positional_raw, ())

    def testAny(self) -> None:
        context = self.parse(_command(positionals=PositionalsAny()), ["a", "b"])
        self.assertEqual(context.parameters_positional_raw, ("a", "b"))


class ContextTest(ParserTestCase):
    """
    Phase E: a full parse over mixed kinds, and the typed accessors.
    """

    def setUp(self) -> None:
        super().setUp()
        self.p0 = Named01("--0file", str, "A file.")
        self.p1 = Named01("--1number", int, "A number.", default=23)
        self.p2 = Named1("--2number-opt", int, "A required number.")
        self.p3 = Named1("--3date", datetime, "A date.", default=datetime.now(timezone.utc))
        self.p5 = Named0N("--5uuid", uuid.UUID, "UUIDs.", default=(uuid.uuid4(),))
        self.x = Positional("x", int, "x")
        self.y = Positional("y", int, "y")
        self.z = Positional("z", int, "z")
        self.command = _command(
            (self.p0, self.p1, self.p2, self.p3, self.p5),
            PositionalsTyped(self.x, self.y, self.z),
        )

    def testEverything(self) -> None:
        context = self.parse(self.command, [
            "--0file", "other.txt",
            "--1number", "5000",
            "--3date", "2000-01-01T00:03:00+00:00",
            "--2number-opt", "344",
            "--5uuid", "f545455c-058e-4af2-96fc-9e5986b6cc99",
            "1000", "2000", "3000",
        ])
        self.assertEqual(context.parameter_value(self.p0), "other.txt")
        self.assertEqual(context.parameter_value(self.p1), 5000)
        self.assertEqual(context.parameter_value(self.p2), 344)
        self.assertEqual(context.parameter_value(self.p3), datetime(2000, 1, 1, 0, 3, tzinfo=timezone.utc))
        self.assertEqual(context.parameter_value(self.p5), [uuid.UUID("f545455c-058e-4af2-96fc-9e5986b6cc99")])
        self.assertEqual(
            (context.parameter_value(self.x), context.parameter_value(self.y), context.parameter_value(self.z)),
            (1000, 2000, 3000),
        )

    def testUnknownDeclarations(self) -> None:
        """
        Looking up a declaration of another command is a programmer error.
        """
        context = self.parse(self.command, ["--2number-opt", "1", "1", "2", "3"])
        with self.assertRaises(ValueError):
            context.parameter_value(Named1("--2number-opt", int, "x"))
        with self.assertRaises(ValueError):
            context.parameter_value(Positional("x", int, "x"))

    def testPositionalWithoutTypedSet(self) -> None:
        context = self.parse(_command(), [])
        with self.assertRaises(ValueError):
            context.parameter_value(self.x)

    def testExecute(self) -> None:
        context = self.parse(_command(), [])
        self.assertIs(context.execute(), Status.SUCCESS)
        self.assertEqual(context.command.name, "cmd")
        self.assertIs(context.value_converters, self.converters)
        self.assertIs(context.output, self.output)


if __name__ == "__main__":
    unittest.main()
