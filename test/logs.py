"""
Logging extension tests.

Scope
- LogLevel values and the TRACE level name.
- The --verbose declaration, its converter and plus_parameters().
- configure(): root logger level and the RichHandler installed on first use.
"""
import io
import logging
import unittest
from unittest import TestCase

from rich.logging import RichHandler

from quarrel import *
from quarrel import logs


@command("verbose", "A command with verbosity.", named=logs.plus_parameters((Named01("--file", str, "A file."),)))
def verbose(context):
    logs.configure(context)


class LevelTest(TestCase):

    def testLevels(self):
        self.assertEqual(logs.LogLevel.trace.level, logs.TRACE)
        self.assertEqual(logs.LogLevel.warn.level, logging.WARNING)
        self.assertEqual(logging.getLevelName(logs.TRACE), "TRACE")

    def testParameters(self):
        self.assertEqual(logs.parameters(), [logs.VERBOSITY])
        self.assertEqual([parameter.name for parameter in verbose.named], ["--verbose", "--file"])
        self.assertIs(logs.VERBOSITY.default, logs.LogLevel.info)

    def testConverters(self):
        directory = logs.converters(ConverterDirectory.core())
        self.assertIs(directory.converter_for(logs.LogLevel).parse("debug"), logs.LogLevel.debug)
        self.assertNotIn(logs.LogLevel, ConverterDirectory.core())


class ConfigureTest(TestCase):
    """configure() against the root logger."""

    def setUp(self):
        root = logging.getLogger()
        self.addCleanup(setattr, root, "handlers", root.handlers[:])
        self.addCleanup(root.setLevel, root.level)
        root.handlers = []
        builder = Application.builder(
            ApplicationMetadata("example", "com.io7m.example", "1.0.0", "eb916bb8", "Example application.")
        )
        builder.set_output(io.StringIO())
        builder.set_converters(logs.converters(ConverterDirectory.core()))
        builder.add_command(verbose)
        self.application = builder.build()

    def testDefault(self):
        self.assertIs(self.application.run(logging.getLogger("quarrel.test"), ["verbose"]), Status.SUCCESS)
        root = logging.getLogger()
        self.assertEqual(root.level, logging.INFO)
        self.assertEqual(len(root.handlers), 1)
        self.assertIsInstance(root.handlers[0], RichHandler)

    def testLevel(self):
        self.application.parse(["verbose", "--verbose", "trace"]).execute()
        self.assertEqual(logging.getLogger().level, logs.TRACE)

    def testHandlerInstalledOnce(self):
        self.application.parse(["verbose", "--verbose", "error"]).execute()
        self.application.parse(["verbose", "--verbose", "debug"]).execute()
        self.assertEqual(len(logging.getLogger().handlers), 1)
        self.assertEqual(logging.getLogger().level, logging.DEBUG)

    def testUnknownLevel(self):
        with self.assertRaises(UnparseableValueError) as context:
            self.application.parse(["verbose", "--verbose", "loud"])
        self.assertEqual(context.exception.attributes["syntax"], "debug|error|info|trace|warn")


if __name__ == "__main__":
    unittest.main()
