"""
Logging extension: a --verbose parameter and root logger configuration.

Usage
    from quarrel import logs

    @command("cmd-1", "A command with verbosity.", named=logs.parameters())
    def cmd_1(context):
        logs.configure(context)
        ...

    builder.set_converters(logs.converters(ConverterDirectory.core()))

The parameter is parsed by an EnumConverter over LogLevel, which must be
registered in the application's converter directory.
"""
import logging
from enum import Enum

from rich.logging import RichHandler

from .arguments import Named1
from .converters import EnumConverter
from .strings import Constant

TRACE = 5

logging.addLevelName(TRACE, "TRACE")


class LogLevel(Enum):
    """
    Verbosity levels accepted by --verbose, from most to least verbose.
    """
    trace = TRACE
    debug = logging.DEBUG
    info = logging.INFO
    warn = logging.WARNING
    error = logging.ERROR

    @property
    def level(self):
        return self.value


VERBOSITY = Named1(
    "--verbose",
    LogLevel,
    Constant("Set the logging level of the application."),
    default=LogLevel.info,
)


def parameters():
    return [VERBOSITY]


def plus_parameters(named, /):
    """
    Return the logging parameters followed by the given named declarations.
    """
    return [*parameters(), *named]


def converters(directory, /):
    """
    Return directory extended with the LogLevel converter.
    """
    return directory.with_converter(LogLevel, EnumConverter(LogLevel))


def configure(context, /):
    """
    Set the root logger level from the parsed --verbose value.

    A RichHandler is installed on the root logger the first time, unless the
    root logger already has handlers of its own.
    """
    root = logging.getLogger()
    if not root.handlers:
        root.addHandler(RichHandler(show_path=False, markup=False, rich_tracebacks=True))
    root.setLevel(context.parameter_value(VERBOSITY).level)
    return root


__all__ = (
    "LogLevel",
    "VERBOSITY",
    "TRACE",
    "parameters",
    "plus_parameters",
    "converters",
    "configure",
)
