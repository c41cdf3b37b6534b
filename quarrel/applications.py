"""
Quarrel applications: assembly, response files and the top-level run loop.

Overview
- ApplicationMetadata: name, identifier, version, build, title and optional site.
- Application.builder(metadata) -> ApplicationBuilder
  • add_command(command), create_group(metadata) -> GroupBuilder
  • set_converters(directory), set_output(console_or_stream)
  • set_application_resources(mapping), set_internal_resources(mapping)
  • build() -> Application
- Application.parse(arguments) -> CommandContext
  • expands a leading "@file" token, resolves the command path, and parses
    the remaining tokens of the selected command.
- Application.run(logger, arguments) -> Status
  • parse + execute, reporting failures to a logging.Logger.

Response files
- Only the first token is considered, and only once: "@path" is replaced by the
  lines of the file at path, followed by the remaining tokens.
- Lines starting with "#" are comments; lines are stripped; empty lines are dropped.
- Lines are never expanded again, so "@other" inside a file is a plain token.

Example
    >>> app = (
    ...     Application.builder(ApplicationMetadata("quarrel", "com.io7m.quarrel.example", "1.0.0", "eb916bb8", "Example"))
    ...     .add_command(cat)
    ...     .build()
    ... )
    >>> app.run(logging.getLogger("app"), ["cat"])
"""
import logging
from collections import namedtuple
from pathlib import Path

from rich.console import Console

from .commands import (
    Command,
    CommandGroup,
    CommandMetadata,
    NotFound,
    ResolvedCommand,
    ResolvedGroup,
    ResolvedRoot,
    Status,
    help_command,
    resolve,
    tree,
    usage_command,
    version_command,
)
from .converters import ConverterDirectory
from .faults import CommandException, ResponseFileError, UnknownCommandError, describe
from .parsers import CommandContext, Parser
from .strings import MESSAGES, Localization, Localize
from .utils import *

logger = logging.getLogger(__name__)


class ApplicationMetadata(namedtuple("ApplicationMetadata", ("application_name", "application_id", "version", "build", "title", "site"))):
    """
    Identity of an application, shown by "version" and the application usage.

    Fields
    - application_name: the short name used in usage lines.
    - application_id: a stable identifier, e.g. "com.io7m.example".
    - version, build, title: free text.
    - site: documentation URI as a string, or None.
    """
    __slots__ = ()

    def __new__(cls, application_name, application_id, version, build, title, site=None):
        for name, value in (
                ("application_name", application_name),
                ("application_id", application_id),
                ("version", version),
                ("build", build),
                ("title", title),
        ):
            if not isinstance(value, str):
                raise TypeError(f"application metadata {name!r} must be a string")
        if site is not None and not isinstance(site, str):
            raise TypeError("application metadata 'site' must be a string or None")
        return super().__new__(cls, application_name, application_id, version, build, title, site)


def _console(output, /):
    if isinstance(output, Console):
        return output
    if not hasattr(output, "write"):
        raise TypeError("output must be a rich console or a writable text stream")
    return Console(file=output)


def expand(arguments, localization, /):
    """
    Replace a leading "@path" token with the tokens read from path.

    Raises
    - ResponseFileError: the file cannot be read; the "file" attribute holds
      its absolute path.
    """
    arguments = list(arguments)
    if not arguments or not arguments[0].startswith("@"):
        return arguments

    first, *rest = arguments
    path = Path(first.removeprefix("@"))
    try:
        with path.open(encoding="utf-8") as stream:
            lines = [line.strip() for line in stream if not line.startswith("#")]
    except (OSError, UnicodeDecodeError) as error:
        raise ResponseFileError(
            localization.localize(Localize("quarrel.errorIOFile")),
            attributes={localization.localize(Localize("quarrel.file")): str(path.absolute())},
            remediation=localization.localize(Localize("quarrel.errorSuggestCheckFile")),
        ) from error

    logger.debug("expanded %r into %d token(s)", first, len(lines))
    return [line for line in lines if line] + rest


class Application:
    """
    A built command-line application.

    Instances are produced by ApplicationBuilder.build() and never change.
    """

    def __init__(self, metadata, command_tree, converters, output, localization, /):
        self._metadata = metadata
        self._tree = command_tree
        self._converters = converters
        self._output = output
        self._localization = localization
        self._parser = Parser(converters, localization)
        self._usage = usage_command(metadata, command_tree)

    @staticmethod
    def builder(metadata, /):
        return ApplicationBuilder(metadata)

    @property
    def metadata(self):
        return self._metadata

    @property
    def command_tree(self):
        return self._tree

    @property
    def value_converters(self):
        return self._converters

    @property
    def output(self):
        return self._output

    @property
    def localization(self):
        return self._localization

    def localize(self, reference, /):
        return self._localization.localize(reference)

    def format(self, key, /, *arguments):
        return self._localization.format(key, *arguments)

    def _context(self, command, /, raw=()):
        return CommandContext(command, self._tree, self._converters, self._output, self._localization, raw=raw)

    def parse(self, arguments, /):
        """
        Expand, resolve and parse arguments into a ready CommandContext.

        - no arguments: the application usage command;
        - a group: the help command, showing that group;
        - a command: the command, parsed against the remaining tokens.

        Raises
        - CommandException subclasses, UnknownCommandError for unknown names.
        """
        arguments = expand(arguments, self._localization)

        match resolve(self._tree, arguments):
            case ResolvedRoot():
                return self._context(self._usage)
            case NotFound():
                raise UnknownCommandError(
                    self.localize(Localize("quarrel.errorNoSuchCommand")),
                    attributes={self.localize(Localize("quarrel.command")): " ".join(arguments)},
                    remediation=self.localize(Localize("quarrel.errorSuggestRightPath")),
                )
            case ResolvedCommand(command, _, remaining):
                return self._parser.execute(self._tree, self._output, command, remaining)
            case ResolvedGroup(_, path):
                return self._context(self._tree["help"], raw=path)

    def run(self, logger, arguments, /):
        """
        Parse and execute arguments, returning the command's status.

        Structured errors are logged line by line at ERROR (the principal error,
        then each extra), with the traceback at DEBUG. Any other exception logs
        its message the same way. Both yield Status.FAILURE.
        """
        try:
            return self.parse(arguments).execute()
        except CommandException as error:
            for fault in (error, *error.extras):
                for line in describe(fault, self._localization):
                    logger.error("%s", line)
            logger.debug("%s:", self.localize(Localize("quarrel.exception")), exc_info=error)
            return Status.FAILURE
        except Exception as error:
            logger.error("%s", error)
            logger.debug("%s:", self.localize(Localize("quarrel.exception")), exc_info=error)
            return Status.FAILURE

    def __repr__(self):
        return f"Application({self._metadata.application_name!r}, commands={list(self._tree)!r})"


class _TreeBuilder:
    """
    Shared name bookkeeping of the root and group builders.
    """

    def __init__(self):
        self._commands = {}
        self._groups = {}

    def _check(self, name, /):
        if name in self._commands:
            raise ValueError(f"a command exists with the name {name!r}")
        if name in self._groups:
            raise ValueError(f"a command group exists with the name {name!r}")

    def _add_command(self, command, /):
        if not isinstance(command, Command):
            raise TypeError("add_command() argument must be a command")
        self._check(command.name)
        self._commands[command.name] = command

    def create_group(self, metadata, /):
        """
        Start a nested group; the returned builder fills it.
        """
        if not isinstance(metadata, CommandMetadata):
            raise TypeError("create_group() argument must be a command metadata")
        self._check(metadata.name)
        self._groups[metadata.name] = builder = GroupBuilder(metadata)
        return builder

    def _entries(self):
        return self._commands | {name: builder.build() for name, builder in self._groups.items()}


class GroupBuilder(_TreeBuilder):
    """
    Builder of one command group; obtained from create_group().
    """

    def __init__(self, metadata, /):
        super().__init__()
        self._metadata = metadata

    def add_command(self, command, /):
        self._add_command(command)
        return self

    def build(self):
        return CommandGroup(self._metadata, self._entries())


class ApplicationBuilder(_TreeBuilder):
    """
    Builder of an Application; "help" and "version" are present from the start.

    Defaults
    - converters: ConverterDirectory.core()
    - output: a Console on standard output
    - application resources: empty; internal resources: the library bundle
    """

    def __init__(self, metadata, /):
        if not isinstance(metadata, ApplicationMetadata):
            raise TypeError("builder() argument must be an application metadata")
        super().__init__()
        self._metadata = metadata
        self._converters = ConverterDirectory.core()
        self._output = Unset
        self._application_resources = {}
        self._internal_resources = MESSAGES
        self._add_command(version_command(metadata))
        self._add_command(help_command(metadata.application_name, tree({})))

    def add_command(self, command, /):
        self._add_command(command)
        return self

    def set_converters(self, converters, /):
        if not isinstance(converters, ConverterDirectory):
            raise TypeError("set_converters() argument must be a converter directory")
        self._converters = converters
        return self

    def set_output(self, output, /):
        self._output = _console(output)
        return self

    def set_application_resources(self, resources, /):
        self._application_resources = dict(resources)
        return self

    def set_internal_resources(self, resources, /):
        self._internal_resources = dict(resources)
        return self

    def build(self):
        """
        Freeze the tree and return the Application.

        The help command is rebuilt over the final tree so that it sees every
        command and group added after the builder was created.
        """
        entries = self._entries()
        entries["help"] = help_command(self._metadata.application_name, tree(entries))
        return Application(
            self._metadata,
            tree(entries),
            self._converters,
            Console() if self._output is Unset else self._output,
            Localization(self._application_resources, self._internal_resources),
        )


__all__ = (
    "ApplicationMetadata",
    "Application",
    "ApplicationBuilder",
    "GroupBuilder",
    "expand",
)
