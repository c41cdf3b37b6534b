"""
Quarrel command layer: commands, groups, the command tree and its resolver.

What this module provides
- Command: metadata + named declarations + a positional set + the callable
  run when the command is executed, optionally hidden from listings.
- command(...): decorator turning a function of one argument (the parsed
  CommandContext) into a Command.
- CommandGroup: an interior node of the tree; its name extends the path.
- resolve(tree, arguments): classify a token prefix as the root, a group, a
  command (with the remaining tokens), or a name that does not exist.
- The built-in commands every application carries: help, version, and the
  application usage shown when no arguments are given.

Core ideas
- The tree is a read-only mapping from name to Command or CommandGroup,
  sorted by name at every level. Resolution never mutates it.
- Everything a command prints goes through the context's rich Console,
  assembled from Text fragments styled with a palette that the host can
  override with a __styles__ mapping in __main__.

Quick start
    from quarrel import command, Named1, PositionalsNone

    NAME = Named1("--name", str, "Who to greet.", default="world")

    @command("greet", "Print a greeting.", named=(NAME,))
    def greet(context):
        context.output.print("hello " + context.parameter_value(NAME))

See also
- quarrel.parsers for how a command's declarations are checked and parsed.
- quarrel.applications for assembling trees with builders and running them.
"""
import functools
import logging
import operator
import re
from collections import defaultdict, deque, namedtuple
from enum import IntEnum
from operator import attrgetter
from types import MappingProxyType

from rich.text import Text

from .arguments import Named1, Named01, Named1N, Named0N, PositionalsNone, PositionalsAny, PositionalsTyped
from .faults import UnknownCommandError
from .strings import Localize, reference
from .utils import *

logger = logging.getLogger(__name__)


class Status(IntEnum):
    """
    Result of executing a command; the value is the process exit code.
    """
    SUCCESS = 0
    FAILURE = 1


class CommandType(type):
    """
    Metaclass that gives commands and groups introspectable, readable shapes.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics and rich UI.
    - Expose selected fields as read-only properties using mirror() for all names
      listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      for consistent, human-friendly labels in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
            **options
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class CommandMetadata(namedtuple("CommandMetadata", ("name", "short_description", "long_description"))):
    """
    Name and descriptions of a command or a group.

    Fields
    - name: qualified (non-empty, no whitespace, no leading "@").
    - short_description: string reference, shown in listings.
    - long_description: string reference or None, shown at the end of help.
    """
    __slots__ = ()

    def __new__(cls, name, short_description, long_description=Unset):
        return super().__new__(
            cls,
            qualify(name),
            reference(short_description),
            None if long_description in (Unset, None) else reference(long_description),
        )


class Command(metaclass=CommandType):
    """
    An executable node of the command tree.

    Parameters
    - callback: callable receiving the parsed CommandContext; it returns a
      Status (or an int exit code), or None for success.
    - metadata: CommandMetadata.
    - named: iterable of named declarations (Named1, Named01, Named1N, Named0N).
    - positionals: PositionalsNone (default), PositionalsAny or PositionalsTyped.
    - hidden: when True, listings leave the command out; it still resolves by name.

    Raises
    - TypeError: on objects of the wrong kind.
    """
    __introspectable__ = (
        "metadata",
        "named",
        "positionals",
        "hidden",
    )

    def __new__(cls, callback, /, metadata, named=(), positionals=Unset, *, hidden=False):
        if not callable(callback):
            raise TypeError(f"{cls.__typename__} callback must be callable")
        if not isinstance(metadata, CommandMetadata):
            raise TypeError(f"{cls.__typename__} 'metadata' must be a command metadata")
        named = tuple(named)
        for parameter in named:
            if not isinstance(parameter, Named1 | Named01 | Named1N | Named0N):
                raise TypeError(f"{cls.__typename__} 'named' must contain named declarations only")
        positionals = coalesce(positionals, PositionalsNone())
        if not isinstance(positionals, PositionalsNone | PositionalsAny | PositionalsTyped):
            raise TypeError(f"{cls.__typename__} 'positionals' must be a positional set")

        self = super().__new__(cls)
        self._callback = callback
        self._metadata = metadata
        self._named = named
        self._positionals = positionals
        self._hidden = bool(hidden)
        return self

    @property
    def name(self):
        return self._metadata.name

    def execute(self, context, /):
        """
        Run the callback against a parsed context and normalize its result.
        """
        result = self._callback(context)
        return Status.SUCCESS if result is None else Status(result)

    __call__ = execute


def command(name, short_description, long_description=Unset, /, *, named=(), positionals=Unset, hidden=False):
    """
    Build a Command from the decorated function.

    Example
        @command("cat", "Speak like a cat.")
        def cat(context):
            context.output.print("Meow.")
    """
    metadata = CommandMetadata(name, short_description, long_description)

    def wrapper(callback, /):
        return Command(callback, metadata, named, positionals, hidden=hidden)

    return rename(wrapper, "command")


class CommandGroup(metaclass=CommandType):
    """
    An interior node of the command tree.

    Children are commands and groups keyed by their names, sorted by name.
    Groups are never hidden.
    """
    __introspectable__ = ("metadata",)
    __displayable__ = ("metadata", "children")
    hidden = False

    def __new__(cls, metadata, children=MappingProxyType({})):
        if not isinstance(metadata, CommandMetadata):
            raise TypeError(f"{cls.__typename__} 'metadata' must be a command metadata")
        self = super().__new__(cls)
        self._metadata = metadata
        self._children = tree(children)
        return self

    @property
    def name(self):
        return self._metadata.name

    @property
    def children(self):
        return self._children


def tree(entries, /):
    """
    Freeze a mapping of name -> Command | CommandGroup into a sorted, read-only tree.

    Raises
    - TypeError: an entry is neither a command nor a group.
    - ValueError: an entry is keyed under a name other than its own.
    """
    frozen = {}
    for name, entry in sorted(dict(entries).items()):
        if not isinstance(entry, Command | CommandGroup):
            raise TypeError("command tree entries must be commands or command groups")
        if entry.name != name:
            raise ValueError(f"command tree entry {entry.name!r} is keyed as {name!r}")
        frozen[name] = entry
    return MappingProxyType(frozen)


ResolvedRoot = namedtuple("ResolvedRoot", ())
ResolvedGroup = namedtuple("ResolvedGroup", ("group", "path"))
ResolvedCommand = namedtuple("ResolvedCommand", ("command", "path", "remaining"))
NotFound = namedtuple("NotFound", ("path", "name"))


def resolve(tree, arguments, /):
    """
    Classify a token prefix against the command tree.

    Returns
    - ResolvedRoot() when arguments is empty.
    - NotFound(path, name) when a name does not exist at its level; path ends with it.
    - ResolvedCommand(command, path, remaining) as soon as a command is reached;
      everything after the command's name is remaining, whatever it contains.
    - ResolvedGroup(group, path) when the tokens run out on a group.
    """
    if not arguments:
        return ResolvedRoot()

    tokens = deque(arguments)
    path = []
    current = tree

    while tokens:
        path.append(name := tokens.popleft())
        match current.get(name):
            case None:
                logger.debug("no command or group %r under %r", name, path[:-1])
                return NotFound(tuple(path), name)
            case Command() as command:
                logger.debug("resolved command %r with %d remaining token(s)", path, len(tokens))
                return ResolvedCommand(command, tuple(path), tuple(tokens))
            case CommandGroup() as group:
                if not tokens:
                    logger.debug("resolved group %r", path)
                    return ResolvedGroup(group, tuple(path))
                current = group.children

    raise AssertionError("unreachable: every token either resolves or fails")


def _palette():
    """
    Default rendering palette, merged with __main__.__styles__ when present.

    Palette keys
    - usage-section, description-section, long-description, title-section
    - section-label, parameter-name, required-marker, field-label, field-value
    - children, children-description, link
    """
    return defaultdict(str, {
        # === Head sections ===
        "usage-section": "bold #36C5F0",  # SKY-BLUE usage line
        "title-section": "bold #FF4D94",  # MAGENTA-PINK application title
        "description-section": "italic #A3A3A3",  # Neutral gray
        "long-description": "#737373",  # Dim footer gray

        # === Parameter tables ===
        "section-label": "bold #FFFFFF",  # Pure white headers
        "parameter-name": "bold #00E6FF",  # CYAN for parameter names
        "required-marker": "bold #EF4444",  # RED asterisk
        "field-label": "#9CA3AF",  # Muted gray
        "field-value": "#E5E7EB",  # Light text body

        # === Listings ===
        "children": "bold #36C5F0",  # Sky-blue command names
        "children-description": "#9CA3AF",
        "link": "underline #00E6FF",
    } | getattr(__import__("__main__"), "__styles__", {}))


def _emit(context, lines, /):
    context.output.print(Text("\n").join(lines), soft_wrap=True, highlight=False)


def _describe_named(context, parameter, styles, /):
    """
    Field rows for one named declaration, in display order.
    """
    converter = context.value_converters.converter_for(parameter.type)

    def show(value):
        return converter.print(value) if converter is not None else str(value)

    match parameter:
        case Named1():
            kind = "1"
        case Named01():
            kind = "01"
        case Named1N():
            kind = "1n"
        case _:
            kind = "0n"

    rows = [
        ("quarrel.help.description.word", context.localize(parameter.descr)),
        ("quarrel.help.type", parameter.type.__name__),
    ]
    if defaults := parameter.defaults():
        rows.append(("quarrel.help.cardinality", context.localize(Localize(f"quarrel.help.cardinality.{kind}"))))
        if isinstance(parameter, Named0N):
            rows.append(("quarrel.help.default", "[" + ", ".join(map(show, defaults)) + "]"))
        else:
            rows.append(("quarrel.help.default", show(defaults[0])))
    else:
        rows.append(("quarrel.help.cardinality", context.localize(Localize(f"quarrel.help.cardinality.{kind}.noDefault"))))
    if converter is not None:
        rows.append(("quarrel.help.syntax", converter.syntax))
    if parameter.alternatives:
        rows.append(("quarrel.help.alternatives", ", ".join(parameter.alternatives)))
    return rows


def _field_lines(context, rows, styles, /):
    labels = [context.localize(Localize(key)) for key in (
        "quarrel.help.description.word",
        "quarrel.help.type",
        "quarrel.help.cardinality",
        "quarrel.help.default",
        "quarrel.help.syntax",
        "quarrel.help.alternatives",
    )]
    width = max(map(len, labels)) + 1
    lines = []
    for key, value in rows:
        label = context.localize(Localize(key))
        lines.append(Text.assemble(
            "      ", (label, styles["field-label"]), " " * (width - len(label)), ": ",
            (value, styles["field-value"]),
        ))
    return lines


def render_command(context, application_name, path, command, /):
    """
    Print the help of one command.

    Layout
    - usage header, in one of four shapes depending on whether the command
      takes named parameters and positional arguments;
    - the short description, indented two spaces;
    - the named parameters sorted by name, "*" marking a Named1 without default;
    - the positional parameters, or a line saying none or any are accepted;
    - the long description, every line indented two spaces.
    """
    styles = _palette()
    named = sorted(command.named, key=attrgetter("name"))

    match command.positionals:
        case PositionalsTyped() as typed if len(typed):
            positional = " ".join(f"<{parameter.name}>" for parameter in typed)
        case PositionalsAny():
            positional = context.localize(Localize("quarrel.help.usage.any"))
        case _:
            positional = ""

    if named and positional:
        shape = "full"
    elif named:
        shape = "no_positional"
    elif positional:
        shape = "no_named"
    else:
        shape = "none"

    lines = [
        Text(context.format(f"quarrel.help.usage.{shape}", application_name, " ".join(path), positional), styles["usage-section"]),
        Text(),
        Text.assemble("  ", (context.localize(command.metadata.short_description), styles["description-section"])),
        Text(),
    ]

    if named:
        lines.append(Text.assemble("  ", (context.localize(Localize("quarrel.help.named")), styles["section-label"])))
        for parameter in named:
            if isinstance(parameter, Named1) and parameter.default is Unset:
                lines.append(Text.assemble("  ", ("*", styles["required-marker"]), " ", (parameter.name, styles["parameter-name"])))
            else:
                lines.append(Text.assemble("    ", (parameter.name, styles["parameter-name"])))
            lines.extend(_field_lines(context, _describe_named(context, parameter, styles), styles))
    else:
        lines.append(Text.assemble("  ", context.localize(Localize("quarrel.help.named.none"))))
    lines.append(Text())

    match command.positionals:
        case PositionalsTyped() as typed if len(typed):
            lines.append(Text.assemble("  ", (context.localize(Localize("quarrel.help.positional")), styles["section-label"])))
            for parameter in typed:
                lines.append(Text.assemble("    ", (parameter.name, styles["parameter-name"])))
                rows = [
                    ("quarrel.help.description.word", context.localize(parameter.descr)),
                    ("quarrel.help.type", parameter.type.__name__),
                ]
                if (converter := context.value_converters.converter_for(parameter.type)) is not None:
                    rows.append(("quarrel.help.syntax", converter.syntax))
                lines.extend(_field_lines(context, rows, styles))
        case PositionalsAny():
            lines.append(Text.assemble("  ", context.localize(Localize("quarrel.help.positional.any"))))
        case _:
            lines.append(Text.assemble("  ", context.localize(Localize("quarrel.help.positional.none"))))
    lines.append(Text())

    if command.metadata.long_description is not None:
        for line in context.localize(command.metadata.long_description).splitlines():
            lines.append(Text.assemble("  ", (line, styles["long-description"])))
        lines.append(Text())

    _emit(context, lines)


def _listing(context, entries, styles, /):
    visible = [entry for entry in entries.values() if not entry.hidden]
    if not visible:
        return []
    # hidden names still count towards the column width
    width = max(len(entry.name) for entry in entries.values()) + 4
    return [
        Text.assemble(
            "    ", (entry.name.ljust(width), styles["children"]),
            (context.localize(entry.metadata.short_description), styles["children-description"]),
        )
        for entry in visible
    ]


def render_group(context, application_name, path, group, /):
    """
    Print the help of a group: usage, short description, and its visible
    children sorted by name with their short descriptions.
    """
    styles = _palette()
    lines = [
        Text(context.format("quarrel.help.usage.group", application_name, " ".join(path)), styles["usage-section"]),
        Text(),
        Text.assemble("  ", (context.localize(group.metadata.short_description), styles["description-section"])),
        Text(),
        Text.assemble("  ", (context.localize(Localize("quarrel.help.commands")), styles["section-label"])),
        *_listing(context, group.children, styles),
        Text(),
    ]
    if group.metadata.long_description is not None:
        for line in context.localize(group.metadata.long_description).splitlines():
            lines.append(Text.assemble("  ", (line, styles["long-description"])))
        lines.append(Text())
    _emit(context, lines)


def help_command(application_name, tree, /):
    """
    Build the "help" command over a (final) command tree.

    The command takes any positional arguments and resolves them as a path:
    nothing shows the help of "help" itself, a group shows its listing, and a
    command shows its parameters. Tokens after a command name are ignored.
    """

    def callback(context, /):
        arguments = context.parameters_positional_raw
        match resolve(tree, arguments):
            case ResolvedRoot():
                render_command(context, application_name, (context.command.name,), context.command)
            case NotFound():
                raise UnknownCommandError(
                    context.localize(Localize("quarrel.errorNoSuchCommand")),
                    attributes={context.localize(Localize("quarrel.command")): " ".join(arguments)},
                    remediation=context.localize(Localize("quarrel.errorSuggestRightPath")),
                )
            case ResolvedCommand(command, path, _):
                render_command(context, application_name, path, command)
            case ResolvedGroup(group, path):
                render_group(context, application_name, path, group)
        return Status.SUCCESS

    return Command(
        rename(callback, "help"),
        CommandMetadata(
            "help",
            Localize("quarrel.help.shortDescription"),
            Localize("quarrel.help.longDescription"),
        ),
        positionals=PositionalsAny(),
    )


def version_command(metadata, /):
    """
    Build the "version" command: prints "{id} {version} {build}".
    """

    def callback(context, /):
        context.output.print(
            Text(f"{metadata.application_id} {metadata.version} {metadata.build}"),
            soft_wrap=True,
            highlight=False,
        )
        return Status.SUCCESS

    return Command(
        rename(callback, "version"),
        CommandMetadata("version", Localize("quarrel.version.shortDescription")),
    )


def usage_command(metadata, tree, /):
    """
    Build the application usage command, run when no arguments are given.

    It is never part of the tree; the application selects it for an empty
    argument list.
    """

    def callback(context, /):
        styles = _palette()
        name = metadata.application_name
        lines = [
            Text(context.format("quarrel.application.usage", name), styles["usage-section"]),
            Text(),
            Text.assemble("  ", (metadata.title, styles["title-section"])),
            Text(),
            *map(Text, context.format("quarrel.application.usageHelp", name).splitlines()),
            Text(),
            Text.assemble("  ", (context.localize(Localize("quarrel.application.commands")), styles["section-label"])),
            *_listing(context, tree, styles),
            Text(),
        ]
        if metadata.site is not None:
            lines.extend([
                Text.assemble("  ", (context.localize(Localize("quarrel.application.documentation")), styles["section-label"])),
                Text.assemble("    ", (metadata.site, styles["link"])),
                Text(),
            ])
        _emit(context, lines)
        return Status.SUCCESS

    return Command(
        rename(callback, "application"),
        CommandMetadata("application", Localize("quarrel.application.shortDescription")),
        positionals=PositionalsAny(),
        hidden=True,
    )


__all__ = (
    "Status",
    "CommandMetadata",
    "Command",
    "command",
    "CommandGroup",
    "tree",
    "ResolvedRoot",
    "ResolvedGroup",
    "ResolvedCommand",
    "NotFound",
    "resolve",
    "render_command",
    "render_group",
    "help_command",
    "version_command",
    "usage_command",
)
