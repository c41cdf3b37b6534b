"""
Documentation skeletons for commands, as structural 8.0 XML.

The command built by structural() takes the path of another command as its
positional arguments and prints an XML template documenting it:

- --type main: a Section (Name, Description and Examples subsections) whose
  Description includes the parameters file when the command has named parameters;
- --type parameters: a Subsection with one FormalItem per named parameter,
  each holding a parameterTable of name, type, default, cardinality and description.

Identifiers are name-based MD5 UUIDs (version 3, no namespace), so the same
command always yields the same ids.
"""
import hashlib
import uuid
import xml.etree.ElementTree as ET
from operator import attrgetter

from rich.text import Text

from .arguments import Named1, Named01, Named1N, Named0N, PositionalsAny
from .commands import Command, CommandMetadata, NotFound, ResolvedCommand, Status, resolve
from .faults import CommandPathError, UnknownCommandError
from .strings import Constant, Localize

NS = "urn:com.io7m.structural:8:0"
NS_XI = "http://www.w3.org/2001/XInclude"

TYPE = Named1("--type", str, Constant("The type of output (main | parameters)."))
PARAMETERS_INCLUDE = Named1(
    "--parameters-include",
    str,
    Constant("The name of the file to include for parameters."),
    default="parameters.xml",
)


def identifier(text, /):
    """
    Name-based UUID of text: MD5 digest with version 3 bits, no namespace.
    """
    return uuid.UUID(bytes=hashlib.md5(text.encode("utf-8")).digest(), version=3)


def _element(parent, tag, /, text=None, **attributes):
    element = ET.SubElement(parent, tag, attributes)
    if text is not None:
        element.text = text
    return element


def _section(context, command, include, /):
    root = ET.Element("Section", {
        "xmlns": NS,
        "xmlns:xi": NS_XI,
        "title": command.name,
        "id": str(identifier(command.name + str(command.metadata.short_description))),
    })

    name = _element(root, "Subsection", title="Name")
    paragraph = _element(name, "Paragraph")
    _element(paragraph, "Term", command.name, type="command").tail = (
        " - " + context.localize(command.metadata.short_description)
    )

    description = _element(root, "Subsection", title="Description")
    paragraph = _element(description, "Paragraph", "The ")
    _element(paragraph, "Term", command.name, type="command").tail = " command... "
    if command.named:
        formal = _element(description, "FormalItem", title="Parameters")
        ET.SubElement(formal, "xi:include", {"href": include})

    examples = _element(root, "Subsection", title="Examples")
    formal = _element(examples, "FormalItem", title="Example", type="example")
    _element(formal, "Verbatim", "...")
    return root


def _default(context, parameter, /):
    converter = context.value_converters.converter_for(parameter.type)
    show = converter.print if converter is not None else str
    match parameter:
        case Named0N():
            return "[" + ", ".join(map(show, parameter.defaults())) + "]"
        case Named1N():
            return "[" + "".join(map(show, parameter.defaults())) + "]"
        case _:
            return "".join(map(show, parameter.defaults()))


def _cardinality(parameter, /):
    match parameter:
        case Named1():
            return "[1, 1]"
        case Named01():
            return "[0, 1]"
        case Named0N():
            return "[0, N]"
        case Named1N():
            return "[1, N]"


def _row(table, label, /):
    row = _element(table, "Row")
    _element(row, "Cell", label)
    return _element(row, "Cell")


def _parameters(context, command, /):
    root = ET.Element("Subsection", {"xmlns": NS, "title": "Parameters"})
    for parameter in sorted(command.named, key=attrgetter("name")):
        formal = _element(
            root, "FormalItem",
            title=parameter.name,
            id=str(identifier(f"{command.name}:{parameter.name}")),
        )
        table = _element(formal, "Table", type="parameterTable")
        columns = _element(table, "Columns")
        _element(columns, "Column", "Attribute")
        _element(columns, "Column", "Value")
        _element(_row(table, "Name"), "Term", parameter.name, type="parameter")
        _element(_row(table, "Type"), "Term", parameter.type.__qualname__, type="class")
        _element(_row(table, "Default Value"), "Term", _default(context, parameter), type="constant")
        _element(_row(table, "Cardinality"), "Term", _cardinality(parameter), type="expression")
        _row(table, "Description").text = context.localize(parameter.descr)
    return root


def render(context, command, kind, /, include="parameters.xml"):
    """
    Return the pretty-printed XML document for command.

    Raises
    - ValueError: kind is neither "main" nor "parameters".
    """
    match kind:
        case "main":
            root = _section(context, command, include)
        case "parameters":
            root = _parameters(context, command)
        case _:
            raise ValueError(f"unknown documentation type {kind!r}, expected 'main' or 'parameters'")
    ET.indent(root, space="  ")
    return "<?xml version=\"1.0\" encoding=\"UTF-8\"?>\n" + ET.tostring(root, encoding="unicode")


def structural(name="xstructural", /, *, hidden=True):
    """
    Build the documentation command under the given name.

    Root and group paths have nothing to document and succeed silently.
    """

    def callback(context, /):
        path = context.parameters_positional_raw
        match resolve(context.command_tree, path):
            case ResolvedCommand(command, found, remaining) if remaining:
                raise CommandPathError(
                    context.localize(Localize("quarrel.errorCommandPath")),
                    attributes={
                        context.localize(Localize("quarrel.command")): " ".join(found),
                        context.localize(Localize("quarrel.path")): " ".join(path),
                    },
                    remediation=context.localize(Localize("quarrel.errorSuggestRightPath")),
                )
            case ResolvedCommand(command, _, _):
                document = render(
                    context,
                    command,
                    context.parameter_value(TYPE),
                    include=context.parameter_value(PARAMETERS_INCLUDE),
                )
                context.output.print(Text(document), soft_wrap=True, highlight=False)
            case NotFound():
                raise UnknownCommandError(
                    context.localize(Localize("quarrel.errorNoSuchCommand")),
                    attributes={context.localize(Localize("quarrel.command")): " ".join(path)},
                    remediation=context.localize(Localize("quarrel.errorSuggestRightPath")),
                )
        return Status.SUCCESS

    return Command(
        callback,
        CommandMetadata(name, Constant("Produce an xstructural documentation template.")),
        named=(TYPE, PARAMETERS_INCLUDE),
        positionals=PositionalsAny(),
        hidden=hidden,
    )


__all__ = (
    "structural",
)
