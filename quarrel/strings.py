"""
Quarrel string references and localization.

Declarations never carry display text directly: they carry a string reference
that is resolved when something is rendered. A reference is either a Constant
(literal text, used as-is) or a Localize (a key looked up in the bundles).

Bundles are plain mappings from key to text. The application bundle is
consulted first and overrides the internal bundle key by key, so an
application can reword any built-in message without touching the library.
"""
from collections.abc import Mapping
from types import MappingProxyType


class Constant(str):
    """
    A literal piece of text, displayed exactly as given.
    """
    __slots__ = ()

    @property
    def text(self):
        return str(self)

    def __repr__(self):
        return f"Constant({str(self)!r})"


class Localize(str):
    """
    A key resolved through the localization bundles at display time.
    """
    __slots__ = ()

    @property
    def key(self):
        return str(self)

    def __repr__(self):
        return f"Localize({str(self)!r})"


def reference(object, /):
    """
    Normalize a description into a string reference.

    Plain strings become Constant; Constant and Localize pass through.
    """
    if isinstance(object, Constant | Localize):
        return object
    if isinstance(object, str):
        return Constant(object)
    raise TypeError("description must be a string, a Constant or a Localize")


MESSAGES = MappingProxyType({
    # attribute names
    "quarrel.command": "command",
    "quarrel.parameter": "parameter",
    "quarrel.provided": "provided",
    "quarrel.type": "type",
    "quarrel.syntax": "syntax",
    "quarrel.example": "example",
    "quarrel.minimum_values": "minimum_values",
    "quarrel.maximum_values": "maximum_values",
    "quarrel.provided_count": "provided_count",
    "quarrel.expected_count": "expected_count",
    "quarrel.file": "file",
    "quarrel.path": "path",
    "quarrel.unbounded": "N",
    "quarrel.errorCode": "error code",
    "quarrel.suggestedAction": "suggested action",
    "quarrel.exception": "exception",

    # errors and remediations
    "quarrel.errorIOFile": "Failed to read arguments from a file.",
    "quarrel.errorSuggestCheckFile": "Check that the file exists and is readable.",
    "quarrel.errorNoSuchCommand": "No such command.",
    "quarrel.errorSuggestRightPath": "Provide the path to an existing command or command group.",
    "quarrel.errorCommandPath": "The path names a command, but more of the path follows it.",
    "quarrel.errorParameterMultipleSameNames": "Multiple parameters share the same name.",
    "quarrel.errorSuggestUniqueNames": "Give each parameter, and each alternative name, a unique name.",
    "quarrel.errorParameterNoValueConverter": "No value converter is registered for the type of the parameter.",
    "quarrel.errorSuggestRegisterConverter": "Register a value converter for the type of the parameter.",
    "quarrel.errorParameterMissingValue": "The parameter requires a value.",
    "quarrel.errorSuggestProvideValue": "Provide a value for the parameter.",
    "quarrel.errorParameterUnparseable": "The value provided for the parameter could not be parsed.",
    "quarrel.errorSuggestProvideParseable": "Provide a value that matches the syntax of the parameter.",
    "quarrel.errorExpectsOneValue": "The parameter accepts at most one value.",
    "quarrel.errorSuggestProvideExactlyOne": "Provide the parameter at most once.",
    "quarrel.errorWrongNumberOfValues": "The parameter was given the wrong number of values.",
    "quarrel.errorSuggestProvideRightNumber": "Provide a number of values that matches the cardinality of the parameter.",
    "quarrel.errorWrongNumberOfPositionalArguments": "The wrong number of positional arguments was provided.",
    "quarrel.errorSuggestProvideRightPositionals": "Provide exactly the positional arguments the command accepts.",

    # command help
    "quarrel.help.shortDescription": "Show usage information for a command.",
    "quarrel.help.longDescription": "Show usage information for a command or a group of commands.\nWith no arguments, show usage information for this command.",
    "quarrel.help.usage.none": "Usage: {0} {1}",
    "quarrel.help.usage.no_named": "Usage: {0} {1} {2}",
    "quarrel.help.usage.no_positional": "Usage: {0} {1} [named-arguments ...]",
    "quarrel.help.usage.full": "Usage: {0} {1} [named-arguments ...] {2}",
    "quarrel.help.usage.any": "[positional-arguments ...]",
    "quarrel.help.usage.group": "Usage: {0} {1} [command] [arguments ...]",
    "quarrel.help.named": "Named parameters:",
    "quarrel.help.named.none": "The command does not accept any named parameters.",
    "quarrel.help.positional": "Positional parameters:",
    "quarrel.help.positional.none": "The command does not accept any positional parameters.",
    "quarrel.help.positional.any": "The command accepts an arbitrary number of positional arguments.",
    "quarrel.help.commands": "Commands:",
    "quarrel.help.description.word": "Description",
    "quarrel.help.type": "Type",
    "quarrel.help.cardinality": "Cardinality",
    "quarrel.help.default": "Default value",
    "quarrel.help.syntax": "Syntax",
    "quarrel.help.alternatives": "Alternatives",
    "quarrel.help.cardinality.1": "[1, 1]; Specify exactly once, or rely on the default.",
    "quarrel.help.cardinality.1.noDefault": "[1, 1]; Specify exactly once.",
    "quarrel.help.cardinality.01": "[0, 1]; Specify at most once, or rely on the default.",
    "quarrel.help.cardinality.01.noDefault": "[0, 1]; Optionally specify at most once.",
    "quarrel.help.cardinality.0n": "[0, N]; Specify any number of times, or rely on the defaults.",
    "quarrel.help.cardinality.0n.noDefault": "[0, N]; Optionally specify any number of times.",
    "quarrel.help.cardinality.1n": "[1, N]; Specify at least once, or rely on the default.",
    "quarrel.help.cardinality.1n.noDefault": "[1, N]; Specify at least once.",

    # version and application usage
    "quarrel.version.shortDescription": "Show the application version.",
    "quarrel.application.shortDescription": "Show the application usage information.",
    "quarrel.application.usage": "Usage: {0} [command] [arguments ...]",
    "quarrel.application.usageHelp": (
        "  Use the \"help\" command to examine specific commands:\n"
        "\n"
        "    $ {0} help help.\n"
        "\n"
        "  Command-line arguments can be placed one per line into a file, and\n"
        "  the file can be referenced using the @ symbol:\n"
        "\n"
        "    $ echo help > file.txt\n"
        "    $ echo help >> file.txt\n"
        "    $ {0} @file.txt\n"
    ),
    "quarrel.application.commands": "Commands:",
    "quarrel.application.documentation": "Documentation:",
})
"""
The internal bundle: every key the library itself displays.
"""


class Localization:
    """
    Resolve string references against an application bundle layered over the
    internal bundle.

    Parameters
    - application: Mapping[str, str], keys the application defines or overrides.
    - internal: Mapping[str, str], the library bundle (MESSAGES by default).

    Behavior
    - localize(Constant) returns the text itself.
    - localize(Localize or str key) looks the key up in the application bundle,
      then in the internal bundle, and raises KeyError when neither has it.
    - format(key, *arguments) localizes the key and substitutes {0}, {1}, ...
    """

    def __init__(self, application=MappingProxyType({}), internal=MESSAGES):
        if not isinstance(application, Mapping):
            raise TypeError("application resources must be a mapping")
        if not isinstance(internal, Mapping):
            raise TypeError("internal resources must be a mapping")
        self._application = MappingProxyType(dict(application))
        self._internal = MappingProxyType(dict(internal))

    @property
    def application(self):
        return self._application

    @property
    def internal(self):
        return self._internal

    def localize(self, reference, /):
        if isinstance(reference, Constant):
            return str(reference)
        if not isinstance(reference, str):
            raise TypeError("localize() argument must be a string reference")
        try:
            return self._application[reference]
        except KeyError:
            pass
        try:
            return self._internal[reference]
        except KeyError:
            raise KeyError(f"no localized text for key {str(reference)!r}") from None

    def format(self, key, /, *arguments):
        return self.localize(Localize(key)).format(*arguments)


__all__ = (
    "Constant",
    "Localize",
    "Localization",
    "MESSAGES",
    "reference",
)
