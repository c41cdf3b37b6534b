"""
Quarrel faults (structured errors) and their rendering.

Scope
- FaultCode: canonical, stable symbolic identifiers for every user-facing error.
- CommandException: base type carrying a message plus structured options
  (code, attributes, remediation, extras) and knowing how to render itself.
- One subclass per fault code, so callers can catch precisely what they expect.
- describe(): the plain-text layout used when errors are sent to a logger.

Structure of an error
- message: one human sentence, already localized.
- code: a FaultCode (its value is the user-visible symbol, e.g. "parameter-cardinality").
- attributes: ordered mapping of localized key -> string value.
- remediation: optional localized text suggesting what to do next.
- extras: further errors discovered in the same phase, in discovery order.
- cause: the standard __cause__, set with "raise ... from error".

Integration
- Parsers collect errors for a phase and raise the first one with the rest
  attached through copy.replace(first, extras=rest).
- Hosts either catch CommandException themselves or call Application.run(),
  which logs every error line through describe().
"""
import copy
from collections import defaultdict
from enum import StrEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .strings import Localize
from .utils import Unset, coalesce


class FaultCode(StrEnum):
    """
    canonical fault codes used across the library (stable identifiers).

    grouping (by high-level domain)
    - input: IO
    - routing: COMMAND_NONEXISTENT, COMMAND_PATH_ERROR
    - declarations: PARAMETER_DUPLICATE, PARAMETER_NO_VALUE_CONVERTER
    - named arguments: PARAMETER_MISSING_VALUE, PARAMETER_UNPARSEABLE_VALUE, PARAMETER_CARDINALITY
    - positional arguments: PARAMETER_POSITIONAL_COUNT
    - converters: PARAMETER_VALUE_UNPARSEABLE

    the values are user-visible; never change an existing one.
    """
    IO                           = "io"
    COMMAND_NONEXISTENT          = "command-nonexistent"
    COMMAND_PATH_ERROR           = "command-path-error"
    PARAMETER_DUPLICATE          = "parameter-duplicate"
    PARAMETER_NO_VALUE_CONVERTER = "parameter-no-value-converter"
    PARAMETER_MISSING_VALUE      = "parameter-missing-value"
    PARAMETER_UNPARSEABLE_VALUE  = "parameter-unparseable-value"
    PARAMETER_CARDINALITY        = "parameter-cardinality"
    PARAMETER_POSITIONAL_COUNT   = "parameter-positional-count"
    PARAMETER_VALUE_UNPARSEABLE  = "parameter-value-unparseable"

    def normalize(self):
        """
        return a host-normalized label for this code.

        the host application can provide a __codes__ mapping in __main__
        to relabel codes. when no mapping is present, the symbol itself is returned.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    structured error raised by resolution, parsing and value conversion.

    construction
    - CommandException(message, code=..., attributes=..., remediation=..., extras=...)
    - subclasses bind a default code through their __code__ attribute.

    accessors
    - code, attributes, remediation (None when absent), extras (tuple).
    """
    __code__ = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        options.setdefault("code", type(self).__code__)
        if not isinstance(options["code"], FaultCode):
            raise TypeError(f"{type(self).__name__} requires a fault code")
        options["attributes"] = MappingProxyType(dict(options.get("attributes", {})))
        options["extras"] = tuple(options.get("extras", ()))
        options.setdefault("remediation", Unset)
        super().__init__(coalesce(message, options["code"].value))
        self.message = coalesce(message, options["code"].value)
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options["code"]

    @property
    def attributes(self):
        return self.options["attributes"]

    @property
    def remediation(self):
        return coalesce(self.options["remediation"])

    @property
    def extras(self):
        return self.options["extras"]

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-message": "bold #FF4DA6",  # friendly pinky message
            "attribute-name": "#C8C8D0",  # soft light gray keys
            "attribute-value": "#E6E6F0",  # near-white values
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        renders = [Text.assemble(
            "[ ", (self.code.normalize(), styles["code"]), " ] ", (self.message, styles["error-message"])
        )]
        if self.attributes:
            width = max(map(len, self.attributes)) + 1
            for name, value in sorted(self.attributes.items()):
                renders.append(Text.assemble(
                    "  ", (name, styles["attribute-name"]), " " * (width - len(name)), ": ",
                    (str(value), styles["attribute-value"])
                ))
        if self.remediation:
            renders.append(Text.assemble((" → ", styles["hint-arrow"]), (self.remediation, styles["hint"])))

        return Group(*renders, *self.extras)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        clone = type(self)(self.message, **{**self.options, **overrides})
        clone.__cause__ = self.__cause__
        return clone


class ResponseFileError(CommandException):
    __code__ = FaultCode.IO
class UnknownCommandError(CommandException):
    __code__ = FaultCode.COMMAND_NONEXISTENT
class CommandPathError(CommandException):
    __code__ = FaultCode.COMMAND_PATH_ERROR
class DuplicateParameterError(CommandException):
    __code__ = FaultCode.PARAMETER_DUPLICATE
class MissingConverterError(CommandException):
    __code__ = FaultCode.PARAMETER_NO_VALUE_CONVERTER
class MissingValueError(CommandException):
    __code__ = FaultCode.PARAMETER_MISSING_VALUE
class UnparseableValueError(CommandException):
    __code__ = FaultCode.PARAMETER_UNPARSEABLE_VALUE
class CardinalityError(CommandException):
    __code__ = FaultCode.PARAMETER_CARDINALITY
class PositionalCountError(CommandException):
    __code__ = FaultCode.PARAMETER_POSITIONAL_COUNT
class ValueConversionError(CommandException):
    __code__ = FaultCode.PARAMETER_VALUE_UNPARSEABLE


def collect(errors, /):
    """
    raise the first of the accumulated errors, with the rest attached as extras.

    does nothing when errors is empty.
    """
    if errors:
        first, *rest = errors
        raise copy.replace(first, extras=(*first.extras, *rest))


def describe(error, localization, /):
    """
    lay out a structured error as plain-text lines.

    layout
    - the message on its own line;
    - then one "  name<pad>: value" line per attribute, sorted by name, with
      the localized "error code" and "suggested action" rows folded in;
    - names are padded to the longest name + 1.

    extras are not included; callers describe each of them in turn.
    """
    attributes = dict(error.attributes)
    attributes[localization.localize(Localize("quarrel.errorCode"))] = error.code.normalize()
    if error.remediation:
        attributes[localization.localize(Localize("quarrel.suggestedAction"))] = error.remediation

    width = max(map(len, attributes)) + 1
    lines = [error.message]
    for name, value in sorted(attributes.items()):
        lines.append(f"  {name}{' ' * (width - len(name))}: {value}")
    return lines


__all__ = (
    "FaultCode",
    "CommandException",
    "ResponseFileError",
    "UnknownCommandError",
    "CommandPathError",
    "DuplicateParameterError",
    "MissingConverterError",
    "MissingValueError",
    "UnparseableValueError",
    "CardinalityError",
    "PositionalCountError",
    "ValueConversionError",
    "collect",
    "describe",
)
