"""
Quarrel argument parser and the parsed command context.

Scope
- Parser: turn the tokens left over after resolution into typed values for
  one command, or fail with a structured error.
- CommandContext: the per-invocation result, handing out typed values keyed
  by the declaration objects themselves.

Phases
- A, declarations: names and alternatives must be unique within the command;
  every declared type needs a registered converter. Errors accumulate.
- B, named scan: leading tokens that are known names each take the next
  token as their value. The scan stops at the first token that is not a known
  name; everything from there on is positional input. Fails fast.
- C, finalization: absent parameters receive their defaults, then every
  parameter's value count is checked against its cardinality. Errors accumulate.
- D, positionals: the rest is checked against the positional set and, for a
  typed set, converted position by position. Fails fast.
- E, context: the values are frozen into a CommandContext.

Notes
- Accumulated errors surface as the first error with the others attached as
  extras (see faults.collect).
- Converter failures of any kind are wrapped into UnparseableValueError with
  the original exception as __cause__.
"""
import logging
from collections import deque
from types import MappingProxyType

from .arguments import Positional, Named1, Named01, Named1N, Named0N, PositionalsNone, PositionalsAny, PositionalsTyped
from .faults import (
    DuplicateParameterError,
    MissingConverterError,
    MissingValueError,
    UnparseableValueError,
    CardinalityError,
    PositionalCountError,
    collect,
)
from .strings import Localize

logger = logging.getLogger(__name__)


class CommandContext:
    """
    Everything a command sees when it runs.

    Accessors
    - command, command_tree, value_converters, output
    - parameters_positional_raw: the positional tokens before conversion.
    - parameter_value(declaration): the typed value(s) for a declaration.
    - localize(reference) / format(key, *arguments): application strings.
    - execute(): run the command against this context.
    """

    def __init__(self, command, tree, converters, output, localization, /, *, named=MappingProxyType({}), raw=(), positionals=()):
        self._command = command
        self._tree = tree
        self._converters = converters
        self._output = output
        self._localization = localization
        self._named = MappingProxyType({parameter: tuple(values) for parameter, values in dict(named).items()})
        self._raw = tuple(raw)
        self._positionals = tuple(positionals)

    @property
    def command(self):
        return self._command

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

    @property
    def parameters_positional_raw(self):
        return self._raw

    def parameter_value(self, declaration, /):
        """
        Return the parsed value(s) for a declaration of the selected command.

        Returns
        - Positional: the converted value at the declaration's position.
        - Named1: the value.
        - Named01: the value, or None when there is neither value nor default.
        - Named1N / Named0N: a list of values in command-line order.

        Raises
        - ValueError: the declaration does not belong to the selected command.
        """
        if isinstance(declaration, Positional):
            positionals = self._command.positionals
            if not isinstance(positionals, PositionalsTyped):
                raise ValueError(f"command {self._command.name!r} has no typed positional parameters")
            return self._positionals[positionals.index(declaration)]

        try:
            values = self._named[declaration]
        except (KeyError, TypeError):
            raise ValueError(f"no such named parameter {declaration!r} in command {self._command.name!r}") from None

        match declaration:
            case Named1():
                return values[0]
            case Named01():
                return values[0] if values else None
            case Named1N() | Named0N():
                return list(values)

    def localize(self, reference, /):
        return self._localization.localize(reference)

    def format(self, key, /, *arguments):
        return self._localization.format(key, *arguments)

    def execute(self):
        logger.debug("executing command %r", self._command.name)
        return self._command.execute(self)

    def __repr__(self):
        return f"CommandContext(command={self._command.name!r}, raw={self._raw!r})"


class Parser:
    """
    Parse the tokens of one command against its declarations.

    Parameters
    - converters: ConverterDirectory used to look up a converter per type.
    - localization: Localization used for error messages and attribute keys.
    """

    def __init__(self, converters, localization, /):
        self._converters = converters
        self._localization = localization

    def _fault(self, cls, message, remediation, /, **attributes):
        localize = self._localization.localize
        return cls(
            localize(Localize(f"quarrel.{message}")),
            attributes={localize(Localize(f"quarrel.{name}")): str(value) for name, value in attributes.items()},
            remediation=localize(Localize(f"quarrel.{remediation}")),
        )

    def _cardinality_fault(self, message, remediation, command, parameter, count, /):
        return self._fault(
            CardinalityError, message, remediation,
            command=command.name,
            parameter=parameter.name,
            minimum_values=parameter.minimum,
            maximum_values=self._localization.localize(Localize("quarrel.unbounded")) if parameter.maximum is None else parameter.maximum,
            provided_count=count,
        )

    def _validate(self, command, /):
        """
        Phase A: map every name to its declaration and converter.
        """
        errors = []
        by_name = {}

        for parameter in command.named:
            converter = self._converters.converter_for(parameter.type)
            if converter is None:
                errors.append(self._fault(
                    MissingConverterError, "errorParameterNoValueConverter", "errorSuggestRegisterConverter",
                    command=command.name,
                    parameter=parameter.name,
                    type=parameter.type.__name__,
                ))
            for name in parameter.names:
                if name in by_name:
                    errors.append(self._fault(
                        DuplicateParameterError, "errorParameterMultipleSameNames", "errorSuggestUniqueNames",
                        command=command.name,
                        parameter=name,
                    ))
                    continue
                by_name[name] = parameter, converter

        positional = []
        if isinstance(command.positionals, PositionalsTyped):
            for parameter in command.positionals:
                converter = self._converters.converter_for(parameter.type)
                if converter is None:
                    errors.append(self._fault(
                        MissingConverterError, "errorParameterNoValueConverter", "errorSuggestRegisterConverter",
                        command=command.name,
                        parameter=parameter.name,
                        type=parameter.type.__name__,
                    ))
                positional.append((parameter, converter))

        collect(errors)
        return by_name, positional

    def _convert(self, command, parameter, converter, text, /):
        try:
            return converter.parse(text)
        except Exception as error:
            raise self._fault(
                UnparseableValueError, "errorParameterUnparseable", "errorSuggestProvideParseable",
                command=command.name,
                parameter=parameter.name,
                provided=text,
                type=parameter.type.__name__,
                syntax=converter.syntax,
            ) from error

    def _scan(self, command, by_name, tokens, /):
        """
        Phase B: consume leading named occurrences; tokens keeps the rest.
        """
        values = {parameter: [] for parameter in command.named}

        while tokens and tokens[0] in by_name:
            parameter, converter = by_name[tokens.popleft()]
            existing = values[parameter]

            if isinstance(parameter, Named1 | Named01) and existing:
                raise self._cardinality_fault(
                    "errorExpectsOneValue", "errorSuggestProvideExactlyOne", command, parameter, len(existing) + 1
                )
            if not tokens:
                raise self._fault(
                    MissingValueError, "errorParameterMissingValue", "errorSuggestProvideValue",
                    command=command.name,
                    parameter=parameter.name,
                    type=parameter.type.__name__,
                    syntax=converter.syntax,
                )
            existing.append(self._convert(command, parameter, converter, tokens.popleft()))

        return values

    def _finalize(self, command, values, /):
        """
        Phase C: apply defaults, then check every count against its bounds.
        """
        errors = []
        for parameter, existing in values.items():
            if not existing:
                existing.extend(parameter.defaults())
            count = len(existing)
            if count < parameter.minimum or (parameter.maximum is not None and count > parameter.maximum):
                errors.append(self._cardinality_fault(
                    "errorWrongNumberOfValues", "errorSuggestProvideRightNumber", command, parameter, count
                ))
        collect(errors)

    def _positionals(self, command, positional, tokens, /):
        """
        Phase D: check and convert what the named scan left over.
        """
        rest = tuple(tokens)
        match command.positionals:
            case PositionalsAny():
                return ()
            case PositionalsNone():
                expected = 0
            case PositionalsTyped() as typed:
                expected = len(typed)

        if len(rest) != expected:
            raise self._fault(
                PositionalCountError, "errorWrongNumberOfPositionalArguments", "errorSuggestProvideRightPositionals",
                command=command.name,
                expected_count=expected,
                provided_count=len(rest),
            )
        return tuple(
            self._convert(command, parameter, converter, text)
            for (parameter, converter), text in zip(positional, rest)
        )

    def execute(self, tree, output, command, arguments, /):
        """
        Parse arguments for command and return a ready CommandContext.

        Raises
        - CommandException subclasses describing the first problem found,
          with further problems of the same phase attached as extras.
        """
        logger.debug("parsing %d token(s) for command %r", len(arguments), command.name)
        by_name, positional = self._validate(command)

        tokens = deque(arguments)
        values = self._scan(command, by_name, tokens)
        self._finalize(command, values)

        raw = tuple(tokens)
        converted = self._positionals(command, positional, tokens)
        logger.debug("parsed command %r: %d named, %d positional", command.name, len(values), len(raw))

        return CommandContext(
            command,
            tree,
            self._converters,
            output,
            self._localization,
            named=values,
            raw=raw,
            positionals=converted,
        )


__all__ = (
    "CommandContext",
    "Parser",
)
