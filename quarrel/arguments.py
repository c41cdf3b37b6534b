r"""
Quarrel parameter declarations.

Overview
- Positional[_T]: one positional argument, converted to _T.
- Named declarations, one class per cardinality:
  • Named1[_T]   [1, 1]  exactly one value (or the default when given one).
  • Named01[_T]  [0, 1]  at most one value; absent means the default or nothing.
  • Named1N[_T]  [1, N]  one or more values; a single default may stand in.
  • Named0N[_T]  [0, N]  any number of values; a default list stands in when absent.
- Positional sets, one class per shape:
  • PositionalsNone: no positional arguments are accepted.
  • PositionalsAny: any number of raw, unconverted arguments.
  • PositionalsTyped: an exact, ordered list of Positional declarations.

Identity
- Declarations hash and compare by identity. A parsed CommandContext is keyed
  by the declaration objects themselves, so two declarations sharing a name
  or a type never get confused.

Metadata (sanitized on construction)
- name: validated with qualify() (non-empty, no whitespace, no leading "@").
- type: the Python class values are converted to; a converter for it must be
  registered when the command is parsed.
- descr: str | Constant | Localize; a plain string is taken as a Constant.
- alternatives (named only): further names for the same declaration; each is
  qualified, unique, and distinct from the primary name.
- default (named only): not validated against the type; Named0N takes an
  iterable of defaults.

Introspection & representation
- ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes the
  fields listed in __introspectable__ via read-only properties.

Quick example:
    >>> from quarrel.arguments import Named1, Named0N, Positional, PositionalsTyped
    >>> FILE = Named1("--file", str, "The input file.", alternatives=("-f",))
    >>> TAGS = Named0N("--tag", str, "Tags to apply.", default=("misc",))
    >>> COUNT = Positional("count", int, "How many times.")
    >>> POSITIONALS = PositionalsTyped(COUNT)

Public API
- Classes: Positional, Named1, Named01, Named1N, Named0N,
  PositionalsNone, PositionalsAny, PositionalsTyped
"""
import builtins
import functools
import operator
import re

from .strings import reference
from .utils import *


class ArgumentType(type):
    """
    Metaclass that makes declarations introspectable and readable.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and help output.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
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
            """
            Return a concise, stable representation with key metadata.

            Example
            - named1(name='--file', type=<class 'str'>, ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield a sequence of (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the metadata every declaration carries.

    - name: qualified (non-empty, no whitespace, no leading "@").
    - type: must be a class.
    - descr: turned into a string reference (plain strings become Constant).

    Raises
    - TypeError: wrong kinds of objects.
    - ValueError: malformed names.

    Notes
    - This function mutates the provided metadata dict in place.
    """
    if not isinstance(metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    try:
        metadata["name"] = qualify(metadata["name"])
    except ValueError as error:
        raise ValueError(f"{cls.__typename__} {error}") from None

    if not isinstance(metadata["type"], builtins.type):
        raise TypeError(f"{cls.__typename__} 'type' must be a class")

    try:
        metadata["descr"] = reference(metadata["descr"])
    except TypeError:
        raise TypeError(f"{cls.__typename__} 'descr' must be a string, a Constant or a Localize") from None


def _sanitize_named_metadata(cls, metadata, /):
    """
    Internal: validate alternative names of named declarations.

    Each alternative is qualified, duplicates are rejected, and no alternative
    may repeat the primary name. Order is preserved.
    """
    if isinstance(metadata["alternatives"], str):
        raise TypeError(f"{cls.__typename__} 'alternatives' must be an iterable of strings, not a string")

    alternatives = []
    for name in metadata["alternatives"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} alternatives must be strings")
        try:
            qualify(name)
        except ValueError as error:
            raise ValueError(f"{cls.__typename__} alternative {error}") from None
        if name == metadata["name"] or name in alternatives:
            raise ValueError(f"{cls.__typename__} alternatives cannot contain duplicates")
        alternatives.append(name)

    metadata["alternatives"] = tuple(alternatives)


class Positional[_T](metaclass=ArgumentType):
    """
    One positional argument.

    Positional declarations only make sense inside a PositionalsTyped set;
    their position in that set is their position on the command line.
    """

    __introspectable__ = (
        "name",
        "type",
        "descr",
    )

    def __new__(cls, name, type, /, descr):
        metadata = {
            "name": name,
            "type": type,
            "descr": descr,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self


class _Named[_T](metaclass=ArgumentType):
    """
    Shared construction of named declarations.

    Subclasses fix the cardinality through the minimum and maximum class
    attributes (maximum is None when unbounded).
    """
    minimum = 0
    maximum = None

    __introspectable__ = (
        "name",
        "alternatives",
        "type",
        "descr",
        "default",
    )

    def __new__(cls, name, type, /, descr, *, alternatives=(), default=Unset):
        metadata = {
            "name": name,
            "type": type,
            "descr": descr,
            "alternatives": alternatives,
            "default": default,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_named_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def names(self):
        """
        The primary name followed by every alternative.
        """
        return (self.name, *self.alternatives)

    @property
    def cardinality(self):
        return self.minimum, self.maximum

    def defaults(self):
        """
        The values standing in when the parameter is absent from the command line.
        """
        return () if self.default is Unset else (self.default,)


class Named1[_T](_Named[_T]):
    """
    A named parameter that must end up with exactly one value.

    Without a default it is required; with a default, leaving it out yields
    the default.
    """
    minimum = 1
    maximum = 1


class Named01[_T](_Named[_T]):
    """
    A named parameter that may be given at most once.

    The parsed value is None when neither a value nor a default is present.
    """
    minimum = 0
    maximum = 1


class Named1N[_T](_Named[_T]):
    """
    A named parameter given one or more times; a single default may stand in.
    """
    minimum = 1
    maximum = None


class Named0N[_T](_Named[_T]):
    """
    A named parameter given any number of times.

    The default is an iterable of values, copied in order when the parameter
    does not appear at all.
    """
    minimum = 0
    maximum = None

    def __new__(cls, name, type, /, descr, *, alternatives=(), default=()):
        if isinstance(default, str) or not hasattr(default, "__iter__"):
            raise TypeError(f"{cls.__typename__} 'default' must be an iterable of values")
        return super().__new__(cls, name, type, descr, alternatives=alternatives, default=tuple(default))

    def defaults(self):
        return self.default


class PositionalsNone(metaclass=ArgumentType):
    """
    The command accepts no positional arguments.
    """
    __introspectable__ = ()


class PositionalsAny(metaclass=ArgumentType):
    """
    The command accepts any number of positional arguments, left unconverted.
    """
    __introspectable__ = ()


class PositionalsTyped(metaclass=ArgumentType):
    """
    The command accepts exactly these positional arguments, in this order.
    """
    __introspectable__ = ("parameters",)

    def __new__(cls, *parameters):
        for parameter in parameters:
            if not isinstance(parameter, Positional):
                raise TypeError(f"{cls.__typename__} parameters must be positional declarations")
        self = super().__new__(cls)
        self._parameters = parameters
        return self

    def __iter__(self):
        return iter(self._parameters)

    def __len__(self):
        return len(self._parameters)

    def index(self, parameter, /):
        """
        Return the position of this very declaration (identity match).

        Raises
        - ValueError: the declaration is not part of this set.
        """
        for index, candidate in enumerate(self._parameters):
            if candidate is parameter:
                return index
        raise ValueError("no such typed positional parameter")


__all__ = (
    "Positional",
    "Named1",
    "Named01",
    "Named1N",
    "Named0N",
    "PositionalsNone",
    "PositionalsAny",
    "PositionalsTyped",
)
