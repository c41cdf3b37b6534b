"""
Quarrel value converters and the converter directory.

A converter owns one target type and translates between command-line text and
values of that type:

- parse(text) -> value, raising ValueConversionError on malformed input;
- print(value) -> text, the inverse of parse, so parse(print(x)) == x;
- example, a value of the target type that survives the round trip;
- syntax, a short non-empty description of the accepted text.

The directory maps target types to converters. It never changes after
construction: with_converter() returns a new directory.

Core types
    int (unbounded), Decimal, bool, Float32, float, Int32, Int64, timedelta
    (ISO 8601 duration), datetime (ISO 8601 with offset), str, Path,
    SplitResult (URI), UUID, IPv4Address, IPv6Address, re.Pattern

Int32, Int64 and Float32 are width tags: plain int/float subclasses whose
converters enforce the width, so parsed values compare equal to plain numbers.
"""
import builtins
import ipaddress
import math
import re
import socket
import struct
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from urllib.parse import SplitResult, urlsplit

from .faults import ValueConversionError


class Int32(int):
    """Signed 32-bit integer tag."""
    __slots__ = ()


class Int64(int):
    """Signed 64-bit integer tag."""
    __slots__ = ()


class Float32(float):
    """Single-precision floating-point tag."""
    __slots__ = ()


def _unparseable(converter, text, error=None, /):
    exception = ValueConversionError(
        f"unparseable {converter.type.__name__} value {text!r}",
        attributes={"provided": text, "syntax": converter.syntax},
    )
    exception.__cause__ = error
    return exception


class Converter[_T](ABC):
    """
    Abstract base for every converter.

    Subclasses set the class attributes type, syntax and example (or override
    the matching properties) and implement parse() and print().
    """
    type = object
    syntax = ""
    example = None

    @abstractmethod
    def parse(self, text, /):
        raise NotImplementedError

    def print(self, value, /):
        return str(value)

    def __repr__(self):
        return f"{type(self).__name__}(type={self.type.__name__})"


# ASCII digits only: no underscores, no surrounding whitespace
_INTEGER = re.compile(r"[-+]?[0-9]+")


class IntegerConverter(Converter[int]):
    type = int
    syntax = "0 | -?[1-9][0-9]*"
    example = 10

    def parse(self, text, /):
        if not _INTEGER.fullmatch(text):
            raise _unparseable(self, text)
        try:
            return int(text, 10)
        except ValueError as error:
            raise _unparseable(self, text, error) from error


class _BoundedIntegerConverter(Converter[int]):
    bits = 0

    def parse(self, text, /):
        if not _INTEGER.fullmatch(text):
            raise _unparseable(self, text)
        try:
            value = int(text, 10)
        except ValueError as error:
            raise _unparseable(self, text, error) from error
        if not -(1 << (self.bits - 1)) <= value < (1 << (self.bits - 1)):
            raise _unparseable(self, text)
        return self.type(value)


class Int32Converter(_BoundedIntegerConverter):
    type = Int32
    bits = 32
    syntax = "Integer in [-2147483648, 2147483647]"
    example = Int32(23)


class Int64Converter(_BoundedIntegerConverter):
    type = Int64
    bits = 64
    syntax = "Integer in [-9223372036854775808, 9223372036854775807]"
    example = Int64(23)


class DecimalConverter(Converter[Decimal]):
    type = Decimal
    syntax = "-?[0-9]+(\\.[0-9]+)?([eE][+-]?[0-9]+)?"
    example = Decimal("23.0")

    def parse(self, text, /):
        try:
            value = Decimal(text)
        except InvalidOperation as error:
            raise _unparseable(self, text, error) from error
        # no NaN or infinities: they never compare equal to themselves
        if not value.is_finite():
            raise _unparseable(self, text)
        return value


class BooleanConverter(Converter[bool]):
    type = bool
    syntax = "true | false"
    example = True

    def parse(self, text, /):
        match text:
            case "true":
                return True
            case "false":
                return False
            case _:
                raise _unparseable(self, text)

    def print(self, value, /):
        return "true" if value else "false"


class FloatConverter(Converter[float]):
    type = float
    syntax = "<floating-point value>"
    example = 23.0

    def parse(self, text, /):
        try:
            value = float(text)
        except ValueError as error:
            raise _unparseable(self, text, error) from error
        if math.isnan(value):
            raise _unparseable(self, text)
        return value

    def print(self, value, /):
        return repr(float(value))


class Float32Converter(Converter[float]):
    type = Float32
    syntax = "<floating-point value>"
    example = Float32(23.0)

    def parse(self, text, /):
        try:
            value, = struct.unpack("f", struct.pack("f", float(text)))
        except (ValueError, OverflowError, struct.error) as error:
            raise _unparseable(self, text, error) from error
        if math.isnan(value):
            raise _unparseable(self, text)
        return Float32(value)

    def print(self, value, /):
        return repr(float(value))


_DURATION = re.compile(
    r"(?P<sign>[-+]?)P"
    r"(?:(?P<days>[-+]?[0-9]+)D)?"
    r"(?:T"
    r"(?:(?P<hours>[-+]?[0-9]+)H)?"
    r"(?:(?P<minutes>[-+]?[0-9]+)M)?"
    r"(?:(?P<seconds>[-+]?[0-9]+)(?:[.,](?P<fraction>[0-9]{0,9}))?S)?"
    r")?",
    re.IGNORECASE,
)


class DurationConverter(Converter[timedelta]):
    """
    ISO 8601 durations limited to days and time (PnDTnHnMn.nS).

    Printed durations never use the day designator: hours carry everything
    above a minute, and a leading "-" marks negative durations.
    """
    type = timedelta
    syntax = "PnDTnHnMn.nS (ISO 8601)"
    example = timedelta(seconds=3919)

    def parse(self, text, /):
        match = _DURATION.fullmatch(text)
        # "P" and "PT" alone carry no component
        if not match or not any(match[group] for group in ("days", "hours", "minutes", "seconds")):
            raise _unparseable(self, text)
        seconds = match["seconds"] or "0"
        # nanosecond digits are truncated to microseconds; the fraction takes the sign of its seconds
        micros = int((match["fraction"] or "").ljust(9, "0")) // 1000
        try:
            value = timedelta(
                days=int(match["days"] or 0),
                hours=int(match["hours"] or 0),
                minutes=int(match["minutes"] or 0),
                seconds=int(seconds),
                microseconds=-micros if seconds.startswith("-") else micros,
            )
            return -value if match["sign"] == "-" else value
        except OverflowError as error:
            raise _unparseable(self, text, error) from error

    def print(self, value, /):
        total = value // timedelta(microseconds=1)
        sign = "-" if total < 0 else ""
        seconds, micros = divmod(abs(total), 1_000_000)
        hours, seconds = divmod(seconds, 3600)
        minutes, seconds = divmod(seconds, 60)

        text = sign + "PT"
        if hours:
            text += f"{hours}H"
        if minutes:
            text += f"{minutes}M"
        if seconds or micros or not (hours or minutes):
            text += str(seconds)
            if micros:
                text += "." + f"{micros:06d}".rstrip("0")
            text += "S"
        return text


class DateTimeConverter(Converter[datetime]):
    type = datetime
    syntax = "yyyy-mm-ddThh:mm:ss+zz:zz (ISO 8601)"
    example = datetime(2000, 1, 1, 0, 0, 0, tzinfo=timezone.utc)

    def parse(self, text, /):
        try:
            value = datetime.fromisoformat(text)
        except ValueError as error:
            raise _unparseable(self, text, error) from error
        if value.tzinfo is None:
            raise _unparseable(self, text)
        return value

    def print(self, value, /):
        return value.isoformat()


class StringConverter(Converter[str]):
    type = str
    syntax = "<any sequence of characters>"
    example = "example"

    def parse(self, text, /):
        return text


class PathConverter(Converter[Path]):
    type = Path
    syntax = "<platform-specific path syntax>"
    example = Path("/etc/passwd")

    def parse(self, text, /):
        try:
            return Path(text)
        except (TypeError, ValueError) as error:
            raise _unparseable(self, text, error) from error


class URIConverter(Converter[SplitResult]):
    type = SplitResult
    syntax = "RFC 3986 URI"
    example = urlsplit("https://www.example.com/")

    def parse(self, text, /):
        try:
            return urlsplit(text)
        except ValueError as error:
            raise _unparseable(self, text, error) from error

    def print(self, value, /):
        return value.geturl()


class UUIDConverter(Converter[uuid.UUID]):
    type = uuid.UUID
    syntax = "[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"
    example = uuid.UUID("7d9c2a19-8f8a-4a3e-9d2b-0b1a5f3c6e4d")

    def parse(self, text, /):
        try:
            return uuid.UUID(text)
        except ValueError as error:
            raise _unparseable(self, text, error) from error


class AddressConverter(Converter):
    """
    Host names and literal IP addresses of one family.

    Literal addresses are taken as-is; anything else is resolved through the
    system resolver and the first address of the family is used.
    """
    syntax = "Hostname, IPv4 or IPv6 address (RFC 2732)"

    def __init__(self, type, /):
        if type not in (ipaddress.IPv4Address, ipaddress.IPv6Address):
            raise TypeError("AddressConverter() argument must be IPv4Address or IPv6Address")
        self.type = type

    @property
    def family(self):
        return socket.AF_INET if self.type is ipaddress.IPv4Address else socket.AF_INET6

    @property
    def example(self):
        return self.type("127.0.0.1" if self.type is ipaddress.IPv4Address else "::1")

    def parse(self, text, /):
        try:
            value = ipaddress.ip_address(text.strip("[]"))
        except ValueError:
            try:
                infos = socket.getaddrinfo(text, None, self.family)
            except (OSError, UnicodeError) as error:
                raise _unparseable(self, text, error) from error
            value = ipaddress.ip_address(infos[0][4][0].split("%")[0])
        if not isinstance(value, self.type):
            raise _unparseable(self, text)
        return value


class PatternConverter(Converter[re.Pattern]):
    type = re.Pattern
    syntax = "<regular expression>"
    example = re.compile("[a-z]+")

    def parse(self, text, /):
        try:
            return re.compile(text)
        except re.error as error:
            raise _unparseable(self, text, error) from error

    def print(self, value, /):
        return value.pattern


class EnumConverter[_E: Enum](Converter[_E]):
    """
    Enumerations, by exact member name.

    The syntax is the sorted member names joined by "|", and the example is
    the first declared member.
    """

    def __init__(self, type, /):
        if not (isinstance(type, builtins.type) and issubclass(type, Enum)):
            raise TypeError("EnumConverter() argument must be an enumeration")
        if not len(type):
            raise ValueError("EnumConverter() argument must have members")
        self.type = type

    @property
    def syntax(self):
        return "|".join(sorted(self.type.__members__))

    @property
    def example(self):
        return next(iter(self.type))

    def parse(self, text, /):
        try:
            return self.type[text]
        except KeyError as error:
            raise _unparseable(self, text, error) from error

    def print(self, value, /):
        return value.name


class ConverterDirectory:
    """
    Immutable mapping of target type -> converter.

    Constructors
    - ConverterDirectory.empty(): no converters at all.
    - ConverterDirectory.core(): the core type set.

    Lookups are by exact type: subclasses do not inherit their base's converter.
    """

    def __init__(self, converters=(), /):
        mapping = {}
        for type, converter in dict(converters).items():
            if not isinstance(type, builtins.type):
                raise TypeError("converter directory keys must be types")
            if not isinstance(converter, Converter):
                raise TypeError("converter directory values must be converters")
            mapping[type] = converter
        self._converters = MappingProxyType(mapping)

    @classmethod
    def empty(cls):
        return cls()

    @classmethod
    def core(cls):
        converters = (
            IntegerConverter(),
            DecimalConverter(),
            BooleanConverter(),
            Float32Converter(),
            FloatConverter(),
            Int32Converter(),
            Int64Converter(),
            DurationConverter(),
            DateTimeConverter(),
            StringConverter(),
            PathConverter(),
            URIConverter(),
            UUIDConverter(),
            AddressConverter(ipaddress.IPv4Address),
            AddressConverter(ipaddress.IPv6Address),
            PatternConverter(),
        )
        return cls({converter.type: converter for converter in converters})

    def converter_for(self, type, /):
        """
        Return the converter registered for exactly this type, or None.
        """
        return self._converters.get(type)

    def converters(self):
        return tuple(self._converters.values())

    def with_converter(self, type, converter, /):
        """
        Return a new directory with converter registered for type.
        """
        return ConverterDirectory({**self._converters, type: converter})

    def __contains__(self, type):
        return type in self._converters

    def __len__(self):
        return len(self._converters)

    def __repr__(self):
        return f"ConverterDirectory({", ".join(type.__name__ for type in self._converters)})"


__all__ = (
    "Int32",
    "Int64",
    "Float32",
    "Converter",
    "IntegerConverter",
    "Int32Converter",
    "Int64Converter",
    "DecimalConverter",
    "BooleanConverter",
    "FloatConverter",
    "Float32Converter",
    "DurationConverter",
    "DateTimeConverter",
    "StringConverter",
    "PathConverter",
    "URIConverter",
    "UUIDConverter",
    "AddressConverter",
    "PatternConverter",
    "EnumConverter",
    "ConverterDirectory",
)
