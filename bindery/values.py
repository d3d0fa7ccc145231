"""
Value conversion: tagged outcomes, built-in converters and the parser selector.

A ValueParser turns one raw token into a typed element and reports what
happened as a tagged outcome instead of raising:

- Parsed(value)     → conversion succeeded.
- Duplicate(value)  → conversion succeeded but the property declares unique
                      elements and the value is already collected.
- Invalid(reason)   → the converter rejected the token.

The engine branches on the outcome; the scalar "supplied twice" condition is
not a converter concern and lives in bindery.context.

Built-in converters are picked by element type (first match along the MRO,
enums first): bool, int, str, Enum subclasses, and any other class called with
the raw token (float, complex, Decimal, Fraction, Path, ...).

Custom parsers implement __convert__(token, type) and either return the value,
raise to reject the token, or return an outcome directly.
"""
import logging
from enum import Enum
from types import MappingProxyType
from typing import Any, NamedTuple

from .faults import InvalidSchemaError, ParserContractError

logger = logging.getLogger(__name__)


class Parsed(NamedTuple):
    value: Any


class Duplicate(NamedTuple):
    value: Any


class Invalid(NamedTuple):
    reason: str


_TRUTHY = frozenset(("true", "yes", "on", "y", "1"))
_FALSY = frozenset(("false", "no", "off", "n", "0"))


def _to_str(token, type, /):
    return token if type is str else type(token)


def _to_bool(token, type, /):
    if (lowered := token.strip().lower()) in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(f"expected one of {", ".join(sorted(_TRUTHY | _FALSY))}")


def _to_int(token, type, /):
    try:
        value = int(token)
    except ValueError:
        # prefixed literals: 0x1f, 0o17, 0b101
        value = int(token, 0)
    return value if type is int else type(value)


def _to_enum(token, type, /):
    try:
        return type[token]
    except KeyError:
        pass
    for member in type:
        if str(member.value) == token:
            return member
    raise ValueError(f"expected one of {", ".join(type.__members__)}")


def _construct(token, type, /):
    return type(token)


_CONVERTERS = MappingProxyType({
    bool: _to_bool,
    int: _to_int,
    str: _to_str,
})


def converter(cls, /):
    """
    Return the built-in converter for an element type.

    Enum subclasses are matched first (IntEnum would otherwise resolve to int);
    then the first class along the MRO with a registered converter wins; any
    other class is called with the raw token.
    """
    if not isinstance(cls, type):
        raise TypeError("converter() argument must be a class")
    if issubclass(cls, Enum):
        return _to_enum
    for base in cls.__mro__:
        try:
            return _CONVERTERS[base]
        except KeyError:
            continue
    return _construct


def satisfies(parser, /):
    """
    True when `parser` (an instance or a class) provides a callable __convert__.
    """
    return callable(getattr(parser, "__convert__", None))


class ValueParser:
    """
    Converter bound to one property.

    parse(token, seen=()) never raises for bad input: it returns Parsed,
    Duplicate or Invalid. `seen` holds the values already collected for the
    property and is only consulted when the property declares unique elements.
    """

    def __init__(self, property, convert, /):
        self._property = property
        self._convert = convert

    @property
    def property(self):
        return self._property

    def parse(self, token, seen=(), /):
        try:
            result = self._convert(token, self._property.type)
        except Exception as exception:
            logger.debug("converter for %r rejected %r: %r", self._property.name, token, exception)
            return Invalid(str(exception) or type(exception).__name__)

        # custom parsers may report an outcome themselves
        if isinstance(result, Invalid | Duplicate):
            return result
        if isinstance(result, Parsed):
            result = result.value

        if self._property.unique and result in seen:
            return Duplicate(result)
        return Parsed(result)

    def __repr__(self):
        return f"value-parser(property={self._property.name!r})"


class ValueParserSelector:
    """
    Resolve, once, the ValueParser of every value-bearing property of a store.

    Custom parser classes are instantiated through `factory` (called with the
    class, no other arguments; defaults to calling the class itself). Parsers
    are resolved eagerly so the selector is read-only once built and safe to
    share between concurrent parse calls.

    Raises
    - InvalidSchemaError: when a custom parser class cannot be instantiated or
      its instance does not satisfy the __convert__ contract.
    """

    def __init__(self, store, /, factory=None):
        if factory is not None and not callable(factory):
            raise TypeError("ValueParserSelector 'factory' must be callable")
        self._factory = factory or (lambda cls: cls())

        parsers = {}
        faults = []
        for property in store.parametric:
            try:
                parsers[property.name] = ValueParser(property, self._resolve(property))
            except ParserContractError as fault:
                faults.append(fault)
        if faults:
            raise InvalidSchemaError(faults)
        self._parsers = MappingProxyType(parsers)

    def _resolve(self, property):
        if property.parser is None:
            return converter(property.type)

        parser = property.parser
        if isinstance(parser, type):
            try:
                parser = self._factory(parser)
            except Exception as exception:
                raise ParserContractError(
                    "parser %s of property %r could not be instantiated (%s)" % (
                        property.parser.__name__, property.name, exception
                    ),
                    property=property.name,
                ) from exception
        if not satisfies(parser):
            raise ParserContractError(
                "parser of property %r has no callable __convert__" % property.name,
                property=property.name,
            )
        return parser.__convert__

    def get(self, property, /):
        """
        Return the ValueParser of `property` (a PropertyMetadata or its name).
        """
        return self._parsers[getattr(property, "name", property)]

    def __contains__(self, property):
        return getattr(property, "name", property) in self._parsers


__all__ = (
    "Parsed",
    "Duplicate",
    "Invalid",
    "ValueParser",
    "ValueParserSelector",
    "converter",
    "satisfies",
)
