"""
Small helpers shared by the specs, the metadata store and the engine.

- Unset: "nothing was declared" marker, kept apart from None because None is a
  perfectly good default.
- coalesce(): resolve Unset to a fallback.
- rename(): decorator giving generated functions a readable name.
- mirror(): read-only property over a private "_name" attribute.
- ordinal(): "first", "second", ..., "11th", "22nd" for 1-based positions.

    >>> coalesce(Unset, 3)
    3
    >>> ordinal(3)
    'third'
"""
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker (one instance per process, falsy, not subclassable).

    `str | Unset` builds a union usable in isinstance checks.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")


def coalesce(object, default=None, /):
    """
    `object`, or `default` when object is Unset. Other falsy values are kept.
    """
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator setting __name__ and __qualname__ of the decorated function.
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        if not callable(function):
            raise TypeError("@rename() must decorate a callable")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _freeze(object):
    # lists → tuple, dicts → read-only proxy, sets → frozenset
    if isinstance(object, Sequence) and not isinstance(object, str | bytes | bytearray):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Property returning a frozen view of `self._<name>`.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


_WORDS = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")


@functools.lru_cache(typed=True)
def ordinal(number, /):
    """
    Ordinal label of a 1-based position: words up to ten, then 11th, 21st, 102nd...
    """
    if not isinstance(number, int) or isinstance(number, bool):
        raise TypeError("ordinal() argument must be an integer")
    if number < 1:
        raise ValueError("ordinal() argument must be positive")
    if number <= len(_WORDS):
        return _WORDS[number - 1]
    if number % 100 in (11, 12, 13):
        return "%dth" % number
    return "%d%s" % (number, {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th"))


Unset = UnsetType()


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "ordinal",
    "UnsetType",
    "Unset",
)
