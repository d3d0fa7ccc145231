r"""
Bindery argument specifications.

Overview
- Specs
  • Switch: named, presence-only trigger that assigns a fixed literal value
    (e.g., --verbose → True). Never consumes a following token.
  • Option[_T]: named, value-bearing option with one or more aliases
    (e.g., -o/--output); may collect several values.
  • Positional[_T]: value-bearing argument bound by argument position
    (0, 1, 2, ...); may collect several values.

- Registration
  Specs are handed to OptionsParser as keyword arguments, one per target
  property. A property may also receive a sequence of Switch specs, so several
  triggers can assign different literals to the same property:

    >>> from bindery import OptionsParser, Switch, Option, Positional
    >>> parser = OptionsParser(
    ...     source=Positional(0),
    ...     threads=Option("-t", "--threads", type=int, default=1),
    ...     tags=Option("--tags", collection=list, unique=True),
    ...     verbose=(Switch("-v", "--verbose"), Switch("-q", "--quiet", value=False)),
    ... )

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes
    selected fields via read-only properties declared in __introspectable__.

Metadata (sanitized on construction)
- Named (Switch/Option)
  • names: one or more non-empty strings without whitespace; duplicates rejected.
- Parametric (Option/Positional)
  • type: element class each token converts into (str by default).
  • collection: Unset | list | tuple | set | frozenset | deque.
  • unique: bool, element-level set semantics; requires a collection.
  • required: bool, checked after the object is built.
  • default / parser: any object; checked by the metadata store, since a bad
    default or parser is a schema fault rather than a constructor misuse.

Cross-spec rules (unique names across properties, contiguous positional indexes,
default and literal types, parser contracts) belong to bindery.metadata.
"""
import builtins
import functools
import operator
import re
from collections import deque

from .utils import *

# Collection constructors a property may declare.
COLLECTIONS = (list, tuple, set, frozenset, deque)


class ArgumentType(type):
    """
    Metaclass that turns specs into introspectable, read-only descriptors.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics.
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
            - option(names=('-o', '--output'), type=<class 'str'>, ...)
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


def _sanitize_named_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the names of a named spec (Switch, Option).

    - names: required; each must be a string, non-empty after trimming and free
      of whitespace. Tokens are matched exactly, so no prefix style is imposed
      ("--name", "-n", "name" and "/n" are all valid triggers).
    - Duplicates inside one spec are rejected; order is preserved.

    Raises
    - TypeError: when names are missing or contain non-string entries.
    - ValueError: when a name is empty, contains whitespace, or repeats.
    """
    names = []
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif re.search(r"\s", name):
            raise ValueError(f"{cls.__typename__} names cannot contain whitespace")
        elif name in names:
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
        names.append(name)

    metadata["names"] = tuple(names)


def _sanitize_parametric_metadata(cls, metadata, /):
    """
    Internal: validate and normalize metadata for value-bearing specs.

    Scope
    - Option[_T] and Positional[_T]. Switch is not handled here.

    Responsibilities
    - type: must be a class (the element type tokens are converted into).
    - collection: Unset or one of list, tuple, set, frozenset, deque.
    - unique: only meaningful for collections.
    - required: coerced to bool.

    Explicitly not responsible for
    - default and parser: validated by the metadata store as schema faults.
    """
    if not isinstance(metadata["type"], builtins.type):
        raise TypeError(f"{cls.__typename__} 'type' must be a class")

    if (collection := metadata["collection"]) is not Unset and collection not in COLLECTIONS:
        raise TypeError(f"{cls.__typename__} 'collection' must be one of list, tuple, set, frozenset or deque")
    metadata["collection"] = coalesce(collection)

    metadata["unique"] = bool(metadata["unique"])
    if metadata["unique"] and metadata["collection"] is None:
        raise TypeError(f"{cls.__typename__} 'unique' requires a 'collection'")

    metadata["required"] = bool(metadata["required"])


class Switch(metaclass=ArgumentType):
    """
    Named, presence-only trigger that assigns a fixed literal.

    When any of its names appears as a token, the property receives `value`.
    The token that follows is never consumed.

    Parameters
    - names: one or more str, matched exactly against tokens.
    - value: literal assigned when triggered (True by default).
    - type: property type the literal (and default) must be an instance of;
      inferred from the literal when omitted.
    - default: value of the property when no switch fires. When omitted, a
      property whose triggers all assign the same bool defaults to its negation,
      any other to None.
    """

    __introspectable__ = (
        "names",
        "value",
        "type",
        "default",
    )

    def __init__(self, *names, value=True, type=Unset, default=Unset):
        metadata = {
            "names": names,
            "value": value,
            "type": type,
            "default": default,
        }
        _sanitize_named_metadata(builtins.type(self), metadata)

        if metadata["type"] is Unset and value is not None:
            metadata["type"] = builtins.type(value)
        elif not isinstance(metadata["type"], builtins.type | Unset):
            raise TypeError(f"{builtins.type(self).__typename__} 'type' must be a class")

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def is_collection(self):
        return False

    def __switch__(self):
        """
        Introspection hook: identify this spec as a Switch.
        """
        return self


class _Parametric(metaclass=ArgumentType):
    """
    Shared base of value-bearing specs (Option, Positional).
    """

    @property
    def is_collection(self):
        return self._collection is not None

    def _store(self, metadata):
        _sanitize_parametric_metadata(type(self), metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)


class Option[_T](_Parametric):
    """
    Named, value-bearing option specification.

    The token after one of its names is converted into `type`. With a
    `collection`, every following token up to the next switch or option name
    (or the end of input) is converted and collected.

    Parameters
    - names: one or more str, matched exactly against tokens.
    - type: element class (str by default).
    - collection: Unset | list | tuple | set | frozenset | deque.
    - unique: reject repeated elements with a duplicate-value fault.
    - default: value used when the option is absent (Unset → None, or an
      empty collection).
    - parser: custom converter, an object (or a class instantiated once) with a
      callable __convert__(token, type).
    - required: report a validation fault when the built value is None or empty.
    """

    __introspectable__ = (
        "names",
        "type",
        "collection",
        "unique",
        "default",
        "parser",
        "required",
    )

    def __init__(self, *names, type=str, collection=Unset, unique=False, default=Unset, parser=Unset, required=False):
        metadata = {
            "names": names,
            "type": type,
            "collection": collection,
            "unique": unique,
            "default": default,
            "parser": parser,
            "required": required,
        }
        _sanitize_named_metadata(builtins.type(self), metadata)
        self._store(metadata)

    def __option__(self):
        """
        Introspection hook: identify this spec as an Option.
        """
        return self


class Positional[_T](_Parametric):
    """
    Value-bearing argument bound by argument position.

    `index` counts positional arguments, not tokens: the first token that is not
    claimed by a switch fills index 0, the next one index 1, and so on. A
    collection positional greedily takes every token up to the next switch or
    option name.

    Parameters
    - index: int, 0-based argument position (indexes of one schema must be
      contiguous from 0).
    - type, collection, unique, default, parser, required: as for Option.
    """

    __introspectable__ = (
        "index",
        "type",
        "collection",
        "unique",
        "default",
        "parser",
        "required",
    )

    def __init__(self, index, /, type=str, collection=Unset, unique=False, default=Unset, parser=Unset, required=False):
        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError(f"{builtins.type(self).__typename__} 'index' must be an integer")
        self._index = index
        self._store({
            "type": type,
            "collection": collection,
            "unique": unique,
            "default": default,
            "parser": parser,
            "required": required,
        })

    def __positional__(self):
        """
        Introspection hook: identify this spec as a Positional.
        """
        return self


__all__ = (
    "Switch",
    "Option",
    "Positional",
    "COLLECTIONS",
)
