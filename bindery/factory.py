"""
Object factory: materialize the target object from the finalized value map.

Every declared property becomes one keyword argument of the target:
- the supplied value (collections rebuilt with the declared constructor),
- else a copy of the declared default (collections copied into the constructor),
- else the zero value: None for scalars, an empty collection for collections.

The target may be any callable accepting the property names as keyword
arguments (a dataclass, a plain class, a function); types.SimpleNamespace is
used when none is given. Whether the target accepts exactly the declared
properties is checked once, at construction, as a schema fault.
"""
import copy
import inspect
import logging
from types import SimpleNamespace

from .faults import DeclarationError, InvalidSchemaError
from .utils import Unset

logger = logging.getLogger(__name__)


class OptionsFactory:

    def __init__(self, target, store, /):
        target = target if target is not Unset else SimpleNamespace
        if not callable(target):
            raise TypeError("OptionsFactory 'target' must be callable")
        self._target = target
        self._store = store

        if target is not SimpleNamespace:
            self._check_signature()

    def _check_signature(self):
        try:
            signature = inspect.signature(self._target)
        except (TypeError, ValueError):
            # builtins and some extension types are not inspectable; trust them
            return
        try:
            signature.bind(**dict.fromkeys(self._store.declared))
        except TypeError as exception:
            raise InvalidSchemaError([DeclarationError(
                "target %s does not accept the declared properties (%s)" % (
                    getattr(self._target, "__qualname__", repr(self._target)), exception
                ),
                hint="declare exactly the keyword arguments the target accepts",
            )]) from None

    @property
    def target(self):
        return self._target

    def initial(self, property, /):
        """
        Value of `property` when nothing was supplied for it.
        """
        if property.is_collection:
            if property.default is Unset or property.default is None:
                return property.collection() if property.default is Unset else None
            return property.collection(property.default)
        if property.default is Unset:
            return None
        return copy.copy(property.default)

    def resolve(self, values, /):
        """
        Keyword arguments of the target for a mapping of supplied values keyed
        by property name, one per declared property.
        """
        arguments = {}
        for property in self._store:
            try:
                value = values[property.name]
            except KeyError:
                arguments[property.name] = self.initial(property)
                continue
            arguments[property.name] = property.collection(value) if property.is_collection else value
        return arguments

    def create(self, arguments, /):
        logger.debug("building %s with %d argument(s)", getattr(self._target, "__qualname__", self._target), len(arguments))
        return self._target(**arguments)

    def build(self, values, /):
        """
        Build the target from a mapping of supplied values keyed by property name.
        """
        return self.create(self.resolve(values))


__all__ = (
    "OptionsFactory",
)
