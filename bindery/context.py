"""
Per-call parsing context: value slots plus the ordered fault list.

One context is created for every parse call and dropped when it returns, so
nothing leaks between calls. Each declared property owns one slot:

- scalar slot: holds at most one value; a second assignment is refused and
  recorded as a duplicate-value fault (the first value is kept).
- collection slot: an ordered list of values, appended to.

Faults are recorded here with position-first messages (1-based token index)
and never raised individually; the engine raises them together at the end.
"""
import logging
from types import MappingProxyType

from .faults import *
from .metadata import Kind
from .utils import ordinal

logger = logging.getLogger(__name__)


def _describe(property, /):
    return "%s %r" % (property.kind.value, property.names[0] if property.names else property.name)


class ParsingContext:

    def __init__(self, store, /):
        self._store = store
        self._values = {}
        self._faults = []

    @property
    def faults(self):
        """recorded faults, in order."""
        return tuple(self._faults)

    @property
    def has_faults(self):
        return bool(self._faults)

    def supplied(self, property, /):
        """True when the slot of `property` holds a value."""
        return property.name in self._values

    def collected(self, property, /):
        """values already collected for a collection property (empty for scalars)."""
        if not property.is_collection:
            return ()
        return tuple(self._values.get(property.name, ()))

    def assign(self, property, value, /, *, index):
        """
        Store a scalar value, or append to a collection.

        Returns False (and records a duplicate-value fault) when a scalar slot
        is already occupied.
        """
        if property.is_collection:
            self._values.setdefault(property.name, []).append(value)
            return True
        if property.name in self._values:
            self.add_duplicate(property, index=index)
            return False
        self._values[property.name] = value
        return True

    def add_unknown(self, token, /, *, index, suggestions=()):
        if suggestions:
            hint = "did you mean %r?" % suggestions[0]
        else:
            hint = "remove it, or declare a switch, option or positional for it"
        self._record(UnknownTokenError(
            "unknown token %r at %s position" % (token, ordinal(index)),
            hint=hint,
            token=token,
            index=index,
            suggestions=tuple(suggestions),
        ))

    def add_missing_value(self, token, /, *, index):
        self._record(UnknownTokenError(
            "option %r at %s position is missing its value" % (token, ordinal(index)),
            title="missing option value",
            code=FaultCode.MISSING_OPTION_VALUE,
            hint="pass a value after it (for example: %s <value>)" % token,
            token=token,
            index=index,
        ))

    def add_invalid(self, property, token, /, *, index, reason=None):
        if property.type is not None:
            hint = "pass a value that converts to %s" % property.type.__name__
        else:
            hint = "pass a value the property accepts"
        self._record(InvalidValueError(
            "invalid value %r for %s at %s position%s" % (
                token, _describe(property), ordinal(index), " (%s)" % reason if reason else ""
            ),
            hint=hint,
            property=property.name,
            token=token,
            index=index,
            reason=reason,
        ))

    def add_duplicate(self, property, /, *, index, value=None):
        if property.is_collection:
            message = "value %r for %s at %s position was already provided" % (value, _describe(property), ordinal(index))
            hint = "keep a single occurrence of each value"
        elif property.kind is Kind.SWITCH:
            message = "switch for property %r at %s position was already provided" % (property.name, ordinal(index))
            hint = "keep a single switch; each property can be set only once"
        else:
            message = "%s at %s position was already provided" % (_describe(property), ordinal(index))
            hint = "keep a single %s; it can be specified only once" % property.kind.value
        self._record(DuplicateValueError(
            message,
            hint=hint,
            property=property.name,
            index=index,
            value=value,
        ))

    def add_validation(self, message, /):
        self._record(ValidationFailureError(
            str(message),
            hint="adjust the arguments so the rule holds",
        ))

    def _record(self, fault):
        logger.debug("recorded %s: %s", type(fault).__name__, fault)
        self._faults.append(fault)

    def finalize(self):
        """
        Return the supplied values keyed by property name (collections as tuples).
        """
        return MappingProxyType({
            name: tuple(value) if self._store[name].is_collection else value
            for name, value in self._values.items()
        })


__all__ = (
    "ParsingContext",
)
