"""
Options validator: semantic rules run once the target object is built.

Rules, in order
- required: the keyword argument the target received for the property is None
  (or an empty collection).
- conflicts: in each mutually exclusive group, more than one keyword argument
  differs from its initial value (declared default or zero value).
- rules: user callables rule(obj) returning None, a message, or an iterable
  of messages.
- __validate__: the target's own hook, with the same return contract.

Required and conflicts read the keyword arguments, not attributes of the
object, so targets returning dicts or tuples are checked the same way.

Every message becomes one validation-failure fault in the parsing context; an
empty result means the object is valid.
"""
import logging
from collections.abc import Iterable

from .metadata import Kind

logger = logging.getLogger(__name__)


def _messages(result, /):
    if result is None:
        return
    if isinstance(result, str):
        yield result
        return
    if not isinstance(result, Iterable):
        raise TypeError("validation rules must return None, a string or an iterable of strings")
    for message in result:
        yield str(message)


def _label(property, /):
    if property.kind is Kind.POSITIONAL:
        return "positional %d" % property.index
    return "%s %r" % (property.kind.value, property.names[0])


class OptionsValidator:

    def __init__(self, store, factory, /, rules=()):
        if not isinstance(rules, Iterable) or isinstance(rules, str):
            raise TypeError("OptionsValidator 'rules' must be an iterable of callables")
        rules = tuple(rules)
        for rule in rules:
            if not callable(rule):
                raise TypeError("OptionsValidator 'rules' must be an iterable of callables")
        self._store = store
        self._factory = factory
        self._rules = rules

    @property
    def rules(self):
        return self._rules

    def validate(self, obj, arguments, /):
        """
        Yield one message per broken rule (nothing when `obj` is valid).

        `arguments` are the keyword arguments `obj` was built from.
        """
        for property in self._store:
            if not property.required:
                continue
            value = arguments.get(property.name)
            if value is None or (property.is_collection and not value):
                yield "%s is required" % _label(property)

        for group in self._store.conflicts:
            used = [
                name for name in group
                if arguments.get(name) != self._factory.initial(self._store[name])
            ]
            if len(used) > 1:
                yield "%s cannot be used together" % " and ".join(_label(self._store[name]) for name in used)

        for rule in self._rules:
            yield from _messages(rule(obj))

        if callable(hook := getattr(obj, "__validate__", None)):
            yield from _messages(hook())

        logger.debug("validated %s", type(obj).__name__)


__all__ = (
    "OptionsValidator",
)
