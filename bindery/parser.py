"""
Binding engine: walk the tokens, classify each one, accumulate typed values,
build the target object, validate it and report every fault at once.

Classification (first match wins, at each cursor position)
1. switch: the token is a declared switch trigger; its literal is assigned and
   nothing else is consumed.
2. positional: a positional is declared at the current argument count. This
   runs before the option check, so an option name standing where a scalar
   positional is expected becomes that positional's value. Collections consume
   greedily (nothing, when the token is itself a keyword).
3. option: the token is a declared option name and another token follows.
   Scalars take that token; collections consume greedily from it.
4. otherwise the token is unknown (an option name at the very end is reported
   as missing its value) and scanning continues.

Greedy consumption stops in front of the next switch trigger or option name
(the outer loop then reclassifies it) or at the end of the tokens. Conversion
failures and duplicates inside a collection are recorded and consumption goes on.

Once the tokens are exhausted the target is built from the collected values,
the validator runs against it, and a non-empty fault list is raised as
InvalidInputError. Schema faults are raised as InvalidSchemaError when the
parser is constructed, before any token exists.
"""
import difflib
import logging
import shlex
import sys
from collections.abc import Iterable

from .context import ParsingContext
from .factory import OptionsFactory
from .faults import InvalidInputError, InvalidSchemaError, trigger
from .metadata import MetadataStore
from .utils import Unset, coalesce
from .validation import OptionsValidator
from .values import Parsed, Duplicate, Invalid, ValueParserSelector

logger = logging.getLogger(__name__)


def _tokens(tokens, caller, /):
    if isinstance(tokens, str) or not isinstance(tokens, Iterable):
        raise TypeError(f"{caller}() argument must be an iterable of strings")
    tokens = list(tokens)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError(f"{caller}() argument must be an iterable of strings")
    return tokens


class OptionsParser:
    """
    Reusable parser binding token arrays onto one target type.

    Parameters
    - target: callable building the result from keyword arguments, one per
      declared property (a dataclass, a class, a function). SimpleNamespace
      when omitted.
    - conflicts: groups of property names that cannot be used together.
    - rules: callables rule(obj) returning None, a message or messages.
    - factory: callable instantiating custom parser classes (default: cls()).
    - prog: program name shown in rendered faults.
    - shell, colorful, fancy: rendering switches used by run().
    - **properties: property name → Switch | Option | Positional, or a
      sequence of Switch.

    The schema is validated here; InvalidSchemaError is raised with every
    schema fault found. The parser is read-only afterwards and can be shared.
    """

    def __init__(
            self,
            target=Unset,
            /,
            *,
            conflicts=(),
            rules=(),
            factory=Unset,
            prog=Unset,
            shell=False,
            colorful=True,
            fancy=False,
            **properties
    ):
        if not isinstance(prog, str | Unset):
            raise TypeError("OptionsParser 'prog' must be a string")

        self._store = MetadataStore(properties, conflicts=conflicts, strict=False)
        faults = list(self._store.faults)
        try:
            self._selector = ValueParserSelector(self._store, factory=coalesce(factory))
        except InvalidSchemaError as error:
            faults.extend(error.exceptions)
        try:
            self._factory = OptionsFactory(target, self._store)
        except InvalidSchemaError as error:
            faults.extend(error.exceptions)
        if faults:
            logger.debug("parser rejected with %d schema fault(s)", len(faults))
            raise InvalidSchemaError(faults)
        self._validator = OptionsValidator(self._store, self._factory, rules=rules)

        self._prog = coalesce(prog)
        self._shell = bool(shell)
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)

    @property
    def target(self):
        return self._factory.target

    @property
    def store(self):
        return self._store

    @property
    def prog(self):
        return self._prog

    @property
    def shell(self):
        return self._shell

    @property
    def colorful(self):
        return self._colorful

    @property
    def fancy(self):
        return self._fancy

    def _bind(self, property, token, position, context, /):
        parser = self._selector.get(property)
        match parser.parse(token, context.collected(property)):
            case Parsed(value):
                context.assign(property, value, index=position)
            case Duplicate(value):
                context.add_duplicate(property, index=position, value=value)
            case Invalid(reason):
                context.add_invalid(property, token, index=position, reason=reason)

    def _consume(self, property, tokens, cursor, context, /):
        """
        Feed tokens to a collection property from `cursor` until a keyword or
        the end; return the cursor of the first token left unconsumed.
        """
        start = cursor
        while cursor < len(tokens) and not self._store.is_keyword(tokens[cursor]):
            self._bind(property, tokens[cursor], cursor + 1, context)
            cursor += 1
        logger.debug("%r consumed %d token(s) from position %d", property.name, cursor - start, start + 1)
        return cursor

    def _scan(self, tokens, context, /):
        cursor = 0
        arguments = 0

        while cursor < len(tokens):
            token = tokens[cursor]
            position = cursor + 1

            if (binding := self._store.switch(token)) is not None:
                logger.debug("%r at position %d is a switch of %r", token, position, binding.property.name)
                context.assign(binding.property, binding.value, index=position)
                cursor += 1
                continue

            if (property := self._store.positional(arguments)) is not None:
                logger.debug("%r at position %d is positional %d", token, position, arguments)
                arguments += 1
                if property.is_collection:
                    cursor = self._consume(property, tokens, cursor, context)
                else:
                    self._bind(property, token, position, context)
                    cursor += 1
                continue

            if (property := self._store.option(token)) is not None:
                if cursor + 1 < len(tokens):
                    logger.debug("%r at position %d is an option of %r", token, position, property.name)
                    if property.is_collection:
                        cursor = self._consume(property, tokens, cursor + 1, context)
                    else:
                        self._bind(property, tokens[cursor + 1], position + 1, context)
                        cursor += 2
                    continue
                context.add_missing_value(token, index=position)
                cursor += 1
                continue

            logger.debug("%r at position %d matches nothing", token, position)
            context.add_unknown(
                token,
                index=position,
                suggestions=difflib.get_close_matches(token, self._store.keywords, n=3),
            )
            cursor += 1

    def parse(self, tokens, /):
        """
        Bind `tokens` (an iterable of strings) onto a new target object.

        Raises
        - InvalidInputError: with every input fault, in the order found.
        - TypeError: when `tokens` is not an iterable of strings.
        """
        tokens = _tokens(tokens, "parse")
        context = ParsingContext(self._store)
        self._scan(tokens, context)

        arguments = self._factory.resolve(context.finalize())
        try:
            result = self._factory.create(arguments)
        except ValueError as exception:
            # the target rejected the values itself (e.g. __post_init__ checks)
            context.add_validation(str(exception) or "%s rejected the values" % type(exception).__name__)
        else:
            for message in self._validator.validate(result, arguments):
                context.add_validation(message)

        if context.has_faults:
            logger.info("parsing %d token(s) failed with %d fault(s)", len(tokens), len(context.faults))
            raise InvalidInputError(
                context.faults,
                prog=self._prog,
                colorful=self._colorful,
                fancy=self._fancy,
            )

        logger.debug("parsed %d token(s)", len(tokens))
        return result

    def run(self, prompt=Unset, /):
        """
        Parse a host prompt and return the target object.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string, split via shlex.split.
          • Iterable[str]: pre-tokenized sequence.

        In shell mode, input faults are rendered to stderr and the process
        exits with status 2; otherwise InvalidInputError is raised.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        else:
            tokens = _tokens(prompt, "run")

        try:
            return self.parse(tokens)
        except InvalidInputError as error:
            trigger(error, shell=self._shell)

    def __repr__(self):
        return f"options-parser(target={self.target!r}, properties={tuple(p.name for p in self._store)!r})"


def parse(target, tokens, /, **properties):
    """
    One-shot convenience: OptionsParser(target, **properties).parse(tokens).
    """
    return OptionsParser(target, **properties).parse(tokens)


__all__ = (
    "OptionsParser",
    "parse",
)
