"""
Metadata store: the validated, read-only schema of one target type.

The store is built once from explicit declarations ({property name: spec}) and
then only queried. Building it is where every schema rule is enforced; all
violations are collected and raised together as InvalidSchemaError, so a broken
schema fails before any token is ever scanned.

Rules
- each property resolves to exactly one kind: a Switch (or a sequence of
  Switch specs), an Option, or a Positional.
- switch triggers and option names are unique across all properties.
- positional indexes are unique, contiguous and start at 0.
- declared defaults and switch literals are instances of the property type.
- custom parsers provide a callable __convert__(token, type).
- mutually exclusive groups name at least two distinct, declared properties.

Queries used by the engine
- switch(token)      → SwitchBinding | None
- positional(index)  → PropertyMetadata | None
- option(token)      → PropertyMetadata | None
- is_keyword(token)  → bool (any switch trigger or option name)
"""
import builtins
import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any, NamedTuple

from .arguments import Switch, Option, Positional
from .faults import *
from .utils import Unset
from .values import satisfies

logger = logging.getLogger(__name__)


class Kind(Enum):
    SWITCH = "switch"
    OPTION = "option"
    POSITIONAL = "positional"


class PropertyMetadata(NamedTuple):
    """
    Identity and binding rules of one target property.

    - name: property (keyword argument) name on the target type.
    - kind: Kind.SWITCH | Kind.OPTION | Kind.POSITIONAL.
    - names: switch triggers or option names (empty for positionals).
    - index: positional index (None for switches and options).
    - type: element type (None when a switch property has no inferable type).
    - collection: collection constructor, or None for scalars.
    - unique: element-level set semantics for collections.
    - default: declared default, or Unset when none was declared.
    - parser: custom parser (instance or class), or None.
    - required: checked after the object is built.
    - literals: trigger → literal value (switches only).
    """
    name: str
    kind: Kind
    names: tuple = ()
    index: int | None = None
    type: builtins.type | None = None
    collection: Any = None
    unique: bool = False
    default: Any = Unset
    parser: Any = None
    required: bool = False
    literals: Mapping = MappingProxyType({})

    @property
    def is_collection(self):
        return self.collection is not None

    def __repr__(self):
        return f"property-metadata(name={self.name!r}, kind={self.kind.value!r})"


class SwitchBinding(NamedTuple):
    """
    A trigger token and the literal it assigns to its property.
    """
    trigger: str
    value: Any
    property: PropertyMetadata


def _instance(value, cls, /):
    # numeric promotion: an int is an acceptable float, an int/float an acceptable complex
    if cls is float and isinstance(value, int) and not isinstance(value, bool):
        return True
    if cls is complex and isinstance(value, int | float) and not isinstance(value, bool):
        return True
    return isinstance(value, cls)


def _resolve(name, declaration, /):
    """
    Return the list of specs of one declaration, or raise DeclarationError.
    """
    def _spec(x):
        hooks = [hook for hook in ("__switch__", "__option__", "__positional__") if callable(getattr(x, hook, None))]
        if len(hooks) != 1:
            return None
        spec = getattr(x, hooks[0])()
        if not isinstance(spec, {"__switch__": Switch, "__option__": Option, "__positional__": Positional}[hooks[0]]):
            raise TypeError(f"{hooks[0]}() returned a non-{hooks[0].strip("_")} object")
        return spec

    if (spec := _spec(declaration)) is not None:
        return [spec]

    if isinstance(declaration, Iterable) and not isinstance(declaration, str | bytes | Mapping):
        specs = list(map(_spec, declaration))
        if specs and all(isinstance(spec, Switch) for spec in specs):
            return specs
        if any(isinstance(spec, Option | Positional) for spec in specs):
            raise DeclarationError(
                "property %r mixes kinds; only switches can be grouped" % name,
                property=name,
                hint="declare one option or positional per property",
            )

    raise DeclarationError(
        "property %r must be declared with a switch, an option or a positional" % name,
        property=name,
        hint="use Switch(...), Option(...), Positional(...) or a sequence of Switch(...)",
    )


def _check_default(metadata, faults, /):
    if metadata.default is Unset or metadata.default is None or metadata.type is None:
        return
    if metadata.is_collection:
        if isinstance(metadata.default, str | bytes) or not isinstance(metadata.default, Iterable):
            faults.append(DefaultTypeError(
                "default of collection property %r must be an iterable, got %s" % (
                    metadata.name, type(metadata.default).__name__
                ),
                property=metadata.name,
            ))
            return
        for item in metadata.default:
            if not _instance(item, metadata.type):
                faults.append(DefaultTypeError(
                    "default of property %r holds %r, which is not a %s" % (
                        metadata.name, item, metadata.type.__name__
                    ),
                    property=metadata.name,
                ))
                return
    elif not _instance(metadata.default, metadata.type):
        faults.append(DefaultTypeError(
            "default %r of property %r is not a %s" % (metadata.default, metadata.name, metadata.type.__name__),
            property=metadata.name,
        ))


def _build_switch(name, specs, faults, /):
    literals = {}
    for spec in specs:
        for trigger in spec.names:
            if trigger in literals:
                faults.append(DuplicateNameError(
                    "switch name %r is declared twice for property %r" % (trigger, name),
                    property=name,
                    name=trigger,
                ))
                continue
            literals[trigger] = spec.value

    cls = next((spec.type for spec in specs if spec.type is not Unset), None)
    for trigger, value in literals.items():
        if cls is not None and value is not None and not _instance(value, cls):
            faults.append(SwitchValueTypeError(
                "switch %r of property %r assigns %r, which is not a %s" % (trigger, name, value, cls.__name__),
                property=name,
                name=trigger,
            ))

    defaults = []
    for spec in specs:
        if spec.default is not Unset and spec.default not in defaults:
            defaults.append(spec.default)
    if len(defaults) > 1:
        faults.append(DeclarationError(
            "switches of property %r declare conflicting defaults %s" % (name, ", ".join(map(repr, defaults))),
            property=name,
            hint="declare the default on a single switch",
        ))

    if defaults:
        default = defaults[0]
    elif (values := set(map(repr, literals.values()))) and all(isinstance(value, bool) for value in literals.values()) and len(values) == 1:
        # a lone boolean literal defaults to its negation (--verbose → False, --no-color → True)
        default = not next(iter(literals.values()))
    else:
        default = Unset

    return PropertyMetadata(
        name=name,
        kind=Kind.SWITCH,
        names=tuple(literals),
        type=cls,
        default=default,
        literals=MappingProxyType(literals),
    )


def _build_parametric(name, spec, faults, /):
    positional = isinstance(spec, Positional)
    parser = spec.parser if spec.parser is not Unset else None
    if parser is not None and not satisfies(parser):
        faults.append(ParserContractError(
            "parser %r of property %r has no callable __convert__" % (parser, name),
            property=name,
        ))
        parser = None
    return PropertyMetadata(
        name=name,
        kind=Kind.POSITIONAL if positional else Kind.OPTION,
        names=() if positional else spec.names,
        index=spec.index if positional else None,
        type=spec.type,
        collection=spec.collection,
        unique=spec.unique,
        default=spec._default,
        parser=parser,
        required=spec.required,
    )


def _build_conflicts(conflicts, properties, faults, /):
    """
    Normalize mutually-exclusive property groups into a tuple of name tuples.
    """
    if not isinstance(conflicts, Iterable) or isinstance(conflicts, str):
        raise TypeError("'conflicts' must be an iterable of iterables of property names")

    groups = []
    for conflict in conflicts:
        if not isinstance(conflict, Iterable) or isinstance(conflict, str):
            raise TypeError("'conflicts' must be an iterable of iterables of property names")
        names = []
        for name in conflict:
            if not isinstance(name, str):
                raise TypeError("'conflicts' must be an iterable of iterables of property names")
            if name not in properties:
                faults.append(DeclarationError(
                    "conflicting group names unknown property %r" % name,
                    property=name,
                    hint="only declared properties can be mutually exclusive",
                ))
            elif name in names:
                faults.append(DeclarationError(
                    "conflicting group repeats property %r" % name,
                    property=name,
                ))
            else:
                names.append(name)
        if len(names) < 2:
            faults.append(DeclarationError(
                "conflicting groups must name at least two properties",
                hint="drop the group or add the properties it excludes",
            ))
            continue
        groups.append(tuple(names))
    return tuple(groups)


class MetadataStore:
    """
    Read-only schema of one target type.

    Parameters
    - declarations: Mapping[str, spec | Sequence[Switch]], in declaration order.
    - conflicts: Iterable[Iterable[str]] of mutually exclusive property names.

    - strict: raise the schema faults (default); when false, keep them in
      `faults` and build the store from the declarations that passed.

    Raises
    - InvalidSchemaError: with every schema fault found (strict only).
    - TypeError: when the declarations or conflicts have the wrong shape.
    """

    def __init__(self, declarations, /, *, conflicts=(), strict=True):
        if not isinstance(declarations, Mapping):
            raise TypeError("MetadataStore() argument must be a mapping of property names to specs")

        faults = []
        declared = []
        properties = {}
        switches = {}
        options = {}
        positionals = {}
        owners = {}

        for name, declaration in declarations.items():
            if not isinstance(name, str) or not name.isidentifier():
                faults.append(DeclarationError(
                    "property name %r is not a valid identifier" % (name,),
                    property=name,
                ))
                continue
            declared.append(name)
            try:
                specs = _resolve(name, declaration)
            except DeclarationError as fault:
                faults.append(fault)
                continue

            if isinstance(specs[0], Switch):
                metadata = _build_switch(name, specs, faults)
            else:
                metadata = _build_parametric(name, specs[0], faults)
            _check_default(metadata, faults)
            properties[name] = metadata

            for trigger in metadata.names:
                if (owner := owners.setdefault(trigger, name)) != name:
                    faults.append(DuplicateNameError(
                        "name %r of property %r is already used by property %r" % (trigger, name, owner),
                        property=name,
                        name=trigger,
                    ))
                    continue
                if metadata.kind is Kind.SWITCH:
                    switches[trigger] = SwitchBinding(trigger, metadata.literals[trigger], metadata)
                else:
                    options[trigger] = metadata

            if metadata.kind is Kind.POSITIONAL:
                positionals.setdefault(metadata.index, []).append(metadata)

        for index, claimants in sorted(positionals.items()):
            if len(claimants) > 1:
                faults.append(PositionalIndexError(
                    "positional index %d is declared by %s" % (index, ", ".join(repr(p.name) for p in claimants)),
                    property=claimants[1].name,
                    index=index,
                ))
        if sorted(positionals) != list(range(len(positionals))):
            faults.append(PositionalIndexError(
                "positional indexes must be contiguous from 0, got %s" % ", ".join(map(str, sorted(positionals))),
                indexes=tuple(sorted(positionals)),
            ))

        conflicts = _build_conflicts(conflicts, properties, faults)

        if faults:
            logger.debug("schema rejected with %d fault(s)", len(faults))
            if strict:
                raise InvalidSchemaError(faults)

        self._declared = tuple(declared)
        self._faults = tuple(faults)
        self._properties = MappingProxyType(properties)
        self._switches = MappingProxyType(switches)
        self._options = MappingProxyType(options)
        self._positionals = MappingProxyType({index: claimants[0] for index, claimants in positionals.items()})
        self._conflicts = conflicts
        logger.debug(
            "schema built: %d switch(es), %d option(s), %d positional(s)",
            len(switches), len(options), len(positionals)
        )

    @property
    def properties(self):
        """every PropertyMetadata, in declaration order."""
        return tuple(self._properties.values())

    @property
    def declared(self):
        """every declared property name, rejected declarations included."""
        return self._declared

    @property
    def faults(self):
        """schema faults kept by a non-strict store."""
        return self._faults

    @property
    def parametric(self):
        """options and positionals (the properties that convert tokens)."""
        return tuple(p for p in self._properties.values() if p.kind is not Kind.SWITCH)

    @property
    def keywords(self):
        """every switch trigger and option name."""
        return tuple(self._switches) + tuple(self._options)

    @property
    def conflicts(self):
        return self._conflicts

    def switch(self, token, /):
        return self._switches.get(token)

    def option(self, token, /):
        return self._options.get(token)

    def positional(self, index, /):
        return self._positionals.get(index)

    def is_keyword(self, token, /):
        return token in self._switches or token in self._options

    def __getitem__(self, name):
        return self._properties[name]

    def __contains__(self, name):
        return name in self._properties

    def __iter__(self):
        return iter(self._properties.values())

    def __len__(self):
        return len(self._properties)

    def __repr__(self):
        return f"metadata-store(properties={tuple(self._properties)!r})"


__all__ = (
    "Kind",
    "PropertyMetadata",
    "SwitchBinding",
    "MetadataStore",
)
