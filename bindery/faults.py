"""
Bindery faults (input and schema errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by family so logs/searches stay predictable.
- InputFault: one defect in the supplied tokens (user mistake). The engine
  collects every input fault found in a pass and raises them together as
  InvalidInputError.
- SchemaFault: one defect in the declared metadata (author mistake). The
  metadata store collects them while building and raises them together as
  InvalidSchemaError, before any token is scanned.
- trigger(): central entry point to surface an aggregate (raise, or render and
  exit when running in shell mode).
- getdoc(): documentation string the host registered for a code, if any.

UX goals
- Position-first messages: input messages include the ordinal position of the
  offending token (“at third position”).
- Every fault has a short title, a one-sentence lowercased body and one hint.
- Colors come from the class palette, overridable through __styles__ in __main__.
"""
import copy
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the library (stable identifiers).

    grouping (by family)
    - input (11xxx): problems in the token array, reported all at once
      • UNKNOWN_TOKEN, MISSING_OPTION_VALUE, INVALID_VALUE, DUPLICATE_VALUE,
        VALIDATION_FAILURE
    - schema (13xxx): problems in the declared metadata, fatal to the schema
      • DUPLICATE_NAME, POSITIONAL_INDEX, DEFAULT_TYPE, SWITCH_VALUE_TYPE,
        PARSER_CONTRACT, DECLARATION

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- input errors (11xxx) ---
    UNKNOWN_TOKEN               = 11101
    MISSING_OPTION_VALUE        = 11102
    INVALID_VALUE               = 11111
    DUPLICATE_VALUE             = 11121
    VALIDATION_FAILURE          = 11131

    # --- schema errors (13xxx) ---
    DUPLICATE_NAME              = 13101
    POSITIONAL_INDEX            = 13111
    DEFAULT_TYPE                = 13121
    SWITCH_VALUE_TYPE           = 13122
    PARSER_CONTRACT             = 13131
    DECLARATION                 = 13141

    def normalize(self):
        """
        label of this code as shown to users.

        a __codes__ mapping in __main__ (code → label) overrides the default,
        which is the numeric value.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _prog(options):
    main = __import__("__main__")
    return getattr(main, "__prog__", options.get("prog") or os.path.basename(sys.argv[0]) or "bindery")


class Fault(Exception):
    """
    base for every individual fault.

    a fault carries a lowercased message plus a read-only bag of options:
    - title, code, hint: copy used by the renderer (class defaults apply).
    - colorful, fancy, prog, ratio: rendering switches.
    - anything else the reporter wants to expose (token, index, property, ...).

    faults support copy.replace(fault, **overrides) so the renderer can adjust
    options without mutating the original.
    """
    title = "fault"
    code = Unset
    hint = ""
    palette = {}

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({
            "title": type(self).title,
            "code": type(self).code,
            "hint": type(self).hint,
            "colorful": True,
            "fancy": False,
        } | options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else self.options["title"]

    def __rich__(self):
        styles = defaultdict(str, type(self).palette | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self.options["colorful"] else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(_prog(self.options), styler("prog-name"))
        code = self.options["code"]

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else "", styler("code")),
            " | ",
            text(self.options["title"].title(), styler("title")),
            " ]"
        )
        message = text(str(self), styler("message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options["hint"], styler("hint")))

        if self.options["fancy"]:
            width = console.width - 4
            try:
                width = int(width * self.options["ratio"])
            except KeyError:
                width = None
            return Panel(Group(message, hint), title=header, title_align="left", width=width)

        return Group(header, message, hint)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class InputFault(Fault):
    """
    one defect in the supplied tokens, relative to a valid schema.
    """
    title = "invalid input"
    palette = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #00E5FF",  # cyan for input mistakes
        "title": "bold #FF4DA6",
        "message": "#C8C8D0",
        "hint-arrow": "#9CE19C dim",
        "hint": "italic #9CE19C",
    }

    @property
    def index(self):
        """1-based token position, or None when the fault is not tied to a token."""
        return self.options.get("index")


class UnknownTokenError(InputFault):
    title = "unknown token"
    code = FaultCode.UNKNOWN_TOKEN

    @property
    def token(self):
        return self.options["token"]

    @property
    def suggestions(self):
        return tuple(self.options.get("suggestions", ()))


class InvalidValueError(InputFault):
    title = "invalid value"
    code = FaultCode.INVALID_VALUE

    @property
    def token(self):
        return self.options["token"]

    @property
    def reason(self):
        return self.options.get("reason")

    @property
    def property(self):
        return self.options["property"]


class DuplicateValueError(InputFault):
    title = "duplicate value"
    code = FaultCode.DUPLICATE_VALUE

    @property
    def property(self):
        return self.options["property"]


class ValidationFailureError(InputFault):
    title = "validation failure"
    code = FaultCode.VALIDATION_FAILURE


class SchemaFault(Fault):
    """
    one defect in the declared metadata (independent of any input).
    """
    title = "invalid schema"
    palette = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #FFB400",  # amber fault code for author mistakes
        "title": "bold #FFC2E0",
        "message": "#D6D6DE",
        "hint-arrow": "#B8EFAF dim",
        "hint": "italic #B8EFAF",
    }

    @property
    def property(self):
        return self.options.get("property")


class DuplicateNameError(SchemaFault):
    title = "duplicate name"
    code = FaultCode.DUPLICATE_NAME
    hint = "give every switch and option a name of its own"


class PositionalIndexError(SchemaFault):
    title = "bad positional index"
    code = FaultCode.POSITIONAL_INDEX
    hint = "number positionals 0, 1, 2, ... without gaps or repeats"


class DefaultTypeError(SchemaFault):
    title = "bad default"
    code = FaultCode.DEFAULT_TYPE
    hint = "make the default an instance of the declared type"


class SwitchValueTypeError(SchemaFault):
    title = "bad switch value"
    code = FaultCode.SWITCH_VALUE_TYPE
    hint = "make every switch value an instance of the property type"


class ParserContractError(SchemaFault):
    title = "bad value parser"
    code = FaultCode.PARSER_CONTRACT
    hint = "custom parsers must define a callable __convert__(token, type)"


class DeclarationError(SchemaFault):
    title = "bad declaration"
    code = FaultCode.DECLARATION


class _Aggregate:
    """
    shared behavior of the two aggregate conditions (rendering and triggering).
    """
    heading = "bad exit"
    palette = {
        "prog-name": "bold #E6E6F0",
        "title": "bold #FF4DA6",
    }

    @property
    def errors(self):
        """the individual faults, in the order they were recorded."""
        return self.exceptions

    def __rich__(self):
        styles = defaultdict(str, type(self).palette | getattr(__import__("__main__"), "__styles__", {}))
        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            return Text(str(fragment), styles[style] if colorful else "")

        header = Text.assemble("[ ", text(_prog(self.options), "prog-name"), " — ", text(self.message.title(), "title"), " ]")

        renders = []
        for exception in self.exceptions:
            renders.append(copy.replace(exception, ratio=2/3, colorful=colorful, fancy=self.options.get("fancy", False), prog=self.options.get("prog")))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(2)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


class InvalidInputError(_Aggregate, ExceptionGroup[InputFault]):
    """
    every input fault found in one parse call, in recorded order.
    """
    heading = "invalid input"

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, cls.heading, tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__(type(self).heading, tuple(exceptions))
        self.options = MappingProxyType(options)


class InvalidSchemaError(_Aggregate, ExceptionGroup[SchemaFault]):
    """
    every schema fault found while building the metadata of a target type.
    """
    heading = "invalid schema"
    palette = {
        "prog-name": "bold #E6E6F0",
        "title": "bold #FFB400",
    }

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, cls.heading, tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__(type(self).heading, tuple(exceptions))
        self.options = MappingProxyType(options)


def trigger(fault, /, **options):
    """
    surface an aggregate fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods.
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode, rendering happens via the rich console and the process
      exits with status 2; otherwise the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    documentation of a fault code from the __docs__ mapping in __main__
    (FaultCode → str), or None when the host registered nothing for it.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "Fault",
    "InputFault",
    "UnknownTokenError",
    "InvalidValueError",
    "DuplicateValueError",
    "ValidationFailureError",
    "SchemaFault",
    "DuplicateNameError",
    "PositionalIndexError",
    "DefaultTypeError",
    "SwitchValueTypeError",
    "ParserContractError",
    "DeclarationError",
    "InvalidInputError",
    "InvalidSchemaError",
    "trigger",
    "getdoc",
)
