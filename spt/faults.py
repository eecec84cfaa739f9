"""
spt faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue
  raised by the grammar. Codes are grouped by pipeline stage so messages and
  logs stay searchable.
- CommandException / CommandWarning: a message plus read-only keyword options
  (code, title, hint, flag/group context), renderable with rich.
- RoutingError / ParseError / ValidationError / BuildError: one family per stage
  (router, flag schema, group constraints, action builder).
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): per-code documentation supplied by the host through __main__.

Integration
- Pipeline functions raise faults directly; they are pure and never print.
- The router merges its runtime options into the fault and calls trigger():
  in non-shell mode the fault is re-raised, in shell mode it is rendered on
  stderr with rich and the process exits with status 1.
- Every fault names the offending flag or group and the rule it broke; the
  first violated rule wins, faults are never aggregated.
"""
import copy
import inspect
import sys
import warnings
from abc import ABC
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
    canonical fault codes used across the grammar (stable identifiers).

    grouping (by pipeline stage)
    - routing (111xx)
      • UNKNOWN_COMMAND, MISSING_COMMAND
    - flag schema / syntax (112xx)
      • MALFORMED_TOKEN, UNKNOWN_SWITCH, FLAG_ASSIGNMENT, OPTION_VALUE_REQUIRED,
        DUPLICATED_SWITCH, UNCASTABLE_VALUE, UNEXPECTED_CARDINAL,
        MISSING_CARDINALS, EMPTY_VALUE
    - group constraints (113xx)
      • MUTUALLY_EXCLUSIVE, INCOMPLETE_GROUP, MISSING_REQUIRED, GROUP_CONFLICT
    - action builder (114xx)
      • MISSING_COMPANION, INCOMPATIBLE_FLAGS, OUT_OF_BOUNDS,
        UNRESOLVED_SELECTION
    - warnings (12xxx)
      • REPEATED_FLAG
    """
    # --- routing errors ---
    UNKNOWN_COMMAND             = 11101
    MISSING_COMMAND             = 11102

    # --- syntax errors ---
    MALFORMED_TOKEN             = 11201
    UNKNOWN_SWITCH              = 11202
    FLAG_ASSIGNMENT             = 11203
    OPTION_VALUE_REQUIRED       = 11204
    DUPLICATED_SWITCH           = 11205
    UNCASTABLE_VALUE            = 11206
    UNEXPECTED_CARDINAL         = 11207
    MISSING_CARDINALS           = 11208
    EMPTY_VALUE                 = 11209

    # --- validation errors ---
    MUTUALLY_EXCLUSIVE          = 11301
    INCOMPLETE_GROUP            = 11302
    MISSING_REQUIRED            = 11303
    GROUP_CONFLICT              = 11304

    # --- build errors ---
    MISSING_COMPANION           = 11401
    INCOMPATIBLE_FLAGS          = 11402
    OUT_OF_BOUNDS               = 11403
    UNRESOLVED_SELECTION        = 11404

    # --- warnings ---
    REPEATED_FLAG               = 12201

    def normalize(self):
        """
        the label shown for this code: __main__.__codes__[code] when the host
        defines it, the number otherwise.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, /):
    """
    build the rich renderable shared by errors and warnings.

    the palette provides the default colors; the host may override any key
    through a __styles__ mapping in __main__. missing options fall back to
    plain, colorless output so raised faults still render in tests.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", False)
    fancy = options.get("fancy", False)
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment if colorful else Text(str(fragment))
        return Text(str(fragment), styles[style] if colorful else "")

    tool = options.get("tool")
    prog = getattr(main, "__prog__", getattr(tool, "name", "spt"))
    code = options.get("code")

    header = Text.assemble(
        "[ ",
        text(prog, "prog-name"),
        " · ",
        text(code.normalize() if isinstance(code, FaultCode) else "", "code"),
        " | ",
        text(str(options.get("title", "")).title(), "title"),
        " ]"
    )
    message = text(fault.message, "message")
    hint = Text.assemble(text(" → ", "hint-arrow"), text(options.get("hint"), "hint"))
    body = [message, hint]
    if docs := options.get("docs"):
        body.append(Text.assemble(text(" ⓘ ", "docs-icon"), text(docs, "docs")))

    if fancy:
        width = console.width - 4
        try:
            width = int(width * options["ratio"])
        except KeyError:
            width = None
        return Panel(Group(*body), title=header, title_align="left", width=width)

    return Group(header, *body)


class CommandException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message if message is not Unset else "")
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # friendly pinky title
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
            "docs-icon": "#7FB2FF",
            "docs": "#7FB2FF",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class RoutingError(CommandException): ...
class ParseError(CommandException): ...
class ValidationError(CommandException): ...
class BuildError(CommandException): ...


class UnknownCommandError(RoutingError): ...
class MissingCommandError(RoutingError): ...

class MalformedTokenError(ParseError): ...
class UnknownSwitchError(ParseError): ...
class FlagAssignmentError(ParseError): ...
class OptionValueRequiredError(ParseError): ...
class DuplicatedSwitchError(ParseError): ...
class UncastableValueError(ParseError): ...
class UnexpectedCardinalError(ParseError): ...
class MissingCardinalsError(ParseError): ...
class EmptyValueError(ParseError): ...

class MutuallyExclusiveError(ValidationError): ...
class IncompleteGroupError(ValidationError): ...
class MissingRequiredError(ValidationError): ...
class GroupConflictError(ValidationError): ...

class MissingCompanionError(BuildError): ...
class IncompatibleFlagsError(BuildError): ...
class OutOfBoundsError(BuildError): ...
class UnresolvedSelectionError(BuildError): ...


class CommandWarning(ABC, Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message if message is not Unset else "")
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
            "docs-icon": "#7FB2FF",
            "docs": "#7FB2FF",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class RepeatedFlagWarning(CommandWarning): ...


def trigger(fault, /, **options):
    """
    merge runtime options into a copy of `fault` and surface it.

    - errors are raised, warnings go through the warnings module; with
      shell=True both are printed on stderr and errors exit with status 1.
    - the fault only needs __trigger__ and __replace__.

    typical options
    - tool, shell, fancy, colorful, title, code, hint, docs, and any context
      the reporter may want to show (flag, group, flags, index, token).
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
    documentation of a fault code from __main__.__docs__, or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "CommandException",
    "RoutingError",
    "ParseError",
    "ValidationError",
    "BuildError",
    "UnknownCommandError",
    "MissingCommandError",
    "MalformedTokenError",
    "UnknownSwitchError",
    "FlagAssignmentError",
    "OptionValueRequiredError",
    "DuplicatedSwitchError",
    "UncastableValueError",
    "UnexpectedCardinalError",
    "MissingCardinalsError",
    "EmptyValueError",
    "MutuallyExclusiveError",
    "IncompleteGroupError",
    "MissingRequiredError",
    "GroupConflictError",
    "MissingCompanionError",
    "IncompatibleFlagsError",
    "OutOfBoundsError",
    "UnresolvedSelectionError",
    "CommandWarning",
    "RepeatedFlagWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
