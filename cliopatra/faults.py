"""
Cliopatra faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing issue, grouped by
  domain (declaration, resolution, matching, conventions).
- CommandException / CommandWarning: base types that carry a message plus options
  (code, title, hint and any context such as key/name/index) and know how to
  render themselves with rich.
- CommandExit: an exception group bundling the faults of one validation sweep.
- trigger(): central entry point to surface a fault (raise, or print in shell mode).

Contract
- Parameter accessors raise these faults directly; the matching engine never does.
- Coercion failures (int/float parsing) are NOT wrapped: they surface as the
  ValueError raised by the parser, so "absent" (MissingValueError) and
  "malformed" (ValueError) stay distinguishable.
- Programming-contract violations (e.g. set_flag() on an option) raise TypeError
  and are deliberately outside this hierarchy.

Integration
- In non-shell mode trigger() raises; in shell mode it prints via rich on stderr
  and exits with status 1 (unless deferred).
- The host may customize rendering through __prog__, __styles__ and __codes__
  defined in __main__.
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
    canonical fault codes (stable identifiers).

    grouping
    - declaration (2110x): EMPTY_KEY, INVALID_NAME, EMPTY_ENV_DEFAULT_NAME,
      EMPTY_CONFIG_DEFAULT_NAME
    - resolution (2111x): ARGUMENT_MISSING, OPTION_MISSING, FLAG_MISSING,
      OPTION_VALUE_MISSING
    - matching (2112x): UNMATCHED_TOKEN
    - conventions (2113x / 2213x): CONVENTION_CONFLICT, CONVENTION_OVERLAP
    """
    # --- declaration errors ---
    EMPTY_KEY                 = 21101
    INVALID_NAME              = 21102
    EMPTY_ENV_DEFAULT_NAME    = 21103
    EMPTY_CONFIG_DEFAULT_NAME = 21104

    # --- resolution errors ---
    ARGUMENT_MISSING          = 21111
    OPTION_MISSING            = 21112
    FLAG_MISSING              = 21113
    OPTION_VALUE_MISSING      = 21114

    # --- matching errors ---
    UNMATCHED_TOKEN           = 21121

    # --- convention errors/warnings ---
    CONVENTION_CONFLICT       = 21131
    CONVENTION_OVERLAP        = 22131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, message, palette, /):
    main = __import__("__main__")
    options = fault.options

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))
    colorful = options.get("colorful", True)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style])

    prog = text(getattr(main, "__prog__", options.get("prog", "cliopatra")), "prog-name")
    code = options.get("code")
    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "?", "code"),
        " | ",
        text(str(options.get("title", type(fault).__name__)).title(), "title"),
        " ]"
    )
    body = text(message, "message")
    hint = Text.assemble(text(" → ", "hint-arrow"), text(options.get("hint", ""), "hint"))

    if options.get("fancy", False):
        return Panel(Group(body, hint), title=header, title_align="left")
    return Group(header, body, hint)


class CommandException(Exception):
    """
    Base class of every cliopatra error.

    Carries the human message and a read-only mapping of options: the fault
    code, a short title, a hint and the context (key, name, token, index ...).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message if message is not Unset else "")
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        return _render(self, self.message, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "title": "bold #FF4DA6",
            "message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class EmptyKeyError(CommandException, ValueError): ...
class InvalidNameError(CommandException, ValueError): ...
class EmptyEnvDefaultNameError(CommandException, ValueError): ...
class EmptyConfigDefaultNameError(CommandException, ValueError): ...
class ConventionConflictError(CommandException, ValueError): ...
class UnmatchedTokenError(CommandException): ...


class MissingValueError(CommandException, LookupError):
    """
    A value accessor found no command-line value and no usable default source.
    """


class ArgumentMissingError(MissingValueError): ...
class OptionMissingError(MissingValueError): ...
class FlagMissingError(MissingValueError): ...
class OptionValueMissingError(MissingValueError): ...


class CommandWarning(ABC, Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message if message is not Unset else "")
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, self.message, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "title": "bold #FFC2E0",
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ConventionWarning(CommandWarning): ...


class CommandExit(ExceptionGroup[CommandException]):
    """
    Every fault collected by one validation sweep, raised (or printed) together.
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad exit", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad exit", tuple(exceptions))
        self.options = MappingProxyType(options)

    def __rich__(self):
        header = Text.assemble(
            "[ ",
            Text(str(getattr(__import__("__main__"), "__prog__", self.options.get("prog", "cliopatra"))), "bold"),
            " — ",
            Text(self.message.title(), "bold #FF4DA6"),
            " ]"
        )
        renders = [copy.replace(exception, **self.options) for exception in self.exceptions]
        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")
        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise errors are
      raised and warnings go through warnings.warn.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "CommandException",
    "EmptyKeyError",
    "InvalidNameError",
    "EmptyEnvDefaultNameError",
    "EmptyConfigDefaultNameError",
    "ConventionConflictError",
    "UnmatchedTokenError",
    "MissingValueError",
    "ArgumentMissingError",
    "OptionMissingError",
    "FlagMissingError",
    "OptionValueMissingError",
    "CommandWarning",
    "ConventionWarning",
    "CommandExit",
    "trigger",
)
