"""
metacli faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing failure.
  Codes are grouped by domain to keep copy consistent and make logs/searches predictable.
- CliException: base type that carries message + options and knows how to render
  itself in a friendly, lowercased, and actionable way.
- Kinds: StructuralError, GrammarError, CoercionError, ConfigurationError and
  UserCallableError, each with the concrete faults raised by the package.
- trigger(): central entry point to surface any fault (raise, or print and exit).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages for token faults (“at second position”).
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Exit status
- Every fault carries an exit code (option "exit_code", 1 when absent); the fatal
  handler in metacli.cli terminates the process with it.
"""
import copy
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
    canonical fault codes used across the cli (stable identifiers).

    grouping (by high-level domain)
    - routing (111xx)
      • UNKNOWN_COMMAND, INCOMPLETE_COMMAND
    - grammar (112xx)
      • MALFORMED_TYPE_NAME
    - coercion (113xx)
      • MISSING_COERCER, MALFORMED_ENTRY, INVALID_VALUE
    - configuration (114xx)
      • INVALID_BOOLEAN, ALREADY_BOUND, MALFORMED_METADATA
    - delegated (115xx)
      • DELEGATED_ERROR

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- routing errors (111xx) ---
    UNKNOWN_COMMAND             = 11101
    INCOMPLETE_COMMAND          = 11102

    # --- grammar errors (112xx) ---
    MALFORMED_TYPE_NAME         = 11201

    # --- coercion errors (113xx) ---
    MISSING_COERCER             = 11301
    MALFORMED_ENTRY             = 11302
    INVALID_VALUE               = 11303

    # --- configuration errors (114xx) ---
    INVALID_BOOLEAN             = 11401
    ALREADY_BOUND               = 11402
    MALFORMED_METADATA          = 11403

    # --- delegated errors (115xx) ---
    DELEGATED_ERROR             = 11501

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CliException(Exception):
    """
    base fault: a message plus a read-only mapping of rendering/context options.

    common options
    - title: short lowercase headline (rendered title-cased).
    - code: FaultCode of the fault.
    - hint: one actionable sentence.
    - exit_code: process exit status when the fault is fatal (1 when absent).
    - prog, colorful, fancy, shell: rendering/trigger switches (see trigger()).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message if self.message is not Unset else ""

    @property
    def code(self):
        return self.options.get("code")

    @property
    def hint(self):
        return self.options.get("hint")

    @property
    def exit_code(self):
        return self.options.get("exit_code", 1)

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
            "docs": "underline #00E5FF dim",
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.options.get("prog", "metacli")), styler("prog-name"))
        code = self.code.normalize() if isinstance(self.code, FaultCode) else "?"

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code, styler("code")),
            " | ",
            text(self.options.get("title", type(self).__name__).title(), styler("error-title")),
            " ]"
        )
        renders = [text(self.message, styler("error-message"))]
        if self.hint:
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(self.hint, styler("hint"))))
        if self.options.get("docs"):
            renders.append(text(self.options["docs"], styler("docs")))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(self.exit_code)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


# --- kinds ---
class StructuralError(CliException): ...
class GrammarError(CliException): ...
class CoercionError(CliException): ...
class ConfigurationError(CliException): ...
class UserCallableError(CliException): ...


# --- structural ---
class UnknownCommandError(StructuralError): ...
class IncompleteCommandError(StructuralError): ...

# --- grammar ---
class ParseError(GrammarError):
    @property
    def position(self):
        return self.options.get("position")

# --- coercion ---
class MissingCoercerError(CoercionError): ...
class MalformedEntryError(CoercionError): ...
class InvalidValueError(CoercionError): ...

# --- configuration ---
class BooleanValueError(ConfigurationError): ...
class AlreadyBoundError(ConfigurationError): ...
class MalformedMetadataError(ConfigurationError): ...

# --- delegated ---
class DelegatedCommandError(UserCallableError): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CliException).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - with shell=True the fault is printed on stderr and the process exits with its
      exit code; otherwise the (merged) fault is raised.
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
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CliException",
    "StructuralError",
    "GrammarError",
    "CoercionError",
    "ConfigurationError",
    "UserCallableError",
    "UnknownCommandError",
    "IncompleteCommandError",
    "ParseError",
    "MissingCoercerError",
    "MalformedEntryError",
    "InvalidValueError",
    "BooleanValueError",
    "AlreadyBoundError",
    "MalformedMetadataError",
    "DelegatedCommandError",
    "FaultCode",
    "trigger",
    "getdoc",
)
