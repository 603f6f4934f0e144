"""
cmdtree faults (parse-time and user-level errors) and their rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing failure.
  Codes are grouped by domain to keep logs and searches predictable.
- CommandException: base type for every failure that a command run turns into
  exit code 1. Carries a message plus a read-only mapping of options and
  knows how to render itself through rich.
- OptionException and its sub-kinds: failures tied to one option, carrying the
  option name as typed on the command line.

Construction errors (malformed prototypes, duplicate aliases, re-parenting a
node) are plain TypeError/ValueError and are never routed through here: they
are programmer bugs and fail the setup phase immediately.

Rendering
- Plain: "<path>: <message>" followed by "Use `<path> --help` for usage.".
- fancy=True: the same lines inside a rich Panel titled
  "[ <path> — <code> | <title> ]".
- colorful=True: styled parts; styles can be overridden through a
  __styles__ mapping in __main__, codes through __codes__.
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, ordinal


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping
    - routing (111xx): UNKNOWN_COMMAND, UNKNOWN_OPTION
    - option values (112xx): TOO_MANY_VALUES, MISSING_VALUE, UNCASTABLE_VALUE
    - bundles (113xx): UNREGISTERED_BUNDLE_OPTION
    - delegated (114xx): COMMAND_ERROR, raised by user callbacks and actions
    """
    # --- routing errors ---
    UNKNOWN_COMMAND             = 11101
    UNKNOWN_OPTION              = 11102

    # --- option value errors ---
    TOO_MANY_VALUES             = 11201
    MISSING_VALUE               = 11202
    UNCASTABLE_VALUE            = 11203

    # --- bundle errors ---
    UNREGISTERED_BUNDLE_OPTION  = 11301

    # --- delegated errors ---
    COMMAND_ERROR               = 11401

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    A failure surfaced to the user: printed on the error console and turned
    into exit code 1 by the command level that catches it.

    Options (all optional, read-only after construction)
    - code: FaultCode, defaults to the class' __faultcode__.
    - title: short title used by the fancy renderer.
    - index: zero-based token index where the fault was detected.
    - hint: overrides the default "Use `<path> --help` for usage." line;
      None or "" prints no hint.
    - tool: the reporting Command (bound through copy.replace).
    - localizer, colorful, fancy: rendering flags (bound through copy.replace).
    """
    __faultcode__ = FaultCode.COMMAND_ERROR
    __title__ = "command error"

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(message if message is not Unset else "")
        self.message = message
        self.options = MappingProxyType({
            "code": type(self).__faultcode__,
            "title": type(self).__title__,
        } | options)

    @property
    def code(self):
        return self.options["code"]

    @property
    def index(self):
        return self.options.get("index")

    def __str__(self):
        return self.message if self.message is not Unset else ""

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)
        localize = self.options.get("localizer", str)

        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "position": "dim #C8C8D0",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        try:
            path = self.options["tool"].full_path
        except KeyError:
            path = ""

        hint = self.options.get("hint", Unset)
        if hint is Unset:
            hint = localize(f"Use `{path} --help` for usage.")
        hints = [text(hint, "hint")] if hint else []
        message = Text.assemble(text(f"{path}: " if path else "", "prog-name"), text(str(self), "error-message"))

        if not fancy:
            return Group(message, *hints)

        header = Text.assemble(
            "[ ",
            text(path or "-", "prog-name"),
            " — ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.options["title"].title(), "error-title"),
            " ]",
        )
        renders = [text(str(self), "error-message")]
        if self.index is not None:
            renders.append(text(localize(f"at {ordinal(self.index + 1)} argument"), "position"))
        renders.extend(hints)
        return Panel(Group(*renders), title=header, title_align="left")

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        replaced = copy.copy(self)
        replaced.options = MappingProxyType({**self.options, **overrides})
        return replaced


class UnknownCommandError(CommandException):
    __faultcode__ = FaultCode.UNKNOWN_COMMAND
    __title__ = "unknown command or option"


class UnknownOptionError(CommandException):
    __faultcode__ = FaultCode.UNKNOWN_OPTION
    __title__ = "unknown option"


class OptionException(CommandException):
    """
    A failure tied to one option. option_name is the name as typed on the
    command line (e.g. "--name", "-a" or "-a+"), or "" when no single option
    can be blamed.
    """
    __title__ = "option error"

    def __init__(self, message=Unset, option_name="", /, **options):
        if not isinstance(option_name, str):
            raise TypeError(f"{type(self).__name__}() option name must be a string")
        super().__init__(message, **options)
        self.option_name = option_name


class TooManyValuesError(OptionException):
    __faultcode__ = FaultCode.TOO_MANY_VALUES
    __title__ = "too many option values"


class MissingValueError(OptionException):
    __faultcode__ = FaultCode.MISSING_VALUE
    __title__ = "missing option value"


class UncastableValueError(OptionException):
    __faultcode__ = FaultCode.UNCASTABLE_VALUE
    __title__ = "invalid option value"


class BundleOptionError(OptionException):
    __faultcode__ = FaultCode.UNREGISTERED_BUNDLE_OPTION
    __title__ = "unregistered option in bundle"


__all__ = (
    "FaultCode",
    "CommandException",
    "UnknownCommandError",
    "UnknownOptionError",
    "OptionException",
    "TooManyValuesError",
    "MissingValueError",
    "UncastableValueError",
    "BundleOptionError",
)
