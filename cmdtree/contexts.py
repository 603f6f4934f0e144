"""
Configuration and per-run state.

- CommandConfig: process-level settings shared by a command tree (localizer).
- RunConfig: per-run settings (help layout widths, output consoles, fault
  rendering flags).
- RunContext: mutable state of one run at one command level (help requested,
  whether the action should run), handed to the command action.
- OptionContext: the parse context of one command level (pending option,
  value buffer, display name, token index).
"""
from rich.console import Console

from .utils import *


def _identity(text, /):
    return text


class CommandConfig:
    """
    Process-level settings inherited by every command of a tree.

    - localizer: callable applied to every fixed user-facing string
      (messages, usage lines, option descriptions). Identity by default.
    """
    __slots__ = ("_localizer",)

    def __init__(self, localizer=Unset, /):
        if not callable(coalesce(localizer, _identity)):
            raise TypeError("command config localizer must be callable")
        self._localizer = coalesce(localizer, _identity)

    localizer = mirror("localizer")

    def __repr__(self):
        return f"{type(self).__name__}(localizer={self._localizer!r})"


CommandConfig.default = CommandConfig()


def _console(stream, /, **options):
    if isinstance(stream, Console):
        return stream
    if stream is Unset:
        return Console(highlight=False, **options)
    if not callable(getattr(stream, "write", None)):
        raise TypeError("run config streams must be rich consoles or writable text streams")
    return Console(file=stream, highlight=False)


class RunConfig:
    """
    Per-run settings.

    Parameters
    - width: total help width in columns (default 80).
    - option_width: column where option descriptions start (default 29).
    - show_license_on_run: print the app license header before the action.
    - out: rich Console or text stream for help, version and action output
      (stdout by default).
    - error: rich Console or text stream for faults (stderr by default).
    - colorful / fancy: fault rendering flags (see cmdtree.faults).
    """
    __slots__ = ("_width", "_option_width", "_show_license_on_run", "_out", "_error", "_colorful", "_fancy")

    def __init__(
            self,
            width=80,
            option_width=29,
            *,
            show_license_on_run=True,
            out=Unset,
            error=Unset,
            colorful=False,
            fancy=False,
    ):
        if not isinstance(width, int) or not isinstance(option_width, int):
            raise TypeError("run config widths must be integers")
        # wrapped_lines() needs at least two columns on continuation lines
        if option_width < 0 or width - option_width - 2 < 2:
            raise ValueError(f"run config width {width} is too small for option width {option_width}")
        self._width = width
        self._option_width = option_width
        self._show_license_on_run = bool(show_license_on_run)
        self._out = _console(out)
        self._error = _console(error, stderr=True)
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)

    width = mirror("width")
    option_width = mirror("option_width")
    show_license_on_run = mirror("show_license_on_run")
    out = mirror("out")
    error = mirror("error")
    colorful = mirror("colorful")
    fancy = mirror("fancy")

    @property
    def description_first_width(self):
        return self._width - self._option_width

    @property
    def description_rest_width(self):
        return self._width - self._option_width - 2


class RunContext:
    """
    State of one run at one command level.

    Options may flip show_help (HelpOption) or should_run (VersionOption)
    while parsing; the dispatcher reads them afterwards. The action receives
    this context as its first argument and can print through out/error.
    """

    def __init__(self, config, /):
        if not isinstance(config, RunConfig):
            raise TypeError("run context config must be a RunConfig")
        self.config = config
        self.show_help = False
        self.should_run = True
        self.show_license_on_run = config.show_license_on_run

    @property
    def out(self):
        return self.config.out

    @property
    def error(self):
        return self.config.error

    def print(self, *renderables, error=False):
        """
        Print literal text (no markup, emoji or highlighting) on out, or on
        error when error=True.
        """
        console = self.error if error else self.out
        console.print(*renderables, markup=False, emoji=False, highlight=False, soft_wrap=True)


class OptionContext:
    """
    Parse context of one command level.

    - option: the pending Option (None when nothing is pending).
    - name: the option name as typed ("--name", "-n", "-a+", "<>").
    - values: OptionValues buffer of the pending option.
    - index: zero-based index of the current token in the whole stream,
      injected tokens included.
    """

    def __init__(self, run, command, /, index=-1):
        from .options import OptionValues

        self.run = run
        self.command = command
        self.option = None
        self.name = None
        self.index = index
        self.values = OptionValues(self)

    @property
    def localizer(self):
        return self.command.config.localizer


__all__ = (
    "CommandConfig",
    "RunConfig",
    "RunContext",
    "OptionContext",
)
