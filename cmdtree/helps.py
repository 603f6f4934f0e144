r"""
Help rendering.

Layout (width and option column come from RunConfig)
- License header (applications only).
- Usage line: the default one unless the command holds a CommandUsage.
- Every active node in declaration order:
  • text and usage nodes, wrapped to the full width;
  • sub-commands: "  name" padded to the option column, then the description;
  • options: "  -x, --long=VALUE" (long-first aliases indented to line up with
    short ones), then the description wrapped to width - option_width, later
    lines indented by two more columns; hidden options and the catch-all
    alias are skipped;
  • argument sources: "  @file" and their description.

Descriptions may name option values with {NAME} (single value) or
{0:KEY}/{1:VALUE} (multi-value) markers. The markers are stripped from the
printed description: "{NAME}" prints as "NAME". Literal braces are written
"{{" and "}}".
"""
import re

from rich.text import Text

from .nodes import CommandUsage, TextNode
from .options import Option
from .prototypes import CATCH_ALL, Arity
from .sources import ArgumentSource
from .utils import wrapped_lines

_ARGUMENT_NAME = re.compile(r"(?<=(?<!\{)\{)[^{}]*(?=\}(?!\}))")


def argument_name(index, count, descr, /):
    """
    Name of the value at index for an option taking count values, read from
    the {NAME} / {index:NAME} markers of descr.
    """
    for match in _ARGUMENT_NAME.finditer(descr or ""):
        parts = match.group().split(":")
        if count == 1:
            name = parts[-1]
        elif len(parts) == 2 and parts[0] == str(index):
            name = parts[1]
        else:
            name = None
        if name:
            return name
    return "VALUE" if count == 1 else f"VALUE{index + 1}"


def strip_markers(descr, /):
    """
    Remove value-name markers from a description.

    "{NAME}" → "NAME", "{0:KEY}" → "KEY", "{{" → "{", "}}" → "}".

    Raises ValueError on a lone closing brace.
    """
    if not descr:
        return ""

    parts = []
    start = -1
    index = 0
    while index < len(descr):
        char = descr[index]
        if char == "{":
            if index == start:
                parts.append("{")
                start = -1
            elif start < 0:
                start = index + 1
        elif char == "}":
            if start < 0:
                if index + 1 == len(descr) or descr[index + 1] != "}":
                    raise ValueError(f"invalid option description: {descr!r}")
                index += 1
                parts.append("}")
            else:
                parts.append(descr[start:index])
                start = -1
        elif char == ":" and start >= 0:
            start = index + 1
        elif start < 0:
            parts.append(char)
        index += 1
    return "".join(parts)


def option_prototype(option, /):
    """
    The flag column of an option ("  -n, --name=VALUE"), or None when the
    option has no printable alias (catch-all).
    """
    names = [name for name in option.names if name != CATCH_ALL]
    if not names:
        return None

    first, *others = names
    parts = ["  -" + first if len(first) == 1 else "      --" + first]
    parts.extend(", -" + name if len(name) == 1 else ", --" + name for name in others)

    if option.arity is not Arity.NONE:
        if option.arity is Arity.OPTIONAL:
            parts.append("[")
        parts.append("=" + argument_name(0, option.count, option.descr))
        separator = option.separators[0] if option.separators else " "
        parts.extend(separator + argument_name(index, option.count, option.descr) for index in range(1, option.count))
        if option.arity is Arity.OPTIONAL:
            parts.append("]")
    return "".join(parts)


def default_usage(command, /):
    """
    "Usage: <path> [Options] COMMAND <catch-all description>", each part only
    when the command has options, sub-commands or a catch-all description.
    """
    localize = command.config.localizer
    parts = [localize("Usage: ") + command.full_path]
    if any(name != CATCH_ALL for name in command.options):
        parts.append(" [" + localize(command.options_name) + "]")
    if command.commands:
        parts.append(" " + localize("COMMAND"))
    catchall = command.options.get(CATCH_ALL)
    if catchall is not None and catchall.descr:
        parts.append(" " + localize(catchall.descr))
    return "".join(parts)


def _description(lines, descr, prefix, first, rest, /):
    for index, wrapped in enumerate(wrapped_lines(descr, first, rest)):
        if index == 0:
            lines[-1] += wrapped
        else:
            lines.append(prefix + wrapped)


def help_lines(command, config, /):
    """
    Yield the help of command as plain lines.
    """
    localize = command.config.localizer
    width = config.width
    column = config.option_width
    first = config.description_first_width
    rest = config.description_rest_width

    lines = []

    def block(text, /, prefix="", first=width, rest=width):
        lines.append("")
        _description(lines, strip_markers(text), prefix, first, rest)

    def indented(head, descr, /):
        if len(head) < column:
            lines.append(head + " " * (column - len(head)))
        else:
            lines.append(head)
            lines.append(" " * column)
        _description(lines, strip_markers(localize(descr or "")), " " * (column + 2), first, rest)

    # applications only, never their sub-commands
    if command.app is command and command.license_header is not None:
        lines.extend(str(command.license_header()).splitlines())

    if not any(isinstance(node, CommandUsage) for node in command.nodes):
        block(default_usage(command))

    for node in command.nodes:
        if not node.active:
            continue
        if isinstance(node, CommandUsage):
            block(node.descr if node.descr is not None else default_usage(command))
        elif isinstance(node, TextNode):
            block(localize(node.descr))
        elif isinstance(node, Option):
            if node.hidden or (head := option_prototype(node)) is None:
                continue
            indented(head, node.descr)
        elif isinstance(node, ArgumentSource):
            indented("  " + ", ".join(node.names), node.descr)
        elif hasattr(node, "full_path"):
            head = "  " + node.name
            if len(head) < column - 1:
                indented(head, node.descr)
            else:
                block(head)
                block(" " * column + localize(node.descr or ""), " " * (column + 2), width, rest)

    yield from (line.rstrip() for line in lines)


def render_help(command, config, /):
    """
    Help of command as a rich Text (no markup, no highlighting).
    """
    return Text("\n".join(help_lines(command, config)), no_wrap=True, overflow="ignore")


__all__ = (
    "argument_name",
    "strip_markers",
    "option_prototype",
    "default_usage",
    "help_lines",
    "render_help",
)
