"""
Small helpers shared by the whole package.

Contents
- Unset / UnsetType: internal "not provided" sentinel, distinct from None.
- coalesce(): resolve Unset to a concrete default.
- rename(): give generated callables (decorators, wrappers) readable names.
- mirror(): read-only property over a private "_name" attribute.
- ordinal(): position labels for diagnostics ("first", "11th", ...).
- normalize_name(): collapse whitespace runs in command names.
- wrapped_lines(): break help descriptions over fixed column widths.
"""
import builtins
import functools
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    internal singleton sentinel representing an "unset" value.

    behavior
    - truthiness: bool(Unset) is False.
    - identity: Unset is a process-wide singleton (see __new__).
    - display: repr(Unset) -> "Unset".
    - final: subclassing is forbidden to preserve semantics.
    """

    def __or__(self, other, /):
        """
        support UnsetType | T in annotations.
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        support T | UnsetType in annotations.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return object unless it is the Unset sentinel, in which case return default.

    Falsy values (None, 0, "", []) are preserved; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _freeze(object):
    """
    Wrap a container in a read-only view (shallow).

    - Mapping → MappingProxyType (live view, not a copy)
    - Sequence (non-string) → tuple
    - Set → frozenset
    - anything else → returned as-is
    """
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    elif isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that exposes the private backing attribute "_{name}".

    Containers are returned as read-only views so the public API cannot mutate
    registries that are owned by the object (aliases, sub-commands, nodes).
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with English suffixes (11th, 21st, 102nd).
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, ...)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def normalize_name(name, /):
    """
    Collapse every run of whitespace in a command name into a single space.

    Leading and trailing runs are kept (as one space) so that names are
    otherwise preserved verbatim.
    """
    if not isinstance(name, str):
        raise TypeError("command name must be a string")
    if not name:
        raise ValueError("command name cannot be empty")

    parts = []
    space = False
    for char in name:
        if not char.isspace():
            space = False
            parts.append(char)
        elif not space:
            space = True
            parts.append(" ")
    return "".join(parts)


def _is_eol(char):
    # Any non alphanumeric character is a legal place to break a line.
    return not char.isalnum()


def _line_end(start, length, text):
    end = min(start + length, len(text))
    separator = -1
    for index in range(start, end):
        if text.startswith("\r\n", index):
            return index + 2
        if text[index] == "\n":
            return index + 1
        if _is_eol(text[index]):
            separator = index + 1
    if separator == -1 or end == len(text):
        return end
    return separator


def wrapped_lines(text, /, *widths):
    """
    Split text into lines that fit the given widths.

    The first line uses widths[0], the next widths[1], and so on; the last
    width is reused for every remaining line. Lines are broken after any
    non-alphanumeric character when possible; a word longer than the width is
    cut and marked with a trailing "-". Explicit line breaks are honoured.

    Yields a single empty string for empty text.
    """
    if not widths:
        raise TypeError("wrapped_lines() requires at least one width")
    for width in widths:
        if width < 2:
            raise ValueError("wrapped_lines() widths must be >= 2, got %d" % width)

    if not text:
        yield ""
        return

    widths = iter(widths)
    width = next(widths)
    start = 0
    while start < len(text):
        end = _line_end(start, width, text)
        correction = 2 if end >= 2 and text[end - 2:end] == "\r\n" else 1
        char = text[end - correction]
        if char.isspace():
            end -= correction
        continuation = ""
        if end != len(text) and not _is_eol(char):
            end -= 1
            continuation = "-"
        yield text[start:end] + continuation
        start = end
        if char.isspace():
            start += correction
        width = next(widths, width)


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "ordinal",
    "normalize_name",
    "wrapped_lines",
)
