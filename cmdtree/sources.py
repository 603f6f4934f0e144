"""
Argument sources: tokens that expand into more tokens.

A source is offered every token (outside raw mode) before option matching.
When it accepts a token it returns the replacement tokens, which the engine
pushes in front of the remaining stream. Replacements are parsed like any
other token, so a response file may reference another one.
"""
from abc import abstractmethod

from .faults import CommandException
from .nodes import CommandNode
from .utils import *


class ArgumentSource(CommandNode):
    """
    Base class of argument sources.

    Subclasses implement expand(token) returning the replacement tokens, or
    None when the token is not theirs. names and descr are used by the help.
    """
    __introspectable__ = ("names", "descr")

    def __init__(self, names, descr=Unset, /, active=Unset):
        if isinstance(names, str):
            names = (names,)
        names = tuple(names)
        if not names or not all(isinstance(name, str) and name for name in names):
            raise TypeError(f"{type(self).__typename__} names must be non-empty strings")
        if not isinstance(descr, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'descr' must be a string")
        super().__init__(active)
        self._names = names
        self._descr = coalesce(descr)

    @abstractmethod
    def expand(self, token, /):
        ...


def read_arguments(lines, /):
    """
    Split response file lines into tokens.

    - Double or single quotes group their content (quotes are removed); the
      other quote character is literal inside them.
    - Unquoted whitespace separates tokens.
    - A line end terminates the current token, quoted or not.

    lines is a string or an iterable of lines (e.g. an open text file).
    """
    if isinstance(lines, str):
        lines = lines.splitlines()

    for line in lines:
        token = []
        quote = None
        for char in line.rstrip("\r\n"):
            if quote is not None:
                if char == quote:
                    quote = None
                else:
                    token.append(char)
            elif char in "\"'":
                quote = char
            elif char.isspace():
                if token:
                    yield "".join(token)
                    token.clear()
            else:
                token.append(char)
        if token:
            yield "".join(token)


class ResponseFileSource(ArgumentSource):
    """
    Expands "@path" into the tokens read from the file at path.
    """

    def __init__(self, names="@file", descr="Read response file for more options.", /, active=Unset):
        super().__init__(names, descr, active)

    def expand(self, token, /):
        if not token.startswith("@") or len(token) == 1:
            return None
        try:
            with open(token[1:], encoding="utf-8") as stream:
                return list(read_arguments(stream))
        except (OSError, UnicodeError) as exception:
            reason = getattr(exception, "strerror", None) or exception
            raise CommandException(f"Cannot read response file '{token[1:]}': {reason}") from exception


__all__ = (
    "ArgumentSource",
    "ResponseFileSource",
    "read_arguments",
)
