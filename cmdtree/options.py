r"""
Options and the option invocation protocol.

Overview
- Option: a named switch or value-taking option compiled from a prototype
  (see cmdtree.prototypes). Delivers its values to a callback:
  • a callable receives the converted values as positional arguments;
  • a mutable sequence receives append(value) (a tuple when count > 1).
- OptionValues: the value buffer of the pending option. Reads are checked
  lazily: a REQUIRED option only fails when a missing slot is read.
- parse_value / choice: typed conversion of raw string values.
- HelpOption / VersionOption: built-in options driving the dispatcher.

Protocol
- The engine fills context.values then calls option.invoke(context).
- invoke() calls the option's __complete__(context) hook, then clears the
  pending slot (option, name, values) of the context.
- Subclasses override __complete__ to react differently (HelpOption,
  VersionOption).

Quick example:
    >>> names = []
    >>> app.add(Option("n|name=", "Your {NAME}", names))
    >>> app.add(Option("v|verbose", "Be verbose", lambda value: ...))
    >>> app.add(Option("i|level=", "The {LEVEL}", lambda level: ..., type=int))
"""
import sys
from collections.abc import Callable, MutableSequence
from enum import Enum

from .faults import MissingValueError, UncastableValueError
from .nodes import CommandNode
from .prototypes import CATCH_ALL, Arity, compile_prototype
from .utils import *


class OptionValues(MutableSequence):
    """
    Value buffer of the pending option of an OptionContext.

    Reading index i:
    - raises IndexError when i is past the option's maximum value count;
    - raises MissingValueError when the option is REQUIRED and the value at i
      was not provided;
    - returns None for an absent value of an OPTIONAL/NONE option.
    """

    def __init__(self, context, /):
        self._context = context
        self._values = []

    def __len__(self):
        return len(self._values)

    def __iter__(self):
        return iter(self._values)

    def __reversed__(self):
        return reversed(self._values)

    def __getitem__(self, index):
        if isinstance(index, slice) or index < 0:
            return self._values[index]
        option = self._context.option
        if option is None:
            raise RuntimeError("no option is being invoked")
        if index >= max(option.count, 1):
            raise IndexError(f"option value index {index} is out of range")
        if option.arity is Arity.REQUIRED and index >= len(self._values):
            raise MissingValueError(
                self._context.localizer(f"Missing required value for option '{self._context.name}'."),
                self._context.name,
                index=self._context.index,
            )
        return self._values[index] if index < len(self._values) else None

    def __setitem__(self, index, value):
        self._values[index] = value

    def __delitem__(self, index):
        del self._values[index]

    def insert(self, index, value):
        self._values.insert(index, value)

    def clear(self):
        self._values.clear()

    def index(self, value, start=0, stop=sys.maxsize):
        return self._values.index(value, start, stop)

    def __repr__(self):
        return f"{type(self).__name__}({self._values!r})"

    def __str__(self):
        return ", ".join(map(str, self._values))


def parse_value(value, converter, context, /):
    """
    Convert a raw string value with converter.

    - None stays None (absent optional value).
    - ValueError/TypeError/KeyError raised by the converter become an
      UncastableValueError naming the option as typed.
    """
    if value is None or converter is str:
        return value
    try:
        return converter(value)
    except (ValueError, TypeError, KeyError) as exception:
        raise UncastableValueError(
            context.localizer(f"{exception} for option `{context.name}`"),
            context.name,
            index=context.index,
        ) from exception


class choice:
    """
    Case-insensitive converter from member names to members of an Enum.

        Option("c|color=", "The {COLOR}", callback, type=choice(Color))

    names is the comma separated list of accepted names, handy in option
    descriptions.
    """

    def __init__(self, enumeration, /):
        if not isinstance(enumeration, type) or not issubclass(enumeration, Enum):
            raise TypeError("choice() argument must be an Enum type")
        self.enumeration = enumeration
        self._members = {name.lower(): member for name, member in enumeration.__members__.items()}

    @property
    def names(self):
        return ", ".join(self.enumeration.__members__)

    def __call__(self, value, /):
        try:
            return self._members[value.lower()]
        except KeyError:
            raise ValueError(f"Invalid value '{value}', expecting one of: {self.names}") from None

    def __repr__(self):
        return f"choice({self.enumeration.__name__})"


class Option(CommandNode):
    """
    A named option.

    Parameters
    - prototype: str, aliases and value spec (e.g. "n|name=", "D:", "P={->}").
    - descr: help description; {NAME} / {0:NAME} markers name the values.
    - callback: callable or mutable sequence receiving the values; Unset
      ignores them.
    - type: converter (callable) or tuple of per-value converters.
    - count: maximum number of values (2 or more for key/value options).
    - hidden: suppress from help.
    - active: activation predicate.

    Raises
    - TypeError/ValueError on any malformed definition.
    """
    __introspectable__ = ("prototype", "descr", "names", "arity", "count", "separators", "hidden")
    __displayable__ = ("prototype", "descr", "hidden")

    def __init__(
            self,
            prototype,
            descr=Unset,
            callback=Unset,
            /,
            *,
            type=str,
            count=1,
            hidden=False,
            active=Unset,
    ):
        super().__init__(active)
        names, arity, separators = compile_prototype(prototype, count)

        if count == 0 and arity is not Arity.NONE:
            raise ValueError(f"option {prototype!r} takes values but its value count is 0")
        if arity is Arity.NONE and count > 1:
            raise ValueError(f"option {prototype!r} takes no value but its value count is {count}")
        if CATCH_ALL in names:
            if len(names) == 1 and arity is not Arity.NONE:
                raise ValueError(f"the catch-all option {prototype!r} cannot take values")
            if len(names) > 1 and count > 1:
                raise ValueError(f"the catch-all option {prototype!r} cannot take more than one value")

        if not isinstance(descr, str | Unset):
            raise TypeError(f"{_typename(self)} 'descr' must be a string")
        if not isinstance(callback, Callable | MutableSequence | Unset):
            raise TypeError(f"{_typename(self)} callback must be callable or a mutable sequence")
        if isinstance(type, tuple):
            if len(type) != count or not all(map(callable, type)):
                raise TypeError(f"{_typename(self)} 'type' must provide one converter per value")
        elif not callable(type):
            raise TypeError(f"{_typename(self)} 'type' must be callable")

        self._prototype = prototype
        self._descr = coalesce(descr)
        self._callback = callback
        self._type = type
        self._names = names
        self._arity = arity
        self._count = count
        self._separators = separators
        self._hidden = bool(hidden)

    def converter(self, index, /):
        return self._type[index] if isinstance(self._type, tuple) else self._type

    def invoke(self, context, /):
        """
        Deliver the buffered values of context, then clear its pending slot.
        """
        self.__complete__(context)
        context.option = None
        context.name = None
        context.values.clear()

    def __complete__(self, context, /):
        values = tuple(
            parse_value(context.values[index], self.converter(index), context)
            for index in range(max(self._count, 1))
        )
        if isinstance(self._callback, MutableSequence):
            self._callback.append(values if self._count > 1 else values[0])
        elif self._callback is not Unset:
            self._callback(*values)


def _typename(option, /):
    return type(option).__typename__


class HelpOption(Option):
    """
    Requests the help of the command it is attached to ("-h", "-?", "--help").
    """

    def __init__(self, prototype="h|?|help", descr="Show this message and exit", /, **options):
        super().__init__(prototype, descr, **options)

    def __complete__(self, context, /):
        context.run.show_help = True


def _default_version():
    return str(getattr(__import__("__main__"), "__version__", "0.0.0"))


class VersionOption(Option):
    """
    Prints a version string and stops the run ("-v", "--version").

    The version defaults to __version__ of the __main__ module, or "0.0.0".
    """

    def __init__(self, version=Unset, prototype="v|version", descr="Show the version of this command", /, **options):
        if not isinstance(version, str | Unset):
            raise TypeError("version option 'version' must be a string")
        super().__init__(prototype, descr, **options)
        self._version = version

    @property
    def version(self):
        return self._version if self._version is not Unset else _default_version()

    def __complete__(self, context, /):
        context.run.print(self.version)
        context.run.should_run = False


__all__ = (
    "Option",
    "OptionValues",
    "parse_value",
    "choice",
    "HelpOption",
    "VersionOption",
)
