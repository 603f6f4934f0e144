r"""
Option prototype compiler.

A prototype declares every alias of an option and how it takes values:

    prototype := alias ('|' alias)*
    alias     := name [ ('=' | ':') sep? ]
    sep       := ( [^{}]+ ) | '{' .*? '}'

- "v|verbose"      → aliases ("v", "verbose"), no value.
- "n|name="        → a required value.
- "D:"             → an optional value.
- "D="  (count=2)  → key/value pairs split on ":" or "=" (the defaults).
- "P={->}" (count=2) → key/value pairs split on "->".
- "M={}"   (count=2) → each value must be its own token (no splitting).

The terminator ('=' required, ':' optional) applies to the whole option and
must agree between aliases. Separator specs are only legal for options that
take more than one value.
"""
from enum import Enum
from typing import NamedTuple

#: Default value separators for multi-value options.
DEFAULT_SEPARATORS = (":", "=")

#: Reserved alias of the option collecting otherwise-unmatched tokens.
CATCH_ALL = "<>"


class Arity(Enum):
    """
    How many values an option accepts on the command line.

    - NONE: a switch, never takes a value.
    - OPTIONAL: the value may be omitted (declared with ':').
    - REQUIRED: the value is mandatory (declared with '=').
    """
    NONE = "none"
    OPTIONAL = "optional"
    REQUIRED = "required"


class Prototype(NamedTuple):
    names: tuple[str, ...]
    arity: Arity
    separators: tuple[str, ...] | None


def _separators(alias, end, /):
    """
    Collect the separator spec following the terminator at index 'end'.

    Literal characters each count as one separator; '{...}' adds the enclosed
    string (possibly empty) as a single separator.
    """
    separators = []
    start = -1
    for index in range(end + 1, len(alias)):
        match alias[index]:
            case "{":
                if start != -1:
                    raise ValueError(f"ill-formed name/value separator found in {alias!r}")
                start = index + 1
            case "}":
                if start == -1:
                    raise ValueError(f"ill-formed name/value separator found in {alias!r}")
                separators.append(alias[start:index])
                start = -1
            case char if start == -1:
                separators.append(char)
    if start != -1:
        raise ValueError(f"ill-formed name/value separator found in {alias!r}")
    return separators


def compile_prototype(prototype, /, count=1):
    """
    Compile an option prototype into its aliases, arity and value separators.

    Parameters
    - prototype: str, e.g. "n|name=".
    - count: maximum number of values the option accepts (>= 0).

    Returns
    - Prototype(names, arity, separators); separators is None when values are
      not split (single-value options, or an explicit "{}" spec).

    Raises
    - TypeError: when prototype is not a string or count is not an int.
    - ValueError: empty prototype or alias, conflicting terminators,
      unbalanced braces, a separator spec on a single-value option.
    """
    if not isinstance(prototype, str):
        raise TypeError("option prototype must be a string")
    if not prototype:
        raise ValueError("option prototype cannot be empty")
    if not isinstance(count, int) or isinstance(count, bool):
        raise TypeError("option value count must be an integer")
    if count < 0:
        raise ValueError("option value count cannot be negative")

    names = []
    separators = []
    terminator = None

    for alias in prototype.split("|"):
        if not alias:
            raise ValueError(f"empty option names are not supported in {prototype!r}")

        end = min((index for index in (alias.find("="), alias.find(":")) if index != -1), default=-1)
        if end == -1:
            names.append(alias)
            continue
        if not alias[:end]:
            raise ValueError(f"empty option names are not supported in {prototype!r}")

        names.append(alias[:end])
        if terminator is None or terminator == alias[end]:
            terminator = alias[end]
        else:
            raise ValueError(f"conflicting option types: {terminator!r} vs. {alias[end]!r} in {prototype!r}")
        separators.extend(_separators(alias, end))

    if len(set(names)) != len(names):
        raise ValueError(f"option prototype {prototype!r} cannot contain duplicate names")

    if terminator is None:
        return Prototype(tuple(names), Arity.NONE, None)

    if count <= 1 and separators:
        raise ValueError(f"cannot provide key/value separators for options taking {count} value(s)")

    if count <= 1:
        resolved = None
    elif not separators:
        resolved = DEFAULT_SEPARATORS
    else:
        # "{}" means one value per token
        resolved = tuple(dict.fromkeys(filter(None, separators))) or None

    return Prototype(tuple(names), Arity.REQUIRED if terminator == "=" else Arity.OPTIONAL, resolved)


__all__ = (
    "DEFAULT_SEPARATORS",
    "CATCH_ALL",
    "Arity",
    "Prototype",
    "compile_prototype",
)
