"""
Command tree building blocks.

What this module provides
- NodeType: metaclass giving every node a __typename__, read-only
  introspection properties and stable __repr__/__rich_repr__ output.
- CommandNode: anything that can live in a command (options, sub-commands,
  argument sources, text). Carries the activation predicate.
- CommandContainer: a node owning an ordered list of child nodes.
- CommandGroup: an inert container whose predicate gates everything in it.
  Groups never survive as tree nodes: adding one to a command re-parents its
  children into that command and ANDs the group predicate into each child.
- TextNode / CommandUsage: help-only nodes (free text, usage templates).

Ownership
- A node has at most one parent. The parent owns its children; the child
  keeps a back-reference used to build command paths and to walk activation
  predicates. Attaching an already attached node raises ValueError.
"""
import functools
import operator
import re
from abc import ABCMeta
from collections.abc import Callable

from .utils import *


def _always():
    return True


class NodeType(ABCMeta):
    """
    Metaclass for command tree nodes (abstract methods are supported).

    Responsibilities
    - __typename__ derived from the class name (camel-case split with hyphens),
      used in messages and representations ("command-app", "help-option").
    - Read-only properties (see mirror()) for every name in __introspectable__.
    - __repr__/__rich_repr__ listing __displayable__ (or __introspectable__).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        if "__rich_repr__" not in namespace:
            self.__rich_repr__ = __rich_repr__

        return self


class CommandNode(metaclass=NodeType):
    """
    Base of every node attached to a command.

    Activation
    - active: evaluated on demand, never cached. True iff this node's own
      predicate, every predicate inherited from the groups it was flattened
      out of, and every ancestor's predicates hold. State changed by options
      earlier in the same command line is therefore visible to later checks.
    """

    def __init__(self, active=Unset, /):
        if not isinstance(active, Callable | Unset):
            raise TypeError(f"{type(self).__typename__} 'active' must be callable")
        self._predicate = coalesce(active, _always)
        self._conditions = []
        self._parent = None

    @property
    def parent(self):
        return self._parent

    @property
    def active(self):
        node = self
        while node is not None:
            if not node._predicate():
                return False
            if not all(condition() for condition in node._conditions):
                return False
            node = node._parent
        return True


class CommandContainer(CommandNode):
    """
    A node owning an ordered list of children.

    add(*nodes) accepts CommandNode instances and plain strings (help text);
    it returns the container so calls can be chained.
    """
    __introspectable__ = ("nodes",)

    def __init__(self, active=Unset, /):
        super().__init__(active)
        self._nodes = []

    def add(self, *nodes):
        for node in nodes:
            self._attach(self._coerce(node))
        return self

    def _coerce(self, node):
        if isinstance(node, str):
            return TextNode(node)
        if isinstance(node, CommandNode):
            return node
        raise TypeError(f"{type(self).__typename__} cannot contain {type(node).__name__!r} objects")

    def _attach(self, node):
        if node is self:
            raise ValueError(f"{type(self).__typename__} cannot contain itself")
        if node._parent is not None:
            raise ValueError(f"the node {node!r} is already attached to a parent {node._parent!r}")
        node._parent = self
        self._nodes.append(node)

    def option(self, prototype, descr=Unset, callback=Unset, /, **options):
        """
        Register an Option built from a prototype.

        Forms
        - container.option("n|name=", "Your {NAME}", callback) → container
        - @container.option("n|name=", "Your {NAME}") on a function → function

        Extra keyword options (type, count, hidden, active) are forwarded to Option.
        """
        from .options import Option

        if callback is not Unset:
            return self.add(Option(prototype, descr, callback, **options))

        @rename("option")
        def wrapper(callback, /):
            self.add(Option(prototype, descr, callback, **options))
            return callback

        return wrapper

    def command(self, source=Unset, descr=Unset, /, *nodes, **options):
        """
        Create a sub-command, attach it here and return it.

        Forms
        - container.command("hello", "descr", *nodes) → the new Command
        - container.command(function, "descr") → Command running function
        - @container.command("hello", "descr") → the new Command; the decorated
          function becomes its action (see Command.__call__)
        - @container.command() → Command named after the decorated function
        """
        from .commands import Command, command

        if isinstance(source, str):
            child = Command(source, descr, *nodes, **options)
            self.add(child)
            return child

        @rename("command")
        def wrapper(source, /):
            child = command(source, *nodes, descr=descr, **options)
            self.add(child)
            return child

        return wrapper(source) if source is not Unset else wrapper


class CommandGroup(CommandContainer):
    """
    Inert container gating a set of nodes behind one predicate.

    Example
        advanced = CommandGroup(lambda: state.advanced)
        advanced.add("Advanced Options:", Option("special", ...))
        app.add(advanced)

    Once attached, the group itself is not part of the tree: its children are
    re-parented into the owner and carry the group's predicate. Nodes added to
    an attached group are forwarded to the owner the same way.
    """

    def __init__(self, active=Unset, /):
        super().__init__(active)
        self._owner = None

    @property
    def owner(self):
        return self._owner

    def _attach(self, node):
        super()._attach(node)
        if self._owner is not None:
            self._flatten(node, self._owner)

    def _mount(self, owner):
        if self._owner is not None:
            raise ValueError(f"the group {self!r} is already attached to {self._owner!r}")
        self._owner = owner
        for node in self._nodes:
            self._flatten(node, owner)

    def _flatten(self, node, owner):
        node._parent = None
        node._conditions.extend((self._predicate, *self._conditions))
        owner._attach(node)


class TextNode(CommandNode):
    """
    Free text printed as-is in the help (e.g. "" for a blank line, "Options:").
    """
    __introspectable__ = ("descr",)

    def __init__(self, descr, /, active=Unset):
        if not isinstance(descr, str):
            raise TypeError(f"{type(self).__typename__} 'descr' must be a string")
        super().__init__(active)
        self._descr = descr


class CommandUsage(CommandNode):
    """
    Usage line for the help of the command it is attached to.

    - CommandUsage() renders the default usage ("Usage: <path> [Options] ...").
    - CommandUsage("Run '{NAME} [command] --help' ...") replaces the {NAME}
      marker (case-insensitive) with the full command path.

    A command holding at least one CommandUsage does not print the default
    usage line on its own.
    """
    MARKER = "{NAME}"

    def __init__(self, template=Unset, /, active=Unset):
        if not isinstance(template, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'template' must be a string")
        super().__init__(active)
        self._template = coalesce(template)

    @property
    def template(self):
        return self._template

    @property
    def descr(self):
        if self._template is None or self._parent is None:
            return self._template
        command = self._parent
        while command is not None and not hasattr(command, "full_path"):
            command = command.parent
        if command is None:
            return self._template
        return re.sub(re.escape(self.MARKER), lambda _: command.full_path, self._template, count=1, flags=re.IGNORECASE)

    def __rich_repr__(self):
        yield "template", self._template


__all__ = (
    "CommandNode",
    "CommandContainer",
    "CommandGroup",
    "TextNode",
    "CommandUsage",
)
