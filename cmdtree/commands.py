r"""
cmdtree command layer: build command trees, parse command lines and run them.

What this module provides
- Command: a named node owning options, sub-commands, argument sources and
  help text, plus an optional action run once its command line is parsed.
- CommandApp: the root command of an application (program name, license
  header, shared CommandConfig).
- command(...): build a Command from a function (or a decorator doing so).
- invoke(obj, prompt): run a command from sys.argv, a shell-like string or a
  list of tokens and return its exit code.

Parsing, per token at one command level
1. "--" switches to raw mode: every later token is positional ("--" included).
2. Outside raw mode, the name of an active sub-command finalizes any pending
   option and hands the remaining tokens to that sub-command.
3. Outside raw mode, argument sources (e.g. "@file") may replace the token
   with more tokens, pushed in front of the remaining stream.
4. A pending option takes the token as a value.
5. Tokens shaped like "-x", "--name", "/name" (optionally "=value" or
   ":value") are matched against active aliases: exact names first, then
   "name+" / "name-" negation of switches, then "-abc" bundles of single
   character aliases.
6. Anything else is positional: it goes to the active catch-all option "<>"
   when there is one, to the positional arguments otherwise.
7. At the end of the stream a pending option is invoked as-is.

Running (run_async)
- help requested → print the help, exit code 0;
- a sub-command was reached → its exit code;
- sub-commands exist and positional arguments remain → unknown command, 1;
- an option stopped the run (e.g. --version) → 0;
- otherwise the action receives (context, arguments); its result (None → 0)
  is the exit code. Without an action every positional argument is reported
  as an unknown option, exit code 1.

Every CommandException raised while parsing or running a level is printed on
the error console, prefixed by the command path, and turns into exit code 1.

Quick start
    from cmdtree import CommandApp, HelpOption, invoke

    app = CommandApp("hello", "Say hello")
    app.add(HelpOption())

    @app.option("n|name=", "Your {NAME}")
    def on_name(value):
        state["name"] = value

    @app
    def main(context, arguments):
        context.print(f"Hello {state.get('name', 'world')}!")

    if __name__ == "__main__":
        raise SystemExit(invoke(app))
"""
import asyncio
import copy
import inspect
import os.path
import re
import shlex
import sys
from collections import deque

from .contexts import CommandConfig, OptionContext, RunConfig, RunContext
from .faults import *
from .helps import render_help
from .nodes import CommandContainer, CommandGroup, CommandNode
from .options import Option
from .prototypes import CATCH_ALL, Arity
from .sources import ArgumentSource
from .utils import *

#: Shape of a token naming an option: flag, name and optional inline value.
_TOKEN = re.compile(r"(?P<flag>--|-|/)(?P<name>[^:=]+)(?:(?P<separator>[:=])(?P<value>.*))?", re.DOTALL)


def _split(value, separators, limit, /):
    """
    Split value on any of separators into at most limit pieces (the last
    piece keeps the remaining separators).
    """
    if not separators or limit <= 1:
        return [value]
    pattern = "|".join(map(re.escape, sorted(separators, key=len, reverse=True)))
    return re.split(pattern, value, maxsplit=limit - 1)


class Command(CommandContainer):
    """
    A command: a node with options, sub-commands, argument sources, help
    text and an optional action.

    Parameters
    - name: command name (whitespace runs collapse to one space).
    - descr: help description.
    - *nodes: children added right away (see add()).
    - action: callable(context, arguments) → int | None, or a coroutine
      function; the exit code of the command.
    - active: activation predicate.

    Children
    - Option: indexed under every alias (duplicates raise ValueError).
    - Command: indexed under its name (duplicates raise ValueError).
    - ArgumentSource: offered every token before option matching.
    - CommandGroup: flattened, see cmdtree.nodes.CommandGroup.
    - str: help text (TextNode). A callable: the action.
    """
    __introspectable__ = ("name", "descr", "options", "commands", "sources", "nodes")
    __displayable__ = ("name", "descr", "commands")

    #: Label of the options part of the default usage line.
    options_name = "Options"

    def __init__(self, name, descr=Unset, /, *nodes, action=Unset, active=Unset):
        if not isinstance(descr, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'descr' must be a string")
        if not callable(coalesce(action, callable)):
            raise TypeError(f"{type(self).__typename__} 'action' must be callable")
        super().__init__(active)
        self._name = normalize_name(name)
        self._descr = coalesce(descr)
        self._action = action
        self._config = Unset
        self._options = {}
        self._commands = {}
        self._sources = []
        self.add(*nodes)

    @property
    def action(self):
        return coalesce(self._action)

    @action.setter
    def action(self, action):
        if not callable(action):
            raise TypeError(f"{type(self).__typename__} 'action' must be callable")
        self._action = action

    def __call__(self, action, /):
        """
        Set the action of this command; usable as a decorator, returning the
        command itself.
        """
        self.action = action
        return self

    @property
    def config(self):
        """
        The CommandConfig of this command: its own, else its parent's, else
        the process default.
        """
        command = self
        while command is not None:
            if command._config is not Unset:
                return command._config
            command = command.parent
        return CommandConfig.default

    @property
    def root(self):
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        The commands from the root to this command.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    @property
    def full_path(self):
        return " ".join(command.name for command in self.path)

    @property
    def app(self):
        """
        The closest CommandApp among this command and its ancestors, or None.
        """
        for command in reversed(self.path):
            if isinstance(command, CommandApp):
                return command
        return None

    def _coerce(self, node):
        if callable(node) and not isinstance(node, CommandNode):
            return node
        return super()._coerce(node)

    def add(self, *nodes):
        for node in map(self._coerce, nodes):
            if isinstance(node, CommandNode):
                self._attach(node)
            else:
                self.action = node
        return self

    def _attach(self, node):
        if node._parent is not None:
            raise ValueError(f"the node {node!r} is already attached to a parent {node._parent!r}")
        if isinstance(node, CommandGroup):
            return node._mount(self)
        if isinstance(node, Option):
            for name in node.names:
                if name in self._options:
                    raise ValueError(f"{type(self).__typename__} {self.name!r} option name {name!r} is already in use")
        if isinstance(node, Command) and node.name in self._commands:
            raise ValueError(f"{type(self).__typename__} {self.name!r} sub-command name {node.name!r} is already in use")
        if isinstance(node, Command) and node is self.root:
            raise ValueError(f"{type(self).__typename__} {self.name!r} cannot contain its own root")

        super()._attach(node)

        if isinstance(node, Option):
            self._options.update(dict.fromkeys(node.names, node))
        elif isinstance(node, Command):
            self._commands[node.name] = node
        elif isinstance(node, ArgumentSource):
            self._sources.append(node)

    def show_help(self, config=Unset, /):
        """
        Print the help of this command on config.out.
        """
        config = coalesce(config) or RunConfig()
        config.out.print(render_help(self, config), markup=False, emoji=False, highlight=False, soft_wrap=True)

    def _lookup(self, name):
        option = self._options.get(name)
        if option is None or name == CATCH_ALL or not option.active:
            return None
        return option

    def _parse(self, run, tokens, index, /):
        """
        Parse tokens at this level.

        Returns (arguments, child, index): the positional arguments, the
        sub-command the remaining tokens belong to (or None) and the stream
        index of the first remaining token.
        """
        context = OptionContext(run, self, index - 1)
        catchall = self._options.get(CATCH_ALL)
        arguments = []
        raw = False

        while tokens:
            token = tokens.popleft()
            context.index += 1

            if token == "--" and not raw:
                raw = True
                continue

            if not raw:
                child = self._commands.get(token)
                if child is not None and child.active:
                    self._finalize(context)
                    return arguments, child, context.index + 1
                if self._expand(token, tokens):
                    continue
                if self._match(token, context):
                    continue

            self._finalize(context)
            if catchall is not None and catchall.active:
                context.option = catchall
                context.name = CATCH_ALL
                context.values.append(token)
                catchall.invoke(context)
            else:
                arguments.append(token)

        self._finalize(context)
        return arguments, None, context.index + 1

    def _finalize(self, context):
        if context.option is not None:
            context.option.invoke(context)

    def _expand(self, token, tokens):
        for source in self._sources:
            if not source.active:
                continue
            replacement = source.expand(token)
            if replacement is None:
                continue
            tokens.extendleft(reversed(list(replacement)))
            return True
        return False

    def _match(self, token, context):
        if context.option is not None:
            self._accumulate(token, context)
            return True

        match = _TOKEN.fullmatch(token)
        if match is None:
            return False

        flag, name, separator, value = match.group("flag", "name", "separator", "value")

        if (option := self._lookup(name)) is not None:
            context.option = option
            context.name = flag + name
            if option.arity is Arity.NONE:
                context.values.append(name)
                option.invoke(context)
            else:
                self._accumulate(value, context)
            return True

        if name[-1] in "+-" and (option := self._lookup(name[:-1])) is not None and option.arity is Arity.NONE:
            context.option = option
            context.name = token
            context.values.append(token if name[-1] == "+" else None)
            option.invoke(context)
            return True

        if flag == "-":
            return self._bundle(flag, name + (separator or "") + (value or ""), context)

        return False

    def _bundle(self, flag, bundle, context):
        for position, char in enumerate(bundle):
            option = self._lookup(char)
            if option is None:
                if position == 0:
                    return False
                raise BundleOptionError(
                    self.config.localizer(f"Cannot use unregistered option '{char}' in bundle '{flag}{bundle}'."),
                    flag + char,
                    index=context.index,
                )
            context.option = option
            context.name = flag + char
            if option.arity is Arity.NONE:
                context.values.append(bundle)
                option.invoke(context)
            else:
                # the first value-taking option consumes the rest of the bundle
                self._accumulate(bundle[position + 1:] or None, context)
                return True
        return True

    def _accumulate(self, value, context):
        option = context.option
        if value is not None:
            context.values.extend(_split(value, option.separators, option.count - len(context.values)))
        if len(context.values) == option.count or option.arity is Arity.OPTIONAL:
            option.invoke(context)
        elif len(context.values) > option.count:
            raise TooManyValuesError(
                self.config.localizer(f"Error: Found {len(context.values)} option values when expecting {option.count}."),
                context.name,
                index=context.index,
            )

    def _report(self, run, fault, /):
        run.error.print(
            copy.replace(
                fault,
                tool=self,
                localizer=self.config.localizer,
                colorful=run.config.colorful,
                fancy=run.config.fancy,
            ),
            soft_wrap=not run.config.fancy,
        )

    async def run_async(self, arguments=(), config=Unset, /):
        """
        Parse arguments (the tokens after the program name) and run the
        reached command. Returns the exit code.
        """
        if isinstance(arguments, str):
            raise TypeError(f"{type(self).__typename__} arguments must be an iterable of strings, not a string")
        arguments = tuple(arguments)
        if not all(isinstance(argument, str) for argument in arguments):
            raise TypeError(f"{type(self).__typename__} arguments must be strings")
        return await self._run(deque(arguments), coalesce(config) or RunConfig(), 0)

    def run(self, arguments=(), config=Unset, /):
        """
        Synchronous run_async(); must not be called from a running event loop.
        """
        return asyncio.run(self.run_async(arguments, config))

    async def _run(self, tokens, config, index, /):
        run = RunContext(config)
        localize = self.config.localizer
        try:
            arguments, child, index = self._parse(run, tokens, index)

            if run.show_help:
                self.show_help(config)
                return 0

            if child is not None:
                if arguments:
                    self._report(run, UnknownCommandError(localize(f"Unknown command or option: {arguments[0]}")))
                    return 1
                return await child._run(tokens, config, index)

            if self._commands and arguments:
                self._report(run, UnknownCommandError(localize(f"Unknown command or option: {arguments[0]}")))
                return 1

            if not run.should_run:
                return 0

            if self._action is Unset:
                # one hint after the last report
                for argument in arguments[:-1]:
                    self._report(run, UnknownOptionError(localize(f"Unknown option: {argument}"), hint=None))
                if arguments:
                    self._report(run, UnknownOptionError(localize(f"Unknown option: {arguments[-1]}")))
                else:
                    run.print(localize(f"Use `{self.full_path} --help` for usage."), error=True)
                return 1

            app = self.app
            if run.show_license_on_run and app is not None and app.license_header is not None:
                run.print(str(app.license_header()))

            result = self._action(run, tuple(arguments))
            if inspect.isawaitable(result):
                result = await result
            return 0 if result is None else int(result)
        except CommandException as fault:
            self._report(run, fault)
            return 1

    def __invoke__(self, prompt=Unset, /, config=Unset):
        """
        Run from sys.argv[1:] (Unset), a shell-like string or an iterable of
        tokens; return the exit code.
        """
        if prompt is Unset:
            prompt = sys.argv[1:]
        elif isinstance(prompt, str):
            prompt = shlex.split(prompt)
        try:
            tokens = list(prompt)
        except TypeError:
            raise TypeError("prompt must be a string or an iterable of strings") from None
        return self.run(tokens, config)


def _program_name():
    main = __import__("__main__")
    try:
        return main.__prog__
    except AttributeError:
        pass
    name = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else ""
    return os.path.splitext(name)[0] or "command"


class CommandApp(Command):
    """
    Root command of an application.

    Parameters
    - name: program name; defaults to __prog__ of __main__, else the script
      name without extension.
    - descr, *nodes, action, active: as Command.
    - config: CommandConfig shared by the whole tree.
    - license_header: callable returning the text printed at the top of the
      help (and before the action when RunConfig.show_license_on_run).
    """
    __displayable__ = ("name", "descr", "commands", "license_header")

    def __init__(self, name=Unset, descr=Unset, /, *nodes, config=Unset, license_header=Unset, **options):
        if not isinstance(config, CommandConfig | Unset):
            raise TypeError(f"{type(self).__typename__} 'config' must be a CommandConfig")
        if not callable(coalesce(license_header, callable)):
            raise TypeError(f"{type(self).__typename__} 'license_header' must be callable")
        self._license_header = coalesce(license_header)
        super().__init__(name if name is not Unset else _program_name(), descr, *nodes, **options)
        self._config = config

    @property
    def license_header(self):
        return self._license_header

    @license_header.setter
    def license_header(self, license_header):
        if not callable(license_header):
            raise TypeError(f"{type(self).__typename__} 'license_header' must be callable")
        self._license_header = license_header


def command(source=Unset, /, *nodes, name=Unset, descr=Unset, active=Unset):
    """
    Build a Command running a function.

    - name defaults to the function name (underscores become hyphens);
    - descr defaults to the first line of the function docstring.

    Forms
    - command(function, *nodes, ...) → Command
    - @command(...) → decorator producing a Command
    """
    if source is Unset:
        @rename("command")
        def wrapper(source, /):
            return command(source, *nodes, name=name, descr=descr, active=active)
        return wrapper

    if not callable(source):
        raise TypeError("command() argument must be callable")

    if descr is Unset and (docstring := inspect.getdoc(source)):
        descr = docstring.strip().splitlines()[0]
    return Command(
        name if name is not Unset else source.__name__.strip("_").replace("_", "-"),
        descr,
        *nodes,
        action=source,
        active=active,
    )


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for commands or callables; returns the exit code.

    Parameters
    - object: an instance providing __invoke__(prompt) or a plain callable
      (wrapped with command()).
    - prompt:
      • Unset: read sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: use items as tokens.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    if callable(object):
        return invoke(command(object), prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "Command",
    "CommandApp",
    "command",
    "invoke",
)
