from enum import Enum

from rich.pretty import pprint

from cmdtree import *
from cmdtree.options import choice


class Level(Enum):
    Value1 = 1
    Value2 = 2
    Value3 = 3


state = {
    "advanced": False,
    "extract": False,
    "create": False,
    "list": False,
    "name": None,
    "age": 0,
}
files = []
macros = []
hello_files = []
levels = []


def age(value):
    if int(value) > 200:
        raise ValueError("Age must be <= 200")
    return int(value)


def flag(key):
    def callback(value):
        state[key] = value is not None
    return callback


app = CommandApp(
    "multi",
    "Demonstrates sub-commands, groups and key/value options",
    CommandUsage(),
    "",
    "Options:",
    Option("D:", "Add a macro {0:NAME} and optional {1:VALUE}", lambda key, value: macros.append((key, value)), count=2),
    Option("f=", "The input {FILE}", files),
    Option("x", "Extract the file", flag("extract")),
    Option("c", "Create the file", flag("create")),
    Option("t", "List the file", flag("list")),
    Option("a|advanced", "Show advanced options", flag("advanced")),
    HelpOption(),
    VersionOption("1.2.3"),
    CommandGroup(lambda: state["advanced"]).add(
        "",
        "Advanced Options:",
        Option("special", "This is a special option", flag("special")),
    ),
    "",
    "Available commands:",
)


@app.command("hello", "This is a hello command")
def hello(context, arguments):
    context.print(f"Hello name={state['name']}, age={state['age']}")
    for file in hello_files:
        context.print(f"Hello File {file}")
    return 1 if state["age"] > 100 else 0


hello.add(
    "",
    "Options:",
    Option("n|name=", "This is a name", lambda value: state.update(name=value)),
    Option("a|age=", "Sets the {AGE}", lambda value: state.update(age=value), type=age),
    HelpOption(),
    Option("<>", "[files]*", hello_files),
)


@app.command("world", "This is a world command")
async def world(context, arguments):
    for file in arguments:
        context.print(f"World {file}")
    for level in levels:
        context.print(f"World Enum {level.name}")


world.add(
    CommandUsage("Usage: {NAME} [Options] [files]* @file"),
    "",
    "Options:",
    Option("e|enum=", f"This is an {{ENUM}} accepting the following values: {choice(Level).names}", levels, type=choice(Level)),
    HelpOption(),
    ResponseFileSource(),
)

app.add(
    "",
    CommandUsage("Run '{NAME} [command] --help' for more information on a command."),
)


@app
def main(context, arguments):
    pprint(state)
    for file in files:
        context.print(f"File: {file}")
    for key, value in macros:
        context.print(f"Macro: {key} => {value}")


if __name__ == '__main__':
    raise SystemExit(invoke(app))
