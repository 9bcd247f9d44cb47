"""
Contextual help: resolve a command path against the metadata and render it.

Sections (in order, each omitted when empty)
- NAME         full dotted path plus a one-line summary.
- USAGE        the command line: path, GROUP / COMMAND placeholders, parameters
               (nullable parameters are bracketed).
- DESCRIPTION  the resolved member's description.
- PARAMETERS   name, human-readable type, "(Optional)" and summary, for methods.
- GROUPS       children whose data type is an object type, alphabetically.
- COMMANDS     every other child (scalars, collections, methods), alphabetically.

build(path) returns the structured HelpContent; render(path) prints it with rich.

Palette keys (override through a __styles__ mapping in __main__)
- section, program-name, placeholder, parameter, name-column, type-column
"""
from collections import defaultdict
from dataclasses import dataclass

from rich.console import Console
from rich.padding import Padding
from rich.pretty import pprint
from rich.table import Table
from rich.text import Text

from .faults import UnknownCommandError, FaultCode, getdoc
from .metadata import *
from .printer import Printer
from .utils import ordinal


@dataclass(frozen=True, slots=True)
class HelpContent:
    label: str
    summary: str | None
    path: tuple
    placeholders: tuple
    parameters: tuple
    description: str | None
    groups: tuple
    commands: tuple
    context: object

    @property
    def usage(self):
        """plain-text usage line: path, placeholders joined by '|', then parameters."""
        parts = [" ".join(self.path)]
        if self.placeholders:
            parts.append(" | ".join(self.placeholders))
        for name, _, optional, _ in self.parameters:
            parts.append(f"[{name}]" if optional else name)
        return " ".join(parts)


def _children(context):
    members = getattr(context, "members", None)
    if members is None:
        return None
    return sorted(
        (member for member in members.values() if not member.hidden),
        key=lambda x: (x.name.casefold(), x.name),
    )


def _find(members, component):
    try:
        return members[component]
    except KeyError:
        pass
    for member in members.values():
        if component in member.aliases:
            return member
    return None


class HelpRenderer:
    """
    help builder/printer bound to one interface.

    parameters
    - interface: metacli.metadata.Interface
    - command_name: str, the program label used at the start of every path.
    - console: rich Console for the output (stdout console when omitted).
    """

    def __init__(self, interface, command_name, /, console=None):
        self.interface = interface
        self.command_name = command_name
        self.console = console or Console()
        self.printer = Printer(self.console)

    def resolve(self, path, /):
        """
        walk path through the metadata; return (member, context).

        context is the composite type of a group (the interface at the root), the
        method itself, or the data type of a scalar/collection leaf.
        """
        member = None
        context = self.interface
        for index, component in enumerate(path, 1):
            members = getattr(context, "members", None)
            if members is None or (member := _find(members, component)) is None:
                route = " ".join((self.command_name, *path[:index - 1]))
                raise UnknownCommandError(
                    "unknown command or group %r at %s position of help path" % (component, ordinal(index)),
                    title="unknown command or group",
                    code=FaultCode.UNKNOWN_COMMAND,
                    hint="run '%s help%s' to see what is available" % (
                        self.command_name, "".join(" " + step for step in path[:index - 1])
                    ),
                    docs=getdoc(FaultCode.UNKNOWN_COMMAND),
                    input=component,
                    route=route,
                )
            context = member if isinstance(member, Method) else member.data_type.type
        return member, context

    def build(self, path=(), /):
        path = tuple(path)
        member, context = self.resolve(path)

        parameters = tuple(
            (
                parameter.name,
                human_readable_type(parameter.data_type),
                is_nullable(parameter.data_type),
                summarize(parameter),
            )
            for parameter in getattr(context, "parameters", ())
        )

        groups = []
        commands = []
        for child in _children(context) or ():
            (groups if is_group(child) else commands).append((child.name, summarize(child)))

        placeholders = []
        if groups:
            placeholders.append("GROUP")
        if commands:
            placeholders.append("COMMAND")

        owner = member if member is not None else self.interface
        return HelpContent(
            label=".".join((self.command_name, *path)),
            summary=summarize(owner),
            path=(self.command_name, *path),
            placeholders=tuple(placeholders),
            parameters=parameters,
            description=owner.description,
            groups=tuple(groups),
            commands=tuple(commands),
            context=context,
        )

    def render(self, path=(), /, *, debug=False):
        content = self.build(path)
        if debug:
            pprint(content.context, console=self.console, expand_all=True)

        styles = defaultdict(str, {
            "section": "bold",
            "program-name": "bold",
            "placeholder": "underline",
            "parameter": "italic",
            "name-column": "bold blue",
            "type-column": "italic",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def indent(renderable, width=4):
            return Padding(renderable, (0, 0, 0, width))

        def table(rows, *styles):
            grid = Table.grid(padding=(0, 2))
            for style in styles:
                grid.add_column(style=style)
            for row in rows:
                grid.add_row(*(cell or "" for cell in row))
            return indent(grid, 6)

        self.printer.header("NAME")
        name = Text(content.label)
        if content.summary:
            name.append(" - " + content.summary)
        self.console.print(indent(name))

        self.printer.header("USAGE")
        usage = Text(" ".join(content.path), style=styles["program-name"])
        for index, placeholder in enumerate(content.placeholders):
            usage.append(" | " if index else " ").append(placeholder, style=styles["placeholder"])
        for name, _, optional, _ in content.parameters:
            usage.append(" ")
            if optional:
                usage.append("[").append(name, style=styles["parameter"]).append("]")
            else:
                usage.append(name, style=styles["parameter"])
        self.console.print(indent(usage))

        if content.description:
            self.printer.header("DESCRIPTION")
            self.console.print(indent(Text(content.description)))

        if content.parameters:
            self.printer.header("PARAMETERS")
            self.console.print(table(
                (
                    (name, type, " ".join(filter(None, ("(Optional)" if optional else None, summary))))
                    for name, type, optional, summary in content.parameters
                ),
                styles["name-column"], styles["type-column"], "",
            ))

        for title, placeholder, rows in (
                ("GROUPS", "GROUP", content.groups),
                ("COMMANDS", "COMMAND", content.commands),
        ):
            if not rows:
                continue
            self.printer.header(title)
            self.console.print(indent(Text.assemble(
                (placeholder, styles["placeholder"]), " is one of the following:"
            )))
            self.console.print()
            self.console.print(table(rows, styles["name-column"], ""))

        return content


__all__ = (
    "HelpContent",
    "HelpRenderer",
)
