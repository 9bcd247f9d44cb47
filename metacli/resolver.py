"""
Command resolution: walk an argument vector through the command tree and dispatch.

States
- NAVIGATING   descending through groups; tokens are looked up as child names.
- DISPATCHING  the context is terminal (scalar, method or help); remaining tokens
               are only classified as flags or positionals.
- DONE         the terminal action ran.

Token rules (in order, while navigating)
1. auto-help on, depth 0 and the token equals the help keyword (any case):
   switch to the help action; following non-flag tokens form the help path.
2. the token names a child of the current group (name or alias): descend; a
   non-group child makes the context terminal.
3. a token starting with the flag prefix is a flag: the prefix is stripped and
   the rest split on the first '='; everything after it is the value ('' when
   there is no '=').
4. anything else is an unknown command or group.

While dispatching, rules 3 and "positional" are the only ones left; positionals
keep their encounter order.

End of input
- terminal scalar  → the value sink receives the live value, unchanged.
- terminal method  → called with the positionals (coerced by declared parameter
  type when possible; extras passed through raw, missing trailing ones omitted);
  awaitable results are awaited; a non-None result goes to the value sink.
- help action      → the help renderer prints the recorded path.
- still navigating → implicit help for the current group (auto-help on), else
  an IncompleteCommandError.

resolve() is synchronous and side-effect free; dispatch() is the only coroutine
and its only suspension point is the awaited command result.
"""
import inspect
from dataclasses import dataclass, field
from enum import Enum

from rich.console import Console

from .faults import *
from .metadata import type_name
from .tree import GroupNode, ScalarNode, MethodNode
from .utils import ordinal


class State(Enum):
    NAVIGATING = "navigating"
    DISPATCHING = "dispatching"
    DONE = "done"


@dataclass(slots=True)
class Resolution:
    """
    outcome of resolve(): where the walk stopped and what the tokens were.

    help_path is None unless the terminal action is help (explicit or implicit).
    """
    state: State
    node: object
    path: tuple = ()
    positionals: list = field(default_factory=list)
    flags: dict = field(default_factory=dict)
    help_path: tuple | None = None

    @property
    def help(self):
        return self.help_path is not None


class CommandResolver:
    """
    argv state machine over a CommandTree.

    parameters
    - tree: metacli.tree.CommandTree
    - help: metacli.help.HelpRenderer used by the help action.
    - registry: metacli.values.CoercionRegistry used to coerce method arguments.
    - value_handler: Callable[[Any], Any] receiving emitted scalars and results.
    - auto_help, flag_prefix, help_keyword, coerce, debug: see metacli.cli.Cli.bind.
    - console: rich Console for debug traces (stderr when omitted).
    """

    def __init__(
            self,
            tree,
            /,
            help,
            registry,
            value_handler,
            *,
            auto_help=True,
            flag_prefix="--",
            help_keyword="help",
            coerce=True,
            debug=False,
            console=None,
    ):
        if not isinstance(flag_prefix, str) or not flag_prefix:
            raise ValueError("command resolver 'flag_prefix' must be a non-empty string")
        if not isinstance(help_keyword, str) or not help_keyword:
            raise ValueError("command resolver 'help_keyword' must be a non-empty string")
        if not callable(value_handler):
            raise TypeError("command resolver 'value_handler' must be callable")
        self.tree = tree
        self.help = help
        self.registry = registry
        self.value_handler = value_handler
        self.auto_help = auto_help
        self.flag_prefix = flag_prefix
        self.help_keyword = help_keyword
        self.coerce = coerce
        self.debug = debug
        self.console = console or Console(stderr=True)

    def _trace(self, message, *arguments):
        if self.debug:
            self.console.log(message % arguments)

    def resolve(self, argv, /):
        """
        classify argv against the tree and return the Resolution.

        raises
        - UnknownCommandError when a token read while navigating matches no child
          and is not flag-shaped.
        - IncompleteCommandError when input ends on a group and auto-help is off.
        """
        state = State.NAVIGATING
        node = self.tree.root
        depth = 0
        path = []
        positionals = []
        flags = {}
        help_path = None

        for index, token in enumerate(argv, 1):
            if not isinstance(token, str):
                raise TypeError("resolve() argument must be an iterable of strings")

            if state is State.NAVIGATING:
                if self.auto_help and depth == 0 and token.lower() == self.help_keyword.lower():
                    self._trace("token %r: help keyword", token)
                    state = State.DISPATCHING
                    help_path = []
                    depth += 1
                    continue
                if (child := node.children.get(token)) is not None:
                    node = child
                    path.append(token)
                    depth += 1
                    if not isinstance(child, GroupNode):
                        state = State.DISPATCHING
                    self._trace("token %r: %s %r", token, type(child).__name__, "/".join(child.path))
                    continue

            if token.startswith(self.flag_prefix):
                name, _, value = token[len(self.flag_prefix):].partition("=")
                flags[name] = value
                self._trace("token %r: flag %r = %r", token, name, value)
            elif state is State.NAVIGATING:
                route = " ".join((self.help.command_name, *path))
                raise UnknownCommandError(
                    "unknown command or group %r at %s position after '%s'" % (token, ordinal(index), route),
                    title="unknown command or group",
                    code=FaultCode.UNKNOWN_COMMAND,
                    hint="run '%s help%s' to see available groups and commands" % (
                        self.help.command_name, "".join(" " + step for step in node.path)
                    ) if self.auto_help else "check the command path",
                    docs=getdoc(FaultCode.UNKNOWN_COMMAND),
                    input=token,
                    index=index,
                    path=tuple(path),
                )
            elif help_path is not None:
                help_path.append(token)
                self._trace("token %r: help path", token)
            else:
                positionals.append(token)
                self._trace("token %r: positional", token)

        if state is State.NAVIGATING:
            if not self.auto_help:
                raise IncompleteCommandError(
                    "'%s' is a group, a command is required" % " ".join((self.help.command_name, *path)),
                    title="incomplete command",
                    code=FaultCode.INCOMPLETE_COMMAND,
                    hint="add one of: %s" % ", ".join(sorted(node.children)) if node.children else "nothing to run here",
                    docs=getdoc(FaultCode.INCOMPLETE_COMMAND),
                    path=tuple(path),
                )
            state = State.DISPATCHING
            help_path = list(node.path)
            self._trace("end of input on group %r: implicit help", "/".join(node.path))

        return Resolution(
            state,
            node,
            tuple(path),
            positionals,
            flags,
            tuple(help_path) if help_path is not None else None,
        )

    def arguments(self, method, positionals, /):
        """
        positional arguments for a method call.

        declared parameters are coerced by their type when coercion is on and the
        registry supports the type; anything else (including extras beyond the
        declared parameters) is passed as the raw string. extras are forwarded as
        well, so a live callable that can receive more positionals than it declares
        must accept *args.
        """
        parameters = method.parameters
        arguments = []
        for index, text in enumerate(positionals):
            if self.coerce and index < len(parameters):
                name = type_name(parameters[index].data_type)
                if self.registry.supports(name):
                    text = self.registry.coerce(name, text)
            arguments.append(text)
        return arguments

    async def dispatch(self, resolution, /):
        """
        run the terminal action of a resolution; returns the emitted value (or None).
        """
        if resolution.state is not State.DISPATCHING:
            raise ValueError("dispatch() resolution must be dispatching")

        value = None
        node = resolution.node
        if resolution.help:
            self.help.render(resolution.help_path, debug=self.debug or "debug" in resolution.flags)
        elif isinstance(node, ScalarNode):
            self.value_handler(value := self.tree.live(node))
        elif isinstance(node, MethodNode):
            arguments = self.arguments(node.member, resolution.positionals)
            value = await self._invoke(node, arguments)
            if value is not None:
                self.value_handler(value)
        else:
            raise RuntimeError("unreachable")

        resolution.state = State.DONE
        return value

    async def _invoke(self, node, arguments):
        callback = self.tree.live(node)
        try:
            result = callback(*arguments)
            if inspect.isawaitable(result):
                result = await result
        except CliException:
            raise
        except Exception as exception:
            route = " ".join((self.help.command_name, *node.path))
            exit_code = getattr(exception, "exit_code", 1)
            raise DelegatedCommandError(
                "command '%s' failed: %s" % (route, str(exception) or type(exception).__name__),
                title="command failed",
                code=FaultCode.DELEGATED_ERROR,
                hint="check the command arguments; run '%s help%s' for usage" % (
                    self.help.command_name, "".join(" " + step for step in node.path)
                ),
                docs=getdoc(FaultCode.DELEGATED_ERROR),
                exit_code=exit_code if isinstance(exit_code, int) else 1,
                exception=exception,
                path=node.path,
            ) from exception
        return result


__all__ = (
    "State",
    "Resolution",
    "CommandResolver",
)
