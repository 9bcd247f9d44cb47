"""
metacli entry point: a construct-once Cli context over a program and its metadata.

Usage
    from metacli import Cli

    with Cli.bind(program, interface, command_name="demo") as cli:
        cli.main()

or, in one call:

    metacli.run(program, interface, command_name="demo")

Binding
- Cli.bind() (or Cli(...) directly) builds the command tree, the coercion registry,
  the help renderer and the resolver once and registers the context process-wide.
- A second construction while one is bound raises AlreadyBoundError; the first
  binding is left untouched. close() (or leaving the with block) releases it.

Failure handling
- normal mode: any error ends in Cli.fail: it is printed on stderr and the process
  exits with the error's exit_code (1 when absent).
- debug mode (debug=True, or DEBUG=yes/1/on/true in the environment): the error is
  handed to error_handler and its result is returned from run()/main().
"""
import asyncio
import copy
import os
import sys
from collections.abc import Mapping, Sequence, Set

from rich.console import Console
from rich.pretty import pprint

from .faults import *
from .help import HelpRenderer
from .metadata import load, load_file
from .printer import Printer, ErrorPayload
from .resolver import CommandResolver
from .tree import CommandTree
from .utils import Unset, coalesce
from .values import CoercionRegistry, boolean


def _debug_from_environment():
    text = os.environ.get("DEBUG", "")
    if not text.strip():
        return False
    return boolean(text)


def _composite(value):
    if isinstance(value, str | bytes | bytearray):
        return False
    return isinstance(value, Mapping | Sequence | Set) or hasattr(value, "__dict__")


class Cli:
    """
    bound command-line context; constructing one registers it process-wide.

    attributes (read after bind)
    - program, interface, command_name, auto_help, flag_prefix, help_keyword, coerce,
      debug: the effective options.
    - registry: CoercionRegistry, tree: CommandTree, help: HelpRenderer,
      resolver: CommandResolver.
    - positionals, flags: the classified tokens of the last run.
    """

    _instance = None

    def __init__(
            self,
            program,
            interface,
            /,
            *,
            command_name=Unset,
            auto_help=True,
            flag_prefix="--",
            help_keyword="help",
            value_handler=Unset,
            error_handler=Unset,
            coercers=None,
            coerce=True,
            debug=Unset,
            console=Unset,
            stderr=Unset,
    ):
        if Cli._instance is not None:
            raise AlreadyBoundError(
                "a cli is already bound for %r" % Cli._instance.command_name,
                title="already bound",
                code=FaultCode.ALREADY_BOUND,
                hint="close the bound cli before binding another one",
                docs=getdoc(FaultCode.ALREADY_BOUND),
            )
        if isinstance(interface, str | os.PathLike):
            interface = load_file(interface)
        self.program = program
        self.interface = load(interface)
        self.command_name = coalesce(command_name, os.path.basename(sys.argv[0]))
        self.auto_help = auto_help
        self.flag_prefix = flag_prefix
        self.help_keyword = help_keyword
        self.coerce = coerce
        self.debug = coalesce(debug, None)
        if self.debug is None:
            self.debug = _debug_from_environment()
        self.console = coalesce(console, None) or Console()
        self.stderr = coalesce(stderr, None) or Console(stderr=True)
        self.printer = Printer(self.console, self.stderr)
        self.value_handler = coalesce(value_handler, self.output)
        self.error_handler = coalesce(error_handler, self.fail)

        self.registry = CoercionRegistry(coercers)
        self.tree = CommandTree(self.interface, program)
        self.help = HelpRenderer(self.interface, self.command_name, console=self.console)
        self.resolver = CommandResolver(
            self.tree,
            help=self.help,
            registry=self.registry,
            value_handler=self.value_handler,
            auto_help=auto_help,
            flag_prefix=flag_prefix,
            help_keyword=help_keyword,
            coerce=coerce,
            debug=self.debug,
            console=self.stderr,
        )
        self.positionals = []
        self.flags = {}
        Cli._instance = self

    @classmethod
    def bind(cls, program, interface, /, **options):
        """
        construct the process-wide context; see the class parameters for options.

        raises AlreadyBoundError when a context is already bound.
        """
        return cls(program, interface, **options)

    @property
    def bound(self):
        return Cli._instance is self

    def close(self):
        if Cli._instance is self:
            Cli._instance = None

    def __enter__(self):
        return self

    def __exit__(self, *unused):
        self.close()

    def package_version(self):
        return self.interface.package.version

    def output(self, value, /):
        """default value handler: pretty-print composites, print anything else."""
        if _composite(value):
            pprint(value, console=self.console, expand_all=True)
        else:
            self.console.print(value, markup=False, highlight=False)

    def fail(self, exception, /):
        """default error handler: print the error on stderr and exit with its exit code."""
        if isinstance(exception, CliException) and "prog" not in exception.options:
            exception = copy.replace(exception, prog=self.command_name)
        self.printer.notice("error", ErrorPayload(exception))
        exit_code = getattr(exception, "exit_code", 1)
        sys.exit(exit_code if isinstance(exit_code, int) and exit_code else 1)

    async def run(self, argv=Unset, /):
        """
        resolve and dispatch argv (sys.argv[1:] when omitted).

        returns the emitted value, or in debug mode the error handler's result on failure.
        """
        argv = list(coalesce(argv, sys.argv[1:]))
        try:
            resolution = self.resolver.resolve(argv)
            self.positionals = resolution.positionals
            self.flags = resolution.flags
            return await self.resolver.dispatch(resolution)
        except Exception as exception:
            if not self.debug:
                self.fail(exception)
            result = self.error_handler(exception)
            if asyncio.iscoroutine(result):
                result = await result
            return result

    def main(self, argv=Unset, /):
        return asyncio.run(self.run(argv))


def run(program, interface, argv=Unset, /, **options):
    """bind a Cli, run argv through it and release the binding."""
    with Cli.bind(program, interface, **options) as cli:
        return cli.main(argv)


__all__ = (
    "Cli",
    "run",
)
