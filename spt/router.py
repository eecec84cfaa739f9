"""
spt router: dispatch a subcommand name and its tokens to an Action.

Pipeline (short-circuits on the first fault)
    lookup → parse → validate → backfill → require → build

- lookup resolves the name or one of its visible aliases ("pb", "p", "l", "s");
  unknown names raise UnknownCommandError with close-match suggestions.
- required groups holding defaultable flags are validated after back-fill.
- faults are surfaced through Router.trigger(), which merges the router's
  presentation options (shell, fancy, colorful) into them: without shell the
  fault is raised to the caller, with shell it is printed and the process exits.
"""
import difflib
import itertools
import shlex
import sys
import warnings
from collections.abc import Iterable
from types import MappingProxyType
from typing import NamedTuple

from .actions import build
from .commands import COMMANDS, GLOBALS
from .constraints import require, validate
from .defaults import backfill, deferrable
from .faults import *
from .faults import trigger as _trigger
from .helper import render
from .logs import get_logger
from .presence import parse
from .utils import *

log = get_logger(__name__)

HELP = ("-h", "--help")


class Invocation(NamedTuple):
    """
    a command line split at the subcommand: global options, name, remaining tokens.
    """
    options: object
    name: str | None
    tokens: tuple


def _tokens(prompt, /):
    if prompt is Unset:
        return tuple(sys.argv[1:])
    if isinstance(prompt, str):
        return tuple(shlex.split(prompt))
    if isinstance(prompt, Iterable):
        tokens = tuple(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("prompt must be a string or an iterable of strings")
        return tokens
    raise TypeError("prompt must be a string or an iterable of strings")


def _helping(tokens, /):
    return any(token in HELP for token in itertools.takewhile(lambda token: token != "--", tokens))


class Router:
    """
    Name/alias → CommandSpec dispatcher.

    Parameters
    - name: program name used in messages and help.
    - commands: CommandSpec tables to route to.
    - globals: CommandSpec of the options accepted before the subcommand.
    - shell: print faults and exit instead of raising them.
    - fancy: render faults and help inside panels.
    - colorful: style faults and help.
    """

    def __init__(self, name="spt", commands=COMMANDS, globals=GLOBALS, /, *, shell=False, fancy=False, colorful=False):
        table = {}
        for spec in commands:
            for key in (spec.name, *spec.aliases):
                if key in table:
                    raise ValueError(f"command name {key!r} is already in use")
                table[key] = spec
        self._name = name
        self._commands = tuple(commands)
        self._table = table
        self._globals = globals
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)

    @property
    def name(self):
        return self._name

    @property
    def commands(self):
        """
        primary name → CommandSpec, in declaration order.
        """
        return MappingProxyType({spec.name: spec for spec in self._commands})

    @property
    def globals(self):
        return self._globals

    @property
    def shell(self):
        return self._shell

    @property
    def fancy(self):
        return self._fancy

    @property
    def colorful(self):
        return self._colorful

    def trigger(self, fault, /, **options):
        _trigger(fault, **options, tool=self, shell=self.shell, fancy=self.fancy, colorful=self.colorful)

    def lookup(self, name, /):
        """
        return the CommandSpec for a name or alias.

        raises
        - UnknownCommandError with up to five close matches as suggestions.
        """
        try:
            return self._table[name]
        except KeyError:
            pass
        suggestions = difflib.get_close_matches(name, self._table.keys(), 5)
        try:
            hint = "did you mean %r? run '%s --help' to see all commands" % (suggestions[0], self.name)
        except IndexError:
            hint = "run '%s --help' to see all commands" % self.name
        raise UnknownCommandError(
            "unknown command %r" % name,
            title="unknown command",
            code=FaultCode.UNKNOWN_COMMAND,
            input=name,
            suggestions=suggestions,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_COMMAND),
        )

    def split(self, prompt=Unset, /):
        """
        parse the global options in front of the subcommand.

        returns an Invocation; `name` is None when no subcommand was given.
        valued global options consume their value token ("-c path play ...").
        """
        tokens = _tokens(prompt)
        index = 0
        while index < len(tokens) and tokens[index].startswith("-") and tokens[index] not in ("-", "--"):
            token = tokens[index]
            index += 1
            flag = self._globals.switches.get(token)
            if flag is not None and flag.kind.valued:
                index += 1
        head = tuple(token for token in tokens[:index] if token not in HELP)
        if index < len(tokens) and tokens[index] == "--":
            index += 1
        try:
            options = parse(self._globals, head)
        except CommandException as fault:
            self.trigger(fault)
            raise
        if index < len(tokens):
            return Invocation(options, tokens[index], tokens[index + 1:])
        return Invocation(options, None, ())

    def route(self, name, tokens=(), /):
        """
        run the grammar pipeline for one subcommand and return its Action.
        """
        try:
            spec = self.lookup(name)
            with warnings.catch_warnings(record=True) as captured:
                warnings.simplefilter("always")
                presence = parse(spec, tokens)
            for record in captured:
                if isinstance(record.message, CommandWarning):
                    self.trigger(record.message)
                else:
                    warnings.warn_explicit(record.message, record.category, record.filename, record.lineno)
            validate(presence, deferred=deferrable(spec))
            presence = backfill(presence)
            require(presence)
            action = build(presence)
        except CommandException as fault:
            self.trigger(fault)
            raise
        log.debug("command.routed", command=spec.name, alias=name if name != spec.name else None)
        return action

    def help(self, name=None, /):
        """
        render help for a command, or the overview when name is None.
        """
        if name is None:
            render(self._globals, prog=self.name, children=self._commands, fancy=self.fancy, colorful=self.colorful)
        else:
            render(self.lookup(name), prog=self.name, fancy=self.fancy, colorful=self.colorful)

    def __call__(self, prompt=Unset, /):
        """
        split, then route a whole command line.

        returns the Action, or None when help was requested and rendered.
        -h/--help before the subcommand shows that command's help, as after it.
        raises MissingCommandError when no subcommand follows the global options.
        """
        tokens = _tokens(prompt)
        options, name, rest = self.split(tokens)
        if name is None:
            if _helping(tokens):
                return self.help()
            self.trigger(MissingCommandError(
                "a subcommand is required",
                title="missing command",
                code=FaultCode.MISSING_COMMAND,
                hint="choose one of %s (run '%s --help')" % (
                    ", ".join(repr(spec.name) for spec in self._commands), self.name
                ),
                docs=getdoc(FaultCode.MISSING_COMMAND),
            ))
        head = tokens[:len(tokens) - len(rest) - 1]
        if _helping(head) or _helping(rest):
            try:
                return self.help(name)
            except CommandException as fault:
                self.trigger(fault)
                raise
        return self.route(name, rest)


router = Router()


def route(name, tokens=(), /):
    """
    route with the default (non-shell) router; faults are raised.
    """
    return router.route(name, tokens)


def split(prompt=Unset, /):
    return router.split(prompt)


__all__ = (
    "Router",
    "Invocation",
    "route",
    "split",
)
