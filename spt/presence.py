"""
spt presence: turn raw tokens into a PresenceMap for one command.

What this module provides
- Presence: the runtime state of one flag (absent, counted n times, or valued).
- PresenceMap: read-only mapping flag name → Presence over a CommandSpec.
- parse(spec, tokens): the syntactic pass of the grammar.

Token forms
- long switches: '--name' and '--name=value' (spaced form '--name value' for valued flags).
- short switches: '-n', '-v 50', '-v50', and clusters of presence flags such as
  '-nnn' (three nexts) or '-st' (status + toggle); a valued short flag inside a
  cluster takes the rest of the cluster (or the next token) as its value.
- '--' stops switch recognition; every later token is positional.
- valued flags declared with hyphens=True accept values starting with '-'
  (e.g. '--seek -10').
- integer flags accept a spaced negative number ('--volume -5') so that the
  bounds check reports it; any other '-' token after a valued flag is a switch.

Faults
- every fault is raised with an ordinal position ("at third position") and the
  offending token; the first one wins. Repeated boolean flags only warn
  (RepeatedFlagWarning) and collapse to present.
"""
import difflib
import re
import warnings
from collections import deque
from collections.abc import Mapping
from typing import NamedTuple

from .faults import *
from .logs import get_logger
from .schema import Kind
from .utils import *

log = get_logger(__name__)


class Presence(NamedTuple):
    """
    runtime state of one flag.

    - count: number of occurrences (0 when absent; boolean flags collapse to 1).
    - value: converted value for valued flags, Unset otherwise.
    - defaulted: the value was back-filled by a default rule, not supplied.
    """
    count: int = 0
    value: object = Unset
    defaulted: bool = False

    @property
    def present(self):
        return self.count > 0 or self.defaulted


ABSENT = Presence()


class PresenceMap(Mapping):
    """
    Mapping of every declared flag name to its Presence.

    Declared-but-absent flags map to an absent Presence; undeclared names raise
    KeyError. Instances are never mutated: fill() returns a new map.
    """

    def __init__(self, spec, entries=None, /):
        self._spec = spec
        self._entries = dict(entries or {})
        if unknown := self._entries.keys() - set(self):
            raise KeyError(f"undeclared flags for {spec.name!r}: {sorted(unknown)}")

    @property
    def spec(self):
        return self._spec

    def __getitem__(self, name, /):
        self._spec.flag(name)
        return self._entries.get(name, ABSENT)

    def __iter__(self):
        return (flag.name for flag in self._spec.flags)

    def __len__(self):
        return len(self._spec.flags)

    def present(self, name, /):
        return self[name].present

    def count(self, name, /):
        return self[name].count

    def value(self, name, default=None, /):
        return coalesce(self[name].value, default)

    def members(self, names, /):
        """
        return the present names among `names`, keeping their order.
        """
        return tuple(name for name in names if self.present(name))

    def fill(self, name, value, /):
        """
        return a copy where the absent flag `name` carries a defaulted value.
        """
        if self.present(name):
            raise ValueError(f"flag {name!r} is already present")
        return type(self)(self._spec, self._entries | {name: Presence(value=value, defaulted=True)})

    def __rich_repr__(self):
        yield "command", self._spec.name
        for name, presence in self._entries.items():
            if presence.present:
                yield name, presence

    def __repr__(self):
        return "presence-map(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


def _route(spec):
    return spec.name if spec.name == "spt" else "spt %s" % spec.name


def _unknown(spec, input, index):
    suggestions = difflib.get_close_matches(input, spec.switches.keys(), 5)
    try:
        hint = "did you mean %r? you can also run '%s --help' to see all flags" % (suggestions[0], _route(spec))
    except IndexError:
        hint = "run '%s --help' to see all available flags" % _route(spec)
    return UnknownSwitchError(
        "unknown flag %r at %s position" % (input, ordinal(index)),
        title="unknown flag",
        code=FaultCode.UNKNOWN_SWITCH,
        command=spec.name,
        input=input,
        index=index,
        suggestions=suggestions,
        hint=hint,
        docs=getdoc(FaultCode.UNKNOWN_SWITCH),
    )


class _Parser:
    """
    single-use state for one parse() call.
    """

    def __init__(self, spec, tokens):
        self.spec = spec
        self.tokens = deque(tokens)
        self.index = 1
        self.entries = {}
        self.cardinals = deque(spec.cardinals)

    def run(self):
        switching = True
        while self.tokens:
            token = self.tokens.popleft()
            if switching and token == "--":
                switching = False
            elif switching and token.startswith("-") and token != "-":
                if token.startswith("--"):
                    self.long(token)
                else:
                    self.short(token)
            else:
                self.cardinal(token)
            self.index += 1

        for flag in self.cardinals:
            if flag.default is Unset:
                raise MissingCardinalsError(
                    "required %s is missing" % flag.metavar,
                    title="missing positional",
                    code=FaultCode.MISSING_CARDINALS,
                    command=self.spec.name,
                    flag=flag.name,
                    hint="add the %s value (for example: %s <%s>)" % (flag.metavar, _route(self.spec), flag.metavar),
                    docs=getdoc(FaultCode.MISSING_CARDINALS),
                )

        return PresenceMap(self.spec, self.entries)

    def long(self, token):
        match = re.fullmatch(r"(?P<input>--[^\W\d_](-?[^\W_]+)*)(=(?P<value>[^\r\n]*))?", token)
        if not match:
            raise MalformedTokenError(
                "bad form of flag %r at %s position" % (token, ordinal(self.index)),
                title="malformed flag",
                code=FaultCode.MALFORMED_TOKEN,
                command=self.spec.name,
                token=token,
                index=self.index,
                hint="try '%s --help' to see valid spellings (e.g., --name=value)" % _route(self.spec),
                docs=getdoc(FaultCode.MALFORMED_TOKEN),
            )
        try:
            flag = self.spec.switches[match["input"]]
        except KeyError:
            raise _unknown(self.spec, match["input"], self.index) from None
        self.record(flag, match["input"], match["value"])

    def short(self, token):
        cluster = token[1:]
        for position, char in enumerate(cluster):
            if not re.fullmatch(r"[^\W\d_]", char):
                raise MalformedTokenError(
                    "bad form of flag %r at %s position" % (token, ordinal(self.index)),
                    title="malformed flag",
                    code=FaultCode.MALFORMED_TOKEN,
                    command=self.spec.name,
                    token=token,
                    index=self.index,
                    hint="short flags are single letters and may be grouped (e.g., -nnn)",
                    docs=getdoc(FaultCode.MALFORMED_TOKEN),
                )
            try:
                flag = self.spec.switches[input := "-" + char]
            except KeyError:
                raise _unknown(self.spec, input, self.index) from None
            if flag.kind.valued:
                rest = cluster[position + 1:]
                self.record(flag, input, rest.removeprefix("=") if rest else None)
                return
            self.record(flag, input, None)

    def cardinal(self, token):
        try:
            flag = self.cardinals.popleft()
        except IndexError:
            raise UnexpectedCardinalError(
                "unexpected positional argument %r at %s position" % (token, ordinal(self.index)),
                title="unexpected positional",
                code=FaultCode.UNEXPECTED_CARDINAL,
                command=self.spec.name,
                token=token,
                index=self.index,
                hint="remove this extra value or quote it together with the previous one",
                docs=getdoc(FaultCode.UNEXPECTED_CARDINAL),
            ) from None
        self.assign(flag, flag.metavar, token, self.index)

    def record(self, flag, input, inline):
        """
        record one occurrence of `flag` spelled `input`; `inline` is the value
        attached to the token itself (None when there was none).
        """
        current = self.entries.get(flag.name, ABSENT)

        if not flag.kind.valued:
            if inline is not None:
                raise FlagAssignmentError(
                    "flag %r at %s position cannot have a value" % (input, ordinal(self.index)),
                    title="flag cannot take a value",
                    code=FaultCode.FLAG_ASSIGNMENT,
                    command=self.spec.name,
                    flag=flag.name,
                    input=input,
                    index=self.index,
                    hint="remove everything from '=' (for example: %s)" % input,
                    docs=getdoc(FaultCode.FLAG_ASSIGNMENT),
                )
            if flag.kind is Kind.COUNTED:
                self.entries[flag.name] = Presence(count=current.count + 1)
                return
            if current.present:
                warnings.warn(RepeatedFlagWarning(
                    "flag %r at %s position was already provided" % (input, ordinal(self.index)),
                    title="repeated flag",
                    code=FaultCode.REPEATED_FLAG,
                    command=self.spec.name,
                    flag=flag.name,
                    input=input,
                    index=self.index,
                    hint="a single %s is enough; repeating it has no effect" % input,
                    docs=getdoc(FaultCode.REPEATED_FLAG),
                ), stacklevel=2)
            self.entries[flag.name] = Presence(count=1)
            return

        if current.present:
            raise DuplicatedSwitchError(
                "flag %r at %s position was already provided" % (input, ordinal(self.index)),
                title="duplicated flag",
                code=FaultCode.DUPLICATED_SWITCH,
                command=self.spec.name,
                flag=flag.name,
                input=input,
                index=self.index,
                hint="keep a single %s; it takes exactly one value" % input,
                docs=getdoc(FaultCode.DUPLICATED_SWITCH),
            )

        start = self.index
        if inline is None:
            if not self.tokens or (self.tokens[0].startswith("-") and not self.negative(flag, self.tokens[0])):
                raise OptionValueRequiredError(
                    "flag %r at %s position requires a value" % (input, ordinal(start)),
                    title="missing flag value",
                    code=FaultCode.OPTION_VALUE_REQUIRED,
                    command=self.spec.name,
                    flag=flag.name,
                    input=input,
                    index=start,
                    hint="provide a value (e.g., %s <%s>)" % (input, flag.metavar),
                    docs=getdoc(FaultCode.OPTION_VALUE_REQUIRED),
                )
            inline = self.tokens.popleft()
            self.index += 1
        self.assign(flag, input, inline, start)

    @staticmethod
    def negative(flag, token):
        """
        whether a spaced value starting with '-' belongs to `flag` rather than
        being the next switch.
        """
        return flag.hyphens or (flag.kind is Kind.INTEGER and re.fullmatch(r"-\d+", token) is not None)

    def assign(self, flag, input, token, start):
        if not token.strip():
            raise EmptyValueError(
                "empty value for %r from %s position" % (input, ordinal(start)),
                title="empty value",
                code=FaultCode.EMPTY_VALUE,
                command=self.spec.name,
                flag=flag.name,
                input=input,
                index=start,
                hint="provide a non-empty %s" % flag.metavar,
                docs=getdoc(FaultCode.EMPTY_VALUE),
            )
        try:
            value = flag.kind.convert(token)
        except ValueError as exception:
            raise UncastableValueError(
                "value %r for %r from %s position is not a valid %s" % (
                    token, input, ordinal(start), flag.kind.value.replace("-", " ")
                ),
                title="invalid value",
                code=FaultCode.UNCASTABLE_VALUE,
                command=self.spec.name,
                flag=flag.name,
                input=input,
                index=start,
                token=token,
                hint="pass %s as a whole number%s" % (
                    flag.metavar, ", optionally signed with + or -" if flag.kind is Kind.SIGNED_INTEGER else ""
                ),
                docs=getdoc(FaultCode.UNCASTABLE_VALUE),
            ) from exception
        self.entries[flag.name] = Presence(count=1, value=value)


def parse(spec, tokens, /):
    """
    parse raw tokens against a CommandSpec and return the PresenceMap.

    parameters
    - spec: CommandSpec
    - tokens: iterable of str (already shell-split)

    raises
    - ParseError subclasses (see module docstring); warns RepeatedFlagWarning.
    """
    presence = _Parser(spec, tokens).run()
    log.debug("flags.parsed", command=spec.name, present=[name for name in presence if presence.present(name)])
    return presence


__all__ = (
    "Presence",
    "PresenceMap",
    "parse",
)
