r"""
spt schema: immutable records describing every command's grammar.

Overview
- Records
  • FlagSpec: one flag (or the positional query) of a command: kind, aliases,
    static default, help text and the cross-field rules it carries.
  • Group: a named constraint over flags (exclusivity, requirement, conflicts).
  • DefaultRule: a presence-guarded substitute value for an absent flag.
  • CommandSpec: the table binding flags, groups and default rules to a
    subcommand name and its aliases.

- Value types
  • Kind: arity of a flag (boolean, counted, string, integer, signed integer).
  • Exclusivity: how many members of a group may be present together.
  • Offset: a signed seek offset whose sign changes its meaning.

Immutability
- Records are built once at import and sealed: construction happens inside a
  guarded build phase (see Sealed), afterwards every attribute is read-only and
  containers are exposed as tuples/frozensets/mapping proxies.
- Definitions are validated on construction; a malformed table is a programming
  error and raises TypeError/ValueError at import time, never at parse time.

Quick example:
    >>> seek = FlagSpec("seek", "--seek", kind=Kind.SIGNED_INTEGER, hyphens=True)
    >>> seek.kind.convert("+10")
    Offset(seconds=10, relative=True)
"""
import functools
import operator
import re
from collections.abc import Iterable, Mapping
from contextlib import contextmanager
from enum import Enum
from types import MappingProxyType
from typing import NamedTuple

from rich.text import Text

from .utils import *


class Offset(NamedTuple):
    """
    signed seek offset.

    - "+10" → Offset(10, True): ten seconds forward
    - "-10" → Offset(-10, True): ten seconds backward
    - "10"  → Offset(10, False): absolute position, tenth second
    """
    seconds: int
    relative: bool

    @classmethod
    def parse(cls, token, /):
        if not (match := re.fullmatch(r"(?P<sign>[+-]?)(?P<digits>\d+)", token.strip())):
            raise ValueError(f"invalid signed integer literal {token!r}")
        seconds = int(match["digits"])
        return cls(-seconds if match["sign"] == "-" else seconds, bool(match["sign"]))


def _integer(token, /):
    if not re.fullmatch(r"[+-]?\d+", token.strip()):
        raise ValueError(f"invalid integer literal {token!r}")
    return int(token)


class Kind(Enum):
    """
    arity of a flag.

    - BOOLEAN: presence-only, repeats collapse to present.
    - COUNTED: presence-only, each occurrence increments a counter.
    - STRING / INTEGER / SIGNED_INTEGER: take exactly one value token.
    """
    BOOLEAN = "boolean"
    COUNTED = "counted"
    STRING = "string"
    INTEGER = "integer"
    SIGNED_INTEGER = "signed-integer"

    @property
    def valued(self):
        return self not in (Kind.BOOLEAN, Kind.COUNTED)

    def convert(self, token, /):
        """
        convert a raw value token; raises ValueError on a bad literal.
        """
        match self:
            case Kind.STRING:
                return token
            case Kind.INTEGER:
                return _integer(token)
            case Kind.SIGNED_INTEGER:
                return Offset.parse(token)
        raise TypeError(f"{self.value} flags do not take values")


class Exclusivity(Enum):
    AT_MOST_ONE = "at-most-one"
    ALL_OR_NONE = "all-or-none"
    FREE = "free"


class SpecType(type):
    """
    Metaclass for schema records.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens),
      used in definition errors and help output.
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private backing field.
    - Provide stable __repr__/__rich_repr__ for diagnostics and rich pretty-printing.
    """
    __introspectable__ = ()

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
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Sealed(metaclass=SpecType):
    """
    base for records that are writable only during their build phase.

    usage
        with super().__new__(cls) as self:
            self._field = value
        # after the 'with' block, every attribute is read-only.
    """

    @contextmanager
    def __new__(cls):
        self = super().__new__(cls)
        object.__setattr__(self, "_Sealed__building", True)
        try:
            yield self
        finally:
            object.__setattr__(self, "_Sealed__building", False)

    def __setattr__(self, name, value, /):
        if not getattr(self, "_Sealed__building", False):
            raise AttributeError(f"{type(self).__typename__} is read-only")
        object.__setattr__(self, name, value)

    def __delattr__(self, name, /):
        raise AttributeError(f"{type(self).__typename__} is read-only")


def _identifier(cls, label, value, /):
    """
    validate a schema identifier (flag/group/command name) and return it trimmed.
    """
    if not isinstance(value, str):
        raise TypeError(f"{cls.__typename__} {label} must be a string")
    elif not (value := value.strip()):
        raise ValueError(f"{cls.__typename__} {label} cannot be empty")
    elif not re.fullmatch(r"[^\W\d_](-?[^\W_]+)*", value):
        raise ValueError(f"{cls.__typename__} {label} {value!r} is not a valid identifier")
    return value


def _identifiers(cls, label, values, /):
    """
    validate an iterable of identifiers, rejecting plain strings and duplicates.
    """
    if isinstance(values, str | Text) or not isinstance(values, Iterable):
        raise TypeError(f"{cls.__typename__} {label} must be an iterable of strings")
    names = []
    for value in values:
        if (value := _identifier(cls, label, value)) in names:
            raise ValueError(f"{cls.__typename__} {label} cannot contain duplicates")
        names.append(value)
    return tuple(names)


def _text(cls, label, value, /):
    if not isinstance(value, str | Text | Unset):
        raise TypeError(f"{cls.__typename__} {label!r} must be a string")
    elif isinstance(value, str) and not (value := value.strip()):
        raise ValueError(f"{cls.__typename__} {label!r} cannot be empty")
    return coalesce(value)


class FlagSpec(Sealed):
    """
    One flag of a command.

    Parameters
    - name: unique key within the command (also the PresenceMap key).
    - *names: aliases such as "-n" and "--next"; positional specs have none.
    - kind: Kind, the arity of the flag.
    - default: static default applied when absent and no DefaultRule matched.
    - metavar: label for the value in help (valued kinds only).
    - descr: short help text.
    - positional: the flag consumes a non-switch token (STRING only).
    - hyphens: a valued flag whose value may start with '-' (signed offsets).
    - requires: group names of which one member must be present alongside.
    - conflicts: flag names that must be absent alongside.
    """

    __introspectable__ = (
        "name",
        "names",
        "kind",
        "default",
        "metavar",
        "descr",
        "positional",
        "hyphens",
        "requires",
        "conflicts",
    )

    def __new__(
            cls,
            name,
            /,
            *names,
            kind=Kind.BOOLEAN,
            default=Unset,
            metavar=Unset,
            descr=Unset,
            positional=False,
            hyphens=False,
            requires=(),
            conflicts=(),
    ):
        name = _identifier(cls, "name", name)

        if not isinstance(kind, Kind):
            raise TypeError(f"{cls.__typename__} 'kind' must be a Kind")

        aliases = []
        for alias in names:
            if not isinstance(alias, str):
                raise TypeError(f"{cls.__typename__} names must be strings")
            elif not re.fullmatch(r"-[^\W\d_]|--[^\W\d_](-?[^\W_]+)*", alias := alias.strip()):
                raise ValueError(f"{cls.__typename__} name {alias!r} is not a valid short or long switch")
            elif alias in aliases:
                raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
            aliases.append(alias)

        if positional:
            if aliases:
                raise TypeError(f"positional {cls.__typename__} cannot have switch names")
            if kind is not Kind.STRING:
                raise TypeError(f"positional {cls.__typename__} must be a string")
        elif not aliases:
            raise TypeError(f"{cls.__typename__} {name!r} must specify at least one switch name")

        if not kind.valued:
            if metavar is not Unset:
                raise TypeError(f"{kind.value} {cls.__typename__} cannot have a 'metavar'")
            if hyphens:
                raise TypeError(f"{kind.value} {cls.__typename__} cannot accept hyphen values")

        with super().__new__(cls) as self:
            self._name = name
            self._names = tuple(aliases)
            self._kind = kind
            self._default = default
            self._metavar = coalesce(_text(cls, "metavar", metavar), name.upper() if kind.valued else None)
            self._descr = _text(cls, "descr", descr)
            self._positional = bool(positional)
            self._hyphens = bool(hyphens)
            self._requires = _identifiers(cls, "requires", requires)
            self._conflicts = _identifiers(cls, "conflicts", conflicts)
        return self

    @property
    def label(self):
        """
        the spelling used in messages: the long alias, else the first alias, else the metavar.
        """
        for alias in self.names:
            if alias.startswith("--"):
                return alias
        return self.names[0] if self.names else self.metavar


class Group(Sealed):
    """
    A named constraint over a set of flags.

    - members: flag names; a flag may belong to several groups.
    - exclusivity: AT_MOST_ONE rejects two present members; ALL_OR_NONE rejects
      a partially present group; FREE allows any combination.
    - required: at least one member must be present.
    - conflicts: other group names that must be fully absent when this group
      has a present member.
    """

    __introspectable__ = (
        "name",
        "members",
        "exclusivity",
        "required",
        "conflicts",
    )

    def __new__(cls, name, members, /, exclusivity=Exclusivity.FREE, *, required=False, conflicts=()):
        name = _identifier(cls, "name", name)
        if not (members := _identifiers(cls, "members", members)):
            raise ValueError(f"{cls.__typename__} {name!r} must have at least one member")
        if not isinstance(exclusivity, Exclusivity):
            raise TypeError(f"{cls.__typename__} 'exclusivity' must be an Exclusivity")
        if name in (conflicts := _identifiers(cls, "conflicts", conflicts)):
            raise ValueError(f"{cls.__typename__} {name!r} cannot conflict with itself")

        with super().__new__(cls) as self:
            self._name = name
            self._members = members
            self._exclusivity = exclusivity
            self._required = bool(required)
            self._conflicts = conflicts
        return self


class DefaultRule(Sealed):
    """
    (flag, presence, value): when `flag` is present (or absent, for
    presence=False) the target receives `value`.
    """

    __introspectable__ = (
        "flag",
        "presence",
        "value",
    )

    def __new__(cls, flag, value, /, presence=True):
        with super().__new__(cls) as self:
            self._flag = _identifier(cls, "flag", flag)
            self._presence = bool(presence)
            self._value = value
        return self


class CommandSpec(Sealed):
    """
    The grammar table of one subcommand.

    Parameters
    - name: the subcommand name used for routing.
    - flags: FlagSpec records in declaration order (order drives help output,
      Playback operation order and rule evaluation).
    - groups: Group records, validated in declaration order.
    - defaults: mapping target flag name → sequence of DefaultRule, tried in order.
    - aliases: visible alternative names (e.g. "pb" for "playback").
    - about / descr: one-line summary and long description for help output.

    Checks performed on construction
    - flag names and switch aliases are unique within the command.
    - group members, group conflicts, FlagSpec.requires and FlagSpec.conflicts
      reference declared flags/groups.
    - default rules reference declared flags other than their own target.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "about",
        "descr",
        "flags",
        "groups",
        "defaults",
    )

    def __new__(cls, name, /, flags=(), groups=(), defaults=None, *, aliases=(), about=Unset, descr=Unset):
        name = _identifier(cls, "name", name)
        aliases = _identifiers(cls, "aliases", aliases)

        table = {}
        switches = {}
        for flag in flags:
            if not isinstance(flag, FlagSpec):
                raise TypeError(f"{cls.__typename__} {name!r} flags must be flag-spec records")
            if table.setdefault(flag.name, flag) is not flag:
                raise ValueError(f"{cls.__typename__} {name!r} declares flag {flag.name!r} twice")
            for alias in flag.names:
                if switches.setdefault(alias, flag) is not flag:
                    raise ValueError(f"{cls.__typename__} {name!r} switch {alias!r} is already in use")

        known = {}
        for group in groups:
            if not isinstance(group, Group):
                raise TypeError(f"{cls.__typename__} {name!r} groups must be group records")
            if known.setdefault(group.name, group) is not group:
                raise ValueError(f"{cls.__typename__} {name!r} declares group {group.name!r} twice")
            if unknown := set(group.members) - table.keys():
                raise ValueError(f"{cls.__typename__} {name!r} group {group.name!r} references unknown flags {sorted(unknown)}")

        for group in known.values():
            if unknown := set(group.conflicts) - known.keys():
                raise ValueError(f"{cls.__typename__} {name!r} group {group.name!r} conflicts with unknown groups {sorted(unknown)}")

        for flag in table.values():
            if unknown := set(flag.requires) - known.keys():
                raise ValueError(f"{cls.__typename__} {name!r} flag {flag.name!r} requires unknown groups {sorted(unknown)}")
            if unknown := set(flag.conflicts) - table.keys():
                raise ValueError(f"{cls.__typename__} {name!r} flag {flag.name!r} conflicts with unknown flags {sorted(unknown)}")

        if not isinstance(defaults := {} if defaults is None else defaults, Mapping):
            raise TypeError(f"{cls.__typename__} {name!r} defaults must be a mapping")
        chains = {}
        for target, rules in defaults.items():
            if target not in table:
                raise ValueError(f"{cls.__typename__} {name!r} has default rules for unknown flag {target!r}")
            chain = tuple(rules)
            for rule in chain:
                if not isinstance(rule, DefaultRule):
                    raise TypeError(f"{cls.__typename__} {name!r} default rules must be default-rule records")
                if rule.flag == target or rule.flag not in table:
                    raise ValueError(f"{cls.__typename__} {name!r} default rule for {target!r} cannot consult {rule.flag!r}")
            chains[target] = chain

        with super().__new__(cls) as self:
            self._name = name
            self._aliases = aliases
            self._about = _text(cls, "about", about)
            self._descr = _text(cls, "descr", descr)
            self._flags = tuple(table.values())
            self._groups = tuple(known.values())
            self._defaults = chains
            self._table = table
            self._switches = switches
        return self

    @property
    def switches(self):
        """
        alias → FlagSpec, for every switch spelling of the command.
        """
        return MappingProxyType(self._switches)

    @property
    def cardinals(self):
        """
        positional specs in declaration order.
        """
        return tuple(flag for flag in self.flags if flag.positional)

    def flag(self, name, /):
        """
        return the FlagSpec named `name` (KeyError when undeclared).
        """
        return self._table[name]

    def group(self, name, /):
        for group in self.groups:
            if group.name == name:
                return group
        raise KeyError(name)


__all__ = (
    # Records
    "FlagSpec",
    "Group",
    "DefaultRule",
    "CommandSpec",

    # Value types
    "Kind",
    "Exclusivity",
    "Offset",
)
