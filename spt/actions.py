"""
spt actions: the typed result of one invocation and the builder producing it.

Action variants (frozen values, tagged by their `command` class attribute)
- Playback(ops, device, format): one or more transport operations, in the
  declaration order of their flags; Status alone when nothing else was asked.
- Play(target, queue, random, device, format): target is Uri or Name.
- List(kind, limit, format) / Search(kind, query, limit, format).

Building
- build(presence) first applies the cross-field rules declared on the
  flags (`requires` → MissingCompanionError, `conflicts` →
  IncompatibleFlagsError), then the command builder, which enforces numeric
  bounds (OutOfBoundsError) and raises UnresolvedSelectionError when a map that
  skipped validation selects no kind or several. Every check runs before any value is constructed,
  so a failing build never leaks a partial Action.
"""
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from .faults import *
from .logs import get_logger
from .schema import Offset

log = get_logger(__name__)

LIMIT_BOUNDS = (1, 50)
VOLUME_BOUNDS = (1, 100)


class Context(Enum):
    TRACK = "track"
    ALBUM = "album"
    ARTIST = "artist"
    PLAYLIST = "playlist"
    SHOW = "show"


class ListKind(Enum):
    DEVICES = "devices"
    LIKED = "liked"
    PLAYLISTS = "playlists"


class SearchKind(Enum):
    TRACKS = "tracks"
    ALBUMS = "albums"
    ARTISTS = "artists"
    PLAYLISTS = "playlists"
    SHOWS = "shows"


# --- playback operations ---

@dataclass(frozen=True)
class Toggle: ...


@dataclass(frozen=True)
class Status: ...


@dataclass(frozen=True)
class ShareTrack: ...


@dataclass(frozen=True)
class ShareAlbum: ...


@dataclass(frozen=True)
class TransferTo:
    device: str


@dataclass(frozen=True)
class Like: ...


@dataclass(frozen=True)
class Dislike: ...


@dataclass(frozen=True)
class ToggleShuffle: ...


@dataclass(frozen=True)
class CycleRepeat: ...


@dataclass(frozen=True)
class SkipNext:
    count: int


@dataclass(frozen=True)
class SkipPrevious:
    count: int


@dataclass(frozen=True)
class SeekTo:
    offset: Offset


@dataclass(frozen=True)
class SetVolume:
    level: int


Operation = (
    Toggle | Status | ShareTrack | ShareAlbum | TransferTo | Like | Dislike
    | ToggleShuffle | CycleRepeat | SkipNext | SkipPrevious | SeekTo | SetVolume
)


# --- play targets ---

@dataclass(frozen=True)
class Uri:
    uri: str


@dataclass(frozen=True)
class Name:
    name: str
    context: Context


# --- actions ---

@dataclass(frozen=True)
class Playback:
    command: ClassVar[str] = "playback"

    ops: tuple[Operation, ...]
    device: str | None = None
    format: str | None = None

    @property
    def op(self):
        """
        the first requested operation.
        """
        return self.ops[0]


@dataclass(frozen=True)
class Play:
    command: ClassVar[str] = "play"

    target: Uri | Name
    queue: bool = False
    random: bool = False
    device: str | None = None
    format: str | None = None


@dataclass(frozen=True)
class List:
    command: ClassVar[str] = "list"

    kind: ListKind
    limit: int | None = None
    format: str | None = None


@dataclass(frozen=True)
class Search:
    command: ClassVar[str] = "search"

    kind: SearchKind
    query: str
    limit: int | None = None
    format: str | None = None


Action = Playback | Play | List | Search


def _label(presence, name):
    return presence.spec.flag(name).label


def _bounded(presence, name, bounds, /):
    """
    return the supplied integer for `name` (None when absent), enforcing bounds.
    """
    if (value := presence.value(name)) is None:
        return None
    low, high = bounds
    if not low <= value <= high:
        raise OutOfBoundsError(
            "%s must be between %d and %d, got %d" % (_label(presence, name), low, high, value),
            title="value out of bounds",
            code=FaultCode.OUT_OF_BOUNDS,
            command=presence.spec.name,
            flag=name,
            value=value,
            bounds=bounds,
            hint="pass a value from %d to %d (for example: %s %d)" % (low, high, _label(presence, name), high),
            docs=getdoc(FaultCode.OUT_OF_BOUNDS),
        )
    return value


def _chosen(presence, group, /):
    """
    the single present member of `group`.

    validation guarantees it for required at-most-one groups; a map that skipped
    validation raises UnresolvedSelectionError instead of a bare unpacking error.
    """
    members = presence.spec.group(group).members
    try:
        chosen, = presence.members(members)
    except ValueError:
        labels = ", ".join(repr(_label(presence, member)) for member in members)
        raise UnresolvedSelectionError(
            "exactly one of %s must be given" % labels,
            title="unresolved selection",
            code=FaultCode.UNRESOLVED_SELECTION,
            command=presence.spec.name,
            group=group,
            flags=presence.members(members),
            hint="validate the flags before building, or pass one of %s" % labels,
            docs=getdoc(FaultCode.UNRESOLVED_SELECTION),
        ) from None
    return chosen


def _crosscheck(presence, /):
    """
    apply the requires/conflicts rules declared on supplied flags, in flag order.
    """
    spec = presence.spec
    for flag in spec.flags:
        if not presence[flag.name].count:
            continue
        for name in flag.requires:
            group = spec.group(name)
            if not presence.members(group.members):
                labels = ", ".join(repr(_label(presence, member)) for member in group.members)
                raise MissingCompanionError(
                    "%r requires one of %s" % (flag.label, labels),
                    title="missing companion flag",
                    code=FaultCode.MISSING_COMPANION,
                    command=spec.name,
                    flag=flag.name,
                    group=group.name,
                    hint="add one of %s next to %s" % (labels, flag.label),
                    docs=getdoc(FaultCode.MISSING_COMPANION),
                )
        for name in flag.conflicts:
            if presence[name].count:
                raise IncompatibleFlagsError(
                    "%r cannot be used with %r" % (flag.label, _label(presence, name)),
                    title="incompatible flags",
                    code=FaultCode.INCOMPATIBLE_FLAGS,
                    command=spec.name,
                    flag=flag.name,
                    conflict=name,
                    hint="remove %s or %s" % (flag.label, _label(presence, name)),
                    docs=getdoc(FaultCode.INCOMPATIBLE_FLAGS),
                )


_builders = {}


def builder(command, /):
    """
    register the Action builder of a command name.
    """
    def wrapper(callback, /):
        if _builders.setdefault(command, callback) is not callback:
            raise ValueError(f"builder for {command!r} is already registered")
        return callback
    return wrapper


@builder("playback")
def _playback(presence):
    volume = _bounded(presence, "volume", VOLUME_BOUNDS)

    ops = []
    for flag in presence.spec.flags:
        if not (count := presence[flag.name].count):
            continue
        match flag.name:
            case "toggle":
                ops.append(Toggle())
            case "status":
                ops.append(Status())
            case "share-track":
                ops.append(ShareTrack())
            case "share-album":
                ops.append(ShareAlbum())
            case "transfer":
                ops.append(TransferTo(presence.value("transfer")))
            case "like":
                ops.append(Like())
            case "dislike":
                ops.append(Dislike())
            case "shuffle":
                ops.append(ToggleShuffle())
            case "repeat":
                ops.append(CycleRepeat())
            case "next":
                ops.append(SkipNext(count))
            case "previous":
                ops.append(SkipPrevious(count))
            case "seek":
                ops.append(SeekTo(presence.value("seek")))
            case "volume":
                ops.append(SetVolume(volume))

    return Playback(
        ops=tuple(ops) or (Status(),),
        device=presence.value("device"),
        format=presence.value("format"),
    )


@builder("play")
def _play(presence):
    if _chosen(presence, "actions") == "uri":
        target = Uri(presence.value("uri"))
    else:
        target = Name(presence.value("name"), Context(_chosen(presence, "contexts")))
    return Play(
        target=target,
        queue=presence.present("queue"),
        random=presence.present("random"),
        device=presence.value("device"),
        format=presence.value("format"),
    )


@builder("list")
def _list(presence):
    kind = ListKind(_chosen(presence, "listable"))
    return List(kind=kind, limit=_bounded(presence, "limit", LIMIT_BOUNDS), format=presence.value("format"))


@builder("search")
def _search(presence):
    kind = SearchKind(_chosen(presence, "searchable"))
    return Search(
        kind=kind,
        query=presence.value("search"),
        limit=_bounded(presence, "limit", LIMIT_BOUNDS),
        format=presence.value("format"),
    )


def build(presence, /):
    """
    build the Action of presence.spec from a validated, back-filled PresenceMap.

    raises
    - BuildError subclasses; KeyError when no builder is registered for the command.
    """
    _crosscheck(presence)
    action = _builders[presence.spec.name](presence)
    log.debug("action.built", command=presence.spec.name, action=repr(action))
    return action


__all__ = (
    # Actions
    "Action",
    "Playback",
    "Play",
    "List",
    "Search",

    # Playback operations
    "Operation",
    "Toggle",
    "Status",
    "ShareTrack",
    "ShareAlbum",
    "TransferTo",
    "Like",
    "Dislike",
    "ToggleShuffle",
    "CycleRepeat",
    "SkipNext",
    "SkipPrevious",
    "SeekTo",
    "SetVolume",

    # Play targets and kinds
    "Uri",
    "Name",
    "Context",
    "ListKind",
    "SearchKind",

    # Builder
    "build",
    "builder",
    "LIMIT_BOUNDS",
    "VOLUME_BOUNDS",
)
