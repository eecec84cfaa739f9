"""
spt command tables: the declarative grammar of every subcommand.

Each table is a CommandSpec built once at import: flags in declaration order,
the groups validated over them, and the ordered default rules of the output
format. The router indexes them by name and alias; nothing here is mutated
after import.

Format specifiers (interpreted by the renderer, only selected here)
  %a artist, %b album, %p playlist, %t track, %h show, %f flags (shuffle,
  repeat, like), %s playback status, %v volume, %d current device, %u uri.
"""
from .schema import *
from .utils import *

FORMAT_HELP = (
    "There are multiple format specifiers you can use: %a: artist, %b: album, %p: playlist, "
    "%t: track, %h: show, %f: flags (shuffle, repeat, like), %s: playback status, %v: volume, "
    "%d: current device, %u: uri. Example: spt pb -s -f 'playing on %d at %v%'"
)

PLAYBACK_FORMAT = "%f %s %t - %a"


def _device():
    return FlagSpec("device", "-d", "--device", kind=Kind.STRING, metavar="DEVICE",
                    descr="Specifies the spotify device to use")


def _format(default=Unset):
    return FlagSpec("format", "-f", "--format", kind=Kind.STRING, metavar="FORMAT", default=default,
                    descr="Specifies the output format")


def _limit():
    return FlagSpec("limit", "--limit", kind=Kind.INTEGER, metavar="LIMIT",
                    descr="Specifies the maximum number of results (1 - 50)")


PLAYBACK = CommandSpec(
    "playback",
    flags=(
        _device(),
        _format(PLAYBACK_FORMAT),
        FlagSpec("toggle", "-t", "--toggle", descr="Pauses/resumes the playback of a device"),
        FlagSpec("status", "-s", "--status", descr="Prints out the current status of a device (default)"),
        FlagSpec("share-track", "--share-track", descr="Returns the url to the current track"),
        FlagSpec("share-album", "--share-album", descr="Returns the url to the album of the current track"),
        FlagSpec("transfer", "--transfer", kind=Kind.STRING, metavar="DEVICE",
                 descr="Transfers the playback to new DEVICE"),
        FlagSpec("like", "--like", descr="Likes the current song if possible"),
        FlagSpec("dislike", "--dislike", descr="Dislikes the current song if possible"),
        FlagSpec("shuffle", "--shuffle", descr="Toggles shuffle mode"),
        FlagSpec("repeat", "--repeat", descr="Switches between repeat modes"),
        FlagSpec("next", "-n", "--next", kind=Kind.COUNTED,
                 descr="Jumps to the next song; repeat it to jump further (spt pb -nnn)"),
        FlagSpec("previous", "-p", "--previous", kind=Kind.COUNTED,
                 descr="Jumps to the beginning of the song; twice for the previous song (spt pb -pp)"),
        FlagSpec("seek", "--seek", kind=Kind.SIGNED_INTEGER, metavar="±SECONDS", hyphens=True,
                 descr="Jumps SECONDS forwards (+) or backwards (-), or to the SECONDS position without a sign"),
        FlagSpec("volume", "-v", "--volume", kind=Kind.INTEGER, metavar="VOLUME",
                 descr="Sets the volume of a device to VOLUME (1 - 100)"),
    ),
    groups=(
        Group("jumps", ("next", "previous"), Exclusivity.AT_MOST_ONE, conflicts=("single", "flags", "actions")),
        Group("likes", ("like", "dislike"), Exclusivity.AT_MOST_ONE),
        Group("flags", ("like", "dislike", "shuffle", "repeat"), conflicts=("single", "jumps")),
        Group("actions", ("toggle", "status", "transfer", "volume"), conflicts=("single", "jumps")),
        Group("single", ("share-track", "share-album"), Exclusivity.AT_MOST_ONE, conflicts=("actions", "flags", "jumps")),
    ),
    defaults={
        "format": (
            DefaultRule("seek", "%f %s %t - %a %r"),
            DefaultRule("volume", "%v% %f %s %t - %a"),
            DefaultRule("transfer", "%f %s %t - %a on %d"),
        ),
    },
    aliases=("pb",),
    about="Interacts with the playback of a device",
    descr=(
        "Use `playback` to interact with the playback of the current or any other device. "
        "You can specify another device with `--device`. If no options were provided, spt "
        "will default to just displaying the current playback. `--next` and `--previous` "
        "cannot be used with other options; `--status`, `--toggle`, `--transfer`, `--volume`, "
        "`--like`, `--repeat` and `--shuffle` can be used together; `--share-track` and "
        "`--share-album` cannot be used with other options."
    ),
)

PLAY = CommandSpec(
    "play",
    flags=(
        _device(),
        _format(PLAYBACK_FORMAT),
        FlagSpec("uri", "-u", "--uri", kind=Kind.STRING, metavar="URI", descr="Plays the URI"),
        FlagSpec("name", "-n", "--name", kind=Kind.STRING, metavar="NAME", requires=("contexts",),
                 descr="Plays the first match with NAME from the specified category"),
        FlagSpec("queue", "-q", "--queue", conflicts=("album", "artist", "playlist", "show"),
                 descr="Adds track to queue instead of playing it directly"),
        FlagSpec("random", "-r", "--random", conflicts=("track", "album", "artist", "show"),
                 descr="Plays a random track (only works with playlists)"),
        FlagSpec("album", "-b", "--album", descr="Looks for an album"),
        FlagSpec("artist", "-a", "--artist", descr="Looks for an artist"),
        FlagSpec("track", "-t", "--track", descr="Looks for a track"),
        FlagSpec("show", "-w", "--show", descr="Looks for a show"),
        FlagSpec("playlist", "-p", "--playlist", descr="Looks for a playlist"),
    ),
    groups=(
        Group("contexts", ("track", "artist", "playlist", "album", "show"), Exclusivity.AT_MOST_ONE),
        Group("actions", ("uri", "name"), Exclusivity.AT_MOST_ONE, required=True),
    ),
    aliases=("p",),
    about="Plays a uri or another spotify item by name",
    descr=(
        "If you specify a uri, the type can be inferred. If you want to play something by "
        "name, you have to specify the type: `--track`, `--album`, `--artist`, `--playlist` "
        "or `--show`. The first item which was found will be played without confirmation. "
        "To add a track to the queue, use `--queue`. To play a random song from a playlist, "
        "use `--random`."
    ),
)

LIST = CommandSpec(
    "list",
    flags=(
        _format(),
        FlagSpec("devices", "-d", "--devices", descr="Lists devices"),
        FlagSpec("playlists", "-p", "--playlists", descr="Lists playlists"),
        FlagSpec("liked", "--liked", descr="Lists liked songs"),
        _limit(),
    ),
    groups=(
        Group("listable", ("devices", "playlists", "liked"), Exclusivity.AT_MOST_ONE, required=True),
    ),
    defaults={
        "format": (
            DefaultRule("devices", "%v% %d"),
            DefaultRule("liked", "%t - %a (%u)"),
            DefaultRule("playlists", "%p (%u)"),
        ),
    },
    aliases=("l",),
    about="Lists devices, liked songs and playlists",
    descr=(
        "This will list devices, liked songs or playlists. With the `--limit` flag you are "
        "able to specify the amount of results (between 1 and 50). The format option will "
        "be applied to every item found."
    ),
)

SEARCH = CommandSpec(
    "search",
    flags=(
        _format(),
        FlagSpec("search", kind=Kind.STRING, metavar="SEARCH", positional=True,
                 descr="Specifies the search query"),
        FlagSpec("albums", "-b", "--albums", descr="Looks for albums"),
        FlagSpec("artists", "-a", "--artists", descr="Looks for artists"),
        FlagSpec("playlists", "-p", "--playlists", descr="Looks for playlists"),
        FlagSpec("tracks", "-t", "--tracks", descr="Looks for tracks"),
        FlagSpec("shows", "-w", "--shows", descr="Looks for shows"),
        _limit(),
    ),
    groups=(
        Group("searchable", ("playlists", "tracks", "albums", "artists", "shows"), Exclusivity.AT_MOST_ONE,
              required=True),
    ),
    defaults={
        "format": (
            DefaultRule("tracks", "%t - %a (%u)"),
            DefaultRule("playlists", "%p (%u)"),
            DefaultRule("artists", "%a (%u)"),
            DefaultRule("albums", "%b - %a (%u)"),
            DefaultRule("shows", "%h - %a (%u)"),
        ),
    },
    aliases=("s",),
    about="Searches for tracks, albums and more",
    descr=(
        "This will search for something on spotify and displays you the items. The output "
        "format can be changed with the `--format` flag and the limit can be changed with "
        "the `--limit` flag (between 1 and 50). The type can't be inferred, so you have to "
        "specify it."
    ),
)

GLOBALS = CommandSpec(
    "spt",
    flags=(
        FlagSpec("config", "-c", "--config", kind=Kind.STRING, metavar="CONFIG",
                 descr="Specify configuration file path"),
        FlagSpec("completions", "--completions", kind=Kind.STRING, metavar="SHELL",
                 descr="Generates completions for your preferred shell (bash, zsh, fish, power-shell, elvish)"),
        FlagSpec("tick-rate", "-t", "--tick-rate", kind=Kind.INTEGER, metavar="TICK-RATE",
                 descr="Specify the tick rate in milliseconds"),
    ),
    about="Control a spotify client from the terminal",
)

COMMANDS = (LIST, PLAY, PLAYBACK, SEARCH)


__all__ = (
    "PLAYBACK",
    "PLAY",
    "LIST",
    "SEARCH",
    "GLOBALS",
    "COMMANDS",
    "FORMAT_HELP",
)
