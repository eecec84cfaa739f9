"""
Action builder behavioral tests (variants, bounds, cross-field rules).

Scope
- Validate the Action produced for each command and its resolved format.
- Validate playback operation order, counts and seek offsets.
- Validate numeric bounds and the requires/conflicts rules of play.
- Validate that build() on unvalidated maps raises a BuildError naming the group.
- Validate that Actions are frozen values.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (spt.route and the Action types).
"""

from __future__ import annotations

import dataclasses
import unittest
from unittest import TestCase

from spt import (
    Context,
    CycleRepeat,
    Like,
    List,
    ListKind,
    Name,
    Play,
    Playback,
    Search,
    SearchKind,
    SeekTo,
    SetVolume,
    ShareAlbum,
    SkipNext,
    SkipPrevious,
    Status,
    Toggle,
    ToggleShuffle,
    TransferTo,
    Uri,
    route,
)
from spt.actions import build
from spt.commands import LIST, PLAY, PLAYBACK
from spt.faults import (
    BuildError,
    GroupConflictError,
    IncompatibleFlagsError,
    MissingCompanionError,
    MutuallyExclusiveError,
    OutOfBoundsError,
    UnresolvedSelectionError,
)
from spt.presence import parse
from spt.schema import Offset


class TestPlayback(TestCase):
    def testNoFlagsMeansStatus(self):
        action = route("playback", [])
        self.assertEqual(action, Playback(ops=(Status(),), device=None, format="%f %s %t - %a"))
        self.assertEqual(action.command, "playback")

    def testRepeatedNextCounts(self):
        self.assertEqual(route("playback", ["--next", "--next"]).op, SkipNext(2))
        self.assertEqual(route("pb", ["-nnn"]).op, SkipNext(3))
        self.assertEqual(route("pb", ["-pp"]).op, SkipPrevious(2))

    def testAbsentNextMeansNoSkip(self):
        action = route("playback", ["--toggle"])
        self.assertFalse(any(isinstance(op, SkipNext) for op in action.ops))

    def testSeekSigns(self):
        cases = {
            "+10": Offset(10, True),
            "-10": Offset(-10, True),
            "10": Offset(10, False),
        }
        for token, offset in cases.items():
            with self.subTest(token=token):
                action = route("playback", ["--seek", token])
                self.assertEqual(action.op, SeekTo(offset))
                self.assertEqual(action.format, "%f %s %t - %a %r")

    def testVolumeAndTransferCombine(self):
        action = route("playback", ["--volume", "40", "--transfer", "kitchen"])
        self.assertEqual(action.ops, (TransferTo("kitchen"), SetVolume(40)))
        self.assertEqual(action.format, "%v% %f %s %t - %a")

    def testOperationsFollowDeclarationOrder(self):
        action = route("playback", ["--repeat", "--shuffle", "--like", "-t"])
        self.assertEqual(action.ops, (Toggle(), Like(), ToggleShuffle(), CycleRepeat()))

    def testShareAlbum(self):
        self.assertEqual(route("pb", ["--share-album"]).ops, (ShareAlbum(),))

    def testDeviceAndFormatAreCarried(self):
        action = route("pb", ["-d", "kitchen", "-f", "%t", "-t"])
        self.assertEqual(action.device, "kitchen")
        self.assertEqual(action.format, "%t")

    def testVolumeBounds(self):
        self.assertEqual(route("pb", ["-v", "1"]).op, SetVolume(1))
        self.assertEqual(route("pb", ["-v", "100"]).op, SetVolume(100))
        for level in ("0", "101"):
            with self.subTest(level=level), self.assertRaises(OutOfBoundsError):
                route("pb", ["-v", level])

    def testJumpsRejectOtherFamilies(self):
        with self.assertRaises(GroupConflictError):
            route("pb", ["--next", "--like"])


class TestPlay(TestCase):
    def testPlayUri(self):
        action = route("play", ["--uri", "spotify:track:abc123"])
        self.assertEqual(action, Play(
            target=Uri("spotify:track:abc123"),
            queue=False,
            random=False,
            device=None,
            format="%f %s %t - %a",
        ))

    def testPlayByName(self):
        action = route("p", ["--name", "One More Time", "--track", "--queue"])
        self.assertEqual(action.target, Name("One More Time", Context.TRACK))
        self.assertTrue(action.queue)

    def testRandomPlaylist(self):
        action = route("play", ["-n", "Daily Mix", "-p", "-r"])
        self.assertEqual(action.target, Name("Daily Mix", Context.PLAYLIST))
        self.assertTrue(action.random)

    def testNameRequiresContext(self):
        with self.assertRaises(MissingCompanionError) as context:
            route("play", ["--name", "Discovery"])
        self.assertEqual(context.exception.options["group"], "contexts")

    def testQueueConflictsWithCollections(self):
        with self.assertRaises(IncompatibleFlagsError) as context:
            route("play", ["--name", "Discovery", "--album", "--queue"])
        self.assertEqual(context.exception.options["flag"], "queue")
        self.assertEqual(context.exception.options["conflict"], "album")

    def testRandomConflictsWithTrack(self):
        with self.assertRaises(IncompatibleFlagsError):
            route("play", ["--name", "Aerodynamic", "--track", "--random"])

    def testUriAndNameAreExclusive(self):
        with self.assertRaises(MutuallyExclusiveError):
            route("play", ["--uri", "spotify:track:1", "--name", "x", "--track"])


class TestListAndSearch(TestCase):
    def testListPlaylists(self):
        self.assertEqual(route("list", ["--playlists"]), List(ListKind.PLAYLISTS, None, "%p (%u)"))

    def testListLimitBounds(self):
        for limit in (1, 50):
            with self.subTest(limit=limit):
                self.assertEqual(route("l", ["--liked", "--limit", str(limit)]).limit, limit)
        for limit in (0, 51):
            with self.subTest(limit=limit), self.assertRaises(OutOfBoundsError):
                route("l", ["--liked", "--limit", str(limit)])

    def testSearchTracks(self):
        action = route("search", ["--tracks", "daft punk"])
        self.assertEqual(action, Search(SearchKind.TRACKS, "daft punk", None, "%t - %a (%u)"))

    def testSearchLimitBounds(self):
        self.assertEqual(route("s", ["-b", "--limit=50", "discovery"]).limit, 50)
        with self.assertRaises(OutOfBoundsError):
            route("s", ["-b", "--limit=51", "discovery"])

    def testSearchNeedsSingleKind(self):
        with self.assertRaises(MutuallyExclusiveError):
            route("search", ["--tracks", "--albums", "daft punk"])


class TestBuild(TestCase):
    def testBuildDirectly(self):
        self.assertEqual(build(parse(PLAYBACK, ["--toggle"])).ops, (Toggle(),))

    def testBuildWithoutSelection(self):
        for spec, group in ((LIST, "listable"), (PLAY, "actions")):
            with self.subTest(command=spec.name), self.assertRaises(UnresolvedSelectionError) as context:
                build(parse(spec, []))
            self.assertIsInstance(context.exception, BuildError)
            self.assertEqual(context.exception.options["group"], group)
            self.assertEqual(context.exception.options["flags"], ())

    def testBuildWithSeveralSelections(self):
        with self.assertRaises(UnresolvedSelectionError) as context:
            build(parse(LIST, ["-d", "-p"]))
        self.assertEqual(context.exception.options["flags"], ("devices", "playlists"))

    def testNegativeValuesHitBounds(self):
        with self.assertRaises(OutOfBoundsError) as context:
            route("pb", ["--volume", "-5"])
        self.assertEqual(context.exception.options["value"], -5)
        with self.assertRaises(OutOfBoundsError) as context:
            route("l", ["--liked", "--limit", "-1"])
        self.assertEqual(context.exception.options["value"], -1)

    def testBuildFaultsShareTheBuildFamily(self):
        with self.assertRaises(BuildError):
            route("pb", ["--volume", "500"])

    def testActionsAreFrozen(self):
        action = route("list", ["--devices"])
        with self.assertRaises(dataclasses.FrozenInstanceError):
            action.format = "%d"  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
