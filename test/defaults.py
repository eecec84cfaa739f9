"""
Conditional default behavioral tests (rule order, static fallback, back-fill).

Scope
- Validate first-match-wins over the declared rule order.
- Validate that supplied values always win over rules.
- Validate back-fill marking and the absence of chained defaults.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (resolve, backfill, deferrable).
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from spt.commands import LIST, PLAY, PLAYBACK, SEARCH
from spt.defaults import backfill, deferrable, resolve
from spt.presence import parse
from spt.schema import CommandSpec, DefaultRule, FlagSpec, Kind
from spt.utils import Unset


def _format(spec, tokens):
    return resolve(spec.flag("format"), parse(spec, tokens))


class TestResolve(TestCase):
    def testStaticDefaultWhenNoRuleMatches(self):
        self.assertEqual(_format(PLAYBACK, []), "%f %s %t - %a")
        self.assertEqual(_format(PLAY, ["--uri", "spotify:track:1"]), "%f %s %t - %a")

    def testEachPlaybackRule(self):
        self.assertEqual(_format(PLAYBACK, ["--seek", "+5"]), "%f %s %t - %a %r")
        self.assertEqual(_format(PLAYBACK, ["--volume", "30"]), "%v% %f %s %t - %a")
        self.assertEqual(_format(PLAYBACK, ["--transfer", "kitchen"]), "%f %s %t - %a on %d")

    def testFirstDeclaredRuleWins(self):
        self.assertEqual(_format(PLAYBACK, ["--transfer", "kitchen", "--volume", "40"]), "%v% %f %s %t - %a")
        self.assertEqual(_format(PLAYBACK, ["--volume", "40", "--seek", "10"]), "%f %s %t - %a %r")

    def testSuppliedValueWins(self):
        self.assertEqual(_format(PLAYBACK, ["--format", "%t", "--volume", "40"]), "%t")

    def testListAndSearchRules(self):
        self.assertEqual(_format(LIST, ["--devices"]), "%v% %d")
        self.assertEqual(_format(LIST, ["--liked"]), "%t - %a (%u)")
        self.assertEqual(_format(LIST, ["--playlists"]), "%p (%u)")
        self.assertEqual(_format(SEARCH, ["--artists", "x"]), "%a (%u)")
        self.assertEqual(_format(SEARCH, ["--albums", "x"]), "%b - %a (%u)")
        self.assertEqual(_format(SEARCH, ["--shows", "x"]), "%h - %a (%u)")

    def testUnresolvedStaysUnset(self):
        self.assertIs(_format(LIST, []), Unset)

    def testAbsenceRule(self):
        spec = CommandSpec(
            "demo",
            flags=(
                FlagSpec("quiet", "-q"),
                FlagSpec("format", "-f", kind=Kind.STRING),
            ),
            defaults={"format": (DefaultRule("quiet", "%t - %a", presence=False),)},
        )
        self.assertEqual(_format(spec, []), "%t - %a")
        self.assertIs(_format(spec, ["-q"]), Unset)

    def testExplicitRulesArgument(self):
        rules = (DefaultRule("toggle", "%s"),)
        self.assertEqual(resolve(PLAYBACK.flag("format"), parse(PLAYBACK, ["-t"]), rules), "%s")


class TestBackfill(TestCase):
    def testBackfillMarksDefaulted(self):
        presence = parse(LIST, ["--playlists"])
        filled = backfill(presence)
        self.assertEqual(filled.value("format"), "%p (%u)")
        self.assertTrue(filled["format"].defaulted)
        self.assertFalse(presence.present("format"))

    def testBackfillLeavesUnresolvedAbsent(self):
        filled = backfill(parse(LIST, []))
        self.assertFalse(filled.present("format"))
        self.assertFalse(filled.present("limit"))

    def testDefaultsDoNotChain(self):
        spec = CommandSpec(
            "demo",
            flags=(
                FlagSpec("first", "--first", kind=Kind.STRING),
                FlagSpec("second", "--second", kind=Kind.STRING, default="static"),
            ),
            defaults={"first": (DefaultRule("second", "derived"),)},
        )
        filled = backfill(parse(spec, []))
        self.assertEqual(filled.value("second"), "static")
        self.assertFalse(filled.present("first"))

    def testDeferrable(self):
        self.assertEqual(deferrable(PLAYBACK), {"format"})
        self.assertEqual(deferrable(LIST), {"format"})


if __name__ == "__main__":
    unittest.main()
