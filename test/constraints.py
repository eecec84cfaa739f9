"""
Group constraint behavioral tests (exclusivity, requirement, conflicts).

Scope
- Validate AT_MOST_ONE, ALL_OR_NONE and required groups.
- Validate cross-group conflicts of the playback families.
- Validate deferral of required groups holding defaultable flags.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (parse, validate, require, backfill).
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from spt.commands import LIST, PLAY, PLAYBACK
from spt.constraints import require, validate
from spt.defaults import backfill, deferrable
from spt.faults import (
    GroupConflictError,
    IncompleteGroupError,
    MissingRequiredError,
    MutuallyExclusiveError,
    ValidationError,
)
from spt.presence import parse
from spt.schema import CommandSpec, Exclusivity, FlagSpec, Group, Kind


class TestExclusivity(TestCase):
    def testLikeAndDislikeAreExclusive(self):
        with self.assertRaises(MutuallyExclusiveError) as context:
            validate(parse(PLAYBACK, ["--like", "--dislike"]))
        self.assertEqual(context.exception.options["group"], "likes")
        self.assertEqual(context.exception.options["flags"], ("like", "dislike"))

    def testNextAndPreviousAreExclusive(self):
        with self.assertRaises(MutuallyExclusiveError):
            validate(parse(PLAYBACK, ["-n", "-p"]))

    def testPlayTargetsAreExclusive(self):
        with self.assertRaises(MutuallyExclusiveError):
            validate(parse(PLAY, ["--uri", "spotify:track:1", "--name", "x", "--track"]))

    def testAllOrNone(self):
        spec = CommandSpec(
            "login",
            flags=(
                FlagSpec("user", "--user", kind=Kind.STRING),
                FlagSpec("password", "--password", kind=Kind.STRING),
            ),
            groups=(Group("credentials", ("user", "password"), Exclusivity.ALL_OR_NONE),),
        )
        with self.assertRaises(IncompleteGroupError):
            validate(parse(spec, ["--user", "me"]))
        self.assertIsNone(validate(parse(spec, ["--user", "me", "--password", "secret"])))
        self.assertIsNone(validate(parse(spec, [])))


class TestConflicts(TestCase):
    def testJumpsConflictWithActions(self):
        with self.assertRaises(GroupConflictError) as context:
            validate(parse(PLAYBACK, ["--next", "--volume", "5"]))
        self.assertEqual(context.exception.options["group"], "jumps")
        self.assertEqual(context.exception.options["conflict"], "actions")

    def testFlagsConflictWithSingle(self):
        with self.assertRaises(GroupConflictError) as context:
            validate(parse(PLAYBACK, ["--share-track", "--shuffle"]))
        self.assertEqual(context.exception.options["group"], "flags")
        self.assertEqual(context.exception.options["conflict"], "single")

    def testSingleIsExclusive(self):
        with self.assertRaises(MutuallyExclusiveError):
            validate(parse(PLAYBACK, ["--share-track", "--share-album"]))

    def testFreeFamiliesCombine(self):
        presence = parse(PLAYBACK, ["--toggle", "--volume", "40", "--shuffle", "--like", "--transfer", "kitchen"])
        self.assertIsNone(validate(presence))

    def testFirstViolationWins(self):
        # likes is declared before flags and single
        with self.assertRaises(MutuallyExclusiveError):
            validate(parse(PLAYBACK, ["--like", "--dislike", "--share-track"]))


class TestRequirement(TestCase):
    def testListNeedsAKind(self):
        presence = parse(LIST, [])
        with self.assertRaises(MissingRequiredError) as context:
            validate(presence, deferred=deferrable(LIST))
        self.assertEqual(context.exception.options["group"], "listable")

    def testPlayNeedsATarget(self):
        with self.assertRaises(MissingRequiredError):
            validate(parse(PLAY, ["--track"]))

    def testFaultsShareTheValidationFamily(self):
        with self.assertRaises(ValidationError):
            validate(parse(PLAY, []))

    def testDeferredGroupIsCheckedAfterBackfill(self):
        spec = CommandSpec(
            "demo",
            flags=(
                FlagSpec("format", "-f", kind=Kind.STRING, default="%t"),
                FlagSpec("quiet", "-q"),
            ),
            groups=(Group("output", ("format", "quiet"), Exclusivity.AT_MOST_ONE, required=True),),
        )
        presence = parse(spec, [])
        with self.assertRaises(MissingRequiredError):
            validate(presence)
        self.assertIsNone(validate(presence, deferred=deferrable(spec)))
        with self.assertRaises(MissingRequiredError):
            require(presence)
        self.assertIsNone(require(backfill(presence)))


if __name__ == "__main__":
    unittest.main()
