"""
Router behavioral tests (lookup, global options, pipeline, shell mode).

Scope
- Validate name and alias lookup and unknown-command suggestions.
- Validate splitting of global options from the subcommand.
- Validate whole-line routing, help requests and missing subcommands.
- Validate warnings surfacing and shell-mode exits.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Router, route, split).
"""

from __future__ import annotations

import io
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import TestCase

from spt import List, ListKind, Playback, Router, Status, route, split
from spt.commands import PLAY, PLAYBACK
from spt.faults import (
    MissingCommandError,
    RepeatedFlagWarning,
    UncastableValueError,
    UnknownCommandError,
    UnknownSwitchError,
)


class TestLookup(TestCase):
    def testAliases(self):
        router = Router()
        self.assertIs(router.lookup("playback"), PLAYBACK)
        self.assertIs(router.lookup("pb"), PLAYBACK)
        self.assertIs(router.lookup("p"), PLAY)

    def testUnknownCommandSuggests(self):
        with self.assertRaises(UnknownCommandError) as context:
            route("plyback")
        self.assertIn("playback", context.exception.options["suggestions"])

    def testFaultCarriesRouterOptions(self):
        router = Router(fancy=True)
        with self.assertRaises(UnknownCommandError) as context:
            router.route("nothing")
        self.assertIs(context.exception.options["tool"], router)
        self.assertTrue(context.exception.options["fancy"])
        self.assertFalse(context.exception.options["shell"])

    def testDuplicateNamesRejected(self):
        with self.assertRaises(ValueError):
            Router("spt", (PLAYBACK, PLAYBACK))

    def testCommandsInDeclarationOrder(self):
        self.assertEqual(list(Router().commands), ["list", "play", "playback", "search"])


class TestSplit(TestCase):
    def testGlobalOptionsBeforeCommand(self):
        options, name, tokens = split(["-c", "spt.yml", "pb", "-t"])
        self.assertEqual(options.value("config"), "spt.yml")
        self.assertEqual(name, "pb")
        self.assertEqual(tokens, ("-t",))

    def testInlineGlobalValue(self):
        options, name, tokens = split(["--tick-rate=250", "list", "--devices"])
        self.assertEqual(options.value("tick-rate"), 250)
        self.assertEqual((name, tokens), ("list", ("--devices",)))

    def testStringPrompt(self):
        _, name, tokens = split("search --tracks 'daft punk'")
        self.assertEqual((name, tokens), ("search", ("--tracks", "daft punk")))

    def testNoCommand(self):
        options, name, tokens = split([])
        self.assertIsNone(name)
        self.assertFalse(options.present("config"))

    def testBadGlobalValue(self):
        with self.assertRaises(UncastableValueError):
            split(["--tick-rate", "fast", "list"])

    def testUnknownGlobalSwitch(self):
        with self.assertRaises(UnknownSwitchError):
            split(["--bogus", "list"])


class TestInvocation(TestCase):
    def testWholeLine(self):
        self.assertEqual(Router()("list --devices --limit 5"), List(ListKind.DEVICES, 5, "%v% %d"))
        self.assertEqual(Router()(["-t", "100", "pb", "-s"]), Playback(ops=(Status(),), format="%f %s %t - %a"))

    def testMissingCommand(self):
        with self.assertRaises(MissingCommandError):
            Router()([])

    def testCommandHelp(self):
        stream = io.StringIO()
        with redirect_stdout(stream):
            self.assertIsNone(Router()(["list", "--help"]))
        self.assertIn("--devices", stream.getvalue())

    def testHelpBeforeCommand(self):
        for line in (["-h", "list"], ["--help", "l", "--liked"], ["-c", "conf.yml", "-h", "list"]):
            stream = io.StringIO()
            with self.subTest(line=line), redirect_stdout(stream):
                self.assertIsNone(Router()(line))
            self.assertIn("--devices", stream.getvalue())

    def testOverviewHelp(self):
        stream = io.StringIO()
        with redirect_stdout(stream):
            self.assertIsNone(Router()(["-h"]))
        self.assertIn("playback", stream.getvalue())

    def testHelpForUnknownCommand(self):
        with self.assertRaises(UnknownCommandError):
            Router()(["nope", "--help"])

    def testRepeatedFlagWarns(self):
        with self.assertWarns(RepeatedFlagWarning):
            action = route("playback", ["--toggle", "--toggle"])
        self.assertEqual(len(action.ops), 1)


class TestShellMode(TestCase):
    def testFaultPrintsAndExits(self):
        stream = io.StringIO()
        with redirect_stderr(stream), self.assertRaises(SystemExit) as context:
            Router(shell=True).route("nope")
        self.assertEqual(context.exception.code, 1)
        self.assertIn("unknown command 'nope'", stream.getvalue())

    def testWarningPrintsAndContinues(self):
        stream = io.StringIO()
        with redirect_stderr(stream):
            action = Router(shell=True).route("pb", ["-s", "-s"])
        self.assertEqual(action.ops, (Status(),))
        self.assertIn("already provided", stream.getvalue())


if __name__ == "__main__":
    unittest.main()
