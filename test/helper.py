"""
Help rendering tests (usage, flags, rules, overview table).

Scope
- Validate that help lists every switch and its metavar.
- Validate that group rules and format notes are shown.
- Validate the overview table of subcommands with aliases.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured with a file-backed rich Console.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from spt.commands import COMMANDS, GLOBALS, PLAYBACK, SEARCH
from spt.helper import render


def _rendered(spec, **options):
    stream = io.StringIO()
    render(spec, console=Console(file=stream, width=120), **options)
    return stream.getvalue()


class TestRender(TestCase):
    def testUsageAndSwitches(self):
        output = _rendered(PLAYBACK)
        self.assertIn("usage: spt playback", output)
        self.assertIn("--share-track", output)
        self.assertIn("<VOLUME>", output)

    def testRulesSection(self):
        output = _rendered(PLAYBACK)
        self.assertIn("jumps: at most one of --next, --previous", output)
        self.assertIn("not with single, flags, actions", output)

    def testPositionalAndRequiredGroup(self):
        output = _rendered(SEARCH)
        self.assertIn("<SEARCH>", output)
        self.assertIn("(required)", output)

    def testFormatNotes(self):
        self.assertIn("format specifiers", _rendered(PLAYBACK))

    def testOverview(self):
        output = _rendered(GLOBALS, children=COMMANDS)
        self.assertIn("usage: spt", output)
        self.assertIn("playback (pb)", output)
        self.assertIn("--tick-rate", output)

    def testFancyPanel(self):
        self.assertIn("SPT PLAYBACK HELP", _rendered(PLAYBACK, fancy=True))


if __name__ == "__main__":
    unittest.main()
