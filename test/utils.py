"""
Utilities and logging tests.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import io
import logging
import unittest
from unittest import TestCase

from rich.console import Console
from rich.logging import RichHandler

from cliopatra import logs, truthy
from cliopatra.utils import Unset, UnsetType, coalesce, ordinal


class TestUtils(TestCase):

    def testUnsetIsFalseySingleton(self):
        self.assertFalse(Unset)
        self.assertIs(UnsetType(), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertTrue(isinstance("x", str | Unset))

    def testCoalesceOnlyReplacesUnset(self):
        self.assertEqual(coalesce(Unset, "x"), "x")
        self.assertEqual(coalesce("", "x"), "")
        self.assertIsNone(coalesce(None, "x"))

    def testTruthy(self):
        self.assertTrue(truthy("YES"))
        self.assertTrue(truthy("1"))
        self.assertFalse(truthy("on"))
        with self.assertRaises(TypeError):
            truthy(1)

    def testOrdinal(self):
        self.assertEqual(ordinal(2), "second")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(103), "103rd")


class TestLogs(TestCase):

    def tearDown(self):
        logger = logging.getLogger("cliopatra")
        for handler in list(logger.handlers):
            if isinstance(handler, RichHandler):
                logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)

    def testInstallReplacesHandler(self):
        console = Console(file=io.StringIO(), width=120)
        logs.install(logging.DEBUG, console=console)
        handler = logs.install(logging.DEBUG, console=console)
        installed = [h for h in logging.getLogger("cliopatra").handlers if isinstance(h, RichHandler)]
        self.assertEqual(installed, [handler])

    def testMatchTraceIsLogged(self):
        from cliopatra import CommandSet

        console = Console(file=io.StringIO(), width=200)
        logs.install(logging.DEBUG, console=console)
        commands = CommandSet()
        commands.add_flag("verbose", ["v"])
        commands.match(["-v"])
        self.assertIn("MATCH", console.file.getvalue())


if __name__ == "__main__":
    unittest.main()
