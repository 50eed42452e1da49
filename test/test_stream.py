"""
Argument stream tests.

Scope
- Validate Args.next() events: positionals, end-of-flags handling, End.
- Validate that malformed options raise without corrupting the stream.
- Validate lease detection (advancing with an unresolved option).
- Validate the End sentinel (singleton, falsy, copy/pickle identity, finality).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import gc
import pickle
import sys
import unittest
from unittest import TestCase, mock

from rich.pretty import pretty_repr
from rich.text import Text

from simpleargs import (
    Args,
    End,
    InvalidArgumentError,
    Named,
    Positional,
    UnresolvedOptionError,
    UnresolvedOptionWarning,
)


class TestArgs(TestCase):
    """Behavioral tests for Args (the argument stream)."""

    def testEmptyStreamEnds(self):
        args = Args()
        self.assertIs(args.next(), End())
        self.assertIs(args.next(), End())
        self.assertEqual(len(args), 0)

    def testPositionalsInOrder(self):
        args = Args([b"a", b"b"])
        first = args.next()
        self.assertEqual(first, Positional(b"a", args))
        self.assertIs(first.rest, args)
        self.assertEqual(len(args), 1)
        self.assertEqual(args.next().value, b"b")
        self.assertIs(args.next(), End())

    def testEndOfFlagsIsNotSurfaced(self):
        args = Args([b"--", b"-x"])
        event = args.next()
        self.assertIsInstance(event, Positional)
        self.assertEqual(event.value, b"-x")
        self.assertFalse(args.options)

    def testEndOfFlagsAsLastToken(self):
        args = Args([b"a", b"--"])
        self.assertEqual(args.next().value, b"a")
        self.assertTrue(args.options)
        self.assertIs(args.next(), End())
        self.assertFalse(args.options)

    def testEverythingAfterEndOfFlagsIsPositional(self):
        args = Args([b"--", b"--", b"--flag", b"-x=1", b"-="])
        values = [event.value for event in args]
        self.assertEqual(values, [b"--", b"--flag", b"-x=1", b"-="])
        self.assertFalse(args.options)

    def testOptionsNeverComeBack(self):
        args = Args([b"--", b"a", b"--", b"-b"])
        for event in args:
            self.assertIsInstance(event, Positional)
            self.assertFalse(args.options)

    def testNamedEvent(self):
        args = Args([b"--out=x"])
        named = args.next()
        self.assertIsInstance(named, Named)
        self.assertEqual(named.name, "out")
        self.assertEqual(named.inline, b"x")
        named.require_value()

    def testInvalidArgumentKeepsStreamUsable(self):
        args = Args([b"-=", b"abc"])
        with self.assertRaises(InvalidArgumentError) as caught:
            args.next()
        self.assertEqual(caught.exception.arg, b"-=")
        self.assertEqual(len(args), 1)
        self.assertTrue(args.options)
        self.assertEqual(args.next().value, b"abc")

    def testAdvancingWithUnresolvedOptionRaises(self):
        args = Args([b"-x", b"abc"])
        named = args.next()
        with self.assertRaises(UnresolvedOptionError):
            args.next()
        self.assertEqual(len(args), 1)
        value, rest = named.require_value()
        self.assertEqual(value, b"abc")
        self.assertIs(rest.next(), End())

    def testDroppedOptionWarnsAndReleases(self):
        args = Args([b"-x", b"abc"])
        with self.assertWarns(UnresolvedOptionWarning):
            args.next()
            gc.collect()
        self.assertEqual(args.next().value, b"abc")

    def testIterationStopsAtEnd(self):
        args = Args([b"a", b"b", b"c"])
        self.assertEqual([event.value for event in args], [b"a", b"b", b"c"])
        self.assertEqual(list(args), [])

    def testIterationDetectsUnresolvedOption(self):
        args = Args([b"-x", b"a"])
        iterator = iter(args)
        named = next(iterator)
        with self.assertRaises(UnresolvedOptionError):
            next(iterator)
        named.unknown()

    def testStrTokensAreEncoded(self):
        args = Args(["abc", "--", "-x"])
        self.assertEqual([event.value for event in args], [b"abc", b"-x"])

    def testSingleTokenRejected(self):
        with self.assertRaises(TypeError):
            Args("abc")
        with self.assertRaises(TypeError):
            Args(b"abc")

    def testFromArgvDropsProgramName(self):
        args = Args.from_argv(["prog", "a", "-b"])
        self.assertEqual(len(args), 2)
        self.assertEqual(args.next().value, b"a")

    def testFromArgvDefaultsToSysArgv(self):
        with mock.patch.object(sys, "argv", ["prog", "one"]):
            args = Args.from_argv()
        self.assertEqual(args.next().value, b"one")
        self.assertIs(args.next(), End())

    def testRepr(self):
        args = Args([b"a", b"b"])
        self.assertEqual(repr(args), "Args(remaining=2, options=True)")
        self.assertIn("remaining=2", pretty_repr(args))


class TestEnd(TestCase):
    """Tests for the End sentinel."""

    def testSingleton(self):
        self.assertIs(End(), End())

    def testFalsy(self):
        self.assertFalse(End())

    def testRepr(self):
        self.assertEqual(repr(End()), "End()")

    def testRich(self):
        self.assertEqual(End().__rich__(), Text("End()", style="dim"))

    def testCopyAndPickleKeepIdentity(self):
        self.assertIs(copy.copy(End()), End())
        self.assertIs(copy.deepcopy(End()), End())
        self.assertIs(pickle.loads(pickle.dumps(End())), End())

    def testFinal(self):
        with self.assertRaises(TypeError):
            class Sub(End):  # NOQA: F-841
                pass


if __name__ == "__main__":
    unittest.main()
