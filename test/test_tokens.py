"""
Token classification tests.

Scope
- Validate classify() on positional, end-of-flags and named tokens.
- Validate name syntax enforcement and that failures carry the original token.
- Validate normalize() for bytes-like and str inputs.

Conventions
- Test method names follow CamelCase per project convention.
- Tokens are written as bytes literals unless a test is about str input.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from simpleargs import (
    EndOfFlagsToken,
    InvalidArgumentError,
    NamedToken,
    PositionalToken,
    classify,
    normalize,
)

SUCCESS_CASES = (
    (b"abc", PositionalToken(b"abc")),
    (b"", PositionalToken(b"")),
    (b"-", PositionalToken(b"-")),
    (b"--", EndOfFlagsToken()),
    (b"-a", NamedToken("a", None)),
    (b"--a", NamedToken("a", None)),
    (b"-a=", NamedToken("a", b"")),
    (b"--a=", NamedToken("a", b"")),
    (b"--arg-name", NamedToken("arg-name", None)),
    (b"--ARG_NAME", NamedToken("ARG_NAME", None)),
    (b"--opt=value", NamedToken("opt", b"value")),
    (b"--opt=a=b", NamedToken("opt", b"a=b")),
    (b"-abc", NamedToken("abc", None)),
    (b"-_private", NamedToken("_private", None)),
    (b"\x80\xff", PositionalToken(b"\x80\xff")),
    (b"--opt=\xff", NamedToken("opt", b"\xff")),
)

FAILURE_CASES = (
    b"-\0",
    b"--\n",
    b"--\0=",
    b"-=",
    b"--=",
    b"-=value",
    b"--=xyz",
    b"--trailing-",
    b"---leading",
    b"-a.b",
    b"--caf\xc3\xa9",
    b"--a b",
)


class TestClassify(TestCase):
    """Behavioral tests for classify()."""

    def testSuccessCases(self):
        for token, expected in SUCCESS_CASES:
            with self.subTest(token=token):
                result = classify(token)
                self.assertIsInstance(result, type(expected))
                self.assertEqual(result, expected)

    def testFailureCasesCarryOriginalToken(self):
        for token in FAILURE_CASES:
            with self.subTest(token=token):
                with self.assertRaises(InvalidArgumentError) as caught:
                    classify(token)
                self.assertIs(caught.exception.arg, token)

    def testPositionalIsIdentity(self):
        for token in (b"file.txt", b"x", b"-", b"", b"a-b=c", b"\xfe\xfe"):
            with self.subTest(token=token):
                self.assertIs(classify(token).value, token)

    def testSingleAndDoubleDashAreEquivalent(self):
        for body in (b"a", b"out", b"arg-name", b"X_1", b"o=", b"o=v", b"o=\xff"):
            with self.subTest(body=body):
                self.assertEqual(classify(b"-" + body), classify(b"--" + body))

    def testEmptyInlineValueIsNotMissingValue(self):
        self.assertEqual(classify(b"-a=").value, b"")
        self.assertIsNone(classify(b"-a").value)
        self.assertEqual(classify(b"--a=value").value, b"value")

    def testCombinedShortFlagsAreOneOption(self):
        self.assertEqual(classify(b"-xvf"), NamedToken("xvf", None))

    def testNameIsText(self):
        self.assertIsInstance(classify(b"--name").name, str)

    def testStrTokens(self):
        self.assertEqual(classify("--opt=value"), NamedToken("opt", b"value"))
        self.assertEqual(classify("abc"), PositionalToken(b"abc"))
        self.assertEqual(classify("--"), EndOfFlagsToken())


class TestNormalize(TestCase):
    """Behavioral tests for normalize()."""

    def testBytesUnchanged(self):
        token = b"--out"
        self.assertIs(normalize(token), token)

    def testBytesLike(self):
        self.assertEqual(normalize(bytearray(b"abc")), b"abc")
        self.assertIs(type(normalize(bytearray(b"abc"))), bytes)
        self.assertEqual(normalize(memoryview(b"abc")), b"abc")

    def testStrIsEncoded(self):
        self.assertEqual(normalize("abc"), b"abc")

    def testSurrogateEscapesRoundTrip(self):
        self.assertEqual(normalize("\udcff"), b"\xff")

    def testRejectsOtherTypes(self):
        with self.assertRaises(TypeError):
            normalize(42)
        with self.assertRaises(TypeError):
            classify(None)


if __name__ == "__main__":
    unittest.main()
