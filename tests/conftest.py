"""
Pytest configuration and shared fixtures for jsonwriter tests.

Provides immutable test case fixtures, a writer bound to an in-memory sink,
and a validation helper that re-parses output with independent parsers.
"""

import json
from dataclasses import dataclass
from io import StringIO
from typing import Any

import orjson
import pytest

from jsonwriter import JsonWriter


@dataclass(frozen=True)
class WriterTestCase:
    """
    Immutable container for writer test case data.

    Holds the raw input and the exact text the writer must produce for it.
    """

    description: str
    input_data: Any
    expected_output: str


@pytest.fixture
def sink() -> StringIO:
    """Provides an in-memory text sink."""
    return StringIO()


@pytest.fixture
def writer(sink: StringIO) -> JsonWriter:
    """Provides a writer with default configuration bound to the sink."""
    return JsonWriter(sink)


def assert_valid_json(text: str) -> Any:
    """
    Validates text as a single JSON document with two conformant parsers.

    Returns the decoded document so callers can compare values.
    """
    decoded = json.loads(text)
    assert orjson.loads(text.encode("utf-8")) == decoded
    return decoded


@pytest.fixture
def escaped_ascii_cases() -> list[WriterTestCase]:
    """
    Provides escaping cases with non-ASCII escaping disabled.

    Only mandatory escapes and the solidus are rewritten; characters above
    the ASCII range pass through literally.
    """
    return [
        WriterTestCase("empty", "", '""'),
        WriterTestCase("spaces", "   ", '"   "'),
        WriterTestCase("plain", "Hello World", '"Hello World"'),
        WriterTestCase("newline", "Hello World\n", '"Hello World\\n"'),
        WriterTestCase("crlf", "Hello World\r\n", '"Hello World\\r\\n"'),
        WriterTestCase("tab", "Hello\tWorld", '"Hello\\tWorld"'),
        WriterTestCase("form feed", "Hello World\f", '"Hello World\\f"'),
        WriterTestCase("backspace", "Hello World\b", '"Hello World\\b"'),
        WriterTestCase("quotes", 'Hello "World"', '"Hello \\"World\\""'),
        WriterTestCase(
            "solidus",
            "https://www.cthing.com/foo",
            '"https:\\/\\/www.cthing.com\\/foo"',
        ),
        WriterTestCase("backslash", "This \\ That", '"This \\\\ That"'),
        WriterTestCase("control", "A\u001fZ", '"A\\u001FZ"'),
        WriterTestCase("bmp", "Hello \u1e80orld", '"Hello \u1e80orld"'),
        WriterTestCase(
            "supplementary", "Hello \U0001d11e", '"Hello \U0001d11e"'
        ),
    ]


@pytest.fixture
def escaped_non_ascii_cases() -> list[WriterTestCase]:
    """
    Provides escaping cases with non-ASCII escaping enabled.

    Characters above the ASCII range become uppercase numeric escapes,
    with surrogate pairs beyond the Basic Multilingual Plane.
    """
    return [
        WriterTestCase("empty", "", '""'),
        WriterTestCase("plain", "Hello World", '"Hello World"'),
        WriterTestCase("newline", "Hello World\n", '"Hello World\\n"'),
        WriterTestCase("quotes", 'Hello "World"', '"Hello \\"World\\""'),
        WriterTestCase(
            "solidus",
            "https://www.cthing.com/foo",
            '"https:\\/\\/www.cthing.com\\/foo"',
        ),
        WriterTestCase("backslash", "This \\ That", '"This \\\\ That"'),
        WriterTestCase("bmp", "Hello \u1e80orld", '"Hello \\u1E80orld"'),
        WriterTestCase("latin1", "café", '"caf\\u00E9"'),
        WriterTestCase("delete", "\u007f", '"\\u007F"'),
        WriterTestCase(
            "supplementary", "Hello \U0001d11e", '"Hello \\uD834\\uDD1E"'
        ),
    ]


@pytest.fixture
def scalar_cases() -> list[WriterTestCase]:
    """
    Provides scalar values with their exact rendered text.

    Floats always carry a fractional part; integers are plain base 10.
    """
    return [
        WriterTestCase("text", "v1", '"v1"'),
        WriterTestCase("character", "6", '"6"'),
        WriterTestCase("integer", 3, "3"),
        WriterTestCase("negative integer", -17, "-17"),
        WriterTestCase("64-bit maximum", 2**63 - 1, "9223372036854775807"),
        WriterTestCase("64-bit minimum", -(2**63), "-9223372036854775808"),
        WriterTestCase("integral float", 7.0, "7.0"),
        WriterTestCase("float", 8.10, "8.1"),
        WriterTestCase("small float", 0.1, "0.1"),
        WriterTestCase("large float", 1e16, "1.0e+16"),
        WriterTestCase("tiny float", 5e-324, "5.0e-324"),
        WriterTestCase("true", True, "true"),
        WriterTestCase("false", False, "false"),
        WriterTestCase("null", None, "null"),
    ]
