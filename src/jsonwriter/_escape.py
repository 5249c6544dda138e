"""Escaping of raw text into the body of a JSON string literal."""

from __future__ import annotations

from typing import Final

# Short escapes always applied, independent of the non-ASCII option
_SHORT_ESCAPES: Final[dict[str, str]] = {
    '"': '\\"',
    "\\": "\\\\",
    "/": "\\/",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_CONTROL_LIMIT: Final = 0x20
_PRINTABLE_ASCII_LIMIT: Final = 0x7E
_BMP_LIMIT: Final = 0xFFFF


def _unicode_escape(code_point: int) -> str:
    """Render a code point as one or two uppercase ``\\uXXXX`` escapes."""
    if code_point > _BMP_LIMIT:
        offset = code_point - 0x10000
        high = 0xD800 + (offset >> 10)
        low = 0xDC00 + (offset & 0x3FF)
        return f"\\u{high:04X}\\u{low:04X}"
    return f"\\u{code_point:04X}"


def escape(text: str, escape_non_ascii: bool = False) -> str:
    """
    Escapes text for inclusion between the quotes of a JSON string.

    Quotation mark, reverse solidus, solidus and control characters are
    always escaped. With ``escape_non_ascii`` every character outside the
    printable ASCII range is written as a numeric escape, using a surrogate
    pair for characters beyond the Basic Multilingual Plane.

    Args:
        text: Raw text to escape
        escape_non_ascii: Escape characters above U+007E as well

    Returns:
        Escaped text without surrounding quotes
    """
    result = []
    for char in text:
        short = _SHORT_ESCAPES.get(char)
        if short is not None:
            result.append(short)
            continue

        code_point = ord(char)
        if code_point < _CONTROL_LIMIT:
            result.append(_unicode_escape(code_point))
        elif escape_non_ascii and code_point > _PRINTABLE_ASCII_LIMIT:
            result.append(_unicode_escape(code_point))
        else:
            result.append(char)
    return "".join(result)
