"""
Menu JSON Extraction

Pulls the JSON array out of an LLM reply. Models often wrap the answer in a
fenced code block or surround it with prose, and sometimes emit JSON5-ish
text (trailing commas, bare keys, single quotes).

Extraction order:
    1. A fenced ```json block holding an array
    2. The first balanced top-level array literal in the text

Parsing modes:
    - strict: ``json.loads`` as-is, any malformation is an error
    - best-effort: on failure, apply ``normalize_json`` and retry once

``normalize_json`` is a text transform, not a parser. Known limitations:
apostrophes inside single-quoted values, and ``word:`` sequences inside
string values, can be rewritten incorrectly.
"""

import json
import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)


class MenuParseError(ValueError):
    """The LLM reply does not contain a usable menu array."""


_FENCED_ARRAY = re.compile(r"```(?:json)?\s*(\[[\s\S]*?\])\s*```", re.IGNORECASE)

_LINE_COMMENT = re.compile(r"^\s*//[^\n]*$", re.MULTILINE)
_BLOCK_COMMENT = re.compile(r"/\*[\s\S]*?\*/")
_SINGLE_QUOTED = re.compile(r"(?<=[\[{:,])(\s*)'([^'\n]*)'")
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)(\s*:)")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


def find_array_literal(text: str) -> Optional[str]:
    """
    Return the first balanced ``[...]`` in ``text``.

    Brackets inside quoted strings are ignored. Returns None when there is no
    opening bracket or it is never closed.
    """
    start = text.find("[")
    if start == -1:
        return None

    depth = 0
    quote: Optional[str] = None
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in ("\"", "'"):
            quote = ch
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def extract_json_block(text: str) -> str:
    """Locate the JSON array in an LLM reply."""
    match = _FENCED_ARRAY.search(text)
    if match:
        return match.group(1)

    literal = find_array_literal(text)
    if literal is not None:
        return literal

    raise MenuParseError("Could not find a JSON array in the LLM response")


def _double_quote(match: re.Match) -> str:
    value = match.group(2).replace("\"", "\\\"")
    return f"{match.group(1)}\"{value}\""


def normalize_json(text: str) -> str:
    """Best-effort repair of common LLM JSON mistakes."""
    text = _BLOCK_COMMENT.sub("", text)
    text = _LINE_COMMENT.sub("", text)
    text = _SINGLE_QUOTED.sub(_double_quote, text)
    text = _BARE_KEY.sub(r'\1"\2"\3', text)
    text = _TRAILING_COMMA.sub(r"\1", text)
    return text


def parse_menu_json(text: str, strict: bool = False) -> list[dict[str, Any]]:
    """
    Extract and parse a non-empty JSON array of objects.

    Args:
        text: Raw LLM reply
        strict: Disable the best-effort normalization pass

    Raises:
        MenuParseError: No array found, malformed JSON, empty array,
            or entries that are not objects
    """
    block = extract_json_block(text)

    try:
        data = json.loads(block)
    except json.JSONDecodeError as e:
        if strict:
            raise MenuParseError(f"Invalid JSON in LLM response: {e}") from e
        logger.debug(f"Strict JSON parse failed ({e}); retrying with normalization")
        try:
            data = json.loads(normalize_json(block))
        except json.JSONDecodeError as e2:
            raise MenuParseError(f"Invalid JSON in LLM response after repair: {e2}") from e2

    if not isinstance(data, list):
        raise MenuParseError(f"Expected a JSON array, got {type(data).__name__}")
    if not data:
        raise MenuParseError("LLM returned an empty menu")
    if not all(isinstance(entry, dict) for entry in data):
        raise MenuParseError("Every menu entry must be a JSON object")

    return data
