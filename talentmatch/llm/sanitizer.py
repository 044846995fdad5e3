"""
talentmatch/llm/sanitizer.py

Turns raw generative-backend text into JSON.

Models wrap JSON in markdown fences, prepend chatter ("Here is the analysis:")
or append notes. The sanitizer strips fences, keeps the outermost object (or,
failing that, the outermost array) and parses it. It never guesses at repairs.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Union

from talentmatch import config as _config
from talentmatch.errors import ParseError

_FENCE_RE = re.compile(r"```(?:json|JSON)?")


@dataclass(frozen=True)
class Parsed:
    value: Any

    ok = True


@dataclass(frozen=True)
class Malformed:
    reason: str
    raw_snippet: str = ""

    ok = False


ParseResult = Union[Parsed, Malformed]


def _snippet(raw: Any) -> str:
    text = raw if isinstance(raw, str) else repr(raw)
    return text[: _config.RAW_SNIPPET_CHARS]


def extract_json(raw: Any) -> Union[dict, list]:
    """
    Locate and parse the JSON payload in a backend response.

    Raises ParseError for non-string or empty input, for input with no braces
    or brackets, and for a candidate span that is not valid JSON.
    """
    if not isinstance(raw, str):
        raise ParseError("response is not text", _snippet(raw))
    cleaned = _FENCE_RE.sub("", raw).strip()
    if not cleaned:
        raise ParseError("response is empty", _snippet(raw))

    candidate = None
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start != -1 and end > start:
        candidate = cleaned[start:end + 1]
    else:
        start, end = cleaned.find("["), cleaned.rfind("]")
        if start != -1 and end > start:
            candidate = cleaned[start:end + 1]

    if candidate is None:
        raise ParseError("no JSON object or array in response", _snippet(raw))

    try:
        value = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise ParseError(f"invalid JSON: {exc.msg}", _snippet(raw)) from None

    if not isinstance(value, (dict, list)):
        raise ParseError("JSON payload is not an object or array", _snippet(raw))
    return value


def parse_response(raw: Any) -> ParseResult:
    try:
        return Parsed(extract_json(raw))
    except ParseError as exc:
        return Malformed(str(exc), exc.raw_snippet)


def expect_object(result: ParseResult) -> dict:
    """
    Unwrap a parse result that must be a JSON object.
    Raises ParseError for Malformed results and for array payloads.
    """
    if isinstance(result, Malformed):
        raise ParseError(result.reason, result.raw_snippet)
    if not isinstance(result.value, dict):
        raise ParseError("expected a JSON object, got an array", _snippet(json.dumps(result.value)))
    return result.value
