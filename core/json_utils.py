"""
JSON utilities for handling malformed LLM responses.
"""
import json
import logging
import re
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]')
_HEX_ESCAPES = re.compile(r'\\x[0-9A-Fa-f]{2}')
_UNICODE_CONTROL_ESCAPES = re.compile(r'\\u00[0-1][0-9A-Fa-f]')
_CODE_FENCE = re.compile(r'```(?:json|JSON)?\s*([\{\[][\s\S]*?[\}\]])\s*```')
_ANY_FENCE = re.compile(r'```[a-zA-Z0-9_-]*\s*\n?([\s\S]*?)```')


def strip_control_chars(text: str) -> str:
    """Remove raw control characters, keeping \\t, \\n and \\r."""
    return _CONTROL_CHARS.sub('', text)


def strip_control_escapes(text: str) -> str:
    """Remove literal \\xNN and \\u00NN control escapes that break json.loads."""
    text = _HEX_ESCAPES.sub('', text)
    return _UNICODE_CONTROL_ESCAPES.sub('', text)


def strip_code_fences(text: str) -> str:
    """Return the body of the first fenced block, or the text unchanged when there is none."""
    match = _ANY_FENCE.search(text or "")
    if match:
        return match.group(1).strip()
    return (text or "").strip()


def sanitize_json_string(json_str: str) -> str:
    """
    Repair common structural issues in LLM-produced JSON.

    Args:
        json_str: Candidate JSON text

    Returns:
        Sanitized JSON string
    """
    if not json_str:
        return "{}"

    json_str = strip_control_escapes(strip_control_chars(json_str))

    # Trailing commas before closing braces/brackets
    json_str = re.sub(r',\s*([}\]])', r'\1', json_str)

    # Missing commas between adjacent objects/arrays
    json_str = re.sub(r'}\s*{', '},{', json_str)
    json_str = re.sub(r']\s*\[', '],[', json_str)

    # Missing commas between a value and the next key on a new line
    json_str = re.sub(r'("|\d|true|false|null)\s*\n\s*"', r'\1,\n"', json_str)

    open_braces = json_str.count('{') - json_str.count('}')
    open_brackets = json_str.count('[') - json_str.count(']')
    if open_brackets > 0:
        json_str += ']' * open_brackets
    if open_braces > 0:
        json_str += '}' * open_braces

    return json_str


def safe_json_parse(json_str: str, fallback: Optional[Any] = None) -> Any:
    """
    Parse JSON, falling back to a lenient decoder and then to sanitation.

    Returns the fallback (default {}) if nothing works.
    """
    if fallback is None:
        fallback = {}

    for candidate in (json_str, sanitize_json_string(json_str)):
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            pass
        try:
            return json.JSONDecoder(strict=False).decode(candidate)
        except json.JSONDecodeError as e:
            logger.debug("JSON parse failed at pos %s: %s", e.pos, candidate[max(0, e.pos - 20):e.pos + 20])

    return fallback


def extract_json_from_response(response: str) -> str:
    """
    Extract JSON from LLM response text.

    Looks in fenced code blocks first, then for the outermost object, then
    for an array. Returns "{}" when nothing JSON-like is present.
    """
    response = strip_control_chars(response or "")

    fenced = _CODE_FENCE.search(response)
    if fenced:
        return fenced.group(1)

    start = response.find('{')
    end = response.rfind('}')
    if start != -1 and end > start:
        return response[start:end + 1]

    array_match = re.search(r'\[.*\]', response, re.DOTALL)
    if array_match:
        return array_match.group(0)

    return "{}"


def parse_llm_json(raw_response: str, fallback: Optional[Dict[str, Any]] = None) -> Any:
    """Extract, sanitize and parse an LLM JSON response.

    Args:
        raw_response: The raw text returned by the LLM.
        fallback: Value returned if nothing parseable is found.

    Returns:
        Parsed dict or list (or fallback if invalid).
    """
    if fallback is None:
        fallback = {}
    json_str = extract_json_from_response(raw_response)
    if json_str == "{}":
        return fallback
    data = safe_json_parse(json_str, fallback)
    if isinstance(data, (dict, list)):
        return data
    return fallback
