"""Extract and heal JSON from raw model text.

Inference backends truncate output mid-array when the token budget runs out.
`repair_json` salvages every complete element and drops the one incomplete
trailing element, so a truncated pass still yields data.
"""

import json
import logging
import re
from typing import Any, List, NamedTuple

from contracts import ResponseParseFailure

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)
_INVISIBLE_CHARS = re.compile("[\\ufeff\\u200b]")
_NEXT_TOKEN = re.compile(r"\s*(\S)")

# Trailing-truncation shapes, tried in this order; only the first match is trimmed
_UNTERMINATED_OBJECT = re.compile(r",\s*\{[^}]*$")
_UNTERMINATED_STRING = re.compile(r",\s*\"[^\"]*\"$")
_DANGLING_KEY = re.compile(r"([,{])\s*\"(?:[^\"\\]|\\.)*\"\s*:\s*$")

_CLOSERS = {"{": "}", "[": "]"}


class _ScanState(NamedTuple):
    in_string: bool
    pending_escape: bool
    open_stack: List[str]


def _scan(text: str) -> _ScanState:
    """Walk the text once, tracking string state and unmatched openers outside strings."""
    stack: List[str] = []
    in_string = False
    escaped = False
    for char in text:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _CLOSERS:
            stack.append(char)
        elif char in "}]":
            if stack and _CLOSERS[stack[-1]] == char:
                stack.pop()
    return _ScanState(in_string, escaped, stack)


def _trim_truncated_tail(text: str, closed_string: bool) -> str:
    """Remove one dangling fragment left by truncation."""
    if _UNTERMINATED_OBJECT.search(text):
        return _UNTERMINATED_OBJECT.sub("", text)
    if closed_string and _UNTERMINATED_STRING.search(text):
        return _UNTERMINATED_STRING.sub("", text)
    match = _DANGLING_KEY.search(text)
    if match:
        keep = "{" if match.group(1) == "{" else ""
        return text[:match.start()] + keep
    return text


def _drop_trailing_commas(text: str) -> str:
    """Drop commas that directly precede a closing brace or bracket, outside strings."""
    out = []
    in_string = False
    escaped = False
    for i, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == ",":
            following = _NEXT_TOKEN.match(text, i + 1)
            if following and following.group(1) in "}]":
                continue
        out.append(char)
    return "".join(out)


def extract_json(text: str) -> str:
    """Pull the JSON payload out of a model response.

    Prefers a fenced code block; otherwise the span from the first `{` to the
    last `}` (or to the end of the text when the object is cut off); otherwise
    the raw text.
    """
    text = _INVISIBLE_CHARS.sub("", text or "").strip()

    fenced = _FENCED_BLOCK.search(text)
    if fenced:
        return fenced.group(1).strip()

    start = text.find("{")
    if start == -1:
        return text
    end = text.rfind("}")
    if end < start:
        return text[start:]
    if not text[end + 1:].strip():
        return text[start:end + 1]

    # Content after the last brace: trailing prose, or an object cut off mid-way
    state = _scan(text[start:])
    if state.in_string or state.open_stack:
        return text[start:]
    return text[start:end + 1]


def repair_json(text: str) -> str:
    """Heal truncated or slightly malformed JSON text.

    1. Close a string left open at the end of the text.
    2. When the structure is unbalanced, trim a dangling trailing fragment:
       an unterminated object after the last comma, an unterminated string
       after the last comma, or a key with no value.
    3. Append the closers needed to balance the structure, innermost first.
    4. Drop trailing commas before closers.

    Always returns a string. The result is not guaranteed to parse; callers
    must still handle a parse failure. Valid JSON is returned unchanged.
    """
    repaired = (text or "").strip()

    state = _scan(repaired)
    closed_string = False
    if state.in_string:
        if state.pending_escape:
            repaired = repaired[:-1]
        repaired += '"'
        closed_string = True

    if closed_string or state.open_stack:
        repaired = _trim_truncated_tail(repaired, closed_string).rstrip()

    state = _scan(repaired)
    repaired += "".join(_CLOSERS[opener] for opener in reversed(state.open_stack))

    return _drop_trailing_commas(repaired)


def parse_model_json(text: str) -> Any:
    """Extract, parse and if necessary repair JSON from a model response.

    Raises:
        ResponseParseFailure: If no JSON can be recovered
    """
    if not text or not text.strip():
        raise ResponseParseFailure("Empty response from model", raw_text=text or "")

    candidate = extract_json(text)
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass

    repaired = repair_json(candidate)
    try:
        data = json.loads(repaired)
    except json.JSONDecodeError as e:
        logger.warning(
            "Could not parse model response (%d chars); tail: %r",
            len(text),
            text[-500:],
        )
        raise ResponseParseFailure(f"Could not parse model response as JSON: {e}", raw_text=text) from e

    logger.info("Recovered model JSON by repair (%d -> %d chars)", len(candidate), len(repaired))
    return data
