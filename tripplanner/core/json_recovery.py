"""
Best-effort recovery of JSON from raw LLM output.

Escalates from a direct parse, to textual sanitization (code fences, smart
quotes, trailing commas, surrounding prose), to asking a model to repair the
text. Truncation, markdown wrapping and stray commentary are the usual
culprits.
"""

import json
import logging
import re
from typing import Any

from tripplanner.core.llm_provider import CompletionGateway, ModelParams
from tripplanner.core.prompts import build_repair_prompt
from tripplanner.core.settings import Settings

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_DOUBLE_COMMA_RE = re.compile(r",\s*,")
# "{...}", "{...}" -> {...}, {...} (objects the model quoted as strings)
_QUOTED_OBJECT_SEP_RE = re.compile(r'}"\s*,\s*"{')
_QUOTED_OBJECT_END_RE = re.compile(r'}"\s*]')

_SMART_QUOTES = {
    "“": '"',
    "”": '"',
    "„": '"',
    "‘": "'",
    "’": "'",
}


def strip_code_fences(text: str) -> str:
    """Return the body of a ```json fenced block, tolerating a missing closing fence."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1)
    if text.startswith("```"):
        body = text.lstrip("`")
        if body.lower().startswith("json"):
            body = body[4:]
        return body.strip()
    return text


def extract_json_span(text: str) -> str | None:
    """
    Find the first JSON object (or array) in ``text`` and return it.

    Scans for the bracket that balances the first opener, ignoring brackets
    inside strings. When the output was truncated and never balances, falls
    back to the span ending at the last closing bracket.
    """
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return None
    start = min(starts)
    opener = text[start]
    closer = "}" if opener == "{" else "]"

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "{[":
            depth += 1
        elif ch in "}]":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]

    end = text.rfind(closer)
    if end > start:
        return text[start : end + 1]
    return None


def _repair_text(text: str) -> str:
    text = _QUOTED_OBJECT_SEP_RE.sub("},{", text)
    text = _QUOTED_OBJECT_END_RE.sub("}]", text)
    text = _DOUBLE_COMMA_RE.sub(",", text)
    text = _TRAILING_COMMA_RE.sub(r"\1", text)
    return text


def _normalize_quotes(text: str) -> str:
    for smart, plain in _SMART_QUOTES.items():
        text = text.replace(smart, plain)
    return text


def _loads_container(text: str) -> Any | None:
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        return None
    return data if isinstance(data, (dict, list)) else None


def sanitize_candidates(raw: str) -> list[str]:
    """Progressively more aggressive cleanups of ``raw``, in the order they are tried."""
    text = strip_code_fences(raw.strip()).strip()
    candidates = [_repair_text(text)]
    span = extract_json_span(text)
    if span:
        candidates.append(_repair_text(span))
    # Smart quotes are only rewritten as a later resort: inside valid strings they are content
    quoted = _normalize_quotes(text)
    if quoted != text:
        candidates.append(_repair_text(quoted))
        span = extract_json_span(quoted)
        if span:
            candidates.append(_repair_text(span))
    return candidates


def parse_json_loose(raw: str | None) -> Any | None:
    """Direct parse, then sanitized parses. Returns a dict/list or None."""
    if not raw or not isinstance(raw, str) or not raw.strip():
        return None

    data = _loads_container(raw.strip())
    if data is not None:
        return data

    for candidate in sanitize_candidates(raw):
        data = _loads_container(candidate)
        if data is not None:
            return data
    return None


async def recover(
    raw: str | None, gateway: CompletionGateway, settings: Settings
) -> Any | None:
    """
    Recover a JSON value from raw model output.

    Returns None when direct parsing, sanitizing and one repair round-trip
    through the gateway all fail. Empty input is never sent for repair: an
    empty completion means the provider itself failed.
    """
    data = parse_json_loose(raw)
    if data is not None:
        return data
    if not raw or not raw.strip():
        return None

    logger.info("Sanitized parse failed, asking %s to repair JSON", settings.repair_model)
    repaired = await gateway.complete(
        build_repair_prompt(raw),
        ModelParams(model=settings.repair_model, temperature=0.2, max_tokens=8000),
    )
    data = parse_json_loose(repaired)
    if data is None:
        logger.warning("JSON repair failed; giving up on this response")
    return data
