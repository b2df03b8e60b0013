"""Recover a JSON object from free-form model output."""

import json
import re

from diet_planner.errors import MalformedJson, NoJsonFound

_FENCED_BLOCK = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)


def extract_json(text: str) -> object:
    """Parse the JSON payload embedded in generative output.

    Tries the whole text first, then the first fenced block that contains an
    object or array, then the span from the first "{" to the last "}".

    Raises NoJsonFound when no object-like span exists and MalformedJson when
    one exists but does not parse.
    """
    stripped = (text or "").strip()
    if not stripped:
        raise NoJsonFound("Generative response is empty")
    parsed = _loads_whole(stripped)
    if parsed is not None:
        return parsed
    for block in _FENCED_BLOCK.findall(stripped):
        if "{" in block or block.lstrip().startswith("["):
            parsed = _loads_whole(block.strip())
            return parsed if parsed is not None else _parse_braced(block)
    return _parse_braced(stripped)


def _loads_whole(text: str) -> object | None:
    if not text or text[0] not in "{[":
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None


def _parse_braced(text: str) -> object:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise NoJsonFound("No JSON object found in generative response")
    candidate = text[start : end + 1]
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise MalformedJson(
            "Generative response contains malformed JSON",
            {"position": exc.pos, "reason": exc.msg},
        ) from exc
