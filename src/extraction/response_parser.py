"""Turn the model's free-text answer into validated material items.

Strict mode requires the answer to be a JSON array and nothing else (code
fences aside). Compatibility mode scans for the first array literal in the
text, since models routinely wrap the JSON in prose.
"""

from __future__ import annotations

import json
import re
from typing import Any, List

from pydantic import ValidationError as SchemaValidationError

from llm.schemas import ExtractedMaterial, ExtractedMaterialList
from study_schedule.errors import ParseError

NO_ARRAY_MESSAGE = "Could not parse materials from response"

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*|```", re.MULTILINE)


def clean_llm_text(s: str) -> str:
    """Remove markdown code fences and trim."""
    return _FENCE_RE.sub("", s or "").strip()


def _decode_strict(text: str) -> Any:
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Response is not valid JSON: {e}") from e
    if not isinstance(value, list):
        raise ParseError("Response JSON is not an array")
    return value


def _decode_first_array(text: str) -> Any:
    start = text.find("[")
    if start == -1:
        raise ParseError(NO_ARRAY_MESSAGE)
    try:
        value, _end = json.JSONDecoder().raw_decode(text, start)
    except json.JSONDecodeError as e:
        raise ParseError(f"Malformed materials array: {e}") from e
    return value


def parse_materials(text: str, strict: bool = False) -> List[ExtractedMaterial]:
    cleaned = clean_llm_text(text)
    raw = _decode_strict(cleaned) if strict else _decode_first_array(cleaned)

    try:
        return ExtractedMaterialList.model_validate(raw).root
    except SchemaValidationError as e:
        raise ParseError(f"Materials do not match the expected shape: {e.error_count()} error(s)") from e
