"""Parse the model's raw answer into template fields.

Handles: direct JSON, ```json fences, untagged fences, and
<think>...</think> blocks emitted before the answer.
"""

import json
import re

from pydantic import ValidationError

from models import TemplateField

_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL)
_JSON_FENCE = re.compile(r"```json[ \t]*\n?(.*?)\n?```", re.DOTALL | re.IGNORECASE)
_ANY_FENCE = re.compile(r"```[A-Za-z0-9_-]*[ \t]*\n?(.*?)\n?```", re.DOTALL)

# Computed locally by enrichment; anything the model sends here is dropped
_DERIVED_KEYS = (
    "contextBefore", "contextAfter", "fullContext",
    "context_before", "context_after", "full_context",
)


class MalformedResponse(ValueError):
    """The model answer is not a JSON array of field objects."""

    def __init__(self, message: str, raw: str):
        super().__init__(message)
        self.raw = raw


def extract_candidate(raw: str) -> str:
    """Pick the text to parse: a json-tagged fence, else any fence, else everything."""
    cleaned = _THINK_BLOCK.sub("", raw).strip()

    match = _JSON_FENCE.search(cleaned) or _ANY_FENCE.search(cleaned)
    if match:
        return match.group(1).strip()
    return cleaned


def parse_fields(raw: str) -> list[TemplateField]:
    """Convert the model's raw text into un-enriched TemplateFields.

    Raises MalformedResponse when no JSON array of field objects is found.
    """
    if not raw or not raw.strip():
        raise MalformedResponse("Empty model response", raw or "")

    candidate = extract_candidate(raw)
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise MalformedResponse(f"Model response is not valid JSON: {e}", raw) from e
    except RecursionError as e:
        raise MalformedResponse("Model response is nested too deeply", raw) from e

    if not isinstance(parsed, list):
        raise MalformedResponse(
            f"Expected a JSON array of fields, got {type(parsed).__name__}", raw
        )

    fields = []
    for index, item in enumerate(parsed):
        if not isinstance(item, dict):
            raise MalformedResponse(f"Field #{index} is not an object", raw)
        item = {k: v for k, v in item.items() if k not in _DERIVED_KEYS}
        try:
            fields.append(TemplateField.model_validate(item))
        except ValidationError as e:
            raise MalformedResponse(f"Field #{index} is not well-formed: {e}", raw) from e

    return fields
