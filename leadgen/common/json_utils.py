"""
JSON Utilities for LLM Response Parsing.

LLM replies are requested in JSON mode but still arrive wrapped in markdown
fences or, for long extraction replies, occasionally truncated. Strict parsing
is used where the shape of the reply is a contract (intent classification,
outreach drafts); lenient parsing with json-repair is used for lead extraction
from scraped pages.
"""

import json
import re
from typing import Any, Dict

from json_repair import repair_json

from leadgen.common.error_handling import MalformedAIResponseError


def parse_llm_json(text: str, strict: bool = True) -> Dict[str, Any]:
    """
    Parse a JSON object from an LLM response.

    Args:
        text: Raw LLM response text that may contain JSON
        strict: When False, fall back to json-repair for malformed JSON

    Returns:
        Parsed dictionary from the JSON

    Raises:
        MalformedAIResponseError: If no JSON object can be extracted

    Example:
        >>> parse_llm_json('```json\\n{"type": "unknown", "values": []}\\n```')
        {'type': 'unknown', 'values': []}
    """
    if not text or not text.strip():
        raise MalformedAIResponseError("AI returned malformed output: empty reply", raw=text)

    json_str = _strip_markdown_blocks(text.strip())

    try:
        json_str = _extract_json_object(json_str)
    except ValueError as e:
        raise MalformedAIResponseError(f"AI returned malformed output: {e}", raw=text) from e

    try:
        parsed = json.loads(json_str)
    except json.JSONDecodeError as e:
        if strict:
            raise MalformedAIResponseError(f"AI returned malformed output: {e}", raw=text) from e
        parsed = _repair(json_str, text)

    if not isinstance(parsed, dict):
        raise MalformedAIResponseError(
            f"AI returned malformed output: expected a JSON object, got {type(parsed).__name__}",
            raw=text,
        )
    return parsed


def _repair(json_str: str, original: str) -> Any:
    """Run json-repair and unwrap the single-object-in-a-list shape."""
    repaired = repair_json(json_str, return_objects=True)

    if isinstance(repaired, list) and len(repaired) == 1 and isinstance(repaired[0], dict):
        # LLM sometimes wraps response in brackets: [{...}]
        return repaired[0]
    if isinstance(repaired, dict) and repaired:
        return repaired

    raise MalformedAIResponseError(
        f"AI returned malformed output: could not repair JSON ({original[:200]})",
        raw=original,
    )


def _strip_markdown_blocks(text: str) -> str:
    """Remove ```json ... ``` or ``` ... ``` wrappers."""
    result = text

    if result.startswith("```json"):
        result = result[7:]
    elif result.startswith("```"):
        result = result[3:]

    if result.endswith("```"):
        result = result[:-3]

    return result.strip()


def _extract_json_object(text: str) -> str:
    """
    Extract a JSON object from text that may contain surrounding content.

    Raises:
        ValueError: If no JSON object pattern is found
    """
    text = text.strip()

    if text.startswith("{"):
        return text

    json_match = re.search(r'\{.*\}', text, re.DOTALL)
    if json_match:
        return json_match.group(0)

    raise ValueError(f"No JSON object found in text: {text[:200]}")
