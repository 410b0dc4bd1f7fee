"""
JSON Utilities for LLM Response Parsing.

This module provides robust JSON parsing for model outputs which may contain
markdown code fences, surrounding prose, or malformed JSON (single quotes,
trailing commas, unquoted keys, etc.).

Uses json-repair library as a fallback when standard json.loads() fails.
"""

import json
import re
from typing import Any, Dict, List, Optional

from json_repair import repair_json


_FENCED_BLOCK_RE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)


def parse_llm_json(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object from an LLM response with robust error recovery.

    Handles common LLM output issues:
    - Markdown code blocks (```json ... ```)
    - JSON embedded in surrounding text
    - Single quotes, trailing commas, unquoted keys

    Args:
        text: Raw LLM response text that may contain JSON

    Returns:
        Parsed dictionary from the JSON

    Raises:
        ValueError: If no valid JSON object can be extracted or repaired

    Example:
        >>> parse_llm_json('```json\\n{"key": "value"}\\n```')
        {'key': 'value'}
    """
    if not text or not text.strip():
        raise ValueError("Empty input: no JSON content to parse")

    json_str = _strip_markdown_blocks(text.strip())
    json_str = _extract_json_object(json_str)

    try:
        parsed = json.loads(json_str)
    except json.JSONDecodeError:
        parsed = _repair(json_str, text)

    if isinstance(parsed, list) and len(parsed) == 1 and isinstance(parsed[0], dict):
        # LLM sometimes wraps the object in brackets: [{...}]
        return parsed[0]
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def parse_llm_json_array(text: str) -> List[Any]:
    """
    Parse a JSON array from an LLM response.

    Strips a leading/trailing markdown fence; when no fence is present,
    falls back to the first bracketed ``[...]`` substring. The root value
    must be an array of objects.

    Args:
        text: Raw LLM response text

    Returns:
        Parsed list

    Raises:
        ValueError: If the text holds no parseable JSON array of objects

    Example:
        >>> parse_llm_json_array('```json\\n[{"name": "Python"}]\\n```')
        [{'name': 'Python'}]
    """
    if not text or not text.strip():
        raise ValueError("Empty input: no JSON content to parse")

    stripped = text.strip()
    fenced = _extract_fenced_block(stripped)
    if fenced is not None:
        json_str = fenced
    else:
        json_str = _extract_json_array(stripped)

    try:
        parsed = json.loads(json_str)
    except json.JSONDecodeError:
        if not json_str.lstrip().startswith("["):
            raise ValueError(f"No JSON array found in text: {text[:200]}")
        parsed = _repair(json_str, text)

    if not isinstance(parsed, list):
        raise ValueError(f"Expected a JSON array, got {type(parsed).__name__}")
    if any(not isinstance(item, dict) for item in parsed):
        # json_repair turns bracketed prose like "[Python, Docker]" into strings
        raise ValueError(f"Expected a JSON array of objects, got: {parsed[:3]}")
    return parsed


def _repair(json_str: str, original: str) -> Any:
    """Run json-repair over malformed JSON, raising ValueError if it cannot help."""
    try:
        repaired = repair_json(json_str, return_objects=True)
    except Exception as e:
        raise ValueError(
            f"Failed to parse or repair JSON: {e}\n"
            f"Original text (first 500 chars): {original[:500]}"
        )

    if isinstance(repaired, (dict, list)) and repaired:
        return repaired
    if isinstance(repaired, str) and repaired:
        return json.loads(repaired)
    raise ValueError(
        f"json_repair could not recover JSON\n"
        f"Original text (first 500 chars): {original[:500]}"
    )


def _strip_markdown_blocks(text: str) -> str:
    """
    Remove markdown code block wrappers from text.

    Handles:
    - ```json ... ```
    - ``` ... ```
    - Leading/trailing whitespace

    Args:
        text: Text that may be wrapped in markdown code blocks

    Returns:
        Text with code block markers removed
    """
    result = text

    if result.startswith("```json"):
        result = result[7:]
    elif result.startswith("```"):
        result = result[3:]

    if result.endswith("```"):
        result = result[:-3]

    return result.strip()


def _extract_fenced_block(text: str) -> Optional[str]:
    """
    Return the contents of the first markdown code fence, or None.

    Args:
        text: Text that may contain a ```json ... ``` block

    Returns:
        Fence contents with whitespace stripped, None if no fence found
    """
    if text.startswith("```") and text.count("```") == 1:
        # Unterminated fence (streamed output cut short)
        return _strip_markdown_blocks(text)

    match = _FENCED_BLOCK_RE.search(text)
    if match:
        return match.group(1).strip()
    return None


def _extract_json_object(text: str) -> str:
    """
    Extract JSON object from text that may contain surrounding content.

    If the text doesn't start with '{', attempts to find a JSON object
    within the text using regex.

    Args:
        text: Text that may contain a JSON object

    Returns:
        The extracted JSON string

    Raises:
        ValueError: If no JSON object pattern is found
    """
    text = text.strip()

    if text.startswith("{"):
        return text

    # Content between first { and last }
    json_match = re.search(r'\{.*\}', text, re.DOTALL)
    if json_match:
        return json_match.group(0)

    raise ValueError(f"No JSON object found in text: {text[:200]}")


def _extract_json_array(text: str) -> str:
    """
    Extract a JSON array from text that may contain surrounding content.

    Args:
        text: Text that may contain a JSON array

    Returns:
        Content between the first '[' and the last ']' (or the text itself)
    """
    text = text.strip()

    if text.startswith("["):
        return text

    json_match = re.search(r'\[.*\]', text, re.DOTALL)
    if json_match:
        return json_match.group(0)

    # Let json.loads report the failure
    return text
