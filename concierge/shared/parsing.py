"""
Response parsing for inference output.

Handles extraction of JSON from free-form model responses (raw JSON,
markdown code blocks, JSON surrounded by prose).
"""

import json
import logging
import re
from typing import Any


logger = logging.getLogger(__name__)


class ParseError(Exception):
    """Raised when response parsing fails."""

    pass


def extract_json_from_response(raw_response: str) -> str:
    """
    Extract JSON content from an LLM response.

    Handles multiple formats:
    - Raw JSON
    - JSON in markdown code blocks (```json ... ```)
    - JSON preceded by explanatory text

    Args:
        raw_response: Raw LLM response string

    Returns:
        Cleaned JSON string ready for parsing

    Raises:
        ParseError: If the response is empty
    """
    if raw_response is None or not raw_response.strip():
        raise ParseError("Empty response")

    content = raw_response.strip()

    # Try to extract from markdown code block
    code_block_pattern = r"```(?:json)?\s*([\s\S]*?)```"
    match = re.search(code_block_pattern, content)
    if match:
        content = match.group(1).strip()

    # Skip any prose before the first JSON delimiter
    starts = [i for i in (content.find("{"), content.find("[")) if i >= 0]
    if starts:
        content = content[min(starts):]

    # Find JSON object or array boundaries
    if content.startswith("{"):
        open_char, close_char = "{", "}"
    elif content.startswith("["):
        open_char, close_char = "[", "]"
    else:
        return content

    depth = 0
    in_string = False
    escaped = False
    for i, char in enumerate(content):
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
        elif char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return content[: i + 1]

    # If we can't find clear boundaries, return as-is and let JSON parser handle it
    return content


def parse_json_response(raw_response: str) -> Any:
    """
    Extract and decode JSON from an LLM response.

    Args:
        raw_response: Raw LLM response string

    Returns:
        The decoded JSON value (dict, list, ...)

    Raises:
        ParseError: If no decodable JSON is present
    """
    json_str = extract_json_from_response(raw_response)
    try:
        return json.loads(json_str)
    except json.JSONDecodeError as e:
        raise ParseError(f"Failed to parse response JSON: {e}\nContent: {json_str[:200]}")
