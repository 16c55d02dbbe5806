"""Extraction and repair of JSON embedded in raw model text"""

import json
import re
from typing import Any


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code block if present"""
    text = text.strip()

    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]

    if text.endswith("```"):
        text = text[:-3]

    return text.strip()


def fix_json(text: str) -> str:
    """
    Attempt to fix common JSON issues from LLM output.

    Removes trailing commas and, when the text was cut off mid-structure,
    drops the dangling partial value and closes the open brackets.
    """
    text = re.sub(r',(\s*[}\]])', r'\1', text)

    stack = []
    in_string = False
    escape_next = False
    for char in text:
        if escape_next:
            escape_next = False
            continue
        if char == '\\' and in_string:
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if char in '{[':
            stack.append('}' if char == '{' else ']')
        elif char in '}]' and stack:
            stack.pop()

    if not stack and not in_string:
        return text

    if in_string:
        text += '"'
        # Drop a key whose string value was cut off
        text = re.sub(r',?\s*"[^"]*"\s*:\s*"[^"]*"$', '', text)

    # Drop a dangling key or separator
    text = re.sub(r',\s*"[^"]*"\s*:\s*$', '', text)
    text = re.sub(r'(\{)\s*"[^"]*"\s*:\s*$', r'\1', text)
    text = re.sub(r',\s*$', '', text).rstrip()

    return text + "".join(reversed(stack))


def extract_json(text: str) -> str:
    """
    Extract JSON from text that may contain extra content before/after.

    Args:
        text: Raw text that may contain JSON

    Returns:
        Extracted JSON string
    """
    text = strip_code_fences(text)

    json_start = -1
    for i, char in enumerate(text):
        if char in '{[':
            json_start = i
            break

    if json_start == -1:
        return text

    start_char = text[json_start]
    end_char = '}' if start_char == '{' else ']'

    depth = 0
    in_string = False
    escape_next = False
    json_end = -1

    for i in range(json_start, len(text)):
        char = text[i]

        if escape_next:
            escape_next = False
            continue

        if char == '\\' and in_string:
            escape_next = True
            continue

        if char == '"':
            in_string = not in_string
            continue

        if in_string:
            continue

        if char == start_char:
            depth += 1
        elif char == end_char:
            depth -= 1
            if depth == 0:
                json_end = i + 1
                break

    if json_end > json_start:
        return fix_json(text[json_start:json_end])

    # Unbalanced: the response was probably truncated
    return fix_json(text[json_start:])


def parse_json_response(text: str) -> Any:
    """Parse model text into JSON, raising json.JSONDecodeError when hopeless"""
    return json.loads(extract_json(text or ""))
