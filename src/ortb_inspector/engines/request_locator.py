# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Request Locator - Parse raw text and find the bid request inside it.

Payloads copied from logs are often wrapped in an envelope
(``{"request": {...}}``, ``{"data": [{...}]}``). The locator walks the
parsed value depth-first and returns the first object shaped like a bid
request: a string ``id`` and an array ``imp``.
"""

import json
from typing import Any, Optional


class RequestParseError(ValueError):
    """Raised when the input text is not valid JSON."""


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard constant {name}")


def parse_request_text(text: str) -> Any:
    """Strictly parse JSON text.

    Args:
        text: Raw input text

    Returns:
        The parsed JSON value

    Raises:
        RequestParseError: If the text cannot be parsed
    """
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:
        raise RequestParseError(f"Invalid JSON: {e}") from e
    except RecursionError as e:
        raise RequestParseError("Invalid JSON: nesting too deep") from e


def is_bid_request(value: Any) -> bool:
    """Check the bid request identity: string id and array imp."""
    return (
        isinstance(value, dict)
        and isinstance(value.get("id"), str)
        and isinstance(value.get("imp"), list)
    )


def locate_request(value: Any) -> Optional[dict]:
    """Find the first bid request object in pre-order depth-first order.

    Args:
        value: Parsed JSON value

    Returns:
        The located request dict, or None when nothing matches
    """
    stack = [value]
    while stack:
        current = stack.pop()
        if is_bid_request(current):
            return current
        if isinstance(current, dict):
            stack.extend(reversed(list(current.values())))
        elif isinstance(current, list):
            stack.extend(reversed(current))
    return None


def split_documents(text: str) -> list[str]:
    """Split text holding several JSON documents into one string per document.

    Accepts a JSON array of requests, concatenated objects, or one object
    per line. Braces inside strings (including escaped quotes) are ignored.
    """
    stripped = text.strip()
    if not stripped:
        return []

    if stripped.startswith("["):
        try:
            parsed = json.loads(stripped, parse_constant=_reject_constant)
        except (ValueError, RecursionError):
            parsed = None
        if isinstance(parsed, list):
            return [json.dumps(item) for item in parsed]

    documents: list[str] = []
    depth = 0
    in_string = False
    escape = False
    buffer: list[str] = []

    for char in text:
        buffer.append(char)

        if char == '"' and not escape:
            in_string = not in_string
        escape = char == "\\" and not escape and in_string

        if in_string:
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                documents.append(_clean_fragment(buffer))
                buffer = []

    tail = _clean_fragment(buffer)
    if tail:
        documents.append(tail)
    return documents


def _clean_fragment(buffer: list[str]) -> str:
    """Drop separators (whitespace, commas) around a document."""
    return "".join(buffer).strip().strip(",").strip()
