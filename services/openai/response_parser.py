"""Helpers to parse Responses API outputs."""

import json
from typing import Any, Dict, Optional


def _field(obj: Any, name: str) -> Any:
    """Read `name` from an SDK object or a plain dict."""
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def parse_function_call(response: Any, *, tool_name: str) -> Dict[str, Any]:
    """Return the decoded arguments of the function call named `tool_name`.

    Raises:
        ValueError: If no such call exists or its arguments are not a JSON object.
    """
    for item in _field(response, "output") or []:
        if _field(item, "type") != "function_call" or _field(item, "name") != tool_name:
            continue
        raw = _field(item, "arguments") or ""
        try:
            args = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Arguments for '{tool_name}' are not valid JSON.") from exc
        if not isinstance(args, dict):
            raise ValueError(f"Arguments for '{tool_name}' must be a JSON object.")
        return args
    raise ValueError(f"No function_call output for '{tool_name}' found in Responses API output.")


def extract_text(response: Any) -> str:
    """Return the concatenated output text of a Responses API result."""
    text = _field(response, "output_text")
    if isinstance(text, str) and text:
        return text
    parts = []
    for item in _field(response, "output") or []:
        if _field(item, "type") != "message":
            continue
        for content in _field(item, "content") or []:
            if _field(content, "type") == "output_text":
                parts.append(_field(content, "text") or "")
    return "".join(parts)


def extract_usage(response: Any) -> Dict[str, Optional[int]]:
    """Return token usage information from the response, if present."""
    usage = _field(response, "usage")
    return {
        "input_tokens": _field(usage, "input_tokens") if usage else None,
        "output_tokens": _field(usage, "output_tokens") if usage else None,
    }
