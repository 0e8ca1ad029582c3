import json
import re
from typing import Any

_FENCE_OPEN = re.compile(r"^```[a-zA-Z0-9]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")


def _unfence(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text))
    return text.strip()


def extract_json(text: str) -> Any:
    """
    Parse the first JSON object/array in model output.
    Tolerates code fences, leading chatter and trailing garbage after the last brace.
    """
    body = _unfence(text or "")
    starts = [i for i in (body.find("{"), body.find("[")) if i != -1]
    if not starts:
        raise ValueError("No JSON object/array found in text")
    body = body[min(starts):]
    try:
        return json.loads(body)
    except json.JSONDecodeError:
        end = max(body.rfind("}"), body.rfind("]"))
        if end == -1:
            raise
        return json.loads(body[: end + 1])


def parse_tool_arguments(raw: Any) -> dict:
    """Tool-call arguments arrive as a JSON string (sometimes fenced or padded); always return a dict."""
    if isinstance(raw, dict):
        return raw
    if not raw:
        return {}
    try:
        parsed = extract_json(str(raw))
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}
