import json
import re

from app.exceptions import IncompleteJsonError, NoJsonFoundError

"""
Text helpers for pulling a JSON object out of raw generator output.
Pure string transforms: they never rewrite anything inside the payload.
"""

# Opening fence with an optional language tag (```json, ```JSON, ```)
_LEADING_FENCE = re.compile(r"^\s*```[A-Za-z0-9_+-]*[ \t]*(?:\r?\n)?")
_TRAILING_FENCE = re.compile(r"(?:\r?\n)?[ \t]*```\s*$")


def strip_code_fences(text: str) -> str:
    # Peel fence pairs until none are left (models sometimes double-fence)
    while True:
        stripped = _LEADING_FENCE.sub("", text, count=1)
        stripped = _TRAILING_FENCE.sub("", stripped, count=1).strip()
        if stripped == text:
            return stripped
        text = stripped


def looks_truncated(text: str) -> bool:
    return not text.rstrip().endswith("}")


def extract_json_window(text: str) -> str:
    """
    Brace-window extraction: first '{' through last '}' inclusive.
    Tolerates commentary before or after the object.
    """
    start_idx = text.find("{")
    end_idx = text.rfind("}")
    if start_idx == -1 or end_idx == -1 or end_idx < start_idx:
        raise NoJsonFoundError("No JSON object found in AI response")
    return text[start_idx:end_idx + 1]


def is_incomplete_json_error(error: json.JSONDecodeError) -> bool:
    """
    True when the decoder ran out of input mid-structure (the Python
    counterpart of "Unexpected end of JSON input"), as opposed to hitting
    a bad token somewhere inside the document.
    """
    if error.msg.startswith("Unterminated string"):
        return True
    return error.pos >= len(error.doc.rstrip())


def reject_non_finite(token: str):
    """
    ``parse_constant`` hook for json.loads: Infinity, -Infinity and NaN are
    not JSON, so a response using them is treated as malformed.
    """
    raise IncompleteJsonError(f"AI returned non-standard JSON constant: {token}")
