"""Tell structured edit replies apart from plain chat replies.

The model is asked to answer document changes with a JSON object holding
``explanation`` and ``newContent``. It sometimes fences that object, sometimes
emits it bare inside prose, and ignores the format entirely for conversational
turns. The parser tries each shape in order and never raises.
"""

import json
import re
from typing import Any, Dict, Optional, Tuple, Union

from .models import ChatReply, EditPayload, EditReply

JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)


def _load_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(text)
    except ValueError:
        return None
    return value if isinstance(value, dict) else None


def _fenced_object(raw: str) -> Optional[Dict[str, Any]]:
    match = JSON_FENCE.search(raw)
    if not match:
        return None
    return _load_object(match.group(1))


def _braced_object(raw: str) -> Optional[Dict[str, Any]]:
    text = raw.strip()
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return _load_object(text[start : end + 1])


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def parse_edit_payload(raw: str) -> Optional[EditPayload]:
    """Extract an edit instruction from raw model output.

    The fenced ``json`` block is tried first; the outermost braces of the
    trimmed text only when no fenced object could be parsed.

    Returns
    -------
    Optional[EditPayload]
        The payload when the parsed object carries non-empty ``explanation``
        and ``newContent`` strings, otherwise ``None``.
    """
    if not raw:
        return None
    parsed = _fenced_object(raw)
    if parsed is None:
        parsed = _braced_object(raw)
    if parsed is None:
        return None

    explanation = parsed.get("explanation")
    new_content = parsed.get("newContent")
    if not (_non_empty_str(explanation) and _non_empty_str(new_content)):
        return None
    return EditPayload(explanation=explanation, new_content=new_content)


def classify(raw: str) -> Tuple[Union[EditReply, ChatReply], str]:
    """Classify raw model output.

    Returns the structured reply and the text to store as the assistant turn:
    the explanation for an edit (the new document is not kept in history),
    the raw text for a chat reply.
    """
    payload = parse_edit_payload(raw)
    if payload is None:
        return ChatReply(content=raw), raw
    reply = EditReply(explanation=payload.explanation, new_content=payload.new_content)
    return reply, payload.explanation
