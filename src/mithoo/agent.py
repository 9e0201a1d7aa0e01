"""Plan-then-execute agent runs."""

import json
import logging
import re
from typing import List, Optional

from .llm import LLM
from .models import USER_ROLE, AgentRun, Turn
from .prompts import EXECUTE_PROMPT, PLAN_PROMPT, numbered

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```json\n?|```")
_BULLET = re.compile(r"^- ?")


def parse_plan(text: str) -> List[str]:
    """Read a plan from model output.

    The model is asked for a JSON array of strings; when it answers with
    anything else the text is split into lines, bullets stripped.
    """
    try:
        plan = json.loads(_FENCE.sub("", text).strip())
    except ValueError as exc:
        logger.warning("Failed to parse plan JSON, falling back to text splitting: %s", exc)
        plan = None
    if isinstance(plan, list):
        return [str(step).strip() for step in plan if str(step).strip()]
    lines = (_BULLET.sub("", line).strip() for line in text.splitlines())
    return [line for line in lines if line]


def _ask(llm: LLM, prompt: str, api_key: Optional[str]) -> str:
    response = llm.generate_response(
        [Turn(role=USER_ROLE, content=prompt)], api_key=api_key
    )
    return llm.extract_content(response)


def run_agent(llm: LLM, prompt: str, api_key: Optional[str] = None) -> AgentRun:
    """Plan the request in one call, then carry the plan out in a second."""
    if not prompt or not prompt.strip():
        raise ValueError("Prompt is required")
    plan = parse_plan(_ask(llm, PLAN_PROMPT.format(prompt=prompt), api_key))
    final_result = _ask(
        llm, EXECUTE_PROMPT.format(prompt=prompt, steps=numbered(plan)), api_key
    )
    return AgentRun(prompt=prompt, plan=plan, final_result=final_result)
