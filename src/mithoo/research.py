"""Topic research grounded in live web search."""

import logging
from typing import Optional, Sequence

from .llm import LLM
from .models import USER_ROLE, ResearchResult, Turn
from .prompts import MITHOO_PERSONA, RESEARCH_PROMPT, style_block

logger = logging.getLogger(__name__)

RESEARCH_FAILED = (
    "Research failed. Reason: {reason}. Please try a different topic or keywords."
)


def research_topic(
    llm: LLM,
    topic: str,
    keywords: Optional[Sequence[str]] = None,
    api_key: Optional[str] = None,
    style_sample: Optional[str] = None,
) -> ResearchResult:
    """Ask the model to research ``topic`` with search grounding switched on.

    A blocked response is reported inside ``data`` rather than raised.
    """
    if not topic or not topic.strip():
        raise ValueError("'topic' is required")
    keywords = list(keywords or [])
    prompt = RESEARCH_PROMPT.format(
        topic=topic, keywords=", ".join(keywords) if keywords else "None provided"
    )
    response = llm.generate_response(
        [Turn(role=USER_ROLE, content=prompt)],
        system_prompt=MITHOO_PERSONA + style_block(style_sample),
        research=True,
        api_key=api_key,
        max_output_tokens=4096,
    )
    reason = llm.block_reason(response)
    if reason:
        logger.warning("Research on %r blocked: %s", topic, reason)
        return ResearchResult(
            topic=topic,
            keywords=keywords,
            data=RESEARCH_FAILED.format(reason=reason),
            blocked=True,
        )
    return ResearchResult(topic=topic, keywords=keywords, data=llm.extract_content(response))
