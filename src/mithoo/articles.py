"""Whole-article generation and improvement."""

from typing import Optional

from .llm import LLM
from .models import USER_ROLE, ArticleDraft, Turn
from .prompts import (
    ARTICLE_WRITER_PERSONA,
    GENERATE_ARTICLE_PROMPT,
    IMPROVE_ARTICLE_PROMPT,
)

NOT_GENERATED = "Article content could not be generated."


def word_count(text: str) -> int:
    return len(text.split())


def _draft(llm: LLM, prompt: str, action: str, api_key: Optional[str]) -> ArticleDraft:
    response = llm.generate_response(
        [Turn(role=USER_ROLE, content=prompt)],
        system_prompt=ARTICLE_WRITER_PERSONA,
        api_key=api_key,
        max_output_tokens=4096,
    )
    content = NOT_GENERATED if llm.block_reason(response) else llm.extract_content(response)
    content = content or NOT_GENERATED
    return ArticleDraft(content=content, word_count=word_count(content), action=action)


def generate_article(
    llm: LLM,
    title: str,
    outline: Optional[str] = None,
    research_data: Optional[str] = None,
    api_key: Optional[str] = None,
) -> ArticleDraft:
    """Write a complete markdown article for ``title``."""
    prompt = GENERATE_ARTICLE_PROMPT.format(
        title=title,
        outline=f"Follow this outline:\n{outline}\n\n" if outline else "",
        research=f"Use this research data:\n{research_data}\n\n" if research_data else "",
    )
    return _draft(llm, prompt, "generate", api_key)


def improve_article(
    llm: LLM, title: str, content: str, api_key: Optional[str] = None
) -> ArticleDraft:
    """Rewrite ``content`` for flow, clarity and structure."""
    prompt = IMPROVE_ARTICLE_PROMPT.format(title=title, content=content)
    return _draft(llm, prompt, "improve", api_key)
