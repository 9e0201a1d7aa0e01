"""Concrete implementations for LLM providers."""

import logging
import os
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence

import httpx

from .config import DEFAULT_MODEL
from .errors import ConfigurationError, UpstreamError
from .models import ASSISTANT_ROLE, USER_ROLE, Turn

logger = logging.getLogger(__name__)

Sink = Callable[[str], None]

BLOCKED_REPLY = (
    "I am unable to provide a response. Reason: {reason}. "
    "Please try rephrasing your request."
)
EMPTY_REPLY = "I apologize, but I encountered an error generating a response."
DEFAULT_BLOCK_REASON = "Content policy"

CHAT_GENERATION_CONFIG = {
    "temperature": 0.7,
    "top_k": 40,
    "top_p": 0.95,
    "max_output_tokens": 2048,
}


class LLM(ABC):
    """Abstract Base Class for all LLM providers."""

    @abstractmethod
    def generate_response(
        self,
        turns: Sequence[Turn],
        system_prompt: str = "",
        research: bool = False,
        sink: Optional[Sink] = None,
        api_key: Optional[str] = None,
        **kwargs: Any,
    ) -> Any:
        """Sends one request to the provider and returns its native response.

        Parameters
        ----------
        turns : Sequence[Turn]
            A normalized, user-first, alternating turn sequence.
        system_prompt : str
            Persona plus any document and style context.
        research : bool
            Let the model ground its answer in live web search.
        sink : Callable[[str], None], optional
            When given, the response is streamed and every text chunk is
            passed to the sink as it arrives. When omitted the response is
            buffered.
        api_key : str, optional
            Overrides the provider's default key for this call only.
        **kwargs : Any
            Provider-specific generation settings.

        Returns
        -------
        Any
            The provider's native response object (or the list of streamed
            chunks when ``sink`` is given).

        Raises
        ------
        UpstreamError
            If the provider rejects the request.
        """
        pass

    @abstractmethod
    def extract_content(self, response: Any) -> str:
        """Extracts the text content from the provider's native response.

        A response with no candidates yields an apology naming the block
        reason instead of raising.
        """
        pass

    def block_reason(self, response: Any) -> Optional[str]:
        """Why the provider returned no candidates, or ``None`` if it did."""
        return None


class Gemini(LLM):
    """Google Gemini through the ``google-genai`` SDK."""

    def __init__(
        self,
        default_model: str = DEFAULT_MODEL,
        api_key: Optional[str] = None,
        client: Any = None,
    ):
        from google import genai

        self._genai = genai
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY")
        self.client = client
        self.model = default_model
        self._user_clients: Dict[str, Any] = {}

    def _get_client(self, api_key: Optional[str] = None) -> Any:
        if api_key and api_key != self.api_key:
            if api_key not in self._user_clients:
                self._user_clients[api_key] = self._genai.Client(api_key=api_key)
            return self._user_clients[api_key]
        if self.client is None:
            if not self.api_key:
                raise ConfigurationError("GEMINI_API_KEY is not set.")
            self.client = self._genai.Client(api_key=self.api_key)
        return self.client

    def format_contents(self, turns: Sequence[Turn]) -> List[Any]:
        from google.genai import types

        return [
            types.Content(
                role="model" if turn.role == ASSISTANT_ROLE else USER_ROLE,
                parts=[types.Part(text=turn.content)],
            )
            for turn in turns
        ]

    def build_config(
        self, system_prompt: str = "", research: bool = False, **overrides: Any
    ) -> Any:
        from google.genai import types

        settings: Dict[str, Any] = dict(CHAT_GENERATION_CONFIG)
        settings.update(overrides)
        if system_prompt:
            settings["system_instruction"] = system_prompt
        if research:
            settings["tools"] = [types.Tool(google_search=types.GoogleSearch())]
        return types.GenerateContentConfig(**settings)

    def generate_response(
        self,
        turns,
        system_prompt="",
        research=False,
        sink=None,
        api_key=None,
        model=None,
        **kwargs,
    ):
        from google.genai import errors

        client = self._get_client(api_key)
        request = {
            "model": model or self.model,
            "contents": self.format_contents(turns),
            "config": self.build_config(system_prompt, research, **kwargs),
        }
        try:
            if sink is None:
                return client.models.generate_content(**request)
            chunks = []
            for chunk in client.models.generate_content_stream(**request):
                chunks.append(chunk)
                text = _candidate_text(chunk)
                if text:
                    sink(text)
            return chunks
        except errors.APIError as exc:
            message = exc.message or "Unknown error"
            logger.error("Gemini API Error: %s", message)
            raise UpstreamError(
                f"Gemini API Error: {message}", upstream_status=exc.code
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Gemini request failed: %s", exc)
            raise UpstreamError(f"Gemini request failed: {exc}") from exc

    def block_reason(self, response: Any) -> Optional[str]:
        responses = response if isinstance(response, list) else [response]
        if any(getattr(item, "candidates", None) for item in responses):
            return None
        for item in responses:
            feedback = getattr(item, "prompt_feedback", None)
            reason = getattr(feedback, "block_reason", None)
            if reason:
                return str(getattr(reason, "value", reason))
        return DEFAULT_BLOCK_REASON

    def extract_content(self, response: Any) -> str:
        reason = self.block_reason(response)
        if reason:
            logger.warning("Gemini response blocked: %s", reason)
            return BLOCKED_REPLY.format(reason=reason)
        responses = response if isinstance(response, list) else [response]
        text = "".join(_candidate_text(item) for item in responses)
        return text or EMPTY_REPLY


def _candidate_text(response: Any) -> str:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ""
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    return "".join(part.text for part in parts if getattr(part, "text", None))


class Echo(LLM):
    """Offline LLM that repeats the last user turn; for tests and demos."""

    def __init__(self, default_model: str = "echo-v1", delay: float = 0.0):
        self.model = default_model
        self.delay = delay

    def generate_response(
        self,
        turns,
        system_prompt="",
        research=False,
        sink=None,
        api_key=None,
        **kwargs,
    ):
        if self.delay:
            time.sleep(self.delay)
        user_prompt = next(
            (turn.content for turn in reversed(turns) if turn.role == USER_ROLE),
            "No message provided",
        )
        content = f"**Echo LLM - static response for testing**\n\n_Your prompt:_\n\n{user_prompt}"
        if sink is not None:
            sink(content)
        return {"content": content, "research": research}

    def extract_content(self, response: Any) -> str:
        if isinstance(response, dict) and "content" in response:
            return response["content"]
        return str(response)
