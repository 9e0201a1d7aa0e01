"""The chat-turn pipeline: load, normalize, dispatch, classify, persist."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, List, Optional

from .classify import classify
from .config import resolve_api_key
from .errors import NoUserTurn
from .llm import Sink
from .models import (
    ASSISTANT_ROLE,
    USER_ROLE,
    Conversation,
    DocumentContext,
    Turn,
    TurnResult,
    UserPreferences,
)
from .normalize import normalize
from .prompts import build_system_prompt

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Engine(ABC):
    """Runs one chat turn against the app's pillars.

    The engine reads ``llm``, ``store`` and ``settings`` from ``app``. The app
    can be bound after construction.
    """

    def __init__(self, app: Any = None):
        self.app = app

    @abstractmethod
    def handle_message(
        self,
        user_input: str,
        user_id: str,
        convo_id: Optional[str] = None,
        *,
        document: Optional[DocumentContext] = None,
        research: bool = False,
        preferences: Optional[UserPreferences] = None,
        article_id: Optional[str] = None,
        sink: Optional[Sink] = None,
    ) -> TurnResult:
        pass


class Synchronous(Engine):
    """Handles a turn as sequential blocking steps, with no retries.

    A failure at any stage propagates to the caller and leaves the stored
    history as it was. Subclasses may override the ``_before_dispatch``,
    ``_after_dispatch`` and ``_before_save`` hooks.
    """

    def load_history(self, user_id: str, convo_id: Optional[str]) -> List[Turn]:
        """Stored turns for a conversation, or an empty list."""
        if not convo_id:
            return []
        conversation = self.app.store.load_conversation(user_id, convo_id)
        return list(conversation.turns) if conversation else []

    def handle_message(
        self,
        user_input,
        user_id,
        convo_id=None,
        *,
        document=None,
        research=False,
        preferences=None,
        article_id=None,
        sink=None,
    ):
        app = self.app
        if not user_input or not user_input.strip():
            raise NoUserTurn("Cannot send an empty message.")
        api_key = resolve_api_key(preferences, app.settings.gemini_api_key)

        conversation = self._load(user_id, convo_id, article_id)
        history = list(conversation.turns) if conversation else []
        turns = normalize(history + [Turn(role=USER_ROLE, content=user_input)])
        if conversation is None:
            conversation = self._create(user_id, article_id)
        self._before_dispatch(turns)

        system_prompt = build_system_prompt(
            document, preferences.style_sample if preferences else None
        )
        response = app.llm.generate_response(
            turns,
            system_prompt=system_prompt,
            research=research,
            sink=sink,
            api_key=api_key,
        )
        raw = app.llm.extract_content(response)
        self._after_dispatch(raw)

        reply, history_text = classify(raw)
        conversation.turns = turns + [Turn(role=ASSISTANT_ROLE, content=history_text)]
        conversation.metadata["updated_at"] = _now()
        self._before_save(conversation)
        app.store.save_conversation(user_id, conversation)

        logger.info(
            "Turn on conversation %s classified as %s", conversation.id, reply.type
        )
        return TurnResult(conversation_id=conversation.id, reply=reply)

    def _load(
        self, user_id: str, convo_id: Optional[str], article_id: Optional[str]
    ) -> Optional[Conversation]:
        """The stored conversation, an unsaved one for an unknown id, or ``None``."""
        if not convo_id:
            return None
        conversation = self.app.store.load_conversation(user_id, convo_id)
        if conversation is not None:
            return conversation
        return Conversation(id=convo_id, metadata=self._metadata(user_id, article_id))

    def _create(self, user_id: str, article_id: Optional[str]) -> Conversation:
        store = self.app.store
        conversation = Conversation(
            id=store.get_next_conversation_id(user_id),
            metadata=self._metadata(user_id, article_id),
        )
        store.save_conversation(user_id, conversation)
        logger.info("Created conversation %s for user %s", conversation.id, user_id)
        return conversation

    @staticmethod
    def _metadata(user_id: str, article_id: Optional[str]) -> dict:
        return {"user_id": user_id, "article_id": article_id, "created_at": _now()}

    def _before_dispatch(self, turns: List[Turn]) -> None:
        pass

    def _after_dispatch(self, raw: str) -> None:
        pass

    def _before_save(self, conversation: Conversation) -> None:
        pass
