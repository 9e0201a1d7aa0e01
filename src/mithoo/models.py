"""
Defines the core Pydantic data models for the application.

These models serve as the validated data contract between the pillars: the
store persists ``Conversation`` objects, the LLM consumes ``Turn`` sequences
and the engine hands a ``TurnResult`` back to the UI.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# --- Constants ---
USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"
Role = Literal["user", "assistant"]


# --- Conversation ---
class Turn(BaseModel):
    """A single message within a conversation."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class Conversation(BaseModel):
    """An ordered, persisted sequence of turns tied to a user and article."""

    id: str
    turns: List[Turn] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class DocumentContext(BaseModel):
    """The article the user is working on, as seen by the assistant."""

    title: str = "Untitled"
    content: Optional[str] = None


class UserPreferences(BaseModel):
    """Per-user settings that change how a turn is dispatched."""

    custom_gemini_key: Optional[str] = None
    style_sample: Optional[str] = None


# --- Replies ---
class EditPayload(BaseModel):
    """The parsed body of an edit instruction."""

    model_config = ConfigDict(populate_by_name=True)

    explanation: str
    new_content: str = Field(alias="newContent")


class EditReply(BaseModel):
    """The model is replacing the working document."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["edit"] = "edit"
    explanation: str
    new_content: str = Field(alias="newContent")


class ChatReply(BaseModel):
    """Plain conversational text."""

    type: Literal["chat"] = "chat"
    content: str


StructuredReply = Annotated[Union[EditReply, ChatReply], Field(discriminator="type")]


class TurnResult(BaseModel):
    """What one chat turn hands back to the caller."""

    conversation_id: str
    reply: StructuredReply

    def to_payload(self) -> Dict[str, Any]:
        """Flatten into the camelCase shape the UI layer consumes."""
        payload = self.reply.model_dump(by_alias=True)
        payload["conversationId"] = self.conversation_id
        return payload


# --- Side operations ---
class ResearchResult(BaseModel):
    topic: str
    keywords: List[str] = Field(default_factory=list)
    data: str
    blocked: bool = False
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ArticleDraft(BaseModel):
    content: str
    word_count: int
    action: Literal["generate", "improve"] = "generate"


class AgentRun(BaseModel):
    prompt: str
    plan: List[str] = Field(default_factory=list)
    final_result: str
