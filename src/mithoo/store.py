"""Concrete implementations for conversation stores.

Every store follows the same contract: read the full turn list, append in
memory, write the full list back. Writes are last-writer-wins; two turns on
the same conversation at once are not coordinated.
"""

import json
import logging
import re
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

from .errors import InvalidIdentifier, StoreUnavailable
from .models import Conversation, Turn

logger = logging.getLogger(__name__)


class Store(ABC):
    """Interface for saving and loading conversation data."""

    @abstractmethod
    def load_conversation(self, user_id: str, convo_id: str) -> Optional[Conversation]:
        """Loads a single conversation, or ``None`` if it does not exist."""
        pass

    @abstractmethod
    def save_conversation(self, user_id: str, conversation: Conversation):
        """Writes the whole conversation, replacing any stored version."""
        pass

    @abstractmethod
    def list_conversations(self, user_id: str) -> List[str]:
        """Lists all conversation IDs for a given user."""
        pass

    @abstractmethod
    def get_next_conversation_id(self, user_id: str) -> str:
        """Generates a new, unique conversation ID for a user."""
        pass


def _next_id(existing: List[str]) -> str:
    numbers = [int(convo_id) for convo_id in existing if convo_id.isdigit()]
    return f"{max(numbers, default=0) + 1:03d}"


# Ids become path segments in the File store.
_SAFE_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.@-]*$")


def _safe_segment(value: str) -> str:
    if not isinstance(value, str) or not _SAFE_ID.match(value):
        raise InvalidIdentifier(f"Invalid identifier: {value!r}")
    return value


class InMemory(Store):
    """Saves and loads conversations from an in-memory dictionary."""

    def __init__(self):
        self._store: Dict[Tuple[str, str], Conversation] = {}

    def load_conversation(self, user_id, convo_id):
        conversation = self._store.get((user_id, convo_id))
        return conversation.model_copy(deep=True) if conversation else None

    def save_conversation(self, user_id, conversation):
        self._store[(user_id, conversation.id)] = conversation.model_copy(deep=True)

    def list_conversations(self, user_id):
        return [convo_id for owner, convo_id in self._store if owner == user_id]

    def get_next_conversation_id(self, user_id):
        return _next_id(self.list_conversations(user_id))


class File(Store):
    """Saves and loads conversations from the local file system as JSON.

    Layout: ``<base_dir>/<user_id>/<convo_id>/messages.json`` with the turns
    and ``metadata.json`` beside it.
    """

    def __init__(self, base_dir: str):
        self.base_dir = Path(base_dir)
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreUnavailable(f"Cannot create store directory: {exc}") from exc

    def _user_dir(self, user_id: str) -> Path:
        return self.base_dir / _safe_segment(user_id)

    def _convo_dir(self, user_id: str, convo_id: str) -> Path:
        return self._user_dir(user_id) / _safe_segment(convo_id)

    def _children(self, user_id: str) -> List[Path]:
        user_dir = self._user_dir(user_id)
        if not user_dir.is_dir():
            return []
        try:
            return list(user_dir.iterdir())
        except OSError as exc:
            logger.error("Failed to list conversations for %s: %s", user_id, exc)
            raise StoreUnavailable(f"Cannot list conversations for {user_id}") from exc

    def load_conversation(self, user_id, convo_id):
        convo_dir = self._convo_dir(user_id, convo_id)
        messages_file = convo_dir / "messages.json"
        if not messages_file.exists():
            return None
        try:
            turns = json.loads(messages_file.read_text(encoding="utf-8"))
            metadata_file = convo_dir / "metadata.json"
            metadata = (
                json.loads(metadata_file.read_text(encoding="utf-8"))
                if metadata_file.exists()
                else {}
            )
            return Conversation(
                id=convo_id,
                turns=[Turn(**turn) for turn in turns],
                metadata=metadata,
            )
        except (OSError, ValueError, TypeError, ValidationError) as exc:
            logger.error("Failed to read conversation %s/%s: %s", user_id, convo_id, exc)
            raise StoreUnavailable(f"Cannot read conversation {convo_id}") from exc

    def save_conversation(self, user_id, conversation):
        convo_dir = self._convo_dir(user_id, conversation.id)
        try:
            convo_dir.mkdir(parents=True, exist_ok=True)
            (convo_dir / "messages.json").write_text(
                json.dumps([turn.model_dump() for turn in conversation.turns], indent=2),
                encoding="utf-8",
            )
            (convo_dir / "metadata.json").write_text(
                json.dumps(conversation.metadata, indent=2, default=str),
                encoding="utf-8",
            )
        except OSError as exc:
            logger.error("Failed to write conversation %s/%s: %s", user_id, conversation.id, exc)
            raise StoreUnavailable(f"Cannot write conversation {conversation.id}") from exc

    def list_conversations(self, user_id):
        return sorted(
            path.name for path in self._children(user_id) if (path / "messages.json").exists()
        )

    def get_next_conversation_id(self, user_id):
        return _next_id([path.name for path in self._children(user_id)])


class SQLite(Store):
    """Saves conversations in a single SQLite table, turns as a JSON column."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._execute(
            """
            CREATE TABLE IF NOT EXISTS conversations (
                user_id TEXT NOT NULL,
                convo_id TEXT NOT NULL,
                turns TEXT NOT NULL,
                metadata TEXT NOT NULL,
                PRIMARY KEY (user_id, convo_id)
            )
            """
        )

    def _connect(self) -> sqlite3.Connection:
        try:
            return sqlite3.connect(self.db_path)
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"Cannot open database {self.db_path}") from exc

    def _execute(self, sql: str, params: tuple = ()) -> List[tuple]:
        conn = self._connect()
        try:
            with conn:
                return conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            logger.error("SQLite store error: %s", exc)
            raise StoreUnavailable(str(exc)) from exc
        finally:
            conn.close()

    def load_conversation(self, user_id, convo_id):
        rows = self._execute(
            "SELECT turns, metadata FROM conversations WHERE user_id = ? AND convo_id = ?",
            (user_id, convo_id),
        )
        if not rows:
            return None
        turns, metadata = rows[0]
        try:
            return Conversation(
                id=convo_id,
                turns=[Turn(**turn) for turn in json.loads(turns)],
                metadata=json.loads(metadata),
            )
        except (ValueError, TypeError, ValidationError) as exc:
            logger.error("Corrupt conversation row %s/%s: %s", user_id, convo_id, exc)
            raise StoreUnavailable(f"Cannot read conversation {convo_id}") from exc

    def save_conversation(self, user_id, conversation):
        self._execute(
            "INSERT OR REPLACE INTO conversations (user_id, convo_id, turns, metadata) "
            "VALUES (?, ?, ?, ?)",
            (
                user_id,
                conversation.id,
                json.dumps([turn.model_dump() for turn in conversation.turns]),
                json.dumps(conversation.metadata, default=str),
            ),
        )

    def list_conversations(self, user_id):
        rows = self._execute(
            "SELECT convo_id FROM conversations WHERE user_id = ? ORDER BY convo_id",
            (user_id,),
        )
        return [row[0] for row in rows]

    def get_next_conversation_id(self, user_id):
        return _next_id(self.list_conversations(user_id))
