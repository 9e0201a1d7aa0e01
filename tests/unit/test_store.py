"""
Tests for the Store pillar implementations.

The store holds the conversation history with three implementations:
InMemory, File, and SQLite. The shared contract is tested against all of
them, then each implementation's specifics.
"""

import json
import sqlite3
from pathlib import Path
from typing import Optional
from unittest.mock import patch

import pytest
from mithoo.errors import InvalidIdentifier, StoreUnavailable
from mithoo.models import Conversation, Turn
from mithoo.store import File, InMemory, SQLite, Store


@pytest.fixture(params=["InMemory", "File", "SQLite"])
def store(request, temp_dir):
    if request.param == "InMemory":
        return InMemory()
    if request.param == "File":
        return File(str(temp_dir / "file_store"))
    return SQLite(str(temp_dir / "test.db"))


class TestStoreInterface:
    def test_store_is_abstract(self):
        with pytest.raises(TypeError) as exc_info:
            Store()
        assert "abstract" in str(exc_info.value).lower()

    def test_store_requires_load(self):
        class IncompleteStore(Store):
            def save_conversation(self, user_id, conversation):
                pass

            def list_conversations(self, user_id):
                return []

            def get_next_conversation_id(self, user_id):
                return "001"

        with pytest.raises(TypeError) as exc_info:
            IncompleteStore()
        assert "load_conversation" in str(exc_info.value)

    def test_subclass_with_all_methods_works(self):
        class DictStore(Store):
            def __init__(self):
                self._data = {}

            def load_conversation(self, user_id, convo_id) -> Optional[Conversation]:
                return self._data.get((user_id, convo_id))

            def save_conversation(self, user_id, conversation):
                self._data[(user_id, conversation.id)] = conversation

            def list_conversations(self, user_id):
                return [c for u, c in self._data if u == user_id]

            def get_next_conversation_id(self, user_id):
                return "custom_001"

        store = DictStore()
        store.save_conversation("u", Conversation(id="a"))
        assert store.load_conversation("u", "a").id == "a"


class TestStoreContract:
    def test_initial_state(self, store):
        assert store.list_conversations("anyone") == []
        assert store.load_conversation("anyone", "missing") is None
        assert store.get_next_conversation_id("anyone") == "001"

    def test_save_and_load(self, store, sample_conversation):
        store.save_conversation("user1", sample_conversation)
        loaded = store.load_conversation("user1", "001")
        assert loaded is not None
        assert loaded.turns == sample_conversation.turns

    def test_metadata_persists(self, store):
        conversation = Conversation(
            id="001", metadata={"user_id": "user1", "article_id": "art-9"}
        )
        store.save_conversation("user1", conversation)
        assert store.load_conversation("user1", "001").metadata["article_id"] == "art-9"

    def test_save_replaces_whole_history(self, store, sample_conversation):
        store.save_conversation("user1", sample_conversation)
        shorter = Conversation(id="001", turns=sample_conversation.turns[:2])
        store.save_conversation("user1", shorter)
        assert len(store.load_conversation("user1", "001").turns) == 2

    def test_last_writer_wins(self, store):
        first = Conversation(id="001", turns=[Turn(role="user", content="first")])
        second = Conversation(id="001", turns=[Turn(role="user", content="second")])
        store.save_conversation("user1", first)
        store.save_conversation("user1", second)
        assert store.load_conversation("user1", "001").turns[0].content == "second"

    def test_user_isolation(self, store):
        store.save_conversation(
            "user1", Conversation(id="001", turns=[Turn(role="user", content="mine")])
        )
        store.save_conversation(
            "user2", Conversation(id="001", turns=[Turn(role="user", content="theirs")])
        )
        assert store.load_conversation("user1", "001").turns[0].content == "mine"
        assert store.load_conversation("user2", "001").turns[0].content == "theirs"
        assert store.list_conversations("user1") == ["001"]

    def test_next_id_increments(self, store):
        store.save_conversation("user1", Conversation(id=store.get_next_conversation_id("user1")))
        store.save_conversation("user1", Conversation(id=store.get_next_conversation_id("user1")))
        assert sorted(store.list_conversations("user1")) == ["001", "002"]
        assert store.get_next_conversation_id("user1") == "003"
        assert store.get_next_conversation_id("user2") == "001"

    def test_loaded_copy_is_detached(self, store, sample_conversation):
        store.save_conversation("user1", sample_conversation)
        loaded = store.load_conversation("user1", "001")
        loaded.turns.append(Turn(role="user", content="unsaved"))
        assert len(store.load_conversation("user1", "001").turns) == 4


class TestFile:
    def test_creates_base_directory(self, temp_dir):
        nested = temp_dir / "conversations" / "nested"
        store = File(str(nested))
        assert nested.is_dir()
        assert store.base_dir == nested

    def test_file_layout(self, temp_dir, sample_conversation):
        store = File(str(temp_dir))
        store.save_conversation("user1", sample_conversation)

        messages_file = temp_dir / "user1" / "001" / "messages.json"
        data = json.loads(messages_file.read_text())
        assert data[0] == {"role": "user", "content": "Hello, can you help with my article?"}
        assert (temp_dir / "user1" / "001" / "metadata.json").exists()

    def test_corrupt_file_is_store_unavailable(self, temp_dir):
        store = File(str(temp_dir))
        convo_dir = temp_dir / "user1" / "001"
        convo_dir.mkdir(parents=True)
        (convo_dir / "messages.json").write_text("{not json")

        with pytest.raises(StoreUnavailable):
            store.load_conversation("user1", "001")

    def test_write_failure_is_store_unavailable(self, temp_dir, sample_conversation):
        store = File(str(temp_dir))
        with patch.object(Path, "write_text", side_effect=OSError("disk full")):
            with pytest.raises(StoreUnavailable):
                store.save_conversation("user1", sample_conversation)

    @pytest.mark.parametrize("bad_id", ["../../escaped", "..", "a/b", "", ".hidden"])
    def test_conversation_id_cannot_leave_base_dir(self, temp_dir, bad_id):
        store = File(str(temp_dir / "data"))

        with pytest.raises(InvalidIdentifier):
            store.save_conversation("user1", Conversation(id=bad_id))
        with pytest.raises(InvalidIdentifier):
            store.load_conversation("user1", bad_id)
        assert not (temp_dir / "escaped").exists()

    def test_user_id_cannot_leave_base_dir(self, temp_dir):
        store = File(str(temp_dir / "data"))
        with pytest.raises(InvalidIdentifier):
            store.list_conversations("../other")

    def test_unreadable_user_dir_is_store_unavailable(self, temp_dir, sample_conversation):
        store = File(str(temp_dir))
        store.save_conversation("user1", sample_conversation)
        with patch.object(Path, "iterdir", side_effect=OSError("permission denied")):
            with pytest.raises(StoreUnavailable):
                store.get_next_conversation_id("user1")
            with pytest.raises(StoreUnavailable):
                store.list_conversations("user1")


class TestSQLite:
    def test_table_created(self, temp_dir):
        db_path = temp_dir / "test.db"
        SQLite(str(db_path))
        with sqlite3.connect(db_path) as conn:
            tables = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            ).fetchall()
        assert ("conversations",) in tables

    def test_unreachable_database(self, temp_dir):
        missing_dir = temp_dir / "does-not-exist" / "test.db"
        with pytest.raises(StoreUnavailable):
            SQLite(str(missing_dir))

    @pytest.mark.parametrize(
        "turns, metadata",
        [("not json", "{}"), ('[{"role": "narrator", "content": "x"}]', "{}"), ("[]", "{oops")],
    )
    def test_corrupt_row_is_store_unavailable(self, temp_dir, turns, metadata):
        db_path = temp_dir / "test.db"
        store = SQLite(str(db_path))
        with sqlite3.connect(db_path) as conn:
            conn.execute(
                "INSERT INTO conversations VALUES (?, ?, ?, ?)",
                ("user1", "001", turns, metadata),
            )
        conn.close()

        with pytest.raises(StoreUnavailable):
            store.load_conversation("user1", "001")
