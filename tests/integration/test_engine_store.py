"""Chat turns persisted through the on-disk stores."""

from types import SimpleNamespace

import pytest
from mithoo.config import Settings
from mithoo.engine import Synchronous
from mithoo.errors import NoUserTurn
from mithoo.llm import Echo
from mithoo.models import ASSISTANT_ROLE, USER_ROLE, Conversation, Turn
from mithoo.store import File, SQLite


@pytest.fixture(params=["file", "sqlite"])
def open_store(request, temp_dir):
    if request.param == "file":
        return lambda: File(str(temp_dir / "conversations"))
    return lambda: SQLite(str(temp_dir / "mithoo.db"))


@pytest.fixture
def app(open_store):
    app = SimpleNamespace(llm=Echo(), store=open_store(), settings=Settings())
    app.engine = Synchronous(app)
    return app


def test_conversation_survives_reopening_the_store(app, open_store):
    first = app.engine.handle_message("Hello", "writer")
    app.engine.handle_message("Still there?", "writer", first.conversation_id)

    stored = open_store().load_conversation("writer", first.conversation_id)

    assert [t.role for t in stored.turns] == [USER_ROLE, ASSISTANT_ROLE] * 2
    assert stored.turns[2].content == "Still there?"
    assert stored.metadata["user_id"] == "writer"
    assert "updated_at" in stored.metadata


def test_ids_increase_per_user(app):
    ids = [app.engine.handle_message("Hi", "writer").conversation_id for _ in range(3)]
    assert ids == ["001", "002", "003"]
    assert app.engine.handle_message("Hi", "editor").conversation_id == "001"


def test_stored_history_is_normalized_on_next_turn(app):
    app.store.save_conversation(
        "writer",
        Conversation(
            id="001",
            turns=[
                Turn(role=ASSISTANT_ROLE, content="Welcome!"),
                Turn(role=USER_ROLE, content="one"),
                Turn(role=USER_ROLE, content="  "),
                Turn(role=USER_ROLE, content="two"),
            ],
        ),
    )

    result = app.engine.handle_message("three", "writer", "001")

    stored = app.store.load_conversation("writer", "001")
    assert len(stored.turns) == 2
    assert stored.turns[0] == Turn(role=USER_ROLE, content="one\n\ntwo\n\nthree")
    assert stored.turns[1].content == result.reply.content


def test_blank_first_message_is_rejected(app):
    with pytest.raises(NoUserTurn):
        app.engine.handle_message("   ", "writer")
