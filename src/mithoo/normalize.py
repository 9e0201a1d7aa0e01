"""Reconcile a conversation history into a shape the model will accept.

Gemini rejects histories with two consecutive turns of the same role, or
histories that do not open with a user turn. ``normalize`` turns whatever the
store holds (plus the new user turn) into a strictly alternating sequence.
"""

from typing import Iterable, List

from .errors import NoUserTurn
from .models import USER_ROLE, Turn

TURN_SEPARATOR = "\n\n"


def drop_blank(turns: Iterable[Turn]) -> List[Turn]:
    return [turn for turn in turns if turn.content and turn.content.strip()]


def consolidate(turns: Iterable[Turn]) -> List[Turn]:
    """Merge every run of same-role turns into one turn, keeping order."""
    merged: List[Turn] = []
    for turn in turns:
        if merged and merged[-1].role == turn.role:
            previous = merged.pop()
            turn = Turn(
                role=turn.role,
                content=previous.content + TURN_SEPARATOR + turn.content,
            )
        merged.append(turn)
    return merged


def trim_leading_assistant(turns: List[Turn]) -> List[Turn]:
    """Discard everything before the first user turn.

    Raises
    ------
    NoUserTurn
        If the sequence holds no user turn at all.
    """
    for index, turn in enumerate(turns):
        if turn.role == USER_ROLE:
            return turns[index:]
    raise NoUserTurn("Cannot build a request without at least one user message.")


def enforce_alternation(turns: List[Turn]) -> List[Turn]:
    kept: List[Turn] = []
    for turn in turns:
        if not kept or turn.role != kept[-1].role:
            kept.append(turn)
    return kept


def normalize(turns: Iterable[Turn]) -> List[Turn]:
    """Return ``turns`` as a non-empty, user-first, strictly alternating list.

    Parameters
    ----------
    turns : Iterable[Turn]
        Stored history followed by the new user turn.

    Returns
    -------
    List[Turn]
        The normalized sequence. Applying ``normalize`` to its own output
        returns it unchanged.
    """
    consolidated = consolidate(drop_blank(turns))
    return enforce_alternation(trim_leading_assistant(consolidated))
