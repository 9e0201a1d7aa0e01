"""Identify the writer who owns the conversations a request touches."""

from abc import ABC, abstractmethod

from .config import DEFAULT_USER_ID


class Auth(ABC):
    """Interface for mapping a request to the writer's user ID.

    The ID partitions the store, so every conversation a writer opens or
    creates is saved under it.
    """

    @abstractmethod
    def get_current_user_id(self, **kwargs) -> str:
        """Return the ID of the writer making the request."""
        pass


class SingleUser(Auth):
    """A single-author install: every request belongs to one writer.

    Parameters
    ----------
    user_id : str, default="writer"
        Usually ``Settings.user_id`` (``MITHOO_USER_ID``).

    Raises
    ------
    ValueError
        If ``user_id`` is blank.
    """

    def __init__(self, user_id: str = DEFAULT_USER_ID):
        user_id = str(user_id).strip()
        if not user_id:
            raise ValueError("user_id must not be blank")
        self._user_id = user_id

    def get_current_user_id(self, **kwargs) -> str:
        return self._user_id
