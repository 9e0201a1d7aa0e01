"""Exceptions raised by the Mithoo chat-turn pipeline.

Each exception carries the HTTP-equivalent status code the caller should
surface. Soft failures (blocked responses, malformed edits) are not
exceptions; see ``mithoo.llm`` and ``mithoo.classify``.
"""


class MithooError(Exception):
    """Base class for all fatal pipeline errors."""

    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class NoUserTurn(MithooError):
    """The conversation contains no user turn to answer."""

    status_code = 400


class StoreUnavailable(MithooError):
    """The conversation store could not be reached."""

    status_code = 503


class UpstreamError(MithooError):
    """The generative-model service returned an error."""

    status_code = 502

    def __init__(self, message: str = "", upstream_status=None):
        super().__init__(message)
        self.upstream_status = upstream_status


class ConfigurationError(MithooError):
    """A required API key or setting is missing."""

    status_code = 500


class InvalidIdentifier(MithooError):
    """A user or conversation id is not a safe storage key."""

    status_code = 400
