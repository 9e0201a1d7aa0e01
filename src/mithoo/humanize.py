"""Client for the external text humanizer service."""

import logging
from typing import Any, Dict, Optional

import httpx

from .errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

MODES = ("subtle", "balanced", "strong", "stealth")
DEFAULT_MODE = "balanced"

# Keys the service has used for the rewritten text.
TEXT_KEYS = ("humanizedText", "humanized_text", "text", "result")


class Humanizer:
    """Rewrites AI-sounding text through the humanizer API.

    Parameters
    ----------
    api_key : str
        Bearer token for the service.
    url : str
        Endpoint accepting ``{"text", "mode"}``.
    client : httpx.Client, optional
        Reused for every request; a default client is created when omitted.
    """

    def __init__(self, api_key: Optional[str], url: str, client: Optional[httpx.Client] = None):
        self.api_key = api_key
        self.url = url
        self.client = client or httpx.Client()

    def humanize(self, text: str, mode: str = DEFAULT_MODE) -> Dict[str, Any]:
        if not isinstance(text, str) or not text.strip():
            raise ValueError("'text' is required")
        if mode not in MODES:
            raise ValueError(f"Unknown mode {mode!r}; expected one of {', '.join(MODES)}")
        if not self.api_key:
            logger.error("HUMANIZER_API_KEY secret is missing")
            raise ConfigurationError("Server misconfiguration: HUMANIZER_API_KEY is not set.")

        try:
            response = self.client.post(
                self.url,
                json={"text": text, "mode": mode},
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.HTTPError as exc:
            logger.error("Upstream humanizer error: %s", exc)
            raise UpstreamError("Failed to humanize text") from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.is_error:
            message = body.get("error") if isinstance(body, dict) else None
            logger.error("Humanizer returned %s: %s", response.status_code, message)
            raise UpstreamError(
                f"Humanizer error: {message or response.reason_phrase}",
                upstream_status=response.status_code,
            )
        return body

    def humanize_text(self, text: str, mode: str = DEFAULT_MODE) -> str:
        """Like ``humanize`` but returns only the rewritten text."""
        body = self.humanize(text, mode)
        if isinstance(body, dict):
            for key in TEXT_KEYS:
                value = body.get(key)
                if isinstance(value, str) and value.strip():
                    return value
        logger.error("Humanizer response has no text: %r", body)
        raise UpstreamError("Humanizer returned no text")
