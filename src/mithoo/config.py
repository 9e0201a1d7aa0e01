"""Environment-driven settings and API key resolution."""

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel

from .models import UserPreferences

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_HUMANIZER_URL = "https://ai-humanizer-sable.vercel.app/api/external/humanize"
DEFAULT_USER_ID = "writer"


class Settings(BaseModel):
    """Deployment settings, read once at start-up."""

    gemini_api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    humanizer_api_key: Optional[str] = None
    humanizer_url: str = DEFAULT_HUMANIZER_URL
    data_dir: Optional[str] = None
    user_id: str = DEFAULT_USER_ID
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables.

        Parameters
        ----------
        environ : Mapping[str, str], optional
            Defaults to ``os.environ``.
        """
        env = os.environ if environ is None else environ
        return cls(
            gemini_api_key=env.get("GEMINI_API_KEY") or None,
            model=env.get("MITHOO_MODEL") or DEFAULT_MODEL,
            humanizer_api_key=env.get("HUMANIZER_API_KEY") or None,
            humanizer_url=env.get("HUMANIZER_URL") or DEFAULT_HUMANIZER_URL,
            data_dir=env.get("MITHOO_DATA_DIR") or None,
            user_id=env.get("MITHOO_USER_ID") or DEFAULT_USER_ID,
            log_level=env.get("MITHOO_LOG_LEVEL") or "INFO",
        )


def resolve_api_key(
    preferences: Optional[UserPreferences], default_key: Optional[str]
) -> Optional[str]:
    """Pick the Gemini key for one invocation.

    A user's own key wins over the deployment default.
    """
    if preferences is not None and preferences.custom_gemini_key:
        logger.info("Using user custom API key")
        return preferences.custom_gemini_key
    return default_key


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
