"""
The main entrypoint for the Mithoo package.

This module contains the Mithoo Dash application, which wires the pillars
(LLM, store, auth, engine, layout) together. The chat-turn pipeline itself
lives in ``mithoo.engine`` and can be used without the UI, as can the
whole-article helpers re-exported here (research, drafting, agent runs and
humanizing).
"""

from typing import Optional

from dash import Dash

from . import auth, engine, llm, store
from .agent import run_agent
from .articles import generate_article, improve_article
from .config import Settings
from .humanize import Humanizer
from .layout import REQUIRED_IDS, Layout, Minimal, collect_ids
from .models import UserPreferences
from .research import research_topic

__all__ = [
    "Humanizer",
    "Mithoo",
    "Settings",
    "UserPreferences",
    "generate_article",
    "improve_article",
    "research_topic",
    "run_agent",
]


class Mithoo(Dash):
    """
    The Mithoo writing assistant: an article pane beside an AI chat.

    The constructor uses concrete default implementations for every pillar,
    so ``Mithoo()`` runs out of the box; each pillar can be replaced.
    """

    def __init__(
        self,
        layout: Optional[Layout] = None,
        llm: Optional[llm.LLM] = None,
        store: Optional[store.Store] = None,
        auth: Optional[auth.Auth] = None,
        engine: Optional[engine.Engine] = None,
        settings: Optional[Settings] = None,
        preferences: Optional[UserPreferences] = None,
        humanizer: Optional[Humanizer] = None,
        **kwargs,
    ) -> None:
        """
        Initialize the application with configurable pillars.

        Parameters
        ----------
        layout : Layout, optional
            Layout builder for the Dash component tree. Defaults to
            ``layout.Minimal()``.
        llm : llm.LLM, optional
            Dispatcher for the generative model. Defaults to ``llm.Gemini()``,
            or ``llm.Echo()`` with a warning when ``google-genai`` is missing.
        store : store.Store, optional
            Conversation persistence. Defaults to ``store.File`` when
            ``settings.data_dir`` is set, otherwise ``store.InMemory()``.
        auth : auth.Auth, optional
            Identifies the conversation owner. Defaults to
            ``auth.SingleUser(settings.user_id)``.
        engine : engine.Engine, optional
            Runs each chat turn. Defaults to ``engine.Synchronous()``; the
            engine is bound to this app.
        settings : Settings, optional
            Defaults to ``Settings.from_env()``.
        preferences : UserPreferences, optional
            The current user's custom key and writing-style sample.
        humanizer : Humanizer, optional
            Client for the Humanize action. Defaults to one built from
            ``settings.humanizer_api_key`` and ``settings.humanizer_url``.
        **kwargs
            Additional arguments passed to the Dash constructor.

        Raises
        ------
        ValueError
            If the layout is missing component IDs the callbacks need.

        Examples
        --------
        >>> app = Mithoo(llm=llm.Echo())
        >>> app.run(debug=True)  # doctest: +SKIP
        """
        llm_module = globals()["llm"]
        store_module = globals()["store"]
        auth_module = globals()["auth"]
        engine_module = globals()["engine"]

        self.settings = settings if settings is not None else Settings.from_env()
        self.preferences = preferences
        self.layout_builder = layout if layout is not None else Minimal()
        self.humanizer = (
            humanizer
            if humanizer is not None
            else Humanizer(self.settings.humanizer_api_key, self.settings.humanizer_url)
        )

        if llm is not None:
            self.llm = llm
        else:
            try:
                self.llm = llm_module.Gemini(
                    default_model=self.settings.model,
                    api_key=self.settings.gemini_api_key,
                )
            except ImportError:
                import warnings

                warnings.warn(
                    "Mithoo is running with the Echo LLM because the 'google-genai' "
                    "package is not installed. Install it with: pip install google-genai",
                    UserWarning,
                )
                self.llm = llm_module.Echo()

        if "external_stylesheets" not in kwargs:
            kwargs["external_stylesheets"] = []
        kwargs["external_stylesheets"].extend(
            self.layout_builder.get_external_stylesheets()
        )
        if "external_scripts" not in kwargs:
            kwargs["external_scripts"] = []
        kwargs["external_scripts"].extend(self.layout_builder.get_external_scripts())

        super().__init__(**kwargs)

        if store is not None:
            self.store = store
        elif self.settings.data_dir:
            self.store = store_module.File(self.settings.data_dir)
        else:
            self.store = store_module.InMemory()
        self.auth = (
            auth if auth is not None else auth_module.SingleUser(self.settings.user_id)
        )
        self.engine = engine if engine is not None else engine_module.Synchronous()
        self.engine.app = self

        self.layout = self.layout_builder.build_layout()
        self._validate_layout()
        self._register_callbacks()

    def _validate_layout(self) -> None:
        missing = REQUIRED_IDS - collect_ids(self.layout)
        if missing:
            raise ValueError(
                f"Layout is missing required component IDs: {', '.join(sorted(missing))}"
            )

    def _register_callbacks(self) -> None:
        """Registers all the callbacks that orchestrate the pillars."""
        from .callbacks import register_callbacks

        register_callbacks(self)
