"""Dash callbacks wiring the UI to the engine and the article tools."""

import logging

from dash import Input, Output, State, callback_context, dcc, no_update

from .agent import run_agent
from .articles import NOT_GENERATED, generate_article, improve_article
from .config import resolve_api_key
from .errors import MithooError
from .humanize import DEFAULT_MODE
from .models import DocumentContext, EditReply
from .prompts import numbered
from .research import research_topic

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Sorry, I couldn't get a response. Please try again."


def submit_turn(app, user_input, convo_id, title, document, research):
    """Run one chat turn from the UI state.

    Returns the values for the messages list, the input box, the stored
    conversation id, the pending edit and the error banner.
    """
    if not user_input or not user_input.strip():
        return no_update, no_update, no_update, no_update, no_update

    user_id = app.auth.get_current_user_id()
    try:
        result = app.engine.handle_message(
            user_input.strip(),
            user_id,
            convo_id,
            document=DocumentContext(title=title or "Untitled", content=document or None),
            research="research" in (research or []),
            preferences=app.preferences,
        )
    except MithooError as exc:
        logger.warning("Chat turn failed (%s): %s", exc.status_code, exc.message)
        # Input is kept so the user can retry the same message.
        return no_update, no_update, no_update, no_update, GENERIC_FAILURE

    turns = app.engine.load_history(user_id, result.conversation_id)
    pending = result.to_payload() if isinstance(result.reply, EditReply) else None
    return (
        app.layout_builder.build_messages(turns),
        "",
        result.conversation_id,
        pending,
        "",
    )


def resolve_pending_edit(trigger, pending):
    """Apply or discard a staged edit; returns (document value, pending)."""
    if not pending:
        return no_update, None
    if trigger == "accept_edit_button":
        return pending["newContent"], None
    return no_update, None


def _api_key(app):
    return resolve_api_key(app.preferences, app.settings.gemini_api_key)


def _staged_edit(explanation, new_content):
    return EditReply(explanation=explanation, new_content=new_content).model_dump(by_alias=True)


def split_keywords(keywords):
    return [word.strip() for word in (keywords or "").split(",") if word.strip()]


def run_research(app, title, keywords):
    """Research the article title; returns (research data, notes, error)."""
    topic = (title or "").strip()
    if not topic:
        return no_update, no_update, "Give the article a title to research it."
    try:
        result = research_topic(
            app.llm,
            topic,
            split_keywords(keywords),
            api_key=_api_key(app),
            style_sample=app.preferences.style_sample if app.preferences else None,
        )
    except MithooError as exc:
        logger.warning("Research failed (%s): %s", exc.status_code, exc.message)
        return no_update, no_update, GENERIC_FAILURE
    notes = dcc.Markdown(result.data)
    if result.blocked:
        return None, notes, ""
    return result.data, notes, ""


def draft_article(app, trigger, title, document, research_data):
    """Generate or improve the whole article as a pending edit.

    Returns the pending edit and the error banner text.
    """
    title = (title or "").strip()
    try:
        if trigger == "improve_article_button":
            if not document or not document.strip():
                return no_update, "Write something first, then ask Mithoo to improve it."
            draft = improve_article(app.llm, title or "Untitled", document, api_key=_api_key(app))
        else:
            if not title:
                return no_update, "Give the article a title to generate it."
            draft = generate_article(
                app.llm, title, research_data=research_data or None, api_key=_api_key(app)
            )
    except MithooError as exc:
        logger.warning("Article %s failed (%s): %s", trigger, exc.status_code, exc.message)
        return no_update, GENERIC_FAILURE
    if draft.content == NOT_GENERATED:
        return no_update, NOT_GENERATED
    verb = "Improved" if draft.action == "improve" else "Generated"
    return _staged_edit(f"{verb} the article ({draft.word_count} words).", draft.content), ""


def humanize_document(app, document, mode):
    """Rewrite the article through the humanizer as a pending edit."""
    if not document or not document.strip():
        return no_update, "Nothing to humanize yet."
    try:
        text = app.humanizer.humanize_text(document, mode or DEFAULT_MODE)
    except MithooError as exc:
        logger.warning("Humanize failed (%s): %s", exc.status_code, exc.message)
        return no_update, GENERIC_FAILURE
    return _staged_edit(f"Humanized the article ({mode or DEFAULT_MODE} mode).", text), ""


def run_agent_request(app, user_input):
    """Plan and carry out the typed request; returns (notes, error)."""
    if not user_input or not user_input.strip():
        return no_update, no_update
    try:
        run = run_agent(app.llm, user_input.strip(), api_key=_api_key(app))
    except MithooError as exc:
        logger.warning("Agent run failed (%s): %s", exc.status_code, exc.message)
        return no_update, GENERIC_FAILURE
    notes = f"**Plan**\n\n{numbered(run.plan)}\n\n---\n\n{run.final_result}"
    return dcc.Markdown(notes), ""

def register_callbacks(app):
    @app.callback(
        [
            Output("messages_container", "children"),
            Output("input_textarea", "value"),
            Output("conversation_id", "data"),
            Output("pending_edit", "data"),
            Output("error_banner", "children"),
        ],
        [Input("submit_button", "n_clicks")],
        [
            State("input_textarea", "value"),
            State("conversation_id", "data"),
            State("document_title", "value"),
            State("document_editor", "value"),
            State("research_toggle", "value"),
        ],
        running=[(Output("status_indicator", "hidden"), False, True)],
        prevent_initial_call=True,
    )
    def send_message(n_clicks, user_input, convo_id, title, document, research):
        if not n_clicks:
            return no_update, no_update, no_update, no_update, no_update
        return submit_turn(app, user_input, convo_id, title, document, research)

    @app.callback(
        [
            Output("edit_panel", "hidden"),
            Output("edit_explanation", "children"),
            Output("edit_preview", "children"),
        ],
        [Input("pending_edit", "data")],
    )
    def show_pending_edit(pending):
        if not pending:
            return True, "", ""
        return False, pending["explanation"], pending["newContent"]

    @app.callback(
        [
            Output("document_editor", "value"),
            Output("pending_edit", "data", allow_duplicate=True),
        ],
        [
            Input("accept_edit_button", "n_clicks"),
            Input("reject_edit_button", "n_clicks"),
        ],
        [State("pending_edit", "data")],
        prevent_initial_call=True,
    )
    def resolve_edit(accept_clicks, reject_clicks, pending):
        return resolve_pending_edit(callback_context.triggered_id, pending)

    @app.callback(
        [
            Output("messages_container", "children", allow_duplicate=True),
            Output("conversation_id", "data", allow_duplicate=True),
            Output("pending_edit", "data", allow_duplicate=True),
        ],
        [Input("new_conversation_button", "n_clicks")],
        prevent_initial_call=True,
    )
    def new_conversation(n_clicks):
        if not n_clicks:
            return no_update, no_update, no_update
        return [], None, None

    @app.callback(
        [
            Output("research_data", "data"),
            Output("tool_output", "children"),
            Output("error_banner", "children", allow_duplicate=True),
        ],
        [Input("research_button", "n_clicks")],
        [State("document_title", "value"), State("research_keywords", "value")],
        running=[(Output("status_indicator", "hidden"), False, True)],
        prevent_initial_call=True,
    )
    def research(n_clicks, title, keywords):
        if not n_clicks:
            return no_update, no_update, no_update
        return run_research(app, title, keywords)

    @app.callback(
        [
            Output("pending_edit", "data", allow_duplicate=True),
            Output("error_banner", "children", allow_duplicate=True),
        ],
        [
            Input("generate_article_button", "n_clicks"),
            Input("improve_article_button", "n_clicks"),
        ],
        [
            State("document_title", "value"),
            State("document_editor", "value"),
            State("research_data", "data"),
        ],
        running=[(Output("status_indicator", "hidden"), False, True)],
        prevent_initial_call=True,
    )
    def draft(generate_clicks, improve_clicks, title, document, research_data):
        return draft_article(app, callback_context.triggered_id, title, document, research_data)

    @app.callback(
        [
            Output("pending_edit", "data", allow_duplicate=True),
            Output("error_banner", "children", allow_duplicate=True),
        ],
        [Input("humanize_button", "n_clicks")],
        [State("document_editor", "value"), State("humanize_mode", "value")],
        running=[(Output("status_indicator", "hidden"), False, True)],
        prevent_initial_call=True,
    )
    def humanize(n_clicks, document, mode):
        if not n_clicks:
            return no_update, no_update
        return humanize_document(app, document, mode)

    @app.callback(
        [
            Output("tool_output", "children", allow_duplicate=True),
            Output("error_banner", "children", allow_duplicate=True),
        ],
        [Input("agent_button", "n_clicks")],
        [State("input_textarea", "value")],
        running=[(Output("status_indicator", "hidden"), False, True)],
        prevent_initial_call=True,
    )
    def agent(n_clicks, user_input):
        if not n_clicks:
            return no_update, no_update
        return run_agent_request(app, user_input)

    _register_clientside_callbacks(app)


def _register_clientside_callbacks(app):
    # Enter sends, Shift+Enter inserts a newline.
    app.clientside_callback(
        """
        function(n_clicks) {
            setTimeout(function() {
                const textarea = document.getElementById('input_textarea');
                const submitButton = document.getElementById('submit_button');
                if (textarea && submitButton && !window.mithooEnterListener) {
                    window.mithooEnterListener = true;
                    textarea.addEventListener('keydown', function(e) {
                        if (e.key === 'Enter' && !e.shiftKey) {
                            e.preventDefault();
                            if (textarea.value.trim()) {
                                submitButton.click();
                            }
                        }
                    });
                }
            }, 100);
            return window.dash_clientside.no_update;
        }
        """,
        Output("input_textarea", "className"),
        [Input("submit_button", "id")],
    )

    # Auto-scroll to bottom
    app.clientside_callback(
        """
        function(messages_content) {
            if (messages_content && messages_content.length > 0) {
                setTimeout(function() {
                    const container = document.getElementById('messages_container');
                    if (container) {
                        container.scrollTop = container.scrollHeight;
                    }
                }, 100);
            }
            return window.dash_clientside.no_update;
        }
        """,
        Output("messages_container", "data-scroll-trigger", allow_duplicate=True),
        [Input("messages_container", "children")],
        prevent_initial_call=True,
    )
