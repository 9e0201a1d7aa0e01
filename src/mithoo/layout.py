"""Layout builders for the Mithoo Dash UI."""

from abc import ABC, abstractmethod
from typing import List, Sequence, Set

from dash import dcc, html
from dash.development.base_component import Component as DashComponent

from .humanize import DEFAULT_MODE, MODES
from .models import USER_ROLE, Turn

# Component IDs the callbacks read from or write to.
REQUIRED_IDS = frozenset(
    {
        "document_title",
        "document_editor",
        "messages_container",
        "input_textarea",
        "research_toggle",
        "submit_button",
        "new_conversation_button",
        "conversation_id",
        "pending_edit",
        "edit_panel",
        "edit_explanation",
        "edit_preview",
        "accept_edit_button",
        "reject_edit_button",
        "status_indicator",
        "error_banner",
        "research_keywords",
        "research_button",
        "research_data",
        "generate_article_button",
        "improve_article_button",
        "humanize_mode",
        "humanize_button",
        "agent_button",
        "tool_output",
    }
)


def collect_ids(component) -> Set[str]:
    """Every string component ID in a Dash component tree."""
    ids: Set[str] = set()
    if isinstance(component, (list, tuple)):
        for child in component:
            ids |= collect_ids(child)
        return ids
    if not isinstance(component, DashComponent):
        return ids
    component_id = getattr(component, "id", None)
    if isinstance(component_id, str):
        ids.add(component_id)
    ids |= collect_ids(getattr(component, "children", None))
    return ids


class Layout(ABC):
    """Interface for building the Dash component layout."""

    @abstractmethod
    def build_layout(self) -> DashComponent:
        """Constructs and returns the entire Dash component tree for the UI."""
        pass

    @abstractmethod
    def build_messages(self, turns: Sequence[Turn]) -> List[DashComponent]:
        """Converts conversation turns into renderable components."""
        pass

    def get_external_stylesheets(self) -> List:
        return []

    def get_external_scripts(self) -> List:
        return []


class Minimal(Layout):
    """Plain HTML layout: article pane on the left, chat on the right."""

    def build_layout(self) -> DashComponent:
        return html.Div(
            style={"display": "flex", "height": "100vh", "fontFamily": "sans-serif"},
            children=[
                dcc.Store(id="conversation_id"),
                dcc.Store(id="pending_edit"),
                dcc.Store(id="research_data"),
                self.build_document_area(),
                self.build_chat_area(),
            ],
        )

    def build_document_area(self) -> DashComponent:
        return html.Div(
            style={"flex": "3", "padding": "16px", "display": "flex", "flexDirection": "column"},
            children=[
                dcc.Input(
                    id="document_title",
                    type="text",
                    placeholder="Untitled",
                    style={"fontSize": "1.5em", "marginBottom": "8px"},
                ),
                self.build_toolbar(),
                dcc.Textarea(
                    id="document_editor",
                    placeholder="Start writing in markdown...",
                    style={"flex": "1", "width": "100%"},
                ),
                self.build_edit_panel(),
            ],
        )

    def build_toolbar(self) -> DashComponent:
        """Whole-article actions: research, drafting and humanizing."""
        return html.Div(
            style={"display": "flex", "gap": "6px", "alignItems": "center", "marginBottom": "8px"},
            children=[
                dcc.Input(
                    id="research_keywords",
                    type="text",
                    placeholder="Keywords, comma separated",
                    style={"flex": "1"},
                ),
                html.Button("Research", id="research_button", n_clicks=0),
                html.Button("Generate article", id="generate_article_button", n_clicks=0),
                html.Button("Improve", id="improve_article_button", n_clicks=0),
                dcc.Dropdown(
                    id="humanize_mode",
                    options=[{"label": mode.title(), "value": mode} for mode in MODES],
                    value=DEFAULT_MODE,
                    clearable=False,
                    style={"width": "130px"},
                ),
                html.Button("Humanize", id="humanize_button", n_clicks=0),
            ],
        )

    def build_edit_panel(self) -> DashComponent:
        return html.Div(
            id="edit_panel",
            hidden=True,
            style={"borderTop": "1px solid #ddd", "marginTop": "8px", "paddingTop": "8px"},
            children=[
                html.Strong("Suggested edit"),
                html.P(id="edit_explanation"),
                html.Pre(
                    id="edit_preview",
                    style={"maxHeight": "30vh", "overflowY": "auto", "whiteSpace": "pre-wrap"},
                ),
                html.Button("Accept", id="accept_edit_button", n_clicks=0),
                html.Button("Reject", id="reject_edit_button", n_clicks=0),
            ],
        )

    def build_chat_area(self) -> DashComponent:
        return html.Div(
            style={
                "flex": "2",
                "padding": "16px",
                "display": "flex",
                "flexDirection": "column",
                "borderLeft": "1px solid #eee",
            },
            children=[
                html.Div(
                    [
                        html.H3("Mithoo", style={"margin": "0", "flex": "1"}),
                        html.Button("New chat", id="new_conversation_button", n_clicks=0),
                    ],
                    style={"display": "flex", "alignItems": "center"},
                ),
                html.Div(id="messages_container", style={"flex": "1", "overflowY": "auto"}),
                html.Div(
                    id="tool_output",
                    style={"maxHeight": "30vh", "overflowY": "auto", "fontSize": "0.9em"},
                ),
                html.Div(id="error_banner", style={"color": "#b00020"}),
                html.Div("Mithoo is thinking...", id="status_indicator", hidden=True),
                dcc.Checklist(
                    id="research_toggle",
                    options=[{"label": " Research the web", "value": "research"}],
                    value=[],
                ),
                dcc.Textarea(
                    id="input_textarea",
                    placeholder="Ask Mithoo...",
                    style={"width": "100%", "height": "80px"},
                ),
                html.Div(
                    [
                        html.Button("Send", id="submit_button", n_clicks=0),
                        html.Button("Plan & run", id="agent_button", n_clicks=0),
                    ],
                    style={"display": "flex", "gap": "6px"},
                ),
            ],
        )

    def build_messages(self, turns):
        if not turns:
            return []
        return [self.build_message(turn) for turn in turns]

    def build_message(self, turn: Turn) -> DashComponent:
        style = {
            "padding": "10px",
            "borderRadius": "15px",
            "marginBottom": "10px",
            "maxWidth": "85%",
            "width": "fit-content",
        }
        if turn.role == USER_ROLE:
            style["marginLeft"] = "auto"
            style["backgroundColor"] = "#dcf8c6"
        else:
            style["marginRight"] = "auto"
            style["backgroundColor"] = "#ffffff"
            style["border"] = "1px solid #eee"
        return html.Div(dcc.Markdown(turn.content), className=f"message {turn.role}", style=style)
