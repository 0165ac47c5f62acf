# rulekeeper:service=tui
"""Main Textual application: code editor, rules editor, live feedback pane."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, ClassVar

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.css.query import NoMatches
from textual.widgets import Footer, Header, Label, TextArea

from rulekeeper.feedback import SAMPLE_RULES
from rulekeeper.tui.model import CodeChanged, RulesChanged, initial_model, update
from rulekeeper.tui.widgets.feedback_panel import FeedbackPanelWidget

if TYPE_CHECKING:
    from rulekeeper.tui.model import Model, Msg

logger = logging.getLogger(__name__)

CODE_EDITOR_ID = "code"
RULES_EDITOR_ID = "rules"
FEEDBACK_ID = "feedback"


class RuleKeeperApp(App[None]):
    """Edit code or rules and see the violation list update on every change."""

    TITLE = "rulekeeper"

    CSS = """
    #editors {
        height: 2fr;
    }
    #editors Vertical {
        width: 1fr;
    }
    #editors TextArea {
        height: 1fr;
    }
    #feedback-scroll {
        height: 1fr;
        border: round $primary;
    }
    """

    BINDINGS: ClassVar[list[Binding | tuple[str, str] | tuple[str, str, str]]] = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("f2", "focus_code", "Code"),
        Binding("f3", "focus_rules", "Rules"),
    ]

    def __init__(self, *, code: str = "", rules: str | None = None) -> None:
        super().__init__()
        self.model: Model = initial_model(code, SAMPLE_RULES if rules is None else rules)

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield Header()
        with Horizontal(id="editors"):
            with Vertical():
                yield Label("Code", classes="editor-title")
                yield TextArea(self.model.code, id=CODE_EDITOR_ID)
            with Vertical():
                yield Label("Rules (JSON)", classes="editor-title")
                yield TextArea(self.model.rules, id=RULES_EDITOR_ID)
        with VerticalScroll(id="feedback-scroll"):
            yield FeedbackPanelWidget(feedback=self.model.feedback, widget_id=FEEDBACK_ID)
        yield Footer()

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        """Turn editor changes into messages."""
        area = event.text_area
        if area.id == CODE_EDITOR_ID:
            self.apply_msg(CodeChanged(area.text))
        elif area.id == RULES_EDITOR_ID:
            self.apply_msg(RulesChanged(area.text))

    def apply_msg(self, msg: Msg) -> None:
        """Run *msg* through ``update`` and redraw the feedback pane if the model changed."""
        new_model = update(msg, self.model)
        if new_model is self.model:
            return
        self.model = new_model
        self._render_feedback()

    def _render_feedback(self) -> None:
        try:
            panel = self.query_one(f"#{FEEDBACK_ID}", FeedbackPanelWidget)
        except NoMatches:
            logger.debug("Feedback panel not mounted yet", exc_info=True)
            return
        panel.refresh_data(self.model.feedback)

    def action_focus_code(self) -> None:
        self.query_one(f"#{CODE_EDITOR_ID}", TextArea).focus()

    def action_focus_rules(self) -> None:
        self.query_one(f"#{RULES_EDITOR_ID}", TextArea).focus()
