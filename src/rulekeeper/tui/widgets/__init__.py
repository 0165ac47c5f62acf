"""rulekeeper TUI widgets."""

from rulekeeper.tui.widgets.feedback_panel import FeedbackPanelWidget

__all__ = ["FeedbackPanelWidget"]
