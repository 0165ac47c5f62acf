# rulekeeper:service=tui
"""Feedback panel widget showing the violation list for the current code."""

from __future__ import annotations

import json

from rich.text import Text
from textual.widgets import Static

_ICON_OK = "✔"  # heavy check
_ICON_ERROR = "✖"  # heavy X
_ICON_WARNING = "⚠"  # warning sign


def _violation_count(feedback: str) -> int | None:
    """Number of violations in *feedback*, or ``None`` if it is an error message."""
    try:
        data = json.loads(feedback)
    except json.JSONDecodeError:
        return None
    return len(data) if isinstance(data, list) else None


class FeedbackPanelWidget(Static):
    """Read-only pane: a status header followed by the raw feedback text."""

    DEFAULT_CSS = """
    FeedbackPanelWidget {
        width: 100%;
        height: auto;
        min-height: 3;
        padding: 0 1;
    }
    """

    def __init__(self, *, feedback: str = "", widget_id: str | None = None) -> None:
        super().__init__(id=widget_id)
        self._feedback = feedback

    @property
    def feedback(self) -> str:
        return self._feedback

    def render(self) -> Text:
        """Render the feedback as Rich Text."""
        text = Text()
        text.append("Feedback", style="bold underline")
        text.append(" ")

        count = _violation_count(self._feedback)
        if count is None:
            text.append(f"{_ICON_WARNING} {self._feedback}", style="bold yellow")
            return text
        if count == 0:
            text.append(f"{_ICON_OK} No violations", style="green")
            return text

        text.append(f"{_ICON_ERROR} {count} violation(s)", style="bold red")
        text.append("\n")
        text.append(self._feedback)
        return text

    def refresh_data(self, feedback: str) -> None:
        """Replace the feedback text and re-render."""
        self._feedback = feedback
        self.refresh()
