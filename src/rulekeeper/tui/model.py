# rulekeeper:service=tui
"""Editor state and the pure update function driving the TUI."""

from __future__ import annotations

from dataclasses import dataclass, replace

from rulekeeper.feedback import SAMPLE_RULES, generate_feedback


@dataclass(frozen=True)
class Model:
    code: str
    rules: str
    feedback: str


@dataclass(frozen=True)
class CodeChanged:
    text: str


@dataclass(frozen=True)
class RulesChanged:
    text: str


Msg = CodeChanged | RulesChanged


def initial_model(code: str = "", rules: str = SAMPLE_RULES) -> Model:
    """Starting state with feedback already computed for *code* and *rules*."""
    return Model(code=code, rules=rules, feedback=generate_feedback(code, rules))


def update(msg: Msg, model: Model) -> Model:
    """Apply *msg*; the same model comes back when the text did not change."""
    match msg:
        case CodeChanged(text=text):
            if text == model.code:
                return model
            return replace(model, code=text, feedback=generate_feedback(text, model.rules))
        case RulesChanged(text=text):
            if text == model.rules:
                return model
            return replace(model, rules=text, feedback=generate_feedback(model.code, text))
        case _:
            msg_text = f"Unhandled message: {msg!r}"
            raise TypeError(msg_text)
