from __future__ import annotations

import pytest

from bts.cli import questions


def test_non_interactive_answers_nothing() -> None:
    ask = questions.make_ask(interactive=False)

    assert ask is questions.no_answer
    assert ask("sync-type") == ""


def test_interactive_flag_requires_a_terminal(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(questions, "is_interactive_terminal", lambda: False)

    assert questions.make_ask(interactive=True) is questions.no_answer


def test_prompt_strips_answer(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[str] = []

    def fake_prompt(text: str, **_kwargs: object) -> str:
        seen.append(text)
        return "  backend \n"

    monkeypatch.setattr(questions.typer, "prompt", fake_prompt)
    monkeypatch.setattr(questions, "is_interactive_terminal", lambda: True)

    ask = questions.make_ask(interactive=True)

    assert ask("sync-type") == "backend"
    assert seen == [questions.QUESTIONS["sync-type"]]


def test_every_question_has_text() -> None:
    assert set(questions.QUESTIONS) == {"sync-type", "hash-schema", "hash-guidewire"}
