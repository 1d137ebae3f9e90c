"""Interactive questions asked during a sync.

The orchestrator only knows question keys. An empty answer means "use the
next fallback", so a non-interactive run answers every question with "".
"""

from __future__ import annotations

import sys
from collections.abc import Callable

import typer

QUESTIONS: dict[str, str] = {
    "sync-type": 'Sync type ("frontend" or "backend", empty for the configured default)',
    "hash-schema": "Schema repository revision (empty for the latest)",
    "hash-guidewire": "Guidewire repository revision (empty for the latest)",
}


def is_interactive_terminal() -> bool:
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def no_answer(_key: str) -> str:
    return ""


def prompt(key: str) -> str:
    text = QUESTIONS.get(key, key)
    answer: str = typer.prompt(text, default="", show_default=False)
    return answer.strip()


def make_ask(*, interactive: bool) -> Callable[[str], str]:
    """Pick the prompt implementation for this run."""
    if interactive and is_interactive_terminal():
        return prompt
    return no_answer
