"""Prompt providers used by interactive collection and confirmation."""

from __future__ import annotations

from typing import Callable, Iterable, List, Protocol


class Prompter(Protocol):
    """Supplies raw answers for interactive collection."""

    def question(self, prompt: str) -> str:
        """Ask ``prompt`` and return the raw answer."""

    def close(self) -> None:
        """Release any resources held by the prompter."""


class ConsolePrompter:
    """Reads answers from standard input."""

    def __init__(self, reader: Callable[[str], str] = input) -> None:
        self._reader = reader
        self._closed = False

    def question(self, prompt: str) -> str:
        if self._closed:
            raise RuntimeError("Prompter has been closed")
        return self._reader(prompt)

    def close(self) -> None:
        self._closed = True


class ScriptedPrompter:
    """Replays a fixed list of answers; useful for automation and tests."""

    def __init__(self, answers: Iterable[str]) -> None:
        self._answers = list(answers)
        self.prompts: List[str] = []
        self.closed = False

    def question(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self._answers:
            raise EOFError(f"No scripted answer left for prompt: {prompt.strip()}")
        return self._answers.pop(0)

    def close(self) -> None:
        self.closed = True


__all__ = ["ConsolePrompter", "Prompter", "ScriptedPrompter"]
