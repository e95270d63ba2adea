"""Interactive questions asked on the terminal."""
from typing import Callable, Optional

import typer

from server_setup.utils import SetupError, log_debug


class PromptCancelled(SetupError):
    """Raised when a prompt runs out of attempts without a valid answer."""


def ask(question: str) -> str:
    """Ask a single question and return the raw answer, possibly empty."""
    return typer.prompt(question, default="", show_default=False)


def ask_until(
    question: str,
    accept: Callable[[str], bool],
    ask: Callable[[str], str] = ask,
    max_attempts: Optional[int] = None,
) -> str:
    """Keep asking until ``accept`` approves the answer.

    Without ``max_attempts`` this blocks until a valid answer arrives.
    """
    attempts = 0
    while max_attempts is None or attempts < max_attempts:
        answer = ask(question)
        attempts += 1
        if accept(answer):
            return answer
        log_debug(f"Rejected answer for '{question}': {answer!r}")
    raise PromptCancelled(f"No valid answer for '{question}' after {attempts} attempts")
