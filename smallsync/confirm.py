"""Yes/no confirmation asked before any overwriting write."""

import logging
from collections.abc import Iterable
from typing import Protocol

import click

logger = logging.getLogger(__name__)

# Empty input counts as yes.
AFFIRMATIVE_RESPONSES = frozenset({"y", "Y", ""})


def is_affirmative(response: str) -> bool:
    """Check whether a typed response accepts the overwrite."""
    return response.strip() in AFFIRMATIVE_RESPONSES


class ConfirmationGate(Protocol):
    def confirm(self, message: str) -> bool: ...


class ConsoleConfirmationGate:
    """Ask on the terminal with ``click.prompt``."""

    def confirm(self, message: str) -> bool:
        response = click.prompt(
            message, default="", show_default=False, prompt_suffix=" ", err=True
        )
        accepted = is_affirmative(response)
        logger.debug("Confirmation %r -> %s", response, accepted)
        return accepted


class ScriptedConfirmationGate:
    """Replay canned responses, recording every message asked.

    Raises:
        RuntimeError: When asked more questions than there are responses
    """

    def __init__(self, responses: Iterable[str]):
        self._responses = list(responses)
        self.messages: list[str] = []

    def confirm(self, message: str) -> bool:
        self.messages.append(message)
        if not self._responses:
            raise RuntimeError(f"No scripted response left for: {message}")
        return is_affirmative(self._responses.pop(0))


class AssumeYesConfirmationGate:
    """Accept every overwrite without asking (``--yes``)."""

    def confirm(self, message: str) -> bool:
        logger.debug("Auto-confirmed: %s", message)
        return True
