"""Delivery of user-facing alerts."""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def alert(self, message: str) -> None: ...


class CollectingNotifier:
    """Keeps alerts so the caller can show them as blocking dialogs."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def alert(self, message: str) -> None:
        logger.info(f"Alert: {message}")
        self.messages.append(message)

    def drain(self) -> list[str]:
        drained, self.messages = self.messages, []
        return drained
