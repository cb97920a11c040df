"""Request lifecycle state machine with lock-protected transitions."""

from __future__ import annotations

import asyncio
from enum import Enum


class ConversationState(str, Enum):
    """Lifecycle of the single in-flight provider request."""

    IDLE = "IDLE"
    SENDING = "SENDING"
    ERROR = "ERROR"


class StateManager:
    """Serialize submissions: only one request may leave IDLE at a time."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._state = ConversationState.IDLE

    @property
    def state(self) -> ConversationState:
        return self._state

    async def transition_to(self, new_state: ConversationState) -> ConversationState:
        async with self._lock:
            self._state = new_state
            return self._state

    async def transition_if(
        self,
        expected_state: ConversationState,
        new_state: ConversationState,
    ) -> bool:
        """Transition only when the current state matches ``expected_state``."""
        async with self._lock:
            if self._state != expected_state:
                return False
            self._state = new_state
            return True
