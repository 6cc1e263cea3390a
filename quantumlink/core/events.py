"""Change notification for the lab state.

Front-ends register a callback and get ``(event_name, payload)`` after every
state change. The bus knows nothing about rendering.
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List

Listener = Callable[[str, Dict[str, Any]], None]

# Event names emitted by the engine
COIN_ADDED = "coin_added"
GATE_APPLIED = "gate_applied"
COIN_MEASURED = "coin_measured"
COINS_ENTANGLED = "coins_entangled"
ACTION_REJECTED = "action_rejected"
QUEST_COMPLETED = "quest_completed"
QUEST_LOADED = "quest_loaded"
COINS_RESET = "coins_reset"
POPUP_DISMISSED = "popup_dismissed"
TUTORIAL_CHANGED = "tutorial_changed"


class EventBus:
    """Keeps the listeners and fans out notifications."""

    def __init__(self):
        self.listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a function that removes it again."""
        self.listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unsubscribe

    def emit(self, event: str, **payload: Any) -> None:
        for listener in list(self.listeners):
            try:
                listener(event, payload)
            except Exception as e:
                # A broken listener must not undo or block the mutation
                logging.error(f"Listener {listener!r} failed on '{event}': {e}")
