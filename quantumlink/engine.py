"""Quest state engine: the state container behind the game.

The engine owns the coins on the table, the quest chain, the score and the
transient UI values (status message, completion popup, guided tour). Every
mutating call runs the quest check afterwards and notifies subscribers, so a
front-end only has to render what it reads back.
"""
from __future__ import annotations
import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional

from .core import actions
from .core import events as ev
from .core.actions import ActionError, InvalidTarget
from .core.coin import Coin, DETERMINISTIC_P
from .core.events import EventBus
from .quest.fsm import can_complete, complete_quest, start_quest, unlock_next, reward_for
from .quest.model import Quest, TutorialStep
from .quest.runtime import QuestLog


class QuestStateEngine:
    """Coins, quests and score for one player session."""

    def __init__(
        self,
        quests: List[Quest],
        tutorial_steps: Optional[List[TutorialStep]] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
        status_ttl: float = 3.0,
    ):
        self.quest_log = QuestLog(quests)
        self.coins: List[Coin] = []
        self.current_level: int = 1
        self.score: int = 0
        self.rng = rng or random.Random()
        self.clock = clock
        self.status_ttl = status_ttl
        self.events = EventBus()

        # Completion popup
        self.show_level_up_popup: bool = False
        self.popup_title: str = ""
        self.popup_message: str = ""

        # Inline feedback
        self._status_message: str = ""
        self._status_expires_at: Optional[float] = None
        self.last_error: Optional[ActionError] = None

        # Guided tour
        self.tutorial_steps: List[TutorialStep] = list(tutorial_steps or [])
        self.current_tutorial_step: int = 0
        self.is_tutorial_active: bool = False
        self.has_seen_tour: bool = False

        first = self.current_quest
        if first is not None:
            start_quest(first, self.clock())

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def quests(self) -> List[Quest]:
        return self.quest_log.quests

    @property
    def current_quest(self) -> Optional[Quest]:
        return self.quest_log.get_quest(self.current_level)

    @property
    def status_message(self) -> str:
        """Advisory text, cleared once its lifetime has elapsed."""
        if self._status_expires_at is not None and self.clock() >= self._status_expires_at:
            self._status_message = ""
            self._status_expires_at = None
        return self._status_message

    def coin(self, coin_id: str) -> Coin:
        return actions.get_coin(self.coins, coin_id)

    def coin_at(self, position: int, operation: str = "coin_at") -> Optional[str]:
        """Id of the coin at a 1-based table position, or None (rejected) if there is none."""
        if not 1 <= position <= len(self.coins):
            self._reject(operation, InvalidTarget(f"There is no coin #{position} on the table."))
            return None
        return self.coins[position - 1].id

    def subscribe(self, listener: Callable[[str, Dict[str, Any]], None]) -> Callable[[], None]:
        return self.events.subscribe(listener)

    def theory_topics(self) -> Dict[str, bool]:
        """Which theory cards are relevant to the coins on the table."""
        return {
            "superposition": any(not c.is_measured for c in self.coins),
            "collapse": any(c.is_measured for c in self.coins),
            "entanglement": any(c.partner_id is not None for c in self.coins),
        }

    def entangle_status(self) -> str:
        """Label for the entangle control."""
        has_two = len(self.coins) >= 2
        if has_two and self.coins[0].partner_id == self.coins[1].id:
            return "Linked"
        if has_two and any(c.is_measured for c in self.coins):
            return "Collapsed"
        if has_two:
            return "Link Coins"
        return "Need 2 Coins"

    # ------------------------------------------------------------------
    # Coin operations
    # ------------------------------------------------------------------

    def add_coin(self, probability: float = DETERMINISTIC_P) -> Optional[str]:
        """Put a fresh coin on the table and return its id (None if rejected)."""
        try:
            coin = actions.add_coin(self.coins, probability)
        except ActionError as e:
            self._reject("add_coin", e)
            return None
        self.last_error = None
        logging.info(f"Coin {coin.id[:8]} added (p={coin.probability_of_heads}).")
        self.events.emit(ev.COIN_ADDED, coin_id=coin.id)
        self.check_quest_progress()
        return coin.id

    def apply_gate(self, coin_id: str) -> bool:
        """Apply the H gate; returns False when the coin is measured or unknown."""
        try:
            coin = actions.apply_gate(self.coins, coin_id)
        except ActionError as e:
            self._reject("apply_gate", e)
            return False
        self.last_error = None
        logging.info(f"H gate on {coin_id[:8]} -> p={coin.probability_of_heads}.")
        self.events.emit(ev.GATE_APPLIED, coin_id=coin_id, superposed=coin.is_superposed)
        self.check_quest_progress()
        return True

    def measure(self, coin_id: str) -> Optional[bool]:
        """Collapse a coin and return its result.

        A second call on the same coin returns the stored result without
        touching anything. Returns None only for an unknown id.
        """
        try:
            was_measured = self.coin(coin_id).is_measured
            result, partner = actions.measure(self.coins, coin_id, self.rng)
        except ActionError as e:
            self._reject("measure", e)
            return None
        self.last_error = None
        if was_measured:
            self._set_status(f"Coin already measured: {'Heads' if result else 'Tails'}.")
            return result

        logging.info(f"Measured {coin_id[:8]} -> {'Heads' if result else 'Tails'}.")
        payload: Dict[str, Any] = {"coin_id": coin_id, "result": result}
        if partner is not None:
            logging.info(f"Entangled partner {partner.id[:8]} collapsed to the same result.")
            payload["partner_id"] = partner.id
        self.events.emit(ev.COIN_MEASURED, **payload)
        self.check_quest_progress()
        return result

    def entangle(self, coin_a_id: str, coin_b_id: str) -> bool:
        """Link two unmeasured coins; returns False when rejected."""
        try:
            actions.entangle(self.coins, coin_a_id, coin_b_id)
        except ActionError as e:
            self._reject("entangle", e)
            return False
        self.last_error = None
        logging.info(f"Coins {coin_a_id[:8]} <-> {coin_b_id[:8]} entangled.")
        self.events.emit(ev.COINS_ENTANGLED, coin_ids=[coin_a_id, coin_b_id])
        self.check_quest_progress()
        return True

    def reset_coins(self) -> None:
        """Clear the table for a new round, keeping level and score."""
        self.coins.clear()
        self._status_message = ""
        self._status_expires_at = None
        self.events.emit(ev.COINS_RESET)

    # ------------------------------------------------------------------
    # Quest progression
    # ------------------------------------------------------------------

    def check_quest_progress(self) -> bool:
        """Complete the current quest if its goal now holds.

        Returns:
            True only on the call that completes the quest
        """
        quest = self.current_quest
        if quest is None:
            return False
        predicate = self.quest_log.predicates[quest.id]
        if not can_complete(quest, self.coins, predicate):
            return False

        complete_quest(quest, self.clock())
        reward = reward_for(self.quest_log.index_of(quest))
        self.score += reward
        unlocked = unlock_next(self.quests, quest)

        self.popup_title = quest.popup_title or f"{quest.title} cleared!"
        self.popup_message = quest.popup_message or quest.theory_text
        self.show_level_up_popup = True

        logging.info(f"Quest {quest.id} '{quest.title}' completed (+{reward}).")
        self.events.emit(
            ev.QUEST_COMPLETED,
            quest_id=quest.id,
            reward=reward,
            score=self.score,
            unlocked=unlocked.id if unlocked else None,
        )
        return True

    def load_quest(self, quest_id: int) -> bool:
        """Switch to an unlocked quest (or replay a completed one).

        Clears the table, stamps the start time and seeds the quest's
        starting coins.
        """
        quest = self.quest_log.get_quest(quest_id)
        if quest is None:
            self._reject("load_quest", InvalidTarget(f"Quest {quest_id} does not exist."))
            return False
        if not start_quest(quest, self.clock()):
            self._reject("load_quest", InvalidTarget(f"Quest {quest_id} is still locked."))
            return False

        self.current_level = quest.id
        self.show_level_up_popup = False
        self.reset_coins()
        for _ in range(quest.starting_coins):
            actions.add_coin(self.coins, DETERMINISTIC_P)
        self.last_error = None
        logging.info(f"Quest {quest.id} '{quest.title}' loaded.")
        self.events.emit(ev.QUEST_LOADED, quest_id=quest.id, replay=quest.is_completed)
        return True

    def dismiss_popup(self) -> None:
        """Close the completion popup and move on to the next quest if any."""
        self.show_level_up_popup = False
        self.events.emit(ev.POPUP_DISMISSED)
        quest = self.current_quest
        if quest is not None:
            nxt = self.quest_log.next_after(quest)
            if nxt is not None and nxt.is_unlocked:
                self.load_quest(nxt.id)

    def advance_level(self) -> bool:
        """Load the quest after the current one; False if none is available."""
        quest = self.current_quest
        nxt = self.quest_log.next_after(quest) if quest else None
        if nxt is None:
            return False
        return self.load_quest(nxt.id)

    # ------------------------------------------------------------------
    # Guided tour
    # ------------------------------------------------------------------

    def start_tutorial(self) -> None:
        if not self.tutorial_steps:
            return
        self.current_tutorial_step = 0
        self.is_tutorial_active = True
        self.events.emit(ev.TUTORIAL_CHANGED, step=0, active=True)

    def next_tutorial_step(self) -> None:
        if not self.is_tutorial_active:
            return
        if self.current_tutorial_step < len(self.tutorial_steps) - 1:
            self.current_tutorial_step += 1
            self.events.emit(ev.TUTORIAL_CHANGED, step=self.current_tutorial_step, active=True)
        else:
            self.end_tutorial()

    def end_tutorial(self) -> None:
        self.is_tutorial_active = False
        self.current_tutorial_step = 0
        self.has_seen_tour = True
        self.events.emit(ev.TUTORIAL_CHANGED, step=0, active=False)

    @property
    def tutorial_step(self) -> Optional[TutorialStep]:
        if not self.is_tutorial_active:
            return None
        return self.tutorial_steps[self.current_tutorial_step]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _set_status(self, message: str) -> None:
        # A new message restarts the clear timer
        self._status_message = message
        self._status_expires_at = self.clock() + self.status_ttl

    def _reject(self, operation: str, error: ActionError) -> None:
        self.last_error = error
        self._set_status(str(error))
        logging.warning(f"{operation} rejected: {error}")
        self.events.emit(ev.ACTION_REJECTED, operation=operation,
                         error=type(error).__name__, message=str(error))
