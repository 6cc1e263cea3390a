"""Finite State Machine for quest progression.

This module handles quest state transitions along the linear unlock chain.
States: LOCKED, UNLOCKED, COMPLETED
"""

from typing import List, Optional
from .model import Quest
from .dsl import Predicate

BASE_REWARD = 100
REWARD_STEP = 25

def reward_for(quest_index: int) -> int:
    """Score awarded for clearing the quest at 0-based ``quest_index``."""
    return BASE_REWARD + REWARD_STEP * quest_index

def can_load(quest: Quest) -> bool:
    """Check if a quest can be played (first time or replay).

    Args:
        quest: Quest to check

    Returns:
        True if quest is unlocked
    """
    return quest.is_unlocked

def start_quest(quest: Quest, now: float) -> bool:
    """Stamp the start time of a quest if it can be loaded.

    Args:
        quest: Quest to start
        now: Current epoch seconds

    Returns:
        True if quest was started
    """
    if not can_load(quest):
        return False
    quest.started_at = now
    return True

def can_complete(quest: Quest, coins, predicate: Predicate) -> bool:
    """Check if the quest goal is met for the first time.

    Args:
        quest: Quest to check
        coins: Current coin list
        predicate: Goal predicate bound to this quest

    Returns:
        True if quest is unlocked, not yet completed and its goal holds
    """
    if not quest.is_unlocked or quest.is_completed:
        return False
    return predicate(coins)

def complete_quest(quest: Quest, now: float) -> None:
    """Mark quest completed and record how long it took.

    Args:
        quest: Quest to complete
        now: Current epoch seconds
    """
    quest.is_completed = True
    if quest.started_at is not None:
        quest.completion_time = max(0.0, now - quest.started_at)

def unlock_next(quests: List[Quest], quest: Quest) -> Optional[Quest]:
    """Unlock the quest after ``quest`` in the chain.

    Only a completed quest can unlock its successor.

    Returns:
        The newly unlocked quest or None
    """
    if not quest.is_completed:
        return None
    idx = quests.index(quest)
    if idx + 1 >= len(quests):
        return None
    nxt = quests[idx + 1]
    nxt.is_unlocked = True
    return nxt
