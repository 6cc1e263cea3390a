"""Quest data models for Quantum Link Quest.

This module defines the core data structures for the quest system including
Quest, Goal and TutorialStep dataclasses.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Literal

# Quest states for the FSM
QuestState = Literal["LOCKED", "UNLOCKED", "COMPLETED"]

@dataclass
class Goal:
    """A declarative completion goal evaluated over the coin list.

    Examples:
        {"op": "any_superposed", "args": {}}
        {"op": "entangled_measured", "args": {"min_count": 2}}
    """
    op: str
    args: Dict[str, Any] = field(default_factory=dict)

@dataclass
class Quest:
    """A single quest in the linear unlock chain."""
    id: int
    title: str
    theory_text: str
    objective: str
    goal: Goal
    hint: str = ""
    popup_title: str = ""
    popup_message: str = ""
    starting_coins: int = 1  # deterministic coins placed on the table when loaded
    is_unlocked: bool = False
    is_completed: bool = False
    started_at: Optional[float] = None  # epoch seconds when the quest was loaded
    completion_time: Optional[float] = None  # seconds taken to clear it

    @property
    def state(self) -> QuestState:
        if self.is_completed:
            return "COMPLETED"
        if self.is_unlocked:
            return "UNLOCKED"
        return "LOCKED"

    @property
    def formatted_time(self) -> Optional[str]:
        """Completion time as "1m 23s" or "45s", None if not completed."""
        if self.completion_time is None:
            return None
        total = int(self.completion_time)
        minutes, seconds = divmod(total, 60)
        if minutes > 0:
            return f"{minutes}m {seconds}s"
        return f"{seconds}s"

@dataclass
class TutorialStep:
    """One step of the guided tour."""
    title: str
    message: str
    tab_index: Optional[int] = None  # 0 = dashboard, 1 = lab
    highlight_anchor: Optional[str] = None  # element to highlight
