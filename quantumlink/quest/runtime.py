"""Quest runtime management system.

This module keeps the ordered quest list and answers progress queries.
"""

from typing import Dict, List, Optional
from .model import Quest
from .dsl import Predicate, build_predicates

class QuestLog:
    """Manages the ordered quest chain and its predicates."""

    def __init__(self, quests: List[Quest]):
        """Initialize quest log.

        Args:
            quests: Quests in unlock order; the first one starts unlocked
        """
        self.quests: List[Quest] = list(quests)
        self.predicates: Dict[int, Predicate] = build_predicates(self.quests)
        if self.quests:
            self.quests[0].is_unlocked = True

    def get_quest(self, quest_id: int) -> Optional[Quest]:
        """Get quest by ID.

        Args:
            quest_id: Quest ID to look up

        Returns:
            Quest object or None if not found
        """
        for quest in self.quests:
            if quest.id == quest_id:
                return quest
        return None

    def index_of(self, quest: Quest) -> int:
        return self.quests.index(quest)

    def next_after(self, quest: Quest) -> Optional[Quest]:
        idx = self.index_of(quest)
        if idx + 1 < len(self.quests):
            return self.quests[idx + 1]
        return None

    def completed(self) -> List[Quest]:
        """Get all completed quests."""
        return [q for q in self.quests if q.is_completed]

    def progress(self) -> float:
        """Fraction of quests cleared, 0.0 when there are none."""
        if not self.quests:
            return 0.0
        return len(self.completed()) / len(self.quests)

    def summary(self) -> str:
        return f"{len(self.completed())} of {len(self.quests)} cleared ({self.progress():.0%})"

    def get_journal_entries(self, current_id: Optional[int] = None) -> List[str]:
        """Get formatted quest list lines for display.

        Returns:
            List of formatted lines
        """
        lines = ["=== Quest Log ===", self.summary()]
        for quest in self.quests:
            if quest.is_completed:
                marker = "✓"
            elif quest.id == current_id:
                marker = "→"
            else:
                marker = " "
            line = f" {marker} {quest.id:>2}. {quest.title}"
            if not quest.is_unlocked:
                line += " [locked]"
            if quest.formatted_time:
                line += f" ({quest.formatted_time})"
            lines.append(line)
        return lines
