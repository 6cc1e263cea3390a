"""Quest engine package for Quantum Link Quest."""

from .model import Quest, Goal, TutorialStep, QuestState
from .fsm import can_load, start_quest, can_complete, complete_quest, unlock_next, reward_for
from .dsl import check, compile_goal, build_predicates
from .runtime import QuestLog
from .loader import load_quests, load_tutorial

__all__ = [
    'Quest', 'Goal', 'TutorialStep', 'QuestState',
    'can_load', 'start_quest', 'can_complete', 'complete_quest', 'unlock_next', 'reward_for',
    'check', 'compile_goal', 'build_predicates',
    'QuestLog',
    'load_quests', 'load_tutorial',
]
