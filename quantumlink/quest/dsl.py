"""Declarative goal evaluation DSL for the quest system.

Each goal name maps to a pure predicate over the current coin list:
- any_superposed: some coin is in superposition
- any_measured: some coin has collapsed
- entangled_measured: enough entangled coins have been measured
- returned_to_basis: a coin was toggled back to a deterministic state
- measured_superposition: a coin was measured while at p = 0.5
- measured_count: enough coins have been measured

Several quests share the same check under different narratives; the checks
are exactly what is written here and nothing more.
"""

from typing import Callable, Dict, List, Sequence
from .model import Goal
from ..core.coin import Coin, DETERMINISTIC_P, SUPERPOSED_P

Predicate = Callable[[Sequence[Coin]], bool]

def any_superposed(coins: Sequence[Coin]) -> bool:
    return any(c.is_superposed for c in coins)

def any_measured(coins: Sequence[Coin]) -> bool:
    return any(c.is_measured for c in coins)

def entangled_measured(coins: Sequence[Coin], min_count: int = 2) -> bool:
    return sum(1 for c in coins if c.partner_id is not None and c.is_measured) >= min_count

def returned_to_basis(coins: Sequence[Coin]) -> bool:
    return any(
        c.has_been_toggled and not c.is_superposed and not c.is_measured
        and c.probability_of_heads == DETERMINISTIC_P
        for c in coins
    )

def measured_superposition(coins: Sequence[Coin]) -> bool:
    return any(c.is_measured and c.probability_of_heads == SUPERPOSED_P for c in coins)

def measured_count(coins: Sequence[Coin], min_count: int = 2) -> bool:
    return sum(1 for c in coins if c.is_measured) >= min_count

GOALS: Dict[str, Callable[..., bool]] = {
    "any_superposed": any_superposed,
    "any_measured": any_measured,
    "entangled_measured": entangled_measured,
    "returned_to_basis": returned_to_basis,
    "measured_superposition": measured_superposition,
    "measured_count": measured_count,
}

def check(goal: Goal, coins: Sequence[Coin]) -> bool:
    """Check if a single goal is met.

    Args:
        goal: The goal to evaluate
        coins: Current coin list

    Returns:
        True if goal is satisfied, False otherwise (also for unknown ops)
    """
    fn = GOALS.get(goal.op)
    if fn is None:
        return False
    return fn(coins, **goal.args)

def compile_goal(goal: Goal) -> Predicate:
    """Bind a goal to its predicate so it can be called with just the coins.

    Raises:
        ValueError: If the goal name is unknown
    """
    fn = GOALS.get(goal.op)
    if fn is None:
        raise ValueError(f"Unknown quest goal '{goal.op}'")
    args = dict(goal.args)
    return lambda coins: fn(coins, **args)

def build_predicates(quests) -> Dict[int, Predicate]:
    """Map quest id -> predicate for every quest."""
    return {q.id: compile_goal(q.goal) for q in quests}

def goal_names() -> List[str]:
    return sorted(GOALS)
