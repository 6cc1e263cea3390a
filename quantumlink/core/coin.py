"""Quantum coin record.

A coin stands in for a qubit. Its state is reduced to a single probability
of measuring Heads:
    1.0 -> always Heads (deterministic)
    0.5 -> perfect superposition
Measurement collapses the coin to a definite result which never changes again.
"""
from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from typing import Optional

DETERMINISTIC_P: float = 1.0
SUPERPOSED_P: float = 0.5


def new_coin_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Coin:
    id: str = field(default_factory=new_coin_id)
    probability_of_heads: float = DETERMINISTIC_P
    is_superposed: bool = False
    # Set once the H gate has touched the coin; tells a coin that came back
    # to a basis state apart from a fresh one.
    has_been_toggled: bool = False
    is_measured: bool = False
    result: Optional[bool] = None  # True = Heads, None = not yet measured
    partner_id: Optional[str] = None  # id of the entangled coin, if any

    def face(self) -> str:
        """Human readable state for display."""
        if not self.is_measured:
            if self.is_superposed:
                return "superposed"
            return f"p(H)={self.probability_of_heads:.2f}"
        return "Heads" if self.result else "Tails"


def find_index(coins, coin_id: str) -> Optional[int]:
    """Index of the coin with ``coin_id`` in ``coins`` or None."""
    for i, c in enumerate(coins):
        if c.id == coin_id:
            return i
    return None
