"""Coin operations: H gate, measurement and entanglement.

Every function works on the shared list of coins and addresses coins by id.
A rejected operation raises an ``ActionError`` subclass before touching any
coin, so callers never observe a half-applied mutation.
"""
from __future__ import annotations
import random
from typing import List, Optional, Tuple

from .coin import Coin, find_index, DETERMINISTIC_P, SUPERPOSED_P


class ActionError(Exception):
    """Base class for rejected coin operations."""
    pass


class AlreadyCollapsed(ActionError):
    """The target coin has already been measured."""
    pass


class InvalidTarget(ActionError):
    """Unknown coin id, self-entanglement or an out of range value."""
    pass


def get_coin(coins: List[Coin], coin_id: str) -> Coin:
    idx = find_index(coins, coin_id)
    if idx is None:
        raise InvalidTarget(f"No coin with id {coin_id[:8]}.")
    return coins[idx]


def add_coin(coins: List[Coin], probability: float = DETERMINISTIC_P) -> Coin:
    """Append a fresh, unmeasured coin and return it."""
    if not 0.0 <= probability <= 1.0:
        raise InvalidTarget(f"Probability must be between 0 and 1, got {probability}.")
    coin = Coin(probability_of_heads=probability)
    coins.append(coin)
    return coin


def apply_gate(coins: List[Coin], coin_id: str) -> Coin:
    """Toggle a coin between deterministic Heads and perfect superposition.

    Applying H twice brings the coin back to p = 1.0, which is how the game
    shows that quantum gates are reversible until a measurement happens.

    Raises:
        InvalidTarget: unknown id
        AlreadyCollapsed: the coin is measured; nothing is changed
    """
    coin = get_coin(coins, coin_id)
    if coin.is_measured:
        raise AlreadyCollapsed("Cannot apply H-Gate: the coin is already measured.")

    if coin.is_superposed:
        coin.probability_of_heads = DETERMINISTIC_P
        coin.is_superposed = False
    else:
        coin.probability_of_heads = SUPERPOSED_P
        coin.is_superposed = True
    coin.has_been_toggled = True
    return coin


def measure(coins: List[Coin], coin_id: str, rng=None) -> Tuple[bool, Optional[Coin]]:
    """Collapse a coin with a weighted random draw.

    Args:
        coins: shared coin list
        coin_id: coin to measure
        rng: object with a ``random()`` method (defaults to the random module)

    Returns:
        (result, partner) where partner is the entangled coin forced to the
        same result during this call, or None. Measuring an already measured
        coin returns its stored result and changes nothing.
    """
    coin = get_coin(coins, coin_id)
    if coin.is_measured:
        return coin.result, None

    draw = (rng or random).random()
    result = draw < coin.probability_of_heads
    coin.result = result
    coin.is_measured = True

    # Only the direct partner collapses; links are never followed further.
    partner = None
    if coin.partner_id is not None:
        idx = find_index(coins, coin.partner_id)
        if idx is not None and not coins[idx].is_measured:
            partner = coins[idx]
            partner.result = result
            partner.is_measured = True
    return result, partner


def entangle(coins: List[Coin], coin_a_id: str, coin_b_id: str) -> Tuple[Coin, Coin]:
    """Link two unmeasured coins into a shared 50/50 superposition.

    Raises:
        InvalidTarget: unknown id or both ids are the same coin
        AlreadyCollapsed: either coin is already measured
    """
    if coin_a_id == coin_b_id:
        raise InvalidTarget("Cannot entangle a coin with itself.")
    a = get_coin(coins, coin_a_id)
    b = get_coin(coins, coin_b_id)
    if a.is_measured or b.is_measured:
        raise AlreadyCollapsed(
            "Cannot entangle: wave function already collapsed! Add fresh coins to try again."
        )

    # Drop links to any previous partner so the relation stays symmetric.
    for coin in (a, b):
        if coin.partner_id is not None and coin.partner_id not in (a.id, b.id):
            idx = find_index(coins, coin.partner_id)
            if idx is not None and coins[idx].partner_id == coin.id:
                coins[idx].partner_id = None

    a.partner_id = b.id
    b.partner_id = a.id
    for coin in (a, b):
        coin.probability_of_heads = SUPERPOSED_P
        coin.is_superposed = True
    return a, b
