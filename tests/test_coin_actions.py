"""Test the coin operations (gate, measure, entangle)."""

import sys
import os
from dataclasses import asdict
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from quantumlink.core.coin import Coin
from quantumlink.core import actions
from quantumlink.core.actions import ActionError, AlreadyCollapsed, InvalidTarget

class FixedRng:
    """Random source returning a fixed draw."""
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value

def test_gate_toggles_superposition():
    """H twice returns the coin to deterministic heads."""
    coins = []
    coin = actions.add_coin(coins)
    assert coin.probability_of_heads == 1.0
    assert coin.is_superposed == False

    actions.apply_gate(coins, coin.id)
    assert coin.probability_of_heads == 0.5
    assert coin.is_superposed == True
    assert coin.has_been_toggled == True

    actions.apply_gate(coins, coin.id)
    assert coin.probability_of_heads == 1.0
    assert coin.is_superposed == False
    assert coin.has_been_toggled == True

def test_gate_on_measured_coin_changes_nothing():
    coins = []
    coin = actions.add_coin(coins)
    actions.measure(coins, coin.id, FixedRng(0.3))
    before = asdict(coin)

    with pytest.raises(AlreadyCollapsed):
        actions.apply_gate(coins, coin.id)
    assert asdict(coin) == before

def test_unknown_coin_is_invalid_target():
    coins = [Coin()]
    with pytest.raises(InvalidTarget):
        actions.apply_gate(coins, "missing")
    with pytest.raises(InvalidTarget):
        actions.measure(coins, "missing")
    # Both kinds share the same base class
    assert issubclass(InvalidTarget, ActionError)
    assert issubclass(AlreadyCollapsed, ActionError)

def test_add_coin_rejects_bad_probability():
    coins = []
    with pytest.raises(InvalidTarget):
        actions.add_coin(coins, 1.5)
    assert coins == []

def test_measure_uses_weighted_draw():
    coins = []
    heads = actions.add_coin(coins, 0.5)
    tails = actions.add_coin(coins, 0.5)

    result, partner = actions.measure(coins, heads.id, FixedRng(0.49))
    assert result == True
    assert partner is None
    assert heads.is_measured and heads.result == True

    result, _ = actions.measure(coins, tails.id, FixedRng(0.5))
    assert result == False
    assert tails.result == False

def test_measure_is_idempotent():
    coins = []
    coin = actions.add_coin(coins, 0.5)
    first, _ = actions.measure(coins, coin.id, FixedRng(0.9))
    # A draw that would flip the outcome must be ignored
    second, partner = actions.measure(coins, coin.id, FixedRng(0.0))
    assert first == second == False
    assert partner is None

def test_entangle_is_symmetric():
    coins = []
    a = actions.add_coin(coins)
    b = actions.add_coin(coins)
    actions.entangle(coins, a.id, b.id)

    assert a.partner_id == b.id
    assert b.partner_id == a.id
    assert a.probability_of_heads == b.probability_of_heads == 0.5
    assert a.is_superposed and b.is_superposed

@pytest.mark.parametrize("draw,expected", [(0.1, True), (0.9, False)])
def test_measuring_entangled_coin_forces_partner(draw, expected):
    coins = []
    a = actions.add_coin(coins)
    b = actions.add_coin(coins)
    actions.entangle(coins, a.id, b.id)

    result, partner = actions.measure(coins, a.id, FixedRng(draw))
    assert result == expected
    assert partner is b
    assert b.is_measured == True
    assert b.result == expected

def test_propagation_stops_at_partner():
    """Only the direct partner collapses, never a third coin."""
    coins = []
    a = actions.add_coin(coins)
    b = actions.add_coin(coins)
    c = actions.add_coin(coins)
    actions.entangle(coins, a.id, b.id)
    # Hand-made one-way link from b to c must not be followed
    c.partner_id = b.id

    actions.measure(coins, a.id, FixedRng(0.2))
    assert b.is_measured
    assert c.is_measured == False
    assert c.result is None

def test_entangle_self_rejected():
    coins = []
    a = actions.add_coin(coins)
    with pytest.raises(InvalidTarget):
        actions.entangle(coins, a.id, a.id)
    assert a.partner_id is None
    assert a.probability_of_heads == 1.0

def test_entangle_measured_rejected():
    coins = []
    a = actions.add_coin(coins)
    b = actions.add_coin(coins)
    actions.measure(coins, a.id, FixedRng(0.5))
    before_a, before_b = asdict(a), asdict(b)

    with pytest.raises(AlreadyCollapsed):
        actions.entangle(coins, a.id, b.id)
    assert asdict(a) == before_a
    assert asdict(b) == before_b

def test_reentangle_clears_stale_partner():
    coins = []
    a = actions.add_coin(coins)
    b = actions.add_coin(coins)
    c = actions.add_coin(coins)
    actions.entangle(coins, a.id, b.id)
    actions.entangle(coins, a.id, c.id)

    assert a.partner_id == c.id
    assert c.partner_id == a.id
    assert b.partner_id is None

def test_reentangle_clears_stale_partner_of_second_coin():
    coins = []
    a = actions.add_coin(coins)
    b = actions.add_coin(coins)
    c = actions.add_coin(coins)
    actions.entangle(coins, a.id, b.id)
    actions.entangle(coins, c.id, b.id)

    assert b.partner_id == c.id
    assert c.partner_id == b.id
    assert a.partner_id is None

def test_coin_face():
    coin = Coin()
    assert coin.face() == "p(H)=1.00"
    coin.is_superposed = True
    assert coin.face() == "superposed"
    coin.is_measured, coin.result = True, False
    assert coin.face() == "Tails"
