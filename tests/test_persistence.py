"""Test saving and loading player progress."""

import sys
import os
import json
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from quantumlink.engine import QuestStateEngine
from quantumlink.core.persistence import (
    SaveError, SAVE_VERSION, save_progress, load_progress, list_saves, serialize_progress, format_save_age,
)
from quantumlink.quest.model import Quest, Goal

class FixedRng:
    def random(self):
        return 0.25

def make_engine():
    quests = [
        Quest(id=1, title="One", theory_text="", objective="", goal=Goal("any_superposed")),
        Quest(id=2, title="Two", theory_text="", objective="", goal=Goal("any_measured")),
        Quest(id=3, title="Three", theory_text="", objective="", goal=Goal("measured_count")),
    ]
    return QuestStateEngine(quests, rng=FixedRng(), clock=lambda: 500.0)

def test_round_trip(tmp_path):
    engine = make_engine()
    engine.apply_gate(engine.add_coin())
    engine.dismiss_popup()
    engine.has_seen_tour = True
    path = save_progress(engine, tmp_path, "slot1")
    assert path.exists()

    restored = make_engine()
    load_progress(restored, tmp_path, "slot1")
    assert restored.score == 100
    assert restored.current_level == 2
    assert restored.has_seen_tour == True
    assert restored.quests[0].is_completed == True
    assert restored.quests[0].completion_time == 0.0
    assert restored.quests[1].is_unlocked == True
    assert restored.quests[2].is_unlocked == False
    # Coins are round state: the loaded quest seeds a fresh table
    assert len(restored.coins) == 1
    assert restored.coins[0].is_measured == False

def test_saved_payload_shape(tmp_path):
    engine = make_engine()
    data = serialize_progress(engine)
    assert data["version"] == SAVE_VERSION
    assert [q["id"] for q in data["quests"]] == [1, 2, 3]
    assert "coins" not in data

def test_locked_level_falls_back_to_first(tmp_path):
    engine = make_engine()
    data = serialize_progress(engine)
    data["current_level"] = 3
    (tmp_path / "odd.json").write_text(json.dumps(data), encoding="utf-8")

    restored = make_engine()
    load_progress(restored, tmp_path, "odd")
    assert restored.current_level == 1

def test_broken_unlock_chain_is_rebuilt(tmp_path):
    data = serialize_progress(make_engine())
    data["quests"][2]["is_unlocked"] = True
    data["quests"][2]["is_completed"] = True
    data["current_level"] = 3
    (tmp_path / "edited.json").write_text(json.dumps(data), encoding="utf-8")

    restored = make_engine()
    load_progress(restored, tmp_path, "edited")
    assert restored.quests[1].is_completed == False
    assert restored.quests[2].is_unlocked == False
    assert restored.quests[2].is_completed == False
    assert restored.current_level == 1
    for prev, quest in zip(restored.quests, restored.quests[1:]):
        assert not quest.is_unlocked or prev.is_completed

def test_newer_version_rejected(tmp_path):
    data = serialize_progress(make_engine())
    data["version"] = SAVE_VERSION + 1
    (tmp_path / "future.json").write_text(json.dumps(data), encoding="utf-8")
    with pytest.raises(SaveError):
        load_progress(make_engine(), tmp_path, "future")

def test_corrupted_and_missing(tmp_path):
    (tmp_path / "broken.json").write_text("{", encoding="utf-8")
    (tmp_path / "bad.json").write_text(json.dumps({"version": 1}), encoding="utf-8")
    engine = make_engine()
    with pytest.raises(SaveError):
        load_progress(engine, tmp_path, "broken")
    with pytest.raises(SaveError):
        load_progress(engine, tmp_path, "bad")
    with pytest.raises(SaveError):
        load_progress(engine, tmp_path, "nothing")
    # Failed loads leave progress alone
    assert engine.score == 0

def test_invalid_slot_name(tmp_path):
    with pytest.raises(SaveError):
        save_progress(make_engine(), tmp_path, "../escape")

def test_list_saves(tmp_path):
    assert list_saves(tmp_path / "none") == []
    engine = make_engine()
    save_progress(engine, tmp_path, "a")
    (tmp_path / "junk.json").write_text("nope", encoding="utf-8")
    (tmp_path / "list.json").write_text("[]", encoding="utf-8")
    saves = {s["slot"]: s for s in list_saves(tmp_path)}
    assert saves["a"]["score"] == 0
    assert saves["junk"]["corrupted"] == True
    assert saves["list"]["corrupted"] == True
    assert "corrupted" not in saves["a"]

def test_format_save_age():
    assert format_save_age(100.0, now=130.0) == "just now"
    assert format_save_age(0.0, now=600.0) == "10m ago"
    assert format_save_age(0.0, now=7200.0) == "2h ago"
    assert format_save_age(0.0, now=3 * 86400.0) == "3d ago"
