"""Test the quest and tutorial loaders."""

import sys
import os
import tempfile
import json
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from quantumlink.quest.loader import load_quests, load_tutorial, validate_quest_structure
from quantumlink.quest.dsl import build_predicates

ASSETS = os.path.join(os.path.dirname(__file__), '..', 'assets')

def _quest(qid, op="any_measured", **extra):
    data = {
        "id": qid,
        "title": f"Quest {qid}",
        "theory_text": "Theory",
        "objective": "Do it",
        "goal": {"op": op},
    }
    data.update(extra)
    return data

def _write_temp(data):
    with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False, encoding='utf-8') as f:
        if isinstance(data, str):
            f.write(data)
        else:
            json.dump(data, f)
        return f.name

def test_load_quests():
    """Test loading quests from JSON file."""
    temp_file = _write_temp({"quests": [
        _quest(2, "entangled_measured", goal={"op": "entangled_measured", "args": {"min_count": 2}},
               starting_coins=2, hint="Link them"),
        _quest(1, "any_superposed"),
    ]})
    try:
        quests = load_quests(temp_file)

        # Sorted by id regardless of file order
        assert [q.id for q in quests] == [1, 2]
        assert quests[0].goal.op == "any_superposed"
        assert quests[0].starting_coins == 1
        assert quests[1].goal.args == {"min_count": 2}
        assert quests[1].starting_coins == 2
        assert quests[1].hint == "Link them"
        assert all(not q.is_unlocked and not q.is_completed for q in quests)
    finally:
        os.unlink(temp_file)

def test_unknown_goal_rejected():
    temp_file = _write_temp({"quests": [_quest(1, "clone_coin")]})
    try:
        with pytest.raises(ValueError):
            load_quests(temp_file)
    finally:
        os.unlink(temp_file)

def test_validate_quest_structure():
    assert validate_quest_structure({"quests": [_quest(1)]}) == []

    errors = validate_quest_structure({"quests": [_quest(1), _quest(3)]})
    assert any("sequential" in e for e in errors)

    errors = validate_quest_structure({"quests": [{"id": 1}]})
    assert errors
    assert all(e.startswith("quests/0") for e in errors)

    assert validate_quest_structure({}) != []

def test_missing_and_broken_files():
    with pytest.raises(FileNotFoundError):
        load_quests("does/not/exist.json")

    temp_file = _write_temp("{not json")
    try:
        with pytest.raises(ValueError):
            load_quests(temp_file)
    finally:
        os.unlink(temp_file)

def test_bundled_quests():
    quests = load_quests(os.path.join(ASSETS, 'quests.json'))
    assert len(quests) == 10
    assert [q.id for q in quests] == list(range(1, 11))
    # Every goal compiles to a predicate
    assert set(build_predicates(quests)) == set(range(1, 11))
    assert quests[0].goal.op == "any_superposed"
    assert quests[2].goal.op == "entangled_measured"

def test_load_tutorial():
    steps = load_tutorial(os.path.join(ASSETS, 'tutorial.json'))
    assert len(steps) == 7
    assert steps[0].tab_index == 0
    assert steps[0].highlight_anchor == "questGrid"

    temp_file = _write_temp({"steps": [{"message": "no title"}]})
    try:
        with pytest.raises(ValueError):
            load_tutorial(temp_file)
    finally:
        os.unlink(temp_file)
