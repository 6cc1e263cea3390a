"""Quest and tutorial loader from structured JSON files.

This module loads the quest chain and the guided tour from JSON files,
validating them with jsonschema before converting them into model objects.
"""

import json
from pathlib import Path
from typing import List, Dict, Any
import jsonschema
from .model import Quest, Goal, TutorialStep
from .schema import QUESTS_SCHEMA, TUTORIAL_SCHEMA

def _read_json(path) -> Dict[str, Any]:
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {file_path.name}: {e}")

def load_quests(quests_file_path) -> List[Quest]:
    """Load the quest chain from a JSON file.

    Args:
        quests_file_path: Path to the quests JSON file

    Returns:
        List of Quest objects in unlock order (sorted by id)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the JSON is invalid or fails validation
    """
    data = _read_json(quests_file_path)
    errors = validate_quest_structure(data)
    if errors:
        raise ValueError("Invalid quest file: " + "; ".join(errors))
    return parse_quests(data)

def parse_quests(data: Dict[str, Any]) -> List[Quest]:
    """Build Quest objects from already validated data."""
    quests = [_parse_quest(q) for q in data.get('quests', [])]
    quests.sort(key=lambda q: q.id)
    return quests

def _parse_quest(quest_data: Dict[str, Any]) -> Quest:
    goal_data = quest_data['goal']
    return Quest(
        id=quest_data['id'],
        title=quest_data['title'],
        theory_text=quest_data.get('theory_text', ''),
        objective=quest_data.get('objective', ''),
        goal=Goal(op=goal_data['op'], args=dict(goal_data.get('args', {}))),
        hint=quest_data.get('hint', ''),
        popup_title=quest_data.get('popup_title', ''),
        popup_message=quest_data.get('popup_message', ''),
        starting_coins=quest_data.get('starting_coins', 1),
    )

def validate_quest_structure(data: Dict[str, Any]) -> List[str]:
    """Validate the structure of a quests JSON document.

    Args:
        data: Parsed quests JSON data

    Returns:
        List of validation error messages (empty if valid)
    """
    validator = jsonschema.Draft7Validator(QUESTS_SCHEMA)
    errors = []
    for error in sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path]):
        location = "/".join(str(p) for p in error.path) or "<root>"
        errors.append(f"{location}: {error.message}")
    if errors:
        return errors

    # Ids must form the sequence 1..N for the unlock chain to make sense
    ids = sorted(q['id'] for q in data['quests'])
    if ids != list(range(1, len(ids) + 1)):
        errors.append(f"Quest ids must be sequential starting at 1, got {ids}")
    return errors

def load_tutorial(tutorial_file_path) -> List[TutorialStep]:
    """Load the guided tour steps from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the JSON is invalid or fails validation
    """
    data = _read_json(tutorial_file_path)
    try:
        jsonschema.validate(data, TUTORIAL_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ValueError(f"Invalid tutorial file: {e.message}")
    return [
        TutorialStep(
            title=step['title'],
            message=step.get('message', ''),
            tab_index=step.get('tab_index'),
            highlight_anchor=step.get('highlight_anchor'),
        )
        for step in data['steps']
    ]
