"""Save/Load system for Quantum Link Quest.

Stores player progress (score, level, quest flags, tour seen) as versioned
JSON save slots. Coins are round state and are never written.
"""
from __future__ import annotations
import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema

from ..quest.schema import SAVE_SCHEMA

# Save format version - increment when making breaking changes
SAVE_VERSION = 1
DEFAULT_SLOT = "quicksave"


class SaveError(Exception):
    """Exception raised for save/load operations."""
    pass


def _slot_path(saves_dir: Path, slot_name: str) -> Path:
    if not slot_name or any(ch in slot_name for ch in "/\\") or slot_name.startswith("."):
        raise SaveError(f"Invalid save slot name: {slot_name!r}")
    return Path(saves_dir) / f"{slot_name}.json"


def serialize_progress(engine) -> Dict[str, Any]:
    """Convert the engine's persistent progress to a serializable dictionary."""
    return {
        "version": SAVE_VERSION,
        "saved_at": datetime.now().isoformat(),
        "score": engine.score,
        "current_level": engine.current_level,
        "has_seen_tour": engine.has_seen_tour,
        "quests": [
            {
                "id": q.id,
                "is_unlocked": q.is_unlocked,
                "is_completed": q.is_completed,
                "completion_time": q.completion_time,
            }
            for q in engine.quests
        ],
    }


def apply_progress(engine, data: Dict[str, Any]) -> None:
    """Restore progress from a dictionary into ``engine``.

    Raises:
        SaveError: If the data is malformed or from a newer save version
    """
    try:
        jsonschema.validate(data, SAVE_SCHEMA)
    except jsonschema.ValidationError as e:
        raise SaveError(f"Corrupted save data: {e.message}")
    if data["version"] > SAVE_VERSION:
        raise SaveError(
            f"Save file version {data['version']} is newer than supported version {SAVE_VERSION}"
        )

    saved = {q["id"]: q for q in data["quests"]}
    for quest in engine.quests:
        entry = saved.get(quest.id)
        if entry is None:
            continue
        quest.is_completed = entry["is_completed"]
        quest.completion_time = entry.get("completion_time")

    # Rebuild the unlock chain: quest N+1 is open only once quest N is cleared.
    for i, quest in enumerate(engine.quests):
        quest.is_unlocked = i == 0 or engine.quests[i - 1].is_completed
        if not quest.is_unlocked and quest.is_completed:
            logging.warning(f"Save marks locked quest {quest.id} as completed; resetting it.")
            quest.is_completed = False
            quest.completion_time = None

    engine.score = data["score"]
    engine.has_seen_tour = data.get("has_seen_tour", False)
    level = data["current_level"]
    target = engine.quest_log.get_quest(level)
    if target is None or not target.is_unlocked:
        level = 1
    engine.load_quest(level)


def save_progress(engine, saves_dir: Path, slot_name: str = DEFAULT_SLOT) -> Path:
    """Write progress to a save slot and return the file path."""
    path = _slot_path(saves_dir, slot_name)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(serialize_progress(engine), f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise SaveError(f"Failed to save game: {e}")
    return path


def load_progress(engine, saves_dir: Path, slot_name: str = DEFAULT_SLOT) -> None:
    """Read a save slot into ``engine``.

    Raises:
        SaveError: If the slot is missing, unreadable or invalid
    """
    path = _slot_path(saves_dir, slot_name)
    if not path.exists():
        raise SaveError(f"Save slot '{slot_name}' not found")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SaveError(f"Failed to load save '{slot_name}': {e}")
    apply_progress(engine, data)


def list_saves(saves_dir: Path) -> List[Dict[str, Any]]:
    """List available save slots, newest first."""
    saves_dir = Path(saves_dir)
    if not saves_dir.exists():
        return []
    saves = []
    for path in saves_dir.glob("*.json"):
        info: Dict[str, Any] = {"slot": path.stem, "modified": path.stat().st_mtime}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("save data is not an object")
            info["score"] = data.get("score", 0)
            info["current_level"] = data.get("current_level", 1)
        except (OSError, ValueError):
            info["corrupted"] = True
        saves.append(info)
    saves.sort(key=lambda s: s["modified"], reverse=True)
    return saves


def format_save_age(modified: float, now: Optional[float] = None) -> str:
    """Short "how long ago" label for a save slot."""
    delta = int((now if now is not None else time.time()) - modified)
    if delta < 60:
        return "just now"
    if delta < 3600:
        return f"{delta // 60}m ago"
    if delta < 86400:
        return f"{delta // 3600}h ago"
    return f"{delta // 86400}d ago"
