"""JSON schema definitions for quest, tutorial and save files.

The loaders validate raw JSON against these before building any object.
"""

from .dsl import goal_names

GOAL_SCHEMA = {
    "type": "object",
    "required": ["op"],
    "properties": {
        "op": {"type": "string", "enum": goal_names()},
        "args": {
            "type": "object",
            "properties": {
                "min_count": {"type": "integer", "minimum": 1}
            },
            "additionalProperties": False
        }
    },
    "additionalProperties": False
}

QUESTS_SCHEMA = {
    "type": "object",
    "required": ["quests"],
    "properties": {
        "quests": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["id", "title", "theory_text", "objective", "goal"],
                "properties": {
                    "id": {"type": "integer", "minimum": 1},
                    "title": {"type": "string", "minLength": 1},
                    "theory_text": {"type": "string"},
                    "objective": {"type": "string"},
                    "hint": {"type": "string"},
                    "popup_title": {"type": "string"},
                    "popup_message": {"type": "string"},
                    "starting_coins": {"type": "integer", "minimum": 0, "maximum": 8},
                    "goal": GOAL_SCHEMA
                },
                "additionalProperties": False
            }
        }
    }
}

TUTORIAL_SCHEMA = {
    "type": "object",
    "required": ["steps"],
    "properties": {
        "steps": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["title", "message"],
                "properties": {
                    "title": {"type": "string", "minLength": 1},
                    "message": {"type": "string"},
                    "tab_index": {"type": ["integer", "null"], "minimum": 0},
                    "highlight_anchor": {"type": ["string", "null"]}
                },
                "additionalProperties": False
            }
        }
    }
}

SAVE_SCHEMA = {
    "type": "object",
    "required": ["version", "score", "current_level", "quests"],
    "properties": {
        "version": {"type": "integer", "minimum": 1},
        "saved_at": {"type": "string"},
        "score": {"type": "integer", "minimum": 0},
        "current_level": {"type": "integer", "minimum": 1},
        "has_seen_tour": {"type": "boolean"},
        "quests": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "is_unlocked", "is_completed"],
                "properties": {
                    "id": {"type": "integer"},
                    "is_unlocked": {"type": "boolean"},
                    "is_completed": {"type": "boolean"},
                    "completion_time": {"type": ["number", "null"]}
                }
            }
        }
    }
}
