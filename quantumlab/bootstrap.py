"""Bootstrap utilities: load quest/tutorial JSON and create the engine."""
from __future__ import annotations
import logging
import random
from pathlib import Path
from quantumlink.engine import QuestStateEngine
from quantumlink.quest.loader import load_quests, load_tutorial
from config import get_quests_file, get_tutorial_file, get_seed, get_status_ttl, get_log_level


def configure_logging() -> None:
    level = getattr(logging, get_log_level(), logging.WARNING)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def create_engine(quests_file: Path | None = None, tutorial_file: Path | None = None,
                  seed: int | None = None) -> QuestStateEngine:
    quests = load_quests(quests_file or get_quests_file())
    # The tour is optional: a missing or broken file only disables it
    tutorial_path = tutorial_file or get_tutorial_file()
    try:
        steps = load_tutorial(tutorial_path)
    except (FileNotFoundError, ValueError) as e:
        logging.warning(f"Guided tour disabled: {e}")
        steps = []
    if seed is None:
        seed = get_seed()
    engine = QuestStateEngine(
        quests,
        tutorial_steps=steps,
        rng=random.Random(seed),
        status_ttl=get_status_ttl(),
    )
    engine.load_quest(engine.current_level)
    logging.info(f"Loaded {len(quests)} quests and {len(steps)} tour steps.")
    return engine
