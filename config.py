"""Central configuration for Quantum Link Quest.

All tunable parameters of the lab (status message lifetime, random seed,
asset paths, save directory, log level) live here. Every value has a sane
default and can be overridden through environment variables.
"""
from __future__ import annotations
import os
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent


def _get_int_env(name: str, default: int | None, minval: int | None = None) -> int | None:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw)
        if minval is not None and v < minval:
            return default
        return v
    except ValueError:
        return default


def _get_float_env(name: str, default: float, minval: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = float(raw)
        if minval is not None and v < minval:
            return default
        return v
    except ValueError:
        return default


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    return val in {"1", "true", "yes", "on"}


# ---------------- Status message ----------------
# Seconds an advisory message stays visible before clearing itself
DEFAULT_STATUS_TTL_SECONDS: float = 3.0

ENV_STATUS_TTL = "QL_STATUS_TTL_SEC"


def get_status_ttl() -> float:
    """Return the status message lifetime in seconds.

    Order of precedence:
    1. QL_STATUS_TTL_SEC environment variable (if valid and >= 0)
    2. DEFAULT_STATUS_TTL_SECONDS
    """
    return _get_float_env(ENV_STATUS_TTL, DEFAULT_STATUS_TTL_SECONDS, minval=0.0)


# ---------------- Randomness ----------------

def get_seed() -> int | None:
    """Seed for the measurement random source. Var: QL_SEED (default: unseeded)."""
    return _get_int_env("QL_SEED", None)


# ---------------- Assets & saves ----------------

def get_quests_file() -> Path:
    """Quest definitions JSON. Var: QL_QUESTS_FILE."""
    return Path(os.getenv("QL_QUESTS_FILE", str(ROOT_DIR / "assets" / "quests.json")))


def get_tutorial_file() -> Path:
    """Guided tour steps JSON. Var: QL_TUTORIAL_FILE."""
    return Path(os.getenv("QL_TUTORIAL_FILE", str(ROOT_DIR / "assets" / "tutorial.json")))


def get_saves_dir() -> Path:
    """Directory holding save slots. Var: QL_SAVES_DIR (default data/saves)."""
    return Path(os.getenv("QL_SAVES_DIR", "data/saves"))


# ---------------- Logging & CLI ----------------

def get_log_level() -> str:
    """Root log level name. Var: QL_LOG_LEVEL (default WARNING)."""
    return os.getenv("QL_LOG_LEVEL", "WARNING").strip().upper()


# Skip the guided tour on CLI start
SKIP_TOUR: bool = _get_bool_env("QL_SKIP_TOUR", False)


__all__ = [
    "ROOT_DIR",
    # Status
    "DEFAULT_STATUS_TTL_SECONDS", "ENV_STATUS_TTL", "get_status_ttl",
    # Randomness
    "get_seed",
    # Assets
    "get_quests_file", "get_tutorial_file", "get_saves_dir",
    # Logging & CLI
    "get_log_level", "SKIP_TOUR",
]
