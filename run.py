"""Text front-end for Quantum Link Quest.

Usage (example):
    python run.py
Then type commands:
    coins
    gate 1
    measure 1
"""
from __future__ import annotations
import sys
try:
    # Force UTF-8 output on Windows consoles
    sys.stdout.reconfigure(encoding='utf-8')
    sys.stderr.reconfigure(encoding='utf-8')
except Exception:
    pass
import difflib
from typing import Any, Dict, Optional
from quantumlab.bootstrap import create_engine, configure_logging
from quantumlink.core.persistence import SaveError, save_progress, load_progress, list_saves, format_save_age, DEFAULT_SLOT
from quantumlink import commands
from config import SKIP_TOUR, get_saves_dir

PROMPT = "> "

COMMAND_HELP = {
    'coins': {'usage': 'coins', 'desc': 'Shows every coin on the table and its links.'},
    'add': {'usage': 'add [p]', 'desc': 'Places a new coin (p = probability of Heads, default 1.0).'},
    'gate': {'usage': 'gate <n>', 'desc': 'Applies the H-Gate to coin n (toggles superposition).'},
    'measure': {'usage': 'measure <n>', 'desc': 'Measures coin n and collapses it.'},
    'entangle': {'usage': 'entangle <a> <b>', 'desc': 'Links two unmeasured coins.'},
    'quests': {'usage': 'quests', 'desc': 'Lists all quests with their status.'},
    'quest': {'usage': 'quest [id]', 'desc': 'Shows details of a quest (default: current).'},
    'play': {'usage': 'play <id>', 'desc': 'Loads an unlocked quest or replays a cleared one.'},
    'next': {'usage': 'next', 'desc': 'Moves on to the next quest.'},
    'reset': {'usage': 'reset', 'desc': 'Clears the table and places one fresh coin.'},
    'theory': {'usage': 'theory', 'desc': 'Explains the physics behind the current quest.'},
    'tour': {'usage': 'tour [next|end]', 'desc': 'Starts or steps through the guided tour.'},
    'save': {'usage': 'save [slot]', 'desc': 'Saves progress. Default: quicksave.'},
    'load': {'usage': 'load [slot]', 'desc': 'Loads saved progress. Default: quicksave.'},
    'saves': {'usage': 'saves', 'desc': 'Lists available save slots.'},
    'help': {'usage': 'help [command]', 'desc': 'Lists every command or shows detailed usage.'},
    'quit': {'usage': 'quit | exit', 'desc': 'Leaves the lab.'},
}

USAGE_ERRORS = {
    'gate': "Usage: gate <n>",
    'measure': "Usage: measure <n>",
    'entangle': "Usage: entangle <a> <b>",
    'play': "Usage: play <id>",
}


def help_lines():
    lines = ["Available commands:"]
    max_usage = max(len(info['usage']) for info in COMMAND_HELP.values())
    for name, info in COMMAND_HELP.items():
        usage = info['usage']
        desc = info['desc']
        lines.append(f" {usage.ljust(max_usage)}  - {desc}")
    return lines


def _lines(*lines: str) -> Dict[str, Any]:
    return {"lines": list(lines), "hints": [], "events_triggered": []}


def dispatch(engine, cmd: str) -> Optional[Dict[str, Any]]:
    """Run one command line against ``engine``.

    Returns the command result, or None for an empty line.

    Raises:
        SaveError: If saving or loading fails
    """
    parts = cmd.split()
    if not parts:
        return None
    name, args = parts[0].lower(), parts[1:]

    if name == "help":
        if not args:
            return _lines(*help_lines())
        info = COMMAND_HELP.get(args[0])
        if info:
            return _lines(f"Usage: {info['usage']}", info['desc'])
        close = difflib.get_close_matches(args[0], COMMAND_HELP.keys(), n=3)
        if close:
            return _lines(f"Command '{args[0]}' not found. Did you mean: {', '.join(close)}")
        return _lines(f"Command '{args[0]}' not found.")

    if name == "coins":
        return commands.coins_command(engine)
    if name == "add":
        return commands.add_command(engine, args[0] if args else None)
    if name == "gate":
        if len(args) != 1:
            return _lines(USAGE_ERRORS['gate'])
        return commands.gate_command(engine, args[0])
    if name == "measure":
        if len(args) != 1:
            return _lines(USAGE_ERRORS['measure'])
        return commands.measure_command(engine, args[0])
    if name == "entangle":
        if len(args) != 2:
            return _lines(USAGE_ERRORS['entangle'])
        return commands.entangle_command(engine, args[0], args[1])
    if name == "quests":
        return commands.quest_list_command(engine)
    if name == "quest":
        return commands.quest_detail_command(engine, args[0] if args else None)
    if name == "play":
        if len(args) != 1:
            return _lines(USAGE_ERRORS['play'])
        return commands.play_command(engine, args[0])
    if name == "next":
        return commands.next_command(engine)
    if name == "reset":
        return commands.reset_command(engine)
    if name == "theory":
        return commands.theory_command(engine)
    if name == "tour":
        return commands.tour_command(engine, args[0] if args else None)
    if name == "save":
        slot = args[0] if args else DEFAULT_SLOT
        path = save_progress(engine, get_saves_dir(), slot)
        return _lines(f"Progress saved to '{slot}' ({path}).")
    if name == "load":
        slot = args[0] if args else DEFAULT_SLOT
        load_progress(engine, get_saves_dir(), slot)
        return _lines(f"Progress loaded from '{slot}'. Level {engine.current_level}, score {engine.score}.")
    if name == "saves":
        saves = list_saves(get_saves_dir())
        if not saves:
            return _lines("No saves found.")
        lines = ["Available saves:"]
        for info in saves:
            if info.get("corrupted"):
                lines.append(f" {info['slot']} [corrupted]")
            else:
                lines.append(f" {info['slot']} - level {info['current_level']}, "
                             f"score {info['score']} ({format_save_age(info['modified'])})")
        return _lines(*lines)

    close = difflib.get_close_matches(name, COMMAND_HELP.keys(), n=3)
    if close:
        return _lines(f"Unknown command: '{name}'. Did you mean: {', '.join(close)}")
    return _lines(f"Unknown command: '{name}'. Type 'help' for the list or 'help <command>' for details.")


def print_result(res: Dict[str, Any]) -> None:
    for line in res["lines"]:
        print(line)
    for hint in res.get("hints", []):
        print(f"  (hint) {hint}")


def game_loop():
    engine = create_engine()
    print("-- Lab online. Type 'help' for the command list. --")
    if not SKIP_TOUR and not engine.has_seen_tour:
        print_result(commands.tour_command(engine))
    quest = engine.current_quest
    if quest is not None:
        print(f"Quest {quest.id}: {quest.title} - {quest.objective}")
    while True:
        try:
            cmd = input(PROMPT).strip()
        except EOFError:
            break
        if cmd in {"quit", "exit"}:
            print("Goodbye.")
            break
        try:
            res = dispatch(engine, cmd)
        except SaveError as e:
            print(f"[SAVE ERROR] {e}")
            continue
        if res is not None:
            print_result(res)


def main():
    configure_logging()
    title = " QUANTUM LINK QUEST "
    deco = "=" * len(title)
    print(deco)
    print(title)
    print(deco)
    game_loop()


if __name__ == "__main__":
    main()
