"""Command handlers for the text front-end.

Each handler takes the engine plus parsed arguments and returns the usual
command result dictionary (``lines``, ``hints``, ``events_triggered``).
Coins are addressed by their 1-based position on the table.
"""

from typing import Any, Dict, List, Optional
from .engine import QuestStateEngine

def _result(lines: List[str], hints: Optional[List[str]] = None, events: Optional[List[str]] = None) -> Dict[str, Any]:
    return {"lines": lines, "hints": hints or [], "events_triggered": events or []}

def _position(value: str) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None

def _not_a_coin(value: str) -> Dict[str, Any]:
    return _result([f"'{value}' is not a coin number."], hints=["coins lists the table with its numbers."])

def _after_action(engine: QuestStateEngine, lines: List[str], popup_before: bool) -> Dict[str, Any]:
    """Append rejection and completion feedback shared by all coin actions."""
    events = []
    if engine.last_error is not None:
        lines.append(f"! {engine.last_error}")
        events.append("action_rejected")
    if engine.show_level_up_popup and not popup_before:
        lines.append(f"*** {engine.popup_title} ***")
        lines.append(engine.popup_message)
        lines.append(f"Score: {engine.score}. Type 'next' to continue.")
        events.append("quest_completed")
    return _result(lines, events=events)

def coins_command(engine: QuestStateEngine) -> Dict[str, Any]:
    """Handle 'coins': describe every coin on the table."""
    if not engine.coins:
        return _result(["The table is empty."], hints=["add [p] puts a new coin down."])
    positions = {c.id: i + 1 for i, c in enumerate(engine.coins)}
    lines = []
    for i, coin in enumerate(engine.coins, start=1):
        line = f" #{i} {coin.face()}"
        if coin.partner_id is not None and coin.partner_id in positions:
            line += f"  <-> #{positions[coin.partner_id]}"
        lines.append(line)
    lines.append(f"Entangle: {engine.entangle_status()}")
    return _result(lines)

def add_command(engine: QuestStateEngine, probability: Optional[str] = None) -> Dict[str, Any]:
    """Handle 'add [p]'."""
    try:
        p = float(probability) if probability is not None else 1.0
    except ValueError:
        return _result([f"'{probability}' is not a probability."])
    popup_before = engine.show_level_up_popup
    coin_id = engine.add_coin(p)
    lines = [] if coin_id is None else [f"Coin #{len(engine.coins)} placed on the table."]
    return _after_action(engine, lines, popup_before)

def gate_command(engine: QuestStateEngine, position: str) -> Dict[str, Any]:
    """Handle 'gate <n>'."""
    n = _position(position)
    if n is None:
        return _not_a_coin(position)
    popup_before = engine.show_level_up_popup
    lines = []
    coin_id = engine.coin_at(n, "apply_gate")
    if coin_id is not None and engine.apply_gate(coin_id):
        coin = engine.coin(coin_id)
        state = "superposition" if coin.is_superposed else "deterministic Heads"
        lines.append(f"H gate applied to #{n}: now in {state}.")
    return _after_action(engine, lines, popup_before)

def measure_command(engine: QuestStateEngine, position: str) -> Dict[str, Any]:
    """Handle 'measure <n>'."""
    n = _position(position)
    if n is None:
        return _not_a_coin(position)
    popup_before = engine.show_level_up_popup
    coin_id = engine.coin_at(n, "measure")
    if coin_id is None:
        return _after_action(engine, [], popup_before)
    coin = engine.coin(coin_id)
    already = coin.is_measured
    partner_open = coin.partner_id is not None and any(
        c.id == coin.partner_id and not c.is_measured for c in engine.coins
    )
    result = engine.measure(coin_id)
    lines = []
    if result is not None:
        face = "Heads" if result else "Tails"
        if already:
            lines.append(f"#{n} was already measured: {face}.")
        else:
            lines.append(f"#{n} collapsed to {face}.")
            if partner_open:
                lines.append("Its entangled partner collapsed to the same face.")
    return _after_action(engine, lines, popup_before)

def entangle_command(engine: QuestStateEngine, first: str, second: str) -> Dict[str, Any]:
    """Handle 'entangle <a> <b>'."""
    pa, pb = _position(first), _position(second)
    if pa is None or pb is None:
        return _not_a_coin(first if pa is None else second)
    popup_before = engine.show_level_up_popup
    lines = []
    a = engine.coin_at(pa, "entangle")
    b = engine.coin_at(pb, "entangle") if a is not None else None
    if a is not None and b is not None and engine.entangle(a, b):
        lines.append(f"#{pa} and #{pb} are now entangled (p = 0.5).")
    return _after_action(engine, lines, popup_before)

def quest_list_command(engine: QuestStateEngine) -> Dict[str, Any]:
    """Handle 'quests'."""
    lines = engine.quest_log.get_journal_entries(engine.current_level)
    lines.append(f"Score: {engine.score}")
    return _result(lines)

def quest_detail_command(engine: QuestStateEngine, quest_id: Optional[str] = None) -> Dict[str, Any]:
    """Handle 'quest [id]', defaulting to the current quest."""
    try:
        qid = int(quest_id) if quest_id is not None else engine.current_level
    except ValueError:
        return _result([f"'{quest_id}' is not a quest number."])
    quest = engine.quest_log.get_quest(qid)
    if quest is None:
        return _result([f"Quest {qid} not found."])
    if not quest.is_unlocked:
        return _result([f"Quest {qid} is locked. Clear the previous quest first."])

    lines = [f"=== {quest.id}. {quest.title} ==="]
    lines.append(f"Status: {quest.state}")
    if quest.formatted_time:
        lines.append(f"Cleared in: {quest.formatted_time}")
    lines.append(quest.theory_text)
    lines.append(f"\nObjective: {quest.objective}")
    hints = [quest.hint] if quest.hint else []
    return _result(lines, hints=hints)

def play_command(engine: QuestStateEngine, quest_id: str) -> Dict[str, Any]:
    """Handle 'play <id>': load or replay a quest."""
    try:
        qid = int(quest_id)
    except ValueError:
        return _result([f"'{quest_id}' is not a quest number."])
    if not engine.load_quest(qid):
        return _result([f"! {engine.last_error}"], events=["action_rejected"])
    quest = engine.current_quest
    label = "Replaying" if quest.is_completed else "Now playing"
    return _result([f"{label}: {quest.id}. {quest.title}", f"Objective: {quest.objective}"],
                   events=["quest_loaded"])

def next_command(engine: QuestStateEngine) -> Dict[str, Any]:
    """Handle 'next': close the completion popup and move on."""
    if engine.show_level_up_popup:
        before = engine.current_level
        engine.dismiss_popup()
        if engine.current_level == before:
            return _result(["All quests cleared. Replay any of them with 'play <id>'."])
    elif not engine.advance_level():
        current = engine.current_quest
        if current is None or engine.quest_log.next_after(current) is None:
            return _result(["No further quest."])
        return _result([f"! {engine.last_error}"], events=["action_rejected"])
    quest = engine.current_quest
    return _result([f"Now playing: {quest.id}. {quest.title}", f"Objective: {quest.objective}"],
                   events=["quest_loaded"])

def reset_command(engine: QuestStateEngine) -> Dict[str, Any]:
    """Handle 'reset': clear the table and put one coin back."""
    engine.reset_coins()
    engine.add_coin()
    return _result(["Table cleared. One deterministic coin placed."])

THEORY_CARDS = {
    "superposition": (
        "Superposition",
        "Unlike normal bits, a qubit sits in a blur of Heads and Tails until you measure it.",
    ),
    "collapse": (
        "Wave Function Collapse",
        "Observing a quantum system forces it to pick a definite state. You cannot un-measure a qubit.",
    ),
    "entanglement": (
        "Quantum Entanglement",
        "Entangled coins share one state: measuring one instantly fixes the other.",
    ),
}

def theory_command(engine: QuestStateEngine) -> Dict[str, Any]:
    """Handle 'theory': current quest focus plus the relevant theory cards."""
    lines = []
    quest = engine.current_quest
    if quest is not None:
        lines.append(f"CURRENT MISSION FOCUS - STEP {quest.id}: {quest.title.upper()}")
        lines.append(quest.theory_text)
    for key, active in engine.theory_topics().items():
        title, body = THEORY_CARDS[key]
        marker = "*" if active else " "
        lines.append(f"\n{marker} {title}\n  {body}")
    hints = [quest.hint] if quest is not None and quest.hint else []
    return _result(lines, hints=hints)

def tour_command(engine: QuestStateEngine, action: Optional[str] = None) -> Dict[str, Any]:
    """Handle 'tour [next|end]'."""
    if action == "end":
        engine.end_tutorial()
        return _result(["Tour closed."])
    if action == "next":
        engine.next_tutorial_step()
    elif not engine.is_tutorial_active:
        engine.start_tutorial()

    step = engine.tutorial_step
    if step is None:
        return _result(["Tour finished. Type 'help' for the command list."])
    n = engine.current_tutorial_step + 1
    total = len(engine.tutorial_steps)
    return _result([f"[{n}/{total}] {step.title}", step.message],
                   hints=["tour next | tour end"])
