from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from holdem.ai.bot import run_bots_until_hero
from holdem.engine import (
    Act,
    Action,
    Phase,
    TableConfig,
    TableState,
    DEFAULT_CONFIG,
    UNDO_LIMIT,
    apply_action,
    advance_if_round_complete,
    betting_round_complete,
    legal_actions,
    new_table,
    start_hand,
    to_call,
)
from holdem.engine.table import STREET_NAME
from holdem.helpers.cards import format_cards

logger = logging.getLogger(__name__)

ACT_NAME = {
    int(Act.FOLD): "fold",
    int(Act.CHECK): "check",
    int(Act.CALL): "call",
    int(Act.BET): "bet",
    int(Act.RAISE): "raise",
}

PHASE_NAME = {
    int(Phase.IDLE): "idle",
    int(Phase.PLAYING): "playing",
    int(Phase.COMPLETE): "complete",
}


def _jwrite(obj: Dict[str, Any]) -> None:
    sys.stdout.write(json.dumps(obj) + "\n")
    sys.stdout.flush()


def parse_command(raw: str) -> Optional[Tuple[str, Optional[int]]]:
    """'Raise 6' -> ('raise', 6); 'fold' -> ('fold', None); blank -> None."""
    parts = str(raw).strip().lower().split()
    if not parts:
        return None
    cmd = parts[0]
    amount: Optional[int] = None
    if len(parts) > 1:
        try:
            amount = int(float(parts[1]))
        except ValueError:
            amount = None
    return cmd, amount


def command_to_action(cmd: str, amount: Optional[int]) -> Optional[Action]:
    if cmd == "fold":
        return Action.fold()
    if cmd == "check":
        return Action.check()
    if cmd == "call":
        return Action.call()
    if cmd in ("bet", "raise") and amount is not None:
        return Action(Act.BET if cmd == "bet" else Act.RAISE, amount)
    return None


@dataclass
class Session:
    config: TableConfig
    rng: random.Random
    state: TableState
    undo: List[TableState] = field(default_factory=list)

    def push_undo(self) -> None:
        self.undo.append(self.state)
        if len(self.undo) > UNDO_LIMIT:
            self.undo.pop(0)

    def pop_undo(self) -> bool:
        if not self.undo:
            return False
        self.state = self.undo.pop()
        return True


SESSION: Optional[Session] = None


def new_session(seed: Optional[int] = None, config: TableConfig = DEFAULT_CONFIG) -> Session:
    return Session(config=config, rng=random.Random(seed), state=new_table(config))


def state_message(st: Session) -> Dict[str, Any]:
    s = st.state
    hero_seat = st.config.hero_seat
    hero = s.players[hero_seat]
    playing = s.phase == Phase.PLAYING
    return {
        "type": "state",
        "hand_id": s.hand_id,
        "phase": PHASE_NAME[int(s.phase)],
        "street": STREET_NAME[s.street],
        "pot": s.pot,
        "board": format_cards(s.board),
        "current_bet": s.current_bet,
        "min_raise_to": s.min_raise_to,
        "dealer": s.dealer,
        "to_act": s.players[s.to_act].position if playing else None,
        "hero_to_act": playing and s.to_act == hero_seat,
        "hero_hand": format_cards(hero.cards),
        "to_call": to_call(s, hero_seat) if playing else 0,
        "legal_actions": [ACT_NAME[int(a)] for a in legal_actions(s, hero_seat)],
        "players": [
            {
                "seat": p.seat,
                "position": p.position,
                "name": p.name,
                "stack": p.stack,
                "bet": p.bet,
                "in_hand": p.in_hand,
                "cards": format_cards(p.cards) if (p.is_hero or s.showdown) else "",
            }
            for p in s.players
        ],
        "winners": [s.players[w].position for w in s.winners],
        "payouts": list(s.payouts),
        "log": list(s.log),
        "undo_depth": len(st.undo),
    }


def _error(message: str, code: Optional[str] = None) -> Dict[str, Any]:
    out: Dict[str, Any] = {"type": "error", "message": message}
    if code is not None:
        out["code"] = code
    return out


def _deal(st: Session) -> List[Dict[str, Any]]:
    st.push_undo()
    prev = st.state
    st.state = start_hand(prev.dealer, st.config, st.rng, hand_id=prev.hand_id + 1)
    st.state = run_bots_until_hero(st.state, rng=st.rng)
    return [state_message(st)]


def _hero_action(st: Session, msg: Dict[str, Any]) -> List[Dict[str, Any]]:
    s = st.state
    if s.phase != Phase.PLAYING:
        return [_error("No hand in progress. Deal first.")]
    if s.to_act != st.config.hero_seat:
        return [_error("It is not your turn.")]

    if "cmd" in msg:
        parsed = parse_command(msg["cmd"])
    else:
        amount = msg.get("amount")
        parsed = (str(msg.get("act", "")).lower(), None if amount is None else int(amount))
    if parsed is None:
        return [_error("Empty command.")]

    cmd, amount = parsed
    action = command_to_action(cmd, amount)
    if action is None:
        if cmd in ("bet", "raise"):
            return [_error(f"Give a size, e.g. '{cmd} 6'.", "InvalidInput")]
        return [_error("Unknown command.", "InvalidInput")]

    res = apply_action(s, st.config.hero_seat, action)
    if not res.ok:
        return [_error(res.message, res.error.value), state_message(st)]

    st.push_undo()
    st.state = run_bots_until_hero(res.state, rng=st.rng)
    return [state_message(st)]


def _next_street(st: Session) -> List[Dict[str, Any]]:
    s = st.state
    if s.phase != Phase.PLAYING:
        return [_error("No hand in progress. Deal first.")]
    if not betting_round_complete(s):
        return [_error("Betting round is not complete yet. Finish action first.")]
    st.push_undo()
    st.state = run_bots_until_hero(advance_if_round_complete(s), rng=st.rng)
    return [state_message(st)]


def handle(msg: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Process one message and return the replies, in order."""
    global SESSION
    t = msg.get("type")

    if t == "reset" or SESSION is None:
        seed = msg.get("seed")
        SESSION = new_session(None if seed is None else int(seed))
        if t == "reset":
            return [state_message(SESSION)]

    st = SESSION

    if t == "deal":
        return _deal(st)
    if t == "action":
        return _hero_action(st, msg)
    if t == "next_street":
        return _next_street(st)
    if t == "undo":
        if not st.pop_undo():
            return [_error("Nothing to undo.")]
        return [state_message(st)]
    if t == "state":
        return [state_message(st)]

    return [_error(f"Unknown message type: {t}")]


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="JSON-lines practice table worker (stdin -> stdout)")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    # logs go to stderr so stdout stays pure JSON lines
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    global SESSION
    SESSION = new_session(args.seed)

    for line in sys.stdin:
        line = line.strip()
        if not line:
            continue
        try:
            for out in handle(json.loads(line)):
                _jwrite(out)
        except Exception as e:
            logger.exception("worker failed on message")
            _jwrite(_error(f"Worker exception: {e}"))


if __name__ == "__main__":
    main()
