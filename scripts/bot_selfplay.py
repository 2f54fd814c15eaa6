# scripts/bot_selfplay.py
from __future__ import annotations

import argparse
import json
import logging
import random
import sys
import time
from collections import Counter
from typing import Any, Dict, List, Optional

from holdem.ai.bot import decide
from holdem.engine import (
    DEFAULT_CONFIG,
    Act,
    Phase,
    TableConfig,
    apply_action,
    start_hand,
    to_call,
    total_chips,
)
from holdem.engine.table import STREET_NAME
from holdem.helpers.cards import format_cards

logger = logging.getLogger(__name__)

ACT_NAME = {
    int(Act.FOLD): "FOLD",
    int(Act.CHECK): "CHECK",
    int(Act.CALL): "CALL",
    int(Act.BET): "BET",
    int(Act.RAISE): "RAISE",
}


def run_selfplay(hands: int, seed: int, config: TableConfig = DEFAULT_CONFIG) -> Dict[str, Any]:
    """
    Every seat is bot-driven. Each hand is checked for chip conservation and
    bot legality; a rejected bot action is a bug and raises.
    """
    rng = random.Random(seed)
    expected_chips = config.start_stack * config.seats

    dataset: Dict[str, Any] = {
        "meta": {
            "created_unix": time.time(),
            "seed": seed,
            "hands": hands,
            "seats": config.seats,
            "start_stack": config.start_stack,
            "blinds": [config.small_blind, config.big_blind],
        },
        "hands": [],
        "final": {},
    }

    net_by_position: Counter = Counter()
    showdowns = 0
    dealer = config.initial_dealer

    for hand_i in range(hands):
        state = start_hand(dealer, config, rng, hand_id=hand_i + 1)
        dealer = state.dealer

        hand_rec: Dict[str, Any] = {
            "hand_index": hand_i + 1,
            "dealer": state.players[dealer].position,
            "hole_cards": {p.position: format_cards(p.cards) for p in state.players},
            "actions": [],
            "terminal": {},
        }

        safety = 0
        while state.phase == Phase.PLAYING:
            seat = state.to_act
            action = decide(seat, state, rng)
            step = {
                "street_name": STREET_NAME[state.street],
                "position": state.players[seat].position,
                "pot": state.pot,
                "to_call": to_call(state, seat),
                "act_name": ACT_NAME[int(action.act)],
                "amount": action.amount,
            }
            res = apply_action(state, seat, action)
            if not res.ok:
                raise RuntimeError(f"hand {hand_i + 1}: bot produced illegal action {step} ({res.error.value})")
            state = res.state
            hand_rec["actions"].append(step)

            if total_chips(state) != expected_chips:
                raise RuntimeError(f"hand {hand_i + 1}: chips not conserved ({total_chips(state)})")

            safety += 1
            if safety > 200:
                hand_rec["terminal"] = {"error": "Safety stop: too many actions"}
                break

        if state.showdown:
            showdowns += 1
        for p in state.players:
            net_by_position[p.position] += p.stack - config.start_stack

        hand_rec["terminal"] = {
            "winners": [state.players[w].position for w in state.winners],
            "payouts": list(state.payouts),
            "board": format_cards(state.board),
            "showdown": bool(state.showdown),
        }
        dataset["hands"].append(hand_rec)
        logger.debug(f"hand {hand_i + 1}: {hand_rec['terminal']}")

    dataset["final"] = {
        "hands_played": len(dataset["hands"]),
        "showdowns": showdowns,
        "net_by_position": dict(net_by_position),
    }
    return dataset


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--hands", type=int, default=200)
    ap.add_argument("--seed", type=int, default=42)
    ap.add_argument("--out", type=str, default="selfplay_dataset.json")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    data = run_selfplay(hands=args.hands, seed=args.seed)

    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)

    print(f"Wrote {args.out} with {data['final']['hands_played']} hands.")
    print("Final:", data["final"])


if __name__ == "__main__":
    main()
