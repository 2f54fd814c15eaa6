from __future__ import annotations

import logging
import random
from bisect import bisect_left
from itertools import combinations
from typing import Callable, List, Optional, Sequence

from ..engine.table import (
    Act,
    Action,
    Phase,
    Street,
    TableState,
    apply_action,
    raise_bounds,
    to_call,
)
from ..helpers.cards import Card, build_deck

logger = logging.getLogger(__name__)

# Simple preflop open frequencies by position, just enough to feel alive
OPEN_FREQ = {
    "UTG": 0.18,
    "HJ": 0.22,
    "CO": 0.28,
    "BTN": 0.42,
    "SB": 0.38,
    "BB": 0.0,
}

RERAISE_TOP = 0.08      # top 8% of starting hands
RERAISE_FREQ = 0.55
CALL_TOP = 0.25
CALL_FREQ = 0.70

POSTFLOP_BET_FREQ = 0.25
POSTFLOP_CALL_FREQ = 0.55

Decider = Callable[[int, TableState, random.Random], Action]


def hole_strength(cards: Sequence[Card]) -> int:
    """Crude hole-card score: 2*high + low, plus pair/suited/connected/broadway bonuses."""
    c1, c2 = cards[0], cards[1]
    hi, lo = max(c1.val, c2.val), min(c1.val, c2.val)
    score = hi * 2 + lo
    if hi == lo:
        score += 20
    if c1.suit == c2.suit:
        score += 3
    if hi - lo == 1:
        score += 2
    if hi >= 12:
        score += 2
    return score


def _all_scores() -> List[int]:
    return sorted(hole_strength(h) for h in combinations(build_deck(), 2))


ALL_SCORES = _all_scores()  # 1326 starting combos, ascending


def preflop_percentile(cards: Sequence[Card]) -> float:
    """Fraction of all starting combos scoring at least as well as `cards` (AA ~ 0.005)."""
    score = hole_strength(cards)
    at_or_above = len(ALL_SCORES) - bisect_left(ALL_SCORES, score)
    return at_or_above / len(ALL_SCORES)


def _sized(state: TableState, seat: int, target: int) -> Action:
    """Clamp a raise-to target into the legal window, or fall back to call/check."""
    bounds = raise_bounds(state, seat)
    if bounds is None:
        return Action.call() if to_call(state, seat) > 0 else Action.check()
    lo, hi = bounds
    return Action(Act.BET if state.current_bet == 0 else Act.RAISE, min(max(target, lo), hi))


def _preflop(seat: int, state: TableState, rng: random.Random) -> Action:
    p = state.players[seat]
    bb = state.config.big_blind
    owed = to_call(state, seat)
    pct = preflop_percentile(p.cards)

    unopened = state.current_bet == bb and owed == bb
    if unopened:
        threshold = OPEN_FREQ.get(p.position, 0.0) * rng.uniform(0.8, 1.2)
        if pct <= threshold:
            # open to 2.5bb, vary slightly
            open_to = int(round(bb * 2.5)) + (1 if rng.random() < 0.2 else 0)
            return _sized(state, seat, open_to)
        return Action.fold()

    if owed > 0:
        if pct <= RERAISE_TOP and rng.random() < RERAISE_FREQ:
            return _sized(state, seat, state.current_bet + 4 * bb)
        if pct <= CALL_TOP and rng.random() < CALL_FREQ:
            return Action.call()
        return Action.fold()

    return Action.check()


def _postflop(seat: int, state: TableState, rng: random.Random) -> Action:
    if state.current_bet == 0:
        if rng.random() < POSTFLOP_BET_FREQ:
            target = max(state.config.big_blind, state.pot // 3)
            return _sized(state, seat, target)
        return Action.check()

    if to_call(state, seat) > 0:
        if rng.random() < POSTFLOP_CALL_FREQ:
            return Action.call()
        return Action.fold()

    return Action.check()


def decide(seat: int, state: TableState, rng: Optional[random.Random] = None) -> Action:
    """
    Heuristic bot decision for the seat to act. Not a solver: the only promise
    is that the returned action is legal for `state`.
    """
    rng = rng or random.Random()
    if state.street == Street.PREFLOP:
        return _preflop(seat, state, rng)
    return _postflop(seat, state, rng)


bot_action = decide


def run_bots_until_hero(
    state: TableState,
    hero_seat: Optional[int] = None,
    rng: Optional[random.Random] = None,
    decide_fn: Decider = decide,
    max_steps: int = 500,
) -> TableState:
    """
    Let bots act until the hero is to act or the hand is over.
    `hero_seat` defaults to the table's hero; pass -1 to let bots play every seat.
    """
    hero = state.config.hero_seat if hero_seat is None else hero_seat
    rng = rng or random.Random()

    steps = 0
    while state.phase == Phase.PLAYING and state.to_act != hero:
        seat = state.to_act
        action = decide_fn(seat, state, rng)
        res = apply_action(state, seat, action)
        if not res.ok:
            logger.warning(f"bot seat {seat} action {action} rejected ({res.error.value}); falling back")
            fallback = Action.check() if to_call(state, seat) == 0 else Action.fold()
            res = apply_action(state, seat, fallback)
        state = res.state

        steps += 1
        if steps > max_steps:
            raise RuntimeError("Safety stop: too many bot actions, betting is not advancing")
    return state
