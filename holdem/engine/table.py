from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import List, Optional, Tuple

from ..helpers.cards import Card, build_deck, format_cards, shuffle
from ..helpers.evaluator import HandValue, evaluate_cards
from .config import DEFAULT_CONFIG, TableConfig

logger = logging.getLogger(__name__)


class Phase(IntEnum):
    IDLE = 0
    PLAYING = 1
    COMPLETE = 2


class Street(IntEnum):
    PREFLOP = 0
    FLOP = 1
    TURN = 2
    RIVER = 3
    COMPLETE = 4


class Act(IntEnum):
    FOLD = 0
    CHECK = 1
    CALL = 2
    BET = 3
    RAISE = 4


class ActionError(str, Enum):
    ILLEGAL_CHECK = "IllegalCheck"
    NOTHING_TO_CALL = "NothingToCall"
    SIZE_TOO_SMALL = "SizeTooSmall"
    BELOW_CURRENT_BET = "BelowCurrentBet"
    INSUFFICIENT_STACK = "InsufficientStack"


class StateError(ValueError):
    """The action API was used against a state it does not apply to."""


STREET_NAME = {
    Street.PREFLOP: "PREFLOP",
    Street.FLOP: "FLOP",
    Street.TURN: "TURN",
    Street.RIVER: "RIVER",
    Street.COMPLETE: "COMPLETE",
}


@dataclass(frozen=True, slots=True)
class Action:
    act: int
    amount: int = 0  # raise-to target for BET / RAISE, ignored otherwise

    @staticmethod
    def fold() -> "Action":
        return Action(Act.FOLD)

    @staticmethod
    def check() -> "Action":
        return Action(Act.CHECK)

    @staticmethod
    def call() -> "Action":
        return Action(Act.CALL)

    @staticmethod
    def raise_to(target: int) -> "Action":
        return Action(Act.RAISE, int(target))


@dataclass(frozen=True, slots=True)
class PlayerState:
    seat: int
    position: str
    name: str
    is_hero: bool
    stack: int
    bet: int = 0               # committed on the current street
    in_hand: bool = True
    acted: bool = False
    cards: Tuple[Card, ...] = ()

    @property
    def can_act(self) -> bool:
        return self.in_hand and self.stack > 0


@dataclass(frozen=True, slots=True)
class TableState:
    """
    One hand of a 6-max table. Never mutated; every transition returns a new state.

    Chips are conserved: sum of stacks + pot is constant for the hand's lifetime.
    """
    players: Tuple[PlayerState, ...]
    config: TableConfig = DEFAULT_CONFIG
    phase: int = Phase.IDLE
    street: int = Street.PREFLOP
    pot: int = 0
    board: Tuple[Card, ...] = ()
    deck: Tuple[Card, ...] = ()
    current_bet: int = 0
    min_raise_to: int = 0
    dealer: int = 0
    to_act: int = 0
    last_aggressor: Optional[int] = None
    hand_id: int = 0
    log: Tuple[str, ...] = ()

    # filled once the hand is complete
    winners: Tuple[int, ...] = ()
    payouts: Tuple[int, ...] = ()
    showdown: Tuple[Tuple[int, HandValue], ...] = ()

    def player(self, seat: int) -> PlayerState:
        return self.players[seat]

    @property
    def active(self) -> List[PlayerState]:
        return [p for p in self.players if p.in_hand]

    @property
    def seats(self) -> int:
        return len(self.players)


@dataclass(frozen=True, slots=True)
class ActionResult:
    state: TableState
    error: Optional[ActionError] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None


# ---------------- small state helpers ----------------

def _with_player(state: TableState, seat: int, **changes) -> TableState:
    players = list(state.players)
    players[seat] = replace(players[seat], **changes)
    return replace(state, players=tuple(players))


def _log(state: TableState, line: str) -> TableState:
    logger.debug(f"hand {state.hand_id}: {line}")
    return replace(state, log=state.log + (line,))


def _next_actor(state: TableState, from_seat: int) -> Optional[int]:
    """Walk forward seat by seat, skipping folded and all-in seats."""
    n = state.seats
    for i in range(1, n + 1):
        s = (from_seat + i) % n
        if state.players[s].can_act:
            return s
    return None


def _first_actor_postflop(state: TableState) -> int:
    sb = (state.dealer + 1) % state.seats
    if state.players[sb].can_act:
        return sb
    nxt = _next_actor(state, sb)
    if nxt is not None:
        return nxt
    # nobody can act (everyone all-in); park on the first live seat
    for i in range(state.seats):
        s = (sb + i) % state.seats
        if state.players[s].in_hand:
            return s
    return sb


def _count_can_act(state: TableState) -> int:
    return sum(1 for p in state.players if p.can_act)


def to_call(state: TableState, seat: int) -> int:
    return max(0, state.current_bet - state.players[seat].bet)


def total_chips(state: TableState) -> int:
    return sum(p.stack for p in state.players) + state.pot


def is_terminal(state: TableState) -> bool:
    return state.phase == Phase.COMPLETE


def raise_bounds(state: TableState, seat: int) -> Optional[Tuple[int, int]]:
    """(min, max) legal raise-to targets for `seat`, or None if it cannot bet or raise."""
    p = state.players[seat]
    if state.current_bet == 0:
        lo = 1
    else:
        lo = max(state.min_raise_to, state.current_bet + 1)
    hi = p.bet + p.stack
    if lo > hi:
        return None
    return lo, hi


def legal_actions(state: TableState, seat: int) -> List[int]:
    if state.phase != Phase.PLAYING or seat != state.to_act:
        return []
    p = state.players[seat]
    if not p.in_hand:
        return []
    owed = to_call(state, seat)
    acts = [Act.FOLD]
    if owed == 0:
        acts.append(Act.CHECK)
    elif p.stack > 0:
        acts.append(Act.CALL)
    if raise_bounds(state, seat) is not None:
        acts.append(Act.BET if state.current_bet == 0 else Act.RAISE)
    return acts


# ---------------- hand lifecycle ----------------

def new_table(config: TableConfig = DEFAULT_CONFIG) -> TableState:
    """Idle table: nobody has cards, the button sits on `config.initial_dealer`."""
    dealer = config.initial_dealer
    players = tuple(
        PlayerState(
            seat=s,
            position=config.position_of(s, dealer),
            name="You" if s == config.hero_seat else f"Bot {config.position_of(s, dealer)}",
            is_hero=s == config.hero_seat,
            stack=config.start_stack,
            in_hand=False,
        )
        for s in range(config.seats)
    )
    return TableState(players=players, config=config, dealer=dealer, to_act=config.hero_seat)


def _post_blind(state: TableState, seat: int, amount: int) -> TableState:
    p = state.players[seat]
    blind = min(amount, p.stack)
    state = _with_player(state, seat, stack=p.stack - blind, bet=p.bet + blind)
    return replace(state, pot=state.pot + blind)


def start_hand(
    previous_dealer_seat: int,
    config: TableConfig = DEFAULT_CONFIG,
    rng: Optional[random.Random] = None,
    hand_id: int = 1,
) -> TableState:
    """
    Deal a fresh hand with the button moved one seat from `previous_dealer_seat`.
    Stacks reset to the starting stack; there is no chip carry-over between hands.
    """
    n = config.seats
    if not (0 <= previous_dealer_seat < n):
        raise StateError(f"dealer seat out of range: {previous_dealer_seat}")

    dealer = (previous_dealer_seat + 1) % n
    deck = shuffle(build_deck(), rng)

    players = []
    for s in range(n):
        pos = config.position_of(s, dealer)
        players.append(
            PlayerState(
                seat=s,
                position=pos,
                name="You" if s == config.hero_seat else f"Bot {pos}",
                is_hero=s == config.hero_seat,
                stack=config.start_stack,
                cards=(deck.pop(), deck.pop()),
            )
        )

    state = TableState(
        players=tuple(players),
        config=config,
        phase=Phase.PLAYING,
        street=Street.PREFLOP,
        deck=tuple(deck),
        dealer=dealer,
        hand_id=hand_id,
    )

    sb_seat = (dealer + 1) % n
    bb_seat = (dealer + 2) % n
    state = _post_blind(state, sb_seat, config.small_blind)
    state = _post_blind(state, bb_seat, config.big_blind)

    first = _next_actor(state, bb_seat)
    state = replace(
        state,
        current_bet=config.big_blind,
        min_raise_to=config.big_blind * 2,
        last_aggressor=bb_seat,
        to_act=bb_seat if first is None else first,
    )

    logger.info(f"hand {hand_id} dealt, dealer seat {dealer}")
    state = _log(state, f"Hand #{hand_id} | Dealer: {state.players[dealer].position}")
    return _log(state, f"Blinds: SB {config.small_blind}, BB {config.big_blind}")


# ---------------- actions ----------------

def _fold(state: TableState, p: PlayerState):
    state = _with_player(state, p.seat, in_hand=False, acted=True)
    return _log(state, f"{p.position} folds"), None, ""


def _check(state: TableState, p: PlayerState):
    owed = to_call(state, p.seat)
    if owed > 0:
        return state, ActionError.ILLEGAL_CHECK, f"Illegal check (facing {owed} to call)."
    state = _with_player(state, p.seat, acted=True)
    return _log(state, f"{p.position} checks"), None, ""


def _call(state: TableState, p: PlayerState):
    owed = to_call(state, p.seat)
    if owed <= 0 or p.stack <= 0:
        return state, ActionError.NOTHING_TO_CALL, "Nothing to call."
    amt = min(owed, p.stack)
    state = _with_player(state, p.seat, stack=p.stack - amt, bet=p.bet + amt, acted=True)
    state = replace(state, pot=state.pot + amt)
    suffix = " (all-in)" if amt == p.stack else ""
    return _log(state, f"{p.position} calls {amt}{suffix}"), None, ""


def _bet_or_raise_to(state: TableState, p: PlayerState, target: int):
    is_bet = state.current_bet == 0
    if is_bet:
        if target < 1:
            return state, ActionError.SIZE_TOO_SMALL, "Bet too small."
    else:
        if target <= state.current_bet:
            return state, ActionError.BELOW_CURRENT_BET, f"Size must be above the current bet of {state.current_bet}."
        if target < state.min_raise_to:
            return state, ActionError.SIZE_TOO_SMALL, f"Raise too small. Min raise-to is {state.min_raise_to}."

    diff = target - p.bet
    if diff > p.stack:
        return state, ActionError.INSUFFICIENT_STACK, "Not enough chips."

    prev_bet = state.current_bet
    state = _with_player(state, p.seat, stack=p.stack - diff, bet=target, acted=True)

    # everyone else still in the hand must act again
    players = tuple(
        replace(x, acted=False) if (x.in_hand and x.seat != p.seat) else x
        for x in state.players
    )
    state = replace(
        state,
        players=players,
        pot=state.pot + diff,
        current_bet=target,
        min_raise_to=target + (target - prev_bet),
        last_aggressor=p.seat,
    )
    verb = "bets" if is_bet else "raises to"
    suffix = " (all-in)" if diff == p.stack else ""
    return _log(state, f"{p.position} {verb} {target}{suffix}"), None, ""


def apply_action(state: TableState, seat: int, action: Action) -> ActionResult:
    """
    Apply one action for the seat to act. Illegal sizes/actions come back as an
    ActionResult carrying the unchanged state; misuse of the API raises StateError.
    """
    if state.phase != Phase.PLAYING:
        raise StateError("no hand in progress")
    if not (0 <= seat < state.seats):
        raise StateError(f"seat out of range: {seat}")
    if seat != state.to_act:
        raise StateError(f"seat {seat} acted out of turn; seat {state.to_act} is to act")
    p = state.players[seat]
    if not p.in_hand:
        raise StateError(f"seat {seat} is not in the hand")

    act = action.act
    if act == Act.FOLD:
        new_state, err, msg = _fold(state, p)
    elif act == Act.CHECK:
        new_state, err, msg = _check(state, p)
    elif act == Act.CALL:
        new_state, err, msg = _call(state, p)
    elif act in (Act.BET, Act.RAISE):
        new_state, err, msg = _bet_or_raise_to(state, p, int(action.amount))
    else:
        raise StateError(f"unknown action {act!r}")

    if err is not None:
        logger.debug(f"hand {state.hand_id}: seat {seat} rejected ({err.value}): {msg}")
        return ActionResult(state=state, error=err, message=msg)
    return ActionResult(state=_step(new_state, seat))


def _step(state: TableState, seat: int) -> TableState:
    if len(state.active) <= 1 or betting_round_complete(state):
        return advance_if_round_complete(state)
    nxt = _next_actor(state, seat)
    return replace(state, to_act=seat if nxt is None else nxt)


# ---------------- round / street progression ----------------

def betting_round_complete(state: TableState) -> bool:
    actives = state.active
    if len(actives) <= 1:
        return True
    return all(p.stack == 0 or (p.acted and p.bet == state.current_bet) for p in actives)


def _award_uncontested(state: TableState) -> TableState:
    winner = state.active[0]
    pot = state.pot
    payouts = [0] * state.seats
    payouts[winner.seat] = pot
    state = _with_player(state, winner.seat, stack=winner.stack + pot)
    state = replace(
        state,
        pot=0,
        phase=Phase.COMPLETE,
        street=Street.COMPLETE,
        winners=(winner.seat,),
        payouts=tuple(payouts),
    )
    logger.info(f"hand {state.hand_id} complete: seat {winner.seat} wins {pot} uncontested")
    return _log(state, f"{winner.position} wins {pot} (everyone folded)")


def _showdown(state: TableState) -> TableState:
    n = state.seats
    state = _log(state, "SHOWDOWN")

    values = {}
    for p in state.active:
        v = evaluate_cards(list(p.cards) + list(state.board))
        values[p.seat] = v
        state = _log(state, f"{p.position} shows {format_cards(p.cards)} ({v.name})")

    best = max(values.values())
    # seat order starting left of the dealer decides who gets odd chips
    order = [(state.dealer + 1 + i) % n for i in range(n)]
    win_seats = [s for s in order if s in values and values[s] == best]

    share, remainder = divmod(state.pot, len(win_seats))
    payouts = [0] * n
    for i, s in enumerate(win_seats):
        payouts[s] = share + (1 if i < remainder else 0)

    players = tuple(replace(p, stack=p.stack + payouts[p.seat]) for p in state.players)
    state = replace(
        state,
        players=players,
        pot=0,
        phase=Phase.COMPLETE,
        street=Street.COMPLETE,
        winners=tuple(win_seats),
        payouts=tuple(payouts),
        showdown=tuple(sorted(values.items())),
    )
    for s in win_seats:
        state = _log(state, f"{state.players[s].position} wins {payouts[s]} with {best.name}")
    logger.info(f"hand {state.hand_id} complete at showdown: winners {win_seats}")
    return state


def _next_street(state: TableState) -> TableState:
    if state.street >= Street.RIVER:
        return _showdown(state)

    nxt = Street(state.street + 1)
    deck = list(state.deck)
    n_cards = 3 if nxt == Street.FLOP else 1
    board = state.board + tuple(deck.pop() for _ in range(n_cards))

    players = tuple(replace(p, bet=0, acted=False) for p in state.players)
    state = replace(
        state,
        players=players,
        street=nxt,
        board=board,
        deck=tuple(deck),
        current_bet=0,
        min_raise_to=0,
        last_aggressor=None,
    )
    state = replace(state, to_act=_first_actor_postflop(state))
    return _log(state, f"{STREET_NAME[nxt]}: {format_cards(board)}")


def advance_if_round_complete(state: TableState) -> TableState:
    """
    Close the betting round if it is finished: award an uncontested pot, deal the
    next street, or go to showdown after the river. Otherwise return `state` as is.
    """
    if state.phase != Phase.PLAYING:
        return state
    if len(state.active) <= 1:
        return _award_uncontested(state)
    if not betting_round_complete(state):
        return state

    state = _next_street(state)
    # with at most one player able to bet there is no more action: run it out
    while state.phase == Phase.PLAYING and _count_can_act(state) <= 1:
        state = _next_street(state)
    return state
