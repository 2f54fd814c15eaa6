import random
from dataclasses import replace

import pytest

from holdem.engine import (
    DEFAULT_CONFIG,
    Act,
    Action,
    ActionError,
    Phase,
    StateError,
    Street,
    TableConfig,
    advance_if_round_complete,
    apply_action,
    betting_round_complete,
    is_terminal,
    legal_actions,
    new_table,
    raise_bounds,
    start_hand,
    to_call,
    total_chips,
)
from holdem.helpers.cards import parse_cards

TOTAL = DEFAULT_CONFIG.start_stack * DEFAULT_CONFIG.seats


def _hand(seed=1, prev_dealer=3):
    return start_hand(prev_dealer, DEFAULT_CONFIG, random.Random(seed))


def _act(state, action):
    res = apply_action(state, state.to_act, action)
    assert res.ok, res.message
    return res.state


def test_new_table_is_idle():
    t = new_table()
    assert t.phase == Phase.IDLE
    assert t.dealer == 3
    assert all(p.stack == 200 and not p.in_hand for p in t.players)


def test_start_hand_posts_blinds_and_sets_first_actor():
    s = _hand(prev_dealer=3)
    assert s.dealer == 4
    sb, bb = 5, 0
    assert s.players[sb].bet == 1 and s.players[sb].stack == 199
    assert s.players[bb].bet == 2 and s.players[bb].stack == 198
    assert s.pot == 3
    assert s.current_bet == 2
    assert s.min_raise_to == 4
    assert s.last_aggressor == bb
    assert s.to_act == 1
    assert s.phase == Phase.PLAYING and s.street == Street.PREFLOP
    assert total_chips(s) == TOTAL


def test_start_hand_deals_unique_cards_and_labels_positions():
    s = _hand(prev_dealer=5)
    assert s.dealer == 0
    seen = [c for p in s.players for c in p.cards] + list(s.deck)
    assert len(seen) == 52 and len(set(seen)) == 52
    assert s.players[0].position == "BTN"
    assert s.players[1].position == "SB"
    assert s.players[2].position == "BB"
    assert s.players[3].position == "UTG"


def test_start_hand_rejects_bad_dealer():
    with pytest.raises(StateError):
        start_hand(6, DEFAULT_CONFIG, random.Random(0))


def test_raise_too_small_then_min_raise():
    s = _hand()
    res = apply_action(s, s.to_act, Action.raise_to(3))
    assert res.error == ActionError.SIZE_TOO_SMALL
    assert res.state is s

    raiser = s.to_act
    s2 = _act(s, Action.raise_to(4))
    assert s2.current_bet == 4
    assert s2.min_raise_to == 6
    assert s2.last_aggressor == raiser
    assert all(not p.acted for p in s2.players if p.in_hand and p.seat != raiser)
    assert total_chips(s2) == TOTAL


def test_reraise_reopens_action_for_everyone_else():
    s = _hand()
    s = _act(s, Action.raise_to(6))          # UTG
    s = _act(s, Action.call())               # HJ
    caller = s.players[(s.to_act + 5) % 6].seat
    assert s.players[caller].acted
    s = _act(s, Action.raise_to(16))         # CO 3-bets
    assert s.min_raise_to == 26
    assert all(not p.acted for p in s.players if p.in_hand and p.seat != s.last_aggressor)


def test_below_current_bet_and_insufficient_stack():
    s = _hand()
    res = apply_action(s, s.to_act, Action.raise_to(2))
    assert res.error == ActionError.BELOW_CURRENT_BET
    res = apply_action(s, s.to_act, Action.raise_to(201))
    assert res.error == ActionError.INSUFFICIENT_STACK
    assert res.state is s


def test_illegal_check_and_nothing_to_call():
    s = _hand()
    res = apply_action(s, s.to_act, Action.check())
    assert res.error == ActionError.ILLEGAL_CHECK
    assert "call" in res.message

    # limp around to the big blind, who owes nothing
    for _ in range(4):
        s = _act(s, Action.call())
    s = _act(s, Action.call())                # SB completes
    bb = (s.dealer + 2) % 6
    assert s.to_act == bb
    assert to_call(s, bb) == 0
    res = apply_action(s, bb, Action.call())
    assert res.error == ActionError.NOTHING_TO_CALL
    assert Act.CHECK in legal_actions(s, bb)
    assert Act.CALL not in legal_actions(s, bb)


def test_out_of_turn_and_stale_state_raise():
    s = _hand()
    with pytest.raises(StateError):
        apply_action(s, (s.to_act + 1) % 6, Action.fold())
    with pytest.raises(StateError):
        apply_action(new_table(), 0, Action.fold())
    with pytest.raises(StateError):
        apply_action(s, 9, Action.fold())


def test_everyone_folds_to_big_blind():
    s = _hand()
    bb = (s.dealer + 2) % 6
    for _ in range(5):
        s = _act(s, Action.fold())
    assert is_terminal(s)
    assert s.street == Street.COMPLETE
    assert s.pot == 0
    assert s.winners == (bb,)
    assert s.payouts[bb] == 3
    assert s.players[bb].stack == 201
    assert total_chips(s) == TOTAL


def test_check_down_walks_every_street():
    s = _hand(seed=4)
    for _ in range(5):
        s = _act(s, Action.call())
    s = _act(s, Action.check())               # BB closes preflop
    assert s.street == Street.FLOP
    assert len(s.board) == 3
    assert s.current_bet == 0 and s.min_raise_to == 0
    assert s.to_act == (s.dealer + 1) % 6
    assert all(p.bet == 0 and not p.acted for p in s.players)

    for street, n_board in ((Street.TURN, 4), (Street.RIVER, 5)):
        for _ in range(6):
            s = _act(s, Action.check())
        assert s.street == street
        assert len(s.board) == n_board

    for _ in range(6):
        s = _act(s, Action.check())
    assert is_terminal(s)
    assert s.winners
    assert sum(s.payouts) == 12
    assert len(s.showdown) == 6
    assert total_chips(s) == TOTAL


def test_opening_bet_postflop():
    s = _hand(seed=2)
    for _ in range(5):
        s = _act(s, Action.call())
    s = _act(s, Action.check())
    assert raise_bounds(s, s.to_act) == (1, 198)
    res = apply_action(s, s.to_act, Action(Act.BET, 0))
    assert res.error == ActionError.SIZE_TOO_SMALL
    bettor = s.to_act
    s = _act(s, Action(Act.BET, 4))
    assert s.current_bet == 4
    assert s.min_raise_to == 8
    assert s.last_aggressor == bettor


def test_all_in_and_call_runs_out_the_board():
    s = _hand(seed=6)
    for _ in range(4):
        s = _act(s, Action.fold())
    assert s.to_act == (s.dealer + 1) % 6
    s = _act(s, Action.raise_to(200))         # SB shoves
    s = _act(s, Action.call())                # BB calls
    assert is_terminal(s)
    assert len(s.board) == 5
    assert sum(s.payouts) == 400
    assert total_chips(s) == TOTAL


def test_betting_round_complete_and_advance_noop():
    s = _hand()
    assert not betting_round_complete(s)
    assert advance_if_round_complete(s) is s


def _rigged(board, holes):
    """Hand heading to the river with fixed hole cards and board."""
    s = _hand(seed=8)
    players = tuple(
        replace(p, cards=tuple(parse_cards(holes[p.seat])) if p.seat in holes else p.cards, in_hand=p.seat in holes)
        for p in s.players
    )
    return replace(s, players=players, board=tuple(parse_cards(board[:4])), deck=tuple(parse_cards(board[4:])))


def test_showdown_split_pot_remainder_goes_left_of_dealer():
    s = _rigged(["As", "Ks", "Qd", "Jc", "Th"], {1: ["2c", "3d"], 2: ["4h", "5h"]})
    s = replace(s, street=Street.TURN, pot=7, current_bet=0, min_raise_to=0, to_act=1,
                players=tuple(replace(p, bet=0, acted=p.in_hand) for p in s.players))
    s = advance_if_round_complete(s)   # deals the river
    assert s.street == Street.RIVER
    s = _act(s, Action.check())
    s = _act(s, Action.check())
    assert is_terminal(s)
    assert set(s.winners) == {1, 2}
    # dealer is seat 4: seat 5 is first left, then 0, 1, 2
    assert s.payouts[1] == 4 and s.payouts[2] == 3


def test_custom_config_blinds():
    cfg = TableConfig(start_stack=100, small_blind=5, big_blind=10)
    s = start_hand(0, cfg, random.Random(0))
    assert s.current_bet == 10
    assert s.min_raise_to == 20
    assert total_chips(s) == 600
    with pytest.raises(ValueError):
        TableConfig(small_blind=3, big_blind=2)
