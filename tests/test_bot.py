import random
from collections import Counter
from dataclasses import replace

from holdem.ai.bot import (
    ALL_SCORES,
    bot_action,
    decide,
    hole_strength,
    preflop_percentile,
    run_bots_until_hero,
)
from holdem.engine import (
    DEFAULT_CONFIG,
    Act,
    Action,
    Phase,
    apply_action,
    legal_actions,
    raise_bounds,
    start_hand,
    total_chips,
)
from holdem.helpers.cards import parse_cards

TOTAL = DEFAULT_CONFIG.start_stack * DEFAULT_CONFIG.seats


def test_hole_strength_scores():
    assert hole_strength(parse_cards("AhAd")) == 14 * 2 + 14 + 20 + 2
    assert hole_strength(parse_cards("KhQh")) == 13 * 2 + 12 + 3 + 2 + 2
    assert hole_strength(parse_cards("7c2d")) == 7 * 2 + 2


def test_percentile_table():
    assert len(ALL_SCORES) == 1326
    aa = preflop_percentile(parse_cards("AsAc"))
    trash = preflop_percentile(parse_cards("7c2d"))
    assert aa < 0.01
    assert trash > 0.9
    assert preflop_percentile(parse_cards("2c3d")) == 1.0


def test_alias():
    assert bot_action is decide


def _is_legal(state, seat, action):
    acts = legal_actions(state, seat)
    if action.act in (Act.BET, Act.RAISE):
        bounds = raise_bounds(state, seat)
        return bounds is not None and bounds[0] <= action.amount <= bounds[1]
    return action.act in acts


def test_bot_actions_always_legal_and_chips_conserved():
    rng = random.Random(2024)
    dealer = DEFAULT_CONFIG.initial_dealer
    for hand_id in range(1, 151):
        s = start_hand(dealer, DEFAULT_CONFIG, rng, hand_id=hand_id)
        dealer = s.dealer
        steps = 0
        while s.phase == Phase.PLAYING:
            seat = s.to_act
            action = decide(seat, s, rng)
            assert _is_legal(s, seat, action), (action, s.log)
            res = apply_action(s, seat, action)
            assert res.ok, res.message
            s = res.state
            assert total_chips(s) == TOTAL
            steps += 1
            assert steps < 200
        assert s.pot == 0
        assert sum(s.payouts) > 0


def _with_cards(state, seat, cards):
    players = list(state.players)
    players[seat] = replace(players[seat], cards=tuple(parse_cards(cards)))
    return replace(state, players=tuple(players))


def test_utg_always_opens_aces_and_folds_seven_deuce():
    counts = Counter()
    rng = random.Random(5)
    s = start_hand(3, DEFAULT_CONFIG, random.Random(0))
    utg = s.to_act
    aces = _with_cards(s, utg, "AsAc")
    trash = _with_cards(s, utg, "7c2d")
    for _ in range(300):
        a = decide(utg, aces, rng)
        counts[a.act] += 1
        assert a.amount in (5, 6)
        assert decide(utg, trash, rng).act == Act.FOLD
    assert counts[Act.RAISE] == 300


def test_open_frequency_tracks_position():
    rng = random.Random(9)
    opens = Counter()
    for i in range(600):
        s = start_hand(3, DEFAULT_CONFIG, random.Random(i))
        utg = s.to_act
        if decide(utg, s, rng).act == Act.RAISE:
            opens["UTG"] += 1
        s = apply_action(s, utg, Action.fold()).state
        s = apply_action(s, s.to_act, Action.fold()).state
        s = apply_action(s, s.to_act, Action.fold()).state
        btn = s.to_act
        assert s.players[btn].position == "BTN"
        if decide(btn, s, rng).act == Act.RAISE:
            opens["BTN"] += 1
    # UTG opens ~18%, BTN ~42% of hands
    assert 0.08 < opens["UTG"] / 600 < 0.28
    assert 0.30 < opens["BTN"] / 600 < 0.55
    assert opens["BTN"] > opens["UTG"]


def test_bot_with_no_legal_raise_calls_instead():
    s = start_hand(3, DEFAULT_CONFIG, random.Random(1))
    s = apply_action(s, s.to_act, Action.raise_to(200)).state  # UTG shoves
    seat = s.to_act
    assert raise_bounds(s, seat) is None
    s = _with_cards(s, seat, "AhAd")
    rng = random.Random(0)
    acts = {decide(seat, s, rng).act for _ in range(50)}
    assert acts <= {Act.FOLD, Act.CALL}
    assert Act.CALL in acts


def test_run_bots_until_hero_stops_at_hero_or_end():
    rng = random.Random(77)
    hero = DEFAULT_CONFIG.hero_seat
    for i in range(40):
        s = start_hand(i % 6, DEFAULT_CONFIG, rng, hand_id=i + 1)
        s = run_bots_until_hero(s, rng=rng)
        assert s.phase == Phase.COMPLETE or s.to_act == hero
        assert total_chips(s) == TOTAL


def test_run_bots_all_seats_finishes_the_hand():
    rng = random.Random(3)
    s = start_hand(0, DEFAULT_CONFIG, rng)
    s = run_bots_until_hero(s, hero_seat=-1, rng=rng)
    assert s.phase == Phase.COMPLETE


def test_rejected_bot_action_falls_back(caplog):
    def always_bad(seat, state, rng):
        return Action.raise_to(1)

    s = start_hand(3, DEFAULT_CONFIG, random.Random(0))
    with caplog.at_level("WARNING"):
        s = run_bots_until_hero(s, hero_seat=-1, rng=random.Random(0), decide_fn=always_bad)
    # preflop everyone owes chips, so the fallback folds it down to the big blind
    assert s.phase == Phase.COMPLETE
    assert s.winners == ((s.dealer + 2) % 6,)
    assert "rejected" in caplog.text
