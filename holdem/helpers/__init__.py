# cards
from .cards import (
    Card,
    parse_card,
    parse_hand,
    parse_cards,
    build_deck,
    make_deck,
    remove_dead,
    shuffle,
)

# evaluation
from .evaluator import (
    Category,
    HandValue,
    evaluate,
    evaluate_best,
    compare_hands,
    winners,
    straight_high,
)

# ranges + equity
from .ranges import parse_range, range_to_combos, notation_combos
from .equity import simulate_equity, EquityResult, EquityError

__all__ = [
    # cards
    "Card", "parse_card", "parse_hand", "parse_cards",
    "build_deck", "make_deck", "remove_dead", "shuffle",

    # evaluation
    "Category", "HandValue", "evaluate", "evaluate_best",
    "compare_hands", "winners", "straight_high",

    # ranges / equity
    "parse_range", "range_to_combos", "notation_combos",
    "simulate_equity", "EquityResult", "EquityError",
]
