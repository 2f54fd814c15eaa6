from __future__ import annotations
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .cards import Card, parse_cards


class Category(IntEnum):
    HIGH_CARD = 0
    PAIR = 1
    TWO_PAIR = 2
    TRIPS = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    QUADS = 7
    STRAIGHT_FLUSH = 8
    ROYAL_FLUSH = 9


CATEGORY_NAMES = {
    Category.HIGH_CARD: "High Card",
    Category.PAIR: "Pair",
    Category.TWO_PAIR: "Two Pair",
    Category.TRIPS: "Three of a Kind",
    Category.STRAIGHT: "Straight",
    Category.FLUSH: "Flush",
    Category.FULL_HOUSE: "Full House",
    Category.QUADS: "Four of a Kind",
    Category.STRAIGHT_FLUSH: "Straight Flush",
    Category.ROYAL_FLUSH: "Royal Flush",
}


def pack_strength(ranks: Sequence[int]) -> int:
    """Pack up to five tiebreak ranks into one int (base 16, most significant first)."""
    s = 0
    for i in range(5):
        s = s * 16 + (ranks[i] if i < len(ranks) else 0)
    return s


@dataclass(frozen=True, order=True)
class HandValue:
    """
    Comparable evaluation result. Ordering is (category, strength);
    `ranks` is the unpacked tiebreak and does not take part in comparisons.
    """
    category: Category
    strength: int
    ranks: Tuple[int, ...] = field(default=(), compare=False)

    @property
    def name(self) -> str:
        return CATEGORY_NAMES[self.category]


def _value(category: Category, ranks: Tuple[int, ...]) -> HandValue:
    return HandValue(category, pack_strength(ranks), ranks)


def straight_high(values: Iterable[int]) -> Optional[int]:
    """
    Highest straight in `values`, scanning windows from the top down.
    The wheel (A-2-3-4-5) reports 5.
    """
    uniq = sorted(set(values), reverse=True)
    for i in range(len(uniq) - 4):
        if uniq[i] - uniq[i + 4] == 4:
            return uniq[i]
    if 14 in uniq and all(v in uniq for v in (2, 3, 4, 5)):
        return 5
    return None


def evaluate_cards(cards: List[Card]) -> HandValue:
    n = len(cards)
    if n > 7:
        raise ValueError(f"evaluate expects 5..7 cards, got {n}")

    vals = sorted((c.val for c in cards), reverse=True)
    if n < 5:
        # not enough cards for a made five-card hand
        return _value(Category.HIGH_CARD, tuple(vals))

    counts: Dict[int, int] = {}
    suit_counts: Dict[str, int] = {}
    for c in cards:
        counts[c.val] = counts.get(c.val, 0) + 1
        suit_counts[c.suit] = suit_counts.get(c.suit, 0) + 1

    flush_suit = None
    for s, k in suit_counts.items():
        if k >= 5:
            flush_suit = s
            break

    flush_vals: List[int] = []
    if flush_suit is not None:
        flush_vals = sorted((c.val for c in cards if c.suit == flush_suit), reverse=True)
        sh = straight_high(flush_vals)
        if sh is not None:
            cat = Category.ROYAL_FLUSH if sh == 14 else Category.STRAIGHT_FLUSH
            return _value(cat, (sh,))

    groups = sorted(counts.items(), key=lambda kv: (kv[1], kv[0]), reverse=True)
    top_val, top_n = groups[0]

    if top_n == 4:
        kicker = max(v for v in vals if v != top_val)
        return _value(Category.QUADS, (top_val, kicker))

    if top_n == 3 and len(groups) > 1 and groups[1][1] >= 2:
        return _value(Category.FULL_HOUSE, (top_val, groups[1][0]))

    if flush_suit is not None:
        return _value(Category.FLUSH, tuple(flush_vals[:5]))

    sh = straight_high(vals)
    if sh is not None:
        return _value(Category.STRAIGHT, (sh,))

    if top_n == 3:
        kickers = [v for v in vals if v != top_val][:2]
        return _value(Category.TRIPS, (top_val, *kickers))

    if top_n == 2 and groups[1][1] == 2:
        pair_hi, pair_lo = groups[0][0], groups[1][0]
        kicker = max(v for v in vals if v != pair_hi and v != pair_lo)
        return _value(Category.TWO_PAIR, (pair_hi, pair_lo, kicker))

    if top_n == 2:
        kickers = [v for v in vals if v != top_val][:3]
        return _value(Category.PAIR, (top_val, *kickers))

    return _value(Category.HIGH_CARD, tuple(vals[:5]))


def evaluate(cards: Iterable[Union[str, Card]]) -> HandValue:
    return evaluate_cards(parse_cards(cards))


def evaluate_best(
    hand: Iterable[Union[str, Card]],
    board: Iterable[Union[str, Card]],
) -> HandValue:
    h = parse_cards(hand)
    b = parse_cards(board)
    cards = h + b
    if len(h) != 2:
        raise ValueError("Hold'em hand must be exactly 2 cards")
    if len(b) > 5:
        raise ValueError("Board cannot exceed 5 cards")
    if len(set(cards)) != len(cards):
        raise ValueError("Duplicate cards detected")
    return evaluate_cards(cards)


def compare_hands(hand1, hand2, board) -> int:
    k1 = evaluate_best(hand1, board)
    k2 = evaluate_best(hand2, board)
    return 1 if k1 > k2 else (-1 if k2 > k1 else 0)


def winners(hands, board) -> List[int]:
    keys = [evaluate_best(h, board) for h in hands]
    best = max(keys)
    return [i for i, k in enumerate(keys) if k == best]
