from __future__ import annotations
import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

RANKS = "23456789TJQKA"
SUITS = "cdhs"
RANK_TO_VAL = {r: i + 2 for i, r in enumerate(RANKS)}  # 2..14
VAL_TO_RANK = {v: r for r, v in RANK_TO_VAL.items()}

SUIT_GLYPHS = {"c": "♣", "d": "♦", "h": "♥", "s": "♠"}
GLYPH_TO_SUIT = {g: s for s, g in SUIT_GLYPHS.items()}


@dataclass(frozen=True, order=True)
class Card:
    val: int
    suit: str

    def __str__(self) -> str:
        return f"{VAL_TO_RANK[self.val]}{self.suit}"

    @property
    def rank(self) -> str:
        return VAL_TO_RANK[self.val]

    def pretty(self) -> str:
        return f"{self.rank}{SUIT_GLYPHS[self.suit]}"

    @staticmethod
    def from_str(s: str) -> "Card":
        c = parse_card(s)
        if c is None:
            raise ValueError(f"Bad card string: {s!r}")
        return c


def parse_card(text: str) -> Optional[Card]:
    """'Ah', 'ah', 'A♥' -> Card; anything else -> None."""
    if not isinstance(text, str):
        return None
    s = text.strip()
    if len(s) != 2:
        return None
    r = s[0].upper()
    su = GLYPH_TO_SUIT.get(s[1], s[1].lower())
    if r not in RANK_TO_VAL or su not in SUITS:
        return None
    return Card(RANK_TO_VAL[r], su)


def parse_hand(text: str) -> Optional[List[Card]]:
    """
    Split a concatenated card string ("AhKd", "Ah Kd 7c") into cards.
    One bad chunk invalidates the whole hand.
    """
    if not isinstance(text, str):
        return None
    s = "".join(text.replace(",", " ").split())
    if len(s) % 2:
        return None
    out: List[Card] = []
    for i in range(0, len(s), 2):
        c = parse_card(s[i : i + 2])
        if c is None:
            return None
        out.append(c)
    return out


def parse_cards(cards: Iterable[Union[str, Card]]) -> List[Card]:
    if isinstance(cards, str):
        parsed = parse_hand(cards)
        if parsed is None:
            raise ValueError(f"Bad card string: {cards!r}")
        return parsed
    out: List[Card] = []
    for x in cards:
        out.append(x if isinstance(x, Card) else Card.from_str(x))
    return out


def build_deck() -> List[Card]:
    return [Card(RANK_TO_VAL[r], s) for r in RANKS for s in SUITS]


def remove_dead(deck: Iterable[Card], *card_sets: Iterable[Card]) -> List[Card]:
    dead = set()
    for cs in card_sets:
        dead.update(cs)
    return [c for c in deck if c not in dead]


def make_deck(exclude: Iterable[Card] = ()) -> List[Card]:
    return remove_dead(build_deck(), exclude)


def shuffle(deck: Iterable[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """Fisher-Yates on a copy; the input is left untouched."""
    rng = rng or random.Random()
    out = list(deck)
    for i in range(len(out) - 1, 0, -1):
        j = rng.randrange(i + 1)
        out[i], out[j] = out[j], out[i]
    return out


def format_cards(cards: Iterable[Card]) -> str:
    return " ".join(str(c) for c in cards)
