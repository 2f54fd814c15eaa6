from __future__ import annotations
import logging
from itertools import combinations
from typing import Iterable, List, Optional, Set, Tuple, Union

from .cards import Card, RANKS, RANK_TO_VAL, VAL_TO_RANK

logger = logging.getLogger(__name__)

Combo = Tuple[Card, Card]


def _canon(hi: str, lo: str, suffix: str = "") -> str:
    """Order two rank symbols high-first and attach the suffix ('' for pairs)."""
    if RANK_TO_VAL[hi] < RANK_TO_VAL[lo]:
        hi, lo = lo, hi
    if hi == lo:
        return hi + lo
    return f"{hi}{lo}{suffix}"


def _split_class(tok: str) -> Optional[Tuple[str, str, str]]:
    """
    'AKS' -> ('A', 'K', 's'); '77' -> ('7', '7', ''); 'AK' -> ('A', 'K', '').
    Token is already upper-cased. Returns None when malformed.
    """
    if len(tok) not in (2, 3):
        return None
    a, b = tok[0], tok[1]
    if a not in RANK_TO_VAL or b not in RANK_TO_VAL:
        return None
    suffix = tok[2].lower() if len(tok) == 3 else ""
    if suffix not in ("", "s", "o"):
        return None
    if a == b and suffix:
        return None
    if RANK_TO_VAL[a] < RANK_TO_VAL[b]:
        a, b = b, a
    return a, b, suffix


def _with_suffixes(hi: str, lo: str, suffix: str) -> List[str]:
    if hi == lo:
        return [hi + lo]
    if suffix:
        return [_canon(hi, lo, suffix)]
    return [_canon(hi, lo, "s"), _canon(hi, lo, "o")]


def _expand_plus(hi: str, lo: str, suffix: str) -> List[str]:
    out: List[str] = []
    if hi == lo:
        for r in RANKS[RANKS.index(hi):]:
            out.append(r + r)
        return out
    # same high card, kicker walks up to one below it
    for r in RANKS[RANKS.index(lo) : RANKS.index(hi)]:
        out.extend(_with_suffixes(hi, r, suffix))
    return out


def _expand_span(left: Tuple[str, str, str], right: Tuple[str, str, str]) -> Optional[List[str]]:
    a_hi, a_lo, a_suf = left
    b_hi, b_lo, b_suf = right
    if a_suf != b_suf:
        return None

    if a_hi == a_lo and b_hi == b_lo:
        ia, ib = sorted((RANKS.index(a_hi), RANKS.index(b_hi)))
        return [r + r for r in RANKS[ia : ib + 1]]

    if a_hi == a_lo or b_hi == b_lo or a_hi != b_hi:
        return None
    ia, ib = sorted((RANKS.index(a_lo), RANKS.index(b_lo)))
    out: List[str] = []
    for r in RANKS[ia : ib + 1]:
        out.extend(_with_suffixes(a_hi, r, a_suf))
    return out


def _expand_token(tok: str) -> Optional[List[str]]:
    if tok.endswith("+"):
        parts = _split_class(tok[:-1])
        return None if parts is None else _expand_plus(*parts)

    if "-" in tok:
        left, _, right = tok.partition("-")
        lp, rp = _split_class(left), _split_class(right)
        if lp is None or rp is None:
            return None
        return _expand_span(lp, rp)

    parts = _split_class(tok)
    return None if parts is None else _with_suffixes(*parts)


def parse_range(range_spec: Union[str, Iterable[str]]) -> Optional[Set[str]]:
    """
    Expand shorthand ("22+, A2s+, KQo, 99-55") into a set of notations.
    One malformed token invalidates the whole range (None).
    """
    if isinstance(range_spec, str):
        raw = range_spec.split(",")
    else:
        raw = []
        for x in range_spec:
            raw.extend(x.split(","))

    out: Set[str] = set()
    for t in raw:
        tok = t.strip().upper()
        if not tok:
            continue
        expanded = _expand_token(tok)
        if expanded is None:
            logger.debug(f"Bad range token {t!r}")
            return None
        out.update(expanded)
    return out


def notation_combos(notation: str, deck: Iterable[Card]) -> List[Combo]:
    """All concrete pairings of one hand class using only cards in `deck`."""
    parts = _split_class(notation.upper())
    if parts is None:
        raise ValueError(f"Bad notation: {notation!r}")
    hi, lo, suffix = parts
    hv, lv = RANK_TO_VAL[hi], RANK_TO_VAL[lo]

    highs = [c for c in deck if c.val == hv]
    if hv == lv:
        return [(c1, c2) for c1, c2 in combinations(highs, 2)]

    lows = [c for c in deck if c.val == lv]
    out: List[Combo] = []
    for c1 in highs:
        for c2 in lows:
            suited = c1.suit == c2.suit
            if suffix == "s" and not suited:
                continue
            if suffix == "o" and suited:
                continue
            out.append((c1, c2))
    return out


def range_to_combos(notations: Iterable[str], available_deck: Iterable[Card]) -> List[Combo]:
    deck = list(available_deck)
    out: List[Combo] = []
    for n in sorted(notations):
        out.extend(notation_combos(n, deck))
    return out


def combo_notation(c1: Card, c2: Card) -> str:
    hi, lo = (c1, c2) if c1.val >= c2.val else (c2, c1)
    suffix = "s" if c1.suit == c2.suit else "o"
    return _canon(VAL_TO_RANK[hi.val], VAL_TO_RANK[lo.val], suffix)
