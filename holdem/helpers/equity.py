from __future__ import annotations
import logging
import math
import random
from concurrent.futures import ProcessPoolExecutor
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .cards import Card, make_deck, parse_card, parse_cards, parse_hand
from .evaluator import evaluate_cards
from .ranges import Combo, parse_range, range_to_combos

logger = logging.getLogger(__name__)

CardsLike = Union[str, Sequence[Union[str, Card]]]


class EquityError(str, Enum):
    INVALID_INPUT = "InvalidInput"
    INVALID_HERO = "InvalidHero"
    EMPTY_RANGE = "EmptyRange"


@dataclass(frozen=True)
class EquityResult:
    equity: float            # percent, 0..100
    wins: int
    losses: int
    ties: int
    iterations: int
    error: Optional[EquityError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def std_error(self) -> float:
        """Binomial standard error of `equity`, in percentage points."""
        if self.iterations <= 0:
            return 0.0
        p = self.equity / 100.0
        return 100.0 * math.sqrt(max(p * (1.0 - p), 0.0) / self.iterations)

    def to_dict(self) -> Dict[str, object]:
        d = asdict(self)
        d["error"] = None if self.error is None else self.error.value
        d["std_error"] = self.std_error
        return d

    @staticmethod
    def failed(error: EquityError, iterations: int = 0) -> "EquityResult":
        return EquityResult(equity=0.0, wins=0, losses=0, ties=0, iterations=iterations, error=error)


def _cards_or_none(x: CardsLike) -> Optional[List[Card]]:
    if isinstance(x, str):
        return parse_hand(x)
    try:
        return parse_cards(x)
    except ValueError:
        return None


def _opponent_combos(opponent, available: List[Card]) -> Optional[List[Combo]]:
    """
    Resolve the opponent argument into concrete combos drawn from `available`.
    Accepts a single combo ("2c2d" or two Cards), a range string or a set of notations.
    Returns None when the input cannot be parsed.
    """
    avail = set(available)

    if isinstance(opponent, str):
        fixed = parse_hand(opponent)
        if fixed is not None and len(fixed) == 2:
            if fixed[0] == fixed[1] or fixed[0] not in avail or fixed[1] not in avail:
                return []
            return [(fixed[0], fixed[1])]
        notations = parse_range(opponent)
        if notations is None:
            return None
        return range_to_combos(notations, available)

    items = list(opponent)
    as_cards = [x if isinstance(x, Card) else parse_card(x) for x in items]
    if len(items) == 2 and all(c is not None for c in as_cards):
        c1, c2 = as_cards
        if c1 == c2 or c1 not in avail or c2 not in avail:
            return []
        return [(c1, c2)]

    notations = parse_range([str(x) for x in items])
    if notations is None:
        return None
    return range_to_combos(notations, available)


def _run_iterations(
    hero: List[Card],
    board: List[Card],
    available: List[Card],
    combos: List[Combo],
    iterations: int,
    rng: random.Random,
) -> Tuple[int, int, int]:
    need = 5 - len(board)
    remaining_by_combo: Dict[int, List[Card]] = {}
    wins = ties = losses = 0

    for _ in range(iterations):
        idx = rng.randrange(len(combos))
        o1, o2 = combos[idx]
        deck = remaining_by_combo.get(idx)
        if deck is None:
            deck = [c for c in available if c != o1 and c != o2]
            remaining_by_combo[idx] = deck

        runout = board + rng.sample(deck, need) if need else board
        hero_v = evaluate_cards(hero + runout)
        opp_v = evaluate_cards([o1, o2] + runout)

        if hero_v > opp_v:
            wins += 1
        elif hero_v == opp_v:
            ties += 1
        else:
            losses += 1
    return wins, ties, losses


def _worker(args) -> Tuple[int, int, int]:
    # plain strings cross the process boundary
    hero_s, board_s, combos_s, iterations, seed = args
    hero = parse_cards(hero_s)
    board = parse_cards(board_s)
    combos = [(Card.from_str(a), Card.from_str(b)) for a, b in combos_s]
    available = make_deck(exclude=hero + board)
    return _run_iterations(hero, board, available, combos, iterations, random.Random(seed))


def simulate_equity(
    hero: CardsLike,
    opponent,
    board: CardsLike = "",
    iterations: int = 5000,
    seed: Optional[int] = None,
    workers: int = 1,
) -> EquityResult:
    """
    Monte Carlo equity of `hero` against one opponent combo or range.

    Equity is (wins + ties / 2) / iterations, in percent. Input problems are
    reported through `EquityResult.error` with zeroed statistics.
    """
    hero_cards = _cards_or_none(hero)
    if hero_cards is None or len(hero_cards) != 2 or hero_cards[0] == hero_cards[1]:
        return EquityResult.failed(EquityError.INVALID_HERO)

    board_cards = _cards_or_none(board)
    if board_cards is None or len(board_cards) > 5:
        return EquityResult.failed(EquityError.INVALID_INPUT)
    known = hero_cards + board_cards
    if len(set(known)) != len(known):
        return EquityResult.failed(EquityError.INVALID_INPUT)
    if iterations < 1:
        return EquityResult.failed(EquityError.INVALID_INPUT)

    available = make_deck(exclude=known)
    combos = _opponent_combos(opponent, available)
    if combos is None:
        return EquityResult.failed(EquityError.INVALID_INPUT)
    if not combos:
        return EquityResult.failed(EquityError.EMPTY_RANGE)

    logger.debug(
        f"simulate_equity hero={''.join(map(str, hero_cards))} board={''.join(map(str, board_cards))} "
        f"combos={len(combos)} iterations={iterations} workers={workers}"
    )

    rng = random.Random(seed)
    if workers <= 1:
        wins, ties, losses = _run_iterations(hero_cards, board_cards, available, combos, iterations, rng)
    else:
        wins = ties = losses = 0
        chunk = iterations // workers
        hero_s = [str(c) for c in hero_cards]
        board_s = [str(c) for c in board_cards]
        combos_s = [(str(a), str(b)) for a, b in combos]
        args_list = []
        for i in range(workers):
            n = chunk if i < workers - 1 else iterations - chunk * (workers - 1)
            if n > 0:
                args_list.append((hero_s, board_s, combos_s, n, rng.randrange(2**32)))
        with ProcessPoolExecutor(max_workers=len(args_list)) as ex:
            for w, t, l in ex.map(_worker, args_list):
                wins += w
                ties += t
                losses += l

    total = wins + ties + losses
    equity = (wins + 0.5 * ties) / total * 100.0
    return EquityResult(equity=equity, wins=wins, losses=losses, ties=ties, iterations=total)
