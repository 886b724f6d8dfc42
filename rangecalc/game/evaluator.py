"""
Hand evaluation.

An evaluator maps hole cards plus zero to five board cards onto a
HandValue: the category of the best five-card hand and the ranks needed
to break ties between two hands of that category.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Optional, Protocol, Union

from treys import Evaluator as TreysLookup

from .cards import Board, Card, Hand


class HandCategory(IntEnum):
    """Poker hand categories, weakest first."""
    HIGH_CARD = 0
    PAIR = 1
    TWO_PAIR = 2
    TRIPS = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    QUADS = 7
    STRAIGHT_FLUSH = 8

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


@dataclass(frozen=True, order=True)
class HandValue:
    """
    Strength of a made hand.

    Values order by category first, then by ``ranks``: the defining ranks
    of the category (pair rank, trips over pair, straight high card...)
    followed by kickers in descending order.
    """
    category: HandCategory
    ranks: tuple[int, ...] = ()

    def __str__(self) -> str:
        return self.category.label


CardSource = Union[Hand, Board, Iterable[Card]]


class Evaluator(Protocol):
    """Anything that can value a hand on a board."""

    def value(self, hand: CardSource, board: Optional[CardSource] = None) -> HandValue:
        ...


def _collect(hand: CardSource, board: Optional[CardSource]) -> list[Card]:
    cards = list(hand)
    if board is not None:
        cards.extend(board)
    if not 2 <= len(cards) <= 7:
        raise ValueError(f"Can only evaluate 2 to 7 cards, got {len(cards)}")
    if len(set(cards)) != len(cards):
        raise ValueError("Duplicate cards detected")
    return cards


def straight_high(ranks: Iterable[int]) -> Optional[int]:
    """High card of the best straight in ``ranks``, 5 for the wheel."""
    present = set(ranks)
    if 14 in present:
        present.add(1)  # ace low
    for high in range(14, 4, -1):
        if all(r in present for r in range(high - 4, high + 1)):
            return high
    return None


class DefaultEvaluator:
    """Pure-Python evaluator working directly on rank and suit counts."""

    def value(self, hand: CardSource, board: Optional[CardSource] = None) -> HandValue:
        cards = _collect(hand, board)

        by_suit: dict[int, list[int]] = {}
        counts: dict[int, int] = {}
        for c in cards:
            by_suit.setdefault(c.suit, []).append(c.rank)
            counts[c.rank] = counts.get(c.rank, 0) + 1

        flush_ranks = None
        for suited in by_suit.values():
            if len(suited) >= 5:
                flush_ranks = sorted(suited, reverse=True)
                break

        if flush_ranks is not None:
            high = straight_high(flush_ranks)
            if high is not None:
                return HandValue(HandCategory.STRAIGHT_FLUSH, (high,))

        # Rank groups, biggest group first, then highest rank
        groups = sorted(counts.items(), key=lambda kv: (kv[1], kv[0]), reverse=True)
        ranks_desc = sorted(counts, reverse=True)

        def kickers(exclude: tuple[int, ...], n: int) -> tuple[int, ...]:
            return tuple(r for r in ranks_desc if r not in exclude)[:n]

        top_rank, top_count = groups[0]
        second_count = groups[1][1] if len(groups) > 1 else 0

        if top_count == 4:
            return HandValue(HandCategory.QUADS, (top_rank,) + kickers((top_rank,), 1))
        if top_count == 3 and second_count >= 2:
            # a second set of trips can fill the pair
            pair_rank = max(r for r, n in groups[1:] if n >= 2)
            return HandValue(HandCategory.FULL_HOUSE, (top_rank, pair_rank))
        if flush_ranks is not None:
            return HandValue(HandCategory.FLUSH, tuple(flush_ranks[:5]))

        high = straight_high(ranks_desc)
        if high is not None:
            return HandValue(HandCategory.STRAIGHT, (high,))

        if top_count == 3:
            return HandValue(HandCategory.TRIPS, (top_rank,) + kickers((top_rank,), 2))
        if top_count == 2 and second_count == 2:
            pairs = (top_rank, groups[1][0])
            return HandValue(HandCategory.TWO_PAIR, pairs + kickers(pairs, 1))
        if top_count == 2:
            return HandValue(HandCategory.PAIR, (top_rank,) + kickers((top_rank,), 3))
        return HandValue(HandCategory.HIGH_CARD, tuple(ranks_desc[:5]))


# treys scores run from 1 (royal flush) to 7462 (seven high)
TREYS_WORST = 7462


class TreysEvaluator:
    """
    Evaluator backed by the treys lookup tables.

    Needs five to seven cards in total. The tie-break is a single inverted
    treys score, so its values only compare against other TreysEvaluator
    values.
    """

    def __init__(self):
        self.lookup = TreysLookup()

    def value(self, hand: CardSource, board: Optional[CardSource] = None) -> HandValue:
        cards = _collect(hand, board)
        if len(cards) < 5:
            raise ValueError("treys needs at least 5 cards")

        score = self.lookup.evaluate([c.to_treys() for c in cards[:2]],
                                     [c.to_treys() for c in cards[2:]])
        rank_class = self.lookup.get_rank_class(score)
        # treys classes: 0/1 royal/straight flush ... 9 high card
        category = HandCategory(min(9 - rank_class, HandCategory.STRAIGHT_FLUSH))
        return HandValue(category, (TREYS_WORST + 1 - score,))


DEFAULT_EVALUATOR = DefaultEvaluator()
