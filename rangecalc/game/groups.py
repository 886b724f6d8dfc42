"""
Hand groups and weighted ranges.

A hand group is any enumerable collection of two-card hands that can
also be sampled from. There are exactly two kinds:

- SimpleHandGroup: an equally weighted set, usually the expansion of a
  pattern such as "AA", "AKs" or "72o".
- Range: constant hands plus buckets of hands sharing a weight in (0, 1].

Both expose the same operations: all(), contains(), weight(), sample(),
match() and probabilities().
"""

import logging
from itertools import combinations
from typing import Iterable, Iterator, Optional, Union

import numpy as np

from .cards import RANK_STR, STR_RANK, STR_SUIT, Card, Hand, Rank, Suit
from .exceptions import (
    ConstructionError,
    DuplicateDefinition,
    EmptyRange,
    PartialOverlap,
    RangeFrozen,
    WeightOutOfBounds,
)

logger = logging.getLogger(__name__)


class SimpleHandGroup:
    """An equally weighted, ordered set of hands."""

    def __init__(self, hands: Iterable[Hand], name: str = ""):
        self._hands: dict[Hand, None] = dict.fromkeys(hands)
        self._pool = tuple(self._hands)
        self.name = name or ",".join(str(h) for h in self._pool)

    def all(self) -> tuple[Hand, ...]:
        return self._pool

    def contains(self, hand: Hand) -> bool:
        return hand in self._hands

    def weight(self, hand: Hand) -> float:
        return 1.0 if hand in self._hands else 0.0

    def sample(self, rng: np.random.Generator) -> Hand:
        """Draw one hand uniformly."""
        if not self._pool:
            raise EmptyRange(f"Hand group {self.name!r} is empty")
        return self._pool[rng.integers(len(self._pool))]

    def match(self, hand: Hand, rng: Optional[np.random.Generator] = None) -> bool:
        return hand in self._hands

    def probabilities(self) -> dict[Hand, float]:
        if not self._pool:
            return {}
        p = 1.0 / len(self._pool)
        return {h: p for h in self._pool}

    def __iter__(self) -> Iterator[Hand]:
        return iter(self._pool)

    def __len__(self) -> int:
        return len(self._pool)

    def __contains__(self, hand: object) -> bool:
        return hand in self._hands

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"SimpleHandGroup({self.name!r}, {len(self)} hands)"


class Range:
    """
    A weighted range of hands.

    Constant hands always appear. Weighted hands live in buckets, one per
    distinct weight, kept in the order the weights were first defined.

    Sampling is a two-stage draw: a uniform number is walked through the
    buckets' cumulative *weight values*, picking the first bucket it falls
    under, or the constant hands if it passes them all. The hand is then
    drawn uniformly inside the chosen pool. Each distinct weight competes
    for selection, not each hand: a bucket of ten hands at 0.5 is picked as
    often as a bucket of one hand at 0.5.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._constant: dict[Hand, None] = {}
        self._buckets: list[tuple[float, dict[Hand, None]]] = []
        self._frozen = False
        self._pools: Optional[tuple[tuple[Hand, ...], list[tuple[float, tuple[Hand, ...]]]]] = None

    # -- definition -------------------------------------------------------

    def define(
        self,
        item: Union[Hand, SimpleHandGroup, "Range"],
        weight: Optional[float] = None,
    ) -> "Range":
        """
        Add a hand or every hand of a group.

        Without a weight, hands become constant and must not already be in
        the range. With a weight, hands move into that weight's bucket,
        replacing any earlier definition.

        Returns:
            The range, for chaining
        """
        if self._frozen:
            raise RangeFrozen("Range is frozen")
        if weight is not None and not 0.0 < weight <= 1.0:
            raise WeightOutOfBounds(f"Weight out of bounds: {weight}")

        if isinstance(item, Hand):
            if weight is None:
                if self.contains(item):
                    raise DuplicateDefinition(f"Hand already exists within range: {item}")
                self._constant[item] = None
            else:
                self._define_weighted(item, weight)
        else:
            hands = item.all()
            present = sum(1 for h in hands if self.contains(h))
            if 0 < present < len(hands):
                raise PartialOverlap(
                    f"Range contains {present} of the {len(hands)} hands in {item}"
                )
            if weight is None:
                if hands and present == len(hands):
                    raise DuplicateDefinition(f"Group already exists within range: {item}")
                for h in hands:
                    self._constant[h] = None
            else:
                for h in hands:
                    self._define_weighted(h, weight)

        self._pools = None
        return self

    def _define_weighted(self, hand: Hand, weight: float) -> None:
        if self._discard(hand):
            logger.debug("Reassigning %s to weight %s", hand, weight)
        for w, hands in self._buckets:
            if w == weight:
                hands[hand] = None
                return
        self._buckets.append((weight, {hand: None}))

    def _discard(self, hand: Hand) -> bool:
        if hand in self._constant:
            del self._constant[hand]
            return True
        for i, (_, hands) in enumerate(self._buckets):
            if hand in hands:
                del hands[hand]
                if not hands:
                    del self._buckets[i]
                return True
        return False

    def freeze(self) -> "Range":
        """Make the range read-only."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def snapshot(self) -> "Range":
        """Frozen copy of this range."""
        copy = Range(self.name)
        copy._constant = dict(self._constant)
        copy._buckets = [(w, dict(hands)) for w, hands in self._buckets]
        return copy.freeze()

    # -- queries ----------------------------------------------------------

    def all(self) -> tuple[Hand, ...]:
        """Constant hands, then each bucket in definition order."""
        constant, weighted = self._get_pools()
        out = list(constant)
        for _, hands in weighted:
            out.extend(hands)
        return tuple(out)

    def contains(self, hand: Hand) -> bool:
        if hand in self._constant:
            return True
        return any(hand in hands for _, hands in self._buckets)

    def weight(self, hand: Hand) -> float:
        """Bucket weight of a hand, 1.0 if constant, 0.0 if absent."""
        for w, hands in self._buckets:
            if hand in hands:
                return w
        return 1.0 if hand in self._constant else 0.0

    def buckets(self) -> list[tuple[float, tuple[Hand, ...]]]:
        """Weighted buckets in definition order."""
        return list(self._get_pools()[1])

    @property
    def constant(self) -> tuple[Hand, ...]:
        return self._get_pools()[0]

    def _get_pools(self):
        if self._pools is None:
            self._pools = (
                tuple(self._constant),
                [(w, tuple(hands)) for w, hands in self._buckets],
            )
        return self._pools

    # -- sampling ---------------------------------------------------------

    def sample(self, rng: np.random.Generator) -> Hand:
        """Draw one hand with the two-stage weighted draw."""
        constant, weighted = self._get_pools()
        if not constant and not weighted:
            raise EmptyRange(f"Range {self.name!r} has no hands")

        p = rng.random()
        if not constant:
            # nothing to fall through to, so scale onto the buckets
            p *= sum(w for w, _ in weighted)

        candidates = constant
        cumulative = 0.0
        for w, hands in weighted:
            cumulative += w
            if p <= cumulative:
                candidates = hands
                break
        return candidates[rng.integers(len(candidates))]

    def probabilities(self) -> dict[Hand, float]:
        """Chance of each hand being drawn by sample()."""
        constant, weighted = self._get_pools()
        probs: dict[Hand, float] = {}
        if not constant and not weighted:
            return probs

        if not constant:
            total = sum(w for w, _ in weighted)
            for w, hands in weighted:
                for h in hands:
                    probs[h] = (w / total) / len(hands)
            return probs

        cumulative = 0.0
        for w, hands in weighted:
            lo = min(cumulative, 1.0)
            cumulative += w
            chance = min(cumulative, 1.0) - lo
            for h in hands:
                probs[h] = chance / len(hands)
        rest = 1.0 - min(cumulative, 1.0)
        for h in constant:
            probs[h] = rest / len(constant)
        return probs

    def match(self, hand: Hand, rng: np.random.Generator) -> bool:
        """
        Probabilistic membership.

        Constant hands always match; weighted hands match with their
        bucket's weight as the success probability.
        """
        if hand in self._constant:
            return True
        for w, hands in self._buckets:
            if hand in hands:
                return rng.random() < w
        return False

    def __iter__(self) -> Iterator[Hand]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._constant) + sum(len(hands) for _, hands in self._buckets)

    def __contains__(self, hand: object) -> bool:
        return isinstance(hand, Hand) and self.contains(hand)

    def __str__(self) -> str:
        return self.name or f"Range({len(self)} hands)"

    def __repr__(self) -> str:
        return (
            f"Range({self.name!r}, constant={len(self._constant)}, "
            f"buckets={[(w, len(h)) for w, h in self._buckets]})"
        )


HandGroup = Union[SimpleHandGroup, Range]


# -- shorthand expansion ----------------------------------------------------

def get_all_hands() -> list[str]:
    """The 169 canonical starting hands, pairs first, strongest first."""
    ranks = [RANK_STR[r] for r in sorted(Rank, reverse=True)]
    pairs = [r * 2 for r in ranks]
    unpaired = [
        f"{high}{low}{kind}"
        for i, high in enumerate(ranks)
        for low in ranks[i + 1:]
        for kind in "so"
    ]
    return pairs + unpaired


def parse_range(range_str: str) -> list[str]:
    """
    Expand range shorthand into a list of hand patterns.

    Examples:
        "AA" -> ["AA"]
        "TT+" -> ["TT", "JJ", "QQ", "KK", "AA"]
        "ATs+" -> ["ATs", "AJs", "AQs", "AKs"]
        "22-55" -> ["22", "33", "44", "55"]
        "AA, KQs" -> ["AA", "KQs"]
    """
    hands = []
    for token in range_str.split(","):
        token = token.strip()
        if not token:
            continue
        hands.extend(_expand_token(token))
    return hands


def _rank(ch: str) -> int:
    r = STR_RANK.get(ch.upper())
    if r is None:
        raise ConstructionError(f"Invalid rank: {ch}")
    return r


def _expand_token(token: str) -> list[str]:
    # Pair plus: "TT+"
    if len(token) == 3 and token[2] == "+" and token[0].upper() == token[1].upper():
        start_rank = _rank(token[0])
        return [RANK_STR[r] * 2 for r in range(start_rank, 15)]

    # Pair range: "22-55"
    if len(token) == 5 and token[2] == "-":
        low, high = sorted((_rank(token[0]), _rank(token[3])))
        return [RANK_STR[r] * 2 for r in range(low, high + 1)]

    # Suited/offsuit plus: "ATs+"
    if len(token) == 4 and token[3] == "+":
        high_rank = _rank(token[0])
        low_rank = _rank(token[1])
        suffix = token[2].lower()
        return [
            f"{RANK_STR[high_rank]}{RANK_STR[rank]}{suffix}"
            for rank in range(low_rank, high_rank)
        ]

    # Single hand
    return [token]


def _is_concrete(token: str) -> bool:
    return (
        len(token) == 4
        and token[1].lower() in STR_SUIT
        and token[3].lower() in STR_SUIT
    )


def hand_group(pattern: str) -> SimpleHandGroup:
    """
    Expand one pattern into its concrete hands.

    Accepts "AA" (6 combos), "AKs" (4), "AKo" (12), "AK" (16) and
    concrete hands such as "AcKd".
    """
    token = pattern.strip()
    if _is_concrete(token):
        return SimpleHandGroup([Hand.from_string(token)], name=token)

    if len(token) not in (2, 3):
        raise ConstructionError(f"Invalid hand pattern: {pattern}")
    r1, r2 = _rank(token[0]), _rank(token[1])
    kind = token[2].lower() if len(token) == 3 else ""
    if kind not in ("", "s", "o"):
        raise ConstructionError(f"Invalid hand pattern: {pattern}")
    if r1 == r2 and kind:
        raise ConstructionError(f"Pairs cannot be suited or offsuit: {pattern}")

    hi, lo = max(r1, r2), min(r1, r2)
    hands = []
    if hi == lo:
        for s1, s2 in combinations(reversed(Suit), 2):
            hands.append(Hand(Card(Rank(hi), s1), Card(Rank(lo), s2)))
    else:
        for s1 in reversed(Suit):
            for s2 in reversed(Suit):
                suited = s1 == s2
                if (kind == "s" and not suited) or (kind == "o" and suited):
                    continue
                hands.append(Hand(Card(Rank(hi), s1), Card(Rank(lo), s2)))

    name = f"{RANK_STR[hi]}{RANK_STR[lo]}{kind}"
    return SimpleHandGroup(hands, name=name)


def range_from_string(range_str: str, name: str = "") -> Range:
    """
    Build a Range from shorthand.

    Entries are comma separated; "token:weight" gives a weight, e.g.
    "AA,KK,AKs:0.5,TT+:0.25".
    """
    result = Range(name or range_str)
    for part in range_str.split(","):
        part = part.strip()
        if not part:
            continue

        if ":" in part:
            token, freq = part.split(":", 1)
            try:
                weight: Optional[float] = float(freq)
            except ValueError as e:
                raise ConstructionError(f"Invalid weight in {part!r}") from e
        else:
            token, weight = part, None

        for pattern in _expand_token(token.strip()):
            result.define(hand_group(pattern), weight)
    return result
