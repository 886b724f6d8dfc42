"""
Equity calculation.

Equities are computed either exactly, by enumerating every board
completion (and every combination of range hands, weighted by how likely
each range is to hold it), or by Monte Carlo simulation when there are
too many deals to enumerate.

Monte Carlo trials are split into fixed-size chunks. Every chunk draws
from its own generator spawned off a seed derived from the inputs, and
chunk totals are summed in chunk order, so results do not depend on the
number of workers or on scheduling. Range hands are drawn together and the
whole draw is redrawn on any collision, which samples the same joint
distribution enumeration weights by.
"""

import hashlib
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from itertools import combinations, product
from math import ceil, comb
from typing import Callable, Iterable, Optional, Sequence, Union

import numpy as np

from .cards import FULL_DECK, HOLE_CARDS, Board, Card, Hand
from .evaluator import DefaultEvaluator, Evaluator, HandValue
from .exceptions import (
    CalculationCancelled,
    CardCollision,
    ConstructionError,
    EmptyParticipantSet,
    EmptyRange,
    InvalidSetting,
    UnsampleableRange,
)
from .groups import Range, SimpleHandGroup

logger = logging.getLogger(__name__)

Participant = Union[Hand, SimpleHandGroup, Range]

# Columns of the per-participant tally
WIN, TIE, LOSS, SHARE = range(4)


@dataclass(frozen=True)
class Equity:
    """Outcome fractions for one participant."""
    win: float
    tie: float
    loss: float
    share: float  # expected fraction of the pot, ties split
    trials: int

    def __str__(self) -> str:
        return f"win={self.win:.2%} tie={self.tie:.2%} loss={self.loss:.2%}"


@dataclass
class EquityConfig:
    """Configuration for equity calculations."""
    sample_size: int = 25000          # Monte Carlo trials
    evaluator: Evaluator = field(default_factory=DefaultEvaluator)
    board: Board = field(default_factory=Board)
    enumeration_limit: int = 100_000  # Max deals to enumerate exactly
    workers: int = 1
    chunk_size: int = 2500            # Trials per independently seeded chunk
    max_resample_attempts: int = 1000
    seed: Optional[int] = None        # Mixed into the input-derived seed


def derive_seed(
    participants: Sequence[Participant],
    board: Board,
    sample_size: int,
    seed: Optional[int] = None,
) -> int:
    """Stable seed from a description of the calculation inputs."""
    parts = []
    for p in participants:
        if isinstance(p, Hand):
            parts.append(f"H:{p}")
        else:
            parts.append("G:" + ",".join(f"{h}={p.weight(h)!r}" for h in p.all()))
    parts.append(f"B:{board}")
    parts.append(f"N:{sample_size}")
    parts.append(f"S:{seed}")

    digest = hashlib.sha256("|".join(parts).encode()).digest()
    return int.from_bytes(digest[:8], "big")


def _score(
    values: list[HandValue],
    tally: list[list[float]],
    weight: float = 1.0,
) -> None:
    """Credit one showdown to the tally."""
    best = max(values)
    winners = [i for i, v in enumerate(values) if v == best]
    if len(winners) == 1:
        for i in range(len(values)):
            tally[i][LOSS] += weight
        tally[winners[0]][LOSS] -= weight
        tally[winners[0]][WIN] += weight
        tally[winners[0]][SHARE] += weight
        return

    split = weight / len(winners)
    for i in range(len(values)):
        if i in winners:
            tally[i][TIE] += weight
            tally[i][SHARE] += split
        else:
            tally[i][LOSS] += weight


class _Deal:
    """Validated inputs shared read-only by every chunk."""

    def __init__(self, participants: Sequence[Participant], config: EquityConfig):
        if len(participants) < 2:
            raise EmptyParticipantSet(
                f"Need at least two participants, got {len(participants)}"
            )
        groups = [p for p in participants if not isinstance(p, Hand)]
        if len({id(g) for g in groups}) != len(groups):
            raise InvalidSetting("The same range was given more than once")

        self.board = config.board
        self.evaluator = config.evaluator
        self.hands: list[Optional[Hand]] = []
        self.groups: list[tuple[int, Union[SimpleHandGroup, Range]]] = []

        dealt: set[Card] = set(self.board)
        for i, p in enumerate(participants):
            if isinstance(p, Hand):
                if len(p) != HOLE_CARDS:
                    raise ConstructionError(f"Participant hands need two cards: {p}")
                if not p.disjoint(dealt):
                    raise CardCollision(f"Hand {p} collides with other cards in play")
                dealt.update(p)
                self.hands.append(p)
            else:
                group = p.snapshot() if isinstance(p, Range) else p
                self.hands.append(None)
                self.groups.append((i, group))

        self.fixed = frozenset(dealt)
        for _, group in self.groups:
            if len(group) == 0:
                raise EmptyRange(f"Range {group} has no hands")
            if not any(h.disjoint(self.fixed) for h in group.all()):
                raise UnsampleableRange(
                    f"No hand in {group} is disjoint from the board and fixed hands"
                )

        self.base_deck = [c for c in FULL_DECK if c not in self.fixed]
        self.missing = self.board.missing
        self.in_play = len(participants)

    def deal_count(self) -> int:
        """Deals an exhaustive enumeration would visit."""
        remaining = len(self.base_deck) - HOLE_CARDS * len(self.groups)
        count = comb(remaining, self.missing)
        for _, group in self.groups:
            count *= len(group)
        return count

    def showdown(self, hands: Sequence[Hand], runout: Iterable[Card]) -> list[HandValue]:
        cards = self.board.cards + tuple(runout)
        return [self.evaluator.value(h, cards) for h in hands]


class EquityCalculationBuilder:
    """
    Runs equity calculations between hands and ranges.

    Example:
        calc = EquityCalculationBuilder().use_board(Board.from_string("Ks7h6d"))
        equities = calc.calculate(Hand.from_string("AcAh"), Hand.from_string("KcKh"))
    """

    DEFAULT_SAMPLE_SIZE = 25000

    def __init__(self, config: Optional[EquityConfig] = None):
        self.config = replace(config) if config else EquityConfig()

    def use_board(self, board: Union[Board, str]) -> "EquityCalculationBuilder":
        """Hold this board fixed in calculations."""
        self.config.board = Board.from_string(board) if isinstance(board, str) else board
        return self

    def use_sample_size(self, sample_size: int) -> "EquityCalculationBuilder":
        """Number of Monte Carlo trials to run."""
        if sample_size <= 0:
            raise InvalidSetting("sample_size must be positive")
        self.config.sample_size = sample_size
        return self

    def use_evaluator(self, evaluator: Evaluator) -> "EquityCalculationBuilder":
        """Evaluator used at every showdown."""
        self.config.evaluator = evaluator
        return self

    def use_workers(self, workers: int) -> "EquityCalculationBuilder":
        """Number of threads chunks are spread over."""
        if workers <= 0:
            raise InvalidSetting("workers must be positive")
        self.config.workers = workers
        return self

    def use_seed(self, seed: Optional[int]) -> "EquityCalculationBuilder":
        """Extra seed mixed into the input-derived one."""
        self.config.seed = seed
        return self

    def calculate(
        self,
        *participants: Participant,
        cancel: Optional[threading.Event] = None,
    ) -> dict[Participant, Equity]:
        """
        Calculate equities between two or more participants.

        Args:
            participants: Hands, ranges or hand groups
            cancel: Optional event checked between trials

        Returns:
            Each participant mapped to its Equity, in input order
        """
        deal = _Deal(participants, self.config)

        deals = deal.deal_count()
        if deals <= self.config.enumeration_limit:
            logger.debug("Enumerating %d deals", deals)
            tally, trials = self._enumerate(deal, cancel)
        else:
            tally, trials = self._simulate(deal, participants, cancel)

        totals = tally[:, WIN] + tally[:, TIE] + tally[:, LOSS]
        results = {}
        for i, p in enumerate(participants):
            total = totals[i]
            results[p] = Equity(
                win=float(tally[i, WIN] / total),
                tie=float(tally[i, TIE] / total),
                loss=float(tally[i, LOSS] / total),
                share=float(tally[i, SHARE] / total),
                trials=trials,
            )
        return results

    def _run_chunks(self, jobs: list, work: Callable) -> np.ndarray:
        """Run jobs, possibly threaded, and sum their tallies in job order."""
        if self.config.workers > 1 and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=self.config.workers) as pool:
                partials = list(pool.map(work, jobs))
        else:
            partials = [work(job) for job in jobs]

        total = partials[0]
        for partial in partials[1:]:
            total = total + partial
        return total

    # -- exhaustive enumeration -------------------------------------------

    def _enumerate(
        self,
        deal: _Deal,
        cancel: Optional[threading.Event],
    ) -> tuple[np.ndarray, int]:
        group_probs = [
            [(h, prob) for h, prob in group.probabilities().items() if prob > 0]
            for _, group in deal.groups
        ]

        # Every disjoint combination of group hands, with its probability
        combos: list[tuple[list[Hand], float]] = []
        for picks in product(*group_probs):
            used = set(deal.fixed)
            hands = []
            weight = 1.0
            for hand, prob in picks:
                if not hand.disjoint(used):
                    break
                used.update(hand)
                hands.append(hand)
                weight *= prob
            else:
                combos.append((hands, weight))

        if not combos:
            raise UnsampleableRange("No combination of range hands fits together")

        def work(chunk: list[tuple[list[Hand], float]]) -> np.ndarray:
            tally = [[0.0] * 4 for _ in range(deal.in_play)]
            for picked, weight in chunk:
                hands = list(deal.hands)
                for (i, _), hand in zip(deal.groups, picked):
                    hands[i] = hand
                deck = [c for c in deal.base_deck if not any(c in h for h in picked)]
                for runout in combinations(deck, deal.missing):
                    if cancel is not None and cancel.is_set():
                        raise CalculationCancelled("Calculation cancelled")
                    _score(deal.showdown(hands, runout), tally, weight)
            return np.array(tally)

        per_chunk = max(1, ceil(len(combos) / max(self.config.workers, 1)))
        jobs = [combos[i:i + per_chunk] for i in range(0, len(combos), per_chunk)]
        tally = self._run_chunks(jobs, work)

        runouts = comb(len(deal.base_deck) - HOLE_CARDS * len(deal.groups), deal.missing)
        return tally, len(combos) * runouts

    # -- Monte Carlo ------------------------------------------------------

    def _simulate(
        self,
        deal: _Deal,
        participants: Sequence[Participant],
        cancel: Optional[threading.Event],
    ) -> tuple[np.ndarray, int]:
        config = self.config
        seed = derive_seed(participants, deal.board, config.sample_size, config.seed)

        sizes = []
        remaining = config.sample_size
        while remaining > 0:
            sizes.append(min(config.chunk_size, remaining))
            remaining -= sizes[-1]
        children = np.random.SeedSequence(seed).spawn(len(sizes))
        logger.debug(
            "Simulating %d trials in %d chunks (seed=%d)",
            config.sample_size, len(sizes), seed,
        )

        def work(job: tuple[int, np.random.SeedSequence]) -> np.ndarray:
            trials, child = job
            rng = np.random.default_rng(child)
            tally = [[0.0] * 4 for _ in range(deal.in_play)]
            for _ in range(trials):
                if cancel is not None and cancel.is_set():
                    raise CalculationCancelled("Calculation cancelled")

                hands = list(deal.hands)
                picked = self._draw(deal, rng)
                for (i, _), hand in zip(deal.groups, picked):
                    hands[i] = hand

                deck = [c for c in deal.base_deck if not any(c in h for h in picked)]
                picks = rng.choice(len(deck), size=deal.missing, replace=False)
                _score(deal.showdown(hands, (deck[j] for j in picks)), tally)
            return np.array(tally)

        tally = self._run_chunks(list(zip(sizes, children)), work)
        return tally, config.sample_size

    def _draw(self, deal: _Deal, rng: np.random.Generator) -> list[Hand]:
        """
        Sample one hand per range, redrawing the whole set on any collision.

        Rejecting whole draws keeps the joint distribution the same one
        enumeration weights combinations by.
        """
        for _ in range(self.config.max_resample_attempts):
            used = set(deal.fixed)
            hands = []
            for _, group in deal.groups:
                hand = group.sample(rng)
                if not hand.disjoint(used):
                    break
                used.update(hand)
                hands.append(hand)
            else:
                return hands
        names = ", ".join(str(g) for _, g in deal.groups)
        raise UnsampleableRange(
            f"Could not draw disjoint hands from {names} in "
            f"{self.config.max_resample_attempts} attempts"
        )


def calculate_equity(
    *participants: Participant,
    board: Optional[Union[Board, str]] = None,
    config: Optional[EquityConfig] = None,
) -> dict[Participant, Equity]:
    """
    Calculate equities with a one-off builder.

    Args:
        participants: Hands, ranges or hand groups
        board: Board cards (default: preflop, or the config's board)
        config: Calculation settings

    Returns:
        Each participant mapped to its Equity
    """
    calc = EquityCalculationBuilder(config)
    if board is not None:
        calc.use_board(board)
    return calc.calculate(*participants)
