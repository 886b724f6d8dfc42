"""Card, hand and board representation."""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable, Iterator

from treys import Card as TreysCard

from .exceptions import ConstructionError, InvalidArity


class Rank(IntEnum):
    """Card ranks (2-14 where 14 is Ace)."""
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14


class Suit(IntEnum):
    """Card suits."""
    CLUBS = 0
    DIAMONDS = 1
    HEARTS = 2
    SPADES = 3


# Mapping for string conversion
RANK_STR = {
    2: "2", 3: "3", 4: "4", 5: "5", 6: "6", 7: "7", 8: "8", 9: "9",
    10: "T", 11: "J", 12: "Q", 13: "K", 14: "A"
}
STR_RANK = {v: k for k, v in RANK_STR.items()}

SUIT_STR = {0: "c", 1: "d", 2: "h", 3: "s"}
STR_SUIT = {v: k for k, v in SUIT_STR.items()}

# Hole cards for hold'em, and the made hands an evaluator accepts
HOLE_CARDS = 2
HAND_SIZES = frozenset({HOLE_CARDS, 5, 6, 7})


@dataclass(frozen=True)
class Card:
    """A playing card."""
    rank: Rank
    suit: Suit

    def __post_init__(self):
        try:
            object.__setattr__(self, "rank", Rank(self.rank))
            object.__setattr__(self, "suit", Suit(self.suit))
        except ValueError as e:
            raise ConstructionError(f"Invalid card: {self.rank}, {self.suit}") from e

    def __str__(self) -> str:
        return f"{RANK_STR[self.rank]}{SUIT_STR[self.suit]}"

    def __repr__(self) -> str:
        return str(self)

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Parse card from string like 'As', 'Th', '2c'."""
        if len(s) != 2:
            raise ConstructionError(f"Invalid card string: {s}")
        rank_char = s[0].upper()
        suit_char = s[1].lower()

        if rank_char not in STR_RANK:
            raise ConstructionError(f"Invalid rank: {rank_char}")
        if suit_char not in STR_SUIT:
            raise ConstructionError(f"Invalid suit: {suit_char}")

        return cls(rank=Rank(STR_RANK[rank_char]), suit=Suit(STR_SUIT[suit_char]))

    def to_treys(self) -> int:
        """Convert to treys library card format."""
        return TreysCard.new(str(self))


def _card_order(card: Card) -> tuple[int, int]:
    return (-card.rank, -card.suit)


def parse_cards(s: str) -> list[Card]:
    """Parse concatenated card shorthand like 'AcAh' or 'Ks 7h 6d'."""
    text = s.replace(" ", "").replace(",", "")
    if len(text) % 2:
        raise ConstructionError(f"Invalid card string: {s}")
    return [Card.from_string(text[i:i + 2]) for i in range(0, len(text), 2)]


class Hand:
    """
    An immutable set of cards.

    Two cards for hold'em hole cards, or five to seven for a made hand.
    Cards are kept in a canonical order, so two hands holding the same
    cards are equal no matter how they were built.
    """

    __slots__ = ("_cards",)

    def __init__(self, *cards: Card):
        if len(cards) not in HAND_SIZES:
            raise InvalidArity(
                f"Invalid number of cards: {len(cards)} "
                f"(expected one of {sorted(HAND_SIZES)})"
            )
        if len(set(cards)) != len(cards):
            raise ConstructionError(f"Duplicate cards in hand: {cards}")
        self._cards = tuple(sorted(cards, key=_card_order))

    @property
    def cards(self) -> tuple[Card, ...]:
        return self._cards

    @property
    def is_pair(self) -> bool:
        """Check if a two-card hand is a pocket pair."""
        return len(self._cards) == HOLE_CARDS and self._cards[0].rank == self._cards[1].rank

    @property
    def is_suited(self) -> bool:
        """
        Check if every card shares one suit.

        Only meaningful for two-card starting hands.
        """
        return len({c.suit for c in self._cards}) == 1

    @property
    def canonical(self) -> str:
        """
        Get canonical hand notation (e.g., 'AKs', 'QQ', '72o').

        This groups equivalent hands regardless of specific suits.
        """
        if len(self._cards) != HOLE_CARDS:
            raise ValueError("Canonical notation only exists for two-card hands")
        r1 = RANK_STR[self._cards[0].rank]
        r2 = RANK_STR[self._cards[1].rank]

        if self.is_pair:
            return f"{r1}{r2}"
        elif self.is_suited:
            return f"{r1}{r2}s"
        else:
            return f"{r1}{r2}o"

    def disjoint(self, cards: Iterable[Card]) -> bool:
        """True when none of the given cards are in this hand."""
        return self._cards_set().isdisjoint(cards)

    def _cards_set(self) -> frozenset:
        return frozenset(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card: object) -> bool:
        return card in self._cards

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Hand):
            return NotImplemented
        return self._cards == other._cards

    def __hash__(self) -> int:
        return hash(self._cards)

    def __str__(self) -> str:
        return "".join(str(c) for c in self._cards)

    def __repr__(self) -> str:
        return f"Hand({', '.join(str(c) for c in self._cards)})"

    @classmethod
    def from_string(cls, s: str) -> "Hand":
        """Parse hand from concrete cards like 'AsKh'."""
        return cls(*parse_cards(s))

    def to_treys(self) -> list[int]:
        """Convert to treys library format."""
        return [c.to_treys() for c in self._cards]


class Street(Enum):
    """Board stages, keyed by the number of community cards."""
    PREFLOP = 0
    FLOP = 3
    TURN = 4
    RIVER = 5

    @classmethod
    def for_cards(cls, n: int) -> "Street":
        """Street for a board holding n cards."""
        try:
            return cls(n)
        except ValueError:
            raise ConstructionError(f"Invalid board size: {n}") from None


class Board:
    """Community cards; the street follows from how many there are."""

    __slots__ = ("_cards", "_street")

    def __init__(self, *cards: Card):
        self._street = Street.for_cards(len(cards))
        if len(set(cards)) != len(cards):
            raise ConstructionError(f"Duplicate cards on board: {cards}")
        self._cards = tuple(cards)

    @property
    def cards(self) -> tuple[Card, ...]:
        return self._cards

    @property
    def street(self) -> Street:
        return self._street

    @property
    def missing(self) -> int:
        """Number of cards still to come."""
        return Street.RIVER.value - len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card: object) -> bool:
        return card in self._cards

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._cards == other._cards

    def __hash__(self) -> int:
        return hash(self._cards)

    def __str__(self) -> str:
        return "".join(str(c) for c in self._cards)

    def __repr__(self) -> str:
        return f"Board({str(self) or 'preflop'})"

    @classmethod
    def from_string(cls, s: str) -> "Board":
        """Parse board from string like 'Ks7h6d' or 'Ks 7h 6d'."""
        return cls(*parse_cards(s))


# Standard 52-card deck in a fixed order
FULL_DECK: tuple[Card, ...] = tuple(
    Card(Rank(rank), Suit(suit))
    for rank in range(2, 15)
    for suit in range(4)
)
