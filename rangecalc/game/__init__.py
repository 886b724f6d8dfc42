"""Card model, evaluation, ranges and calculators."""

from .cards import Card, Hand, Board, Rank, Suit, Street, FULL_DECK
from .evaluator import (
    HandCategory, HandValue, Evaluator, DefaultEvaluator, TreysEvaluator,
)
from .groups import (
    SimpleHandGroup, Range, HandGroup,
    hand_group, parse_range, range_from_string, get_all_hands,
)
from .equity import Equity, EquityConfig, EquityCalculationBuilder, calculate_equity
from .texture import TextureConfig, TextureAnalysisBuilder, analyze_texture
from . import exceptions

__all__ = [
    "Card",
    "Hand",
    "Board",
    "FULL_DECK",
    "Rank",
    "Suit",
    "Street",
    "HandCategory",
    "HandValue",
    "Evaluator",
    "DefaultEvaluator",
    "TreysEvaluator",
    "SimpleHandGroup",
    "Range",
    "HandGroup",
    "hand_group",
    "parse_range",
    "range_from_string",
    "get_all_hands",
    "Equity",
    "EquityConfig",
    "EquityCalculationBuilder",
    "calculate_equity",
    "TextureConfig",
    "TextureAnalysisBuilder",
    "analyze_texture",
    "exceptions",
]
