"""Board texture analysis: which hand categories a range makes on a board."""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Union

from .cards import Board, Street
from .evaluator import DefaultEvaluator, Evaluator, HandCategory
from .exceptions import BoardNotSet, InvalidSetting, NoViableHands
from .groups import Range, SimpleHandGroup

logger = logging.getLogger(__name__)


@dataclass
class TextureConfig:
    """Configuration for texture analysis."""
    sample_size: int = 25000  # Divisor applied to accumulated weights
    evaluator: Evaluator = field(default_factory=DefaultEvaluator)
    board: Board = field(default_factory=Board)


class TextureAnalysisBuilder:
    """
    Estimates how often a range holds each hand category on a board.

    Every hand of the range that does not collide with the board is
    evaluated, and its range weight is added to the bucket of its
    category. Buckets are then divided by the configured sample size.
    Note this divisor is a fixed setting, not the number of hands that
    were evaluated, so the result only sums to one when the two agree.
    """

    DEFAULT_SAMPLE_SIZE = 25000

    def __init__(self, config: Optional[TextureConfig] = None):
        self.config = replace(config) if config else TextureConfig()

    def use_board(self, board: Union[Board, str]) -> "TextureAnalysisBuilder":
        """Board to analyze."""
        self.config.board = Board.from_string(board) if isinstance(board, str) else board
        return self

    def use_sample_size(self, sample_size: int) -> "TextureAnalysisBuilder":
        """Divisor used to turn accumulated weights into frequencies."""
        if sample_size <= 0:
            raise InvalidSetting("sample_size must be positive")
        self.config.sample_size = sample_size
        return self

    def use_evaluator(self, evaluator: Evaluator) -> "TextureAnalysisBuilder":
        """Evaluator used to classify each hand."""
        self.config.evaluator = evaluator
        return self

    def frequencies(
        self,
        group: Union[Range, SimpleHandGroup],
    ) -> dict[HandCategory, float]:
        """
        Frequencies of each hand category for a range on the board.

        Args:
            group: Range or hand group to analyze

        Returns:
            Every HandCategory mapped to its frequency
        """
        board = self.config.board
        if board.street is Street.PREFLOP:
            raise BoardNotSet("Board is not set to a postflop board")

        hands = [h for h in group.all() if h.disjoint(board)]
        if not hands:
            raise NoViableHands("No viable hands in range to use on the board")

        results = {category: 0.0 for category in HandCategory}
        for hand in hands:
            value = self.config.evaluator.value(hand, board)
            results[value.category] += group.weight(hand)

        logger.debug(
            "Analyzed %d of %d hands on %s",
            len(hands), len(group), board,
        )
        return {
            category: total / self.config.sample_size
            for category, total in results.items()
        }


def analyze_texture(
    group: Union[Range, SimpleHandGroup],
    board: Union[Board, str],
    config: Optional[TextureConfig] = None,
) -> dict[HandCategory, float]:
    """Texture frequencies with a one-off builder."""
    return TextureAnalysisBuilder(config).use_board(board).frequencies(group)
