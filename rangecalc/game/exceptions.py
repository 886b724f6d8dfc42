"""Errors raised by the card model, ranges and calculators."""


class RangeCalcError(Exception):
    """Base class for all library errors."""


class ConstructionError(RangeCalcError, ValueError):
    """A card, hand or board could not be built from its input."""


class InvalidArity(ConstructionError):
    """A hand was given a number of cards no supported game uses."""


class DuplicateDefinition(RangeCalcError, ValueError):
    """A hand or group is already defined within a range."""


class PartialOverlap(RangeCalcError, ValueError):
    """Some, but not all, hands of a group already exist within a range."""


class WeightOutOfBounds(RangeCalcError, ValueError):
    """A range weight outside of (0, 1]."""


class RangeFrozen(RangeCalcError, RuntimeError):
    """A frozen range was modified."""


class CardCollision(RangeCalcError, ValueError):
    """Participants or board share a card."""


class EmptyParticipantSet(RangeCalcError, ValueError):
    """Fewer than two participants were given to a calculation."""


class EmptyRange(RangeCalcError):
    """A range with no hands was sampled."""


class UnsampleableRange(RangeCalcError):
    """A range cannot produce a hand disjoint from the dealt cards."""


class BoardNotSet(RangeCalcError):
    """Texture analysis was requested on a preflop board."""


class NoViableHands(RangeCalcError, ValueError):
    """No hand in a range is disjoint from the board."""


class CalculationCancelled(RangeCalcError):
    """A calculation was cancelled between trials."""


class InvalidSetting(RangeCalcError, ValueError):
    """A calculator setting is out of range."""
