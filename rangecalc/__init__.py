"""
RangeCalc: Texas Hold'em equity and range analysis

Evaluates hand strength and estimates how often a hand or a weighted
range of hands wins, ties or loses against other hands and ranges,
on any partially or fully dealt board.
"""

__version__ = "0.1.0"
