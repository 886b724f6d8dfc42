"""Pytest configuration and fixtures."""

import numpy as np
import pytest

from rangecalc.game.cards import Board, Hand


@pytest.fixture
def rng():
    """Seeded generator so sampling tests are repeatable."""
    return np.random.default_rng(12345)


@pytest.fixture
def aces():
    return Hand.from_string("AcAh")


@pytest.fixture
def kings():
    return Hand.from_string("KcKh")


@pytest.fixture
def board_flop():
    return Board.from_string("Ks7h6d")


@pytest.fixture
def board_river():
    return Board.from_string("Ks7d2c9h3s")
