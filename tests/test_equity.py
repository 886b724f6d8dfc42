"""Tests for equity calculations."""

import threading

import pytest

from rangecalc.game.cards import Board, Hand
from rangecalc.game.equity import (
    EquityCalculationBuilder, EquityConfig, calculate_equity, derive_seed,
)
from rangecalc.game.evaluator import TreysEvaluator
from rangecalc.game.exceptions import (
    CalculationCancelled, CardCollision, EmptyParticipantSet, EmptyRange,
    InvalidSetting, UnsampleableRange,
)
from rangecalc.game.groups import Range, hand_group, range_from_string


@pytest.fixture
def calculator():
    return EquityCalculationBuilder()


def assert_sums_to_one(equity, abs=1e-9):
    assert equity.win + equity.tie + equity.loss == pytest.approx(1.0, abs=abs)


class TestHandVsHand:
    def test_aces_vs_kings_preflop(self, calculator, aces, kings):
        equities = calculator.use_sample_size(20000).calculate(aces, kings)

        assert equities[aces].win == pytest.approx(0.82, abs=0.015)
        assert equities[kings].win == pytest.approx(0.177, abs=0.015)
        assert equities[aces].trials == 20000
        for eq in equities.values():
            assert_sums_to_one(eq)

    def test_aces_vs_kings_on_kings_flop(self, calculator, aces, kings, board_flop):
        # Aces need one of the two remaining aces without the case king: 85 of 990
        equities = calculator.use_board(board_flop).calculate(aces, kings)

        assert equities[aces].win == pytest.approx(85 / 990)
        assert equities[kings].win == pytest.approx(905 / 990)
        assert equities[aces].tie == 0.0
        assert equities[aces].loss == pytest.approx(equities[kings].win)
        assert equities[aces].trials == 990

    def test_river_is_exact(self, calculator, aces, kings, board_river):
        equities = calculator.use_board(board_river).calculate(aces, kings)
        assert equities[kings].win == 1.0
        assert equities[aces].loss == 1.0
        assert equities[aces].trials == 1

    def test_split_pot(self, calculator):
        ak1 = Hand.from_string("AcKh")
        ak2 = Hand.from_string("AdKc")
        equities = calculator.use_board("QsJsTs9d2c").calculate(ak1, ak2)

        for eq in equities.values():
            assert eq.tie == 1.0
            assert eq.share == 0.5

    def test_string_board(self, calculator, aces, kings):
        equities = calculator.use_board("Ks7h6d").calculate(aces, kings)
        assert equities[aces].win == pytest.approx(85 / 990)

    def test_multiway_shares(self, calculator, aces, kings, board_flop):
        queens = Hand.from_string("QcQh")
        equities = calculator.use_board(board_flop).calculate(aces, kings, queens)

        assert sum(eq.share for eq in equities.values()) == pytest.approx(1.0)
        for eq in equities.values():
            assert_sums_to_one(eq)
        assert equities[kings].win > equities[aces].win > equities[queens].win

    def test_keys_in_input_order(self, calculator, aces, kings, board_flop):
        equities = calculator.use_board(board_flop).calculate(kings, aces)
        assert list(equities) == [kings, aces]

    def test_treys_evaluator(self, calculator, aces, kings, board_flop):
        equities = (
            calculator.use_board(board_flop)
            .use_evaluator(TreysEvaluator())
            .calculate(aces, kings)
        )
        assert equities[aces].win == pytest.approx(85 / 990)


class TestRanges:
    def test_range_vs_range_preflop(self, calculator):
        a = Range().define(hand_group("AA")).define(hand_group("72o"))
        b = Range().define(hand_group("KK"))

        equities = calculator.use_sample_size(20000).calculate(a, b)

        assert equities[a].win == pytest.approx(0.35, abs=0.03)
        assert equities[b].win == pytest.approx(0.64, abs=0.03)
        for eq in equities.values():
            assert_sums_to_one(eq)

    def test_range_enumerated_on_flop(self, calculator, kings, board_flop):
        # No aces combo can make a flush here, so every combo has 85 winning runouts
        aces = range_from_string("AA")
        equities = calculator.use_board(board_flop).calculate(aces, kings)

        assert equities[aces].win == pytest.approx(85 / 990)
        assert equities[aces].trials == 6 * 990

    def test_weighted_range_enumeration_sums_to_one(self, calculator, board_flop):
        a = range_from_string("AA,QQ:0.5")
        b = range_from_string("KK:0.8")

        equities = calculator.use_board(board_flop).calculate(a, b)
        for eq in equities.values():
            assert_sums_to_one(eq)
        assert equities[a].share + equities[b].share == pytest.approx(1.0)

    def test_blocking_ranges_simulation_matches_enumeration(self, board_flop):
        # Aces and queens both block the suited AQ combos
        a = range_from_string("AA,QQ")
        b = range_from_string("AQs")

        exact = calculate_equity(a, b, board=board_flop)
        config = EquityConfig(sample_size=20000, enumeration_limit=0)
        sampled = calculate_equity(a, b, board=board_flop, config=config)

        # colliding combinations are left out of the exact count
        assert exact[a].trials < 12 * 4 * 990
        assert sampled[a].trials == 20000
        assert sampled[a].share == pytest.approx(exact[a].share, abs=0.015)
        assert sampled[b].share == pytest.approx(exact[b].share, abs=0.015)

    def test_hand_group_participant(self, calculator, aces, board_flop):
        kings = hand_group("KK")
        equities = calculator.use_board(board_flop).calculate(aces, kings)
        assert set(equities) == {aces, kings}
        assert equities[kings].win > 0.8

    def test_range_not_frozen_by_calculation(self, calculator, kings, board_flop):
        r = range_from_string("AA")
        calculator.use_board(board_flop).calculate(r, kings)
        assert not r.frozen
        r.define(hand_group("QQ"))

    def test_colliding_range_hands_are_skipped(self, calculator, board_flop):
        # Hero holds the Ac, so villain's aces come from the other five combos
        hero = Hand.from_string("AcKd")
        villain = range_from_string("AA,QQ")
        equities = calculator.use_board(board_flop).calculate(hero, villain)
        assert_sums_to_one(equities[villain])


class TestDeterminism:
    def test_repeatable(self, aces, kings):
        first = EquityCalculationBuilder().use_sample_size(2000).calculate(aces, kings)
        second = EquityCalculationBuilder().use_sample_size(2000).calculate(aces, kings)
        assert first == second

    def test_independent_of_workers(self):
        a = range_from_string("AA,72o")
        b = range_from_string("KK")
        config = EquityConfig(sample_size=4000, chunk_size=500)

        serial = EquityCalculationBuilder(config).calculate(a, b)
        threaded = EquityCalculationBuilder(config).use_workers(4).calculate(a, b)
        assert serial[a] == threaded[a]
        assert serial[b] == threaded[b]

    def test_enumeration_independent_of_workers(self, board_flop):
        a = range_from_string("AA,QQ:0.5")
        b = range_from_string("KK")
        serial = EquityCalculationBuilder().use_board(board_flop).calculate(a, b)
        threaded = EquityCalculationBuilder().use_board(board_flop).use_workers(3).calculate(a, b)
        assert serial[a].win == pytest.approx(threaded[a].win, abs=1e-12)

    def test_derive_seed_is_stable(self, aces, kings):
        board = Board.from_string("Ks7h6d")
        assert derive_seed([aces, kings], board, 1000) == derive_seed([aces, kings], board, 1000)
        assert derive_seed([aces, kings], board, 1000) != derive_seed([aces, kings], Board(), 1000)
        assert derive_seed([aces, kings], board, 1000) != derive_seed([aces, kings], board, 1000, seed=1)

    def test_seed_depends_on_weights(self, kings):
        board = Board()
        a = range_from_string("AA:0.5")
        b = range_from_string("AA:0.25")
        assert derive_seed([a, kings], board, 10) != derive_seed([b, kings], board, 10)


class TestErrors:
    def test_single_participant(self, calculator, aces):
        with pytest.raises(EmptyParticipantSet):
            calculator.calculate(aces)

    def test_no_participants(self, calculator):
        with pytest.raises(EmptyParticipantSet):
            calculator.calculate()

    def test_hands_collide(self, calculator, aces):
        with pytest.raises(CardCollision):
            calculator.calculate(aces, Hand.from_string("AhKd"))

    def test_same_hand_twice_collides(self, calculator, aces, kings):
        with pytest.raises(CardCollision):
            calculator.calculate(aces, kings, aces)

    def test_hand_collides_with_board(self, calculator, aces):
        with pytest.raises(CardCollision):
            calculator.use_board("Ac7h6d").calculate(aces, Hand.from_string("KcKh"))

    def test_range_fully_blocked(self, calculator, kings):
        blocked = Range().define(Hand.from_string("AcAh"))
        with pytest.raises(UnsampleableRange):
            calculator.use_board("Ac7h6d").calculate(blocked, kings)

    def test_empty_range(self, calculator, kings):
        with pytest.raises(EmptyRange):
            calculator.calculate(Range(), kings)

    def test_ranges_blocking_each_other_preflop(self, calculator):
        a = Range().define(Hand.from_string("AcAh"))
        b = Range().define(Hand.from_string("AcAd"))
        with pytest.raises(UnsampleableRange):
            calculator.use_sample_size(100).calculate(a, b)

    def test_ranges_blocking_each_other_enumerated(self, calculator, board_flop):
        a = Range().define(Hand.from_string("AcAh"))
        b = Range().define(Hand.from_string("AcAd"))
        with pytest.raises(UnsampleableRange):
            calculator.use_board(board_flop).calculate(a, b)

    def test_same_participant_twice(self, calculator):
        r = range_from_string("AA")
        with pytest.raises(InvalidSetting):
            calculator.calculate(r, r)

    def test_invalid_sample_size(self, calculator):
        with pytest.raises(InvalidSetting):
            calculator.use_sample_size(0)

    def test_invalid_workers(self, calculator):
        with pytest.raises(InvalidSetting):
            calculator.use_workers(0)

    def test_cancelled(self, calculator, aces, kings):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(CalculationCancelled):
            calculator.calculate(aces, kings, cancel=cancel)


class TestCalculateEquity:
    def test_convenience(self, aces, kings):
        equities = calculate_equity(aces, kings, board="Ks7h6d")
        assert equities[kings].win == pytest.approx(905 / 990)

    def test_config_board(self, aces, kings, board_flop):
        config = EquityConfig(board=board_flop)
        equities = calculate_equity(aces, kings, config=config)
        assert equities[aces].win == pytest.approx(85 / 990)
        # the caller's config is left alone
        assert config.board == board_flop
