"""Tests for the comparison engine."""

from __future__ import annotations

import itertools

import pytest

from cgt_engine.engine.core import GameEngine
from cgt_engine.errors import UnknownPositionError
from cgt_engine.game.types import Outcome, PositionId


@pytest.fixture
def engine() -> GameEngine:
    return GameEngine()


def _star(engine: GameEngine) -> PositionId:
    """{0|0} を選択肢の木として作る（NUMERIC ではない）。"""
    return engine.construct([engine.zero], [engine.zero])


class TestBasicOrder:
    def test_identity(self, engine: GameEngine) -> None:
        assert engine.compare(engine.zero, engine.zero) is Outcome.EQUAL

    def test_one_greater_than_zero(self, engine: GameEngine) -> None:
        one = engine.construct([engine.zero], [])
        assert engine.compare(one, engine.zero) is Outcome.GREATER
        assert engine.compare(engine.zero, one) is Outcome.LESS

    def test_minus_one_less_than_zero(self, engine: GameEngine) -> None:
        minus_one = engine.construct([], [engine.zero])
        assert engine.compare(minus_one, engine.zero) is Outcome.LESS

    def test_star_confused_with_zero(self, engine: GameEngine) -> None:
        assert engine.compare(_star(engine), engine.zero) is Outcome.INCOMPARABLE
        assert not engine.leq(_star(engine), engine.zero)

    def test_up_is_positive_but_confused_with_star(self, engine: GameEngine) -> None:
        star = _star(engine)
        up = engine.construct([engine.zero], [star])
        assert engine.compare(up, engine.zero) is Outcome.GREATER
        assert engine.compare(up, star) is Outcome.INCOMPARABLE

    def test_structural_and_numeric_forms_are_equal(self, engine: GameEngine) -> None:
        one = engine.construct([engine.zero], [])
        assert engine.compare(one, engine.construct_number(1)) is Outcome.EQUAL
        assert engine.equal(_star(engine), engine.construct_nimber(1))

    def test_moves_zero_equals_numeric_zero(self, engine: GameEngine) -> None:
        # {-1|1} = 0
        g = engine.construct([engine.construct_number(-1)], [engine.construct_number(1)])
        assert engine.compare(g, engine.zero) is Outcome.EQUAL


class TestNumericFastPath:
    def test_numbers(self, engine: GameEngine) -> None:
        half = engine.construct_number("1/2")
        one = engine.construct_number(1)
        assert engine.compare(half, one) is Outcome.LESS
        assert engine.compare(one, half) is Outcome.GREATER

    def test_nimber_parts(self, engine: GameEngine) -> None:
        one = engine.construct_number(1)
        one_star = engine.construct_nimber(1, 1)
        assert engine.compare(one_star, one) is Outcome.INCOMPARABLE
        assert engine.compare(engine.construct_nimber(2), engine.construct_nimber(1)) is (
            Outcome.INCOMPARABLE
        )
        # ニム数は無限小: 数の部分が異なれば大小が決まる
        assert engine.compare(one_star, engine.construct_number("1/2")) is Outcome.GREATER


class TestProperties:
    def test_antisymmetry(self, engine: GameEngine) -> None:
        star = _star(engine)
        positions = [
            engine.zero,
            star,
            engine.construct([engine.zero], [star]),
            engine.construct([engine.construct_number(1)], [engine.construct_number(-1)]),
            engine.construct_number("3/4"),
            engine.construct_nimber(2),
        ]
        for g, h in itertools.product(positions, repeat=2):
            assert engine.compare(g, h) is engine.compare(h, g).flipped

    def test_result_is_cached_once_per_pair(self, engine: GameEngine) -> None:
        star = _star(engine)
        engine.compare(star, engine.zero)
        engine.compare(engine.zero, star)
        key = (min(star, engine.zero), max(star, engine.zero))
        assert key in engine.comparison_cache
        assert (key[1], key[0]) not in engine.comparison_cache

    def test_leq_is_cached_per_ordered_pair(self, engine: GameEngine) -> None:
        star = _star(engine)
        big = engine.construct_number(300)
        assert not engine.leq(big, star)
        assert (big, star) in engine.leq_cache
        assert engine.leq(star, big)
        assert (star, big) in engine.leq_cache

    def test_unknown_id(self, engine: GameEngine) -> None:
        with pytest.raises(UnknownPositionError):
            engine.compare(engine.zero, PositionId(99))
