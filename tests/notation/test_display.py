"""Tests for position notation."""

from __future__ import annotations

from fractions import Fraction

import pytest

from cgt_engine.engine.core import GameEngine
from cgt_engine.notation.display import format_numeric


class TestFormatNumeric:
    @pytest.mark.parametrize(
        ("number", "nimber", "text"),
        [
            (Fraction(0), 0, "0"),
            (Fraction(-2), 0, "-2"),
            (Fraction(-3, 8), 0, "-3/8"),
            (Fraction(0), 1, "*"),
            (Fraction(0), 2, "*2"),
            (Fraction(1), 1, "1*"),
            (Fraction(1, 2), 3, "1/2*3"),
        ],
    )
    def test_format(self, number: Fraction, nimber: int, text: str) -> None:
        assert format_numeric(number, nimber) == text


class TestPositionToStr:
    def test_braces(self) -> None:
        engine = GameEngine()
        star = engine.construct_nimber(1)
        assert engine.display(engine.construct([engine.zero], [star])) == "{0|*}"
        assert engine.display(engine.construct()) == "{|}"

    def test_options_sorted_by_text(self) -> None:
        engine = GameEngine()
        star = engine.construct_nimber(1)
        g = engine.construct([engine.zero, star], [engine.zero])
        assert engine.display(g) == "{*,0|0}"

    def test_nested(self) -> None:
        engine = GameEngine()
        inner = engine.construct([engine.zero], [engine.zero])
        g = engine.construct([inner], [engine.construct_number(-1)])
        assert engine.display(g) == "{{0|0}|-1}"

    def test_deep_position_renders_without_recursion(self) -> None:
        engine = GameEngine()
        p = engine.zero
        for _ in range(5000):
            p = engine.construct([p], [])
        assert len(engine.display(p)) == 4 + 3 * 4999


class TestMaxLength:
    def test_short_text_is_unchanged(self) -> None:
        engine = GameEngine()
        g = engine.construct([engine.zero], [engine.construct_nimber(1)])
        assert engine.display(g, max_length=5) == "{0|*}"

    def test_long_text_is_cut_to_a_prefix(self) -> None:
        engine = GameEngine()
        inner = engine.construct([engine.zero], [engine.zero])
        g = engine.construct([inner], [engine.construct_number(-1)])
        full = engine.display(g)
        assert engine.display(g, max_length=6) == full[:6] + "..."

    def test_shared_subpositions_stay_bounded(self) -> None:
        # 共有された子が2倍ずつ展開される DAG（上限なしなら 2^40 文字を超える）
        engine = GameEngine()
        p = engine.construct([engine.zero], [engine.zero])
        for _ in range(40):
            q = engine.construct([p], [])
            p = engine.construct([p, q], [p, q])
        text = engine.display(p, max_length=100)
        assert len(text) == 103
        assert text.endswith("...")
