"""Tests for dyadic rational helpers."""

from __future__ import annotations

from fractions import Fraction

import pytest

from cgt_engine.errors import ConstructionError, InvalidNumberError
from cgt_engine.numeric.dyadic import (
    denominator_exponent,
    format_number,
    is_dyadic,
    parse_number,
    to_dyadic,
)
from cgt_engine.numeric.nimber import mex, nim_sum


class TestToDyadic:
    def test_int(self) -> None:
        assert to_dyadic(5) == Fraction(5)

    def test_fraction_is_normalized(self) -> None:
        assert to_dyadic(Fraction(6, 4)) == Fraction(3, 2)

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("42", Fraction(42)),
            ("-1/2", Fraction(-1, 2)),
            ("3/16", Fraction(3, 16)),
            (" 0 ", Fraction(0)),
        ],
    )
    def test_text(self, text: str, expected: Fraction) -> None:
        assert to_dyadic(text) == expected

    @pytest.mark.parametrize("value", [Fraction(1, 3), "1/3", "5/12"])
    def test_rejects_non_dyadic(self, value: object) -> None:
        with pytest.raises(InvalidNumberError):
            to_dyadic(value)  # type: ignore[arg-type]

    @pytest.mark.parametrize("value", ["1/0", "abc", "", "1/2/3"])
    def test_rejects_malformed_text(self, value: str) -> None:
        with pytest.raises(InvalidNumberError):
            to_dyadic(value)

    def test_rejects_bool_and_float(self) -> None:
        with pytest.raises(InvalidNumberError):
            to_dyadic(True)
        with pytest.raises(InvalidNumberError):
            to_dyadic(1.5)  # type: ignore[arg-type]

    def test_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            to_dyadic("1/3")
        assert issubclass(InvalidNumberError, ConstructionError)


class TestHelpers:
    def test_is_dyadic(self) -> None:
        assert is_dyadic(Fraction(3, 8))
        assert is_dyadic(Fraction(7))
        assert not is_dyadic(Fraction(1, 6))

    def test_denominator_exponent(self) -> None:
        assert denominator_exponent(Fraction(52)) == 0
        assert denominator_exponent(Fraction(1, 8)) == 3

    def test_parse_number(self) -> None:
        assert parse_number("-3/8") == Fraction(-3, 8)

    @pytest.mark.parametrize(
        ("value", "text"),
        [
            (Fraction(0), "0"),
            (Fraction(-3), "-3"),
            (Fraction(3, 16), "3/16"),
            (Fraction(-1, 2), "-1/2"),
        ],
    )
    def test_format_number(self, value: Fraction, text: str) -> None:
        assert format_number(value) == text


class TestNimber:
    def test_nim_sum_is_xor(self) -> None:
        assert nim_sum(3, 5) == 6
        assert nim_sum(4, 4) == 0
        assert nim_sum(0, 7) == 7

    def test_mex(self) -> None:
        assert mex([]) == 0
        assert mex([0, 1, 3]) == 2
        assert mex([1, 2]) == 0
        assert mex(iter([0, 0, 1])) == 2
