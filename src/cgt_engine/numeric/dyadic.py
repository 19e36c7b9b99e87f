"""Dyadic rational numbers — exact values of short numeric games.

短いゲームの数値は分母が2のべき乗の有理数（二進有理数）になる。
ここでは標準ライブラリの Fraction をそのまま値の型として使い、
二進有理数であることの検証・整形・解析だけを提供する。
"""

from __future__ import annotations

from fractions import Fraction

from cgt_engine.errors import InvalidNumberError

NumberLike = int | Fraction | str


def is_dyadic(value: Fraction) -> bool:
    """分母が2のべき乗なら True。"""
    d = value.denominator
    return d & (d - 1) == 0


def denominator_exponent(value: Fraction) -> int:
    """Return k such that the denominator is 2**k.

    例: 52 → 0, 1/8 → 3
    """
    return value.denominator.bit_length() - 1


def parse_number(text: str) -> Fraction:
    """Parse ``"42"``, ``"-1/2"`` or ``"3/16"`` into a Fraction."""
    raw = text.strip()
    numerator, sep, denominator = raw.partition("/")
    try:
        num = int(numerator)
        den = int(denominator) if sep else 1
    except ValueError as exc:
        raise InvalidNumberError(text, "could not parse") from exc
    if den == 0:
        raise InvalidNumberError(text, "zero denominator")
    return Fraction(num, den)


def to_dyadic(value: NumberLike) -> Fraction:
    """Normalize an int, Fraction or numeric string to a dyadic Fraction.

    数値を Fraction に正規化し、二進有理数でなければ InvalidNumberError を送出する。
    1/3 のような値は有限のゲーム木で表現できないため受け付けない。
    """
    if isinstance(value, bool):
        raise InvalidNumberError(value, "booleans are not numbers")
    if isinstance(value, str):
        number = parse_number(value)
    elif isinstance(value, (int, Fraction)):
        number = Fraction(value)
    else:
        raise InvalidNumberError(value, f"unsupported type {type(value).__name__}")
    if not is_dyadic(number):
        raise InvalidNumberError(value)
    return number


def format_number(value: Fraction) -> str:
    """Fraction を "0", "-3", "3/16" 形式の文字列にする。"""
    if value.denominator == 1:
        return str(value.numerator)
    return f"{value.numerator}/{value.denominator}"
