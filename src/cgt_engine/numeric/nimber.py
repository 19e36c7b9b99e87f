"""Nimber arithmetic helpers."""

from __future__ import annotations

from collections.abc import Iterable


def nim_sum(a: int, b: int) -> int:
    """*a + *b = *(a XOR b)"""
    return a ^ b


def mex(values: Iterable[int]) -> int:
    """Minimum excluded value — the smallest non-negative int not in values.

    不偏ゲームの Grundy 値の計算に使う（Sprague–Grundy の定理）。
    """
    seen = set(values)
    n = 0
    while n in seen:
        n += 1
    return n
