"""Quicksort — an impartial game on a sequence of integers.

クイックソート・ゲーム（不偏ゲーム）のルールセットアダプタ。

手番のプレイヤーはピボットとなる値を1つ選び、それより小さい値をピボットの前へ、
大きい値を後ろへ（相対順序を保ったまま）移す。ピボットと同じ値の他の要素は
取り除かれる。並びが変わらない手は選べない。
ソート済みの列になったら手がなくなり、手番のプレイヤーの負け。

不偏ゲームなので左右の手は同じで、値は常にニム数 *nim_value になる。
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from cgt_engine.numeric.nimber import mex


@dataclass(frozen=True)
class Quicksort:
    """An immutable Quicksort position."""

    values: tuple[int, ...]

    @classmethod
    def parse(cls, text: str) -> Quicksort:
        """Parse a whitespace- or comma-separated list, e.g. ``"3 1 2"``."""
        tokens = text.replace(",", " ").split()
        try:
            return cls(tuple(int(t) for t in tokens))
        except ValueError as exc:
            raise ValueError(f"invalid quicksort sequence: {text!r}") from exc

    def pick(self, pivot: int) -> Quicksort:
        """pivot を選んだ後の局面を返す。

        ピボットは1つだけ残り、同じ値の他の要素は取り除かれる
        （例: 2 3 2 1 でピボット 2 → 1 2 3）。
        """
        before = tuple(v for v in self.values if v < pivot)
        after = tuple(v for v in self.values if v > pivot)
        return Quicksort(before + (pivot,) + after)

    def moves(self) -> list[Quicksort]:
        result: list[Quicksort] = []
        for pivot in self.values:
            moved = self.pick(pivot)
            # 並びが変わらない手と重複は除く
            if moved != self and moved not in result:
                result.append(moved)
        return result

    def left_moves(self) -> list[Quicksort]:
        return self.moves()

    def right_moves(self) -> list[Quicksort]:
        return self.moves()

    def nim_value(self) -> int:
        """Grundy value computed directly by mex over the moves."""
        return _grundy(self)

    def __str__(self) -> str:
        return " ".join(str(v) for v in self.values)


@lru_cache(maxsize=None)
def _grundy(game: Quicksort) -> int:
    return mex(_grundy(m) for m in game.moves())
