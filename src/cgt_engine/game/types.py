"""Types for the position model — node tags, interned nodes, outcomes.

局面モデルの基本型。
局面は「左の選択肢の集合」と「右の選択肢の集合」の組で、各選択肢は局面ID。
単純な値（整数・二進有理数・ニム数とその和）は木を作らずに
NUMERIC タグ付きノードとしてコンパクトに表現する。
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum, unique
from fractions import Fraction
from typing import NewType

# アリーナ内のインデックス。一度発行されたIDは無効化も再利用もされない
PositionId = NewType("PositionId", int)


@unique
class NodeKind(IntEnum):
    """Discriminator for the two node shapes.

    NUMERIC: 数 + ニム数（x + *n）。選択肢は標準形の形から導出する。
    MOVES:   一般の局面。左右の選択肢IDを明示的に持つ。
    """

    NUMERIC = 0
    MOVES = 1


@unique
class Outcome(IntEnum):
    """Result of comparing two positions under the game partial order."""

    LESS = 0
    GREATER = 1
    EQUAL = 2
    INCOMPARABLE = 3

    @property
    def flipped(self) -> Outcome:
        """比較の左右を入れ替えた結果。LESS ↔ GREATER。"""
        if self is Outcome.LESS:
            return Outcome.GREATER
        if self is Outcome.GREATER:
            return Outcome.LESS
        return self

    @property
    def symbol(self) -> str:
        return _OUTCOME_SYMBOLS[self]

    @classmethod
    def from_flags(cls, leq: bool, geq: bool) -> Outcome:
        """(g <= h, g >= h) の組から比較結果を作る。"""
        if leq and geq:
            return cls.EQUAL
        if leq:
            return cls.LESS
        if geq:
            return cls.GREATER
        return cls.INCOMPARABLE


_OUTCOME_SYMBOLS = {
    Outcome.LESS: "<",
    Outcome.GREATER: ">",
    Outcome.EQUAL: "=",
    Outcome.INCOMPARABLE: "||",
}


def _normalize(ids: Iterable[int]) -> tuple[int, ...]:
    # 重複を除いてID順に並べる（構造的に等しいノードが同じキーになるように）
    return tuple(sorted(set(ids)))


@dataclass(frozen=True)
class Node:
    """An interned position node.

    アリーナに格納されるノード（イミュータブル）。
    正規化済みのフィールドに対する等価性・ハッシュがそのまま構造キーになる。
    ノードは直接作らず numeric() / moves() を使うこと。
    """

    kind: NodeKind
    left: tuple[int, ...] = ()
    right: tuple[int, ...] = ()
    number: Fraction = Fraction(0)
    nimber: int = 0

    @classmethod
    def numeric(cls, number: Fraction, nimber: int = 0) -> Node:
        return cls(NodeKind.NUMERIC, number=Fraction(number), nimber=nimber)

    @classmethod
    def moves(cls, left: Iterable[int], right: Iterable[int]) -> Node:
        return cls(NodeKind.MOVES, left=_normalize(left), right=_normalize(right))

    @property
    def is_numeric(self) -> bool:
        return self.kind is NodeKind.NUMERIC

    @property
    def is_number(self) -> bool:
        """純粋な数（ニム成分なし）なら True。"""
        return self.kind is NodeKind.NUMERIC and self.nimber == 0


@dataclass(frozen=True)
class PositionView:
    """Structural view of a position, as returned by ``describe``.

    シリアライズや表示のアダプタに渡す構造ビュー。
    NUMERIC の場合 left/right には導出した選択肢IDが入るが、
    再構築には number/nimber タグを使う。
    """

    id: PositionId
    kind: NodeKind
    left: tuple[PositionId, ...]
    right: tuple[PositionId, ...]
    number: Fraction | None = None
    nimber: int = 0
