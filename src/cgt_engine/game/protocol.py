"""PartizanGame protocol — all ruleset adapters implement this interface.

ルールセットアダプタの共通インタフェース（プロトコル）。

ドミノ倒し（Domineering）やクイックソートなどのルールセットがこのプロトコルを
実装することで、エンジンはルールに依存せずに局面の標準形を計算できる。
エンジン自身は合法手の生成を持たず、左右の選択肢の集合だけを受け取る。

重要: 局面はハッシュ可能でイミュータブルであること。
同じ局面を置換表（TranspositionTable）で共有するため。
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable  # isinstance() でのランタイムチェックを有効にする
class PartizanGame(Protocol):
    """Common interface for ruleset positions.

    左（Left）と右（Right）がそれぞれ異なる手の集合を持ち得る
    パルチザンゲームの局面。不偏ゲームは左右に同じ手を返せばよい。
    """

    def left_moves(self) -> Sequence[PartizanGame]:
        """左が1手で移れる局面のリストを返す。"""
        ...

    def right_moves(self) -> Sequence[PartizanGame]:
        """右が1手で移れる局面のリストを返す。"""
        ...
