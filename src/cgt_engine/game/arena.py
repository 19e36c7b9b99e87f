"""Value arena — append-only, hash-consed storage of position nodes.

全局面ノードを所有するアリーナ。
構造的に等しいノードには必ず同じIDを返す（ハッシュコンシング）。
ノードは追記のみで削除されないため、IDは実行中ずっと有効。

並行性:
  索引はキーのハッシュで分割したストライプ（ロック + dict）で管理する。
  同じ構造キーの登録が競合してもストライプのロックで直列化され、
  外部から見えるIDは必ず1つに収束する。全体を覆うロックは持たない
  （リストへの追記だけは短い専用ロックで保護する）。
"""

from __future__ import annotations

import threading
from fractions import Fraction

from cgt_engine.errors import InvalidNumberError, UnknownPositionError
from cgt_engine.game.types import Node, NodeKind, PositionId

_Options = tuple[tuple[PositionId, ...], tuple[PositionId, ...]]


class ValueArena:
    """Exclusive owner of every interned position node."""

    def __init__(self, stripes: int = 64) -> None:
        self._nodes: list[Node] = []
        self._append_lock = threading.Lock()
        self._stripes: list[tuple[threading.Lock, dict[Node, PositionId]]] = [
            (threading.Lock(), {}) for _ in range(stripes)
        ]
        # NUMERIC ノードの導出済み選択肢（同じ値が再計算されるだけなので競合は無害）
        self._numeric_options: dict[PositionId, _Options] = {}
        self.zero = self.intern(Node.numeric(Fraction(0)))

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, position_id: object) -> bool:
        return (
            isinstance(position_id, int)
            and not isinstance(position_id, bool)
            and 0 <= position_id < len(self._nodes)
        )

    def intern(self, node: Node) -> PositionId:
        """Return the id of ``node``, appending it if it was never seen.

        ノードを登録してIDを返す。既に同じ構造のノードがあればそのIDを返す。
        MOVES ノードの選択肢は既存のIDでなければならない。新しいノードは
        既存のノードしか参照できないので、循環した局面は構築できない。
        """
        if node.kind is NodeKind.MOVES:
            for option in node.left + node.right:
                self.check(option)
        elif node.nimber < 0:
            raise InvalidNumberError(node.nimber, "nimber must be non-negative")

        lock, index = self._stripes[hash(node) % len(self._stripes)]
        existing = index.get(node)
        if existing is not None:
            return existing
        with lock:
            existing = index.get(node)
            if existing is not None:
                return existing
            with self._append_lock:
                position_id = PositionId(len(self._nodes))
                self._nodes.append(node)
            index[node] = position_id
        return position_id

    def check(self, position_id: object) -> PositionId:
        """Validate an id issued by this arena."""
        if position_id not in self:
            raise UnknownPositionError(position_id)
        return PositionId(position_id)  # type: ignore[arg-type]

    def resolve(self, position_id: PositionId) -> Node:
        """IDからノードを取得する（読み取り専用）。"""
        return self._nodes[self.check(position_id)]

    def numeric_value(self, position_id: PositionId) -> tuple[Fraction, int] | None:
        """NUMERIC ノードなら (数, ニム数) を、それ以外は None を返す。"""
        node = self._nodes[position_id]
        if node.kind is NodeKind.NUMERIC:
            return node.number, node.nimber
        return None

    def options(
        self, position_id: PositionId
    ) -> tuple[tuple[PositionId, ...], tuple[PositionId, ...]]:
        """Return (left options, right options) of any node.

        NUMERIC ノードの選択肢は標準形の形から導出する:
          0 = { | },  n = {n-1 | } (n > 0),  -n = { | -n+1}
          m/2^k = {(m-1)/2^k | (m+1)/2^k}
          x*n = {x, x*, ..., x*(n-1) | x, x*, ..., x*(n-1)}
        """
        node = self.resolve(position_id)
        if node.kind is NodeKind.MOVES:
            return node.left, node.right
        cached = self._numeric_options.get(position_id)
        if cached is not None:
            return cached

        x, n = node.number, node.nimber
        left: tuple[PositionId, ...]
        right: tuple[PositionId, ...]
        if n > 0:
            left = tuple(self.intern(Node.numeric(x, j)) for j in range(n))
            right = left
        elif x == 0:
            left, right = (), ()
        elif x.denominator == 1 and x > 0:
            left, right = (self.intern(Node.numeric(x - 1)),), ()
        elif x.denominator == 1:
            left, right = (), (self.intern(Node.numeric(x + 1)),)
        else:
            step = Fraction(1, x.denominator)
            left = (self.intern(Node.numeric(x - step)),)
            right = (self.intern(Node.numeric(x + step)),)

        self._numeric_options[position_id] = (left, right)
        return left, right
