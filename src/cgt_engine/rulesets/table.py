"""Transposition table shared by ruleset adapters.

ルールセットの局面 → 標準形の局面ID の対応を保持する置換表。
同じ局面（ハッシュ可能）を何度も展開しないようにエンジンと組にして使う。
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

from cgt_engine.engine.cache import MemoCache
from cgt_engine.engine.core import GameEngine
from cgt_engine.game.protocol import PartizanGame
from cgt_engine.game.types import PositionId

G = TypeVar("G")


class TranspositionTable(Generic[G]):
    """Pairs a GameEngine with a cache of ruleset positions."""

    def __init__(self, engine: GameEngine | None = None) -> None:
        self.engine = engine if engine is not None else GameEngine()
        self._positions: MemoCache[G, PositionId] = MemoCache(
            "positions", self.engine.config.lock_stripes
        )

    def get(self, game: G) -> PositionId | None:
        return self._positions.get(game)

    def get_or_compute(self, game: G, compute: Callable[[], PositionId]) -> PositionId:
        return self._positions.get_or_compute(game, compute)

    def __len__(self) -> int:
        return len(self._positions)


def position_of(game: PartizanGame, table: TranspositionTable) -> PositionId:
    """Return the canonical id of any ruleset position.

    左右の手を再帰的に標準形にしてから局面を組み立て、標準形にして返す。
    結果は置換表にキャッシュされる。
    """

    def compute() -> PositionId:
        engine = table.engine
        left = [position_of(m, table) for m in game.left_moves()]
        right = [position_of(m, table) for m in game.right_moves()]
        return engine.canonicalize(engine.construct(left, right))

    return table.get_or_compute(game, compute)
