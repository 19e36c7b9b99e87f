"""GameEngine — the public face of the core.

外部の協調コンポーネント（ルールセットアダプタ、シリアライザ、Web API、CLI）は
このクラスの construct / canonicalize / compare / sum / negate / describe だけを使う。

エンジンはアリーナとキャッシュをプロセス内で所有する。暗黙のグローバル状態は持たず、
必要な箇所で明示的にインスタンスを作ること。
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from fractions import Fraction
from typing import Any

from cgt_engine.engine.cache import MemoCache
from cgt_engine.engine.canonical import Canonicalizer
from cgt_engine.engine.compare import Comparator
from cgt_engine.engine.config import SEQUENTIAL_CONFIG, EngineConfig
from cgt_engine.engine.operations import GameOperations
from cgt_engine.engine.parallel import ParallelEvaluator
from cgt_engine.errors import EvaluationError, InvalidNumberError
from cgt_engine.game.arena import ValueArena
from cgt_engine.game.types import Node, NodeKind, Outcome, PositionId, PositionView
from cgt_engine.notation.display import position_to_str
from cgt_engine.numeric.dyadic import NumberLike, to_dyadic


@contextmanager
def _recursion_guard(position_id: PositionId) -> Iterator[None]:
    """RecursionError を EvaluationError に変換する。

    極端に深い局面は無限ループではなくエラーとして報告する。
    """
    try:
        yield
    except RecursionError as exc:
        raise EvaluationError(position_id, "recursion limit exceeded") from exc


class GameEngine:
    """Construct, canonicalize and compare combinatorial game positions.

    使い方:
        engine = GameEngine()
        zero = engine.zero
        star = engine.construct([zero], [zero])
        engine.display(engine.canonicalize(star))   # "*"
    """

    def __init__(self, config: EngineConfig = SEQUENTIAL_CONFIG) -> None:
        self.config = config
        stripes = config.lock_stripes
        self.arena = ValueArena(stripes=stripes)
        self.canonical_cache: MemoCache[PositionId, PositionId] = MemoCache("canonical", stripes)
        self.comparison_cache: MemoCache[tuple[PositionId, PositionId], Outcome] = MemoCache(
            "comparison", stripes
        )
        self.evaluator = ParallelEvaluator(config.max_workers) if config.parallel else None
        self.leq_cache: MemoCache[tuple[PositionId, PositionId], bool] = MemoCache(
            "leq", stripes
        )
        self.comparator = Comparator(self.arena, self.comparison_cache, self.leq_cache)
        self.canonicalizer = Canonicalizer(
            self.arena, self.comparator, self.canonical_cache, config, self.evaluator
        )
        self.operations = GameOperations(
            self.arena, MemoCache("sum", stripes), MemoCache("negation", stripes)
        )

    # ── 構築 ──────────────────────────────────────────────────────────

    @property
    def zero(self) -> PositionId:
        return self.arena.zero

    def construct(
        self, left: Iterable[PositionId] = (), right: Iterable[PositionId] = ()
    ) -> PositionId:
        """Build { left | right } from existing position ids.

        存在しないIDを含む場合は UnknownPositionError を送出する。
        """
        return self.arena.intern(Node.moves(left, right))

    def construct_number(self, value: NumberLike) -> PositionId:
        """Build a dyadic rational number directly (no option tree)."""
        return self.arena.intern(Node.numeric(to_dyadic(value)))

    def construct_nimber(self, value: int, number: NumberLike = 0) -> PositionId:
        """Build number + *value."""
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidNumberError(value, "nimber must be a non-negative int")
        return self.arena.intern(Node.numeric(to_dyadic(number), value))

    # ── 評価 ──────────────────────────────────────────────────────────

    def canonicalize(self, position_id: PositionId) -> PositionId:
        """Return the canonical form of a position."""
        self.arena.check(position_id)
        with _recursion_guard(position_id):
            return self.canonicalizer.canonicalize(position_id)

    def compare(self, g: PositionId, h: PositionId) -> Outcome:
        """Compare two positions under the game partial order."""
        self.arena.check(g)
        self.arena.check(h)
        with _recursion_guard(g):
            return self.comparator.compare(g, h)

    def leq(self, g: PositionId, h: PositionId) -> bool:
        self.arena.check(g)
        self.arena.check(h)
        with _recursion_guard(g):
            return self.comparator.leq(g, h)

    def equal(self, g: PositionId, h: PositionId) -> bool:
        return self.compare(g, h) is Outcome.EQUAL

    def sum(self, g: PositionId, h: PositionId) -> PositionId:
        with _recursion_guard(g):
            return self.operations.add(g, h)

    def negate(self, g: PositionId) -> PositionId:
        with _recursion_guard(g):
            return self.operations.negate(g)

    def subtract(self, g: PositionId, h: PositionId) -> PositionId:
        with _recursion_guard(g):
            return self.operations.subtract(g, h)

    # ── 参照 ──────────────────────────────────────────────────────────

    def describe(self, position_id: PositionId) -> PositionView:
        """Return the structural view (options and numeric tag) of a position."""
        node = self.arena.resolve(position_id)
        left, right = self.arena.options(position_id)
        if node.kind is NodeKind.NUMERIC:
            return PositionView(
                id=position_id,
                kind=node.kind,
                left=left,
                right=right,
                number=node.number,
                nimber=node.nimber,
            )
        return PositionView(id=position_id, kind=node.kind, left=left, right=right)

    def from_view(self, view: PositionView) -> PositionId:
        """Rebuild a position from its structural view (inverse of describe)."""
        if view.kind is NodeKind.NUMERIC:
            number = view.number if view.number is not None else Fraction(0)
            return self.construct_nimber(view.nimber, number)
        return self.construct(view.left, view.right)

    def display(self, position_id: PositionId, max_length: int | None = None) -> str:
        """Render a position, e.g. ``{1|-1}`` or ``1*``.

        max_length を指定すると、それより長い表記は末尾を "..." にして切り詰める。
        """
        return position_to_str(self.arena, position_id, max_length)

    def stats(self) -> dict[str, Any]:
        return {
            "positions": len(self.arena),
            "caches": [
                self.canonical_cache.stats(),
                self.comparison_cache.stats(),
                self.leq_cache.stats(),
                self.operations.sum_cache.stats(),
                self.operations.negation_cache.stats(),
            ],
        }

    # ── ライフサイクル ────────────────────────────────────────────────

    def close(self) -> None:
        """ワーカープールを停止する（逐次モードでは何もしない）。"""
        if self.evaluator is not None:
            self.evaluator.shutdown()

    def __enter__(self) -> GameEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
