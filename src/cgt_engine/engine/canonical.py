"""Canonicalization engine — reduce a position to its canonical form.

局面を標準形（同値類の中で一意な最も単純な代表）に簡約する。

アルゴリズム:
  1. 全ての選択肢を先に標準形にする（ボトムアップ。逐次実行の部分では子孫を
     明示的なスタックで深い方から処理し、再帰の深さを局面の深さに依存させない）
  2. 支配された選択肢を取り除く
       左: 他の左の選択肢 o' に対して o <= o' となる o を除く
       右: 他の右の選択肢 o' に対して o >= o' となる o を除く
  3. 可逆な選択肢を迂回する
       左の選択肢 o の右の選択肢 o'' が o'' <= G を満たすなら、
       o を o'' の左の選択肢すべてで置き換える（右も対称）
  4. 変化がなくなるまで 2〜3 を繰り返す（不動点 = 標準形）

簡約の前後でゲームの値は変わらないので、2〜3 の比較は常に同じ値ハンドル G
（標準形にした子から作ったノード）に対して行う。
標準形は一意でハッシュコンスされるため、異なるIDの選択肢は必ず異なる値であり、
支配の判定で「互いに支配し合う」同値の選択肢は発生しない。

結果が x + *n の標準形の形をしていれば NUMERIC ノードに変換する
（数 + ニム数の標準形は必ず NUMERIC で表現されるという不変条件）。
"""

from __future__ import annotations

import logging
from fractions import Fraction

from cgt_engine.engine.cache import MemoCache
from cgt_engine.engine.compare import Comparator
from cgt_engine.engine.config import EngineConfig
from cgt_engine.engine.parallel import ParallelEvaluator
from cgt_engine.errors import CgtError, EvaluationError
from cgt_engine.game.arena import ValueArena
from cgt_engine.game.types import Node, NodeKind, PositionId

logger = logging.getLogger(__name__)


class Canonicalizer:
    """Computes and memoizes canonical forms."""

    def __init__(
        self,
        arena: ValueArena,
        comparator: Comparator,
        cache: MemoCache[PositionId, PositionId],
        config: EngineConfig,
        evaluator: ParallelEvaluator | None = None,
    ) -> None:
        self.arena = arena
        self.comparator = comparator
        self.cache = cache
        self.config = config
        self.evaluator = evaluator

    def canonicalize(self, position_id: PositionId, depth: int = 0) -> PositionId:
        """Return the id of the canonical form of ``position_id``."""
        node = self.arena.resolve(position_id)
        if node.kind is NodeKind.NUMERIC:
            return position_id  # NUMERIC は常に標準形
        if position_id not in self.cache and not self._pooled_at(depth):
            self._settle_descendants(position_id, depth)
        return self.cache.get_or_compute(
            position_id, lambda: self._compute(position_id, node, depth)
        )

    def _pooled_at(self, depth: int) -> bool:
        return self.evaluator is not None and depth < self.config.parallel_depth

    def _settle_descendants(self, root: PositionId, depth: int) -> None:
        """Canonicalize every uncached descendant of ``root``, deepest first.

        子孫を明示的なスタックで後行順に辿り、子が全て標準形になってから親を計算する。
        こうすると _compute の中の子の canonicalize は常にキャッシュに当たり、
        再帰の深さが局面の深さに依存しない。
        """
        seen: set[PositionId] = set()
        stack: list[tuple[PositionId, bool]] = [(root, False)]
        while stack:
            p, expanded = stack.pop()
            if expanded:
                if p != root:
                    node = self.arena.resolve(p)
                    self.cache.get_or_compute(
                        p, lambda p=p, node=node: self._compute(p, node, depth + 1)
                    )
                continue
            if p in seen:
                continue
            seen.add(p)
            stack.append((p, True))
            node = self.arena.resolve(p)
            for child in set(node.left) | set(node.right):
                if child in seen or child in self.cache:
                    continue
                if self.arena.resolve(child).kind is NodeKind.MOVES:
                    stack.append((child, False))

    def _compute(self, position_id: PositionId, node: Node, depth: int) -> PositionId:
        if depth == 0:
            logger.debug("canonicalizing position %d", position_id)
        children = sorted(set(node.left) | set(node.right))
        canonical = dict(zip(children, self._canonicalize_children(position_id, children, depth)))

        left = {canonical[o] for o in node.left}
        right = {canonical[o] for o in node.right}
        result = self._reduce(left, right)
        # 標準形自身もキャッシュに入れておく（冪等性の確認が定数時間になる）
        if result != position_id and not self.arena.resolve(result).is_numeric:
            self.cache.put(result, result)
        return result

    def _canonicalize_children(
        self, position_id: PositionId, children: list[PositionId], depth: int
    ) -> list[PositionId]:
        use_pool = self._pooled_at(depth) and len(children) >= self.config.parallel_threshold
        if not use_pool:
            return [self.canonicalize(c, depth + 1) for c in children]

        tasks = [lambda c=c: self.canonicalize(c, depth + 1) for c in children]
        try:
            return self.evaluator.run_all(tasks)  # type: ignore[union-attr]
        except CgtError:
            raise
        except Exception as exc:
            logger.warning("subtree evaluation failed under position %d: %s", position_id, exc)
            raise EvaluationError(position_id, f"worker failed: {exc!r}") from exc

    # ── 簡約 ──────────────────────────────────────────────────────────

    def _reduce(self, left: set[PositionId], right: set[PositionId]) -> PositionId:
        # 値ハンドル G（簡約しても値は変わらない）
        g = self.arena.intern(Node.moves(left, right))
        rounds = 0
        while True:
            left = self._remove_dominated(left, keep_greater=True)
            right = self._remove_dominated(right, keep_greater=False)
            new_left, left_changed = self._bypass_left(left, g)
            new_right, right_changed = self._bypass_right(right, g)
            if not (left_changed or right_changed):
                break
            left, right = new_left, new_right
            rounds += 1

        if rounds:
            logger.debug("reduced position %d after %d bypass rounds", g, rounds)
        numeric = self._as_numeric(left, right)
        if numeric is not None:
            return self.arena.intern(Node.numeric(*numeric))
        return self.arena.intern(Node.moves(left, right))

    def _remove_dominated(self, options: set[PositionId], keep_greater: bool) -> set[PositionId]:
        """Drop every option dominated by a sibling.

        左（keep_greater=True）: o <= o' なら o を除く。
        右（keep_greater=False）: o >= o' なら o を除く。
        """
        ordered = sorted(options)
        kept = set()
        for o in ordered:
            dominated = False
            for other in ordered:
                if other == o:
                    continue
                if keep_greater and self.comparator.leq(o, other):
                    dominated = True
                elif not keep_greater and self.comparator.geq(o, other):
                    dominated = True
                if dominated:
                    break
            if not dominated:
                kept.add(o)
        return kept

    def _bypass_left(self, left: set[PositionId], g: PositionId) -> tuple[set[PositionId], bool]:
        result: set[PositionId] = set()
        changed = False
        for o in sorted(left):
            _, o_right = self.arena.options(o)
            reverse = next((r for r in o_right if self.comparator.leq(r, g)), None)
            if reverse is None:
                result.add(o)
                continue
            # o は可逆: 相手の応手 reverse の左の選択肢すべてで置き換える
            reverse_left, _ = self.arena.options(reverse)
            result.update(reverse_left)
            changed = True
        return result, changed

    def _bypass_right(self, right: set[PositionId], g: PositionId) -> tuple[set[PositionId], bool]:
        result: set[PositionId] = set()
        changed = False
        for o in sorted(right):
            o_left, _ = self.arena.options(o)
            reverse = next((ol for ol in o_left if self.comparator.geq(ol, g)), None)
            if reverse is None:
                result.add(o)
                continue
            _, reverse_right = self.arena.options(reverse)
            result.update(reverse_right)
            changed = True
        return result, changed

    # ── 数 + ニム数の検出 ────────────────────────────────────────────────

    def _as_numeric(
        self, left: set[PositionId], right: set[PositionId]
    ) -> tuple[Fraction, int] | None:
        """Recognize the canonical shapes of x + *n.

        簡約済みの選択肢が次のいずれかの形なら (x, n) を返す:
          { | }                         → 0
          {n | } (整数 n >= 0)          → n + 1
          { | n} (整数 n <= 0)          → n - 1
          {a | b} (a < b, 分母 2^k の隣接点) → (a + b) / 2
          {x, x*, .., x*(n-1) | 同じ}   → x*n
        """
        if not left and not right:
            return Fraction(0), 0
        lv = [self.arena.numeric_value(o) for o in left]
        rv = [self.arena.numeric_value(o) for o in right]
        if any(v is None for v in lv) or any(v is None for v in rv):
            return None

        if len(lv) == 1 and not rv:
            (x, n), = lv  # type: ignore[misc]
            if n == 0 and x.denominator == 1 and x >= 0:
                return x + 1, 0
            return None
        if not lv and len(rv) == 1:
            (x, n), = rv  # type: ignore[misc]
            if n == 0 and x.denominator == 1 and x <= 0:
                return x - 1, 0
            return None
        if len(lv) == 1 and len(rv) == 1 and left != right:
            (a, an), = lv  # type: ignore[misc]
            (b, bn), = rv  # type: ignore[misc]
            if an == 0 and bn == 0 and a < b:
                mid = (a + b) / 2
                if mid.denominator > 1 and b - a == Fraction(2, mid.denominator):
                    return mid, 0
            return None
        if left == right:
            numbers = {v[0] for v in lv}  # type: ignore[index]
            nimbers = sorted(v[1] for v in lv)  # type: ignore[index]
            if len(numbers) == 1 and nimbers == list(range(len(nimbers))):
                return numbers.pop(), len(nimbers)
        return None
