"""Game sum and negation.

ゲームの和と符号反転（構造的な定義）。

  G + H = { GL + H, G + HL | GR + H, G + HR }
  -G    = { -GR | -GL }

数 + ニム数どうしは有理数の加算とニム和で直接計算する:
  (x + *j) + (y + *k) = (x + y) + *(j XOR k)
  -(x + *j)           = -x + *j      （ニム数は自分自身の符号反転）

結果は標準形とは限らない。必要なら呼び出し側で canonicalize する。

数と一般の局面の和は数の選択肢の連鎖（300 = {299|} …）まで展開されるので、
再帰ではなく明示的なスタックで子の組を先に計算する。
"""

from __future__ import annotations

from cgt_engine.engine.cache import MemoCache
from cgt_engine.game.arena import ValueArena
from cgt_engine.game.types import Node, PositionId
from cgt_engine.numeric.nimber import nim_sum

_Pair = tuple[PositionId, PositionId]


def _pair(g: PositionId, h: PositionId) -> _Pair:
    # 和は可換なので (小さいID, 大きいID) をキーにする
    return (g, h) if g <= h else (h, g)


class GameOperations:
    """Memoized structural sum and negation over interned positions."""

    def __init__(
        self,
        arena: ValueArena,
        sum_cache: MemoCache[tuple[PositionId, PositionId], PositionId],
        negation_cache: MemoCache[PositionId, PositionId],
    ) -> None:
        self.arena = arena
        self.sum_cache = sum_cache
        self.negation_cache = negation_cache

    def add(self, g: PositionId, h: PositionId) -> PositionId:
        """Return the id of G + H."""
        self.arena.check(g)
        self.arena.check(h)
        root = _pair(g, h)
        stack = [root]
        while stack:
            key = stack[-1]
            if key in self.sum_cache:
                stack.pop()
                continue
            direct = self._direct_sum(*key)
            if direct is not None:
                self.sum_cache.get_or_compute(key, lambda d=direct: d)
                stack.pop()
                continue
            left, right = self._option_pairs(*key)
            missing = [p for p in left + right if p not in self.sum_cache]
            if missing:
                stack.extend(missing)
                continue
            stack.pop()
            self.sum_cache.get_or_compute(
                key, lambda lp=left, rp=right: self._combine(lp, rp)
            )
        result = self.sum_cache.get(root)
        assert result is not None  # ループを抜けた時点で根の組は必ず計算済み
        return result

    def _direct_sum(self, g: PositionId, h: PositionId) -> PositionId | None:
        """零との和と、数 + ニム数どうしの和（選択肢を展開しない）。"""
        if g == self.arena.zero:
            return h
        if h == self.arena.zero:
            return g
        gv = self.arena.numeric_value(g)
        hv = self.arena.numeric_value(h)
        if gv is not None and hv is not None:
            return self.arena.intern(Node.numeric(gv[0] + hv[0], nim_sum(gv[1], hv[1])))
        return None

    def _option_pairs(self, g: PositionId, h: PositionId) -> tuple[list[_Pair], list[_Pair]]:
        g_left, g_right = self.arena.options(g)
        h_left, h_right = self.arena.options(h)
        left = [_pair(gl, h) for gl in g_left] + [_pair(g, hl) for hl in h_left]
        right = [_pair(gr, h) for gr in g_right] + [_pair(g, hr) for hr in h_right]
        return left, right

    def _combine(self, left: list[_Pair], right: list[_Pair]) -> PositionId:
        options = self.sum_cache.get
        return self.arena.intern(
            Node.moves([options(p) for p in left], [options(p) for p in right])  # type: ignore[misc]
        )

    def negate(self, g: PositionId) -> PositionId:
        """Return the id of -G."""
        self.arena.check(g)
        stack = [g]
        while stack:
            p = stack[-1]
            if p in self.negation_cache:
                stack.pop()
                continue
            value = self.arena.numeric_value(p)
            if value is not None:
                self.negation_cache.get_or_compute(
                    p, lambda v=value: self.arena.intern(Node.numeric(-v[0], v[1]))
                )
                stack.pop()
                continue
            left, right = self.arena.options(p)
            missing = [o for o in left + right if o not in self.negation_cache]
            if missing:
                stack.extend(missing)
                continue
            stack.pop()
            self.negation_cache.get_or_compute(
                p, lambda lo=left, ro=right: self._mirror(lo, ro)
            )
        result = self.negation_cache.get(g)
        assert result is not None
        return result

    def _mirror(
        self, left: tuple[PositionId, ...], right: tuple[PositionId, ...]
    ) -> PositionId:
        negated = self.negation_cache.get
        return self.arena.intern(
            Node.moves([negated(r) for r in right], [negated(o) for o in left])  # type: ignore[misc]
        )

    def subtract(self, g: PositionId, h: PositionId) -> PositionId:
        """G - H = G + (-H)"""
        return self.add(g, self.negate(h))
