"""Comparison engine — the partial order on positions.

ゲームの半順序による比較。

再帰規則:
  G <= H  ⇔  G のどの左の選択肢 GL も GL >= H を満たさず、
             H のどの右の選択肢 HR も HR <= G を満たさない。
各再帰呼び出しは必ず選択肢の部分木へ降りるため、有限の局面では必ず停止する。
数 + ニム数どうしの比較は有理数の比較で直接決める。

G <= H の判定は向き付きの組 (G, H) ごとにキャッシュし、必要になった向きだけを計算する。
比較結果（LESS / GREATER / EQUAL / INCOMPARABLE）は (小さいID, 大きいID) をキーに
キャッシュする。

数と一般の局面の比較では、数の側の選択肢の連鎖（n = {n-1|}, 1/2^k = {0|1/2^(k-1)} …）を
再帰せずにループで辿る。再帰の深さは一般の局面の深さだけで決まる。
"""

from __future__ import annotations

from cgt_engine.engine.cache import MemoCache
from cgt_engine.game.arena import ValueArena
from cgt_engine.game.types import Outcome, PositionId


class Comparator:
    """Decides ``compare(g, h)`` for interned positions."""

    def __init__(
        self,
        arena: ValueArena,
        cache: MemoCache[tuple[PositionId, PositionId], Outcome],
        leq_cache: MemoCache[tuple[PositionId, PositionId], bool] | None = None,
    ) -> None:
        self.arena = arena
        self.cache = cache
        self.leq_cache: MemoCache[tuple[PositionId, PositionId], bool] = (
            leq_cache if leq_cache is not None else MemoCache("leq")
        )

    def compare(self, g: PositionId, h: PositionId) -> Outcome:
        """Return LESS, GREATER, EQUAL or INCOMPARABLE for ``g`` vs ``h``."""
        if g == h:
            return Outcome.EQUAL  # 同じIDは構造的にも値としても等しい
        if g < h:
            return self.cache.get_or_compute((g, h), lambda: self._compare(g, h))
        return self.cache.get_or_compute((h, g), lambda: self._compare(h, g)).flipped

    def leq(self, g: PositionId, h: PositionId) -> bool:
        """g <= h"""
        if g == h:
            return True
        return self.leq_cache.get_or_compute((g, h), lambda: self._leq(g, h))

    def geq(self, g: PositionId, h: PositionId) -> bool:
        """g >= h"""
        return self.leq(h, g)

    def _compare(self, g: PositionId, h: PositionId) -> Outcome:
        gv = self.arena.numeric_value(g)
        hv = self.arena.numeric_value(h)
        if gv is not None and hv is not None:
            return _compare_numeric(gv, hv)
        return Outcome.from_flags(self.leq(g, h), self.leq(h, g))

    def _leq(self, g: PositionId, h: PositionId) -> bool:
        gv = self.arena.numeric_value(g)
        hv = self.arena.numeric_value(h)
        if gv is not None and hv is not None:
            return _compare_numeric(gv, hv) in (Outcome.LESS, Outcome.EQUAL)
        if gv is not None and gv[1] == 0:
            return self._walk_number(g, h, number_is_lower=True)
        if hv is not None and hv[1] == 0:
            return self._walk_number(h, g, number_is_lower=False)

        g_left, _ = self.arena.options(g)
        _, h_right = self.arena.options(h)
        # GL >= H となる左の選択肢があれば G <= H ではない
        if any(self.leq(h, gl) for gl in g_left):
            return False
        # HR <= G となる右の選択肢があれば G <= H ではない
        if any(self.leq(hr, g) for hr in h_right):
            return False
        return True

    def _walk_number(self, x: PositionId, other: PositionId, number_is_lower: bool) -> bool:
        """Decide ``x <= other`` (or ``other <= x``) for a number x without recursing on x.

        数 z と一般の局面 H について:
          z <= H  ⇔  (HR <= z となる HR がない) かつ not (H <= zL)
          H <= z  ⇔  (z <= HL となる HL がない) かつ not (zR <= H)
        数の選択肢は各側に高々1つなので、z → zL → zLR → … は1本の連鎖になる。
        連鎖をループで前に進み、最後に否定を畳み込んで答えを出す。
        途中の判定結果も leq のキャッシュに入れる。
        """
        h_left, h_right = self.arena.options(other)
        z = x
        lower = number_is_lower
        chain: list[tuple[PositionId, bool]] = []
        while True:
            z_left, z_right = self.arena.options(z)
            if lower:
                local = not any(self.leq(hr, z) for hr in h_right)
                step = z_left
            else:
                local = not any(self.leq(z, hl) for hl in h_left)
                step = z_right
            chain.append((z, lower))
            if not local:
                value = False
                break
            if not step:
                value = True
                break
            nxt = step[0]
            key = (nxt, other) if not lower else (other, nxt)
            known = self.leq_cache.get(key)
            if known is not None:
                # 次の判定が既知なら連鎖をそこで打ち切る
                value = not known
                break
            z, lower = nxt, not lower

        # 末尾から順に結果を確定させる（各段の値は次の段の否定）
        for z, lower in reversed(chain):
            self.leq_cache.put((z, other) if lower else (other, z), value)
            value = not value
        return not value
