"""Concurrency-safe memoization cache with per-stripe locking.

標準形・比較結果・和などの計算結果を保持するメモ化キャッシュ。

キーはハッシュ値でストライプに振り分け、各ストライプが自分のロックと dict を持つ。
読み取りはロックなしで行い、書き込みのときだけそのキーのストライプをロックする。
計算関数はロックの外で実行するため、無関係な部分木の計算が直列化されることはない。
同じキーを複数のワーカーが同時に計算することはあり得るが、計算は決定的なので
無駄になるだけで正しさには影響しない（最初に書き込まれた値を全員に返す）。
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Hashable, Iterator
from typing import Any, Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING: Any = object()


class _Stripe:
    __slots__ = ("lock", "table", "hits", "misses")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.table: dict[Any, Any] = {}
        self.hits = 0
        self.misses = 0


class MemoCache(Generic[K, V]):
    """Striped-lock mapping from keys to already-computed values.

    プロセス内のみで有効なキャッシュ。退避（eviction）は行わない。
    """

    def __init__(self, name: str = "cache", stripes: int = 64) -> None:
        if stripes < 1:
            raise ValueError(f"stripes must be positive: {stripes}")
        self.name = name
        self._stripes = [_Stripe() for _ in range(stripes)]

    def _stripe(self, key: K) -> _Stripe:
        return self._stripes[hash(key) % len(self._stripes)]

    def get(self, key: K) -> V | None:
        """Return the cached value, or None when absent."""
        value = self._stripe(key).table.get(key, _MISSING)
        return None if value is _MISSING else value

    def get_or_compute(self, key: K, compute: Callable[[], V]) -> V:
        """Return the cached value for ``key``, computing it on a miss.

        compute() が例外を送出した場合は何も保存しない
        （不完全な結果がキャッシュに残ることはない）。
        """
        stripe = self._stripe(key)
        value = stripe.table.get(key, _MISSING)
        if value is not _MISSING:
            with stripe.lock:
                stripe.hits += 1
            return value

        value = compute()  # ロックの外で計算する
        with stripe.lock:
            stripe.misses += 1
            # 先に書き込まれた値を優先（計算は決定的なので同じ値のはず）
            return stripe.table.setdefault(key, value)

    def put(self, key: K, value: V) -> V:
        """Store ``value`` unless the key is already present; return the kept value."""
        stripe = self._stripe(key)
        with stripe.lock:
            return stripe.table.setdefault(key, value)

    def __contains__(self, key: object) -> bool:
        return key in self._stripes[hash(key) % len(self._stripes)].table

    def __len__(self) -> int:
        return sum(len(stripe.table) for stripe in self._stripes)

    def keys(self) -> Iterator[K]:
        for stripe in self._stripes:
            with stripe.lock:
                snapshot = list(stripe.table)
            yield from snapshot

    def clear(self) -> None:
        """Clear all entries and reset stats."""
        for stripe in self._stripes:
            with stripe.lock:
                stripe.table.clear()
                stripe.hits = 0
                stripe.misses = 0

    def stats(self) -> dict[str, Any]:
        """Return usage statistics (entries, hits, misses, hit_rate)."""
        hits = sum(stripe.hits for stripe in self._stripes)
        misses = sum(stripe.misses for stripe in self._stripes)
        total = hits + misses
        return {
            "name": self.name,
            "entries": len(self),
            "hits": hits,
            "misses": misses,
            "hit_rate": hits / total if total > 0 else 0.0,
        }
