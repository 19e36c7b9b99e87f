"""Exception types raised by the engine and its adapters.

エンジンとアダプタが送出する例外の定義。
構築時のエラー（存在しない局面IDなど）は呼び出し元にその場で返し、
評価中のエラーは影響を受けた部分木の計算だけを中断して上位へ伝播させる。
"""

from __future__ import annotations

from dataclasses import dataclass

# 例外は frozen にしない: contextlib などが __traceback__ を代入するため。
# eq=False で同一性による比較とハッシュを保つ。


class CgtError(Exception):
    """Base class for every error raised by cgt_engine."""


class ConstructionError(CgtError, ValueError):
    """A position or number could not be constructed."""


@dataclass(eq=False)
class UnknownPositionError(ConstructionError):
    """An option or argument refers to an id the arena never issued.

    アリーナに存在しない局面IDが指定された。
    IDは追記のみで再利用されないため、このエラーは常に呼び出し側の誤り。
    """

    position_id: object

    def __str__(self) -> str:
        return f"unknown position id: {self.position_id!r}"


@dataclass(eq=False)
class InvalidNumberError(ConstructionError):
    """A value is not a dyadic rational (or not a valid nimber)."""

    value: object
    reason: str = "not a dyadic rational"

    def __str__(self) -> str:
        return f"invalid number {self.value!r}: {self.reason}"


@dataclass(eq=False)
class MalformedDocumentError(ConstructionError):
    """An exchange document cannot be replayed into the arena."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(eq=False)
class EvaluationError(CgtError, RuntimeError):
    """Canonicalization or comparison of a subtree failed.

    部分木の評価に失敗した（ワーカーの例外、再帰上限の超過など）。
    失敗した部分木の結果はキャッシュされない。
    """

    position_id: int | None
    message: str = "evaluation failed"

    def __str__(self) -> str:
        if self.position_id is None:
            return self.message
        return f"{self.message} (position {self.position_id})"


__all__ = [
    "CgtError",
    "ConstructionError",
    "EvaluationError",
    "InvalidNumberError",
    "MalformedDocumentError",
    "UnknownPositionError",
]
