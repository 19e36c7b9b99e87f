"""FastAPI web application exposing the game engine over HTTP.

FastAPI を使った組合せゲームエンジンの REST API。
プロセス内に1つのエンジン（アリーナとキャッシュ）を持ち、局面IDで参照する。

エンドポイント:
  POST /api/positions                 — { left | right } を構築
  POST /api/numbers                   — 二進有理数を構築
  POST /api/nimbers                   — 数 + ニム数を構築
  GET  /api/positions/{id}            — 局面の構造を取得
  POST /api/positions/{id}/canonical  — 標準形を計算
  POST /api/positions/{id}/negate     — 符号反転
  GET  /api/positions/{id}/export     — 交換フォーマットで書き出す
  POST /api/import                    — 交換フォーマットを読み込む
  POST /api/compare                   — 2つの局面を比較
  POST /api/sum                       — 2つの局面の和
  POST /api/domineering               — ドミノ倒しの盤面の標準形
  GET  /api/stats                     — アリーナとキャッシュの統計

エラー:
  存在しない局面ID → 404、不正な数・盤面・ドキュメント → 400、評価の失敗 → 500
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from cgt_engine.engine.core import GameEngine
from cgt_engine.errors import ConstructionError, EvaluationError, UnknownPositionError
from cgt_engine.game.types import NodeKind, PositionId
from cgt_engine.numeric.dyadic import format_number
from cgt_engine.rulesets.domineering import Domineering
from cgt_engine.rulesets.table import TranspositionTable
from cgt_engine.serialization.schema import GameDocument, export_document, import_document

app = FastAPI(title="CGT Engine")

# プロセス内のエンジン（サーバ再起動で消える）
_engine = GameEngine()
# ドミノ倒しの盤面 → 局面ID の置換表（同じエンジンを共有する）
_domineering: TranspositionTable[Domineering] = TranspositionTable(_engine)
# 表記の最大長（標準形でない和などは共有部分の展開で長くなり得る）
DISPLAY_LIMIT = 2000


class ConstructRequest(BaseModel):
    """{ left | right } 構築リクエストのスキーマ。"""

    left: list[int] = Field(default_factory=list)  # 左の選択肢の局面ID
    right: list[int] = Field(default_factory=list)  # 右の選択肢の局面ID


class NumberRequest(BaseModel):
    value: int | str  # 42, "-1/2", "3/16" など


class NimberRequest(BaseModel):
    """number + *value 構築リクエストのスキーマ。"""

    value: int
    number: int | str = 0


class PairRequest(BaseModel):
    """比較・和のリクエストのスキーマ。"""

    g: int
    h: int


class DomineeringRequest(BaseModel):
    grid: str  # 例: "..#|.#.|##."


@contextmanager
def _errors_as_http() -> Iterator[None]:
    """エンジンの例外を HTTP のステータスコードに変換する。"""
    try:
        yield
    except UnknownPositionError as exc:
        raise HTTPException(404, str(exc)) from exc
    except ConstructionError as exc:
        raise HTTPException(400, str(exc)) from exc
    except EvaluationError as exc:
        raise HTTPException(500, str(exc)) from exc


def _view_to_dict(position_id: PositionId) -> dict[str, Any]:
    """Convert a position to a JSON-serializable dict.

    局面の構造ビューを JSON 形式（辞書）に変換する。
    display は人間向けの表記（例: "{1|-1}", "1*"）。DISPLAY_LIMIT を超える分は切り詰める。
    """
    view = _engine.describe(position_id)
    return {
        "id": view.id,
        "kind": "numeric" if view.kind is NodeKind.NUMERIC else "moves",
        "left": list(view.left),
        "right": list(view.right),
        "number": format_number(view.number) if view.number is not None else None,
        "nimber": view.nimber,
        "display": _engine.display(position_id, max_length=DISPLAY_LIMIT),
    }


@app.post("/api/positions")
async def construct_position(req: ConstructRequest) -> dict[str, Any]:
    with _errors_as_http():
        position_id = _engine.construct(req.left, req.right)
    return _view_to_dict(position_id)


@app.post("/api/numbers")
async def construct_number(req: NumberRequest) -> dict[str, Any]:
    with _errors_as_http():
        position_id = _engine.construct_number(req.value)
    return _view_to_dict(position_id)


@app.post("/api/nimbers")
async def construct_nimber(req: NimberRequest) -> dict[str, Any]:
    with _errors_as_http():
        position_id = _engine.construct_nimber(req.value, req.number)
    return _view_to_dict(position_id)


@app.get("/api/positions/{position_id}")
async def get_position(position_id: int) -> dict[str, Any]:
    with _errors_as_http():
        _engine.arena.check(position_id)
    return _view_to_dict(PositionId(position_id))


# 計算量の大きいエンドポイントは同期関数にしてスレッドプールで実行させる


@app.post("/api/positions/{position_id}/canonical")
def canonicalize_position(position_id: int) -> dict[str, Any]:
    """局面の標準形を計算して返す。"""
    with _errors_as_http():
        canonical = _engine.canonicalize(PositionId(position_id))
    return _view_to_dict(canonical)


@app.post("/api/positions/{position_id}/negate")
def negate_position(position_id: int) -> dict[str, Any]:
    with _errors_as_http():
        _engine.arena.check(position_id)
        negated = _engine.negate(PositionId(position_id))
    return _view_to_dict(negated)


@app.get("/api/positions/{position_id}/export")
def export_position(position_id: int) -> GameDocument:
    with _errors_as_http():
        return export_document(_engine, PositionId(position_id))


@app.post("/api/import")
def import_position(document: GameDocument) -> dict[str, Any]:
    """交換フォーマットのドキュメントを読み込み、根の局面を返す。"""
    with _errors_as_http():
        root = import_document(_engine, document)
    return _view_to_dict(root)


@app.post("/api/compare")
def compare_positions(req: PairRequest) -> dict[str, Any]:
    """2つの局面を比較する（LESS / GREATER / EQUAL / INCOMPARABLE）。"""
    with _errors_as_http():
        outcome = _engine.compare(PositionId(req.g), PositionId(req.h))
    return {"g": req.g, "h": req.h, "outcome": outcome.name, "symbol": outcome.symbol}


@app.post("/api/sum")
def sum_positions(req: PairRequest) -> dict[str, Any]:
    with _errors_as_http():
        _engine.arena.check(req.g)
        _engine.arena.check(req.h)
        total = _engine.sum(PositionId(req.g), PositionId(req.h))
    return _view_to_dict(total)


@app.post("/api/domineering")
def domineering_position(req: DomineeringRequest) -> dict[str, Any]:
    """ドミノ倒しの盤面を解析して標準形を返す。"""
    try:
        grid = Domineering.parse(req.grid)
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc
    with _errors_as_http():
        position_id = grid.canonical_form(_domineering)
    return {"grid": str(grid), "position": _view_to_dict(position_id)}


@app.get("/api/stats")
async def stats() -> dict[str, Any]:
    return _engine.stats()


def main() -> None:
    """Run the web server.

    `uv run cgt-web` または `python -m cgt_engine.web.app` で起動する。
    """
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
