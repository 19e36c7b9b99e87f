"""Exchange format for positions (pydantic models + JSON helpers).

局面をエンジンの外へ持ち出すための交換フォーマット。

ドキュメントは根から到達できる局面を依存順（選択肢が先）に並べたもの:

    {
      "version": 1,
      "root": 2,
      "positions": [
        {"id": 0, "kind": "numeric", "number": "1", "nimber": 0},
        {"id": 1, "kind": "numeric", "number": "-1", "nimber": 0},
        {"id": 2, "kind": "moves", "left": [0], "right": [1]}
      ]
    }

レコードのIDはドキュメント内だけのローカルな番号で、エンジンの局面IDとは別物。
数値ノードは選択肢を持たずタグ（number, nimber）で保存する。
読み込みは construct / construct_nimber の呼び出しを順に再生するだけなので、
同じエンジンなら同じID、別のエンジンでも等しい値が得られる。
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cgt_engine.engine.core import GameEngine
from cgt_engine.errors import InvalidNumberError, MalformedDocumentError
from cgt_engine.game.types import NodeKind, PositionId
from cgt_engine.numeric.dyadic import format_number, to_dyadic

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = 1


class PositionRecord(BaseModel):
    """One position in a document."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=0)  # ドキュメント内のローカルID
    kind: Literal["numeric", "moves"]
    number: str | None = None  # "3/16" 形式（numeric のみ）
    nimber: int = Field(default=0, ge=0)
    left: list[int] = Field(default_factory=list)
    right: list[int] = Field(default_factory=list)


class GameDocument(BaseModel):
    """A self-contained DAG of positions with a designated root."""

    model_config = ConfigDict(frozen=True)

    version: int = DOCUMENT_VERSION
    root: int = Field(ge=0)
    positions: list[PositionRecord]


def export_document(engine: GameEngine, root: PositionId) -> GameDocument:
    """Export every position reachable from ``root`` in dependency order.

    再帰を使わずスタックで後行順に辿るので、深い局面でも書き出せる。
    """
    engine.arena.check(root)
    local: dict[PositionId, int] = {}
    records: list[PositionRecord] = []
    stack: list[tuple[PositionId, bool]] = [(root, False)]

    while stack:
        position_id, expanded = stack.pop()
        if position_id in local:
            continue
        view = engine.describe(position_id)
        if view.kind is NodeKind.NUMERIC:
            number = view.number if view.number is not None else 0
            local[position_id] = len(records)
            records.append(
                PositionRecord(
                    id=len(records),
                    kind="numeric",
                    number=format_number(number),
                    nimber=view.nimber,
                )
            )
            continue
        if not expanded:
            # 子を先に書き出してから自分を書き出す
            stack.append((position_id, True))
            children = view.left + view.right
            stack.extend((c, False) for c in reversed(children) if c not in local)
            continue
        local[position_id] = len(records)
        records.append(
            PositionRecord(
                id=len(records),
                kind="moves",
                left=[local[c] for c in view.left],
                right=[local[c] for c in view.right],
            )
        )

    logger.debug("exported %d records for position %d", len(records), root)
    return GameDocument(root=local[root], positions=records)


def import_document(engine: GameEngine, document: GameDocument) -> PositionId:
    """Replay a document into ``engine`` and return the root's id.

    各レコードは自分より前のレコードしか参照できない（前方参照・未知の参照・
    重複IDは MalformedDocumentError）。
    """
    if document.version != DOCUMENT_VERSION:
        raise MalformedDocumentError(f"unsupported document version {document.version}")

    ids: dict[int, PositionId] = {}

    def lookup(record: PositionRecord, ref: int) -> PositionId:
        if ref not in ids:
            raise MalformedDocumentError(
                f"record {record.id} refers to {ref}, which is not defined before it"
            )
        return ids[ref]

    for record in document.positions:
        if record.id in ids:
            raise MalformedDocumentError(f"duplicate record id {record.id}")
        if record.kind == "numeric":
            if record.number is None or record.left or record.right:
                raise MalformedDocumentError(
                    f"numeric record {record.id} needs a number and no options"
                )
            try:
                number = to_dyadic(record.number)
            except InvalidNumberError as exc:
                raise MalformedDocumentError(f"record {record.id}: {exc}") from exc
            ids[record.id] = engine.construct_nimber(record.nimber, number)
        else:
            left = [lookup(record, ref) for ref in record.left]
            right = [lookup(record, ref) for ref in record.right]
            ids[record.id] = engine.construct(left, right)

    if document.root not in ids:
        raise MalformedDocumentError(f"root {document.root} is not defined")
    return ids[document.root]


def dumps(document: GameDocument, indent: int | None = None) -> str:
    return document.model_dump_json(indent=indent)


def loads(text: str | bytes) -> GameDocument:
    """Parse JSON text into a GameDocument (schema errors → MalformedDocumentError)."""
    try:
        return GameDocument.model_validate_json(text)
    except ValidationError as exc:
        raise MalformedDocumentError(f"invalid document: {exc}") from exc
