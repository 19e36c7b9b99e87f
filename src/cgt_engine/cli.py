"""CLI entry point for cgt-engine.

コマンドラインから局面の標準形を計算する。

  cgt-cli domineering "..#|..#|..." ".#|.."   各盤面の標準形と、その和を表示
  cgt-cli quicksort 3 1 2                      クイックソートの値（ニム数）を表示
  cgt-cli ski-jumps ".L...|.R...|....."        スキージャンプの盤面の標準形を表示
  cgt-cli export "..|.."                       盤面の標準形を交換フォーマットで出力

起動方法: `uv run cgt-cli ...`
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from cgt_engine.engine.config import EngineConfig
from cgt_engine.engine.core import GameEngine
from cgt_engine.errors import CgtError
from cgt_engine.rulesets.domineering import Domineering
from cgt_engine.rulesets.quicksort import Quicksort
from cgt_engine.rulesets.ski_jumps import SkiJumps
from cgt_engine.rulesets.table import TranspositionTable, position_of
from cgt_engine.serialization.schema import dumps, export_document

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cgt-cli", description="Canonical forms of combinatorial games."
    )
    parser.add_argument(
        "--parallel", action="store_true", help="canonicalize subtrees on a worker pool"
    )
    parser.add_argument("--workers", type=int, default=4, help="worker pool size")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    dom = sub.add_parser("domineering", help="canonical forms of Domineering grids")
    dom.add_argument("grids", nargs="+", metavar="GRID", help='e.g. "..#|.#.|##."')
    qs = sub.add_parser("quicksort", help="value of a Quicksort sequence")
    qs.add_argument("values", nargs="+", type=int, metavar="N")
    ski = sub.add_parser("ski-jumps", help="canonical form of a Ski Jumps grid")
    ski.add_argument("grid", metavar="GRID", help='e.g. ".L...|.R...|....."')
    exp = sub.add_parser("export", help="export a Domineering grid as a JSON document")
    exp.add_argument("grid", metavar="GRID")
    return parser


def _run_domineering(engine: GameEngine, grids: Sequence[str]) -> None:
    """各盤面の標準形を1行ずつ表示し、最後に全体の和を表示する。"""
    table: TranspositionTable[Domineering] = TranspositionTable(engine)
    total = engine.zero
    for text in grids:
        grid = Domineering.parse(text)
        value = grid.canonical_form(table)
        print(f"{grid}: {engine.display(value)}")
        total = engine.canonicalize(engine.sum(total, value))
    if len(grids) > 1:
        print(f"sum: {engine.display(total)}")


def _run_quicksort(engine: GameEngine, values: Sequence[int]) -> None:
    game = Quicksort(tuple(values))
    table: TranspositionTable[Quicksort] = TranspositionTable(engine)
    value = position_of(game, table)
    print(f"{game}: {engine.display(value)} (nim value {game.nim_value()})")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line.

    終了コード: 0 = 成功、1 = 入力やエンジンのエラー。
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = EngineConfig(parallel=args.parallel, max_workers=args.workers)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    with GameEngine(config) as engine:
        try:
            if args.command == "domineering":
                _run_domineering(engine, args.grids)
            elif args.command == "quicksort":
                _run_quicksort(engine, args.values)
            elif args.command == "ski-jumps":
                game = SkiJumps.parse(args.grid)
                value = game.canonical_form(TranspositionTable(engine))
                print(f"{game}: {engine.display(value)}")
            else:
                grid = Domineering.parse(args.grid)
                root = grid.canonical_form(TranspositionTable(engine))
                print(dumps(export_document(engine, root), indent=2))
        except (CgtError, ValueError) as exc:
            logger.debug("command %s failed", args.command, exc_info=True)
            print(f"error: {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
