"""Ski Jumps — a partizan game of skiers sliding across a grid.

スキージャンプ（Ski Jumps, Winning Ways）のルールセットアダプタ。

  - 左（Left）のスキーヤーは右へ、右（Right）のスキーヤーは左へ滑る
  - 1手で同じ行の空きマスを何マスでも進める（盤の端から出ることもできる）
  - ジャンパーは真下の相手のスキーヤーを飛び越えられる。
    飛び越された側はスリッパーになり、以後ジャンプできない
  - 動けなくなったプレイヤーの負け

表記: '.' 空き、'L' / 'l' 左のジャンパー / スリッパー、'R' / 'r' 右のジャンパー / スリッパー。
行は '|' で区切る。例: "...L....|..R.....|........"

ジャンプの可能性がなくなった局面は、各スキーヤーが1マスずつ滑るのが最善なので、
値は「左の残り距離の和 − 右の残り距離の和」の整数になる（探索を打ち切る）。
"""

from __future__ import annotations

from dataclasses import dataclass

from cgt_engine.game.types import PositionId
from cgt_engine.rulesets.table import TranspositionTable

EMPTY = "."
LEFT_JUMPER, LEFT_SLIPPER = "L", "l"
RIGHT_JUMPER, RIGHT_SLIPPER = "R", "r"
_LEFT = (LEFT_JUMPER, LEFT_SLIPPER)
_RIGHT = (RIGHT_JUMPER, RIGHT_SLIPPER)


@dataclass(frozen=True, order=True)
class SkiJumps:
    """An immutable Ski Jumps position (one string per row)."""

    rows: tuple[str, ...]

    def __post_init__(self) -> None:
        widths = {len(row) for row in self.rows}
        if len(widths) > 1:
            raise ValueError(f"not a rectangle: {self.rows!r}")
        for row in self.rows:
            bad = set(row) - {EMPTY, *_LEFT, *_RIGHT}
            if bad:
                raise ValueError(f"unexpected character {sorted(bad)[0]!r} in {row!r}")

    @classmethod
    def parse(cls, text: str) -> SkiJumps:
        """Parse ``.LlRr`` notation with ``|`` as the row separator."""
        return cls(tuple(text.split("|")))

    def __str__(self) -> str:
        return "|".join(self.rows)

    @property
    def width(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    @property
    def height(self) -> int:
        return len(self.rows)

    def at(self, x: int, y: int) -> str:
        return self.rows[y][x]

    def _with(self, *cells: tuple[int, int, str]) -> SkiJumps:
        rows = [list(row) for row in self.rows]
        for x, y, tile in cells:
            rows[y][x] = tile
        return SkiJumps(tuple("".join(row) for row in rows))

    # ── 手の生成 ──────────────────────────────────────────────────────

    def left_moves(self) -> list[SkiJumps]:
        return self._moves(_LEFT, LEFT_JUMPER, RIGHT_SLIPPER, _RIGHT, step=1)

    def right_moves(self) -> list[SkiJumps]:
        return self._moves(_RIGHT, RIGHT_JUMPER, LEFT_SLIPPER, _LEFT, step=-1)

    def _moves(
        self,
        own: tuple[str, str],
        jumper: str,
        jumped: str,
        opponent: tuple[str, str],
        step: int,
    ) -> list[SkiJumps]:
        """滑る手（同じ行を step 方向へ）とジャンプする手を列挙する。"""
        moves: list[SkiJumps] = []
        for y in range(self.height):
            for x in range(self.width):
                tile = self.at(x, y)
                if tile not in own:
                    continue
                dx = x + step
                while True:
                    if not 0 <= dx < self.width:
                        moves.append(self._with((x, y, EMPTY)))  # 盤の端から出る
                        break
                    if self.at(dx, y) != EMPTY:
                        break  # ふさがれている
                    moves.append(self._with((x, y, EMPTY), (dx, y, tile)))
                    dx += step

                if tile == jumper and y + 1 < self.height and self.at(x, y + 1) in opponent:
                    cells = [(x, y, EMPTY), (x, y + 1, jumped)]
                    if y + 2 < self.height:
                        cells.append((x, y + 2, jumper))
                    moves.append(self._with(*cells))
        return moves

    # ── 値 ────────────────────────────────────────────────────────────

    def jump_available(self) -> bool:
        """Whether some jumper has an opposing skier anywhere in the row below.

        ジャンプが今後起こり得るかの判定（真下だけでなく下の行全体を見る）。
        """
        for y in range(self.height - 1):
            below = self.rows[y + 1]
            if LEFT_JUMPER in self.rows[y] and any(t in _RIGHT for t in below):
                return True
            if RIGHT_JUMPER in self.rows[y] and any(t in _LEFT for t in below):
                return True
        return False

    def sliding_value(self) -> int:
        """左の残り距離の和 − 右の残り距離の和。"""
        value = 0
        for row in self.rows:
            for x, tile in enumerate(row):
                if tile in _LEFT:
                    value += self.width - x
                elif tile in _RIGHT:
                    value -= x + 1
        return value

    def canonical_form(self, table: TranspositionTable[SkiJumps]) -> PositionId:
        """Canonical form, cut short once no jump can happen."""
        engine = table.engine
        if not self.jump_available():
            return engine.construct_number(self.sliding_value())

        def compute() -> PositionId:
            left = [m.canonical_form(table) for m in self.left_moves()]
            right = [m.canonical_form(table) for m in self.right_moves()]
            return engine.canonicalize(engine.construct(left, right))

        return table.get_or_compute(self, compute)
