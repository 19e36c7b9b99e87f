"""Domineering — a domino-placing game on a rectangular grid.

ドミノ倒し（Domineering）のルールセットアダプタ。

  - 左（Left）は縦向きのドミノ（2マス）を置く
  - 右（Right）は横向きのドミノ（2マス）を置く
  - 置けなくなったプレイヤーの負け

盤面は整数のビットマスクで表す（ビット width*y + x が 1 なら埋まっている）。
表記は '.'（空き）と '#'（埋まり）で、行は '|' で区切る。例: "..#|.#.|##."

標準形の計算では、端の埋まった行・列を取り除いて（move_top_left）置換表を共有し、
連結していない空き領域は別々のゲームの和として計算する（decompositions）。
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from cgt_engine.game.types import PositionId
from cgt_engine.rulesets.table import TranspositionTable

# 左右それぞれのドミノの向き: (dx, dy)
_LEFT_DIRECTION = (0, 1)  # 縦
_RIGHT_DIRECTION = (1, 0)  # 横


@dataclass(frozen=True, order=True)
class Domineering:
    """An immutable Domineering position."""

    width: int
    height: int
    grid: int = 0  # 埋まっているマスのビットマスク

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"invalid grid size {self.width}x{self.height}")

    # ── 構築 ──────────────────────────────────────────────────────────

    @classmethod
    def empty(cls, width: int, height: int) -> Domineering:
        return cls(width, height, 0)

    @classmethod
    def filled(cls, width: int, height: int) -> Domineering:
        return cls(width, height, (1 << (width * height)) - 1)

    @classmethod
    def from_number(cls, width: int, height: int, grid_id: int) -> Domineering:
        """Build a grid from its bitmask; bits outside the grid are ignored."""
        return cls(width, height, grid_id & ((1 << (width * height)) - 1))

    @classmethod
    def parse(cls, text: str) -> Domineering:
        """Parse ``.#`` notation with ``|`` as the row separator.

        例: Domineering.parse("..#|.#.|##.")
        長方形でない、または '.' '#' 以外の文字を含む場合は ValueError。
        """
        rows = text.split("|")
        width = len(rows[0])
        grid = 0
        for y, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(f"not a rectangle: {text!r}")
            for x, chr_ in enumerate(row):
                if chr_ == "#":
                    grid |= 1 << (width * y + x)
                elif chr_ != ".":
                    raise ValueError(f"unexpected character {chr_!r} in {text!r}")
        return cls(width, len(rows), grid)

    def __str__(self) -> str:
        return "|".join(
            "".join("#" if self.at(x, y) else "." for x in range(self.width))
            for y in range(self.height)
        )

    # ── マス操作 ──────────────────────────────────────────────────────

    def at(self, x: int, y: int) -> bool:
        """(x, y) が埋まっていれば True。"""
        return (self.grid >> (self.width * y + x)) & 1 == 1

    def with_cell(self, x: int, y: int, filled: bool = True) -> Domineering:
        bit = 1 << (self.width * y + x)
        grid = self.grid | bit if filled else self.grid & ~bit
        return Domineering(self.width, self.height, grid)

    def free_places(self) -> int:
        return self.width * self.height - bin(self.grid).count("1")

    # ── 手の生成 ──────────────────────────────────────────────────────

    def _moves_for(self, dx: int, dy: int) -> list[Domineering]:
        moves: set[Domineering] = set()
        for y in range(self.height - dy):
            for x in range(self.width - dx):
                if not self.at(x, y) and not self.at(x + dx, y + dy):
                    placed = self.with_cell(x, y).with_cell(x + dx, y + dy)
                    moves.add(placed.move_top_left())
        return sorted(moves)

    def left_moves(self) -> list[Domineering]:
        """左の手（縦のドミノ）で移れる局面。"""
        return self._moves_for(*_LEFT_DIRECTION)

    def right_moves(self) -> list[Domineering]:
        """右の手（横のドミノ）で移れる局面。"""
        return self._moves_for(*_RIGHT_DIRECTION)

    # ── 正規化と分解 ──────────────────────────────────────────────────

    def move_top_left(self) -> Domineering:
        """Remove filled rows and columns from the edges.

        例: "###|.#.|##." → ".#.|##."
        全て埋まっていれば 0x0 の盤面を返す。
        """
        rows = [
            y for y in range(self.height) if any(not self.at(x, y) for x in range(self.width))
        ]
        cols = [
            x for x in range(self.width) if any(not self.at(x, y) for y in range(self.height))
        ]
        if not rows:
            return Domineering.empty(0, 0)
        top, bottom = rows[0], rows[-1]
        left, right = cols[0], cols[-1]

        result = Domineering.empty(right - left + 1, bottom - top + 1)
        for y in range(top, bottom + 1):
            for x in range(left, right + 1):
                if self.at(x, y):
                    result = result.with_cell(x - left, y - top)
        return result

    def decompositions(self) -> list[Domineering]:
        """Split the grid into its connected empty regions.

        連結成分ごとに「その成分以外を埋めた盤面」を作り、端を取り除いて返す。
        ドミノは連結成分をまたげないので、局面の値は各成分の値の和になる。
        """
        visited: set[tuple[int, int]] = set()
        parts: list[Domineering] = []
        for y in range(self.height):
            for x in range(self.width):
                if not self.at(x, y) and (x, y) not in visited:
                    parts.append(self._region(x, y, visited))
        return parts

    def _region(self, x: int, y: int, visited: set[tuple[int, int]]) -> Domineering:
        region = Domineering.filled(self.width, self.height)
        queue = deque([(x, y)])
        visited.add((x, y))
        while queue:
            qx, qy = queue.popleft()
            region = region.with_cell(qx, qy, filled=False)
            for dx, dy in ((1, 0), (-1, 0), (0, 1), (0, -1)):
                nx, ny = qx + dx, qy + dy
                if (
                    0 <= nx < self.width
                    and 0 <= ny < self.height
                    and not self.at(nx, ny)
                    and (nx, ny) not in visited
                ):
                    visited.add((nx, ny))
                    queue.append((nx, ny))
        return region.move_top_left()

    # ── 標準形 ────────────────────────────────────────────────────────

    def canonical_form(self, table: TranspositionTable[Domineering]) -> PositionId:
        """Return the canonical form of this position.

        例:
            table = TranspositionTable()
            g = Domineering.parse(".#|..").canonical_form(table)
            table.engine.display(g)   # "*"
        """
        grid = self.move_top_left()
        cached = table.get(grid)
        if cached is not None:
            return cached

        engine = table.engine
        result = engine.zero
        for part in grid.decompositions():
            value = table.get_or_compute(part, lambda part=part: part._component_form(table))
            result = engine.canonicalize(engine.sum(result, value))
        return table.get_or_compute(grid, lambda: result)

    def _component_form(self, table: TranspositionTable[Domineering]) -> PositionId:
        engine = table.engine
        left = [m.canonical_form(table) for m in self.left_moves()]
        right = [m.canonical_form(table) for m in self.right_moves()]
        return engine.canonicalize(engine.construct(left, right))

    # ── 変換と出力 ────────────────────────────────────────────────────

    def rotate(self) -> Domineering:
        """Rotate the grid 90° clockwise."""
        result = Domineering.empty(self.height, self.width)
        for y in range(self.height):
            for x in range(self.width):
                if self.at(x, y):
                    result = result.with_cell(result.width - y - 1, x)
        return result

    def vertical_flip(self) -> Domineering:
        """左右を反転する（縦の軸で折り返す）。"""
        result = Domineering.empty(self.width, self.height)
        for y in range(self.height):
            for x in range(self.width):
                if self.at(x, y):
                    result = result.with_cell(self.width - x - 1, y)
        return result

    def horizontal_flip(self) -> Domineering:
        """上下を反転する（横の軸で折り返す）。"""
        result = Domineering.empty(self.width, self.height)
        for y in range(self.height):
            for x in range(self.width):
                if self.at(x, y):
                    result = result.with_cell(x, self.height - y - 1)
        return result

    def to_latex(self, scale: float = 1.0) -> str:
        """TikZ picture with filled tiles shaded gray."""
        if scale < 0:
            raise ValueError("scale must be positive")
        parts = [f"\\begin{{tikzpicture}}[scale={scale:g}] "]
        for y in range(self.height):
            for x in range(self.width):
                if self.at(x, y):
                    parts.append(f"\\fill[fill=gray] ({x},{y}) rectangle ({x + 1},{y + 1}); ")
        parts.append(
            f"\\draw[step=1cm,black] (0,0) grid ({self.width}, {self.height}); "
            "\\end{tikzpicture}"
        )
        return "".join(parts)
