"""Tests for the Domineering ruleset."""

from __future__ import annotations

import pytest

from cgt_engine.engine.config import EngineConfig
from cgt_engine.engine.core import GameEngine
from cgt_engine.game.protocol import PartizanGame
from cgt_engine.rulesets.domineering import Domineering
from cgt_engine.rulesets.table import TranspositionTable


@pytest.fixture
def table() -> TranspositionTable[Domineering]:
    return TranspositionTable()


def _grids(*texts: str) -> list[Domineering]:
    return [Domineering.parse(t) for t in texts]


class TestGrid:
    def test_parse_and_str(self) -> None:
        grid = Domineering.parse("..#|.#.|##.")
        assert (grid.width, grid.height) == (3, 3)
        assert str(grid) == "..#|.#.|##."
        assert grid.at(2, 0)
        assert not grid.at(0, 0)

    @pytest.mark.parametrize("text", ["..|.", "..x", "#|..#"])
    def test_parse_invalid(self, text: str) -> None:
        with pytest.raises(ValueError):
            Domineering.parse(text)

    def test_empty_and_filled(self) -> None:
        assert str(Domineering.empty(3, 2)) == "...|..."
        assert str(Domineering.filled(2, 2)) == "##|##"
        assert Domineering.empty(3, 2).free_places() == 6

    def test_from_number(self) -> None:
        assert str(Domineering.from_number(2, 2, 0b1001)) == "#.|.#"
        # 盤面外のビットは無視される
        assert Domineering.from_number(1, 1, 0b11) == Domineering.filled(1, 1)

    def test_with_cell(self) -> None:
        grid = Domineering.empty(2, 1).with_cell(1, 0)
        assert str(grid) == ".#"
        assert str(grid.with_cell(1, 0, filled=False)) == ".."

    def test_is_partizan_game(self) -> None:
        assert isinstance(Domineering.empty(2, 2), PartizanGame)


class TestMoves:
    def test_left_moves_are_vertical(self) -> None:
        grid = Domineering.parse("..#|.#.|##.")
        assert grid.left_moves() == _grids("..|.#", ".#|#.|#.")

    def test_right_moves_are_horizontal(self) -> None:
        grid = Domineering.parse("..#|.#.|##.")
        assert grid.right_moves() == _grids(".#.|##.")

    def test_no_moves_on_single_cell(self) -> None:
        grid = Domineering.empty(1, 1)
        assert grid.left_moves() == []
        assert grid.right_moves() == []

    def test_move_top_left(self) -> None:
        assert Domineering.parse("###|.#.|##.").move_top_left() == Domineering.parse(".#.|##.")
        assert Domineering.filled(3, 3).move_top_left() == Domineering.empty(0, 0)
        assert Domineering.parse("").move_top_left() == Domineering.empty(0, 0)

    def test_decompositions(self) -> None:
        grid = Domineering.parse("..#|.#.|##.")
        assert grid.decompositions() == _grids("..|.#", ".|.")


class TestTransforms:
    def test_rotate(self) -> None:
        grid = Domineering.parse("##..|....|#..#")
        assert grid.rotate() == Domineering.parse("#.#|..#|...|#..")

    def test_flips(self) -> None:
        grid = Domineering.parse("##..|....|#..#")
        assert grid.vertical_flip() == Domineering.parse("..##|....|#..#")
        assert grid.horizontal_flip() == Domineering.parse("#..#|....|##..")

    def test_to_latex(self) -> None:
        grid = Domineering.parse("##..|....|#...|..##")
        expected = (
            r"\begin{tikzpicture}[scale=1] "
            r"\fill[fill=gray] (0,0) rectangle (1,1); "
            r"\fill[fill=gray] (1,0) rectangle (2,1); "
            r"\fill[fill=gray] (0,2) rectangle (1,3); "
            r"\fill[fill=gray] (2,3) rectangle (3,4); "
            r"\fill[fill=gray] (3,3) rectangle (4,4); "
            r"\draw[step=1cm,black] (0,0) grid (4, 4); \end{tikzpicture}"
        )
        assert grid.to_latex() == expected

    def test_to_latex_negative_scale(self) -> None:
        with pytest.raises(ValueError):
            Domineering.empty(1, 1).to_latex(scale=-1)


class TestCanonicalForm:
    @pytest.mark.parametrize(
        ("grid", "expected"),
        [
            (Domineering.empty(1, 2), "1"),
            (Domineering.empty(2, 1), "-1"),
            (Domineering.empty(2, 2), "{1|-1}"),
            (Domineering.parse("..#|..#|##."), "{1|-1}"),
            (Domineering.empty(4, 1), "-2"),
            (Domineering.parse(".#|.."), "*"),
            (Domineering.parse(".##|.##|..."), "0"),
            (Domineering.parse("..#|..#|..."), "{1/2|-2}"),
            (Domineering.empty(3, 3), "{1|-1}"),
            (Domineering.parse(".#.#|.#.."), "1*"),
        ],
    )
    def test_known_values(
        self, table: TranspositionTable[Domineering], grid: Domineering, expected: str
    ) -> None:
        position = grid.canonical_form(table)
        assert table.engine.display(position) == expected

    def test_rotation_negates(self, table: TranspositionTable[Domineering]) -> None:
        engine = table.engine
        grid = Domineering.parse("..#|..#|...")
        value = grid.canonical_form(table)
        rotated = grid.rotate().canonical_form(table)
        assert engine.equal(rotated, engine.negate(value))

    def test_flips_preserve_value(self, table: TranspositionTable[Domineering]) -> None:
        grid = Domineering.parse("..#|..#|...")
        value = grid.canonical_form(table)
        assert grid.vertical_flip().canonical_form(table) == value
        assert grid.horizontal_flip().canonical_form(table) == value

    def test_table_caches_trimmed_grids(self, table: TranspositionTable[Domineering]) -> None:
        grid = Domineering.parse("###|..#|###")
        value = grid.canonical_form(table)
        assert table.get(Domineering.parse("..")) == value
        assert len(table) > 0

    def test_parallel_engine_agrees(self) -> None:
        with GameEngine(EngineConfig(parallel=True, max_workers=4)) as engine:
            table: TranspositionTable[Domineering] = TranspositionTable(engine)
            position = Domineering.empty(3, 3).canonical_form(table)
            assert engine.display(position) == "{1|-1}"
