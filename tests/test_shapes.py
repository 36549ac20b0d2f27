# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Tests for the shape generator and move validation."""

import pytest

from backline.engine.geometry import Position
from backline.engine.shapes import calculate_shape_positions
from backline.engine.validation import ResolutionError, is_ball_id, validate_moves
from backline.models.entities import Move
from backline.models.requests import ShapeRequest
from backline.utils.roster import create_board


class TestCircle:
    """Tests for circular arrangements."""

    def test_clockwise_from_top(self) -> None:
        """The first player sits at the top and the rest step clockwise."""
        request = ShapeRequest("circle", ("A", "B", "C", "D"), center=Position(50, 50), radius=30)
        moves = calculate_shape_positions(request)
        points = [(move.new_position.x, move.new_position.y) for move in moves]
        expected = [(50, 20), (80, 50), (50, 80), (20, 50)]
        for (x, y), (ex, ey) in zip(points, expected):
            assert x == pytest.approx(ex, abs=1e-9) and y == pytest.approx(ey, abs=1e-9)
        assert [move.target_id for move in moves] == ["A", "B", "C", "D"]

    def test_defaults_and_explanation(self) -> None:
        """Missing geometry uses the defaults and moves carry a shape label."""
        moves = calculate_shape_positions(ShapeRequest("circle", ("A",)))
        assert moves[0].new_position.y == pytest.approx(25.0)
        assert moves[0].explanation == "Part of circle shape"

    def test_large_radius_is_clamped(self) -> None:
        """Points beyond the field edge are clamped."""
        moves = calculate_shape_positions(ShapeRequest("circle", ("A", "B"), center=Position(50, 50), radius=80))
        assert all(move.new_position.in_bounds() for move in moves)
        assert moves[0].new_position.y == 0.0


class TestLine:
    """Tests for straight-line arrangements."""

    def test_endpoints_included(self) -> None:
        """Players are spaced evenly from start to end."""
        request = ShapeRequest("line", ("A", "B", "C"), start=Position(10, 50), end=Position(90, 50))
        xs = [move.new_position.x for move in calculate_shape_positions(request)]
        assert xs == [10, 50, 90]

    def test_single_player_on_midpoint(self) -> None:
        """A lone player stands halfway along the line."""
        request = ShapeRequest("line", ("A",), start=Position(0, 0), end=Position(100, 100))
        assert calculate_shape_positions(request)[0].new_position == Position(50, 50)


class TestGrid:
    """Tests for grid arrangements."""

    def test_square_grid(self) -> None:
        """Four players form a centred two by two grid."""
        request = ShapeRequest("grid", ("A", "B", "C", "D"), center=Position(50, 50))
        points = [move.new_position for move in calculate_shape_positions(request)]
        assert points == [Position(45, 45), Position(55, 45), Position(45, 55), Position(55, 55)]

    def test_explicit_columns(self) -> None:
        """Columns fix the row length and rows follow from the count."""
        request = ShapeRequest("grid", tuple("ABCDE"), center=Position(50, 50), cols=5)
        ys = {move.new_position.y for move in calculate_shape_positions(request)}
        assert ys == {50}

    def test_explicit_rows(self) -> None:
        """Rows derive the column count."""
        request = ShapeRequest("grid", tuple("ABCDEF"), center=Position(50, 50), rows=2)
        xs = sorted({move.new_position.x for move in calculate_shape_positions(request)})
        assert xs == [40, 50, 60]

    def test_invalid_dimensions(self) -> None:
        """Rows and columns must be positive."""
        with pytest.raises(ResolutionError):
            calculate_shape_positions(ShapeRequest("grid", ("A",), cols=0))


class TestShapeErrors:
    """Input-shape errors."""

    def test_unknown_shape(self) -> None:
        """Unknown shape types list the known ones."""
        with pytest.raises(ResolutionError, match="Known shapes"):
            calculate_shape_positions(ShapeRequest("triangle", ("A",)))

    def test_empty_players(self) -> None:
        """A shape needs at least one entity."""
        with pytest.raises(ResolutionError):
            calculate_shape_positions(ShapeRequest("line", ()))


class TestValidation:
    """Tests for final move validation."""

    def test_ball_ids(self) -> None:
        """Ball identifiers follow ball, ball_2, ball_3 naming."""
        assert is_ball_id("ball") and is_ball_id("ball_3")
        assert not is_ball_id("ballast") and not is_ball_id("ball_")

    def test_valid_moves_pass(self) -> None:
        """Known targets, new balls and created equipment validate."""
        board = create_board()
        moves = [Move("R2", Position(10, 10)), Move("ball_4", Position(50, 50)), Move("cone_1", Position(1, 1))]
        validate_moves(moves, board, created_ids=["cone_1"])

    def test_every_problem_is_reported(self) -> None:
        """One error lists unknown targets and invalid positions together."""
        board = create_board()
        moves = [
            Move("R2", Position(120, 10)),
            Move("X9", Position(10, 10)),
            Move("R3", Position(float("nan"), 10)),
        ]
        with pytest.raises(ResolutionError) as excinfo:
            validate_moves(moves, board)
        assert len(excinfo.value.errors) == 3
        assert "Target not found: X9" in excinfo.value.errors
        assert str(excinfo.value).startswith("Validation errors:")
