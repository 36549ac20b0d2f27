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
"""Tests for the overlap resolver."""

from backline.engine.geometry import Position
from backline.engine.overlap import resolve_overlaps
from backline.models.entities import Ball, Move, Player
from backline.utils.debug import ResolutionDebugger


def make_player(player_id: str, x: float, y: float) -> Player:
    """Create a red field player at ``(x, y)``."""
    return Player(player_id, "red", int(player_id[1:]), Position(x, y))


class TestOverlapResolver:
    """Tests for iterative overlap relaxation."""

    def test_clean_input_is_untouched(self) -> None:
        """Well separated moves converge on the first pass unchanged."""
        moves = [Move("R2", Position(10, 10)), Move("R3", Position(30, 30))]
        result = resolve_overlaps(moves)
        assert result.report.converged and result.report.iterations == 1
        assert list(result.moves) == moves

    def test_close_movers_are_separated(self) -> None:
        """Two movers closer than the minimum end up at least that far apart."""
        moves = [Move("R2", Position(50, 50)), Move("R3", Position(52, 50))]
        result = resolve_overlaps(moves, min_distance=4)
        a, b = (move.new_position for move in result.moves)
        assert result.report.converged
        assert a.distance_to(b) >= 4 - 1e-9
        assert a.y == 50 and b.y == 50

    def test_coincident_movers_are_nudged(self) -> None:
        """Movers on the same spot are split apart."""
        moves = [Move("R2", Position(50, 50)), Move("R3", Position(50, 50))]
        result = resolve_overlaps(moves)
        a, b = (move.new_position for move in result.moves)
        assert a != b

    def test_stationary_entities_do_not_move(self) -> None:
        """Movers step away from stationary entities, which keep their place."""
        ball = Ball("ball", Position(50, 50))
        result = resolve_overlaps([Move("R2", Position(51, 50))], stationary=[ball], min_distance=4)
        moved = result.moves[0].new_position
        assert moved.distance_to(ball.position) >= 4 - 1e-9
        assert len(result.moves) == 1

    def test_moving_entities_are_not_anchors(self) -> None:
        """A board entity that is itself moving is not treated as stationary."""
        old_spot = make_player("R2", 10, 10)
        result = resolve_overlaps([Move("R2", Position(10, 11))], stationary=[old_spot])
        assert result.moves[0].new_position == Position(10, 11)

    def test_iteration_cap_is_respected(self) -> None:
        """A crowded cluster stops at the cap and reports non-convergence."""
        moves = [Move(f"R{n}", Position(50, 50)) for n in range(2, 22)]
        result = resolve_overlaps(moves, max_iterations=3)
        assert result.report.iterations == 3
        assert not result.report.converged

    def test_results_stay_in_bounds(self) -> None:
        """Pushes near the field edge are clamped."""
        moves = [Move(f"R{n}", Position(0, 0)) for n in range(2, 12)]
        result = resolve_overlaps(moves)
        assert all(move.new_position.in_bounds() for move in result.moves)
        assert [move.target_id for move in result.moves] == [move.target_id for move in moves]

    def test_report_is_logged(self, tmp_path) -> None:
        """The run report reaches the debugger."""
        debugger = ResolutionDebugger(str(tmp_path))
        try:
            resolve_overlaps([Move("R2", Position(1, 1))], debugger=debugger)
            assert any("OVERLAP" in line for line in debugger.get_recent_events())
        finally:
            debugger.close()
