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
"""Tests for penalty corner and shootout layouts."""

import pytest

from backline.engine.templates import calculate_template
from backline.engine.validation import ResolutionError
from backline.models.requests import TemplateParameters, TemplateRequest
from backline.utils.roster import create_board


def positions(moves):
    """Index move destinations by target id."""
    return {move.target_id: (move.new_position.x, move.new_position.y) for move in moves}


class TestAttackingCorner:
    """Tests for the attacking penalty corner calculator."""

    def test_default_layout_against_blue_goal(self) -> None:
        """Red attacks x=100 with one top battery and a right-side injector."""
        board = create_board()
        moves = calculate_template(TemplateRequest("APC", "red"), board)
        spots = positions(moves)
        assert spots["R1"] == (5.0, 50.0)
        assert spots["R2"] == (99.5, pytest.approx(63.33))
        assert spots["R3"] == (pytest.approx(84.0), 50.0)
        assert spots["R4"] == (pytest.approx(82.5), 50.0)
        troop_ys = sorted(spots[f"R{n}"][1] for n in range(5, 12))
        assert troop_ys == [25.0, 30.0, 35.0, 40.0, 60.0, 70.0, 75.0]

    def test_opponents_defend_by_default(self) -> None:
        """The blue team receives the default defensive corner."""
        board = create_board()
        spots = positions(calculate_template(TemplateRequest("APC", "red"), board))
        assert spots["B1"] == (100.0, 50.0)
        assert [spots[f"B{n}"] for n in range(2, 6)] == [(100.0, 48.0), (100.0, 52.0), (100.0, 46.0), (100.0, 54.0)]

    def test_opponents_can_be_excluded(self) -> None:
        """Only the acting team moves when opponents are switched off."""
        board = create_board()
        request = TemplateRequest("APC", "red", parameters=TemplateParameters(include_opponents=False))
        moves = calculate_template(request, board)
        assert {move.target_id[0] for move in moves} == {"R"}
        assert len(moves) == 11

    def test_two_batteries_and_left_injector(self) -> None:
        """A right first battery puts the second battery at the top."""
        board = create_board()
        parameters = TemplateParameters(batteries=2, battery1_type="right", injector_side="left", include_opponents=False)
        spots = positions(calculate_template(TemplateRequest("APC", "blue", parameters=parameters), board))
        assert spots["B1"] == (95.0, 50.0)
        assert spots["B2"] == (0.5, pytest.approx(36.67))
        assert spots["B3"][1] == 65.0 and spots["B5"][1] == 50.0
        assert spots["B4"][0] == pytest.approx(spots["B3"][0] + 1.5)

    def test_named_injector(self) -> None:
        """The requested injector takes the backline slot."""
        board = create_board()
        parameters = TemplateParameters(injector_id="R9", include_opponents=False)
        spots = positions(calculate_template(TemplateRequest("APC", "red", parameters=parameters), board))
        assert spots["R9"][0] == 99.5

    def test_unknown_battery_type(self) -> None:
        """Unknown battery positions are rejected."""
        board = create_board()
        with pytest.raises(ResolutionError, match="Known types"):
            calculate_template(TemplateRequest("APC", "red", parameters=TemplateParameters(battery1_type="middle")), board)

    def test_goal_override(self) -> None:
        """An explicit goal line redirects the whole corner."""
        board = create_board()
        parameters = TemplateParameters(goal=0, include_opponents=False)
        spots = positions(calculate_template(TemplateRequest("APC", "red", parameters=parameters), board))
        assert spots["R2"][0] == 0.5
        assert spots["R3"][0] == pytest.approx(16.0)

    def test_invalid_goal_override(self) -> None:
        """Goal overrides must name one of the two goal lines."""
        board = create_board()
        with pytest.raises(ResolutionError):
            calculate_template(TemplateRequest("APC", "red", parameters=TemplateParameters(goal=50)), board)

    def test_short_roster(self) -> None:
        """Three players still produce a keeper, an injector and one troop player."""
        board = create_board(red_size=3, blue_size=0)
        moves = calculate_template(TemplateRequest("APC", "red"), board)
        assert [move.target_id for move in moves] == ["R1", "R2", "R3"]
        assert all(move.new_position.in_bounds() for move in moves)


class TestDefensiveCorner:
    """Tests for the defensive penalty corner calculator."""

    def test_default_layout(self) -> None:
        """Red defends x=0 with four runners and six players on halfway."""
        board = create_board()
        spots = positions(calculate_template(TemplateRequest("DPC", "red"), board))
        assert spots["R1"] == (0.0, 50.0)
        assert [spots[f"R{n}"] for n in range(2, 6)] == [(0.0, 48.0), (0.0, 52.0), (0.0, 46.0), (0.0, 54.0)]
        assert [spots[f"R{n}"] for n in range(6, 12)] == [(50.0, 30.0 + 5 * i) for i in range(6)]

    def test_blue_attacks_the_same_goal(self) -> None:
        """The opposing attack targets the defended goal."""
        board = create_board()
        spots = positions(calculate_template(TemplateRequest("DPC", "red"), board))
        assert spots["B1"] == (95.0, 50.0)
        assert spots["B2"][0] == 0.5

    def test_extra_runners_queue_off_the_line(self) -> None:
        """Runners beyond the fourth stand four units in front of the goal."""
        board = create_board()
        parameters = TemplateParameters(runner_count=6, include_opponents=False)
        spots = positions(calculate_template(TemplateRequest("DPC", "red", parameters=parameters), board))
        assert spots["R6"] == (4.0, 46.0)
        assert spots["R7"] == (4.0, 54.0)
        assert [spots[f"R{n}"][1] for n in range(8, 12)] == [30.0, 35.0, 40.0, 45.0]

    def test_blue_defends_x_100(self) -> None:
        """Blue's own goal is at x=100."""
        board = create_board()
        parameters = TemplateParameters(include_opponents=False)
        spots = positions(calculate_template(TemplateRequest("DPC", "blue", parameters=parameters), board))
        assert spots["B1"] == (100.0, 50.0)
        assert spots["B6"] == (50.0, 30.0)


class TestShootout:
    """Tests for the one-on-one shootout calculator."""

    def test_default_shootout(self) -> None:
        """Red's first field player faces blue's keeper from the 23m line."""
        board = create_board()
        moves = calculate_template(TemplateRequest("shootout", "red"), board)
        spots = positions(moves)
        assert moves[0].target_id == "R2" and spots["R2"] == (75.0, 50.0)
        assert moves[1].target_id == "B1" and spots["B1"] == (100.0, 50.0)
        assert len(moves) == 22

    def test_idle_players_stack_in_columns(self) -> None:
        """Idle players fill fifteen-deep columns away from the attacked goal."""
        board = create_board()
        moves = calculate_template(TemplateRequest("shootout", "red"), board)
        idle = moves[2:]
        assert all(move.new_position.x == 50.0 for move in idle[:15])
        assert [move.new_position.y for move in idle[:3]] == [15.0, 20.0, 25.0]
        assert all(move.new_position.x == 45.0 for move in idle[15:])

    def test_attacker_from_other_team_flips_direction(self) -> None:
        """A blue attacker shoots at red's goal."""
        board = create_board()
        parameters = TemplateParameters(attacker_id="B3")
        spots = positions(calculate_template(TemplateRequest("shootout", "red", parameters=parameters), board))
        assert spots["B3"] == (25.0, 50.0)
        assert spots["R1"] == (0.0, 50.0)

    def test_same_attacker_and_keeper(self) -> None:
        """One player cannot be both attacker and goalkeeper."""
        board = create_board()
        parameters = TemplateParameters(attacker_id="R1", gk_id="R1")
        with pytest.raises(ResolutionError, match="must differ"):
            calculate_template(TemplateRequest("shootout", "red", parameters=parameters), board)

    def test_unknown_attacker(self) -> None:
        """Unknown attacker ids are reported."""
        board = create_board()
        with pytest.raises(ResolutionError, match="Target not found"):
            calculate_template(TemplateRequest("shootout", "red", parameters=TemplateParameters(attacker_id="R99")), board)


class TestTemplateDispatch:
    """Tests for the template registry."""

    def test_unknown_kind(self) -> None:
        """Unknown template kinds list the known ones."""
        with pytest.raises(ResolutionError, match="Known templates"):
            calculate_template(TemplateRequest("sweep", "red"), create_board())

    def test_unknown_team(self) -> None:
        """Only red and blue can act."""
        with pytest.raises(ResolutionError, match="Unknown team"):
            calculate_template(TemplateRequest("APC", "green"), create_board())

    def test_explanation_is_applied(self) -> None:
        """Every move carries the request explanation or the default."""
        board = create_board()
        moves = calculate_template(TemplateRequest("DPC", "red", explanation="Defend the corner"), board)
        assert {move.explanation for move in moves} == {"Defend the corner"}
        moves = calculate_template(TemplateRequest("DPC", "red"), board)
        assert {move.explanation for move in moves} == {"Tactical move"}
