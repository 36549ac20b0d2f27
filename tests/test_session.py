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
"""Tests for training-session allocation and layout."""

import pytest

from backline.engine.allocator import allocate_resources
from backline.engine.geometry import Position
from backline.engine.session import parking_position, resolve_training_session
from backline.engine.validation import ResolutionError
from backline.models.requests import Activity, ActivityLocation, EntityRequest, TrainingSessionRequest
from backline.utils.debug import ResolutionDebugger
from backline.utils.roster import create_board


def make_session():
    """Build a three-activity session that leaves some players unused."""
    return TrainingSessionRequest(
        (
            Activity(
                "rondo",
                "Rondo",
                "ron_do",
                ActivityLocation(anchor="center_spot"),
                (EntityRequest("player", 5), EntityRequest("ball", 1), EntityRequest("cone", 4)),
            ),
            Activity(
                "ssg",
                "3v3",
                "small_sided_game",
                ActivityLocation(center=Position(25, 50)),
                (EntityRequest("player", 6, "blue"), EntityRequest("gk", 2), EntityRequest("mini_goal", 2)),
            ),
            Activity(
                "shuttle",
                "Shuttle runs",
                "shuttle",
                ActivityLocation(anchor="top_D_right"),
                (EntityRequest("player", 3, "red"),),
            ),
        )
    )


class TestAllocator:
    """Tests for exclusive roster allocation."""

    def test_requests_are_served_in_order(self) -> None:
        """Earlier activities pick first and team filters are honoured."""
        allocation = allocate_resources(make_session().activities, create_board())
        assert [p.id for p in allocation.for_activity("rondo").players] == ["R2", "R3", "R4", "R5", "R6"]
        assert [p.id for p in allocation.for_activity("ssg").players] == ["B2", "B3", "B4", "B5", "B6", "B7"]
        assert [p.id for p in allocation.for_activity("ssg").goalkeepers] == ["R1", "B1"]
        assert [p.id for p in allocation.for_activity("shuttle").players] == ["R7", "R8", "R9"]

    def test_no_entity_is_shared(self) -> None:
        """Every allocated entity belongs to exactly one activity."""
        allocation = allocate_resources(make_session().activities, create_board())
        claimed = [p.id for entry in allocation.activities for p in entry.everyone()]
        assert len(claimed) == len(set(claimed))
        assert not set(claimed) & {p.id for p in allocation.unallocated}
        assert len(claimed) + len(allocation.unallocated) == 22

    def test_shortfall_is_reported_not_raised(self, tmp_path) -> None:
        """Asking for more players than exist records a shortfall."""
        activity = Activity("big", "Big game", "match_play", entities=(EntityRequest("player", 30),))
        debugger = ResolutionDebugger(str(tmp_path))
        try:
            allocation = allocate_resources((activity,), create_board(), debugger)
            assert allocation.shortfalls[0].requested == 30
            assert allocation.shortfalls[0].allocated == 20
            assert any("SHORTFALL" in line for line in debugger.get_recent_events())
        finally:
            debugger.close()

    def test_duplicate_activity_ids(self) -> None:
        """Activity identifiers must be unique within a session."""
        activity = Activity("a", "A", "ron_do")
        with pytest.raises(ResolutionError, match="Duplicate"):
            allocate_resources((activity, activity), create_board())

    def test_negative_count(self) -> None:
        """Negative entity counts are rejected."""
        activity = Activity("a", "A", "ron_do", entities=(EntityRequest("player", -1),))
        with pytest.raises(ResolutionError):
            allocate_resources((activity,), create_board())

    def test_unknown_team_filter(self) -> None:
        """Team filters must be red, blue or neutral."""
        activity = Activity("a", "A", "ron_do", entities=(EntityRequest("player", 1, "green"),))
        with pytest.raises(ResolutionError, match="Known teams"):
            allocate_resources((activity,), create_board())


class TestSessionLayout:
    """Tests for laying out activities and equipment."""

    def test_ring_layout(self) -> None:
        """Rondo players form a ring around the centre spot."""
        layout = resolve_training_session(make_session(), create_board())
        spots = {m.target_id: m.new_position for m in layout.moves}
        assert spots["R2"].x == pytest.approx(50.0) and spots["R2"].y == pytest.approx(44.0)
        for player_id in ("R2", "R3", "R4", "R5", "R6"):
            assert spots[player_id].distance_to(Position(50, 50)) == pytest.approx(6.0)

    def test_small_sided_game_layout(self) -> None:
        """Two lines face each other with a keeper at each end."""
        layout = resolve_training_session(make_session(), create_board())
        spots = {m.target_id: m.new_position for m in layout.moves}
        assert [spots[f"B{n}"] for n in (2, 3, 4)] == [Position(20, 46), Position(20, 50), Position(20, 54)]
        assert spots["B5"].x == 30
        assert spots["R1"] == Position(15, 50)
        assert spots["B1"] == Position(35, 50)

    def test_equipment_is_created_with_stable_ids(self) -> None:
        """Equipment ids are derived from the activity and kind."""
        layout = resolve_training_session(make_session(), create_board())
        ids = [item.id for item in layout.equipment]
        assert ids[:4] == [f"equipment_rondo_cone_{n}" for n in range(1, 5)]
        goals = [item for item in layout.equipment if item.type == "mini_goal"]
        assert [(g.position, g.rotation) for g in goals] == [(Position(21, 50), 0.0), (Position(29, 50), 180.0)]
        assert layout.equipment[0].position.x == pytest.approx(55.0)

    def test_balls_go_to_activity_centres(self) -> None:
        """Requested balls are placed on their activity's centre."""
        layout = resolve_training_session(make_session(), create_board())
        balls = [m for m in layout.moves if m.is_ball_move()]
        assert [(m.target_id, m.new_position) for m in balls] == [("ball", Position(50, 50))]

    def test_unused_players_are_parked(self) -> None:
        """Unclaimed players park on their own team's goal line."""
        layout = resolve_training_session(make_session(), create_board())
        spots = {m.target_id: m.new_position for m in layout.moves}
        assert spots["R10"] == parking_position("red", 0) == Position(0, 10)
        assert spots["R11"] == Position(0, 15)
        assert spots["B8"] == Position(100, 10)

    def test_parking_wraps_into_new_columns(self) -> None:
        """A full parking column continues one step infield."""
        assert parking_position("red", 19) == Position(5, 10)
        assert parking_position("blue", 19) == Position(95, 10)

    def test_unknown_activity_template(self) -> None:
        """Unknown activity templates are rejected before allocation."""
        request = TrainingSessionRequest((Activity("x", "X", "yoga"),))
        with pytest.raises(ResolutionError, match="Known templates"):
            resolve_training_session(request, create_board())

    def test_unknown_anchor_uses_centre(self) -> None:
        """Activities on unknown anchors are centred on the centre spot."""
        activity = Activity("a", "A", "technical", ActivityLocation(anchor="moon"), (EntityRequest("player", 1),))
        layout = resolve_training_session(TrainingSessionRequest((activity,)), create_board())
        assert layout.moves[0].new_position == Position(50, 44)
