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
"""Tests for geometry, anchors and coordinate transforms."""

import math

import pytest

from backline.engine.anchors import FIELD_ANCHORS, anchor_names, is_known_anchor, resolve_anchor
from backline.engine.geometry import (
    Position,
    clamp,
    clamp_position,
    d_arc_x,
    goal_x_for,
    opponent_of,
    toward_field,
)
from backline.engine.transforms import (
    flip_positions,
    from_portrait,
    mirror_position,
    mirror_x,
    orient,
    path_from_portrait,
    path_to_portrait,
    to_portrait,
)
from backline.utils.debug import ResolutionDebugger


class TestPosition:
    """Unit tests for the Position helper."""

    def test_arithmetic(self) -> None:
        """Add, subtract and scale positions component-wise."""
        a = Position(1.0, 2.0)
        b = Position(3.0, 4.0)
        assert a + b == Position(4.0, 6.0)
        assert b - a == Position(2.0, 2.0)
        assert a * 2 == Position(2.0, 4.0)

    def test_magnitude_and_distance(self) -> None:
        """Measure vector length and point-to-point distance."""
        assert Position(3.0, 4.0).magnitude() == pytest.approx(5.0)
        assert Position(0.0, 0.0).distance_to(Position(3.0, 4.0)) == pytest.approx(5.0)

    def test_normalize_zero_vector(self) -> None:
        """Normalising a zero vector yields zero components."""
        n = Position(0.0, 0.0).normalize()
        assert n.x == 0.0 and n.y == 0.0

    def test_bounds_checks(self) -> None:
        """Out-of-range and non-finite coordinates are flagged."""
        assert Position(0.0, 100.0).in_bounds()
        assert not Position(-0.1, 50.0).in_bounds()
        assert not Position(float("nan"), 50.0).is_finite()
        assert not Position(float("inf"), 50.0).in_bounds()

    def test_clamped(self) -> None:
        """Clamping keeps both axes inside the field."""
        assert Position(-5.0, 140.0).clamped() == Position(0.0, 100.0)
        assert clamp(120.0) == 100.0
        assert clamp_position(-1.0, 50.0) == Position(0.0, 50.0)


class TestFieldGeometry:
    """Goal lines, team orientation and the shooting circle."""

    def test_goal_lines(self) -> None:
        """Red defends x=0 and blue defends x=100."""
        assert goal_x_for("red") == 0.0
        assert goal_x_for("blue") == 100.0
        assert opponent_of("red") == "blue"
        assert opponent_of("blue") == "red"

    def test_d_arc_apex(self) -> None:
        """At the goal centre the arc sits 16 units in front of either goal."""
        assert d_arc_x(0.0, 50.0) == pytest.approx(16.0)
        assert d_arc_x(100.0, 50.0) == pytest.approx(84.0)

    def test_d_arc_outside_extent_snaps_to_goal(self) -> None:
        """Heights beyond the ellipse's vertical reach return the goal line."""
        assert d_arc_x(0.0, 5.0) == 0.0
        assert d_arc_x(100.0, 95.0) == 100.0

    def test_d_arc_is_symmetric(self) -> None:
        """Both circles mirror each other across the halfway line."""
        for y in (30.0, 40.0, 60.0, 70.0):
            assert d_arc_x(0.0, y) == pytest.approx(100.0 - d_arc_x(100.0, y))

    def test_toward_field(self) -> None:
        """Distances are measured from the goal line towards the centre."""
        assert toward_field(0.0, 5.0) == 5.0
        assert toward_field(100.0, 5.0) == 95.0


class TestAnchors:
    """Tests for the named landmark registry."""

    def test_known_anchor(self) -> None:
        """Known anchors resolve to their registered coordinates."""
        assert resolve_anchor("top_D_right") == Position(84.0, 50.0)
        assert is_known_anchor("corner_bottom_left")
        assert "center_spot" in anchor_names()

    def test_every_anchor_in_bounds(self) -> None:
        """All registered landmarks lie inside the field."""
        assert all(position.in_bounds() for position in FIELD_ANCHORS.values())

    def test_offset_is_clamped(self) -> None:
        """Offsets that would leave the field are clamped."""
        assert resolve_anchor("corner_top_left", Position(-10.0, 5.0)) == Position(0.0, 7.0)

    def test_unknown_anchor_falls_back_and_logs(self, tmp_path) -> None:
        """Unknown anchors resolve to the centre spot and log a warning."""
        debugger = ResolutionDebugger(str(tmp_path))
        try:
            assert resolve_anchor("halfway_flag", debugger=debugger) == Position(50.0, 50.0)
            assert any("UNKNOWN_ANCHOR" in line for line in debugger.get_recent_events())
        finally:
            debugger.close()


class TestTransforms:
    """Mirroring and portrait rotation."""

    def test_mirror(self) -> None:
        """Mirroring reflects x across the halfway line and keeps y."""
        assert mirror_position(Position(20.0, 30.0)) == Position(80.0, 30.0)
        assert mirror_x(20.0, "red") == 20.0
        assert mirror_x(20.0, "blue") == 80.0
        assert orient(Position(10.0, 40.0), "blue") == Position(90.0, 40.0)

    def test_portrait_rotation(self) -> None:
        """Portrait rotation maps (x, y) to (100 - y, x)."""
        assert to_portrait(Position(10.0, 20.0)) == Position(80.0, 10.0)
        assert from_portrait(Position(80.0, 10.0)) == Position(10.0, 20.0)

    def test_round_trip(self) -> None:
        """Rotating to portrait and back restores every grid point exactly."""
        for x in range(0, 101, 5):
            for y in range(0, 101, 5):
                point = Position(float(x), float(y))
                assert from_portrait(to_portrait(point)) == point
                assert mirror_position(mirror_position(point)) == point

    def test_path_round_trip(self) -> None:
        """Paths keep their vertex order through both rotations."""
        path = [Position(0.0, 0.0), Position(25.0, 50.0), Position(100.0, 75.0)]
        assert path_from_portrait(path_to_portrait(path)) == path

    def test_flip_positions(self) -> None:
        """Flipping mirrors each point and keeps the order."""
        points = [Position(10.0, 20.0), Position(75.0, 5.0)]
        assert flip_positions(points) == [Position(90.0, 20.0), Position(25.0, 5.0)]
        assert flip_positions(flip_positions(points)) == points

    def test_round_trip_arbitrary_values(self) -> None:
        """Non-grid values survive the round trip within float tolerance."""
        point = Position(33.333, 66.667)
        back = from_portrait(to_portrait(point))
        assert math.isclose(back.x, point.x) and math.isclose(back.y, point.y)
