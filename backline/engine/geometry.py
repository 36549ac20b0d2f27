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
"""Geometry primitives shared by every placement calculator.

Positions live on a normalised field where both axes run from ``0`` to ``100``.
The helpers here keep the raw arithmetic (vector maths, clamping and the
shooting-circle ellipse solve) in one place so the tactical calculators can
read as sequences of placement decisions.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from .config import ENGINE_CONFIG


@dataclass(frozen=True)
class Position:
    """Immutable point on the normalised field.

    Parameters
    ----------
    x : float
        Horizontal coordinate; ``0`` is the red goal line and ``100`` the blue one.
    y : float
        Vertical coordinate; ``0`` is the top sideline.
    """

    x: float
    y: float

    def __add__(self, other: "Position") -> "Position":
        """Return the component-wise sum of ``self`` and ``other``.

        Parameters
        ----------
        other : Position
            Offset to add.

        Returns
        -------
        Position
            Translated point.
        """
        return Position(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Position") -> "Position":
        """Return the component-wise difference ``self - other``.

        Parameters
        ----------
        other : Position
            Point to subtract.

        Returns
        -------
        Position
            Difference vector.
        """
        return Position(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Position":
        """Scale both components by ``scalar``.

        Parameters
        ----------
        scalar : float
            Multiplier applied to both axes.

        Returns
        -------
        Position
            Scaled vector.
        """
        return Position(self.x * scalar, self.y * scalar)

    def magnitude(self) -> float:
        """Return the Euclidean length of the vector.

        Returns
        -------
        float
            Length in field units.
        """
        return math.sqrt(self.x * self.x + self.y * self.y)

    def normalize(self) -> "Position":
        """Return a unit vector pointing in the same direction as ``self``.

        Returns
        -------
        Position
            Normalised vector; zero vector when ``self`` has no magnitude.
        """
        mag = self.magnitude()
        if mag == 0:
            return Position(0.0, 0.0)
        return Position(self.x / mag, self.y / mag)

    def distance_to(self, other: "Position") -> float:
        """Return the straight-line distance between ``self`` and ``other``.

        Parameters
        ----------
        other : Position
            Point whose separation from ``self`` should be measured.

        Returns
        -------
        float
            Euclidean distance in field units.
        """
        return (other - self).magnitude()

    def clamped(self) -> "Position":
        """Return a copy of ``self`` forced inside the field bounds.

        Returns
        -------
        Position
            Point with both coordinates clamped to ``[0, 100]``.
        """
        return clamp_position(self.x, self.y)

    def is_finite(self) -> bool:
        """Return whether both coordinates are finite numbers.

        Returns
        -------
        bool
            ``False`` when either coordinate is ``nan`` or infinite.
        """
        return math.isfinite(self.x) and math.isfinite(self.y)

    def in_bounds(self) -> bool:
        """Return whether the point lies on the field, edges included.

        Returns
        -------
        bool
            ``True`` when both coordinates fall within ``[0, 100]``.
        """
        cfg = ENGINE_CONFIG.field
        return (
            self.is_finite()
            and cfg.min_coord <= self.x <= cfg.max_coord
            and cfg.min_coord <= self.y <= cfg.max_coord
        )

    def as_tuple(self) -> Tuple[float, float]:
        """Return the point as an ``(x, y)`` tuple.

        Returns
        -------
        Tuple[float, float]
            Plain coordinate pair.
        """
        return (self.x, self.y)


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    """Limit ``value`` to the closed interval ``[lower, upper]``.

    Parameters
    ----------
    value : float
        Number to clamp.
    lower : float
        Minimum allowed value.
    upper : float
        Maximum allowed value.

    Returns
    -------
    float
        ``value`` restricted to the interval.
    """
    return max(lower, min(upper, value))


def clamp_position(x: float, y: float) -> Position:
    """Build a :class:`Position` with both coordinates clamped to the field.

    Parameters
    ----------
    x : float
        Raw horizontal coordinate.
    y : float
        Raw vertical coordinate.

    Returns
    -------
    Position
        Point guaranteed to lie within the field bounds.
    """
    cfg = ENGINE_CONFIG.field
    return Position(clamp(x, cfg.min_coord, cfg.max_coord), clamp(y, cfg.min_coord, cfg.max_coord))


def goal_x_for(team: str) -> float:
    """Return the goal line a team defends.

    Parameters
    ----------
    team : str
        ``"red"`` (defends ``x = 0``) or ``"blue"`` (defends ``x = 100``).

    Returns
    -------
    float
        X coordinate of the defended goal line.
    """
    cfg = ENGINE_CONFIG.field
    return cfg.min_coord if team == "red" else cfg.max_coord


def opponent_of(team: str) -> str:
    """Return the other team name.

    Parameters
    ----------
    team : str
        ``"red"`` or ``"blue"``.

    Returns
    -------
    str
        The opposing team.
    """
    return "blue" if team == "red" else "red"


def d_arc_x(goal_x: float, y: float) -> float:
    """Solve the shooting-circle ellipse for ``x`` at height ``y``.

    The circle is stored as an ellipse because the field is normalised on both
    axes: ``((x - goal_x) / 16.0)^2 + ((y - 50) / 26.6)^2 = 1``. The returned
    point sits on the field side of the goal. Heights outside the ellipse's
    vertical extent snap to the goal line.

    Parameters
    ----------
    goal_x : float
        Goal line the circle is drawn around (``0`` or ``100``).
    y : float
        Height at which to intersect the arc.

    Returns
    -------
    float
        X coordinate of the arc at ``y``.
    """
    cfg = ENGINE_CONFIG.field
    dy = (y - cfg.goal_center_y) / cfg.d_radius_y
    term = 1.0 - dy * dy
    if term < 0:
        return goal_x
    reach = cfg.d_radius_x * math.sqrt(term)
    return goal_x + reach if goal_x < cfg.halfway_x else goal_x - reach


def toward_field(goal_x: float, distance: float) -> float:
    """Return the x coordinate ``distance`` units in front of a goal line.

    Parameters
    ----------
    goal_x : float
        Goal line used as the reference.
    distance : float
        Distance measured towards the centre of the field; negative values
        step behind the line.

    Returns
    -------
    float
        Resulting x coordinate.
    """
    return goal_x + distance if goal_x < ENGINE_CONFIG.field.halfway_x else goal_x - distance
