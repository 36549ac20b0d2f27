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
"""Pure coordinate transforms for mirroring and portrait display.

All transforms are total functions over ``[0, 100]^2``. Mirroring reflects the
field across the centre line so a layout authored for the red team (defending
``x = 0``) can be reused by the blue team. Portrait transforms rotate the field
content 90 degrees clockwise for narrow displays.
"""
from __future__ import annotations

from typing import Iterable, List

from .config import ENGINE_CONFIG
from .geometry import Position


def mirror_position(position: Position) -> Position:
    """Reflect ``position`` across the centre line.

    Parameters
    ----------
    position : Position
        Point to mirror.

    Returns
    -------
    Position
        Point with ``x`` replaced by ``100 - x``.
    """
    return Position(ENGINE_CONFIG.field.max_coord - position.x, position.y)


def mirror_x(x: float, team: str) -> float:
    """Express a red-oriented x coordinate for ``team``.

    Parameters
    ----------
    x : float
        Coordinate authored for the red team.
    team : str
        Team the coordinate is meant for; blue coordinates are mirrored.

    Returns
    -------
    float
        ``x`` for red, ``100 - x`` for blue.
    """
    if team == "blue":
        return ENGINE_CONFIG.field.max_coord - x
    return x


def orient(position: Position, team: str) -> Position:
    """Express a red-oriented position for ``team``.

    Parameters
    ----------
    position : Position
        Point authored for the red team.
    team : str
        Team the point is meant for.

    Returns
    -------
    Position
        The original point for red, its mirror for blue.
    """
    return Position(mirror_x(position.x, team), position.y)


def to_portrait(position: Position) -> Position:
    """Rotate a standard-orientation point into portrait display coordinates.

    Parameters
    ----------
    position : Position
        Point in standard (landscape) coordinates.

    Returns
    -------
    Position
        Point rotated 90 degrees clockwise: ``(100 - y, x)``.
    """
    return Position(ENGINE_CONFIG.field.max_coord - position.y, position.x)


def from_portrait(position: Position) -> Position:
    """Undo :func:`to_portrait`.

    Parameters
    ----------
    position : Position
        Point in portrait display coordinates.

    Returns
    -------
    Position
        Point in standard coordinates: ``(y, 100 - x)``.
    """
    return Position(position.y, ENGINE_CONFIG.field.max_coord - position.x)


def path_to_portrait(points: Iterable[Position]) -> List[Position]:
    """Rotate every point of a drawn path into portrait coordinates.

    Parameters
    ----------
    points : Iterable[Position]
        Path vertices in standard coordinates.

    Returns
    -------
    List[Position]
        Rotated vertices in the original order.
    """
    return [to_portrait(point) for point in points]


def path_from_portrait(points: Iterable[Position]) -> List[Position]:
    """Rotate every point of a portrait path back to standard coordinates.

    Parameters
    ----------
    points : Iterable[Position]
        Path vertices in portrait coordinates.

    Returns
    -------
    List[Position]
        Vertices in standard coordinates.
    """
    return [from_portrait(point) for point in points]


def flip_positions(points: Iterable[Position]) -> List[Position]:
    """Mirror every point across the centre line.

    Parameters
    ----------
    points : Iterable[Position]
        Points to mirror.

    Returns
    -------
    List[Position]
        Mirrored points in the original order.
    """
    return [mirror_position(point) for point in points]
