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
"""Free-form geometric arrangements: circles, lines and grids."""
from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional

from backline.models.entities import Move
from backline.models.requests import ShapeRequest

from .config import ENGINE_CONFIG
from .geometry import Position, clamp_position
from .validation import ResolutionError


def _circle(request: ShapeRequest) -> List[Position]:
    """Spread the players evenly around a circle, starting at the top.

    Angles advance clockwise on screen because ``y`` grows downwards.

    Parameters
    ----------
    request : ShapeRequest
        Circle description.

    Returns
    -------
    List[Position]
        Unclamped positions in player order.
    """
    cfg = ENGINE_CONFIG.shapes
    center = request.center or Position(*cfg.default_center)
    radius = cfg.default_radius if request.radius is None else request.radius
    step = (2 * math.pi) / len(request.players)
    points = []
    for index in range(len(request.players)):
        angle = index * step - math.pi / 2
        points.append(Position(center.x + radius * math.cos(angle), center.y + radius * math.sin(angle)))
    return points


def _line(request: ShapeRequest) -> List[Position]:
    """Place the players at equal steps between two endpoints.

    Parameters
    ----------
    request : ShapeRequest
        Line description; a lone player lands on the midpoint.

    Returns
    -------
    List[Position]
        Unclamped positions in player order.
    """
    cfg = ENGINE_CONFIG.shapes
    start = request.start or Position(*cfg.default_line_start)
    end = request.end or Position(*cfg.default_line_end)
    count = len(request.players)
    points = []
    for index in range(count):
        t = index / (count - 1) if count > 1 else 0.5
        points.append(Position(start.x + (end.x - start.x) * t, start.y + (end.y - start.y) * t))
    return points


def _grid(request: ShapeRequest) -> List[Position]:
    """Fill a centred grid row by row.

    Parameters
    ----------
    request : ShapeRequest
        Grid description; missing dimensions are derived from the player count.

    Returns
    -------
    List[Position]
        Unclamped positions in player order.
    """
    cfg = ENGINE_CONFIG.shapes
    count = len(request.players)
    center = request.center or Position(*cfg.default_center)
    if request.cols:
        cols = request.cols
    elif request.rows:
        cols = math.ceil(count / request.rows)
    else:
        cols = math.ceil(math.sqrt(count))
    rows = request.rows or math.ceil(count / cols)
    spacing = cfg.grid_spacing
    start_x = center.x - ((cols - 1) * spacing) / 2
    start_y = center.y - ((rows - 1) * spacing) / 2
    return [
        Position(start_x + (index % cols) * spacing, start_y + (index // cols) * spacing)
        for index in range(count)
    ]


SHAPE_BUILDERS: Dict[str, Callable[[ShapeRequest], List[Position]]] = {
    "circle": _circle,
    "line": _line,
    "grid": _grid,
}


def calculate_shape_positions(request: ShapeRequest, explanation: Optional[str] = None) -> List[Move]:
    """Turn a shape request into one clamped move per listed entity.

    Parameters
    ----------
    request : ShapeRequest
        Shape type, optional geometry and the ordered entity identifiers.
    explanation : Optional[str]
        Text attached to each move; defaults to ``"Part of <type> shape"``.

    Returns
    -------
    List[Move]
        Moves in the same order as ``request.players``.

    Raises
    ------
    ResolutionError
        When the shape type is unknown or no entities are listed.
    """
    try:
        builder = SHAPE_BUILDERS[request.type]
    except KeyError as exc:
        known = ", ".join(sorted(SHAPE_BUILDERS))
        raise ResolutionError(f"Unknown shape '{request.type}'. Known shapes: {known}") from exc
    if not request.players:
        raise ResolutionError(f"A {request.type} shape needs at least one entity")
    if (request.rows is not None and request.rows < 1) or (request.cols is not None and request.cols < 1):
        raise ResolutionError("Grid rows and cols must be positive")

    reason = explanation or f"Part of {request.type} shape"
    return [
        Move(target_id, clamp_position(point.x, point.y), reason)
        for target_id, point in zip(request.players, builder(request))
    ]
