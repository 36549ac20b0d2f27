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
"""Iterative relaxation that pushes overlapping entities apart."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Tuple

from backline.models.entities import Entity, Move

from .config import ENGINE_CONFIG
from .geometry import Position, clamp_position

if TYPE_CHECKING:
    from backline.utils.debug import ResolutionDebugger


@dataclass(frozen=True)
class OverlapReport:
    """Summary of one relaxation run.

    Parameters
    ----------
    iterations : int
        Passes executed.
    converged : bool
        Whether a pass completed without finding any overlap.
    """

    iterations: int
    converged: bool


@dataclass(frozen=True)
class OverlapResolution:
    """Separated moves together with the run report.

    Parameters
    ----------
    moves : Tuple[Move, ...]
        Moves in their original order with adjusted, clamped positions.
    report : OverlapReport
        Iteration count and convergence flag.
    """

    moves: Tuple[Move, ...]
    report: OverlapReport


def _separate_movers(xs: List[float], ys: List[float], min_distance: float, nudge: float) -> bool:
    """Push every pair of movers closer than ``min_distance`` apart.

    Each mover of an overlapping pair takes half of the deficit. Coincident
    movers cannot be pushed along a direction, so the later one is nudged
    along ``x``.

    Parameters
    ----------
    xs : List[float]
        Mover x coordinates, updated in place.
    ys : List[float]
        Mover y coordinates, updated in place.
    min_distance : float
        Required separation.
    nudge : float
        Offset applied to the second of two coincident movers.

    Returns
    -------
    bool
        Whether any overlap was found.
    """
    found = False
    count = len(xs)
    for j in range(count):
        for k in range(j + 1, count):
            dx = xs[k] - xs[j]
            dy = ys[k] - ys[j]
            dist = math.sqrt(dx * dx + dy * dy)
            if dist == 0:
                found = True
                xs[k] += nudge
            elif dist < min_distance:
                found = True
                shift = (min_distance - dist) * 0.5
                move_x = dx / dist * shift
                move_y = dy / dist * shift
                xs[j] -= move_x
                ys[j] -= move_y
                xs[k] += move_x
                ys[k] += move_y
    return found


def _clear_stationary(
    xs: List[float],
    ys: List[float],
    anchors: Sequence[Position],
    min_distance: float,
) -> bool:
    """Push movers fully clear of entities that are not moving.

    Parameters
    ----------
    xs : List[float]
        Mover x coordinates, updated in place.
    ys : List[float]
        Mover y coordinates, updated in place.
    anchors : Sequence[Position]
        Positions of entities that stay put.
    min_distance : float
        Required separation.

    Returns
    -------
    bool
        Whether any overlap was found.
    """
    found = False
    for index in range(len(xs)):
        for anchor in anchors:
            dx = xs[index] - anchor.x
            dy = ys[index] - anchor.y
            if math.sqrt(dx * dx + dy * dy) >= min_distance:
                continue
            found = True
            if dx == 0 and dy == 0:
                dx, dy = 1.0, 0.0
            dist = math.sqrt(dx * dx + dy * dy)
            deficit = min_distance - dist
            xs[index] += dx / dist * deficit
            ys[index] += dy / dist * deficit
    return found


def resolve_overlaps(
    moves: Sequence[Move],
    stationary: Iterable[Entity] = (),
    min_distance: Optional[float] = None,
    max_iterations: Optional[int] = None,
    debugger: Optional["ResolutionDebugger"] = None,
) -> OverlapResolution:
    """Separate moving entities from each other and from stationary ones.

    The run stops after the first clean pass or after ``max_iterations``
    passes, whichever comes first; leftover overlaps are reported rather than
    raised. Positions are clamped to the field once relaxation ends.

    Parameters
    ----------
    moves : Sequence[Move]
        Moves to separate; the input objects are not modified.
    stationary : Iterable[Entity]
        Entities on the board. Those targeted by a move are ignored.
    min_distance : Optional[float]
        Required separation; defaults to the configured value.
    max_iterations : Optional[int]
        Pass cap; defaults to the configured value.
    debugger : Optional[ResolutionDebugger]
        Receives the run report.

    Returns
    -------
    OverlapResolution
        Adjusted moves and the run report.
    """
    cfg = ENGINE_CONFIG.overlap
    min_distance = cfg.min_distance if min_distance is None else min_distance
    max_iterations = cfg.max_iterations if max_iterations is None else max_iterations

    moving_ids = {move.target_id for move in moves}
    anchors = [entity.position for entity in stationary if entity.id not in moving_ids]
    xs = [move.new_position.x for move in moves]
    ys = [move.new_position.y for move in moves]

    iterations = 0
    converged = False
    while iterations < max_iterations:
        iterations += 1
        found = _separate_movers(xs, ys, min_distance, cfg.coincident_nudge)
        found = _clear_stationary(xs, ys, anchors, min_distance) or found
        if not found:
            converged = True
            break

    resolved = tuple(move.with_position(clamp_position(x, y)) for move, x, y in zip(moves, xs, ys))
    report = OverlapReport(iterations=iterations, converged=converged)
    if debugger is not None:
        debugger.log_event(
            "OVERLAP",
            f"{len(resolved)} moves | {len(anchors)} stationary | iterations={iterations} converged={converged}",
        )
    return OverlapResolution(moves=resolved, report=report)
