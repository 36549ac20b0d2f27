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
"""Training-session resolution: allocation, local layouts and equipment.

Each activity is laid out around its own centre. Players the session does not
use are parked on their team's goal line so the field stays readable.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Sequence, Tuple

from backline.models.entities import BoardState, Equipment, Move, Player
from backline.models.requests import Activity, ShapeRequest, TrainingSessionRequest

from .allocator import ActivityAllocation, Allocation, allocate_resources
from .anchors import resolve_anchor
from .config import ENGINE_CONFIG
from .geometry import Position, clamp_position
from .shapes import calculate_shape_positions
from .validation import ResolutionError

if TYPE_CHECKING:
    from backline.utils.debug import ResolutionDebugger

ActivityLayout = Callable[[ActivityAllocation, Position, str], List[Move]]


@dataclass(frozen=True)
class SessionLayout:
    """Everything produced for one training session.

    Parameters
    ----------
    moves : Tuple[Move, ...]
        Player and ball moves, activity by activity, then parking moves.
    equipment : Tuple[Equipment, ...]
        Newly created equipment.
    allocation : Allocation
        The roster partition the layout was built from.
    """

    moves: Tuple[Move, ...]
    equipment: Tuple[Equipment, ...]
    allocation: Allocation


def activity_center(activity: Activity, debugger: Optional["ResolutionDebugger"] = None) -> Position:
    """Return where ``activity`` is centred.

    Parameters
    ----------
    activity : Activity
        Activity whose location is resolved.
    debugger : Optional[ResolutionDebugger]
        Receives a warning for unknown anchors.

    Returns
    -------
    Position
        The absolute centre when given, otherwise the anchor plus offset.
    """
    location = activity.location
    if location.center is not None:
        return location.center.clamped()
    return resolve_anchor(location.anchor, location.offset, debugger)


def _ring_layout(allocation: ActivityAllocation, center: Position, reason: str) -> List[Move]:
    """Stand everyone on a small ring around the centre.

    Parameters
    ----------
    allocation : ActivityAllocation
        Players assigned to the activity.
    center : Position
        Activity centre.
    reason : str
        Explanation attached to each move.

    Returns
    -------
    List[Move]
        One move per allocated entity.
    """
    ids = tuple(player.id for player in allocation.everyone())
    if not ids:
        return []
    shape = ShapeRequest("circle", ids, center=center, radius=ENGINE_CONFIG.session.ring_radius)
    return calculate_shape_positions(shape, reason)


def _shuttle_layout(allocation: ActivityAllocation, center: Position, reason: str) -> List[Move]:
    """Queue everyone in two facing columns.

    Parameters
    ----------
    allocation : ActivityAllocation
        Players assigned to the activity.
    center : Position
        Activity centre.
    reason : str
        Explanation attached to each move.

    Returns
    -------
    List[Move]
        One move per allocated entity.
    """
    ids = tuple(player.id for player in allocation.everyone())
    if not ids:
        return []
    return calculate_shape_positions(ShapeRequest("grid", ids, center=center, cols=2), reason)


def _small_sided_layout(allocation: ActivityAllocation, center: Position, reason: str) -> List[Move]:
    """Split the players into two facing lines with goalkeepers behind them.

    Parameters
    ----------
    allocation : ActivityAllocation
        Players assigned to the activity; the first half forms the left line.
    center : Position
        Activity centre.
    reason : str
        Explanation attached to each move.

    Returns
    -------
    List[Move]
        One move per allocated entity.
    """
    cfg = ENGINE_CONFIG.session
    players = allocation.players
    half = math.ceil(len(players) / 2)
    moves: List[Move] = []
    for side, group in ((-1, players[:half]), (1, players[half:])):
        x = center.x + side * cfg.line_offset
        top = center.y - (len(group) - 1) * cfg.line_spacing / 2
        for i, player in enumerate(group):
            moves.append(Move(player.id, clamp_position(x, top + i * cfg.line_spacing), reason))
    for i, keeper in enumerate(allocation.goalkeepers):
        side = -1 if i % 2 == 0 else 1
        position = clamp_position(center.x + side * cfg.goalkeeper_offset, center.y + (i // 2) * cfg.line_spacing)
        moves.append(Move(keeper.id, position, reason))
    return moves


SESSION_LAYOUTS: Dict[str, ActivityLayout] = {
    "small_sided_game": _small_sided_layout,
    "shuttle": _shuttle_layout,
    "ron_do": _ring_layout,
    "possession": _ring_layout,
    "match_play": _ring_layout,
    "technical": _ring_layout,
}


def _equipment_for(activity: Activity, center: Position) -> List[Equipment]:
    """Create the cones, mini goals and coaches an activity asks for.

    Identifiers follow ``equipment_<activity>_<type>_<n>`` so repeated
    resolutions produce the same ids.

    Parameters
    ----------
    activity : Activity
        Activity whose entity list is read.
    center : Position
        Activity centre.

    Returns
    -------
    List[Equipment]
        New equipment in request order.
    """
    cfg = ENGINE_CONFIG.session
    counters: Dict[str, int] = {}
    items: List[Equipment] = []

    def next_id(kind: str) -> str:
        counters[kind] = counters.get(kind, 0) + 1
        return f"equipment_{activity.id}_{kind}_{counters[kind]}"

    for request in activity.entities:
        if request.count < 0:
            raise ResolutionError(f"Activity {activity.id} asks for a negative number of {request.type}")
        if request.type == "cone":
            for i in range(request.count):
                angle = (i / request.count) * 2 * math.pi
                position = clamp_position(
                    center.x + cfg.cone_radius * math.cos(angle),
                    center.y + cfg.cone_radius * math.sin(angle),
                )
                items.append(Equipment(next_id("cone"), "cone", position, color=cfg.cone_color))
        elif request.type == "mini_goal":
            for i in range(request.count):
                side = -1 if i % 2 == 0 else 1
                position = clamp_position(
                    center.x + side * cfg.mini_goal_offset,
                    center.y + (i // 2) * cfg.line_spacing,
                )
                rotation = 0.0 if side < 0 else 180.0
                items.append(Equipment(next_id("mini_goal"), "mini_goal", position, rotation=rotation))
        elif request.type == "coach":
            for i in range(request.count):
                x = center.x + (i - (request.count - 1) / 2) * cfg.line_spacing
                position = clamp_position(x, center.y - cfg.coach_offset)
                items.append(Equipment(next_id("coach"), "coach", position))
    return items


def ball_id(index: int) -> str:
    """Return the identifier of the ``index``-th ball in a session.

    Parameters
    ----------
    index : int
        Zero-based ball number.

    Returns
    -------
    str
        ``"ball"`` for the first ball, ``"ball_<index + 1>"`` afterwards.
    """
    return "ball" if index == 0 else f"ball_{index + 1}"


def parking_position(team: str, index: int) -> Position:
    """Return the ``index``-th parking spot on ``team``'s goal line.

    Parameters
    ----------
    team : str
        ``"red"`` parks on ``x = 0``, ``"blue"`` on ``x = 100``.
    index : int
        Zero-based position in the team's parking queue.

    Returns
    -------
    Position
        Spot on the line; full columns continue one step infield.
    """
    field = ENGINE_CONFIG.field
    per_column = int((field.max_coord - field.parking_start_y) // field.parking_step_y) + 1
    column, row = divmod(index, per_column)
    inward = column * field.parking_step_y
    x = field.min_coord + inward if team == "red" else field.max_coord - inward
    return Position(x, field.parking_start_y + row * field.parking_step_y)


def resolve_training_session(
    request: TrainingSessionRequest,
    board: BoardState,
    debugger: Optional["ResolutionDebugger"] = None,
) -> SessionLayout:
    """Lay out every activity of a session and park the leftover players.

    Parameters
    ----------
    request : TrainingSessionRequest
        Activities in priority order.
    board : BoardState
        Roster and current positions.
    debugger : Optional[ResolutionDebugger]
        Receives allocation shortfalls and anchor fallbacks.

    Returns
    -------
    SessionLayout
        Moves, new equipment and the allocation used.

    Raises
    ------
    ResolutionError
        When an activity uses an unknown layout or a malformed request.
    """
    for activity in request.activities:
        if activity.template_type not in SESSION_LAYOUTS:
            known = ", ".join(SESSION_LAYOUTS)
            raise ResolutionError(
                f"Unknown activity template '{activity.template_type}' in {activity.id}. Known templates: {known}"
            )
    allocation = allocate_resources(request.activities, board, debugger)

    moves: List[Move] = []
    equipment: List[Equipment] = []
    ball_index = 0
    for activity in request.activities:
        center = activity_center(activity, debugger)
        reason = f"Positioned for {activity.name}"
        layout = SESSION_LAYOUTS[activity.template_type]
        moves.extend(layout(allocation.for_activity(activity.id), center, reason))
        equipment.extend(_equipment_for(activity, center))
        for entity in activity.entities:
            if entity.type != "ball":
                continue
            for _ in range(entity.count):
                moves.append(Move(ball_id(ball_index), center, f"Placed for {activity.name}"))
                ball_index += 1

    moves.extend(_park(allocation.unallocated))
    return SessionLayout(tuple(moves), tuple(equipment), allocation)


def _park(players: Sequence[Player]) -> List[Move]:
    """Send unused players to their team's parking line.

    Parameters
    ----------
    players : Sequence[Player]
        Players no activity claimed.

    Returns
    -------
    List[Move]
        One parking move per player, indexed per team.
    """
    counters = {"red": 0, "blue": 0}
    moves = []
    for player in players:
        position = parking_position(player.team, counters[player.team])
        counters[player.team] += 1
        moves.append(Move(player.id, position, "Moved to bench (unused in current drills)"))
    return moves
