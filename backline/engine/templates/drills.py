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
"""Small-sided drill layouts split across one or more zones."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from backline.engine.config import ENGINE_CONFIG
from backline.engine.geometry import opponent_of
from backline.engine.transforms import mirror_x
from backline.engine.validation import ResolutionError
from backline.models.entities import BoardState, Move, Player
from backline.models.requests import TemplateRequest

from .base import place


@dataclass(frozen=True)
class DrillZone:
    """Rectangle one drill game is played in, in red's orientation.

    Parameters
    ----------
    x_start : float
        Left edge.
    x_end : float
        Right edge.
    y_start : float
        Top edge.
    y_end : float
        Bottom edge.
    """

    x_start: float
    x_end: float
    y_start: float
    y_end: float

    @property
    def width(self) -> float:
        """Horizontal extent of the zone."""
        return self.x_end - self.x_start

    @property
    def height(self) -> float:
        """Vertical extent of the zone."""
        return self.y_end - self.y_start


def zone_bounds(zone: str, game_index: int = 0, game_count: int = 1) -> DrillZone:
    """Return the rectangle for ``zone``.

    Several midfield games share the midfield by splitting it into strips
    across both axes.

    Parameters
    ----------
    zone : str
        ``"attacking_25"``, ``"midfield"``, ``"defensive_circle"`` or ``"full_field"``.
    game_index : int
        Zero-based game number.
    game_count : int
        Total games being laid out.

    Returns
    -------
    DrillZone
        Zone rectangle.

    Raises
    ------
    ResolutionError
        When ``zone`` is unknown.
    """
    bounds = ENGINE_CONFIG.drill.zone_x_bounds
    try:
        x_start, x_end = bounds[zone]
    except KeyError as exc:
        raise ResolutionError(f"Unknown drill zone '{zone}'. Known zones: {', '.join(bounds)}") from exc
    field = ENGINE_CONFIG.field
    if zone == "midfield" and game_count > 1:
        game_width = (x_end - x_start) / game_count
        game_height = (field.max_coord - field.min_coord) / game_count
        return DrillZone(
            x_start + game_index * game_width,
            x_start + (game_index + 1) * game_width,
            field.min_coord + game_index * game_height,
            field.min_coord + (game_index + 1) * game_height,
        )
    return DrillZone(x_start, x_end, field.min_coord, field.max_coord)


def _game_moves(
    attackers: Sequence[Player],
    defenders: Sequence[Player],
    goalkeeper: Optional[Player],
    zone_name: str,
    zone: DrillZone,
    team: str,
) -> List[Move]:
    """Place one game's players inside its zone.

    Attackers follow a sinusoidal arc across the zone; defenders form a
    compact vertical band goal-side of the zone centre.

    Parameters
    ----------
    attackers : Sequence[Player]
        Attacking field players for this game.
    defenders : Sequence[Player]
        Defending field players for this game.
    goalkeeper : Optional[Player]
        Goalkeeper joining this game, if any.
    zone_name : str
        Zone label, which decides where the goalkeeper stands.
    zone : DrillZone
        Zone rectangle in red's orientation.
    team : str
        Attacking team; blue layouts are mirrored.

    Returns
    -------
    List[Move]
        Attackers, goalkeeper, then defenders.
    """
    cfg = ENGINE_CONFIG.drill
    field = ENGINE_CONFIG.field
    center_x = zone.x_start + zone.width / 2
    center_y = zone.y_start + zone.height / 2
    moves: List[Move] = []

    for i, player in enumerate(attackers):
        t = i / (len(attackers) - 1) if len(attackers) > 1 else 0.5
        x_offset = math.sin(t * math.pi) * (zone.width * cfg.attacker_spread_x / 2)
        x = zone.x_start + zone.width * cfg.attacker_inset + x_offset
        y = zone.y_start + zone.height * (1 - cfg.attacker_spread_y) / 2 + t * zone.height * cfg.attacker_spread_y
        moves.append(place(player.id, mirror_x(x, team), y))

    if goalkeeper is not None:
        if zone_name == "attacking_25":
            gk_x = field.max_coord
        elif zone_name == "defensive_circle":
            gk_x = field.min_coord
        else:
            gk_x = center_x
        moves.append(place(goalkeeper.id, mirror_x(gk_x, team), center_y))

    band = zone.height * cfg.defender_spread_y
    for i, player in enumerate(defenders):
        t = i / (len(defenders) - 1) if len(defenders) > 1 else 0.5
        x = center_x + zone.width * cfg.defender_depth
        moves.append(place(player.id, mirror_x(x, team), center_y - band / 2 + t * band))

    return moves


def _sideline_slot(index: int, y: float) -> tuple[float, float]:
    """Return the ``index``-th parking slot along a sideline.

    Parameters
    ----------
    index : int
        Zero-based parking number.
    y : float
        Sideline the slot sits on.

    Returns
    -------
    tuple[float, float]
        Slot coordinates; slots wrap once the sideline is full.
    """
    step = ENGINE_CONFIG.drill.parking_step
    per_line = int(ENGINE_CONFIG.field.max_coord // step)
    return 2.0 + (index % per_line) * step, y


def calculate_drill(request: TemplateRequest, board: BoardState) -> List[Move]:
    """Resolve one or more small-sided games.

    The acting team attacks. The first ``attackers * game_count`` attacking
    field players and ``defenders * game_count`` defending field players are
    active; everyone else is parked on the sidelines (attackers on the top
    line, defenders on the bottom line, spare goalkeepers beside the goal).
    With ``with_gk`` each game takes one goalkeeper, the defending team's
    first.

    Parameters
    ----------
    request : TemplateRequest
        Drill parameters: counts per game, zone(s), game count and ``with_gk``.
    board : BoardState
        Current snapshot.

    Returns
    -------
    List[Move]
        Parking moves followed by each game's layout.

    Raises
    ------
    ResolutionError
        When a zone is unknown or a count is negative.
    """
    field = ENGINE_CONFIG.field
    parameters = request.parameters
    if parameters.attackers < 0 or parameters.defenders < 0:
        raise ResolutionError("Drill attacker and defender counts must not be negative")
    game_count = max(1, parameters.game_count)
    if parameters.game_zones is not None and len(parameters.game_zones) == game_count:
        zones = list(parameters.game_zones)
    else:
        zones = [parameters.zone] * game_count
    rectangles = [zone_bounds(zone, index, game_count) for index, zone in enumerate(zones)]

    attacking_team = request.team
    field_attackers = board.field_players(attacking_team)
    field_defenders = board.field_players(opponent_of(attacking_team))
    goalkeepers = board.goalkeepers(opponent_of(attacking_team)) + board.goalkeepers(attacking_team)

    total_attackers = parameters.attackers * game_count
    total_defenders = parameters.defenders * game_count
    moves: List[Move] = []

    for i, player in enumerate(field_attackers[total_attackers:]):
        moves.append(place(player.id, *_sideline_slot(i, field.min_coord)))
    for i, player in enumerate(field_defenders[total_defenders:]):
        moves.append(place(player.id, *_sideline_slot(i, field.max_coord)))

    playing_keepers = goalkeepers[:game_count] if parameters.with_gk else []
    for i, keeper in enumerate(goalkeepers[len(playing_keepers):]):
        offset = (i // 2 + 1) * ENGINE_CONFIG.drill.parking_step * (-1 if i % 2 == 0 else 1)
        moves.append(place(keeper.id, field.min_coord, field.goal_center_y + offset))

    for index in range(game_count):
        moves.extend(
            _game_moves(
                field_attackers[index * parameters.attackers:(index + 1) * parameters.attackers],
                field_defenders[index * parameters.defenders:(index + 1) * parameters.defenders],
                playing_keepers[index] if index < len(playing_keepers) else None,
                zones[index],
                rectangles[index],
                attacking_team,
            )
        )
    return moves
