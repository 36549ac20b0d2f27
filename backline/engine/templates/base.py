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
"""Shared scaffolding for the tactical template calculators."""
from __future__ import annotations

import re
from typing import Callable, List, Optional, Sequence, Tuple

from backline.engine.config import ENGINE_CONFIG
from backline.engine.geometry import Position, clamp_position
from backline.engine.transforms import orient
from backline.engine.validation import ResolutionError
from backline.models.entities import BoardState, Move, Player
from backline.models.requests import TemplateRequest

TemplateCalculator = Callable[[TemplateRequest, BoardState], List[Move]]
Placement = Tuple[Player, Position]
StructureLayout = Callable[[Optional[Player], List[Player]], List[Placement]]


def split_roster(players: Sequence[Player]) -> Tuple[Optional[Player], List[Player]]:
    """Separate the first goalkeeper from the field players.

    Parameters
    ----------
    players : Sequence[Player]
        Roster in its original order.

    Returns
    -------
    Tuple[Optional[Player], List[Player]]
        The first goalkeeper (or ``None``) and every non-goalkeeper in order.
    """
    goalkeeper = next((player for player in players if player.is_goalkeeper), None)
    field_players = [player for player in players if not player.is_goalkeeper]
    return goalkeeper, field_players


def place(target_id: str, x: float, y: float) -> Move:
    """Build a move whose destination is clamped to the field.

    Parameters
    ----------
    target_id : str
        Entity to move.
    x : float
        Raw horizontal destination.
    y : float
        Raw vertical destination.

    Returns
    -------
    Move
        Move without an explanation; the registry attaches one.
    """
    return Move(target_id, clamp_position(x, y))


def normalize_structure(name: str) -> str:
    """Normalise a structure name so ``"Back-4"`` and ``"back 4"`` match ``back_4``.

    Parameters
    ----------
    name : str
        Raw structure name.

    Returns
    -------
    str
        Lower-case name with dashes and whitespace replaced by underscores.
    """
    return re.sub(r"[-\s]", "_", name.strip().lower())


def oriented_moves(placements: Sequence[Placement], team: str) -> List[Move]:
    """Convert red-oriented placements into clamped moves for ``team``.

    Parameters
    ----------
    placements : Sequence[Placement]
        Player and position pairs authored for the red team.
    team : str
        Team taking the structure; blue placements are mirrored.

    Returns
    -------
    List[Move]
        Moves in placement order.
    """
    moves = []
    for player, position in placements:
        target = orient(position, team)
        moves.append(place(player.id, target.x, target.y))
    return moves


def goal_line(goal: Optional[float], default: float) -> float:
    """Return the goal line a set piece is played at.

    Parameters
    ----------
    goal : Optional[float]
        Caller override, which must be one of the two goal lines.
    default : float
        Goal line used when no override is given.

    Returns
    -------
    float
        ``0`` or ``100``.

    Raises
    ------
    ResolutionError
        When the override is not a goal line.
    """
    if goal is None:
        return default
    cfg = ENGINE_CONFIG.field
    if goal not in (cfg.min_coord, cfg.max_coord):
        raise ResolutionError(f"Goal override must be {cfg.min_coord:g} or {cfg.max_coord:g}, got {goal}")
    return float(goal)


def find_player(board: BoardState, player_id: str) -> Player:
    """Return the player called ``player_id``.

    Parameters
    ----------
    board : BoardState
        Snapshot to search.
    player_id : str
        Identifier requested by the caller.

    Returns
    -------
    Player
        The matching player.

    Raises
    ------
    ResolutionError
        When no player carries that identifier.
    """
    entity = board.find_entity(player_id)
    if not isinstance(entity, Player):
        raise ResolutionError(f"Target not found: {player_id}")
    return entity


def keeper_placement(goalkeeper: Optional[Player]) -> List[Placement]:
    """Return the goalkeeper placement shared by phase structures.

    Parameters
    ----------
    goalkeeper : Optional[Player]
        Team goalkeeper, if any.

    Returns
    -------
    List[Placement]
        Zero or one red-oriented placement in front of the goal.
    """
    if goalkeeper is None:
        return []
    return [(goalkeeper, Position(ENGINE_CONFIG.phase.goalkeeper_x, ENGINE_CONFIG.field.goal_center_y))]


def diagonal_spread(players: Sequence[Player], x0: float, x_step: float, y0: float, y_step: float) -> List[Placement]:
    """Distribute players along a straight diagonal.

    Parameters
    ----------
    players : Sequence[Player]
        Players to place in order.
    x0 : float
        X coordinate of the first player.
    x_step : float
        X increment per player.
    y0 : float
        Y coordinate of the first player.
    y_step : float
        Y increment per player.

    Returns
    -------
    List[Placement]
        One placement per player.
    """
    return [(player, Position(x0 + i * x_step, y0 + i * y_step)) for i, player in enumerate(players)]
