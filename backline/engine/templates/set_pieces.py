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
"""Penalty corner and shootout layouts.

Attacking corners group the field players into an injector on the backline,
one or two batteries (a stopper on the shooting-circle arc with a hitter just
behind) and a troop spread around the arc. Defensive corners send runners to
the goal line and everyone else to the halfway line. Both calculators work for
either goal so the same code serves red and blue.
"""
from __future__ import annotations

from typing import List, Sequence

from backline.engine.config import ENGINE_CONFIG
from backline.engine.geometry import d_arc_x, goal_x_for, opponent_of, toward_field
from backline.engine.validation import ResolutionError
from backline.models.entities import BoardState, Move, Player
from backline.models.requests import TemplateParameters, TemplateRequest

from .base import find_player, goal_line, place, split_roster


def _battery_slots(parameters: TemplateParameters) -> List[float]:
    """Return the y coordinates of the requested batteries.

    Parameters
    ----------
    parameters : TemplateParameters
        Supplies ``batteries`` and ``battery1_type``.

    Returns
    -------
    List[float]
        Zero, one or two battery heights; the second battery takes the slot
        the first one did not use.

    Raises
    ------
    ResolutionError
        When the first battery type is unknown.
    """
    slots = ENGINE_CONFIG.set_piece.battery_slots
    try:
        first = slots[parameters.battery1_type]
    except KeyError as exc:
        known = ", ".join(sorted(slots))
        raise ResolutionError(
            f"Unknown battery type '{parameters.battery1_type}'. Known types: {known}"
        ) from exc
    second = slots["right"] if first == slots["top"] else slots["top"]
    count = max(0, min(2, parameters.batteries))
    return [first, second][:count]


def _injector_y(side: str) -> float:
    """Return the injector height, ten units outside the post on ``side``.

    Parameters
    ----------
    side : str
        ``"left"`` pushes from above the goal (smaller ``y``), anything else
        from below.

    Returns
    -------
    float
        Injector y coordinate.
    """
    field = ENGINE_CONFIG.field
    offset = field.goal_half_width + ENGINE_CONFIG.set_piece.injector_post_offset
    if side == "left":
        return field.goal_center_y - offset
    return field.goal_center_y + offset


def attacking_corner_moves(
    roster: Sequence[Player],
    parameters: TemplateParameters,
    goal_x: float,
) -> List[Move]:
    """Lay out an attacking penalty corner against the goal at ``goal_x``.

    Parameters
    ----------
    roster : Sequence[Player]
        Attacking team in roster order.
    parameters : TemplateParameters
        Battery, injector and side settings.
    goal_x : float
        Goal line being attacked.

    Returns
    -------
    List[Move]
        Goalkeeper, injector, batteries and troop, in that order.
    """
    field = ENGINE_CONFIG.field
    cfg = ENGINE_CONFIG.set_piece
    goalkeeper, field_players = split_roster(roster)
    available = list(field_players)
    moves: List[Move] = []
    # Field coordinates grow away from the red goal, so "back" flips with the goal.
    backwards = 1.0 if goal_x < field.halfway_x else -1.0

    if goalkeeper is not None:
        home_goal = field.max_coord - goal_x
        moves.append(place(goalkeeper.id, toward_field(home_goal, cfg.goalkeeper_depth), field.goal_center_y))

    if available:
        index = 0
        if parameters.injector_id is not None:
            index = next((i for i, p in enumerate(available) if p.id == parameters.injector_id), 0)
        injector = available.pop(index)
        injector_x = toward_field(goal_x, cfg.injector_backline_inset)
        moves.append(place(injector.id, injector_x, _injector_y(parameters.injector_side)))

    battery_ys: List[float] = []
    for battery_y in _battery_slots(parameters):
        if len(available) < 2:
            break
        stopper = available.pop(0)
        hitter = available.pop(0)
        arc_x = d_arc_x(goal_x, battery_y)
        moves.append(place(stopper.id, arc_x, battery_y))
        moves.append(place(hitter.id, arc_x + backwards * cfg.hitter_offset, battery_y))
        battery_ys.append(battery_y)

    troop_ys = [
        y for y in cfg.troop_preferred_y
        if all(abs(y - battery_y) >= cfg.battery_clearance for battery_y in battery_ys)
    ] or list(cfg.troop_preferred_y)
    for i, player in enumerate(available):
        base_y = troop_ys[i % len(troop_ys)]
        jitter = (i // len(troop_ys)) * cfg.troop_jitter
        y = base_y + (jitter if i % 2 == 0 else -jitter)
        moves.append(place(player.id, d_arc_x(goal_x, y), y))

    return moves


def _runner_slot(index: int, goal_x: float) -> tuple[float, float]:
    """Return the ``index``-th runner position for the goal at ``goal_x``.

    The first runners take the fixed goal-line slots; extra runners queue on
    alternating sides of the goal a few units off the line.

    Parameters
    ----------
    index : int
        Zero-based runner number.
    goal_x : float
        Goal line being defended.

    Returns
    -------
    tuple[float, float]
        Runner coordinates.
    """
    cfg = ENGINE_CONFIG.set_piece
    if index < len(cfg.runner_slots):
        return goal_x, cfg.runner_slots[index]
    extra = index - len(cfg.runner_slots)
    step = (extra // 2 + 1) * cfg.extra_runner_depth
    y = ENGINE_CONFIG.field.goal_center_y + (-step if extra % 2 == 0 else step)
    return toward_field(goal_x, cfg.extra_runner_depth), y


def defensive_corner_moves(
    roster: Sequence[Player],
    parameters: TemplateParameters,
    goal_x: float,
) -> List[Move]:
    """Lay out a defensive penalty corner at the goal on ``goal_x``.

    Parameters
    ----------
    roster : Sequence[Player]
        Defending team in roster order.
    parameters : TemplateParameters
        Supplies ``runner_count``.
    goal_x : float
        Goal line being defended.

    Returns
    -------
    List[Move]
        Goalkeeper, runners and halfway-line defenders, in that order.
    """
    field = ENGINE_CONFIG.field
    cfg = ENGINE_CONFIG.set_piece
    goalkeeper, field_players = split_roster(roster)
    moves: List[Move] = []

    if goalkeeper is not None:
        moves.append(place(goalkeeper.id, goal_x, field.goal_center_y))

    runner_count = cfg.default_runner_count if parameters.runner_count is None else max(0, parameters.runner_count)
    runners = field_players[:runner_count]
    for index, runner in enumerate(runners):
        x, y = _runner_slot(index, goal_x)
        moves.append(place(runner.id, x, y))

    for i, player in enumerate(field_players[runner_count:]):
        moves.append(place(player.id, field.halfway_x, cfg.halfway_start_y + i * cfg.halfway_step_y))

    return moves


def calculate_apc(request: TemplateRequest, board: BoardState) -> List[Move]:
    """Resolve an attacking penalty corner for the acting team.

    Parameters
    ----------
    request : TemplateRequest
        ``team`` is the attacking side; ``parameters.goal`` may pick the goal.
    board : BoardState
        Current snapshot.

    Returns
    -------
    List[Move]
        Attacking moves, followed by a default defence for the other team
        unless ``include_opponents`` is off.
    """
    parameters = request.parameters
    defenders = opponent_of(request.team)
    goal_x = goal_line(parameters.goal, goal_x_for(defenders))
    moves = attacking_corner_moves(board.team(request.team), parameters, goal_x)
    if parameters.include_opponents:
        moves.extend(defensive_corner_moves(board.team(defenders), TemplateParameters(), goal_x))
    return moves


def calculate_dpc(request: TemplateRequest, board: BoardState) -> List[Move]:
    """Resolve a defensive penalty corner for the acting team.

    Parameters
    ----------
    request : TemplateRequest
        ``team`` is the defending side; ``parameters.goal`` may pick the goal.
    board : BoardState
        Current snapshot.

    Returns
    -------
    List[Move]
        Defensive moves, followed by a default single-battery attack for the
        other team unless ``include_opponents`` is off.
    """
    parameters = request.parameters
    goal_x = goal_line(parameters.goal, goal_x_for(request.team))
    moves = defensive_corner_moves(board.team(request.team), parameters, goal_x)
    if parameters.include_opponents:
        moves.extend(attacking_corner_moves(board.team(opponent_of(request.team)), TemplateParameters(), goal_x))
    return moves


def calculate_shootout(request: TemplateRequest, board: BoardState) -> List[Move]:
    """Isolate one attacker against one goalkeeper.

    The attacker starts on the 23m line facing the attacked goal, the
    goalkeeper stands on that goal line and every other player is stacked
    behind the centre line in columns.

    Parameters
    ----------
    request : TemplateRequest
        ``team`` attacks unless ``attacker_id`` names a player of the other
        team; ``gk_id`` and ``goal`` are optional.
    board : BoardState
        Current snapshot.

    Returns
    -------
    List[Move]
        Attacker, goalkeeper, then everyone else.

    Raises
    ------
    ResolutionError
        When a requested attacker or goalkeeper does not exist, or both are
        the same player.
    """
    field = ENGINE_CONFIG.field
    cfg = ENGINE_CONFIG.set_piece
    parameters = request.parameters

    if parameters.attacker_id is not None:
        attacker = find_player(board, parameters.attacker_id)
    else:
        attacker = next(iter(board.field_players(request.team)), None)
    attacking_team = attacker.team if attacker is not None else request.team
    defending_team = opponent_of(attacking_team)
    goal_x = goal_line(parameters.goal, goal_x_for(defending_team))

    if parameters.gk_id is not None:
        goalkeeper = find_player(board, parameters.gk_id)
    else:
        candidates = board.goalkeepers(defending_team) or [
            player for player in board.all_players() if player.is_goalkeeper and player is not attacker
        ]
        goalkeeper = candidates[0] if candidates else None
    if attacker is not None and goalkeeper is not None and attacker.id == goalkeeper.id:
        raise ResolutionError(f"Shootout attacker and goalkeeper must differ: {attacker.id}")

    moves: List[Move] = []
    if attacker is not None:
        line_x = field.right_23m_x if goal_x > field.halfway_x else field.left_23m_x
        moves.append(place(attacker.id, line_x, field.goal_center_y))
    if goalkeeper is not None:
        moves.append(place(goalkeeper.id, goal_x, field.goal_center_y))

    active = {player.id for player in (attacker, goalkeeper) if player is not None}
    away = -1.0 if goal_x > field.halfway_x else 1.0
    idle = [player for player in board.all_players() if player.id not in active]
    for i, player in enumerate(idle):
        column, row = divmod(i, cfg.shootout_column_size)
        x = field.halfway_x + away * column * cfg.shootout_step
        moves.append(place(player.id, x, cfg.shootout_start_y + row * cfg.shootout_step))

    return moves
