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
"""Utilities that synthesise rosters and boards for demos and tests."""
import random
from typing import List, Optional

from backline.engine.geometry import Position
from backline.engine.session import ball_id, parking_position
from backline.engine.templates.formations import get_formation
from backline.engine.transforms import orient
from backline.models.entities import Ball, BoardMode, BoardState, Player

TEAM_PREFIX = {"red": "R", "blue": "B"}


def create_team(
    team: str,
    size: int = 11,
    formation: str = "4-3-3",
    goalkeepers: int = 1,
) -> List[Player]:
    """Create a roster lined up in ``formation`` on ``team``'s half.

    Players are numbered from ``1`` and identified as ``R1``, ``B7`` and so
    on; the first ``goalkeepers`` numbers are keepers. Players without a
    formation slot start on the team's parking line.

    Parameters
    ----------
    team : str
        ``"red"`` or ``"blue"``.
    size : int, default=11
        Number of players.
    formation : str, default="4-3-3"
        Formation used for starting positions.
    goalkeepers : int, default=1
        How many of the first numbers are goalkeepers.

    Returns
    -------
    List[Player]
        Roster ordered by number.

    Raises
    ------
    ValueError
        If the team is unknown or a count is negative.
    """
    if team not in TEAM_PREFIX:
        raise ValueError(f"Unknown team '{team}'")
    if size < 0 or goalkeepers < 0:
        raise ValueError("size and goalkeepers must be non-negative")

    slots = get_formation(formation)
    keeper_slots = [slots[0]]
    field_slots = list(slots[1:])
    players: List[Player] = []
    spare = 0
    for number in range(1, size + 1):
        is_goalkeeper = number <= goalkeepers
        pool = keeper_slots if is_goalkeeper else field_slots
        if pool:
            position = orient(pool.pop(0), team)
        else:
            position = parking_position(team, spare)
            spare += 1
        players.append(Player(f"{TEAM_PREFIX[team]}{number}", team, number, position, is_goalkeeper))
    return players


def create_board(
    red_size: int = 11,
    blue_size: int = 11,
    formation: str = "4-3-3",
    balls: int = 1,
    mode: BoardMode = "game",
) -> BoardState:
    """Create a board with two lined-up teams and balls on the centre spot.

    Parameters
    ----------
    red_size : int, default=11
        Red roster size.
    blue_size : int, default=11
        Blue roster size.
    formation : str, default="4-3-3"
        Formation for both teams.
    balls : int, default=1
        Number of balls; extra balls are named ``ball_2``, ``ball_3`` and so on.
    mode : BoardMode, default="game"
        Board mode.

    Returns
    -------
    BoardState
        Fresh board snapshot.
    """
    center = Position(50.0, 50.0)
    ball_items = [Ball(ball_id(index), center) for index in range(balls)]
    return BoardState(
        red_team=create_team("red", red_size, formation),
        blue_team=create_team("blue", blue_size, formation),
        balls=ball_items,
        mode=mode,
    )


def generate_random_board(
    red_size: int = 11,
    blue_size: int = 11,
    seed: Optional[int] = None,
) -> BoardState:
    """Create a board with every player scattered at random.

    Parameters
    ----------
    red_size : int, default=11
        Red roster size.
    blue_size : int, default=11
        Blue roster size.
    seed : Optional[int]
        Seed for reproducible layouts.

    Returns
    -------
    BoardState
        Board whose players sit anywhere on the field.
    """
    rng = random.Random(seed)

    def scatter(team: str, size: int) -> List[Player]:
        prefix = TEAM_PREFIX[team]
        return [
            Player(f"{prefix}{n}", team, n, Position(rng.uniform(0, 100), rng.uniform(0, 100)), n == 1)
            for n in range(1, size + 1)
        ]

    return BoardState(
        red_team=scatter("red", red_size),
        blue_team=scatter("blue", blue_size),
        balls=[Ball("ball", Position(50.0, 50.0))],
    )
