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
"""Outlet structures used to play out from the back.

Every structure is written for the red team defending ``x = 0`` and returns
red-oriented placements; the dispatcher mirrors them for blue. Short rosters
fall back to a simple diagonal spread instead of a half-filled shape.
"""
from __future__ import annotations

from typing import Dict, List, Optional

from backline.engine.config import ENGINE_CONFIG
from backline.engine.geometry import Position
from backline.models.entities import Move, Player

from .base import (
    Placement,
    StructureLayout,
    diagonal_spread,
    keeper_placement,
    normalize_structure,
    oriented_moves,
    split_roster,
)


def back_4(goalkeeper: Optional[Player], players: List[Player]) -> List[Placement]:
    """Split centre backs deep with fullbacks wide and higher (the dish).

    Parameters
    ----------
    goalkeeper : Optional[Player]
        Team goalkeeper.
    players : List[Player]
        Field players in roster order.

    Returns
    -------
    List[Placement]
        Red-oriented placements.
    """
    placements = keeper_placement(goalkeeper)
    if len(players) < 4:
        return placements + diagonal_spread(players, 10, 5, 20, 20)
    placements += [
        (players[0], Position(10, 35)),
        (players[1], Position(10, 65)),
        (players[2], Position(25, 5)),
        (players[3], Position(25, 95)),
    ]
    return placements + diagonal_spread(players[4:], 35, 3, 20, 15)


def back_3(goalkeeper: Optional[Player], players: List[Player]) -> List[Placement]:
    """Push the central back high with two deep, wide side backs (the cup).

    Parameters
    ----------
    goalkeeper : Optional[Player]
        Team goalkeeper.
    players : List[Player]
        Field players in roster order.

    Returns
    -------
    List[Placement]
        Red-oriented placements.
    """
    placements = keeper_placement(goalkeeper)
    if len(players) < 3:
        return placements + diagonal_spread(players, 10, 5, 30, 20)
    placements += [
        (players[0], Position(20, 50)),
        (players[1], Position(10, 20)),
        (players[2], Position(10, 80)),
    ]
    return placements + diagonal_spread(players[3:], 35, 3, 20, 15)


def three_high(goalkeeper: Optional[Player], players: List[Player]) -> List[Placement]:
    """Keep a single deep centre back and send both side backs very high.

    Parameters
    ----------
    goalkeeper : Optional[Player]
        Team goalkeeper.
    players : List[Player]
        Field players in roster order.

    Returns
    -------
    List[Placement]
        Red-oriented placements.
    """
    placements = keeper_placement(goalkeeper)
    if len(players) < 3:
        return placements + diagonal_spread(players, 10, 15, 30, 20)
    placements += [
        (players[0], Position(10, 50)),
        (players[1], Position(40, 25)),
        (players[2], Position(40, 75)),
    ]
    return placements + diagonal_spread(players[3:], 30, 3, 20, 15)


def asymmetric_right(goalkeeper: Optional[Player], players: List[Player]) -> List[Placement]:
    """Overload the right (bottom) side of the field.

    Parameters
    ----------
    goalkeeper : Optional[Player]
        Team goalkeeper.
    players : List[Player]
        Field players in roster order.

    Returns
    -------
    List[Placement]
        Red-oriented placements.
    """
    staggered = [(player, Position(10 + (i % 3) * 8, 40 + i * 8)) for i, player in enumerate(players)]
    return keeper_placement(goalkeeper) + staggered


def asymmetric_left(goalkeeper: Optional[Player], players: List[Player]) -> List[Placement]:
    """Overload the left (top) side of the field.

    Parameters
    ----------
    goalkeeper : Optional[Player]
        Team goalkeeper.
    players : List[Player]
        Field players in roster order.

    Returns
    -------
    List[Placement]
        Red-oriented placements.
    """
    staggered = [(player, Position(10 + (i % 3) * 8, 60 - i * 8)) for i, player in enumerate(players)]
    return keeper_placement(goalkeeper) + staggered


OUTLET_STRUCTURES: Dict[str, StructureLayout] = {
    "back_4": back_4,
    "back_3": back_3,
    "three_high": three_high,
    "asymmetric_right": asymmetric_right,
    "asymmetric_left": asymmetric_left,
}


def outlet_layout(structure: Optional[str]) -> StructureLayout:
    """Return the layout for ``structure``, falling back to ``back_4``.

    Parameters
    ----------
    structure : Optional[str]
        Raw structure name; ``None`` selects the fallback.

    Returns
    -------
    StructureLayout
        Layout function.
    """
    key = normalize_structure(structure or "")
    return OUTLET_STRUCTURES.get(key, OUTLET_STRUCTURES[ENGINE_CONFIG.phase.outlet_fallback])


def outlet_moves(structure: Optional[str], team: str, roster: List[Player]) -> List[Move]:
    """Lay out an outlet structure for ``team``.

    Parameters
    ----------
    structure : Optional[str]
        Structure name.
    team : str
        Team playing out; blue layouts are mirrored.
    roster : List[Player]
        Team roster in order.

    Returns
    -------
    List[Move]
        Clamped moves, goalkeeper first.
    """
    goalkeeper, players = split_roster(roster)
    return oriented_moves(outlet_layout(structure)(goalkeeper, players), team)
