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
"""Pressing structures and the shared intensity adjustment.

Structures are authored for the red team pressing towards ``x = 100``. The
intensity shift is applied after the structure, in red's orientation, so a
given intensity moves every press the same distance up-field.
"""
from __future__ import annotations

import math
from typing import Dict, List, Optional

from backline.engine.config import ENGINE_CONFIG
from backline.engine.geometry import Position
from backline.engine.validation import ResolutionError
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


def full_court(goalkeeper: Optional[Player], players: List[Player]) -> List[Placement]:
    """Match up man to man high in the opponent's 23m area.

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
    return keeper_placement(goalkeeper) + diagonal_spread(players, 80, 0, 10, 8)


def half_court(goalkeeper: Optional[Player], players: List[Player]) -> List[Placement]:
    """Drop into three zonal lines inside the team's own half.

    Parameters
    ----------
    goalkeeper : Optional[Player]
        Team goalkeeper.
    players : List[Player]
        Field players in roster order.

    Returns
    -------
    List[Placement]
        Red-oriented placements; forward, midfield and defensive lines at
        ``x = 45``, ``35`` and ``25``.
    """
    placements = keeper_placement(goalkeeper)
    if not players:
        return placements
    per_line = math.ceil(len(players) / 3)
    lines = (45.0, 35.0, 25.0)
    gap = 70 / max(per_line - 1, 1)
    for i, player in enumerate(players):
        line, slot = divmod(i, per_line)
        placements.append((player, Position(lines[min(line, 2)], 15 + slot * gap)))
    return placements


def w_press(goalkeeper: Optional[Player], players: List[Player]) -> List[Placement]:
    """Form a W with the forwards and inner midfielders.

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
    remaining = list(players)
    if remaining:
        placements.append((remaining.pop(0), Position(60, 50)))
    if len(remaining) >= 2:
        placements += [(remaining.pop(0), Position(60, 20)), (remaining.pop(0), Position(60, 80))]
    if len(remaining) >= 2:
        placements += [(remaining.pop(0), Position(50, 35)), (remaining.pop(0), Position(50, 65))]
    return placements + diagonal_spread(remaining, 40, -3, 20, 15)


def split_vision(goalkeeper: Optional[Player], players: List[Player]) -> List[Placement]:
    """Press high on the left (top) half while the rest drop on the right.

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
    half = math.ceil(len(players) / 2)
    return (
        keeper_placement(goalkeeper)
        + diagonal_spread(players[:half], 55, 0, 20, 10)
        + diagonal_spread(players[half:], 35, 0, 60, 10)
    )


PRESS_STRUCTURES: Dict[str, StructureLayout] = {
    "full_court": full_court,
    "half_court": half_court,
    "w_press": w_press,
    "split_vision": split_vision,
}


def press_layout(structure: Optional[str]) -> StructureLayout:
    """Return the layout for ``structure``, falling back to ``half_court``.

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
    return PRESS_STRUCTURES.get(key, PRESS_STRUCTURES[ENGINE_CONFIG.phase.press_fallback])


def apply_intensity(placements: List[Placement], intensity: Optional[float]) -> List[Placement]:
    """Shift every field player up-field in proportion to ``intensity``.

    Parameters
    ----------
    placements : List[Placement]
        Red-oriented placements from a press structure.
    intensity : Optional[float]
        Press height in ``[0, 100]``; ``None`` leaves the structure as is.

    Returns
    -------
    List[Placement]
        Adjusted placements; goalkeepers never move.

    Raises
    ------
    ResolutionError
        When ``intensity`` falls outside ``[0, 100]``.
    """
    if intensity is None:
        return placements
    if not math.isfinite(intensity) or not 0 <= intensity <= 100:
        raise ResolutionError(f"Press intensity must be between 0 and 100, got {intensity}")
    shift = intensity / 100 * ENGINE_CONFIG.phase.press_intensity_push
    return [
        (player, position if player.is_goalkeeper else Position(position.x + shift, position.y))
        for player, position in placements
    ]


def press_moves(
    structure: Optional[str],
    team: str,
    roster: List[Player],
    intensity: Optional[float] = None,
) -> List[Move]:
    """Lay out a press for ``team``.

    Parameters
    ----------
    structure : Optional[str]
        Structure name.
    team : str
        Pressing team; blue layouts are mirrored after the intensity shift.
    roster : List[Player]
        Team roster in order.
    intensity : Optional[float]
        Press height in ``[0, 100]``.

    Returns
    -------
    List[Move]
        Clamped moves, goalkeeper first.
    """
    goalkeeper, players = split_roster(roster)
    placements = press_layout(structure)(goalkeeper, players)
    return oriented_moves(apply_intensity(placements, intensity), team)
