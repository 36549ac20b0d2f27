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
"""Named eleven-a-side formations."""
from __future__ import annotations

from typing import Dict, List, Tuple

from backline.engine.geometry import Position
from backline.engine.validation import ResolutionError
from backline.models.entities import Move, Player

from .base import oriented_moves

# Slot 0 is the goalkeeper; the rest run defence to attack, top to bottom.
FORMATIONS: Dict[str, Tuple[Position, ...]] = {
    "4-3-3": (
        Position(5, 50),
        Position(18, 15), Position(18, 35), Position(18, 65), Position(18, 85),
        Position(35, 25), Position(35, 50), Position(35, 75),
        Position(52, 15), Position(52, 50), Position(52, 85),
    ),
    "4-4-2": (
        Position(5, 50),
        Position(18, 15), Position(18, 35), Position(18, 65), Position(18, 85),
        Position(35, 20), Position(35, 40), Position(35, 60), Position(35, 80),
        Position(52, 30), Position(52, 70),
    ),
    "3-5-2": (
        Position(5, 50),
        Position(18, 25), Position(18, 50), Position(18, 75),
        Position(35, 15), Position(35, 35), Position(35, 50), Position(35, 65), Position(35, 85),
        Position(52, 30), Position(52, 70),
    ),
    "3-4-3": (
        Position(5, 50),
        Position(18, 25), Position(18, 50), Position(18, 75),
        Position(35, 20), Position(35, 40), Position(35, 60), Position(35, 80),
        Position(52, 15), Position(52, 50), Position(52, 85),
    ),
    "5-3-2": (
        Position(5, 50),
        Position(18, 10), Position(18, 25), Position(18, 50), Position(18, 75), Position(18, 90),
        Position(35, 35), Position(35, 50), Position(35, 65),
        Position(52, 30), Position(52, 70),
    ),
}


def get_formation(name: str) -> Tuple[Position, ...]:
    """Return the red-oriented slots of formation ``name``.

    Parameters
    ----------
    name : str
        Formation name; case and whitespace are ignored.

    Returns
    -------
    Tuple[Position, ...]
        Goalkeeper slot followed by ten field slots.

    Raises
    ------
    ResolutionError
        When the formation is unknown.
    """
    key = "".join(name.split()).lower()
    try:
        return FORMATIONS[key]
    except KeyError as exc:
        raise ResolutionError(f"Unknown formation '{name}'. Known formations: {', '.join(FORMATIONS)}") from exc


def formation_moves(name: str, team: str, roster: List[Player]) -> List[Move]:
    """Line ``roster`` up in formation ``name``.

    The lowest-numbered goalkeeper takes the goalkeeper slot and field
    players fill the outfield slots by shirt number. Players beyond the
    eleventh slot stay where they are.

    Parameters
    ----------
    name : str
        Formation name.
    team : str
        Team lining up; blue formations are mirrored.
    roster : List[Player]
        Team roster.

    Returns
    -------
    List[Move]
        Clamped moves, goalkeeper first.
    """
    slots = get_formation(name)
    ordered = sorted(roster, key=lambda player: player.number)
    keepers = [player for player in ordered if player.is_goalkeeper]
    field_players = [player for player in ordered if not player.is_goalkeeper]
    placements = [(keepers[0], slots[0])] if keepers else []
    placements += list(zip(field_players, slots[1:]))
    return oriented_moves(placements, team)
