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
"""Saved tactics stored as role-relative positions."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Literal, Optional, Sequence, Tuple

TacticType = Literal["single_team", "full_scenario"]
TacticRole = Literal["GK", "Player"]
TacticPhase = Literal["attack", "defense"]


@dataclass(frozen=True)
class RelativePosition:
    """A saved location keyed by team, role and ordinal rather than entity id.

    Parameters
    ----------
    team : str
        ``"red"`` or ``"blue"``.
    role : TacticRole
        ``"GK"`` binds to the team's goalkeeper, ``"Player"`` to a field player.
    relative_index : int
        Ordinal among the team's goalkeepers or field players sorted by number.
    x : float
        Saved horizontal coordinate.
    y : float
        Saved vertical coordinate.
    """

    team: str
    role: TacticRole
    relative_index: int
    x: float
    y: float


@dataclass(frozen=True)
class TacticMetadata:
    """Matching hints derived from a tactic's name and tags.

    Parameters
    ----------
    primary_team : Optional[str], default=None
        Team the tactic was authored for.
    phase : Optional[TacticPhase], default=None
        ``"attack"`` or ``"defense"``.
    is_apc : bool, default=False
        Attacking penalty corner.
    is_dpc : bool, default=False
        Defensive penalty corner.
    is_outlet : bool, default=False
        Outlet structure.
    is_press : bool, default=False
        Press structure.
    structure : Optional[str], default=None
        Normalised structure name such as ``"back_4"`` or ``"1-3"``.
    """

    primary_team: Optional[str] = None
    phase: Optional[TacticPhase] = None
    is_apc: bool = False
    is_dpc: bool = False
    is_outlet: bool = False
    is_press: bool = False
    structure: Optional[str] = None

    def is_empty(self) -> bool:
        """Return whether no hint was extracted.

        Returns
        -------
        bool
            ``True`` when every field still holds its default.
        """
        return self == TacticMetadata()


@dataclass(frozen=True)
class SavedTactic:
    """A named layout that can be replayed onto any roster.

    Parameters
    ----------
    id : str
        Tactic identifier.
    name : str
        Display name.
    tags : Tuple[str, ...]
        Free-form labels used for matching.
    type : TacticType
        ``"single_team"`` or ``"full_scenario"``.
    positions : Tuple[RelativePosition, ...]
        Saved relative positions.
    metadata : Optional[TacticMetadata], default=None
        Matching hints.
    """

    id: str
    name: str
    tags: Tuple[str, ...]
    type: TacticType
    positions: Tuple[RelativePosition, ...]
    metadata: Optional[TacticMetadata] = None

    def __post_init__(self) -> None:
        """Freeze the tag and position lists."""
        object.__setattr__(self, "tags", tuple(self.tags))
        object.__setattr__(self, "positions", tuple(self.positions))

    def with_positions(self, positions: Sequence[RelativePosition]) -> "SavedTactic":
        """Return a copy of the tactic holding ``positions``.

        Parameters
        ----------
        positions : Sequence[RelativePosition]
            Replacement positions.

        Returns
        -------
        SavedTactic
            New tactic sharing every other field.
        """
        return replace(self, positions=tuple(positions))

    def teams(self) -> Tuple[str, ...]:
        """Return the teams that have saved positions, in first-seen order.

        Returns
        -------
        Tuple[str, ...]
            Team names.
        """
        seen: Dict[str, None] = {}
        for position in self.positions:
            seen.setdefault(position.team, None)
        return tuple(seen)

    def summary(self) -> Dict[str, Any]:
        """Describe the tactic for a semantic matcher without its coordinates.

        Returns
        -------
        Dict[str, Any]
            Identifier, name, tags, type and metadata hints.
        """
        data: Dict[str, Any] = {"id": self.id, "name": self.name, "tags": list(self.tags), "type": self.type}
        if self.metadata is not None and not self.metadata.is_empty():
            meta = self.metadata
            data["metadata"] = {
                "primary_team": meta.primary_team,
                "phase": meta.phase,
                "is_apc": meta.is_apc,
                "is_dpc": meta.is_dpc,
                "is_outlet": meta.is_outlet,
                "is_press": meta.is_press,
                "structure": meta.structure,
            }
        return data
