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
"""Board entities and the immutable snapshot every calculator reads from."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Literal, Optional, Set, Tuple, Union

from backline.engine.geometry import Position

TeamName = Literal["red", "blue"]
EquipmentType = Literal["cone", "mini_goal", "coach"]
BoardMode = Literal["game", "training"]

TEAM_NAMES: Tuple[str, ...] = ("red", "blue")


@dataclass(frozen=True)
class Player:
    """A player marker on the board.

    Parameters
    ----------
    id : str
        Unique identifier such as ``"R7"`` or ``"B1"``.
    team : TeamName
        Owning team.
    number : int
        Shirt number; replay and formations order players by it.
    position : Position
        Current location.
    is_goalkeeper : bool, default=False
        Whether the player is a goalkeeper.
    """

    id: str
    team: TeamName
    number: int
    position: Position
    is_goalkeeper: bool = False

    def __post_init__(self) -> None:
        """Reject players that belong to no known team."""
        if self.team not in TEAM_NAMES:
            raise ValueError(f"Unknown team '{self.team}' for player {self.id}")


@dataclass(frozen=True)
class Ball:
    """A ball marker; extra balls are named ``ball_2``, ``ball_3`` and so on.

    Parameters
    ----------
    id : str
        Ball identifier.
    position : Position
        Current location.
    """

    id: str
    position: Position


@dataclass(frozen=True)
class Equipment:
    """Training equipment placed on the board.

    Parameters
    ----------
    id : str
        Equipment identifier.
    type : EquipmentType
        ``"cone"``, ``"mini_goal"`` or ``"coach"``.
    position : Position
        Location of the item.
    color : Optional[str], default=None
        Display colour hint.
    rotation : Optional[float], default=None
        Rotation in degrees.
    """

    id: str
    type: EquipmentType
    position: Position
    color: Optional[str] = None
    rotation: Optional[float] = None


Entity = Union[Player, Ball, Equipment]


@dataclass(frozen=True)
class Move:
    """A requested relocation of one entity.

    Moves are proposals; the caller decides whether and how to apply them.

    Parameters
    ----------
    target_id : str
        Identifier of the entity to move.
    new_position : Position
        Destination.
    explanation : Optional[str], default=None
        Short human-readable reason for the move.
    """

    target_id: str
    new_position: Position
    explanation: Optional[str] = None

    def with_position(self, position: Position) -> "Move":
        """Return a copy of the move pointing at ``position``.

        Parameters
        ----------
        position : Position
            Replacement destination.

        Returns
        -------
        Move
            New move with the same target and explanation.
        """
        return replace(self, new_position=position)

    def with_explanation(self, explanation: str) -> "Move":
        """Return a copy of the move carrying ``explanation``.

        Parameters
        ----------
        explanation : str
            Replacement explanation.

        Returns
        -------
        Move
            New move with the same target and destination.
        """
        return replace(self, explanation=explanation)

    def is_ball_move(self) -> bool:
        """Return whether the move targets a ball.

        Returns
        -------
        bool
            ``True`` for ``ball`` and numbered balls.
        """
        return self.target_id.startswith("ball")


@dataclass(frozen=True)
class BoardState:
    """Read-only snapshot of everything currently on the board.

    Sequences passed in are frozen into tuples so calculators can share the
    snapshot without copying it.

    Parameters
    ----------
    red_team : Tuple[Player, ...], default=()
        Red players in roster order.
    blue_team : Tuple[Player, ...], default=()
        Blue players in roster order.
    balls : Tuple[Ball, ...], default=()
        Balls on the board.
    equipment : Tuple[Equipment, ...], default=()
        Equipment already placed.
    mode : BoardMode, default="game"
        ``"game"`` or ``"training"``.
    """

    red_team: Tuple[Player, ...] = ()
    blue_team: Tuple[Player, ...] = ()
    balls: Tuple[Ball, ...] = ()
    equipment: Tuple[Equipment, ...] = ()
    mode: BoardMode = "game"
    _index: Dict[str, Entity] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Freeze the collections and build the identifier index."""
        object.__setattr__(self, "red_team", tuple(self.red_team))
        object.__setattr__(self, "blue_team", tuple(self.blue_team))
        object.__setattr__(self, "balls", tuple(self.balls))
        object.__setattr__(self, "equipment", tuple(self.equipment))
        for team_name, players in (("red", self.red_team), ("blue", self.blue_team)):
            for player in players:
                if player.team != team_name:
                    raise ValueError(f"Player {player.id} is listed under {team_name} but belongs to {player.team}")
        index: Dict[str, Entity] = {}
        for entity in (*self.red_team, *self.blue_team, *self.balls, *self.equipment):
            if entity.id in index:
                raise ValueError(f"Duplicate entity id '{entity.id}' on the board")
            index[entity.id] = entity
        object.__setattr__(self, "_index", index)

    def team(self, name: str) -> Tuple[Player, ...]:
        """Return the roster of team ``name``.

        Parameters
        ----------
        name : str
            ``"red"`` or ``"blue"``.

        Returns
        -------
        Tuple[Player, ...]
            Players in roster order.
        """
        if name == "red":
            return self.red_team
        if name == "blue":
            return self.blue_team
        raise ValueError(f"Unknown team '{name}'. Known teams: {', '.join(TEAM_NAMES)}")

    def all_players(self) -> Tuple[Player, ...]:
        """Return every player, red first.

        Returns
        -------
        Tuple[Player, ...]
            Red roster followed by the blue roster.
        """
        return self.red_team + self.blue_team

    def goalkeepers(self, team: str) -> List[Player]:
        """Return the goalkeepers of ``team`` in roster order.

        Parameters
        ----------
        team : str
            Team to inspect.

        Returns
        -------
        List[Player]
            Goalkeepers, possibly empty.
        """
        return [player for player in self.team(team) if player.is_goalkeeper]

    def field_players(self, team: str) -> List[Player]:
        """Return the non-goalkeepers of ``team`` in roster order.

        Parameters
        ----------
        team : str
            Team to inspect.

        Returns
        -------
        List[Player]
            Field players, possibly empty.
        """
        return [player for player in self.team(team) if not player.is_goalkeeper]

    def find_entity(self, entity_id: str) -> Optional[Entity]:
        """Look up any entity by identifier.

        Parameters
        ----------
        entity_id : str
            Identifier to search for.

        Returns
        -------
        Optional[Entity]
            The matching player, ball or equipment, or ``None``.
        """
        return self._index.get(entity_id)

    def entity_ids(self) -> Set[str]:
        """Return the identifiers of every entity on the board.

        Returns
        -------
        Set[str]
            Player, ball and equipment identifiers.
        """
        return set(self._index)
