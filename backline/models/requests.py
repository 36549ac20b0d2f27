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
"""Structured resolution requests accepted by the orchestrator."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional, Tuple, Union

from backline.engine.geometry import Position

from .entities import Move

ShapeType = Literal["circle", "line", "grid"]
TemplateKind = Literal["APC", "DPC", "shootout", "drill", "outlet", "press", "formation"]
DrillZone = Literal["attacking_25", "midfield", "defensive_circle", "full_field"]
ActivityTemplate = Literal["ron_do", "possession", "shuttle", "match_play", "technical", "small_sided_game"]
EntityKind = Literal["player", "gk", "cone", "mini_goal", "coach", "ball"]

TEMPLATE_KINDS: Tuple[str, ...] = ("APC", "DPC", "shootout", "drill", "outlet", "press", "formation")


@dataclass(frozen=True)
class ShapeRequest:
    """Arrange an ordered list of entities into a geometric shape.

    Parameters
    ----------
    type : ShapeType
        ``"circle"``, ``"line"`` or ``"grid"``.
    players : Tuple[str, ...]
        Entity identifiers in placement order.
    center : Optional[Position], default=None
        Circle or grid centre.
    radius : Optional[float], default=None
        Circle radius.
    start : Optional[Position], default=None
        First endpoint of a line.
    end : Optional[Position], default=None
        Second endpoint of a line.
    rows : Optional[int], default=None
        Grid row count.
    cols : Optional[int], default=None
        Grid column count.
    """

    type: ShapeType
    players: Tuple[str, ...]
    center: Optional[Position] = None
    radius: Optional[float] = None
    start: Optional[Position] = None
    end: Optional[Position] = None
    rows: Optional[int] = None
    cols: Optional[int] = None

    def __post_init__(self) -> None:
        """Freeze the player list."""
        object.__setattr__(self, "players", tuple(self.players))


@dataclass(frozen=True)
class MoveRequest:
    """Explicit moves supplied by the caller.

    Parameters
    ----------
    moves : Tuple[Move, ...]
        Moves to validate and separate.
    explanation : str, default=""
        Summary of the request.
    """

    moves: Tuple[Move, ...]
    explanation: str = ""

    def __post_init__(self) -> None:
        """Freeze the move list."""
        object.__setattr__(self, "moves", tuple(self.moves))


@dataclass(frozen=True)
class CompositeRequest:
    """Several shapes plus explicit moves resolved together.

    Parameters
    ----------
    shapes : Tuple[ShapeRequest, ...], default=()
        Shapes expanded in order.
    moves : Tuple[Move, ...], default=()
        Additional explicit moves appended after the shapes.
    explanation : str, default=""
        Summary of the request.
    """

    shapes: Tuple[ShapeRequest, ...] = ()
    moves: Tuple[Move, ...] = ()
    explanation: str = ""

    def __post_init__(self) -> None:
        """Freeze the shape and move lists."""
        object.__setattr__(self, "shapes", tuple(self.shapes))
        object.__setattr__(self, "moves", tuple(self.moves))


@dataclass(frozen=True)
class TemplateParameters:
    """Optional knobs shared by the tactical templates.

    Each template reads only the fields relevant to it.

    Parameters
    ----------
    batteries : int, default=1
        Penalty-corner batteries (1 or 2).
    battery1_type : str, default="top"
        Slot of the first battery, ``"top"`` or ``"right"``.
    injector_side : str, default="right"
        Side of the goal the injector pushes from.
    injector_id : Optional[str], default=None
        Player to use as injector.
    runner_count : Optional[int], default=None
        Defensive-corner runners; defaults to four.
    attacker_id : Optional[str], default=None
        Shootout taker.
    gk_id : Optional[str], default=None
        Shootout goalkeeper.
    attackers : int, default=0
        Field attackers per drill game.
    defenders : int, default=0
        Field defenders per drill game.
    with_gk : bool, default=False
        Whether goalkeepers join a drill.
    zone : str, default="full_field"
        Drill zone.
    game_count : int, default=1
        Number of simultaneous drill games.
    game_zones : Optional[Tuple[str, ...]], default=None
        Per-game zones; ignored unless one is given per game.
    intensity : Optional[float], default=None
        Press intensity in ``[0, 100]``.
    goal : Optional[float], default=None
        Goal line override (``0`` or ``100``) for set pieces.
    include_opponents : bool, default=True
        Whether penalty corners also set up the other team.
    """

    batteries: int = 1
    battery1_type: str = "top"
    injector_side: str = "right"
    injector_id: Optional[str] = None
    runner_count: Optional[int] = None
    attacker_id: Optional[str] = None
    gk_id: Optional[str] = None
    attackers: int = 0
    defenders: int = 0
    with_gk: bool = False
    zone: str = "full_field"
    game_count: int = 1
    game_zones: Optional[Tuple[str, ...]] = None
    intensity: Optional[float] = None
    goal: Optional[float] = None
    include_opponents: bool = True


@dataclass(frozen=True)
class TemplateRequest:
    """Apply a named tactical template for one team.

    Parameters
    ----------
    kind : TemplateKind
        Template family.
    team : str, default="red"
        Acting team: the attacking side for ``APC`` and shootouts, the
        defending side for ``DPC``, the attacking side for drills and the
        team taking the shape for outlets, presses and formations.
    structure : Optional[str], default=None
        Structure or formation name for outlets, presses and formations.
    parameters : TemplateParameters, default=TemplateParameters()
        Template knobs.
    explanation : Optional[str], default=None
        Text attached to every produced move.
    """

    kind: TemplateKind
    team: str = "red"
    structure: Optional[str] = None
    parameters: TemplateParameters = field(default_factory=TemplateParameters)
    explanation: Optional[str] = None


@dataclass(frozen=True)
class EntityRequest:
    """One line of an activity's resource list.

    Parameters
    ----------
    type : EntityKind
        Entity kind to allocate or create.
    count : int
        Number requested.
    team : Optional[str], default=None
        ``"red"``, ``"blue"`` or ``"neutral"`` (either team) for players.
    behavior : Optional[str], default=None
        ``"static"`` or ``"active"`` hint.
    """

    type: EntityKind
    count: int
    team: Optional[str] = None
    behavior: Optional[str] = None


@dataclass(frozen=True)
class ActivityLocation:
    """Where an activity takes place.

    Parameters
    ----------
    anchor : str, default="center_spot"
        Named landmark the activity is centred on.
    offset : Optional[Position], default=None
        Displacement from the anchor.
    center : Optional[Position], default=None
        Absolute centre; overrides the anchor when given.
    """

    anchor: str = "center_spot"
    offset: Optional[Position] = None
    center: Optional[Position] = None


@dataclass(frozen=True)
class Activity:
    """A single activity within a training session.

    Parameters
    ----------
    id : str
        Activity identifier, used in equipment ids.
    name : str
        Display name.
    template_type : ActivityTemplate
        Local layout used for the allocated players.
    location : ActivityLocation, default=ActivityLocation()
        Where the activity is centred.
    entities : Tuple[EntityRequest, ...], default=()
        Resources to allocate or create, in declaration order.
    attributes : Dict[str, Any], default={}
        Free-form extra settings.
    """

    id: str
    name: str
    template_type: ActivityTemplate
    location: ActivityLocation = field(default_factory=ActivityLocation)
    entities: Tuple[EntityRequest, ...] = ()
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        """Freeze the entity list."""
        object.__setattr__(self, "entities", tuple(self.entities))


@dataclass(frozen=True)
class TrainingSessionRequest:
    """An ordered list of activities resolved together.

    Parameters
    ----------
    activities : Tuple[Activity, ...]
        Activities in priority order; earlier ones are served first.
    pitch_view : str, default="full_pitch"
        Display hint passed through untouched.
    explanation : str, default=""
        Summary of the session.
    """

    activities: Tuple[Activity, ...]
    pitch_view: str = "full_pitch"
    explanation: str = ""

    def __post_init__(self) -> None:
        """Freeze the activity list."""
        object.__setattr__(self, "activities", tuple(self.activities))


@dataclass(frozen=True)
class TacticReplayRequest:
    """Replay a saved tactic onto the current roster.

    Parameters
    ----------
    tactic_id : Optional[str], default=None
        Identifier of the tactic to replay.
    command : Optional[str], default=None
        Free text used to find a tactic when no identifier is given.
    team : Optional[str], default=None
        Only replay positions for this team.
    mirror : bool, default=False
        Flip the tactic before replaying it.
    """

    tactic_id: Optional[str] = None
    command: Optional[str] = None
    team: Optional[str] = None
    mirror: bool = False


ResolutionRequest = Union[
    MoveRequest,
    ShapeRequest,
    CompositeRequest,
    TemplateRequest,
    TrainingSessionRequest,
    TacticReplayRequest,
]
