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
"""Greedy, first-come-first-served roster allocation for training sessions."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Set, Tuple

from backline.models.entities import BoardState, Player
from backline.models.requests import Activity, EntityRequest

from .validation import ResolutionError

if TYPE_CHECKING:
    from backline.utils.debug import ResolutionDebugger

ROSTER_KINDS = ("player", "gk")
TEAM_FILTERS = ("red", "blue", "neutral")


@dataclass(frozen=True)
class Shortfall:
    """An entity request that could not be fully served.

    Parameters
    ----------
    activity_id : str
        Activity that asked for the entities.
    entity_type : str
        ``"player"`` or ``"gk"``.
    team : Optional[str]
        Team filter of the request.
    requested : int
        Number asked for.
    allocated : int
        Number actually assigned.
    """

    activity_id: str
    entity_type: str
    team: Optional[str]
    requested: int
    allocated: int


@dataclass(frozen=True)
class ActivityAllocation:
    """Roster entities assigned to one activity.

    Parameters
    ----------
    activity_id : str
        Activity identifier.
    players : Tuple[Player, ...]
        Field players in allocation order.
    goalkeepers : Tuple[Player, ...]
        Goalkeepers in allocation order.
    """

    activity_id: str
    players: Tuple[Player, ...]
    goalkeepers: Tuple[Player, ...]

    def everyone(self) -> Tuple[Player, ...]:
        """Return field players followed by goalkeepers.

        Returns
        -------
        Tuple[Player, ...]
            All allocated entities.
        """
        return self.players + self.goalkeepers


@dataclass(frozen=True)
class Allocation:
    """Result of partitioning the roster across a session's activities.

    Parameters
    ----------
    activities : Tuple[ActivityAllocation, ...]
        One entry per activity, in request order.
    shortfalls : Tuple[Shortfall, ...]
        Requests that received fewer entities than asked for.
    unallocated : Tuple[Player, ...]
        Players no activity claimed, red first.
    """

    activities: Tuple[ActivityAllocation, ...]
    shortfalls: Tuple[Shortfall, ...]
    unallocated: Tuple[Player, ...]

    def for_activity(self, activity_id: str) -> ActivityAllocation:
        """Return the allocation of ``activity_id``.

        Parameters
        ----------
        activity_id : str
            Activity identifier.

        Returns
        -------
        ActivityAllocation
            The matching entry.

        Raises
        ------
        KeyError
            When the activity was not part of the session.
        """
        for entry in self.activities:
            if entry.activity_id == activity_id:
                return entry
        raise KeyError(activity_id)

    def allocated_ids(self) -> Set[str]:
        """Return the identifiers of every allocated entity.

        Returns
        -------
        Set[str]
            Player and goalkeeper identifiers.
        """
        return {player.id for entry in self.activities for player in entry.everyone()}


def _check_request(activity: Activity, request: EntityRequest) -> None:
    """Reject malformed entity requests before allocating anything.

    Parameters
    ----------
    activity : Activity
        Owning activity, used in error messages.
    request : EntityRequest
        Request to check.

    Raises
    ------
    ResolutionError
        When the count is negative or the team filter is unknown.
    """
    if request.count < 0:
        raise ResolutionError(f"Activity {activity.id} asks for a negative number of {request.type}")
    if request.team is not None and request.team not in TEAM_FILTERS:
        raise ResolutionError(
            f"Activity {activity.id} uses unknown team '{request.team}'. Known teams: {', '.join(TEAM_FILTERS)}"
        )


def _matches(player: Player, request: EntityRequest) -> bool:
    """Return whether ``player`` can serve ``request``.

    Parameters
    ----------
    player : Player
        Candidate roster entity.
    request : EntityRequest
        ``"player"`` wants field players, ``"gk"`` wants goalkeepers; a
        ``"neutral"`` or missing team accepts either side.

    Returns
    -------
    bool
        ``True`` when role and team both fit.
    """
    if player.is_goalkeeper != (request.type == "gk"):
        return False
    return request.team in (None, "neutral") or player.team == request.team


def allocate_resources(
    activities: Sequence[Activity],
    board: BoardState,
    debugger: Optional["ResolutionDebugger"] = None,
) -> Allocation:
    """Assign roster entities to activities without ever sharing one.

    Activities are served in order and each of their player or goalkeeper
    requests greedily takes the first unused matching entities (red roster
    first). Equipment and ball requests are ignored here.

    Parameters
    ----------
    activities : Sequence[Activity]
        Activities in priority order.
    board : BoardState
        Roster source.
    debugger : Optional[ResolutionDebugger]
        Receives one line per shortfall.

    Returns
    -------
    Allocation
        Per-activity assignments, shortfalls and leftovers.

    Raises
    ------
    ResolutionError
        When activity ids repeat or an entity request is malformed.
    """
    pool = list(board.all_players())
    used: Set[str] = set()
    seen_ids: Set[str] = set()
    entries: List[ActivityAllocation] = []
    shortfalls: List[Shortfall] = []

    for activity in activities:
        if activity.id in seen_ids:
            raise ResolutionError(f"Duplicate activity id '{activity.id}'")
        seen_ids.add(activity.id)
        claimed: Dict[str, List[Player]] = {"player": [], "gk": []}
        for request in activity.entities:
            if request.type not in ROSTER_KINDS:
                continue
            _check_request(activity, request)
            taken = [player for player in pool if player.id not in used and _matches(player, request)]
            taken = taken[:request.count]
            used.update(player.id for player in taken)
            claimed[request.type].extend(taken)
            if len(taken) < request.count:
                shortfall = Shortfall(activity.id, request.type, request.team, request.count, len(taken))
                shortfalls.append(shortfall)
                if debugger is not None:
                    debugger.log_event(
                        "SHORTFALL",
                        f"{activity.id}: {request.type} ({request.team or 'any'}) {len(taken)}/{request.count}",
                    )
        entries.append(ActivityAllocation(activity.id, tuple(claimed["player"]), tuple(claimed["gk"])))

    unallocated = tuple(player for player in pool if player.id not in used)
    return Allocation(tuple(entries), tuple(shortfalls), unallocated)
