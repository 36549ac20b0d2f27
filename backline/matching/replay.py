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
"""Capture saved tactics from a board and replay them onto any roster."""
from __future__ import annotations

from typing import List, Optional, Sequence

from backline.engine.geometry import Position, clamp_position, opponent_of
from backline.engine.transforms import flip_positions
from backline.engine.validation import ResolutionError
from backline.models.entities import TEAM_NAMES, BoardState, Move, Player
from backline.models.tactic import RelativePosition, SavedTactic, TacticType

from .keywords import extract_metadata_from_tags

REPLAY_EXPLANATION = "Loaded from saved tactic"


def _check_team(team: str) -> None:
    """Reject team names other than red and blue.

    Parameters
    ----------
    team : str
        Team name to check.

    Raises
    ------
    ResolutionError
        If the team is unknown.
    """
    if team not in TEAM_NAMES:
        raise ResolutionError(f"Unknown team '{team}'. Known teams: {', '.join(TEAM_NAMES)}")


def flip_tactic_coordinates(tactic: SavedTactic, target_team: str) -> SavedTactic:
    """Mirror a tactic so that it can be played by the other team.

    Every saved position swaps team and is reflected across the halfway line,
    so the roles of both halves are exchanged and flipping twice restores the
    original tactic.

    Parameters
    ----------
    tactic : SavedTactic
        Tactic to mirror.
    target_team : str
        Team that will play the tactic; only validated, since the swap is
        symmetric.

    Returns
    -------
    SavedTactic
        New tactic with mirrored positions in the original order.

    Raises
    ------
    ResolutionError
        If ``target_team`` is unknown.
    """
    _check_team(target_team)
    mirrored = flip_positions(Position(position.x, position.y) for position in tactic.positions)
    flipped = [
        RelativePosition(
            team=opponent_of(position.team),
            role=position.role,
            relative_index=position.relative_index,
            x=point.x,
            y=point.y,
        )
        for position, point in zip(tactic.positions, mirrored)
    ]
    return tactic.with_positions(flipped)


def _by_number(players: Sequence[Player]) -> List[Player]:
    """Return ``players`` sorted by shirt number.

    Parameters
    ----------
    players : Sequence[Player]
        Players to sort.

    Returns
    -------
    List[Player]
        Stable sort by number.
    """
    return sorted(players, key=lambda player: player.number)


def saved_tactic_to_moves(
    tactic: SavedTactic,
    board: BoardState,
    team_filter: Optional[str] = None,
) -> List[Move]:
    """Bind a saved tactic's relative positions to the current roster.

    ``GK`` entries go to the goalkeeper at ``relative_index`` in number order,
    or to the first goalkeeper when the roster has fewer; ``Player`` entries
    go to the field player at ``relative_index`` in number order.
    Entries without a matching player are skipped.

    Parameters
    ----------
    tactic : SavedTactic
        Tactic to replay, already flipped if required.
    board : BoardState
        Current board snapshot.
    team_filter : Optional[str]
        When given, only that team's entries are applied.

    Returns
    -------
    List[Move]
        Clamped moves in saved order.

    Raises
    ------
    ResolutionError
        If ``team_filter`` names an unknown team.
    """
    if team_filter is not None:
        _check_team(team_filter)

    rosters = {team: _by_number(board.team(team)) for team in TEAM_NAMES}
    moves: List[Move] = []
    for entry in tactic.positions:
        if team_filter is not None and entry.team != team_filter:
            continue
        roster = rosters.get(entry.team)
        if not roster:
            continue
        if entry.role == "GK":
            keepers = [player for player in roster if player.is_goalkeeper]
            if not keepers:
                continue
            index = entry.relative_index
            matched = keepers[index] if 0 <= index < len(keepers) else keepers[0]
        else:
            field = [player for player in roster if not player.is_goalkeeper]
            index = entry.relative_index
            matched = field[index] if 0 <= index < len(field) else None
        if matched is None:
            continue
        moves.append(Move(matched.id, clamp_position(entry.x, entry.y), REPLAY_EXPLANATION))
    return moves


def capture_tactic_positions(
    board: BoardState,
    tactic_type: TacticType,
    team: Optional[str] = None,
) -> List[RelativePosition]:
    """Record the board's player positions as relative positions.

    Parameters
    ----------
    board : BoardState
        Board snapshot to record.
    tactic_type : TacticType
        ``"full_scenario"`` records both teams; ``"single_team"`` records
        ``team`` or, when omitted, the larger team (red on a tie).
    team : Optional[str]
        Team to record for single-team tactics.

    Returns
    -------
    List[RelativePosition]
        Positions grouped by team, each team sorted by shirt number.

    Raises
    ------
    ResolutionError
        If ``team`` is unknown.
    """
    if tactic_type == "full_scenario":
        teams = list(TEAM_NAMES)
    elif team is not None:
        _check_team(team)
        teams = [team]
    else:
        teams = ["blue" if len(board.blue_team) > len(board.red_team) else "red"]

    positions: List[RelativePosition] = []
    for name in teams:
        keepers = 0
        field = 0
        for player in _by_number(board.team(name)):
            if player.is_goalkeeper:
                role, index = "GK", keepers
                keepers += 1
            else:
                role, index = "Player", field
                field += 1
            positions.append(RelativePosition(name, role, index, player.position.x, player.position.y))
    return positions


def build_saved_tactic(
    board: BoardState,
    tactic_id: str,
    name: str,
    tags: Sequence[str] = (),
    tactic_type: TacticType = "full_scenario",
    team: Optional[str] = None,
) -> SavedTactic:
    """Create a saved tactic from the current board.

    Parameters
    ----------
    board : BoardState
        Board snapshot to record.
    tactic_id : str
        Identifier supplied by the persistence layer.
    name : str
        Display name.
    tags : Sequence[str], default=()
        Free-form tags.
    tactic_type : TacticType, default="full_scenario"
        Which teams to record.
    team : Optional[str]
        Team to record for single-team tactics.

    Returns
    -------
    SavedTactic
        Tactic with metadata extracted from its name and tags.
    """
    return SavedTactic(
        id=tactic_id,
        name=name,
        tags=tuple(tags),
        type=tactic_type,
        positions=tuple(capture_tactic_positions(board, tactic_type, team)),
        metadata=extract_metadata_from_tags(name, tags),
    )
