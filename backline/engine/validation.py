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
"""Final validation of computed moves before they leave the engine."""
from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence

from backline.models.entities import BoardState, Move

BALL_ID_PATTERN = re.compile(r"^ball(_\d+)?$")


class ResolutionError(ValueError):
    """Raised when a request cannot be turned into valid moves.

    Parameters
    ----------
    message : str
        Summary of the failure.
    errors : Optional[Sequence[str]]
        Every individual problem found; defaults to ``[message]``.
    """

    def __init__(self, message: str, errors: Optional[Sequence[str]] = None) -> None:
        """Store the summary and the detailed error list.

        Parameters
        ----------
        message : str
            Summary of the failure.
        errors : Optional[Sequence[str]]
            Every individual problem found.
        """
        super().__init__(message)
        self.errors: List[str] = list(errors) if errors is not None else [message]


def is_ball_id(target_id: str) -> bool:
    """Return whether ``target_id`` names a ball, existing or yet to be created.

    Parameters
    ----------
    target_id : str
        Identifier to test.

    Returns
    -------
    bool
        ``True`` for ``ball`` and ``ball_<n>``.
    """
    return BALL_ID_PATTERN.match(target_id) is not None


def validate_moves(
    moves: Sequence[Move],
    board: BoardState,
    created_ids: Iterable[str] = (),
) -> None:
    """Check every move and raise once with the full list of problems.

    A move is valid when its position is finite and inside the field, and its
    target is an entity on the board, a ball identifier, or equipment created
    by the same resolution.

    Parameters
    ----------
    moves : Sequence[Move]
        Moves to check.
    board : BoardState
        Snapshot the moves were computed against.
    created_ids : Iterable[str]
        Identifiers of entities created alongside the moves.

    Raises
    ------
    ResolutionError
        When at least one move is invalid.
    """
    known = board.entity_ids() | set(created_ids)
    errors: List[str] = []
    for move in moves:
        position = move.new_position
        if not position.in_bounds():
            errors.append(f"Invalid position for {move.target_id}: ({position.x}, {position.y})")
        if move.target_id not in known and not is_ball_id(move.target_id):
            errors.append(f"Target not found: {move.target_id}")
    if errors:
        raise ResolutionError(f"Validation errors: {'; '.join(errors)}", errors)
