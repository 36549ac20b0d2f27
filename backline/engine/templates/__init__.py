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
"""Registry of tactical template calculators."""
from __future__ import annotations

from typing import Dict, List

from backline.engine.validation import ResolutionError
from backline.models.entities import TEAM_NAMES, BoardState, Move
from backline.models.requests import TemplateRequest

from .base import TemplateCalculator
from .drills import calculate_drill
from .formations import FORMATIONS, formation_moves
from .outlets import OUTLET_STRUCTURES, outlet_moves
from .presses import PRESS_STRUCTURES, press_moves
from .set_pieces import calculate_apc, calculate_dpc, calculate_shootout

DEFAULT_EXPLANATION = "Tactical move"


def calculate_outlet(request: TemplateRequest, board: BoardState) -> List[Move]:
    """Resolve an outlet structure for the acting team.

    Parameters
    ----------
    request : TemplateRequest
        ``structure`` names the outlet; unknown names use ``back_4``.
    board : BoardState
        Current snapshot.

    Returns
    -------
    List[Move]
        Moves for the acting team only.
    """
    return outlet_moves(request.structure, request.team, list(board.team(request.team)))


def calculate_press(request: TemplateRequest, board: BoardState) -> List[Move]:
    """Resolve a press structure for the acting team.

    Parameters
    ----------
    request : TemplateRequest
        ``structure`` names the press; ``parameters.intensity`` raises it.
    board : BoardState
        Current snapshot.

    Returns
    -------
    List[Move]
        Moves for the acting team only.
    """
    team = request.team
    return press_moves(request.structure, team, list(board.team(team)), request.parameters.intensity)


def calculate_formation(request: TemplateRequest, board: BoardState) -> List[Move]:
    """Line the acting team up in a named formation.

    Parameters
    ----------
    request : TemplateRequest
        ``structure`` names the formation.
    board : BoardState
        Current snapshot.

    Returns
    -------
    List[Move]
        Moves for the acting team only.

    Raises
    ------
    ResolutionError
        When no formation name is given.
    """
    if not request.structure:
        raise ResolutionError(f"A formation request needs a structure. Known formations: {', '.join(FORMATIONS)}")
    return formation_moves(request.structure, request.team, list(board.team(request.team)))


TEMPLATE_CALCULATORS: Dict[str, TemplateCalculator] = {
    "APC": calculate_apc,
    "DPC": calculate_dpc,
    "shootout": calculate_shootout,
    "drill": calculate_drill,
    "outlet": calculate_outlet,
    "press": calculate_press,
    "formation": calculate_formation,
}


def calculate_template(request: TemplateRequest, board: BoardState) -> List[Move]:
    """Dispatch ``request`` to its calculator and label the resulting moves.

    Parameters
    ----------
    request : TemplateRequest
        Template kind, acting team and parameters.
    board : BoardState
        Current snapshot; never modified.

    Returns
    -------
    List[Move]
        Clamped moves carrying the request explanation.

    Raises
    ------
    ResolutionError
        When the kind or team is unknown, or the calculator rejects the input.
    """
    try:
        calculator = TEMPLATE_CALCULATORS[request.kind]
    except KeyError as exc:
        known = ", ".join(TEMPLATE_CALCULATORS)
        raise ResolutionError(f"Unknown template '{request.kind}'. Known templates: {known}") from exc
    if request.team not in TEAM_NAMES:
        raise ResolutionError(f"Unknown team '{request.team}'. Known teams: {', '.join(TEAM_NAMES)}")
    explanation = request.explanation or DEFAULT_EXPLANATION
    return [move.with_explanation(explanation) for move in calculator(request, board)]


__all__ = [
    "DEFAULT_EXPLANATION",
    "FORMATIONS",
    "OUTLET_STRUCTURES",
    "PRESS_STRUCTURES",
    "TEMPLATE_CALCULATORS",
    "calculate_formation",
    "calculate_outlet",
    "calculate_press",
    "calculate_template",
]
