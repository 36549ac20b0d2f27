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
"""Shared types for saved-tactic matching."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional

VerdictSource = Literal["collaborator", "keyword", "cache", "none"]


@dataclass(frozen=True)
class MatchVerdict:
    """Outcome of matching a command against the saved tactics.

    Parameters
    ----------
    tactic_id : Optional[str]
        Identifier of the best tactic, or ``None`` when nothing fits.
    needs_mirror : bool, default=False
        Whether the tactic must be flipped for the team the command names.
    reason : str, default=""
        Short justification.
    source : VerdictSource, default="collaborator"
        Which path produced the verdict.
    """

    tactic_id: Optional[str]
    needs_mirror: bool = False
    reason: str = ""
    source: VerdictSource = "collaborator"


class SemanticMatcher:
    """Interface of the external semantic-matching collaborator.

    Implementations receive the command and the tactic summaries (names,
    tags and metadata, never coordinates) and may raise any exception; the
    caller recovers locally.
    """

    async def match(self, command: str, summaries: List[Dict[str, Any]]) -> MatchVerdict:
        """Return the collaborator's verdict for ``command``.

        Parameters
        ----------
        command : str
            Free-text request.
        summaries : List[Dict[str, Any]]
            Tactic summaries as produced by ``SavedTactic.summary``.

        Returns
        -------
        MatchVerdict
            Chosen tactic and mirror flag.
        """
        raise NotImplementedError
