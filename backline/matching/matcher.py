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
"""Front door for matching commands to saved tactics."""
from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence

from backline.engine.config import ENGINE_CONFIG, MatchingConfig
from backline.models.tactic import SavedTactic
from backline.utils.debug import ResolutionDebugger

from .base import MatchVerdict, SemanticMatcher
from .cache import TacticMatchCache
from .keywords import keyword_match


class TacticMatcher:
    """Match commands through the cache, the collaborator, then keywords.

    Parameters
    ----------
    semantic : Optional[SemanticMatcher]
        External collaborator; when ``None`` only keywords are used.
    cache : Optional[TacticMatchCache]
        Verdict memo; a private one is created when omitted.
    config : Optional[MatchingConfig]
        Timeout and scoring settings.
    debugger : Optional[ResolutionDebugger]
        Receives fallback and cache events.
    """

    def __init__(
        self,
        semantic: Optional[SemanticMatcher] = None,
        cache: Optional[TacticMatchCache] = None,
        config: Optional[MatchingConfig] = None,
        debugger: Optional[ResolutionDebugger] = None,
    ) -> None:
        """Wire the matcher.

        Parameters
        ----------
        semantic : Optional[SemanticMatcher]
            External collaborator.
        cache : Optional[TacticMatchCache]
            Verdict memo.
        config : Optional[MatchingConfig]
            Matching settings; defaults to ``ENGINE_CONFIG.matching``.
        debugger : Optional[ResolutionDebugger]
            Optional trace logger.
        """
        self.config = config or ENGINE_CONFIG.matching
        self.semantic = semantic
        self.cache = cache if cache is not None else TacticMatchCache(
            ttl=self.config.cache_ttl, max_entries=self.config.cache_max_entries
        )
        self.debugger = debugger

    def _log(self, event_type: str, description: str) -> None:
        """Forward an event to the debugger when one is attached.

        Parameters
        ----------
        event_type : str
            Event category.
        description : str
            Event details.
        """
        if self.debugger:
            self.debugger.log_event(event_type, description)

    def match_keywords(self, command: str, tactics: Sequence[SavedTactic]) -> MatchVerdict:
        """Match using only the local keyword scorer.

        Parameters
        ----------
        command : str
            Free-text request.
        tactics : Sequence[SavedTactic]
            Candidate tactics.

        Returns
        -------
        MatchVerdict
            Keyword verdict.
        """
        return keyword_match(command, tactics, self.config.keyword_min_score)

    async def match(self, command: str, tactics: Sequence[SavedTactic]) -> MatchVerdict:
        """Find the saved tactic that best fits ``command``.

        The collaborator runs under the configured timeout. Any failure, a
        timeout, or an empty answer falls back to keyword matching; only
        collaborator answers are cached. Cancellation of the caller
        propagates.

        Parameters
        ----------
        command : str
            Free-text request.
        tactics : Sequence[SavedTactic]
            Candidate tactics.

        Returns
        -------
        MatchVerdict
            Verdict from the cache, the collaborator or the keyword scorer.
        """
        tactics = list(tactics)
        if not tactics:
            return MatchVerdict(None, False, "No saved tactics available", "none")

        cached = self.cache.get(command)
        if cached is not None and any(tactic.id == cached.tactic_id for tactic in tactics):
            self._log("MATCH_CACHE", f"'{command}' -> {cached.tactic_id}")
            return cached

        if self.semantic is not None:
            verdict = await self._ask_collaborator(command, tactics)
            if verdict is not None:
                self.cache.put(command, verdict)
                return verdict

        verdict = self.match_keywords(command, tactics)
        self._log("MATCH_FALLBACK", f"'{command}' -> {verdict.tactic_id}")
        return verdict

    async def _ask_collaborator(self, command: str, tactics: List[SavedTactic]) -> Optional[MatchVerdict]:
        """Query the collaborator, absorbing its failures.

        Parameters
        ----------
        command : str
            Free-text request.
        tactics : List[SavedTactic]
            Candidate tactics.

        Returns
        -------
        Optional[MatchVerdict]
            A usable verdict, or ``None`` when the caller should fall back.
        """
        summaries = [tactic.summary() for tactic in tactics]
        known = {tactic.id for tactic in tactics}
        try:
            verdict = await asyncio.wait_for(self.semantic.match(command, summaries), self.config.timeout)
        except asyncio.TimeoutError:
            self._log("MATCH_TIMEOUT", f"Collaborator exceeded {self.config.timeout}s for '{command}'")
            return None
        except Exception as exc:
            self._log("MATCH_ERROR", f"{type(exc).__name__}: {exc}")
            return None

        if verdict is None or verdict.tactic_id is None or verdict.tactic_id not in known:
            self._log("MATCH_EMPTY", f"Collaborator had no usable answer for '{command}'")
            return None
        return verdict

    def invalidate(self) -> None:
        """Drop every cached verdict after the tactic library changed."""
        self.cache.invalidate()
