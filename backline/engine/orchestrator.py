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
"""Entry point that turns resolution requests into validated moves.

The orchestrator dispatches each request to its calculator, separates
overlapping players once every calculator has run, and validates the final
move list before returning it. Ball moves keep their exact targets and never
take part in overlap resolution.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from backline.matching.base import MatchVerdict
from backline.matching.cache import TacticMatchCache
from backline.matching.matcher import TacticMatcher
from backline.matching.replay import flip_tactic_coordinates, saved_tactic_to_moves
from backline.models.entities import BoardState, Entity, Equipment, Move
from backline.models.requests import (
    CompositeRequest,
    MoveRequest,
    ResolutionRequest,
    ShapeRequest,
    TacticReplayRequest,
    TemplateRequest,
    TrainingSessionRequest,
)
from backline.models.tactic import SavedTactic
from backline.utils.debug import ResolutionDebugger

from .config import ENGINE_CONFIG, EngineConfig
from .geometry import opponent_of
from .overlap import OverlapReport, resolve_overlaps
from .session import resolve_training_session
from .shapes import calculate_shape_positions
from .templates import DEFAULT_EXPLANATION, calculate_template
from .validation import ResolutionError, validate_moves


@dataclass(frozen=True)
class ResolutionResult:
    """Validated output of one resolution.

    Parameters
    ----------
    moves : Tuple[Move, ...]
        Moves to apply, in calculator order.
    equipment : Tuple[Equipment, ...]
        Equipment created by the resolution.
    explanation : str
        Summary shown to the coach.
    overlap : Optional[OverlapReport]
        Report of the overlap pass, ``None`` when no player moved.
    tactic_id : Optional[str]
        Saved tactic that was replayed, if any.
    """

    moves: Tuple[Move, ...]
    equipment: Tuple[Equipment, ...] = ()
    explanation: str = ""
    overlap: Optional[OverlapReport] = None
    tactic_id: Optional[str] = None


@dataclass(frozen=True)
class _Computed:
    """Calculator output before overlap resolution and validation.

    Parameters
    ----------
    moves : List[Move]
        Raw moves.
    equipment : List[Equipment]
        Created equipment.
    explanation : str
        Summary text.
    tactic_id : Optional[str]
        Replayed tactic, if any.
    """

    moves: List[Move]
    equipment: List[Equipment]
    explanation: str
    tactic_id: Optional[str] = None


def merge_moves(moves: Sequence[Move]) -> List[Move]:
    """Collapse moves that target the same entity.

    Parameters
    ----------
    moves : Sequence[Move]
        Moves in application order.

    Returns
    -------
    List[Move]
        One move per target, keeping the first slot and the last position.
    """
    merged: Dict[str, Move] = {}
    for move in moves:
        merged[move.target_id] = move
    order: Dict[str, None] = dict.fromkeys(move.target_id for move in moves)
    return [merged[target_id] for target_id in order]


class ResolutionOrchestrator:
    """Resolve requests against a board snapshot.

    Parameters
    ----------
    config : Optional[EngineConfig]
        Tuning overrides; defaults to ``ENGINE_CONFIG``.
    matcher : Optional[TacticMatcher]
        Saved-tactic matcher; a keyword-only matcher is built when omitted.
    tactics : Sequence[SavedTactic]
        Saved-tactic library available for replay.
    debugger : Optional[ResolutionDebugger]
        Receives resolution traces.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        matcher: Optional[TacticMatcher] = None,
        tactics: Sequence[SavedTactic] = (),
        debugger: Optional[ResolutionDebugger] = None,
    ) -> None:
        """Wire the orchestrator.

        Parameters
        ----------
        config : Optional[EngineConfig]
            Tuning overrides.
        matcher : Optional[TacticMatcher]
            Saved-tactic matcher.
        tactics : Sequence[SavedTactic]
            Saved-tactic library.
        debugger : Optional[ResolutionDebugger]
            Optional trace logger.
        """
        self.config = config or ENGINE_CONFIG
        self.debugger = debugger
        self.matcher = matcher or TacticMatcher(
            cache=TacticMatchCache(self.config.matching.cache_ttl, self.config.matching.cache_max_entries),
            config=self.config.matching,
            debugger=debugger,
        )
        self._tactics: List[SavedTactic] = list(tactics)

    @property
    def tactics(self) -> Tuple[SavedTactic, ...]:
        """Saved tactics currently available for replay."""
        return tuple(self._tactics)

    def set_tactics(self, tactics: Sequence[SavedTactic]) -> None:
        """Replace the saved-tactic library and drop stale match verdicts.

        Parameters
        ----------
        tactics : Sequence[SavedTactic]
            New library contents.
        """
        self._tactics = list(tactics)
        self.invalidate_tactic_cache()

    def invalidate_tactic_cache(self) -> None:
        """Forget cached match verdicts."""
        self.matcher.invalidate()

    def resolve(self, request: ResolutionRequest, board: BoardState) -> ResolutionResult:
        """Resolve ``request`` synchronously.

        Tactic replays driven by free text use the keyword matcher only.

        Parameters
        ----------
        request : ResolutionRequest
            Request to resolve.
        board : BoardState
            Current board snapshot.

        Returns
        -------
        ResolutionResult
            Validated moves, created equipment and the overlap report.

        Raises
        ------
        ResolutionError
            If the request is malformed or produces invalid moves.
        """
        return self._finish(request, board, self._compute(request, board, None))

    async def resolve_async(self, request: ResolutionRequest, board: BoardState) -> ResolutionResult:
        """Resolve ``request``, consulting the semantic matcher when needed.

        Parameters
        ----------
        request : ResolutionRequest
            Request to resolve.
        board : BoardState
            Current board snapshot.

        Returns
        -------
        ResolutionResult
            Validated moves, created equipment and the overlap report.

        Raises
        ------
        ResolutionError
            If the request is malformed or produces invalid moves.
        """
        verdict = None
        if isinstance(request, TacticReplayRequest) and request.tactic_id is None and request.command:
            verdict = await self.matcher.match(request.command, self._tactics)
        return self._finish(request, board, self._compute(request, board, verdict))

    def _compute(
        self,
        request: ResolutionRequest,
        board: BoardState,
        verdict: Optional[MatchVerdict],
    ) -> _Computed:
        """Run the calculator that matches the request type.

        Parameters
        ----------
        request : ResolutionRequest
            Request to resolve.
        board : BoardState
            Current board snapshot.
        verdict : Optional[MatchVerdict]
            Pre-computed match for command-driven replays.

        Returns
        -------
        _Computed
            Raw calculator output.

        Raises
        ------
        ResolutionError
            If the request type is not supported.
        """
        if isinstance(request, MoveRequest):
            return _Computed(merge_moves(request.moves), [], request.explanation)
        if isinstance(request, ShapeRequest):
            moves = calculate_shape_positions(request)
            return _Computed(moves, [], f"Arranged {len(moves)} players in a {request.type}")
        if isinstance(request, CompositeRequest):
            moves: List[Move] = []
            for shape in request.shapes:
                moves.extend(calculate_shape_positions(shape))
            moves.extend(request.moves)
            return _Computed(merge_moves(moves), [], request.explanation)
        if isinstance(request, TemplateRequest):
            moves = calculate_template(request, board)
            return _Computed(merge_moves(moves), [], request.explanation or DEFAULT_EXPLANATION)
        if isinstance(request, TrainingSessionRequest):
            layout = resolve_training_session(request, board, self.debugger)
            names = ", ".join(activity.name for activity in request.activities)
            explanation = request.explanation or f"Training session: {names}"
            return _Computed(list(layout.moves), list(layout.equipment), explanation)
        if isinstance(request, TacticReplayRequest):
            return self._replay(request, board, verdict)
        raise ResolutionError(f"Unsupported request type '{type(request).__name__}'")

    def _find_tactic(self, tactic_id: str) -> SavedTactic:
        """Look up a saved tactic by identifier.

        Parameters
        ----------
        tactic_id : str
            Identifier to find.

        Returns
        -------
        SavedTactic
            The stored tactic.

        Raises
        ------
        ResolutionError
            If no tactic has that identifier.
        """
        for tactic in self._tactics:
            if tactic.id == tactic_id:
                return tactic
        raise ResolutionError(f"Saved tactic not found: {tactic_id}")

    def _replay(
        self,
        request: TacticReplayRequest,
        board: BoardState,
        verdict: Optional[MatchVerdict],
    ) -> _Computed:
        """Bind a saved tactic to the roster, matching it from text if needed.

        Parameters
        ----------
        request : TacticReplayRequest
            Replay request.
        board : BoardState
            Current board snapshot.
        verdict : Optional[MatchVerdict]
            Match computed by the async path, if any.

        Returns
        -------
        _Computed
            Replay moves.

        Raises
        ------
        ResolutionError
            If no tactic can be identified.
        """
        tactic_id = request.tactic_id
        mirror = request.mirror
        if tactic_id is None:
            if not request.command:
                raise ResolutionError("Tactic replay needs a tactic_id or a command")
            if verdict is None:
                verdict = self.matcher.match_keywords(request.command, self._tactics)
            if verdict.tactic_id is None:
                raise ResolutionError(f"No saved tactic matches '{request.command}'")
            tactic_id = verdict.tactic_id
            mirror = mirror or verdict.needs_mirror

        tactic = self._find_tactic(tactic_id)
        explanation = f"Loaded saved tactic '{tactic.name}'"
        if mirror:
            primary = tactic.metadata.primary_team if tactic.metadata else None
            target = request.team or (opponent_of(primary) if primary else "red")
            tactic = flip_tactic_coordinates(tactic, target)
            explanation += " (mirrored)"
        moves = saved_tactic_to_moves(tactic, board, request.team)
        return _Computed(merge_moves(moves), [], explanation, tactic.id)

    def _finish(self, request: ResolutionRequest, board: BoardState, computed: _Computed) -> ResolutionResult:
        """Separate overlapping players, validate, and package the result.

        Parameters
        ----------
        request : ResolutionRequest
            Request that was resolved.
        board : BoardState
            Current board snapshot.
        computed : _Computed
            Raw calculator output.

        Returns
        -------
        ResolutionResult
            Final validated result.
        """
        player_moves = [move for move in computed.moves if not move.is_ball_move()]
        report: Optional[OverlapReport] = None
        if player_moves:
            stationary: List[Entity] = [*board.all_players(), *board.equipment]
            resolution = resolve_overlaps(
                player_moves,
                stationary,
                min_distance=self.config.overlap.min_distance,
                max_iterations=self.config.overlap.max_iterations,
                debugger=self.debugger,
            )
            report = resolution.report
            separated = iter(resolution.moves)
            moves = [move if move.is_ball_move() else next(separated) for move in computed.moves]
        else:
            moves = list(computed.moves)

        created = [item.id for item in computed.equipment]
        try:
            validate_moves(moves, board, created)
        except ResolutionError as exc:
            if self.debugger:
                self.debugger.log_error("VALIDATION", str(exc))
            raise

        if self.debugger:
            self.debugger.log_resolution(type(request).__name__, len(moves), computed.explanation)
            for move in moves:
                self.debugger.log_move(move.target_id, move.new_position.as_tuple(), move.explanation)
        return ResolutionResult(tuple(moves), tuple(computed.equipment), computed.explanation, report, computed.tactic_id)
