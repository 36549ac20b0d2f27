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
"""Local keyword matching of commands against saved tactics.

This is the fallback path used whenever the semantic collaborator is absent,
slow, or wrong. It also supplies :func:`extract_metadata_from_tags`, which
derives team, phase and structure hints from a tactic's name and tags.
"""
from __future__ import annotations

import re
from typing import Dict, FrozenSet, Iterable, Optional, Pattern, Sequence, Set, Tuple

from backline.engine.config import ENGINE_CONFIG
from backline.models.tactic import SavedTactic, TacticMetadata

from .base import MatchVerdict

STRUCTURE_PATTERNS: Tuple[Tuple[Pattern[str], str], ...] = (
    (re.compile(r"back[_\s]?4|back four"), "back_4"),
    (re.compile(r"back[_\s]?3|back three"), "back_3"),
    (re.compile(r"three[_\s]?high"), "three_high"),
    (re.compile(r"half[_\s]?court"), "half_court"),
    (re.compile(r"full[_\s]?court"), "full_court"),
    (re.compile(r"w[_\s]?press"), "w_press"),
    (re.compile(r"split[_\s]?vision"), "split_vision"),
    (re.compile(r"1[-\s]3|one[-\s]three"), "1-3"),
    (re.compile(r"2[-\s]2|two[-\s]two"), "2-2"),
    (re.compile(r"line[_\s]?stop"), "line_stop"),
)

STOPWORDS: FrozenSet[str] = frozenset(
    {
        "a", "an", "the", "to", "for", "of", "in", "on", "at", "and", "with",
        "show", "set", "up", "load", "use", "me", "my", "our", "team", "please",
        "do", "run", "into", "from", "play", "setup",
    }
)

TEAM_WORDS: Dict[str, str] = {"red": "red", "blue": "blue"}

_TOKEN = re.compile(r"[a-z0-9]+")

# Phase kinds recognised in free text, keyed by the metadata flag they set.
_PHASE_WORDS: Dict[str, Tuple[str, ...]] = {
    "dpc": ("dpc", "defending", "defensive corner"),
    "apc": ("apc", "attacking corner", "attacking penalty"),
    "outlet": ("outlet",),
    "press": ("press",),
}


def extract_metadata_from_tags(name: str, tags: Sequence[str]) -> Optional[TacticMetadata]:
    """Derive matching hints from a tactic's name and tags.

    Parameters
    ----------
    name : str
        Tactic name.
    tags : Sequence[str]
        Free-form tags.

    Returns
    -------
    Optional[TacticMetadata]
        Extracted hints, or ``None`` when nothing was recognised.
    """
    text = " ".join([name, *tags]).lower()

    words = set(_TOKEN.findall(text))

    primary_team: Optional[str] = None
    if words & {"red", "r"}:
        primary_team = "red"
    elif words & {"blue", "b"}:
        primary_team = "blue"

    is_apc = "apc" in text or "attacking" in text or ("penalty corner" in text and "attack" in text)
    is_dpc = (
        "dpc" in text
        or "defending" in text
        or "defense" in text
        or ("penalty corner" in text and ("defend" in text or "defense" in text))
    )
    is_outlet = "outlet" in text
    is_press = "press" in text

    phase = None
    flags = {"is_apc": False, "is_dpc": False, "is_outlet": False, "is_press": False}
    if is_dpc:
        phase, flags["is_dpc"] = "defense", True
    elif is_apc:
        phase, flags["is_apc"] = "attack", True
    elif is_outlet:
        phase, flags["is_outlet"] = "attack", True
    elif is_press:
        phase, flags["is_press"] = "defense", True
    elif "attack" in text:
        phase = "attack"
    elif "defense" in text or "defend" in text:
        phase = "defense"

    structure = None
    for pattern, value in STRUCTURE_PATTERNS:
        if pattern.search(text):
            structure = value
            break

    metadata = TacticMetadata(primary_team=primary_team, phase=phase, structure=structure, **flags)
    return None if metadata.is_empty() else metadata


def tokenize(text: str) -> Set[str]:
    """Split ``text`` into lower-case word tokens without stopwords.

    Parameters
    ----------
    text : str
        Input text.

    Returns
    -------
    Set[str]
        Distinct meaningful tokens.
    """
    return {token for token in _TOKEN.findall(text.lower()) if token not in STOPWORDS}


def command_team(command: str) -> Optional[str]:
    """Return the team named in ``command``, if exactly one is.

    Parameters
    ----------
    command : str
        Free-text request.

    Returns
    -------
    Optional[str]
        ``"red"``, ``"blue"`` or ``None``.
    """
    named = {TEAM_WORDS[token] for token in _TOKEN.findall(command.lower()) if token in TEAM_WORDS}
    return named.pop() if len(named) == 1 else None


def command_phases(command: str) -> Set[str]:
    """Return every phase kind mentioned in ``command``.

    Parameters
    ----------
    command : str
        Free-text request.

    Returns
    -------
    Set[str]
        Subset of ``{"apc", "dpc", "outlet", "press"}``.
    """
    text = " ".join(_TOKEN.findall(command.lower()))
    return {kind for kind, words in _PHASE_WORDS.items() if any(word in text for word in words)}


def tactic_phase(metadata: Optional[TacticMetadata]) -> Optional[str]:
    """Return the single phase kind flagged on ``metadata``.

    Parameters
    ----------
    metadata : Optional[TacticMetadata]
        Tactic hints.

    Returns
    -------
    Optional[str]
        Phase kind, or ``None`` when the tactic is not tied to one.
    """
    if metadata is None:
        return None
    for kind, flag in (
        ("dpc", metadata.is_dpc),
        ("apc", metadata.is_apc),
        ("outlet", metadata.is_outlet),
        ("press", metadata.is_press),
    ):
        if flag:
            return kind
    return None


def _tactic_tokens(tactic: SavedTactic) -> Set[str]:
    """Collect searchable tokens from a tactic's name and tags.

    Parameters
    ----------
    tactic : SavedTactic
        Candidate tactic.

    Returns
    -------
    Set[str]
        Name and tag tokens without team words.
    """
    tokens: Set[str] = set()
    for text in (tactic.name, *tactic.tags):
        tokens |= tokenize(text)
    return tokens - set(TEAM_WORDS)


def score_tactic(command: str, tactic: SavedTactic) -> int:
    """Score how well ``tactic`` fits ``command``.

    Tactics tied to a phase the command does not mention are rejected when the
    command names at least one phase.

    Parameters
    ----------
    command : str
        Free-text request.
    tactic : SavedTactic
        Candidate tactic.

    Returns
    -------
    int
        Non-negative score; ``0`` means no match.
    """
    metadata = tactic.metadata or extract_metadata_from_tags(tactic.name, tactic.tags)
    phases = command_phases(command)
    kind = tactic_phase(metadata)
    if phases and kind is not None and kind not in phases:
        return 0

    words = tokenize(command) - set(TEAM_WORDS)
    score = len(words & _tactic_tokens(tactic))
    if score == 0:
        return 0

    if phases and kind in phases:
        score += 1
    command_meta = extract_metadata_from_tags(command, [])
    if metadata is not None and command_meta is not None and command_meta.structure:
        if command_meta.structure == metadata.structure:
            score += 2
    return score


def keyword_match(
    command: str,
    tactics: Iterable[SavedTactic],
    min_score: Optional[int] = None,
) -> MatchVerdict:
    """Pick the best saved tactic for ``command`` by keyword overlap.

    Ties keep the earliest tactic. A mirror is requested when the command
    names a team and the tactic is recorded for the other one.

    Parameters
    ----------
    command : str
        Free-text request.
    tactics : Iterable[SavedTactic]
        Candidate tactics in library order.
    min_score : Optional[int]
        Minimum score to accept; defaults to the configured value.

    Returns
    -------
    MatchVerdict
        Verdict with ``source="keyword"``; ``tactic_id`` is ``None`` when
        nothing scored high enough.
    """
    threshold = ENGINE_CONFIG.matching.keyword_min_score if min_score is None else min_score
    best: Optional[SavedTactic] = None
    best_score = 0
    for tactic in tactics:
        score = score_tactic(command, tactic)
        if score > best_score:
            best, best_score = tactic, score

    if best is None or best_score < threshold:
        return MatchVerdict(None, False, "No saved tactic matched the command", "keyword")

    metadata = best.metadata or extract_metadata_from_tags(best.name, best.tags)
    team = command_team(command)
    needs_mirror = bool(team and metadata and metadata.primary_team and metadata.primary_team != team)
    return MatchVerdict(best.id, needs_mirror, f"Keyword score {best_score} for '{best.name}'", "keyword")

