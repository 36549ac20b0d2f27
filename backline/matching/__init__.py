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
"""Saved-tactic matching, capture and replay."""
from .base import MatchVerdict, SemanticMatcher
from .cache import TacticMatchCache
from .gemini import GeminiTacticMatcher, TacticMatchAPIError, TacticMatchError, TacticMatchRateLimitError
from .keywords import extract_metadata_from_tags, keyword_match
from .matcher import TacticMatcher
from .replay import build_saved_tactic, capture_tactic_positions, flip_tactic_coordinates, saved_tactic_to_moves

__all__ = [
    "GeminiTacticMatcher",
    "MatchVerdict",
    "SemanticMatcher",
    "TacticMatchAPIError",
    "TacticMatchCache",
    "TacticMatchError",
    "TacticMatchRateLimitError",
    "TacticMatcher",
    "build_saved_tactic",
    "capture_tactic_positions",
    "extract_metadata_from_tags",
    "flip_tactic_coordinates",
    "keyword_match",
    "saved_tactic_to_moves",
]
