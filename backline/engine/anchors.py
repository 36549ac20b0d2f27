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
"""Named field landmarks used to place activities and set pieces."""
from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional

from .geometry import Position, clamp_position

if TYPE_CHECKING:
    from backline.utils.debug import ResolutionDebugger

FALLBACK_ANCHOR = "center_spot"

# Landmarks sit 2 units inside the lines so markers never clip the field edge.
FIELD_ANCHORS: Dict[str, Position] = {
    "center_spot": Position(50.0, 50.0),
    # Shooting circle apexes; 14.63 m over 91.44 m is a 16 unit reach.
    "top_D_left": Position(16.0, 50.0),
    "top_D_right": Position(84.0, 50.0),
    "top_D_center": Position(16.0, 50.0),
    "baseline_center": Position(2.0, 50.0),
    "goal_circle_bottom": Position(16.0, 76.6),
    "sideline_middle_left": Position(50.0, 2.0),
    "sideline_middle_right": Position(50.0, 98.0),
    "goal_left": Position(2.0, 50.0),
    "goal_right": Position(98.0, 50.0),
    "corner_top_left": Position(2.0, 2.0),
    "corner_bottom_left": Position(2.0, 98.0),
    "corner_top_right": Position(98.0, 2.0),
    "corner_bottom_right": Position(98.0, 98.0),
    "23m_left_top": Position(25.0, 2.0),
    "23m_left_bottom": Position(25.0, 98.0),
    "23m_right_top": Position(75.0, 2.0),
    "23m_right_bottom": Position(75.0, 98.0),
    "penalty_corner_injector_left_top": Position(2.0, 30.0),
    "penalty_corner_injector_left_bottom": Position(2.0, 70.0),
    "penalty_corner_injector_right_top": Position(98.0, 30.0),
    "penalty_corner_injector_right_bottom": Position(98.0, 70.0),
}


def is_known_anchor(name: str) -> bool:
    """Return whether ``name`` refers to a registered landmark.

    Parameters
    ----------
    name : str
        Anchor identifier such as ``"top_D_left"``.

    Returns
    -------
    bool
        ``True`` when the anchor exists in :data:`FIELD_ANCHORS`.
    """
    return name in FIELD_ANCHORS


def anchor_names() -> List[str]:
    """Return every registered anchor name in declaration order.

    Returns
    -------
    List[str]
        Anchor identifiers.
    """
    return list(FIELD_ANCHORS)


def resolve_anchor(
    name: str,
    offset: Optional[Position] = None,
    debugger: Optional["ResolutionDebugger"] = None,
) -> Position:
    """Return the coordinates of an anchor, shifted by an optional offset.

    Unknown names resolve to the centre spot rather than failing; callers that
    need to distinguish the two cases should check :func:`is_known_anchor`
    first.

    Parameters
    ----------
    name : str
        Anchor identifier.
    offset : Optional[Position]
        Displacement added to the anchor before clamping.
    debugger : Optional[ResolutionDebugger]
        Receives a warning when the anchor is unknown.

    Returns
    -------
    Position
        Anchor position clamped to the field.
    """
    base = FIELD_ANCHORS.get(name)
    if base is None:
        if debugger is not None:
            debugger.log_error("UNKNOWN_ANCHOR", f"'{name}' is not a known anchor; using {FALLBACK_ANCHOR}")
        base = FIELD_ANCHORS[FALLBACK_ANCHOR]
    if offset is None:
        return base
    return clamp_position(base.x + offset.x, base.y + offset.y)
