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
"""Central configuration for resolution tuning parameters."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(slots=True)
class FieldConfig:
    """Normalised field geometry shared by every calculator.

    Parameters
    ----------
    min_coord : float, default=0.0
        Lower bound of both axes.
    max_coord : float, default=100.0
        Upper bound of both axes.
    halfway_x : float, default=50.0
        X coordinate of the centre line separating the two halves.
    goal_center_y : float, default=50.0
        Y coordinate of both goal mouths.
    goal_half_width : float, default=3.33
        Half the goal mouth width in y units (3.66 m on a 55 m wide field).
    d_radius_x : float, default=16.0
        Shooting-circle radius expressed in x units (14.63 m over 91.4 m).
    d_radius_y : float, default=26.6
        Shooting-circle radius expressed in y units (14.63 m over 55 m).
    left_23m_x : float, default=25.0
        X coordinate of the 23 metre line in front of the left goal.
    right_23m_x : float, default=75.0
        X coordinate of the 23 metre line in front of the right goal.
    parking_start_y : float, default=10.0
        First y coordinate used when parking unused players on a sideline.
    parking_step_y : float, default=5.0
        Vertical stagger between consecutive parked players.
    """

    min_coord: float = 0.0
    max_coord: float = 100.0
    halfway_x: float = 50.0
    goal_center_y: float = 50.0
    goal_half_width: float = 3.33
    d_radius_x: float = 16.0
    d_radius_y: float = 26.6
    left_23m_x: float = 25.0
    right_23m_x: float = 75.0
    parking_start_y: float = 10.0
    parking_step_y: float = 5.0


@dataclass(slots=True)
class ShapeConfig:
    """Defaults applied when a shape request omits optional geometry.

    Parameters
    ----------
    default_center : Tuple[float, float], default=(50.0, 50.0)
        Centre used by circles and grids.
    default_radius : float, default=25.0
        Circle radius.
    default_line_start : Tuple[float, float], default=(10.0, 50.0)
        First endpoint of a line.
    default_line_end : Tuple[float, float], default=(90.0, 50.0)
        Second endpoint of a line.
    grid_spacing : float, default=10.0
        Distance between neighbouring grid cells on both axes.
    """

    default_center: Tuple[float, float] = (50.0, 50.0)
    default_radius: float = 25.0
    default_line_start: Tuple[float, float] = (10.0, 50.0)
    default_line_end: Tuple[float, float] = (90.0, 50.0)
    grid_spacing: float = 10.0


@dataclass(slots=True)
class SetPieceConfig:
    """Reference coordinates for penalty corners and shootouts.

    Parameters
    ----------
    goalkeeper_depth : float, default=5.0
        Distance from the goal line for an attacking goalkeeper at home.
    injector_backline_inset : float, default=0.5
        Distance the injector stands inside the backline.
    injector_post_offset : float, default=10.0
        Distance between the injector and the nearest post.
    battery_slots : Dict[str, float]
        Y coordinate for each named battery location.
    hitter_offset : float, default=1.5
        Distance the hitter stands behind the stopper.
    troop_preferred_y : Tuple[float, ...]
        Preferred y offsets around the arc for the troop.
    battery_clearance : float, default=6.0
        Troop slots closer than this to a battery are skipped.
    troop_jitter : float, default=2.0
        Vertical jitter applied per wrap when the troop outnumbers slots.
    default_runner_count : int, default=4
        Runners used by a defensive corner when unspecified.
    runner_slots : Tuple[float, ...], default=(48.0, 52.0, 46.0, 54.0)
        Goal-line y coordinates for the near-post, far-post and deep runners.
    extra_runner_depth : float, default=4.0
        Distance off the goal line for runners beyond the fixed slots.
    halfway_start_y : float, default=30.0
        First y coordinate for defenders retreating to the halfway line.
    halfway_step_y : float, default=5.0
        Spacing between retreating defenders.
    shootout_column_size : int, default=15
        Players per column when stacking idle players for a shootout.
    shootout_start_y : float, default=15.0
        First y coordinate of the idle shootout stack.
    shootout_step : float, default=5.0
        Spacing between idle players, vertically and between columns.
    """

    goalkeeper_depth: float = 5.0
    injector_backline_inset: float = 0.5
    injector_post_offset: float = 10.0
    battery_slots: Dict[str, float] = field(
        default_factory=lambda: {"top": 50.0, "right": 65.0, "left": 35.0}
    )
    hitter_offset: float = 1.5
    troop_preferred_y: Tuple[float, ...] = (25.0, 30.0, 35.0, 40.0, 45.0, 55.0, 60.0, 70.0, 75.0)
    battery_clearance: float = 6.0
    troop_jitter: float = 2.0
    default_runner_count: int = 4
    runner_slots: Tuple[float, ...] = (48.0, 52.0, 46.0, 54.0)
    extra_runner_depth: float = 4.0
    halfway_start_y: float = 30.0
    halfway_step_y: float = 5.0
    shootout_column_size: int = 15
    shootout_start_y: float = 15.0
    shootout_step: float = 5.0


@dataclass(slots=True)
class DrillConfig:
    """Zone boundaries and spread factors for small-sided drills.

    Parameters
    ----------
    zone_x_bounds : Dict[str, Tuple[float, float]]
        Horizontal extent of each named drill zone.
    attacker_spread_x : float, default=0.6
        Fraction of the zone width used by the attacking arc.
    attacker_spread_y : float, default=0.8
        Fraction of the zone height used by the attacking arc.
    attacker_inset : float, default=0.2
        Fraction of the zone width between the zone start and the arc.
    defender_spread_y : float, default=0.4
        Fraction of the zone height used by the defensive band.
    defender_depth : float, default=0.2
        Fraction of the zone width between the zone centre and the band.
    parking_step : float, default=4.0
        Spacing between parked players along a sideline.
    """

    zone_x_bounds: Dict[str, Tuple[float, float]] = field(
        default_factory=lambda: {
            "attacking_25": (75.0, 100.0),
            "midfield": (33.0, 66.0),
            "defensive_circle": (0.0, 25.0),
            "full_field": (0.0, 100.0),
        }
    )
    attacker_spread_x: float = 0.6
    attacker_spread_y: float = 0.8
    attacker_inset: float = 0.2
    defender_spread_y: float = 0.4
    defender_depth: float = 0.2
    parking_step: float = 4.0


@dataclass(slots=True)
class PhaseConfig:
    """Settings shared by outlet, press and formation structures.

    Parameters
    ----------
    goalkeeper_x : float, default=5.0
        X coordinate of the goalkeeper in the red team's orientation.
    press_intensity_push : float, default=20.0
        Maximum up-field shift applied at full press intensity.
    outlet_fallback : str, default="back_4"
        Outlet structure used when a requested name is unknown.
    press_fallback : str, default="half_court"
        Press structure used when a requested name is unknown.
    """

    goalkeeper_x: float = 5.0
    press_intensity_push: float = 20.0
    outlet_fallback: str = "back_4"
    press_fallback: str = "half_court"


@dataclass(slots=True)
class SessionConfig:
    """Local layout parameters for training-session activities.

    Parameters
    ----------
    ring_radius : float, default=6.0
        Radius of the ring used by rondo, possession and technical activities.
    line_offset : float, default=5.0
        Distance from the activity centre to each small-sided team line.
    line_spacing : float, default=4.0
        Spacing between players standing in a line or shuttle column.
    goalkeeper_offset : float, default=10.0
        Distance from the activity centre to each small-sided goalkeeper.
    cone_radius : float, default=5.0
        Radius of the cone ring around the activity centre.
    cone_color : str, default="#FFD700"
        Colour assigned to generated cones.
    mini_goal_offset : float, default=4.0
        Horizontal distance between a mini goal and the activity centre.
    coach_offset : float, default=3.0
        Distance above the activity centre where coaches stand.
    """

    ring_radius: float = 6.0
    line_offset: float = 5.0
    line_spacing: float = 4.0
    goalkeeper_offset: float = 10.0
    cone_radius: float = 5.0
    cone_color: str = "#FFD700"
    mini_goal_offset: float = 4.0
    coach_offset: float = 3.0


@dataclass(slots=True)
class OverlapConfig:
    """Relaxation parameters for the overlap resolver.

    Parameters
    ----------
    min_distance : float, default=4.0
        Minimum separation enforced between entities.
    max_iterations : int, default=10
        Hard cap on relaxation passes.
    coincident_nudge : float, default=1.0
        Horizontal nudge applied when two movers share a position.
    """

    min_distance: float = 4.0
    max_iterations: int = 10
    coincident_nudge: float = 1.0


@dataclass(slots=True)
class MatchingConfig:
    """Saved-tactic matching and memoisation settings.

    Parameters
    ----------
    cache_ttl : float, default=300.0
        Seconds a semantic verdict stays valid in the cache.
    cache_max_entries : int, default=128
        Maximum number of memoised commands.
    timeout : float, default=8.0
        Seconds to wait for the semantic collaborator before falling back.
    model : str, default="gemini-2.0-flash"
        Model requested from the semantic collaborator.
    api_key_env : str, default="GEMINI_API_KEY"
        Environment variable holding the collaborator API key.
    base_url : str
        Root URL of the collaborator API.
    max_retries : int, default=2
        Attempts made by the HTTP matcher for transient failures.
    retry_delay : float, default=0.5
        Base delay for exponential backoff between retries.
    keyword_min_score : int, default=1
        Minimum keyword overlap before the fallback reports a match.
    """

    cache_ttl: float = 300.0
    cache_max_entries: int = 128
    timeout: float = 8.0
    model: str = "gemini-2.0-flash"
    api_key_env: str = "GEMINI_API_KEY"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    max_retries: int = 2
    retry_delay: float = 0.5
    keyword_min_score: int = 1


@dataclass(slots=True)
class EngineConfig:
    """Top-level container for all resolution tuning structures.

    Parameters
    ----------
    field : FieldConfig, default=FieldConfig()
        Field geometry.
    shapes : ShapeConfig, default=ShapeConfig()
        Shape generator defaults.
    set_piece : SetPieceConfig, default=SetPieceConfig()
        Penalty corner and shootout references.
    drill : DrillConfig, default=DrillConfig()
        Drill zones and spreads.
    phase : PhaseConfig, default=PhaseConfig()
        Outlet, press and formation settings.
    session : SessionConfig, default=SessionConfig()
        Training-session activity layouts.
    overlap : OverlapConfig, default=OverlapConfig()
        Overlap resolver tuning.
    matching : MatchingConfig, default=MatchingConfig()
        Saved-tactic matching settings.
    """

    field: FieldConfig = dataclasses.field(default_factory=FieldConfig)
    shapes: ShapeConfig = dataclasses.field(default_factory=ShapeConfig)
    set_piece: SetPieceConfig = dataclasses.field(default_factory=SetPieceConfig)
    drill: DrillConfig = dataclasses.field(default_factory=DrillConfig)
    phase: PhaseConfig = dataclasses.field(default_factory=PhaseConfig)
    session: SessionConfig = dataclasses.field(default_factory=SessionConfig)
    overlap: OverlapConfig = dataclasses.field(default_factory=OverlapConfig)
    matching: MatchingConfig = dataclasses.field(default_factory=MatchingConfig)


ENGINE_CONFIG = EngineConfig()
"""Singleton-style access to the engine configuration."""
