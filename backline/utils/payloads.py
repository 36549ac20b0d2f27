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
"""Utilities for building requests, boards and tactics from serialized data.

The helpers translate plain dictionaries or JSON documents into the frozen
domain objects the orchestrator understands. Keys are accepted in either
``snake_case`` or the ``camelCase`` used by the board front end, so payloads
produced by the UI can be fed in unchanged. Missing optional values fall back
to the dataclass defaults; malformed values raise :class:`PayloadError`.
"""
import json
import math
from dataclasses import fields
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from backline.engine.geometry import Position
from backline.models.entities import Ball, BoardState, Equipment, Move, Player
from backline.models.requests import (
    Activity,
    ActivityLocation,
    CompositeRequest,
    EntityRequest,
    MoveRequest,
    ResolutionRequest,
    ShapeRequest,
    TacticReplayRequest,
    TemplateParameters,
    TemplateRequest,
    TrainingSessionRequest,
)
from backline.models.tactic import RelativePosition, SavedTactic, TacticMetadata


class PayloadError(ValueError):
    """Raised when a payload cannot be converted into a domain object.

    Parameters
    ----------
    message : str
        Description of the malformed value.
    """

    def __init__(self, message: str) -> None:
        """Create the error.

        Parameters
        ----------
        message : str
            Description of the malformed value.
        """
        super().__init__(message)


def _camel(name: str) -> str:
    """Convert a ``snake_case`` key to ``camelCase``.

    Parameters
    ----------
    name : str
        Snake-case key.

    Returns
    -------
    str
        Camel-case spelling.
    """
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _get(d: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """Read ``key`` from ``d`` in snake or camel case.

    Parameters
    ----------
    d : Mapping[str, Any]
        Source mapping.
    key : str
        Snake-case key.
    default : Any
        Value returned when neither spelling is present.

    Returns
    -------
    Any
        Stored value or ``default``.
    """
    if key in d:
        return d[key]
    return d.get(_camel(key), default)


def _require(d: Mapping[str, Any], key: str, context: str) -> Any:
    """Read a mandatory key.

    Parameters
    ----------
    d : Mapping[str, Any]
        Source mapping.
    key : str
        Snake-case key.
    context : str
        Name of the object being parsed, for the error message.

    Returns
    -------
    Any
        Stored value.

    Raises
    ------
    PayloadError
        If the key is missing.
    """
    value = _get(d, key)
    if value is None:
        raise PayloadError(f"{context} is missing required field '{key}'")
    return value


def _mapping(value: Any, context: str) -> Mapping[str, Any]:
    """Check that ``value`` is a mapping.

    Parameters
    ----------
    value : Any
        Value to check.
    context : str
        Name of the object being parsed.

    Returns
    -------
    Mapping[str, Any]
        ``value`` unchanged.

    Raises
    ------
    PayloadError
        If ``value`` is not a mapping.
    """
    if not isinstance(value, Mapping):
        raise PayloadError(f"{context} must be an object, got {type(value).__name__}")
    return value


def position_from_dict(d: Any, context: str = "position") -> Position:
    """Build a :class:`Position` from ``{"x": .., "y": ..}``.

    Parameters
    ----------
    d : Any
        Mapping with numeric ``x`` and ``y``.
    context : str, default="position"
        Name used in error messages.

    Returns
    -------
    Position
        Parsed position; bounds are checked later by validation.

    Raises
    ------
    PayloadError
        If a coordinate is missing or not a finite number.
    """
    d = _mapping(d, context)
    coords = []
    for axis in ("x", "y"):
        value = d.get(axis)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise PayloadError(f"{context} has an invalid '{axis}' coordinate: {value!r}")
        coords.append(float(value))
    return Position(coords[0], coords[1])


def _optional_position(d: Mapping[str, Any], key: str) -> Optional[Position]:
    """Parse an optional position field.

    Parameters
    ----------
    d : Mapping[str, Any]
        Source mapping.
    key : str
        Snake-case key.

    Returns
    -------
    Optional[Position]
        Parsed position, or ``None`` when absent.
    """
    value = _get(d, key)
    return None if value is None else position_from_dict(value, key)


def player_from_dict(d: Mapping[str, Any], team: str) -> Player:
    """Build a :class:`Player` from a plain dictionary payload.

    Parameters
    ----------
    d : Mapping[str, Any]
        Serialized player with ``id``, ``number``, ``position`` and an
        optional ``isGoalkeeper`` flag.
    team : str
        Team the player is listed under; overrides a missing ``team`` key.

    Returns
    -------
    Player
        Parsed player.

    Raises
    ------
    PayloadError
        If the id or position is missing or malformed.
    """
    d = _mapping(d, "player")
    player_id = str(_require(d, "id", "player"))
    try:
        return Player(
            id=player_id,
            team=_get(d, "team", team),
            number=int(_get(d, "number", 0)),
            position=position_from_dict(_require(d, "position", f"player {player_id}"), f"player {player_id}"),
            is_goalkeeper=bool(_get(d, "is_goalkeeper", False)),
        )
    except (TypeError, ValueError) as exc:
        if isinstance(exc, PayloadError):
            raise
        raise PayloadError(f"Invalid player {player_id}: {exc}") from exc


def board_from_dict(d: Mapping[str, Any]) -> BoardState:
    """Build a :class:`BoardState` from the board payload.

    Parameters
    ----------
    d : Mapping[str, Any]
        Mapping with ``redTeam``, ``blueTeam``, ``balls`` (or a single
        ``ball``), ``equipment`` and ``mode``.

    Returns
    -------
    BoardState
        Immutable board snapshot.

    Raises
    ------
    PayloadError
        If any entity is malformed or identifiers collide.
    """
    d = _mapping(d, "board")
    red = [player_from_dict(item, "red") for item in _get(d, "red_team", []) or []]
    blue = [player_from_dict(item, "blue") for item in _get(d, "blue_team", []) or []]

    raw_balls = _get(d, "balls")
    if raw_balls is None:
        single = _get(d, "ball")
        raw_balls = [single] if single is not None else []
    balls = []
    for index, item in enumerate(raw_balls):
        item = _mapping(item, "ball")
        ball_id = str(item.get("id", "ball" if index == 0 else f"ball_{index + 1}"))
        balls.append(Ball(ball_id, position_from_dict(_require(item, "position", ball_id), ball_id)))

    equipment = []
    for item in _get(d, "equipment", []) or []:
        item = _mapping(item, "equipment")
        equipment_id = str(_require(item, "id", "equipment"))
        equipment.append(
            Equipment(
                id=equipment_id,
                type=_require(item, "type", equipment_id),
                position=position_from_dict(_require(item, "position", equipment_id), equipment_id),
                color=item.get("color"),
                rotation=item.get("rotation"),
            )
        )

    try:
        return BoardState(red, blue, balls, equipment, _get(d, "mode", "game"))
    except ValueError as exc:
        raise PayloadError(str(exc)) from exc


def move_from_dict(d: Mapping[str, Any]) -> Move:
    """Build a :class:`Move` from ``{"targetId", "newPosition", "explanation"}``.

    Parameters
    ----------
    d : Mapping[str, Any]
        Serialized move.

    Returns
    -------
    Move
        Parsed move.
    """
    d = _mapping(d, "move")
    target_id = str(_require(d, "target_id", "move"))
    position = position_from_dict(_require(d, "new_position", f"move {target_id}"), f"move {target_id}")
    return Move(target_id, position, _get(d, "explanation"))


def shape_from_dict(d: Mapping[str, Any]) -> ShapeRequest:
    """Build a :class:`ShapeRequest`.

    Parameters
    ----------
    d : Mapping[str, Any]
        Serialized shape with ``type``, ``players`` and optional geometry.

    Returns
    -------
    ShapeRequest
        Parsed shape request.
    """
    d = _mapping(d, "shape")
    return ShapeRequest(
        type=_require(d, "type", "shape"),
        players=tuple(str(player) for player in _get(d, "players", []) or []),
        center=_optional_position(d, "center"),
        radius=_get(d, "radius"),
        start=_optional_position(d, "start"),
        end=_optional_position(d, "end"),
        rows=_get(d, "rows"),
        cols=_get(d, "cols"),
    )


_PARAMETER_ALIASES: Dict[str, str] = {"withGK": "with_gk", "gkId": "gk_id"}


def parameters_from_dict(d: Optional[Mapping[str, Any]]) -> TemplateParameters:
    """Build :class:`TemplateParameters`, ignoring unknown keys.

    Parameters
    ----------
    d : Optional[Mapping[str, Any]]
        Serialized parameters; ``None`` yields the defaults.

    Returns
    -------
    TemplateParameters
        Parsed parameters.
    """
    if d is None:
        return TemplateParameters()
    d = _mapping(d, "parameters")
    values: Dict[str, Any] = {}
    for item in fields(TemplateParameters):
        value = _get(d, item.name)
        if value is None:
            alias = next((key for key, name in _PARAMETER_ALIASES.items() if name == item.name), None)
            value = d.get(alias) if alias else None
        if value is not None:
            values[item.name] = tuple(value) if item.name == "game_zones" else value
    return TemplateParameters(**values)


def template_from_dict(d: Mapping[str, Any]) -> TemplateRequest:
    """Build a :class:`TemplateRequest`.

    Parameters
    ----------
    d : Mapping[str, Any]
        Serialized template with ``kind`` (or ``templateType``), ``team``,
        ``structure`` and ``parameters``.

    Returns
    -------
    TemplateRequest
        Parsed template request.
    """
    d = _mapping(d, "template")
    kind = _get(d, "kind") or _require(d, "template_type", "template")
    return TemplateRequest(
        kind=kind,
        team=_get(d, "team", "red"),
        structure=_get(d, "structure"),
        parameters=parameters_from_dict(_get(d, "parameters")),
        explanation=_get(d, "explanation"),
    )


def activity_from_dict(d: Mapping[str, Any]) -> Activity:
    """Build an :class:`Activity`.

    Parameters
    ----------
    d : Mapping[str, Any]
        Serialized activity. ``location`` holds either ``anchor`` plus an
        optional ``offset`` or an absolute ``center``.

    Returns
    -------
    Activity
        Parsed activity.
    """
    d = _mapping(d, "activity")
    activity_id = str(_require(d, "id", "activity"))
    location = _mapping(_get(d, "location", {}) or {}, f"location of {activity_id}")
    entities = []
    for item in _get(d, "entities", []) or []:
        item = _mapping(item, f"entity of {activity_id}")
        count = _require(item, "count", f"entity of {activity_id}")
        if isinstance(count, bool) or not isinstance(count, int):
            raise PayloadError(f"Entity count for {activity_id} must be an integer, got {count!r}")
        entities.append(EntityRequest(_require(item, "type", activity_id), count, item.get("team"), item.get("behavior")))
    return Activity(
        id=activity_id,
        name=_get(d, "name", activity_id),
        template_type=_require(d, "template_type", activity_id),
        location=ActivityLocation(
            anchor=_get(location, "anchor", "center_spot"),
            offset=_optional_position(location, "offset"),
            center=_optional_position(location, "center"),
        ),
        entities=tuple(entities),
        attributes=dict(_get(d, "attributes", {}) or {}),
    )


def session_from_dict(d: Mapping[str, Any]) -> TrainingSessionRequest:
    """Build a :class:`TrainingSessionRequest`.

    Parameters
    ----------
    d : Mapping[str, Any]
        Serialized session with ``activities``, ``pitchView`` and
        ``explanation``.

    Returns
    -------
    TrainingSessionRequest
        Parsed session request.
    """
    d = _mapping(d, "session")
    activities = tuple(activity_from_dict(item) for item in _require(d, "activities", "session"))
    return TrainingSessionRequest(activities, _get(d, "pitch_view", "full_pitch"), _get(d, "explanation", ""))


def _move_request(d: Mapping[str, Any]) -> MoveRequest:
    """Build a :class:`MoveRequest`.

    Parameters
    ----------
    d : Mapping[str, Any]
        Payload with ``moves`` and ``explanation``.

    Returns
    -------
    MoveRequest
        Parsed request.
    """
    return MoveRequest(tuple(move_from_dict(item) for item in _get(d, "moves", []) or []), _get(d, "explanation", ""))


def _composite_request(d: Mapping[str, Any]) -> CompositeRequest:
    """Build a :class:`CompositeRequest`.

    Parameters
    ----------
    d : Mapping[str, Any]
        Payload with ``shapes``, ``moves`` and ``explanation``.

    Returns
    -------
    CompositeRequest
        Parsed request.
    """
    return CompositeRequest(
        shapes=tuple(shape_from_dict(item) for item in _get(d, "shapes", []) or []),
        moves=tuple(move_from_dict(item) for item in _get(d, "moves", []) or []),
        explanation=_get(d, "explanation", ""),
    )


def _replay_request(d: Mapping[str, Any]) -> TacticReplayRequest:
    """Build a :class:`TacticReplayRequest`.

    Parameters
    ----------
    d : Mapping[str, Any]
        Payload with ``tacticId`` or ``command`` plus ``team`` and ``mirror``.

    Returns
    -------
    TacticReplayRequest
        Parsed request.
    """
    return TacticReplayRequest(
        tactic_id=_get(d, "tactic_id"),
        command=_get(d, "command"),
        team=_get(d, "team"),
        mirror=bool(_get(d, "mirror", False)),
    )


REQUEST_PARSERS: Dict[str, Callable[[Mapping[str, Any]], ResolutionRequest]] = {
    "move": _move_request,
    "shape": shape_from_dict,
    "composite": _composite_request,
    "template": template_from_dict,
    "training_session": session_from_dict,
    "tactic_replay": _replay_request,
}


def request_from_dict(d: Mapping[str, Any]) -> ResolutionRequest:
    """Build any resolution request from a payload tagged with ``request``.

    Parameters
    ----------
    d : Mapping[str, Any]
        Payload whose ``request`` key names the request kind.

    Returns
    -------
    ResolutionRequest
        Parsed request.

    Raises
    ------
    PayloadError
        If the request kind is unknown.
    """
    d = _mapping(d, "request")
    kind = d.get("request")
    try:
        parser = REQUEST_PARSERS[kind]
    except KeyError as exc:
        known = ", ".join(REQUEST_PARSERS)
        raise PayloadError(f"Unknown request kind '{kind}'. Known kinds: {known}") from exc
    return parser(d)


def tactic_from_dict(d: Mapping[str, Any]) -> SavedTactic:
    """Build a :class:`SavedTactic` from its stored form.

    Parameters
    ----------
    d : Mapping[str, Any]
        Serialized tactic with ``id``, ``name``, ``tags``, ``type``,
        ``positions`` and optional ``metadata``.

    Returns
    -------
    SavedTactic
        Parsed tactic.
    """
    d = _mapping(d, "tactic")
    tactic_id = str(_require(d, "id", "tactic"))
    positions: List[RelativePosition] = []
    for item in _get(d, "positions", []) or []:
        item = _mapping(item, f"position of {tactic_id}")
        point = position_from_dict(item, f"position of {tactic_id}")
        positions.append(
            RelativePosition(
                team=_require(item, "team", tactic_id),
                role=_require(item, "role", tactic_id),
                relative_index=int(_get(item, "relative_index", 0)),
                x=point.x,
                y=point.y,
            )
        )
    metadata = None
    raw_meta = _get(d, "metadata")
    if raw_meta:
        raw_meta = _mapping(raw_meta, f"metadata of {tactic_id}")
        metadata = TacticMetadata(
            primary_team=_get(raw_meta, "primary_team"),
            phase=_get(raw_meta, "phase"),
            is_apc=bool(raw_meta.get("isAPC", raw_meta.get("is_apc", False))),
            is_dpc=bool(raw_meta.get("isDPC", raw_meta.get("is_dpc", False))),
            is_outlet=bool(_get(raw_meta, "is_outlet", False)),
            is_press=bool(_get(raw_meta, "is_press", False)),
            structure=_get(raw_meta, "structure"),
        )
    return SavedTactic(
        id=tactic_id,
        name=_get(d, "name", tactic_id),
        tags=tuple(_get(d, "tags", []) or []),
        type=_get(d, "type", "full_scenario"),
        positions=tuple(positions),
        metadata=metadata,
    )


def load_tactics_from_json(path: str) -> Tuple[SavedTactic, ...]:
    """Load a saved-tactic library from a JSON document.

    Parameters
    ----------
    path : str
        Filesystem path to a JSON list of tactics, or an object with a
        ``tactics`` list.

    Returns
    -------
    Tuple[SavedTactic, ...]
        Parsed tactics in file order.

    Raises
    ------
    FileNotFoundError
        Raised when ``path`` does not exist.
    PayloadError
        Raised when a tactic is malformed.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Tactics JSON not found: {path}")

    with p.open("r", encoding="utf-8") as fh:
        data = json.load(fh)

    items = data.get("tactics", []) if isinstance(data, dict) else data
    return tuple(tactic_from_dict(item) for item in items)
