"""Workout records: running and cycling variants of one tagged union."""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Union

from mapty_cli.core.constants import MONTHS

Coords = Tuple[float, float]


def new_workout_id() -> str:
    """Return a fresh random workout identifier."""
    return uuid.uuid4().hex


def describe(kind: str, when: datetime) -> str:
    """Build the human label, e.g. ``Running on October 19``."""
    return f"{kind[0].upper()}{kind[1:]} on {MONTHS[when.month - 1]} {when.day}"


@dataclass
class Running:
    """A run; ``pace`` is minutes per kilometer."""

    coords: Coords
    distance: float
    duration: float
    cadence: float
    id: str = field(default_factory=new_workout_id)
    date: datetime = field(default_factory=datetime.now)
    description: str = ""
    pace: Optional[float] = None
    clicks: int = 0
    type: str = field(default="running", init=False)

    def __post_init__(self) -> None:
        if self.pace is None:
            self.pace = _divide(self.duration, self.distance)
        if not self.description:
            self.description = describe(self.type, self.date)

    def click(self) -> int:
        self.clicks += 1
        return self.clicks


@dataclass
class Cycling:
    """A ride; ``speed`` is kilometers per hour."""

    coords: Coords
    distance: float
    duration: float
    elevation_gain: float
    id: str = field(default_factory=new_workout_id)
    date: datetime = field(default_factory=datetime.now)
    description: str = ""
    speed: Optional[float] = None
    clicks: int = 0
    type: str = field(default="cycling", init=False)

    def __post_init__(self) -> None:
        if self.speed is None:
            self.speed = _divide(self.distance, self.duration / 60)
        if not self.description:
            self.description = describe(self.type, self.date)

    def click(self) -> int:
        self.clicks += 1
        return self.clicks


Workout = Union[Running, Cycling]


def _divide(numerator: float, denominator: float) -> float:
    # Unvalidated input must not raise here; follow IEEE semantics instead.
    try:
        return numerator / denominator
    except ZeroDivisionError:
        if numerator > 0:
            return float("inf")
        if numerator < 0:
            return float("-inf")
        return float("nan")


def create_workout(
    kind: str,
    coords: Coords,
    distance: float,
    duration: float,
    metric: float,
    now: Optional[datetime] = None,
) -> Workout:
    """Build the variant for ``kind``; ``metric`` is cadence or elevation gain.

    No validation happens here, callers are expected to check inputs first.
    """
    when = now or datetime.now()
    coords = (float(coords[0]), float(coords[1]))
    if kind == "running":
        return Running(coords=coords, distance=distance, duration=duration, cadence=metric, date=when)
    if kind == "cycling":
        return Cycling(
            coords=coords,
            distance=distance,
            duration=duration,
            elevation_gain=metric,
            date=when,
        )
    raise ValueError(f"Unknown workout type: {kind!r}")


def metric_value(workout: Workout) -> float:
    """Return the derived metric (pace or speed) of a workout."""
    if workout.type == "running":
        return float(workout.pace)  # type: ignore[union-attr]
    return float(workout.speed)  # type: ignore[union-attr]


def workout_to_dict(workout: Workout) -> Dict[str, Any]:
    """Flatten a workout to a JSON-ready attribute bag."""
    data = asdict(workout)
    data["coords"] = [workout.coords[0], workout.coords[1]]
    data["date"] = workout.date.isoformat()
    return data


def workout_from_dict(data: Dict[str, Any]) -> Workout:
    """Rebuild a typed workout from its stored attribute bag.

    Stored ``pace``/``speed`` and ``description`` are kept as-is, never
    recomputed. Raises ``KeyError``/``ValueError``/``TypeError`` on bad data.
    """
    kind = data["type"]
    lat, lng = data["coords"]
    common: Dict[str, Any] = {
        "coords": (float(lat), float(lng)),
        "distance": float(data["distance"]),
        "duration": float(data["duration"]),
        "id": str(data["id"]),
        "date": datetime.fromisoformat(str(data["date"]).replace("Z", "+00:00")),
        "description": str(data.get("description") or ""),
        "clicks": int(data.get("clicks", 0)),
    }
    if kind == "running":
        return Running(
            cadence=float(data["cadence"]),
            pace=_optional_float(data.get("pace")),
            **common,
        )
    if kind == "cycling":
        # Older payloads used the camelCase key.
        elevation = data["elevation_gain"] if "elevation_gain" in data else data["elevationGain"]
        return Cycling(
            elevation_gain=float(elevation),
            speed=_optional_float(data.get("speed")),
            **common,
        )
    raise ValueError(f"Unknown workout type: {kind!r}")


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)
