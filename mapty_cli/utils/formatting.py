"""Formatting helpers used by the map page and console output."""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

from mapty_cli.core.constants import WORKOUT_ICONS
from mapty_cli.core.models import Workout, metric_value


def format_number(value: Optional[float], digits: int = 1) -> str:
    """Format a float with fixed decimals; non-finite values become N/A."""
    if value is None or not math.isfinite(value):
        return "N/A"
    return f"{value:.{digits}f}"


def format_plain(value: float) -> str:
    """Drop a trailing ``.0`` so whole numbers print like the user typed them."""
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return str(value)


def format_coords(coords: Tuple[float, float]) -> str:
    return f"{coords[0]:.4f}, {coords[1]:.4f}"


def workout_details(workout: Workout) -> List[Tuple[str, str, str]]:
    """Return ``(icon, value, unit)`` rows shown for a workout entry."""
    rows = [
        (WORKOUT_ICONS[workout.type], format_plain(workout.distance), "km"),
        ("⏱", format_plain(workout.duration), "min"),
    ]
    if workout.type == "running":
        rows.append(("⚡️", format_number(metric_value(workout)), "min/km"))
        rows.append(("🦶🏼", format_plain(workout.cadence), "spm"))  # type: ignore[union-attr]
    else:
        rows.append(("⚡️", format_number(metric_value(workout)), "km/h"))
        rows.append(("⛰", format_plain(workout.elevation_gain), "m"))  # type: ignore[union-attr]
    return rows


def format_metric(workout: Workout) -> str:
    """Pace or speed with unit, e.g. ``5.0 min/km``."""
    _, value, unit = workout_details(workout)[2]
    return f"{value} {unit}"
