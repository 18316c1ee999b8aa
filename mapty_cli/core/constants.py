"""Static constants and mappings for Mapty CLI."""

from __future__ import annotations

# prettier month names, indexed by ``date.month - 1``
MONTHS = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

WORKOUT_TYPES = ("running", "cycling")

WORKOUT_ICONS = {"running": "🏃‍♂️", "cycling": "🚴‍♀️"}

METRIC_FIELDS = {"running": "cadence", "cycling": "elevation"}

STORAGE_KEY = "workouts"

DEFAULT_ZOOM = 13
DEFAULT_PAN_DURATION = 1.0

TILE_URL = "https://{s}.tile.openstreetmap.fr/hot/{z}/{x}/{y}.png"
TILE_ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
)

LOCATION_LOOKUP_URL = "https://ipapi.co/json/"

INVALID_INPUT_MESSAGE = "Inputs have to be positive numbers!"
NO_SELECTION_MESSAGE = "Pick a location on the map first"
LOCATION_FAILED_MESSAGE = "Could not get your position"
