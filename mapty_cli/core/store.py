"""Ordered in-memory collection of workouts and its persisted form."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from mapty_cli.core.models import Workout, workout_from_dict, workout_to_dict

logger = logging.getLogger(__name__)


class WorkoutStore:
    """Workouts in insertion order; the whole sequence is persisted at once."""

    def __init__(self) -> None:
        self._workouts: List[Workout] = []

    def __len__(self) -> int:
        return len(self._workouts)

    def __iter__(self) -> Iterator[Workout]:
        return iter(tuple(self._workouts))

    def add(self, workout: Workout) -> None:
        self._workouts.append(workout)

    def all(self) -> Tuple[Workout, ...]:
        return tuple(self._workouts)

    def find_by_id(self, workout_id: str) -> Optional[Workout]:
        for workout in self._workouts:
            if workout.id == workout_id:
                return workout
        return None

    def clear(self) -> None:
        self._workouts = []

    def to_payload(self) -> List[Dict[str, Any]]:
        return [workout_to_dict(workout) for workout in self._workouts]

    def serialize(self) -> str:
        """Return the JSON document written to storage."""
        return json.dumps(self.to_payload())

    def restore(self, raw: Any) -> int:
        """Replace contents from a serialized payload; return the record count.

        Absent or malformed payloads leave the store empty and never raise.
        """
        self._workouts = []
        if raw is None or raw == "":
            return 0

        payload = raw
        if isinstance(raw, (str, bytes)):
            try:
                payload = json.loads(raw)
            except ValueError as exc:
                logger.warning("Discarding stored workouts, invalid JSON: %s", exc)
                return 0

        if not isinstance(payload, list):
            logger.warning("Discarding stored workouts, expected a list not %s", type(payload).__name__)
            return 0

        restored: List[Workout] = []
        for index, item in enumerate(payload):
            if not isinstance(item, dict):
                logger.warning("Discarding stored workouts, entry %d is not an object", index)
                return 0
            try:
                restored.append(workout_from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Discarding stored workouts, entry %d is malformed: %r", index, exc)
                return 0

        self._workouts = restored
        logger.debug("Restored %d workouts", len(restored))
        return len(restored)
