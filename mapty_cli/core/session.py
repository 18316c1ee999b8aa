"""Session state machine tying together the store, storage and renderers.

One ``SessionController`` lives per session. It owns the pending map
selection and the workout store, and drives the collaborators:

* map clicks record a pending coordinate and open the form;
* form submissions are validated, turned into workouts, rendered and
  persisted;
* list activations pan the map to a workout and count the interaction;
* startup restores saved workouts and asks for the user's position.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol

from mapty_cli.core.config import ConfigError
from mapty_cli.core.constants import (
    DEFAULT_PAN_DURATION,
    DEFAULT_ZOOM,
    INVALID_INPUT_MESSAGE,
    LOCATION_FAILED_MESSAGE,
    NO_SELECTION_MESSAGE,
    STORAGE_KEY,
    WORKOUT_ICONS,
    WORKOUT_TYPES,
)
from mapty_cli.core.geolocation import Geolocator
from mapty_cli.core.models import Coords, Workout, create_workout
from mapty_cli.core.storage import Storage
from mapty_cli.core.store import WorkoutStore
from mapty_cli.utils.parsing import parse_finite

logger = logging.getLogger(__name__)

ClickHandler = Callable[[Coords], None]


class MapView(Protocol):
    def initialize(self, coords: Coords, zoom: int) -> None: ...

    def add_marker(self, coords: Coords, popup: str, style_class: str) -> None: ...

    def set_view(self, coords: Coords, zoom: int, animate: bool, pan_duration: float) -> None: ...

    def on_click(self, handler: ClickHandler) -> None: ...


class ListRenderer(Protocol):
    def render_entry(self, workout: Workout) -> None: ...

    def clear(self) -> None: ...


class WorkoutForm(Protocol):
    def values(self) -> "FormValues": ...

    def clear(self) -> None: ...

    def show(self) -> None: ...

    def hide(self) -> None: ...

    def toggle_kind(self, kind: str) -> None: ...


class Notifier(Protocol):
    def notify(self, message: str) -> None: ...


class SessionState(str, Enum):
    IDLE = "idle"
    AWAITING_FORM_SUBMISSION = "awaiting_form_submission"


@dataclass(frozen=True)
class FormValues:
    """Raw form field strings as typed by the user."""

    kind: str = "running"
    distance: str = ""
    duration: str = ""
    cadence: str = ""
    elevation: str = ""


@dataclass(frozen=True)
class ValidationRules:
    """Which positivity checks apply on submission."""

    require_positive_elevation: bool = False

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ValidationRules":
        validation = config.get("validation", {})
        value = validation.get("require_positive_elevation", False)
        if not isinstance(value, bool):
            raise ConfigError(f"[validation] require_positive_elevation must be true or false, got {value!r}")
        return cls(require_positive_elevation=value)


@dataclass(frozen=True)
class ParsedInput:
    kind: str
    distance: float
    duration: float
    metric: float


def validate_form(values: FormValues, rules: ValidationRules = ValidationRules()) -> Optional[ParsedInput]:
    """Parse and check form values; ``None`` means the submission is rejected."""
    if values.kind not in WORKOUT_TYPES:
        return None
    raw_metric = values.cadence if values.kind == "running" else values.elevation
    distance = parse_finite(values.distance)
    duration = parse_finite(values.duration)
    metric = parse_finite(raw_metric)
    if distance is None or duration is None or metric is None:
        return None
    if distance <= 0 or duration <= 0:
        return None
    if values.kind == "running" and metric <= 0:
        return None
    if values.kind == "cycling" and rules.require_positive_elevation and metric <= 0:
        return None
    return ParsedInput(kind=values.kind, distance=distance, duration=duration, metric=metric)


def popup_content(workout: Workout) -> str:
    return f"{WORKOUT_ICONS[workout.type]} {workout.description}"


class SessionController:
    """Event handlers for one interactive session."""

    def __init__(
        self,
        store: WorkoutStore,
        storage: Storage,
        map_view: MapView,
        list_renderer: ListRenderer,
        form: WorkoutForm,
        geolocator: Geolocator,
        notifier: Notifier,
        rules: ValidationRules = ValidationRules(),
        storage_key: str = STORAGE_KEY,
        zoom: int = DEFAULT_ZOOM,
        pan_duration: float = DEFAULT_PAN_DURATION,
    ) -> None:
        self.store = store
        self.storage = storage
        self.map_view = map_view
        self.list_renderer = list_renderer
        self.form = form
        self.geolocator = geolocator
        self.notifier = notifier
        self.rules = rules
        self.storage_key = storage_key
        self.zoom = zoom
        self.pan_duration = pan_duration

        self.state = SessionState.IDLE
        self.pending: Optional[Coords] = None
        self.map_ready = False

    # Startup

    def start(self, locate: bool = True) -> None:
        """Restore saved workouts, then ask for the current position once.

        With ``locate=False`` the map is left alone, for list-only sessions.
        """
        self._restore()
        for workout in self.store.all():
            self.list_renderer.render_entry(workout)
        if not locate:
            return
        self.geolocator.request_current_position(self._load_map, self._location_failed)

    def _restore(self) -> None:
        try:
            raw = self.storage.read(self.storage_key)
        except OSError as exc:
            logger.warning("Could not read stored workouts: %s", exc)
            raw = None
        self.store.restore(raw)

    def _load_map(self, coords: Coords) -> None:
        self.map_view.initialize(coords, self.zoom)
        self.map_view.on_click(self.on_map_click)
        self.map_ready = True
        for workout in self.store.all():
            self._render_marker(workout)

    def _location_failed(self) -> None:
        logger.info("Position unavailable, map stays uninitialized")
        self.notifier.notify(LOCATION_FAILED_MESSAGE)

    # Map and form events

    def on_map_click(self, coords: Coords) -> None:
        """Record the clicked point and present the form; last click wins."""
        self.pending = (float(coords[0]), float(coords[1]))
        self.form.show()
        self.state = SessionState.AWAITING_FORM_SUBMISSION

    def on_kind_change(self, kind: str) -> None:
        self.form.toggle_kind(kind)

    def cancel(self) -> None:
        self.pending = None
        self.form.clear()
        self.form.hide()
        self.state = SessionState.IDLE

    def submit(self, values: Optional[FormValues] = None) -> Optional[Workout]:
        """Validate the form and create a workout at the pending coordinate.

        Returns ``None`` and leaves every piece of state untouched when the
        submission is rejected.
        """
        if self.state is not SessionState.AWAITING_FORM_SUBMISSION or self.pending is None:
            self.notifier.notify(NO_SELECTION_MESSAGE)
            return None

        parsed = validate_form(values or self.form.values(), self.rules)
        if parsed is None:
            self.notifier.notify(INVALID_INPUT_MESSAGE)
            return None

        workout = create_workout(parsed.kind, self.pending, parsed.distance, parsed.duration, parsed.metric)
        self.store.add(workout)
        self._render_marker(workout)
        self.list_renderer.render_entry(workout)
        self.persist()

        self.form.clear()
        self.form.hide()
        self.pending = None
        self.state = SessionState.IDLE
        logger.debug("Created %s workout %s", workout.type, workout.id)
        return workout

    def _render_marker(self, workout: Workout) -> None:
        if not self.map_ready:
            logger.debug("Map not ready, skipping marker for %s", workout.id)
            return
        self.map_view.add_marker(workout.coords, popup_content(workout), f"{workout.type}-popup")

    # List events

    def on_list_activate(self, workout_id: str) -> Optional[Workout]:
        """Pan to the selected workout; unknown ids are ignored."""
        workout = self.store.find_by_id(workout_id)
        if workout is None:
            return None
        if self.map_ready:
            self.map_view.set_view(workout.coords, self.zoom, animate=True, pan_duration=self.pan_duration)
        workout.click()
        self.persist()
        return workout

    # Persistence

    def persist(self) -> None:
        self.storage.write(self.storage_key, self.store.serialize())

    def reset(self, locate: bool = True) -> None:
        """Drop persisted workouts and start over from an empty session."""
        self.storage.remove(self.storage_key)
        self.store.clear()
        self.list_renderer.clear()
        self.pending = None
        self.form.clear()
        self.form.hide()
        self.state = SessionState.IDLE
        self.map_ready = False
        logger.info("Session reset, stored workouts removed")
        self.start(locate=locate)
