from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest
from typer.testing import CliRunner

from mapty_cli.core.models import Coords, Cycling, Running, Workout
from mapty_cli.core.session import FormValues, SessionController, ValidationRules
from mapty_cli.core.storage import MemoryStorage
from mapty_cli.core.store import WorkoutStore


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    data_dir = tmp_path / "mapty-data"
    monkeypatch.setenv("MAPTY_DATA_DIR", str(data_dir))
    monkeypatch.setenv("MAPTY_CONFIG_FILE", str(tmp_path / "missing-config.toml"))
    monkeypatch.setenv("MAPTY_STORAGE_FILE", str(data_dir / "storage.json"))
    monkeypatch.delenv("MAPTY_MAP_OUTPUT", raising=False)
    return data_dir


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


class FakeMap:
    def __init__(self) -> None:
        self.initialized_at: Optional[Tuple[Coords, int]] = None
        self.markers: List[Tuple[Coords, str, str]] = []
        self.views: List[Dict[str, Any]] = []
        self.handler = None

    def initialize(self, coords: Coords, zoom: int) -> None:
        self.initialized_at = (coords, zoom)

    def add_marker(self, coords: Coords, popup: str, style_class: str) -> None:
        self.markers.append((coords, popup, style_class))

    def set_view(self, coords: Coords, zoom: int, animate: bool, pan_duration: float) -> None:
        self.views.append({"coords": coords, "zoom": zoom, "animate": animate, "pan_duration": pan_duration})

    def on_click(self, handler) -> None:  # type: ignore[no-untyped-def]
        self.handler = handler


class FakeList:
    def __init__(self) -> None:
        self.entries: List[Workout] = []

    def render_entry(self, workout: Workout) -> None:
        self.entries.append(workout)

    def clear(self) -> None:
        self.entries = []


class FakeForm:
    def __init__(self, values: Optional[FormValues] = None) -> None:
        self.current = values or FormValues()
        self.visible = False
        self.cleared = 0
        self.kinds: List[str] = []

    def values(self) -> FormValues:
        return self.current

    def clear(self) -> None:
        self.cleared += 1
        self.current = FormValues(kind=self.current.kind)

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False

    def toggle_kind(self, kind: str) -> None:
        self.kinds.append(kind)


class FakeNotifier:
    def __init__(self) -> None:
        self.messages: List[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)


class FakeGeolocator:
    def __init__(self, coords: Optional[Coords] = (38.7223, -9.1393)) -> None:
        self.coords = coords
        self.requests = 0

    def request_current_position(self, on_success, on_failure) -> None:  # type: ignore[no-untyped-def]
        self.requests += 1
        if self.coords is None:
            on_failure()
        else:
            on_success(self.coords)


@pytest.fixture()
def fake_map() -> FakeMap:
    return FakeMap()


@pytest.fixture()
def fake_list() -> FakeList:
    return FakeList()


@pytest.fixture()
def fake_form() -> FakeForm:
    return FakeForm()


@pytest.fixture()
def fake_notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def make_controller(fake_map, fake_list, fake_form, fake_notifier, memory_storage):  # type: ignore[no-untyped-def]
    def _make(
        located: bool = True,
        rules: ValidationRules = ValidationRules(),
    ) -> SessionController:
        return SessionController(
            store=WorkoutStore(),
            storage=memory_storage,
            map_view=fake_map,
            list_renderer=fake_list,
            form=fake_form,
            geolocator=FakeGeolocator() if located else FakeGeolocator(coords=None),
            notifier=fake_notifier,
            rules=rules,
        )

    return _make


@pytest.fixture()
def sample_run() -> Running:
    return Running(
        coords=(40.7128, -74.0060),
        distance=5.0,
        duration=25.0,
        cadence=178.0,
        id="run-1",
        date=datetime(2026, 3, 14, 7, 30),
    )


@pytest.fixture()
def sample_ride() -> Cycling:
    return Cycling(
        coords=(51.5074, -0.1278),
        distance=20.0,
        duration=60.0,
        elevation_gain=150.0,
        id="ride-1",
        date=datetime(2026, 4, 2, 18, 0),
    )
