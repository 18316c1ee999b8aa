"""Shared command helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

import typer

from mapty_cli.core.config import ConfigError
from mapty_cli.core.constants import DEFAULT_PAN_DURATION, DEFAULT_ZOOM, STORAGE_KEY, TILE_ATTRIBUTION, TILE_URL
from mapty_cli.core.geolocation import Geolocator, geolocator_from_config
from mapty_cli.core.models import Coords, Workout
from mapty_cli.core.session import FormValues, ListRenderer, SessionController, ValidationRules
from mapty_cli.core.state import CLIState
from mapty_cli.core.storage import JsonFileStorage
from mapty_cli.core.store import WorkoutStore
from mapty_cli.exporters.leaflet import LeafletMap
from mapty_cli.ui.console import ConsoleListRenderer, ConsoleNotifier, PromptForm


def get_state(ctx: typer.Context) -> CLIState:
    """Extract validated CLI state from Typer context."""
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=2)
    return state


def print_json_payload(state: CLIState, payload: Any) -> None:
    """Print JSON payload with plain-mode fallback for piping."""
    if state.plain_output:
        typer.echo(json.dumps(payload, separators=(",", ":")))
        return
    state.console.print_json(data=payload)


class ListFanOut:
    """Forward each rendered entry to several list renderers."""

    def __init__(self, *renderers: ListRenderer) -> None:
        self.renderers = renderers

    def render_entry(self, workout: Workout) -> None:
        for renderer in self.renderers:
            renderer.render_entry(workout)

    def clear(self) -> None:
        for renderer in self.renderers:
            renderer.clear()


@dataclass
class Session:
    """A wired controller plus the collaborators commands report from."""

    controller: SessionController
    map_view: LeafletMap
    list_view: ConsoleListRenderer
    notifier: ConsoleNotifier
    form: PromptForm


def build_session(
    state: CLIState,
    form_values: Optional[FormValues] = None,
    location: Optional[Coords] = None,
    geolocator: Optional[Geolocator] = None,
    show_list: bool = False,
    interactive: bool = True,
) -> Session:
    """Wire one session from config: file storage, Leaflet page, console list."""
    config = state.config
    map_cfg = config.get("map", {})
    storage_cfg = config.get("storage", {})

    pan_duration = float(map_cfg.get("pan_duration", DEFAULT_PAN_DURATION))
    map_view = LeafletMap(
        tile_url=str(map_cfg.get("tile_url") or TILE_URL),
        attribution=str(map_cfg.get("attribution") or TILE_ATTRIBUTION),
        pan_duration=pan_duration,
    )
    list_view = ConsoleListRenderer(
        state.console,
        plain=state.plain_output,
        live=show_list and not state.json_output,
    )
    notifier = ConsoleNotifier(state.console, plain=state.plain_output, silent=state.json_output)
    form = PromptForm(form_values, interactive=interactive)

    try:
        geolocator = geolocator or geolocator_from_config(config, override=location)
        rules = ValidationRules.from_config(config)
    except ConfigError as exc:
        typer.echo(f"Config error: {exc}")
        raise typer.Exit(code=2)

    controller = SessionController(
        store=WorkoutStore(),
        storage=JsonFileStorage(state.storage_file),
        map_view=map_view,
        list_renderer=ListFanOut(list_view, map_view),
        form=form,
        geolocator=geolocator,
        notifier=notifier,
        rules=rules,
        storage_key=str(storage_cfg.get("key") or STORAGE_KEY),
        zoom=int(map_cfg.get("zoom", DEFAULT_ZOOM)),
        pan_duration=pan_duration,
    )
    return Session(controller=controller, map_view=map_view, list_view=list_view, notifier=notifier, form=form)

