"""Workout commands: add, list, show and export."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from mapty_cli.commands.common import build_session, get_state, print_json_payload
from mapty_cli.core.constants import WORKOUT_TYPES
from mapty_cli.core.geolocation import StaticGeolocator
from mapty_cli.core.models import workout_to_dict
from mapty_cli.core.session import FormValues
from mapty_cli.exporters.json_export import write_json
from mapty_cli.ui.console import entry_line
from mapty_cli.utils.formatting import format_coords, format_metric


def _validate_kind(value: str) -> str:
    kind = value.strip().lower()
    if kind not in WORKOUT_TYPES:
        raise typer.BadParameter(f"Choose one of: {', '.join(WORKOUT_TYPES)}")
    return kind


def add_command(
    ctx: typer.Context,
    lat: float = typer.Option(..., help="Latitude of the clicked point"),
    lng: float = typer.Option(..., help="Longitude of the clicked point"),
    kind: str = typer.Option("running", "--type", help="Workout type: running|cycling", callback=_validate_kind),
    distance: Optional[str] = typer.Option(None, help="Distance in km"),
    duration: Optional[str] = typer.Option(None, help="Duration in minutes"),
    cadence: Optional[str] = typer.Option(None, help="Cadence in steps/min (running)"),
    elevation: Optional[str] = typer.Option(None, help="Elevation gain in meters (cycling)"),
    map_output: Optional[Path] = typer.Option(None, "--map", help="Also write the map page here"),
    no_input: bool = typer.Option(False, "--no-input", help="Never prompt for missing fields"),
) -> None:
    """Log a workout at a map location."""
    state = get_state(ctx)
    values = FormValues(
        kind=kind,
        distance=distance or "",
        duration=duration or "",
        cadence=cadence or "",
        elevation=elevation or "",
    )
    session = build_session(
        state,
        form_values=values,
        geolocator=StaticGeolocator((lat, lng)),
        interactive=not no_input and not state.json_output,
    )
    controller = session.controller
    controller.start()
    controller.on_kind_change(kind)
    session.map_view.click((lat, lng))
    workout = controller.submit()

    if workout is None:
        if state.json_output:
            print_json_payload(state, {"status": "error", "message": session.notifier.messages[-1]})
        raise typer.Exit(code=1)

    page: Optional[Path] = None
    if map_output is not None:
        page = session.map_view.save(state.map_output(map_output))

    if state.json_output:
        payload = {"status": "created", "workout": workout_to_dict(workout)}
        if page is not None:
            payload["map"] = str(page)
        print_json_payload(state, payload)
        return

    if state.plain_output:
        typer.echo("status\tcreated")
        typer.echo(entry_line(workout))
        if page is not None:
            typer.echo(f"map\t{page}")
        return

    state.console.print(f"Logged [bold]{workout.description}[/] ({format_metric(workout)})")
    state.console.print(f"ID: {workout.id}")
    if page is not None:
        state.console.print(f"Map written to: {page}")


def list_command(ctx: typer.Context) -> None:
    """List saved workouts, newest last."""
    state = get_state(ctx)
    session = build_session(state, show_list=True, interactive=False)
    session.controller.start(locate=False)
    workouts = session.controller.store.all()

    if state.json_output:
        print_json_payload(state, {"total": len(workouts), "workouts": session.list_view.payload()})
        return

    if state.plain_output:
        typer.echo(f"total\t{len(workouts)}")
        return

    if not workouts:
        state.console.print("No workouts yet. Add one with `mapty add`.")
        return
    state.console.print(f"{len(workouts)} workout(s)")


def show_command(
    ctx: typer.Context,
    workout_id: str = typer.Argument(..., help="Workout ID"),
    map_output: Optional[Path] = typer.Option(None, "--map", help="Write the map page centered on the workout"),
) -> None:
    """Select a workout from the list and pan the map to it."""
    state = get_state(ctx)
    session = build_session(state, interactive=False)
    controller = session.controller
    controller.start(locate=map_output is not None)
    workout = controller.on_list_activate(workout_id)

    if workout is None:
        if state.json_output:
            print_json_payload(state, {"status": "error", "message": f"Workout {workout_id} not found"})
        elif state.plain_output:
            typer.echo("status\tnot_found")
        else:
            state.console.print(f"Workout {workout_id} not found")
        raise typer.Exit(code=1)

    page: Optional[Path] = None
    if map_output is not None and controller.map_ready:
        page = session.map_view.save(state.map_output(map_output))

    if state.json_output:
        payload = {"status": "selected", "workout": workout_to_dict(workout)}
        if page is not None:
            payload["map"] = str(page)
        print_json_payload(state, payload)
        return

    if state.plain_output:
        typer.echo(entry_line(workout))
        typer.echo(f"clicks\t{workout.clicks}")
        if page is not None:
            typer.echo(f"map\t{page}")
        return

    state.console.print(f"[bold]{workout.description}[/]  {format_metric(workout)}")
    state.console.print(f"Location: {format_coords(workout.coords)}")
    state.console.print(f"Viewed {workout.clicks} time(s)")
    if page is not None:
        state.console.print(f"Map written to: {page}")


def export_command(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON here instead of stdout"),
) -> None:
    """Export saved workouts as JSON."""
    state = get_state(ctx)
    session = build_session(state, interactive=False)
    session.controller.start(locate=False)
    payload = session.controller.store.to_payload()

    if output is None:
        print_json_payload(state, payload)
        return

    path = write_json(output.expanduser().resolve(), payload)
    if state.json_output:
        print_json_payload(state, {"status": "exported", "total": len(payload), "path": str(path)})
    elif state.plain_output:
        typer.echo(f"exported\t{len(payload)}\t{path}")
    else:
        state.console.print(f"Exported {len(payload)} workout(s) to: {path}")
