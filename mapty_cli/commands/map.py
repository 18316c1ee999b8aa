"""Map page command."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from mapty_cli.commands.common import build_session, get_state, print_json_payload


def map_command(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Map page path"),
    lat: Optional[float] = typer.Option(None, help="Center latitude (skips location lookup)"),
    lng: Optional[float] = typer.Option(None, help="Center longitude (skips location lookup)"),
    open_browser: bool = typer.Option(False, "--open", help="Open the page in a browser"),
) -> None:
    """Render all saved workouts on a Leaflet map page."""
    state = get_state(ctx)
    if (lat is None) != (lng is None):
        raise typer.BadParameter("Provide both --lat and --lng, or neither")

    location = (lat, lng) if lat is not None and lng is not None else None
    session = build_session(state, location=location, interactive=False)
    controller = session.controller
    controller.start()

    if not controller.map_ready:
        if state.json_output:
            print_json_payload(state, {"status": "error", "message": session.notifier.messages[-1]})
        raise typer.Exit(code=1)

    path = session.map_view.save(state.map_output(output))
    total = len(controller.store)

    if state.json_output:
        print_json_payload(state, {"status": "written", "path": str(path), "markers": total})
    elif state.plain_output:
        typer.echo(f"map\t{path}")
        typer.echo(f"markers\t{total}")
    else:
        state.console.print(f"Map with {total} workout(s) written to: {path}")

    if open_browser:
        typer.launch(path.as_uri())
