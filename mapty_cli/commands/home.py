"""Home location command."""

from __future__ import annotations

import math
from typing import Optional

import typer

from mapty_cli.commands.common import get_state, print_json_payload
from mapty_cli.core.config import ConfigError, configured_location, save_config


def home_command(
    ctx: typer.Context,
    lat: Optional[float] = typer.Option(None, help="Home latitude"),
    lng: Optional[float] = typer.Option(None, help="Home longitude"),
    lookup: Optional[bool] = typer.Option(None, "--lookup/--no-lookup", help="Locate by IP when no home is set"),
) -> None:
    """Show or save the location the map opens at."""
    state = get_state(ctx)
    if (lat is None) != (lng is None):
        raise typer.BadParameter("Provide both --lat and --lng, or neither")

    location = state.config.setdefault("location", {})
    changed = False
    if lat is not None and lng is not None:
        if not (math.isfinite(lat) and math.isfinite(lng)) or not -90 <= lat <= 90 or not -180 <= lng <= 180:
            raise typer.BadParameter(f"Coordinates out of range: {lat}, {lng}")
        location["latitude"] = lat
        location["longitude"] = lng
        changed = True
    if lookup is not None:
        location["lookup"] = lookup
        changed = True

    if changed:
        save_config(state.config, state.config_path)

    try:
        home = configured_location(state.config)
    except ConfigError as exc:
        typer.echo(f"Config error: {exc}")
        raise typer.Exit(code=2)

    payload = {
        "home": list(home) if home else None,
        "lookup": bool(location.get("lookup", False)),
        "saved": changed,
        "config": str(state.config_path),
    }

    if state.json_output:
        print_json_payload(state, payload)
        return

    if state.plain_output:
        typer.echo(f"home\t{'' if home is None else f'{home[0]},{home[1]}'}")
        typer.echo(f"lookup\t{str(payload['lookup']).lower()}")
        return

    if home is None:
        state.console.print("No home location set")
    else:
        state.console.print(f"Home: {home[0]}, {home[1]}")
    state.console.print(f"IP lookup: {'on' if payload['lookup'] else 'off'}")
    if changed:
        state.console.print(f"Saved to: {state.config_path}")
