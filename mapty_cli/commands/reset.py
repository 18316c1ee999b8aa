"""Reset command."""

from __future__ import annotations

import typer

from mapty_cli.commands.common import build_session, get_state, print_json_payload


def reset_command(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Skip confirmation prompt"),
) -> None:
    """Delete every saved workout."""
    state = get_state(ctx)

    if not force:
        confirmed = typer.confirm("Delete all saved workouts?", default=False)
        if not confirmed:
            raise typer.Exit(code=0)

    session = build_session(state, interactive=False)
    controller = session.controller
    controller.start(locate=False)
    removed = len(controller.store)
    controller.reset(locate=False)

    if state.json_output:
        print_json_payload(state, {"status": "reset", "removed": removed})
        return

    if state.plain_output:
        typer.echo("status\treset")
        typer.echo(f"removed\t{removed}")
        return

    state.console.print(f"Removed {removed} workout(s)")
