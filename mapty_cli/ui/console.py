"""Terminal collaborators: workout list, notices and the workout form."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console

from mapty_cli.core.constants import METRIC_FIELDS, WORKOUT_TYPES
from mapty_cli.core.models import Workout, workout_to_dict
from mapty_cli.core.session import FormValues
from mapty_cli.utils.formatting import format_coords, workout_details

FIELD_LABELS = {
    "distance": "Distance (km)",
    "duration": "Duration (min)",
    "cadence": "Cadence (step/min)",
    "elevation": "Elevation gain (m)",
}


class ConsoleListRenderer:
    """Print workout entries as they are rendered.

    With ``live=False`` entries are only collected, so callers can emit them
    later as JSON.
    """

    def __init__(self, console: Console, plain: bool = False, live: bool = True) -> None:
        self.console = console
        self.plain = plain
        self.live = live
        self.rendered: List[Workout] = []

    def render_entry(self, workout: Workout) -> None:
        self.rendered.append(workout)
        if not self.live:
            return
        if self.plain:
            typer.echo(entry_line(workout))
            return
        details = "  ".join(f"{icon} {value} {unit}" for icon, value, unit in workout_details(workout))
        style = "green" if workout.type == "running" else "yellow"
        self.console.print(f"[bold {style}]{workout.description}[/]  [dim]{workout.id}[/]")
        self.console.print(f"  {details}  [dim]@ {format_coords(workout.coords)}[/]")

    def clear(self) -> None:
        self.rendered = []

    def payload(self) -> List[Dict[str, Any]]:
        return [workout_to_dict(workout) for workout in self.rendered]


def entry_line(workout: Workout) -> str:
    """Tab-separated entry used by ``--plain`` output."""
    values = [value for _, value, _ in workout_details(workout)]
    return "\t".join([workout.id, workout.type, workout.description, *values])


class ConsoleNotifier:
    """Show user-facing notices."""

    def __init__(self, console: Console, plain: bool = False, silent: bool = False) -> None:
        self.console = console
        self.plain = plain
        self.silent = silent
        self.messages: List[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)
        if self.silent:
            return
        if self.plain:
            typer.echo(f"notice\t{message}")
            return
        self.console.print(f"[bold red]{message}[/]")


class PromptForm:
    """Workout form pre-filled from options; prompts for whatever is missing.

    Prompting happens when the form is shown, i.e. after a map click.
    """

    def __init__(self, initial: Optional[FormValues] = None, interactive: bool = True) -> None:
        self.initial = initial or FormValues()
        self.current = self.initial
        self.interactive = interactive
        self.visible = False

    @property
    def metric_field(self) -> str:
        return METRIC_FIELDS.get(self.current.kind, "cadence")

    def toggle_kind(self, kind: str) -> None:
        if kind not in WORKOUT_TYPES:
            raise typer.BadParameter(f"Unknown workout type: {kind}")
        self.current = replace(self.current, kind=kind)

    def show(self) -> None:
        self.visible = True
        if not self.interactive:
            return
        updates: Dict[str, str] = {}
        for name in ("distance", "duration", self.metric_field):
            if not getattr(self.current, name):
                updates[name] = str(typer.prompt(FIELD_LABELS[name]))
        if updates:
            self.current = replace(self.current, **updates)

    def hide(self) -> None:
        self.visible = False

    def clear(self) -> None:
        self.current = FormValues(kind=self.current.kind)

    def values(self) -> FormValues:
        return self.current
