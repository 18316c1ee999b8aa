"""Runtime state container for CLI context."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console

from mapty_cli.core.config import resolve_map_output, resolve_storage_file


@dataclass
class CLIState:
    """CLI runtime options, loaded configuration and resolved data paths."""

    json_output: bool
    plain_output: bool
    verbose: bool
    quiet: bool
    config_path: Path
    config: Dict[str, Any]
    console: Console

    @property
    def storage_file(self) -> Path:
        """Workout storage file after env/config resolution."""
        return resolve_storage_file(self.config)

    def map_output(self, explicit: Optional[Path] = None) -> Path:
        return resolve_map_output(self.config, explicit=explicit)
