from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from mapty_cli.__main__ import app

RUN_ARGS = ["add", "--lat", "40.7128", "--lng", "-74.0060", "--distance", "5", "--duration", "25", "--cadence", "178"]
RIDE_ARGS = [
    "add",
    "--lat",
    "51.5074",
    "--lng",
    "-0.1278",
    "--type",
    "cycling",
    "--distance",
    "20",
    "--duration",
    "60",
    "--elevation",
    "150",
]


def _stored(data_dir: Path) -> List[Dict[str, Any]]:
    storage = json.loads((data_dir / "storage.json").read_text())
    return json.loads(storage["workouts"])


def test_add_json_output_persists(runner, isolated_env: Path) -> None:
    result = runner.invoke(app, ["--json", *RUN_ARGS])
    assert result.exit_code == 0, result.stdout
    payload = json.loads(result.stdout)
    assert payload["status"] == "created"
    assert payload["workout"]["pace"] == 5.0
    assert payload["workout"]["type"] == "running"

    stored = _stored(isolated_env)
    assert [item["id"] for item in stored] == [payload["workout"]["id"]]


def test_add_cycling_plain_output(runner, isolated_env: Path) -> None:
    result = runner.invoke(app, ["--plain", *RIDE_ARGS])
    assert result.exit_code == 0, result.stdout
    assert "status\tcreated" in result.stdout
    assert "\tcycling\t" in result.stdout
    assert "\t20.0\t150" in result.stdout


def test_add_rejects_non_positive_distance(runner, isolated_env: Path) -> None:
    args = list(RUN_ARGS)
    args[args.index("--distance") + 1] = "-5"
    result = runner.invoke(app, ["--plain", *args])
    assert result.exit_code == 1
    assert "Inputs have to be positive numbers!" in result.stdout
    assert not (isolated_env / "storage.json").exists()


def test_add_rejects_invalid_json_mode(runner) -> None:
    args = list(RUN_ARGS)
    args[args.index("--cadence") + 1] = "abc"
    result = runner.invoke(app, ["--json", *args])
    assert result.exit_code == 1
    assert json.loads(result.stdout) == {"status": "error", "message": "Inputs have to be positive numbers!"}


def test_add_prompts_for_missing_fields(runner, isolated_env: Path) -> None:
    result = runner.invoke(
        app,
        ["--plain", "add", "--lat", "38.72", "--lng", "-9.14", "--type", "cycling"],
        input="30\n90\n-40\n",
    )
    assert result.exit_code == 0, result.stdout
    stored = _stored(isolated_env)
    assert stored[0]["elevation_gain"] == -40.0
    assert stored[0]["speed"] == 20.0


def test_add_no_input_fails_on_missing_fields(runner) -> None:
    result = runner.invoke(app, ["--plain", "add", "--lat", "1", "--lng", "2", "--no-input"])
    assert result.exit_code == 1


def test_add_unknown_type(runner) -> None:
    result = runner.invoke(app, ["add", "--lat", "1", "--lng", "2", "--type", "rowing"])
    assert result.exit_code == 2


def test_add_writes_map_page(runner, tmp_path: Path) -> None:
    page = tmp_path / "page.html"
    result = runner.invoke(app, ["--json", *RUN_ARGS, "--map", str(page)])
    assert result.exit_code == 0, result.stdout
    assert json.loads(result.stdout)["map"] == str(page.resolve())
    assert "running-popup" in page.read_text()


def test_list_outputs_in_stored_order(runner) -> None:
    runner.invoke(app, ["--json", *RUN_ARGS])
    runner.invoke(app, ["--json", *RIDE_ARGS])

    result = runner.invoke(app, ["--json", "list"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["total"] == 2
    assert [item["type"] for item in payload["workouts"]] == ["running", "cycling"]

    plain = runner.invoke(app, ["--plain", "list"])
    lines = plain.stdout.strip().splitlines()
    assert lines[-1] == "total\t2"
    assert lines[0].split("\t")[1] == "running"


def test_list_empty(runner) -> None:
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "No workouts yet" in result.stdout


def test_list_with_malformed_storage_is_empty(runner, isolated_env: Path) -> None:
    isolated_env.mkdir(parents=True, exist_ok=True)
    (isolated_env / "storage.json").write_text(json.dumps({"workouts": "{not json"}))
    result = runner.invoke(app, ["--plain", "list"])
    assert result.exit_code == 0
    assert "total\t0" in result.stdout


def test_show_increments_clicks(runner, isolated_env: Path) -> None:
    created = json.loads(runner.invoke(app, ["--json", *RUN_ARGS]).stdout)["workout"]

    first = runner.invoke(app, ["--json", "show", created["id"]])
    second = runner.invoke(app, ["--json", "show", created["id"]])

    assert first.exit_code == 0
    assert json.loads(first.stdout)["workout"]["clicks"] == 1
    assert json.loads(second.stdout)["workout"]["clicks"] == 2
    assert _stored(isolated_env)[0]["clicks"] == 2


def test_show_unknown_id(runner) -> None:
    result = runner.invoke(app, ["--plain", "show", "missing"])
    assert result.exit_code == 1
    assert "not_found" in result.stdout


def test_show_with_map_centers_view(runner, tmp_path: Path) -> None:
    config = tmp_path / "config.toml"
    config.write_text("[location]\nlatitude = 38.72\nlongitude = -9.14\n")
    created = json.loads(runner.invoke(app, ["--json", *RUN_ARGS]).stdout)["workout"]
    page = tmp_path / "show.html"

    result = runner.invoke(app, ["--json", "--config", str(config), "show", created["id"], "--map", str(page)])

    assert result.exit_code == 0, result.stdout
    html = page.read_text()
    assert '"view": {"coords": [40.7128, -74.006]' in html


def test_map_command_with_explicit_center(runner, tmp_path: Path) -> None:
    runner.invoke(app, ["--json", *RUN_ARGS])
    runner.invoke(app, ["--json", *RIDE_ARGS])
    page = tmp_path / "map.html"

    result = runner.invoke(app, ["--json", "map", "--output", str(page), "--lat", "38.72", "--lng", "-9.14"])

    assert result.exit_code == 0, result.stdout
    payload = json.loads(result.stdout)
    assert payload == {"status": "written", "path": str(page.resolve()), "markers": 2}
    html = page.read_text()
    assert html.count("running-popup") >= 2
    assert "cycling-popup" in html


def test_map_command_without_location_fails(runner, tmp_path: Path) -> None:
    result = runner.invoke(app, ["--plain", "map", "--output", str(tmp_path / "map.html")])
    assert result.exit_code == 1
    assert "Could not get your position" in result.stdout
    assert not (tmp_path / "map.html").exists()


def test_map_command_requires_both_coordinates(runner) -> None:
    result = runner.invoke(app, ["map", "--lat", "1"])
    assert result.exit_code == 2


def test_map_command_uses_ip_lookup(monkeypatch, runner, tmp_path: Path) -> None:
    class _Response:
        def raise_for_status(self) -> None:
            return None

        def json(self) -> Dict[str, Any]:
            return {"latitude": 48.85, "longitude": 2.35}

    monkeypatch.setattr("mapty_cli.core.geolocation.requests.get", lambda url, timeout: _Response())
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"location": {"lookup": True}}))
    page = tmp_path / "map.html"

    result = runner.invoke(app, ["--plain", "--config", str(config), "map", "--output", str(page)])

    assert result.exit_code == 0, result.stdout
    assert '"center": [48.85, 2.35]' in page.read_text()


def test_export_to_file_and_stdout(runner, tmp_path: Path) -> None:
    created = json.loads(runner.invoke(app, ["--json", *RUN_ARGS]).stdout)["workout"]

    stdout_result = runner.invoke(app, ["--plain", "export"])
    assert json.loads(stdout_result.stdout)[0]["id"] == created["id"]

    target = tmp_path / "export.json"
    file_result = runner.invoke(app, ["--json", "export", "--output", str(target)])
    assert file_result.exit_code == 0
    assert json.loads(file_result.stdout)["total"] == 1
    assert json.loads(target.read_text())[0]["id"] == created["id"]


def test_reset_force(runner, isolated_env: Path) -> None:
    runner.invoke(app, ["--json", *RUN_ARGS])
    result = runner.invoke(app, ["--json", "reset", "--force"])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"status": "reset", "removed": 1}
    assert "workouts" not in json.loads((isolated_env / "storage.json").read_text())

    listed = runner.invoke(app, ["--json", "list"])
    assert json.loads(listed.stdout)["total"] == 0


def test_reset_declined_keeps_workouts(runner) -> None:
    runner.invoke(app, ["--json", *RUN_ARGS])
    result = runner.invoke(app, ["reset"], input="n\n")
    assert result.exit_code == 0
    listed = runner.invoke(app, ["--json", "list"])
    assert json.loads(listed.stdout)["total"] == 1


def test_invalid_config_exits(runner, tmp_path: Path) -> None:
    config = tmp_path / "broken.toml"
    config.write_text("[map\nzoom = 1")
    result = runner.invoke(app, ["--config", str(config), "list"])
    assert result.exit_code == 2
    assert "Config error" in result.stdout


def test_home_saves_location_used_by_map(runner, tmp_path: Path) -> None:
    config = tmp_path / "config.toml"

    saved = runner.invoke(app, ["--json", "--config", str(config), "home", "--lat", "38.72", "--lng", "-9.14"])
    assert saved.exit_code == 0, saved.stdout
    assert json.loads(saved.stdout)["home"] == [38.72, -9.14]
    assert "latitude = 38.72" in config.read_text()

    shown = runner.invoke(app, ["--plain", "--config", str(config), "home"])
    assert "home\t38.72,-9.14" in shown.stdout

    page = tmp_path / "map.html"
    mapped = runner.invoke(app, ["--plain", "--config", str(config), "map", "--output", str(page)])
    assert mapped.exit_code == 0, mapped.stdout
    assert '"center": [38.72, -9.14]' in page.read_text()


def test_home_rejects_out_of_range(runner, tmp_path: Path) -> None:
    config = tmp_path / "config.toml"
    result = runner.invoke(app, ["--config", str(config), "home", "--lat", "95", "--lng", "0"])
    assert result.exit_code == 2
    assert not config.exists()


def test_home_reports_invalid_configured_location(runner, tmp_path: Path) -> None:
    config = tmp_path / "config.toml"
    config.write_text('[location]\nlatitude = "abc"\nlongitude = 1.0\n')
    result = runner.invoke(app, ["--config", str(config), "home"])
    assert result.exit_code == 2
    assert "Config error" in result.stdout


def test_non_boolean_validation_setting_exits(runner, tmp_path: Path) -> None:
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"validation": {"require_positive_elevation": "false"}}))
    result = runner.invoke(app, ["--config", str(config), *RIDE_ARGS])
    assert result.exit_code == 2
    assert "Config error" in result.stdout
