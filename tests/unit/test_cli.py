"""Tests for the flowrank CLI."""

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from loguru import logger
from typer.testing import CliRunner

from flowrank.cli import app
from tests.unit.factories import raw_task

runner = CliRunner()

SNAPSHOT = [
    raw_task("r1", x=300, y=200, title="Plan"),
    raw_task("a", parentId="r1", stage=5, rank=11000, title="Draft"),
    raw_task("b", parentId="r1", stage=2, rank=12000, title="Review"),
]


@pytest.fixture(autouse=True)
def _drop_cli_log_sinks() -> Iterator[None]:
    """The CLI binds a sink to the runner's stderr; drop it afterwards."""
    yield
    logger.remove()


def _write(tmp_path: Path, data: Any, name: str = "tasks.json") -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(data))
    return path


def test_rebalance_writes_output_file(tmp_path: Path) -> None:
    src = _write(tmp_path, SNAPSHOT)
    out = tmp_path / "out.json"

    result = runner.invoke(app, ["rebalance", str(src), "-o", str(out)])

    assert result.exit_code == 0, result.output
    tasks = {t["id"]: t for t in json.loads(out.read_text())}
    assert tasks["r1"]["displayId"] == "1"
    assert tasks["a"]["displayId"] == "1,a"
    assert tasks["a"]["stage"] == 2
    assert tasks["b"]["displayId"] == "1,b"


def test_rebalance_keeps_project_fields(tmp_path: Path) -> None:
    src = _write(tmp_path, {"id": "p1", "name": "Project", "tasks": SNAPSHOT})
    out = tmp_path / "out.json"

    result = runner.invoke(app, ["rebalance", str(src), "-o", str(out)])

    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text())
    assert data["name"] == "Project"
    assert len(data["tasks"]) == 3


def test_rebalance_strict_refuses_anomalies(tmp_path: Path) -> None:
    src = _write(tmp_path, [*SNAPSHOT, raw_task("lost", parentId="nowhere", rank=1)])
    out = tmp_path / "out.json"

    result = runner.invoke(app, ["rebalance", str(src), "-o", str(out), "--strict"])

    assert result.exit_code == 1
    assert not out.exists()


def test_rebalance_uses_config_separator(tmp_path: Path) -> None:
    src = _write(tmp_path, SNAPSHOT)
    cfg = _write(tmp_path, {"label_separator": "."}, name="layout.json")
    out = tmp_path / "out.json"

    result = runner.invoke(app, ["rebalance", str(src), "-o", str(out), "-c", str(cfg)])

    assert result.exit_code == 0, result.output
    tasks = {t["id"]: t for t in json.loads(out.read_text())}
    assert tasks["b"]["displayId"] == "1.b"


def test_bad_config_exits_with_error(tmp_path: Path) -> None:
    src = _write(tmp_path, SNAPSHOT)
    cfg = _write(tmp_path, {"nonsense": 1}, name="layout.json")
    result = runner.invoke(app, ["rebalance", str(src), "-c", str(cfg)])
    assert result.exit_code == 1


def test_missing_snapshot_exits_with_error(tmp_path: Path) -> None:
    result = runner.invoke(app, ["rebalance", str(tmp_path / "missing.json")])
    assert result.exit_code == 1


def test_invalid_json_exits_with_error(tmp_path: Path) -> None:
    src = tmp_path / "broken.json"
    src.write_text("{not json")
    result = runner.invoke(app, ["check", str(src)])
    assert result.exit_code == 1


def test_rebalance_fills_null_coordinates(tmp_path: Path) -> None:
    src = _write(tmp_path, [raw_task("t1", x=None, y=None), raw_task("t2", rank=11000, x=None)])
    out = tmp_path / "out.json"

    result = runner.invoke(app, ["rebalance", str(src), "-o", str(out)])

    assert result.exit_code == 0, result.output
    tasks = {t["id"]: t for t in json.loads(out.read_text())}
    assert (tasks["t1"]["x"], tasks["t1"]["y"]) == (120.0, 100.0)
    assert (tasks["t2"]["x"], tasks["t2"]["y"]) == (120.0, 240.0)


def test_unknown_status_exits_with_error(tmp_path: Path) -> None:
    src = _write(tmp_path, [raw_task("t", status="paused")])
    result = runner.invoke(app, ["check", str(src)])
    assert result.exit_code == 1


def test_check_reports_stale_tasks(tmp_path: Path) -> None:
    src = _write(tmp_path, SNAPSHOT)

    result = runner.invoke(app, ["check", str(src)])

    assert result.exit_code == 1
    assert "a: stage 5 -> 2" in result.output
    assert "3 stale tasks, 0 anomalies" in result.output


def test_check_passes_after_rebalance(tmp_path: Path) -> None:
    src = _write(tmp_path, SNAPSHOT)
    out = tmp_path / "out.json"
    runner.invoke(app, ["rebalance", str(src), "-o", str(out)])

    result = runner.invoke(app, ["check", str(out)])

    assert result.exit_code == 0, result.output
    assert "0 stale tasks, 0 anomalies" in result.output


def test_check_reports_cycles(tmp_path: Path) -> None:
    src = _write(tmp_path, [raw_task("x", parentId="y"), raw_task("y", parentId="x")])
    result = runner.invoke(app, ["check", str(src)])
    assert result.exit_code == 1
    assert "[cycle]" in result.output


def test_position_next_to_parent(tmp_path: Path) -> None:
    src = _write(tmp_path, SNAPSHOT[:1])
    result = runner.invoke(app, ["position", str(src), "--depth", "2", "--parent", "r1"])
    assert result.exit_code == 0, result.output
    assert "560 200" in result.output


def test_position_json_output_on_empty_snapshot(tmp_path: Path) -> None:
    src = _write(tmp_path, [])
    result = runner.invoke(app, ["position", str(src), "--depth", "1", "--json"])
    assert result.exit_code == 0, result.output
    assert '{"x": 80, "y": 80}' in result.output


def test_outline_prints_rebalanced_tree(tmp_path: Path) -> None:
    src = _write(tmp_path, SNAPSHOT)
    result = runner.invoke(app, ["outline", str(src)])
    assert result.exit_code == 0, result.output
    assert "- 1 Plan\n    - 1,a Draft\n    - 1,b Review\n" in result.output
