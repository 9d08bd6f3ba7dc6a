"""Parse task snapshots stored as JSON into domain models, and back."""

from dataclasses import replace
from typing import Any, get_args

from flowrank.config import DEFAULT_CONFIG, LayoutConfig
from flowrank.core.layout.position import grid_position
from flowrank.core.tree.index import index_by_id, rank_key
from flowrank.models.node import PLACEHOLDER_DISPLAY_ID, Task, TaskStatus


def _coordinate(raw: dict[str, Any], key: str) -> float | None:
    value = raw.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        msg = f"Task {raw['id']!r} has a non-numeric {key}: {value!r}"
        raise ValueError(msg)
    return float(value)


def _parse_task(raw: dict[str, Any], *, position: int, config: LayoutConfig) -> Task:
    if not isinstance(raw, dict) or "id" not in raw:
        msg = f"Task at index {position} has no id"
        raise ValueError(msg)

    rank = raw.get("rank")
    if rank is None:
        # Legacy rows only carry a 1-based order within their stage.
        rank = config.rank_root_base + int(raw.get("order") or 0) * config.rank_step

    status = raw.get("status") or "active"
    if status not in get_args(TaskStatus):
        msg = (
            f"Task {raw['id']!r} has unknown status {status!r}, "
            f"expected one of {get_args(TaskStatus)!r}"
        )
        raise ValueError(msg)

    return Task(
        id=str(raw["id"]),
        parent_id=raw.get("parentId"),
        stage=int(raw.get("stage") or 1),
        rank=int(rank),
        status=status,
        deleted_at=raw.get("deletedAt"),
        display_id=raw.get("displayId") or PLACEHOLDER_DISPLAY_ID,
        x=_coordinate(raw, "x") or 0.0,
        y=_coordinate(raw, "y") or 0.0,
        title=raw.get("title", ""),
        content=raw.get("content", ""),
        has_incomplete_task=bool(raw.get("hasIncompleteTask", False)),
    )


def _fill_missing_coordinates(
    tasks: tuple[Task, ...], unplaced: set[str], config: LayoutConfig
) -> tuple[Task, ...]:
    """Put tasks stored without coordinates on their stage's grid cell.

    The cell row is the task's position within its stage, in rank order.
    """
    if not unplaced:
        return tasks
    rows: dict[str, int] = {}
    by_stage: dict[int, list[Task]] = {}
    for task in tasks:
        by_stage.setdefault(task.stage, []).append(task)
    for stage_tasks in by_stage.values():
        for row, task in enumerate(sorted(stage_tasks, key=rank_key)):
            rows[task.id] = row

    filled = []
    for task in tasks:
        if task.id in unplaced:
            point = grid_position(task.stage, rows[task.id], config=config)
            task = replace(task, x=point.x, y=point.y)
        filled.append(task)
    return tuple(filled)


def parse_tasks(data: Any, *, config: LayoutConfig = DEFAULT_CONFIG) -> tuple[Task, ...]:
    """Parse a task list, or a project dict holding one under ``tasks``.

    Args:
        data: Decoded JSON.
        config: Supplies rank defaults for rows without a rank, and the
            grid used for rows stored without coordinates.

    Returns:
        Tasks in file order.
    """
    raw_tasks = data.get("tasks") if isinstance(data, dict) else data
    if not isinstance(raw_tasks, list):
        msg = "Expected a list of tasks or an object with a 'tasks' list"
        raise ValueError(msg)

    tasks = tuple(
        _parse_task(raw, position=i, config=config) for i, raw in enumerate(raw_tasks)
    )
    index_by_id(tasks)

    unplaced = {
        t.id for t, raw in zip(tasks, raw_tasks, strict=True)
        if raw.get("x") is None or raw.get("y") is None
    }
    return _fill_missing_coordinates(tasks, unplaced, config)


def dump_task(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "parentId": task.parent_id,
        "stage": task.stage,
        "rank": task.rank,
        "status": task.status,
        "deletedAt": task.deleted_at,
        "displayId": task.display_id,
        "x": task.x,
        "y": task.y,
        "title": task.title,
        "content": task.content,
        "hasIncompleteTask": task.has_incomplete_task,
    }


def dump_tasks(tasks: tuple[Task, ...] | list[Task]) -> list[dict[str, Any]]:
    return [dump_task(t) for t in tasks]
