"""Structural mutations on a task snapshot.

Each helper returns a new snapshot that has already been through
``rebalance``; the input sequence is never modified.
"""

import uuid
from collections.abc import Sequence
from dataclasses import replace
from datetime import UTC, datetime
from typing import get_args

from loguru import logger

from flowrank.config import DEFAULT_CONFIG, LayoutConfig
from flowrank.core.layout.position import get_smart_position
from flowrank.core.rank.ranking import compute_insert_rank
from flowrank.core.tree.index import descendant_ids, index_by_id, visible_tasks
from flowrank.core.tree.rebalance import rebalance
from flowrank.models.node import RebalanceResult, Task, TaskStatus


def _require(by_id: dict[str, Task], task_id: str) -> Task:
    task = by_id.get(task_id)
    if task is None:
        msg = f"Unknown task id: {task_id!r}"
        raise ValueError(msg)
    return task


def _apply_ranks(tasks: Sequence[Task], ranks: dict[str, int]) -> list[Task]:
    if not ranks:
        return list(tasks)
    return [replace(t, rank=ranks[t.id]) if t.id in ranks else t for t in tasks]


def add_task(
    tasks: Sequence[Task],
    *,
    title: str,
    parent_id: str | None = None,
    before_id: str | None = None,
    content: str = "",
    task_id: str | None = None,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> RebalanceResult:
    """Create a task under ``parent_id`` (or as a root) and rebalance.

    The new task is ranked before ``before_id`` or after its last sibling,
    and placed with ``get_smart_position`` over the visible tasks.
    """
    by_id = index_by_id(tasks)
    parent = _require(by_id, parent_id) if parent_id is not None else None
    new_id = task_id or str(uuid.uuid4())
    if new_id in by_id:
        msg = f"Task id already in use: {new_id!r}"
        raise ValueError(msg)

    stage = parent.stage + 1 if parent is not None else 1
    siblings = [t for t in tasks if t.parent_id == parent_id]
    assignment = compute_insert_rank(siblings, before_id=before_id, config=config)

    visible = visible_tasks(tasks)
    if parent is not None:
        index = sum(1 for t in visible if t.parent_id == parent_id)
    else:
        index = sum(1 for t in visible if t.stage == stage)
    point = get_smart_position(stage, index, visible, parent_id, config=config)

    new_task = Task(
        id=new_id,
        parent_id=parent_id,
        stage=stage,
        rank=assignment.rank,
        x=point.x,
        y=point.y,
        title=title,
        content=content,
    )
    logger.debug("Adding task {} under {} at rank {}", new_id, parent_id, assignment.rank)
    return rebalance([*_apply_ranks(tasks, assignment.renumbered), new_task], config=config)


def move_task(
    tasks: Sequence[Task],
    task_id: str,
    *,
    new_parent_id: str | None,
    before_id: str | None = None,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> RebalanceResult:
    """Re-parent a task and rank it within its new sibling group.

    Stages below the moved task are left for ``rebalance`` to repair; a
    task moved to the top level becomes stage 1.
    """
    by_id = index_by_id(tasks)
    target = _require(by_id, task_id)
    if new_parent_id is not None:
        _require(by_id, new_parent_id)
        if new_parent_id == task_id or new_parent_id in descendant_ids(tasks, task_id):
            msg = f"Cannot move {task_id!r} below itself (target parent {new_parent_id!r})"
            raise ValueError(msg)

    siblings = [t for t in tasks if t.parent_id == new_parent_id and t.id != task_id]
    assignment = compute_insert_rank(siblings, before_id=before_id, config=config)

    moved = replace(target, parent_id=new_parent_id, rank=assignment.rank)
    if new_parent_id is None:
        moved = replace(moved, stage=1)

    updated = [moved if t.id == task_id else t for t in _apply_ranks(tasks, assignment.renumbered)]
    logger.debug("Moving task {} to parent {} at rank {}", task_id, new_parent_id, assignment.rank)
    return rebalance(updated, config=config)


def soft_delete_task(
    tasks: Sequence[Task],
    task_id: str,
    *,
    deleted_at: str | None = None,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> RebalanceResult:
    """Mark a task and everything below it as deleted.

    Descendants that were already deleted keep their original timestamp.
    """
    _require(index_by_id(tasks), task_id)
    stamp = deleted_at or datetime.now(UTC).isoformat()
    affected = {task_id} | descendant_ids(tasks, task_id)
    updated = [
        replace(t, deleted_at=stamp) if t.id in affected and t.deleted_at is None else t
        for t in tasks
    ]
    return rebalance(updated, config=config)


def restore_task(
    tasks: Sequence[Task],
    task_id: str,
    *,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> RebalanceResult:
    """Undo a soft delete for a task and its descendants."""
    _require(index_by_id(tasks), task_id)
    affected = {task_id} | descendant_ids(tasks, task_id)
    updated = [replace(t, deleted_at=None) if t.id in affected else t for t in tasks]
    return rebalance(updated, config=config)


def set_status(
    tasks: Sequence[Task],
    task_id: str,
    status: TaskStatus,
    *,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> RebalanceResult:
    if status not in get_args(TaskStatus):
        msg = f"Unknown status {status!r}, expected one of {get_args(TaskStatus)!r}"
        raise ValueError(msg)
    _require(index_by_id(tasks), task_id)
    updated = [replace(t, status=status) if t.id == task_id else t for t in tasks]
    return rebalance(updated, config=config)
