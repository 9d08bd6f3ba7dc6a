"""Rebalance a task snapshot: repair stages and recompute display ids."""

import re
from collections import deque
from collections.abc import Sequence
from dataclasses import replace

from loguru import logger

from flowrank.config import DEFAULT_CONFIG, LayoutConfig
from flowrank.core.tree.index import TreeIndex
from flowrank.core.tree.labels import join_label, letter_label, root_label
from flowrank.models.node import Anomaly, RebalanceResult, Task

_INCOMPLETE_ITEM = re.compile(r"- \[ \]")


def has_incomplete_item(content: str) -> bool:
    """True if the markdown content holds an unchecked ``- [ ]`` item."""
    return bool(_INCOMPLETE_ITEM.search(content or ""))


def _repair_stages(index: TreeIndex) -> dict[str, int]:
    """Force ``stage == parent.stage + 1`` walking from the roots down.

    Roots, orphans included, keep the stage they already have.
    """
    root_ids = {r.id for r in index.roots}
    stages: dict[str, int] = {}
    for task_id in index.order:
        task = index.by_id[task_id]
        if task_id in root_ids:
            stages[task_id] = task.stage
        else:
            stages[task_id] = stages[task.parent_id] + 1  # type: ignore[index]
    return stages


def _assign_display_ids(index: TreeIndex, separator: str) -> dict[str, str]:
    """Number every visible sibling group by rank, parents before children.

    Hidden tasks take no slot and keep their last label, which still
    prefixes the labels of visible tasks below them.
    """
    labels: dict[str, str] = {}

    def prefix(task_id: str) -> str:
        return labels.get(task_id, index.by_id[task_id].display_id)

    visible_roots = [r for r in index.roots if r.is_visible]
    for position, root in enumerate(visible_roots):
        labels[root.id] = root_label(position)

    todo = deque(r.id for r in index.roots)
    while todo:
        parent_id = todo.popleft()
        for position, child in enumerate(index.visible_children(parent_id)):
            labels[child.id] = join_label(prefix(parent_id), letter_label(position), separator)
        todo.extend(c.id for c in index.children.get(parent_id, []))
    return labels


def _collect_anomalies(index: TreeIndex) -> list[Anomaly]:
    anomalies: list[Anomaly] = []
    for task in index.orphans:
        anomalies.append(
            Anomaly(
                kind="orphan",
                task_ids=(task.id,),
                message=(
                    f"Task {task.id!r} references missing parent {task.parent_id!r}; "
                    "treated as a root"
                ),
            )
        )
    for members in index.cycles:
        anomalies.append(
            Anomaly(
                kind="cycle",
                task_ids=members,
                message=f"Parent cycle through {', '.join(members)}; subtree left unchanged",
            )
        )
    return anomalies


def rebalance(tasks: Sequence[Task], *, config: LayoutConfig = DEFAULT_CONFIG) -> RebalanceResult:
    """Recompute stages and display ids for a whole snapshot.

    Returns new task objects in input order; the input is not modified.
    Orphans are numbered as roots. Tasks on or below a parent cycle are
    returned unchanged and reported as anomalies. Running the result
    through again yields the same result.

    Args:
        tasks: The full task collection, in any order.
        config: Supplies the label separator.

    Returns:
        RebalanceResult with the new tasks and any anomalies found.
    """
    index = TreeIndex.build(tasks)
    stages = _repair_stages(index)
    labels = _assign_display_ids(index, config.label_separator)

    result: list[Task] = []
    drift = 0
    for task in tasks:
        if task.id not in stages:
            result.append(task)
            continue
        if stages[task.id] != task.stage:
            drift += 1
        result.append(
            replace(
                task,
                stage=stages[task.id],
                display_id=labels.get(task.id, task.display_id),
                has_incomplete_task=has_incomplete_item(task.content),
            )
        )

    anomalies = _collect_anomalies(index)
    for anomaly in anomalies:
        logger.warning("{} anomaly: {}", anomaly.kind, anomaly.message)
    if index.unreachable:
        logger.warning("Skipped {} task(s) caught in parent cycles", len(index.unreachable))

    logger.debug(
        "Rebalanced {} tasks: {} labelled, {} stage corrections",
        len(result), len(labels), drift,
    )
    return RebalanceResult(tasks=tuple(result), anomalies=tuple(anomalies))
