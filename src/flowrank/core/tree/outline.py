"""Render a task tree as an indented markdown outline."""

import io
from collections.abc import Sequence

from flowrank.core.tree.index import TreeIndex
from flowrank.models.node import Task


def _marker(task: Task) -> str:
    if task.deleted_at is not None:
        return " (deleted)"
    if task.status == "archived":
        return " (archived)"
    return ""


def render_outline(
    tasks: Sequence[Task],
    *,
    max_depth: int | None = None,
    include_hidden: bool = False,
) -> str:
    """Render tasks as nested bullets, siblings in rank order.

    Args:
        tasks: Snapshot to render; run it through ``rebalance`` first for fresh labels.
        max_depth: Max levels below the roots to include (None = unlimited).
        include_hidden: Also show archived and deleted tasks, with a marker.

    Returns:
        Markdown string, one ``- {display_id} {title}`` line per task.
    """
    index = TreeIndex.build(tasks)
    out = io.StringIO()

    # Depth-first with an explicit stack so siblings come out in rank order.
    stack: list[tuple[Task, int]] = [(r, 0) for r in reversed(index.roots)]
    while stack:
        task, level = stack.pop()
        if not include_hidden and not task.is_visible:
            continue

        indent = "    " * level
        line = f"{indent}- {task.display_id} {task.title}".rstrip()
        out.write(f"{line}{_marker(task)}\n")

        if max_depth is not None and level >= max_depth:
            continue
        for child in reversed(index.children.get(task.id, [])):
            stack.append((child, level + 1))

    return out.getvalue()
