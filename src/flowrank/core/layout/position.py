"""Default canvas positions for newly created tasks."""

from collections.abc import Sequence

from flowrank.config import DEFAULT_CONFIG, LayoutConfig
from flowrank.models.node import Point, Task


def origin_position(depth: int, index: int, *, config: LayoutConfig = DEFAULT_CONFIG) -> Point:
    """Fixed grid cell used when there is nothing to place relative to."""
    return Point(
        x=(depth - 1) * config.stage_spacing + config.base_x,
        y=config.base_y + index * config.row_spacing,
    )


def grid_position(stage: int, index: int, *, config: LayoutConfig = DEFAULT_CONFIG) -> Point:
    """Cell ``index`` of the column for ``stage``."""
    return Point(
        x=(stage - 1) * config.stage_spacing + config.stage_base_x,
        y=config.stage_base_y + index * config.row_spacing,
    )


def get_smart_position(
    depth: int,
    index: int,
    visible_tasks: Sequence[Task],
    parent_id: str | None = None,
    *,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> Point:
    """Pick a position for a new task at ``depth``.

    ``visible_tasks`` must already exclude archived and soft-deleted tasks.
    Rules, first match wins:

    1. Empty canvas: the origin cell.
    2. Known parent: one stage to the right of it, ``index`` rows down from its row.
    3. Column already populated: one row below the lowest task at ``depth``
       (the first one found if several share that ``y``).
    4. Previous column populated: start the column at the mean ``y`` of ``depth - 1``.
    5. Otherwise the origin cell.

    Args:
        depth: Stage of the new task (1 for roots).
        index: Position of the new task within its depth or parent.
        visible_tasks: Current tasks, already filtered.
        parent_id: Parent of the new task, if any.
        config: Spacing and base offsets.

    Returns:
        The computed point.
    """
    if depth < 1:
        msg = f"depth must be >= 1, got {depth!r}"
        raise ValueError(msg)
    if index < 0:
        msg = f"index must be >= 0, got {index!r}"
        raise ValueError(msg)

    if not visible_tasks:
        return origin_position(depth, index, config=config)

    if parent_id is not None:
        parent = next((t for t in visible_tasks if t.id == parent_id), None)
        if parent is not None:
            return Point(
                x=parent.x + config.stage_spacing,
                y=parent.y + index * config.row_spacing,
            )

    same_depth = [t for t in visible_tasks if t.stage == depth]
    if same_depth:
        last = max(same_depth, key=lambda t: t.y)
        return Point(x=last.x, y=last.y + config.row_spacing)

    previous = [t for t in visible_tasks if t.stage == depth - 1]
    if previous:
        return Point(
            x=(depth - 1) * config.stage_spacing + config.stage_base_x,
            y=sum(t.y for t in previous) / len(previous),
        )

    return origin_position(depth, index, config=config)
