"""Sparse sibling ranks: midpoint inserts and group renumbering."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from flowrank.config import DEFAULT_CONFIG, LayoutConfig
from flowrank.core.tree.index import rank_key
from flowrank.models.node import Task


@dataclass(frozen=True)
class RankAssignment:
    """Rank for a new or moved task.

    ``renumbered`` holds new ranks for existing siblings when the group had
    to be spread out first; it is empty otherwise.
    """

    rank: int
    renumbered: dict[str, int] = field(default_factory=dict)


def renormalize_ranks(
    siblings: Sequence[Task], *, config: LayoutConfig = DEFAULT_CONFIG
) -> dict[str, int]:
    """Spread a sibling group evenly, keeping its order."""
    ordered = sorted(siblings, key=rank_key)
    return {t.id: config.rank_root_base + i * config.rank_step for i, t in enumerate(ordered)}


def compute_insert_rank(
    siblings: Sequence[Task],
    *,
    before_id: str | None = None,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> RankAssignment:
    """Choose a rank that places a task before ``before_id``, or last.

    An unknown ``before_id`` appends. Inserting between two siblings takes
    the integer midpoint; if their gap is below ``rank_min_gap`` the group
    is renumbered first.

    Args:
        siblings: The target sibling group, without the task being placed.
        before_id: Sibling the task should precede.
        config: Rank base, step and minimum gap.
    """
    ordered = sorted(siblings, key=rank_key)
    if not ordered:
        return RankAssignment(rank=config.rank_root_base)

    position = None
    if before_id is not None:
        position = next((i for i, t in enumerate(ordered) if t.id == before_id), None)

    if position is None:
        return RankAssignment(rank=ordered[-1].rank + config.rank_step)
    if position == 0:
        return RankAssignment(rank=ordered[0].rank - config.rank_step)

    prev, nxt = ordered[position - 1], ordered[position]
    if nxt.rank - prev.rank >= config.rank_min_gap:
        return RankAssignment(rank=(prev.rank + nxt.rank) // 2)

    renumbered = renormalize_ranks(ordered, config=config)
    logger.debug(
        "Rank gap {}..{} exhausted, renumbering {} siblings", prev.rank, nxt.rank, len(ordered)
    )
    return RankAssignment(
        rank=(renumbered[prev.id] + renumbered[nxt.id]) // 2,
        renumbered=renumbered,
    )
