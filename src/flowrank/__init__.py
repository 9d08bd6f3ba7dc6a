"""Rank, rebalance and layout engine for hierarchical task trees."""

from flowrank.config import DEFAULT_CONFIG, LayoutConfig
from flowrank.core.layout.position import get_smart_position, grid_position
from flowrank.core.tree.index import visible_tasks
from flowrank.core.tree.rebalance import rebalance
from flowrank.models.node import Anomaly, Point, RebalanceResult, Task

__all__ = [
    "DEFAULT_CONFIG",
    "Anomaly",
    "LayoutConfig",
    "Point",
    "RebalanceResult",
    "Task",
    "get_smart_position",
    "grid_position",
    "rebalance",
    "visible_tasks",
]
