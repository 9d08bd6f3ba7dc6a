"""Domain models for the task tree."""

from dataclasses import dataclass
from typing import Literal

TaskStatus = Literal["active", "completed", "archived"]
AnomalyKind = Literal["orphan", "cycle"]

PLACEHOLDER_DISPLAY_ID = "?"


@dataclass(frozen=True)
class Task:
    """A single node in a task tree."""

    id: str
    parent_id: str | None
    stage: int
    rank: int
    status: TaskStatus = "active"
    deleted_at: str | None = None
    display_id: str = PLACEHOLDER_DISPLAY_ID
    x: float = 0.0
    y: float = 0.0
    title: str = ""
    content: str = ""
    has_incomplete_task: bool = False

    @property
    def is_visible(self) -> bool:
        """Archived and soft-deleted tasks are hidden from numbering and layout."""
        return self.status != "archived" and self.deleted_at is None


@dataclass(frozen=True)
class Point:
    """A canvas coordinate."""

    x: float
    y: float


@dataclass(frozen=True)
class Anomaly:
    """A structural problem found while rebalancing."""

    kind: AnomalyKind
    task_ids: tuple[str, ...]
    message: str


@dataclass(frozen=True)
class RebalanceResult:
    """Rebalanced snapshot together with anything that could not be repaired."""

    tasks: tuple[Task, ...]
    anomalies: tuple[Anomaly, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.anomalies

    def by_id(self) -> dict[str, Task]:
        return {t.id: t for t in self.tasks}
