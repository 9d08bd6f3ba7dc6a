"""Tree index: grouping by parent, rank ordering and top-down traversal."""

from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from flowrank.models.node import Task


def rank_key(task: Task) -> tuple[int, str]:
    """Sort key for a sibling group. Equal ranks fall back to the id."""
    return (task.rank, task.id)


def visible_tasks(tasks: Iterable[Task]) -> list[Task]:
    """Drop archived and soft-deleted tasks."""
    return [t for t in tasks if t.is_visible]


def index_by_id(tasks: Iterable[Task]) -> dict[str, Task]:
    """Map id -> task, raising on duplicate ids."""
    by_id: dict[str, Task] = {}
    duplicates: set[str] = set()
    for task in tasks:
        if task.id in by_id:
            duplicates.add(task.id)
        by_id[task.id] = task
    if duplicates:
        msg = f"Duplicate task ids: {sorted(duplicates)!r}"
        raise ValueError(msg)
    return by_id


def children_by_parent(tasks: Iterable[Task]) -> dict[str | None, list[Task]]:
    """Group tasks into sibling groups, each ordered by rank.

    Roots are grouped under ``None``.
    """
    groups: dict[str | None, list[Task]] = {}
    for task in tasks:
        groups.setdefault(task.parent_id, []).append(task)
    for group in groups.values():
        group.sort(key=rank_key)
    return groups


def descendant_ids(tasks: Iterable[Task], task_id: str) -> set[str]:
    """All ids below ``task_id``. Safe on cyclic input."""
    children = children_by_parent(tasks)
    found: set[str] = set()
    todo = deque([task_id])
    while todo:
        current = todo.popleft()
        for child in children.get(current, []):
            if child.id not in found and child.id != task_id:
                found.add(child.id)
                todo.append(child.id)
    return found


def _find_cycles(unreachable: set[str], by_id: dict[str, Task]) -> list[tuple[str, ...]]:
    """Follow parent links from every unreachable task and collect each loop once.

    A task that no root reaches can only be sitting on, or hanging below, a
    parent cycle.
    """
    cycles: list[tuple[str, ...]] = []
    done: set[str] = set()
    for start in sorted(unreachable):
        path: list[str] = []
        position: dict[str, int] = {}
        current: str | None = start
        while current is not None and current in unreachable and current not in done:
            if current in position:
                cycles.append(tuple(sorted(path[position[current] :])))
                break
            position[current] = len(path)
            path.append(current)
            current = by_id[current].parent_id
        done.update(path)
    return cycles


@dataclass(frozen=True)
class TreeIndex:
    """Lookups built once per call over a task snapshot."""

    by_id: dict[str, Task]
    children: dict[str | None, list[Task]]
    # Effective roots in rank order: real roots plus tasks whose parent is missing.
    roots: tuple[Task, ...]
    orphans: tuple[Task, ...]
    # Breadth-first order from the roots; a parent always precedes its children.
    order: tuple[str, ...]
    unreachable: frozenset[str]
    cycles: tuple[tuple[str, ...], ...]

    @classmethod
    def build(cls, tasks: Sequence[Task]) -> "TreeIndex":
        by_id = index_by_id(tasks)
        children = children_by_parent(tasks)

        orphans = tuple(t for t in tasks if t.parent_id is not None and t.parent_id not in by_id)
        roots = sorted(
            (t for t in tasks if t.parent_id is None or t.parent_id not in by_id),
            key=rank_key,
        )

        order: list[str] = []
        seen: set[str] = set()
        todo = deque(r.id for r in roots)
        while todo:
            task_id = todo.popleft()
            if task_id in seen:
                continue
            seen.add(task_id)
            order.append(task_id)
            todo.extend(c.id for c in children.get(task_id, []))

        unreachable = set(by_id) - seen
        return cls(
            by_id=by_id,
            children=children,
            roots=tuple(roots),
            orphans=orphans,
            order=tuple(order),
            unreachable=frozenset(unreachable),
            cycles=tuple(_find_cycles(unreachable, by_id)),
        )

    def visible_children(self, parent_id: str | None) -> list[Task]:
        return [t for t in self.children.get(parent_id, []) if t.is_visible]
