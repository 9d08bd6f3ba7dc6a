"""Configuration constants for flowrank."""

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

# Horizontal distance between stage columns.
STAGE_SPACING: int = 260

# Vertical distance between rows within a column.
ROW_SPACING: int = 140

# Origin cell, used when a new task has no stage context to lean on.
BASE_X: int = 80
BASE_Y: int = 80

# Origin of the stage columns (stage 1, row 0).
STAGE_BASE_X: int = 120
STAGE_BASE_Y: int = 100

# Rank of the first task in an empty sibling group, and the step between appended siblings.
RANK_ROOT_BASE: int = 10000
RANK_STEP: int = 500

# Below this gap a midpoint insert renumbers the whole sibling group first.
RANK_MIN_GAP: int = 50

# Joins per-level labels into a display id, e.g. "1,b,a".
LABEL_SEPARATOR: str = ","


@dataclass(frozen=True)
class LayoutConfig:
    """Spatial and ordering constants injected into the engine."""

    stage_spacing: float = STAGE_SPACING
    row_spacing: float = ROW_SPACING
    base_x: float = BASE_X
    base_y: float = BASE_Y
    stage_base_x: float = STAGE_BASE_X
    stage_base_y: float = STAGE_BASE_Y
    rank_root_base: int = RANK_ROOT_BASE
    rank_step: int = RANK_STEP
    rank_min_gap: int = RANK_MIN_GAP
    label_separator: str = LABEL_SEPARATOR

    def __post_init__(self) -> None:
        if self.rank_step <= 0:
            msg = f"rank_step must be positive, got {self.rank_step!r}"
            raise ValueError(msg)
        if self.rank_min_gap < 2:
            msg = f"rank_min_gap must be at least 2, got {self.rank_min_gap!r}"
            raise ValueError(msg)
        if self.rank_min_gap > self.rank_step:
            msg = f"rank_min_gap ({self.rank_min_gap}) must not exceed rank_step ({self.rank_step})"
            raise ValueError(msg)
        if not self.label_separator:
            msg = "label_separator must not be empty"
            raise ValueError(msg)

    def with_overrides(self, overrides: dict[str, Any]) -> "LayoutConfig":
        """Return a copy with the given fields replaced. Unknown keys are rejected."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            msg = f"Unknown layout config keys: {unknown!r}"
            raise ValueError(msg)
        return replace(self, **overrides)


DEFAULT_CONFIG = LayoutConfig()


def load_layout_config(path: Path) -> LayoutConfig:
    """Load a JSON object of overrides on top of the defaults."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        msg = f"Layout config must be a JSON object: {path}"
        raise ValueError(msg)
    return DEFAULT_CONFIG.with_overrides(data)
