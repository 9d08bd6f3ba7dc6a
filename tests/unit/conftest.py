"""Shared test fixtures."""

import pytest

from flowrank.models.node import Task
from tests.unit.factories import make_task


@pytest.fixture
def sample_tasks() -> list[Task]:
    """Two roots; the first has two children and a grandchild.

    Listed out of tree order on purpose.
    """
    return [
        make_task("a1", parent_id="a", stage=3, rank=10000, title="A1"),
        make_task("c", parent_id="r2", stage=2, rank=10000, title="C"),
        make_task("b", parent_id="r1", stage=2, rank=12000, title="B"),
        make_task("r2", stage=1, rank=11000, title="Root two"),
        make_task("a", parent_id="r1", stage=2, rank=11000, title="A"),
        make_task("r1", stage=1, rank=10000, title="Root one"),
    ]
