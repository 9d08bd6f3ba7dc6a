"""Tests for sparse rank allocation."""

from flowrank.config import LayoutConfig
from flowrank.core.rank.ranking import compute_insert_rank, renormalize_ranks
from tests.unit.factories import make_task


def test_first_rank_in_empty_group_is_root_base() -> None:
    assignment = compute_insert_rank([])
    assert assignment.rank == 10000
    assert assignment.renumbered == {}


def test_append_steps_past_last_sibling() -> None:
    siblings = [make_task("b", rank=10500), make_task("a", rank=10000)]
    assert compute_insert_rank(siblings).rank == 11000


def test_unknown_before_id_appends() -> None:
    siblings = [make_task("a", rank=10000)]
    assert compute_insert_rank(siblings, before_id="nope").rank == 10500


def test_insert_before_first_steps_below_it() -> None:
    siblings = [make_task("a", rank=10000), make_task("b", rank=11000)]
    assert compute_insert_rank(siblings, before_id="a").rank == 9500


def test_insert_between_takes_midpoint() -> None:
    siblings = [make_task("a", rank=10000), make_task("b", rank=11000)]
    assignment = compute_insert_rank(siblings, before_id="b")
    assert assignment.rank == 10500
    assert assignment.renumbered == {}


def test_exhausted_gap_renumbers_group_first() -> None:
    siblings = [
        make_task("a", rank=10000),
        make_task("b", rank=10010),
        make_task("c", rank=12000),
    ]
    assignment = compute_insert_rank(siblings, before_id="b")
    assert assignment.renumbered == {"a": 10000, "b": 10500, "c": 11000}
    assert assignment.rank == 10250


def test_adjacent_ranks_renumber() -> None:
    siblings = [make_task("a", rank=7), make_task("b", rank=8)]
    assignment = compute_insert_rank(siblings, before_id="b")
    assert assignment.renumbered == {"a": 10000, "b": 10500}
    assert 10000 < assignment.rank < 10500


def test_custom_rank_constants() -> None:
    config = LayoutConfig(rank_root_base=0, rank_step=10, rank_min_gap=4)
    siblings = [make_task("a", rank=0), make_task("b", rank=3)]
    assignment = compute_insert_rank(siblings, before_id="b", config=config)
    assert assignment.renumbered == {"a": 0, "b": 10}
    assert assignment.rank == 5


def test_renormalize_keeps_order_and_breaks_ties_by_id() -> None:
    siblings = [
        make_task("z", rank=5),
        make_task("m", rank=5),
        make_task("a", rank=9),
    ]
    assert renormalize_ranks(siblings) == {"m": 10000, "z": 10500, "a": 11000}
