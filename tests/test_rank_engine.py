"""
Tests for the rank engine.

These tests verify:
1. Lane changes append to the destination lane and compact the old one
2. In-lane reorders shift the records between the old and new rank
3. Combined move + reorder
4. Validation is all-or-nothing (no writes, input untouched)
5. Every lane stays ranked 1..N across long random sequences of updates
"""

import random

import pytest

from shiptivity_api.app.core.errors import ClientNotFound, InvalidPriority, InvalidStatus
from shiptivity_api.app.services.rank_engine import (
    STATUSES,
    ClientRecord,
    apply_update,
    lane,
    lane_violations,
    presentation_order,
)


# =============================================================================
# TEST FIXTURES
# =============================================================================

def make_board(**lanes):
    """Build a snapshot from lane sizes, ids numbered across lanes.

    ``make_board(backlog=3, complete=2)`` gives ids 1-3 in backlog
    (ranks 1-3) and ids 4-5 in complete (ranks 1-2).  ``in_progress``
    maps to the ``in-progress`` lane.
    """
    records = []
    next_id = 1
    for key, size in lanes.items():
        status = key.replace("_", "-")
        for priority in range(1, size + 1):
            records.append(ClientRecord(id=next_id, status=status, priority=priority, name=f"c{next_id}"))
            next_id += 1
    return records


def ids_in(records, status):
    return [r.id for r in lane(records, status)]


def ranks(records):
    return {r.id: (r.status, r.priority) for r in records}


# =============================================================================
# LANE CHANGE
# =============================================================================

class TestLaneChange:
    def test_moved_record_goes_last_in_destination(self):
        board = make_board(backlog=3, in_progress=4)
        result = apply_update(board, 2, new_status="in-progress")

        assert ids_in(result.records, "in-progress") == [4, 5, 6, 7, 2]
        moved = next(r for r in result.records if r.id == 2)
        assert (moved.status, moved.priority) == ("in-progress", 5)

    def test_old_lane_is_compacted(self):
        board = make_board(backlog=4, complete=1)
        result = apply_update(board, 1, new_status="complete")

        assert ids_in(result.records, "backlog") == [2, 3, 4]
        assert [r.priority for r in lane(result.records, "backlog")] == [1, 2, 3]
        assert lane_violations(result.records) == {}

    def test_move_into_empty_lane(self):
        board = make_board(backlog=2)
        result = apply_update(board, 2, new_status="complete")

        assert ranks(result.records)[2] == ("complete", 1)
        assert result.writes == {2: ("complete", 1)}

    def test_moving_last_record_only_writes_the_target(self):
        board = make_board(backlog=3, complete=2)
        result = apply_update(board, 3, new_status="complete")

        assert result.writes == {3: ("complete", 3)}
        assert result.lanes == ("backlog", "complete")

    def test_old_lane_keeps_relative_order_from_unsorted_input(self):
        board = [
            ClientRecord(id=10, status="backlog", priority=3),
            ClientRecord(id=11, status="backlog", priority=1),
            ClientRecord(id=12, status="backlog", priority=2),
        ]
        result = apply_update(board, 11, new_status="complete")

        assert ids_in(result.records, "backlog") == [12, 10]
        assert ranks(result.records)[12] == ("backlog", 1)
        assert ranks(result.records)[10] == ("backlog", 2)


# =============================================================================
# IN-LANE REORDER
# =============================================================================

class TestReorder:
    def test_rank_five_to_two(self):
        board = make_board(backlog=5)
        result = apply_update(board, 5, new_priority=2)

        assert ids_in(result.records, "backlog") == [1, 5, 2, 3, 4]
        got = ranks(result.records)
        assert got[1] == ("backlog", 1)
        assert got[5] == ("backlog", 2)
        assert [got[i][1] for i in (2, 3, 4)] == [3, 4, 5]

    def test_writes_are_minimal(self):
        board = make_board(backlog=5)
        result = apply_update(board, 5, new_priority=2)

        assert set(result.writes) == {2, 3, 4, 5}
        assert 1 not in result.writes

    def test_move_down(self):
        board = make_board(backlog=4)
        result = apply_update(board, 1, new_priority=4)

        assert ids_in(result.records, "backlog") == [2, 3, 4, 1]

    def test_same_priority_is_a_noop(self):
        board = make_board(backlog=3)
        result = apply_update(board, 2, new_priority=2)

        assert result.writes == {}
        assert not result.changed

    def test_same_status_with_priority_reorders_in_place(self):
        board = make_board(backlog=3, complete=2)
        result = apply_update(board, 3, new_status="backlog", new_priority=1)

        assert ids_in(result.records, "backlog") == [3, 1, 2]
        assert result.lanes == ("backlog",)

    def test_other_lanes_untouched(self):
        board = make_board(backlog=3, complete=3)
        result = apply_update(board, 2, new_priority=1)

        assert all(client_id <= 3 for client_id in result.writes)
        assert ids_in(result.records, "complete") == [4, 5, 6]


# =============================================================================
# COMBINED MOVE + REORDER
# =============================================================================

class TestCombined:
    def test_move_into_lane_of_three_at_top(self):
        board = make_board(backlog=2, complete=3)
        result = apply_update(board, 1, new_status="complete", new_priority=1)

        assert ids_in(result.records, "complete") == [1, 3, 4, 5]
        assert [r.priority for r in lane(result.records, "complete")] == [1, 2, 3, 4]
        assert ranks(result.records)[2] == ("backlog", 1)

    def test_upper_bound_counts_destination_lane_plus_one(self):
        board = make_board(backlog=1, complete=3)
        result = apply_update(board, 1, new_status="complete", new_priority=4)

        assert ids_in(result.records, "complete") == [2, 3, 4, 1]

    def test_priority_validated_against_destination_lane(self):
        board = make_board(backlog=6, complete=1)

        with pytest.raises(InvalidPriority) as exc_info:
            apply_update(board, 1, new_status="complete", new_priority=5)

        assert exc_info.value.upper == 2


# =============================================================================
# VALIDATION
# =============================================================================

class TestValidation:
    def test_unknown_id(self):
        board = make_board(backlog=2)

        with pytest.raises(ClientNotFound) as exc_info:
            apply_update(board, 99, new_status="complete")

        assert exc_info.value.kind == "NotFound"

    def test_unknown_status(self):
        board = make_board(backlog=2)

        with pytest.raises(InvalidStatus):
            apply_update(board, 1, new_status="archived")

    def test_unknown_status_even_without_change_request(self):
        board = make_board(backlog=2)

        with pytest.raises(InvalidStatus):
            apply_update(board, 1, new_status="doing", new_priority=1)

    @pytest.mark.parametrize("priority", [0, -1, 7])
    def test_out_of_range_priority(self, priority):
        # destination lane holds 5, so 1..6 is valid
        board = make_board(backlog=1, complete=5)

        with pytest.raises(InvalidPriority) as exc_info:
            apply_update(board, 1, new_status="complete", new_priority=priority)

        assert exc_info.value.kind == "InvalidPriority"

    def test_in_lane_upper_bound_is_lane_size(self):
        board = make_board(backlog=4)

        with pytest.raises(InvalidPriority) as exc_info:
            apply_update(board, 2, new_priority=5)

        assert exc_info.value.upper == 4
        assert "between 1 and 4" in exc_info.value.long_message

    def test_failure_leaves_input_untouched(self):
        board = make_board(backlog=3, complete=2)
        before = ranks(board)

        with pytest.raises(InvalidPriority):
            apply_update(board, 1, new_status="complete", new_priority=10)

        assert ranks(board) == before

    def test_success_leaves_input_untouched(self):
        board = make_board(backlog=3, complete=2)
        before = ranks(board)

        apply_update(board, 1, new_status="complete", new_priority=1)

        assert ranks(board) == before


# =============================================================================
# NO-OP
# =============================================================================

class TestNoop:
    def test_same_status_no_priority(self):
        board = make_board(backlog=3, complete=2)
        result = apply_update(board, 2, new_status="backlog")

        assert result.writes == {}
        assert ranks(result.records) == ranks(board)

    def test_nothing_requested(self):
        board = make_board(backlog=3)
        result = apply_update(board, 3)

        assert not result.changed
        assert result.lanes == ()


# =============================================================================
# INVARIANT
# =============================================================================

class TestInvariant:
    def test_lane_violations_reports_gaps_and_duplicates(self):
        board = [
            ClientRecord(id=1, status="backlog", priority=1),
            ClientRecord(id=2, status="backlog", priority=1),
            ClientRecord(id=3, status="complete", priority=2),
        ]

        problems = lane_violations(board)

        assert set(problems) == {"backlog", "complete"}
        assert "duplicate [1]" in problems["backlog"]
        assert "missing [1]" in problems["complete"]

    def test_random_updates_keep_every_lane_contiguous(self):
        rng = random.Random(20261016)
        board = make_board(backlog=6, in_progress=4, complete=5)

        for _ in range(500):
            target = rng.choice(board)
            status = rng.choice(STATUSES + (None,))
            dest = status or target.status
            dest_size = sum(1 for r in board if r.status == dest and r.id != target.id)
            priority = rng.choice([None, rng.randint(0, dest_size + 2)])
            try:
                result = apply_update(board, target.id, status, priority)
            except InvalidPriority:
                assert priority < 1 or priority > dest_size + 1
                continue
            assert lane_violations(result.records) == {}
            assert len(result.records) == len(board)
            board = result.records

    def test_presentation_order(self):
        board = [
            ClientRecord(id=1, status="in-progress", priority=1),
            ClientRecord(id=2, status="backlog", priority=2),
            ClientRecord(id=3, status="complete", priority=1),
            ClientRecord(id=4, status="backlog", priority=1),
        ]

        ordered = presentation_order(board)

        assert [r.id for r in ordered] == [4, 2, 3, 1]
