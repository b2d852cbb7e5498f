"""Tests for the grid model (bounds, durations, overlap detection, occupancy)."""

import pytest

from studygrid.engine.grid import (
    HourRange,
    compute_occupancy,
    day_summary,
    find_overlap,
    hours_in_window,
    validate_block,
    validate_bounds,
)
from studygrid.models.schedule_block import BlockStatus
from studygrid.store.errors import InvalidDuration, OutOfBounds, OverlapConflict


class TestHourRange:
    """Test half-open interval intersection."""

    def test_touching_ranges_do_not_intersect(self):
        assert HourRange(9, 10).intersects(HourRange(10, 11)) is False
        assert HourRange(10, 11).intersects(HourRange(9, 10)) is False

    def test_overlapping_ranges_intersect(self):
        assert HourRange(9, 11).intersects(HourRange(10, 12)) is True

    def test_contained_range_intersects(self):
        assert HourRange(9, 15).intersects(HourRange(11, 12)) is True


class TestValidateBounds:
    """Test validate_bounds() with the default 8-20 window."""

    def test_block_inside_window(self, make_block):
        assert validate_bounds(make_block(start_hour=8, end_hour=20)) is True

    def test_block_starting_before_window(self, make_block):
        assert validate_bounds(make_block(start_hour=7, end_hour=9)) is False

    def test_block_ending_after_window(self, make_block):
        assert validate_bounds(make_block(start_hour=19, end_hour=21)) is False

    def test_zero_duration_block(self, make_block):
        assert validate_bounds(make_block(start_hour=10, end_hour=10)) is False

    def test_custom_window(self, make_block):
        block = make_block(start_hour=6, end_hour=7)
        assert validate_bounds(block, window_start=6, window_end=22) is True


class TestFindOverlap:
    """Test find_overlap() conflict detection."""

    def test_no_overlap_when_touching(self, make_block):
        existing = [make_block(start_hour=9, end_hour=10)]
        candidate = make_block(start_hour=10, end_hour=11)
        assert find_overlap(candidate, existing) is None

    def test_returns_conflicting_block(self, make_block):
        other = make_block(start_hour=9, end_hour=11)
        candidate = make_block(start_hour=10, end_hour=12)
        assert find_overlap(candidate, [other]).id == other.id

    def test_returns_earliest_conflict_by_start_hour(self, make_block):
        late = make_block(start_hour=12, end_hour=14)
        early = make_block(start_hour=9, end_hour=11)
        candidate = make_block(start_hour=10, end_hour=13)
        assert find_overlap(candidate, [late, early]).id == early.id

    def test_ignores_other_days(self, make_block):
        existing = [make_block(day_of_week=2, start_hour=9, end_hour=11)]
        candidate = make_block(day_of_week=1, start_hour=9, end_hour=11)
        assert find_overlap(candidate, existing) is None

    def test_ignores_itself(self, make_block):
        block = make_block(start_hour=9, end_hour=11)
        moved = block.model_copy(update={"start_hour": 10, "end_hour": 12})
        assert find_overlap(moved, [block]) is None

    def test_missed_blocks_free_their_slot(self, make_block):
        existing = [make_block(start_hour=9, end_hour=11, status=BlockStatus.MISSED)]
        candidate = make_block(start_hour=9, end_hour=11)
        assert find_overlap(candidate, existing) is None

    def test_completed_blocks_still_occupy(self, make_block):
        existing = [make_block(start_hour=9, end_hour=11, status=BlockStatus.COMPLETED)]
        candidate = make_block(start_hour=10, end_hour=11)
        assert find_overlap(candidate, existing) is not None


class TestValidateBlock:
    """Test validate_block() error selection."""

    def test_inverted_hours_raise_invalid_duration(self, make_block):
        with pytest.raises(InvalidDuration):
            validate_block(make_block(start_hour=10, end_hour=9), [])

    def test_zero_duration_raises_invalid_duration(self, make_block):
        with pytest.raises(InvalidDuration):
            validate_block(make_block(start_hour=10, end_hour=10), [])

    def test_invalid_duration_checked_before_bounds(self, make_block):
        with pytest.raises(InvalidDuration):
            validate_block(make_block(start_hour=25, end_hour=3), [])

    def test_outside_window_raises_out_of_bounds(self, make_block):
        with pytest.raises(OutOfBounds):
            validate_block(make_block(start_hour=6, end_hour=8), [])

    @pytest.mark.parametrize("day", [-1, 7])
    def test_invalid_day_raises_out_of_bounds(self, make_block, day):
        with pytest.raises(OutOfBounds):
            validate_block(make_block(day_of_week=day), [])

    def test_overlap_raises_conflict_with_block(self, make_block):
        other = make_block(start_hour=9, end_hour=11)
        with pytest.raises(OverlapConflict) as exc_info:
            validate_block(make_block(start_hour=10, end_hour=11), [other])
        assert exc_info.value.conflicting_block.id == other.id

    def test_valid_block_passes(self, make_block):
        validate_block(make_block(start_hour=11, end_hour=12), [make_block(start_hour=9, end_hour=11)])


class TestComputeOccupancy:
    """Test compute_occupancy() grid building."""

    def test_every_day_present(self):
        occupancy = compute_occupancy([])
        assert sorted(occupancy) == list(range(7))
        assert all(cells == [] for cells in occupancy.values())

    def test_cells_sorted_by_start_hour(self, make_block):
        late = make_block(start_hour=14, end_hour=16)
        early = make_block(start_hour=9, end_hour=10)
        occupancy = compute_occupancy([late, early])
        assert occupancy[1] == [(HourRange(9, 10), early.id), (HourRange(14, 16), late.id)]

    def test_missed_blocks_excluded(self, make_block):
        missed = make_block(status=BlockStatus.MISSED)
        assert compute_occupancy([missed])[1] == []


class TestHelpers:
    """Test hours_in_window() and day_summary()."""

    def test_default_window_has_twelve_rows(self):
        hours = hours_in_window()
        assert hours[0] == 8
        assert hours[-1] == 19
        assert len(hours) == 12

    def test_day_summary_counts(self, make_block):
        blocks = [
            make_block(day_of_week=3, start_hour=9, end_hour=11, status=BlockStatus.COMPLETED),
            make_block(day_of_week=3, start_hour=13, end_hour=14),
            make_block(day_of_week=4, start_hour=9, end_hour=12),
        ]
        summary = day_summary(blocks, 3)
        assert summary == {"day_of_week": 3, "scheduled": 2, "completed": 1, "total_hours": 3}
