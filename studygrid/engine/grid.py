"""Grid model for studygrid.

Turns a flat list of blocks into a day x hour occupancy view and validates
candidate blocks against the grid window and against each other.
Pure functions only; nothing here touches storage.
"""

from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

from studygrid.models.constants import DAYS_PER_WEEK, DEFAULT_WINDOW_END, DEFAULT_WINDOW_START, MIN_BLOCK_HOURS
from studygrid.models.schedule_block import ScheduleBlock
from studygrid.store.errors import InvalidDuration, OutOfBounds, OverlapConflict


class HourRange(NamedTuple):
    """Half-open hour interval [start, end)."""
    start: int
    end: int

    def intersects(self, other: "HourRange") -> bool:
        # Touching ranges (10-11 and 11-12) do not intersect
        return self.start < other.end and other.start < self.end


def _range_of(block: ScheduleBlock) -> HourRange:
    return HourRange(block.start_hour, block.end_hour)


def hours_in_window(window_start: int = DEFAULT_WINDOW_START, window_end: int = DEFAULT_WINDOW_END) -> List[int]:
    """Hour rows shown on the grid (8..19 for the default window)."""
    return list(range(window_start, window_end))


def compute_occupancy(blocks: Iterable[ScheduleBlock]) -> Dict[int, List[Tuple[HourRange, str]]]:
    """Build the display grid: day -> [(hour range, block id)] sorted by start hour.

    Every day of the week has an entry. Missed blocks do not occupy the grid.
    """
    occupancy: Dict[int, List[Tuple[HourRange, str]]] = {day: [] for day in range(DAYS_PER_WEEK)}
    for block in blocks:
        if not block.occupies_grid():
            continue
        occupancy.setdefault(block.day_of_week, []).append((_range_of(block), block.id))
    for entries in occupancy.values():
        entries.sort(key=lambda entry: (entry[0].start, entry[0].end))
    return occupancy


def find_overlap(candidate: ScheduleBlock, existing: Iterable[ScheduleBlock]) -> Optional[ScheduleBlock]:
    """Return the first block (by start hour) whose interval intersects the candidate.

    The candidate itself (same id), blocks on other days, and missed blocks are ignored.
    """
    if not candidate.occupies_grid():
        return None

    candidate_range = _range_of(candidate)
    same_day = sorted(
        (
            block for block in existing
            if block.id != candidate.id
            and block.day_of_week == candidate.day_of_week
            and block.occupies_grid()
        ),
        key=lambda block: (block.start_hour, block.end_hour),
    )
    for block in same_day:
        if candidate_range.intersects(_range_of(block)):
            return block
    return None


def validate_bounds(
    block: ScheduleBlock,
    window_start: int = DEFAULT_WINDOW_START,
    window_end: int = DEFAULT_WINDOW_END,
) -> bool:
    """Check that the block lies inside the grid window and lasts at least one hour."""
    return (
        block.start_hour >= window_start
        and block.end_hour <= window_end
        and block.end_hour - block.start_hour >= MIN_BLOCK_HOURS
    )


def validate_block(
    candidate: ScheduleBlock,
    existing: Iterable[ScheduleBlock],
    window_start: int = DEFAULT_WINDOW_START,
    window_end: int = DEFAULT_WINDOW_END,
) -> None:
    """Raise if the candidate cannot be accepted onto the grid.

    Raises:
        InvalidDuration: end_hour <= start_hour
        OutOfBounds: day outside 0..6 or hours outside the window
        OverlapConflict: intersects another occupying block on the same day
    """
    if candidate.end_hour <= candidate.start_hour:
        raise InvalidDuration(candidate.start_hour, candidate.end_hour)

    if not 0 <= candidate.day_of_week < DAYS_PER_WEEK:
        raise OutOfBounds(f"day_of_week must be in 0..{DAYS_PER_WEEK - 1}, got {candidate.day_of_week}")

    if not validate_bounds(candidate, window_start, window_end):
        raise OutOfBounds(
            f"Block {candidate.start_hour}-{candidate.end_hour} is outside the "
            f"{window_start}-{window_end} window"
        )

    conflict = find_overlap(candidate, existing)
    if conflict is not None:
        raise OverlapConflict(conflict)


def day_summary(blocks: Iterable[ScheduleBlock], day_of_week: int) -> Dict[str, int]:
    """Scheduled count, completed count and total hours for one day."""
    day_blocks = [b for b in blocks if b.day_of_week == day_of_week]
    return {
        "day_of_week": day_of_week,
        "scheduled": len(day_blocks),
        "completed": len([b for b in day_blocks if b.status == "completed"]),
        "total_hours": sum(b.duration_hours for b in day_blocks),
    }
