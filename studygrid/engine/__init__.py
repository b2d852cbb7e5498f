"""Scheduling engine for studygrid."""

from studygrid.engine.grid import compute_occupancy, find_overlap, validate_bounds, validate_block, HourRange
from studygrid.engine.reorder import move_element, DragSession, DragState, FlatReorderStrategy, DayScopedReorderStrategy
from studygrid.engine.fallback import generate_fallback_schedule, generate_insights
from studygrid.engine.response_parser import ChainedResponseParser, find_first_array

__all__ = [
    "compute_occupancy",
    "find_overlap",
    "validate_bounds",
    "validate_block",
    "HourRange",
    "move_element",
    "DragSession",
    "DragState",
    "FlatReorderStrategy",
    "DayScopedReorderStrategy",
    "generate_fallback_schedule",
    "generate_insights",
    "ChainedResponseParser",
    "find_first_array",
]
