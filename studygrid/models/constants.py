"""Constants for studygrid.

This module centralizes all magic numbers and default values used throughout the application.
"""

# Grid window (visible hours, end exclusive)
DEFAULT_WINDOW_START = 8
DEFAULT_WINDOW_END = 20
DAYS_PER_WEEK = 7
MIN_BLOCK_HOURS = 1

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

# Drag gesture activation distance in logical pixels
ACTIVATION_DISTANCE_PX = 8

# Optimizer
DEFAULT_OPTIMIZER_TIMEOUT_SEC = 60.0
DEFAULT_PREFERENCES = {
    "daily_study_hours": 4,
    "break_duration": 15,
    "preferred_start": 9,
    "preferred_end": 18,
}
DEFAULT_ACTIVITY_PATTERNS = {
    "best_days": ["Monday", "Wednesday", "Friday"],
    "peak_hours": [9, 10, 11, 14, 15],
    "average_focus": 75,
    "preferred_session_length": 90,
}

# Fallback schedule
FALLBACK_TOPICS = [
    "Arrays & Hashing",
    "Two Pointers",
    "Binary Search",
    "Linked List",
    "Trees",
    "Dynamic Programming",
]
FALLBACK_WEEKDAYS = [1, 2, 3, 4, 5]  # Monday to Friday
FALLBACK_SESSIONS = [(9, 11), (14, 16)]  # Morning, afternoon
FALLBACK_BREAK = ("Break", 6, 10, 11)  # topic, day, start, end
