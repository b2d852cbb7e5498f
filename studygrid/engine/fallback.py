"""Rule-based fallback schedule for studygrid.

Used whenever the optimizer collaborator is unavailable or returns nothing
usable. Deterministic, offline, and never raises.
"""

import logging
from collections import Counter
from typing import Iterable, List, Optional, Sequence

from studygrid.models.constants import (
    DAY_NAMES,
    FALLBACK_BREAK,
    FALLBACK_SESSIONS,
    FALLBACK_TOPICS,
    FALLBACK_WEEKDAYS,
)
from studygrid.models.optimization import ProposedBlock

logger = logging.getLogger(__name__)

# Blocks starting before this hour count as morning sessions
NOON = 12


def _usable_topics(topics: Optional[Iterable[str]]) -> List[str]:
    if isinstance(topics, str):
        topics = [topics]
    elif not isinstance(topics, (list, tuple)):
        topics = []
    cleaned = []
    for topic in topics:
        if isinstance(topic, str) and topic.strip():
            cleaned.append(topic.strip())
    return cleaned or list(FALLBACK_TOPICS)


def generate_fallback_schedule(topics: Optional[Sequence[str]] = None) -> List[ProposedBlock]:
    """Build a default week: two sessions per weekday plus a Saturday break.

    Topics are assigned round-robin across all sessions in order, so the
    afternoon topic differs from the morning one and the next morning
    continues the rotation. Empty or missing topics fall back to the defaults.
    """
    pool = _usable_topics(topics)
    schedule: List[ProposedBlock] = []
    topic_index = 0

    for day in FALLBACK_WEEKDAYS:
        for start_hour, end_hour in FALLBACK_SESSIONS:
            schedule.append(ProposedBlock(
                topic_name=pool[topic_index % len(pool)],
                day_of_week=day,
                start_hour=start_hour,
                end_hour=end_hour,
            ))
            topic_index += 1

    topic_name, day, start_hour, end_hour = FALLBACK_BREAK
    schedule.append(ProposedBlock(topic_name=topic_name, day_of_week=day, start_hour=start_hour, end_hour=end_hour))

    logger.debug(f"Generated fallback schedule with {len(schedule)} blocks over {len(pool)} topics")
    return schedule


def generate_insights(blocks: Sequence) -> List[str]:
    """Summarize a schedule in a few human-readable sentences.

    Accepts anything with day_of_week / start_hour / end_hour attributes.
    """
    insights: List[str] = []
    total_hours = sum(b.end_hour - b.start_hour for b in blocks)
    insights.append(f"Your optimized schedule includes {total_hours} hours of focused study time.")

    if not blocks:
        return insights

    morning = len([b for b in blocks if b.start_hour < NOON])
    afternoon = len(blocks) - morning
    if morning > afternoon:
        insights.append("Schedule optimized for morning productivity when focus is typically highest.")
    else:
        insights.append("Balanced distribution between morning and afternoon sessions.")

    hours_per_day = Counter()
    for b in blocks:
        hours_per_day[b.day_of_week] += b.end_hour - b.start_hour
    busiest_day, busiest_hours = min(hours_per_day.items(), key=lambda item: (-item[1], item[0]))
    if 0 <= busiest_day < len(DAY_NAMES):
        insights.append(f"{DAY_NAMES[busiest_day]} is your heaviest day with {busiest_hours} hours planned.")

    return insights
