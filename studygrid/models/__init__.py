"""Data models for studygrid."""

from studygrid.models.schedule_block import ScheduleBlock, BlockInput, BlockUpdate, BlockStatus
from studygrid.models.topic import TopicCategory, TopicStyle, category_for_topic, style_for_topic, DEFAULT_TOPICS
from studygrid.models.optimization import (
    ActivityPatterns,
    StudyPreferences,
    OptimizationRequest,
    OptimizationResult,
    ProposedBlock,
)

__all__ = [
    "ScheduleBlock",
    "BlockInput",
    "BlockUpdate",
    "BlockStatus",
    "TopicCategory",
    "TopicStyle",
    "category_for_topic",
    "style_for_topic",
    "DEFAULT_TOPICS",
    "ActivityPatterns",
    "StudyPreferences",
    "OptimizationRequest",
    "OptimizationResult",
    "ProposedBlock",
]
