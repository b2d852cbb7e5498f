"""Request and result models for the schedule optimizer."""

from typing import Any, List, Optional
from pydantic import BaseModel, Field

from studygrid.models.constants import DEFAULT_PREFERENCES
from studygrid.models.schedule_block import ScheduleBlock
from studygrid.models.topic import DEFAULT_TOPICS


class ActivityPatterns(BaseModel):
    """Summary of when the user studies best."""
    best_days: List[str] = Field(default_factory=list)
    peak_hours: List[int] = Field(default_factory=list)
    average_focus: Optional[float] = None
    preferred_session_length: Optional[int] = Field(None, description="Minutes")


class StudyPreferences(BaseModel):
    """User scheduling preferences."""
    daily_study_hours: int = DEFAULT_PREFERENCES["daily_study_hours"]
    break_duration: int = Field(DEFAULT_PREFERENCES["break_duration"], description="Minutes")
    preferred_start: int = DEFAULT_PREFERENCES["preferred_start"]
    preferred_end: int = DEFAULT_PREFERENCES["preferred_end"]


class OptimizationRequest(BaseModel):
    """Payload sent to the generation collaborator."""
    current_schedule: List[ScheduleBlock] = Field(default_factory=list)
    activity_patterns: Optional[ActivityPatterns] = None
    topics: List[str] = Field(default_factory=lambda: list(DEFAULT_TOPICS))
    preferences: StudyPreferences = Field(default_factory=StudyPreferences)

    def to_payload(self) -> dict:
        """JSON-ready body; activity_patterns is omitted when unknown."""
        payload = {
            "current_schedule": [
                {
                    "topic_name": b.topic_name,
                    "day_of_week": b.day_of_week,
                    "start_hour": b.start_hour,
                    "end_hour": b.end_hour,
                    "status": b.status,
                }
                for b in self.current_schedule
            ],
            "topics": list(self.topics),
            "preferences": self.preferences.model_dump(),
        }
        if self.activity_patterns is not None:
            payload["activity_patterns"] = self.activity_patterns.model_dump(exclude_none=True)
        return payload


class ProposedBlock(BaseModel):
    """A block proposed by the optimizer (or fallback), not yet stored."""
    topic_name: str
    day_of_week: int
    start_hour: int
    end_hour: int


class ParsedSchedule(BaseModel):
    """Raw entries and optional insights pulled out of a collaborator response."""
    entries: List[Any] = Field(default_factory=list)
    insights: Optional[List[str]] = None


class OptimizationResult(BaseModel):
    """Outcome of an optimize call."""
    blocks: List[ScheduleBlock] = Field(default_factory=list, description="Blocks added to the store")
    insights: List[str] = Field(default_factory=list)
    used_fallback: bool = False
    failure: Optional[str] = Field(None, description="rate_limited, quota_exhausted or generation_failed")
    message: Optional[str] = None
    rejected: int = Field(0, description="Proposed blocks dropped by validation or conflicts")
