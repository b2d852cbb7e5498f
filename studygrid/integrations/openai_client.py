"""OpenAI API integration for studygrid.

This module provides the generation collaborator used by the schedule
optimizer: it sends the current schedule, topics and preferences to an
OpenAI-compatible chat completions endpoint and returns the raw text reply.
Replies are untrusted; parsing and validation happen in the optimizer.
"""

import os
import json
import logging
from typing import Optional
from openai import AsyncOpenAI, APIError
from dotenv import load_dotenv

from studygrid.models.constants import DEFAULT_ACTIVITY_PATTERNS, DEFAULT_OPTIMIZER_TIMEOUT_SEC
from studygrid.models.optimization import OptimizationRequest
from studygrid.store.errors import GenerationFailed, OptimizerError, QuotaExhausted, RateLimited

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Model to use for schedule generation. Any OpenAI-compatible gateway works via OPENAI_BASE_URL.
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

SYSTEM_PROMPT = """You are an expert study schedule optimizer. Your job is to analyze a student's current study patterns and create an optimized weekly schedule.

Consider these factors:
1. Peak productivity hours (when focus is highest)
2. Topic difficulty (harder topics should be scheduled during peak hours)
3. Spaced repetition (don't cluster same topics together)
4. Break times (include short breaks between intense sessions)
5. Weekend vs weekday patterns

Return ONLY a valid JSON array of schedule blocks. Each block must have:
- topic_name: string (the study topic)
- day_of_week: number (0=Sunday to 6=Saturday)
- start_hour: number (8-19, in 24-hour format)
- end_hour: number (9-20, must be > start_hour)

Generate 15-20 blocks spread across the week. Do not include any explanation, just the JSON array."""

USER_PROMPT_TEMPLATE = """Current schedule: {current_schedule}

Activity patterns: {activity_patterns}

Topics to study: {topics}

User preferences: {preferences}

Generate an optimized weekly study schedule."""


def build_user_prompt(request: OptimizationRequest) -> str:
    """Render the user message for a request.

    Activity patterns fall back to typical defaults when the caller has none.
    """
    payload = request.to_payload()
    return USER_PROMPT_TEMPLATE.format(
        current_schedule=json.dumps(payload["current_schedule"]),
        activity_patterns=json.dumps(payload.get("activity_patterns") or DEFAULT_ACTIVITY_PATTERNS),
        topics=json.dumps(payload["topics"]),
        preferences=json.dumps(payload["preferences"]),
    )


def classify_api_error(error: APIError) -> OptimizerError:
    """Map an OpenAI SDK error onto the optimizer error taxonomy."""
    error_code = getattr(error, 'code', None)
    status_code = getattr(error, 'status_code', None)

    if error_code == 'insufficient_quota' or status_code == 402:
        return QuotaExhausted(f"Generation quota exhausted ({status_code or 'unknown'})")
    if status_code == 429:
        return RateLimited("Generation rate limit exceeded")
    return GenerationFailed(f"Generation API error: {status_code or 'unknown'} ({error_code or 'unknown'})")


class OpenAIScheduleGenerator:
    """Generation collaborator backed by the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the generator.

        Args:
            api_key: API key. If None, reads from OPENAI_API_KEY environment variable.
            base_url: Gateway URL. If None, reads OPENAI_BASE_URL (default: OpenAI).
            model: Model name. If None, uses OPENAI_MODEL.
            timeout: Request timeout in seconds.

        Note:
            Without an API key the generator still initializes but every call
            raises GenerationFailed, so the optimizer degrades to its fallback.
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.model = model or OPENAI_MODEL
        self.client = None

        if self.api_key:
            self.client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=base_url or os.getenv("OPENAI_BASE_URL") or None,
                timeout=timeout or DEFAULT_OPTIMIZER_TIMEOUT_SEC,
            )
        else:
            logger.warning("OPENAI_API_KEY not found in environment. Schedule optimization will use the fallback schedule.")

    async def generate(self, request: OptimizationRequest) -> str:
        """Ask the model for an optimized schedule.

        Returns:
            The raw reply text (expected to contain a JSON array somewhere).

        Raises:
            RateLimited: HTTP 429
            QuotaExhausted: HTTP 402 or insufficient_quota
            GenerationFailed: not configured, or any other API error
        """
        if not self.client:
            raise GenerationFailed("OPENAI_API_KEY is not configured")

        logger.info(
            f"Optimizing schedule with AI: {len(request.current_schedule)} blocks, {len(request.topics)} topics"
        )
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(request)},
                ],
            )
        except APIError as e:
            error = classify_api_error(e)
            # Don't log full error message as it might contain sensitive info
            logger.warning(f"Schedule generation failed: {type(error).__name__}")
            raise error from e

        content = ""
        if response.choices:
            content = response.choices[0].message.content or ""
        logger.debug(f"AI response: {content[:500]}")
        return content
