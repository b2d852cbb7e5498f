"""Schedule optimizer client for studygrid.

Requests an optimized week from the generation collaborator, validates the
proposed blocks, and adds the survivors to the block store. Any collaborator
failure (rate limit, quota, network, timeout, unusable text) degrades to the
rule-based fallback schedule instead of surfacing as an error.
"""

import asyncio
import logging
import os
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from dotenv import load_dotenv

from studygrid.engine.fallback import generate_fallback_schedule, generate_insights
from studygrid.engine.response_parser import ChainedResponseParser
from studygrid.models.constants import DEFAULT_OPTIMIZER_TIMEOUT_SEC, DEFAULT_WINDOW_END, DEFAULT_WINDOW_START
from studygrid.models.optimization import (
    ActivityPatterns,
    OptimizationRequest,
    OptimizationResult,
    ProposedBlock,
    StudyPreferences,
)
from studygrid.models.schedule_block import BlockInput, BlockStatus, ScheduleBlock
from studygrid.models.topic import DEFAULT_TOPICS
from studygrid.store.errors import (
    GenerationFailed,
    OptimizationSuperseded,
    OptimizerError,
    ValidationError,
)

load_dotenv()

logger = logging.getLogger(__name__)

NOTHING_PLACED_MESSAGE = "No free slots were left for the suggested sessions; your schedule was not changed."

OPTIMIZER_TIMEOUT_SEC = float(os.getenv("OPTIMIZER_TIMEOUT_SEC", str(DEFAULT_OPTIMIZER_TIMEOUT_SEC)))


class ScheduleGenerator(Protocol):
    """Generation collaborator: returns free text that should embed a JSON array."""

    async def generate(self, request: OptimizationRequest) -> str:
        ...


def _as_int(value) -> Optional[int]:
    """Accept ints and integral floats; reject bools, strings and fractions."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def validate_entry(
    entry,
    window_start: int = DEFAULT_WINDOW_START,
    window_end: int = DEFAULT_WINDOW_END,
) -> Optional[ProposedBlock]:
    """Turn one raw entry into a ProposedBlock, or None if it fails any check."""
    if not isinstance(entry, dict):
        return None

    topic_name = entry.get("topic_name")
    if not isinstance(topic_name, str) or not topic_name.strip():
        return None

    day = _as_int(entry.get("day_of_week"))
    start = _as_int(entry.get("start_hour"))
    end = _as_int(entry.get("end_hour"))
    if day is None or start is None or end is None:
        return None
    if not 0 <= day <= 6:
        return None
    if not window_start <= start <= window_end - 1:
        return None
    if not start < end <= window_end:
        return None

    return ProposedBlock(topic_name=topic_name.strip(), day_of_week=day, start_hour=start, end_hour=end)


def filter_entries(
    entries: Iterable,
    window_start: int = DEFAULT_WINDOW_START,
    window_end: int = DEFAULT_WINDOW_END,
) -> Tuple[List[ProposedBlock], int]:
    """Keep valid entries; return them with the number dropped."""
    accepted: List[ProposedBlock] = []
    dropped = 0
    for entry in entries:
        block = validate_entry(entry, window_start, window_end)
        if block is None:
            dropped += 1
        else:
            accepted.append(block)
    return accepted, dropped


class OptimizerClient:
    """Runs one optimization at a time against a user's block store."""

    def __init__(
        self,
        store,
        generator: ScheduleGenerator,
        parser: Optional[ChainedResponseParser] = None,
        timeout: Optional[float] = None,
    ):
        self.store = store
        self.generator = generator
        self.parser = parser or ChainedResponseParser()
        self.timeout = timeout if timeout is not None else OPTIMIZER_TIMEOUT_SEC
        self._inflight: Optional[asyncio.Future] = None

    @property
    def busy(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def build_request(
        self,
        topics: Optional[Sequence[str]] = None,
        preferences: Optional[StudyPreferences] = None,
        activity_patterns: Optional[ActivityPatterns] = None,
    ) -> OptimizationRequest:
        return OptimizationRequest(
            current_schedule=list(self.store.blocks),
            activity_patterns=activity_patterns,
            topics=list(topics) if topics else list(DEFAULT_TOPICS),
            preferences=preferences or StudyPreferences(),
        )

    def cancel(self) -> None:
        """Cancel the in-flight request, if any. Its caller gets OptimizationSuperseded."""
        inflight, self._inflight = self._inflight, None
        if inflight is not None and not inflight.done():
            logger.info("Cancelling in-flight schedule optimization")
            inflight.cancel()

    async def optimize(
        self,
        topics: Optional[Sequence[str]] = None,
        preferences: Optional[StudyPreferences] = None,
        activity_patterns: Optional[ActivityPatterns] = None,
    ) -> OptimizationResult:
        """Generate, validate and store an optimized schedule.

        Returns:
            OptimizationResult with the blocks actually added to the store.

        Raises:
            OptimizationSuperseded: a newer optimize() call replaced this one
        """
        request = self.build_request(topics, preferences, activity_patterns)
        window_start, window_end = self.store.window_start, self.store.window_end

        failure: Optional[OptimizerError] = None
        proposed: List[ProposedBlock] = []
        insights: Optional[List[str]] = None
        dropped = 0

        try:
            text = await self._request_text(request)
            parsed = self.parser.parse_or_raise(text)
            proposed, dropped = filter_entries(parsed.entries, window_start, window_end)
            insights = parsed.insights
            if not proposed:
                raise GenerationFailed("Response contained no valid schedule blocks")
        except OptimizationSuperseded:
            raise
        except OptimizerError as e:
            failure = e
        except asyncio.TimeoutError:
            failure = GenerationFailed(f"Generation timed out after {self.timeout}s")
        except ValueError as e:
            failure = GenerationFailed(f"Failed to parse AI response: {e}")
        except Exception as e:
            # Don't log full error message as it might contain sensitive info
            logger.error(f"Unexpected error during schedule generation: {type(e).__name__}")
            failure = GenerationFailed(type(e).__name__)

        if failure is not None:
            logger.warning(f"Falling back to default schedule: {failure.kind} ({failure})")
            proposed = generate_fallback_schedule(request.topics)
            insights = None
            dropped = 0

        added, conflicts = self._apply(proposed)
        logger.info(f"Optimization added {len(added)} blocks, rejected {dropped + conflicts}")

        messages = [failure.user_message] if failure is not None else []
        if not added:
            # Every proposed slot is already taken; the existing schedule is unchanged
            logger.warning(f"None of {len(proposed)} proposed blocks fit the current schedule")
            messages.append(NOTHING_PLACED_MESSAGE)
            insights = [NOTHING_PLACED_MESSAGE]

        return OptimizationResult(
            blocks=added,
            insights=insights or generate_insights(added),
            used_fallback=failure is not None,
            failure=failure.kind if failure is not None else None,
            message=" ".join(messages) or None,
            rejected=dropped + conflicts,
        )

    async def _request_text(self, request: OptimizationRequest) -> str:
        """Call the generator, superseding any earlier in-flight call."""
        task = asyncio.ensure_future(asyncio.wait_for(self.generator.generate(request), self.timeout))
        previous, self._inflight = self._inflight, task
        if previous is not None and not previous.done():
            logger.info("Superseding in-flight schedule optimization")
            previous.cancel()

        try:
            try:
                text = await task
            except asyncio.CancelledError:
                if self._inflight is task:
                    raise
                raise OptimizationSuperseded("Optimization was superseded by a newer request") from None
            if self._inflight is not task:
                raise OptimizationSuperseded("Optimization was superseded by a newer request")
            return text
        finally:
            if self._inflight is task:
                self._inflight = None

    def _apply(self, proposed: Sequence[ProposedBlock]) -> Tuple[List[ScheduleBlock], int]:
        """Add proposed blocks through the store; conflicting ones are skipped."""
        added: List[ScheduleBlock] = []
        conflicts = 0
        for block in proposed:
            try:
                added.append(self.store.add_block(BlockInput(
                    topic_id=None,
                    topic_name=block.topic_name,
                    day_of_week=block.day_of_week,
                    start_hour=block.start_hour,
                    end_hour=block.end_hour,
                    status=BlockStatus.SCHEDULED,
                )))
            except ValidationError as e:
                logger.debug(f"Skipping proposed block {block.topic_name} day {block.day_of_week}: {e}")
                conflicts += 1
        return added, conflicts
