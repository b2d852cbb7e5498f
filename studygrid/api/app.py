"""FastAPI web application for studygrid."""

import logging
from typing import Dict, List, Optional
from fastapi import FastAPI, HTTPException, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from studygrid.database.database import get_db
from studygrid.database.schedule_block_repository import ScheduleBlockRepository
from studygrid.engine.grid import compute_occupancy, hours_in_window
from studygrid.engine.reorder import FlatReorderStrategy
from studygrid.integrations.openai_client import OpenAIScheduleGenerator
from studygrid.models.optimization import ActivityPatterns, OptimizationResult, StudyPreferences
from studygrid.models.schedule_block import BlockInput, BlockUpdate, ScheduleBlock
from studygrid.models.topic import TopicStyle, category_for_topic, known_topics, style_for_topic
from studygrid.optimizer.client import OptimizerClient
from studygrid.store.block_store import BlockStore
from studygrid.store.errors import (
    BlockNotFound,
    InvalidDuration,
    InvalidStatusTransition,
    OptimizationSuperseded,
    OutOfBounds,
    OverlapConflict,
    PartialReorderFailure,
    StorageUnavailable,
    StoreLocked,
    StudyGridError,
)

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="studygrid API",
    description="Weekly study schedule builder with AI optimization",
    version="0.1.0"
)

# Latest optimizer per user; a new optimize request supersedes the previous one
optimizers: Dict[str, OptimizerClient] = {}

reorder_strategy = FlatReorderStrategy()


# Request/response models
class BlockResponse(BaseModel):
    block: ScheduleBlock


class BlockListResponse(BaseModel):
    blocks: List[ScheduleBlock]


class ReorderRequest(BaseModel):
    block_ids: List[str] = Field(..., description="Every block id, in the new display order")


class MoveRequest(BaseModel):
    target_id: str = Field(..., description="Block whose position the moved block takes")


class OptimizeRequest(BaseModel):
    topics: Optional[List[str]] = None
    preferences: Optional[StudyPreferences] = None
    activity_patterns: Optional[ActivityPatterns] = None


class TopicInfo(BaseModel):
    name: str
    category: str
    style: TopicStyle


class GridCell(BaseModel):
    block_id: str
    start_hour: int
    end_hour: int


class GridResponse(BaseModel):
    hours: List[int]
    days: Dict[int, List[GridCell]]


class DaySummaryResponse(BaseModel):
    day_of_week: int
    scheduled: int
    completed: int
    total_hours: int


def _http_error(error: StudyGridError) -> HTTPException:
    """Map a studygrid error onto an HTTP error response."""
    if isinstance(error, BlockNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, OverlapConflict):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, (InvalidDuration, OutOfBounds, InvalidStatusTransition)):
        return HTTPException(status_code=422, detail=str(error))
    if isinstance(error, StoreLocked):
        return HTTPException(status_code=status.HTTP_423_LOCKED, detail=str(error))
    if isinstance(error, StorageUnavailable):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(error))
    if isinstance(error, PartialReorderFailure):
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": str(error), "failed_ids": error.failed_ids},
        )
    if isinstance(error, OptimizationSuperseded):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))


def get_block_store(user_id: str, db: Session = Depends(get_db)) -> BlockStore:
    """Load the user's block store for this request."""
    store = BlockStore(user_id, ScheduleBlockRepository(db))
    try:
        store.load()
    except StorageUnavailable as e:
        raise _http_error(e)
    return store


def get_schedule_generator() -> OpenAIScheduleGenerator:
    """Generation collaborator (overridable in tests)."""
    return OpenAIScheduleGenerator()


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.get("/topics", response_model=List[TopicInfo])
async def list_topics():
    """Known topics with their display styles."""
    return [
        TopicInfo(name=name, category=category_for_topic(name).value, style=style_for_topic(name))
        for name in known_topics()
    ]


@app.get("/users/{user_id}/blocks", response_model=BlockListResponse)
def list_blocks(store: BlockStore = Depends(get_block_store)):
    """List a user's blocks in display order."""
    return BlockListResponse(blocks=list(store.blocks))


@app.post("/users/{user_id}/blocks", response_model=BlockResponse, status_code=status.HTTP_201_CREATED)
def create_block(data: BlockInput, store: BlockStore = Depends(get_block_store)):
    """Add a block to the schedule."""
    try:
        return BlockResponse(block=store.add_block(data))
    except StudyGridError as e:
        raise _http_error(e)


@app.patch("/users/{user_id}/blocks/{block_id}", response_model=BlockResponse)
def update_block(block_id: str, update: BlockUpdate, store: BlockStore = Depends(get_block_store)):
    """Partially update a block (time slot, topic or status)."""
    try:
        return BlockResponse(block=store.update_block(block_id, update))
    except StudyGridError as e:
        raise _http_error(e)


@app.delete("/users/{user_id}/blocks/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_block(block_id: str, store: BlockStore = Depends(get_block_store)):
    """Delete a block. Unknown ids succeed."""
    try:
        store.delete_block(block_id)
    except StudyGridError as e:
        raise _http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.put("/users/{user_id}/blocks/order", response_model=BlockListResponse)
def reorder_blocks(request: ReorderRequest, store: BlockStore = Depends(get_block_store)):
    """Replace the display order of all blocks."""
    by_id = {block.id: block for block in store.blocks}
    missing = [block_id for block_id in request.block_ids if block_id not in by_id]
    if missing:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown blocks: {', '.join(missing)}")
    try:
        return BlockListResponse(blocks=store.reorder_blocks([by_id[block_id] for block_id in request.block_ids]))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StudyGridError as e:
        raise _http_error(e)


@app.post("/users/{user_id}/blocks/{block_id}/move", response_model=BlockListResponse)
def move_block(block_id: str, request: MoveRequest, store: BlockStore = Depends(get_block_store)):
    """Move one block to another block's position (drag-and-drop drop)."""
    for required in (block_id, request.target_id):
        if store.get_block(required) is None:
            raise _http_error(BlockNotFound(required))

    new_order = reorder_strategy.reorder(store.blocks, block_id, request.target_id)
    if new_order is None:
        return BlockListResponse(blocks=list(store.blocks))
    try:
        return BlockListResponse(blocks=store.reorder_blocks(new_order))
    except StudyGridError as e:
        raise _http_error(e)


@app.get("/users/{user_id}/grid", response_model=GridResponse)
def view_grid(store: BlockStore = Depends(get_block_store)):
    """Day x hour occupancy of the user's week."""
    occupancy = compute_occupancy(store.blocks)
    return GridResponse(
        hours=hours_in_window(store.window_start, store.window_end),
        days={
            day: [GridCell(block_id=block_id, start_hour=hours.start, end_hour=hours.end) for hours, block_id in cells]
            for day, cells in occupancy.items()
        },
    )


@app.get("/users/{user_id}/days/{day_of_week}/summary", response_model=DaySummaryResponse)
def day_summary(day_of_week: int, store: BlockStore = Depends(get_block_store)):
    """Session counts and study hours for one day."""
    if not 0 <= day_of_week <= 6:
        raise HTTPException(status_code=422, detail="day_of_week must be in 0..6")
    return DaySummaryResponse(**store.day_summary(day_of_week))


@app.post("/users/{user_id}/schedule/optimize", response_model=OptimizationResult)
async def optimize_schedule(
    user_id: str,
    request: OptimizeRequest,
    store: BlockStore = Depends(get_block_store),
    generator=Depends(get_schedule_generator),
):
    """Generate an optimized schedule and add it to the user's blocks.

    Collaborator failures fall back to the default schedule; the response's
    ``failure`` and ``message`` fields say why.
    """
    previous = optimizers.get(user_id)
    if previous is not None:
        previous.cancel()
    client = OptimizerClient(store, generator)
    optimizers[user_id] = client

    try:
        return await client.optimize(
            topics=request.topics,
            preferences=request.preferences,
            activity_patterns=request.activity_patterns,
        )
    except StudyGridError as e:
        raise _http_error(e)
    finally:
        if optimizers.get(user_id) is client:
            del optimizers[user_id]


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
