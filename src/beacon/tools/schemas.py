"""Pydantic schemas for event log tools."""

from pydantic import BaseModel, Field


class QueryRecentEventsArgs(BaseModel):
    """Arguments for querying the event log."""

    event_type: str | None = Field(
        default=None,
        description=(
            "Only return events of this type. Types: chat, playerJoined, playerLeft, death, "
            "spawn, rain, kicked, spawnReset, health, breath, entityHurt, entityDead, "
            "playerCollect, itemDrop, forcedMove, end, error"
        ),
    )
    since_tick: int | None = Field(default=None, ge=0, description="Only events at or after this game tick")
    timestamp_after: float | None = Field(
        default=None, description="Only events captured at or after this unix time (seconds)"
    )
    timestamp_before: float | None = Field(
        default=None, description="Only events captured at or before this unix time (seconds)"
    )
    limit: int = Field(default=50, ge=1, le=100, description="Maximum events to return (1-100)")
    include_details: bool = Field(
        default=True, description="Include event payloads; false returns only type and tick"
    )


class CleanupEventsArgs(BaseModel):
    """Arguments for pruning the event log."""

    before_tick: int = Field(..., ge=0, description="Drop events strictly older than this game tick")
