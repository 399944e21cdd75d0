"""
Monitoring API endpoints for the ShipRelay server.
"""

from datetime import UTC, datetime

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

monitoring_router = APIRouter(tags=["monitoring"])


class HealthResponse(BaseModel):
    """Relay health and occupancy snapshot."""

    status: str = Field(..., description="Overall relay status")
    timestamp: str = Field(..., description="ISO-8601 timestamp of the check")
    connections: int = Field(..., description="Open WebSocket connections")
    rooms: int = Field(..., description="Live rooms")
    matched_rooms: int = Field(..., description="Rooms with both a host and a client")
    liveness_monitor_running: bool = Field(..., description="Whether the liveness task is running")


class HealthErrorResponse(BaseModel):
    """Error response for health check failures."""

    status: str = Field(..., description="Overall relay status")
    error: str = Field(..., description="Error message")
    timestamp: str = Field(..., description="ISO-8601 timestamp of the check")


@monitoring_router.get("/health", response_model=HealthResponse)
async def get_health_status(request: Request) -> HealthResponse | JSONResponse:
    """Report connection and room counts."""
    timestamp = datetime.now(UTC).isoformat()
    container = getattr(request.app.state, "container", None)
    if container is None:
        error_response = HealthErrorResponse(
            status="unhealthy", error="Relay services not initialized", timestamp=timestamp
        )
        return JSONResponse(status_code=503, content=error_response.model_dump())

    room_stats = container.session_table.get_stats()
    return HealthResponse(
        status="healthy",
        timestamp=timestamp,
        connections=container.connection_manager.get_connection_count(),
        rooms=room_stats["rooms"],
        matched_rooms=room_stats["matched_rooms"],
        liveness_monitor_running=container.liveness_monitor.is_running,
    )
