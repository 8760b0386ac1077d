"""Recent activity log."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.dependencies import get_log_sink
from app.logs import RECENT_LOGS, LogEntry, LogSink

router = APIRouter()


class LogsResponse(BaseModel):
    logs: list[LogEntry]
    total: int


@router.get("/logs", response_model=LogsResponse)
async def recent_logs(log_sink: LogSink = Depends(get_log_sink)):
    """Last 20 log entries plus the number of entries written since startup."""
    return LogsResponse(logs=log_sink.recent(RECENT_LOGS), total=log_sink.total)
