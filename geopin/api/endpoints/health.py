import threading
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    timestamp: str


_clock_lock = threading.Lock()
_last_timestamp: datetime | None = None


def utc_now_strictly_increasing() -> datetime:
    """Current UTC time, nudged forward so consecutive calls never repeat."""
    global _last_timestamp
    with _clock_lock:
        now = datetime.now(timezone.utc)
        if _last_timestamp is not None and now <= _last_timestamp:
            now = _last_timestamp + timedelta(microseconds=1)
        _last_timestamp = now
        return now


def isoformat_z(moment: datetime) -> str:
    return moment.isoformat(timespec="microseconds").replace("+00:00", "Z")


@router.api_route("/health", methods=["GET", "HEAD"], response_model=HealthResponse)
async def health_check():
    """Liveness check. No side effects."""
    return HealthResponse(status="ok", timestamp=isoformat_z(utc_now_strictly_increasing()))
