"""
Page-view analytics, one document per UTC day in the "analytics" collection.

The day document is only ever changed with update operators ($inc,
$addToSet, positional $inc, guarded $push), never read-modify-written,
so concurrent page views cannot lose increments or duplicate a session.
Bounce rate and average session duration are derived when read.
"""
import logging
import math
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pymongo.errors import DuplicateKeyError

from auth import TokenClaims, authenticate
from database import get_db, utcnow
from responses import ok
from schemas import AnalyticsEvent, Session

logger = logging.getLogger(__name__)

COLLECTION = "analytics"


def day_of(moment: datetime) -> datetime:
    return datetime(moment.year, moment.month, moment.day)


def _bump_session(coll, day: datetime, session_id: str, now: datetime) -> bool:
    result = coll.update_one(
        {"date": day, "sessions.sessionId": session_id},
        {"$inc": {"sessions.$.pageViews": 1}, "$set": {"sessions.$.lastActivity": now}},
    )
    return result.matched_count > 0


def record_page_view(session_id: str, visitor_id: str, now: Optional[datetime] = None):
    now = now or utcnow()
    day = day_of(now)
    coll = get_db()[COLLECTION]

    day_update = {
        "$setOnInsert": {"sessions": []},
        "$inc": {"pageViews": 1},
        "$addToSet": {"visitors": visitor_id},
    }
    try:
        coll.update_one({"date": day}, day_update, upsert=True)
    except DuplicateKeyError:
        # lost the race to create today's document; it exists now
        coll.update_one({"date": day}, day_update)

    if _bump_session(coll, day, session_id, now):
        return
    session = Session(session_id=session_id, visitor_id=visitor_id, start_time=now, last_activity=now, page_views=1)
    pushed = coll.update_one(
        {"date": day, "sessions.sessionId": {"$ne": session_id}},
        {"$push": {"sessions": session.model_dump(by_alias=True)}},
    )
    if pushed.matched_count == 0:
        # a concurrent request pushed this session first
        _bump_session(coll, day, session_id, now)


def format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


def summarize(doc: Optional[dict]) -> dict:
    doc = doc or {}
    sessions = doc.get("sessions") or []
    total = len(sessions)
    bounced = sum(1 for s in sessions if s.get("pageViews", 0) == 1)
    bounce_rate = math.floor(bounced / total * 100 + 0.5) if total else 0
    durations = [
        (s["lastActivity"] - s["startTime"]).total_seconds()
        for s in sessions
        if s.get("lastActivity") and s.get("startTime")
    ]
    avg = sum(durations) / total if total else 0
    return {
        "pageViews": doc.get("pageViews", 0),
        "uniqueVisitors": len(doc.get("visitors") or []),
        "sessions": total,
        "bounceRate": bounce_rate,
        "avgSessionDuration": format_duration(avg),
    }


def get_day(now: Optional[datetime] = None) -> Optional[dict]:
    return get_db()[COLLECTION].find_one({"date": day_of(now or utcnow())})


def today_summary() -> dict:
    return summarize(get_day())


# ----------------- Routes -----------------

router = APIRouter(prefix="/api", tags=["Analytics"])


@router.get("/analytics")
def read_analytics(_: TokenClaims = Depends(authenticate)):
    return ok(today_summary(), "Analytics data fetched successfully")


@router.post("/analytics")
def track(request: Request, payload: AnalyticsEvent):
    if payload.action == "pageview":
        if not payload.session_id:
            raise HTTPException(status_code=400, detail="sessionId is required")
        ip = payload.ip or (request.client.host if request.client else "unknown")
        user_agent = payload.user_agent or request.headers.get("user-agent", "")
        record_page_view(payload.session_id, f"{ip}-{user_agent}")
    return ok(message="Analytics updated successfully")
