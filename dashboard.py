import asyncio

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from analytics import today_summary
from auth import TokenClaims, authenticate
from database import Repository, utcnow
from responses import ok

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])

# stat name -> (collection, filter)
COUNTS = {
    "totalBanners": ("banners", {"isActive": True}),
    "totalEvents": ("events", {}),
    "totalTeamMembers": ("team", {"isActive": True}),
    "totalTestimonials": ("testimonials", {"isActive": True}),
    "totalGalleryItems": ("gallery", {"isActive": True}),
    "totalContacts": ("contacts", {}),
    "unreadContacts": ("contacts", {"isRead": False}),
}


async def collect_stats() -> dict:
    """Counts every collection concurrently, plus today's analytics. Not cached."""
    queries = dict(COUNTS)
    queries["upcomingEvents"] = ("events", {"date": {"$gte": utcnow()}, "isActive": True})

    names = list(queries)
    results = await asyncio.gather(
        *(run_in_threadpool(Repository(collection).count, filter_dict) for collection, filter_dict in queries.values()),
        run_in_threadpool(today_summary),
    )
    stats = dict(zip(names, results[:-1]))
    stats["analytics"] = results[-1]
    return stats


@router.get("/stats")
async def dashboard_stats(_: TokenClaims = Depends(authenticate)):
    return ok(await collect_stats(), "Dashboard stats fetched successfully")
