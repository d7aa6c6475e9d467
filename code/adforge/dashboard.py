"""Best-effort fan-out loading for the dashboard.

Page-load fetches are independent: they are issued concurrently and each
one that fails is recorded and replaced by an empty value, never hiding
the others.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Dict, List, Optional

import structlog

from adforge.models.catalog import Brand, CreditBalance, Subscription

if TYPE_CHECKING:
    from adforge.client import AdForgeClient

log = structlog.get_logger(__name__)

RECENT_VIDEOS = 5


@dataclass
class FanOutResult:
    values: Dict[str, Any] = field(default_factory=dict)
    errors: Dict[str, BaseException] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    @property
    def ok(self) -> bool:
        return not self.errors


async def gather_best_effort(**coros: Awaitable[Any]) -> FanOutResult:
    """Await every coroutine concurrently; split outcomes into values and errors."""
    keys = list(coros)
    outcomes = await asyncio.gather(*coros.values(), return_exceptions=True)
    result = FanOutResult()
    for key, outcome in zip(keys, outcomes):
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, BaseException):
            log.warning("fan_out_fetch_failed", key=key, error=str(outcome), error_type=type(outcome).__name__)
            result.errors[key] = outcome
        else:
            result.values[key] = outcome
    return result


@dataclass
class DashboardSummary:
    total_brands: int = 0
    total_products: int = 0
    total_ads: int = 0
    total_videos: int = 0
    available_credits: int = 0
    used_credits: int = 0
    subscription_plan: str = "free"
    recent_videos: List[Dict[str, Any]] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)


def merge_videos(*sources: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Concatenate video lists keeping the first entry for each ``video_url``.

    >>> merge_videos([{"video_url": "a"}], [{"video_url": "a"}, {"video_url": "b"}, {}])
    [{'video_url': 'a'}, {'video_url': 'b'}]
    """
    seen: Dict[str, Dict[str, Any]] = {}
    for source in sources:
        for video in source:
            url = video.get("video_url")
            if url and url not in seen:
                seen[url] = video
    return list(seen.values())


def _recent(videos: List[Dict[str, Any]], brand_id: Optional[str]) -> List[Dict[str, Any]]:
    if brand_id:
        videos = [v for v in videos if v.get("brand_id") == brand_id or f"stores/{brand_id}/" in v["video_url"]]
    ordered = sorted(videos, key=lambda v: v.get("created_at") or v.get("createdAt") or "", reverse=True)
    return ordered[:RECENT_VIDEOS]


async def load_dashboard(client: "AdForgeClient", brand_id: Optional[str] = None) -> DashboardSummary:
    """Fetch dashboard data concurrently and fold it into a summary.

    Any fetch that fails leaves its part of the summary at the default.
    """
    fetched = await gather_best_effort(
        brands=client.brands.list(),
        playground_videos=client.videos.playground(limit=100),
        job_videos=client.videos.from_jobs(limit=100),
        subscription=client.subscriptions.current(),
        credits=client.credits.balance(),
    )

    brands: List[Brand] = fetched.get("brands", [])
    videos = merge_videos(fetched.get("playground_videos", []), fetched.get("job_videos", []))
    subscription: Optional[Subscription] = fetched.get("subscription")
    credits: Optional[CreditBalance] = fetched.get("credits")

    summary = DashboardSummary(
        total_brands=len(brands),
        total_products=sum(b.product_count for b in brands),
        total_ads=sum(b.ads_count for b in brands),
        total_videos=len(videos),
        recent_videos=_recent(videos, brand_id),
        errors={key: str(exc) for key, exc in fetched.errors.items()},
    )
    if subscription is not None:
        summary.subscription_plan = subscription.plan or "free"
    if credits is not None:
        summary.available_credits = credits.available
        summary.used_credits = credits.used

    log.info(
        "dashboard_loaded",
        brands=summary.total_brands,
        videos=summary.total_videos,
        failed=sorted(fetched.errors),
    )
    return summary
