"""
AdForge - Client State Store
Explicit, persisted client-side state: the in-flight ad generation session
and the background jobs the user asked to be notified about.
Uses aiosqlite; one small schema created on hydrate().
"""
from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

import aiosqlite
import httpx
import structlog

from adforge.config import settings
from adforge.errors import AdForgeError, NotFoundError
from adforge.models.job import JobState

if TYPE_CHECKING:
    from adforge.client import AdForgeClient

log = structlog.get_logger(__name__)

CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS ad_generation (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    product_id TEXT NOT NULL,
    brand_id TEXT,
    product_name TEXT,
    started_at REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS tracked_jobs (
    job_id TEXT PRIMARY KEY,
    job_type TEXT NOT NULL,
    metadata TEXT,
    started_at REAL NOT NULL,
    not_found_count INTEGER DEFAULT 0
);
"""


@dataclass
class AdGenerationSession:
    product_id: str
    brand_id: Optional[str]
    product_name: Optional[str]
    started_at: float


@dataclass
class TrackedJob:
    job_id: str
    job_type: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    started_at: float = 0.0
    not_found_count: int = 0


class ClientStateStore:
    """Typed client state with an explicit lifecycle.

    ``hydrate()`` must be awaited before use; every mutation is written
    through to sqlite so state survives restarts.
    """

    def __init__(self, db_path: Union[str, Path, None] = None) -> None:
        self.db_path = Path(db_path or settings.STATE_DB_PATH)
        self.ad_generation: Optional[AdGenerationSession] = None
        self._jobs: Dict[str, TrackedJob] = {}
        self._hydrated = False

    async def hydrate(self) -> "ClientStateStore":
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            await db.executescript(CREATE_TABLES_SQL)
            await db.commit()

            cursor = await db.execute(
                "SELECT product_id, brand_id, product_name, started_at FROM ad_generation WHERE id = 1"
            )
            row = await cursor.fetchone()
            self.ad_generation = AdGenerationSession(**dict(row)) if row else None

            cursor = await db.execute(
                "SELECT job_id, job_type, metadata, started_at, not_found_count "
                "FROM tracked_jobs ORDER BY started_at"
            )
            rows = await cursor.fetchall()

        self._jobs = {}
        for r in rows:
            job = TrackedJob(
                job_id=r["job_id"],
                job_type=r["job_type"],
                metadata=json.loads(r["metadata"]) if r["metadata"] else {},
                started_at=r["started_at"],
                not_found_count=r["not_found_count"] or 0,
            )
            self._jobs[job.job_id] = job
        self._hydrated = True
        log.debug("client_state_hydrated", tracked_jobs=len(self._jobs), generating=self.ad_generation is not None)
        return self

    async def reset(self) -> None:
        """Forget everything (e.g. on logout)."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.executescript(CREATE_TABLES_SQL)
            await db.execute("DELETE FROM ad_generation")
            await db.execute("DELETE FROM tracked_jobs")
            await db.commit()
        self.ad_generation = None
        self._jobs = {}
        log.info("client_state_reset")

    def _require_hydrated(self) -> None:
        if not self._hydrated:
            raise RuntimeError("ClientStateStore.hydrate() must be awaited first")

    # -- Ad generation session ---------------------------------------------

    async def begin_ad_generation(
        self,
        product_id: str,
        brand_id: Optional[str] = None,
        product_name: Optional[str] = None,
        now: Optional[float] = None,
    ) -> AdGenerationSession:
        self._require_hydrated()
        session = AdGenerationSession(product_id, brand_id, product_name, time.time() if now is None else now)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "INSERT OR REPLACE INTO ad_generation (id, product_id, brand_id, product_name, started_at) "
                "VALUES (1, ?, ?, ?, ?)",
                (session.product_id, session.brand_id, session.product_name, session.started_at),
            )
            await db.commit()
        self.ad_generation = session
        return session

    def ad_generation_overdue(self, now: Optional[float] = None) -> bool:
        """True once a generation has run longer than the redirect threshold."""
        if self.ad_generation is None:
            return False
        now = time.time() if now is None else now
        return now - self.ad_generation.started_at > settings.GENERATION_REDIRECT_AFTER_S

    async def finish_ad_generation(self) -> None:
        self._require_hydrated()
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM ad_generation")
            await db.commit()
        self.ad_generation = None

    # -- Tracked jobs ---------------------------------------------------------

    async def track_job(
        self,
        job_id: str,
        job_type: str,
        metadata: Optional[Dict[str, Any]] = None,
        now: Optional[float] = None,
    ) -> TrackedJob:
        """Start tracking a job. Tracking the same job twice is a no-op."""
        self._require_hydrated()
        existing = self._jobs.get(job_id)
        if existing is not None:
            return existing
        job = TrackedJob(job_id, job_type, dict(metadata or {}), time.time() if now is None else now)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "INSERT OR IGNORE INTO tracked_jobs (job_id, job_type, metadata, started_at) VALUES (?, ?, ?, ?)",
                (job.job_id, job.job_type, json.dumps(job.metadata), job.started_at),
            )
            await db.commit()
        self._jobs[job_id] = job
        log.info("job_tracked", job_id=job_id, job_type=job_type)
        return job

    async def untrack_job(self, job_id: str) -> bool:
        self._require_hydrated()
        if self._jobs.pop(job_id, None) is None:
            return False
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM tracked_jobs WHERE job_id = ?", (job_id,))
            await db.commit()
        return True

    def tracked_jobs(self) -> List[TrackedJob]:
        return list(self._jobs.values())

    async def record_not_found(self, job_id: str) -> int:
        job = self._jobs[job_id]
        job.not_found_count += 1
        await self._save_not_found(job)
        return job.not_found_count

    async def clear_not_found(self, job_id: str) -> None:
        job = self._jobs.get(job_id)
        if job is not None and job.not_found_count:
            job.not_found_count = 0
            await self._save_not_found(job)

    async def _save_not_found(self, job: TrackedJob) -> None:
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "UPDATE tracked_jobs SET not_found_count = ? WHERE job_id = ?",
                (job.not_found_count, job.job_id),
            )
            await db.commit()

    async def prune_stale(self, now: Optional[float] = None) -> List[str]:
        """Drop tracked jobs older than the configured TTL; return their ids."""
        self._require_hydrated()
        now = time.time() if now is None else now
        stale = [j.job_id for j in self._jobs.values() if now - j.started_at > settings.TRACKED_JOB_TTL_S]
        for job_id in stale:
            await self.untrack_job(job_id)
        if stale:
            log.info("stale_jobs_pruned", job_ids=stale)
        return stale


# ---------------------------------------------------------------------------
# Background job notifications
# ---------------------------------------------------------------------------

NOT_FOUND_LIMIT = 3

_TYPE_TITLES = {
    "scraping": "Scraping",
    "ad_generation": "Ad Generation",
    "video_generation": "Video Generation",
}


@dataclass
class JobNotification:
    kind: str  # "success" | "error"
    title: str
    message: str
    job_id: str
    job_type: str
    result: Any = None


def _completed_notification(job: TrackedJob, result: Any) -> JobNotification:
    result = result if isinstance(result, dict) else {}
    meta = job.metadata
    if job.job_type == "scraping":
        name = result.get("product_name") or result.get("title") or "Unknown"
        title, message = "Product Scraped Successfully", f'Product "{name}" has been added to your brand.'
    elif job.job_type == "ad_generation":
        count = len(result.get("ads") or result.get("generated_images") or [])
        suffix = f' for "{result["product_name"]}"' if result.get("product_name") else ""
        title = "Ads Generated Successfully"
        message = f"{count} ad{'s' if count != 1 else ''} have been generated{suffix}."
    elif job.job_type == "video_generation":
        name = meta.get("product_name") or result.get("product_name") or "your product"
        title, message = "Video Generated Successfully", f'Your video for "{name}" is ready to view.'
    else:
        title, message = "Job completed", "Your job has finished processing."
    return JobNotification("success", title, message, job.job_id, job.job_type, result)


class JobWatcher:
    """Checks tracked jobs and turns terminal outcomes into notifications."""

    def __init__(self, not_found_limit: int = NOT_FOUND_LIMIT) -> None:
        self.not_found_limit = not_found_limit

    async def check_once(self, client: "AdForgeClient", store: ClientStateStore) -> List[JobNotification]:
        notifications: List[JobNotification] = []
        for job in store.tracked_jobs():
            try:
                status = await client.jobs.get(job.job_id)
            except NotFoundError:
                misses = await store.record_not_found(job.job_id)
                log.info("tracked_job_not_found", job_id=job.job_id, misses=misses)
                if misses >= self.not_found_limit:
                    await store.untrack_job(job.job_id)
                    notifications.append(
                        JobNotification(
                            "error",
                            "Job Not Found",
                            "The job could not be found. It may have been cancelled or expired.",
                            job.job_id,
                            job.job_type,
                        )
                    )
                continue
            except (AdForgeError, httpx.HTTPError) as exc:
                # Possibly transient; the job stays tracked
                log.warning("tracked_job_check_failed", job_id=job.job_id, error=str(exc))
                continue

            await store.clear_not_found(job.job_id)
            if status.status == JobState.COMPLETED:
                await store.untrack_job(job.job_id)
                notifications.append(_completed_notification(job, status.result))
            elif status.status in (JobState.FAILED, JobState.CANCELLED):
                await store.untrack_job(job.job_id)
                outcome = "Cancelled" if status.status == JobState.CANCELLED else "Failed"
                notifications.append(
                    JobNotification(
                        "error",
                        f"{_TYPE_TITLES.get(job.job_type, 'Job')} {outcome}",
                        status.error or "An error occurred during processing. Please try again.",
                        job.job_id,
                        job.job_type,
                    )
                )
        return notifications
