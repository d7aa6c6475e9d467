from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from adforge.errors import ApiConnectionError, NotFoundError
from adforge.models.job import JobStatus
from adforge.state import ClientStateStore, JobWatcher

pytestmark = pytest.mark.unit


@pytest_asyncio.fixture
async def store(tmp_path):
    return await ClientStateStore(tmp_path / "state.db").hydrate()


def _client_returning(*outcomes):
    client = MagicMock()
    client.jobs.get = AsyncMock(side_effect=list(outcomes))
    return client


# ---------------------------------------------------------------------------
# Store lifecycle
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_state_survives_rehydration(store, tmp_path):
    await store.begin_ad_generation("p1", brand_id="b1", product_name="Kettle", now=1000.0)
    await store.track_job("job-1", "scraping", {"url": "https://shop/x"}, now=1000.0)

    reloaded = await ClientStateStore(tmp_path / "state.db").hydrate()

    assert reloaded.ad_generation.product_id == "p1"
    assert reloaded.ad_generation.brand_id == "b1"
    jobs = reloaded.tracked_jobs()
    assert [j.job_id for j in jobs] == ["job-1"]
    assert jobs[0].metadata == {"url": "https://shop/x"}


@pytest.mark.asyncio
async def test_reset_clears_everything(store, tmp_path):
    await store.begin_ad_generation("p1")
    await store.track_job("job-1", "scraping")

    await store.reset()

    reloaded = await ClientStateStore(tmp_path / "state.db").hydrate()
    assert store.ad_generation is None
    assert reloaded.ad_generation is None
    assert reloaded.tracked_jobs() == []


@pytest.mark.asyncio
async def test_use_before_hydrate_is_an_error(tmp_path):
    with pytest.raises(RuntimeError):
        await ClientStateStore(tmp_path / "state.db").track_job("job-1", "scraping")


@pytest.mark.asyncio
async def test_ad_generation_overdue_after_three_minutes(store, monkeypatch):
    monkeypatch.setattr("adforge.state.settings.GENERATION_REDIRECT_AFTER_S", 180)
    assert store.ad_generation_overdue(now=5000.0) is False

    await store.begin_ad_generation("p1", now=1000.0)
    assert store.ad_generation_overdue(now=1180.0) is False
    assert store.ad_generation_overdue(now=1181.0) is True

    await store.finish_ad_generation()
    assert store.ad_generation_overdue(now=9999.0) is False


@pytest.mark.asyncio
async def test_track_job_is_idempotent(store):
    first = await store.track_job("job-1", "scraping", now=1.0)
    again = await store.track_job("job-1", "ad_generation", now=2.0)

    assert again is first
    assert len(store.tracked_jobs()) == 1
    assert await store.untrack_job("job-1") is True
    assert await store.untrack_job("job-1") is False


@pytest.mark.asyncio
async def test_prune_stale_uses_ttl(store, monkeypatch):
    monkeypatch.setattr("adforge.state.settings.TRACKED_JOB_TTL_S", 1800)
    await store.track_job("old", "scraping", now=0.0)
    await store.track_job("fresh", "scraping", now=1000.0)

    pruned = await store.prune_stale(now=2000.0)

    assert pruned == ["old"]
    assert [j.job_id for j in store.tracked_jobs()] == ["fresh"]


# ---------------------------------------------------------------------------
# JobWatcher
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_watcher_notifies_and_untracks_terminal_jobs(store):
    await store.track_job("scrape-1", "scraping")
    await store.track_job("ads-1", "ad_generation")
    client = _client_returning(
        JobStatus.model_validate({"status": "completed", "result": {"product_name": "Kettle"}}),
        JobStatus.model_validate({"status": "failed", "error": "Image model unavailable"}),
    )

    notes = await JobWatcher().check_once(client, store)

    assert [(n.kind, n.title) for n in notes] == [
        ("success", "Product Scraped Successfully"),
        ("error", "Ad Generation Failed"),
    ]
    assert notes[0].message == 'Product "Kettle" has been added to your brand.'
    assert notes[1].message == "Image model unavailable"
    assert store.tracked_jobs() == []


@pytest.mark.asyncio
async def test_watcher_keeps_running_jobs_and_survives_network_errors(store):
    await store.track_job("a", "video_generation")
    await store.track_job("b", "video_generation")
    client = _client_returning(
        JobStatus.model_validate({"status": "processing"}),
        ApiConnectionError(),
    )

    notes = await JobWatcher().check_once(client, store)

    assert notes == []
    assert [j.job_id for j in store.tracked_jobs()] == ["a", "b"]


@pytest.mark.asyncio
async def test_watcher_drops_job_after_three_consecutive_404s(store):
    await store.track_job("ghost", "scraping")
    watcher = JobWatcher()
    not_found = NotFoundError("Job not found", status_code=404)

    for _ in range(2):
        notes = await watcher.check_once(_client_returning(not_found), store)
        assert notes == []
    notes = await watcher.check_once(_client_returning(not_found), store)

    assert [n.title for n in notes] == ["Job Not Found"]
    assert store.tracked_jobs() == []


@pytest.mark.asyncio
async def test_a_successful_check_resets_the_404_count(store):
    await store.track_job("flaky", "scraping")
    watcher = JobWatcher()
    not_found = NotFoundError("Job not found", status_code=404)
    processing = JobStatus.model_validate({"status": "processing"})

    for outcome in (not_found, not_found, processing, not_found, not_found):
        assert await watcher.check_once(_client_returning(outcome), store) == []

    assert store.tracked_jobs()[0].not_found_count == 2


@pytest.mark.integration
@pytest.mark.asyncio
async def test_watcher_keeps_a_job_whose_status_is_malformed(store, client, backend):
    await store.track_job("j1", "video_generation")
    backend.script(
        "j1",
        {"_raw": {"success": True, "data": None}},
        {"status": "completed", "result": {"video_url": "https://cdn/v.mp4"}},
    )
    watcher = JobWatcher()

    assert await watcher.check_once(client, store) == []
    assert [j.job_id for j in store.tracked_jobs()] == ["j1"]

    notes = await watcher.check_once(client, store)

    assert [n.kind for n in notes] == ["success"]
    assert store.tracked_jobs() == []
