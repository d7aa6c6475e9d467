from __future__ import annotations

import json

import httpx
import pytest

from adforge import cli
from adforge.client import AdForgeClient

pytestmark = pytest.mark.integration


@pytest.fixture
def fake_client(backend, monkeypatch):
    """Route every client the CLI builds to the in-process backend."""
    transport = httpx.ASGITransport(app=backend.app)

    def build(base_url=None, token=None):
        return AdForgeClient(base_url="http://test", token=token or "cli-token", transport=transport)

    monkeypatch.setattr(cli, "AdForgeClient", build)
    return backend


def test_health(fake_client, capsys):
    assert cli.main(["health"]) == 0
    assert capsys.readouterr().out.strip() == "ok"


def test_job_wait_prints_result(fake_client, capsys):
    fake_client.script(
        "job-1",
        {"status": "processing", "progress": {"percentage": 50, "current_step": "Rendering"}},
        {"status": "completed", "result": {"video_url": "https://cdn/v.mp4"}},
    )

    code = cli.main(["job", "wait", "job-1", "--interval", "0"])

    out = capsys.readouterr().out
    assert code == 0
    assert "[ 50.0%] Rendering" in out
    assert json.loads(out[out.index("{"):]) == {"video_url": "https://cdn/v.mp4"}


def test_unknown_job_prints_user_message(fake_client, capsys):
    code = cli.main(["job", "status", "nope"])

    assert code == 1
    assert "Job nope not found" in capsys.readouterr().err


def test_job_list_and_cancel(fake_client, capsys):
    fake_client.script("job-7", {"status": "queued"})

    assert cli.main(["job", "list"]) == 0
    assert "job-7" in capsys.readouterr().out

    assert cli.main(["job", "cancel", "job-7"]) == 0
    assert "cancel requested for job-7" in capsys.readouterr().out
    assert fake_client.requests_to("/api/v1/jobs/job-7/cancel")[0]["authorization"] == "Bearer cli-token"


def test_cinematic_submit_only(fake_client, capsys):
    code = cli.main(["cinematic", "--name", "Kettle", "--description", "Pour-over", "--style", "luxury", "--no-wait"])

    assert code == 0
    assert "job cine-1 submitted" in capsys.readouterr().out
    body = fake_client.requests_to("/api/v1/cinematic-ads/generate-complete")[0]["body"]
    assert body["style_modifiers"] == ["--luxury"]


def test_cinematic_rejects_out_of_range_duration(fake_client, capsys):
    code = cli.main(["cinematic", "--name", "Kettle", "--description", "x", "--duration", "30"])

    assert code == 1
    assert "Invalid input" in capsys.readouterr().err
    assert fake_client.requests_to("/api/v1/cinematic-ads/generate-complete") == []


def test_credits_survive_a_failing_subscription_endpoint(fake_client, capsys):
    assert cli.main(["credits"]) == 0

    out = capsys.readouterr().out
    assert "plan: unknown" in out
    assert "credits available: 120" in out
    assert "credits used: 30" in out
