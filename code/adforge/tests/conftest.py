"""Shared fixtures: an in-process fake AdForge backend and a client bound to it."""
from __future__ import annotations

from typing import Any, Dict, List

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel

from adforge.client import AdForgeClient


class CreditCheck(BaseModel):
    operation_type: str
    quantity: int


class FakeBackend:
    """Scriptable stand-in for the backend.

    ``job_script[job_id]`` is the sequence of status payloads returned by
    successive status fetches of that job, on the jobs endpoint or the
    video-jobs one; the last one repeats.
    A payload of the form ``{"_raw": body}`` is returned verbatim, envelope
    and all.
    """

    def __init__(self) -> None:
        self.job_script: Dict[str, List[Dict[str, Any]]] = {}
        self.job_fetches: Dict[str, int] = {}
        self.seen: List[Dict[str, Any]] = []
        self.forms: List[Dict[str, Any]] = []
        self.brands: List[Dict[str, Any]] = []
        self.completed_video_jobs: List[Dict[str, Any]] = []
        self.logo_upload_fails = False
        self.app = self._build_app()

    def script(self, job_id: str, *statuses: Dict[str, Any]) -> None:
        self.job_script[job_id] = list(statuses)

    def _record(self, request: Request, body: Any = None) -> None:
        self.seen.append(
            {
                "method": request.method,
                "path": request.url.path,
                "params": dict(request.query_params),
                "authorization": request.headers.get("authorization"),
                "body": body,
            }
        )

    def _next_status(self, job_id: str) -> Any:
        script = self.job_script.get(job_id)
        if not script:
            raise HTTPException(status_code=404, detail=f"Job {job_id} not found")
        n = self.job_fetches.get(job_id, 0)
        self.job_fetches[job_id] = n + 1
        payload = script[min(n, len(script) - 1)]
        if payload.get("_http_error"):
            raise HTTPException(status_code=payload["_http_error"], detail="upstream hiccup")
        if "_raw" in payload:
            return payload["_raw"]
        return {"success": True, "data": {"job_id": job_id, **payload}}

    async def _form(self, request: Request) -> Dict[str, Any]:
        """Multipart fields; uploads are recorded by filename."""
        form = await request.form()
        return {
            key: value.filename if hasattr(value, "filename") else value
            for key, value in form.multi_items()
        }

    def _build_app(self) -> FastAPI:
        app = FastAPI()
        backend = self

        @app.get("/health")
        async def health():
            return {"status": "ok"}

        # -- jobs -------------------------------------------------------------

        @app.get("/api/v1/jobs/{job_id}")
        async def job_status(job_id: str, request: Request):
            backend._record(request)
            return backend._next_status(job_id)

        @app.get("/api/v1/video-chat/video-jobs/{job_id}")
        async def video_job_status(job_id: str, request: Request):
            backend._record(request)
            return backend._next_status(job_id)

        @app.get("/api/v1/jobs")
        async def list_jobs(request: Request):
            backend._record(request)
            if request.query_params.get("type") == "video_generation":
                return {"success": True, "data": {"jobs": backend.completed_video_jobs}}
            jobs = [
                {"job_id": job_id, "type": "scraping", **script[-1]}
                for job_id, script in backend.job_script.items()
            ]
            return {"success": True, "data": {"jobs": jobs, "count": len(jobs)}}

        @app.post("/api/v1/jobs/{job_id}/cancel")
        async def cancel_job(job_id: str, request: Request):
            backend._record(request)
            backend.job_script[job_id] = [{"status": "cancelled", "error": "Cancelled by user"}]
            return {"success": True, "message": "Job cancelled"}

        # -- submission -------------------------------------------------------

        @app.post("/api/v1/scraping/scrape-product-job")
        async def scrape_product(request: Request):
            body = await request.json()
            backend._record(request, body)
            return {"success": True, "data": {"job_id": "scrape-1", "status": "queued"}}

        @app.post("/api/v1/ads/generate-bulk-dynamic-job")
        async def bulk_ads(request: Request):
            backend.forms.append(await backend._form(request))
            backend._record(request)
            return {"success": True, "data": {"job_id": "ads-1", "status": "queued"}}

        @app.post("/api/v1/cinematic-ads/generate-complete")
        async def cinematic(request: Request):
            body = await request.json()
            backend._record(request, body)
            return {"success": True, "task_id": "cine-1", "status": "queued"}

        @app.post("/api/v1/video-playground/playground/generate-video")
        async def playground_video(request: Request):
            body = await request.json()
            backend._record(request, body)
            return {"success": True, "data": {"job_id": "pg-1", "status": "queued"}}

        @app.post("/api/v1/chat/conversations")
        async def chat_conversation(request: Request):
            backend.forms.append(await backend._form(request))
            backend._record(request)
            return {"success": True, "data": {"conversation_id": "conv-1"}}

        # -- catalog / billing ----------------------------------------------

        @app.get("/api/v1/brands")
        async def brands(request: Request):
            backend._record(request)
            return {"success": True, "data": {"brands": backend.brands}}

        @app.get("/api/v1/brands/archived")
        async def archived_brand(request: Request):
            return {"success": False, "message": "Brand archived"}

        @app.post("/api/v1/brands")
        async def create_brand(request: Request):
            body = await request.json()
            backend._record(request, body)
            brand = {"brandId": "b-new", "brandName": body["brandName"], "domain": body["domain"]}
            backend.brands.append(brand)
            return {"success": True, "data": brand}

        @app.patch("/api/v1/brands/{brand_id}")
        async def update_brand(brand_id: str, request: Request):
            body = await request.json()
            backend._record(request, body)
            return {"success": True, "data": {"brandId": brand_id, **body}}

        @app.post("/api/v1/brands/{brand_id}/upload-logo")
        async def upload_logo(brand_id: str, request: Request):
            backend.forms.append(await backend._form(request))
            backend._record(request)
            if backend.logo_upload_fails:
                raise HTTPException(status_code=500, detail="storage unavailable")
            return {"success": True, "data": {"brandId": brand_id, "logoUrl": f"https://cdn/{brand_id}/logo.png"}}

        @app.get("/api/v1/subscriptions/subscription")
        async def subscription(request: Request):
            raise HTTPException(status_code=500, detail="billing provider down")

        @app.post("/api/v1/subscriptions/check-credits")
        async def check_credits(body: CreditCheck):
            return {"success": True, "data": {"has_credits": True}}

        @app.post("/api/v1/subscriptions/deduct-credits")
        async def deduct_credits(request: Request):
            raise HTTPException(
                status_code=402,
                detail={
                    "message": "Insufficient credits",
                    "error_details": {"credits_needed": 40, "credits_available": 12, "current_plan": "starter"},
                },
            )

        @app.get("/api/v1/credits/balance")
        async def balance(request: Request):
            backend._record(request)
            return {"success": True, "data": {"credits": 120, "credits_used": 30}}

        # -- auth ---------------------------------------------------------------

        @app.post("/api/v1/auth/signup")
        async def signup(request: Request):
            body = await request.json()
            backend._record(request, body)
            return {"success": True, "data": {"uid": "u-1"}}

        @app.get("/api/v1/auth/me")
        async def me(request: Request):
            backend._record(request)
            return {"success": True, "data": {"uid": "u-1"}}

        return app

    def requests_to(self, path: str) -> List[Dict[str, Any]]:
        return [r for r in self.seen if r["path"] == path]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest_asyncio.fixture
async def client(backend: FakeBackend):
    transport = httpx.ASGITransport(app=backend.app)
    async with AdForgeClient(base_url="http://test", token="test-token", transport=transport) as c:
        yield c

