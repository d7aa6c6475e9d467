"""Job models: the client's view of an asynchronous backend operation.

Slow endpoints (scraping, ad generation, video generation, strategic
analysis) submit a job and return a ``job_id`` immediately; the client polls
GET /api/v1/jobs/{job_id} until status is "completed", "failed" or
"cancelled".

JobStatus is the one documented schema for a status response. Older backend
builds spell some fields differently (``progress_data``, ``result_data``,
``error_data.message``, ``error_message``); those spellings are folded in at
validation time so nothing downstream has to care.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator


class JobState(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({JobState.COMPLETED, JobState.FAILED, JobState.CANCELLED})


class JobType(str, Enum):
    SCRAPING = "scraping"
    AD_GENERATION = "ad_generation"
    VIDEO_GENERATION = "video_generation"
    AVATAR_VIDEO = "avatar_video"
    CINEMATIC_AD = "cinematic_ad"
    STRATEGIC_ANALYSIS = "strategic_analysis"
    REMIX = "remix"
    UNKNOWN = "unknown"


class JobProgress(BaseModel):
    percentage: float = Field(default=0.0, ge=0.0, le=100.0)
    current_step: str = "Processing..."

    @model_validator(mode="before")
    @classmethod
    def _from_number(cls, data: Any) -> Any:
        # Job listings report progress as a bare number
        if isinstance(data, (int, float)):
            return {"percentage": data}
        return data

    @field_validator("percentage", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> float:
        try:
            pct = float(value or 0)
        except (TypeError, ValueError):
            return 0.0
        return min(100.0, max(0.0, pct))

    @field_validator("current_step", mode="before")
    @classmethod
    def _default_step(cls, value: Any) -> str:
        return value or "Processing..."


class JobStatus(BaseModel):
    """A single status observation of a job."""

    job_id: str = ""
    status: JobState
    progress: Optional[JobProgress] = None
    result: Optional[Any] = None
    error: Optional[str] = None
    job_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("job_type", "type"))
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def _fold_legacy_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("progress") is None:
            if data.get("progress_data") is not None:
                data["progress"] = data["progress_data"]
            elif data.get("progress_percentage") is not None:
                data["progress"] = {
                    "percentage": data["progress_percentage"],
                    "current_step": data.get("current_step"),
                }
        if data.get("result") is None and data.get("result_data") is not None:
            data["result"] = data["result_data"]
        if not data.get("error"):
            error_data = data.get("error_data")
            if isinstance(error_data, dict) and error_data.get("message"):
                data["error"] = error_data["message"]
            elif isinstance(error_data, str) and error_data:
                data["error"] = error_data
            elif data.get("error_message"):
                data["error"] = data["error_message"]
        return data

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    @property
    def percentage(self) -> float:
        if self.progress is not None:
            return self.progress.percentage
        return 100.0 if self.status == JobState.COMPLETED else 0.0


class SubmittedJob(BaseModel):
    """Acknowledgement returned by every job-submitting endpoint."""

    job_id: str = Field(validation_alias=AliasChoices("job_id", "task_id"))
    status: JobState = JobState.QUEUED
    status_url: Optional[str] = None
    estimated_completion: Optional[str] = None
    created_at: Optional[datetime] = None


class JobSummary(JobStatus):
    """Row of the job listing endpoint (GET /api/v1/jobs)."""

    title: Optional[str] = None
    message: Optional[str] = None
    total_ads: Optional[int] = None
    completed_ads: Optional[int] = None
    ads_generated: Optional[int] = None

    @property
    def display_title(self) -> str:
        if self.title:
            return self.title
        return f"{self.job_type or 'Job'} #{self.job_id[-8:]}"


class JobList(BaseModel):
    jobs: List[JobSummary] = Field(default_factory=list)
    count: Optional[int] = None
    filters: Dict[str, Any] = Field(default_factory=dict)
