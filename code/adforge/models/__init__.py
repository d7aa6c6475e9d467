from .job import (
    JobList,
    JobProgress,
    JobState,
    JobStatus,
    JobSummary,
    JobType,
    SubmittedJob,
    TERMINAL_STATES,
)
from .creative import (
    AvatarVideoRequest,
    BulkAdRequest,
    CinematicAdRequest,
    StyleModifier,
)
from .catalog import Brand, BrandDraft, CreditBalance, ScrapedProduct, Subscription

__all__ = [
    "JobList",
    "JobProgress",
    "JobState",
    "JobStatus",
    "JobSummary",
    "JobType",
    "SubmittedJob",
    "TERMINAL_STATES",
    "AvatarVideoRequest",
    "BulkAdRequest",
    "CinematicAdRequest",
    "StyleModifier",
    "Brand",
    "BrandDraft",
    "CreditBalance",
    "ScrapedProduct",
    "Subscription",
]
