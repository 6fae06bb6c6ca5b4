"""HTTP routers for the LMS API."""
from .submissions import router as submissions_router
from .progress import router as progress_router
from .analytics import router as analytics_router
from .bulk import router as bulk_router
from .agenda import router as agenda_router

__all__ = [
    "submissions_router",
    "progress_router",
    "analytics_router",
    "bulk_router",
    "agenda_router",
]
