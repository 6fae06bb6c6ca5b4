"""Services orchestrating store access and the pure LMS computations."""
from .submissions import SubmissionService
from .progress import ProgressService, CompletionWatcher, CompletionCheck
from .bulk import BulkActionService
from .analytics import AnalyticsService

__all__ = [
    "SubmissionService",
    "ProgressService",
    "CompletionWatcher",
    "CompletionCheck",
    "BulkActionService",
    "AnalyticsService",
]
