"""
Grade entry, bulk adjustment arithmetic and batch results.

Grades are kept on the assessment's own points scale: direct entry must lie
in [0, total_points] and bulk adjustments are clamped to the same range.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, TypeVar

from .completion import round_half_up
from .exceptions import InvalidGrade

T = TypeVar("T")


class SubmissionState(enum.Enum):
    submitted = "submitted"
    auto_graded = "auto_graded"
    graded = "graded"
    adjusted = "adjusted"


class AdjustmentType(enum.Enum):
    add = "add"
    multiply = "multiply"


def submission_state(auto_grade: Optional[int], grade: Optional[int], adjusted_at: Any = None) -> SubmissionState:
    if grade is None:
        return SubmissionState.submitted if auto_grade is None else SubmissionState.auto_graded
    if adjusted_at is not None:
        return SubmissionState.adjusted
    return SubmissionState.graded


def clamp_grade(value: float, total_points: int) -> int:
    """Round half-up and clamp into [0, total_points]."""
    return max(0, min(total_points, round_half_up(value)))


def validate_direct_grade(grade: float, total_points: int) -> int:
    """Check a facilitator-entered grade; out-of-range values are rejected, not clamped."""
    if grade != int(grade):
        raise InvalidGrade(grade, total_points, f"Grade {grade} must be a whole number of points")
    if grade < 0 or grade > total_points:
        raise InvalidGrade(grade, total_points)
    return int(grade)


def adjusted_grade(grade: int, adjustment: AdjustmentType, value: float, total_points: int) -> int:
    """Apply a bulk adjustment: ``add`` points, or ``multiply`` by (1 + value%)."""
    adjustment = AdjustmentType(adjustment)
    if adjustment is AdjustmentType.add:
        new_grade = grade + value
    else:
        new_grade = grade * (1 + value / 100)
    return clamp_grade(new_grade, total_points)


@dataclass
class BatchItem:
    item_id: str
    success: bool
    error: Optional[str] = None


@dataclass
class BatchResult:
    """Outcome of a bulk action made of independent per-row writes."""
    items: List[BatchItem] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def succeeded(self) -> int:
        return sum(1 for i in self.items if i.success)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def failures(self) -> List[BatchItem]:
        return [i for i in self.items if not i.success]

    @property
    def summary(self) -> str:
        return f"{self.succeeded} of {self.total} succeeded"

    def record(self, item_id: str, error: Optional[Exception] = None) -> None:
        self.items.append(BatchItem(item_id=item_id, success=error is None, error=str(error) if error else None))

    def to_dict(self):
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "summary": self.summary,
            "items": [vars(i) for i in self.items],
        }


def run_batch(items: Iterable[T], key: Callable[[T], str], action: Callable[[T], None],
              catch: tuple = (Exception,)) -> BatchResult:
    """Run ``action`` on each item, capturing per-item failures instead of aborting."""
    result = BatchResult()
    for item in items:
        try:
            action(item)
        except catch as e:
            result.record(key(item), e)
        else:
            result.record(key(item))
    return result
