"""
Module and course completion.

Every resource and every assessment of a module is one completable unit.
A resource is complete once the student has viewed it, an assessment once
the student has a submission for it (graded or not).
"""

import math
from typing import Any, Collection, Iterable, List, Sequence

from .config import COURSE_MILESTONES
from .rows import row_id


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def module_completion(
    resources: Iterable[Any],
    assessments: Iterable[Any],
    viewed_resource_ids: Collection[Any],
    submitted_assessment_ids: Collection[Any],
) -> int:
    """Percentage (0-100) of a module's units the student has completed.

    Resources and assessments may be rows, dicts with an ``id`` key, or bare
    ids. A module without units is 0% complete.
    """
    resource_ids = [row_id(r) for r in resources]
    assessment_ids = [row_id(a) for a in assessments]

    total = len(resource_ids) + len(assessment_ids)
    if total == 0:
        return 0

    done = sum(1 for rid in resource_ids if rid in viewed_resource_ids)
    done += sum(1 for aid in assessment_ids if aid in submitted_assessment_ids)
    return round_half_up(100 * done / total)


def course_completion(module_completions: Sequence[int]) -> int:
    """Unweighted mean of module completions; zero-unit modules count as 0."""
    if not module_completions:
        return 0
    return round_half_up(sum(module_completions) / len(module_completions))


def reached_milestones(course_pct: int, milestones: Sequence[int] = COURSE_MILESTONES) -> List[int]:
    """Course milestones (50/75/100 by default) reached at ``course_pct``."""
    return [m for m in milestones if course_pct >= m]


def is_module_complete(module_pct: int) -> bool:
    return module_pct >= 100
