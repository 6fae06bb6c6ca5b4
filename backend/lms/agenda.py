"""Calendar aggregation: assessment deadlines and course events in one agenda."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from .rows import as_utc, row_id, value_of


@dataclass
class AgendaItem:
    kind: str
    item_id: str
    course_id: Optional[str]
    title: str
    starts_at: datetime
    assessment_type: Optional[Any] = None


def build_agenda(
    assessments: Sequence[Any],
    events: Sequence[Any],
    course_of_module: Dict[Any, Any],
    since: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> List[AgendaItem]:
    """Merge deadlines and events chronologically.

    Assessments without a due date are skipped. With ``since`` only items at or
    after that instant are kept.
    """
    items = []
    for assessment in assessments:
        due = as_utc(value_of(assessment, "due_date"))
        if due is None:
            continue
        items.append(AgendaItem(
            kind="deadline",
            item_id=row_id(assessment),
            course_id=course_of_module.get(value_of(assessment, "module_id")),
            title=value_of(assessment, "title"),
            starts_at=due,
            assessment_type=value_of(assessment, "assessment_type"),
        ))
    for event in events:
        items.append(AgendaItem(
            kind="event",
            item_id=row_id(event),
            course_id=value_of(event, "course_id"),
            title=value_of(event, "title"),
            starts_at=as_utc(value_of(event, "event_date")),
        ))

    if since is not None:
        since = as_utc(since)
        items = [i for i in items if i.starts_at >= since]
    items.sort(key=lambda i: (i.starts_at, i.kind, i.title))
    return items[:limit] if limit is not None else items
