"""Calendar agenda: assessment deadlines and course events."""
from dataclasses import asdict
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import CurrentUser, get_current_user
from ..database import get_db
from ..schemas import AgendaItemResponse
from ..services import AnalyticsService

router = APIRouter(prefix="/calendar", tags=["Calendar"])


@router.get("", response_model=List[AgendaItemResponse])
async def get_agenda(
    since: Optional[datetime] = None,
    limit: Optional[int] = Query(None, ge=1),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Upcoming deadlines and events for every course the caller belongs to."""
    items = AnalyticsService(db).agenda(current_user.id, since=since, limit=limit)
    return [asdict(i) for i in items]
