"""Course ownership checks for facilitator actions."""
from typing import Optional

from ..exceptions import NotCourseFacilitator
from ..gateway import StoreGateway


def require_course_facilitator(gateway: StoreGateway, course_id: Optional[str], facilitator_id: Optional[str]) -> None:
    """Raise NotCourseFacilitator unless ``facilitator_id`` teaches the course.

    ``facilitator_id=None`` marks an internal caller and skips the check.
    """
    if facilitator_id is None:
        return
    course = gateway.get_course(course_id) if course_id is not None else None
    if course is None or course.facilitator_id != facilitator_id:
        raise NotCourseFacilitator(course_id, facilitator_id)
