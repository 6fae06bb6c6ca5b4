"""Test cases for the store gateway and the commit-time change feed."""

import pytest

from lms.gateway import ChangeFeed, StoreGateway
from lms.models import NotificationType, ResourceView


@pytest.fixture
def feed(session_factory):
    feed = ChangeFeed()
    feed.attach(session_factory)
    yield feed
    feed.detach(session_factory)


class TestChangeFeed:
    """Test cases for ChangeFeed dispatch."""

    def test_dispatch_after_commit(self, feed, session_factory, resources, student):
        received = []
        feed.subscribe("resource_views", lambda table, row: received.append((table, row)))

        session = session_factory()
        session.add(ResourceView(resource_id=resources[0].id, student_id=student.id))
        session.flush()
        assert received == []
        session.commit()
        session.close()

        ((table, row),) = received
        assert table == "resource_views"
        assert row["resource_id"] == resources[0].id
        assert row["student_id"] == student.id

    def test_rollback_discards(self, feed, session_factory, resources, student):
        received = []
        feed.subscribe("resource_views", lambda table, row: received.append(row))

        session = session_factory()
        session.add(ResourceView(resource_id=resources[0].id, student_id=student.id))
        session.flush()
        session.rollback()
        session.commit()
        session.close()
        assert received == []

    def test_unsubscribed_tables_ignored(self, feed, session_factory, resources, student):
        received = []
        unsubscribe = feed.subscribe("submissions", lambda table, row: received.append(row))
        session = session_factory()
        session.add(ResourceView(resource_id=resources[0].id, student_id=student.id))
        session.commit()
        unsubscribe()
        session.close()
        assert received == []
        assert feed._subscribers["submissions"] == []

    def test_failing_subscriber_does_not_break_commit(self, feed, session_factory, resources, student):
        received = []

        def explode(table, row):
            raise RuntimeError("subscriber bug")

        feed.subscribe("resource_views", explode)
        feed.subscribe("resource_views", lambda table, row: received.append(row))

        session = session_factory()
        session.add(ResourceView(resource_id=resources[0].id, student_id=student.id))
        session.commit()
        assert session.query(ResourceView).count() == 1
        session.close()
        assert len(received) == 1


class TestStoreGateway:
    """Test cases for StoreGateway queries."""

    def test_id_sets(self, db_session, resources, quiz, student):
        gateway = StoreGateway(db_session)
        gateway.record_resource_view(resources[0].id, student.id)
        db_session.commit()
        assert gateway.viewed_resource_ids(student.id) == {resources[0].id}
        assert gateway.submitted_assessment_ids(student.id) == set()

    def test_record_resource_view_refreshes_timestamp(self, db_session, resources, student):
        gateway = StoreGateway(db_session)
        first = gateway.record_resource_view(resources[0].id, student.id)
        db_session.commit()
        first_seen = first.viewed_at
        second = gateway.record_resource_view(resources[0].id, student.id)
        db_session.commit()
        assert second.id == first.id
        assert second.viewed_at >= first_seen

    def test_empty_id_lists_short_circuit(self, db_session):
        gateway = StoreGateway(db_session)
        assert gateway.modules_for_courses([]) == []
        assert gateway.assessments_for_modules([]) == []
        assert gateway.enrollments_for_courses([]) == []
        assert gateway.submissions_for_assessments([]) == []
        assert gateway.forum_posts_for_courses([]) == []
        assert gateway.calendar_events_for_courses([]) == []

    def test_courses_for_student(self, db_session, course, student, enrollment):
        assert [c.id for c in StoreGateway(db_session).courses_for_student(student.id)] == [course.id]

    def test_find_notification(self, db_session, student, module):
        gateway = StoreGateway(db_session)
        gateway.add_notification(student.id, NotificationType.module_complete, "Done", "Well done", related_id=module.id)
        db_session.commit()
        assert gateway.find_notification(student.id, NotificationType.module_complete, module.id) is not None
        assert gateway.find_notification(student.id, NotificationType.module_complete, "other") is None
