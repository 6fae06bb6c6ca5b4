"""Test cases for database utilities."""

import pytest
from unittest.mock import patch, MagicMock
from sqlalchemy.exc import SQLAlchemyError

from lms.database import (
    get_db, get_db_session, create_tables, drop_tables,
    check_database_connection, engine, Base
)


class TestDatabaseUtilities:
    """Test cases for database utility functions."""

    def test_get_db_dependency(self):
        """Test get_db dependency function."""
        db_generator = get_db()
        db_session = next(db_generator)

        assert db_session is not None

        # Clean up
        with pytest.raises(StopIteration):
            next(db_generator)

    def test_get_db_session_propagates_errors(self):
        """Errors raised inside the scope reach the caller."""
        with pytest.raises(RuntimeError):
            with get_db_session():
                raise RuntimeError("Test error")

    @patch('lms.database.SessionLocal')
    def test_get_db_session_commits(self, mock_session_local):
        db = mock_session_local.return_value
        with get_db_session() as session:
            assert session is db
        db.commit.assert_called_once()
        db.close.assert_called_once()

    @patch('lms.database.SessionLocal')
    def test_get_db_session_rolls_back_store_errors(self, mock_session_local):
        db = mock_session_local.return_value
        with pytest.raises(SQLAlchemyError):
            with get_db_session():
                raise SQLAlchemyError("deadlock")
        db.rollback.assert_called_once()
        db.commit.assert_not_called()
        db.close.assert_called_once()

    @patch('lms.database.Base.metadata.create_all')
    def test_create_tables_success(self, mock_create_all):
        """Test successful table creation."""
        create_tables()

        mock_create_all.assert_called_once_with(bind=engine)

    @patch('lms.database.Base.metadata.create_all')
    def test_create_tables_error(self, mock_create_all):
        """Test table creation error handling."""
        mock_create_all.side_effect = SQLAlchemyError("Connection failed")

        with pytest.raises(SQLAlchemyError):
            create_tables()

    @patch('lms.database.Base.metadata.drop_all')
    def test_drop_tables_success(self, mock_drop_all):
        drop_tables()

        mock_drop_all.assert_called_once_with(bind=engine)

    @patch('lms.database.Base.metadata.drop_all')
    def test_drop_tables_error(self, mock_drop_all):
        mock_drop_all.side_effect = SQLAlchemyError("Connection failed")

        with pytest.raises(SQLAlchemyError):
            drop_tables()

    @patch('lms.database.engine')
    def test_check_database_connection_success(self, mock_engine):
        """Test successful database connection check."""
        mock_conn = MagicMock()
        mock_engine.connect.return_value.__enter__.return_value = mock_conn

        result = check_database_connection()

        assert result is True
        mock_conn.execute.assert_called_once()
        assert str(mock_conn.execute.call_args.args[0]) == "SELECT 1"

    @patch('lms.database.engine')
    def test_check_database_connection_failure(self, mock_engine):
        """Test database connection check failure."""
        mock_engine.connect.side_effect = SQLAlchemyError("Connection failed")

        result = check_database_connection()

        assert result is False


class TestDatabaseConfiguration:
    """Test cases for database configuration."""

    def test_every_table_registered(self):
        assert {
            "profiles", "courses", "modules", "enrollments", "resources", "resource_views",
            "calendar_events", "assessments", "submissions", "forum_posts", "forum_replies", "notifications",
        } <= set(Base.metadata.tables)
