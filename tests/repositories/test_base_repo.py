"""Tests for BaseRepo."""

from unittest.mock import Mock, patch

import pytest
from sqlalchemy.exc import IntegrityError

from yolcu.repositories.base_repo import BaseRepo


class SampleRepo(BaseRepo):
    """Minimal repository exercising _execute_with_session."""

    def lookup(self, param, session=None):
        return self._execute_with_session(
            lambda s: self._lookup_impl(s, param),
            session=session,
            operation_name="lookup",
        )

    def _lookup_impl(self, session, param):
        if param == "fail":
            raise IntegrityError(
                "INSERT", {}, Exception("UNIQUE constraint failed: rooms.invite_code")
            )
        session.flush()
        return f"found_{param}"


class TestBaseRepo:
    """Session lifecycle in auto-commit and coordinated modes."""

    @pytest.fixture
    def mock_session_factory(self):
        mock_session = Mock()
        mock_factory = Mock(return_value=mock_session)
        return mock_factory, mock_session

    @pytest.fixture
    def repo(self, mock_session_factory):
        factory, _ = mock_session_factory
        return SampleRepo(factory)

    def test_auto_commit_mode_success(self, repo, mock_session_factory):
        factory, mock_session = mock_session_factory

        result = repo.lookup("room")

        factory.assert_called_once()
        mock_session.commit.assert_called_once()
        mock_session.close.assert_called_once()
        assert result == "found_room"

    def test_auto_commit_mode_rolls_back_on_error(self, repo, mock_session_factory):
        factory, mock_session = mock_session_factory

        with pytest.raises(IntegrityError):
            repo.lookup("fail")

        mock_session.rollback.assert_called_once()
        mock_session.commit.assert_not_called()
        mock_session.close.assert_called_once()

    def test_coordinated_mode_leaves_session_alone(self, repo, mock_session_factory):
        """A caller-provided session is neither committed nor closed."""
        factory, _ = mock_session_factory
        external_session = Mock()

        assert repo.lookup("room", session=external_session) == "found_room"
        with pytest.raises(IntegrityError):
            repo.lookup("fail", session=external_session)

        factory.assert_not_called()
        external_session.commit.assert_not_called()
        external_session.rollback.assert_not_called()
        external_session.close.assert_not_called()

    @patch("yolcu.repositories.base_repo.logger")
    def test_error_logged_with_operation_name(self, mock_logger, repo):
        with pytest.raises(IntegrityError):
            repo.lookup("fail")

        mock_logger.error.assert_called_once()
        message = mock_logger.error.call_args[0][0]
        assert "lookup" in message
        assert "invite_code" in message

    def test_is_unique_violation(self):
        error = IntegrityError(
            "INSERT", {}, Exception("UNIQUE constraint failed: rooms.invite_code")
        )

        assert BaseRepo._is_unique_violation(error, "invite_code") is True
        assert BaseRepo._is_unique_violation(error, "username") is False
