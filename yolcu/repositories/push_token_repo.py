"""Push token repository."""

from typing import List, Optional, Sequence, cast
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from yolcu.core.enums import DeviceType
from yolcu.core.logging import get_logger
from yolcu.models import utcnow
from yolcu.models.push_token import PushToken
from yolcu.repositories.base_repo import BaseRepo

logger = get_logger(__name__)


class PushTokenRepo(BaseRepo):
    """Push token repository."""

    def _find(self, session: Session, token: str) -> Optional[PushToken]:
        return cast(
            Optional[PushToken],
            session.query(PushToken).filter(PushToken.token == token).one_or_none(),
        )

    def _upsert_token_implementation(
        self,
        session: Session,
        user_id: UUID,
        token: str,
        device_type: Optional[DeviceType],
    ) -> PushToken:
        """Implementation of push token registration."""
        existing = self._find(session, token)
        if existing is None:
            push_token = PushToken(
                user_id=user_id, token=token, device_type=device_type
            )
            try:
                with session.begin_nested():
                    session.add(push_token)
                    session.flush()
                logger.debug(f"Registered new push token for user {user_id}")
                return push_token
            except IntegrityError:
                existing = self._find(session, token)
                if existing is None:
                    raise

        if existing.user_id != user_id:
            # One device, one account: the latest sign-in owns the token
            logger.info(
                f"Moving push token from user {existing.user_id} to user {user_id}"
            )
            existing.user_id = user_id
        existing.device_type = device_type
        existing.updated_at = utcnow()
        session.flush()
        return existing

    def upsert_token(
        self,
        user_id: UUID,
        token: str,
        device_type: Optional[DeviceType] = None,
        session: Optional[Session] = None,
    ) -> PushToken:
        """Register a device token, refreshing it if already known."""
        return cast(
            PushToken,
            self._execute_with_session(
                lambda s: self._upsert_token_implementation(
                    s, user_id, token, device_type
                ),
                session=session,
                operation_name="upsert_token",
            ),
        )

    def _delete_token_implementation(
        self, session: Session, user_id: UUID, token: str
    ) -> bool:
        deleted = (
            session.query(PushToken)
            .filter(PushToken.user_id == user_id, PushToken.token == token)
            .delete(synchronize_session=False)
        )
        return deleted > 0

    def delete_token(
        self, user_id: UUID, token: str, session: Optional[Session] = None
    ) -> bool:
        """Delete one of a user's tokens. Returns False if there was no row."""
        return cast(
            bool,
            self._execute_with_session(
                lambda s: self._delete_token_implementation(s, user_id, token),
                session=session,
                operation_name="delete_token",
            ),
        )

    def _get_tokens_for_users_implementation(
        self, session: Session, user_ids: Sequence[UUID]
    ) -> List[PushToken]:
        if not user_ids:
            return []
        return cast(
            List[PushToken],
            session.query(PushToken)
            .filter(PushToken.user_id.in_(list(user_ids)))
            .order_by(PushToken.created_at.asc())
            .all(),
        )

    def get_tokens_for_users(
        self, user_ids: Sequence[UUID], session: Optional[Session] = None
    ) -> List[PushToken]:
        """Get every registered token belonging to the given users."""
        return cast(
            List[PushToken],
            self._execute_with_session(
                lambda s: self._get_tokens_for_users_implementation(s, user_ids),
                session=session,
                operation_name="get_tokens_for_users",
            ),
        )

    def _delete_tokens_implementation(
        self, session: Session, tokens: Sequence[str]
    ) -> int:
        if not tokens:
            return 0
        return cast(
            int,
            session.query(PushToken)
            .filter(PushToken.token.in_(list(tokens)))
            .delete(synchronize_session=False),
        )

    def delete_tokens(
        self, tokens: Sequence[str], session: Optional[Session] = None
    ) -> int:
        """Bulk-delete tokens the push provider no longer recognizes."""
        return cast(
            int,
            self._execute_with_session(
                lambda s: self._delete_tokens_implementation(s, tokens),
                session=session,
                operation_name="delete_tokens",
            ),
        )
