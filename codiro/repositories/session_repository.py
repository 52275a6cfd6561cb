"""Session repository: refresh-token sessions with lazy expiry cleanup."""

from datetime import datetime

from codiro.models import AuthSession
from codiro.utils import ensure_utc

from .base import BaseRepository


class SessionRepository(BaseRepository[AuthSession]):
    """Repository for refresh-token sessions."""

    model = AuthSession

    def create(self, session_id: str, user_id: str, expires_at: datetime) -> AuthSession:  # type: ignore[override]
        """Persist a new session row."""
        return super().create(id=session_id, user_id=user_id, expires_at=expires_at)

    def find_by_id(self, session_id: str) -> AuthSession | None:
        return self.get_by_id(session_id)

    def delete_by_id(self, session_id: str) -> bool:
        """Delete one session. Returns False when it was already gone."""
        deleted = (
            self.session.query(AuthSession)
            .filter(AuthSession.id == session_id)
            .delete(synchronize_session=False)
        )
        self.session.flush()
        return deleted > 0

    def delete_expired(self, now: datetime) -> int:
        """Remove every session whose expiry is before `now`."""
        deleted = (
            self.session.query(AuthSession)
            .filter(AuthSession.expires_at < now)
            .delete(synchronize_session=False)
        )
        self.session.flush()
        return deleted

    @staticmethod
    def is_expired(auth_session: AuthSession, now: datetime) -> bool:
        return ensure_utc(auth_session.expires_at) < ensure_utc(now)
