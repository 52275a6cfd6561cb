"""Base repository: primary-key lookup and insert shared by the auth repositories."""

from typing import Any, Generic, TypeVar

from sqlalchemy.orm import Session

from codiro.db import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """
    Typed access to one mapped table within the caller's session.

    Usage:
        class UserRepository(BaseRepository[User]):
            model = User

        repo = UserRepository(session)
        user = repo.get_by_id(user_id)
    """

    model: type[T]

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, id: Any) -> T | None:
        """Get a single record by primary key."""
        return self.session.get(self.model, id)

    def create(self, **kwargs) -> T:
        """Create a new record."""
        instance = self.model(**kwargs)
        self.session.add(instance)
        self.session.flush()
        return instance
