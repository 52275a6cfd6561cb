"""User repository: local users and their GitHub identities."""

from sqlalchemy.exc import IntegrityError

from codiro.logging import get_logger
from codiro.models import GitHubIdentity, User
from codiro.types import GitHubProfile, UpsertResult
from codiro.utils import new_id, utc_now

from .base import BaseRepository

logger = get_logger("repository.user")


class UserRepository(BaseRepository[User]):
    """Repository for User operations."""

    model = User

    def get_identity(self, github_id: int) -> GitHubIdentity | None:
        """Get the identity row for a GitHub user id."""
        return (
            self.session.query(GitHubIdentity)
            .filter(GitHubIdentity.github_id == github_id)
            .first()
        )

    def find_by_provider_id(self, github_id: int) -> str | None:
        """Return the local user id linked to a GitHub user id, if any."""
        identity = self.get_identity(github_id)
        return identity.user_id if identity else None

    def upsert_from_provider(self, profile: GitHubProfile) -> UpsertResult:
        """
        Create or update a user from GitHub OAuth data.

        An existing identity gets its user's username, email and avatar
        refreshed. A new identity creates the user and identity rows in one
        savepoint: either both are written or neither is.
        """
        identity = self.get_identity(profile.id)
        if identity:
            self._mirror_profile(identity, profile)
            return UpsertResult(user_id=identity.user_id, is_new_user=False)

        try:
            user = self._create_from_provider(profile)
        except IntegrityError:
            # Another request linked this GitHub account first
            identity = self.get_identity(profile.id)
            if identity is None:
                raise
            logger.info("github_identity_race_resolved", github_id=profile.id)
            self._mirror_profile(identity, profile)
            return UpsertResult(user_id=identity.user_id, is_new_user=False)

        logger.info("user_created", user_id=user.id, github_id=profile.id)
        return UpsertResult(user_id=user.id, is_new_user=True)

    def _create_from_provider(self, profile: GitHubProfile) -> User:
        with self.session.begin_nested():
            user = User(
                id=new_id(),
                username=profile.login,
                email=profile.email,
                avatar_url=profile.avatar_url,
            )
            user.github_identity = GitHubIdentity(
                github_id=profile.id,
                github_username=profile.login,
                github_email=profile.email,
            )
            self.session.add(user)
        return user

    def _mirror_profile(self, identity: GitHubIdentity, profile: GitHubProfile) -> None:
        user = self.get_by_id(identity.user_id)
        if user is None:
            # FK cascade makes this unreachable unless the schema was altered
            raise LookupError(f"GitHub identity {profile.id} points at a missing user")

        user.username = profile.login
        user.email = profile.email
        user.avatar_url = profile.avatar_url
        user.updated_at = utc_now()

        identity.github_username = profile.login
        identity.github_email = profile.email

        self.session.flush()
