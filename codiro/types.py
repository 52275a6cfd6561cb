"""
Shared types.

Value objects passed between the GitHub client, the user directory
and the auth router. None of these are persisted directly.
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict


class GitHubProfile(BaseModel):
    """Subset of the GitHub `GET /user` payload used for login."""

    model_config = ConfigDict(extra="ignore")

    id: int
    login: str
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class UpsertResult:
    """Outcome of mirroring a GitHub profile onto a local user."""

    user_id: str
    is_new_user: bool


__all__ = ["GitHubProfile", "UpsertResult"]
