"""Read-only access to per-user profile settings.

A profile holds a user's own directory credential, saved email template,
subject line and placeholder mappings. Saving profiles is handled by the
surrounding application; this module only reads them.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field

from . import config

logger = logging.getLogger(__name__)


class UserProfile(BaseModel):
    """Stored settings for one user."""
    user_id: str
    apollo_api_key: Optional[str] = None
    email_subject: Optional[str] = None
    email_template: Optional[str] = None
    variable_mappings: Dict[str, Optional[str]] = Field(default_factory=dict)


class ProfileStore(ABC):
    """Key-value lookup of user profiles."""

    @abstractmethod
    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        """The stored profile, or None for an unknown user."""


class InMemoryProfileStore(ProfileStore):
    """Profiles held in a dict, keyed by user id."""

    def __init__(self, profiles: Optional[Dict[str, UserProfile]] = None):
        self._profiles = dict(profiles or {})

    def add(self, profile: UserProfile) -> None:
        self._profiles[profile.user_id] = profile

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        return self._profiles.get(user_id)


class JsonProfileStore(ProfileStore):
    """Profiles loaded from a JSON file of {user_id: {...settings}}."""

    def __init__(self, file_path: Path):
        self.file_path = Path(file_path)

    def _load(self) -> Dict[str, dict]:
        if not self.file_path.exists():
            return {}
        try:
            with open(self.file_path, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"[Profiles] Could not read {self.file_path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        raw = self._load().get(user_id)
        if not isinstance(raw, dict):
            return None
        return UserProfile(user_id=user_id, **{k: v for k, v in raw.items() if k != 'user_id'})


def resolve_apollo_key(user_id: Optional[str] = None, store: Optional[ProfileStore] = None) -> Optional[str]:
    """The user's own directory key if stored, else the process-wide key."""
    if user_id and store is not None:
        profile = store.get_profile(user_id)
        if profile and profile.apollo_api_key:
            return profile.apollo_api_key
    return config.APOLLO_API_KEY
