"""Signed-in user identity as handed over by the auth layer.

Authentication itself happens elsewhere; this module only models the
resolved identity and the demo-trial expiry rule that gates mutating
operations.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from .errors import TrialExpiredError


def _as_utc(moment: datetime) -> datetime:
    # Naive timestamps are taken to be UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class UserRole(str, Enum):
    ADMIN = "admin"
    DEMO = "demo"


@dataclass(frozen=True)
class UserIdentity:
    uid: str
    email: Optional[str]
    role: UserRole = UserRole.ADMIN
    trial_ends_at: Optional[datetime] = None  # only set for demo users

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Demo identities expire once now is past trial_ends_at."""
        if self.role != UserRole.DEMO or self.trial_ends_at is None:
            return False
        now = _as_utc(now or datetime.now(timezone.utc))
        return now > _as_utc(self.trial_ends_at)

    @classmethod
    def from_dict(cls, data: dict) -> "UserIdentity":
        trial_ends_at = data.get("trialEndsAt")
        if isinstance(trial_ends_at, str):
            trial_ends_at = datetime.fromisoformat(trial_ends_at)
        return cls(
            uid=data["uid"],
            email=data.get("email"),
            role=UserRole(data.get("role", UserRole.ADMIN.value)),
            trial_ends_at=trial_ends_at,
        )


def require_active(identity: UserIdentity, now: Optional[datetime] = None) -> None:
    """
    Raise if the identity may no longer run imports or opname.

    Raises:
        TrialExpiredError: If a demo trial has ended
    """
    if identity.is_expired(now):
        raise TrialExpiredError(f"Demo account {identity.email or identity.uid} has expired")
