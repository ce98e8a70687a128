"""
User Model.

Immutable identity of the principal the backend reports as signed in,
either a registered account or an anonymous guest.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from auth_api.models.enums import AppUserRole, DashboardUserRole


class User(BaseModel):
    """Represents the authenticated (or anonymous) user.

    Only ``id`` and the role discriminators are interpreted by this
    package.  Any additional profile fields the backend sends are kept
    verbatim as extra attributes and never inspected.
    """

    id: str
    email: Optional[str] = None
    app_role: AppUserRole
    dashboard_role: DashboardUserRole = DashboardUserRole.NONE
    created_at: Optional[datetime] = None

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @property
    def is_anonymous(self) -> bool:
        """``True`` for guest identities created by anonymous sign-in."""
        return self.app_role == AppUserRole.GUEST_USER
