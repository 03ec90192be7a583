"""Session roles and the injected auth context."""

from dataclasses import dataclass
from enum import StrEnum

from shoot_workflow.domain.errors import AuthenticationMissing


class Role(StrEnum):
    """Closed set of platform roles."""

    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    SALES_REP = "salesRep"
    CLIENT = "client"
    PHOTOGRAPHER = "photographer"
    EDITOR = "editor"

    @property
    def is_admin(self) -> bool:
        """Return True for the admin tier (admin and superadmin)."""
        return self in _ADMIN_TIER


_ADMIN_TIER = frozenset({Role.SUPERADMIN, Role.ADMIN})


@dataclass(frozen=True)
class AuthContext:
    """Current session: bearer token, role and user id."""

    token: str | None
    role: Role
    user_id: str | None = None

    def require_token(self) -> str:
        """Return the bearer token or fail before any network call."""
        if not self.token or not self.token.strip():
            raise AuthenticationMissing()
        return self.token

    @property
    def is_admin(self) -> bool:
        return self.role.is_admin
