from dataclasses import dataclass, field
from typing import Any


@dataclass
class AuthUser:
    """Identity extracted from a verified bearer token."""
    id: str
    email: str | None = None
    claims: dict[str, Any] = field(default_factory=dict)


@dataclass
class AuthResult:
    """Outcome of a verification attempt. ``user`` is None whenever ``error`` is set."""
    user: AuthUser | None = None
    error: str | None = None

    @property
    def authenticated(self) -> bool:
        return self.user is not None and not self.error
