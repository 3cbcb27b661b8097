from dataclasses import dataclass, field


@dataclass(frozen=True)
class Actor:
    """A verified caller: the token subject plus what it may see and do."""

    identity: str
    groups: frozenset[str] = frozenset()
    permissions: frozenset[str] = frozenset()

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions


@dataclass(frozen=True)
class Profile:
    """A member profile from the identity provider's directory."""

    user_id: str
    email: str | None
    email_verified: bool = False
    username: str | None = None
    permissions: frozenset[str] = frozenset()
    user_metadata: dict = field(default_factory=dict)

    @classmethod
    def from_auth0_user(cls, user: dict) -> "Profile":
        user_metadata = user.get("user_metadata") or {}
        authorization = (user.get("app_metadata") or {}).get("authorization") or {}
        return cls(
            user_id=user["user_id"],
            email=user.get("email"),
            email_verified=bool(user.get("email_verified")),
            username=user_metadata.get("username"),
            permissions=frozenset(authorization.get("permissions") or ()),
            user_metadata=user_metadata,
        )
