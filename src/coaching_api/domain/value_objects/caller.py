from dataclasses import dataclass, field

ADMIN_ROLE = "admin"
USER_ROLE = "user"


@dataclass(frozen=True, slots=True)
class Caller:
    """Authenticated identity invoking an operation."""

    user_id: str
    roles: frozenset[str] = field(default_factory=lambda: frozenset({USER_ROLE}))

    def __post_init__(self) -> None:
        if not self.user_id.strip():
            raise ValueError("user_id must not be empty")

    @property
    def is_admin(self) -> bool:
        return ADMIN_ROLE in self.roles
