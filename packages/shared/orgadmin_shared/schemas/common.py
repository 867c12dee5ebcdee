from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class Role(str, Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"
    VIEWER = "VIEWER"
    NONE = "NONE"

# Ordered lowest to highest privilege
ROLE_ORDER: list["Role"] = [
    Role.NONE,
    Role.VIEWER,
    Role.MEMBER,
    Role.ADMIN,
    Role.OWNER,
]

class InvitationStatus(str, Enum):
    PENDING = "PENDING"


def role_rank(role: Role) -> int:
    return ROLE_ORDER.index(Role(role))


def has_at_least(role: Role, minimum: Role) -> bool:
    """True when ``role`` grants at least the privileges of ``minimum``."""
    return role_rank(role) >= role_rank(minimum)


class CamelModel(BaseModel):
    """Wire format is camelCase; Python attributes stay snake_case."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class APIError(BaseModel):
    code: str
    message: str
    resource: Optional[str] = None
    status: int
