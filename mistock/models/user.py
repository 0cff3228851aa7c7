import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, ConfigDict


class LoginResult(BaseModel):
    """What the identity provider hands back after a successful login."""
    email: EmailStr
    full_name: Optional[str] = None
    designation: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class Role(str, Enum):
    SUPER_ADMIN = "superadmin"
    ADMIN = "admin"
    VENDOR = "vendor"
    USER = "user"


PRIVILEGED_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN})
ADMIN_WORDS = frozenset({"admin", "administrator"})


def role_from_login(login: LoginResult) -> Role:
    """
    Map the free-text designation to a Role.

    Matches whole words only: "Super Admin", "superadmin" -> SUPER_ADMIN;
    "admin" / "administrator" -> ADMIN; "vendor" -> VENDOR; everything else
    (cashier, supervisor, waiter, ...) -> USER.
    """
    words = re.findall(r"[a-z]+", (login.designation or "").lower())
    pairs = {"".join(pair) for pair in zip(words, words[1:])}
    if "superadmin" in words or "superadmin" in pairs:
        return Role.SUPER_ADMIN
    if ADMIN_WORDS.intersection(words):
        return Role.ADMIN
    if "vendor" in words:
        return Role.VENDOR
    return Role.USER


def can_unlock(role: Role) -> bool:
    return role in PRIVILEGED_ROLES


def can_set_charges(role: Role) -> bool:
    return role in PRIVILEGED_ROLES


class Actor(BaseModel):
    """The person performing an operation."""
    email: EmailStr
    full_name: Optional[str] = None
    role: Role = Role.USER

    @classmethod
    def from_login(cls, login: LoginResult) -> "Actor":
        return cls(email=login.email, full_name=login.full_name, role=role_from_login(login))

    @property
    def display_name(self) -> str:
        return self.full_name or self.email


class ActorResponse(BaseModel):
    email: str
    full_name: Optional[str] = None
    role: Role
    can_unlock: bool = Field(default=False)
