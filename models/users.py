# models/users.py

from datetime import datetime
from typing import Optional
from enum import Enum
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from pydantic import EmailStr, field_validator
from models.helper import short_uuid, utcnow
from core.security import is_strong_password, PASSWORD_RULES


# ---------------------------
# Enumerations
# ---------------------------
class Role(str, Enum):
    """
    Enumeration of user roles within the system.

    Values:
        - admin:    Full access to every user and task
        - manager:  Oversees a team (users whose manager_id is their employee_id)
        - employee: Standard role for task owners and assignees
        - intern:   Same permissions as employee
    """
    admin = "admin"
    manager = "manager"
    employee = "employee"
    intern = "intern"


# ---------------------------
# USER MODELS
# ---------------------------
class UserBase(SQLModel):
    """
    Shared base schema for users.

    Attributes:
        name:        Display name
        email:       Login e-mail, unique
        employee_id: Company employee number, unique
        manager_id:  employee_id of this user's manager, if any
        role:        User role (admin, manager, employee, intern)
        bio:         Optional free-text "about me"
    """
    name: str = Field(min_length=1, max_length=120)
    email: str = Field(index=True, unique=True, max_length=254)
    employee_id: int = Field(gt=0, index=True, unique=True)
    manager_id: Optional[int] = Field(default=None, gt=0, index=True)
    role: Role = Role.employee
    bio: Optional[str] = Field(default=None, max_length=2000)

    model_config = {"from_attributes": True}


class User(UserBase, table=True):
    """
    Database model for a user.

    Extends UserBase by adding:
        - id:            Unique 8-character string ID
        - password_hash: bcrypt hash of the password
        - created_at:    Timestamp when the user was created
        - updated_at:    Timestamp when the user was last updated
    """

    __tablename__ = "users"

    id: str = Field(default_factory=short_uuid, primary_key=True, index=True)
    password_hash: str

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class UserCreate(UserBase):
    """
    Schema for registering a new user. Includes the plain password,
    which must satisfy the strength rules in core.security.
    """
    email: EmailStr
    password: str

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def _email_lower(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def _strong_password(cls, v: str) -> str:
        if not is_strong_password(v):
            raise ValueError(PASSWORD_RULES)
        return v


class UserRead(UserBase):
    """
    Schema for returning a user. Never carries the password hash.
    """
    id: str
    created_at: datetime
    updated_at: datetime


class UserSelfUpdate(SQLModel):
    """Fields a user may change on their own profile."""
    name: Optional[str] = Field(default=None, max_length=120)
    bio: Optional[str] = Field(default=None, max_length=2000)


class PasswordChange(SQLModel):
    current_password: str
    new_password: str


class RoleUpdate(SQLModel):
    """
    Role reassignment by a manager or admin. ``manager_id`` is optional;
    an admin may pass ``null`` explicitly to detach a user from their manager.
    """
    role: Role
    manager_id: Optional[int] = Field(default=None, gt=0)


class ManagerAssign(SQLModel):
    manager_id: int = Field(gt=0)


__all__ = [
    "Role",
    "UserBase",
    "User",
    "UserCreate",
    "UserRead",
    "UserSelfUpdate",
    "PasswordChange",
    "RoleUpdate",
    "ManagerAssign",
]
