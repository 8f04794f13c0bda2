from sqlalchemy import JSON, Boolean, Column, DateTime, String

from core.database import Base
from core.clock import utcnow

ROLES = {"admin", "user"}

PERMISSION_CATALOGUE = [
    "read:containers",
    "create:containers",
    "update:containers",
    "delete:containers",
    "read:shipping-lines",
    "create:shipping-lines",
    "update:shipping-lines",
    "delete:shipping-lines",
    "read:iso-codes",
    "create:iso-codes",
    "update:iso-codes",
    "delete:iso-codes",
]
ALL_PERMISSIONS = "all"


def role_name(user) -> str:
    return str(user.role.value) if hasattr(user.role, "value") else str(user.role)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)  # type: ignore
    username = Column(String, unique=True, index=True, nullable=False)  # type: ignore
    email = Column(String, unique=True, index=True, nullable=False)  # type: ignore
    is_active = Column(Boolean, default=True)  # type: ignore
    hashed_password = Column(String, nullable=False)  # type: ignore
    role = Column(String, nullable=False, default="user")  # type: ignore  # admin or user
    permissions = Column(JSON, nullable=False, default=list)  # type: ignore
    created_at = Column(DateTime, nullable=False, default=utcnow)  # type: ignore

    def has_permission(self, permission: str) -> bool:
        """Admins and holders of 'all' pass; everyone else needs the named permission."""
        if role_name(self).lower() == "admin":
            return True
        granted = list(self.permissions or [])
        return ALL_PERMISSIONS in granted or permission in granted
