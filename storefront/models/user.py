"""ORM models for user accounts and their permission flags."""

import enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from storefront.models.base import Base, TimestampMixin


class Role(str, enum.Enum):
    CUSTOMER = "CUSTOMER"
    STAFF = "STAFF"
    ADMIN = "ADMIN"


class User(Base, TimestampMixin):
    """
    User account for authentication and role-based access control.

    reset_token holds the SHA-256 digest of an emailed reset token; it and
    reset_token_expires are either both set or both null.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)
    phone = Column(String(32), nullable=True)
    role = Column(String(32), nullable=False, default=Role.CUSTOMER.value)
    reset_token = Column(String(64), nullable=True, index=True)
    reset_token_expires = Column(DateTime(timezone=True), nullable=True)
    is_delete = Column(Boolean, nullable=False, default=False)

    permission = relationship("UserPermission", back_populates="user", uselist=False)


class UserPermission(Base):
    """Per-user create/update/remove flags (all false for new customers)."""

    __tablename__ = "user_permissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    create = Column(Boolean, nullable=False, default=False)
    update = Column(Boolean, nullable=False, default=False)
    remove = Column(Boolean, nullable=False, default=False)
    is_delete = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="permission")
