"""SQLAlchemy ORM models."""

from storefront.models.auth_session import AuthSession
from storefront.models.base import Base
from storefront.models.comment import Comment
from storefront.models.geo import City, District, Ward
from storefront.models.user import Role, User, UserPermission

__all__ = [
    "AuthSession",
    "Base",
    "City",
    "Comment",
    "District",
    "Role",
    "User",
    "UserPermission",
    "Ward",
]
