"""ORM model for the single refresh-token session a user may hold."""

from sqlalchemy import Column, ForeignKey, Integer, Text

from storefront.models.base import Base, TimestampMixin


class AuthSession(Base, TimestampMixin):
    """One row per user; a new sign-in overwrites the stored refresh token."""

    __tablename__ = "auth_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    token = Column(Text, nullable=False)
