"""ORM model for customer comments on products."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, Text

from storefront.models.base import Base, TimestampMixin


class Comment(Base, TimestampMixin):
    """
    A customer's comment on a product.

    product_id refers to the catalog, which lives outside this service, so it
    carries no foreign key.
    """

    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = Column(Integer, nullable=False, index=True)
    content = Column(Text, nullable=False)
    is_delete = Column(Boolean, nullable=False, default=False)
