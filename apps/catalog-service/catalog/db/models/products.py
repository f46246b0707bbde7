from sqlalchemy import Column, Text, DateTime, Integer, Numeric, Index, text
from sqlalchemy.orm import relationship
from .base import Base, IdentityType, now_utc


class Product(Base):
    __tablename__ = 'products'
    id = Column('product_id', IdentityType, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(Text, nullable=False)
    image_url = Column(Text, nullable=False)
    # Derived from reviews by an outside process; never written by the stores.
    average_rating = Column(Numeric(3, 2), default=0, server_default=text('0.00'))
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    version = Column(Integer, nullable=False, default=1, server_default=text('1'))

    reviews = relationship("Review", back_populates="product", passive_deletes=True)

    __table_args__ = (
        Index('idx_products_category', 'category'),
    )
