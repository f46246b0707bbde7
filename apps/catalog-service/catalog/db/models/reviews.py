from sqlalchemy import Column, Text, DateTime, Integer, ForeignKey, Index, CheckConstraint, text
from sqlalchemy.orm import relationship
from .base import Base, IdentityType, now_utc


class Review(Base):
    __tablename__ = 'reviews'
    id = Column('review_id', IdentityType, primary_key=True, autoincrement=True)
    product_id = Column(
        IdentityType,
        ForeignKey('products.product_id', ondelete='CASCADE'),
        nullable=False,
    )
    author = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False)
    review_text = Column(Text, nullable=False)
    helpful_count = Column(Integer, nullable=True, default=0, server_default=text('0'))
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    version = Column(Integer, nullable=False, default=1, server_default=text('1'))

    product = relationship("Product", back_populates="reviews")

    __table_args__ = (
        Index('idx_reviews_product_id', 'product_id'),
        CheckConstraint('rating BETWEEN 1 AND 5', name='ck_reviews_rating_range'),
    )
