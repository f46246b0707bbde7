from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from catalog.db.models.base import MAX_ID

Author = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=25)]
ReviewText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=1000)]
Rating = Annotated[int, Field(ge=1, le=5)]
HelpfulCount = Annotated[int, Field(ge=0)]


class ReviewBase(BaseModel):
    product_id: int = Field(ge=1, le=MAX_ID)
    author: Author
    rating: Rating
    review_text: ReviewText
    helpful_count: Optional[HelpfulCount] = 0


class ReviewCreate(ReviewBase):
    pass


class ReviewUpdate(BaseModel):
    """PATCH body. The product a review belongs to cannot be changed."""

    author: Optional[Author] = None
    rating: Optional[Rating] = None
    review_text: Optional[ReviewText] = None
    helpful_count: Optional[HelpfulCount] = None
    version: Optional[int] = Field(default=None, ge=1)


class Review(ReviewBase):
    id: int
    created_at: datetime
    updated_at: datetime
    version: int
    model_config = ConfigDict(from_attributes=True)
