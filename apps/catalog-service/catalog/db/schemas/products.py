from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, StringConstraints

ProductName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
ProductDescription = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=1000)]
ProductCategory = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
ImageURL = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=2048)]
# NUMERIC(3,2) in storage; sent to clients as a JSON number.
AverageRating = Annotated[
    Decimal,
    Field(max_digits=3, decimal_places=2),
    PlainSerializer(float, return_type=float, when_used="json"),
]


class ProductBase(BaseModel):
    name: ProductName
    description: ProductDescription
    category: ProductCategory
    image_url: ImageURL


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    """PATCH body: only the fields present are applied."""

    name: Optional[ProductName] = None
    description: Optional[ProductDescription] = None
    category: Optional[ProductCategory] = None
    image_url: Optional[ImageURL] = None
    version: Optional[int] = Field(default=None, ge=1)


class Product(ProductBase):
    id: int
    average_rating: AverageRating = Decimal("0.00")
    created_at: datetime
    updated_at: datetime
    version: int
    model_config = ConfigDict(from_attributes=True)
