"""Product models for the storefront catalogue"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class Product(BaseModel):
    """Product in the catalog"""
    id: str
    name: str
    description: str = ""
    price: Decimal = Field(ge=0)
    category: str
    brand: Optional[str] = None
    images: list[str] = []
    stock: int = Field(ge=0, default=0)
    average_rating: float = 0.0
    review_count: int = 0
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    @property
    def primary_image(self) -> Optional[str]:
        return self.images[0] if self.images else None


class ProductSnapshot(BaseModel):
    """Read-only view of a product taken at the moment of a reservation"""
    product_id: str
    name: str
    unit_price: Decimal
    image: Optional[str] = None
    quantity: int

    class Config:
        frozen = True


class CreateProductRequest(BaseModel):
    """Request to create a product (admin)"""
    name: str = Field(min_length=1, max_length=200)
    description: str = ""
    price: Decimal = Field(ge=0)
    category: str = Field(min_length=1)
    brand: Optional[str] = None
    images: list[str] = []
    stock: int = Field(ge=0, default=0)


class UpdateProductRequest(BaseModel):
    """Request to update product details (admin). Stock is not editable here."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1)
    brand: Optional[str] = None
    images: Optional[list[str]] = None


class ProductSearchResponse(BaseModel):
    """Response from product search"""
    products: list[Product]
    total: int
    page: int
    limit: int
    total_pages: int


class LowStockResponse(BaseModel):
    count: int
    products: list[Product]
