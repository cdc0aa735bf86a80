"""Product API routes for the storefront"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..core.config import settings
from ..database.products import product_db
from ..models.product import (
    CreateProductRequest,
    LowStockResponse,
    Product,
    ProductSearchResponse,
    UpdateProductRequest,
)
from ..models.review import ReviewListResponse
from ..security.auth import Caller, require_admin
from ..services.reviews import review_service

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=ProductSearchResponse)
async def search_products(
    search: Optional[str] = Query(None, description="Search name and description"),
    category: Optional[str] = Query(None, description="Filter by category"),
    min_price: Optional[Decimal] = Query(None, ge=0, description="Minimum price"),
    max_price: Optional[Decimal] = Query(None, ge=0, description="Maximum price"),
    in_stock: bool = Query(False, description="Only show in-stock items"),
    sort: str = Query("-created_at", description="Sort field, '-' prefix for descending"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, description="Max results"),
):
    """Search products in the catalog"""
    products, total = product_db.search_products(
        query=search,
        category=category,
        min_price=min_price,
        max_price=max_price,
        in_stock_only=in_stock,
        sort=sort,
        page=page,
        limit=limit,
    )

    return ProductSearchResponse(
        products=products,
        total=total,
        page=page,
        limit=limit,
        total_pages=product_db.total_pages(total, limit),
    )


@router.get("/categories", response_model=list[str])
async def list_categories():
    """List categories present in the catalog"""
    return sorted({p.category for p in product_db.products.values()})


@router.get("/low-stock", response_model=LowStockResponse)
async def list_low_stock(
    threshold: Optional[int] = Query(None, ge=1, description="Stock level to report below"),
    caller: Caller = Depends(require_admin),
):
    """Products that are running out but not yet sold out (admin only)"""
    products = product_db.low_stock(threshold or settings.low_stock_threshold)
    return LowStockResponse(count=len(products), products=products)


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str):
    """Get a product by ID"""
    return product_db.require_product(product_id)


@router.get("/{product_id}/reviews", response_model=ReviewListResponse)
async def get_product_reviews(product_id: str):
    """List reviews for a product with its rating summary"""
    reviews = review_service.product_reviews(product_id)
    product = product_db.require_product(product_id)
    return ReviewListResponse(
        reviews=reviews,
        average_rating=product.average_rating,
        review_count=product.review_count,
    )


@router.post("", response_model=Product, status_code=201)
async def create_product(
    request: CreateProductRequest,
    caller: Caller = Depends(require_admin),
):
    """Create a product (admin only)"""
    return product_db.create_product(request, created_by=caller.user_id)


@router.patch("/{product_id}", response_model=Product)
async def update_product(
    product_id: str,
    request: UpdateProductRequest,
    caller: Caller = Depends(require_admin),
):
    """Update product details (admin only)"""
    return product_db.update_product(product_id, request)


@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    caller: Caller = Depends(require_admin),
):
    """Delete a product (admin only)"""
    product_db.delete_product(product_id)
    return {"message": "Product deleted"}
