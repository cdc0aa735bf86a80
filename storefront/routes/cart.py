"""Cart API routes for the storefront"""

from fastapi import APIRouter, Depends

from ..database.carts import cart_db
from ..models.cart import (
    AddToCartRequest,
    CartCountResponse,
    CartResponse,
    MergeCartRequest,
    UpdateCartItemRequest,
)
from ..security.auth import Caller, require_user

router = APIRouter(prefix="/api/cart", tags=["Cart"])


@router.get("", response_model=CartResponse)
async def get_cart(caller: Caller = Depends(require_user)):
    """Get the caller's cart"""
    return CartResponse(cart=cart_db.get_cart(caller.user_id))


@router.get("/count", response_model=CartCountResponse)
async def get_cart_count(caller: Caller = Depends(require_user)):
    """Total quantity across cart lines"""
    return CartCountResponse(count=cart_db.item_count(caller.user_id))


@router.post("/items", response_model=CartResponse)
async def add_to_cart(
    request: AddToCartRequest,
    caller: Caller = Depends(require_user),
):
    """Add an item to the cart"""
    cart = cart_db.add_item(caller.user_id, request.product_id, request.quantity)
    return CartResponse(cart=cart, message="Item added to cart")


@router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str,
    request: UpdateCartItemRequest,
    caller: Caller = Depends(require_user),
):
    """Update item quantity in cart"""
    cart = cart_db.update_item_quantity(caller.user_id, product_id, request.quantity)
    return CartResponse(cart=cart, message="Cart updated")


@router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_from_cart(
    product_id: str,
    caller: Caller = Depends(require_user),
):
    """Remove an item from the cart"""
    cart = cart_db.remove_item(caller.user_id, product_id)
    return CartResponse(cart=cart, message="Item removed")


@router.delete("", response_model=CartResponse)
async def clear_cart(caller: Caller = Depends(require_user)):
    """Clear all items from cart"""
    cart = cart_db.clear_cart(caller.user_id)
    return CartResponse(cart=cart, message="Cart cleared")


@router.post("/merge", response_model=CartResponse)
async def merge_cart(
    request: MergeCartRequest,
    caller: Caller = Depends(require_user),
):
    """Merge a guest cart into the caller's cart after login"""
    cart = cart_db.merge_guest_cart(caller.user_id, request.items)
    return CartResponse(cart=cart, message="Cart merged")
