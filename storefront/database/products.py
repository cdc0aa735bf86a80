"""Product catalogue and inventory ledger"""

import json
import logging
import math
import threading
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from ..core.errors import InvalidQuantityError, OutOfStockError, ProductNotFoundError
from ..models.product import CreateProductRequest, Product, ProductSnapshot, UpdateProductRequest

logger = logging.getLogger(__name__)

# Optional fields an update may set back to None
CLEARABLE_FIELDS = {"brand"}

# Starter catalogue loaded when no seed file is configured
SEED_PRODUCTS: list[dict] = [
    {
        "id": "prod-001",
        "name": "Sony WH-1000XM5 Wireless Headphones",
        "description": "Noise cancelling headphones with 30-hour battery life.",
        "price": "29990.00",
        "category": "electronics",
        "brand": "Sony",
        "images": ["/static/images/sony-headphones.jpg"],
        "stock": 50,
    },
    {
        "id": "prod-002",
        "name": "Samsung Galaxy Tab S9",
        "description": "11-inch AMOLED display, S Pen included.",
        "price": "72999.00",
        "category": "electronics",
        "brand": "Samsung",
        "images": ["/static/images/galaxy-tab.jpg"],
        "stock": 30,
    },
    {
        "id": "prod-003",
        "name": "Cotton Crew Neck T-Shirt",
        "description": "Everyday regular-fit t-shirt, 100% cotton.",
        "price": "499.00",
        "category": "clothing",
        "brand": "Basics",
        "images": ["/static/images/tshirt.jpg"],
        "stock": 200,
    },
    {
        "id": "prod-004",
        "name": "Running Shoes",
        "description": "Lightweight mesh upper with cushioned sole.",
        "price": "3499.00",
        "category": "sports",
        "brand": "Stride",
        "images": ["/static/images/running-shoes.jpg"],
        "stock": 60,
    },
    {
        "id": "prod-005",
        "name": "Stainless Steel Water Bottle",
        "description": "Insulated 1L bottle, keeps drinks cold for 24 hours.",
        "price": "899.00",
        "category": "home",
        "brand": "Hydra",
        "images": ["/static/images/bottle.jpg"],
        "stock": 120,
    },
    {
        "id": "prod-006",
        "name": "Atomic Habits by James Clear",
        "description": "An Easy & Proven Way to Build Good Habits & Break Bad Ones. Paperback.",
        "price": "399.00",
        "category": "books",
        "brand": None,
        "images": ["/static/images/atomic-habits.jpg"],
        "stock": 150,
    },
]


class ProductDatabase:
    """
    In-memory product store that also acts as the inventory ledger.

    Stock is only ever changed by ``reserve``, ``reserve_all`` and ``release``.
    Each of them runs its check-and-update under ``self._lock``, so two
    checkouts can never both pass the stock check for the same units.
    Reads hand out copies; callers never hold a live product record.
    """

    def __init__(self, products: Optional[Iterable[dict]] = None):
        self.products: dict[str, Product] = {}
        self._lock = threading.Lock()
        if products:
            self.load(products)

    def load(self, records: Iterable[dict]) -> int:
        """Load raw product records, replacing any with the same id"""
        now = datetime.utcnow()
        count = 0
        for record in records:
            data = {"created_at": now, "updated_at": now, **record}
            product = Product(**data)
            self.products[product.id] = product
            count += 1
        return count

    def load_file(self, path: str) -> int:
        """Load a JSON array of product records from disk"""
        with open(path, "r", encoding="utf-8") as f:
            records = json.load(f)
        count = self.load(records)
        logger.info(f"Loaded {count} products from {path}")
        return count

    def reset(self) -> None:
        with self._lock:
            self.products = {}

    # ------------------------------------------------------------------
    # Catalogue
    # ------------------------------------------------------------------

    def get_product(self, product_id: str) -> Optional[Product]:
        """Get a copy of a product by ID"""
        product = self.products.get(product_id)
        return product.model_copy(deep=True) if product else None

    def require_product(self, product_id: str) -> Product:
        product = self.get_product(product_id)
        if not product:
            raise ProductNotFoundError(product_id)
        return product

    def search_products(
        self,
        query: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        in_stock_only: bool = False,
        sort: str = "-created_at",
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Product], int]:
        """
        Search products with filters.

        Returns:
            Tuple of (matching products for the page, total count)
        """
        results = list(self.products.values())

        if query:
            query_lower = query.lower()
            results = [
                p for p in results
                if query_lower in p.name.lower() or query_lower in p.description.lower()
            ]

        if category:
            results = [p for p in results if p.category == category]

        if min_price is not None:
            results = [p for p in results if p.price >= min_price]
        if max_price is not None:
            results = [p for p in results if p.price <= max_price]

        if in_stock_only:
            results = [p for p in results if p.stock > 0]

        # "-field" sorts descending
        field = sort.lstrip("-")
        if field not in ("created_at", "price", "name", "average_rating"):
            field = "created_at"
        results.sort(key=lambda p: getattr(p, field), reverse=sort.startswith("-"))

        total = len(results)
        offset = (page - 1) * limit
        results = results[offset : offset + limit]

        return [p.model_copy(deep=True) for p in results], total

    @staticmethod
    def total_pages(total: int, limit: int) -> int:
        return math.ceil(total / limit) if limit else 0

    def create_product(self, request: CreateProductRequest, created_by: Optional[str] = None) -> Product:
        now = datetime.utcnow()
        product = Product(
            id=f"prod-{uuid.uuid4().hex[:8]}",
            created_by=created_by,
            created_at=now,
            updated_at=now,
            **request.model_dump(),
        )
        with self._lock:
            self.products[product.id] = product
        logger.info(f"Product {product.id} created with stock {product.stock}")
        return product.model_copy(deep=True)

    def update_product(self, product_id: str, request: UpdateProductRequest) -> Product:
        # an explicit null clears an optional field and is ignored for required ones
        changes = {
            field: value
            for field, value in request.model_dump(exclude_unset=True).items()
            if value is not None or field in CLEARABLE_FIELDS
        }
        with self._lock:
            product = self.products.get(product_id)
            if not product:
                raise ProductNotFoundError(product_id)
            updated = product.model_copy(update={**changes, "updated_at": datetime.utcnow()})
            self.products[product_id] = updated
        return updated.model_copy(deep=True)

    def delete_product(self, product_id: str) -> None:
        with self._lock:
            if product_id not in self.products:
                raise ProductNotFoundError(product_id)
            del self.products[product_id]
        logger.info(f"Product {product_id} deleted")

    def record_rating(self, product_id: str, average_rating: float, review_count: int) -> None:
        """Store recomputed review statistics on the product"""
        with self._lock:
            product = self.products.get(product_id)
            if not product:
                return
            product.average_rating = average_rating
            product.review_count = review_count

    # ------------------------------------------------------------------
    # Inventory ledger
    # ------------------------------------------------------------------

    def reserve(self, product_id: str, quantity: int) -> Decimal:
        """
        Atomically decrement stock by ``quantity``.

        Returns:
            The unit price read under the same lock as the stock check
        """
        if quantity < 1:
            raise InvalidQuantityError(quantity)

        with self._lock:
            product = self.products.get(product_id)
            if not product:
                raise ProductNotFoundError(product_id)
            if quantity > product.stock:
                raise OutOfStockError(product_id, quantity, product.stock, name=product.name)
            product.stock -= quantity
            return product.price

    def reserve_all(self, lines: Iterable[tuple[str, int]]) -> list[ProductSnapshot]:
        """
        Reserve several lines as one all-or-nothing step.

        Every line is checked before any stock is touched. Lines for the
        same product are summed for the check.

        Returns:
            One snapshot per input line, in input order
        """
        lines = list(lines)
        for _, quantity in lines:
            if quantity < 1:
                raise InvalidQuantityError(quantity)

        with self._lock:
            wanted: dict[str, int] = {}
            for product_id, quantity in lines:
                if product_id not in self.products:
                    raise ProductNotFoundError(product_id)
                wanted[product_id] = wanted.get(product_id, 0) + quantity

            for product_id, quantity in wanted.items():
                product = self.products[product_id]
                if quantity > product.stock:
                    raise OutOfStockError(product_id, quantity, product.stock, name=product.name)

            snapshots = []
            for product_id, quantity in lines:
                product = self.products[product_id]
                snapshots.append(
                    ProductSnapshot(
                        product_id=product_id,
                        name=product.name,
                        unit_price=product.price,
                        image=product.primary_image,
                        quantity=quantity,
                    )
                )
            for product_id, quantity in wanted.items():
                self.products[product_id].stock -= quantity

        return snapshots

    def release(self, product_id: str, quantity: int) -> bool:
        """
        Return ``quantity`` units to stock.

        Only used to compensate a reservation; the caller must not release
        the same reservation twice.

        Returns:
            False if the product no longer exists
        """
        if quantity < 1:
            raise InvalidQuantityError(quantity)

        with self._lock:
            product = self.products.get(product_id)
            if not product:
                logger.warning(f"Cannot release {quantity} units of deleted product {product_id}")
                return False
            product.stock += quantity
            return True

    def stock_of(self, product_id: str) -> int:
        product = self.products.get(product_id)
        if not product:
            raise ProductNotFoundError(product_id)
        return product.stock

    def low_stock(self, threshold: int = 10) -> list[Product]:
        """Products still in stock but below ``threshold`` units, scarcest first"""
        with self._lock:
            products = [p for p in self.products.values() if 0 < p.stock < threshold]
        products.sort(key=lambda p: (p.stock, p.id))
        return [p.model_copy(deep=True) for p in products]


# Singleton instance
product_db = ProductDatabase()
