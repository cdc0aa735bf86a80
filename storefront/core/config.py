"""Storefront Configuration"""

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Storefront"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8001

    # Pricing
    currency: str = "INR"
    tax_rate: Decimal = Decimal("0.18")
    free_shipping_threshold: Decimal = Decimal("500")
    shipping_flat_fee: Decimal = Decimal("50")

    # Caller identity (tokens are issued elsewhere)
    jwt_secret: str = "change-me-dev-only-signing-secret-0001"
    jwt_algorithm: str = "HS256"

    # Payment gateway
    gateway_key_id: str = "gw_test_key"
    gateway_key_secret: str = "gw_test_secret"
    gateway_webhook_secret: str = "gw_webhook_secret"

    # Listing
    default_page_size: int = 10
    max_page_size: int = 100

    # Admin low-stock report
    low_stock_threshold: int = 10

    # Seed the in-memory catalogue on start-up
    seed_catalogue: bool = True
    seed_file: Optional[str] = None

    class Config:
        env_file = "config/.env"
        env_file_encoding = "utf-8"
        env_prefix = "STOREFRONT_"
        case_sensitive = False

    def shipping_for(self, items_price: Decimal) -> Decimal:
        """Flat shipping fee unless the order clears the free-shipping threshold"""
        if items_price > self.free_shipping_threshold:
            return Decimal("0")
        return self.shipping_flat_fee


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
