# Core modules

from .config import settings, get_settings, Settings
from .errors import StorefrontError

__all__ = ["settings", "get_settings", "Settings", "StorefrontError"]
