"""OAuth provider implementations."""

from .instagram import InstagramProviderAdapter

__all__ = [
    "InstagramProviderAdapter",
]
