"""Source data extractors."""

from .shopify_extractor import ShopifyExtractor

__all__ = [
    "ShopifyExtractor",
]
