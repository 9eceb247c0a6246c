"""Publishers for the destination store."""

from .base import BasePublisher
from .wcart_loader import WcartPublisher

__all__ = [
    "BasePublisher",
    "WcartPublisher",
]
