"""Base publisher interface for the destination store."""

from abc import ABC, abstractmethod
from typing import Any, Dict
import logging

from ..models.record import PublishResult

logger = logging.getLogger(__name__)


class BasePublisher(ABC):
    """
    Base class for destination publishers.

    A publisher sends exactly one record per call and reports the outcome
    as a :class:`PublishResult`. It never batches and never retries.
    """

    def __init__(self, target_service: str, dry_run: bool = False):
        """
        Initialize the publisher.

        Args:
            target_service: Name of the destination service
            dry_run: If True, simulate without making changes
        """
        self.target_service = target_service
        self.dry_run = dry_run

    @abstractmethod
    def publish(self, data_type: str, record: Dict[str, Any]) -> PublishResult:
        """
        Send a single record to the destination.

        Args:
            data_type: Destination collection (products, customers, orders)
            record: Mapped destination payload

        Returns:
            PublishResult with the destination id or an error message
        """
        pass

    def validate_connection(self) -> bool:
        """Validate the connection to the destination."""
        return True
