"""Field mapper: builds Wcart payloads from Shopify records."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..models.mapping import FieldMapping
from ..models.record import CachedRecord
from .transformer import TransformEngine

logger = logging.getLogger(__name__)


def get_nested_value(data: Any, path: str) -> Any:
    """
    Get a nested value using dot notation.

    Numeric segments index into lists (``"variants.0.price"``). Any missing
    key, out-of-range index, non-container intermediate or None leaf gives
    None.
    """
    if not path:
        return None

    value = data
    for part in path.split("."):
        if value is None:
            return None

        if isinstance(value, dict):
            value = value.get(part)
        elif isinstance(value, list) and part.isdigit():
            idx = int(part)
            value = value[idx] if idx < len(value) else None
        else:
            return None

    return value


class FieldMapper:
    """
    Maps a source record to a destination record.

    Only fields named by a mapping are copied; everything else in the
    source record is dropped. Output keys follow mapping order, and a
    later mapping to the same destination key wins.
    """

    def __init__(self, transformer: Optional[TransformEngine] = None):
        self.transformer = transformer or TransformEngine()

    def map_record(
        self,
        record: Dict[str, Any],
        mappings: Sequence[FieldMapping]
    ) -> Dict[str, Any]:
        """
        Build a destination record.

        Args:
            record: Decoded source record
            mappings: Ordered mapping rules

        Returns:
            Destination-shaped dictionary
        """
        result: Dict[str, Any] = {}

        for mapping in mappings:
            source_value = get_nested_value(record, mapping.source_field)
            result[mapping.destination_field] = self.transformer.transform(
                source_value, mapping.transformation
            )

        return result

    def preview(
        self,
        records: Iterable[CachedRecord],
        mappings: Sequence[FieldMapping]
    ) -> List[Dict[str, Any]]:
        """Map cached records without publishing them."""
        previews = []
        for cached in records:
            source = cached.payload
            previews.append({
                "item_id": cached.source_id,
                "source": source,
                "destination": self.map_record(source, mappings),
            })
        return previews
