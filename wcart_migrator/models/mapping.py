"""Field mapping models."""

from dataclasses import dataclass
from typing import Any, Dict, Optional
from enum import Enum


class TransformType(str, Enum):
    """Supported transformation types."""
    NONE = "none"
    UPPERCASE = "uppercase"
    LOWERCASE = "lowercase"
    TRIM = "trim"


@dataclass
class FieldMapping:
    """Rule copying one source field path to one destination key."""
    source_field: str  # Dot path into the Shopify record, e.g. "variants.0.price"
    destination_field: str  # Flat key in the Wcart payload
    transformation: Optional[str] = None
    is_required: bool = False  # Advisory only
    data_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "data_type": self.data_type,
            "source_field": self.source_field,
            "destination_field": self.destination_field,
            "transformation": self.transformation,
            "is_required": self.is_required,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldMapping":
        """Create from dictionary representation.

        Accepts the camelCase keys used by the mapping editor
        (``shopifyField``/``wcartField``) as well as snake_case.
        """
        source_field = data.get("source_field") or data.get("shopifyField") or data.get("shopify_field")
        destination_field = (
            data.get("destination_field") or data.get("wcartField") or data.get("wcart_field")
        )
        if not source_field or not destination_field:
            raise ValueError("Field mapping needs both a source and a destination field")

        transformation = data.get("transformation") or None
        is_required = data.get("is_required", data.get("isRequired", False))

        return cls(
            source_field=source_field,
            destination_field=destination_field,
            transformation=transformation,
            is_required=bool(is_required),
            data_type=data.get("data_type"),
        )
