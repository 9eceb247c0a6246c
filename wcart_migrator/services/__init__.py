"""Service layer for the migration service."""

from .transformer import TransformEngine, transform
from .mapper import FieldMapper, get_nested_value

__all__ = [
    "TransformEngine",
    "transform",
    "FieldMapper",
    "get_nested_value",
]
