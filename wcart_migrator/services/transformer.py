"""Transformation engine for field values."""

import logging
from typing import Any, Callable, Dict, Optional

from ..models.mapping import TransformType

logger = logging.getLogger(__name__)


class TransformEngine:
    """
    Applies a named string transformation to a scalar value.

    Supports:
    - Built-in transforms (uppercase, lowercase, trim)
    - Custom transforms registered by name

    Falsy values (None, 0, "", False, empty containers) are returned
    unchanged before any transform is looked up, so ``0`` and ``""`` are
    never stringified. Unknown transform names pass the value through.
    """

    def __init__(self):
        """Initialize the transform engine."""
        self._custom_transforms: Dict[str, Callable[[Any], Any]] = {}
        self._builtin_transforms = self._register_builtin_transforms()

    def _register_builtin_transforms(self) -> Dict[str, Callable[[Any], Any]]:
        """Register all built-in transformation functions."""
        return {
            TransformType.UPPERCASE.value: self._transform_uppercase,
            TransformType.LOWERCASE.value: self._transform_lowercase,
            TransformType.TRIM.value: self._transform_trim,
        }

    def register_transform(self, name: str, func: Callable[[Any], Any]) -> None:
        """Register a custom transformation function."""
        self._custom_transforms[name] = func

    @property
    def available_transforms(self):
        return sorted(set(self._builtin_transforms) | set(self._custom_transforms))

    def transform(self, value: Any, name: Optional[str]) -> Any:
        """
        Apply transformation ``name`` to ``value``.

        Args:
            value: Resolved source value
            name: Transformation name, or None

        Returns:
            The transformed value, or ``value`` itself when no transform applies
        """
        if not name or name == TransformType.NONE.value or not value:
            return value

        if isinstance(name, TransformType):
            name = name.value

        transform_func = self._custom_transforms.get(name) or self._builtin_transforms.get(name)
        if not transform_func:
            logger.debug(f"Unknown transform: {name}, using direct copy")
            return value

        return transform_func(value)

    # Built-in transform functions

    def _transform_uppercase(self, value: Any) -> str:
        """Convert to uppercase."""
        return str(value).upper()

    def _transform_lowercase(self, value: Any) -> str:
        """Convert to lowercase."""
        return str(value).lower()

    def _transform_trim(self, value: Any) -> str:
        """Strip surrounding whitespace."""
        return str(value).strip()


_default_engine = TransformEngine()


def transform(value: Any, name: Optional[str]) -> Any:
    """Apply a built-in transformation using the shared engine."""
    return _default_engine.transform(value, name)
