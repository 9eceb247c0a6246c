"""Field mapping persistence."""

import logging
from typing import List, Sequence

from sqlalchemy import delete, select

from ..models.mapping import FieldMapping
from .database import Database
from .tables import FieldMappingRow

logger = logging.getLogger(__name__)


class MappingStore:
    """Holds one active mapping set per data type."""

    def __init__(self, database: Database):
        self.db = database

    def get_mappings(self, data_type: str) -> List[FieldMapping]:
        """Get the current mapping set for a data type, in saved order."""
        with self.db.session() as session:
            rows = session.scalars(
                select(FieldMappingRow)
                .where(FieldMappingRow.data_type == data_type)
                .order_by(FieldMappingRow.id)
            ).all()
            return [
                FieldMapping(
                    source_field=row.shopify_field,
                    destination_field=row.wcart_field,
                    transformation=row.transformation,
                    is_required=row.is_required,
                    data_type=row.data_type,
                )
                for row in rows
            ]

    def replace_mappings(self, data_type: str, mappings: Sequence[FieldMapping]) -> int:
        """
        Replace the whole mapping set for a data type.

        The delete and the inserts commit together, so readers see either
        the old set or the new one.

        Returns:
            Number of mappings saved
        """
        with self.db.session() as session:
            session.execute(delete(FieldMappingRow).where(FieldMappingRow.data_type == data_type))
            session.add_all([
                FieldMappingRow(
                    data_type=data_type,
                    shopify_field=mapping.source_field,
                    wcart_field=mapping.destination_field,
                    transformation=mapping.transformation or None,
                    is_required=bool(mapping.is_required),
                )
                for mapping in mappings
            ])

        logger.info(f"Saved {len(mappings)} field mappings for {data_type}")
        return len(mappings)

    def list_data_types(self) -> List[str]:
        """List data types that have a mapping set."""
        with self.db.session() as session:
            return list(session.scalars(
                select(FieldMappingRow.data_type).distinct().order_by(FieldMappingRow.data_type)
            ).all())
