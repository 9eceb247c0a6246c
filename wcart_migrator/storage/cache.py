"""Local cache of fetched Shopify records."""

import json
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List

from sqlalchemy import func, select

from ..models.record import CachedRecord
from .database import Database
from .tables import ShopifyCacheRow

logger = logging.getLogger(__name__)


def _to_cached_record(row: ShopifyCacheRow) -> CachedRecord:
    return CachedRecord(
        id=row.id,
        data_type=row.data_type,
        source_id=row.shopify_id,
        raw_payload=row.data,
        fetched_at=row.fetched_at,
    )


class CachedRecordRepository:
    """
    Read and write access to the Shopify data cache.

    Migration runs only read from it; the fetcher is the only writer.
    """

    def __init__(self, database: Database):
        self.db = database

    def load_records(self, data_type: str) -> List[CachedRecord]:
        """Load a snapshot of every cached record for a data type."""
        with self.db.session() as session:
            rows = session.scalars(
                select(ShopifyCacheRow)
                .where(ShopifyCacheRow.data_type == data_type)
                .order_by(ShopifyCacheRow.id)
            ).all()
            return [_to_cached_record(row) for row in rows]

    def sample(self, data_type: str, limit: int = 10) -> List[CachedRecord]:
        """Load the first few cached records for previews."""
        with self.db.session() as session:
            rows = session.scalars(
                select(ShopifyCacheRow)
                .where(ShopifyCacheRow.data_type == data_type)
                .order_by(ShopifyCacheRow.id)
                .limit(limit)
            ).all()
            return [_to_cached_record(row) for row in rows]

    def count(self, data_type: str) -> int:
        with self.db.session() as session:
            return session.scalar(
                select(func.count(ShopifyCacheRow.id)).where(ShopifyCacheRow.data_type == data_type)
            ) or 0

    def upsert_records(
        self,
        data_type: str,
        records: Iterable[Dict[str, Any]],
        id_field: str = "id"
    ) -> int:
        """
        Insert or refresh cached records keyed by their Shopify id.

        Returns:
            Number of records written
        """
        written = 0
        now = datetime.utcnow()

        with self.db.session() as session:
            for record in records:
                shopify_id = str(record[id_field])
                payload = json.dumps(record, default=str)

                row = session.scalars(
                    select(ShopifyCacheRow).where(
                        ShopifyCacheRow.data_type == data_type,
                        ShopifyCacheRow.shopify_id == shopify_id,
                    )
                ).first()

                if row is None:
                    session.add(ShopifyCacheRow(
                        data_type=data_type,
                        shopify_id=shopify_id,
                        data=payload,
                        fetched_at=now,
                    ))
                else:
                    row.data = payload
                    row.fetched_at = now
                written += 1

        logger.info(f"Cached {written} {data_type} records")
        return written
