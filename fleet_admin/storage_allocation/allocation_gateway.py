"""
Persistence gateway for validated storage allocations
Writes one material exit entry per storage location for a work order
"""
import logging
from collections import OrderedDict
from contextlib import contextmanager
from datetime import date
from typing import Dict, List, Optional

import streamlit as st
from sqlalchemy import text
from sqlalchemy.engine import Engine

from ..db import get_db_engine
from ..config import config
from .models import BatchValidationError, ValidatedBatch
from .validators import StorageAllocationValidator

logger = logging.getLogger(__name__)


def build_storage_entries(validated: ValidatedBatch) -> Dict[str, Dict[str, int]]:
    """
    Pivot a validated batch into location-major entries

    Returns:
        {storage_location: {material_code: quantity}}, locations in first-seen
        order; a material picked twice from the same location is summed
    """
    entries: Dict[str, Dict[str, int]] = OrderedDict()
    for material_code, rows in validated.to_payload().items():
        for row in rows:
            materials = entries.setdefault(row['storageLocation'], OrderedDict())
            materials[material_code] = materials.get(material_code, 0) + row['quantity']
    return entries


class StorageAllocationGateway:
    """Persists validated storage allocations"""

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or get_db_engine()
        self.entry_type = config.get_app_setting('MATERIAL_EXIT_ENTRY_TYPE', 'orden')

    @contextmanager
    def db_transaction(self):
        """Context manager for database transactions"""
        conn = self.engine.connect()
        trans = conn.begin()
        try:
            yield conn
            trans.commit()
            logger.debug("Transaction committed successfully")
        except Exception as e:
            trans.rollback()
            logger.error(f"Transaction rolled back due to error: {e}")
            raise
        finally:
            conn.close()

    def save_batch(self, validated: ValidatedBatch, work_order_id: int, user_id: int,
                   entry_date: Optional[date] = None) -> Dict:
        """
        Save a validated batch as material exit entries

        Args:
            validated: Batch accepted by the reconciler
            work_order_id: Work order the materials were used in
            user_id: User performing the exit
            entry_date: Exit date, today by default

        Returns:
            Dict with success flag, entry_ids and entry_count

        Raises:
            TypeError: validated is not a ValidatedBatch
            BatchValidationError: the batch no longer passes validation;
                nothing is written

        Database errors are not interpreted: they propagate after rollback.
        """
        if not isinstance(validated, ValidatedBatch):
            raise TypeError("Only a ValidatedBatch can be persisted")

        check = StorageAllocationValidator().validate(validated.materials)
        if not check.valid:
            logger.error(
                f"Refusing to persist work order {work_order_id}: "
                f"{len(check.errors)} validation error(s)"
            )
            raise BatchValidationError(check.errors)

        entries = build_storage_entries(validated)
        entry_date = entry_date or date.today()

        with self.db_transaction() as conn:
            entry_ids = []

            for storage_location, materials in entries.items():
                result = conn.execute(text("""
                    INSERT INTO material_exit_entries
                    (work_order_id, storage_location, entry_date, entry_type, state,
                     created_by, created_at)
                    VALUES (:work_order_id, :storage_location, :entry_date, :entry_type, 0,
                            :created_by, CURRENT_TIMESTAMP)
                """), {
                    'work_order_id': work_order_id,
                    'storage_location': storage_location,
                    'entry_date': entry_date.isoformat(),
                    'entry_type': self.entry_type,
                    'created_by': user_id,
                })
                entry_id = result.lastrowid

                for material_code, quantity in materials.items():
                    conn.execute(text("""
                        INSERT INTO material_exit_entry_lines
                        (entry_id, material_code, quantity)
                        VALUES (:entry_id, :material_code, :quantity)
                    """), {
                        'entry_id': entry_id,
                        'material_code': material_code,
                        'quantity': quantity,
                    })

                entry_ids.append(entry_id)

            conn.execute(text("""
                UPDATE work_orders
                SET state_used = 1
                WHERE id = :work_order_id
            """), {'work_order_id': work_order_id})

        # Pending work orders changed
        st.cache_data.clear()

        logger.info(
            f"User {user_id} created {len(entry_ids)} material exit entr(ies) "
            f"for work order {work_order_id}: {validated.total_quantity} unit(s) "
            f"from {', '.join(entries.keys())}"
        )

        return {
            'success': True,
            'entry_ids': entry_ids,
            'entry_count': len(entry_ids),
        }

    def get_entries_for_work_order(self, work_order_id: int) -> List[Dict]:
        """Get saved exit entries of a work order with their lines"""
        query = text("""
            SELECT
                e.id as entry_id,
                e.storage_location,
                e.entry_date,
                l.material_code,
                l.quantity
            FROM material_exit_entries e
            INNER JOIN material_exit_entry_lines l ON l.entry_id = e.id
            WHERE e.work_order_id = :work_order_id
            ORDER BY e.id, l.id
        """)

        with self.engine.connect() as conn:
            result = conn.execute(query, {'work_order_id': work_order_id})
            return [dict(row._mapping) for row in result]
