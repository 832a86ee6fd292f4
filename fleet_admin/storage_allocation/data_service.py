"""
Data Service for Storage Allocation
Reads the pending materials of a work order and the storage location directory
"""
import pandas as pd
import logging
from typing import List, Optional
import streamlit as st
from sqlalchemy import text
from sqlalchemy.engine import Engine

from ..db import get_db_engine
from ..config import config
from .models import MaterialAllocationRequest

logger = logging.getLogger(__name__)

PENDING_COLUMNS = ['material_code', 'material_display_code', 'description', 'quantity']


class StorageAllocationDataService:
    """Service for fetching storage allocation inputs"""

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or get_db_engine()
        self.default_locations = config.get_app_setting('DEFAULT_STORAGE_LOCATIONS', [])

    # ==================== Location Directory ====================

    def get_storage_locations(self) -> List[str]:
        """Get selectable storage locations, falling back to configured defaults"""
        locations = _load_storage_locations(self.engine)
        if not locations:
            logger.warning("No storage locations in database, using configured defaults")
            return list(self.default_locations)
        return locations

    # ==================== Work Orders ====================

    def get_pending_work_orders(self) -> pd.DataFrame:
        """
        Get audited work orders whose used components have not been taken
        from storage yet
        """
        try:
            query = """
                SELECT
                    wo.id as work_order_id,
                    wo.order_number,
                    wo.mobile_unit,
                    wo.issue_date,
                    COUNT(woc.material_code) as component_count
                FROM work_orders wo
                INNER JOIN work_order_components woc ON woc.work_order_id = wo.id
                WHERE wo.state_audit = 1
                AND wo.state_used = 0
                GROUP BY wo.id, wo.order_number, wo.mobile_unit, wo.issue_date
                ORDER BY wo.issue_date DESC, wo.id DESC
            """
            return pd.read_sql(text(query), self.engine)

        except Exception as e:
            logger.error(f"Error loading pending work orders: {e}")
            raise

    def get_pending_materials(self, work_order_id: int) -> pd.DataFrame:
        """
        Get the components used by a work order with catalogue labels

        Components missing from the material catalogue keep their code as
        display code.
        """
        try:
            query = """
                SELECT
                    woc.material_code,
                    COALESCE(m.display_code, woc.material_code) as material_display_code,
                    COALESCE(m.description, 'Material no encontrado') as description,
                    woc.quantity
                FROM work_order_components woc
                LEFT JOIN materials m
                    ON m.material_code = woc.material_code
                    AND m.delete_flag = 0
                WHERE woc.work_order_id = :work_order_id
                ORDER BY woc.id
            """
            df = pd.read_sql(text(query), self.engine, params={'work_order_id': work_order_id})

            missing = df[df['description'] == 'Material no encontrado']
            for code in missing['material_code']:
                logger.warning(f"Material {code} not found in catalogue (work order {work_order_id})")

            return df[PENDING_COLUMNS]

        except Exception as e:
            logger.error(f"Error loading materials for work order {work_order_id}: {e}")
            raise

    # ==================== Batch Construction ====================

    def build_requests(self, pending_df: pd.DataFrame) -> List[MaterialAllocationRequest]:
        """
        Turn pending materials into a fresh allocation batch (one empty row each)

        Raises ValueError when a quantity is missing or not a non-negative
        whole number; quantities are never rounded.
        """
        requests = []
        for _, row in pending_df.iterrows():
            requests.append(MaterialAllocationRequest.from_pending(
                material_code=str(row['material_code']),
                material_display_code=row.get('material_display_code'),
                total_quantity=row['quantity'],
            ))
        return requests

    def load_batch(self, work_order_id: int) -> List[MaterialAllocationRequest]:
        """Pending materials of a work order as an allocation batch"""
        return self.build_requests(self.get_pending_materials(work_order_id))


@st.cache_data(ttl=config.get_app_setting('CACHE_TTL_SECONDS', 300))
def _load_storage_locations(_engine: Engine) -> List[str]:
    """Location directory, cached as reference data"""
    query = """
        SELECT location_name
        FROM storage_locations
        WHERE delete_flag = 0
        ORDER BY location_name
    """
    with _engine.connect() as conn:
        result = conn.execute(text(query))
        return [row.location_name for row in result]
