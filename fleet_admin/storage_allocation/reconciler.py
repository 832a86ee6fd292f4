"""
Allocation Reconciler - editing session for splitting materials across storage locations

The reconciler owns one batch of MaterialAllocationRequest for the life of an
editing session. Row edits never validate; validate() and save() always
recompute everything from the rows.
"""
import copy
import logging
from typing import List, Optional, Sequence, Union

from .models import (
    AllocationRow,
    AllocationStructureError,
    CompletionStatus,
    MaterialAllocationRequest,
    RemovalRefusal,
    RowRemoval,
    ValidatedBatch,
    ValidationFailure,
    ValidationResult,
)
from .validators import StorageAllocationValidator, compute_completion_status, remaining_quantity

logger = logging.getLogger(__name__)

# Editable row fields, with the camelCase names used by upstream payloads
ROW_FIELDS = {
    'storage_location': 'storage_location',
    'storageLocation': 'storage_location',
    'quantity': 'quantity',
}


class AllocationReconciler:
    """In-memory editor and validator for a storage allocation batch"""

    def __init__(self,
                 materials: List[MaterialAllocationRequest],
                 storage_locations: Optional[Sequence[str]] = None,
                 validator: Optional[StorageAllocationValidator] = None):
        self.materials = materials
        self.storage_locations = list(storage_locations or [])
        self.validator = validator or StorageAllocationValidator()

        # Errors from the last validate() call; cleared by any row edit
        self.errors: List[str] = []

    # ==================== Index helpers ====================

    def _get_material(self, material_index: int) -> MaterialAllocationRequest:
        if not 0 <= material_index < len(self.materials):
            raise AllocationStructureError(
                f"Material index {material_index} out of range (batch has {len(self.materials)})"
            )
        return self.materials[material_index]

    def _get_row(self, material_index: int, row_index: int) -> AllocationRow:
        material = self._get_material(material_index)
        if not 0 <= row_index < len(material.allocations):
            raise AllocationStructureError(
                f"Row index {row_index} out of range for {material.material_display_code} "
                f"({len(material.allocations)} rows)"
            )
        return material.allocations[row_index]

    # ==================== Row operations ====================

    def add_row(self, material_index: int) -> AllocationRow:
        """Append an empty row to one material"""
        material = self._get_material(material_index)
        row = AllocationRow()
        material.allocations.append(row)
        logger.debug(f"Row added to {material.material_code} ({len(material.allocations)} rows)")
        return row

    def remove_row(self, material_index: int, row_index: int) -> RowRemoval:
        """
        Remove a row unless that would leave the material without rows

        A refusal leaves the batch untouched and says why.
        """
        if not 0 <= material_index < len(self.materials):
            return RowRemoval.refused(RemovalRefusal.OUT_OF_RANGE)

        material = self.materials[material_index]
        if not 0 <= row_index < len(material.allocations):
            return RowRemoval.refused(RemovalRefusal.OUT_OF_RANGE)

        if len(material.allocations) <= 1:
            logger.debug(f"Refused to remove last row of {material.material_code}")
            return RowRemoval.refused(RemovalRefusal.LAST_ROW)

        del material.allocations[row_index]
        return RowRemoval.done()

    def update_row(self, material_index: int, row_index: int, field: str,
                   value: Union[str, int, None]):
        """Set a row field in place; any text is accepted while typing"""
        attr = ROW_FIELDS.get(field)
        if attr is None:
            raise AllocationStructureError(f"Unknown allocation row field: {field!r}")

        row = self._get_row(material_index, row_index)
        setattr(row, attr, '' if value is None else str(value))
        self.errors = []

    # ==================== Derived state ====================

    def completion_status(self, material_index: int) -> CompletionStatus:
        return compute_completion_status(self._get_material(material_index))

    def completion_statuses(self) -> List[CompletionStatus]:
        return [compute_completion_status(m) for m in self.materials]

    def remaining(self, material_index: int) -> int:
        return remaining_quantity(self._get_material(material_index))

    def available_locations(self, material_index: int, row_index: int) -> List[str]:
        """
        Directory locations selectable for a row

        Hides locations already picked by other rows of the same material;
        the row's own choice stays selectable.
        """
        material = self._get_material(material_index)
        self._get_row(material_index, row_index)

        used = {
            row.storage_location
            for idx, row in enumerate(material.allocations)
            if idx != row_index and row.storage_location
        }
        return [loc for loc in self.storage_locations if loc not in used]

    # ==================== Validation & save ====================

    def validate(self) -> ValidationResult:
        """Run full validation from scratch and remember the errors"""
        result = self.validator.validate(self.materials)
        self.errors = list(result.errors)
        return result

    def save(self) -> Union[ValidatedBatch, ValidationFailure]:
        """
        Validate and hand over a snapshot of the batch when everything passes

        There is no partial success: one invalid material rejects the whole
        batch, which stays in memory for further editing. Edits made after a
        successful save do not reach the snapshot.
        """
        result = self.validate()
        if not result.valid:
            return ValidationFailure(errors=list(result.errors))

        logger.info(
            f"Storage allocation ready for persistence: {len(self.materials)} material(s), "
            f"{sum(len(m.allocations) for m in self.materials)} row(s)"
        )
        return ValidatedBatch(materials=copy.deepcopy(self.materials))
