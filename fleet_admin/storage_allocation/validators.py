"""
Validation utilities for storage allocation
Batch-wide checks run before a material exit can be persisted
"""
from typing import List, Sequence
import logging

from .models import AllocationRow, CompletionStatus, MaterialAllocationRequest, ValidationResult
from .quantity import allocated_total

logger = logging.getLogger(__name__)


def material_total(material: MaterialAllocationRequest) -> int:
    """Total allocated across the material's rows (invalid quantities count as 0)"""
    return allocated_total(row.quantity for row in material.allocations)


def remaining_quantity(material: MaterialAllocationRequest) -> int:
    """Quantity still missing; negative when the material is over-allocated"""
    return material.total_quantity - material_total(material)


def compute_completion_status(material: MaterialAllocationRequest) -> CompletionStatus:
    """
    Derive the progress state of a material from its rows

    COMPLETE needs an exact total AND every row valid; an exact total with an
    invalid row stays INCOMPLETE.
    """
    total = material_total(material)

    if total > material.total_quantity:
        return CompletionStatus.EXCEEDED

    if total == material.total_quantity and all(row.is_valid() for row in material.allocations):
        return CompletionStatus.COMPLETE

    return CompletionStatus.INCOMPLETE


class StorageAllocationValidator:
    """Validator for storage allocation batches"""

    def validate_material(self, material: MaterialAllocationRequest) -> List[str]:
        """
        Validate a single material

        Returns:
            List of error messages (empty if valid)
        """
        errors = []
        label = material.material_display_code

        # 1. Conservation: the rows must add up exactly
        total = material_total(material)
        if total != material.total_quantity:
            errors.append(
                f"{label}: cantidad asignada ({total}) debe ser {material.total_quantity}"
            )

        # 2. Row-level checks, 1-indexed for display
        for idx, row in enumerate(material.allocations):
            errors.extend(self._validate_row(label, idx + 1, row))

        return errors

    def _validate_row(self, label: str, position: int, row: AllocationRow) -> List[str]:
        errors = []
        if not row.has_location():
            errors.append(f"{label}: depósito {position} no seleccionado")
        if row.parsed_quantity() is None:
            errors.append(f"{label}: cantidad {position} inválida")
        return errors

    def validate(self, batch: Sequence[MaterialAllocationRequest]) -> ValidationResult:
        """
        Validate the whole batch in one pass

        Never stops at the first failure: errors from every material and
        every row are collected so the user sees all of them at once.
        """
        errors = []
        for material in batch:
            errors.extend(self.validate_material(material))

        if errors:
            logger.warning(
                f"Storage allocation batch rejected: {len(errors)} error(s) "
                f"across {len(batch)} material(s)"
            )
        else:
            logger.info(f"Storage allocation batch valid ({len(batch)} material(s))")

        return ValidationResult(valid=not errors, errors=errors)


def validate(batch: Sequence[MaterialAllocationRequest]) -> ValidationResult:
    """Validate a batch with the default validator"""
    return StorageAllocationValidator().validate(batch)
