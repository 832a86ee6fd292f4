"""
Value types for storage allocation

A batch is a list of MaterialAllocationRequest, one per pending material.
Rows are edited in place while the batch lives in an editing session;
a successful save hands over a detached copy.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .quantity import parse_quantity, parse_required_quantity


# ==================== EXCEPTIONS ====================
class StorageAllocationError(Exception):
    """Base exception for storage allocation errors"""
    pass


class AllocationStructureError(StorageAllocationError, ValueError):
    """Raised on misuse of the batch structure (bad index, unknown field)"""
    pass


class BatchValidationError(StorageAllocationError):
    """Raised when a batch handed to persistence does not pass validation"""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


# ==================== BATCH ENTITIES ====================
@dataclass
class AllocationRow:
    """One (location, quantity) line fulfilling part of a material"""
    storage_location: str = ''
    quantity: str = ''

    def has_location(self) -> bool:
        return bool(self.storage_location and self.storage_location.strip())

    def parsed_quantity(self) -> Optional[int]:
        return parse_quantity(self.quantity)

    def is_valid(self) -> bool:
        return self.has_location() and self.parsed_quantity() is not None


@dataclass
class MaterialAllocationRequest:
    """A material whose total quantity must be sourced from storage locations"""
    material_code: str
    material_display_code: str
    total_quantity: int
    allocations: List[AllocationRow] = field(default_factory=list)

    @classmethod
    def from_pending(cls, material_code: str, material_display_code: Optional[str],
                     total_quantity) -> 'MaterialAllocationRequest':
        """
        Build a request with a single empty row, ready for editing

        total_quantity must be a non-negative whole number; missing, NaN,
        negative and fractional values raise ValueError instead of being rounded.
        """
        required = parse_required_quantity(total_quantity)
        if required is None:
            raise ValueError(
                f"Total quantity for {material_code} must be a non-negative integer, "
                f"got {total_quantity!r}"
            )

        return cls(
            material_code=material_code,
            material_display_code=material_display_code or material_code,
            total_quantity=required,
            allocations=[AllocationRow()],
        )


class CompletionStatus(Enum):
    """Derived per-material progress state (never persisted)"""
    COMPLETE = 'COMPLETE'
    EXCEEDED = 'EXCEEDED'
    INCOMPLETE = 'INCOMPLETE'


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)


class RemovalRefusal(Enum):
    LAST_ROW = 'LAST_ROW'
    OUT_OF_RANGE = 'OUT_OF_RANGE'


@dataclass(frozen=True)
class RowRemoval:
    """Outcome of remove_row: either removed, or refused with a reason"""
    removed: bool
    reason: Optional[RemovalRefusal] = None

    @classmethod
    def done(cls) -> 'RowRemoval':
        return cls(removed=True)

    @classmethod
    def refused(cls, reason: RemovalRefusal) -> 'RowRemoval':
        return cls(removed=False, reason=reason)


# ==================== SAVE OUTCOMES ====================
@dataclass
class ValidatedBatch:
    """
    A batch that passed validation, ready for the persistence gateway

    Holds a snapshot of the batch taken when it passed; to_payload() gives the
    material-major shape {material_code: [{storageLocation, quantity}, ...]}
    with quantities as int.
    """
    materials: List[MaterialAllocationRequest]
    should_close: bool = True

    def to_payload(self) -> Dict[str, List[Dict]]:
        payload = {}
        for material in self.materials:
            payload[material.material_code] = [
                {
                    'storageLocation': row.storage_location.strip(),
                    'quantity': row.parsed_quantity(),
                }
                for row in material.allocations
            ]
        return payload

    @property
    def total_quantity(self) -> int:
        return sum(m.total_quantity for m in self.materials)


@dataclass
class ValidationFailure:
    """Rejected save: every violation found, batch left as is for editing"""
    errors: List[str]
    should_close: bool = False
