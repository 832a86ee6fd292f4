"""
Storage Allocation Module
=========================
Splits the materials used by a work order across the storage locations they
are taken from, and validates the split before anything is persisted.

Components:
- quantity: parsing of row quantities typed as text
- models: batch entities, completion status and save outcomes
- validators: batch validation and completion status
- reconciler: editing session (add/remove/update rows, validate, save)
- formatters: progress display helpers
- data_service: pending materials and storage location directory
- allocation_gateway: persistence of validated batches
"""

from .quantity import parse_quantity, parse_required_quantity, allocated_total
from .models import (
    StorageAllocationError,
    AllocationStructureError,
    BatchValidationError,
    AllocationRow,
    MaterialAllocationRequest,
    CompletionStatus,
    ValidationResult,
    RemovalRefusal,
    RowRemoval,
    ValidatedBatch,
    ValidationFailure,
)
from .validators import (
    StorageAllocationValidator,
    validate,
    compute_completion_status,
    remaining_quantity,
    material_total,
)
from .reconciler import AllocationReconciler
from .formatters import (
    format_number,
    format_completion_status,
    format_status_icon,
    build_progress_summary,
)

__all__ = [
    # Quantities
    'parse_quantity',
    'parse_required_quantity',
    'allocated_total',

    # Models
    'StorageAllocationError',
    'AllocationStructureError',
    'BatchValidationError',
    'AllocationRow',
    'MaterialAllocationRequest',
    'CompletionStatus',
    'ValidationResult',
    'RemovalRefusal',
    'RowRemoval',
    'ValidatedBatch',
    'ValidationFailure',

    # Validation
    'StorageAllocationValidator',
    'validate',
    'compute_completion_status',
    'remaining_quantity',
    'material_total',

    # Editing session
    'AllocationReconciler',

    # Formatters
    'format_number',
    'format_completion_status',
    'format_status_icon',
    'build_progress_summary',
]
