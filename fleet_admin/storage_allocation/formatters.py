"""
Formatting utilities for storage allocation progress display
"""
import pandas as pd
from typing import Sequence, Union
import logging

from .models import CompletionStatus, MaterialAllocationRequest
from .validators import compute_completion_status, material_total

logger = logging.getLogger(__name__)


def format_number(value: Union[int, float, None], decimals: int = 0) -> str:
    """
    Format number with thousand separator

    Args:
        value: Number to format
        decimals: Number of decimal places

    Returns:
        Formatted string
    """
    try:
        if value is None or pd.isna(value):
            return "-"

        if decimals == 0:
            return f"{int(value):,}"
        else:
            return f"{float(value):,.{decimals}f}"

    except (ValueError, TypeError):
        return "-"


def format_completion_status(status: CompletionStatus, remaining: int) -> str:
    """
    Format completion status the way the allocation editor shows it

    Args:
        status: Derived completion status
        remaining: Quantity still missing

    Returns:
        "✓ Completo", "✗ Excedido" or "Falta: N"
    """
    if status == CompletionStatus.COMPLETE:
        return "✓ Completo"
    if status == CompletionStatus.EXCEEDED:
        return "✗ Excedido"
    return f"Falta: {format_number(remaining)}"


def format_status_icon(status: CompletionStatus) -> str:
    status_map = {
        CompletionStatus.COMPLETE: "🟢",
        CompletionStatus.EXCEEDED: "🔴",
        CompletionStatus.INCOMPLETE: "🟡",
    }
    return status_map.get(status, "⚫")


def build_progress_summary(batch: Sequence[MaterialAllocationRequest]) -> pd.DataFrame:
    """
    Build one progress row per material

    Returns:
        DataFrame with columns material_code, material_display_code, required,
        allocated, remaining, status, status_label, row_count
    """
    columns = [
        'material_code', 'material_display_code', 'required', 'allocated',
        'remaining', 'status', 'status_label', 'row_count'
    ]

    records = []
    for material in batch:
        allocated = material_total(material)
        remaining = material.total_quantity - allocated
        status = compute_completion_status(material)
        records.append({
            'material_code': material.material_code,
            'material_display_code': material.material_display_code,
            'required': material.total_quantity,
            'allocated': allocated,
            'remaining': remaining,
            'status': status.value,
            'status_label': format_completion_status(status, remaining),
            'row_count': len(material.allocations),
        })

    return pd.DataFrame(records, columns=columns)
