"""
Unit tests for storage allocation batch validation.

Covers:
- Conservation (rows must add up exactly to the required total).
- Row completeness (location selected, positive quantity).
- Error accumulation across rows and materials, no short-circuit.
- Idempotence of validation.
- Completion status derivation.
"""
from __future__ import annotations

import unittest
from typing import List, Tuple

from fleet_admin.storage_allocation.models import (
    AllocationRow,
    CompletionStatus,
    MaterialAllocationRequest,
)
from fleet_admin.storage_allocation.validators import (
    StorageAllocationValidator,
    compute_completion_status,
    remaining_quantity,
    validate,
)


def _material(code: str, total: int, rows: List[Tuple[str, str]]) -> MaterialAllocationRequest:
    """Build a material with the given (location, quantity) rows."""
    return MaterialAllocationRequest(
        material_code=f"ISO-{code}",
        material_display_code=code,
        total_quantity=total,
        allocations=[AllocationRow(storage_location=loc, quantity=qty) for loc, qty in rows],
    )


class TestValidateScenarios(unittest.TestCase):
    def test_single_exact_row_is_valid(self) -> None:
        result = validate([_material("M1", 10, [("A", "10")])])

        self.assertTrue(result.valid)
        self.assertEqual(result.errors, [])

    def test_short_total_reports_sum_error(self) -> None:
        result = validate([_material("M1", 10, [("A", "6"), ("B", "3")])])

        self.assertFalse(result.valid)
        self.assertEqual(result.errors, ["M1: cantidad asignada (9) debe ser 10"])

    def test_missing_location_with_matching_sum(self) -> None:
        result = validate([_material("M1", 5, [("", "5")])])

        self.assertFalse(result.valid)
        self.assertEqual(result.errors, ["M1: depósito 1 no seleccionado"])

    def test_negative_quantity_fails_row_and_sum(self) -> None:
        result = validate([_material("M1", 5, [("A", "3"), ("B", "-1")])])

        self.assertEqual(
            result.errors,
            [
                "M1: cantidad asignada (3) debe ser 5",
                "M1: cantidad 2 inválida",
            ],
        )

    def test_errors_only_name_the_invalid_material(self) -> None:
        batch = [
            _material("M1", 4, [("A", "4")]),
            _material("M2", 4, [("A", "1"), ("", "")]),
        ]
        result = validate(batch)

        self.assertFalse(result.valid)
        self.assertTrue(all(e.startswith("M2:") for e in result.errors))


class TestValidateAccumulation(unittest.TestCase):
    def test_both_row_errors_reported_for_one_row(self) -> None:
        result = validate([_material("M1", 5, [("", "abc")])])

        self.assertEqual(
            result.errors,
            [
                "M1: cantidad asignada (0) debe ser 5",
                "M1: depósito 1 no seleccionado",
                "M1: cantidad 1 inválida",
            ],
        )

    def test_error_count_is_sum_of_independent_counts(self) -> None:
        validator = StorageAllocationValidator()
        m1 = _material("M1", 10, [("", "2"), ("B", "")])
        m2 = _material("M2", 3, [("C", "0")])

        combined = validator.validate([m1, m2])

        self.assertEqual(
            len(combined.errors),
            len(validator.validate_material(m1)) + len(validator.validate_material(m2)),
        )
        self.assertEqual(combined.errors[:3], validator.validate_material(m1))

    def test_over_allocation_is_an_error(self) -> None:
        result = validate([_material("M1", 5, [("A", "4"), ("B", "2")])])

        self.assertEqual(result.errors, ["M1: cantidad asignada (6) debe ser 5"])

    def test_fractional_quantity_is_invalid(self) -> None:
        result = validate([_material("M1", 5, [("A", "2.5"), ("B", "2.5")])])

        self.assertIn("M1: cantidad 1 inválida", result.errors)
        self.assertIn("M1: cantidad 2 inválida", result.errors)

    def test_blank_location_counts_as_unset(self) -> None:
        result = validate([_material("M1", 1, [("   ", "1")])])

        self.assertEqual(result.errors, ["M1: depósito 1 no seleccionado"])

    def test_zero_total_with_zero_row_still_flags_quantity(self) -> None:
        result = validate([_material("M1", 0, [("A", "0")])])

        self.assertEqual(result.errors, ["M1: cantidad 1 inválida"])

    def test_validate_is_idempotent_and_does_not_mutate(self) -> None:
        batch = [_material("M1", 10, [("A", "x"), ("", "4")])]
        before = [list(m.allocations) for m in batch]

        first = validate(batch)
        second = validate(batch)

        self.assertEqual(first.errors, second.errors)
        self.assertEqual([list(m.allocations) for m in batch], before)
        self.assertEqual(batch[0].allocations[0].quantity, "x")

    def test_empty_batch_is_valid(self) -> None:
        self.assertTrue(validate([]).valid)


class TestCompletionStatus(unittest.TestCase):
    def test_complete(self) -> None:
        m = _material("M1", 10, [("A", "6"), ("B", "4")])
        self.assertEqual(compute_completion_status(m), CompletionStatus.COMPLETE)
        self.assertEqual(remaining_quantity(m), 0)

    def test_exceeded_regardless_of_row_validity(self) -> None:
        m = _material("M1", 5, [("", "9")])
        self.assertEqual(compute_completion_status(m), CompletionStatus.EXCEEDED)
        self.assertEqual(remaining_quantity(m), -4)

    def test_exact_sum_with_invalid_row_is_incomplete(self) -> None:
        m = _material("M1", 5, [("", "5")])
        self.assertEqual(compute_completion_status(m), CompletionStatus.INCOMPLETE)

    def test_partial_is_incomplete(self) -> None:
        m = _material("M1", 5, [("A", "2")])
        self.assertEqual(compute_completion_status(m), CompletionStatus.INCOMPLETE)
        self.assertEqual(remaining_quantity(m), 3)

    def test_status_follows_row_changes(self) -> None:
        m = _material("M1", 5, [("A", "2")])
        m.allocations[0].quantity = "5"
        self.assertEqual(compute_completion_status(m), CompletionStatus.COMPLETE)
        m.allocations[0].quantity = "7"
        self.assertEqual(compute_completion_status(m), CompletionStatus.EXCEEDED)


if __name__ == "__main__":
    unittest.main()
