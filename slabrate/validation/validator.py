"""
Two-Stage Slab Table Validation

DESIGN DECISION: A table is validated when it is created, edited or
loaded from storage - never during a calculation. The allocator can
therefore assume every table it receives fully covers [1, inf) with
positive rates.

STAGE 1 - STRUCTURE:
- At least one band
- First band starts at 1 ft
- Band indices are 0..n-1 in order
- Every band except the last has an upper bound >= its lower bound

STAGE 2 - SEMANTICS:
- Contiguity: each band starts exactly one foot after the previous ends
  (a larger step is a gap, a smaller step an overlap)
- Every rate is strictly positive

IMPORTANT: Validation NEVER silently fixes issues.
A missing rate is an error, not a zero-cost band.
"""

from slabrate.errors import InvalidSlabDefinition
from slabrate.models.slab import (
    SlabTable,
    SlabValidationResult,
    ValidationIssue,
)


class SlabTableValidator:
    """
    Validates slab tables through a two-stage pipeline.

    Stage 2 is skipped when stage 1 fails; contiguity checks on bands
    without bounds would only produce noise.
    """

    def _validate_structure(self, table: SlabTable) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Structural validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if not table.bands:
            issues.append(ValidationIssue(
                issue_type="empty",
                message="A slab table needs at least one band",
            ))
            return False, issues

        first = table.bands[0]
        if first.lower_bound != 1:
            issues.append(ValidationIssue(
                band_index=0,
                issue_type="coverage",
                message=f"First band must start at 1 ft, not {first.lower_bound} ft",
            ))

        last_index = len(table.bands) - 1
        for position, band in enumerate(table.bands):
            if band.index != position:
                issues.append(ValidationIssue(
                    band_index=position,
                    issue_type="index",
                    message=f"Band at position {position} has index {band.index}",
                ))

            if band.upper_bound is None:
                if position != last_index:
                    issues.append(ValidationIssue(
                        band_index=position,
                        issue_type="unbounded",
                        message=f"Only the last band may be open-ended (band {position + 1})",
                    ))
            elif band.upper_bound < band.lower_bound:
                issues.append(ValidationIssue(
                    band_index=position,
                    issue_type="inverted",
                    message=(
                        f"Band {position + 1} ends ({band.upper_bound} ft) "
                        f"before it starts ({band.lower_bound} ft)"
                    ),
                ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_semantic(self, table: SlabTable) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        for previous, band in zip(table.bands, table.bands[1:]):
            expected = previous.upper_bound + 1
            if band.lower_bound > expected:
                issues.append(ValidationIssue(
                    band_index=band.index,
                    issue_type="gap",
                    message=(
                        f"Gap between {previous.upper_bound} ft and "
                        f"{band.lower_bound} ft (band {band.index + 1})"
                    ),
                ))
            elif band.lower_bound < expected:
                issues.append(ValidationIssue(
                    band_index=band.index,
                    issue_type="overlap",
                    message=(
                        f"Band {band.index + 1} starts at {band.lower_bound} ft, "
                        f"inside the previous band ending at {previous.upper_bound} ft"
                    ),
                ))

        for band in table.bands:
            if band.rate_per_unit <= 0:
                issues.append(ValidationIssue(
                    band_index=band.index,
                    issue_type="non_positive_rate",
                    message=f"Band {band.label} ft has a non-positive rate ({band.rate_per_unit})",
                ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(self, table: SlabTable) -> SlabValidationResult:
        """Run both stages and collect every issue."""
        structure_valid, issues = self._validate_structure(table)

        if structure_valid:
            semantic_valid, semantic_issues = self._validate_semantic(table)
            issues.extend(semantic_issues)
        else:
            semantic_valid = False

        return SlabValidationResult(
            table_id=table.id,
            structure_valid=structure_valid,
            semantic_valid=semantic_valid,
            issues=issues,
        )

    def ensure_valid(self, table: SlabTable) -> SlabTable:
        """
        Validate and return the table unchanged.

        Raises:
            InvalidSlabDefinition: If any error-level issue is found
        """
        result = self.validate(table)
        if result.has_errors:
            summary = "; ".join(
                issue.message for issue in result.issues if issue.severity == "error"
            )
            raise InvalidSlabDefinition(
                f"Invalid slab table {table.id!r}: {summary}",
                issues=result.issues,
            )
        return table

