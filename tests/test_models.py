"""
Tests for the Slab Rate Engine models and numeric helpers

Test strategy:
1. Unit tests for individual components (models, numbers, validators)
2. Flow tests against in-memory stores
3. No shared files in tests (tmp_path only)
"""

from decimal import Decimal

import pytest

from slabrate.errors import InvalidAmount, InvalidDepth, SlabEngineError
from slabrate.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from slabrate.models.invoice import InvoiceLineItem, QuoteRequest, ReboreStartPolicy
from slabrate.models.slab import (
    CalculationResult,
    SlabBand,
    SlabValidationResult,
    ValidationIssue,
)
from slabrate.numbers import (
    coerce_amount,
    coerce_depth,
    format_currency,
    format_quantity,
    round_for_display,
    to_decimal,
)


class TestSlabModels:
    """Tests for slab band and table models."""

    def test_band_width_is_inclusive(self):
        """A 301-400 band spans 100 feet."""
        band = SlabBand(index=1, lower_bound=Decimal("301"), upper_bound=Decimal("400"),
                        rate_per_unit=Decimal("80"))
        assert band.width == Decimal("100")
        assert band.label == "301-400"

    def test_unbounded_band(self):
        band = SlabBand(index=14, lower_bound=Decimal("1601"), rate_per_unit=Decimal("835"))
        assert band.width is None
        assert band.label == "1601+"
        assert band.key == "1601+"

    def test_band_is_frozen(self, type1_table):
        with pytest.raises(ValueError):
            type1_table.bands[0].rate_per_unit = Decimal("1")

    def test_band_rejects_negative_index(self):
        with pytest.raises(ValueError):
            SlabBand(index=-1, lower_bound=Decimal("1"), rate_per_unit=Decimal("75"))

    def test_empty_result(self):
        result = CalculationResult.empty("1")
        assert result.is_empty
        assert result.total_cost == 0
        assert result.allocated_depth == 0

    def test_validation_result_counts(self):
        result = SlabValidationResult(
            table_id="custom_x",
            structure_valid=True,
            semantic_valid=False,
            issues=[
                ValidationIssue(issue_type="gap", message="gap"),
                ValidationIssue(issue_type="note", message="note", severity="warning"),
            ],
        )
        assert result.has_errors
        assert result.error_count == 1
        assert not result.is_valid

    def test_issue_rejects_unknown_severity(self):
        with pytest.raises(ValueError):
            ValidationIssue(issue_type="gap", message="gap", severity="fatal")


class TestInvoiceModels:
    """Tests for invoice boundary models."""

    def test_line_item_rejects_negative_amount(self):
        with pytest.raises(ValueError):
            InvoiceLineItem(
                description="Drilling 1-300 ft",
                quantity=Decimal("300"),
                unit="feet",
                rate=Decimal("75"),
                amount=Decimal("-1"),
            )

    def test_line_item_strips_whitespace(self):
        item = InvoiceLineItem(
            description="  BATA  ",
            quantity=Decimal("1"),
            unit="Per Bore",
            rate=Decimal("2000"),
            amount=Decimal("2000"),
        )
        assert item.description == "BATA"

    def test_quote_request_defaults(self):
        request = QuoteRequest(depth="450")

        assert request.depth == Decimal("450")
        assert request.slab_selector == "1"
        assert request.existing_bore_depth == 0
        assert request.rebore_policy is ReboreStartPolicy.RESTART
        assert request.bata_amount is None

    def test_quote_request_rejects_negative_charge(self):
        with pytest.raises(InvalidAmount) as exc_info:
            QuoteRequest(depth=100, pvc_7_inch_feet=-5)
        assert exc_info.value.field == "pvc_7_inch_feet"

    def test_quote_request_rejects_negative_existing_depth(self):
        with pytest.raises(InvalidDepth) as exc_info:
            QuoteRequest(depth=100, existing_bore_depth=-5)
        assert exc_info.value.field == "existing_bore_depth"


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.CALCULATION_COMPLETED,
            description="Quote calculated",
        )
        assert event.event_id is not None
        assert event.timestamp.tzinfo is not None
        assert event.severity == AuditSeverity.INFO

    def test_calculation_completed_builder(self):
        event = AuditEventBuilder.calculation_completed(
            table_id="1",
            depth="450",
            total_amount="34750",
            band_count=3,
        )
        assert event.event_type == AuditEventType.CALCULATION_COMPLETED
        assert event.entity_id == "1"
        assert event.details["bands_used"] == 3

    def test_selector_fallback_is_warning(self):
        event = AuditEventBuilder.selector_fallback(selector="custom_x", fallback_id="1")
        assert event.severity == AuditSeverity.WARNING

    def test_to_log_dict(self):
        event = AuditEventBuilder.calculation_rejected(
            error_type="InvalidDepth",
            error_message="depth cannot be negative",
        )
        log_dict = event.to_log_dict()

        assert log_dict["event_type"] == "calculation_rejected"
        assert log_dict["error_code"] == "InvalidDepth"
        assert isinstance(log_dict["event_id"], str)


class TestNumbers:
    """Tests for numeric coercion and display helpers."""

    @pytest.mark.parametrize("value,expected", [
        (450, Decimal("450")),
        ("300.5", Decimal("300.5")),
        (" 12 ", Decimal("12")),
        (0.1, Decimal("0.1")),
        (Decimal("7.25"), Decimal("7.25")),
    ])
    def test_to_decimal(self, value, expected):
        assert to_decimal(value) == expected

    @pytest.mark.parametrize("value", [True, "NaN", "Infinity", "1e", [], None])
    def test_to_decimal_rejects(self, value):
        with pytest.raises(ValueError):
            to_decimal(value)

    def test_coerce_depth_negative(self):
        with pytest.raises(InvalidDepth):
            coerce_depth(-1)

    def test_coerce_amount_custom_field(self):
        with pytest.raises(InvalidAmount) as exc_info:
            coerce_amount("-3", field="bata_amount")
        assert exc_info.value.field == "bata_amount"
        assert "bata_amount" in str(exc_info.value)

    def test_engine_errors_are_not_value_errors(self):
        """Engine errors must pass through pydantic validators unwrapped."""
        assert not issubclass(InvalidDepth, ValueError)
        assert issubclass(InvalidDepth, SlabEngineError)

    @pytest.mark.parametrize("value,expected", [
        (Decimal("24.975"), Decimal("24.98")),
        (Decimal("24.974"), Decimal("24.97")),
        (Decimal("0.005"), Decimal("0.01")),
    ])
    def test_round_half_up(self, value, expected):
        assert round_for_display(value) == expected

    @pytest.mark.parametrize("value,expected", [
        (Decimal("300.00"), "300"),
        (Decimal("0.50"), "0.5"),
        (Decimal("1600"), "1600"),
        (Decimal("0"), "0"),
    ])
    def test_format_quantity(self, value, expected):
        assert format_quantity(value) == expected

    @pytest.mark.parametrize("value,expected", [
        (Decimal("0"), "₹0.00"),
        (Decimal("750"), "₹750.00"),
        (Decimal("34750"), "₹34,750.00"),
        (Decimal("100000"), "₹1,00,000.00"),
        (Decimal("12345678.9"), "₹1,23,45,678.90"),
        (Decimal("-500"), "-₹500.00"),
    ])
    def test_format_currency(self, value, expected):
        assert format_currency(value) == expected
