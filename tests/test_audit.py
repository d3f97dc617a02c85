"""
Tests for the audit logger and configuration.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from slabrate.audit import AuditLogger, create_correlation_id
from slabrate.config import ChargeSettings, Settings, SlabSettings, get_settings, validate_all_settings
from slabrate.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from slabrate.models.invoice import QuoteRequest
from slabrate.services.storage import AuditStorageInterface, InMemoryAuditStorage


class FailingAuditStorage(AuditStorageInterface):
    """Audit store whose writes always fail."""

    def append_event(self, event: AuditEvent) -> bool:
        raise OSError("disk full")

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return []


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_persists_events(self, audit_logger, audit_storage):
        audit_logger.log_slab_table_saved(table_id="custom_a", name="A", band_count=3)
        audit_logger.log_slab_table_deleted(table_id="custom_a")

        events = audit_storage.get_recent_events()
        assert [event.event_type for event in events] == [
            AuditEventType.SLAB_TABLE_DELETED,
            AuditEventType.SLAB_TABLE_SAVED,
        ]

    def test_correlation_id_is_kept(self, audit_logger, audit_storage):
        correlation_id = create_correlation_id()
        audit_logger.log_calculation_completed(
            table_id="1",
            depth="450",
            total_amount="34750",
            band_count=3,
            correlation_id=correlation_id,
        )
        assert audit_storage.get_recent_events()[0].correlation_id == correlation_id

    def test_local_only(self):
        """Without a store, logging still succeeds."""
        logger = AuditLogger()
        assert logger.log(AuditEventBuilder.slab_table_deleted("custom_a")) is True

    def test_storage_failure_does_not_raise(self):
        logger = AuditLogger(FailingAuditStorage())
        assert logger.log(AuditEventBuilder.slab_table_deleted("custom_a")) is False

    def test_log_error(self, audit_logger, audit_storage):
        audit_logger.log_error(error_type="StorageError", error_message="boom", details={"path": "x"})

        event = audit_storage.get_recent_events()[0]
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.details == {"path": "x"}

    def test_rejected_table_issues(self):
        storage = InMemoryAuditStorage()
        AuditLogger(storage).log_slab_table_rejected(
            name="Gap",
            issues=[{"issue_type": "gap", "message": "Gap between 400 ft and 450 ft"}],
        )
        assert storage.get_recent_events()[0].details["issues"][0]["issue_type"] == "gap"


class TestSettings:
    """Tests for pydantic-settings configuration."""

    def test_defaults(self):
        settings = Settings()

        assert settings.slabs.default_starting_rate == Decimal("75")
        assert settings.slabs.default_selector == "1"
        assert settings.charges.pvc_7_inch_rate == Decimal("400")
        assert settings.charges.pvc_10_inch_rate == Decimal("700")
        assert settings.charges.bata_amount == Decimal("2000")
        assert settings.charges.existing_bore_rate == Decimal("40")
        assert settings.charges.tax_rate == Decimal("18")
        assert settings.charges.tax_enabled is False
        assert settings.app.display_decimals == 2

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("CHARGE_TAX_ENABLED", "true")
        monkeypatch.setenv("SLAB_DEFAULT_STARTING_RATE", "80")

        assert ChargeSettings().tax_enabled is True
        assert SlabSettings().default_starting_rate == Decimal("80")

    def test_env_drives_quote(self, monkeypatch, quote_flow):
        monkeypatch.setenv("CHARGE_BATA_AMOUNT", "1500")
        result = quote_flow.calculate(QuoteRequest(depth=100))
        assert result.line_items[-1].amount == Decimal("1500")

    def test_invalid_tax_rate(self, monkeypatch):
        monkeypatch.setenv("CHARGE_TAX_RATE", "150")
        with pytest.raises(ValidationError):
            ChargeSettings()

    def test_validate_all_settings(self, monkeypatch):
        get_settings.cache_clear()
        monkeypatch.setenv("SLAB_DEFAULT_STARTING_RATE", "-1")

        results = validate_all_settings()

        assert results["slabs"] is False
        assert "slabs_error" in results
        assert results["charges"] is True
        get_settings.cache_clear()
