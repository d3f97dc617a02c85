"""
Tests for built-in schedules, custom tables and selector resolution.
"""

from decimal import Decimal

import pytest

from slabrate.engine import (
    SlabTableRegistry,
    build_builtin_table,
    build_custom_table,
    generate_rates,
)
from slabrate.engine.registry import BUILTIN_IDS
from slabrate.errors import InvalidAmount, InvalidSlabDefinition, UnknownSlabSelector
from slabrate.models.audit import AuditEventType
from slabrate.models.slab import CustomSlabDefinition, SlabBand, SlabRange, SlabTable, SlabType
from slabrate.services.storage import StorageError


def _definition(**overrides):
    data = {
        "name": "Hard Rock",
        "ranges": [
            SlabRange(start=Decimal("1"), end=Decimal("200")),
            SlabRange(start=Decimal("201"), end=Decimal("500")),
            SlabRange(start=Decimal("501")),
        ],
        "start_rate": Decimal("90"),
        "increment_pattern": [Decimal("0"), Decimal("10"), Decimal("25")],
    }
    data.update(overrides)
    return CustomSlabDefinition(**data)


class TestGenerateRates:
    """Tests for the built-in rate generators."""

    def test_type1_rates(self):
        """Type 1 steps by 5/10 up to 1000 ft, then by 100 per band."""
        rates = generate_rates(75, SlabType.TYPE_1)

        assert list(rates.keys())[:3] == ["1-300", "301-400", "401-500"]
        assert list(rates.values()) == [
            Decimal(v) for v in
            [75, 80, 85, 95, 105, 115, 125, 135, 235, 335, 435, 535, 635, 735, 835]
        ]
        assert list(rates.keys())[-1] == "1601+"

    def test_type2_rates(self):
        """Type 2 adds 5 per 100 ft band across 17 bands."""
        rates = generate_rates(75, "2")

        assert len(rates) == 17
        assert rates["1-100"] == Decimal("75")
        assert rates["101-200"] == Decimal("80")
        assert rates["1501-1600"] == Decimal("150")
        assert rates["1601+"] == Decimal("155")

    def test_type3_matches_type1_layout(self):
        assert generate_rates(60, "3") == generate_rates(60, "1")

    def test_rates_follow_start_rate(self):
        low = generate_rates(70, "1")
        high = generate_rates(80, "1")
        assert all(high[key] - low[key] == 10 for key in low)

    def test_negative_start_rate_rejected(self):
        with pytest.raises(InvalidAmount):
            generate_rates(-1, "1")

    def test_unknown_type_rejected(self):
        with pytest.raises(UnknownSlabSelector):
            generate_rates(75, "4")


class TestBuiltinTables:
    """Tests for built-in table construction."""

    @pytest.mark.parametrize("slab_type,band_count", [("1", 15), ("2", 17), ("3", 15)])
    def test_band_counts(self, slab_type, band_count):
        table = build_builtin_table(slab_type, 75)
        assert table.band_count == band_count
        assert table.is_builtin
        assert table.id == slab_type

    def test_last_band_unbounded(self, type1_table):
        assert type1_table.bands[-1].upper_bound is None
        assert type1_table.bands[-1].label == "1601+"

    def test_default_display_names(self):
        assert build_builtin_table("1", 75).display_name == "Traditional Rates"
        assert build_builtin_table("2", 75).display_name == "Progressive Rates"
        assert build_builtin_table("3", 75).display_name == "Rebore Rates"

    def test_manual_rates(self):
        """A hand-maintained Type 3 schedule keeps its own rates."""
        rates = [Decimal(100 + i) for i in range(15)]
        table = build_builtin_table("3", 75, rates=rates)
        assert [band.rate_per_unit for band in table.bands] == rates

    def test_manual_rates_wrong_count(self):
        with pytest.raises(InvalidSlabDefinition):
            build_builtin_table("3", 75, rates=[Decimal("100")] * 14)

    def test_rate_map_is_ordered(self, type2_table):
        keys = list(type2_table.rate_map().keys())
        assert keys[0] == "1-100"
        assert keys[-1] == "1601+"


class TestCustomTables:
    """Tests for building custom tables from definitions."""

    def test_increment_pattern(self):
        table = build_custom_table(_definition(), "custom_test")

        assert [band.rate_per_unit for band in table.bands] == [
            Decimal("90"), Decimal("100"), Decimal("115"),
        ]
        assert table.bands[-1].upper_bound is None
        assert not table.is_builtin

    def test_explicit_rates(self):
        definition = _definition(
            start_rate=None,
            increment_pattern=None,
            rates=[Decimal("70"), Decimal("75"), Decimal("90")],
        )
        table = build_custom_table(definition, "custom_test")
        assert [band.rate_per_unit for band in table.bands] == [
            Decimal("70"), Decimal("75"), Decimal("90"),
        ]

    def test_increment_count_mismatch(self):
        with pytest.raises(InvalidSlabDefinition, match="increments"):
            build_custom_table(_definition(increment_pattern=[Decimal("0")]), "custom_test")

    def test_negative_increment(self):
        with pytest.raises(InvalidSlabDefinition):
            build_custom_table(
                _definition(increment_pattern=[Decimal("0"), Decimal("-5"), Decimal("10")]),
                "custom_test",
            )

    def test_negative_start_rate(self):
        with pytest.raises(InvalidSlabDefinition):
            build_custom_table(_definition(start_rate=Decimal("-1")), "custom_test")

    def test_missing_rates(self):
        with pytest.raises(InvalidSlabDefinition):
            build_custom_table(_definition(start_rate=None), "custom_test")

    def test_no_ranges(self):
        with pytest.raises(InvalidSlabDefinition):
            build_custom_table(_definition(ranges=[], increment_pattern=[]), "custom_test")


class TestSlabTableRegistry:
    """Tests for selector resolution and custom table management."""

    def test_resolve_builtin_uses_default_rate(self, registry):
        table = registry.resolve("1")
        assert table.bands[0].rate_per_unit == Decimal("75")

    def test_resolve_builtin_with_starting_rate(self, registry):
        table = registry.resolve("2", starting_rate=Decimal("100"))
        assert table.bands[0].rate_per_unit == Decimal("100")
        assert table.bands[-1].rate_per_unit == Decimal("180")

    def test_resolve_unknown_raises(self, registry):
        with pytest.raises(UnknownSlabSelector) as exc_info:
            registry.resolve("custom_missing")
        assert exc_info.value.selector == "custom_missing"

    def test_resolve_without_store(self, settings):
        with pytest.raises(UnknownSlabSelector):
            SlabTableRegistry(settings=settings).resolve("custom_anything")

    def test_resolve_or_default_falls_back_with_warning(self, registry, audit_storage):
        table, warning = registry.resolve_or_default("custom_missing")

        assert table.id == "1"
        assert warning is not None
        assert "custom_missing" in warning
        events = audit_storage.get_recent_events()
        assert events[0].event_type == AuditEventType.SELECTOR_FALLBACK

    def test_resolve_or_default_direct_hit(self, registry):
        table, warning = registry.resolve_or_default("2")
        assert table.id == "2"
        assert warning is None

    def test_create_and_resolve_custom(self, registry, audit_storage):
        table = registry.create_custom(_definition())

        assert table.id.startswith("custom_")
        assert table.id not in BUILTIN_IDS
        assert registry.resolve(table.id) == table
        assert audit_storage.get_recent_events()[0].event_type == AuditEventType.SLAB_TABLE_SAVED

    def test_create_custom_rejects_gap(self, registry, table_store, audit_storage):
        """A 400/450 gap is rejected and nothing is stored."""
        definition = _definition(
            ranges=[
                SlabRange(start=Decimal("1"), end=Decimal("400")),
                SlabRange(start=Decimal("450")),
            ],
            increment_pattern=[Decimal("0"), Decimal("10")],
        )
        with pytest.raises(InvalidSlabDefinition) as exc_info:
            registry.create_custom(definition)

        assert exc_info.value.issues[0].issue_type == "gap"
        assert table_store.list_ids() == []
        assert audit_storage.get_recent_events()[0].event_type == AuditEventType.SLAB_TABLE_REJECTED

    def test_create_custom_rejects_builtin_id(self, registry):
        with pytest.raises(InvalidSlabDefinition):
            registry.create_custom(_definition(id="1"))

    def test_update_custom(self, registry):
        table = registry.create_custom(_definition())
        updated = registry.update_custom(_definition(id=table.id, name="Soft Soil"))

        assert updated.id == table.id
        assert registry.resolve(table.id).display_name == "Soft Soil"

    def test_update_unknown_custom(self, registry):
        with pytest.raises(UnknownSlabSelector):
            registry.update_custom(_definition(id="custom_missing"))

    def test_delete_custom(self, registry):
        table = registry.create_custom(_definition())

        assert registry.delete_custom(table.id) is True
        assert registry.delete_custom(table.id) is False
        with pytest.raises(UnknownSlabSelector):
            registry.resolve(table.id)

    def test_delete_builtin_rejected(self, registry):
        with pytest.raises(InvalidSlabDefinition):
            registry.delete_custom("1")

    def test_list_custom(self, registry):
        first = registry.create_custom(_definition(name="First"))
        second = registry.create_custom(_definition(name="Second"))
        assert [t.id for t in registry.list_custom()] == [first.id, second.id]

    def test_stored_table_is_revalidated(self, registry, table_store):
        """A table written to the store behind the registry's back is still checked."""
        broken = SlabTable(
            id="custom_broken",
            display_name="Broken",
            bands=(
                SlabBand(index=0, lower_bound=Decimal("1"), upper_bound=Decimal("100"),
                         rate_per_unit=Decimal("0")),
                SlabBand(index=1, lower_bound=Decimal("101"), rate_per_unit=Decimal("80")),
            ),
        )
        table_store.save(broken)

        with pytest.raises(InvalidSlabDefinition):
            registry.resolve("custom_broken")
        with pytest.raises(InvalidSlabDefinition):
            registry.resolve_or_default("custom_broken")

    def test_create_without_store(self, settings):
        with pytest.raises(StorageError):
            SlabTableRegistry(settings=settings).create_custom(_definition())
