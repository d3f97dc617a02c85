"""
Slab Table Registry

DESIGN DECISION: Built-in schedules are generated, never stored. A built-in
table is rebuilt from a starting rate on every resolve, so changing the
starting rate can never leave a stale rate behind. Custom tables come from
a SlabTableStorageInterface and are re-validated every time they are loaded.

Band layouts for the built-in schedules:
- Type 1 / Type 3: 1-300, then 100 ft bands up to 1600, then 1601+
- Type 2: 100 ft bands from 1 up to 1600, then 1601+

The pure functions at the top of this module (layouts, generate_rates,
build_builtin_table, build_custom_table) do no I/O and no logging. The
SlabTableRegistry below them owns the configuration boundary.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from pydantic import ValidationError

from slabrate.audit import AuditLogger
from slabrate.config import Settings, get_settings
from slabrate.errors import InvalidSlabDefinition, UnknownSlabSelector
from slabrate.models.slab import (
    CustomSlabDefinition,
    SlabBand,
    SlabTable,
    SlabType,
)
from slabrate.numbers import coerce_amount
from slabrate.services.storage import (
    NotFoundError,
    SlabTableStorageInterface,
    StorageError,
)
from slabrate.validation import SlabTableValidator


BUILTIN_IDS = frozenset(slab_type.value for slab_type in SlabType)

DEFAULT_DISPLAY_NAMES = {
    SlabType.TYPE_1: "Traditional Rates",
    SlabType.TYPE_2: "Progressive Rates",
    SlabType.TYPE_3: "Rebore Rates",
}

# Increments over the starting rate for the first eight Type 1/3 bands
# (1-300 through 901-1000). Later bands add 100 each on top of the last.
_STEPPED_INCREMENTS = [0, 5, 10, 20, 30, 40, 50, 60]

_OPEN_BAND_START = 1601


def _band_bounds(slab_type: SlabType) -> list[tuple[int, Optional[int]]]:
    """Inclusive (lower, upper) bounds of a built-in layout; upper None = unbounded."""
    if slab_type is SlabType.TYPE_2:
        bounds = [(lower, lower + 99) for lower in range(1, _OPEN_BAND_START, 100)]
    else:
        bounds = [(1, 300)]
        bounds.extend((lower, lower + 99) for lower in range(301, _OPEN_BAND_START, 100))

    bounds.append((_OPEN_BAND_START, None))
    return bounds


def _increments(slab_type: SlabType, band_count: int) -> list[Decimal]:
    if slab_type is SlabType.TYPE_2:
        return [Decimal(5 * position) for position in range(band_count)]

    increments = [Decimal(step) for step in _STEPPED_INCREMENTS]
    while len(increments) < band_count:
        increments.append(increments[-1] + 100)
    return increments[:band_count]


def parse_slab_type(slab_type) -> SlabType:
    """Accept a SlabType or its selector string ('1', '2', '3')."""
    if isinstance(slab_type, SlabType):
        return slab_type
    try:
        return SlabType(str(slab_type).strip())
    except ValueError:
        raise UnknownSlabSelector(str(slab_type))


def _bands(slab_type: SlabType, rates: list[Decimal]) -> tuple[SlabBand, ...]:
    return tuple(
        SlabBand(
            index=position,
            lower_bound=Decimal(lower),
            upper_bound=Decimal(upper) if upper is not None else None,
            rate_per_unit=rate,
        )
        for position, ((lower, upper), rate) in enumerate(zip(_band_bounds(slab_type), rates))
    )


def generate_rates(start_rate, slab_type) -> dict[str, Decimal]:
    """
    Derive the per-band rates of a built-in schedule from its starting rate.

    Returns an ordered {band key: rate} mapping, e.g. for Type 1 at 75:
    {"1-300": 75, "301-400": 80, ..., "1601+": 835}.

    Raises:
        InvalidAmount: If start_rate is negative or not a number
        UnknownSlabSelector: If slab_type is not a built-in type
    """
    slab_type = parse_slab_type(slab_type)
    start = coerce_amount(start_rate, field="start_rate")
    band_count = len(_band_bounds(slab_type))

    rates = [start + increment for increment in _increments(slab_type, band_count)]
    return {band.key: band.rate_per_unit for band in _bands(slab_type, rates)}


def build_builtin_table(
    slab_type,
    start_rate,
    display_name: Optional[str] = None,
    rates: Optional[list] = None,
) -> SlabTable:
    """
    Build a built-in table.

    Rates are generated from start_rate unless an explicit list is given
    (a manually maintained Type 3 schedule); that list needs exactly one
    rate per band.
    """
    slab_type = parse_slab_type(slab_type)
    band_count = len(_band_bounds(slab_type))

    if rates is None:
        band_rates = list(generate_rates(start_rate, slab_type).values())
    else:
        if len(rates) != band_count:
            raise InvalidSlabDefinition(
                f"Schedule {slab_type.value} needs {band_count} rates, got {len(rates)}"
            )
        band_rates = [coerce_amount(rate, field="rate") for rate in rates]

    return SlabTable(
        id=slab_type.value,
        display_name=display_name or DEFAULT_DISPLAY_NAMES[slab_type],
        bands=_bands(slab_type, band_rates),
        slab_type=slab_type,
    )


def new_custom_id() -> str:
    return f"custom_{uuid4().hex[:12]}"


def build_custom_table(definition: CustomSlabDefinition, table_id: str) -> SlabTable:
    """
    Turn a custom definition into an (unvalidated) SlabTable.

    Raises:
        InvalidSlabDefinition: If no ranges are given, or the rates/increments
            do not line up with the ranges
    """
    ranges = definition.ranges
    if not ranges:
        raise InvalidSlabDefinition(f"Custom table {definition.name!r} has no ranges")

    if definition.rates is not None:
        if len(definition.rates) != len(ranges):
            raise InvalidSlabDefinition(
                f"Number of rates ({len(definition.rates)}) must match "
                f"number of ranges ({len(ranges)})"
            )
        rates = list(definition.rates)
    else:
        if definition.start_rate is None or definition.increment_pattern is None:
            raise InvalidSlabDefinition(
                "A custom table needs explicit rates or a start rate with an increment pattern"
            )
        if definition.start_rate < 0:
            raise InvalidSlabDefinition(
                f"Start rate cannot be negative: {definition.start_rate}"
            )
        increments = definition.increment_pattern
        if len(increments) != len(ranges):
            raise InvalidSlabDefinition(
                f"Number of increments ({len(increments)}) must match "
                f"number of ranges ({len(ranges)})"
            )
        if any(increment < 0 for increment in increments):
            raise InvalidSlabDefinition("Increments cannot be negative")
        rates = [definition.start_rate + increment for increment in increments]

    bands = tuple(
        SlabBand(
            index=position,
            lower_bound=slab_range.start,
            upper_bound=slab_range.end,
            rate_per_unit=rate,
        )
        for position, (slab_range, rate) in enumerate(zip(ranges, rates))
    )

    return SlabTable(id=table_id, display_name=definition.name, bands=bands)


class SlabTableRegistry:
    """
    Resolves selectors to validated slab tables and manages custom tables.

    Usage:
        registry = SlabTableRegistry(store=JsonFileSlabTableStore())
        table = registry.resolve("1", starting_rate=80)
        table, warning = registry.resolve_or_default(request.slab_selector)
    """

    def __init__(
        self,
        store: Optional[SlabTableStorageInterface] = None,
        settings: Optional[Settings] = None,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[SlabTableValidator] = None,
    ):
        self._store = store
        self._settings = settings or get_settings()
        self._audit_logger = audit_logger
        self._validator = validator or SlabTableValidator()

    def _display_name(self, slab_type: SlabType) -> str:
        slabs = self._settings.slabs
        return {
            SlabType.TYPE_1: slabs.type1_name,
            SlabType.TYPE_2: slabs.type2_name,
            SlabType.TYPE_3: slabs.type3_name,
        }[slab_type]

    def _require_store(self) -> SlabTableStorageInterface:
        if self._store is None:
            raise StorageError("No slab table store configured")
        return self._store

    def validate_table(self, table: SlabTable) -> SlabTable:
        """Validate a caller-supplied table (raises InvalidSlabDefinition)."""
        return self._validator.ensure_valid(table)

    def resolve(self, selector: str, starting_rate=None) -> SlabTable:
        """
        Resolve a selector to a validated table.

        Raises:
            UnknownSlabSelector: If the selector is neither built-in nor stored
            InvalidSlabDefinition: If the stored table fails validation
            StorageError: If the store cannot be read
        """
        selector = str(selector).strip()

        if selector in BUILTIN_IDS:
            slab_type = SlabType(selector)
            if starting_rate is None:
                starting_rate = self._settings.slabs.default_starting_rate
            return self._validator.ensure_valid(
                build_builtin_table(slab_type, starting_rate, self._display_name(slab_type))
            )

        if self._store is None:
            raise UnknownSlabSelector(selector)

        try:
            table = self._store.load(selector)
        except NotFoundError:
            raise UnknownSlabSelector(selector)
        except ValidationError as e:
            raise InvalidSlabDefinition(f"Stored slab table {selector!r} is malformed: {e}")

        return self._validator.ensure_valid(table)

    def resolve_or_default(
        self,
        selector: str,
        starting_rate=None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[SlabTable, Optional[str]]:
        """
        Resolve a selector, falling back to the default schedule if unknown.

        Only UnknownSlabSelector is recovered; invalid stored tables still
        raise. Returns (table, warning) where warning is None on a direct hit.
        """
        try:
            return self.resolve(selector, starting_rate), None
        except UnknownSlabSelector:
            fallback = self._settings.slabs.default_selector
            table = self.resolve(fallback, starting_rate)
            warning = (
                f"Slab table {selector!r} not found; "
                f"using {table.display_name} ({table.id}) instead"
            )
            if self._audit_logger:
                self._audit_logger.log_selector_fallback(
                    selector=str(selector),
                    fallback_id=table.id,
                    correlation_id=correlation_id,
                )
            return table, warning

    def _save(self, definition: CustomSlabDefinition, table_id: str) -> SlabTable:
        store = self._require_store()

        try:
            table = self._validator.ensure_valid(build_custom_table(definition, table_id))
        except InvalidSlabDefinition as e:
            if self._audit_logger:
                self._audit_logger.log_slab_table_rejected(
                    name=definition.name,
                    issues=[issue.model_dump() for issue in e.issues] or [{"message": str(e)}],
                )
            raise

        store.save(table)

        if self._audit_logger:
            self._audit_logger.log_slab_table_saved(
                table_id=table.id,
                name=table.display_name,
                band_count=table.band_count,
            )
        return table

    def create_custom(self, definition: CustomSlabDefinition) -> SlabTable:
        """
        Create a custom table from a definition and persist it.

        Raises:
            InvalidSlabDefinition: If the definition or resulting table is invalid,
                or if it tries to take a built-in id
        """
        table_id = definition.id or new_custom_id()
        if table_id in BUILTIN_IDS:
            raise InvalidSlabDefinition(f"Id {table_id!r} is reserved for a built-in schedule")
        return self._save(definition, table_id)

    def update_custom(self, definition: CustomSlabDefinition) -> SlabTable:
        """
        Replace an existing custom table. Last write wins.

        Raises:
            UnknownSlabSelector: If no custom table exists under definition.id
        """
        store = self._require_store()
        table_id = definition.id
        if not table_id or table_id in BUILTIN_IDS or table_id not in store.list_ids():
            raise UnknownSlabSelector(table_id or "")
        return self._save(definition, table_id)

    def delete_custom(self, selector: str) -> bool:
        if selector in BUILTIN_IDS:
            raise InvalidSlabDefinition(f"Built-in schedule {selector!r} cannot be deleted")

        deleted = self._require_store().delete(selector)
        if deleted and self._audit_logger:
            self._audit_logger.log_slab_table_deleted(table_id=selector)
        return deleted

    def list_custom(self) -> list[SlabTable]:
        """All stored custom tables, validated, in storage order."""
        if self._store is None:
            return []
        return [self.resolve(table_id) for table_id in self._store.list_ids()]
