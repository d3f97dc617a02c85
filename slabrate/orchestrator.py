"""
Main Orchestrator for the Slab Rate Engine

This module ties the components together and defines the end-to-end
quote flow:
    inputs -> resolve table -> allocate (or rebore) -> line items
           -> PVC / bata -> totals -> QuoteResult

DESIGN DECISION: The orchestrator enforces the boundaries:
- Tables are validated before any depth is allocated
- An unknown selector falls back to the default schedule WITH a warning,
  never silently
- Invalid input raises; it is never priced as zero
- Every calculation is audited

The QuoteResult is the hand-off to the invoice assembler and the document
generator. Neither of them recomputes anything.
"""

from typing import Optional
from uuid import UUID

from slabrate.audit import AuditLogger, create_correlation_id
from slabrate.config import Settings, get_settings
from slabrate.engine import (
    CasingDiameter,
    SlabTableRegistry,
    add_flat_charge,
    add_pvc,
    allocate,
    breakdown_lines,
    compute_rebore,
    compute_totals,
    rebore_line_items,
    to_line_items,
)
from slabrate.errors import SlabEngineError
from slabrate.models.invoice import QuoteRequest, QuoteResult
from slabrate.models.slab import SlabTable
from slabrate.numbers import format_quantity
from slabrate.services.storage import (
    JsonFileSlabTableStore,
    JsonLinesAuditStorage,
    StorageError,
)


class DrillingQuoteFlow:
    """
    Orchestrates one drilling quote.

    Flow:
    1. Resolve → explicit table, or selector with fallback
    2. Allocate → progressive band allocation (or rebore split when an
       existing bore depth is given)
    3. Format → one line item per band
    4. Extras → 7"/10" PVC casing and bata, only when positive
    5. Totals → subtotal, tax, total, pending
    """

    def __init__(
        self,
        registry: Optional[SlabTableRegistry] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[Settings] = None,
    ):
        self._settings = settings or get_settings()
        self._audit_logger = audit_logger
        self._registry = registry or SlabTableRegistry(
            settings=self._settings,
            audit_logger=audit_logger,
        )

    @property
    def registry(self) -> SlabTableRegistry:
        return self._registry

    def _resolve_table(
        self,
        request: QuoteRequest,
        selector: str,
        correlation_id: UUID,
    ) -> tuple[SlabTable, Optional[str]]:
        if request.custom_table is not None:
            return self._registry.validate_table(request.custom_table), None
        return self._registry.resolve_or_default(
            selector,
            starting_rate=request.starting_rate,
            correlation_id=correlation_id,
        )

    def calculate(
        self,
        request: QuoteRequest,
        correlation_id: Optional[UUID] = None,
    ) -> QuoteResult:
        """
        Price a drilling job.

        Raises:
            SlabEngineError: On invalid input or an invalid table
                (the rejection is audited first)
            StorageError: If a custom table cannot be read
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            result = self._calculate(request, correlation_id)
        except SlabEngineError as e:
            if self._audit_logger:
                self._audit_logger.log_calculation_rejected(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise
        except StorageError as e:
            if self._audit_logger:
                self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    details={"selector": request.slab_selector},
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            self._audit_logger.log_calculation_completed(
                table_id=result.table_id,
                depth=format_quantity(request.depth),
                total_amount=str(result.totals.total_amount),
                band_count=len(result.calculation.allocations),
                correlation_id=correlation_id,
            )
        return result

    def _calculate(self, request: QuoteRequest, correlation_id: UUID) -> QuoteResult:
        charges = self._settings.charges
        app = self._settings.app
        warnings = []

        # Step 1-3: drilling
        rebore = None
        if request.existing_bore_depth > 0:
            selector = request.rebore_selector or request.slab_selector
            table, warning = self._resolve_table(request, selector, correlation_id)
            existing_rate = request.existing_bore_rate
            if existing_rate is None:
                existing_rate = charges.existing_bore_rate
            rebore = compute_rebore(
                request.existing_bore_depth,
                existing_rate,
                request.depth,
                table,
                request.rebore_policy,
            )
            calculation = rebore.new_drilling_allocation
            line_items = rebore_line_items(rebore)
        else:
            table, warning = self._resolve_table(request, request.slab_selector, correlation_id)
            calculation = allocate(request.depth, table)
            line_items = to_line_items(calculation)

        if warning:
            warnings.append(warning)

        # Step 4: extras
        casing = (
            (CasingDiameter.SEVEN_INCH, request.pvc_7_inch_feet, request.pvc_7_inch_rate, charges.pvc_7_inch_rate),
            (CasingDiameter.TEN_INCH, request.pvc_10_inch_feet, request.pvc_10_inch_rate, charges.pvc_10_inch_rate),
        )
        for diameter, footage, rate, default_rate in casing:
            if footage > 0:
                line_items.append(add_pvc(diameter, footage, rate if rate is not None else default_rate))

        bata = request.bata_amount if request.bata_amount is not None else charges.bata_amount
        if bata > 0:
            line_items.append(add_flat_charge("BATA", bata))

        # Step 5: totals
        tax_enabled = request.tax_enabled if request.tax_enabled is not None else charges.tax_enabled
        tax_rate = request.tax_rate if request.tax_rate is not None else charges.tax_rate
        totals = compute_totals(line_items, tax_rate, tax_enabled, request.advance_amount)

        return QuoteResult(
            table_id=table.id,
            table_name=table.display_name,
            calculation=calculation,
            rebore=rebore,
            line_items=tuple(line_items),
            breakdown=tuple(breakdown_lines(
                line_items,
                decimals=app.display_decimals,
                symbol=app.currency_symbol,
            )),
            totals=totals,
            warnings=tuple(warnings),
        )


def create_app_components(
    custom_tables_path: Optional[str] = None,
    audit_log_path: Optional[str] = None,
) -> tuple[DrillingQuoteFlow, SlabTableRegistry]:
    """
    Factory function to create the application components.

    Args:
        custom_tables_path: JSON file for custom tables; defaults to
                    STORAGE_CUSTOM_TABLES_PATH.
        audit_log_path: JSON-lines audit file. If None, audit events are
                    only logged locally.

    Returns:
        (quote_flow, registry)
    """
    settings = get_settings()
    audit_storage = JsonLinesAuditStorage(audit_log_path) if audit_log_path else None
    audit_logger = AuditLogger(audit_storage)

    registry = SlabTableRegistry(
        store=JsonFileSlabTableStore(custom_tables_path),
        settings=settings,
        audit_logger=audit_logger,
    )
    quote_flow = DrillingQuoteFlow(
        registry=registry,
        audit_logger=audit_logger,
        settings=settings,
    )
    return quote_flow, registry
