"""
Shared fixtures.

Everything runs against in-memory stores or tmp_path files; no test
touches the real custom table document.
"""

import pytest

from slabrate.audit import AuditLogger
from slabrate.config import Settings
from slabrate.engine import SlabTableRegistry, build_builtin_table
from slabrate.orchestrator import DrillingQuoteFlow
from slabrate.services.storage import InMemoryAuditStorage, InMemorySlabTableStore


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def type1_table():
    """Type 1 schedule at the default starting rate of 75."""
    return build_builtin_table("1", 75)


@pytest.fixture
def type2_table():
    return build_builtin_table("2", 75)


@pytest.fixture
def type3_table():
    return build_builtin_table("3", 75)


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def table_store():
    return InMemorySlabTableStore()


@pytest.fixture
def registry(table_store, settings, audit_logger):
    return SlabTableRegistry(store=table_store, settings=settings, audit_logger=audit_logger)


@pytest.fixture
def quote_flow(registry, audit_logger, settings):
    return DrillingQuoteFlow(registry=registry, audit_logger=audit_logger, settings=settings)
