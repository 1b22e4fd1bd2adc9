"""Shared fixtures: a small source schema and an evolved destination schema."""

import pytest

from eavmigrate.model.migration_config import MigrationConfig
from eavmigrate.storage.memory import InMemoryRecordStore

from support import destination_tables, source_tables


@pytest.fixture
def source_store():
    return InMemoryRecordStore(source_tables())


@pytest.fixture
def destination_store():
    return InMemoryRecordStore(destination_tables())


@pytest.fixture
def config():
    return MigrationConfig()
