"""Shared test fixtures."""

import pytest

from smart_case_lab.generator import DataGenerator
from smart_case_lab.storage import MemoryStore
from smart_case_lab.table import build_table


@pytest.fixture
def sample_item():
    return {
        "id": 1,
        "name": "Test Item",
        "details": {"price": 100, "stock": 10},
        "tags": ["tag1", "tag2"],
    }


@pytest.fixture
def sample_table(sample_item):
    return build_table(sample_item)


@pytest.fixture
def list_table():
    return build_table([
        {"id": 1, "status": "active", "owner": {"name": "Ann", "email": "ann@example.com"}},
        {"id": 2, "status": "inactive", "owner": {"name": "Bob", "email": "bob@example.com"}},
    ])


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def generator():
    return DataGenerator(seed=1234)
