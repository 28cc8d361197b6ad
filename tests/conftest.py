"""Shared test fixtures for scalarq tests."""

from __future__ import annotations

import pytest

from scalarq import ScalarqClient, ScalarqConfig
from tests.common import (
    ALIAS,
    COLLECTION_NAME,
    NUMBER_ENTITIES,
    PARTITION_A,
    PARTITION_B,
    PARTITION_C,
    make_rows,
    make_schema,
)


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config(clock):
    return ScalarqConfig(clock=clock)


@pytest.fixture
def schema():
    return make_schema()


@pytest.fixture
def client(config):
    """An empty client."""
    return ScalarqClient(config)


@pytest.fixture
def seeded_client(client):
    """Client with one collection: three partitions of NUMBER_ENTITIES rows each.

    partitionA holds keys 0..N-1, partitionB N..2N-1, partitionC 2N..3N-1.
    """
    client.create_collection(COLLECTION_NAME, make_schema())
    for index, partition in enumerate((PARTITION_A, PARTITION_B, PARTITION_C)):
        client.create_partition(COLLECTION_NAME, partition)
        client.insert(
            COLLECTION_NAME,
            make_rows(index * NUMBER_ENTITIES, NUMBER_ENTITIES),
            partition_name=partition,
        )
    client.create_alias(COLLECTION_NAME, ALIAS)
    return client


@pytest.fixture
def collection(seeded_client):
    return seeded_client.get_collection(COLLECTION_NAME)
