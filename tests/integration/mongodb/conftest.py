"""Pytest fixtures for MongoDB integration tests."""

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from testcontainers.mongodb import MongoDbContainer

from sourced_repo.integrations.mongodb import MongoConfiguration, MongoDocumentStore


@pytest.fixture(scope="module")
def mongodb_container():
    """Start MongoDB container for tests."""
    container = MongoDbContainer("mongo:7")
    with container:
        yield container


@pytest_asyncio.fixture
async def mongo_store(
    mongodb_container, request: pytest.FixtureRequest
) -> AsyncIterator[MongoDocumentStore]:
    """Create a connected store using a database unique to the test."""
    config = MongoConfiguration(
        uri=mongodb_container.get_connection_url(),
        database=f"test_{request.node.name}"[:63],
    )
    async with MongoDocumentStore(config) as store:
        await store.client.drop_database(config.database)
        yield store
        await store.client.drop_database(config.database)
