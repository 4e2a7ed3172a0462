"""Central test fixtures."""

import pytest
from ulid import ULID

from sourced_repo import Repository
from sourced_repo.storage import InMemoryDocumentStore
from tests.fixtures.bank import BankAccount


@pytest.fixture
def account_id() -> str:
    """Generate a unique entity ID."""
    return str(ULID())


@pytest.fixture
def bank_account(account_id: str) -> BankAccount:
    """Create a BankAccount entity instance."""
    return BankAccount(id=account_id)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Create an in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def repository(store: InMemoryDocumentStore) -> Repository[BankAccount]:
    """Create a BankAccount repository indexing the owner field."""
    return Repository(BankAccount, store, indices=["owner"])


@pytest.fixture
def snapshots(store: InMemoryDocumentStore):
    """The BankAccount snapshot collection."""
    return store.collection("BankAccount.snapshots")


@pytest.fixture
def events(store: InMemoryDocumentStore):
    """The BankAccount event collection."""
    return store.collection("BankAccount.events")
