import pytest

from models.invoice import InvoiceCreate, new_invoice
from repositories import ActivityRepository, InvoiceRepository, UserRepository
from tests.fakes import OWNER_ID, FakeMotorClient, invoice_payload

TEST_DB = "numeris_test"


@pytest.fixture
def fake_client():
    return FakeMotorClient()


@pytest.fixture
def fake_db(fake_client):
    return fake_client[TEST_DB]


@pytest.fixture
def invoice_repo(fake_client):
    return InvoiceRepository(fake_client, TEST_DB, timeout_seconds=1.0)


@pytest.fixture
def user_repo(fake_client):
    return UserRepository(fake_client, TEST_DB, timeout_seconds=1.0)


@pytest.fixture
def activity_repo(fake_client):
    return ActivityRepository(fake_client, TEST_DB, timeout_seconds=1.0)


@pytest.fixture
def draft_invoice():
    """Draft invoice issued tomorrow, due in 30 days."""
    return new_invoice(OWNER_ID, InvoiceCreate(**invoice_payload()))
