import pytest

from simplesheets import api
from simplesheets.access import GWSAccess
from simplesheets.config import SheetsConfig
from simplesheets.retry import RetryPolicy
from simplesheets.spreadsheet import GoogleSheetsClient

from fakes import FakeWorkspace

SERVICE_ACCOUNT = {
    "type": "service_account",
    "project_id": "simplesheets-test",
    "client_email": "robot@simplesheets-test.iam.gserviceaccount.com",
}

@pytest.fixture
def workspace():
    return FakeWorkspace()

@pytest.fixture
def config():
    # short backoff so retried calls don't slow the suite down
    return SheetsConfig(credentials=SERVICE_ACCOUNT, environment="test",
                        retry_policy=RetryPolicy(max_retries=2, max_backoff_ms=5))

@pytest.fixture
def client(workspace, config):
    return GoogleSheetsClient(GWSAccess(config, workspace.services))

@pytest.fixture(autouse=True)
def reset_default_client():
    yield
    api.reset()
