import logging

import pytest

import simplesheets
from simplesheets import api
from simplesheets.errors import NotInitializedError
from simplesheets.logs import PACKAGE_LOGGER
from simplesheets.spreadsheet import GoogleSheetsClient

from conftest import SERVICE_ACCOUNT

@pytest.fixture(autouse=True)
def package_logger(monkeypatch):
    """init() reconfigures the package logger, put it back afterwards"""
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("SHEETS_ENVIRONMENT", raising=False)
    monkeypatch.delenv("SHEETS_DEFAULT_COLLABORATOR", raising=False)
    pkg = logging.getLogger(PACKAGE_LOGGER)
    saved = (pkg.level, pkg.propagate, list(pkg.handlers))
    yield pkg
    pkg.setLevel(saved[0])
    pkg.propagate = saved[1]
    pkg.handlers[:] = saved[2]

def init_fake(workspace, **kwargs):
    return api.init(SERVICE_ACCOUNT, environment="test", max_backoff_ms=5,
                    services=workspace.services, **kwargs)

async def test_not_initialized():
    with pytest.raises(NotInitializedError):
        api.get_client()
    with pytest.raises(NotInitializedError):
        await api.read_sheet("anything")
    with pytest.raises(NotInitializedError):
        await simplesheets.create_spreadsheet("report")

async def test_init_and_forward(workspace):
    client = init_fake(workspace)
    assert(isinstance(client, GoogleSheetsClient))
    assert(api.get_client() is client)
    assert(client.config.environment == "test")
    assert(client.policy.max_backoff_ms == 5)

    sid = await simplesheets.create_spreadsheet("report", tabs=["Users"])
    await simplesheets.write_sheet(sid, [{"name": "Ada"}], "Users")
    await simplesheets.append_sheet(sid, [{"name": "Alan"}], "Users")
    assert(await simplesheets.read_sheet(sid, "Users") == [{"name": "Ada"}, {"name": "Alan"}])
    assert(await simplesheets.get_range(sid, "A2", "Users", "array") == [["Ada"]])
    tabs = await simplesheets.list_tabs(sid)
    assert([t.title for t in tabs] == ["Users"])
    files = await simplesheets.list_owned_spreadsheets()
    assert([f.id for f in files] == [sid])

async def test_reinit_replaces_client(workspace, caplog):
    caplog.set_level(logging.INFO, logger=PACKAGE_LOGGER)
    first = init_fake(workspace)
    second = init_fake(workspace, max_retries=0)
    assert(api.get_client() is second)
    assert(second is not first)
    assert(second.policy.max_retries == 0)
    assert(any("re-initialized" in r.getMessage() for r in caplog.records))
    ready = [r for r in caplog.records if r.getMessage() == "simplesheets initialized"]
    assert(ready[-1].environment == "test")
    assert(ready[-1].max_retries == 0)

async def test_reset(workspace):
    init_fake(workspace)
    api.reset()
    with pytest.raises(NotInitializedError):
        await api.list_tabs("anything")

async def test_init_routes_to_caller_logger(workspace, package_logger):
    records = []

    class Collect(logging.Handler):
        def emit(self, record):
            records.append(record)

    mine = logging.getLogger("my-app")
    mine.setLevel(logging.DEBUG)
    handler = Collect()
    mine.addHandler(handler)
    try:
        init_fake(workspace, logger=mine, log_level="INFO")
        assert(package_logger.level == logging.INFO)
        assert(not package_logger.propagate)
        sid = workspace.add_spreadsheet("report")
        await api.delete_spreadsheet(sid)
        messages = [r.getMessage() for r in records]
        assert("simplesheets initialized" in messages)
        assert("Spreadsheet deleted" in messages)
        deleted = [r for r in records if r.getMessage() == "Spreadsheet deleted"][0]
        assert(deleted.spreadsheet_id == sid)
    finally:
        mine.removeHandler(handler)

def test_init_needs_credentials(monkeypatch):
    monkeypatch.delenv("SHEETS_CREDENTIALS", raising=False)
    with pytest.raises(simplesheets.CredentialsError):
        api.init(environment="test")
    with pytest.raises(NotInitializedError):
        api.get_client()

def test_package_exports():
    for name in api.__all__:
        assert(getattr(simplesheets, name) is getattr(api, name))
    assert(simplesheets.make_csv_from_records is simplesheets.records_to_csv)
