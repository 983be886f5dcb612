"""
Module level access for scripts that only ever talk to one account.

init() builds a process default GoogleSheetsClient and the functions here
forward to it.  Anything that needs more than one configuration should
build GoogleSheetsClient objects directly instead.
"""
from collections.abc import Mapping
from functools import wraps
from pathlib import Path
from typing import Any
import logging

from googleapiclient.discovery import Resource

from .access import GWSAccess
from .config import SheetsConfig
from .drive import SpreadsheetFile
from .errors import NotInitializedError
from .logs import configure_logging
from .sheets.resources import (AppendValuesResponse, ClearValuesResponse, Spreadsheet,
                               TabDescriptor, UpdateValuesResponse)
from .spreadsheet import GoogleSheetsClient

__all__ = ["init", "get_client", "reset", "create_spreadsheet", "write_sheet", "write_tabs",
           "read_sheet", "update_sheet", "append_sheet", "clear_sheet", "get_range", "write_range",
           "share_sheet", "delete_spreadsheet", "list_owned_spreadsheets", "delete_all_spreadsheets",
           "get_info", "add_tab", "delete_tab", "rename_tab", "duplicate_tab", "list_tabs"]

_client: GoogleSheetsClient|None = None

def init(credentials: Mapping|str|Path|None = None,
         environment: str|None = None,
         max_retries: int|None = None,
         max_backoff_ms: int|None = None,
         logger: logging.Logger|None = None,
         log_level: int|str|None = None,
         default_collaborator: str|None = None,
         token_cache: str|Path|None = None,
         services: dict[str, Resource]|None = None) -> GoogleSheetsClient:
    """
    Configure the process default client and return it.
    credentials is a mapping or a path to a JSON file, SHEETS_CREDENTIALS
    names the file when it is left out.  Calling init() again replaces the
    default client.
    services hands in prebuilt service objects keyed 'sheets:v4' and
    'drive:v3', mostly for testing.
    """
    global _client
    config = SheetsConfig.from_options(credentials=credentials,
                                       environment=environment,
                                       max_retries=max_retries,
                                       max_backoff_ms=max_backoff_ms,
                                       default_collaborator=default_collaborator,
                                       token_cache=token_cache)
    pkg = configure_logging(config.environment, log_level, logger)
    if _client is not None:
        pkg.info("simplesheets re-initialized, replacing the default client")
    _client = GoogleSheetsClient(GWSAccess(config, services))
    pkg.info("simplesheets initialized",
             extra={"environment": config.environment,
                    "max_retries": config.retry_policy.max_retries,
                    "max_backoff_ms": config.retry_policy.max_backoff_ms})
    return _client

def get_client() -> GoogleSheetsClient:
    if _client is None:
        raise NotInitializedError()
    return _client

def reset() -> None:
    """Forget the default client, module level calls fail until the next init()"""
    global _client
    _client = None

def default_client(f):
    """
    Decorator handing the default client to f as its first argument.
    Raises NotInitializedError before f runs if init() hasn't been called.
    """
    @wraps(f)
    async def wrapped(*args, **kwargs):
        return await f(get_client(), *args, **kwargs)
    return wrapped

@default_client
async def create_spreadsheet(client: GoogleSheetsClient, name: str|None = None,
                             tabs: list[str]|None = None) -> str:
    return await client.create_spreadsheet(name, tabs)

@default_client
async def write_sheet(client: GoogleSheetsClient, spreadsheet_id: str, data: Any = "",
                      tab: str|None = None) -> UpdateValuesResponse:
    return await client.write_sheet(spreadsheet_id, data, tab)

@default_client
async def write_tabs(client: GoogleSheetsClient, spreadsheet_id: str,
                     assets: Mapping[str, Any]) -> list[UpdateValuesResponse]:
    return await client.write_tabs(spreadsheet_id, assets)

@default_client
async def read_sheet(client: GoogleSheetsClient, spreadsheet_id: str, tab: str|None = None,
                     format: str = "json") -> list[dict]|str|list[list]:
    return await client.read_sheet(spreadsheet_id, tab, format)

@default_client
async def update_sheet(client: GoogleSheetsClient, spreadsheet_id: str, new_data: Any,
                       tab: str|None = None) -> UpdateValuesResponse:
    return await client.update_sheet(spreadsheet_id, new_data, tab)

@default_client
async def append_sheet(client: GoogleSheetsClient, spreadsheet_id: str, rows: Any,
                       tab: str|None = None) -> AppendValuesResponse|UpdateValuesResponse:
    return await client.append_sheet(spreadsheet_id, rows, tab)

@default_client
async def clear_sheet(client: GoogleSheetsClient, spreadsheet_id: str,
                      tab: str|None = None) -> ClearValuesResponse:
    return await client.clear_sheet(spreadsheet_id, tab)

@default_client
async def get_range(client: GoogleSheetsClient, spreadsheet_id: str, range: str,
                    tab: str|None = None, format: str = "json") -> list[dict]|str|list[list]:
    return await client.get_range(spreadsheet_id, range, tab, format)

@default_client
async def write_range(client: GoogleSheetsClient, spreadsheet_id: str, range: str, data: Any,
                      tab: str|None = None) -> UpdateValuesResponse:
    return await client.write_range(spreadsheet_id, range, data, tab)

@default_client
async def share_sheet(client: GoogleSheetsClient, spreadsheet_id: str,
                      email: str|None = None, role: str = "writer", type: str = "user",
                      domain: str|None = None) -> dict:
    return await client.share_sheet(spreadsheet_id, email, role, type, domain)

@default_client
async def delete_spreadsheet(client: GoogleSheetsClient, spreadsheet_id: str) -> None:
    await client.delete_spreadsheet(spreadsheet_id)

@default_client
async def list_owned_spreadsheets(client: GoogleSheetsClient) -> list[SpreadsheetFile]:
    return await client.list_owned_spreadsheets()

@default_client
async def delete_all_spreadsheets(client: GoogleSheetsClient) -> list[SpreadsheetFile]:
    return await client.delete_all_spreadsheets()

@default_client
async def get_info(client: GoogleSheetsClient, spreadsheet_id: str) -> Spreadsheet:
    return await client.get_info(spreadsheet_id)

@default_client
async def add_tab(client: GoogleSheetsClient, spreadsheet_id: str, title: str,
                  index: int|None = None, hidden: bool = False,
                  tab_color: str|None = None) -> int:
    return await client.add_tab(spreadsheet_id, title, index, hidden, tab_color)

@default_client
async def delete_tab(client: GoogleSheetsClient, spreadsheet_id: str, title: str) -> None:
    await client.delete_tab(spreadsheet_id, title)

@default_client
async def rename_tab(client: GoogleSheetsClient, spreadsheet_id: str,
                     old_title: str, new_title: str) -> None:
    await client.rename_tab(spreadsheet_id, old_title, new_title)

@default_client
async def duplicate_tab(client: GoogleSheetsClient, spreadsheet_id: str, source_title: str,
                        new_title: str|None = None) -> TabDescriptor:
    return await client.duplicate_tab(spreadsheet_id, source_title, new_title)

@default_client
async def list_tabs(client: GoogleSheetsClient, spreadsheet_id: str) -> list[TabDescriptor]:
    return await client.list_tabs(spreadsheet_id)
