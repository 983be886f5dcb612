"""
Async wrappers for the spreadsheets() resource of the Sheets v4 API.

Every call goes the same way: build the request from the service, run
its blocking execute() on a worker thread with a transport of its own,
and let the retry executor deal with quota and server errors.  The
wrappers translate the raw dicts to and from the resource dataclasses.
"""
import asyncio
from dataclasses import asdict, is_dataclass
from typing import Any, Callable

from ..access import GWSAccess
from ..retry import RetryPolicy, execute
from .resources import *
from .requests import GoogleSheetsUpdateRequest, GoogleSheetsUpdateRequestResponse

async def run(access: GWSAccess, build_request: Callable[[], Any],
              policy: RetryPolicy|None = None,
              description: str = "API call") -> dict:
    """
    Execute the request built by build_request() through the retry executor.
    The request is rebuilt for each attempt, an HttpRequest is not meant to
    be executed twice.
    """
    async def attempt():
        request = build_request()
        return await asyncio.to_thread(request.execute, http=access.new_http())
    response = await execute(attempt, policy or access.config.retry_policy, description)
    return response or {}

async def get(access: GWSAccess, spreadsheetId: str,
              fields: str = "properties,sheets.properties",
              policy: RetryPolicy|None = None) -> Spreadsheet:
    """
    Wrapper for calling the get() spreadsheet method.
    See https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/get
    By default only the spreadsheet and tab properties are pulled, no cell data.
    """
    sheets = access.sheets
    response = await run(access,
                         lambda: sheets.spreadsheets().get(spreadsheetId=spreadsheetId, fields=fields),
                         policy, "spreadsheets.get")
    return Spreadsheet.from_response(response)

async def create(access: GWSAccess, spreadsheet: Spreadsheet|dict,
                 policy: RetryPolicy|None = None) -> Spreadsheet:
    """
    Wrapper for calling the create() spreadsheet method.
    See https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/create
    This is for creating a whole new spreadsheet, not a tab within one.
    """
    body = spreadsheet.to_base() if isinstance(spreadsheet, Spreadsheet) else asdict(spreadsheet) if is_dataclass(spreadsheet) else spreadsheet
    sheets = access.sheets
    response = await run(access, lambda: sheets.spreadsheets().create(body=body),
                         policy, "spreadsheets.create")
    return Spreadsheet.from_response(response)

async def batchUpdate(access: GWSAccess, spreadsheetId: str,
                      request: GoogleSheetsUpdateRequest|dict,
                      policy: RetryPolicy|None = None) -> GoogleSheetsUpdateRequestResponse:
    """
    Wrapper for calling the batchUpdate() spreadsheet method.
    See https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/batchUpdate
    This is for structural changes (tabs and their properties), not cell
    values which are done from the values() resource.
    """
    body = request.to_base() if isinstance(request, GoogleSheetsUpdateRequest) else request
    sheets = access.sheets
    response = await run(access,
                         lambda: sheets.spreadsheets().batchUpdate(spreadsheetId=spreadsheetId, body=body),
                         policy, "spreadsheets.batchUpdate")
    return GoogleSheetsUpdateRequestResponse.from_response(response)

async def getValues(access: GWSAccess, spreadsheetId: str, range: str,
                    dimension: str = "ROWS",
                    policy: RetryPolicy|None = None) -> ValueRange:
    """
    Wrapper for calling the get() method on the values resource.
    See https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values/get
    Empty trailing rows and cells are not returned, so asking for A:ZZ of a
    tab with 3 rows of data gives back 3 rows.
    """
    dim = GoogleSheetsEnum.dimension(dimension)
    if not dim:
        raise ValueError(f"Invalid majorDimension value: {dimension}")
    values = access.sheets.spreadsheets().values
    response = await run(access,
                         lambda: values().get(spreadsheetId=spreadsheetId, range=str(range), majorDimension=dim),
                         policy, "values.get")
    return ValueRange.from_response(response)

async def updateValues(access: GWSAccess, spreadsheetId: str, range: str,
                       values: list[list],
                       valueInputOption: str = "USER",
                       policy: RetryPolicy|None = None) -> UpdateValuesResponse:
    """
    Wrapper for calling the update() method on the values resource.
    See https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values/update
    Overwrites starting at the top left of range.
    """
    value_input = GoogleSheetsEnum.valueInputOption(valueInputOption)
    if not value_input:
        raise ValueError(f"Invalid valueInputOption value: {valueInputOption}")
    body = {"values": values}
    resource = access.sheets.spreadsheets().values
    response = await run(access,
                         lambda: resource().update(spreadsheetId=spreadsheetId, range=str(range),
                                                   valueInputOption=value_input, body=body),
                         policy, "values.update")
    return UpdateValuesResponse.from_response(response)

async def appendValues(access: GWSAccess, spreadsheetId: str, range: str,
                       values: list[list],
                       valueInputOption: str = "USER",
                       insertDataOption: str = "INSERT_ROWS",
                       policy: RetryPolicy|None = None) -> AppendValuesResponse:
    """
    Wrapper for calling the append() method on the values resource.
    See https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values/append
    With INSERT_ROWS existing rows below are pushed down, not overwritten.
    """
    value_input = GoogleSheetsEnum.valueInputOption(valueInputOption)
    if not value_input:
        raise ValueError(f"Invalid valueInputOption value: {valueInputOption}")
    insert_data = GoogleSheetsEnum.insertDataOption(insertDataOption)
    if not insert_data:
        raise ValueError(f"Invalid insertDataOption value: {insertDataOption}")
    body = {"values": values}
    resource = access.sheets.spreadsheets().values
    response = await run(access,
                         lambda: resource().append(spreadsheetId=spreadsheetId, range=str(range),
                                                   valueInputOption=value_input,
                                                   insertDataOption=insert_data, body=body),
                         policy, "values.append")
    return AppendValuesResponse.from_response(response)

async def clearValues(access: GWSAccess, spreadsheetId: str, range: str,
                      policy: RetryPolicy|None = None) -> ClearValuesResponse:
    """
    Wrapper for calling the clear() method on the values resource.
    See https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values/clear
    Values only, formatting is left alone.
    """
    resource = access.sheets.spreadsheets().values
    response = await run(access,
                         lambda: resource().clear(spreadsheetId=spreadsheetId, range=str(range), body={}),
                         policy, "values.clear")
    return ClearValuesResponse.from_response(response)
