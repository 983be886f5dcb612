"""
GoogleSheetsClient, the one object most callers need.

It takes data in any of the three shapes convert.py knows, turns it into
rows for the wire, and goes through sheets.ops/drive for the remote calls
so everything is retried the same way.  Nothing is cached: each call that
needs to know which tabs exist asks again.

A write, update or append against a spreadsheet that no longer exists
makes a new spreadsheet and does the write there instead.  That happens
at most once per call, a second not-found is raised.
"""
from collections.abc import Mapping
from typing import Any, Self
import asyncio
import logging
import random
import string
import time

from googleapiclient.errors import HttpError

from . import drive
from .access import GWSAccess
from .config import SheetsConfig
from .convert import OUTPUT_FORMATS, Records, records_to_grid, render, to_data, to_grid
from .errors import BulkDeleteError, TabExistsError, TabNotFoundError, is_not_found
from .merge import merge, project_records
from .retry import RetryPolicy
from .sheets import GoogleSheetsUsableColumns
from .sheets import ops
from .sheets.a1 import extract_cells, split_range, tab_range
from .sheets.requests import (AddSheetRequest, DeleteSheetRequest, DuplicateSheetRequest,
                              UpdateSheetPropertiesRequest, make_request)
from .sheets.resources import (AppendValuesResponse, ClearValuesResponse, Color, SheetProperties,
                               Spreadsheet, TabDescriptor, UpdateValuesResponse)

logger = logging.getLogger(__name__)

SPREADSHEET_URL = "https://docs.google.com/spreadsheets/d/{id}"

_NAME_CHARS = string.digits + string.ascii_lowercase

def build_url(spreadsheet_id: str) -> str:
    return SPREADSHEET_URL.format(id=spreadsheet_id)

def default_name() -> str:
    """sheet-<epoch ms>-<5 random base36 chars>"""
    return f"sheet-{int(time.time() * 1000)}-{''.join(random.choices(_NAME_CHARS, k=5))}"

class GoogleSheetsClient():
    """
    Spreadsheet level operations for one set of credentials.
    Several clients with different configs can live side by side, and
    with_retry() hands back a copy that retries differently.
    """
    def __init__(self, access: GWSAccess, policy: RetryPolicy|None = None) -> None:
        self._access = access
        self._policy = policy

    def __str__(self) -> str:
        return f"{self.__class__.__name__}<{self._access}>"

    def __repr__(self) -> str:
        return f"{self.__class__}:{str(self)}"

    @classmethod
    def from_config(cls, config: SheetsConfig) -> Self:
        return cls(GWSAccess(config))

    @property
    def access(self) -> GWSAccess:
        return self._access

    @property
    def config(self) -> SheetsConfig:
        return self._access.config

    @property
    def policy(self) -> RetryPolicy:
        return self._policy or self._access.config.retry_policy

    def with_retry(self, max_retries: int|None = None, max_backoff_ms: int|None = None) -> Self:
        """Same access, different retry policy"""
        return self.__class__(self._access, self.policy.override(max_retries, max_backoff_ms))

    # spreadsheets as files

    async def list_owned_spreadsheets(self) -> list[drive.SpreadsheetFile]:
        """Every spreadsheet the credentials own, all pages of them"""
        files = await drive.listFiles(self._access, policy=self.policy)
        logger.debug("Listed owned spreadsheets", extra={"count": len(files)})
        return files

    async def create_spreadsheet(self, name: str|None = None,
                                 tabs: list[str]|None = None) -> str:
        """
        Create a spreadsheet and return its ID.  Names are unique per owner
        here, if one with this name already exists its ID is returned and
        nothing is created.  With tabs, those are the only tabs it ends up
        with.  In dev it gets shared with the default collaborator.
        """
        name = name or default_name()
        tabs = list(dict.fromkeys(tabs or []))
        logger.debug("Creating spreadsheet", extra={"spreadsheet_name": name, "tabs": tabs})

        for f in await self.list_owned_spreadsheets():
            if f.name == name:
                logger.info("Found existing spreadsheet", extra={"spreadsheet_id": f.id, "spreadsheet_name": name})
                return f.id

        created = await ops.create(self._access, {"properties": {"title": name}}, self.policy)
        spreadsheet_id = created.spreadsheetId
        logger.info("Spreadsheet created", extra={"spreadsheet_id": spreadsheet_id, "spreadsheet_name": name})

        if tabs:
            default = created.sheets[0].properties if created.sheets else SheetProperties()
            missing = [t for t in tabs if t != default.title]
            if missing:
                request = make_request(*[AddSheetRequest(SheetProperties(title=t)) for t in missing])
                await ops.batchUpdate(self._access, spreadsheet_id, request, self.policy)
            # the default tab can only go once there is another one
            if default.title not in tabs:
                default_id = default.sheetId if default.sheetId is not None else 0
                await ops.batchUpdate(self._access, spreadsheet_id,
                                      make_request(DeleteSheetRequest(default_id)), self.policy)
            logger.debug("Tabs set up", extra={"tab_count": len(tabs), "kept_default": default.title in tabs})

        if self.config.is_dev:
            if self.config.default_collaborator:
                await self.share_sheet(spreadsheet_id)
            else:
                logger.debug("No default collaborator configured, not sharing",
                             extra={"spreadsheet_id": spreadsheet_id})
        return spreadsheet_id

    async def share_sheet(self, spreadsheet_id: str,
                          email: str|None = None,
                          role: str = "writer",
                          type: str = "user",
                          domain: str|None = None) -> dict:
        """
        Grant access to a spreadsheet.  email defaults to the configured
        default collaborator.  role is reader, commenter, writer or owner and
        type is user, group, domain or anyone.
        """
        if email is None and str(type).lower() in ("user", "group"):
            email = self.config.default_collaborator
        body = drive.GoogleDrivePermission.body(role, type, email, domain)
        logger.debug("Sharing spreadsheet", extra={"spreadsheet_id": spreadsheet_id, **body})
        result = await drive.createPermission(self._access, spreadsheet_id, body, self.policy)
        logger.info("Spreadsheet shared", extra={"spreadsheet_id": spreadsheet_id, "role": body["role"],
                                                 "email": email or ""})
        return result

    async def delete_spreadsheet(self, spreadsheet_id: str) -> None:
        await drive.deleteFile(self._access, spreadsheet_id, self.policy)
        logger.info("Spreadsheet deleted", extra={"spreadsheet_id": spreadsheet_id})

    async def delete_all_spreadsheets(self) -> list[drive.SpreadsheetFile]:
        """
        Delete every owned spreadsheet, all at once.  Every deletion runs to
        the end even if some fail, then BulkDeleteError reports the failures
        along with what did get deleted.
        """
        logger.warning("Deleting all owned spreadsheets")
        files = await self.list_owned_spreadsheets()
        results = await asyncio.gather(*[self.delete_spreadsheet(f.id) for f in files],
                                       return_exceptions=True)
        deleted = []
        failures = []
        for f, r in zip(files, results):
            if isinstance(r, BaseException):
                failures.append((f, r))
            else:
                deleted.append(f)
        if failures:
            logger.error("Failed to delete all spreadsheets",
                         extra={"deleted_count": len(deleted), "failed_count": len(failures)})
            raise BulkDeleteError(deleted, failures)
        logger.info("All spreadsheets deleted", extra={"deleted_count": len(deleted)})
        return deleted

    async def get_info(self, spreadsheet_id: str) -> Spreadsheet:
        """Spreadsheet and tab properties, no cell data"""
        info = await ops.get(self._access, spreadsheet_id, policy=self.policy)
        logger.debug("Spreadsheet info retrieved",
                     extra={"spreadsheet_id": spreadsheet_id, "title": info.properties.title,
                            "sheet_count": len(info.sheets)})
        return info

    # whole tab values

    async def _recreate(self, spreadsheet_id: str, tabs: list[str]) -> str:
        logger.warning("Spreadsheet not found, creating new one",
                       extra={"spreadsheet_id": spreadsheet_id, "tabs": tabs})
        return await self.create_spreadsheet(tabs=tabs)

    async def _add_missing_tabs(self, spreadsheet_id: str, tabs: list[str]) -> None:
        info = await self.get_info(spreadsheet_id)
        missing = [t for t in dict.fromkeys(tabs) if t not in info]
        if missing:
            logger.debug("Creating missing tabs", extra={"spreadsheet_id": spreadsheet_id, "tabs": missing})
            request = make_request(*[AddSheetRequest(SheetProperties(title=t)) for t in missing])
            await ops.batchUpdate(self._access, spreadsheet_id, request, self.policy)

    async def _write(self, spreadsheet_id: str, data: Any, tab: str|None) -> UpdateValuesResponse:
        values = to_grid(data)
        if tab:
            await self._add_missing_tabs(spreadsheet_id, [tab])
        response = await ops.updateValues(self._access, spreadsheet_id, tab_range(tab, "A1"),
                                          values, "USER_ENTERED", self.policy)
        logger.info("Cells updated", extra={"spreadsheet_id": response.spreadsheetId or spreadsheet_id,
                                            "tab": tab or "", "updated_cells": response.updatedCells})
        return response

    async def write_sheet(self, spreadsheet_id: str, data: Any = "",
                          tab: str|None = None) -> UpdateValuesResponse:
        """
        Overwrite a tab from A1 with data, creating the tab if needed.
        Without a tab it goes to the first tab.  Values are taken as if typed
        in, so numeric looking text becomes a number.
        If the spreadsheet is gone a new one is made and written instead, the
        response's spreadsheetId says which one got the data.
        """
        logger.debug("Writing to sheet", extra={"spreadsheet_id": spreadsheet_id, "tab": tab or ""})
        try:
            return await self._write(spreadsheet_id, data, tab)
        except HttpError as e:
            if not is_not_found(e):
                raise
        new_id = await self._recreate(spreadsheet_id, [tab] if tab else [])
        return await self._write(new_id, data, tab)

    async def _write_tabs(self, spreadsheet_id: str, assets: Mapping[str, Any]) -> list[UpdateValuesResponse]:
        await self._add_missing_tabs(spreadsheet_id, list(assets))
        results = []
        for tab, data in assets.items():
            response = await ops.updateValues(self._access, spreadsheet_id, tab_range(tab, "A1"),
                                              to_grid(data), "USER_ENTERED", self.policy)
            logger.debug("Tab updated", extra={"tab": tab, "updated_cells": response.updatedCells})
            results.append(response)
        return results

    async def write_tabs(self, spreadsheet_id: str,
                         assets: Mapping[str, Any]) -> list[UpdateValuesResponse]:
        """
        Write several tabs in one go, {tab title: data}.  Missing tabs are
        created first, then each is written in mapping order.
        """
        logger.debug("Writing to multiple tabs",
                     extra={"spreadsheet_id": spreadsheet_id, "tab_count": len(assets)})
        try:
            results = await self._write_tabs(spreadsheet_id, assets)
        except HttpError as e:
            if not is_not_found(e):
                raise
            spreadsheet_id = await self._recreate(spreadsheet_id, list(assets))
            results = await self._write_tabs(spreadsheet_id, assets)
        logger.info("All tabs updated", extra={"spreadsheet_id": spreadsheet_id, "tab_count": len(results)})
        return results

    async def _values(self, spreadsheet_id: str, range: str) -> list[list]:
        vr = await ops.getValues(self._access, spreadsheet_id, range, policy=self.policy)
        logger.debug("Values retrieved", extra={"spreadsheet_id": spreadsheet_id, "range": range,
                                                "row_count": len(vr.values)})
        return vr.values

    async def read_sheet(self, spreadsheet_id: str, tab: str|None = None,
                         format: str = "json") -> list[dict]|str|list[list]:
        """
        Everything in a tab (the first one without a tab), as records (json),
        CSV text (csv) or the raw rows (array).
        """
        _check_format(format)
        values = await self._values(spreadsheet_id, tab_range(tab, GoogleSheetsUsableColumns))
        return render(values, format)

    async def update_sheet(self, spreadsheet_id: str, new_data: Any,
                           tab: str|None = None) -> UpdateValuesResponse:
        """
        Merge new_data over what is in the tab and write it back, see merge.merge().
        A tab with nothing in it yet just gets new_data written.
        If the spreadsheet is gone a new one is made with the tab and new_data
        is written there.
        """
        logger.debug("Updating sheet", extra={"spreadsheet_id": spreadsheet_id, "tab": tab or ""})
        try:
            existing = await self._values(spreadsheet_id, tab_range(tab, GoogleSheetsUsableColumns))
            values = merge(existing, new_data) if existing else to_grid(new_data)
            response = await ops.updateValues(self._access, spreadsheet_id, tab_range(tab, "A1"),
                                              values, "USER_ENTERED", self.policy)
        except HttpError as e:
            if not is_not_found(e):
                raise
            new_id = await self._recreate(spreadsheet_id, [tab] if tab else [])
            return await self._write(new_id, new_data, tab)
        logger.info("Sheet updated", extra={"spreadsheet_id": spreadsheet_id, "tab": tab or "",
                                            "updated_cells": response.updatedCells})
        return response

    async def append_sheet(self, spreadsheet_id: str, rows: Any,
                           tab: str|None = None) -> AppendValuesResponse|UpdateValuesResponse:
        """
        Add rows after the last row of a tab, pushing anything below down.
        Records are laid out along the tab's existing header, keys it doesn't
        have are dropped.  A tab with no header yet gets the records' own.
        If the spreadsheet is gone a new one is made and the rows written
        there, which gives back an update rather than an append response.
        """
        logger.debug("Appending to sheet", extra={"spreadsheet_id": spreadsheet_id, "tab": tab or ""})
        try:
            existing = await self._values(spreadsheet_id, tab_range(tab, GoogleSheetsUsableColumns))
            data = to_data(rows)
            if isinstance(data, Records):
                values = project_records(data.rows, existing[0]) if existing else records_to_grid(data.rows)
            else:
                values = to_grid(data)
            start = tab_range(tab, f"A{len(existing) + 1}")
            response = await ops.appendValues(self._access, spreadsheet_id, start, values,
                                              "USER_ENTERED", "INSERT_ROWS", self.policy)
        except HttpError as e:
            if not is_not_found(e):
                raise
            new_id = await self._recreate(spreadsheet_id, [tab] if tab else [])
            return await self._write(new_id, rows, tab)
        logger.info("Data appended", extra={"spreadsheet_id": spreadsheet_id, "tab": tab or "",
                                            "updated_cells": response.updatedCells})
        return response

    async def clear_sheet(self, spreadsheet_id: str, tab: str|None = None) -> ClearValuesResponse:
        """Clear values, not formatting, from A:ZZ of a tab or the first tab"""
        range = tab_range(tab, GoogleSheetsUsableColumns)
        response = await ops.clearValues(self._access, spreadsheet_id, range, self.policy)
        if not response:
            response = ClearValuesResponse(spreadsheetId=spreadsheet_id, clearedRange=range)
        logger.info("Sheet cleared", extra={"spreadsheet_id": spreadsheet_id, "tab": tab or ""})
        return response

    # ranges

    async def get_range(self, spreadsheet_id: str, range: str, tab: str|None = None,
                        format: str = "json") -> list[dict]|str|list[list]:
        """
        Values in range, e.g. 'A1:C10', optionally within tab.  The first row
        of the range is the header for the json and csv formats.
        """
        _check_format(format)
        values = await self._values(spreadsheet_id, _scoped_range(range, tab))
        return render(values, format)

    async def write_range(self, spreadsheet_id: str, range: str, data: Any,
                          tab: str|None = None) -> UpdateValuesResponse:
        """
        Write data into range.  A plain string without commas or newlines is
        one cell's value, not CSV.
        """
        if isinstance(data, str) and "," not in data and "\n" not in data:
            values = [[data]]
        else:
            values = to_grid(data)
        full_range = _scoped_range(range, tab)
        response = await ops.updateValues(self._access, spreadsheet_id, full_range,
                                          values, "USER_ENTERED", self.policy)
        logger.info("Range updated", extra={"spreadsheet_id": spreadsheet_id, "range": full_range,
                                            "updated_cells": response.updatedCells})
        return response

    # tabs

    async def list_tabs(self, spreadsheet_id: str) -> list[TabDescriptor]:
        tabs = (await self.get_info(spreadsheet_id)).tabs
        logger.debug("Tabs listed", extra={"spreadsheet_id": spreadsheet_id, "tab_count": len(tabs)})
        return tabs

    async def add_tab(self, spreadsheet_id: str, title: str,
                      index: int|None = None,
                      hidden: bool = False,
                      tab_color: str|None = None) -> int:
        """
        Add a tab and return its sheet ID.  tab_color is '#RRGGBB'.
        Raises TabExistsError if there already is one with this title.
        """
        color = Color.from_hex(tab_color) if tab_color else {}
        info = await self.get_info(spreadsheet_id)
        if title in info:
            logger.warning("Tab already exists", extra={"spreadsheet_id": spreadsheet_id, "tab": title})
            raise TabExistsError(f"Tab '{title}' already exists in spreadsheet", spreadsheet_id, title)
        props = SheetProperties(title=title, index=index, hidden=hidden, tabColor=color)
        response = await ops.batchUpdate(self._access, spreadsheet_id,
                                         make_request(AddSheetRequest(props)), self.policy)
        sheet_id = response.reply_properties("addSheet").sheetId
        logger.info("Tab added", extra={"spreadsheet_id": spreadsheet_id, "tab": title, "sheet_id": sheet_id})
        return sheet_id

    async def _existing_tab(self, spreadsheet_id: str, title: str) -> tuple[Spreadsheet, SheetProperties]:
        info = await self.get_info(spreadsheet_id)
        props = info.find(title)
        if props is None:
            raise TabNotFoundError(f"Tab '{title}' not found in spreadsheet", spreadsheet_id, title)
        return info, props

    async def delete_tab(self, spreadsheet_id: str, title: str) -> None:
        _, props = await self._existing_tab(spreadsheet_id, title)
        await ops.batchUpdate(self._access, spreadsheet_id,
                              make_request(DeleteSheetRequest(props.sheetId)), self.policy)
        logger.info("Tab deleted", extra={"spreadsheet_id": spreadsheet_id, "tab": title,
                                          "sheet_id": props.sheetId})

    async def rename_tab(self, spreadsheet_id: str, old_title: str, new_title: str) -> None:
        info, props = await self._existing_tab(spreadsheet_id, old_title)
        if new_title in info:
            raise TabExistsError(f"Tab '{new_title}' already exists in spreadsheet", spreadsheet_id, new_title)
        request = UpdateSheetPropertiesRequest(SheetProperties(sheetId=props.sheetId, title=new_title), "title")
        await ops.batchUpdate(self._access, spreadsheet_id, make_request(request), self.policy)
        logger.info("Tab renamed", extra={"spreadsheet_id": spreadsheet_id, "old_title": old_title,
                                          "new_title": new_title, "sheet_id": props.sheetId})

    async def duplicate_tab(self, spreadsheet_id: str, source_title: str,
                            new_title: str|None = None) -> TabDescriptor:
        """
        Copy a tab, values and formatting.  The copy is called 'Copy of <source>'
        unless new_title says otherwise.
        """
        info, props = await self._existing_tab(spreadsheet_id, source_title)
        title = new_title or f"Copy of {source_title}"
        if title in info:
            raise TabExistsError(f"Tab '{title}' already exists in spreadsheet", spreadsheet_id, title)
        response = await ops.batchUpdate(self._access, spreadsheet_id,
                                         make_request(DuplicateSheetRequest(props.sheetId, title)),
                                         self.policy)
        copy = response.reply_properties("duplicateSheet")
        logger.info("Tab duplicated", extra={"spreadsheet_id": spreadsheet_id, "tab": source_title,
                                             "new_title": title, "sheet_id": copy.sheetId})
        return TabDescriptor.from_properties(copy)

def _check_format(format: str) -> None:
    if str(format).lower() not in OUTPUT_FORMATS:
        raise ValueError(f"Invalid format: {format}, must be one of {', '.join(OUTPUT_FORMATS)}")

def _scoped_range(range: str, tab: str|None) -> str:
    """
    range scoped to tab, where range may already name its own tab, e.g.
    'Users!A1:C10'.  The cells are parsed here so a malformed range fails
    before anything goes out.
    """
    title, cells = split_range(range)
    extract_cells(cells)
    if title and tab and title != tab:
        raise ValueError(f"Range {range} names tab '{title}' but tab '{tab}' was given")
    return tab_range(tab or title, cells)
