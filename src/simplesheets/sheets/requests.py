from dataclasses import asdict, dataclass, field
from typing import List
import re

from ..resources import GoogleWorkSpaceResourceBase
from .resources import SheetProperties, Spreadsheet

class GoogleSheetsUpdateRequestBase(GoogleWorkSpaceResourceBase):
    """
    Base class for sheet batchUpdate requests to get the actual
    request dict into the right format.
    """
    def to_request(self) -> dict[str,dict]:
        name = self.__class__.__name__
        # need to strip off the trailing 'Request' class name and
        # set the first letter to lower case.  could be done
        # several ways but lets go re
        request = {}
        m = re.match("^([a-zA-Z])([a-zA-Z]+)Request$", name)
        if m:
            key = m.group(1).lower() + m.group(2)
            request[key] = self.to_base()
        else:
            raise RuntimeError("Invalid Google Sheets request format for class name")

        return request

# the request key is pulled out of the class name so these need to be named
# exactly as the API names them, plus 'Request'

@dataclass
class AddSheetRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#addsheetrequest
    Only the set properties go out, the API fills in the rest.
    """
    properties: SheetProperties|dict = field(default_factory=dict)

    def fixup(self) -> None:
        if not isinstance(self.properties, SheetProperties):
            self.properties = SheetProperties(**dict(self.properties))

    def to_base(self) -> dict:
        self.fixup()
        return {'properties': self.properties.trim()}

@dataclass
class DeleteSheetRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#deletesheetrequest
    """
    sheetId: int

@dataclass
class UpdateSheetPropertiesRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#updatesheetpropertiesrequest
    fields is the mask of which properties to change, e.g. 'title'
    """
    properties: SheetProperties|dict
    fields: str

    def fixup(self) -> None:
        if not isinstance(self.properties, SheetProperties):
            self.properties = SheetProperties(**dict(self.properties))

    def to_base(self) -> dict:
        self.fixup()
        return {'properties': self.properties.trim(), 'fields': self.fields}

@dataclass
class DuplicateSheetRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#duplicatesheetrequest
    """
    sourceSheetId: int
    newSheetName: str
    insertSheetIndex: int|None = field(default=None)

    def to_base(self) -> dict:
        b = asdict(self)
        if self.insertSheetIndex is None:
            del b['insertSheetIndex']
        return b

@dataclass
class GoogleSheetsUpdateRequest(GoogleWorkSpaceResourceBase):
    """
    Generate a GSheet Batch Update request body.
    Most likely you'd use make_request() directly to generate
    the request dict JIT
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/batchUpdate#request-body
    """
    requests: List[GoogleSheetsUpdateRequestBase|dict]
    includeSpreadsheetInResponse: bool = field(default=False)

    def to_base(self) -> dict:
        return {'requests': [r.to_request() if isinstance(r, GoogleSheetsUpdateRequestBase) else r
                             for r in self.requests],
                'includeSpreadsheetInResponse': self.includeSpreadsheetInResponse}

def make_request(*requests: GoogleSheetsUpdateRequestBase|dict,
                 includeSpreadsheetInResponse: bool = False) -> dict:
    """
    Convenience function to assemble the request body with the usual parameters.
    """
    return GoogleSheetsUpdateRequest(list(requests), includeSpreadsheetInResponse).to_base()

@dataclass
class GoogleSheetsUpdateRequestResponse(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/batchUpdate#response-body
    """
    spreadsheetId: str = field(default="")
    replies: List[dict] = field(default_factory=list)
    updatedSpreadsheet: Spreadsheet|dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.fixup()

    def __bool__(self) -> bool:
        return bool(self.spreadsheetId)

    def fixup(self) -> None:
        if not isinstance(self.updatedSpreadsheet, Spreadsheet):
            self.updatedSpreadsheet = Spreadsheet.from_response(self.updatedSpreadsheet)

    def reply_properties(self, kind: str, index: int = 0) -> SheetProperties:
        """
        Sheet properties out of the reply to the request at index, e.g.
        reply_properties('addSheet') for the new sheet.  Empty if the
        reply isn't there.
        """
        reply = self.replies[index] if index < len(self.replies) else {}
        return SheetProperties.from_response((reply or {}).get(kind, {}).get('properties', {}))
