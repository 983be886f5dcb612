"""
Class implementations of the sheets resources we read and write.
As these are just logical groupings of data fields we use dataclasses
to implement.  The nested aspect does cause some headaches as there
is a handy dataclass.asdict() method to get a dict translation of the
class fields, which is exactly what the request client needs, but
there's no inverse support, as in initializing a dataclass from a dict.
So dataclasses with dataclasses as fields coerce them in fixup().
Only the resources this library touches are implemented.
"""
from dataclasses import dataclass, field, asdict
from typing import List
import re

from ..resources import GoogleWorkSpaceResourceBase

class GoogleSheetsEnum():
    """
    An 'enum' in the sheets client is just a string so this is
    just to translate and validate input.
    """
    _VALID_DIMENSION_OPTIONS = {
        "ROWS": "ROWS",
        "R": "ROWS",
        "C": "COLUMNS",
        "COLS": "COLUMNS",
        "COLUMNS": "COLUMNS"
    }
    _VALID_VALUE_INPUT_OPTIONS = {
        "RAW": "RAW",
        "USER": "USER_ENTERED",
        "USER_ENTERED": "USER_ENTERED"
    }
    _VALID_INSERT_DATA_OPTIONS = {
        "INSERT": "INSERT_ROWS",
        "INSERT_ROWS": "INSERT_ROWS",
        "OVERWRITE": "OVERWRITE"
    }

    @classmethod
    def dimension(cls, dim: str) -> str:
        """https://developers.google.com/sheets/api/reference/rest/v4/Dimension"""
        return cls._VALID_DIMENSION_OPTIONS.get(str(dim).upper(), "")

    @classmethod
    def valueInputOption(cls, option: str) -> str:
        """https://developers.google.com/sheets/api/reference/rest/v4/ValueInputOption"""
        return cls._VALID_VALUE_INPUT_OPTIONS.get(str(option).upper(), "")

    @classmethod
    def insertDataOption(cls, option: str) -> str:
        """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values/append#InsertDataOption"""
        return cls._VALID_INSERT_DATA_OPTIONS.get(str(option).upper(), "")

@dataclass
class Color(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/other#color
    Channels are 0-1 fractions.
    """
    red: int|float = field(default=0)
    green: int|float = field(default=0)
    blue: int|float = field(default=0)

    _HEX_RE = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        """
        '#RRGGBB' (or without the #) to a Color, each channel divided by 255.
        """
        m = cls._HEX_RE.match(str(value).strip())
        if not m:
            raise ValueError(f"Invalid tab color, expected #RRGGBB: {value}")
        return cls(*(int(c, 16) / 255 for c in m.groups()))

@dataclass
class SpreadsheetProperties(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets#SpreadsheetProperties
    """
    title: str = field(default="")
    locale: str = field(default="")
    autoRecalc: str = field(default="")
    timeZone: str = field(default="")
    defaultFormat: dict = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.title)

@dataclass
class GridProperties(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/sheets#gridproperties"""
    rowCount: int = field(default=-1)
    columnCount: int = field(default=-1)
    frozenRowCount: int = field(default=0)
    frozenColumnCount: int = field(default=0)

    def __bool__(self) -> bool:
        return self.rowCount >= 0 and self.columnCount >= 0

@dataclass
class SheetProperties(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/sheets#sheetproperties"""
    sheetId: int|None = field(default=None)
    title: str = field(default="")
    index: int|None = field(default=None)
    sheetType: str = field(default="")
    gridProperties: GridProperties|dict = field(default_factory=dict)
    hidden: bool = field(default=False)
    tabColor: Color|dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        if not isinstance(self.gridProperties, GridProperties):
            self.gridProperties = GridProperties.from_response(self.gridProperties)
        if self.tabColor and not isinstance(self.tabColor, Color):
            self.tabColor = Color.from_response(self.tabColor)

    def to_base(self) -> dict:
        self.fixup()
        b = asdict(self)
        b['gridProperties'] = self.gridProperties.to_base() if self.gridProperties else {}
        b['tabColor'] = self.tabColor.to_base() if isinstance(self.tabColor, Color) else {}
        return b

    def __bool__(self) -> bool:
        """
        True if it is valid, which is the ID and index are 0 or positive
        as negative index is not possible
        """
        return (self.sheetId is not None and self.sheetId >= 0 and
                self.index is not None and self.index >= 0 and bool(self.title))

    def __str__(self) -> str:
        if self:
            return f"{str(self.title)}({str(self.sheetId)}[{str(self.index)}])"
        return "<invalid sheet>"

@dataclass
class TabDescriptor(GoogleWorkSpaceResourceBase):
    """
    The slice of sheet metadata callers care about when managing tabs.
    Always fetched fresh, never cached.
    """
    id: int
    title: str
    index: int
    hidden: bool = field(default=False)

    @classmethod
    def from_properties(cls, props: SheetProperties) -> "TabDescriptor":
        return cls(id=props.sheetId, title=props.title,
                   index=props.index, hidden=bool(props.hidden))

@dataclass
class Sheet(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/sheets#sheet
    Representation of a sheet (tab) within a spreadsheet
    """
    properties: SheetProperties|dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        if not isinstance(self.properties, SheetProperties):
            self.properties = SheetProperties.from_response(self.properties)

    def to_base(self) -> dict:
        self.fixup()
        return {'properties': self.properties.to_base()}

    def __bool__(self) -> bool:
        return bool(self.properties)

    def __str__(self) -> str:
        return str(self.properties)

@dataclass
class Spreadsheet(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets#resource:-spreadsheet
    The representation of a spreadsheet.
    """
    spreadsheetId: str = field(default="")
    properties: SpreadsheetProperties|dict = field(default_factory=dict)
    sheets: List[Sheet|dict] = field(default_factory=list)
    spreadsheetUrl: str = field(default="")

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        if not isinstance(self.properties, SpreadsheetProperties):
            self.properties = SpreadsheetProperties.from_response(self.properties)
        self.sheets = [s if isinstance(s, Sheet) else Sheet.from_response(s) for s in self.sheets]

    def to_base(self) -> dict:
        self.fixup()
        b = asdict(self)
        b['properties'] = self.properties.to_base()
        b['sheets'] = [s.to_base() for s in self.sheets]
        return b

    def __bool__(self) -> bool:
        return bool(self.spreadsheetId)

    def __contains__(self, val: str|int) -> bool:
        """
        Is the tab in this spreadsheet?
        val can be either a string (title) or int (sheet ID)
        """
        return self.find(val) is not None

    def find(self, val: str|int) -> SheetProperties|None:
        """Properties of the tab with this title (str) or sheet ID (int)"""
        for s in self.sheets:
            if isinstance(val, int) and not isinstance(val, bool):
                if s.properties.sheetId == val:
                    return s.properties
            elif s.properties.title == val:
                return s.properties
        return None

    @property
    def titles(self) -> list[str]:
        return [s.properties.title for s in self.sheets]

    @property
    def tabs(self) -> list[TabDescriptor]:
        return [TabDescriptor.from_properties(s.properties) for s in self.sheets]

    def __str__(self) -> str:
        val = 'unconnected'
        if self.spreadsheetId:
            val = f"{self.properties.title}[{','.join(str(s) for s in self.sheets)}]"
        return val

@dataclass
class ValueRange(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values#resource:-valuerange"""
    range: str = field(default="")
    majorDimension: str = field(default="")
    values: list[list] = field(default_factory=list)

    def __post_init__(self):
        self.fixup()

    def fixup(self) -> None:
        if self.majorDimension:
            self.majorDimension = GoogleSheetsEnum.dimension(str(self.majorDimension))

    def __bool__(self) -> bool:
        """
        A ValueRange is valid if the range string is not empty
        and the majorDimension has a valid value.
        """
        return bool(self.range) and bool(self.majorDimension)

@dataclass
class UpdateValuesResponse(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/UpdateValuesResponse
    """
    spreadsheetId: str = field(default="")
    updatedRange: str = field(default="")
    updatedRows: int = field(default=0)
    updatedColumns: int = field(default=0)
    updatedCells: int = field(default=0)

    def __bool__(self) -> bool:
        return bool(self.spreadsheetId) and bool(self.updatedRange)

@dataclass
class AppendValuesResponse(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values/append#response-body
    The counts are lifted out of updates so append and update responses
    read the same.
    """
    spreadsheetId: str = field(default="")
    tableRange: str = field(default="")
    updates: UpdateValuesResponse|dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        if not isinstance(self.updates, UpdateValuesResponse):
            self.updates = UpdateValuesResponse.from_response(self.updates)

    def to_base(self) -> dict:
        self.fixup()
        b = asdict(self)
        b['updates'] = self.updates.to_base()
        return b

    @property
    def updatedCells(self) -> int:
        return self.updates.updatedCells

    @property
    def updatedRange(self) -> str:
        return self.updates.updatedRange

    def __bool__(self) -> bool:
        return bool(self.spreadsheetId)

@dataclass
class ClearValuesResponse(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values/clear#response-body
    """
    spreadsheetId: str = field(default="")
    clearedRange: str = field(default="")

    def __bool__(self) -> bool:
        return bool(self.clearedRange)
