"""
Conversion between the three shapes spreadsheet data comes in:

    Csv      comma separated text, first line is the header
    Grid     list of rows, first row is the header
    Records  list of dicts, keys are column names

The wire shape is always a grid.  to_data() is the one place loose input
(a str, a list of lists, a list of dicts) gets sorted into one of the
three, everything else works off the tagged value.

Records don't have to agree on their keys.  The header is the union of
every key seen, in the order first seen, and a record missing a key gets
an empty cell.
"""
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Union
import csv
import io
import json
import logging

from openpyxl import load_workbook

from .errors import ConversionError

logger = logging.getLogger(__name__)

DEFAULT_CHAR_LIMIT = 50000

@dataclass(frozen=True)
class Csv():
    text: str = field(default="")

    def __bool__(self) -> bool:
        return bool(self.text.strip())

@dataclass(frozen=True)
class Grid():
    rows: list = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.rows)

@dataclass(frozen=True)
class Records():
    rows: list = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.rows)

SpreadsheetData = Union[Csv, Grid, Records]

@dataclass
class CsvParseResult():
    """Records parsed from CSV plus whatever went wrong along the way."""
    records: list[dict] = field(default_factory=list)
    fields: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

def to_data(value: Any) -> SpreadsheetData:
    """
    Sort loose input into Csv, Grid or Records.
    Already tagged values pass through.  None and an empty list are an
    empty Grid.  A list is Records if its first element is a mapping.
    """
    if isinstance(value, (Csv, Grid, Records)):
        return value
    if value is None:
        return Grid([])
    if isinstance(value, str):
        return Csv(value)
    if isinstance(value, Mapping):
        raise TypeError("A single mapping is not spreadsheet data, wrap it in a list")
    if isinstance(value, Iterable):
        rows = list(value)
        if not rows:
            return Grid([])
        if isinstance(rows[0], Mapping):
            return Records([dict(r) for r in rows])
        if all(isinstance(r, (list, tuple)) for r in rows):
            return Grid([list(r) for r in rows])
    raise TypeError(f"Unsupported spreadsheet data type: {type(value).__name__}")

def unique_keys(records: Iterable[Mapping]) -> list[str]:
    """Union of keys across records, in first-seen order"""
    keys = {}
    for r in records:
        for k in r.keys():
            keys.setdefault(k, None)
    return list(keys)

def cell_text(value: Any, char_limit: int = DEFAULT_CHAR_LIMIT) -> str:
    """
    Cell value as the text that goes out.  None is empty, containers become
    compact JSON with single quotes so the cell can sit inside double quotes,
    everything is trimmed and cut to char_limit.
    """
    if value is None:
        return ""
    if isinstance(value, (Mapping, list, tuple)):
        value = json.dumps(value, separators=(",", ":"), default=str).replace('"', "'")
    return str(value).strip()[:char_limit]

def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'

def _header_line(columns: list[str]) -> str:
    # header names only get quoted if they need it
    buf = io.StringIO()
    csv.writer(buf, lineterminator="").writerow(columns)
    return buf.getvalue()

def records_to_csv(records: Iterable[Mapping], char_limit: int = DEFAULT_CHAR_LIMIT) -> str:
    """
    Records to CSV text.  Every data cell is double quoted, with embedded
    quotes doubled, whether it needs it or not.  Each line ends in a newline.
    """
    records = list(records or [])
    logger.debug("Converting records to CSV", extra={"record_count": len(records), "char_limit": char_limit})
    if not records:
        return ""
    columns = unique_keys(records)
    lines = [_header_line(columns)]
    for r in records:
        lines.append(",".join(_quote(cell_text(r.get(c), char_limit)) for c in columns))
    text = "\n".join(lines) + "\n"
    logger.debug("CSV conversion completed", extra={"csv_length": len(text)})
    return text

def records_to_grid(records: Iterable[Mapping], char_limit: int = DEFAULT_CHAR_LIMIT) -> list[list[str]]:
    """
    Records to a grid, header row first.  Cells get the same treatment as
    records_to_csv() so writing either way lands the same values.
    """
    records = list(records or [])
    if not records:
        return []
    columns = unique_keys(records)
    grid = [list(columns)]
    for r in records:
        grid.append([cell_text(r.get(c), char_limit) for c in columns])
    return grid

def grid_to_records(grid: Iterable[Iterable]) -> list[dict]:
    """
    Grid to records keyed by the header row.  Short rows are padded with
    empty strings.  The header row itself is never a record.
    """
    rows = [list(r) for r in (grid or [])]
    if not rows:
        return []
    headers = rows[0]
    records = []
    for row in rows[1:]:
        records.append({h: (row[i] if i < len(row) and row[i] is not None else "")
                        for i, h in enumerate(headers)})
    return records

def grid_to_csv(grid: Iterable[Iterable], newline: str = "\r\n", delimiter: str = ",") -> str:
    """Grid to CSV text with minimal quoting, no trailing newline."""
    rows = [list(r) for r in (grid or [])]
    if not rows:
        return ""
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=delimiter, lineterminator=newline)
    writer.writerows([["" if c is None else c for c in r] for r in rows])
    return buf.getvalue()[:-len(newline)] if newline else buf.getvalue()

def csv_to_grid(text: str, delimiter: str = ",") -> list[list[str]]:
    """
    CSV text to a grid.  Blank lines are dropped, a stray quote doesn't
    stop the parse, what could be read is returned.
    """
    if not text or not text.strip():
        return []
    rows = []
    reader = csv.reader(io.StringIO(text), delimiter=delimiter)
    try:
        for row in reader:
            if row and any(c.strip() for c in row):
                rows.append(row)
    except csv.Error as e:
        logger.warning("CSV parsing encountered errors", extra={"errors": [f"line {reader.line_num}: {e}"]})
    return rows

def parse_csv(text: str,
              delimiter: str = ",",
              skip_empty_lines: bool = True,
              transform_header: Callable[[str], str]|None = str.strip) -> CsvParseResult:
    """
    CSV with a header row to records, collecting problems instead of raising.
    Rows with the wrong number of fields still come back: missing fields are
    empty strings and extra fields are dropped, each noted in errors.
    """
    result = CsvParseResult()
    if not text or not text.strip():
        return result
    reader = csv.reader(io.StringIO(text), delimiter=delimiter)
    try:
        header = next(reader, None)
        if header is None:
            return result
        result.fields = [transform_header(h) if transform_header else h for h in header]
        for row in reader:
            if skip_empty_lines and (not row or not any(c.strip() for c in row)):
                continue
            if len(row) < len(result.fields):
                result.errors.append(f"row {len(result.records) + 1}: too few fields, "
                                     f"expected {len(result.fields)} got {len(row)}")
            elif len(row) > len(result.fields):
                result.errors.append(f"row {len(result.records) + 1}: too many fields, "
                                     f"expected {len(result.fields)} got {len(row)}")
            result.records.append({h: (row[i] if i < len(row) else "")
                                   for i, h in enumerate(result.fields)})
    except csv.Error as e:
        result.errors.append(f"line {reader.line_num}: {e}")
    return result

def csv_to_records(text: str, **options) -> list[dict]:
    """
    CSV to records.  Parse problems are logged as a warning, never raised,
    and the rows that could be read are returned.
    options are passed to parse_csv(): delimiter, skip_empty_lines, transform_header
    """
    logger.debug("Converting CSV to records", extra={"csv_length": len(text or "")})
    result = parse_csv(text, **options)
    if result.errors:
        logger.warning("CSV parsing encountered errors", extra={"errors": result.errors})
    logger.debug("CSV converted to records",
                 extra={"row_count": len(result.records), "column_count": len(result.fields)})
    return result.records

def csv_to_json(text: str, **options) -> list[dict]:
    """csv_to_records() under the name callers coming from JSON land expect"""
    return csv_to_records(text, **options)

def json_to_csv(records: Iterable[Mapping],
                columns: list[str]|None = None,
                quote_all: bool = False,
                newline: str = "\r\n",
                delimiter: str = ",") -> str:
    """
    Records to CSV with minimal quoting and values as they are, the loose
    counterpart to records_to_csv().  columns fixes the header and drops
    anything else, otherwise it's the union of keys.
    """
    records = list(records or [])
    if not records:
        return ""
    fieldnames = list(columns) if columns else unique_keys(records)
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=fieldnames, restval="", extrasaction="ignore",
                            delimiter=delimiter, lineterminator=newline,
                            quoting=csv.QUOTE_ALL if quote_all else csv.QUOTE_MINIMAL)
    writer.writeheader()
    writer.writerows({k: ("" if v is None else v) for k, v in r.items()} for r in records)
    text = buf.getvalue()
    logger.debug("Records converted to CSV", extra={"csv_length": len(text), "row_count": len(records)})
    return text[:-len(newline)] if newline else text

def to_grid(data: Any, char_limit: int = DEFAULT_CHAR_LIMIT) -> list[list]:
    """
    The wire shape of any spreadsheet data, header row first.
    """
    d = to_data(data)
    if isinstance(d, Csv):
        return csv_to_grid(d.text)
    if isinstance(d, Records):
        return records_to_grid(d.rows, char_limit)
    return [list(r) for r in d.rows]

OUTPUT_FORMATS = ("json", "csv", "array")

def render(values: list[list], format: str = "json") -> list[dict]|str|list[list]:
    """
    Grid read from a sheet in the format the caller asked for:
    json is records, csv is records_to_csv() text, array is the grid as is.
    """
    f = str(format).lower()
    if f == "json":
        return grid_to_records(values)
    if f == "csv":
        return records_to_csv(grid_to_records(values))
    if f == "array":
        return values
    raise ValueError(f"Invalid format: {format}, must be one of {', '.join(OUTPUT_FORMATS)}")

def read_xlsx_file(path: str|Path) -> dict[str, str]:
    """
    Read an Excel workbook into {sheet name: CSV text}, computed values
    rather than formulas.
    """
    file_path = Path(path).expanduser().resolve()
    logger.debug("Reading Excel file", extra={"file_path": str(file_path)})
    if not file_path.is_file():
        raise FileNotFoundError(f"Excel file not found: {file_path}")
    try:
        workbook = load_workbook(filename=file_path, data_only=True, read_only=True)
    except Exception as e:
        logger.error("Failed to read Excel file", extra={"file_path": str(file_path), "error": str(e)})
        raise ConversionError(f"Failed to read Excel file: {e}") from e
    try:
        sheets = {}
        for ws in workbook.worksheets:
            rows = [["" if c is None else c for c in row] for row in ws.iter_rows(values_only=True)]
            sheets[ws.title] = grid_to_csv(rows, newline="\n")
    finally:
        workbook.close()
    logger.debug("Excel file read", extra={"file_path": str(file_path), "sheet_names": list(sheets)})
    return sheets
