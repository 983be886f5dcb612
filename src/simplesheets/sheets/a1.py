"""
A1 notation helpers.
See https://developers.google.com/sheets/api/guides/concepts#cell
A general A1 has the form:

    <title>!<start col><start row>:<end col><end row>

Rows are 1-based integers, columns are A-ZZZ.  Any part but the title
may be missing, which means unbounded.  A title that isn't a plain
identifier has to be single quoted, with embedded single quotes doubled.
"""
import re

# just trying to catch A-ZZZ for a valid column label
_A1COLREGEXSTR = r"^[A-Z]{1,3}$"
# title!cells or just cells, the title may be quoted
_A1RANGEREGEXSTR = r"^\s*(?:(?P<sheet>'(?:[^']|'')+'|[^'!]+)!)?(?P<cells>[^!]*)\s*$"
_A1CELLSREGEXSTR = r"^(?P<start_col>[A-Z]{0,3})(?P<start_row>\d*)(?::(?P<end_col>[A-Z]{0,3})(?P<end_row>\d*))?$"
_A1PLAINTITLESTR = r"^[A-Za-z_][A-Za-z0-9_]*$"

_a1_col_re = re.compile(_A1COLREGEXSTR)
_a1_range_re = re.compile(_A1RANGEREGEXSTR)
_a1_cells_re = re.compile(_A1CELLSREGEXSTR)
_a1_plain_title_re = re.compile(_A1PLAINTITLESTR)

def col_to_int(column: str) -> int:
    """
    Convert a sheet column A-ZZZ to its 1-based integer equivalent, so 'A' goes to 1.
    A return value of 0 means invalid column.
    """
    c = str(column).upper()
    num = 0
    if _a1_col_re.match(c):
        for ch in c:
            num = num * 26 + (ord(ch) - 64)
    return num

def quote_sheet(title: str) -> str:
    """
    Quote a sheet title for use in a range if it needs it.
    Already quoted titles are left alone.
    """
    t = str(title)
    if not t or _a1_plain_title_re.match(t) or (len(t) > 1 and t[0] == "'" and t[-1] == "'"):
        return t
    return "'" + t.replace("'", "''") + "'"

def unquote_sheet(title: str) -> str:
    t = str(title)
    if len(t) > 1 and t[0] == "'" and t[-1] == "'":
        return t[1:-1].replace("''", "'")
    return t

def tab_range(tab: str|None, cells: str) -> str:
    """
    Scope a cell range to a tab, or leave it unscoped (meaning the first tab)
    when there is no tab.  tab_range("Users", "A1") -> "Users!A1"
    """
    if tab:
        return f"{quote_sheet(tab)}!{cells}"
    return cells

def split_range(a1: str) -> tuple[str, str]:
    """
    Split a range into its unquoted title and cell parts.
    The title is empty when the range isn't scoped to a tab.
    """
    m = _a1_range_re.match(str(a1))
    if not m:
        raise ValueError(f"invalid A1 notation: {a1}")
    return (unquote_sheet(m.group("sheet") or ""), m.group("cells"))

def extract_cells(cells: str) -> tuple[int, int, int, int]:
    """
    Take the cell part of an A1 and return 1-based
    (start col, start row, end col, end row), 0 meaning unbounded.
    A single cell like B3 has no end, so its end equals its start.
    An unbounded start is set to A/1 as it has to start there anyway.
    """
    m = _a1_cells_re.match(str(cells).strip().upper())
    if not m or not str(cells).strip():
        raise ValueError(f"invalid A1 cell range: {cells}")
    sc = col_to_int(m.group("start_col")) if m.group("start_col") else 0
    sr = int(m.group("start_row")) if m.group("start_row") else 0
    if m.group("end_col") is None and m.group("end_row") is None:
        return (sc or 1, sr or 1, sc, sr)
    ec = col_to_int(m.group("end_col")) if m.group("end_col") else 0
    er = int(m.group("end_row")) if m.group("end_row") else 0
    if sr and not sc:
        sc = 1
    elif sc and not sr:
        sr = 1
    if sc and ec and ec < sc:
        raise ValueError(f"invalid A1 cell range: {cells}")
    return (sc, sr, ec, er)
