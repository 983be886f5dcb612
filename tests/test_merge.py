from simplesheets.convert import Csv, Grid, Records
from simplesheets.merge import merge, project_records

EXISTING = [["h1", "h2"], ["a", "b"], ["c", "d"], ["e", "f"]]

def test_merge_keeps_header_and_trailing_rows():
    assert(merge(EXISTING, [["x", "y"]]) == [["h1", "h2"], ["x", "y"], ["c", "d"], ["e", "f"]])

def test_merge_does_not_touch_input():
    existing = [list(r) for r in EXISTING]
    merge(existing, [["x", "y"]])
    assert(existing == EXISTING)

def test_merge_records_projects_on_existing_header():
    merged = merge(EXISTING, [{"h2": "y", "h1": "x", "new": "dropped"}, {"h1": "z"}])
    assert(merged == [["h1", "h2"], ["x", "y"], ["z", ""], ["e", "f"]])

def test_merge_csv_rows_are_taken_literally():
    # every CSV line is a row, a header line in the new data is just another row
    merged = merge(EXISTING, Csv("p,q\nr,s\n"))
    assert(merged == [["h1", "h2"], ["p", "q"], ["r", "s"], ["e", "f"]])
    assert(merge(EXISTING, "p,q\n") == [["h1", "h2"], ["p", "q"], ["c", "d"], ["e", "f"]])

def test_merge_drops_rows_past_existing_length():
    new = [["1", "1"], ["2", "2"], ["3", "3"], ["4", "4"], ["5", "5"]]
    merged = merge(EXISTING, Grid(new))
    assert(len(merged) == len(EXISTING))
    assert(merged[-1] == ["3", "3"])

def test_merge_empty_inputs():
    assert(merge([], [["x"]]) == [])
    assert(merge(EXISTING, []) == EXISTING)
    assert(merge(EXISTING, Records([])) == EXISTING)
    assert(merge([["h1"]], [["x"]]) == [["h1"]])

def test_project_records():
    assert(project_records([{"b": 2, "a": None}], ["a", "b", "c"]) == [["", 2, ""]])
    assert(project_records([{"a": 1}], []) == [[]])
