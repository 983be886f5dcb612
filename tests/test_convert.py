import logging

import pytest
from openpyxl import Workbook

from simplesheets.convert import *
from simplesheets.errors import ConversionError

def test_to_data_sorts_shapes():
    assert(to_data("a,b\n1,2") == Csv("a,b\n1,2"))
    assert(to_data([["a", "b"], [1, 2]]) == Grid([["a", "b"], [1, 2]]))
    assert(to_data([{"a": 1}]) == Records([{"a": 1}]))
    assert(to_data(None) == Grid([]))
    assert(to_data([]) == Grid([]))
    r = Records([{"a": 1}])
    assert(to_data(r) is r)

def test_to_data_rejects_junk():
    with pytest.raises(TypeError):
        to_data(42)
    with pytest.raises(TypeError):
        to_data({"a": 1})
    with pytest.raises(TypeError):
        to_data(["a", "b"])

def test_header_union_ordering():
    records = [{"a": 1, "b": 2}, {"b": 3, "c": 4}]
    grid = records_to_grid(records)
    assert(grid[0] == ["a", "b", "c"])
    assert(grid[1] == ["1", "2", ""])
    assert(grid[2] == ["", "3", "4"])

    text = records_to_csv(records)
    assert(text == 'a,b,c\n"1","2",""\n"","3","4"\n')

def test_records_to_csv_escapes_quotes():
    text = records_to_csv([{"name": 'He said "hi"'}])
    assert(text == 'name\n"He said ""hi"""\n')

def test_records_to_csv_cell_handling():
    records = [{"obj": {"k": "v"}, "list": [1, 2], "none": None, "pad": "  x  ", "long": "abcdef"}]
    text = records_to_csv(records, char_limit=3)
    lines = text.splitlines()
    assert(lines[0] == "obj,list,none,pad,long")
    # containers become JSON with single quotes, then get cut to the limit
    assert(lines[1] == '"{\'k","[1,","","x","abc"')

def test_records_to_csv_header_quoted_only_when_needed():
    text = records_to_csv([{"a,b": 1, "c": 2}])
    assert(text.splitlines()[0] == '"a,b",c')

def test_empty_inputs():
    assert(records_to_csv([]) == "")
    assert(csv_to_records("") == [])
    assert(grid_to_records([]) == [])
    assert(records_to_grid([]) == [])
    assert(csv_to_grid("") == [])
    assert(grid_to_csv([]) == "")
    assert(json_to_csv([]) == "")
    assert(to_grid(Csv("")) == [])
    assert(to_grid(Records([])) == [])

def test_grid_to_records_pads_short_rows():
    grid = [["a", "b", "c"], ["1"], ["2", "3", "4"]]
    assert(grid_to_records(grid) == [{"a": "1", "b": "", "c": ""},
                                     {"a": "2", "b": "3", "c": "4"}])

def test_grid_round_trip():
    records = [{"name": "Ada", "age": "36"}, {"name": "Alan", "age": "41"}]
    assert(grid_to_records(records_to_grid(records)) == records)

def test_csv_round_trip():
    records = [{"name": "Ada", "city": "London"}, {"name": "Grace", "city": ""}]
    assert(csv_to_records(records_to_csv(records)) == records)

def test_round_trip_with_missing_keys():
    records = [{"a": "1"}, {"b": "2"}]
    assert(grid_to_records(records_to_grid(records)) == [{"a": "1", "b": ""}, {"a": "", "b": "2"}])

def test_csv_to_records_trims_header():
    assert(csv_to_records(" name , age \nAda,36\n") == [{"name": "Ada", "age": "36"}])

def test_csv_to_records_skips_blank_lines():
    assert(csv_to_records("a,b\n1,2\n\n3,4\n") == [{"a": "1", "b": "2"}, {"a": "3", "b": "4"}])

def test_csv_to_records_options():
    text = "a;b\n1;2\n"
    assert(csv_to_records(text, delimiter=";") == [{"a": "1", "b": "2"}])
    assert(csv_to_json("A,B\n1,2", transform_header=str.lower) == [{"a": "1", "b": "2"}])
    assert(csv_to_records("a,b\n,\n", skip_empty_lines=False) == [{"a": "", "b": ""}])

def test_csv_parse_errors_are_warnings(caplog):
    caplog.set_level(logging.WARNING, logger="simplesheets")
    records = csv_to_records("a,b\n1,2,3\n4\n")
    assert(records == [{"a": "1", "b": "2"}, {"a": "4", "b": ""}])
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert(len(warnings) == 1)
    assert(len(warnings[0].errors) == 2)

def test_parse_csv_collects_errors():
    result = parse_csv("a,b\n1\n")
    assert(result.fields == ["a", "b"])
    assert(result.records == [{"a": "1", "b": ""}])
    assert("too few fields" in result.errors[0])

def test_json_to_csv():
    records = [{"a": 1, "b": "x,y"}, {"a": None, "c": 3}]
    assert(json_to_csv(records) == 'a,b,c\r\n1,"x,y",\r\n,,3')
    assert(json_to_csv(records, columns=["c", "a"], newline="\n") == "c,a\n,1\n3,")
    assert(json_to_csv([{"a": 1}], quote_all=True) == '"a"\r\n"1"')

def test_to_grid():
    assert(to_grid("a,b\n1,2\n") == [["a", "b"], ["1", "2"]])
    assert(to_grid([["a"], [1]]) == [["a"], [1]])
    assert(to_grid([{"a": 1}]) == [["a"], ["1"]])

def test_render():
    values = [["a", "b"], ["1", "2"]]
    assert(render(values, "json") == [{"a": "1", "b": "2"}])
    assert(render(values, "CSV") == 'a,b\n"1","2"\n')
    assert(render(values, "array") is values)
    with pytest.raises(ValueError):
        render(values, "xml")

def test_read_xlsx_file(tmp_path):
    wb = Workbook()
    ws = wb.active
    ws.title = "People"
    ws.append(["name", "age"])
    ws.append(["Ada", 36])
    other = wb.create_sheet("Empty")
    other.append(["only"])
    path = tmp_path / "book.xlsx"
    wb.save(path)

    sheets = read_xlsx_file(path)
    assert(list(sheets) == ["People", "Empty"])
    assert(sheets["People"] == "name,age\nAda,36")
    assert(sheets["Empty"] == "only")

def test_read_xlsx_file_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_xlsx_file(tmp_path / "missing.xlsx")
    bad = tmp_path / "bad.xlsx"
    bad.write_text("not a workbook")
    with pytest.raises(ConversionError):
        read_xlsx_file(bad)
