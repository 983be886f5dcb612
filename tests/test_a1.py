
import pytest

from simplesheets.sheets.a1 import *

def test_col_to_int():
    assert(col_to_int("A") == 1)
    assert(col_to_int("z") == 26)
    assert(col_to_int("AA") == 27)
    assert(col_to_int("BX") == 76)
    assert(col_to_int("ZZ") == 702)
    assert(col_to_int("ZZZ") == 18278)
    assert(col_to_int("AAAA") == 0)
    assert(col_to_int("A1") == 0)

def test_quote_sheet():
    assert(quote_sheet("Users") == "Users")
    assert(quote_sheet("tab_2") == "tab_2")
    assert(quote_sheet("My Tab") == "'My Tab'")
    assert(quote_sheet("Bob's") == "'Bob''s'")
    assert(quote_sheet("2024") == "'2024'")
    assert(quote_sheet("'Already quoted'") == "'Already quoted'")
    assert(unquote_sheet("'Bob''s'") == "Bob's")
    assert(unquote_sheet("Users") == "Users")

def test_tab_range():
    assert(tab_range("Users", "A1") == "Users!A1")
    assert(tab_range("My Tab", "A:ZZ") == "'My Tab'!A:ZZ")
    assert(tab_range(None, "A1") == "A1")
    assert(tab_range("", "B2:C3") == "B2:C3")

def test_split_range():
    assert(split_range("test!C4:BX2") == ("test", "C4:BX2"))
    assert(split_range("'this is a test'!A1") == ("this is a test", "A1"))
    assert(split_range("'Bob''s'!A:ZZ") == ("Bob's", "A:ZZ"))
    assert(split_range("A1:B2") == ("", "A1:B2"))

def test_extract_bounded():
    assert(extract_cells("C4:BX20") == (3, 4, 76, 20))
    assert(extract_cells("a1:c10") == (1, 1, 3, 10))

def test_extract_single_cell():
    assert(extract_cells("B3") == (2, 3, 2, 3))
    assert(extract_cells("A5") == (1, 5, 1, 5))

def test_extract_unbounded():
    assert(extract_cells("A:ZZ") == (1, 1, 702, 0))
    assert(extract_cells("4:10") == (1, 4, 0, 10))
    assert(extract_cells("B2:D") == (2, 2, 4, 0))

def test_extract_invalid():
    with pytest.raises(ValueError):
        extract_cells("")
    with pytest.raises(ValueError):
        extract_cells("A1:B2:C3")
    with pytest.raises(ValueError):
        extract_cells("D1:B2")
    with pytest.raises(ValueError):
        extract_cells("1A")
