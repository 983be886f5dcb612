"""
A thin async layer over the Google Sheets and Drive clients for treating
spreadsheets as data: write records, CSV or rows to a tab, read them back
in any of those shapes, merge, append, and manage tabs, with quota and
server errors retried with backoff.

    import simplesheets

    simplesheets.init(credentials="service_account.json")
    sid = await simplesheets.create_spreadsheet("report", tabs=["Users"])
    await simplesheets.write_sheet(sid, [{"name": "Ada", "age": 36}], tab="Users")
    rows = await simplesheets.read_sheet(sid, tab="Users")

GoogleSheetsClient does the same with an explicit config, for when there
is more than one account or retry policy in play.
"""
from .api import *
from .config import SheetsConfig, load_credentials
from .convert import (Csv, Grid, Records, SpreadsheetData, csv_to_json, csv_to_records,
                      grid_to_records, json_to_csv, read_xlsx_file, records_to_csv,
                      records_to_grid, to_data, to_grid)
from .errors import (BulkDeleteError, ConfigurationError, ConversionError, CredentialsError,
                     NotInitializedError, PreconditionError, SheetsError, TabExistsError,
                     TabNotFoundError)
from .merge import merge
from .retry import RetryPolicy
from .spreadsheet import GoogleSheetsClient, build_url

make_csv_from_records = records_to_csv
