"""
Sheets API plumbing: A1 ranges, resource/request dataclasses and the
async wrappers around each spreadsheets() call.
"""

# reads and clears of a whole tab cover A through ZZ
GoogleSheetsUsableColumns = "A:ZZ"
