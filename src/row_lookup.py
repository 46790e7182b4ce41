"""
Row Lookup
Conversion between spreadsheet row numbers and physical rows,
header column resolution and control-sheet lookup by test case ID
"""

import logging
from typing import Optional, Sequence

from cell_coercer import CellCoercionError, CellType, SheetCell

logger = logging.getLogger(__name__)

HEADER_ROW = 0
FIRST_DATA_ROW_NUMBER = 2

TCID_COLUMN = "TCID"
RUNMODE_COLUMN = "Runmode"


def to_physical_row(row_number: int) -> Optional[int]:
    """
    Convert a 1-based spreadsheet row number to a 0-based physical row

    Row number 1 is the header row, row number 2 the first data row.
    Returns None for row numbers <= 0.
    """
    if row_number <= 0:
        return None
    return row_number - 1


def to_row_number(physical_row: int) -> int:
    return physical_row + 1


def data_row_numbers(row_count: int) -> range:
    """Row numbers of every data row for a sheet with ``row_count`` rows"""
    return range(FIRST_DATA_ROW_NUMBER, row_count + 1)


def header_text(cell: Optional[SheetCell]) -> str:
    """Text of a header cell used for column matching"""
    if cell is None:
        raise CellCoercionError("Header cell is missing")
    if cell.cell_type == CellType.BLANK:
        return ""
    # Formula headers match on their cached text result
    if cell.cell_type == CellType.FORMULA and isinstance(cell.value, str):
        return cell.value
    if cell.cell_type != CellType.TEXT:
        raise CellCoercionError(
            f"Cannot get a text value from a {cell.cell_type.value} header cell")
    return cell.value


def find_column(header_cells: Sequence[Optional[SheetCell]], column_name: str) -> int:
    """
    Resolve a header name to a column index

    The whole header row is scanned, so when a name repeats the last
    matching column wins.

    Args:
        header_cells: Cells of physical row 0
        column_name: Header text to look for (compared trimmed, case-sensitive)

    Returns:
        Column index, or -1 if no header matches

    Raises:
        CellCoercionError: A header cell is missing or not text
    """
    target = column_name.strip()
    column_index = -1
    for index, cell in enumerate(header_cells):
        if header_text(cell).strip() == target:
            column_index = index
    return column_index


def find_test_case_row(reader, test_case_name: str, control_sheet: str) -> Optional[int]:
    """
    Find the control-sheet row for a test case

    Args:
        reader: ExcelReader holding the control sheet
        test_case_name: Test case ID, matched against TCID ignoring case
        control_sheet: Name of the control sheet

    Returns:
        Row number of the first matching row, or None
    """
    rows = reader.row_count(control_sheet)
    for row_number in data_row_numbers(rows):
        test_case = reader.get_cell_data(control_sheet, TCID_COLUMN, row_number)
        if test_case.lower() == test_case_name.lower():
            return row_number
    logger.debug(f"Test case {test_case_name} not listed in {control_sheet}")
    return None
