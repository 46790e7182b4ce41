"""
Excel Test Data Reader
Loads an .xlsx test data workbook into memory once and serves
cell values by sheet name, header name or column index
"""

import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from cell_coercer import (
    CellCoercionError,
    CellResult,
    DateOrder,
    SheetCell,
    build_cell,
    placeholder,
    try_coerce,
)
from row_lookup import HEADER_ROW, find_column, to_physical_row

Row = Tuple[Optional[SheetCell], ...]


class LoadError(Exception):
    """Workbook file is missing, unreadable or not a valid xlsx document"""


@dataclass(frozen=True)
class LoadedSheet:
    """Read-only rows of one worksheet; None marks an absent row or cell"""
    name: str
    rows: Tuple[Optional[Row], ...]

    def row(self, physical_row: int) -> Optional[Row]:
        if physical_row < 0 or physical_row >= len(self.rows):
            return None
        return self.rows[physical_row]

    def cell(self, physical_row: int, column_index: int) -> Optional[SheetCell]:
        row = self.row(physical_row)
        if row is None or column_index >= len(row):
            return None
        return row[column_index]


def _trim(items: list) -> list:
    """Drop trailing None entries"""
    end = len(items)
    while end and items[end - 1] is None:
        end -= 1
    return items[:end]


def _load_sheet(values_ws, formulas_ws) -> LoadedSheet:
    rows: List[Optional[Row]] = []
    for value_cells, formula_cells in zip(values_ws.iter_rows(), formulas_ws.iter_rows()):
        cells: List[Optional[SheetCell]] = []
        for value_cell, formula_cell in zip(value_cells, formula_cells):
            formula = None
            if formula_cell.data_type == 'f':
                formula = str(formula_cell.value)
            elif value_cell.value is None:
                cells.append(None)
                continue
            cells.append(build_cell(value_cell.value, is_date=value_cell.is_date,
                                    formula=formula))
        cells = _trim(cells)
        rows.append(tuple(cells) if cells else None)
    return LoadedSheet(name=values_ws.title, rows=tuple(_trim(rows)))


class ExcelReader:
    """In-memory test data workbook"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.logger = logging.getLogger(__name__)
        self._sheets: Dict[str, LoadedSheet] = self._load()

    @classmethod
    def open(cls, path: Union[str, Path]) -> "ExcelReader":
        return cls(path)

    def _load(self) -> Dict[str, LoadedSheet]:
        """Read every worksheet, releasing the file before returning"""
        if not self.path.is_file():
            raise LoadError(f"Test data file not found: {self.path}")

        try:
            with open(self.path, 'rb') as f:
                # Once for cached formula results, once to tag formula cells
                values_wb = load_workbook(f, data_only=True)
                f.seek(0)
                formulas_wb = load_workbook(f, data_only=False)
        except (OSError, zipfile.BadZipFile, InvalidFileException, KeyError, ValueError) as e:
            raise LoadError(f"Failed to load test data file {self.path}: {e}") from e

        sheets = {}
        for values_ws in values_wb.worksheets:
            sheets[values_ws.title] = _load_sheet(values_ws, formulas_wb[values_ws.title])

        values_wb.close()
        formulas_wb.close()
        self.logger.info(f"Loaded test data from {self.path}: {len(sheets)} sheets")
        return sheets

    @property
    def sheet_names(self) -> List[str]:
        return list(self._sheets)

    def _find_sheet(self, sheet_name: str) -> Optional[LoadedSheet]:
        """Exact name first, then the upper-cased name"""
        sheet = self._sheets.get(sheet_name)
        if sheet is None:
            sheet = self._sheets.get(sheet_name.upper())
        return sheet

    def sheet_exists(self, sheet_name: str) -> bool:
        return self._find_sheet(sheet_name) is not None

    def row_count(self, sheet_name: str) -> int:
        """Number of rows including the header, 0 if the sheet does not exist"""
        sheet = self._find_sheet(sheet_name)
        if sheet is None:
            return 0
        return len(sheet.rows)

    def column_count(self, sheet_name: str) -> int:
        """Number of header cells, -1 if the sheet or its header row is missing"""
        sheet = self._find_sheet(sheet_name)
        if sheet is None:
            return -1
        header = sheet.row(HEADER_ROW)
        if header is None:
            return -1
        return len(header)

    def header(self, sheet_name: str) -> List[str]:
        """Header row values, read by column index"""
        return [self.get_cell_data(sheet_name, column_index, 1)
                for column_index in range(self.column_count(sheet_name))]

    def read_cell(self, sheet_name: str, column: Union[str, int], row_number: int) -> CellResult:
        """
        Read one cell as a typed result

        Args:
            sheet_name: Sheet to read from
            column: Header name, or 0-based column index
            row_number: 1-based row number (1 is the header row)

        Returns:
            CellResult; an empty value when the sheet, column, row or cell
            is absent, an error when the cell cannot be read
        """
        physical_row = to_physical_row(row_number)
        if physical_row is None:
            return CellResult()

        sheet = self._find_sheet(sheet_name)
        if sheet is None:
            return CellResult()

        if isinstance(column, str):
            header = sheet.row(HEADER_ROW)
            if header is None:
                return CellResult(error=placeholder(row_number, column))
            try:
                column_index = find_column(header, column)
            except CellCoercionError as e:
                self.logger.warning(f"Cannot resolve column {column} in {sheet_name}: {e}")
                return CellResult(error=placeholder(row_number, column))
            if column_index == -1:
                return CellResult()
            date_order = DateOrder.DAY_FIRST
        else:
            if column < 0:
                return CellResult(error=placeholder(row_number, column))
            column_index = column
            date_order = DateOrder.MONTH_FIRST

        cell = sheet.cell(physical_row, column_index)
        if cell is None:
            return CellResult()
        return try_coerce(cell, date_order, row_number, column)

    def get_cell_data(self, sheet_name: str, column: Union[str, int], row_number: int) -> str:
        """
        Read one cell as a string

        Header-name lookups render dates as D/M/YY, column-index lookups
        as M/D/YY. Unreadable cells give a "row N or column X does not
        exist in xlsx" placeholder.
        """
        return self.read_cell(sheet_name, column, row_number).text
