"""
Cell Value Coercer
In-memory cell model for loaded workbooks and conversion of any cell
into the single string form consumed by data-driven tests
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Optional, Union

from openpyxl.utils.datetime import from_excel

logger = logging.getLogger(__name__)

# Day zero of the 1900 date system, used for time-only cells
EXCEL_DAY_ZERO = datetime(1899, 12, 31)


class CellType(Enum):
    """Cell type tags"""
    TEXT = "text"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    BLANK = "blank"
    FORMULA = "formula"


class DateOrder(Enum):
    """Day/month order used when rendering date-formatted numbers"""
    DAY_FIRST = "day_first"      # header-name lookups
    MONTH_FIRST = "month_first"  # column-index lookups


@dataclass(frozen=True)
class SheetCell:
    """A single loaded cell.

    For formula cells ``value`` holds the cached result written by the
    spreadsheet application (None when the file was never calculated).
    """
    value: Any
    cell_type: CellType
    is_date: bool = False
    formula: Optional[str] = None


@dataclass(frozen=True)
class CellResult:
    """Outcome of reading one cell: a string value or a lookup error"""
    value: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def text(self) -> str:
        """Value, or the placeholder text when the read failed"""
        return self.value if self.error is None else self.error


class CellCoercionError(Exception):
    """Raised when a cell cannot be read as its declared type"""


def placeholder(row_number: int, column: Union[str, int]) -> str:
    return f"row {row_number} or column {column} does not exist in xlsx"


def build_cell(value: Any, is_date: bool = False,
               formula: Optional[str] = None) -> SheetCell:
    """
    Build a SheetCell from openpyxl cell attributes

    Args:
        value: Computed cell value (cached result for formulas)
        is_date: Whether the cell carries a date number format
        formula: Formula text when the cell holds a formula

    Returns:
        SheetCell with a normalized type tag
    """
    if formula is not None:
        return SheetCell(value=value, cell_type=CellType.FORMULA,
                         is_date=is_date, formula=formula)
    if value is None:
        return SheetCell(value=None, cell_type=CellType.BLANK)
    if isinstance(value, bool):
        return SheetCell(value=value, cell_type=CellType.BOOLEAN)
    if isinstance(value, (datetime, date, time, timedelta)):
        return SheetCell(value=value, cell_type=CellType.NUMERIC, is_date=True)
    if isinstance(value, (int, float)):
        return SheetCell(value=value, cell_type=CellType.NUMERIC, is_date=is_date)
    # Strings and error literals such as #DIV/0!
    return SheetCell(value=str(value), cell_type=CellType.TEXT)


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, time):
        return datetime.combine(EXCEL_DAY_ZERO.date(), value)
    if isinstance(value, timedelta):
        return EXCEL_DAY_ZERO + value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Serial number left unconverted by the loader
        return _as_datetime(from_excel(value))
    raise CellCoercionError(f"Not a date value: {value!r}")


def format_date(value: Any, date_order: DateOrder) -> str:
    """Render a date as D/M/YY or M/D/YY without zero padding on day/month"""
    moment = _as_datetime(value)
    year = str(moment.year)[2:]
    if date_order == DateOrder.DAY_FIRST:
        return f"{moment.day}/{moment.month}/{year}"
    return f"{moment.month}/{moment.day}/{year}"


def _numeric_text(cell: SheetCell, date_order: DateOrder) -> str:
    value = cell.value
    if cell.is_date or isinstance(value, (datetime, date, time, timedelta)):
        return format_date(value, date_order)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CellCoercionError(
            f"Cannot get a numeric value from a {cell.cell_type.value} cell: {value!r}")
    return str(float(value))


def coerce(cell: SheetCell, date_order: DateOrder = DateOrder.MONTH_FIRST) -> str:
    """
    Convert a cell into its canonical string

    Args:
        cell: Loaded cell
        date_order: Day/month order for date-formatted numbers

    Returns:
        String value of the cell

    Raises:
        CellCoercionError: Formula without a numeric cached result
    """
    if cell.cell_type == CellType.TEXT:
        return cell.value
    if cell.cell_type in (CellType.NUMERIC, CellType.FORMULA):
        return _numeric_text(cell, date_order)
    if cell.cell_type == CellType.BLANK:
        return ""
    return "true" if cell.value else "false"


def try_coerce(cell: SheetCell, date_order: DateOrder, row_number: int,
               column: Union[str, int]) -> CellResult:
    """Coerce a cell, turning a coercion failure into an error result"""
    try:
        return CellResult(value=coerce(cell, date_order))
    except CellCoercionError as e:
        logger.warning(f"Unreadable cell at row {row_number}, column {column}: {e}")
        return CellResult(error=placeholder(row_number, column))


def restore(text: str, cell_type: CellType) -> Any:
    """
    Inverse of coerce() for non-date cells

    Args:
        text: Coerced string
        cell_type: Type tag the string was produced from

    Returns:
        Typed value such that coerce() of a cell holding it gives back ``text``
    """
    if cell_type == CellType.TEXT:
        return text
    if cell_type == CellType.BLANK:
        return None
    if cell_type == CellType.BOOLEAN:
        if text not in ("true", "false"):
            raise ValueError(f"Not a boolean cell string: {text!r}")
        return text == "true"
    if cell_type in (CellType.NUMERIC, CellType.FORMULA):
        return float(text)
    raise ValueError(f"Unsupported cell type: {cell_type}")
