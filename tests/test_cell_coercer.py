"""Tests for cell-to-string coercion."""

from datetime import date, datetime, time

import pytest

from cell_coercer import (
    CellCoercionError,
    CellType,
    DateOrder,
    SheetCell,
    build_cell,
    coerce,
    restore,
    try_coerce,
)


def test_build_cell_tags() -> None:
    assert build_cell("abc").cell_type == CellType.TEXT
    assert build_cell(1.5).cell_type == CellType.NUMERIC
    assert build_cell(True).cell_type == CellType.BOOLEAN
    assert build_cell(None).cell_type == CellType.BLANK
    assert build_cell(2, formula="=1+1").cell_type == CellType.FORMULA

    dated = build_cell(datetime(2024, 5, 3))
    assert dated.cell_type == CellType.NUMERIC
    assert dated.is_date


def test_coerce_each_type() -> None:
    assert coerce(SheetCell("hello", CellType.TEXT)) == "hello"
    assert coerce(SheetCell(True, CellType.BOOLEAN)) == "true"
    assert coerce(SheetCell(False, CellType.BOOLEAN)) == "false"
    assert coerce(SheetCell(None, CellType.BLANK)) == ""
    assert coerce(SheetCell(42, CellType.NUMERIC)) == "42.0"
    assert coerce(SheetCell(0.25, CellType.NUMERIC)) == "0.25"
    assert coerce(SheetCell(7, CellType.FORMULA, formula="=3+4")) == "7.0"


def test_date_rendering_depends_on_order() -> None:
    cell = build_cell(datetime(2024, 5, 3))

    assert coerce(cell, DateOrder.MONTH_FIRST) == "5/3/24"
    assert coerce(cell, DateOrder.DAY_FIRST) == "3/5/24"


def test_date_values_without_time() -> None:
    cell = build_cell(date(2031, 12, 9))

    assert coerce(cell, DateOrder.DAY_FIRST) == "9/12/31"


def test_time_only_value_uses_day_zero() -> None:
    cell = build_cell(time(12, 30))

    assert coerce(cell, DateOrder.DAY_FIRST) == "31/12/99"


def test_date_flagged_serial_number() -> None:
    # 45415 is 3 May 2024 in the 1900 date system
    cell = SheetCell(45415, CellType.NUMERIC, is_date=True)

    assert coerce(cell, DateOrder.MONTH_FIRST) == "5/3/24"


def test_formula_with_text_result_cannot_be_coerced() -> None:
    cell = SheetCell("abc", CellType.FORMULA, formula='="a"&"bc"')

    with pytest.raises(CellCoercionError):
        coerce(cell)


def test_try_coerce_returns_placeholder_on_failure() -> None:
    cell = SheetCell(None, CellType.FORMULA, formula="=1+1")

    result = try_coerce(cell, DateOrder.DAY_FIRST, 4, "Amount")

    assert not result.ok
    assert result.text == "row 4 or column Amount does not exist in xlsx"


def test_try_coerce_success() -> None:
    result = try_coerce(SheetCell("x", CellType.TEXT), DateOrder.DAY_FIRST, 2, 0)

    assert result.ok
    assert result.text == "x"


@pytest.mark.parametrize("text, cell_type", [
    ("admin123", CellType.TEXT),
    ("", CellType.BLANK),
    ("true", CellType.BOOLEAN),
    ("false", CellType.BOOLEAN),
    ("5.0", CellType.NUMERIC),
    ("123.45", CellType.NUMERIC),
])
def test_restore_round_trips_non_date_cells(text, cell_type) -> None:
    cell = build_cell(restore(text, cell_type))

    assert coerce(cell) == text


def test_restore_rejects_bad_boolean() -> None:
    with pytest.raises(ValueError):
        restore("yes", CellType.BOOLEAN)
