import re
import zipfile
from datetime import datetime
from pathlib import Path
from xml.sax.saxutils import escape

import pytest
from openpyxl import Workbook

from excel_reader import ExcelReader
from harness_config import HarnessConfig
from harness_context import HarnessContext

SHEETS = {
    "TestSuite": [
        ["TCID", "Runmode"],
        ["TC_01_VerifyLogin", "Y"],
        ["TC_02", "y"],
        ["TC_03_Disabled", "N"],
    ],
    "TC_01_VerifyLogin": [
        ["username", "password", "Runmode"],
        ["admin", "admin123", "Y"],
        ["guest", "guest123", "N"],
        ["locked", "locked123", "y"],
    ],
    "TC_02": [
        ["username", "password", "Runmode"],
        ["admin", "admin123", "Y"],
    ],
    "TC_03_Disabled": [
        ["username", "password", "Runmode"],
        ["bob", "bob123", "Y"],
    ],
    "Types": [
        ["Label", "Amount", "Active", "Joined", "Note", "Computed"],
        ["alice", 123.45, True, datetime(2024, 5, 3), None, "=1+1"],
        ["bob", 5, False, datetime(2005, 11, 28), "x"],
    ],
    "HeaderOnly": [
        ["username", "password", "Runmode"],
    ],
    "Dupes": [
        ["a", "b", "a"],
        ["x", "y", "z"],
    ],
    "GapHeader": [
        ["first", None, "third"],
        ["1", "2", "3"],
    ],
    "LOGIN": [
        ["username"],
        ["upper"],
    ],
    "MixedCase": [
        ["username"],
        ["mixed"],
    ],
    "Empty": [],
}


def write_workbook(path: Path, sheets: dict) -> Path:
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(name)
        for row_index, row in enumerate(rows, 1):
            for col_index, value in enumerate(row, 1):
                if value is not None:
                    ws.cell(row=row_index, column=col_index, value=value)
    wb.save(path)
    return path


@pytest.fixture
def data_file(tmp_path) -> Path:
    return write_workbook(tmp_path / "Test-Data.xlsx", SHEETS)


@pytest.fixture
def reader(data_file) -> ExcelReader:
    return ExcelReader(data_file)


@pytest.fixture
def context(data_file, tmp_path) -> HarnessContext:
    config = HarnessConfig({"Datafilepath": str(data_file), "ControlSheet": "TestSuite"},
                           base_dir=tmp_path)
    return HarnessContext.from_config(config)


def write_cached_results(path: Path, results: dict) -> Path:
    """
    Store cached results for formula cells in a saved workbook

    openpyxl writes formulas with an empty <v> element, the same as a file
    that was never calculated. This fills in the value a spreadsheet
    application would have saved. Keys are formula text without the
    leading "=".
    """
    with zipfile.ZipFile(path) as archive:
        entries = [(info, archive.read(info)) for info in archive.infolist()]

    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as archive:
        for info, data in entries:
            if info.filename.startswith("xl/worksheets/") and info.filename.endswith(".xml"):
                text = data.decode("utf-8")
                for formula, value in results.items():
                    pattern = re.compile(
                        r"<c ([^>]*)><f>" + re.escape(escape(formula)) + r"</f>(?:<v\s*/>|<v></v>)?")
                    type_attr = ' t="str"' if isinstance(value, str) else ""
                    replacement = (f"{type_attr}><f>{escape(formula)}</f>"
                                   f"<v>{escape(str(value))}</v>")
                    text = pattern.sub(lambda m: f"<c {m.group(1)}{replacement}", text)
                data = text.encode("utf-8")
            archive.writestr(info, data)
    return path


@pytest.fixture
def formula_file(tmp_path) -> Path:
    path = tmp_path / "Calculated.xlsx"
    wb = Workbook()
    ws = wb.active
    ws.title = "Formulas"
    ws["A1"] = "=Z1"
    ws["B1"] = "Total"
    ws["C1"] = "Due"
    ws["A2"] = "alice"
    ws["B2"] = "=1+1"
    ws["C2"] = "=DATE(2024,5,3)"
    ws["C2"].number_format = "d/m/yy"
    wb.save(path)
    return write_cached_results(path, {"Z1": "Label", "1+1": 2, "DATE(2024,5,3)": 45415})
