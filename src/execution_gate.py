"""
Execution Gate
Run-mode checks deciding whether a test case and each of its
datasets may execute
"""

import logging
from typing import Mapping

from excel_reader import ExcelReader
from row_lookup import RUNMODE_COLUMN, find_test_case_row

DEFAULT_CONTROL_SHEET = "TestSuite"


class GateDenied(Exception):
    """Skip signal raised when a run mode is not Y; not a test failure"""

    def __init__(self, message: str, test_case_name: str, level: str):
        super().__init__(message)
        self.test_case_name = test_case_name
        self.level = level  # "suite" or "dataset"


class ExecutionGate:
    def __init__(self, reader: ExcelReader, control_sheet: str = DEFAULT_CONTROL_SHEET):
        self.reader = reader
        self.control_sheet = control_sheet
        self.logger = logging.getLogger(__name__)

    def is_test_runnable(self, test_case_name: str) -> bool:
        """Suite-level check: the control sheet row for the test case has Runmode Y (any case)"""
        row_number = find_test_case_row(self.reader, test_case_name, self.control_sheet)
        if row_number is None:
            return False
        runmode = self.reader.get_cell_data(self.control_sheet, RUNMODE_COLUMN, row_number)
        return runmode.lower() == "y"

    @staticmethod
    def is_dataset_runnable(record: Mapping[str, str]) -> bool:
        # Exact match only, unlike the suite-level check
        return record.get(RUNMODE_COLUMN) == "Y"

    def should_run(self, test_case_name: str, record: Mapping[str, str]) -> bool:
        return self.is_test_runnable(test_case_name) and self.is_dataset_runnable(record)

    def check_execution(self, test_case_name: str, record: Mapping[str, str]) -> None:
        """
        Raise GateDenied unless both run modes allow the dataset

        Args:
            test_case_name: Test case ID as listed in the control sheet
            record: Dataset with its own Runmode field
        """
        if not self.is_test_runnable(test_case_name):
            message = f"Skipping the test {test_case_name.upper()} as the Run mode is NO"
            self.logger.info(message)
            raise GateDenied(message, test_case_name, "suite")

        if not self.is_dataset_runnable(record):
            message = "Skipping the test case as the Run mode for data set is NO"
            self.logger.info(f"{message} ({test_case_name})")
            raise GateDenied(message, test_case_name, "dataset")
