"""
Dataset Provider
Expands a test data sheet into one header-keyed record per data row
"""

import logging
from typing import Dict, List

from excel_reader import ExcelReader
from row_lookup import data_row_numbers

Record = Dict[str, str]

HEADER_ROW_NUMBER = 1


class DatasetProvider:
    def __init__(self, reader: ExcelReader):
        self.reader = reader
        self.logger = logging.getLogger(__name__)

    def materialize(self, sheet_name: str) -> List[Record]:
        """
        Read every data row of a sheet

        Values are read by column index; keys come from the header row.
        A header name that repeats keeps the value of its last column.

        Args:
            sheet_name: Sheet holding the datasets

        Returns:
            One record per data row, in sheet order (empty if the sheet
            has no data rows or does not exist)
        """
        rows = self.reader.row_count(sheet_name)
        cols = self.reader.column_count(sheet_name)

        records = []
        for row_number in data_row_numbers(rows):
            record: Record = {}
            for column_index in range(cols):
                key = self.reader.get_cell_data(sheet_name, column_index, HEADER_ROW_NUMBER)
                record[key] = self.reader.get_cell_data(sheet_name, column_index, row_number)
            records.append(record)

        self.logger.info(f"Loaded {len(records)} datasets from sheet {sheet_name}")
        return records

    def get_data(self, test_case_name: str) -> List[Record]:
        """Datasets for a test case, read from the sheet named after it"""
        return self.materialize(test_case_name)
