"""
Results Export
Writes data-driven run results to CSV or Excel for later review
"""

import logging
from pathlib import Path
from typing import Dict, List, Sequence, Union

import pandas as pd
from openpyxl.styles import Font, PatternFill

from data_driven_runner import DatasetResult, RunStatus

logger = logging.getLogger(__name__)

STATUS_COLORS = {
    RunStatus.PASSED.value: 'CCFFCC',   # Light green
    RunStatus.SKIPPED.value: 'FFFFCC',  # Light yellow
    RunStatus.FAILED.value: 'FFCCCC',   # Light red
    RunStatus.ERROR.value: 'FFCC99',    # Light orange
}


def results_to_dataframe(results: Sequence[DatasetResult]) -> pd.DataFrame:
    return pd.DataFrame([result.to_dict() for result in results])


def create_summary_data(df: pd.DataFrame) -> List[Dict]:
    """Summary rows: totals per status and per test case"""
    if df.empty:
        return []

    summary = [{'Metric': 'Total Datasets', 'Value': len(df)}]
    for status in RunStatus:
        summary.append({'Metric': status.value.capitalize(),
                        'Value': int((df['status'] == status.value).sum())})
    summary.append({'Metric': 'Test Cases', 'Value': df['test_name'].nunique()})
    return summary


def export_to_csv(results: Sequence[DatasetResult], output_path: Union[str, Path]) -> int:
    """
    Export results to CSV

    Returns:
        Number of rows written
    """
    df = results_to_dataframe(results)
    df.to_csv(output_path, index=False)
    logger.info(f"Exported {len(df)} results to CSV: {output_path}")
    return len(df)


def export_to_excel(results: Sequence[DatasetResult], output_path: Union[str, Path]) -> int:
    """
    Export results to Excel with a summary sheet and status colouring

    Returns:
        Number of result rows written
    """
    df = results_to_dataframe(results)

    with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
        df.to_excel(writer, sheet_name='Results', index=False)
        pd.DataFrame(create_summary_data(df), columns=['Metric', 'Value']).to_excel(
            writer, sheet_name='Summary', index=False)

        worksheet = writer.sheets['Results']
        for cell in worksheet[1]:
            cell.font = Font(bold=True)

        if not df.empty:
            status_col = df.columns.get_loc('status') + 1
            for row_num in range(2, len(df) + 2):
                color = STATUS_COLORS.get(worksheet.cell(row=row_num, column=status_col).value)
                if color:
                    worksheet.cell(row=row_num, column=status_col).fill = PatternFill(
                        start_color=color, end_color=color, fill_type="solid")

    logger.info(f"Exported {len(df)} results to Excel: {output_path}")
    return len(df)
