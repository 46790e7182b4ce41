"""
Data-Driven Test Runner
Runs a test body once per dataset of a test case, applying run-mode
gates and recording passed / skipped / failed / error per dataset
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from dataset_provider import Record
from execution_gate import GateDenied
from harness_context import HarnessContext


class RunStatus(Enum):
    """Dataset outcome"""
    PASSED = "passed"
    SKIPPED = "skipped"
    FAILED = "failed"
    ERROR = "error"


@dataclass
class DatasetResult:
    test_name: str
    dataset_index: int
    status: RunStatus
    message: str = ""
    data: Record = field(default_factory=dict)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def duration(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()

    def to_dict(self, hidden_fields=("password",)) -> Dict[str, Any]:
        """Flat row for export, masking sensitive dataset fields"""
        row = {
            'test_name': self.test_name,
            'dataset': self.dataset_index,
            'status': self.status.value,
            'message': self.message,
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'duration_seconds': self.duration,
        }
        for key, value in self.data.items():
            row[f"data.{key}"] = '***' if key.lower() in hidden_fields else value
        return row


DatasetBody = Callable[[Record], None]


class DataDrivenRunner:
    def __init__(self, context: HarnessContext, on_failure: Optional[Callable[[str, int], None]] = None):
        """
        Args:
            context: Harness context holding the test data
            on_failure: Called with (test_name, dataset_index) when a dataset
                fails or errors, e.g. to capture a screenshot
        """
        self.context = context
        self.on_failure = on_failure
        self.logger = logging.getLogger(__name__)
        self.results: List[DatasetResult] = []

    def run_test_case(self, test_name: str, body: DatasetBody) -> List[DatasetResult]:
        """
        Run ``body`` for every dataset in the sheet named ``test_name``

        A skipped, failed or erroring dataset never stops the remaining ones.

        Returns:
            Results of this test case, in dataset order
        """
        records = self.context.datasets.get_data(test_name)
        self.logger.info(f"Starting test case: {test_name} ({len(records)} datasets)")

        case_results = []
        for index, record in enumerate(records, 1):
            result = self.run_dataset(test_name, index, record, body)
            case_results.append(result)
            self.logger.info(f"{test_name} dataset {index}: {result.status.value.upper()}")

        self.results.extend(case_results)
        return case_results

    def run_dataset(self, test_name: str, index: int, record: Record, body: DatasetBody) -> DatasetResult:
        result = DatasetResult(test_name=test_name, dataset_index=index,
                               status=RunStatus.PASSED, data=dict(record),
                               start_time=datetime.now())
        try:
            self.context.gate.check_execution(test_name, record)
            body(record)
        except GateDenied as e:
            result.status = RunStatus.SKIPPED
            result.message = str(e)
        except AssertionError as e:
            result.status = RunStatus.FAILED
            result.message = str(e) or "Assertion failed"
            self._report_failure(test_name, index)
        except Exception as e:
            result.status = RunStatus.ERROR
            result.message = f"Error: {str(e)}"
            self.logger.error(f"{test_name} dataset {index} failed with error: {e}")
            self._report_failure(test_name, index)

        result.end_time = datetime.now()
        return result

    def _report_failure(self, test_name: str, index: int):
        if not self.on_failure:
            return
        try:
            self.on_failure(test_name, index)
        except Exception as e:
            self.logger.error(f"Failure hook raised for {test_name} dataset {index}: {e}")

    def summary(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in RunStatus}
        for result in self.results:
            counts[result.status.value] += 1
        counts['total'] = len(self.results)
        return counts
