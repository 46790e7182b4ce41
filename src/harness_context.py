"""
Harness Context
Process-wide objects built once at startup and handed to the runner
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dataset_provider import DatasetProvider
from excel_reader import ExcelReader
from execution_gate import ExecutionGate
from harness_config import HarnessConfig, load_config

logger = logging.getLogger(__name__)


@dataclass
class HarnessContext:
    """Owns the loaded workbook and the components reading from it.

    The workbook is read-only after load. Parallel runners should build
    one context per worker rather than share one.
    """
    config: HarnessConfig
    reader: ExcelReader
    gate: ExecutionGate
    datasets: DatasetProvider

    @classmethod
    def from_config(cls, config: HarnessConfig) -> "HarnessContext":
        """Load the configured workbook; raises LoadError if it cannot be read"""
        reader = ExcelReader(config.data_file)
        logger.info(f"Harness context ready, control sheet {config.control_sheet}")
        return cls(
            config=config,
            reader=reader,
            gate=ExecutionGate(reader, config.control_sheet),
            datasets=DatasetProvider(reader),
        )

    @classmethod
    def from_config_file(cls, config_path: Union[str, Path, None] = None,
                         data_file: Union[str, Path, None] = None,
                         base_dir: Optional[Path] = None) -> "HarnessContext":
        config = load_config(config_path, base_dir=base_dir)
        if data_file is not None:
            config.settings["Datafilepath"] = str(data_file)
        return cls.from_config(config)
