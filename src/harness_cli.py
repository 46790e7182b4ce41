#!/usr/bin/env python3
"""
Data-Driven Mobile Test Harness
Inspect test data and run modes, or run the login test case on a device
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from data_driven_runner import DataDrivenRunner
from driver_factory import DriverError, create_driver
from excel_reader import LoadError
from harness_config import ConfigError, load_config
from harness_context import HarnessContext
from login_flow import LoginFlow
from results_export import export_to_csv, export_to_excel
from row_lookup import RUNMODE_COLUMN, TCID_COLUMN, data_row_numbers

LOGIN_TEST_CASE = "TC_01_VerifyLogin"

logger = logging.getLogger(__name__)


def setup_logging(logs_dir: Path, verbose: bool = False):
    logs_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(logs_dir / f'harness_{datetime.now().strftime("%Y%m%d")}.log', encoding='utf-8'),
            logging.StreamHandler()
        ]
    )


def show_datasets(context: HarnessContext, args) -> int:
    records = context.datasets.materialize(args.sheet)
    if not records:
        print(f"No datasets in sheet {args.sheet}")
        return 1
    for index, record in enumerate(records, 1):
        allowed = "RUN " if context.gate.should_run(args.sheet, record) else "SKIP"
        print(f"[{allowed}] {index}: {record}")
    return 0


def check_test_case(context: HarnessContext, args) -> int:
    runnable = context.gate.is_test_runnable(args.test_case)
    print(f"{args.test_case}: {'Y' if runnable else 'N'}")
    return 0 if runnable else 1


def show_suite(context: HarnessContext, args) -> int:
    sheet = context.config.control_sheet
    if not context.reader.sheet_exists(sheet):
        print(f"Control sheet {sheet} not found")
        return 1
    for row_number in data_row_numbers(context.reader.row_count(sheet)):
        tcid = context.reader.get_cell_data(sheet, TCID_COLUMN, row_number)
        runmode = context.reader.get_cell_data(sheet, RUNMODE_COLUMN, row_number)
        print(f"{tcid}\t{runmode}")
    return 0


def run_login(context: HarnessContext, args) -> int:
    driver = create_driver(context.config, args.device)
    try:
        flow = LoginFlow(driver, screenshots_dir=context.config.screenshots_dir,
                         wait_time=context.config.implicit_wait)
        runner = DataDrivenRunner(context, on_failure=flow.screenshot_on_failure)
        runner.run_test_case(args.test_case, flow.run)
    finally:
        driver.quit()

    summary = runner.summary()
    print(f"Passed: {summary['passed']}  Skipped: {summary['skipped']}  "
          f"Failed: {summary['failed']}  Error: {summary['error']}")

    reports_dir = context.config.reports_dir
    reports_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    if args.format == 'csv':
        export_to_csv(runner.results, reports_dir / f"results_{stamp}.csv")
    else:
        export_to_excel(runner.results, reports_dir / f"results_{stamp}.xlsx")

    return 0 if summary['failed'] == 0 and summary['error'] == 0 else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Data-driven mobile test harness")
    parser.add_argument('--config', help="JSON configuration file")
    parser.add_argument('--data', help="Test data workbook (overrides Datafilepath)")
    parser.add_argument('-v', '--verbose', action='store_true')
    subparsers = parser.add_subparsers(dest='command', required=True)

    datasets = subparsers.add_parser('datasets', help="List the datasets of a sheet")
    datasets.add_argument('sheet')
    datasets.set_defaults(handler=show_datasets)

    check = subparsers.add_parser('check', help="Show the run mode of a test case")
    check.add_argument('test_case')
    check.set_defaults(handler=check_test_case)

    suite = subparsers.add_parser('suite', help="List the control sheet")
    suite.set_defaults(handler=show_suite)

    login = subparsers.add_parser('login', help="Run the login test case on a device")
    login.add_argument('--test-case', default=LOGIN_TEST_CASE)
    login.add_argument('--device', help="Device serial (default: first adb device)")
    login.add_argument('--format', choices=['excel', 'csv'], default='excel')
    login.set_defaults(handler=run_login)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2

    setup_logging(config.logs_dir, args.verbose)
    if args.data:
        config.settings["Datafilepath"] = str(Path(args.data).resolve())

    try:
        context = HarnessContext.from_config(config)
        return args.handler(context, args)
    except LoadError as e:
        logger.error(str(e))
        print(f"❌ {e}", file=sys.stderr)
        return 2
    except DriverError as e:
        logger.error(str(e))
        print(f"❌ {e}", file=sys.stderr)
        return 3


if __name__ == "__main__":
    sys.exit(main())
