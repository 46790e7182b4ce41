"""
Appium Driver Factory
Checks the Appium server, finds the connected device and opens a
UiAutomator2 session configured from the harness settings
"""

import logging
import subprocess
from typing import List, Optional

import requests
from appium import webdriver
from appium.options.android import UiAutomator2Options

from harness_config import HarnessConfig

logger = logging.getLogger(__name__)

DEFAULT_DEVICE_NAME = "Android Device"


class DriverError(Exception):
    """Appium server unreachable or session could not be created"""


def check_server_running(server_url: str, timeout: int = 3) -> bool:
    """Check if the Appium server answers on /status"""
    try:
        response = requests.get(f"{server_url.rstrip('/')}/status", timeout=timeout)
        return response.status_code == 200
    except requests.RequestException:
        return False


def list_devices() -> List[str]:
    """Serials of devices listed by 'adb devices' in the 'device' state"""
    try:
        result = subprocess.run(['adb', 'devices'], capture_output=True, text=True, timeout=10)
    except (subprocess.TimeoutExpired, FileNotFoundError) as e:
        logger.warning(f"ADB not available: {e}")
        return []

    devices = []
    if result.returncode == 0:
        for line in result.stdout.strip().split('\n')[1:]:
            if '\tdevice' in line:
                devices.append(line.split('\t')[0].strip())
    return devices


def get_device_name() -> str:
    devices = list_devices()
    if devices:
        logger.info(f"Found device: {devices[0]}")
        return devices[0]
    return DEFAULT_DEVICE_NAME


def build_options(config: HarnessConfig, device_name: Optional[str] = None) -> UiAutomator2Options:
    """UiAutomator2 capabilities from the harness settings"""
    options = UiAutomator2Options()
    options.platform_name = config.get("platformName", "Android")
    options.automation_name = config.get("automationName", "UiAutomator2")
    options.device_name = device_name or get_device_name()
    if config.get("appPackage"):
        options.app_package = config["appPackage"]
    if config.get("appActivity"):
        options.app_activity = config["appActivity"]
    if config.get("Apppath"):
        options.app = config["Apppath"]
    options.auto_grant_permissions = True
    options.skip_device_initialization = True
    options.skip_server_installation = True
    options.skip_unlock = True
    options.ignore_hidden_api_policy_error = True
    options.no_reset = True
    options.adb_exec_timeout = 120000
    options.new_command_timeout = int(config.get("Newcommandtimeout", 100))
    options.set_capability("appium:ignoreUnimportantViews", True)
    return options


def create_driver(config: HarnessConfig, device_name: Optional[str] = None):
    """
    Open an Appium session

    Args:
        config: Harness settings (server URL, app and timeouts)
        device_name: Device serial; discovered through adb when omitted

    Returns:
        Appium WebDriver with the configured implicit wait

    Raises:
        DriverError: Server not running or session creation failed
    """
    server_url = config.server_url
    if not check_server_running(server_url):
        raise DriverError(f"Appium server is not running at {server_url}")

    options = build_options(config, device_name)
    try:
        driver = webdriver.Remote(server_url, options=options)
    except Exception as e:
        raise DriverError(f"Failed to create Appium session: {e}") from e

    driver.implicitly_wait(config.implicit_wait)
    logger.info(f"Appium session started on {options.device_name}")
    return driver
