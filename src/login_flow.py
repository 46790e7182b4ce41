"""
Login Flow
Drives the app login screen with credentials taken from a dataset
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

from appium.webdriver.common.appiumby import AppiumBy
from selenium.common.exceptions import TimeoutException
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from dataset_provider import Record

Locator = Tuple[str, str]

LOCATOR_STRATEGIES = {
    'id': AppiumBy.ID,
    'xpath': AppiumBy.XPATH,
    'accessibility_id': AppiumBy.ACCESSIBILITY_ID,
    'class': AppiumBy.CLASS_NAME,
}


@dataclass
class LoginLocators:
    """Login screen locators as (strategy, value) pairs"""
    username: Locator = ('xpath', '(//android.widget.EditText)[1]')
    password: Locator = ('xpath', '(//android.widget.EditText)[2]')
    login_button: Locator = ('accessibility_id', 'Login')
    logout_button: Optional[Locator] = None


class LoginFlow:
    def __init__(self, driver, locators: Optional[LoginLocators] = None,
                 screenshots_dir="screenshots", wait_time: int = 10):
        self.driver = driver
        self.locators = locators or LoginLocators()
        self.screenshots_dir = Path(screenshots_dir)
        self.wait_time = wait_time
        self.logger = logging.getLogger(__name__)

    def _find_element(self, locator: Locator):
        strategy, value = locator
        if strategy not in LOCATOR_STRATEGIES:
            raise ValueError(f"Unknown locator strategy: {strategy}")
        if not value or not value.strip():
            raise ValueError(f"Locator value cannot be empty for strategy {strategy}")

        return WebDriverWait(self.driver, self.wait_time).until(
            EC.presence_of_element_located((LOCATOR_STRATEGIES[strategy], value))
        )

    def enter(self, locator: Locator, text: str):
        """Focus, clear and type into a field"""
        element = self._find_element(locator)
        element.click()
        element.clear()
        element.send_keys(text)

    def click(self, locator: Locator):
        self._find_element(locator).click()

    def perform_login(self, username: str, password: str):
        """
        Enter credentials and tap the login button

        Raises:
            AssertionError: A login screen element could not be found
        """
        self.logger.info(f"Logging in as {username}")
        try:
            self.enter(self.locators.username, username)
            self.enter(self.locators.password, password)
            self.click(self.locators.login_button)
        except TimeoutException as e:
            raise AssertionError(f"Login screen element not found: {e.msg}") from e

    def logout(self):
        if self.locators.logout_button is None:
            self.logger.debug("No logout locator configured, skipping logout")
            return
        self.click(self.locators.logout_button)
        self.logger.info("Logged out")

    def run(self, record: Record):
        """Dataset body: log in with the record's username/password, then log out"""
        self.perform_login(record.get('username', ''), record.get('password', ''))
        self.logout()

    def take_screenshot(self, name: str) -> Optional[str]:
        """Save a screenshot; returns its path or None on failure"""
        try:
            self.screenshots_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filepath = self.screenshots_dir / f"failure_{name}_{timestamp}.png"
            self.driver.save_screenshot(str(filepath))
            return str(filepath)
        except Exception as e:
            self.logger.error(f"Failed to take screenshot: {e}")
            return None

    def screenshot_on_failure(self, test_name: str, dataset_index: int):
        """Failure hook for DataDrivenRunner"""
        self.take_screenshot(f"{test_name}_{dataset_index}")
