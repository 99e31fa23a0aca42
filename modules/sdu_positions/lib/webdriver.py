# sdu_positions/webdriver.py
"""
Render the listings page in headless Chrome and hand back the table's inner
HTML. The browser is a remote ChromeDriver driven through selenium:

    chromedriver --port=9515 &
    html = fetch_table_html(Settings())
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from selenium import webdriver as selenium_webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from urllib3.exceptions import HTTPError as DriverTransportError

from .config import Settings

LOG = logging.getLogger(__name__)


class WebDriverError(Exception):
    """Raised when the driver is unreachable or a browser command fails."""


def chrome_options(chrome_binary: str | None = None) -> Options:
    """Headless Chrome options, optionally pinned to a specific binary."""
    options = Options()
    options.add_argument("--headless")
    if chrome_binary:
        options.binary_location = chrome_binary
    return options


def open_driver(settings: Settings) -> WebDriver:
    """Start a Chrome session on the ChromeDriver at settings.webdriver_url."""
    try:
        driver = selenium_webdriver.Remote(
            command_executor=settings.webdriver_url,
            options=chrome_options(settings.chrome_binary),
        )
    except DriverTransportError as e:
        raise WebDriverError(f"Connection to WebDriver at {settings.webdriver_url} failed: {e}") from e
    except WebDriverException as e:
        raise WebDriverError(f"Could not start Chrome at {settings.webdriver_url}: {e.msg}") from e
    driver.set_page_load_timeout(settings.request_timeout)
    return driver


def fetch_table_html(
    settings: Settings,
    *,
    driver_factory: Callable[[Settings], WebDriver] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """
    Load the listings page and return the inner HTML of the element matched
    by settings.table_selector.

    The page fills the table client-side, so we wait render_wait_seconds
    after navigation before looking for it. The browser is always quit.
    """
    driver = (driver_factory or open_driver)(settings)
    try:
        driver.get(settings.listings_url)
        if settings.render_wait_seconds > 0:
            sleep(settings.render_wait_seconds)
        table = driver.find_element(By.CSS_SELECTOR, settings.table_selector)
        html = table.get_attribute("innerHTML")
    except WebDriverException as e:
        raise WebDriverError(f"{type(e).__name__}: {e.msg or e}") from e
    except DriverTransportError as e:
        raise WebDriverError(f"Connection to WebDriver at {settings.webdriver_url} failed: {e}") from e
    finally:
        _quit(driver)

    if html is None:
        raise WebDriverError(f"{settings.table_selector!r} has no innerHTML")
    return html


def _quit(driver: WebDriver) -> None:
    try:
        driver.quit()
    except (WebDriverException, DriverTransportError):
        LOG.debug("WebDriver quit failed", exc_info=True)
