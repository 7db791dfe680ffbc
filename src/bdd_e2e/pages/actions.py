import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any, List, Mapping, Optional, Pattern, Protocol, Union, runtime_checkable

from playwright.async_api import Page

from ..core.config import Settings
from ..utils.waits import Waits

logger = logging.getLogger(__name__)


@runtime_checkable
class PageObject(Protocol):
    """Contract every page object satisfies"""
    selectors: Mapping[str, str]
    actions: "PageActions"

    async def open(self) -> None:
        """Navigate to the page and wait for its loaded signal"""
        ...

    async def is_loaded(self) -> bool:
        ...


class PageActions:
    """
    Interaction verbs shared by all page objects.

    Element verbs wait for the target to be visible, act, then log the action
    with its selector. Failures are logged and re-raised; only is_visible and
    is_present turn a failure into False.
    """

    def __init__(self, page: Page, settings: Settings, waits: Optional[Waits] = None):
        self.page = page
        self.settings = settings
        self.waits = waits or Waits(settings)

    async def navigate_to(self, url: str) -> None:
        try:
            await self.page.goto(url, wait_until='networkidle', timeout=self.settings.navigation_timeout)
            logger.info(f"[Navigation] Navigated to: {url}")
        except Exception as e:
            logger.error(f"[Navigation] Failed: {url}: {e}")
            raise

    async def click(self, selector: str) -> None:
        try:
            await self.waits.wait_for_element(self.page, selector)
            await self.page.click(selector)
            logger.info(f"[Click] Clicked: {selector}")
        except Exception:
            logger.error(f"[Click] Failed: {selector}")
            raise

    async def fill(self, selector: str, text: str) -> None:
        try:
            await self.waits.wait_for_element(self.page, selector)
            await self.page.fill(selector, text)
            logger.info(f"[Fill] Filled {selector} with: {text}")
        except Exception:
            logger.error(f"[Fill] Failed: {selector}")
            raise

    async def type(self, selector: str, text: str, delay: int = 50) -> None:
        """Type key by key, for inputs that react to individual key events"""
        try:
            await self.waits.wait_for_element(self.page, selector)
            await self.page.locator(selector).focus()
            await self.page.keyboard.type(text, delay=delay)
            logger.info(f"[Type] Typed in {selector}: {text}")
        except Exception:
            logger.error(f"[Type] Failed: {selector}")
            raise

    async def clear(self, selector: str) -> None:
        try:
            await self.waits.wait_for_element(self.page, selector)
            await self.page.locator(selector).clear()
            logger.info(f"[Clear] Cleared: {selector}")
        except Exception:
            logger.error(f"[Clear] Failed: {selector}")
            raise

    async def get_text(self, selector: str) -> Optional[str]:
        try:
            await self.waits.wait_for_element(self.page, selector)
            text = await self.page.text_content(selector)
            logger.info(f"[getText] {selector}: {text}")
            return text
        except Exception:
            logger.error(f"[getText] Failed: {selector}")
            raise

    async def get_input_value(self, selector: str) -> str:
        try:
            await self.waits.wait_for_element(self.page, selector)
            value = await self.page.input_value(selector)
            logger.info(f"[getValue] {selector}: {value}")
            return value
        except Exception:
            logger.error(f"[getValue] Failed: {selector}")
            raise

    async def is_visible(self, selector: str) -> bool:
        try:
            visible = await self.page.is_visible(selector)
            logger.info(f"[isVisible] {selector}: {visible}")
            return visible
        except Exception as e:
            logger.error(f"[isVisible] Failed: {selector}: {e}")
            return False

    async def is_present(self, selector: str) -> bool:
        try:
            return await self.page.query_selector(selector) is not None
        except Exception as e:
            logger.error(f"[isPresent] Failed: {selector}: {e}")
            return False

    async def wait_for_visible(self, selector: str, timeout: Optional[int] = None) -> None:
        timeout = timeout or self.settings.timeout
        try:
            await self.page.wait_for_selector(selector, state='visible', timeout=timeout)
            logger.info(f"[waitForVisible] {selector}")
        except Exception:
            logger.error(f"[waitForVisible] Timeout: {selector}")
            raise

    async def wait_for_hidden(self, selector: str, timeout: Optional[int] = None) -> None:
        timeout = timeout or self.settings.timeout
        try:
            await self.page.wait_for_selector(selector, state='hidden', timeout=timeout)
            logger.info(f"[waitForHidden] {selector}")
        except Exception:
            logger.error(f"[waitForHidden] Timeout: {selector}")
            raise

    async def select_dropdown(self, selector: str, value: str) -> None:
        try:
            await self.waits.wait_for_element(self.page, selector)
            await self.page.select_option(selector, value)
            logger.info(f"[selectDropdown] {selector}: {value}")
        except Exception:
            logger.error(f"[selectDropdown] Failed: {selector}")
            raise

    async def get_dropdown_value(self, selector: str) -> str:
        try:
            value = await self.page.locator(selector).evaluate("el => el.value")
            logger.info(f"[getDropdownValue] {selector}: {value}")
            return value
        except Exception:
            logger.error(f"[getDropdownValue] Failed: {selector}")
            raise

    async def get_all_text(self, selector: str) -> List[str]:
        try:
            texts = await self.page.locator(selector).all_text_contents()
            logger.info(f"[getAllText] {selector}: {texts}")
            return texts
        except Exception:
            logger.error(f"[getAllText] Failed: {selector}")
            raise

    async def check_checkbox(self, selector: str) -> None:
        try:
            await self.waits.wait_for_element(self.page, selector)
            if not await self.page.is_checked(selector):
                await self.page.check(selector)
            logger.info(f"[checkCheckbox] {selector}")
        except Exception:
            logger.error(f"[checkCheckbox] Failed: {selector}")
            raise

    async def uncheck_checkbox(self, selector: str) -> None:
        try:
            await self.waits.wait_for_element(self.page, selector)
            if await self.page.is_checked(selector):
                await self.page.uncheck(selector)
            logger.info(f"[uncheckCheckbox] {selector}")
        except Exception:
            logger.error(f"[uncheckCheckbox] Failed: {selector}")
            raise

    @property
    def current_url(self) -> str:
        url = self.page.url
        logger.info(f"[currentUrl] {url}")
        return url

    async def get_title(self) -> str:
        title = await self.page.title()
        logger.info(f"[getTitle] {title}")
        return title

    async def wait_for_url(self, url_pattern: Union[str, Pattern], timeout: Optional[int] = None) -> None:
        timeout = timeout or self.settings.timeout
        try:
            await self.page.wait_for_url(url_pattern, timeout=timeout)
            logger.info(f"[waitForUrl] {url_pattern}")
        except Exception:
            logger.error(f"[waitForUrl] Failed: {url_pattern}")
            raise

    async def reload(self) -> None:
        try:
            await self.page.reload(wait_until='networkidle')
            logger.info("[reload] Page reloaded")
        except Exception as e:
            logger.error(f"[reload] Failed: {e}")
            raise

    async def go_back(self) -> None:
        try:
            await self.page.go_back(wait_until='networkidle')
            logger.info("[goBack] Navigated back")
        except Exception as e:
            logger.error(f"[goBack] Failed: {e}")
            raise

    async def press_key(self, key: str) -> None:
        try:
            await self.page.keyboard.press(key)
            logger.info(f"[pressKey] {key}")
        except Exception:
            logger.error(f"[pressKey] Failed: {key}")
            raise

    async def double_click(self, selector: str) -> None:
        try:
            await self.waits.wait_for_element(self.page, selector)
            await self.page.dblclick(selector)
            logger.info(f"[doubleClick] {selector}")
        except Exception:
            logger.error(f"[doubleClick] Failed: {selector}")
            raise

    async def right_click(self, selector: str) -> None:
        try:
            await self.waits.wait_for_element(self.page, selector)
            await self.page.click(selector, button='right')
            logger.info(f"[rightClick] {selector}")
        except Exception:
            logger.error(f"[rightClick] Failed: {selector}")
            raise

    async def hover(self, selector: str) -> None:
        try:
            await self.waits.wait_for_element(self.page, selector)
            await self.page.hover(selector)
            logger.info(f"[hover] {selector}")
        except Exception:
            logger.error(f"[hover] Failed: {selector}")
            raise

    async def scroll_to_element(self, selector: str) -> None:
        try:
            await self.page.locator(selector).scroll_into_view_if_needed()
            logger.info(f"[scrollToElement] {selector}")
        except Exception:
            logger.error(f"[scrollToElement] Failed: {selector}")
            raise

    async def get_element_count(self, selector: str) -> int:
        try:
            count = await self.page.locator(selector).count()
            logger.info(f"[getElementCount] {selector}: {count}")
            return count
        except Exception:
            logger.error(f"[getElementCount] Failed: {selector}")
            raise

    async def take_screenshot(self, name: Optional[str] = None) -> Optional[str]:
        """Full-page screenshot to <reports>/screenshots/<name>.png; never raises"""
        if not self.settings.capture_screenshots:
            return None

        name = safe_file_name(name or f"screenshot-{datetime.now().strftime('%Y-%m-%dT%H-%M-%S')}")
        path = Path(self.settings.reports_dir) / "screenshots" / f"{name}.png"

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await self.page.screenshot(path=str(path), full_page=True)
            logger.info(f"[Screenshot] Saved: {path}")
            return str(path)
        except Exception as e:
            logger.error(f"[Screenshot] Failed: {e}")
            return None

    async def wait_for_loading_complete(self) -> None:
        await self.waits.wait_for_loading_complete(self.page)

    async def execute_script(self, script: str, arg: Any = None) -> Any:
        try:
            result = await self.page.evaluate(script, arg)
            logger.info(f"[executeScript] Result: {result}")
            return result
        except Exception as e:
            logger.error(f"[executeScript] Failed: {e}")
            raise


def safe_file_name(name: str) -> str:
    """Replace characters that are unsafe in file names"""
    return re.sub(r'[^\w\-. ]', '_', name).strip() or "unnamed"
