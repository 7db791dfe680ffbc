"""Generic browser steps: navigation, viewport, page health"""
import logging
import re

from ..executor.step_definitions import given, when, then
from ..executor.world import World

logger = logging.getLogger(__name__)

VIEWPORT_PATTERN = re.compile(r'^\s*(\d+)\s*[xX]\s*(\d+)\s*$')


def parse_viewport(value: str):
    """Parse a "WxH" string into a Playwright viewport dict"""
    match = VIEWPORT_PATTERN.match(value)
    if not match:
        raise ValueError(f"Viewport must look like 1280x720, got '{value}'")
    return {'width': int(match.group(1)), 'height': int(match.group(2))}


@given('user navigates to base URL')
async def navigate_to_base_url(world: World):
    await world.navigate_to(world.settings.base_url)
    logger.info("[Steps] User navigated to base URL")


@when('user resizes viewport to {string}')
async def resize_viewport(world: World, viewport: str):
    size = parse_viewport(viewport)
    await world.page.set_viewport_size(size)
    logger.info(f"[Steps] Viewport resized to {size['width']}x{size['height']}")


@then('page should load within {string} seconds')
async def page_loads_within(world: World, seconds: str):
    timeout_ms = int(float(seconds) * 1000)
    try:
        await world.page.wait_for_load_state('networkidle', timeout=timeout_ms)
    except Exception as e:
        raise AssertionError(f"Page did not load within {seconds} seconds: {e}") from e
    logger.info(f"[Steps] Page loaded within {seconds} seconds")


@then('browser console should have no errors')
async def console_has_no_errors(world: World):
    errors = world.state.console_errors
    assert not errors, f"Browser console reported {len(errors)} error(s): {errors}"
    logger.info("[Steps] Browser console has no errors")


@then('all buttons should be clickable')
async def buttons_clickable(world: World):
    buttons = await world.page.locator('button').count()
    assert buttons > 0, "No buttons found on the page"
    logger.info(f"[Steps] Found {buttons} buttons")
