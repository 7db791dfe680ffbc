"""Login, logout and credential steps"""
import logging
import re

from ..executor.step_definitions import given, when, then
from ..executor.world import World
from ..pages import DashboardPage, LoginPage

logger = logging.getLogger(__name__)

REDIRECT_TIMEOUT = 5000


@given('user navigates to login page')
async def navigate_to_login_page(world: World):
    login_page = LoginPage(world.page, world.settings, world.waits)
    await login_page.open()
    world.login_page = login_page
    world.state.login_url = world.current_url
    logger.info("[Steps] User navigated to login page")


@given('user is logged in with username {string} and password {string}')
async def logged_in_as(world: World, username: str, password: str):
    login_page = LoginPage(world.page, world.settings, world.waits)
    await login_page.open()
    await login_page.login(username, password)

    dashboard_page = DashboardPage(world.page, world.settings, world.waits)
    await dashboard_page.wait_until_loaded()

    world.login_page = login_page
    world.dashboard_page = dashboard_page
    world.state.username = username
    logger.info(f"[Steps] User logged in as {username}")


@when('user enters username {string} and password {string}')
async def enter_credentials(world: World, username: str, password: str):
    await world.login_page.enter_username(username)
    await world.login_page.enter_password(password)
    world.state.username = username
    world.set_test_data('username', username)
    logger.info("[Steps] User entered credentials")


@when('user enters username {string}')
async def enter_username(world: World, username: str):
    await world.login_page.enter_username(username)
    world.state.username = username
    world.set_test_data('username', username)
    logger.info(f"[Steps] User entered username: {username}")


@when('user enters password {string}')
async def enter_password(world: World, password: str):
    await world.login_page.enter_password(password)
    logger.info("[Steps] User entered password")


@when('user leaves username empty')
async def leave_username_empty(world: World):
    await world.login_page.clear_username()
    logger.info("[Steps] Username field left empty")


@when('user leaves password empty')
async def leave_password_empty(world: World):
    await world.login_page.clear_password()
    logger.info("[Steps] Password field left empty")


@when('user enters generated user credentials')
async def enter_generated_credentials(world: World):
    user = world.get_test_data('user') or world.data_builder.generate_user()
    world.set_test_data('user', user)
    await enter_credentials(world, user['username'], user['password'])


@when('user clicks login button')
async def click_login_button(world: World):
    await world.login_page.click_login_button()
    await world.page.wait_for_load_state('networkidle')
    logger.info("[Steps] User clicked login button")


@when('user checks remember me checkbox')
async def check_remember_me(world: World):
    await world.login_page.check_remember_me()
    logger.info("[Steps] User checked remember me")


@when('user clicks forgot password link')
async def click_forgot_password(world: World):
    await world.login_page.click_forgot_password()
    logger.info("[Steps] User clicked forgot password link")


@when('user clicks logout button')
async def click_logout(world: World):
    await world.dashboard_page.click_logout()
    await world.page.wait_for_load_state('networkidle')
    logger.info("[Steps] User clicked logout button")


@then('user should be redirected to dashboard')
async def redirected_to_dashboard(world: World):
    dashboard_page = DashboardPage(world.page, world.settings, world.waits)
    await dashboard_page.wait_until_loaded(timeout=REDIRECT_TIMEOUT)
    assert await dashboard_page.is_loaded(), "Dashboard did not load"
    world.dashboard_page = dashboard_page
    logger.info("[Steps] User redirected to dashboard")


@then('user should remain on login page')
async def remain_on_login_page(world: World):
    assert await world.login_page.is_loaded(), "Login form is no longer displayed"

    expected = world.state.login_url
    if expected is not None:
        assert world.current_url == expected, f"URL changed from {expected} to {world.current_url}"
    logger.info("[Steps] User remained on login page")


@then('user should be redirected to login page')
async def redirected_to_login_page(world: World):
    login_page = LoginPage(world.page, world.settings, world.waits)
    await login_page.actions.wait_for_url(re.compile('login'), timeout=REDIRECT_TIMEOUT)
    assert await login_page.is_loaded(), "Login page did not load"
    world.login_page = login_page
    logger.info("[Steps] User redirected to login page")


@then('user should be redirected to password reset page')
async def redirected_to_password_reset(world: World):
    pattern = re.compile('password|reset|forgot')
    await world.page.wait_for_url(pattern, timeout=REDIRECT_TIMEOUT)
    assert pattern.search(world.current_url), f"Unexpected URL: {world.current_url}"
    logger.info("[Steps] User redirected to password reset page")


@then('error message should display {string}')
async def error_message_displayed(world: World, expected_message: str):
    assert await world.login_page.is_error_message_visible(), "Error message is not visible"
    error_message = await world.login_page.get_error_message() or ""
    assert expected_message in error_message, f"'{expected_message}' not in '{error_message}'"
    logger.info(f"[Steps] Error message verified: {error_message}")


@then('validation error should display {string}')
async def validation_error_displayed(world: World, expected_message: str):
    assert await world.login_page.is_error_message_visible(), "Validation error is not visible"
    error_message = await world.login_page.get_error_message() or ""
    assert expected_message in error_message, f"'{expected_message}' not in '{error_message}'"
    logger.info(f"[Steps] Validation error verified: {error_message}")


@then('remember me preference should be saved')
async def remember_me_saved(world: World):
    cookies = await world.context.cookies()
    has_remember_me = any('remember' in cookie['name'].lower() for cookie in cookies)
    assert has_remember_me or cookies, "No remember-me cookie was stored"
    logger.info("[Steps] Remember me preference verified")


@then('user session should be cleared')
async def session_cleared(world: World):
    cookies = await world.context.cookies()
    session_cookies = [cookie for cookie in cookies if 'session' in cookie['name'].lower()]
    assert not session_cookies, f"Session cookies still present: {[c['name'] for c in session_cookies]}"
    logger.info("[Steps] User session cleared")


@then('cached user data should be cleared')
async def cached_user_data_cleared(world: World):
    local_storage = await world.page.evaluate("() => JSON.stringify(window.localStorage)")
    assert 'user' not in local_storage and 'currentUser' not in local_storage, "User data still in localStorage"
    logger.info("[Steps] Cached user data cleared")


@then('user cookies should be deleted')
async def cookies_deleted(world: World):
    cookies = await world.context.cookies()
    assert not cookies, f"Cookies still present: {[c['name'] for c in cookies]}"
    logger.info("[Steps] User cookies deleted")
