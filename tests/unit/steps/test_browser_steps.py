import httpx
import pytest
from unittest.mock import Mock, AsyncMock
from bdd_e2e.executor import World
from bdd_e2e.steps import api_steps, browser_steps, dashboard_steps
from bdd_e2e.utils import ApiClient


@pytest.fixture
def world(settings, session, page):
    world = World(settings, session, 'browser')
    world.context = AsyncMock()
    world.attach_page(page)
    return world


class TestBrowserSteps:
    """Test generic browser steps"""

    def test_parse_viewport(self):
        assert browser_steps.parse_viewport('375x667') == {'width': 375, 'height': 667}
        assert browser_steps.parse_viewport(' 1920 X 1080 ') == {'width': 1920, 'height': 1080}

        with pytest.raises(ValueError):
            browser_steps.parse_viewport('wide')

    @pytest.mark.asyncio
    async def test_resize_viewport(self, world, page):
        await browser_steps.resize_viewport(world, '375x667')
        page.set_viewport_size.assert_awaited_once_with({'width': 375, 'height': 667})

    @pytest.mark.asyncio
    async def test_navigate_to_base_url(self, world, page):
        await browser_steps.navigate_to_base_url(world)
        assert page.goto.await_args.args[0] == 'https://example.com'

    @pytest.mark.asyncio
    async def test_page_loads_within(self, world, page):
        await browser_steps.page_loads_within(world, '2.5')
        page.wait_for_load_state.assert_awaited_once_with('networkidle', timeout=2500)

    @pytest.mark.asyncio
    async def test_page_load_timeout_fails_step(self, world, page):
        page.wait_for_load_state.side_effect = TimeoutError('still loading')

        with pytest.raises(AssertionError, match='within 3 seconds'):
            await browser_steps.page_loads_within(world, '3')

    @pytest.mark.asyncio
    async def test_console_errors_since_page_creation(self, world, page):
        await browser_steps.console_has_no_errors(world)

        listener = page.on.call_args.args[1]
        listener(Mock(type='error', text='Failed to load resource'))

        with pytest.raises(AssertionError, match='Failed to load resource'):
            await browser_steps.console_has_no_errors(world)

    @pytest.mark.asyncio
    async def test_buttons_clickable(self, world, page):
        page.locator.return_value.count.return_value = 2
        await browser_steps.buttons_clickable(world)

        page.locator.return_value.count.return_value = 0
        with pytest.raises(AssertionError):
            await browser_steps.buttons_clickable(world)


class TestDashboardSteps:
    """Test dashboard steps"""

    @pytest.mark.asyncio
    async def test_on_dashboard(self, world, page):
        await dashboard_steps.on_dashboard(world)

        assert page.goto.await_args.args[0] == 'https://example.com/dashboard'
        assert world.state.dashboard_page is not None

    @pytest.mark.asyncio
    async def test_welcome_message(self, world, page):
        page.text_content.return_value = 'Welcome back, alice'

        await dashboard_steps.welcome_message_displayed(world, 'alice')
        with pytest.raises(AssertionError):
            await dashboard_steps.welcome_message_displayed(world, 'bob')

    @pytest.mark.asyncio
    async def test_direct_navigation_failure_is_tolerated(self, world, page):
        page.goto.side_effect = RuntimeError('net::ERR_ABORTED')
        await dashboard_steps.navigate_to_dashboard_directly(world)

    @pytest.mark.asyncio
    async def test_visibility_steps(self, world, page):
        page.is_visible.return_value = True
        await dashboard_steps.user_menu_visible(world)
        await dashboard_steps.settings_button_visible(world)
        await dashboard_steps.logout_button_visible(world)

        page.is_visible.return_value = False
        with pytest.raises(AssertionError, match='Logout button'):
            await dashboard_steps.logout_button_visible(world)

    @pytest.mark.asyncio
    async def test_click_profile_menu(self, world, page):
        await dashboard_steps.click_profile_menu(world)
        page.click.assert_awaited_once_with('[data-testid="user-menu"]')


class TestApiSteps:
    """Test API steps with a mocked transport"""

    @pytest.fixture
    def api_world(self, world, settings):
        def handler(request):
            status = 200 if request.url.path == '/health' else 404
            return httpx.Response(status, json={})

        world._api_client = ApiClient(settings, transport=httpx.MockTransport(handler))
        return world

    @pytest.mark.asyncio
    async def test_generate_user(self, world):
        await api_steps.generate_user(world)
        assert world.get_test_data('user')['password'] == 'TestPassword@123'

    @pytest.mark.asyncio
    async def test_status_recorded(self, api_world):
        await api_steps.send_request(api_world, 'get', '/health')
        await api_steps.response_status_is(api_world, 200)

    @pytest.mark.asyncio
    async def test_error_status_recorded(self, api_world):
        await api_steps.send_request(api_world, 'GET', '/missing')

        assert api_world.get_scenario_data('api_status') == 404
        with pytest.raises(AssertionError):
            await api_steps.response_status_is(api_world, 200)
