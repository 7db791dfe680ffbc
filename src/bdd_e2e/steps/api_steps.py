"""API and test data steps"""
import logging

from ..core.exceptions import HttpError
from ..executor.step_definitions import given, when, then
from ..executor.world import World

logger = logging.getLogger(__name__)


@given('a random user is generated')
async def generate_user(world: World):
    world.set_test_data('user', world.data_builder.generate_user())


@when('user sends {word} request to {string}')
async def send_request(world: World, method: str, path: str):
    method = method.upper()
    try:
        response = await world.api_client.retry_request(
            lambda: world.api_client.request(method, path),
            max_attempts=world.settings.retries + 1,
        )
        status = response.status_code
    except HttpError as e:
        # Error statuses are an outcome for the Then step to check
        status = e.status_code
    world.set_scenario_data('api_status', status)
    logger.info(f"[Steps] {method} {path} -> {status}")


@then('API response status should be {int}')
async def response_status_is(world: World, expected: int):
    actual = world.get_scenario_data('api_status')
    assert actual == expected, f"Expected status {expected}, got {actual}"
