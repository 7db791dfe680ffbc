import json
import httpx
import pytest
from bdd_e2e.core import Settings, HttpError
from bdd_e2e.utils import ApiClient


def make_client(handler):
    return ApiClient(Settings(api_url="https://api.test"), transport=httpx.MockTransport(handler))


class TestApiClient:
    """Test the httpx-backed API client"""

    @pytest.mark.asyncio
    async def test_get_uses_base_url_and_json_header(self):
        seen = {}

        def handler(request):
            seen['url'] = str(request.url)
            seen['content_type'] = request.headers['content-type']
            return httpx.Response(200, json={'ok': True})

        async with make_client(handler) as client:
            response = await client.get('/health')

        assert response.json() == {'ok': True}
        assert seen['url'] == 'https://api.test/health'
        assert seen['content_type'] == 'application/json'

    @pytest.mark.asyncio
    async def test_post_sends_json_body(self):
        def handler(request):
            return httpx.Response(201, json=json.loads(request.content))

        async with make_client(handler) as client:
            response = await client.post('/users', {'username': 'alice'})

        assert response.status_code == 201
        assert response.json() == {'username': 'alice'}

    @pytest.mark.asyncio
    async def test_put_and_delete(self):
        methods = []

        def handler(request):
            methods.append(request.method)
            return httpx.Response(204)

        async with make_client(handler) as client:
            await client.put('/users/1', {'name': 'bob'})
            await client.delete('/users/1')

        assert methods == ['PUT', 'DELETE']

    @pytest.mark.asyncio
    async def test_error_status_raises_http_error(self):
        def handler(request):
            return httpx.Response(404, json={'error': 'not found'})

        async with make_client(handler) as client:
            with pytest.raises(HttpError) as exc_info:
                await client.get('/missing')

        assert exc_info.value.status_code == 404
        assert exc_info.value.body == {'error': 'not found'}

    @pytest.mark.asyncio
    async def test_error_body_logged(self, caplog):
        def handler(request):
            return httpx.Response(500, text='server exploded')

        async with make_client(handler) as client:
            with caplog.at_level('ERROR', logger='bdd_e2e'):
                with pytest.raises(HttpError):
                    await client.get('/boom')

        assert any('Error 500: server exploded' in record.getMessage() for record in caplog.records)

    @pytest.mark.asyncio
    async def test_transport_errors_propagate(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(httpx.ConnectError):
                await client.get('/health')

    @pytest.mark.asyncio
    async def test_retry_request(self):
        responses = iter([httpx.Response(503), httpx.Response(503), httpx.Response(200, json={})])

        def handler(request):
            return next(responses)

        async with make_client(handler) as client:
            response = await client.retry_request(lambda: client.get('/flaky'), max_attempts=3, delay=0)

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_retry_request_gives_up(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503)

        async with make_client(handler) as client:
            with pytest.raises(HttpError):
                await client.retry_request(lambda: client.get('/down'), max_attempts=2, delay=0)

        assert len(calls) == 2
