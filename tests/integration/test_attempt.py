"""Integration tests for AttemptExecutor against a local target."""

from __future__ import annotations

import pytest

from authstorm._internal.errors import AttemptError
from authstorm.engine.attempt import AttemptExecutor, build_headers


def test_build_headers():
    assert build_headers("abc") == {
        "Content-Type": "application/json",
        "Authorization": "Bearer abc",
    }


class TestAttemptExecutor:
    async def test_sends_post_with_bearer_and_payload(self, target, make_config):
        config = make_config(host=target.host, payload=b'{"a":1}')

        async with AttemptExecutor(config) as executor:
            status = await executor.execute("token-123")

        assert status == 200
        assert len(target.received) == 1
        request = target.received[0]
        assert request.method == "POST"
        assert request.path == "/ruuvi.json"
        assert request.headers["Authorization"] == "Bearer token-123"
        assert request.headers["Content-Type"] == "application/json"
        assert request.body == b'{"a":1}'

    @pytest.mark.parametrize("status", [201, 204])
    async def test_any_2xx_is_success(self, target, make_config, status: int):
        target.status = status
        async with AttemptExecutor(make_config(host=target.host)) as executor:
            assert await executor.execute("t") == status

    @pytest.mark.parametrize("status", [302, 401, 403, 500])
    async def test_non_2xx_raises_status_error(self, target, make_config, status: int):
        target.status = status
        async with AttemptExecutor(make_config(host=target.host)) as executor:
            with pytest.raises(AttemptError) as info:
                await executor.execute("t")

        assert info.value.kind == "status"
        assert info.value.status_code == status
        assert str(info.value) == f"HTTP {status}"

    async def test_connection_refused_is_transport_error(self, closed_host, make_config):
        async with AttemptExecutor(make_config(host=closed_host)) as executor:
            with pytest.raises(AttemptError) as info:
                await executor.execute("t")

        assert info.value.kind == "transport"
        assert info.value.status_code is None
        assert "Client" in info.value.reason

    @pytest.mark.timeout(10)
    async def test_hung_target_times_out(self, target, make_config):
        target.delay = 3.0
        async with AttemptExecutor(make_config(host=target.host, timeout=0.2)) as executor:
            with pytest.raises(AttemptError) as info:
                await executor.execute("t")

        assert info.value.kind == "timeout"
        assert "0.2s" in info.value.reason

    async def test_connections_are_not_pooled(self, make_config):
        """Every attempt gets its own connection, with no pool cap."""
        async with AttemptExecutor(make_config()) as executor:
            connector = executor._session.connector  # type: ignore[union-attr]
            assert connector is not None
            assert connector.force_close is True
            assert connector.limit == 0

    async def test_context_manager_required(self, make_config):
        executor = AttemptExecutor(make_config())
        with pytest.raises(RuntimeError, match="async context manager"):
            await executor.execute("t")
