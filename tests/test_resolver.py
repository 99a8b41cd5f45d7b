"""Strategy driver tests"""

import pytest

from dspace_client.datasource.resolver import (
    Skip,
    StrategiesExhausted,
    Strategy,
    attempt,
    run_strategies,
)
from dspace_client.services.errors import NotFoundError, ServiceError


def _returning(value, log):
    async def run(request):
        log.append(request)
        return value

    return run


class TestRunStrategies:
    @pytest.mark.asyncio
    async def test_stops_at_first_value(self):
        log = []
        strategies = [
            Strategy("a", _returning(Skip("empty"), log)),
            Strategy("b", _returning("found", log)),
            Strategy("c", _returning("never", log)),
        ]
        resolution = await run_strategies("req", strategies)

        assert resolution.value == "found"
        assert resolution.strategy == "b"
        assert [name for name, _ in resolution.skipped] == ["a"]
        assert log == ["req", "req"]

    @pytest.mark.asyncio
    async def test_exhaustion_keeps_last_error(self):
        first = NotFoundError("/x")
        last = ServiceError("boom", status_code=500)
        strategies = [
            Strategy("a", _returning(Skip("NotFoundError", first), [])),
            Strategy("b", _returning(Skip("ServiceError", last), [])),
            Strategy("c", _returning(Skip("empty"), [])),
        ]
        with pytest.raises(StrategiesExhausted) as exc_info:
            await run_strategies("req", strategies)

        assert exc_info.value.last_error is last
        assert [name for name, _ in exc_info.value.skipped] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_empty_strategy_list(self):
        with pytest.raises(StrategiesExhausted):
            await run_strategies("req", [])


class TestAttempt:
    @pytest.mark.asyncio
    async def test_service_error_becomes_skip(self):
        async def failing():
            raise NotFoundError("/discover/browses/x/entries")

        result = await attempt(failing())
        assert isinstance(result, Skip)
        assert result.reason == "NotFoundError"
        assert isinstance(result.error, NotFoundError)

    @pytest.mark.asyncio
    async def test_value_passes_through(self):
        async def ok():
            return {"page": {}}

        assert await attempt(ok()) == {"page": {}}

    @pytest.mark.asyncio
    async def test_programming_errors_propagate(self):
        async def broken():
            raise KeyError("bug")

        with pytest.raises(KeyError):
            await attempt(broken())
