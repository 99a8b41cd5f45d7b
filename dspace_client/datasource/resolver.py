"""
Ordered fallback strategies.

A strategy is a coroutine function taking the request and returning either a
value or a Skip. The driver runs strategies in order, stops at the first
value and raises StrategiesExhausted once every strategy skipped.
"""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from loguru import logger

from dspace_client.services.errors import ServiceError

R = TypeVar("R")
T = TypeVar("T")


@dataclass
class Skip:
    """Why a strategy produced nothing; the driver moves on."""

    reason: str
    error: Exception | None = None


@dataclass
class Strategy(Generic[R, T]):
    name: str
    run: Callable[[R], Awaitable["T | Skip"]]


@dataclass
class Resolution(Generic[T]):
    value: T
    strategy: str
    skipped: list[tuple[str, Skip]] = field(default_factory=list)


class StrategiesExhausted(Exception):
    """Every strategy skipped."""

    def __init__(self, skipped: list[tuple[str, Skip]]):
        self.skipped = skipped
        super().__init__(
            "All strategies exhausted: " + ", ".join(name for name, _ in skipped)
        )

    @property
    def last_error(self) -> Exception | None:
        for _, skip in reversed(self.skipped):
            if skip.error is not None:
                return skip.error
        return None


async def attempt(fetch: Awaitable[Any]) -> Any:
    """Await a request, turning service errors into a Skip."""
    try:
        return await fetch
    except ServiceError as e:
        return Skip(reason=type(e).__name__, error=e)


async def run_strategies(
    request: R, strategies: Sequence[Strategy[R, T]], label: str = ""
) -> Resolution[T]:
    """Run strategies in order until one returns a value."""
    skipped: list[tuple[str, Skip]] = []

    for strategy in strategies:
        result = await strategy.run(request)
        if isinstance(result, Skip):
            logger.debug(f"[{label}] {strategy.name} skipped: {result.reason}")
            skipped.append((strategy.name, result))
            continue

        if skipped:
            logger.info(
                f"[{label}] resolved by {strategy.name} after {len(skipped)} fallbacks"
            )
        return Resolution(value=result, strategy=strategy.name, skipped=skipped)

    raise StrategiesExhausted(skipped)
