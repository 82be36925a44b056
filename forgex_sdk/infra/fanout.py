"""
Concurrent settle-all join

Runs named coroutines concurrently and waits for every one of them to
finish, successfully or not. Failures are captured per name and never
cancel the siblings.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settled:
    """Outcome of one branch"""
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or(self, default: Any) -> Any:
        return self.value if self.error is None else default


async def settle_all(calls: Dict[str, Awaitable[Any]]) -> Dict[str, Settled]:
    """
    Await all calls concurrently, collecting each outcome

    Args:
        calls: name -> awaitable

    Returns:
        name -> Settled, in the same order
    """
    if not calls:
        return {}

    names = list(calls)
    outcomes = await asyncio.gather(*calls.values(), return_exceptions=True)

    settled: Dict[str, Settled] = {}
    for name, outcome in zip(names, outcomes):
        if isinstance(outcome, BaseException):
            logger.debug(f"Branch {name} failed: {outcome}")
            settled[name] = Settled(error=outcome)
        else:
            settled[name] = Settled(value=outcome)
    return settled
