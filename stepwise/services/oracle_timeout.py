"""Oracle Timeout — bounds a single oracle await so a hung call cannot pin a submission.

Invariants:
    - Timeout maps to OracleError("timeout") carrying the oracle kind
    - None timeout means wait indefinitely (transport timeout still applies)
"""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from stepwise.core.domain_types import OracleKind
from stepwise.core.errors import ErrorContext, OracleError

T = TypeVar("T")


async def bounded(
    awaitable: Awaitable[T],
    timeout_seconds: float | None,
    oracle: OracleKind,
    submission_id: str | None = None,
) -> T:
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except asyncio.TimeoutError:
        raise OracleError(
            f"{oracle.value} oracle did not answer within {timeout_seconds}s",
            "timeout",
            context=ErrorContext(oracle=oracle.value, submission_id=submission_id),
        )
