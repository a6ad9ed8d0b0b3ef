"""Data models shared by the engine, checks and handlers."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from eth_health.engine.engine import Engine

# Run-scoped state shared by the checks of a single engine run.
Context = dict[str, Any]


@dataclass(frozen=True)
class Alert:
    """A named failure signal produced by a check.

    Attributes:
        name: Alert name, used to look up the handler and the renderer.
        params: Parameters describing the failure (e.g. the lag or the error).
    """

    name: str
    params: dict[str, Any] = field(default_factory=dict)


class Check(Protocol):
    """Protocol for engine checks.

    A check may read and write the run context. It returns an Alert on
    failure and None when it passes.
    """

    name: str

    async def execute(self, context: Context) -> Alert | None:
        """Run the check against the shared run context."""
        ...


Handler = Callable[[str, dict[str, Any], "Engine"], Awaitable[None] | None]
