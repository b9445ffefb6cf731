"""Activity registry and executor."""

import asyncio
from typing import Any

from ..errors import ActivityNotFoundError, ActivityTimeoutError
from .activity import Activity, ActivityResult
from .context import ActivityContext


class ActivityRegistry:
    """Activities by name, executed under a caller-level timeout."""

    def __init__(self) -> None:
        self._activities: dict[str, Activity] = {}

    def register(self, activity: Activity) -> None:
        """Register (or replace) an activity under its name."""
        self._activities[activity.name] = activity

    def get(self, name: str) -> Activity | None:
        """Get activity by name."""
        return self._activities.get(name)

    def activity_types(self) -> list[str]:
        """Get all registered activity names."""
        return list(self._activities.keys())

    async def execute(
        self,
        name: str,
        params: dict[str, Any],
        ctx: ActivityContext,
        timeout: float,
    ) -> ActivityResult:
        """
        Execute an activity with timeout.

        Args:
            name: Activity name
            params: Input parameters
            ctx: Execution context
            timeout: Timeout in seconds

        Returns:
            ActivityResult on success

        Raises:
            ActivityNotFoundError: Activity not found
            ActivityTimeoutError: Execution timed out
            Exception: Activity execution failed
        """
        activity = self._activities.get(name)

        if not activity:
            raise ActivityNotFoundError(f"Activity implementation not found: {name}")

        try:
            return await asyncio.wait_for(
                activity.execute(params, ctx),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ActivityTimeoutError(
                f"Activity execution timed out after {timeout}s"
            ) from exc
