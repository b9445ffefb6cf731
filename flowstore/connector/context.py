"""Activity execution context."""

from __future__ import annotations

import logging
from uuid import UUID

from pydantic import BaseModel, PrivateAttr

from ..types import ActivityKey


class ActivityContext(BaseModel):
    """
    Context passed to activity handlers.

    Identifies the workflow instance and the activity being run, and
    provides a logger named after the activity.
    """

    workflow_id: UUID
    activity_id: UUID
    activity_key: ActivityKey

    _logger: logging.Logger | None = PrivateAttr(default=None)

    @property
    def logger(self) -> logging.Logger:
        """Get logger for this activity."""
        if self._logger is None:
            self._logger = logging.getLogger(f"flowstore.activity.{self.activity_key}")
        return self._logger

    @property
    def scope(self) -> str:
        """Engine file scope of this activity: ``{workflow_id}/{activity_key}``."""
        return f"{self.workflow_id}/{self.activity_key}"
