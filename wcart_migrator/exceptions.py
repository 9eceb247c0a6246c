"""
Custom exception classes for the Shopify to Wcart migration service.
"""

from typing import Optional


class MigrationError(Exception):
    """Base exception for migration errors."""


class ConfigurationError(MigrationError):
    """Raised when settings are missing or malformed."""


class RunNotFoundError(MigrationError):
    """Raised when a migration run id is unknown."""

    def __init__(self, run_id: str):
        super().__init__(f"Migration run not found: {run_id}")
        self.run_id = run_id


class RunStateError(MigrationError):
    """Raised when a progress update would break the run's counters."""


class InvalidTransitionError(RunStateError):
    """Raised when a status change does not follow the run state machine."""

    def __init__(self, run_id: str, current: str, requested: str):
        super().__init__(f"Run {run_id} cannot move from {current} to {requested}")
        self.run_id = run_id
        self.current = current
        self.requested = requested


class PublishError(MigrationError):
    """Raised by publishers when a record could not be delivered."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
