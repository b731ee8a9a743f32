"""Errors raised while checking and dispatching appointment reminders.

Only ``DataAccessError`` ends a run; the others are caught per
(appointment, tier) pair, logged and reported back as failures.
"""


class ReminderError(Exception):
    """Base class for reminder errors."""


class DataAccessError(ReminderError):
    """Fetching today's candidate appointments failed."""


class ResolutionError(ReminderError):
    """Patient/doctor name or patient email lookup failed."""


class DispatchError(ReminderError):
    """The email provider did not accept the message (incl. rate limiting)."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class NotificationInsertError(ReminderError):
    """The in-app notification row could not be stored."""
