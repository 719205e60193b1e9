"""
Errors raised by a ``ReminderStore``. These never leave the ``ReminderController``; they are converted to a failed
``(success, data)`` result there.
"""


class ReminderError(Exception):
    """
    Base class for all reminder store errors.
    """


class AccessDenied(ReminderError):
    """
    Access to Reminders was declined, or has not been granted yet.
    """


class EntityNotFound(ReminderError):
    """
    The reminder or list being changed no longer exists.
    """


class BackendWriteFailure(ReminderError):
    """
    Reminders failed to carry out a read or write.
    """
