"""
This is the model of the reminders package. Here, you'll find the following:

- ``task.py`` - Contains the ``Task`` class which represents a reminder.
- ``tasklist.py`` - Contains the ``TaskList`` class which represents a reminder list.
- ``reminderscript.py`` - Contains a list of AppleScript scripts for managing reminders.

"""

from . import task, tasklist, reminderscript

__all__ = ['task', 'tasklist', 'reminderscript', ]
