"""
This is the reminders package of MenuTodo. Here, you'll find the following:

- ``model`` - the ``Task`` and ``TaskList`` classes and the AppleScript scripts for the Reminders app.
- ``errors.py`` - the errors raised by a reminder store.
- ``store.py`` - the ``ReminderStore`` interface and the ``AppleScriptStore`` which talks to the Reminders app.
- ``listener.py`` - the ``ChangeMonitor`` which notices changes made outside MenuTodo.
- ``controller.py`` - the ``ReminderController`` which runs store operations in the background.

"""

from . import model
from . import errors
from . import store
from . import listener
from . import controller

__all__ = ['model', 'errors', 'store', 'listener', 'controller', ]
