"""
This is the main package for MenuTodo.

- ``reminders`` - access to the Reminders app: the task and list model, the reminder store and its controller.
- ``gui`` - the tray icon, task window and the view model behind them.
- ``helpers`` - helpers used throughout MenuTodo.

"""

from . import helpers

__all__ = ['helpers', ]
