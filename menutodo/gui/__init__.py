"""
This is the GUI package for MenuTodo.

- ``MenuTodo.py`` - the application entry point.
- ``viewmodel`` - the view model and the windows built on it.

"""
