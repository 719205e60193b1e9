"""
This is the view model package for the GUI. Here, you'll find the following:

- ``taskstore.py`` - Contains the ``TaskStore`` class - the view model holding the snapshot of tasks and lists.
- ``selection.py`` - Contains the section building and keyboard selection used by the task window.
- ``threadedtasks.py`` - Contains the ``QtDispatcher`` which runs backend calls in separate threads.
- ``taskwindow.py`` - Contains the ``TaskWindow`` class which shows the tasks.
- ``trayicon.py`` - Contains the ``MenuTodoTray`` class which handles the system tray icon.
- ``menutodoapp.py`` - Contains the ``MenuTodoApp`` class - the application controller.
"""
