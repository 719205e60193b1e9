"""
Contains the application controller, which loads settings and wires the reminder backend, the view model and the
windows together.
"""

from __future__ import annotations

import json
import logging
import os.path

from PyQt6.QtWidgets import QApplication

from menutodo import helpers
from menutodo.gui.viewmodel.hotkey import GlobalHotkey
from menutodo.gui.viewmodel.taskstore import TaskStore
from menutodo.gui.viewmodel.taskwindow import TaskWindow
from menutodo.gui.viewmodel.threadedtasks import QtDispatcher
from menutodo.reminders.controller import ReminderController
from menutodo.reminders.listener import ChangeMonitor
from menutodo.reminders.store import AppleScriptStore, ReminderStore


class MenuTodoApp:
    """
    Application controller. The :py:attr:`SETTINGS` dictionary accepts the following keys:

    - ``hide_completed`` - if '1', completed tasks are hidden.
    - ``log_level`` - the logging level. Can be 'debug', 'info', 'warning' or 'critical'.

    """

    #: Application settings
    SETTINGS = {
        'hide_completed': '0',
        'log_level': 'warning',
    }

    def __init__(self, store: ReminderStore | None = None):
        """
        Load settings, connect to Reminders and build the task window.

        :param store: the reminder store to use. Defaults to the Reminders app.
        """
        MenuTodoApp.bootstrap_settings()
        MenuTodoApp.load_settings()
        helpers.setup_logging(MenuTodoApp.SETTINGS['log_level'], log_stdout=True)

        self.tray_icon = None
        self.reminder_store: ReminderStore = store or AppleScriptStore()
        self.dispatcher: QtDispatcher = QtDispatcher()
        self.monitor: ChangeMonitor = ChangeMonitor(self.reminder_store, helpers.POLL_INTERVAL)
        self.controller: ReminderController = ReminderController(self.reminder_store, self.dispatcher, self.monitor)
        self.task_store: TaskStore = TaskStore(self.controller)
        self.window: TaskWindow = TaskWindow(self.task_store,
                                             MenuTodoApp.SETTINGS['hide_completed'] == '1',
                                             self.set_hide_completed,
                                             self.quit_gracefully)
        self.hotkey: GlobalHotkey = GlobalHotkey(self.dispatcher, self.window.toggle)
        self.hotkey.start()

        self.task_store.access_changed.connect(self.handle_access)
        self.task_store.start()

    @staticmethod
    def bootstrap_settings() -> None:
        """
        Create configuration file if it doesn't exist.
        """
        conf_file = helpers.settings_folder() / 'conf.json'
        if not os.path.exists(conf_file):
            with open(conf_file, 'w') as fp:
                json.dump(MenuTodoApp.SETTINGS, fp)

    @staticmethod
    def load_settings() -> None:
        """
        Load settings from configuration file. Keys missing from the file keep their defaults.
        """
        conf_file = helpers.settings_folder() / 'conf.json'
        if not os.path.exists(conf_file):
            return
        with open(conf_file) as fp:
            MenuTodoApp.SETTINGS.update(json.load(fp))

    @staticmethod
    def save_settings() -> None:
        """
        Save settings to file.
        """
        with open(helpers.settings_folder() / 'conf.json', 'w') as fp:
            json.dump(MenuTodoApp.SETTINGS, fp)

    def set_hide_completed(self, hide_completed: bool) -> None:
        MenuTodoApp.SETTINGS['hide_completed'] = '1' if hide_completed else '0'
        MenuTodoApp.save_settings()
        if self.tray_icon is not None:
            self.tray_icon.mnu_show_completed.blockSignals(True)
            self.tray_icon.mnu_show_completed.setChecked(not hide_completed)
            self.tray_icon.mnu_show_completed.blockSignals(False)
        self.window.act_show_completed.blockSignals(True)
        self.window.act_show_completed.setChecked(not hide_completed)
        self.window.act_show_completed.blockSignals(False)

    def handle_access(self, granted: bool) -> None:
        """
        Start watching for external changes once Reminders can be read.
        """
        if granted:
            self.monitor.start()
        else:
            logging.warning('Reminders access denied, showing access notice.')
            self.window.show()

    def quit_gracefully(self) -> None:
        """
        Stop background work and quit.
        """
        logging.info('Quitting MenuTodo')
        self.monitor.stop()
        self.hotkey.stop()
        self.task_store.close()
        self.dispatcher.wait()
        QApplication.quit()
