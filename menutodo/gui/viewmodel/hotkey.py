"""
Contains the ``GlobalHotkey`` class, which toggles the task window from any application.
"""

from __future__ import annotations

import logging
from typing import Callable

#: Cmd+Shift+T, in ``pynput`` notation.
TOGGLE_COMBINATION = '<cmd>+<shift>+t'


class GlobalHotkey:
    """
    Listens for a system-wide key combination with ``pynput``. On macOS, MenuTodo (or the terminal running it) must be
    allowed to monitor input under *System Settings → Privacy & Security → Accessibility*, otherwise no key presses
    arrive.

    ``pynput`` calls back on its own listener thread, so activations are handed to the GUI thread through the
    dispatcher's ``post``.
    """

    def __init__(self, dispatcher, on_activate: Callable[[], None], combination: str = TOGGLE_COMBINATION):
        """
        :param dispatcher: delivers activations on the GUI thread.
        :param on_activate: called on the GUI thread whenever the combination is pressed.
        :param combination: the key combination to listen for.
        """
        self.dispatcher = dispatcher
        self.on_activate: Callable[[], None] = on_activate
        self.combination: str = combination
        self.listener = None

    def activate(self) -> None:
        self.dispatcher.post(self.on_activate)

    def start(self) -> bool:
        """
        Start listening. Does nothing if already listening.

        :return: True if the listener is running.
        """
        if self.listener is not None:
            return True
        try:
            # pynput picks its backend at import time, which fails without a display server.
            from pynput import keyboard
        except ImportError as e:
            logging.warning('Global hotkey unavailable, {} only works while MenuTodo is active: {}'.format(
                self.combination, e))
            return False
        self.listener = keyboard.GlobalHotKeys({self.combination: self.activate})
        self.listener.start()
        logging.debug('Listening for {}'.format(self.combination))
        return True

    def stop(self) -> None:
        if self.listener is None:
            return
        self.listener.stop()
        self.listener = None
