"""
Contains classes which run reminder operations in separate threads and hand their results back to the GUI thread.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List

from PyQt6.QtCore import QObject, QThread, Qt, pyqtSignal


# noinspection PyUnresolvedReferences
class BackendCall(QThread):
    """
    Runs a single function in a separate thread.
    """

    #: Emitted with the callback and the function's return value when the function completes.
    result_signal = pyqtSignal(object, object)

    def __init__(self, func: Callable[[], Any], cb: Callable[[Any], None]):
        """
        Initialises the call.

        :param func: the function to run in the background.
        :param cb: the function to hand the result to.
        """
        super().__init__()
        self.func: Callable[[], Any] = func
        self.cb: Callable[[Any], None] = cb

    def run(self) -> None:
        try:
            result = self.func()
        except Exception as e:
            # Exceptions must not leave QThread.run.
            logging.exception('Background call failed, no result delivered: {}'.format(e))
            return
        self.result_signal.emit(self.cb, result)


# noinspection PyUnresolvedReferences
class QtDispatcher(QObject):
    """
    Runs work in the background and delivers the results on the thread this object lives on, which is the GUI thread.
    Used by the ``ReminderController``; the ``TaskStore`` relies on every callback arriving on the GUI thread.
    """

    #: Carries functions to be run on the GUI thread.
    post_signal = pyqtSignal(object)

    def __init__(self, parent: QObject | None = None):
        super().__init__(parent)
        self.workers: List[BackendCall] = []
        self.post_signal.connect(self._run_posted, type=Qt.ConnectionType.QueuedConnection)

    def submit(self, func: Callable[[], Any], cb: Callable[[Any], None]) -> None:
        """
        Run ``func`` in a new thread, then call ``cb`` with its result on the GUI thread.

        :param func: the function to run in the background.
        :param cb: called with the return value of ``func``.
        """
        worker = BackendCall(func, cb)
        worker.result_signal.connect(self._deliver)
        worker.finished.connect(self._release)
        self.workers.append(worker)
        worker.start()

    def post(self, func: Callable[[], None]) -> None:
        """
        Run ``func`` on the GUI thread once control returns to the event loop. Safe to call from any thread.

        :param func: the function to run.
        """
        self.post_signal.emit(func)

    def wait(self) -> None:
        """
        Block until every running background call has finished. Used when quitting.
        """
        for worker in list(self.workers):
            worker.wait()

    def _deliver(self, cb: Callable[[Any], None], result: Any) -> None:
        cb(result)

    def _run_posted(self, func: Callable[[], None]) -> None:
        func()

    def _release(self) -> None:
        worker = self.sender()
        if worker in self.workers:
            self.workers.remove(worker)
            worker.deleteLater()
