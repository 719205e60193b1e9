"""
Contains the ``ChangeMonitor`` class, which notices changes made to Reminders outside MenuTodo (for example in the
Reminders app, or by iCloud sync) and notifies its subscribers.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, List

import schedule

from menutodo.reminders.errors import ReminderError
from menutodo.reminders.store import ReminderStore


def run_continuously(scheduler: schedule.Scheduler, interval: int = 1) -> threading.Event:
    """
    Utility function which continuously calls ``scheduler`` to run any pending jobs.

    :param scheduler: the scheduler to run.
    :param interval: interval between cycles.

    :return: a threading event which can be used to stop the continuous run.
    """

    #: When set, the thread will be stopped
    cease_continuous_run = threading.Event()

    class ScheduleThread(threading.Thread):
        """
        Class to run continuous tasks
        """
        @classmethod
        def run(cls):
            """
            Keep tasks running until cancelled
            """
            while not cease_continuous_run.is_set():
                scheduler.run_pending()
                time.sleep(interval)

    continuous_thread = ScheduleThread(daemon=True)
    continuous_thread.start()
    return cease_continuous_run


class ChangeMonitor:
    """
    Polls the store's fingerprint and notifies subscribers whenever it changes. Subscribers receive no payload; they are
    expected to re-fetch everything.

    Notifications are delivered on the polling thread.
    """

    def __init__(self, store: ReminderStore, interval: int = 5):
        """
        Create a new change monitor.

        :param store: the store to watch.
        :param interval: seconds between checks.
        """
        self.store: ReminderStore = store
        self.interval: int = interval
        self.subscribers: List[Callable[[], None]] = []
        self.last_fingerprint: str | None = None
        self.scheduler: schedule.Scheduler = schedule.Scheduler()
        self.stop_event: threading.Event | None = None
        self._lock = threading.Lock()

    def subscribe(self, cb: Callable[[], None]) -> None:
        with self._lock:
            self.subscribers.append(cb)

    def unsubscribe(self, cb: Callable[[], None]) -> None:
        with self._lock:
            if cb in self.subscribers:
                self.subscribers.remove(cb)

    def start(self) -> None:
        """
        Start polling in a background thread. Does nothing if already started.
        """
        if self.stop_event is not None:
            return
        self.scheduler.every(self.interval).seconds.do(self.check)
        self.stop_event = run_continuously(self.scheduler)
        logging.debug('Watching Reminders for changes every {} seconds'.format(self.interval))

    def stop(self) -> None:
        """
        Stop polling.
        """
        if self.stop_event is None:
            return
        self.stop_event.set()
        self.scheduler.clear()
        self.stop_event = None

    def check(self) -> bool:
        """
        Check the store for changes once. The first check only records the current state.

        :return: True if a change was detected and subscribers were notified.
        """
        try:
            fingerprint = self.store.fingerprint()
        except ReminderError as e:
            logging.warning('Unable to check Reminders for changes: {}'.format(e))
            return False
        except Exception as e:
            logging.exception('Unexpected error checking Reminders for changes: {}'.format(e))
            return False

        previous = self.last_fingerprint
        self.last_fingerprint = fingerprint
        if previous is None or previous == fingerprint:
            return False

        logging.debug('Reminders changed outside MenuTodo')
        with self._lock:
            subscribers = list(self.subscribers)
        for cb in subscribers:
            cb()
        return True
