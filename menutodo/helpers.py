"""
This is a helper file used throughout MenuTodo.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from subprocess import Popen, PIPE

from decouple import config

DATA_LOCATION: Path = Path.home() / "Library" / "Application Support" / "MenuTodo"  #: Location where application data is
# stored.
LOG_LOCATION: Path = Path.home() / "Library" / "Logs" / "MenuTodo"  #: Location where log files are written.
POLL_INTERVAL: int = config('MENUTODO_POLL_INTERVAL', default=5, cast=int)  #: Seconds between external change checks.
LOG_LEVEL: str = config('MENUTODO_LOG_LEVEL', default='')  #: Overrides the log level stored in the settings, if set.

LOG_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'critical': logging.CRITICAL
}


def run_applescript(script: str, *args) -> tuple[int, str, str]:
    """
    Runs an AppleScript script.

    :param script: the script to run.
    :param args: a list of arguments to send to the script.

    :returns:

        - return_code (:py:class:`int`) - the script's return code.
        - stdout (:py:class:`str`) - standard output from the script.
        - stderr (:py:class:`str`) - standard error from the script.

    """
    arguments = list(args)
    p = Popen(['osascript', '-'] + arguments, stdin=PIPE, stdout=PIPE, stderr=PIPE, universal_newlines=True)
    stdout, stderr = p.communicate(script)
    return p.returncode, stdout, stderr


def settings_folder() -> Path:
    """
    Get the location of the Application Data folder for MenuTodo

    :return: path to the Application Data folder.
    """
    folder = DATA_LOCATION
    folder.mkdir(parents=True, exist_ok=True)
    return folder


def setup_logging(logging_level: str, log_stdout: bool = False, log_file: bool = True) -> logging.Logger:
    """
    Sets up the root logger.

    :param logging_level: the logging level which can be `debug`, `info`, `warning` or `critical`. Overridden by
        ``MENUTODO_LOG_LEVEL`` if set.
    :param log_stdout: if True, logs are sent to standard out.
    :param log_file: if True, logs are sent to a timestamped file in ``~/Library/Logs/MenuTodo``.

    :return: the configured root logger.
    """
    level_name = (LOG_LEVEL or logging_level).lower()
    log_level = LOG_LEVELS.get(level_name, logging.WARNING)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s %(levelname)s: %(message)s',
    )
    logger = logging.getLogger()
    logger.setLevel(log_level)
    if log_file:
        LOG_LOCATION.mkdir(parents=True, exist_ok=True)
        log_name = datetime.now().strftime("MenuTodo_%Y%m%d-%H%M%S") + '.log'
        logger.addHandler(logging.FileHandler(LOG_LOCATION / log_name))
    if log_stdout:
        logger.addHandler(logging.StreamHandler(sys.stdout))
    return logger


class DateUtil:
    """
    Utility class for converting between the date format used by the Reminders scripts and :py:class:`datetime`.
    """

    SCRIPT_DATETIME = "%Y-%m-%d %H:%M:%S"
    MISSING = "missing value"

    @staticmethod
    def parse(text: str) -> datetime | None:
        """
        Parse a date emitted by a Reminders script.

        :param text: the date string, or ``missing value`` if the date is not set.

        :return: the parsed datetime, or None if the date is missing or malformed.
        """
        text = text.strip()
        if text == '' or text == DateUtil.MISSING:
            return None
        try:
            return datetime.strptime(text, DateUtil.SCRIPT_DATETIME)
        except ValueError:
            logging.warning('Could not parse date {}'.format(text))
            return None

    @staticmethod
    def format(obj: datetime | None) -> str:
        """
        Format a datetime to be passed as a script argument.

        :param obj: the datetime to format.

        :return: the formatted date, or an empty string if ``obj`` is None.
        """
        if obj is None:
            return ''
        return obj.strftime(DateUtil.SCRIPT_DATETIME)
