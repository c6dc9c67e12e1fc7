'''
Console and file logging for the solvers.

The `Logger` wraps one `logging.Logger` and prefixes every message with an
indentation marker. Warnings and errors are coloured on a terminal.

@note File logging into ./log is enabled by setting PYLOGFILE to a non-zero value.
@note Coloured output is disabled by setting PYLOGCOLORS to '0'.

-------------------------------------------------------
file        :   sprsolve/common/flog.py
-------------------------------------------------------
'''

__all__ = [
    "Logger",
    "get_global_logger"
]

import os
import re
import sys
import logging
import threading
from typing import Optional

ENV_LOGGER_FILE     = 'PYLOGFILE'
ENV_LOGGER_COLORS   = 'PYLOGCOLORS'

# ANSI escape codes, 'reset' restores the terminal default
ANSI_CODES          = {
    "red"       : "\033[31m",
    "yellow"    : "\033[33m",
    "reset"     : "\033[0m",
}
_ansi_escape        = re.compile(r'\x1b\[[0-9;]*m')

class StripAnsiFormatter(logging.Formatter):
    '''File formatter dropping the colour codes.'''
    def format(self, record):
        return _ansi_escape.sub('', super().format(record))

######################################################

class Logger:
    """
    Console (and optionally file) logger with indentation levels.

    Args:
        name (str):
            Name of the underlying `logging` logger.
        logfile (str, optional):
            Log file name without extension, written into ./log when PYLOGFILE is set.
        lvl (int or str):
            Logging level, a `logging` constant or one of 'debug', 'info', 'warning', 'error'.
    """

    LEVELS = {
        'debug'     : logging.DEBUG,
        'info'      : logging.INFO,
        'warning'   : logging.WARNING,
        'error'     : logging.ERROR,
    }

    def __init__(self,
                name            : str           = "sprsolve",
                logfile         : Optional[str] = None,
                lvl             : int           = logging.INFO):
        self.lvl                = Logger.LEVELS.get(lvl, logging.INFO) if isinstance(lvl, str) else lvl
        self.has_colors         = sys.stdout.isatty() and os.environ.get(ENV_LOGGER_COLORS, '1') != '0'
        self.logfile            = None

        self.logger             = logging.getLogger(name)
        self.logger.setLevel(self.lvl)
        self.logger.propagate   = False
        for h in list(self.logger.handlers):
            self.logger.removeHandler(h)
            h.close()

        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(self.lvl)
        ch.setFormatter(logging.Formatter('[%(levelname)s] %(message)s'))
        self.logger.addHandler(ch)

        if logfile and os.environ.get(ENV_LOGGER_FILE, '0') != '0':
            self._add_file_handler("./log", logfile[:-4] if logfile.endswith('.log') else logfile)

    def _add_file_handler(self, directory: str, name: str):
        os.makedirs(directory, exist_ok=True)
        self.logfile    = os.path.join(directory, f'{name}.log')
        fh              = logging.FileHandler(self.logfile, encoding='utf-8')
        fh.setLevel(self.lvl)
        fh.setFormatter(StripAnsiFormatter('%(asctime)s [%(levelname)s] %(message)s'))
        self.logger.addHandler(fh)

    # --------------------------------------------------------------

    @staticmethod
    def print_tab(lvl=0):
        return '\t' * lvl + ('->' if lvl > 0 else '')

    def _format(self, msg: str, lvl: int, color: Optional[str]) -> str:
        if color is not None and self.has_colors:
            msg = f"{ANSI_CODES[color]}{msg}{ANSI_CODES['reset']}"
        return f"{Logger.print_tab(lvl)}{msg}"

    def debug(self, msg: str, lvl=0):
        self.logger.debug(self._format(msg, lvl, None))

    def warning(self, msg: str, lvl=0):
        self.logger.warning(self._format(msg, lvl, 'yellow'))

    def error(self, msg: str, lvl=0):
        self.logger.error(self._format(msg, lvl, 'red'))

######################################################

_G_LOGGER       : Optional[Logger] = None
_G_LOGGER_PID   = None
_G_LOCK         = threading.Lock()

def get_global_logger(**kwargs) -> Logger:
    """
    One Logger per process (PID); kwargs are passed to the constructor on first use.

    Example
    -------
        >>> logger = get_global_logger()
        >>> logger.debug("Solver ready")
    """
    global  _G_LOGGER, _G_LOGGER_PID
    pid     = os.getpid()

    if _G_LOGGER is not None and _G_LOGGER_PID == pid:
        return _G_LOGGER

    with _G_LOCK:
        if _G_LOGGER is None or _G_LOGGER_PID != pid:
            _G_LOGGER       = Logger(**kwargs)
            _G_LOGGER_PID   = pid
        return _G_LOGGER
