'''
Common utilities shared across the package: logging.
'''

from .flog import Logger, get_global_logger

__all__ = ["Logger", "get_global_logger"]
