"""Infrastructure utilities such as logging and exception handling."""

from .exceptions import UncaughtExceptionLogger, install_exception_hook
from .logging import configure_logging

__all__ = ["UncaughtExceptionLogger", "configure_logging", "install_exception_hook"]
