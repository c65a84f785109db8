"""Helpers for reporting errors at the bottom of the call stack."""

from .errors import *  # noqa: F401,F403
from .errors import __all__ as _errors_all
from .version import __version__

__all__ = [*_errors_all, "__version__"]
