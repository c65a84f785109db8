"""
errors subpackage: report errors and messages at the bottom of the call stack.

Key primitives
--------------
- Reporter: prints errors/messages to a diagnostic sink; fatal variants exit
- WrappedError / MultiError: annotated error and composite error values
- ReporterConfig / load_config(): exit code, sink stream, log locations
- configure_logging(): Rich console + file logging, optional JSONL event logger
- reporting() / guard() / collect(): bridge raised exceptions to a Reporter
"""

from .config import ConfigError, ReporterConfig, load_config
from .logging import configure_logging, JsonlEventLogger
from .types import MultiError, WrappedError, root_cause, wrap
from .reporter import (
    Reporter,
    fatal_if_error,
    fatal_if_error_formatted,
    fatal_message,
    fatal_message_formatted,
    format_message,
    get_default_reporter,
    log_message,
    log_message_formatted,
    report_if_error,
    report_if_error_formatted,
    set_default_reporter,
)
from .guards import collect, guard, reporting

__all__ = [
    "ConfigError",
    "ReporterConfig",
    "load_config",
    "JsonlEventLogger",
    "configure_logging",
    "MultiError",
    "WrappedError",
    "root_cause",
    "wrap",
    "Reporter",
    "format_message",
    "get_default_reporter",
    "set_default_reporter",
    "report_if_error",
    "report_if_error_formatted",
    "fatal_if_error",
    "fatal_if_error_formatted",
    "log_message",
    "log_message_formatted",
    "fatal_message",
    "fatal_message_formatted",
    "collect",
    "guard",
    "reporting",
]
