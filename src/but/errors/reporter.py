from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Optional, TextIO

from .config import ReporterConfig
from .logging import JsonlEventLogger, configure_logging
from .types import WrappedError

_log = logging.getLogger(__name__)

ExitFn = Callable[[int], Any]


def format_message(template: str, args: tuple[Any, ...]) -> str:
    """
    Interpolate `args` into a printf-style `template`.

    Without args the template is returned unchanged, so a literal "%" is safe.
    A template/argument mismatch does not raise: the template is followed by the
    repr of each argument instead.
    """
    if not args:
        return template
    try:
        return template % args
    except (TypeError, ValueError, KeyError):
        return " ".join([template, *(repr(a) for a in args)])


@dataclass
class Reporter:
    """
    Prints errors and messages to a diagnostic sink, optionally terminating the process.

    The fatal variants write and flush first, then call `exit_fn(exit_code)`.
    With the default `exit_fn` (``sys.exit``) control does not return; anything that
    must be cleaned up has to happen before the call.

    Parameters
    ----------
    sink
        Text stream receiving reports. None resolves the `stream` named below at write time.
    stream
        "stderr" or "stdout"; used only when `sink` is None.
    exit_fn
        Called with `exit_code` after a fatal report.
    exit_code
        Non-zero termination status.
    logger, event_logger
        Optional mirrors of every report (see ``configure_logging``).

    Usage example
    -------------
        reporter = Reporter()
        if reporter.report_if_error(err, "loading ", path):
            return
        reporter.fatal_if_error(save(), "saving config")
    """

    sink: Optional[TextIO] = None
    stream: Literal["stderr", "stdout"] = "stderr"
    exit_fn: ExitFn = sys.exit
    exit_code: int = 1
    logger: Optional[logging.Logger] = None
    event_logger: Optional[JsonlEventLogger] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @classmethod
    def from_config(cls, cfg: ReporterConfig, *, exit_fn: ExitFn = sys.exit) -> "Reporter":
        """Build a reporter (and its logging) from configuration."""
        cfg.validate()
        logger, event_logger = configure_logging(cfg=cfg, console=False)
        return cls(stream=cfg.stream, exit_fn=exit_fn, exit_code=cfg.exit_code, logger=logger, event_logger=event_logger)

    # ----------------------------------------------------------------------------------------------
    # Output
    # ----------------------------------------------------------------------------------------------

    def _stream(self) -> TextIO:
        if self.sink is not None:
            return self.sink
        return sys.stdout if self.stream == "stdout" else sys.stderr

    def _write(self, text: str) -> None:
        stream = self._stream()
        with self._lock:
            try:
                stream.write(text)
            except (OSError, ValueError) as exc:
                _log.debug("Diagnostic sink write failed: %s", exc)

    def _record(self, *, event: str, level: int, text: str, exc: Optional[BaseException] = None) -> None:
        message = text.rstrip("\n")
        if self.logger is not None:
            self.logger.log(level, "%s", message, extra={"event": event, "error": exc})
        if self.event_logger is not None:
            try:
                self.event_logger.write(
                    event=event,
                    level=logging.getLevelName(level),
                    message=message,
                    exc=exc,
                )
            except (OSError, ValueError) as err:
                _log.debug("Event log write failed (%s): %s", self.event_logger.path, err)

    def _flush(self) -> None:
        stream = self._stream()
        if not hasattr(stream, "flush"):
            return
        with self._lock:
            try:
                stream.flush()
            except (OSError, ValueError) as exc:
                _log.debug("Diagnostic sink flush failed: %s", exc)

    def _terminate(self) -> None:
        self._flush()
        try:
            self._record(event="fatal_exit", level=logging.CRITICAL, text=f"exiting with status {self.exit_code}")
        finally:
            self.exit_fn(self.exit_code)

    def _emit_error(self, err: BaseException) -> None:
        text = f"{err}\n"
        self._write(text)
        self._record(event="error_reported", level=logging.ERROR, text=text, exc=err)

    # ----------------------------------------------------------------------------------------------
    # Conditional error reports
    # ----------------------------------------------------------------------------------------------

    def report_if_error(self, err: Optional[BaseException], *parts: Any) -> bool:
        """
        Print `err` if it is not None; return True when something was printed.

        `parts`, if any, are concatenated without separator and prefixed to the
        error as an annotation; the printed error wraps the original.
        """
        if err is None:
            return False
        if parts:
            err = WrappedError("".join(str(p) for p in parts), err)
        self._emit_error(err)
        return True

    def report_if_error_formatted(self, err: Optional[BaseException], template: str, *args: Any) -> bool:
        """
        Print `err` annotated with ``template % args`` if it is not None.

        The annotation is applied even when `args` is empty.
        """
        if err is None:
            return False
        self._emit_error(WrappedError(format_message(template, args), err))
        return True

    def fatal_if_error(self, err: Optional[BaseException], *parts: Any) -> None:
        """Like report_if_error, then terminate the process if `err` was printed."""
        if err is None:
            return
        self.report_if_error(err, *parts)
        self._terminate()

    def fatal_if_error_formatted(self, err: Optional[BaseException], template: str, *args: Any) -> None:
        """Like report_if_error_formatted, then terminate the process if `err` was printed."""
        if err is None:
            return
        self.report_if_error_formatted(err, template, *args)
        self._terminate()

    # ----------------------------------------------------------------------------------------------
    # Unconditional messages
    # ----------------------------------------------------------------------------------------------

    def log_message(self, *parts: Any) -> None:
        """Print the space-joined `parts` followed by a newline."""
        text = " ".join(str(p) for p in parts) + "\n"
        self._write(text)
        self._record(event="message_logged", level=logging.INFO, text=text)

    def log_message_formatted(self, template: str, *args: Any) -> None:
        """Print ``template % args``; no newline is added."""
        text = format_message(template, args)
        self._write(text)
        self._record(event="message_logged", level=logging.INFO, text=text)

    def fatal_message(self, *parts: Any) -> None:
        """Print like log_message, then terminate the process."""
        self.log_message(*parts)
        self._terminate()

    def fatal_message_formatted(self, template: str, *args: Any) -> None:
        """Print like log_message_formatted, then terminate the process."""
        self.log_message_formatted(template, *args)
        self._terminate()


_default_reporter = Reporter()


def get_default_reporter() -> Reporter:
    """Return the process-wide reporter used by the module-level helpers."""
    return _default_reporter


def set_default_reporter(reporter: Reporter) -> Reporter:
    """
    Replace the process-wide reporter; return the previous one.

    Usage example
    -------------
        previous = set_default_reporter(Reporter.from_config(load_config(Path("config.yaml"))))
    """
    global _default_reporter
    previous = _default_reporter
    _default_reporter = reporter
    return previous


def report_if_error(err: Optional[BaseException], *parts: Any) -> bool:
    return _default_reporter.report_if_error(err, *parts)


def report_if_error_formatted(err: Optional[BaseException], template: str, *args: Any) -> bool:
    return _default_reporter.report_if_error_formatted(err, template, *args)


def fatal_if_error(err: Optional[BaseException], *parts: Any) -> None:
    _default_reporter.fatal_if_error(err, *parts)


def fatal_if_error_formatted(err: Optional[BaseException], template: str, *args: Any) -> None:
    _default_reporter.fatal_if_error_formatted(err, template, *args)


def log_message(*parts: Any) -> None:
    _default_reporter.log_message(*parts)


def log_message_formatted(template: str, *args: Any) -> None:
    _default_reporter.log_message_formatted(template, *args)


def fatal_message(*parts: Any) -> None:
    _default_reporter.fatal_message(*parts)


def fatal_message_formatted(template: str, *args: Any) -> None:
    _default_reporter.fatal_message_formatted(template, *args)
