from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import ReporterConfig
from .types import MultiError, root_cause

LOGGER_NAME = "but"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class JsonlEventLogger:
    """
    Writes one JSON object per reported error or message.

    Each line includes at least:
    - time_utc
    - run_id
    - event ("error_reported", "message_logged", "fatal_exit")
    - level
    - message (optional)
    - exc_type, exc_msg (optional)
    - cause_type, cause_msg (optional): innermost error of an annotated report
    - error_count (optional): number of grouped errors for a MultiError

    Usage example
    -------------
        ev = JsonlEventLogger(path=Path("logs/events_abc.jsonl"), run_id="abc")
        ev.write(event="error_reported", level="ERROR", exc=exc, message="saving config: disk full")
    """
    path: Path
    run_id: str

    def write(
        self,
        *,
        event: str,
        level: str,
        message: Optional[str] = None,
        exc: Optional[BaseException] = None,
    ) -> None:
        payload: dict[str, Any] = {
            "time_utc": _utc_now_iso(),
            "run_id": self.run_id,
            "event": event,
            "level": level,
        }
        if message:
            payload["message"] = message
        if exc is not None:
            payload["exc_type"] = type(exc).__name__
            payload["exc_msg"] = str(exc)
            cause = root_cause(exc)
            if cause is not exc:
                payload["cause_type"] = type(cause).__name__
                payload["cause_msg"] = str(cause)
            if isinstance(cause, MultiError):
                payload["error_count"] = len(cause)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(payload, ensure_ascii=False) + "\n")


class _ReportContextFilter(logging.Filter):
    """Stamps run id and report event on every record reaching a "but" handler."""

    def __init__(self, *, run_id: str) -> None:
        super().__init__()
        self._run_id = run_id

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        if not hasattr(record, "run_id"):
            setattr(record, "run_id", self._run_id)
        if not hasattr(record, "event"):
            setattr(record, "event", "-")
        return True


def configure_logging(
    *, cfg: ReporterConfig, console: bool = True
) -> tuple[logging.Logger, Optional[JsonlEventLogger]]:
    """
    Configure the "but" logger: Rich console output, plus file and JSONL logs under cfg.log_dir.

    Parameters
    ----------
    cfg
        Reporter configuration.
    console
        Attach the Rich console handler. Pass False when the logger mirrors a Reporter
        that already prints to the console, so each report appears there once.

    Returns
    -------
    logger
        The configured logger named "but".
    event_logger
        JsonlEventLogger if cfg.write_jsonl and cfg.log_dir are set, else None.

    Usage example
    -------------
        logger, event_logger = configure_logging(cfg=cfg, console=False)
        reporter = Reporter(logger=logger, event_logger=event_logger)
    """
    run_id = cfg.resolved_run_id()
    context_filter = _ReportContextFilter(run_id=run_id)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = False

    if console:
        console_handler = RichHandler(
            console=Console(stderr=(cfg.stream == "stderr")),
            show_path=False,
            markup=False,
        )
        console_handler.setLevel(cfg.console_level)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        console_handler.addFilter(context_filter)
        logger.addHandler(console_handler)

    event_logger = None
    if cfg.log_dir is not None:
        cfg.log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(cfg.log_dir / f"run_{run_id}.log", encoding="utf-8")
        file_handler.setLevel(cfg.file_level)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)sZ | run=%(run_id)s | event=%(event)s | %(levelname)s | %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
        file_handler.addFilter(context_filter)
        logger.addHandler(file_handler)

        if cfg.write_jsonl:
            event_logger = JsonlEventLogger(path=cfg.log_dir / f"events_{run_id}.jsonl", run_id=run_id)

    # Without any handler, logging's last-resort handler would print warnings to stderr.
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    logger.debug("Logging configured (run_id=%s, log_dir=%s)", run_id, cfg.log_dir)
    return logger, event_logger
