from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Literal, Optional
import os
import uuid

import yaml


class ConfigError(ValueError):
    """Raised when reporter configuration is missing or invalid."""


@dataclass(frozen=True)
class ReporterConfig:
    """
    Configuration for where reports go and how fatal reports terminate.

    Parameters
    ----------
    exit_code
        Status passed to the exit function by the fatal variants. Must be non-zero.
    stream
        Diagnostic sink used when no explicit sink is injected: "stderr" or "stdout".
    log_dir
        If set, a plain log file (and optionally a JSONL event log) is written here.
    run_id
        Identifier stamped on log lines and events. If "auto", a UUID4 prefix is generated.
    console_level
        Logging level for the Rich console handler.
    file_level
        Logging level for the log file.
    write_jsonl
        If True (and log_dir is set), writes events to <log_dir>/events_<run_id>.jsonl.
    env_prefix
        Prefix for environment-variable overrides, e.g. "BUT_".

    Usage example
    -------------
        cfg = ReporterConfig(exit_code=2, log_dir=Path("logs"))
    """

    exit_code: int = 1
    stream: Literal["stderr", "stdout"] = "stderr"
    log_dir: Optional[Path] = None
    run_id: str = "auto"

    console_level: int = 30  # logging.WARNING
    file_level: int = 10  # logging.DEBUG

    write_jsonl: bool = False

    env_prefix: str = field(default="", repr=False)

    def resolved_run_id(self) -> str:
        """Return a non-auto run id."""
        if self.run_id != "auto":
            return self.run_id
        return uuid.uuid4().hex[:10]

    def validate(self) -> "ReporterConfig":
        """Raise ConfigError if the configuration cannot be used; return self otherwise."""
        if self.exit_code == 0:
            raise ConfigError("exit_code must be non-zero so fatal reports signal failure.")
        if self.stream not in ("stderr", "stdout"):
            raise ConfigError(f"Unknown stream: {self.stream!r} (expected 'stderr' or 'stdout').")
        return self

    @classmethod
    def from_env(cls, *, default: Optional["ReporterConfig"] = None) -> "ReporterConfig":
        """
        Create config from environment variables.

        Supported variables (prefix controlled by env_prefix on `default`):
        - <PFX>EXIT_CODE: non-zero integer
        - <PFX>STREAM: "stderr" | "stdout"
        - <PFX>LOG_DIR: path
        - <PFX>WRITE_JSONL: "1"/"0"

        Invalid values fall back to the value on `default`.

        Usage example
        -------------
            cfg = ReporterConfig.from_env(default=ReporterConfig(env_prefix="BUT_"))
        """
        base = default if default is not None else cls()
        pfx = base.env_prefix

        exit_code = base.exit_code
        exit_code_raw = os.getenv(f"{pfx}EXIT_CODE", "").strip()
        if exit_code_raw:
            try:
                exit_code = int(exit_code_raw)
            except ValueError:
                exit_code = base.exit_code
            if exit_code == 0:
                exit_code = base.exit_code

        stream = os.getenv(f"{pfx}STREAM", base.stream).strip().lower()
        if stream not in ("stderr", "stdout"):
            stream = base.stream

        log_dir = base.log_dir
        log_dir_raw = os.getenv(f"{pfx}LOG_DIR", "").strip()
        if log_dir_raw:
            log_dir = Path(log_dir_raw)

        write_jsonl_raw = os.getenv(f"{pfx}WRITE_JSONL", "1" if base.write_jsonl else "0").strip()
        write_jsonl = write_jsonl_raw not in ("0", "false", "False", "")

        return replace(
            base,
            exit_code=exit_code,
            stream=stream,  # type: ignore[arg-type]
            log_dir=log_dir,
            write_jsonl=write_jsonl,
        )


def _coerce_section(section: dict[str, Any]) -> dict[str, Any]:
    known = {"exit_code", "stream", "log_dir", "run_id", "console_level", "file_level", "write_jsonl", "env_prefix"}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ConfigError(f"Unknown reporter config keys: {', '.join(unknown)}")

    out = dict(section)
    if out.get("log_dir") is not None:
        out["log_dir"] = Path(str(out["log_dir"]))
    for key in ("exit_code", "console_level", "file_level"):
        if key in out:
            try:
                out[key] = int(out[key])
            except (TypeError, ValueError) as error:
                raise ConfigError(f"{key} must be an integer, got {out[key]!r}") from error
    if "write_jsonl" in out:
        out["write_jsonl"] = bool(out["write_jsonl"])
    return out


def load_config(path: Path) -> ReporterConfig:
    """
    Load reporter config from a YAML file.

    The file must hold a mapping; settings are read from its ``but`` section.
    A missing file or a file without that section yields the defaults.

    Usage example
    -------------
        # config.yaml
        # but:
        #   exit_code: 3
        #   log_dir: logs
        cfg = load_config(Path("config.yaml"))
    """
    if not path.exists():
        return ReporterConfig()

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return ReporterConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a YAML mapping: {path}")

    section = data.get("but") or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'but' section must be a YAML mapping: {path}")

    return ReporterConfig(**_coerce_section(section)).validate()
