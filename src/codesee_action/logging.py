from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator


class ActionLogger:
    """Structured JSON logger with GitHub Actions workflow commands."""

    def __init__(self, run_id: str):
        self.run_id = run_id
        self._stage_starts: dict[str, datetime] = {}

    def debug(self, message: str) -> None:
        self._command(f"::debug::{_escape(message)}")

    def info(self, message: str, **kwargs: Any) -> None:
        self._emit("info", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._emit("warning", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._emit("error", message, **kwargs)

    def add_mask(self, value: str) -> None:
        """Ask the runner to mask `value` in all later log output."""
        if value:
            self._command(f"::add-mask::{value}")

    @contextmanager
    def group(self, label: str) -> Iterator[None]:
        """Collapsible log group in the job output."""
        self._command(f"::group::{_escape(label)}")
        try:
            yield
        finally:
            self._command("::endgroup::")

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        """Context manager that tracks stage timing."""
        start = datetime.now(timezone.utc)
        self._stage_starts[name] = start
        self.info("stage_start", stage=name)
        status = "ok"
        try:
            yield
        except Exception as exc:
            status = "error"
            self.error("stage_error", stage=name, error=str(exc))
            raise
        finally:
            end = datetime.now(timezone.utc)
            duration_ms = int((end - start).total_seconds() * 1000)
            self.info("stage_end", stage=name, duration_ms=duration_ms, status=status)

    def set_failed(self, message: str) -> None:
        """Report the run as failed; the caller still owns the exit code."""
        self._command(f"::error::{_escape(message)}")

    def _emit(self, level: str, message: str, **kwargs: Any) -> None:
        """Emit structured JSON log + GitHub annotation for warnings and errors."""
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "run_id": self.run_id,
            "message": message,
        }
        payload.update(self._sanitize(kwargs))

        sys.stderr.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")
        sys.stderr.flush()

        if level == "error":
            self._command(f"::error::{_escape(message)}")
        elif level == "warning":
            self._command(f"::warning::{_escape(message)}")

    @staticmethod
    def _command(line: str) -> None:
        # Workflow commands are read from stdout.
        sys.stdout.write(line + "\n")
        sys.stdout.flush()

    @staticmethod
    def _sanitize(fields: Dict[str, Any]) -> Dict[str, Any]:
        redacted: Dict[str, Any] = {}
        for key, value in fields.items():
            if ActionLogger._is_sensitive_key(key):
                redacted[key] = "***"
            else:
                redacted[key] = value
        return redacted

    @staticmethod
    def _is_sensitive_key(key: str) -> bool:
        lowered = key.lower()
        return any(token in lowered for token in ("token", "secret", "password", "api_key", "apikey"))


def _escape(value: str) -> str:
    return str(value).replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
