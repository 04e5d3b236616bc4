import contextlib
import contextvars
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterator, Optional


_page_var: contextvars.ContextVar[str] = contextvars.ContextVar("webpagecheck_page", default="-")
_step_var: contextvars.ContextVar[str] = contextvars.ContextVar("webpagecheck_step", default="-")


def _env_bool(name: str, default: bool) -> bool:
    val = os.environ.get(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_str(name: str, default: str) -> str:
    val = os.environ.get(name)
    if val is None:
        return default
    return str(val).strip()


@contextlib.contextmanager
def bind_log_context(
    *,
    page: Optional[str] = None,
    step: Optional[str] = None,
) -> Iterator[None]:
    tokens = []
    try:
        if page is not None:
            tokens.append((_page_var, _page_var.set(str(page))))
        if step is not None:
            tokens.append((_step_var, _step_var.set(str(step))))
        yield
    finally:
        for var, token in reversed(tokens):
            try:
                var.reset(token)
            except Exception:
                logging.getLogger("logging_setup").exception("Failed to reset log context var=%s", getattr(var, "name", "<unknown>"))


class _ContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "page"):
            record.page = _page_var.get()
        if not hasattr(record, "step"):
            record.step = _step_var.get()
        if not hasattr(record, "event"):
            record.event = record.msg if isinstance(record.msg, str) else record.name
        if not hasattr(record, "data"):
            record.data = None
        return True


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "event": getattr(record, "event", record.getMessage()),
            "msg": record.getMessage(),
            "page": getattr(record, "page", "-"),
            "step": getattr(record, "step", "-"),
        }
        data = getattr(record, "data", None)
        if isinstance(data, dict) and data:
            payload["data"] = data

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False)


class _TextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        data = getattr(record, "data", None)
        if isinstance(data, dict) and data:
            try:
                return f"{base} data={json.dumps(data, ensure_ascii=False, separators=(',', ':'))}"
            except Exception:
                return f"{base} data=<unserializable>"
        return base


def log_event(logger: logging.Logger, level: int, event: str, **data: Any) -> None:
    logger.log(level, event, extra={"event": event, "data": data or None})


def setup_logging(*, level: Optional[str] = None) -> None:
    """
    Configure project-wide logging (stderr console + optional rotating file).

    `level` (from the checker config) takes precedence over LOG_LEVEL.

    The status report owns stdout, so console logs always go to stderr.

    Environment variables:
      - LOG_LEVEL: DEBUG/INFO/WARNING/ERROR/CRITICAL (default WARNING)
      - LOG_DIR: directory to write logs (default: ./logs)
      - LOG_FILE: filename (default: webpagecheck.log)
      - LOG_MAX_BYTES: max size per file (default: 5_000_000)
      - LOG_BACKUP_COUNT: rotated backups to keep (default: 5)
      - LOG_TO_CONSOLE: enable console logging (default: true)
      - LOG_TO_FILE: enable file logging (default: false)
      - LOG_JSON: write JSON logs (default: false)

    Notes:
      - Idempotent; calling multiple times is safe.
    """
    root = logging.getLogger()
    if getattr(root, "_webpagecheck_configured", False):
        return

    level_name = (level or os.environ.get("LOG_LEVEL") or "WARNING").upper().strip()
    log_level = getattr(logging, level_name, logging.WARNING)
    root.setLevel(log_level)

    log_json = _env_bool("LOG_JSON", False)
    context_filter = _ContextFilter()

    base_fmt = "%(asctime)s %(levelname)s %(name)s page=%(page)s step=%(step)s %(message)s"
    formatter: logging.Formatter = _JsonFormatter() if log_json else _TextFormatter(
        fmt=base_fmt,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    def _add_handler(h: logging.Handler) -> None:
        h.setLevel(log_level)
        h.addFilter(context_filter)
        h.setFormatter(formatter)
        root.addHandler(h)

    if _env_bool("LOG_TO_CONSOLE", True):
        _add_handler(logging.StreamHandler(sys.stderr))

    if _env_bool("LOG_TO_FILE", False):
        chosen_dir = Path(os.environ.get("LOG_DIR") or (Path.cwd() / "logs"))
        filename = os.environ.get("LOG_FILE") or "webpagecheck.log"
        path = chosen_dir / filename

        max_bytes = int(_env_str("LOG_MAX_BYTES", "5000000"))
        backup_count = int(_env_str("LOG_BACKUP_COUNT", "5"))

        try:
            chosen_dir.mkdir(parents=True, exist_ok=True)
            _add_handler(
                RotatingFileHandler(
                    path,
                    maxBytes=max_bytes,
                    backupCount=backup_count,
                    encoding="utf-8",
                )
            )
        except OSError:
            # Degrade to console-only logging instead of aborting the check run.
            logging.getLogger("logging_setup").warning("Failed to enable file logging for %s; continuing with console only.", path, exc_info=True)

    root._webpagecheck_configured = True
    file_handler_paths = [getattr(h, "baseFilename") for h in root.handlers if hasattr(h, "baseFilename")]
    log_event(
        logging.getLogger("logging_setup"),
        logging.DEBUG,
        "logging_configured",
        log_level=level_name,
        json=log_json,
        to_console=_env_bool("LOG_TO_CONSOLE", True),
        to_file=_env_bool("LOG_TO_FILE", False),
        file_paths=file_handler_paths or None,
    )
