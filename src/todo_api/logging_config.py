from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Optional

LOGGER_NAME = "todo_api"

_logger = logging.getLogger(LOGGER_NAME)


# PUBLIC_INTERFACE
def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a single stream handler to the `todo_api` logger tree.

    Safe to call more than once; the handler is only added the first time.
    """
    _logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not _logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )
        _logger.addHandler(handler)
    _logger.propagate = True  # allow pytest caplog to capture
    return _logger


def new_request_id() -> str:
    return uuid.uuid4().hex


def log_event(event: str, **fields: Any) -> None:
    rec = {"event": event}
    rec.update(fields)
    _logger.info(json.dumps(rec, ensure_ascii=False, default=str))


def finalize_request_log(
    request_id: str,
    method: str,
    path: str,
    status: int,
    latency_ms: int,
    client_ip: Optional[str],
) -> None:
    log_event(
        "request.completed",
        request_id=request_id,
        method=method,
        path=path,
        status=status,
        latency_ms=latency_ms,
        client_ip=client_ip or "",
    )
