"""
Logging setup.

Application loggers follow the root level: ERROR by default, DEBUG when the
debug setting is on. The access log (`books.access`) always writes at INFO,
one line per request, to the same file and console handlers.
"""

from __future__ import annotations

import logging
import sys
import time
from email.utils import formatdate

from fastapi import FastAPI, Request

from . import messages
from .config import Settings

ACCESS_LOGGER = "books.access"

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

access_logger = logging.getLogger(ACCESS_LOGGER)

# Handlers installed by configure_logging, so a second call replaces only its own.
_installed: list[tuple[logging.Logger, logging.Handler]] = []


def _attach(logger: logging.Logger, handler: logging.Handler) -> None:
    logger.addHandler(handler)
    _installed.append((logger, handler))


def _release(logger: logging.Logger) -> None:
    for owner, handler in list(_installed):
        if owner is logger:
            owner.removeHandler(handler)
            handler.close()
            _installed.remove((owner, handler))


def configure_logging(settings: Settings) -> None:
    """
    Attach file + stdout handlers to the root logger.

    An unwritable log file aborts startup.
    """
    try:
        file_handler = logging.FileHandler(settings.log_file, mode="a", encoding="utf-8")
    except OSError as exc:
        raise RuntimeError(f"{messages.LOG_FILE_FAILED} {exc}") from exc

    formatter = logging.Formatter(_FORMAT)
    stream_handler = logging.StreamHandler(sys.stdout)
    for handler in (file_handler, stream_handler):
        handler.setFormatter(formatter)

    root = logging.getLogger()
    _release(root)
    for handler in (file_handler, stream_handler):
        _attach(root, handler)
    root.setLevel(logging.DEBUG if settings.debug else logging.ERROR)

    # Access lines are bare: the line itself carries the timestamp.
    access_formatter = logging.Formatter("%(message)s")
    _release(access_logger)
    for handler in (logging.FileHandler(settings.log_file, mode="a", encoding="utf-8"),
                    logging.StreamHandler(sys.stdout)):
        handler.setFormatter(access_formatter)
        _attach(access_logger, handler)
    access_logger.setLevel(logging.INFO)
    access_logger.propagate = False


def release_logging() -> None:
    """
    Detach and close every handler configure_logging installed.
    """
    _release(logging.getLogger())
    _release(access_logger)
    access_logger.propagate = True


def format_access_line(
    *,
    client_ip: str,
    method: str,
    path: str,
    http_version: str,
    status_code: int,
    latency_s: float,
    user_agent: str,
) -> str:
    return '[%s] - %s "%s %s HTTP/%s %d %.6fs "%s""' % (
        formatdate(usegmt=True),
        client_ip,
        method,
        path,
        http_version,
        status_code,
        latency_s,
        user_agent,
    )


def install_access_log(app: FastAPI) -> None:
    @app.middleware("http")
    async def access_log(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        access_logger.info(
            format_access_line(
                client_ip=request.client.host if request.client else "-",
                method=request.method,
                path=request.url.path,
                http_version=request.scope.get("http_version", "1.1"),
                status_code=response.status_code,
                latency_s=time.perf_counter() - started,
                user_agent=request.headers.get("user-agent", ""),
            )
        )
        return response
