#!/usr/bin/env python3
"""
Process entrypoint: configure logging, start uvicorn, stop on SIGINT/SIGTERM.

uvicorn stops accepting connections and drains in-flight requests when a
termination signal arrives; the handlers installed here make sure the
process then exits with status 0.
"""
import logging
import signal
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI

from webhook_receiver.app import LOG, create_app
from webhook_receiver.config import ConfigError, Settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def log_banner(settings: Settings) -> None:
    local = f"http://localhost:{settings.port}"
    LOG.info("Webhook receiver running on http://%s:%s", settings.host, settings.port)
    LOG.info("Main endpoint: %s/webhook", local)
    LOG.info("Health check: %s/health", local)
    LOG.info("Info: %s/", local)
    LOG.info("Try: curl %s/health", local)
    LOG.info(
        "Try: curl -X POST %s/webhook -H \"Content-Type: application/json\" -d '{\"test\":\"data\"}'",
        local,
    )


def build_server(settings: Settings, app: Optional[FastAPI] = None) -> uvicorn.Server:
    config = uvicorn.Config(
        app or create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,
        timeout_graceful_shutdown=settings.shutdown_timeout,
    )
    return uvicorn.Server(config)


def _stop(signum, frame):
    LOG.info("Stopped by %s; server closed.", signal.Signals(signum).name)
    raise SystemExit(0)


def install_signal_handlers() -> None:
    # uvicorn swaps in its own handlers while serving and re-raises the
    # captured signal afterwards, which lands here.
    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, _stop)


def main():
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        configure_logging()
        LOG.error("Invalid configuration: %s", e)
        sys.exit(2)

    configure_logging(settings.log_level)
    server = build_server(settings)
    install_signal_handlers()
    log_banner(settings)
    server.run()
    LOG.info("Server closed.")


if __name__ == "__main__":
    main()
