#!/usr/bin/env python3
"""
Main entry point for the League Scorekeeper web application.

This script launches the Flask-based web server.
"""
import argparse

from scorekeeper.services import ServiceFactory
from scorekeeper.ui.web_app import run_web_app
from scorekeeper.utils import configure_logging
from scorekeeper.utils.settings import get_settings


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="League Scorekeeper web server")
    parser.add_argument("--host", default=settings.HOST)
    parser.add_argument("--port", type=int, default=settings.PORT)
    parser.add_argument(
        "--offline", action="store_true",
        help="use an in-memory league service instead of SCOREKEEPER_API_URL",
    )
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)
    factory = ServiceFactory(settings=settings, offline=args.offline)
    run_web_app(host=args.host, port=args.port, service_factory=factory)


if __name__ == "__main__":
    main()
