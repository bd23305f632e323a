#!/usr/bin/env python3
"""
Jira Daily Report - command-line entry point.

    python -m jiratui [--config PATH] [--log-file PATH] [--log-level LEVEL]
"""
import argparse
import sys
import threading

from jirareport import __version__
from jirareport.config import load_settings
from jirareport.errors import ConfigError
from jirareport.utils.logger import get_logger, setup_logging

from .app import HELP_TEXT, DailyReportApp
from .messages import KeyInput, Quit
from .services.clients import build_clients

logger = get_logger(__name__)


def _read_input(app: DailyReportApp, stream=sys.stdin) -> None:
    for line in stream:
        app.post(KeyInput(line.strip()))
    app.post(Quit())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jira-daily-report", description="Jira + Tempo daily report")
    parser.add_argument("--config", help="Config file (default: ~/.jira-daily-report.json)")
    parser.add_argument("--log-file", help="Write logs here instead of stderr")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
        settings.validate()
    except ConfigError as exc:
        print(f"❌ Configuration error: {exc}", file=sys.stderr)
        return 2

    setup_logging(level=args.log_level or settings.log_level, filename=args.log_file or settings.log_file)
    logger.info("Starting jira-daily-report %s for %s", __version__, settings.jira_server)

    app = DailyReportApp(settings, build_clients(settings))
    print(HELP_TEXT)
    threading.Thread(target=_read_input, args=(app,), daemon=True).start()
    try:
        app.run()
    except KeyboardInterrupt:
        pass
    logger.info("Exiting")
    return 0


if __name__ == "__main__":
    sys.exit(main())
