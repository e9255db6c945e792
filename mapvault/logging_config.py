import logging
import logging.handlers

from rich.console import Console
from rich.logging import RichHandler

from .config import Settings

FILE_FORMAT = "%(asctime)s - %(levelname)s - %(filename)s:%(lineno)d in %(funcName)s() - %(message)s"

# Third-party loggers that are chatty below WARNING
QUIET_LOGGERS = ("keyring", "asyncio")


def _console_handler(level: str) -> RichHandler:
    # stderr keeps stdout free for the result tables
    handler = RichHandler(
        console=Console(width=120, stderr=True),
        show_path=False,
        markup=False,  # messages contain share paths with [ and ]
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    return handler


def _file_handler(settings: Settings) -> logging.Handler:
    handler = logging.handlers.TimedRotatingFileHandler(
        filename=settings.log_file_path,
        when="midnight",
        backupCount=settings.log_retention_days,
        encoding="utf-8",
    )
    handler.setLevel(settings.log_level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def setup_logging(settings: Settings) -> None:
    """Route all logging to the terminal and a daily rotated log file."""
    settings.log_directory.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(_console_handler(settings.log_level))
    root_logger.addHandler(_file_handler(settings))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.debug(
        f"Logging initialized - file: {settings.log_file_path}, "
        f"level: {settings.log_level}, retention: {settings.log_retention_days} days"
    )
