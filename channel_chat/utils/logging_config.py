import logging
import sys
from pathlib import Path

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Chatty at INFO; they log every HTTP request the ingestion makes
NOISY_LOGGERS = ("urllib3", "requests", "youtube_transcript_api")


def setup_logging(log_file: str = None, level: str = "INFO") -> logging.Logger:
    """Send channel_chat logs to stderr and, if configured, a log file.

    Safe to call more than once: handlers are only attached the first time,
    later calls just change the level.
    """
    app_logger = logging.getLogger("channel_chat")
    app_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if app_logger.handlers:
        return app_logger

    stderr = logging.StreamHandler(sys.stderr)
    stderr.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    app_logger.addHandler(stderr)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        app_logger.addHandler(file_handler)

    return app_logger
