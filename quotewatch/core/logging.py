import logging
import sys
from typing import Iterable, Optional, TextIO

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"

# Third-party loggers that log every request or job run at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "apscheduler")


def setup_logging(
    level: str = "INFO",
    stream: Optional[TextIO] = None,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """
    Configure logging for the console application.

    Fetches run in worker threads, so the thread name is part of every line.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(stream or sys.stdout)],
    )

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
