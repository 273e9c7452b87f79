"""
Logging setup shared by the CLI and the Textual app.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    verbose: bool = False,
    level: str = "INFO",
    log_file: Optional[str] = None,
    console: bool = True,
) -> None:
    """Setup logging configuration.

    The Textual app passes console=False so log records never write over the
    screen; they go to the log file only.
    """
    log_level = logging.DEBUG if verbose else getattr(logging, str(level).upper(), logging.INFO)

    handlers: list[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler(sys.stderr))
    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path))
    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(level=log_level, format=LOG_FORMAT, handlers=handlers, force=True)

    # Third-party HTTP clients are noisy at DEBUG
    for noisy in ("urllib3", "httpx", "openai"):
        logging.getLogger(noisy).setLevel(max(log_level, logging.WARNING))
