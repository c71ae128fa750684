"""
Logging setup - console output plus rotating session and error logs.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

SESSION_LOG = 'avatar_chat.log'
ERROR_LOG = 'errors.log'

CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'

# Chatty below WARNING: HTTP client per request, TTS driver per utterance
NOISY_LOGGERS = ('httpx', 'httpcore', 'openai', 'comtypes', 'PIL')

def _rotating_handler(path: Path, level: int, max_bytes: int, formatter: logging.Formatter):
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=3,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler

def setup_logging(log_level: str = "INFO", log_dir: str = "logs", console_level: Optional[str] = None):
    """Configure the root logger for the application.

    ``log_level`` applies to the session log; the console shows INFO and
    above unless ``console_level`` says otherwise. Errors are also copied
    to a separate file so they survive rotation of the session log.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    console = getattr(logging, (console_level or "INFO").upper(), logging.INFO)

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(min(level, console))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)

    file_format = logging.Formatter(FILE_FORMAT)
    root_logger.addHandler(_rotating_handler(log_path / SESSION_LOG, level, 5*1024*1024, file_format))
    root_logger.addHandler(_rotating_handler(log_path / ERROR_LOG, logging.ERROR, 1*1024*1024, file_format))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(f"Logging to {log_path.resolve()} at {logging.getLevelName(level)}")
