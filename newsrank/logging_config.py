"""Logging configuration: brief console output plus a detailed rotating session log"""
import glob
import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Third-party loggers that are too chatty for the console
NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "google_genai", "asyncpg")


def setup_logging(
    log_file: str = "logs/newsrank.log",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    keep_sessions: int = 5,
):
    """
    Configure logging with two destinations:
    - Console: one line per event (INFO by default)
    - File: timestamps, module and line numbers (DEBUG by default)

    Every process start writes to a new session file named
    `<stem>_<YYYYmmdd_HHMMSS>.log`. Only the newest `keep_sessions` session
    files are kept, and a session file rotates at 10MB.

    Args:
        log_file: Base path to log file (relative to the working directory)
        console_level: Console logging level
        file_level: File logging level
        keep_sessions: Session files to retain, including the new one
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Newest first; leave room for the session about to start
    old_sessions = sorted(glob.glob(str(log_path.parent / f"{log_path.stem}_*.log")), reverse=True)
    for old_log in old_sessions[max(keep_sessions - 1, 0):]:
        try:
            Path(old_log).unlink()
        except OSError as e:
            print(f"WARNING: could not remove old log file {old_log}: {e}", file=sys.stderr)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    session_log = log_path.parent / f"{log_path.stem}_{timestamp}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Handlers do the filtering
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

    file_handler = RotatingFileHandler(
        session_log,
        mode='a',
        maxBytes=10*1024*1024,  # 10MB
        backupCount=10,
        encoding='utf-8'
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(
        f"Logging configured: console={logging.getLevelName(console_level)}, "
        f"file={session_log} ({logging.getLevelName(file_level)})"
    )
    return session_log
