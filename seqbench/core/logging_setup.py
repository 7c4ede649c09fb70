# seqbench/core/logging_setup.py
import datetime
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

# Between INFO (20) and WARNING (30): experiment results summaries
RESULT_LEVEL = 25

logging.addLevelName(RESULT_LEVEL, "RESULT")

LOG_LEVEL_STRINGS = {
    'CRITICAL': logging.CRITICAL,
    'ERROR': logging.ERROR,
    'WARNING': logging.WARNING,
    'RESULT': RESULT_LEVEL,
    'INFO': logging.INFO,
    'DEBUG': logging.DEBUG,
    'NOTSET': logging.NOTSET,
}

FORMATTERS = {
    # Standard formatter - concise but with enough context
    'standard': logging.Formatter('%(asctime)s - %(levelname)s - %(message)s',
                                  datefmt='%H:%M:%S'),

    # Verbose formatter - includes logger name, component loggers are named component.<name>
    'verbose': logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                                 datefmt='%Y-%m-%d %H:%M:%S'),

    # Debug formatter - detailed with milliseconds
    'debug': logging.Formatter('%(asctime)s.%(msecs)03d - %(levelname)s - %(name)s - %(message)s',
                               datefmt='%Y-%m-%d %H:%M:%S'),

    'minimal': logging.Formatter('%(message)s')
}


def resolve_log_level(level_str: Optional[str], default: int = logging.WARNING) -> int:
    """Maps a level name (case-insensitive) to its numeric value."""
    if not level_str:
        return default
    return LOG_LEVEL_STRINGS.get(str(level_str).upper(), default)


def setup_logging(config_loader, cmd_log_level: Optional[str] = None, log_file: Optional[str] = None,
                  logs_dir: str = "logs", quiet: bool = False) -> int:
    """
    Configures console and file logging for an experiment run.

    The command-line level takes precedence over 'logging.level' in the
    configuration. Console output uses the verbose formatter (or the minimal
    one when quiet); the rotating file handler always uses the debug
    formatter.

    Args:
        config_loader: The config loader instance
        cmd_log_level: Optional command-line log level override
        log_file: Optional log file path, defaults to a timestamped file in logs_dir
        logs_dir: Directory for the default log file
        quiet: If True, console messages carry no timestamps or level names

    Returns:
        The numeric log level applied to the handlers
    """
    if cmd_log_level is not None:
        log_level_str = cmd_log_level.upper()
    else:
        log_level_str = str(config_loader.get('logging.level', 'WARNING')).upper()
    log_level = resolve_log_level(log_level_str)

    if not log_file:
        Path(logs_dir).mkdir(parents=True, exist_ok=True)
        timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = str(Path(logs_dir) / f"seqbench_{timestamp}.log")

    # Root logger passes everything through, handlers do the filtering
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(log_level)
    stdout_handler.setFormatter(FORMATTERS['minimal'] if quiet else FORMATTERS['verbose'])
    root_logger.addHandler(stdout_handler)

    # Max 100MB per file, keep 5 backups
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=100 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(FORMATTERS['debug'])
    root_logger.addHandler(file_handler)

    setup_logger = logging.getLogger(__name__)
    setup_logger.debug(f"Console and file logging level: {log_level_str}, file: {log_file}")
    return log_level
