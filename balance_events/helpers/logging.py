"""Logger module."""

import logging
import sys

import colorlog

loggers: dict[str, logging.Logger] = {}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

default_log_level = "INFO"


def _resolve_level(level_name: str) -> int:
    level = logging.getLevelNamesMapping().get(level_name)
    if level is None or level_name == "NOTSET":
        err_msg = f"Invalid log level: {level_name}"
        raise ValueError(err_msg)
    return level


def get_logger(
    name: str,
    log_handler: str = "stdout",
    log_level: str | None = None,
    log_color: bool = False,
) -> logging.Logger:
    """Get logger.

    Args:
        name: The name of the logger.
        log_handler: The log handler type ('stdout').
        log_level: The logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR',
            'CRITICAL'). Defaults to the level last set with set_log_level,
            INFO until then.
        log_color: Whether to use colored output.

    Returns:
        logging.Logger: Configured logger instance.

    Raises:
        ValueError: If invalid handler or log level is provided.
    """
    if name in loggers:
        return loggers[name]

    if log_handler != "stdout":
        err_msg = f"Invalid handler: {log_handler}"
        raise ValueError(err_msg)

    level = _resolve_level(log_level if log_level is not None else default_log_level)

    if log_color:
        logger = colorlog.getLogger(name)
        handler: logging.Handler = colorlog.StreamHandler(sys.stdout)
        handler.setFormatter(
            colorlog.ColoredFormatter(
                f"%(log_color)s {LOG_FORMAT}",
                log_colors={
                    "DEBUG": "cyan",
                    "INFO": "green",
                    "WARNING": "yellow",
                    "ERROR": "red",
                    "CRITICAL": "red,bg_white",
                },
            )
        )
    else:
        logger = logging.getLogger(name)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger.setLevel(level)
    handler.setLevel(level)
    logger.addHandler(handler)

    loggers[name] = logger
    return logger


def set_log_level(level_name: str) -> None:
    """Apply a level to every logger created so far and to later ones.

    Module loggers are created at import time with the default level; the
    entry point calls this once the configured level is known.

    Args:
        level_name: Level name such as 'DEBUG' or 'WARNING'.

    Raises:
        ValueError: If the level name is invalid.
    """
    global default_log_level

    level = _resolve_level(level_name)
    default_log_level = level_name
    for logger in loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)


__all__ = ["get_logger", "set_log_level"]
