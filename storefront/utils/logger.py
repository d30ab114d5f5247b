import logging
import sys
from functools import wraps
from typing import Optional
from pathlib import Path

ROOT_LOGGER_NAME = "storefront"


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
) -> logging.Logger:
    """
    Set up a logger with console and optional file handlers

    Args:
        name: Logger name
        level: Logging level
        log_file: Optional file path for logging
        log_format: Log message format

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    formatter = logging.Formatter(log_format)

    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
               for h in logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # File handler (optional), added at most once per path
    if log_file:
        log_path = Path(log_file)
        already_attached = any(
            isinstance(h, logging.FileHandler) and Path(h.baseFilename) == log_path.resolve()
            for h in logger.handlers
        )
        if not already_attached:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance

    Module loggers are children of the application logger so they share
    its handlers.

    Args:
        name: Logger name (optional)

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
    return logging.getLogger(ROOT_LOGGER_NAME)


# Create default logger
default_logger = setup_logger()


def log_database_operation(operation: str):
    """
    Decorator to log database operations

    Args:
        operation: Description of the database operation
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            log = get_logger("database")
            log.info(f"Starting database operation: {operation}")

            try:
                result = func(*args, **kwargs)
                log.info(f"Database operation '{operation}' completed successfully")
                return result
            except Exception as e:
                log.error(f"Database operation '{operation}' failed: {str(e)}", exc_info=True)
                raise
        return wrapper
    return decorator


def log_email_operation(operation: str):
    """
    Decorator to log email operations

    Args:
        operation: Description of the email operation
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            log = get_logger("email")
            log.info(f"Starting email operation: {operation}")

            try:
                result = func(*args, **kwargs)
                log.info(f"Email operation '{operation}' completed successfully")
                return result
            except Exception as e:
                log.error(f"Email operation '{operation}' failed: {str(e)}", exc_info=True)
                raise
        return wrapper
    return decorator
