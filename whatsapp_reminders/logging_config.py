"""Logging configuration for the WhatsApp Reminder service."""

import logging
import sys

# Configure root logger
logger = logging.getLogger("whatsapp_reminders")


def configure_logging(level: int = logging.INFO) -> None:
    """Set up logging configuration."""

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear all existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        '[%(asctime)s][%(levelname)s] %(name)s: %(message)s'
    )
    console_handler.setFormatter(formatter)

    root_logger.addHandler(console_handler)

    # Package loggers propagate to the root handler
    logger.handlers.clear()
    logger.setLevel(level)
    logger.propagate = True

    # The tick loop is chatty at DEBUG; keep it at the configured level
    for logger_name in ['whatsapp_reminders.services.triggers.scheduler', 'whatsapp_reminders.services.store']:
        specific_logger = logging.getLogger(logger_name)
        specific_logger.setLevel(level)
        specific_logger.propagate = True


def get_logger(name: str = "whatsapp_reminders") -> logging.Logger:
    """Get logger instance."""
    return logging.getLogger(name)
