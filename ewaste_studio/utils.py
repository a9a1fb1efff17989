"""
Logging helpers shared by the Streamlit app and the annotation services
"""
import logging
from pathlib import Path
from typing import Optional, Union


def setup_logging(
    name: str = "ewaste_studio",
    level: Union[int, str] = logging.INFO,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """
    Set up logging for the application.

    Creates a console handler and, when log_dir is given, a file handler.

    Args:
        name: Logger name (service modules log under this namespace)
        level: Logging level
        log_dir: Directory for the log file, or None for console only

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Clear existing handlers (Streamlit reruns the script on every interaction)
    logger.handlers = []

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_format = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    # File handler
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_dir / f"{name}.log")
        file_handler.setLevel(level)
        file_format = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        file_handler.setFormatter(file_format)
        logger.addHandler(file_handler)

    return logger
