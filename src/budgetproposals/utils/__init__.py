"""Utility modules for BudgetProposals.

This package contains shared utilities that support the extraction and
sync pipelines. The utilities are organized into specialized modules:

- config.py: Environment variable management and the PipelineConfig settings
- monitoring.py: Progress and performance tracking for long runs
- scheduler.py: Bounded-concurrency fan-out shared by both pipelines
- logging_config.yaml: dictConfig used by setup_logging()
- __init__.py: Centralized imports and the logging helpers

Integration Points:
    - The config module provides OpenAI and Qdrant credentials to the
      extraction client, the embedding generator and the proposal store
    - The monitoring module is the run context for progress reporting
    - The logger utility ensures consistent log formatting across all modules

Python Learning Notes:
    - This __init__.py file serves as a package initializer and public API
    - The __all__ list at the bottom controls what gets imported with "from utils import *"
    - logging.config.dictConfig() applies a whole logging setup in one call
"""

import logging
import logging.config
from pathlib import Path
from typing import Optional

import yaml

from .config import PipelineConfig, get_openai_api_key, get_qdrant_settings
from .monitoring import PerformanceMonitor
from .scheduler import ConcurrencyScheduler, TaskOutcome

# Global flag to track if logging has been configured
_logging_configured = False

DEFAULT_LOGGING_CONFIG = Path(__file__).parent / "logging_config.yaml"


def setup_logging(config_path: Optional[Path] = None, verbose: bool = False) -> None:
    """Set up logging configuration from YAML file.

    Configures the entire logging system from a YAML dictConfig file. It
    should be called once at application startup (the CLI does this) before
    other modules request loggers. Later calls are no-ops unless ``verbose``
    asks for DEBUG output, in which case the package logger level is lowered.

    The logging configuration includes:
    - A console handler writing to stderr
    - A rotating file handler under ./logs so long runs keep an audit trail
    - WARNING level for chatty third-party libraries (httpx, openai, qdrant)

    Args:
        config_path (Optional[Path]): Path to the logging configuration YAML
            file. If None, the packaged ``logging_config.yaml`` is used.
        verbose (bool): If True, the ``budgetproposals`` logger and the
            console handler are set to DEBUG.

    Raises:
        FileNotFoundError: If the logging configuration file is not found.
        yaml.YAMLError: If the YAML configuration file is malformed.

    Example Usage:
        ```python
        from budgetproposals.utils import setup_logging

        setup_logging(verbose=True)
        # Now all modules can use: logger = get_logger(__name__)
        ```
    """
    global _logging_configured

    if not _logging_configured:
        if config_path is None:
            config_path = DEFAULT_LOGGING_CONFIG

        if not config_path.exists():
            raise FileNotFoundError(f"Logging config file not found: {config_path}")

        # Ensure logs directory exists
        logs_dir = Path("logs")
        if not logs_dir.exists():
            logs_dir.mkdir(parents=True, exist_ok=True)

        # Load and apply YAML configuration
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)

        logging.config.dictConfig(config)
        _logging_configured = True

    if verbose:
        package_logger = logging.getLogger("budgetproposals")
        package_logger.setLevel(logging.DEBUG)
        for handler in package_logger.handlers:
            if isinstance(handler, logging.StreamHandler) and not isinstance(
                handler, logging.FileHandler
            ):
                handler.setLevel(logging.DEBUG)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger instance using the centralized logging configuration.

    If setup_logging() hasn't been called yet, it is called with the
    packaged defaults before the logger is returned.

    Args:
        name (Optional[str]): Logger name to use. Pass __name__ so module
            loggers inherit the ``budgetproposals`` settings.

    Returns:
        logging.Logger: A configured logger instance.

    Example Usage:
        ```python
        from budgetproposals.utils import get_logger

        logger = get_logger(__name__)
        logger.info("Segmented %d proposals", count)
        ```
    """
    if not _logging_configured:
        setup_logging()

    return logging.getLogger(name or __name__)


__all__ = [
    "PipelineConfig",
    "get_openai_api_key",
    "get_qdrant_settings",
    "PerformanceMonitor",
    "ConcurrencyScheduler",
    "TaskOutcome",
    "setup_logging",
    "get_logger",
]
