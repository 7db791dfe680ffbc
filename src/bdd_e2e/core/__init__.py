from .config import Settings, SUPPORTED_BROWSERS, PROFILES, apply_profile
from .logger import setup_logging, reset_logging
from .exceptions import (
    BddE2EError,
    ConfigurationError,
    WaitTimeoutError,
    HttpError,
    ExecutionError,
    StepDefinitionNotFoundError,
)

__all__ = [
    # Configuration
    "Settings",
    "SUPPORTED_BROWSERS",
    "PROFILES",
    "apply_profile",

    # Logging
    "setup_logging",
    "reset_logging",

    # Exceptions
    "BddE2EError",
    "ConfigurationError",
    "WaitTimeoutError",
    "HttpError",
    "ExecutionError",
    "StepDefinitionNotFoundError",
]
