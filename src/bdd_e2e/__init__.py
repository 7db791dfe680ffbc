"""
BDD E2E - Playwright end-to-end testing with Gherkin scenarios
"""

__version__ = "0.1.0"
__author__ = "BDD E2E Contributors"

from .core import Settings, setup_logging
from .executor import TestExecutor

__all__ = [
    "Settings",
    "setup_logging",
    "TestExecutor",
    "__version__",
]
