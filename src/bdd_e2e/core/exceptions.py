from typing import Any, Optional


class BddE2EError(Exception):
    """Base exception for bdd-e2e"""
    pass


class ConfigurationError(BddE2EError):
    """Configuration-related errors"""
    pass


class WaitTimeoutError(BddE2EError):
    """A wait or poll exceeded its deadline"""
    pass


class HttpError(BddE2EError):
    """Non-2xx response returned by the API client"""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ExecutionError(BddE2EError):
    """Error during test execution"""
    pass


class StepDefinitionNotFoundError(ExecutionError):
    """No step definition matches a step"""
    pass
