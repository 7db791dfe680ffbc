from .waits import Waits, RetryPolicy
from .api_client import ApiClient
from .data_builder import TestDataBuilder

__all__ = ['Waits', 'RetryPolicy', 'ApiClient', 'TestDataBuilder']
