"""
Utils Module
Logging setup and the shared error taxonomy.
"""
from .logger import setup_logger, get_logger
from .exceptions import (
    RoastPipelineError,
    ConfigurationError,
    ValidationError,
    AcquisitionError,
    GenerationError,
    TransientNetworkError,
    JobFailure,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "RoastPipelineError",
    "ConfigurationError",
    "ValidationError",
    "AcquisitionError",
    "GenerationError",
    "TransientNetworkError",
    "JobFailure",
]
