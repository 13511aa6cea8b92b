"""
Custom Exceptions
Error taxonomy shared by the roast pipeline stages.
"""
from typing import Optional


class RoastPipelineError(Exception):
    """Base error for every pipeline stage."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(RoastPipelineError):
    """Missing or invalid collaborator configuration."""
    pass


class ValidationError(RoastPipelineError):
    """Malformed batch input, raised before any processing."""
    pass


class AcquisitionError(RoastPipelineError):
    """Profile data could not be acquired."""

    def __init__(self, message: str, identifier: Optional[str] = None, **kwargs):
        super().__init__(message, kwargs)
        self.identifier = identifier


class GenerationError(RoastPipelineError):
    """A reasoning, speech or video collaborator returned an unusable payload."""

    def __init__(self, message: str, provider: Optional[str] = None, **kwargs):
        super().__init__(message, kwargs)
        self.provider = provider


class TransientNetworkError(GenerationError):
    """Network-level failure of a status call; only the job poller retries it."""
    pass


class JobFailure(RoastPipelineError):
    """A rendering job reached Errored, Rejected or TimedOut."""

    def __init__(self, message: str, job_id: Optional[str] = None, state: Optional[str] = None, **kwargs):
        super().__init__(message, kwargs)
        self.job_id = job_id
        self.state = state
