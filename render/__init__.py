"""Speech and video rendering for roast scripts."""

from .manager import VideoRenderManager
from .poller import ALLOWED_TRANSITIONS, AsyncioClock, Clock, JobPoller, transition

__all__ = [
    "ALLOWED_TRANSITIONS",
    "AsyncioClock",
    "Clock",
    "JobPoller",
    "VideoRenderManager",
    "transition",
]
