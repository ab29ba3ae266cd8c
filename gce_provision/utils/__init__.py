"""Utils package."""

from .logger import setup_logging
from .naming import generate_instance_name
from .polling import Backoff, PollTimeoutError, wait_until
from .progress import ProgressTracker, SimpleProgressTracker, create_progress_tracker

__all__ = [
    'setup_logging',
    'generate_instance_name',
    'Backoff',
    'PollTimeoutError',
    'wait_until',
    'ProgressTracker',
    'SimpleProgressTracker',
    'create_progress_tracker'
]
