"""Virtual try-on studio: photo acquisition, selection and try-on submission."""

from .config import StudioConfig, load_config
from .selection import SelectionState
from .studio import TryOnStudio
from .submission import SubmissionController

__all__ = [
    "StudioConfig",
    "load_config",
    "SelectionState",
    "SubmissionController",
    "TryOnStudio",
]
