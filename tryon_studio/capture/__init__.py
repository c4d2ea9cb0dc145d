"""Camera access, countdown and the photo acquisition state machine."""

from .camera import CameraDevice, CameraStream, FacingMode, StreamConstraints
from .countdown import Countdown
from .controller import AcquisitionController, AcquisitionState

__all__ = [
    "CameraDevice",
    "CameraStream",
    "FacingMode",
    "StreamConstraints",
    "Countdown",
    "AcquisitionController",
    "AcquisitionState",
]
