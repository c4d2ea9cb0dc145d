"""Error taxonomy for acquisition and submission.

Every error is recoverable at the UI boundary: ``message`` is safe to show
to the user, ``detail`` is for logs.
"""


class TryOnError(Exception):
    """Base class for all studio errors."""

    code = "tryon_error"
    message = "Something went wrong. Please try again."
    retryable = True
    requires_new_image = False

    def __init__(self, detail: str | None = None):
        self.detail = detail
        super().__init__(detail or self.message)


class InvalidTransition(TryOnError):
    code = "invalid_transition"
    message = "That action isn't available right now."


# Camera

class PermissionDenied(TryOnError):
    code = "permission_denied"
    message = "Camera access was denied. Allow camera access or upload a photo instead."


class NoDevice(TryOnError):
    code = "no_device"
    message = "No camera was found. Upload a photo instead."


class UnsupportedConstraints(TryOnError):
    code = "unsupported_constraints"
    message = "Your camera doesn't support the requested settings."


class FrameNotReady(TryOnError):
    code = "frame_not_ready"
    message = "The camera isn't ready yet. Please try again in a moment."


# External photo

class NotAnImage(TryOnError):
    code = "not_an_image"
    message = "That file isn't an image."


class NetworkBlocked(TryOnError):
    code = "network_blocked"
    message = "The image couldn't be loaded from that address. Try downloading it and uploading the file."


class InvalidUrl(TryOnError):
    code = "invalid_url"
    message = "Please enter a valid image URL."


# Submission

class MissingInput(TryOnError):
    code = "missing_input"
    message = "Please upload or capture your photo and select a clothing item."


class AlreadyPending(TryOnError):
    code = "already_pending"
    message = "A try-on is already being generated."


class Throttled(TryOnError):
    code = "throttled"
    message = "Too many requests. Please wait a moment and try again."


class QuotaExceeded(TryOnError):
    code = "quota_exceeded"
    message = "AI credits required. Please add credits to continue."
    retryable = False


class GenerationFailed(TryOnError):
    code = "generation_failed"
    message = "Failed to generate try-on. Please try again."


class EmptyResult(GenerationFailed):
    code = "empty_result"


class NoPersonDetected(TryOnError):
    code = "no_person_detected"
    message = "We couldn't find a person in your photo. Please use a different photo."
    retryable = False
    requires_new_image = True
