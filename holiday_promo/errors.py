"""Domain errors shared by the services, the worker and the HTTP layer."""

from __future__ import annotations


class DomainError(RuntimeError):
    """Base class for failures that map onto a client-visible status code."""

    status_code: int = 400
    default_message: str = "Request failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class Unauthenticated(DomainError):
    status_code = 401
    default_message = "Not authenticated"


class NotFoundOrUnauthorized(DomainError):
    status_code = 404
    default_message = "Product not found or not authorized"


class ThemeNotFound(DomainError):
    status_code = 404
    default_message = "Theme not found"


class GenerationNotFound(DomainError):
    status_code = 404
    default_message = "Generation not found"


class UploadSlotNotFound(DomainError):
    status_code = 404
    default_message = "Upload destination not found or already used"


class InvalidStatusTransition(DomainError):
    status_code = 409
    default_message = "Generation status cannot move backwards."


class NoProductImages(DomainError):
    status_code = 422
    default_message = "No product images found"


class UnexpectedResponseFormat(DomainError):
    status_code = 502
    default_message = "Unexpected output format from image generation API"


class DownloadFailed(DomainError):
    status_code = 502
    default_message = "Failed to fetch generated image"


class UploadFailed(DomainError):
    status_code = 502
    default_message = "Failed to upload generated image"


class GeneratorNotConfigured(DomainError):
    status_code = 503
    default_message = "Replicate API token is not configured."


class BlobNotFound(DomainError):
    status_code = 404
    default_message = "No such file."
