"""Exception taxonomy for the synthesis and video pipelines."""


class PodcastError(Exception):
    """Base class for every error raised by podcast_producer."""

    status = 500


class ConfigurationError(PodcastError):
    """A required setting (API key, binary) is missing."""


class InvalidInputError(PodcastError, ValueError):
    """Input rejected before any network call (empty text, bad limits)."""

    status = 400


class ServiceError(PodcastError):
    """An upstream service call failed.

    Carries the upstream HTTP status when one was available.
    """

    default_message = "Upstream service error"

    def __init__(self, message: str | None = None, status: int | None = None):
        super().__init__(message or self.default_message)
        if status is not None:
            self.status = status


class RateLimitError(ServiceError):
    default_message = "Rate limit exceeded. Please try again later."
    status = 429


class AuthenticationError(ServiceError):
    default_message = "OpenAI API authentication error. Please check your API key."
    status = 401


class SynthesisError(ServiceError):
    default_message = "Speech synthesis failed"


class GenerationError(ServiceError):
    default_message = "OpenAI API error"


class MediaError(PodcastError):
    """Video assembly failed while loading media or recording."""


class ImageLoadError(MediaError):
    pass


class AudioLoadError(MediaError):
    pass


class MediaTimeoutError(MediaError):
    pass


class RecorderError(MediaError):
    pass


def error_for_status(
    status: int | None,
    detail: str = "",
    default: type[ServiceError] = SynthesisError,
) -> ServiceError:
    """Map an upstream HTTP status onto the most specific ServiceError.

    429 → RateLimitError, 401/402 → AuthenticationError, anything else →
    `default` with the status and detail kept in the message.
    """
    if status == 429:
        return RateLimitError(status=429)
    if status in (401, 402):
        return AuthenticationError(status=status)
    message = f"{default.default_message}: {status}" if status else default.default_message
    if detail:
        message = f"{message} ({detail})"
    return default(message, status=status)


def error_payload(exc: Exception) -> dict:
    """Structured error body for callers: {"error": message, "status": code}."""
    if isinstance(exc, PodcastError):
        return {"error": str(exc), "status": exc.status}
    return {"error": str(exc) or "Unknown error", "status": 500}
