"""
Error taxonomy for the analysis core.

Every failure surfaced to a caller is one of these exceptions. Each carries
an ErrorKind and a user-facing message that is safe to display as-is.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    INVALID_RESPONSE = "invalid_response"
    SERVER_ERROR = "server_error"
    UNAUTHORIZED = "unauthorized"
    NO_DATA = "no_data"
    IMAGE_TOO_LARGE = "image_too_large"
    NOT_THE_CLAIMED_SUBJECT = "not_the_claimed_subject"
    PARSING_ERROR = "parsing_error"


TRANSIENT_KINDS = frozenset(
    {ErrorKind.NETWORK_ERROR, ErrorKind.TIMEOUT, ErrorKind.SERVER_ERROR}
)


class AnalysisError(Exception):
    """Base class for all analysis failures."""

    kind: ErrorKind = ErrorKind.NETWORK_ERROR

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.kind.value)
        self.detail = detail

    @property
    def is_transient(self) -> bool:
        return self.kind in TRANSIENT_KINDS

    @property
    def user_message(self) -> str:
        raise NotImplementedError


class NetworkError(AnalysisError):
    """Could not reach the AI service."""

    kind = ErrorKind.NETWORK_ERROR

    @property
    def user_message(self) -> str:
        return "Unable to connect to the internet. Please check your connection and try again."


class RequestTimeoutError(AnalysisError):
    """The AI service did not answer within the per-request timeout."""

    kind = ErrorKind.TIMEOUT

    @property
    def user_message(self) -> str:
        return "The request timed out. Please try again when you have a stronger connection."


class RateLimitError(AnalysisError):
    """Rate limit exceeded."""

    kind = ErrorKind.RATE_LIMIT_EXCEEDED

    @property
    def user_message(self) -> str:
        return "We've reached our limit for AI analysis. Please try again in a few minutes."


class InvalidResponseError(AnalysisError):
    """Non-retryable, non-success HTTP status."""

    kind = ErrorKind.INVALID_RESPONSE

    def __init__(self, status_code: int, detail: str = ""):
        super().__init__(detail or f"HTTP {status_code}")
        self.status_code = status_code

    @property
    def user_message(self) -> str:
        return (
            "We received an invalid response from our AI service "
            f"(Code: {self.status_code}). Please try again."
        )


class ServerError(AnalysisError):
    """5xx from the AI service after all retries."""

    kind = ErrorKind.SERVER_ERROR

    def __init__(self, status_code: int, detail: str = ""):
        super().__init__(detail or f"HTTP {status_code}")
        self.status_code = status_code

    @property
    def user_message(self) -> str:
        return (
            f"The AI service is experiencing issues (Error {self.status_code}). "
            "Please try again later."
        )


class UnauthorizedError(AnalysisError):
    kind = ErrorKind.UNAUTHORIZED

    @property
    def user_message(self) -> str:
        return "Authentication error. Please restart the app or contact support."


class NoDataError(AnalysisError):
    kind = ErrorKind.NO_DATA

    @property
    def user_message(self) -> str:
        return "No data was received from the analysis service. Please try again."


class ImageTooLargeError(AnalysisError):
    kind = ErrorKind.IMAGE_TOO_LARGE

    @property
    def user_message(self) -> str:
        return "Your image is too large. Please try a smaller image or reduce the quality."


class NotTheClaimedSubjectError(AnalysisError):
    """The model says the photo does not show what the user claimed."""

    kind = ErrorKind.NOT_THE_CLAIMED_SUBJECT

    def __init__(self, explanation: str, subject: str = "Bug Bite"):
        super().__init__(explanation)
        self.explanation = explanation
        self.subject = subject

    @property
    def user_message(self) -> str:
        noun = self.subject.lower()
        article = "an" if noun[:1] in "aeiou" else "a"
        if self.explanation:
            return f"This doesn't appear to be {article} {noun}: {self.explanation}"
        return (
            f"Our AI couldn't detect {article} {noun} in this image. "
            "Please try another photo."
        )


class ParsingError(AnalysisError):
    """Response text or body could not be decoded into a result."""

    kind = ErrorKind.PARSING_ERROR

    def __init__(self, reason: str, raw_response: Optional[str] = None):
        super().__init__(reason)
        self.reason = reason
        self.raw_response = raw_response

    @property
    def user_message(self) -> str:
        return "There was an error processing the response. Please try again."
