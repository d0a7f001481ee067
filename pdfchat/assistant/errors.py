"""Error taxonomy for the chat service.

Every failure the service surfaces is a ChatServiceError carrying an HTTP
status and a human-readable message. The API layer renders these as
``{"error": message}`` with the carried status, adding ``"message"`` when a
route attached a summary of the failed operation.
"""

from fastapi import status


class ChatServiceError(Exception):
    """Base class for chat service failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.summary: str | None = None
        if status_code is not None:
            self.status_code = status_code

    def with_summary(self, summary: str) -> "ChatServiceError":
        """Attach a client-facing description of the failed operation."""
        self.summary = summary
        return self


class InvalidRequest(ChatServiceError):
    """Caller supplied missing or malformed fields."""

    status_code = status.HTTP_400_BAD_REQUEST


class PayloadTooLarge(ChatServiceError):
    """Uploaded content exceeds the configured size limit."""

    status_code = status.HTTP_413_CONTENT_TOO_LARGE


class ThreadNotFound(ChatServiceError):
    """Thread id was never registered in this process."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, thread_id: str) -> None:
        super().__init__(f"Thread not found: {thread_id}")
        self.thread_id = thread_id


class UpstreamUnavailable(ChatServiceError):
    """The assistant gateway was unreachable or rejected a call."""

    @classmethod
    def from_exception(cls, exc: Exception, message: str) -> "UpstreamUnavailable":
        """Wrap a gateway exception, keeping its reported HTTP status.

        Args:
            exc: Exception raised by the OpenAI client.
            message: Context describing the failed operation.

        Returns:
            Error carrying the gateway status, or 500 when it reported none.
        """
        status_code = getattr(exc, "status_code", None) or status.HTTP_500_INTERNAL_SERVER_ERROR
        detail = getattr(exc, "message", None) or str(exc)
        return cls(f"{message}: {detail}", status_code=status_code)


class AttachmentUploadFailed(UpstreamUnavailable):
    """The gateway rejected a file upload."""


class RunFailed(ChatServiceError):
    """A run reached a terminal status other than completed."""

    def __init__(self, run_status: str, last_error: str | None = None) -> None:
        message = f"Assistant run ended with status: {run_status}"
        if last_error:
            message = f"{message} ({last_error})"
        super().__init__(message)
        self.run_status = run_status
        self.last_error = last_error


class MalformedUpstreamResponse(ChatServiceError):
    """A completed run produced a response of an unexpected shape."""

    status_code = status.HTTP_502_BAD_GATEWAY


class RunTimeout(ChatServiceError):
    """A run did not reach a terminal status within the configured limit."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT

    def __init__(self, run_id: str, timeout: float) -> None:
        super().__init__(f"Assistant run {run_id} did not finish within {timeout:g} seconds")
        self.run_id = run_id
        self.timeout = timeout


class LocalResourceError(ChatServiceError):
    """A staged file could not be written or read."""
