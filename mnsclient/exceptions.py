"""
Exception hierarchy for mnsclient.

All custom exceptions inherit from MNSError base class.
"""

from typing import Any, List, Optional


class MNSError(Exception):
    """Base exception for all mnsclient errors."""
    pass


# Client-side Errors
class SDKConfigurationError(MNSError):
    """Raised when client configuration is invalid."""
    pass


class InvalidArgumentError(MNSError):
    """Raised when a request fails client-side validation, before any network call."""
    pass


class PromiseError(MNSError):
    """Raised when an async handle is misused or a wait times out."""
    pass


# Transport Errors
class TransportError(MNSError):
    """Raised when the request could not be delivered or no reply was read. Retryable."""
    pass


class TransportTimeoutError(TransportError):
    """Raised when the connect or read timeout expires."""
    pass


# Protocol Errors
class ParseError(MNSError):
    """Raised when a reply cannot be decoded. Not retryable."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: bytes = b""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


# Service Errors
class ServiceError(MNSError):
    """
    Raised when the service answers with a structured error document.

    Attributes:
        code: Service error code (e.g. "QueueNotExist")
        message: Human-readable message from the service
        request_id: Request id assigned by the service
        host_id: Host that served the request
        status_code: HTTP status code of the reply
    """

    def __init__(
        self,
        code: str,
        message: str = "",
        request_id: Optional[str] = None,
        host_id: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(f"{code}: {message}" if message else code)
        self.code = code
        self.message = message
        self.request_id = request_id
        self.host_id = host_id
        self.status_code = status_code


class AlreadyExistsError(ServiceError):
    """Raised when creating a resource whose name is taken with different attributes."""
    pass


class QueueAlreadyExistError(AlreadyExistsError):
    """Raised when the queue already exists."""
    pass


class TopicAlreadyExistError(AlreadyExistsError):
    """Raised when the topic already exists."""
    pass


class SubscriptionAlreadyExistError(AlreadyExistsError):
    """Raised when the subscription already exists."""
    pass


class NotFoundError(ServiceError):
    """Raised when the addressed resource does not exist."""
    pass


class QueueNotExistError(NotFoundError):
    """Raised when the queue does not exist."""
    pass


class TopicNotExistError(NotFoundError):
    """Raised when the topic does not exist."""
    pass


class SubscriptionNotExistError(NotFoundError):
    """Raised when the subscription does not exist."""
    pass


class ReceiptHandleExpiredError(ServiceError):
    """
    Soft error for message operations on a handle that is no longer valid.

    Deleting an already-deleted message, or using a receipt handle whose
    visibility window has passed, ends up here. Callers that retry deletes
    can safely ignore it.
    """
    pass


class MessageNotExistError(ReceiptHandleExpiredError):
    """Raised when the message addressed by a receipt handle is gone."""
    pass


class InvalidReceiptHandleError(ReceiptHandleExpiredError):
    """Raised when the receipt handle is malformed or expired."""
    pass


class InvalidArgumentServiceError(ServiceError):
    """Raised when the service rejects a parameter value."""
    pass


class AccessDeniedError(ServiceError):
    """Raised when authentication or authorization fails."""
    pass


class ThrottledError(ServiceError):
    """Raised when the service refuses the request because of rate limits."""
    pass


class BatchSendError(ServiceError):
    """
    Raised when some messages of a batch send fail.

    ``results`` holds one entry per submitted message, in order; failed
    entries carry ``error_code`` and ``error_message``.
    """

    def __init__(self, code: str, message: str = "", results: Optional[List[Any]] = None, **kwargs: Any):
        super().__init__(code, message, **kwargs)
        self.results = results or []


class BatchDeleteError(ServiceError):
    """
    Raised when some receipt handles of a batch delete fail.

    ``failures`` holds one entry per failed receipt handle.
    """

    def __init__(self, code: str, message: str = "", failures: Optional[List[Any]] = None, **kwargs: Any):
        super().__init__(code, message, **kwargs)
        self.failures = failures or []


def is_retryable_error(error: BaseException, retry_on_throttle: bool = False) -> bool:
    """
    Check whether an error may succeed if the same request is sent again.

    Args:
        error: The exception raised by a request
        retry_on_throttle: Also treat throttling replies as retryable

    Returns:
        True if the request can be retried
    """
    if isinstance(error, TransportError):
        return True
    if retry_on_throttle and isinstance(error, ThrottledError):
        return True
    return False
