"""AWS error inspection helpers and sweep error types."""
from typing import Iterable, Optional

from botocore.exceptions import ClientError, EndpointConnectionError

ACCESS_DENIED_CODES = ("AccessDeniedException", "AccessDenied", "UnauthorizedOperation")
ACCESS_DENIED_MESSAGE = "is not authorized to perform"

NOT_FOUND_CODES = ("NotFoundException", "ResourceNotFoundException", "NotFound")

# Listing errors meaning the service or operation is not available in a region
SKIP_SWEEP_CODES = (
    "UnsupportedOperation",
    "UnknownOperationException",
    "UnrecognizedClientException",
    "InvalidClientTokenId",
    "OptInRequired",
)
SKIP_SWEEP_MESSAGES = {
    "InvalidAction": ("is not valid", "Unavailable Operation"),
}


class NotFoundError(Exception):
    """Raised by finders when the resource no longer exists."""

    def __init__(self, message: str, last_error: Optional[Exception] = None):
        super().__init__(message)
        self.last_error = last_error


class SweepError(Exception):
    """Combined error carrying every failure of one or more sweeps."""

    def __init__(self, failures: Iterable):
        self.failures = list(failures)
        super().__init__(combine_messages(str(f) for f in self.failures))


def combine_messages(messages: Iterable[str]) -> str:
    messages = list(messages)
    if len(messages) == 1:
        return messages[0]
    lines = [f"{len(messages)} errors occurred:"]
    lines.extend(f"\t* {m}" for m in messages)
    return "\n".join(lines)


def error_code(exc: BaseException) -> str:
    if isinstance(exc, ClientError):
        return exc.response.get('Error', {}).get('Code', '')
    return ''


def error_message(exc: BaseException) -> str:
    if isinstance(exc, ClientError):
        return exc.response.get('Error', {}).get('Message', '') or str(exc)
    return str(exc)


def error_message_contains(exc: BaseException, code: str, fragment: str) -> bool:
    return error_code(exc) == code and fragment in error_message(exc)


def is_not_found(exc: BaseException, codes: Iterable[str] = NOT_FOUND_CODES) -> bool:
    if isinstance(exc, NotFoundError):
        return True
    return error_code(exc) in tuple(codes)


def is_access_denied(exc: BaseException) -> bool:
    if error_code(exc) in ACCESS_DENIED_CODES:
        return True
    return ACCESS_DENIED_MESSAGE in error_message(exc)


def is_skip_sweep_error(exc: Optional[BaseException]) -> bool:
    """Whether a listing error means the whole region should be skipped."""
    if exc is None:
        return False
    if isinstance(exc, EndpointConnectionError):
        return True
    code = error_code(exc)
    if code in SKIP_SWEEP_CODES:
        return True
    return any(error_message_contains(exc, code, m) for m in SKIP_SWEEP_MESSAGES.get(code, ()))


def not_found_from(exc: ClientError, what: str) -> NotFoundError:
    return NotFoundError(f"{what} not found: {error_message(exc)}", last_error=exc)

