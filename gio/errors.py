from typing import Iterable, Optional


class GIOError(Exception):
    """
    Generic gio error.

    Args:
        message (str): The error message.
    """
    def __init__(self, message: str = "An error occurred while running the gio client.\n"
                                      "Please check your configuration and try again."):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(GIOError):
    """
    Error raised when a configuration value is invalid.

    Args:
        option (str): The offending option name.
        reason (str): Why the value was rejected.
        message (str): The error message template.
    """
    def __init__(self, option: str, reason: str,
                 message: str = "Invalid configuration for `{option}`: {reason}"):
        self.option = option
        self.reason = reason
        super().__init__(message.format(option=option, reason=reason))


class CallerInputError(GIOError, ValueError):
    """
    Base error for event data rejected by ``EventPoster.batch``.

    Raised synchronously; nothing is enqueued when it is raised.
    """


class InvalidEventDataError(CallerInputError):
    """
    Error raised when no event data was supplied.

    Args:
        message (str): The error message.
    """
    def __init__(self, message: str = "Expect `data` to not be empty."):
        super().__init__(message)


class MissingRequiredParamsError(CallerInputError):
    """
    Error raised when required params are missing from the event data.

    Args:
        keys (Iterable[str]): The missing param keys.
        message (str): The error message template.
    """
    def __init__(self, keys: Iterable[str],
                 message: str = "Params `{keys}` are required."):
        self.keys = list(keys)
        super().__init__(message.format(keys=", ".join(self.keys)))


class UnexpectedParamError(CallerInputError):
    """
    Error raised in strict mode when the event data carries a key the
    event definition does not declare.

    Args:
        key (str): The unexpected param key.
        message (str): The error message template.
    """
    def __init__(self, key: str,
                 message: str = "Unexpected params key `{key}`."):
        self.key = key
        super().__init__(message.format(key=key))


class ParamTypeError(CallerInputError, TypeError):
    """
    Error raised when a param value does not match its declared type.

    Args:
        key (str): The param key.
        reason (str): The detail of the mismatch.
    """
    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(reason)


class SchemaUnavailableError(GIOError):
    """
    Error raised when an event definition cannot be resolved.

    Never surfaced to ``batch`` callers, the event poster falls back to
    pass-through mode instead.

    Args:
        event_key (str): The event key that could not be resolved.
        reason (Optional[str]): The reason for the error.
        message (str): The error message template.
    """
    def __init__(self, event_key: str, reason: Optional[str] = None,
                 message: str = "Event {event_key} is not defined yet."):
        self.event_key = event_key
        self.message = message.format(event_key=event_key)
        if reason:
            self.message += f"\nDetails: {reason}"
        super().__init__(self.message)


class DispatchError(GIOError):
    """
    Error raised when the collection service rejects or never receives a
    request.

    Args:
        message (str): The error message.
        status_code (Optional[int]): The HTTP status code, when a response was received.
        reason (Optional[str]): The reason for the error.
    """
    def __init__(self, message: str = "Unable to deliver messages to the collection service.",
                 status_code: Optional[int] = None,
                 reason: Optional[str] = None):
        self.status_code = status_code
        self.reason = reason
        if status_code:
            message = f"[{status_code}] {message}"
        if reason:
            message += f"\nDetails: {reason}"
        super().__init__(message)


class InvalidCredentialError(DispatchError):
    """
    Error raised when the project token is rejected.

    Args:
        status_code (Optional[int]): The HTTP status code.
        reason (Optional[str]): The reason for the error.
    """
    def __init__(self, status_code: Optional[int] = None, reason: Optional[str] = None,
                 message: str = "Authentication failed: the project token is invalid or has expired."):
        super().__init__(message, status_code=status_code, reason=reason)


class TooManyRequestsError(DispatchError):
    """
    Error raised when too many requests are made to the server.

    Args:
        reason (Optional[str]): The reason for the error.
    """
    def __init__(self, reason: Optional[str] = None,
                 message: str = "Rate limit exceeded: Too many requests sent to the server."):
        super().__init__(message, status_code=429, reason=reason)


class ServerError(DispatchError):
    """
    Error raised when there is a server issue.

    Args:
        status_code (Optional[int]): The HTTP status code.
        reason (Optional[str]): The reason for the error.
    """
    def __init__(self, status_code: Optional[int] = None, reason: Optional[str] = None,
                 message: str = "Server error: the collection service failed to handle the request."):
        super().__init__(message, status_code=status_code, reason=reason)


class NetworkConnectionError(DispatchError):
    """
    Error raised when there is a network connection issue.
    """
    def __init__(self, message: str = "Network connection error: Unable to reach the server.\n"
                                      "Please check your internet connection and try again."):
        super().__init__(message)


class RequestTimeoutError(DispatchError):
    """
    Error raised when a request times out.
    """
    def __init__(self, message: str = "Request timed out: The server did not respond in time."):
        super().__init__(message)
