# Exceptions raised by the admin API client
from typing import Any, Optional

import requests


class AdminAPIError(Exception):
    """Base class for every failure talking to the admin backend"""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 payload: Any = None, server_message: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload
        self.server_message = server_message


class TransportError(AdminAPIError):
    """No response was received (connection refused, DNS failure, timeout)"""


class ResponseDecodeError(AdminAPIError):
    """A 2xx response whose body does not match the endpoint's schema"""


class ClientRequestError(AdminAPIError):
    """4xx response other than 401 and 404"""


class AuthorizationError(ClientRequestError):
    """401 response: missing, invalid or expired credentials"""


class NotFoundError(ClientRequestError):
    """404 response: unknown record or endpoint"""


class ServerError(AdminAPIError):
    """5xx response"""


def extract_server_message(payload: Any) -> Optional[str]:
    """Pull a human-readable message out of an error body, if there is one."""
    if not isinstance(payload, dict):
        return None
    for key in ("message", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


def error_from_response(response: requests.Response) -> AdminAPIError:
    """Map a non-2xx response onto the exception hierarchy."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    status = response.status_code
    server_message = extract_server_message(payload)
    message = server_message or f"Request failed ({status})"

    if status == 401:
        error_class = AuthorizationError
    elif status == 404:
        error_class = NotFoundError
    elif 400 <= status < 500:
        error_class = ClientRequestError
    else:
        error_class = ServerError

    return error_class(message, status_code=status, payload=payload,
                       server_message=server_message)
