"""Error kind tags for failed network attempts."""

from enum import Enum

import requests


class ErrorKind(str, Enum):
    """Classification attached to every recoverable network failure."""
    CONNECT_TIMEOUT = "ConnectTimeout"
    READ_TIMEOUT = "ReadTimeout"
    TIMEOUT = "Timeout"
    SSL_ERROR = "SSLError"
    PROXY_ERROR = "ProxyError"
    CONNECTION_ERROR = "ConnectionError"
    TOO_MANY_REDIRECTS = "TooManyRedirects"
    INVALID_URL = "InvalidURL"
    PROTOCOL_ERROR = "ProtocolError"
    TRANSPORT_ERROR = "TransportError"


# Most specific first: ConnectTimeout is both a ConnectionError and a
# Timeout, SSLError and ProxyError are ConnectionErrors.
_CLASSIFICATION = (
    (requests.exceptions.ConnectTimeout, ErrorKind.CONNECT_TIMEOUT),
    (requests.exceptions.ReadTimeout, ErrorKind.READ_TIMEOUT),
    (requests.exceptions.Timeout, ErrorKind.TIMEOUT),
    (requests.exceptions.SSLError, ErrorKind.SSL_ERROR),
    (requests.exceptions.ProxyError, ErrorKind.PROXY_ERROR),
    (requests.exceptions.ConnectionError, ErrorKind.CONNECTION_ERROR),
    (requests.exceptions.TooManyRedirects, ErrorKind.TOO_MANY_REDIRECTS),
    ((requests.exceptions.MissingSchema,
      requests.exceptions.InvalidSchema,
      requests.exceptions.InvalidURL,
      requests.exceptions.URLRequired), ErrorKind.INVALID_URL),
    ((requests.exceptions.ChunkedEncodingError,
      requests.exceptions.ContentDecodingError), ErrorKind.PROTOCOL_ERROR),
)


def classify_request_error(error: Exception) -> ErrorKind:
    """Map a requests (or unwrapped urllib3) exception onto its ErrorKind."""
    for exception_types, kind in _CLASSIFICATION:
        if isinstance(error, exception_types):
            return kind
    return ErrorKind.TRANSPORT_ERROR
