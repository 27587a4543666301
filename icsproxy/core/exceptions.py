"""Exception hierarchy for request-level (boundary) failures.

Transform-level problems never raise; they are absorbed line by line in
icsproxy.calendar. Only the conditions below end a request, each with its
own HTTP status.
"""

from typing import Optional


class IcsProxyError(Exception):
    """Base exception for all icsproxy request failures.

    Attributes:
        http_status: Status code the HTTP layer answers with
    """

    http_status = 500


class MissingSourceError(IcsProxyError):
    """No source URL in the request and no default configured.

    Should result in HTTP 400 Bad Request response.
    """

    http_status = 400


class InvalidSourceError(IcsProxyError):
    """Source URL is not an http(s) URL with a hostname.

    Should result in HTTP 400 Bad Request response.
    """

    http_status = 400


class UpstreamError(IcsProxyError):
    """Upstream answered with a non-success status or could not be reached.

    Should result in HTTP 502 Bad Gateway response. No retry is attempted.
    """

    http_status = 502

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UpstreamEmptyError(UpstreamError):
    """Upstream answered successfully but with an empty body.

    Should result in HTTP 502 Bad Gateway response.
    """
