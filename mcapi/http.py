"""HTTP primitive functions.
"""

from urllib.error import HTTPError, URLError
from http.client import HTTPResponse
import urllib.request
import urllib.parse
import json
import ssl

from . import LIBRARY_NAME, LIBRARY_VERSION

from typing import Optional, Any, Dict, cast


__all__ = ["HttpResponse", "HttpError", "http_request"]


class HttpResponse:
    """An HTTP response containing the status, data and received headers.
    """
    
    def __init__(self, res: Optional[HTTPResponse]) -> None:

        self.status = 0 if res is None else res.status
        self.data = b"null" if res is None else res.read()
        self.headers = {}

        if res is not None:
            for header_name, header_value in res.getheaders():
                self.headers[header_name] = header_value

    def json(self) -> Any:
        """Parse the data as JSON. This may raise a JSONDecodeError.
        """
        return json.loads(self.data)
    
    def text(self) -> str:
        """Parse the data as UTF-8 text.
        """
        return self.data.decode()

    def content_type(self) -> Optional[str]:
        """Return the media type of the response, without its parameters, if any.
        """
        for header_name, header_value in self.headers.items():
            if header_name.lower() == "content-type":
                return header_value.split(";", 1)[0].strip().lower()
        return None

    def __repr__(self) -> str:
        return f"<HttpResponse {self.status}>"


class HttpError(Exception):
    """An HTTP error, raised when the status code of the response is not 2xx.

    If any network error happens and it's impossible to receive a response from the 
    server, an instance of `HttpResponse` with status equal to 0 is used (also has no 
    headers and `None` data). The original reason for this error is given in the `reason`
    attribute in any case.
    """

    def __init__(self, res: HttpResponse, method: str, url: str, reason: Optional[URLError] = None) -> None:
        self.res = res
        self.method = method
        self.url = url
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.method} {self.url} returned {self.res.status}"

    def __repr__(self) -> str:
        return f"<HttpError {self.res}, origin: {self.method} {self.url}, reason: {self.reason}>"


def http_request(method: str, url: str, *,
    data: Optional[bytes] = None,
    query: Optional[Dict[str, Any]] = None,
    form: Optional[Dict[str, str]] = None,
    headers: Optional[dict] = None,
    accept: Optional[str] = None,
    content_type: Optional[str] = None
) -> HttpResponse:
    """Make a synchronous HTTP request.

    :param query: Optional query parameters appended to the URL, `None` values are
    omitted.
    :param form: Optional form fields, url-encoded as the request's body, this takes
    precedence over `data`.
    :return: The response returned should've a status of 2xx.
    :raises HttpError: An error wrapping a response that is not of status 2xx.
    """
    
    if headers is None:
        headers = {}
    if accept is not None:
        headers["Accept"] = accept
    if content_type is not None:
        headers["Content-Type"] = content_type
    if "User-Agent" not in headers:
        headers["User-Agent"] = f"{LIBRARY_NAME}/{LIBRARY_VERSION}"

    if query is not None:
        query_string = urllib.parse.urlencode({k: v for k, v in query.items() if v is not None})
        if len(query_string):
            url = f"{url}{'&' if '?' in url else '?'}{query_string}"

    if form is not None:
        data = urllib.parse.urlencode(form).encode()
        headers.setdefault("Content-Type", "application/x-www-form-urlencoded")

    try:
        import certifi
        ctx = ssl.create_default_context(cafile=certifi.where())
    except ImportError:
        ctx = None

    try:
        req = urllib.request.Request(url, data, headers, method=method)
        res: HTTPResponse = urllib.request.urlopen(req, context=ctx)
        return HttpResponse(res)
    except HTTPError as error:
        raise HttpError(HttpResponse(cast(HTTPResponse, error)), method, url, error)
    except URLError as error:
        raise HttpError(HttpResponse(None), method, url, error)
