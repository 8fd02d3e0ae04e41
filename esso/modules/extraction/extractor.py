"""Token candidate lookup across headers, query string and cookies."""

from enum import Enum
from typing import Any, Mapping, NamedTuple, Optional

from ...errors import ConfigurationError


class TokenSource(str, Enum):
    """Where a token candidate was found."""
    HEADER = "header"
    QUERY = "query"
    COOKIE = "cookie"


class ExtractedToken(NamedTuple):
    source: TokenSource
    value: str


def _header_value(headers: Optional[Mapping[str, str]], name: str) -> Optional[str]:
    if not headers:
        return None
    value = headers.get(name)
    if value is None and isinstance(headers, dict):
        # Plain dicts are case sensitive, HTTP header names are not
        lowered = name.lower()
        for key, candidate in headers.items():
            if key.lower() == lowered:
                return candidate
    return value


class FieldExtractor:
    """
    Looks up the token under one name in every enabled source.

    The first enabled source holding a non-empty value wins. An empty
    value counts as absent and the next source is tried.
    """

    def __init__(
        self,
        field_name: str,
        disable_headers: bool = False,
        disable_query: bool = False,
        disable_cookies: bool = False,
    ):
        """
        Initialize extractor.

        Args:
            field_name: Header, query parameter and cookie name
            disable_headers: Ignore the request header
            disable_query: Ignore the query parameter
            disable_cookies: Ignore the cookie

        Raises:
            ConfigurationError: If every source is disabled
        """
        if disable_headers and disable_query and disable_cookies:
            raise ConfigurationError(
                "at least one of the following flags should be false: "
                "disable_headers, disable_query, disable_cookies"
            )
        self.field_name = field_name
        self.disable_headers = disable_headers
        self.disable_query = disable_query
        self.disable_cookies = disable_cookies

    def extract(
        self,
        headers: Optional[Mapping[str, str]] = None,
        query_params: Optional[Mapping[str, str]] = None,
        cookies: Optional[Mapping[str, str]] = None,
    ) -> Optional[ExtractedToken]:
        """
        Find the token candidate.

        Returns:
            ExtractedToken, or None if no enabled source has a value
        """
        if not self.disable_headers:
            value = _header_value(headers, self.field_name)
            if value:
                return ExtractedToken(TokenSource.HEADER, value)

        if not self.disable_query and query_params:
            value = query_params.get(self.field_name)
            if value:
                return ExtractedToken(TokenSource.QUERY, value)

        if not self.disable_cookies and cookies:
            value = cookies.get(self.field_name)
            if value:
                return ExtractedToken(TokenSource.COOKIE, value)

        return None

    def extract_from_request(self, request: Any) -> Optional[ExtractedToken]:
        """Find the token candidate on a Starlette-style request."""
        return self.extract(
            headers=request.headers,
            query_params=request.query_params,
            cookies=getattr(request, "cookies", None),
        )
