"""
Per-call request and response containers.

A ``RequestDescriptor`` is built fresh for every call and handed to the
``ApiClient``; the ``ResponseEnvelope`` it returns is immutable.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx

from iamds_client.utils import (
    build_query,
    parameter_to_string,
    resolve_path,
    select_header_accept,
    select_header_content_type,
)


@dataclass
class RequestDescriptor:
    """
    Everything needed to issue one HTTP call except the method and base URL.

    Header names are case-insensitive; setting a header twice keeps the
    last value. Query parameters are multi-valued and keep insertion order.
    """

    path_template: str
    path_params: Dict[str, str] = field(default_factory=dict)
    query_params: List[Tuple[str, str]] = field(default_factory=list)
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: Any = None
    required_scopes: str = ""

    def add_path_param(self, name: str, value: Any) -> None:
        self.path_params[name] = parameter_to_string(value)

    def add_query_param(self, name: str, value: Any) -> None:
        """Add a query parameter; None is skipped, lists add one entry per item."""
        if value is None:
            return
        if isinstance(value, (list, tuple)):
            for item in value:
                self.add_query_param(name, item)
            return
        self.query_params.append((name, parameter_to_string(value)))

    def set_header(self, name: str, value: Any) -> None:
        """Set a header; None is skipped."""
        if value is None:
            return
        self.headers[name] = parameter_to_string(value)

    def negotiate(self, content_types: List[str], accepts: List[str]) -> None:
        """Set ``Content-Type`` and ``Accept`` from candidate lists."""
        self.set_header("Content-Type", select_header_content_type(content_types))
        self.set_header("Accept", select_header_accept(accepts))

    @property
    def path(self) -> str:
        """The path with every placeholder substituted."""
        return resolve_path(self.path_template, self.path_params)

    @property
    def query_string(self) -> str:
        return build_query(self.query_params)

    @property
    def url(self) -> str:
        """Path plus query string, relative to the base URL."""
        query = self.query_string
        return f"{self.path}?{query}" if query else self.path


@dataclass(frozen=True)
class ResponseEnvelope:
    """
    Outcome of one HTTP call.

    Attributes:
        status_code: HTTP status code
        headers: Response headers, lower-cased names mapped to all values
        data: Deserialized body, or None for void operations and empty bodies
        raw_content: Undecoded response text
    """

    status_code: int
    headers: Mapping[str, List[str]] = field(default_factory=dict)
    data: Any = None
    raw_content: str = ""

    @classmethod
    def from_httpx(cls, response: httpx.Response, data: Any = None) -> "ResponseEnvelope":
        headers = {name: response.headers.get_list(name) for name in response.headers.keys()}
        return cls(
            status_code=response.status_code,
            headers=headers,
            data=data,
            raw_content=response.text,
        )

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def header(self, name: str) -> Optional[str]:
        """First value of a header, or None."""
        values = self.headers.get(name.lower())
        return values[0] if values else None

    @property
    def etag(self) -> Optional[str]:
        """The ``ETag`` to pass back as ``if_match`` on a later update."""
        return self.header("ETag")

    @property
    def correlation_id(self) -> Optional[str]:
        return self.header("X-Correlation-Id")
