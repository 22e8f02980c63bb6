"""
Request assembly helpers.

Pure functions shared by every operation: path template substitution,
query string construction and header content negotiation.
"""

import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote

from iamds_client.exceptions import MissingPathParameterError

PLACEHOLDER_PATTERN = re.compile(r"\{([^{}]+)\}")

JSON_MIME_PATTERN = re.compile(
    r"(?i)^(application/json|[^;/ \t]+/[^;/ \t]+[+]json)[ \t]*(;.*)?$"
)


def is_json_mime(mime: str) -> bool:
    """Check whether a mime type is JSON (``application/json`` or ``*/*+json``)."""
    return bool(JSON_MIME_PATTERN.match(mime))


def parameter_to_string(value: Any) -> str:
    """
    Render a parameter value the way the API expects it on the wire.

    Booleans become ``true``/``false``, datetimes ISO 8601, enums their
    value, everything else ``str()``.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return parameter_to_string(value.value)
    return str(value)


def resolve_path(template: str, path_params: Mapping[str, Any]) -> str:
    """
    Substitute ``{name}`` placeholders with URL-escaped values.

    Every character outside the unreserved set is percent-encoded,
    including ``/``, so an identifier can never add path segments.

    Raises:
        MissingPathParameterError: If a placeholder has no value
    """

    def _substitute(match: "re.Match[str]") -> str:
        token = match.group(1)
        if token not in path_params or path_params[token] is None:
            raise MissingPathParameterError(token, template)
        return quote(parameter_to_string(path_params[token]), safe="")

    return PLACEHOLDER_PATTERN.sub(_substitute, template)


def query_pairs(params: Iterable[Tuple[str, Any]]) -> List[Tuple[str, str]]:
    """
    Flatten (name, value) pairs into wire pairs.

    None contributes nothing, a list or tuple contributes one pair per
    element, anything else one pair.
    """
    pairs: List[Tuple[str, str]] = []
    for name, value in params:
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((name, parameter_to_string(item)) for item in value if item is not None)
        else:
            pairs.append((name, parameter_to_string(value)))
    return pairs


def build_query(params: Iterable[Tuple[str, Any]]) -> str:
    """
    Build a query string fragment (without the leading ``?``).

    Pair order follows input order. ``$`` stays literal in names so
    OData-style keys read as ``$top=10``.
    """
    return "&".join(
        f"{quote(name, safe='$')}={quote(value, safe='')}"
        for name, value in query_pairs(params)
    )


def select_header_content_type(content_types: Sequence[str]) -> Optional[str]:
    """Pick the request ``Content-Type``: the first JSON type, else the first one."""
    if not content_types:
        return None
    for content_type in content_types:
        if is_json_mime(content_type):
            return content_type
    return content_types[0]


def select_header_accept(accepts: Sequence[str]) -> Optional[str]:
    """Pick the ``Accept`` value: ``application/json`` when offered, else all joined."""
    if not accepts:
        return None
    for accept in accepts:
        if accept.lower() == "application/json":
            return accept
    return ",".join(accepts)
