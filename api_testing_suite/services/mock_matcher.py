"""
Path matching for mock endpoints.

Endpoint paths are literal except for ``:name`` segments, which match
exactly one non-empty path segment. A parameter name runs to the next
``/``, so ``:user-id`` is one parameter.
"""

import re
from functools import lru_cache
from typing import Iterable, Optional, Protocol


PARAM_PATTERN = re.compile(r':([^/]+)')


class EndpointLike(Protocol):
    method: str
    path: str


@lru_cache(maxsize=512)
def compile_path(pattern: str) -> tuple[re.Pattern, tuple[str, ...]]:
    """
    Compile an endpoint path pattern into an anchored regex.

    Parameters become positional groups ``p0``, ``p1``... so a name may
    repeat or contain characters that are not valid group names.

    Returns:
        The regex and the declared parameter names in group order

    Example:
        >>> regex, names = compile_path("/users/:id")
        >>> regex.fullmatch("/users/42").group("p0"), names
        ('42', ('id',))
    """
    parts = []
    names = []
    position = 0
    for match in PARAM_PATTERN.finditer(pattern):
        parts.append(re.escape(pattern[position:match.start()]))
        parts.append(f"(?P<p{len(names)}>[^/]+)")
        names.append(match.group(1))
        position = match.end()
    parts.append(re.escape(pattern[position:]))
    return re.compile("^" + "".join(parts) + "$"), tuple(names)


def match_path(pattern: str, path: str) -> Optional[dict[str, str]]:
    """
    Match a request path against an endpoint pattern.

    A repeated parameter name keeps the value of its last segment.

    Returns:
        Captured parameters (possibly empty) on match, None otherwise
    """
    if pattern == path:
        return {}
    regex, names = compile_path(pattern)
    match = regex.match(path)
    if match is None:
        return None
    return {name: match.group(f"p{index}") for index, name in enumerate(names)}


def find_matching_endpoint(
    endpoints: Iterable[EndpointLike],
    method: str,
    path: str,
) -> Optional[EndpointLike]:
    """
    Return the first endpoint whose method and path match the request.

    Endpoints are tried in the order given; method comparison is
    case-insensitive.
    """
    wanted = method.upper()
    for endpoint in endpoints:
        if endpoint.method.upper() != wanted:
            continue
        if match_path(endpoint.path, path) is not None:
            return endpoint
    return None
