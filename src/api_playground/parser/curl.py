"""curl command parser.

Turns pasted ``curl`` text into a ParsedRequest. Parsing is text only: the
command is normalized to a single line and each part (method, URL, headers,
body) is pulled out by its own small extractor.
"""

import re
from typing import Callable
from urllib.parse import parse_qsl, unquote, urlsplit

from api_playground.errors import ParseError
from api_playground.parser.base import HTTP_METHODS, ParsedRequest, QueryParam

_CONTINUATION_RE = re.compile(r"\\\s*\n\s*")
_WHITESPACE_RE = re.compile(r"\s+")

_METHOD_RE = re.compile(r"(?<!\S)(?:-X\s*|--request[\s=]+)(\w+)", re.IGNORECASE)

# Single quotes may contain the '\'' sequence, double quotes backslash escapes.
_QUOTED = r"""(?:'((?:[^']|'\\'')*)'|"((?:[^"\\]|\\.)*)")"""
_HEADER_RE = re.compile(r"(?<!\S)(?:-H|--header)\s+" + _QUOTED)
_BODY_RE = re.compile(
    r"(?<!\S)(?:--data-raw|--data-binary|--data-urlencode|--data|--json|-d)\s+" + _QUOTED,
    re.DOTALL,
)

_QUOTED_URL_RE = re.compile(r"""["'](https?://[^"']+)["']""", re.IGNORECASE)
_BARE_URL_RE = re.compile(r"""(https?://[^\s"']+)""", re.IGNORECASE)
_ROOTED_PATH_RE = re.compile(r"""\s["']?(/[^"'\s]+)["']?""")
_HOST_MARKER_RE = re.compile(r"([a-z][a-z0-9+.-]*:)?//([^/?#]*)(.*)", re.IGNORECASE | re.DOTALL)


def parse_curl(command: str) -> ParsedRequest:
    """Parse a curl command into a ParsedRequest.

    Raises ParseError when the text is not a curl command, has no URL, or
    uses an HTTP method outside GET/POST/PUT/DELETE/PATCH/HEAD/OPTIONS.
    """
    normalized = normalize(command)
    if not normalized.startswith("curl"):
        raise ParseError('Invalid curl command: must start with "curl"')

    method = extract_method(normalized)

    url = extract_url(normalized)
    if url is None:
        raise ParseError("Could not find URL in curl command")
    base_url, endpoint, query_params = split_url(url)

    if method not in HTTP_METHODS:
        raise ParseError(f"Invalid HTTP method: {method}. Must be one of: {', '.join(HTTP_METHODS)}")

    return ParsedRequest(
        method=method,
        base_url=base_url,
        endpoint=endpoint,
        headers=extract_headers(normalized),
        query_params=tuple(query_params),
        body=extract_body(normalized),
    )


def normalize(command: str) -> str:
    """Join line continuations and collapse whitespace into single spaces."""
    text = _CONTINUATION_RE.sub(" ", command)
    return _WHITESPACE_RE.sub(" ", text).strip()


def extract_method(normalized: str) -> str:
    match = _METHOD_RE.search(normalized)
    return match.group(1).upper() if match else "GET"


def quoted_absolute_url(normalized: str) -> str | None:
    match = _QUOTED_URL_RE.search(normalized)
    return match.group(1) if match else None


def bare_absolute_url(normalized: str) -> str | None:
    match = _BARE_URL_RE.search(normalized)
    return match.group(1) if match else None


def rooted_path(normalized: str) -> str | None:
    match = _ROOTED_PATH_RE.search(normalized)
    return match.group(1) if match else None


URL_STRATEGIES: tuple[Callable[[str], str | None], ...] = (
    quoted_absolute_url,
    bare_absolute_url,
    rooted_path,
)


def extract_url(normalized: str) -> str | None:
    """Run the URL strategies in priority order, first hit wins."""
    for strategy in URL_STRATEGIES:
        url = strategy(normalized)
        if url:
            return url
    return None


def split_url(url: str) -> tuple[str, str, list[QueryParam]]:
    """Split a URL into (base_url, endpoint, query params)."""
    try:
        parts = urlsplit(url)
        parts.port
    except ValueError:
        return _split_manually(url)

    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        return _split_manually(url)

    host = parts.netloc.rpartition("@")[2].lower()
    query_params = [
        QueryParam(name=name, value=value)
        for name, value in parse_qsl(parts.query, keep_blank_values=True)
    ]
    return f"{parts.scheme.lower()}://{host}", parts.path or "/", query_params


def _split_manually(url: str) -> tuple[str, str, list[QueryParam]]:
    base_url = ""
    rest = url
    match = _HOST_MARKER_RE.match(url)
    if match:
        base_url = f"{match.group(1) or ''}//{match.group(2)}"
        rest = match.group(3)

    rest = rest.partition("#")[0]
    path, _, query = rest.partition("?")
    endpoint = path if path.startswith("/") else f"/{path}"
    return base_url, endpoint, _split_query(query)


def _split_query(query: str) -> list[QueryParam]:
    params = []
    for pair in query.split("&"):
        name, _, value = pair.partition("=")
        if name:
            params.append(QueryParam(name=unquote(name), value=unquote(value)))
    return params


def extract_headers(normalized: str) -> dict[str, str]:
    """Collect every -H header. A repeated name keeps its last value."""
    headers: dict[str, str] = {}
    for match in _HEADER_RE.finditer(normalized):
        raw = _unquote_shell(match)
        name, sep, value = raw.partition(":")
        name = name.strip()
        if sep and name:
            headers[name] = value.strip()
    return headers


def extract_body(normalized: str) -> str | None:
    """Return the first quoted -d/--data payload verbatim."""
    match = _BODY_RE.search(normalized)
    if match is None:
        return None
    return _unquote_shell(match)


def _unquote_shell(match: re.Match) -> str:
    single, double = match.group(1), match.group(2)
    if single is not None:
        return single.replace("'\\''", "'")
    return re.sub(r'\\(["\\$`])', r"\1", double)
