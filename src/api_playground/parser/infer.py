"""Infer endpoint parameter metadata from a parsed curl command.

Used to seed a documentation page from a pasted example request.
"""

import json
import re

from pydantic import JsonValue

from .base import EndpointDescriptor, Parameter, ParsedRequest

# Handled by the playground itself (token field, base headers).
SKIPPED_HEADERS = {"authorization", "accept", "content-type"}

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")
_INTEGER_RE = re.compile(r"-?\d+")
_NUMBER_RE = re.compile(r"-?\d+\.\d+")


def infer_parameters(parsed: ParsedRequest) -> list[Parameter]:
    """Build the parameter list for a parsed request."""
    params: list[Parameter] = []
    params.extend(_path_params(parsed.endpoint))
    params.extend(_query_params(parsed))
    params.extend(_header_params(parsed.headers))
    body = _decode_object(parsed.body)
    if body is not None:
        params.extend(
            Parameter(name=key, type=json_type(value), location="body", default=value)
            for key, value in body.items()
        )
    return params


def to_descriptor(parsed: ParsedRequest, title: str = "") -> tuple[EndpointDescriptor, str]:
    """Return the endpoint descriptor and the base URL of a parsed request."""
    descriptor = EndpointDescriptor(
        title=title,
        api_endpoint=parsed.endpoint,
        api_method=parsed.method,
        api_parameters=infer_parameters(parsed),
        api_request_body_schema=_decode_object(parsed.body),
    )
    return descriptor, parsed.base_url


def json_type(value: JsonValue) -> str:
    """Map a decoded JSON value onto a parameter type."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "string"


def scalar_from_text(text: str) -> JsonValue:
    """Type a query-string value: integers, decimals and booleans are recognized.

    A number is only typed when it prints back to the same text, so "01234"
    and "1.50" stay strings.
    """
    if _INTEGER_RE.fullmatch(text) and str(int(text)) == text:
        return int(text)
    if _NUMBER_RE.fullmatch(text) and str(float(text)) == text:
        return float(text)
    if text in ("true", "false"):
        return text == "true"
    return text


def _path_params(endpoint: str) -> list[Parameter]:
    names = dict.fromkeys(_PLACEHOLDER_RE.findall(endpoint))
    return [Parameter(name=name, location="path", required=True) for name in names]


def _query_params(parsed: ParsedRequest) -> list[Parameter]:
    grouped: dict[str, list[str]] = {}
    for pair in parsed.query_params:
        grouped.setdefault(pair.name, []).append(pair.value)

    params = []
    for name, values in grouped.items():
        if len(values) > 1:
            params.append(Parameter(name=name, type="array", location="query", default=values))
        else:
            value = scalar_from_text(values[0])
            params.append(Parameter(name=name, type=json_type(value), location="query", default=value))
    return params


def _header_params(headers: dict[str, str]) -> list[Parameter]:
    return [
        Parameter(name=name, location="header", default=value)
        for name, value in headers.items()
        if name.lower() not in SKIPPED_HEADERS
    ]


def _decode_object(body: str | None) -> dict | None:
    if not body:
        return None
    try:
        decoded = json.loads(body)
    except json.JSONDecodeError:
        return None
    return decoded if isinstance(decoded, dict) else None
