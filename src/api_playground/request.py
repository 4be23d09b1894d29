"""Request model: turns parameter metadata plus current values into a request.

Both the curl preview and the proxied request are built from here so the
preview always matches what is actually sent.
"""

import json
from typing import Literal
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, JsonValue

from api_playground.errors import ValidationError
from api_playground.parser.base import BODY_METHODS, EndpointDescriptor, Parameter, ProxyTarget

HeaderContext = Literal["preview", "execute"]

BASE_HEADERS: dict[str, dict[str, str]] = {
    "preview": {"Accept": "application/json"},
    "execute": {"Content-Type": "application/json"},
}

# Characters encodeURIComponent leaves alone.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def has_value(value: JsonValue) -> bool:
    """True when a parameter value is set and not the empty string."""
    return value is not None and value != ""


def render_value(value: JsonValue) -> str:
    """Render a parameter value as the text that goes on the wire."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return compact_json(value)


def encode_component(text: str) -> str:
    return quote(text, safe=_URI_COMPONENT_SAFE)


def compact_json(value: JsonValue) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


class RequestModel(BaseModel):
    """Immutable snapshot of everything needed to build one request."""

    model_config = ConfigDict(frozen=True)

    base_url: str = ""
    endpoint: str = ""
    method: str | None = None
    parameters: tuple[Parameter, ...] = ()
    parameter_values: dict[str, JsonValue] = {}
    request_body_text: str = ""
    auth_token: str = ""

    @classmethod
    def from_descriptor(
        cls,
        descriptor: EndpointDescriptor,
        *,
        base_url: str = "",
        parameter_values: dict[str, JsonValue] | None = None,
        request_body_text: str = "",
        auth_token: str = "",
    ) -> "RequestModel":
        return cls(
            base_url=base_url,
            endpoint=descriptor.api_endpoint or "",
            method=descriptor.api_method,
            parameters=tuple(descriptor.parameters),
            parameter_values=dict(parameter_values or {}),
            request_body_text=request_body_text,
            auth_token=auth_token,
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.base_url and self.endpoint and self.method)

    @property
    def takes_body(self) -> bool:
        return self.method in BODY_METHODS

    def validate_target(self) -> None:
        if not self.is_complete:
            raise ValidationError("Base URL, endpoint, and method are required")

    def _located(self, location: str) -> list[Parameter]:
        return [p for p in self.parameters if p.location == location]

    def _value(self, param: Parameter) -> JsonValue:
        return self.parameter_values.get(param.name)

    def build_url(self) -> str:
        """Base URL + endpoint with path placeholders filled and query appended."""
        path = self.endpoint
        for param in self._located("path"):
            path = path.replace(f"{{{param.name}}}", encode_component(render_value(self._value(param))))

        url = self.base_url.removesuffix("/") + path

        pairs = [
            f"{encode_component(param.name)}={encode_component(render_value(self._value(param)))}"
            for param in self._located("query")
            if has_value(self._value(param))
        ]
        if pairs:
            url += "?" + "&".join(pairs)
        return url

    def build_body(self, strict: bool = False) -> str | None:
        """Resolve the request body for POST/PUT/PATCH.

        Edited body text wins when it is valid JSON. Invalid text raises
        ValidationError when ``strict``; otherwise the body is built from the
        body parameters instead.
        """
        if not self.takes_body:
            return None

        if self.request_body_text.strip():
            try:
                json.loads(self.request_body_text)
                return self.request_body_text
            except json.JSONDecodeError as e:
                if strict:
                    raise ValidationError("Invalid JSON in request body") from e

        body = {
            param.name: self._value(param)
            for param in self._located("body")
            if has_value(self._value(param))
        }
        return compact_json(body) if body else None

    def build_headers(self, context: HeaderContext = "execute") -> dict[str, str]:
        headers = dict(BASE_HEADERS[context])
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        for param in self._located("header"):
            value = self._value(param)
            if has_value(value):
                headers[param.name] = render_value(value)
        return headers

    def to_target(self) -> ProxyTarget:
        """The request the proxy should send. Raises ValidationError."""
        self.validate_target()
        return ProxyTarget(
            url=self.build_url(),
            method=self.method,
            headers=self.build_headers("execute"),
            body=self.build_body(strict=True),
        )
