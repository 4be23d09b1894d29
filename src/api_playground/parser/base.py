"""Data models shared across the playground.

The curl parser, the endpoint metadata store, the request model and the
proxy all exchange these records. JSON payloads (parameter defaults, enum
values, body schemas, response data) are typed as ``JsonValue`` so they stay
a plain null/bool/number/string/array/object tree.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator, model_validator

HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]
ParamType = Literal["string", "integer", "number", "boolean", "array", "object"]
ParamLocation = Literal["query", "path", "header", "body"]

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


class QueryParam(BaseModel):
    """One name/value pair from a query string."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str


class ParsedRequest(BaseModel):
    """Structured form of a curl command."""

    model_config = ConfigDict(frozen=True)

    method: HttpMethod = "GET"
    base_url: str = ""  # scheme://host, empty for relative input
    endpoint: str  # always starts with "/"
    headers: dict[str, str] = {}
    query_params: tuple[QueryParam, ...] = ()
    body: str | None = None


class Parameter(BaseModel):
    """A configurable parameter of an endpoint."""

    name: str
    type: ParamType = "string"
    location: ParamLocation
    required: bool = False
    description: str | None = None
    default: JsonValue = None
    enum: list[JsonValue] | None = None


class EndpointDescriptor(BaseModel):
    """Persisted metadata of one documented API operation."""

    title: str = ""
    description: str | None = None
    api_endpoint: str | None = None
    api_method: HttpMethod | None = None
    api_parameters: list[Parameter] | None = None
    api_request_body_schema: JsonValue = None
    api_response_example: JsonValue = None

    @field_validator("api_method", mode="before")
    @classmethod
    def _upper_method(cls, value):
        if isinstance(value, str):
            return value.upper()
        return value

    @field_validator("api_parameters")
    @classmethod
    def _unique_per_location(cls, params: list[Parameter] | None) -> list[Parameter] | None:
        seen: set[tuple[str, str]] = set()
        for param in params or []:
            key = (param.location, param.name)
            if key in seen:
                raise ValueError(f"duplicate {param.location} parameter '{param.name}'")
            seen.add(key)
        return params

    @property
    def parameters(self) -> list[Parameter]:
        return list(self.api_parameters or [])


class ProxyTarget(BaseModel):
    """Request handed to the proxy: what to send and where."""

    url: str = ""
    method: str = ""
    headers: dict[str, str] | None = None
    body: str | None = None


class ResponseEnvelope(BaseModel):
    """Normalized proxy response.

    ``status == 0`` marks a transport failure: ``error`` is set and ``data``
    is None. Any real HTTP status, 4xx and 5xx included, is a normal envelope.
    """

    model_config = ConfigDict(populate_by_name=True)

    status: int
    status_text: str = Field(default="", alias="statusText")
    headers: dict[str, str] = {}
    data: JsonValue = None
    error: str | None = None

    @model_validator(mode="after")
    def _transport_failure_shape(self) -> "ResponseEnvelope":
        failed = self.status == 0
        if failed != (self.error is not None):
            raise ValueError("error must be set exactly when status is 0")
        if failed and self.data is not None:
            raise ValueError("a failed envelope carries no data")
        return self

    @classmethod
    def failure(cls, message: str) -> "ResponseEnvelope":
        return cls(status=0, status_text="Error", headers={}, data=None, error=message)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def to_wire(self) -> dict:
        """Dump with the camelCase field names used on the wire."""
        wire = self.model_dump(by_alias=True)
        if self.error is None:
            wire.pop("error")
        return wire
